"""Grid-based A* pathfinding for edge routing using NetworkX."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

import networkx as nx

from .geometry import (
    Rect,
    dedupe_points,
    distance,
    manhattan_distance,
    path_intersects_rects,
    segment_intersects_rect,
)
from .layout import DEFAULT_CLEARANCE

if TYPE_CHECKING:
    from collections.abc import Hashable, Sequence

    from .geometry import Point

log = logging.getLogger(__name__)


@dataclass
class PathfindingConfig:
    """Tunable constants for edge routing and obstacle-avoiding search."""

    # Disable to skip the A* search and go straight to the fallback route
    enabled: bool = True
    # Gap between a node's margin and its connection points
    clearance: float = DEFAULT_CLEARANCE
    # How close two coordinates must be to count as the same row/column/cell
    adjacency_tolerance: float = 1.0
    # Search step: the plane is quantized to this spacing
    grid_spacing: float = 20.0
    # Beyond this displacement a pair is "far" and gets channel detours
    far_threshold: float = 500.0
    # Penalty for arriving close to another edge's arrival point
    overlap_penalty: float = 1000.0
    overlap_radius: float = 20.0
    # The search succeeds within this distance of the target point
    arrival_tolerance: float = 1.0
    # Extra cells around the search area so paths can go around obstacles
    search_padding: int = 3
    # Search budget: larger grids are not searched at all
    max_grid_cells: int = 40_000
    # Line-of-sight reduction of searched paths
    smoothing: bool = True
    # Diagonal detour attempts before giving up on a straight diagonal
    detour_steps: int = 3
    # Curved routes bend at least this many safety margins away from a node
    curve_offset_factor: float = 2.0


class GridKey(NamedTuple):
    """Integer cell coordinates in the search grid."""

    col: int
    row: int


_GOAL = "goal"

# 8-connected neighbourhood; only half is needed since the graph is undirected
_FORWARD_STEPS = ((1, 0), (0, 1), (1, 1), (1, -1))


class SearchGrid:
    """Routing grid with NetworkX graph for A* pathfinding.

    The grid is anchored at the start point so that the start is exactly
    the cell (0, 0). Cells inside an obstacle are left out and neighbours
    are linked only when the segment between them misses every obstacle.
    """

    def __init__(
        self,
        origin: Point,
        cells: tuple[int, int, int, int],
        obstacles: Sequence[Rect],
        config: PathfindingConfig,
    ):
        """Initialize the grid.

        Args:
            origin: World position of cell (0, 0)
            cells: (min_col, min_row, max_col, max_row) inclusive cell range
            obstacles: Collision rectangles to route around
            config: Pathfinding configuration
        """
        self.origin = origin
        self.cells = cells
        self.obstacles = list(obstacles)
        self.config = config
        self.graph: nx.Graph = nx.Graph()
        self.goal_key: Hashable = _GOAL

    @classmethod
    def generate(
        cls,
        start: Point,
        goal: Point,
        obstacles: Sequence[Rect],
        config: PathfindingConfig,
    ) -> SearchGrid | None:
        """Build a grid covering start, goal and obstacles.

        Returns:
            Populated SearchGrid, or None if it would exceed the search budget
        """
        step = config.grid_spacing
        xs = [start[0], goal[0]]
        ys = [start[1], goal[1]]
        for rect in obstacles:
            xs.extend((rect.left, rect.right))
            ys.extend((rect.top, rect.bottom))

        pad = config.search_padding
        cells = (
            math.floor((min(xs) - start[0]) / step) - pad,
            math.floor((min(ys) - start[1]) / step) - pad,
            math.ceil((max(xs) - start[0]) / step) + pad,
            math.ceil((max(ys) - start[1]) / step) + pad,
        )
        count = (cells[2] - cells[0] + 1) * (cells[3] - cells[1] + 1)
        if count > config.max_grid_cells:
            log.debug("Search grid of %d cells exceeds budget of %d", count, config.max_grid_cells)
            return None

        grid = cls(start, cells, obstacles, config)
        grid._build_graph()
        grid._attach_goal(goal)
        return grid

    def position(self, key: GridKey) -> Point:
        """World coordinates of a grid cell."""
        step = self.config.grid_spacing
        return self.origin[0] + key.col * step, self.origin[1] + key.row * step

    def nearest_key(self, point: Point) -> GridKey:
        step = self.config.grid_spacing
        return GridKey(
            round((point[0] - self.origin[0]) / step),
            round((point[1] - self.origin[1]) / step),
        )

    def _is_free(self, point: Point) -> bool:
        return not any(rect.contains(point) for rect in self.obstacles)

    def _is_clear(self, a: Point, b: Point) -> bool:
        return not any(segment_intersects_rect(a, b, rect) for rect in self.obstacles)

    def _build_graph(self) -> None:
        """Create free cells and link clear neighbours, weighted by length."""
        min_col, min_row, max_col, max_row = self.cells

        for row in range(min_row, max_row + 1):
            for col in range(min_col, max_col + 1):
                key = GridKey(col, row)
                pos = self.position(key)
                if self._is_free(pos):
                    self.graph.add_node(key, pos=pos)

        for key in list(self.graph.nodes):
            pos = self.graph.nodes[key]["pos"]
            for dc, dr in _FORWARD_STEPS:
                neighbor = GridKey(key.col + dc, key.row + dr)
                if neighbor not in self.graph:
                    continue
                neighbor_pos = self.graph.nodes[neighbor]["pos"]
                if self._is_clear(pos, neighbor_pos):
                    self.graph.add_edge(key, neighbor, weight=distance(pos, neighbor_pos))

    def _attach_goal(self, goal: Point) -> None:
        """Add the exact goal point, linked to the free cells around it."""
        nearest = self.nearest_key(goal)
        if (nearest in self.graph and
                distance(self.position(nearest), goal) <= self.config.arrival_tolerance):
            self.goal_key = nearest
            return

        if not self._is_free(goal):
            return
        self.graph.add_node(_GOAL, pos=goal)
        for dc in (-1, 0, 1):
            for dr in (-1, 0, 1):
                key = GridKey(nearest.col + dc, nearest.row + dr)
                if key not in self.graph:
                    continue
                pos = self.graph.nodes[key]["pos"]
                if self._is_clear(pos, goal):
                    self.graph.add_edge(key, _GOAL, weight=distance(pos, goal))

    def find_path(self) -> list[Point] | None:
        """Find a path from the origin cell to the goal using A*.

        Returns:
            List of (x, y) world coordinates, or None if no path
        """
        start = GridKey(0, 0)
        positions = self.graph.nodes

        def heuristic(a: Hashable, b: Hashable) -> float:
            return manhattan_distance(positions[a]["pos"], positions[b]["pos"])

        try:
            path = nx.astar_path(
                self.graph,
                start,
                self.goal_key,
                heuristic=heuristic,
                weight="weight",
            )
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None

        return [positions[key]["pos"] for key in path]


def smooth_path(
    points: Sequence[Point],
    obstacles: Sequence[Rect],
) -> list[Point]:
    """Reduce a path to the fewest vertices using line-of-sight checks.

    From each kept point, jump to the furthest later point that can be
    reached by a straight segment clear of every obstacle.
    """
    if len(points) <= 2:
        return list(points)

    result = [points[0]]
    i = 0

    while i < len(points) - 1:
        best_skip = i + 1
        for j in range(len(points) - 1, i + 1, -1):
            if not path_intersects_rects([points[i], points[j]], obstacles):
                best_skip = j
                break
        result.append(points[best_skip])
        i = best_skip

    return result


def find_route(
    start: Point,
    goal: Point,
    obstacles: Sequence[Rect],
    config: PathfindingConfig | None = None,
) -> list[Point] | None:
    """Search an obstacle-free polyline from start to goal.

    Args:
        start: Source connection point
        goal: Target connection point
        obstacles: Collision rectangles of every node except source/target
        config: Pathfinding configuration

    Returns:
        Smoothed list of points, or None when the search finds nothing
    """
    if config is None:
        config = PathfindingConfig()

    grid = SearchGrid.generate(start, goal, obstacles, config)
    if grid is None:
        return None

    points = grid.find_path()
    if points is None:
        log.debug("No path from %s to %s on %d cells", start, goal, grid.graph.number_of_nodes())
        return None

    if config.smoothing:
        points = smooth_path(points, obstacles)

    points = dedupe_points(points)
    if len(points) < 2:
        return None
    return points


def manhattan_route(
    start: Point,
    goal: Point,
    horizontal_first: bool = True,
) -> list[Point]:
    """Two or three point right-angle route that ignores obstacles.

    Raises:
        ValueError: If start and goal coincide, since no route can be drawn
    """
    if horizontal_first:
        corner = (goal[0], start[1])
    else:
        corner = (start[0], goal[1])
    points = dedupe_points([start, corner, goal])
    if len(points) < 2:
        raise ValueError(f"Cannot route between coincident points {start} and {goal}")
    return points
