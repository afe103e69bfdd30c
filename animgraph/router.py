"""Edge routing: strategy selection, routing passes and layout sessions."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .builders import build_adjacent, build_curved, build_diagonal, build_orthogonal, endpoint_rects
from .cache import RouteCache
from .connection import connection_points, is_grid_adjacent
from .geometry import path_intersects_rects
from .layout import DEFAULT_CLEARANCE, LayoutConfig, arrange_in_grid, calculate_graph_dimensions, space_of
from .models import EdgeType, Route, Strategy
from .pathfinding import PathfindingConfig, find_route, manhattan_route

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .document import GraphDocument
    from .geometry import Rect
    from .models import Edge, Node

log = logging.getLogger(__name__)

_EXPLICIT_STRATEGIES = {
    EdgeType.ORTHOGONAL: Strategy.ORTHOGONAL,
    EdgeType.DIAGONAL: Strategy.DIAGONAL,
    EdgeType.CURVED: Strategy.CURVED,
}


def collision_rects(
    nodes: Iterable[Node],
    exclude: Iterable[str] = (),
    clearance: float = DEFAULT_CLEARANCE,
) -> list[Rect]:
    """Collision rectangles of every node whose id is not excluded."""
    skip = set(exclude)
    return [
        space_of(node, clearance=clearance).corners
        for node in nodes
        if node.id not in skip
    ]


def select_strategy(
    source: Node,
    target: Node,
    all_nodes: Sequence[Node],
    edge: Edge | None = None,
    settings: PathfindingConfig | None = None,
) -> Strategy:
    """Choose how to route an edge.

    An explicit edge type always wins. Grid neighbours get a direct
    two-point route. Otherwise a clear corner-to-corner line is used,
    and anything obstructed goes orthogonal (escalating to search).
    """
    if settings is None:
        settings = PathfindingConfig()

    if edge is not None and edge.type is not None:
        return _EXPLICIT_STRATEGIES[edge.type]

    if is_grid_adjacent(source, target, settings.adjacency_tolerance):
        return Strategy.ADJACENT

    start, end = connection_points(source, target, diagonal=True, settings=settings)
    obstacles = collision_rects(all_nodes, (source.id, target.id), settings.clearance)
    if not path_intersects_rects([start.point, end.point], obstacles):
        return Strategy.DIAGONAL
    return Strategy.ORTHOGONAL


class EdgeRouter:
    """Routes edges between positioned nodes.

    Routes are memoized in the given RouteCache, and every new route is
    scored against the arrival points of routes already in the cache.
    """

    def __init__(
        self,
        nodes: Sequence[Node],
        settings: PathfindingConfig | None = None,
        cache: RouteCache | None = None,
    ):
        self.nodes = list(nodes)
        self.settings = settings or PathfindingConfig()
        self.cache = cache if cache is not None else RouteCache()
        self._by_id: dict[str, Node] = {node.id: node for node in self.nodes}

    def node(self, node_id: str) -> Node | None:
        return self._by_id.get(node_id)

    def route(self, edge: Edge) -> Route | None:
        """Route an edge by node ids.

        Returns:
            The route, or None when either endpoint id is unknown
        """
        source = self._by_id.get(edge.source)
        target = self._by_id.get(edge.target)
        if source is None or target is None:
            log.debug("Skipping edge %s -> %s: endpoint not found", edge.source, edge.target)
            return None
        return self.route_between(source, target, edge)

    def route_between(self, source: Node, target: Node, edge: Edge | None = None) -> Route:
        """Route between two nodes; always returns a drawable route."""
        cached = self.cache.get(source.id, target.id)
        if cached is not None:
            return cached

        route = self._compute(source, target, edge)
        self.cache.put(source.id, target.id, route)
        return route

    def _compute(self, source: Node, target: Node, edge: Edge | None) -> Route:
        settings = self.settings
        strategy = select_strategy(source, target, self.nodes, edge, settings)
        obstacles = collision_rects(self.nodes, (source.id, target.id), settings.clearance)
        log.debug("Routing %s -> %s as %s", source.id, target.id, strategy.value)

        if strategy is Strategy.ADJACENT:
            return build_adjacent(source, target, settings)
        if strategy is Strategy.CURVED:
            return build_curved(source, target, settings)
        if strategy is Strategy.DIAGONAL:
            route = build_diagonal(source, target, obstacles, settings)
            if route is not None:
                return route
            log.debug("Diagonal %s -> %s blocked, routing orthogonally", source.id, target.id)

        arrivals = self.cache.arrival_points(exclude=(source.id, target.id))
        route = build_orthogonal(source, target, obstacles, arrivals, settings)
        if route is not None:
            return route
        return self._search(source, target, obstacles)

    def _search(self, source: Node, target: Node, obstacles: Sequence[Rect]) -> Route:
        """Obstacle-avoiding search, falling back to an obstacle-blind route."""
        start, end = connection_points(source, target, settings=self.settings)

        points = None
        if self.settings.enabled and len(self.nodes) > 2:
            blocked = list(obstacles) + endpoint_rects(source, target, start, end, self.settings)
            points = find_route(start.point, end.point, blocked, self.settings)

        if points is not None:
            return Route(
                points=points,
                strategy=Strategy.ORTHOGONAL,
                source_side=start.direction,
                target_side=end.direction,
                searched=True,
            )

        log.debug("Falling back to a direct Manhattan route for %s -> %s", source.id, target.id)
        return Route(
            points=manhattan_route(
                start.point, end.point, horizontal_first=not start.direction.is_vertical
            ),
            strategy=Strategy.ORTHOGONAL,
            source_side=start.direction,
            target_side=end.direction,
            searched=self.settings.enabled and len(self.nodes) > 2,
            fallback=True,
        )

    def route_all(self, edges: Iterable[Edge]) -> list[RoutedEdge]:
        """Route edges in order, dropping those with unknown endpoints."""
        routed = []
        for edge in edges:
            route = self.route(edge)
            if route is not None:
                routed.append(RoutedEdge(edge=edge, route=route))
        return routed


@dataclass
class RoutedEdge:
    """An edge together with its computed route."""

    edge: Edge
    route: Route


@dataclass
class LayoutResult:
    """Output of one layout pass, ready for rendering."""

    nodes: list[Node]
    edges: list[RoutedEdge]
    config: LayoutConfig
    width: float
    height: float
    generation: int = 0

    def node_configs(self) -> dict[str, dict[str, Any]]:
        """Resolved per-node configuration (box, margin, icon viewport)."""
        resolved = {}
        for node in self.nodes:
            values = node.config.to_dict()
            values.update(node.config.icon_viewport())
            resolved[node.id] = values
        return resolved


def route_graph(
    document: GraphDocument,
    settings: PathfindingConfig | None = None,
    cache: RouteCache | None = None,
) -> LayoutResult:
    """Run a full layout pass: place nodes, then route every edge.

    The cache is cleared first since a new pass means a new node set.
    """
    if cache is None:
        cache = RouteCache()
    cache.clear()

    nodes = arrange_in_grid(document.nodes, document.layout_config)
    router = EdgeRouter(nodes, settings, cache)
    routed = router.route_all(document.edges)
    width, height = calculate_graph_dimensions(nodes, document.layout_config)

    fallbacks = sum(1 for r in routed if r.route.fallback)
    log.info(
        "Layout pass: %d nodes, %d/%d edges routed (%d fallback)",
        len(nodes), len(routed), len(document.edges), fallbacks,
    )
    return LayoutResult(
        nodes=nodes,
        edges=routed,
        config=document.layout_config,
        width=width,
        height=height,
    )


@dataclass
class LayoutSession:
    """Owns the published layout and runs "recompute layout" requests.

    Each request gets its own cache. A request that finishes after a newer
    one has started is discarded, so a stale node snapshot never replaces
    a newer layout.
    """

    settings: PathfindingConfig = field(default_factory=PathfindingConfig)
    current: LayoutResult | None = None
    _generation: int = field(default=0, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def recompute(self, document: GraphDocument) -> LayoutResult | None:
        """Run a layout pass and publish it unless superseded.

        Returns:
            The published result, or None if a newer pass started meanwhile
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

        result = route_graph(document, self.settings, RouteCache())
        result.generation = generation

        with self._lock:
            if generation != self._generation:
                log.debug("Discarding layout pass %d, superseded by %d", generation, self._generation)
                return None
            self.current = result
        return result
