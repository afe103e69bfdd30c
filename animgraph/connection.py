"""Connection point selection for edge endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .geometry import distance, sign
from .layout import space_of
from .models import Direction
from .pathfinding import PathfindingConfig

if TYPE_CHECKING:
    from .geometry import Point
    from .models import Node

log = logging.getLogger(__name__)

Axis = Literal["horizontal", "vertical"]
End = Literal["source", "target"]
# Distance from the center: past the safety margin, on the box edge, or none
Reach = Literal["safety", "box", "center"]

_REACHES: tuple[Reach, ...] = ("safety", "box", "center")


@dataclass(frozen=True)
class ConnectionPoint:
    """Where a route attaches to a node, and on which side."""

    point: Point
    direction: Direction


def exit_axis(source: Node, target: Node, tolerance: float = 1.0) -> Axis:
    """Decide whether an edge leaves its source horizontally or vertically.

    Same row exits sideways, same column exits up/down; otherwise the
    dominant axis of the displacement wins (ties go vertical).
    """
    dx = target.x - source.x
    dy = target.y - source.y
    same_row = abs(dy) <= tolerance
    same_column = abs(dx) <= tolerance

    if same_row and not same_column:
        return "horizontal"
    if same_column and not same_row:
        return "vertical"
    if dx == 0 and dy == 0:
        return "horizontal"
    return "horizontal" if abs(dx) > abs(dy) else "vertical"


def _signs(source: Node, target: Node, axis: Axis, diagonal: bool) -> tuple[int, int]:
    dx = target.x - source.x
    dy = target.y - source.y
    sx, sy = sign(dx), sign(dy)

    if diagonal:
        if sx == 0 and sy == 0:
            sx = 1
        return sx, sy
    if axis == "horizontal":
        return sx or 1, 0
    return 0, sy or 1


def connection_point(
    source: Node,
    target: Node,
    end: End = "source",
    diagonal: bool = False,
    settings: PathfindingConfig | None = None,
    reach: Reach = "safety",
) -> ConnectionPoint:
    """Get the connection point for one end of an edge.

    The point is offset from the node center by exactly half the box
    dimension plus the node's safety margin along the chosen axis (both
    axes for a diagonal corner), so it always lies outside the node's
    collision rectangle.

    Args:
        source: Edge source node
        target: Edge target node
        end: Which end to compute, "source" or "target"
        diagonal: Exit/enter from the corner facing the other node
        settings: Routing configuration (clearance, tolerance)
        reach: "box" stops on the box edge, "center" at the node center

    Returns:
        ConnectionPoint with the point and the side it sits on
    """
    if settings is None:
        settings = PathfindingConfig()

    axis = exit_axis(source, target, settings.adjacency_tolerance)
    sx, sy = _signs(source, target, axis, diagonal)

    if end == "source":
        node = source
    else:
        node = target
        sx, sy = -sx, -sy

    space = space_of(node, clearance=settings.clearance)
    if reach == "center":
        reach_x = reach_y = 0.0
    elif reach == "box":
        reach_x, reach_y = space.half_width, space.half_height
    else:
        reach_x = space.half_width + space.safety_margin
        reach_y = space.half_height + space.safety_margin
    point = (node.x + sx * reach_x, node.y + sy * reach_y)
    return ConnectionPoint(point=point, direction=Direction.from_signs(sx, sy))


def connection_points(
    source: Node,
    target: Node,
    diagonal: bool = False,
    settings: PathfindingConfig | None = None,
) -> tuple[ConnectionPoint, ConnectionPoint]:
    """Get both the exit (source) and entry (target) connection points.

    The two points are always distinct. Nodes exactly two safety margins
    apart would share a point, so those are pulled back to the box edges,
    and to the node centers if the edges touch as well.
    """
    for reach in _REACHES:
        start = connection_point(source, target, "source", diagonal, settings, reach)
        end = connection_point(source, target, "target", diagonal, settings, reach)
        if distance(start.point, end.point) > 1e-9:
            if reach != "safety":
                log.debug(
                    "Connection points of %s -> %s coincide, using %s reach",
                    source.id, target.id, reach,
                )
            break
    return start, end


def is_grid_adjacent(source: Node, target: Node, tolerance: float = 1.0) -> bool:
    """Check if two nodes are exactly one grid cell apart along one axis."""
    config = source.config
    dx = abs(target.x - source.x)
    dy = abs(target.y - source.y)

    horizontal = abs(dx - config.column_pitch) <= tolerance and dy <= tolerance
    vertical = abs(dy - config.row_pitch) <= tolerance and dx <= tolerance
    return horizontal or vertical
