"""Deterministic route builders and route scoring."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from .connection import connection_points
from .geometry import (
    dedupe_points,
    distance,
    path_intersects_rects,
    path_length,
    path_self_intersects,
    perpendicular_unit,
)
from .layout import space_of
from .models import Route, Strategy
from .pathfinding import PathfindingConfig

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .connection import ConnectionPoint
    from .geometry import Point, Rect
    from .models import Direction, Node

log = logging.getLogger(__name__)


def score_path(
    points: Sequence[Point],
    obstacles: Sequence[Rect],
    arrival_points: Iterable[Point] = (),
    settings: PathfindingConfig | None = None,
) -> float:
    """Score a candidate path; lower is better.

    The score is the total segment length. Paths that cross themselves or
    touch an obstacle score infinity. Arriving within ``overlap_radius`` of
    another edge's arrival point adds ``overlap_penalty``.
    """
    if settings is None:
        settings = PathfindingConfig()

    if len(points) < 2:
        return math.inf
    if path_self_intersects(points):
        return math.inf
    if path_intersects_rects(points, obstacles):
        return math.inf

    score = path_length(points)
    end = points[-1]
    if any(distance(end, p) < settings.overlap_radius for p in arrival_points):
        score += settings.overlap_penalty
    return score


def _drop_collinear(points: list[Point]) -> list[Point]:
    """Remove interior points that continue the previous segment straight on."""
    if len(points) <= 2:
        return points

    result = [points[0]]
    for i in range(1, len(points) - 1):
        prev, curr, nxt = result[-1], points[i], points[i + 1]
        cross = (curr[0] - prev[0]) * (nxt[1] - curr[1]) - (curr[1] - prev[1]) * (nxt[0] - curr[0])
        dot = (curr[0] - prev[0]) * (nxt[0] - curr[0]) + (curr[1] - prev[1]) * (nxt[1] - curr[1])
        if abs(cross) < 1e-9 and dot >= 0:
            continue
        result.append(curr)
    result.append(points[-1])
    return result


def _clean(points: Sequence[Point]) -> list[Point]:
    return _drop_collinear(dedupe_points(points))


def build_adjacent(
    source: Node,
    target: Node,
    settings: PathfindingConfig | None = None,
) -> Route:
    """Direct two-point route between facing sides of grid neighbours."""
    start, end = connection_points(source, target, settings=settings)
    return Route(
        points=dedupe_points([start.point, end.point]),
        strategy=Strategy.ADJACENT,
        source_side=start.direction,
        target_side=end.direction,
    )


def orthogonal_candidates(
    start: ConnectionPoint,
    end: ConnectionPoint,
) -> list[list[Point]]:
    """Simple Manhattan candidates, the one following the exit axis first.

    Returns:
        Z-route along the exit axis, horizontal-first, vertical-first and
        the Z-route along the other axis (duplicates removed)
    """
    (sx, sy), (tx, ty) = start.point, end.point
    mid_x = (sx + tx) / 2
    mid_y = (sy + ty) / 2

    z_horizontal = [(sx, sy), (mid_x, sy), (mid_x, ty), (tx, ty)]
    z_vertical = [(sx, sy), (sx, mid_y), (tx, mid_y), (tx, ty)]
    horizontal_first = [(sx, sy), (tx, sy), (tx, ty)]
    vertical_first = [(sx, sy), (sx, ty), (tx, ty)]

    if start.direction.is_vertical:
        ordered = [z_vertical, vertical_first, horizontal_first, z_horizontal]
    else:
        ordered = [z_horizontal, horizontal_first, vertical_first, z_vertical]

    candidates: list[list[Point]] = []
    for points in ordered:
        cleaned = _clean(points)
        if cleaned not in candidates:
            candidates.append(cleaned)
    return candidates


def _channel_level(
    level: float,
    span: tuple[float, float],
    obstacles: Sequence[Rect],
    clearance: float,
    horizontal: bool,
    outward: int,
) -> float:
    """Push a channel line outward until it clears every obstacle on its span."""
    lo, hi = span
    for _ in range(len(obstacles) + 1):
        moved = False
        for rect in obstacles:
            if horizontal:
                overlaps = rect.left <= hi and rect.right >= lo
                inside = rect.top <= level <= rect.bottom
                new_level = rect.top - clearance if outward < 0 else rect.bottom + clearance
            else:
                overlaps = rect.top <= hi and rect.bottom >= lo
                inside = rect.left <= level <= rect.right
                new_level = rect.left - clearance if outward < 0 else rect.right + clearance
            if overlaps and inside:
                level = new_level
                moved = True
        if not moved:
            break
    return level


def channel_candidates(
    start: ConnectionPoint,
    end: ConnectionPoint,
    obstacles: Sequence[Rect],
    clearance: float,
) -> list[list[Point]]:
    """U-shaped detours passing beyond the obstacles between the endpoints.

    Channels run above, below, left and right of the obstacles that overlap
    the box spanned by the two connection points.
    """
    (sx, sy), (tx, ty) = start.point, end.point
    min_x, max_x = min(sx, tx), max(sx, tx)
    min_y, max_y = min(sy, ty), max(sy, ty)

    blocking = [
        rect for rect in obstacles
        if rect.left <= max_x and rect.right >= min_x and rect.top <= max_y and rect.bottom >= min_y
    ]
    if not blocking:
        return []

    above = min([min_y] + [r.top for r in blocking]) - clearance
    below = max([max_y] + [r.bottom for r in blocking]) + clearance
    left = min([min_x] + [r.left for r in blocking]) - clearance
    right = max([max_x] + [r.right for r in blocking]) + clearance

    x_span = (min_x, max_x)
    y_span = (min_y, max_y)
    above = _channel_level(above, x_span, obstacles, clearance, True, -1)
    below = _channel_level(below, x_span, obstacles, clearance, True, 1)
    left = _channel_level(left, y_span, obstacles, clearance, False, -1)
    right = _channel_level(right, y_span, obstacles, clearance, False, 1)

    horizontal_channels = [[(sx, sy), (sx, y), (tx, y), (tx, ty)] for y in (above, below)]
    vertical_channels = [[(sx, sy), (x, sy), (x, ty), (tx, ty)] for x in (left, right)]

    if start.direction.is_vertical:
        ordered = vertical_channels + horizontal_channels
    else:
        ordered = horizontal_channels + vertical_channels
    return [_clean(points) for points in ordered]


def endpoint_rects(
    source: Node,
    target: Node,
    start: ConnectionPoint,
    end: ConnectionPoint,
    settings: PathfindingConfig | None = None,
) -> list[Rect]:
    """Collision rectangles of the edge's own nodes, usable as obstacles.

    A rectangle is left out when either connection point lies in it, which
    happens only when the points were pulled back onto the box edges.
    """
    if settings is None:
        settings = PathfindingConfig()

    rects = []
    for node in (source, target):
        rect = space_of(node, clearance=settings.clearance).corners
        if not rect.contains(start.point) and not rect.contains(end.point):
            rects.append(rect)
    return rects


def build_orthogonal(
    source: Node,
    target: Node,
    obstacles: Sequence[Rect],
    arrival_points: Sequence[Point] = (),
    settings: PathfindingConfig | None = None,
) -> Route | None:
    """Pick the best-scoring Manhattan candidate.

    Channel detours are added for far pairs and whenever every simple
    candidate is blocked. Candidates may not pass back through the source
    or target box.

    Returns:
        Route, or None if no candidate is clear of obstacles
    """
    if settings is None:
        settings = PathfindingConfig()

    start, end = connection_points(source, target, settings=settings)
    blocked = list(obstacles) + endpoint_rects(source, target, start, end, settings)

    def best_of(candidates: list[list[Point]]) -> tuple[float, list[Point] | None]:
        best_score, best_points = math.inf, None
        for points in candidates:
            score = score_path(points, blocked, arrival_points, settings)
            if score < best_score:
                best_score, best_points = score, points
        return best_score, best_points

    candidates = orthogonal_candidates(start, end)
    score, points = best_of(candidates)

    far = (abs(target.x - source.x) > settings.far_threshold or
           abs(target.y - source.y) > settings.far_threshold)
    if far or points is None:
        detours = channel_candidates(start, end, obstacles, settings.clearance)
        detour_score, detour_points = best_of(detours)
        if detour_score < score:
            score, points = detour_score, detour_points

    if points is None:
        log.debug("No clear orthogonal candidate for %s -> %s", source.id, target.id)
        return None

    return Route(
        points=points,
        strategy=Strategy.ORTHOGONAL,
        source_side=start.direction,
        target_side=end.direction,
    )


def build_diagonal(
    source: Node,
    target: Node,
    obstacles: Sequence[Rect],
    settings: PathfindingConfig | None = None,
) -> Route | None:
    """Corner-to-corner route, detouring through one offset midpoint if needed.

    Returns:
        Route, or None if neither the straight line nor any detour is clear
    """
    if settings is None:
        settings = PathfindingConfig()

    start, end = connection_points(source, target, diagonal=True, settings=settings)
    s, e = start.point, end.point

    def route(points: list[Point]) -> Route:
        return Route(
            points=points,
            strategy=Strategy.DIAGONAL,
            source_side=start.direction,
            target_side=end.direction,
        )

    direct = dedupe_points([s, e])
    if not path_intersects_rects(direct, obstacles):
        return route(direct)

    space = space_of(source, clearance=settings.clearance)
    detour = max(space.half_width, space.half_height) + space.safety_margin
    mid = ((s[0] + e[0]) / 2, (s[1] + e[1]) / 2)
    nx_, ny_ = perpendicular_unit(s, e)

    for k in range(1, settings.detour_steps + 1):
        for side in (1, -1):
            offset = side * k * detour
            waypoint = (mid[0] + nx_ * offset, mid[1] + ny_ * offset)
            points = dedupe_points([s, waypoint, e])
            if not path_self_intersects(points) and not path_intersects_rects(points, obstacles):
                return route(points)

    return None


def _curve_points(
    start: Point,
    end: Point,
    start_direction: Direction,
    end_direction: Direction,
    offset: float,
) -> list[Point]:
    sdx, sdy = start_direction.vector
    edx, edy = end_direction.vector
    return [
        start,
        (start[0] + sdx * offset, start[1] + sdy * offset),
        (end[0] + edx * offset, end[1] + edy * offset),
        end,
    ]


def build_curved(
    source: Node,
    target: Node,
    settings: PathfindingConfig | None = None,
) -> Route:
    """Cubic Bezier route bending out along the exit and entry directions.

    Control points sit half the straight-line distance away from each
    endpoint, but never closer than ``curve_offset_factor`` safety margins.
    """
    if settings is None:
        settings = PathfindingConfig()

    start, end = connection_points(source, target, settings=settings)
    length = distance(start.point, end.point)
    safety = space_of(source, clearance=settings.clearance).safety_margin
    offset = max(length / 2, settings.curve_offset_factor * safety)

    points = _curve_points(start.point, end.point, start.direction, end.direction, offset)
    if path_self_intersects(points):
        # Control handles would fold over each other; meet in the middle
        points = _curve_points(start.point, end.point, start.direction, end.direction, length / 2)

    return Route(
        points=dedupe_points(points),
        strategy=Strategy.CURVED,
        source_side=start.direction,
        target_side=end.direction,
    )
