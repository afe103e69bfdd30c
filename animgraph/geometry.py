"""Geometry primitives used by edge routing."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

Point = tuple[float, float]


class Rect(NamedTuple):
    """Axis-aligned rectangle in layout space (y grows downward)."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def top_left(self) -> Point:
        return self.left, self.top

    @property
    def bottom_right(self) -> Point:
        return self.right, self.bottom

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def contains(self, point: Point) -> bool:
        """Check if a point lies inside or on the border of the rectangle."""
        x, y = point
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def expanded(self, amount: float) -> Rect:
        return Rect(
            self.left - amount,
            self.top - amount,
            self.right + amount,
            self.bottom + amount,
        )


def sign(value: float) -> int:
    """Return -1, 0 or 1 depending on the sign of value."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def manhattan_distance(a: Point, b: Point) -> float:
    """Manhattan (L1) distance between two points."""
    return abs(b[0] - a[0]) + abs(b[1] - a[1])


def path_length(points: Sequence[Point]) -> float:
    """Total length of a polyline."""
    return sum(distance(points[i], points[i + 1]) for i in range(len(points) - 1))


def segment_intersects_rect(start: Point, end: Point, rect: Rect) -> bool:
    """Check if a line segment touches an axis-aligned rectangle.

    Uses Liang-Barsky clipping. Touching the border counts as an
    intersection, and a zero-length segment intersects when its point
    lies inside or on the rectangle.

    Args:
        start: First segment endpoint
        end: Second segment endpoint
        rect: Rectangle to test against

    Returns:
        True if any part of the segment lies inside or on the rectangle
    """
    x1, y1 = start
    x2, y2 = end

    # Cheap rejection on bounding boxes first
    if (max(x1, x2) < rect.left or min(x1, x2) > rect.right or
            max(y1, y2) < rect.top or min(y1, y2) > rect.bottom):
        return False

    dx = x2 - x1
    dy = y2 - y1
    t_enter, t_exit = 0.0, 1.0

    for p, q in (
        (-dx, x1 - rect.left),
        (dx, rect.right - x1),
        (-dy, y1 - rect.top),
        (dy, rect.bottom - y1),
    ):
        if p == 0:
            # Parallel to this boundary: outside means no hit at all
            if q < 0:
                return False
            continue
        t = q / p
        if p < 0:
            if t > t_exit:
                return False
            t_enter = max(t_enter, t)
        else:
            if t < t_enter:
                return False
            t_exit = min(t_exit, t)

    return t_enter <= t_exit


def _orientation(a: Point, b: Point, c: Point) -> int:
    cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
    if abs(cross) < 1e-9:
        return 0
    return 1 if cross > 0 else -1


def _on_segment(a: Point, b: Point, p: Point) -> bool:
    """Check if p (collinear with a-b) lies within the segment's bounds."""
    return (min(a[0], b[0]) - 1e-9 <= p[0] <= max(a[0], b[0]) + 1e-9 and
            min(a[1], b[1]) - 1e-9 <= p[1] <= max(a[1], b[1]) + 1e-9)


def segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    """Check if segment p1-p2 intersects segment q1-q2.

    Touching endpoints and collinear overlaps count as intersections.
    """
    o1 = _orientation(p1, p2, q1)
    o2 = _orientation(p1, p2, q2)
    o3 = _orientation(q1, q2, p1)
    o4 = _orientation(q1, q2, p2)

    if o1 != o2 and o3 != o4:
        return True

    # Collinear special cases
    if o1 == 0 and _on_segment(p1, p2, q1):
        return True
    if o2 == 0 and _on_segment(p1, p2, q2):
        return True
    if o3 == 0 and _on_segment(q1, q2, p1):
        return True
    if o4 == 0 and _on_segment(q1, q2, p2):
        return True

    return False


def path_self_intersects(points: Sequence[Point]) -> bool:
    """Check if any two non-adjacent segments of a polyline intersect."""
    segment_count = len(points) - 1
    for i in range(segment_count):
        for j in range(i + 2, segment_count):
            if segments_intersect(points[i], points[i + 1], points[j], points[j + 1]):
                return True
    return False


def path_intersects_rects(points: Sequence[Point], rects: Iterable[Rect]) -> bool:
    """Check if any segment of a polyline touches any of the rectangles."""
    rects = list(rects)
    for i in range(len(points) - 1):
        for rect in rects:
            if segment_intersects_rect(points[i], points[i + 1], rect):
                return True
    return False


def dedupe_points(points: Iterable[Point], tolerance: float = 1e-9) -> list[Point]:
    """Drop consecutive points that coincide (degenerate segments)."""
    result: list[Point] = []
    for point in points:
        if result and distance(result[-1], point) <= tolerance:
            continue
        result.append((float(point[0]), float(point[1])))
    return result


def perpendicular_unit(start: Point, end: Point) -> Point:
    """Unit vector perpendicular to start->end (rotated counter-clockwise)."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return 0.0, -1.0
    return -dy / length, dx / length
