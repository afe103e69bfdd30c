"""Per-layout-pass memo of computed routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .geometry import Point
    from .models import Route

RouteKey = tuple[str, str]


class RouteCache:
    """Routes keyed by ordered (source id, target id) pair.

    One cache belongs to one layout pass. Besides skipping recomputation it
    tells later edges where earlier edges arrive, so they can avoid ending
    on the same spot. Not thread-safe: a pass owns its cache exclusively.
    """

    def __init__(self) -> None:
        self._routes: dict[RouteKey, Route] = {}

    def get(self, source_id: str, target_id: str) -> Route | None:
        return self._routes.get((source_id, target_id))

    def put(self, source_id: str, target_id: str, route: Route) -> None:
        self._routes[(source_id, target_id)] = route

    def clear(self) -> None:
        self._routes.clear()

    def arrival_points(self, exclude: RouteKey | None = None) -> list[Point]:
        """Last point of every cached route, optionally skipping one pair."""
        return [
            route.end
            for key, route in self._routes.items()
            if key != exclude
        ]

    def __contains__(self, key: object) -> bool:
        return key in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[RouteKey]:
        return iter(self._routes)
