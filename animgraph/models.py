"""Data models for animgraph diagrams."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .layout import LayoutConfig

if TYPE_CHECKING:
    from .geometry import Point


ANIMATION_SPEEDS = {
    "slow": 0.2,
    "medium": 0.3,
    "fast": 0.4,
}
DEFAULT_SPEED = ANIMATION_SPEEDS["medium"]


class EdgeType(Enum):
    """Edge routing types that can be declared on an edge."""

    ORTHOGONAL = "orthogonal"
    DIAGONAL = "diagonal"
    CURVED = "curved"

    @classmethod
    def parse(cls, value: Any) -> EdgeType | None:
        """Convert a raw edge type; unknown values mean auto-detect."""
        if isinstance(value, EdgeType):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


class Strategy(Enum):
    """How a route was (or will be) constructed."""

    ADJACENT = "adjacent"
    ORTHOGONAL = "orthogonal"
    DIAGONAL = "diagonal"
    CURVED = "curved"


class Direction(Enum):
    """Side or corner of a node where a route attaches (y grows downward)."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    UP_LEFT = "up-left"
    UP_RIGHT = "up-right"
    DOWN_LEFT = "down-left"
    DOWN_RIGHT = "down-right"

    @property
    def vector(self) -> tuple[int, int]:
        """Unit step (dx, dy) pointing away from the node."""
        return _DIRECTION_VECTORS[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LEFT, Direction.RIGHT)

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)

    @classmethod
    def from_signs(cls, sx: int, sy: int) -> Direction:
        """Direction matching the signs of a displacement."""
        for direction, vector in _DIRECTION_VECTORS.items():
            if vector == (sx, sy):
                return direction
        return cls.RIGHT


_DIRECTION_VECTORS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.UP_LEFT: (-1, -1),
    Direction.UP_RIGHT: (1, -1),
    Direction.DOWN_LEFT: (-1, 1),
    Direction.DOWN_RIGHT: (1, 1),
}


@dataclass(frozen=True, eq=False)
class Node:
    """A positioned box in the diagram.

    Coordinates are the box center. Nodes are rebuilt on every layout pass
    and never mutated afterwards.
    """

    id: str
    x: float
    y: float
    config: LayoutConfig = field(default_factory=LayoutConfig)
    label: str = ""
    shapes: list[dict[str, Any]] = field(default_factory=list, repr=False)
    animate: Any = field(default=None, repr=False)

    @property
    def center(self) -> Point:
        return self.x, self.y

    @property
    def width(self) -> float:
        return self.config.box_width

    @property
    def height(self) -> float:
        return self.config.box_height

    @property
    def margin(self) -> float:
        return self.config.box_margin


@dataclass(frozen=True)
class Edge:
    """A directed connection between two nodes, referenced by id."""

    source: str
    target: str
    type: EdgeType | None = None
    speed: float = DEFAULT_SPEED
    label: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.source, self.target


@dataclass
class Route:
    """A computed path between two connection points.

    For curved routes the inner points are Bezier control points.
    """

    points: list[Point]
    strategy: Strategy
    source_side: Direction
    target_side: Direction
    searched: bool = False
    fallback: bool = False

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    def __len__(self) -> int:
        return len(self.points)
