"""Layout configuration, grid placement and node collision space."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from .geometry import Rect

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .document import NodeSpec
    from .models import Node

log = logging.getLogger(__name__)

# Smallest distance between grid columns/rows used for placement
MIN_GRID_PITCH = 50.0
# Fixed gap added to a node's margin so routed lines never touch a box
DEFAULT_CLEARANCE = 10.0

_MISSING = object()


def coerce_number(value: Any, default: Any, minimum: float | None = None) -> Any:
    """Coerce a raw config value to a safe number.

    Missing, boolean, non-numeric and non-finite values are replaced by
    ``default``; numbers below ``minimum`` are raised to it. Numeric
    strings are accepted since editor documents are hand-written JSON.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return default
    if minimum is not None and value < minimum:
        return minimum
    return value


def _setting(default: Any, key: str, minimum: float | None = None) -> Any:
    return field(default=default, metadata={"key": key, "minimum": minimum})


@dataclass
class LayoutConfig:
    """Global (or per-node resolved) layout configuration.

    Every numeric field has a default; box and grid dimensions are at
    least 1 and the margin is never negative.
    """

    # Grid placement
    start_x: float = _setting(200, "startX")
    start_y: float = _setting(300, "startY")
    column_width: float = _setting(200, "columnWidth", 1)
    row_height: float = _setting(200, "rowHeight", 1)
    columns_per_row: int = _setting(3, "columnsPerRow", 1)
    # Canvas size
    width: float = _setting(1500, "width", 1)
    height: float = _setting(1500, "height", 1)
    # Node box
    box_width: float = _setting(120, "boxWidth", 1)
    box_height: float = _setting(120, "boxHeight", 1)
    box_margin: float = _setting(25, "boxMargin", 0)
    # Label text
    font_size: float = _setting(24, "fontSize", 1)
    text_margin_top: float = _setting(80, "textMarginTop")
    # Icon viewport, derived from the box when unset
    svg_width: float | None = _setting(None, "svgWidth", 1)
    svg_height: float | None = _setting(None, "svgHeight", 1)
    view_box_width: float | None = _setting(None, "viewBoxWidth", 1)
    view_box_height: float | None = _setting(None, "viewBoxHeight", 1)
    view_box_min_x: float | None = _setting(None, "viewBoxMinX")
    view_box_min_y: float | None = _setting(None, "viewBoxMinY")

    def __post_init__(self) -> None:
        defaults = {f.name: f.default for f in fields(self)}
        for f in fields(self):
            value = coerce_number(
                getattr(self, f.name), defaults[f.name], f.metadata["minimum"]
            )
            setattr(self, f.name, value)
        self.columns_per_row = int(self.columns_per_row)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any] | None = None,
        base: LayoutConfig | None = None,
    ) -> LayoutConfig:
        """Build a config from a raw (camelCase or snake_case) mapping.

        Args:
            data: Raw layoutConfig mapping; anything else counts as empty
            base: Config supplying fallback values (defaults if omitted)

        Returns:
            A fully populated LayoutConfig
        """
        base = base or cls()
        if not isinstance(data, Mapping):
            data = {}

        values = {}
        for f in fields(cls):
            fallback = getattr(base, f.name)
            raw = data.get(f.metadata["key"], data.get(f.name, _MISSING))
            if raw is _MISSING:
                values[f.name] = fallback
            else:
                values[f.name] = coerce_number(raw, fallback, f.metadata["minimum"])
        return cls(**values)

    def merged(self, overrides: Mapping[str, Any] | None) -> LayoutConfig:
        """Return this config with per-node overrides applied."""
        return LayoutConfig.from_dict(overrides, base=self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to camelCase keys, skipping unset optional fields."""
        return {
            f.metadata["key"]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @property
    def column_pitch(self) -> float:
        return max(self.column_width, MIN_GRID_PITCH)

    @property
    def row_pitch(self) -> float:
        return max(self.row_height, MIN_GRID_PITCH)

    def icon_viewport(self) -> dict[str, float]:
        """Resolved icon SVG size and viewBox for a node box."""
        svg_width = self.svg_width or self.box_width + 2 * self.box_margin
        svg_height = self.svg_height or self.box_height + 2 * self.box_margin
        return {
            "svgWidth": svg_width,
            "svgHeight": svg_height,
            "viewBoxWidth": self.view_box_width or svg_width,
            "viewBoxHeight": self.view_box_height or svg_height,
            "viewBoxMinX": (
                self.view_box_min_x if self.view_box_min_x is not None else -svg_width / 2
            ),
            "viewBoxMinY": (
                self.view_box_min_y if self.view_box_min_y is not None else -svg_height / 2
            ),
        }


@dataclass(frozen=True)
class NodeSpace:
    """Collision footprint of a node."""

    width: float
    height: float
    corners: Rect
    safety_margin: float

    @property
    def half_width(self) -> float:
        return self.width / 2

    @property
    def half_height(self) -> float:
        return self.height / 2


def space_of(
    node: Node,
    config: LayoutConfig | None = None,
    clearance: float = DEFAULT_CLEARANCE,
) -> NodeSpace:
    """Derive a node's collision rectangle and safety margin.

    The rectangle is the box expanded by its margin. Connection points sit
    ``safety_margin`` (margin + clearance) beyond the box edge, so they are
    always outside the rectangle.
    """
    config = config or node.config
    half_w = config.box_width / 2 + config.box_margin
    half_h = config.box_height / 2 + config.box_margin
    return NodeSpace(
        width=config.box_width,
        height=config.box_height,
        corners=Rect(node.x - half_w, node.y - half_h, node.x + half_w, node.y + half_h),
        safety_margin=config.box_margin + max(clearance, 0.0),
    )


def arrange_in_grid(
    nodes: Sequence[NodeSpec],
    config: LayoutConfig | None = None,
) -> list[Node]:
    """Place nodes on the layout grid, row by row.

    Each node gets its own resolved config (global config with the node's
    overrides merged in). ``x``/``y`` overrides are offsets from the
    configured start position and replace the grid slot.

    Args:
        nodes: Node specs in document order
        config: Global layout configuration

    Returns:
        Positioned nodes
    """
    from .models import Node

    if config is None:
        config = LayoutConfig()

    placed = []
    for index, spec in enumerate(nodes):
        row, col = divmod(index, config.columns_per_row)
        overrides = spec.layout_overrides

        x = config.start_x + col * config.column_pitch
        y = config.start_y + row * config.row_pitch

        offset_x = coerce_number(overrides.get("x"), None)
        offset_y = coerce_number(overrides.get("y"), None)
        if offset_x is not None:
            x = config.start_x + offset_x
        if offset_y is not None:
            y = config.start_y + offset_y

        placed.append(Node(
            id=spec.id,
            x=x,
            y=y,
            config=config.merged(overrides),
            label=spec.label,
            shapes=list(spec.shapes),
            animate=spec.animate,
        ))

    log.debug(
        "Placed %d nodes: grid %sx%s, box %sx%s, margin %s, %d per row",
        len(placed), config.column_width, config.row_height,
        config.box_width, config.box_height, config.box_margin,
        config.columns_per_row,
    )
    return placed


def calculate_graph_dimensions(
    nodes: Sequence[Node],
    config: LayoutConfig,
) -> tuple[float, float]:
    """Canvas size large enough for the configured area and every node."""
    if not nodes:
        return config.width, config.height

    right = max(n.x + n.width / 2 + n.margin for n in nodes)
    bottom = max(n.y + n.height / 2 + n.margin for n in nodes)

    return (
        max(config.width, right + config.column_width),
        max(config.height, bottom + config.row_height),
    )
