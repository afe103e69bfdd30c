"""SVG renderer using drawsvg."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import drawsvg as draw

from .document import GraphDocument, parse_graph
from .geometry import distance, path_length
from .models import Strategy
from .router import route_graph

if TYPE_CHECKING:
    from .geometry import Point
    from .models import Node, Route
    from .pathfinding import PathfindingConfig
    from .router import LayoutResult, RoutedEdge

# Dash pattern of animated edges ("8,8") repeats every 16 units
DASH_PERIOD = 16.0
# Dash offset units per second at speed 1.0
DASH_RATE = 20.0


class Theme:
    """Color theme for diagrams."""

    def __init__(
        self,
        background: str = "#000000",
        node_stroke: str = "#ffffff",
        node_fill: str = "none",
        text_color: str = "#ffffff",
        text_secondary: str = "#cbd5e1",
        edge_color: str = "#ffffff",
        font_family: str = "Arial",
    ):
        self.background = background
        self.node_stroke = node_stroke
        self.node_fill = node_fill
        self.text_color = text_color
        self.text_secondary = text_secondary
        self.edge_color = edge_color
        self.font_family = font_family


DEFAULT_THEME = Theme()


def _fmt(value: float) -> str:
    return f"{round(value, 3):g}"


def _pt(point: Point) -> str:
    return f"{_fmt(point[0])},{_fmt(point[1])}"


def route_path_data(route: Route) -> str:
    """Build the SVG path string for a route.

    Polylines use M/L commands. Curved routes use one cubic (C) segment
    for four points or one quadratic (Q) segment for three.
    """
    points = route.points
    if not points:
        return ""

    commands = [f"M {_pt(points[0])}"]
    if route.strategy is Strategy.CURVED and len(points) == 4:
        commands.append(f"C {_pt(points[1])} {_pt(points[2])} {_pt(points[3])}")
    elif route.strategy is Strategy.CURVED and len(points) == 3:
        commands.append(f"Q {_pt(points[1])} {_pt(points[2])}")
    else:
        commands.extend(f"L {_pt(p)}" for p in points[1:])
    return " ".join(commands)


def route_center(route: Route) -> Point:
    """Midpoint of a route, used to place edge labels.

    Polylines use the point halfway along their arc length; curves use the
    Bezier point at t=0.5.
    """
    points = route.points
    if len(points) < 2:
        return points[0] if points else (0.0, 0.0)

    if route.strategy is Strategy.CURVED and len(points) == 4:
        (x0, y0), (x1, y1), (x2, y2), (x3, y3) = points
        return (
            (x0 + 3 * x1 + 3 * x2 + x3) / 8,
            (y0 + 3 * y1 + 3 * y2 + y3) / 8,
        )
    if route.strategy is Strategy.CURVED and len(points) == 3:
        (x0, y0), (x1, y1), (x2, y2) = points
        return (x0 + 2 * x1 + x2) / 4, (y0 + 2 * y1 + y2) / 4

    half = path_length(points) / 2
    walked = 0.0
    for a, b in zip(points, points[1:]):
        segment = distance(a, b)
        if segment > 0 and walked + segment >= half:
            t = (half - walked) / segment
            return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t
        walked += segment
    return points[-1]


def dash_duration(speed: float) -> float:
    """Seconds for one dash period to scroll past at the given edge speed."""
    return DASH_PERIOD / (DASH_RATE * speed)


class DiagramRenderer:
    """Renders layout results to SVG."""

    def __init__(self, theme: Theme | None = None):
        self.theme = theme or DEFAULT_THEME

    def render(self, result: LayoutResult) -> draw.Drawing:
        """Render a routed layout to an SVG Drawing object."""
        d = draw.Drawing(result.width, result.height)
        d.append(
            draw.Rectangle(
                0, 0, result.width, result.height,
                fill=self.theme.background,
            )
        )

        for node in result.nodes:
            self._render_node(d, node)

        # Render edges on top (so arrowheads are visible)
        for routed in result.edges:
            self._render_edge(d, routed)

        return d

    def _render_edge(self, d: draw.Drawing, routed: RoutedEdge) -> None:
        """Render one edge as a dashed path with a scrolling dash animation."""
        route = routed.route
        if len(route.points) < 2:
            return

        path = draw.Path(
            d=route_path_data(route),
            stroke=self.theme.edge_color,
            stroke_width=2,
            fill="none",
            stroke_dasharray="8,8",
        )
        path.append_anim(
            draw.Animate(
                "stroke-dashoffset",
                f"{_fmt(dash_duration(routed.edge.speed))}s",
                f"0;{_fmt(-DASH_PERIOD)}",
                repeatCount="indefinite",
            )
        )
        d.append(path)

        # Angle from the last inner (or control) point to the endpoint
        (px, py), (tx, ty) = route.points[-2], route.points[-1]
        self._draw_arrowhead(d, tx, ty, math.atan2(ty - py, tx - px), 10)

        if routed.edge.label:
            mid_x, mid_y = route_center(route)
            label_width = len(routed.edge.label) * 7 + 12
            d.append(
                draw.Rectangle(
                    mid_x - label_width / 2, mid_y - 9, label_width, 18,
                    fill=self.theme.background,
                    stroke=self.theme.edge_color,
                    stroke_width=1,
                    rx=4, ry=4,
                )
            )
            d.append(
                draw.Text(
                    routed.edge.label,
                    11,
                    mid_x, mid_y,
                    fill=self.theme.text_secondary,
                    font_family=self.theme.font_family,
                    text_anchor="middle",
                    dominant_baseline="middle",
                )
            )

    def _draw_arrowhead(
        self,
        d: draw.Drawing,
        x: float,
        y: float,
        angle: float,
        size: float,
    ) -> None:
        """Draw a filled triangle pointing along angle with its tip at (x, y)."""
        left = angle - math.pi / 6
        right = angle + math.pi / 6
        d.append(
            draw.Lines(
                x, y,
                x - size * math.cos(left), y - size * math.sin(left),
                x - size * math.cos(right), y - size * math.sin(right),
                close=True,
                fill=self.theme.edge_color,
                stroke="none",
            )
        )

    def _render_node(self, d: draw.Drawing, node: Node) -> None:
        """Render a node box, its (invisible) margin box and its label."""
        config = node.config
        w, h, m = config.box_width, config.box_height, config.box_margin

        d.append(
            draw.Rectangle(
                node.x - w / 2 - m, node.y - h / 2 - m, w + 2 * m, h + 2 * m,
                fill="none",
                stroke="rgba(255, 255, 255, 0)",
                stroke_width=1,
            )
        )
        d.append(
            draw.Rectangle(
                node.x - w / 2, node.y - h / 2, w, h,
                fill=self.theme.node_fill,
                stroke=self.theme.node_stroke,
                stroke_width=2,
                rx=8, ry=8,
            )
        )
        if node.label:
            d.append(
                draw.Text(
                    node.label,
                    config.font_size,
                    node.x, node.y + config.text_margin_top,
                    fill=self.theme.text_color,
                    font_family=self.theme.font_family,
                    text_anchor="middle",
                )
            )


def render_to_svg(
    document: GraphDocument | Mapping[str, Any] | str,
    filename: str | None = None,
    settings: PathfindingConfig | None = None,
    theme: Theme | None = None,
) -> str:
    """Lay out, route and render a graph document to SVG.

    Args:
        document: GraphDocument, decoded JSON mapping or JSON text
        filename: Optional filename to save to (without extension)
        settings: Routing configuration
        theme: Color theme

    Returns:
        SVG content as string
    """
    if not isinstance(document, GraphDocument):
        document = parse_graph(document)

    result = route_graph(document, settings)
    drawing = DiagramRenderer(theme).render(result)

    if filename:
        drawing.save_svg(f"{filename}.svg")

    return drawing.as_svg()
