"""Tests for SVG rendering."""

import pytest

from animgraph import (
    DiagramRenderer,
    Direction,
    Route,
    Strategy,
    Theme,
    render_to_svg,
    route_center,
    route_graph,
    route_path_data,
)
from animgraph.renderer import dash_duration


def make_route(points, strategy=Strategy.ORTHOGONAL):
    return Route(
        points=points,
        strategy=strategy,
        source_side=Direction.RIGHT,
        target_side=Direction.LEFT,
    )


class TestRoutePathData:
    """Tests for SVG path strings."""

    def test_polyline(self):
        route = make_route([(295, 300), (295, 205), (505, 205), (505, 300)])
        assert route_path_data(route) == "M 295,300 L 295,205 L 505,205 L 505,300"

    def test_fractional_coordinates(self):
        assert route_path_data(make_route([(0.5, 1.25), (10, 2)])) == "M 0.5,1.25 L 10,2"

    def test_cubic_curve(self):
        route = make_route([(0, 0), (10, 0), (20, 10), (30, 10)], Strategy.CURVED)
        assert route_path_data(route) == "M 0,0 C 10,0 20,10 30,10"

    def test_quadratic_curve(self):
        route = make_route([(0, 0), (15, 0), (30, 0)], Strategy.CURVED)
        assert route_path_data(route) == "M 0,0 Q 15,0 30,0"

    def test_empty(self):
        assert route_path_data(make_route([])) == ""


class TestRouteCenter:
    """Tests for label placement."""

    def test_polyline_arc_length_midpoint(self):
        route = make_route([(0, 0), (100, 0), (100, 100)])
        assert route_center(route) == (100, 0)

    def test_two_points(self):
        assert route_center(make_route([(0, 0), (10, 20)])) == (5, 10)

    def test_cubic_curve(self):
        route = make_route([(0, 0), (0, 40), (40, 40), (40, 0)], Strategy.CURVED)
        assert route_center(route) == (20, 30)


class TestDashAnimation:
    """Tests for dash animation timing."""

    def test_named_speeds(self):
        assert dash_duration(0.4) == pytest.approx(2.0)
        assert dash_duration(0.2) == pytest.approx(4.0)

    def test_faster_edges_cycle_sooner(self):
        assert dash_duration(1.0) < dash_duration(0.3)


class TestRenderToSvg:
    """Tests for render_to_svg."""

    GRAPH = {
        "nodes": [{"id": "a", "name": "Gateway"}, {"id": "b", "name": "Store"}],
        "edges": [{"source": "a", "target": "b", "speed": "fast"}],
    }

    def test_svg_contents(self):
        svg = render_to_svg(self.GRAPH)
        assert "<svg" in svg
        assert "<path" in svg
        assert "M 295,300 L 305,300" in svg
        assert "stroke-dashoffset" in svg
        assert "Gateway" in svg
        assert "Store" in svg

    def test_edge_label(self):
        graph = dict(self.GRAPH, edges=[{"source": "a", "target": "b", "label": "reads"}])
        assert "reads" in render_to_svg(graph)

    def test_accepts_json_text(self):
        svg = render_to_svg('{"nodes": [{"id": "a", "name": "Solo"}]}')
        assert "Solo" in svg
        assert "stroke-dashoffset" not in svg

    def test_saves_file(self, tmp_path):
        target = tmp_path / "diagram"
        svg = render_to_svg(self.GRAPH, filename=str(target))
        saved = (tmp_path / "diagram.svg").read_text()
        assert "Gateway" in saved
        assert svg.startswith("<?xml") or svg.startswith("<svg")

    def test_custom_theme(self, grid_document):
        theme = Theme(background="#123456", node_stroke="#abcdef")
        drawing = DiagramRenderer(theme).render(route_graph(grid_document))
        svg = drawing.as_svg()
        assert "#123456" in svg
        assert "#abcdef" in svg
