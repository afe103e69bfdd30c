"""Tests for strategy selection, routing passes and layout sessions."""

import pytest

from animgraph import (
    Edge,
    EdgeRouter,
    EdgeType,
    LayoutSession,
    PathfindingConfig,
    RouteCache,
    Strategy,
    parse_graph,
    route_graph,
    select_strategy,
    space_of,
)
from animgraph import router as router_module
from animgraph.geometry import path_intersects_rects, path_self_intersects
from animgraph.router import collision_rects


def routes_by_key(result):
    return {routed.edge.key: routed.route for routed in result.edges}


class TestSelectStrategy:
    """Tests for select_strategy."""

    def test_explicit_type_wins(self, make_node):
        a, b = make_node("a", 200, 300), make_node("b", 400, 300)
        edge = Edge("a", "b", type=EdgeType.CURVED)
        assert select_strategy(a, b, [a, b], edge) is Strategy.CURVED

    def test_grid_neighbours_are_adjacent(self, make_node):
        a, b = make_node("a", 200, 300), make_node("b", 400, 300)
        assert select_strategy(a, b, [a, b]) is Strategy.ADJACENT

    def test_clear_corner_line_is_diagonal(self, make_node):
        a, b = make_node("a", 200, 300), make_node("b", 600, 700)
        assert select_strategy(a, b, [a, b]) is Strategy.DIAGONAL

    def test_obstructed_pair_is_orthogonal(self, make_node):
        a, b, c = make_node("a", 200, 300), make_node("b", 400, 300), make_node("c", 600, 300)
        assert select_strategy(a, c, [a, b, c]) is Strategy.ORTHOGONAL


class TestRouteGraph:
    """Tests for full layout passes."""

    def test_strategies(self, grid_document):
        routes = routes_by_key(route_graph(grid_document))
        assert routes[("a", "b")].strategy is Strategy.ADJACENT
        assert routes[("a", "c")].strategy is Strategy.ORTHOGONAL
        assert routes[("a", "f")].strategy is Strategy.DIAGONAL
        assert routes[("d", "c")].strategy is Strategy.CURVED
        assert routes[("e", "a")].strategy is Strategy.ORTHOGONAL

    def test_edge_with_missing_endpoint_is_skipped(self, grid_document):
        result = route_graph(grid_document)
        assert len(result.edges) == 5
        assert ("a", "missing") not in routes_by_key(result)

    def test_adjacent_route_has_two_points(self, grid_document):
        route = routes_by_key(route_graph(grid_document))[("a", "b")]
        assert route.points == [(295, 300), (305, 300)]

    def test_routes_avoid_other_nodes(self, grid_document):
        result = route_graph(grid_document)
        for routed in result.edges:
            if routed.route.strategy is Strategy.CURVED:
                continue
            obstacles = collision_rects(result.nodes, routed.edge.key)
            assert not path_intersects_rects(routed.route.points, obstacles), routed.edge.key

    def test_node_in_between_is_avoided(self, grid_document):
        result = route_graph(grid_document)
        route = routes_by_key(result)[("a", "c")]
        b = next(n for n in result.nodes if n.id == "b")
        assert len(route.points) > 2
        assert not path_intersects_rects(route.points, [space_of(b).corners])

    def test_endpoints_sit_at_connection_offset(self, grid_document):
        result = route_graph(grid_document)
        nodes = {n.id: n for n in result.nodes}
        for routed in result.edges:
            route = routed.route
            for node, side, point in (
                (nodes[routed.edge.source], route.source_side, route.start),
                (nodes[routed.edge.target], route.target_side, route.end),
            ):
                space = space_of(node)
                vx, vy = side.vector
                assert point == (
                    node.x + vx * (space.half_width + space.safety_margin),
                    node.y + vy * (space.half_height + space.safety_margin),
                )
                assert not space.corners.contains(point)

    def test_polyline_routes_do_not_cross_themselves(self, grid_document):
        for routed in route_graph(grid_document).edges:
            if routed.route.strategy is not Strategy.CURVED:
                assert not path_self_intersects(routed.route.points)

    def test_recompute_is_idempotent(self, grid_document):
        first = route_graph(grid_document)
        second = route_graph(grid_document)
        assert [r.route.points for r in first.edges] == [r.route.points for r in second.edges]

    def test_reused_cache_is_cleared(self, grid_document):
        cache = RouteCache()
        cache.put("x", "y", None)
        route_graph(grid_document, cache=cache)
        assert ("x", "y") not in cache
        assert len(cache) == 5

    def test_dimensions_and_node_configs(self):
        document = parse_graph({
            "nodes": [{"id": "a", "layoutConfig": {"boxWidth": 60}}, {"id": "b"}],
            "layoutConfig": {"width": 800, "height": 600},
        })
        result = route_graph(document)
        assert (result.width, result.height) == (800, 600)
        configs = result.node_configs()
        assert configs["a"]["boxWidth"] == 60
        assert configs["b"]["boxWidth"] == 120
        assert configs["a"]["svgWidth"] == 110


class TestCloseGrid:
    """Tests for grids whose pitch puts neighbouring connection points together."""

    DOCUMENT = {
        "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}],
        "edges": [
            {"source": "a", "target": "b"},
            {"source": "a", "target": "d"},
            {"source": "b", "target": "c"},
            {"source": "c", "target": "d", "type": "orthogonal"},
        ],
        "layoutConfig": {"columnWidth": 190, "rowHeight": 190, "columnsPerRow": 2},
    }

    def test_routes_between_box_edges(self):
        routes = routes_by_key(route_graph(parse_graph(self.DOCUMENT)))

        assert routes[("a", "b")].strategy is Strategy.ADJACENT
        assert routes[("a", "b")].points == [(260, 300), (330, 300)]
        assert routes[("a", "d")].strategy is Strategy.DIAGONAL
        assert routes[("a", "d")].points == [(260, 360), (330, 430)]
        assert routes[("b", "c")].strategy is Strategy.DIAGONAL
        assert routes[("b", "c")].points == [(330, 360), (260, 430)]
        assert routes[("c", "d")].strategy is Strategy.ORTHOGONAL
        assert routes[("c", "d")].points == [(260, 490), (330, 490)]
        assert not routes[("c", "d")].fallback

    def test_no_route_collapses(self):
        for routed in route_graph(parse_graph(self.DOCUMENT)).edges:
            points = routed.route.points
            assert len(points) >= 2, routed.edge.key
            assert all(p != q for p, q in zip(points, points[1:])), routed.edge.key


class TestEdgeRouter:
    """Tests for EdgeRouter."""

    def test_cached_route_is_reused(self, make_node):
        nodes = [make_node("a", 200, 300), make_node("b", 400, 300)]
        router = EdgeRouter(nodes)
        edge = Edge("a", "b")
        assert router.route(edge) is router.route(edge)

    def test_unknown_endpoint(self, make_node):
        router = EdgeRouter([make_node("a", 200, 300)])
        assert router.route(Edge("a", "nope")) is None

    def test_enclosed_target_falls_back(self, enclosed_nodes):
        router = EdgeRouter(enclosed_nodes)
        route = router.route(Edge("s", "t"))

        assert route.fallback
        assert route.searched
        assert route.points[0] == (295, 300)
        assert route.points[-1] == (505, 300)
        assert len(route.points) >= 2

    def test_search_finds_way_around_blocked_candidates(self, make_node):
        # A middle node blocks the straight line, and the pairs flanking
        # each endpoint block every channel detour
        nodes = [
            make_node("s", 0, 0), make_node("t", 800, 0), make_node("m", 400, 0),
            make_node("u1", 130, -150), make_node("d1", 130, 150),
            make_node("u2", 670, -150), make_node("d2", 670, 150),
        ]
        router = EdgeRouter(nodes)
        route = router.route(Edge("s", "t", type=EdgeType.ORTHOGONAL))

        assert route.searched
        assert not route.fallback
        assert route.points[0] == (95, 0)
        assert route.points[-1] == (705, 0)
        assert not path_intersects_rects(route.points, collision_rects(nodes, ("s", "t")))
        assert not path_intersects_rects(route.points, [space_of(nodes[0]).corners, space_of(nodes[1]).corners])

    def test_fallback_without_search(self, enclosed_nodes):
        router = EdgeRouter(enclosed_nodes, PathfindingConfig(enabled=False))
        route = router.route(Edge("s", "t"))
        assert route.fallback
        assert not route.searched


class TestLayoutSession:
    """Tests for last-writer-wins layout publication."""

    def test_publishes_result(self, grid_document):
        session = LayoutSession()
        result = session.recompute(grid_document)
        assert session.current is result
        assert result.generation == 1

    def test_stale_pass_is_discarded(self, monkeypatch, grid_document):
        session = LayoutSession()
        newer = parse_graph({"nodes": [{"id": "x"}]})
        real_route_graph = router_module.route_graph
        calls = []

        def racing_route_graph(document, settings=None, cache=None):
            calls.append(document)
            if len(calls) == 1:
                # A newer request starts and finishes while this one runs
                session.recompute(newer)
            return real_route_graph(document, settings, cache)

        monkeypatch.setattr(router_module, "route_graph", racing_route_graph)

        assert session.recompute(grid_document) is None
        assert session.current.generation == 2
        assert [n.id for n in session.current.nodes] == ["x"]

    def test_each_pass_gets_its_own_cache(self, grid_document):
        session = LayoutSession()
        first = session.recompute(grid_document)
        second = session.recompute(grid_document)
        assert second.generation == 2
        assert first.edges[0].route is not second.edges[0].route


@pytest.mark.parametrize("edge_type", ["orthogonal", "diagonal", "curved"])
def test_every_declared_type_routes(edge_type):
    document = parse_graph({
        "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
        "edges": [{"source": "a", "target": "c", "type": edge_type}],
    })
    (routed,) = route_graph(document).edges
    assert len(routed.route.points) >= 2
