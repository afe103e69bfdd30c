"""Pytest configuration and shared fixtures for animgraph tests."""

import pytest

from animgraph import GraphDocument, LayoutConfig, Node, PathfindingConfig, parse_graph


@pytest.fixture
def make_node():
    """Factory for nodes with the default layout config unless overridden."""

    def _make(node_id, x, y, **config):
        return Node(id=node_id, x=x, y=y, config=LayoutConfig(**config))

    return _make


@pytest.fixture
def settings():
    """Default routing configuration."""
    return PathfindingConfig()


@pytest.fixture
def grid_document() -> GraphDocument:
    """Two rows of three nodes with one edge per routing strategy.

    Positions (default grid): a(200,300) b(400,300) c(600,300)
                              d(200,500) e(400,500) f(600,500)
    """
    return parse_graph({
        "nodes": [
            {"id": "a", "name": "A"},
            {"id": "b", "name": "B"},
            {"id": "c", "name": "C"},
            {"id": "d", "name": "D"},
            {"id": "e", "name": "E"},
            {"id": "f", "name": "F"},
        ],
        "edges": [
            {"source": "a", "target": "b"},
            {"source": "a", "target": "c"},
            {"source": "a", "target": "f"},
            {"source": "d", "target": "c", "type": "curved"},
            {"source": "e", "target": "a", "type": "orthogonal"},
            {"source": "a", "target": "missing"},
        ],
    })


@pytest.fixture
def enclosed_nodes(make_node):
    """Source plus a target boxed in by eight overlapping neighbours."""
    nodes = [make_node("s", 200, 300), make_node("t", 600, 300)]
    offsets = [
        (-130, 0), (130, 0), (0, -130), (0, 130),
        (-130, -130), (130, -130), (-130, 130), (130, 130),
    ]
    for i, (dx, dy) in enumerate(offsets):
        nodes.append(make_node(f"ring{i}", 600 + dx, 300 + dy))
    return nodes
