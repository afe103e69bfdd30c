"""Graph documents: the editor's JSON shape turned into typed objects."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .layout import LayoutConfig, coerce_number
from .models import ANIMATION_SPEEDS, DEFAULT_SPEED, Edge, EdgeType

log = logging.getLogger(__name__)


class DocumentError(ValueError):
    """Raised when a graph document cannot be read at all."""


@dataclass
class NodeSpec:
    """A node as declared in the document, before placement."""

    id: str
    label: str = ""
    layout_overrides: dict[str, Any] = field(default_factory=dict)
    shapes: list[dict[str, Any]] = field(default_factory=list)
    animate: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int) -> NodeSpec:
        node_id = data.get("id")
        if node_id is None or isinstance(node_id, (dict, list)):
            node_id = f"node-{index}"

        overrides = data.get("layoutConfig")
        shapes = data.get("shapes")
        return cls(
            id=str(node_id),
            label=str(data.get("name", data.get("label", "")) or ""),
            layout_overrides=dict(overrides) if isinstance(overrides, Mapping) else {},
            shapes=[s for s in shapes if isinstance(s, dict)] if isinstance(shapes, list) else [],
            animate=data.get("animate"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.label}
        if self.layout_overrides:
            data["layoutConfig"] = dict(self.layout_overrides)
        if self.shapes:
            data["shapes"] = list(self.shapes)
        if self.animate is not None:
            data["animate"] = self.animate
        return data


def parse_speed(value: Any) -> float:
    """Edge animation speed: a positive number or a named speed."""
    if isinstance(value, str) and value.strip().lower() in ANIMATION_SPEEDS:
        return ANIMATION_SPEEDS[value.strip().lower()]
    speed = coerce_number(value, DEFAULT_SPEED)
    return speed if speed > 0 else DEFAULT_SPEED


def parse_edge(data: Mapping[str, Any]) -> Edge | None:
    """Build an Edge from a raw mapping; None if an endpoint is missing."""
    source = data.get("source")
    target = data.get("target")
    if source is None or target is None:
        return None
    if isinstance(source, (dict, list)) or isinstance(target, (dict, list)):
        return None

    label = data.get("label")
    return Edge(
        source=str(source),
        target=str(target),
        type=EdgeType.parse(data.get("type")),
        speed=parse_speed(data.get("speed")),
        label=str(label) if label is not None else None,
    )


@dataclass
class GraphDocument:
    """Nodes, edges and global layout configuration of one diagram."""

    nodes: list[NodeSpec] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    layout_config: LayoutConfig = field(default_factory=LayoutConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GraphDocument:
        """Read a document mapping; every field is optional.

        Malformed node or edge entries are skipped with a warning.
        """
        if not isinstance(data, Mapping):
            raise DocumentError(
                f"Graph document must be an object, got {type(data).__name__}"
            )

        raw_nodes = data.get("nodes") or []
        raw_edges = data.get("edges") or []
        if not isinstance(raw_nodes, list):
            log.warning("Ignoring 'nodes': expected a list, got %s", type(raw_nodes).__name__)
            raw_nodes = []
        if not isinstance(raw_edges, list):
            log.warning("Ignoring 'edges': expected a list, got %s", type(raw_edges).__name__)
            raw_edges = []

        nodes = []
        for index, raw in enumerate(raw_nodes):
            if not isinstance(raw, Mapping):
                log.warning("Skipping node #%d: not an object", index)
                continue
            nodes.append(NodeSpec.from_dict(raw, index))

        edges = []
        for index, raw in enumerate(raw_edges):
            edge = parse_edge(raw) if isinstance(raw, Mapping) else None
            if edge is None:
                log.warning("Skipping edge #%d: needs a source and a target", index)
                continue
            edges.append(edge)

        return cls(
            nodes=nodes,
            edges=edges,
            layout_config=LayoutConfig.from_dict(data.get("layoutConfig")),
        )

    @classmethod
    def from_json(cls, text: str) -> GraphDocument:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentError(f"Invalid graph JSON: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        edges = []
        for edge in self.edges:
            entry: dict[str, Any] = {"source": edge.source, "target": edge.target}
            if edge.type is not None:
                entry["type"] = edge.type.value
            if edge.speed != DEFAULT_SPEED:
                entry["speed"] = edge.speed
            if edge.label is not None:
                entry["label"] = edge.label
            edges.append(entry)

        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": edges,
            "layoutConfig": self.layout_config.to_dict(),
        }


def parse_graph(data: str | Mapping[str, Any]) -> GraphDocument:
    """Parse a graph document from JSON text or an already-decoded mapping."""
    if isinstance(data, str):
        return GraphDocument.from_json(data)
    return GraphDocument.from_dict(data)


def format_graph_data(data: str | Mapping[str, Any]) -> str:
    """Normalize a document's layout configs and pretty-print it.

    Global and per-node layoutConfig blocks are coerced to valid values;
    everything else is kept as written. Unreadable input is returned
    unchanged.
    """
    try:
        raw = json.loads(data) if isinstance(data, str) else data
        if not isinstance(raw, Mapping):
            raise DocumentError("Graph document must be an object")

        formatted = dict(raw)
        formatted["layoutConfig"] = LayoutConfig.from_dict(raw.get("layoutConfig")).to_dict()

        nodes = raw.get("nodes")
        if isinstance(nodes, list):
            formatted_nodes = []
            for node in nodes:
                if isinstance(node, Mapping) and isinstance(node.get("layoutConfig"), Mapping):
                    node = dict(node)
                    node["layoutConfig"] = _format_overrides(node["layoutConfig"])
                formatted_nodes.append(node)
            formatted["nodes"] = formatted_nodes

        return json.dumps(formatted, indent=2)
    except (DocumentError, json.JSONDecodeError, TypeError) as e:
        log.error("Error formatting graph data: %s", e)
        return data if isinstance(data, str) else json.dumps(data, indent=2, default=str)


def _format_overrides(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce only the keys a node actually overrides."""
    resolved = LayoutConfig.from_dict(overrides).to_dict()
    result = {}
    for key, value in overrides.items():
        if key in resolved:
            result[key] = resolved[key]
        elif key in ("x", "y"):
            result[key] = coerce_number(value, 0)
        else:
            result[key] = value
    return result
