"""
Serialization of code graphs.

- DOT: Graphviz text for visualization; labels and colors are pluggable
- JSON: lossless persistence document, validated on the way back in
- NetworkX: export for ad-hoc analysis
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

import networkx as nx
import structlog
from pydantic import ValidationError

from depgraph.config import GraphConfig, get_default_config
from depgraph.errors import DuplicateEdgeError, DuplicateNodeError, GraphDeserializationError
from depgraph.graph.model import EdgeType, GraphEdge, GraphNode, Location, NodeType
from depgraph.graph.schemas import GraphDocument

if TYPE_CHECKING:
    from depgraph.graph.store import CodeGraph

logger = structlog.get_logger(__name__)

NODE_COLORS: dict[NodeType, str] = {
    NodeType.FUNCTION: "blue",
    NodeType.VARIABLE: "green",
    NodeType.CLASS: "red",
    NodeType.METHOD: "purple",
    NodeType.PROPERTY: "orange",
    NodeType.IMPORT: "brown",
    NodeType.EXPORT: "pink",
}

EDGE_COLORS: dict[EdgeType, str] = {
    EdgeType.CALLS: "blue",
    EdgeType.DEFINES: "green",
    EdgeType.USES: "red",
    EdgeType.CONTAINS: "purple",
    EdgeType.IMPORTS: "brown",
    EdgeType.EXPORTS: "pink",
}

DEFAULT_COLOR = "black"

_DOT_ID = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def default_node_label(node: GraphNode) -> str:
    return node.label


def default_node_color(node: GraphNode) -> str:
    return NODE_COLORS.get(node.node_type, DEFAULT_COLOR)


def default_edge_label(edge: GraphEdge) -> str:
    return edge.edge_type.value


def default_edge_color(edge: GraphEdge) -> str:
    return EDGE_COLORS.get(edge.edge_type, DEFAULT_COLOR)


@dataclass
class DotOptions:
    """
    Rendering hooks for DOT export.

    Unset graph_name/rankdir/indent fall back to the graph's
    serialization config.
    """

    node_label: Callable[[GraphNode], str] = field(default=default_node_label)
    node_color: Callable[[GraphNode], str] = field(default=default_node_color)
    edge_label: Callable[[GraphEdge], str] = field(default=default_edge_label)
    edge_color: Callable[[GraphEdge], str] = field(default=default_edge_color)
    graph_name: str | None = None
    rankdir: str | None = None
    indent: int | None = None


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def to_dot(graph: "CodeGraph", options: DotOptions | None = None) -> str:
    """
    Render the graph as a Graphviz DOT digraph.

    One statement per node, then one per edge, in insertion order:

        digraph CodeGraph {
          "A" [label="A", color="blue"];
          "A" -> "B" [label="calls", color="blue"];
        }
    """
    options = options or DotOptions()
    settings = graph.config.serialization

    name = options.graph_name or settings.dot_graph_name
    rankdir = options.rankdir or settings.dot_rankdir
    pad = " " * (options.indent if options.indent is not None else settings.dot_indent)

    lines = [f"digraph {name if _DOT_ID.match(name) else _quote(name)} {{"]
    if rankdir:
        lines.append(f"{pad}rankdir={rankdir};")

    for node in graph.nodes:
        lines.append(
            f"{pad}{_quote(node.node_id)} "
            f"[label={_quote(options.node_label(node))}, "
            f"color={_quote(options.node_color(node))}];"
        )

    for edge in graph.edges:
        lines.append(
            f"{pad}{_quote(edge.source_id)} -> {_quote(edge.target_id)} "
            f"[label={_quote(options.edge_label(edge))}, "
            f"color={_quote(options.edge_color(edge))}];"
        )

    lines.append("}")
    return "\n".join(lines) + "\n"


def node_to_dict(node: GraphNode) -> dict[str, Any]:
    return {
        "id": node.node_id,
        "type": node.node_type.value,
        "name": node.name,
        "file": node.file_path,
        "location": {"line": node.location.line, "column": node.location.column},
        "code": node.code,
        "metadata": dict(node.metadata),
    }


def edge_to_dict(edge: GraphEdge) -> dict[str, Any]:
    return {
        "id": edge.edge_id,
        "source": edge.source_id,
        "target": edge.target_id,
        "type": edge.edge_type.value,
        "metadata": dict(edge.metadata),
    }


def to_json(graph: "CodeGraph") -> dict[str, Any]:
    """Convert the graph to a JSON-compatible document."""
    return {
        "nodes": [node_to_dict(node) for node in graph.nodes],
        "edges": [edge_to_dict(edge) for edge in graph.edges],
        "metadata": dict(graph.metadata),
    }


def from_json(
    data: Any,
    on_dangling_edge: Literal["drop", "error"] | None = None,
    config: GraphConfig | None = None,
) -> "CodeGraph":
    """
    Rebuild a graph from a document produced by to_json.

    Nodes are created first, then edges. An edge naming a node that is
    not in the document is dropped by default; pass
    ``on_dangling_edge="error"`` to reject the document instead.

    Raises:
        GraphDeserializationError: If the document is malformed (missing
            fields, unknown kinds, duplicate ids) or, in "error" mode,
            holds a dangling edge.
    """
    from depgraph.graph.store import CodeGraph

    config = config or get_default_config()
    policy = on_dangling_edge or config.serialization.on_dangling_edge
    if policy not in ("drop", "error"):
        raise ValueError(f"Unknown dangling edge policy: {policy}")

    try:
        document = GraphDocument.model_validate(data)
    except ValidationError as e:
        raise GraphDeserializationError(
            f"Invalid graph document ({e.error_count()} errors): {e}"
        ) from e

    graph = CodeGraph(config=config, metadata=document.metadata)

    for record in document.nodes:
        try:
            graph.add_node(
                GraphNode(
                    node_id=record.id,
                    node_type=record.type,
                    name=record.name,
                    file_path=record.file,
                    location=Location(record.location.line, record.location.column),
                    code=record.code,
                    metadata=dict(record.metadata),
                )
            )
        except DuplicateNodeError as e:
            raise GraphDeserializationError(str(e)) from e

    dropped = 0
    for record in document.edges:
        missing = [nid for nid in (record.source, record.target) if graph.get_node(nid) is None]
        if missing:
            if policy == "error":
                raise GraphDeserializationError(
                    f"Edge {record.id!r} references unknown node(s): {', '.join(missing)}"
                )
            dropped += 1
            logger.debug("Dropping dangling edge", edge_id=record.id, missing=missing)
            continue

        try:
            graph.add_edge(
                GraphEdge(
                    edge_id=record.id,
                    source_id=record.source,
                    target_id=record.target,
                    edge_type=record.type,
                    metadata=dict(record.metadata),
                )
            )
        except DuplicateEdgeError as e:
            raise GraphDeserializationError(str(e)) from e

    logger.debug(
        "Graph loaded from JSON",
        nodes=len(graph),
        edges=len(graph.edges),
        dropped_edges=dropped,
    )
    return graph


def dumps(graph: "CodeGraph", indent: int | None = None) -> str:
    """Serialize the graph to a JSON string."""
    if indent is None:
        indent = graph.config.serialization.json_indent
    return json.dumps(to_json(graph), indent=indent)


def loads(
    text: str,
    on_dangling_edge: Literal["drop", "error"] | None = None,
    config: GraphConfig | None = None,
) -> "CodeGraph":
    """Parse a JSON string produced by dumps."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GraphDeserializationError(f"Invalid JSON: {e}") from e
    return from_json(data, on_dangling_edge=on_dangling_edge, config=config)


def to_networkx(graph: "CodeGraph") -> nx.MultiDiGraph:
    """Export to a NetworkX MultiDiGraph keyed by edge id."""
    G = nx.MultiDiGraph()
    G.graph.update(graph.metadata)

    for node in graph.nodes:
        G.add_node(
            node.node_id,
            node_type=node.node_type.value,
            name=node.name,
            file_path=node.file_path,
            line=node.location.line,
            column=node.location.column,
            metadata=dict(node.metadata),
        )

    for edge in graph.edges:
        G.add_edge(
            edge.source_id,
            edge.target_id,
            key=edge.edge_id,
            edge_type=edge.edge_type.value,
            metadata=dict(edge.metadata),
        )

    return G
