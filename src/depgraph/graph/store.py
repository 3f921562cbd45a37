"""
In-memory code dependency graph.

CodeGraph owns every node and edge. Facts arrive from an external analyzer
through create_node/create_edge; analysis and serialization are available
as methods that delegate to depgraph.graph.analysis and
depgraph.graph.serialization.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Literal

import structlog

from depgraph.config import GraphConfig, get_default_config
from depgraph.errors import (
    DuplicateEdgeError,
    DuplicateNodeError,
    EdgeEndpointError,
)
from depgraph.graph.model import EdgeType, GraphEdge, GraphNode, Location, NodeType

if TYPE_CHECKING:
    import networkx as nx

    from depgraph.graph.analysis import SliceDirection, SliceOptions
    from depgraph.graph.serialization import DotOptions

logger = structlog.get_logger(__name__)

NodeRef = GraphNode | str
EdgeRef = GraphEdge | str


def _node_id(node: NodeRef) -> str:
    return node.node_id if isinstance(node, GraphNode) else node


def _edge_id(edge: EdgeRef) -> str:
    return edge.edge_id if isinstance(edge, GraphEdge) else edge


class CodeGraph:
    """
    Container of code entities and the relationships between them.

    Invariants:
    - every edge's source and target are nodes of this graph
    - each edge id appears once in its source's ``outgoing`` list and once
      in its target's ``incoming`` list
    - removing a node removes every edge touching it first
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.config = config or get_default_config()
        self.metadata: dict[str, Any] = dict(metadata or {})
        self._nodes: dict[str, GraphNode] = {}
        # Insertion order is the serialization order
        self._edges: dict[str, GraphEdge] = {}
        self._node_counter = 0
        self._edge_counter = 0

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node(self, node: GraphNode) -> GraphNode:
        """
        Insert a copy of an already-built node.

        The graph stores and returns a detached copy with empty adjacency,
        so a node taken from another graph is left untouched there.
        """
        if node.node_id in self._nodes:
            raise DuplicateNodeError(node.node_id)

        stored = node.detached_copy()
        self._nodes[stored.node_id] = stored
        return stored

    def create_node(
        self,
        node_type: NodeType | str,
        name: str = "",
        file_path: str = "",
        location: Location | tuple[int, int] | None = None,
        code: str = "",
        metadata: dict[str, Any] | None = None,
        node_id: str | None = None,
    ) -> GraphNode:
        """
        Build a node and insert it.

        Args:
            node_type: Kind of code entity.
            name: Human-readable label.
            file_path: Source file, empty for synthetic nodes.
            location: (line, column) or Location.
            code: Source excerpt for display.
            metadata: Free-form attributes.
            node_id: Caller-supplied id; generated when omitted.

        Returns:
            The inserted node.

        Raises:
            DuplicateNodeError: If ``node_id`` is already taken.
        """
        if isinstance(location, tuple):
            location = Location(*location)

        node = GraphNode(
            node_id=node_id if node_id is not None else self._next_node_id(),
            node_type=NodeType(node_type),
            name=name,
            file_path=file_path,
            location=location or Location(),
            code=code,
            metadata=dict(metadata or {}),
        )
        return self.add_node(node)

    def get_node(self, node_id: str) -> GraphNode | None:
        """Get a node by id, or None."""
        return self._nodes.get(node_id)

    def remove_node(self, node: NodeRef) -> bool:
        """
        Remove a node and every edge touching it.

        Returns:
            False if the node was not in the graph.
        """
        target = self._nodes.get(_node_id(node))
        if target is None:
            return False

        # Copy: remove_edge mutates both lists
        for edge_id in list(target.outgoing) + list(target.incoming):
            self.remove_edge(edge_id)

        del self._nodes[target.node_id]
        logger.debug("Node removed", node_id=target.node_id)
        return True

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(self, edge: GraphEdge) -> GraphEdge:
        """
        Insert an already-built edge.

        Raises:
            EdgeEndpointError: If either endpoint is not in the graph.
            DuplicateEdgeError: If the edge id is already taken.
        """
        if edge.edge_id in self._edges:
            raise DuplicateEdgeError(edge.edge_id)

        for endpoint in (edge.source_id, edge.target_id):
            if endpoint not in self._nodes:
                raise EdgeEndpointError(endpoint, edge.edge_id)

        self._edges[edge.edge_id] = edge
        self._nodes[edge.source_id].outgoing.append(edge.edge_id)
        self._nodes[edge.target_id].incoming.append(edge.edge_id)
        return edge

    def create_edge(
        self,
        source: NodeRef,
        target: NodeRef,
        edge_type: EdgeType | str = EdgeType.DEPENDS_ON,
        metadata: dict[str, Any] | None = None,
        edge_id: str | None = None,
    ) -> GraphEdge:
        """Build an edge between two existing nodes and insert it."""
        edge = GraphEdge(
            edge_id=edge_id if edge_id is not None else self._next_edge_id(),
            source_id=_node_id(source),
            target_id=_node_id(target),
            edge_type=EdgeType(edge_type),
            metadata=dict(metadata or {}),
        )
        return self.add_edge(edge)

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        """Get an edge by id, or None."""
        return self._edges.get(edge_id)

    def remove_edge(self, edge: EdgeRef) -> bool:
        """
        Detach an edge from both endpoints and drop it.

        Returns:
            False if the edge was not in the graph.
        """
        removed = self._edges.pop(_edge_id(edge), None)
        if removed is None:
            return False

        source = self._nodes.get(removed.source_id)
        if source is not None:
            source.outgoing.remove(removed.edge_id)
        target = self._nodes.get(removed.target_id)
        if target is not None:
            target.incoming.remove(removed.edge_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> list[GraphNode]:
        """Snapshot of all nodes in insertion order."""
        return list(self._nodes.values())

    @property
    def edges(self) -> list[GraphEdge]:
        """Snapshot of all edges in insertion order."""
        return list(self._edges.values())

    def nodes_by_kind(self, node_type: NodeType | str) -> list[GraphNode]:
        kind = NodeType(node_type)
        return [n for n in self._nodes.values() if n.node_type == kind]

    def edges_by_kind(self, edge_type: EdgeType | str) -> list[GraphEdge]:
        kind = EdgeType(edge_type)
        return [e for e in self._edges.values() if e.edge_type == kind]

    def nodes_by_file(self, file_path: str) -> list[GraphNode]:
        return [n for n in self._nodes.values() if n.file_path == file_path]

    def files(self) -> set[str]:
        """Source files referenced by any node (synthetic nodes excluded)."""
        return {n.file_path for n in self._nodes.values() if n.file_path}

    def outgoing_edges(self, node: NodeRef) -> list[GraphEdge]:
        found = self._nodes.get(_node_id(node))
        if found is None:
            return []
        return [self._edges[edge_id] for edge_id in found.outgoing]

    def incoming_edges(self, node: NodeRef) -> list[GraphEdge]:
        found = self._nodes.get(_node_id(node))
        if found is None:
            return []
        return [self._edges[edge_id] for edge_id in found.incoming]

    def get_neighbors(
        self,
        node_id: str,
        edge_types: Iterable[EdgeType] | None = None,
        direction: Literal["out", "in", "both"] = "both",
    ) -> list[str]:
        """Get neighbor node IDs for a given node, in edge order."""
        kinds = set(edge_types) if edge_types is not None else None
        neighbors: list[str] = []

        if direction in ("out", "both"):
            for edge in self.outgoing_edges(node_id):
                if kinds is None or edge.edge_type in kinds:
                    neighbors.append(edge.target_id)

        if direction in ("in", "both"):
            for edge in self.incoming_edges(node_id):
                if kinds is None or edge.edge_type in kinds:
                    neighbors.append(edge.source_id)

        return neighbors

    def stats(self) -> dict[str, Any]:
        """Counts of nodes and edges, overall and per kind."""
        node_kinds: dict[str, int] = {}
        for node in self._nodes.values():
            node_kinds[node.node_type.value] = node_kinds.get(node.node_type.value, 0) + 1

        edge_kinds: dict[str, int] = {}
        for edge in self._edges.values():
            edge_kinds[edge.edge_type.value] = edge_kinds.get(edge.edge_type.value, 0) + 1

        return {
            "nodes": len(self._nodes),
            "edges": len(self._edges),
            "files": len(self.files()),
            "node_types": node_kinds,
            "edge_types": edge_kinds,
        }

    def copy(self) -> "CodeGraph":
        """Independent copy with identical ids and edge order."""
        clone = CodeGraph(config=self.config, metadata=self.metadata)
        for node in self._nodes.values():
            clone.add_node(node)
        for edge in self._edges.values():
            clone.add_edge(edge.detached_copy())
        clone._node_counter = self._node_counter
        clone._edge_counter = self._edge_counter
        return clone

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, GraphNode):
            return item.node_id in self._nodes
        if isinstance(item, GraphEdge):
            return item.edge_id in self._edges
        return item in self._nodes

    def __repr__(self) -> str:
        return f"CodeGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def compute_slice(
        self,
        start_id: str,
        direction: "SliceDirection | str" = "forward",
        options: "SliceOptions | None" = None,
    ) -> "CodeGraph":
        """See depgraph.graph.analysis.compute_slice."""
        from depgraph.graph.analysis import compute_slice

        return compute_slice(self, start_id, direction, options)

    def find_paths(
        self,
        start_id: str,
        end_id: str,
        max_depth: int | None = None,
        edge_types: Iterable[EdgeType] | None = None,
    ) -> list[list[str]]:
        """See depgraph.graph.analysis.find_paths."""
        from depgraph.graph.analysis import find_paths

        return find_paths(self, start_id, end_id, max_depth=max_depth, edge_types=edge_types)

    def find_strongly_connected_components(self) -> list[set[str]]:
        """See depgraph.graph.analysis.find_strongly_connected_components."""
        from depgraph.graph.analysis import find_strongly_connected_components

        return find_strongly_connected_components(self)

    def find_cycles(
        self,
        max_length: int | None = None,
        unique: bool | None = None,
    ) -> list[list[str]]:
        """See depgraph.graph.analysis.find_cycles."""
        from depgraph.graph.analysis import find_cycles

        return find_cycles(self, max_length=max_length, unique=unique)

    def compute_transitive_closure(
        self,
        edge_types: Iterable[EdgeType] | None = None,
    ) -> "CodeGraph":
        """See depgraph.graph.analysis.compute_transitive_closure."""
        from depgraph.graph.analysis import compute_transitive_closure

        return compute_transitive_closure(self, edge_types=edge_types)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dot(self, options: "DotOptions | None" = None) -> str:
        from depgraph.graph.serialization import to_dot

        return to_dot(self, options)

    def to_json(self) -> dict[str, Any]:
        from depgraph.graph.serialization import to_json

        return to_json(self)

    @classmethod
    def from_json(
        cls,
        data: dict[str, Any],
        on_dangling_edge: Literal["drop", "error"] | None = None,
        config: GraphConfig | None = None,
    ) -> "CodeGraph":
        from depgraph.graph.serialization import from_json

        return from_json(data, on_dangling_edge=on_dangling_edge, config=config)

    def to_networkx(self) -> "nx.MultiDiGraph":
        """Export to a NetworkX MultiDiGraph for advanced analysis."""
        from depgraph.graph.serialization import to_networkx

        return to_networkx(self)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _next_node_id(self) -> str:
        while True:
            self._node_counter += 1
            candidate = f"node_{self._node_counter}"
            if candidate not in self._nodes:
                return candidate

    def _next_edge_id(self) -> str:
        while True:
            self._edge_counter += 1
            candidate = f"edge_{self._edge_counter}"
            if candidate not in self._edges:
                return candidate
