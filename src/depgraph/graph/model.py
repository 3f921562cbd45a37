"""
Node and edge types for the code dependency graph.

Nodes and edges never hold references to each other: an edge names its
endpoints by node id and a node lists the ids of its incident edges. The
owning CodeGraph resolves ids, so removal is a matter of dropping keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeType(str, Enum):
    """Types of nodes in the code graph."""

    FUNCTION = "function"
    VARIABLE = "variable"
    CLASS = "class"
    METHOD = "method"
    PROPERTY = "property"
    IMPORT = "import"
    EXPORT = "export"
    STATEMENT = "statement"
    EXPRESSION = "expression"


class EdgeType(str, Enum):
    """Types of edges in the code graph."""

    CALLS = "calls"  # Function calls function
    DEFINES = "defines"  # Scope defines symbol
    USES = "uses"  # Symbol reads another symbol
    CONTAINS = "contains"  # Class/function contains member
    IMPORTS = "imports"  # Module imports symbol
    EXPORTS = "exports"  # Module exports symbol
    EXTENDS = "extends"  # Class extends class
    IMPLEMENTS = "implements"  # Class implements interface
    DEPENDS_ON = "depends_on"  # Generic dependency


@dataclass(frozen=True)
class Location:
    """Best-effort source position of a node."""

    line: int = 0
    column: int = 0


@dataclass
class GraphNode:
    """Node in the code graph."""

    node_id: str
    node_type: NodeType
    name: str = ""
    file_path: str = ""
    location: Location = field(default_factory=Location)
    code: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    # Incident edge ids, maintained by the owning graph
    outgoing: list[str] = field(default_factory=list, repr=False, compare=False)
    incoming: list[str] = field(default_factory=list, repr=False, compare=False)

    @property
    def label(self) -> str:
        """Display label: the name, falling back to the id."""
        return self.name or self.node_id

    def detached_copy(self) -> "GraphNode":
        """Copy the node's fields without its adjacency lists."""
        return GraphNode(
            node_id=self.node_id,
            node_type=self.node_type,
            name=self.name,
            file_path=self.file_path,
            location=self.location,
            code=self.code,
            metadata=dict(self.metadata),
        )


@dataclass
class GraphEdge:
    """Edge in the code graph."""

    edge_id: str
    source_id: str
    target_id: str
    edge_type: EdgeType = EdgeType.DEPENDS_ON
    metadata: dict[str, Any] = field(default_factory=dict)

    def detached_copy(self) -> "GraphEdge":
        """Copy the edge with its own metadata mapping."""
        return GraphEdge(
            edge_id=self.edge_id,
            source_id=self.source_id,
            target_id=self.target_id,
            edge_type=self.edge_type,
            metadata=dict(self.metadata),
        )
