"""
Pydantic models for the JSON graph document.

These models validate documents before a graph is rebuilt from them:
required fields must be present and kinds must be known. Edges are
validated structurally only; whether their endpoints exist is decided
by the deserializer.
"""

from typing import Any

from pydantic import BaseModel, Field

from depgraph.graph.model import EdgeType, NodeType


class LocationRecord(BaseModel):
    """Source position of a node."""

    line: int = Field(default=0, description="1-based line, 0 when unknown")
    column: int = Field(default=0, description="Column, 0 when unknown")


class NodeRecord(BaseModel):
    """Serialized node."""

    id: str = Field(..., min_length=1, description="Unique node id")
    type: NodeType = Field(..., description="Kind of code entity")
    name: str = Field(default="", description="Human-readable label")
    file: str = Field(default="", description="Source file path")
    location: LocationRecord = Field(default_factory=LocationRecord)
    code: str = Field(default="", description="Source excerpt")
    metadata: dict[str, Any] = Field(default_factory=dict)


class EdgeRecord(BaseModel):
    """Serialized edge. Endpoints are node ids."""

    id: str = Field(..., min_length=1, description="Unique edge id")
    source: str = Field(..., min_length=1, description="Source node id")
    target: str = Field(..., min_length=1, description="Target node id")
    type: EdgeType = Field(..., description="Kind of relationship")
    metadata: dict[str, Any] = Field(default_factory=dict)


class GraphDocument(BaseModel):
    """Top-level JSON document."""

    nodes: list[NodeRecord]
    edges: list[EdgeRecord]
    metadata: dict[str, Any] = Field(default_factory=dict)
