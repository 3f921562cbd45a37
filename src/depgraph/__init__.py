"""
depgraph - source-code dependency graph engine.

Holds code entities and their relationships as a typed directed graph and
answers slicing, path, cycle and closure questions over it.
"""

__version__ = "0.1.0"
__all__ = [
    "CodeGraph",
    "GraphConfig",
    "NodeType",
    "EdgeType",
    "SliceDirection",
    "NodeNotFoundError",
]

from depgraph.config import GraphConfig
from depgraph.errors import NodeNotFoundError
from depgraph.graph import CodeGraph, EdgeType, NodeType, SliceDirection
