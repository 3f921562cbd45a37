"""
Code graph module for depgraph.

Provides the dependency graph of code entities and the algorithms over it:
- CodeGraph container with referential integrity
- Slicing, path enumeration, SCC and cycle detection, transitive closure
- DOT, JSON and NetworkX serialization
"""

from depgraph.graph.analysis import (
    SliceDirection,
    SliceOptions,
    compute_slice,
    compute_transitive_closure,
    find_cycles,
    find_paths,
    find_strongly_connected_components,
)
from depgraph.graph.model import EdgeType, GraphEdge, GraphNode, Location, NodeType
from depgraph.graph.serialization import DotOptions, dumps, from_json, loads, to_dot, to_json
from depgraph.graph.store import CodeGraph

__all__ = [
    "CodeGraph",
    "GraphNode",
    "GraphEdge",
    "Location",
    "NodeType",
    "EdgeType",
    "SliceDirection",
    "SliceOptions",
    "DotOptions",
    "compute_slice",
    "find_paths",
    "find_strongly_connected_components",
    "find_cycles",
    "compute_transitive_closure",
    "to_dot",
    "to_json",
    "from_json",
    "dumps",
    "loads",
]
