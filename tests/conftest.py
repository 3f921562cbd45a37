"""
Shared fixtures for the depgraph test suite.

Provides common test fixtures including:
- Small canonical graphs (chain, cycle, diamond)
- A realistic code graph as an analyzer would emit it
- Configuration overrides
"""

from __future__ import annotations

import pytest

from depgraph.config import AnalysisConfig, GraphConfig, SerializationConfig
from depgraph.graph import CodeGraph, EdgeType, NodeType


@pytest.fixture
def test_config() -> GraphConfig:
    """Create a test configuration."""
    return GraphConfig(log_level="DEBUG")


@pytest.fixture
def empty_graph(test_config: GraphConfig) -> CodeGraph:
    return CodeGraph(config=test_config)


@pytest.fixture
def chain_graph(test_config: GraphConfig) -> CodeGraph:
    """A -> B -> C, DEPENDS_ON edges."""
    graph = CodeGraph(config=test_config)
    for node_id in ("A", "B", "C"):
        graph.create_node(NodeType.FUNCTION, name=node_id, node_id=node_id)
    graph.create_edge("A", "B", EdgeType.DEPENDS_ON, edge_id="ab")
    graph.create_edge("B", "C", EdgeType.DEPENDS_ON, edge_id="bc")
    return graph


@pytest.fixture
def cycle_graph(test_config: GraphConfig) -> CodeGraph:
    """A -> B -> C -> A."""
    graph = CodeGraph(config=test_config)
    for node_id in ("A", "B", "C"):
        graph.create_node(NodeType.FUNCTION, name=node_id, node_id=node_id)
    graph.create_edge("A", "B", EdgeType.CALLS, edge_id="ab")
    graph.create_edge("B", "C", EdgeType.CALLS, edge_id="bc")
    graph.create_edge("C", "A", EdgeType.CALLS, edge_id="ca")
    return graph


@pytest.fixture
def diamond_graph(test_config: GraphConfig) -> CodeGraph:
    """A -> B -> D and A -> C -> D."""
    graph = CodeGraph(config=test_config)
    for node_id in ("A", "B", "C", "D"):
        graph.create_node(NodeType.FUNCTION, name=node_id, node_id=node_id)
    graph.create_edge("A", "B", edge_id="ab")
    graph.create_edge("A", "C", edge_id="ac")
    graph.create_edge("B", "D", edge_id="bd")
    graph.create_edge("C", "D", edge_id="cd")
    return graph


@pytest.fixture
def code_graph(test_config: GraphConfig) -> CodeGraph:
    """
    Facts for two small modules:

    app.py:   import Repo; class Service(Base) { method handle() }; def main()
    repo.py:  class Repo; class Base; variable DB_URL; function connect()
    """
    graph = CodeGraph(config=test_config, metadata={"project": "sample"})

    imp = graph.create_node(NodeType.IMPORT, "Repo", "app.py", (1, 0), "from repo import Repo", node_id="app.import.Repo")
    service = graph.create_node(NodeType.CLASS, "Service", "app.py", (4, 0), "class Service(Base):", node_id="app.Service")
    handle = graph.create_node(NodeType.METHOD, "handle", "app.py", (5, 4), "def handle(self):", node_id="app.Service.handle")
    main = graph.create_node(NodeType.FUNCTION, "main", "app.py", (10, 0), "def main():", node_id="app.main")

    repo = graph.create_node(NodeType.CLASS, "Repo", "repo.py", (3, 0), "class Repo:", node_id="repo.Repo")
    base = graph.create_node(NodeType.CLASS, "Base", "repo.py", (1, 0), "class Base:", node_id="repo.Base")
    db_url = graph.create_node(NodeType.VARIABLE, "DB_URL", "repo.py", (8, 0), "DB_URL = 'sqlite://'", node_id="repo.DB_URL")
    connect = graph.create_node(NodeType.FUNCTION, "connect", "repo.py", (10, 0), "def connect():", node_id="repo.connect")

    graph.create_edge(imp, repo, EdgeType.IMPORTS)
    graph.create_edge(service, base, EdgeType.EXTENDS)
    graph.create_edge(service, handle, EdgeType.CONTAINS)
    graph.create_edge(handle, repo, EdgeType.USES)
    graph.create_edge(main, handle, EdgeType.CALLS)
    graph.create_edge(repo, connect, EdgeType.CALLS)
    graph.create_edge(connect, db_url, EdgeType.USES)
    return graph


@pytest.fixture
def bounded_config() -> GraphConfig:
    """Configuration with analysis bounds and strict JSON loading."""
    return GraphConfig(
        analysis=AnalysisConfig(path_max_depth=2, cycle_max_length=2, unique_cycles=False),
        serialization=SerializationConfig(on_dangling_edge="error", dot_rankdir="LR"),
    )
