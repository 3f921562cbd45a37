"""
Exception hierarchy for depgraph.

Lookups of absent items are not errors (they return None/False); the
exceptions below cover failed preconditions and malformed input.
"""


class DepGraphError(Exception):
    """Base exception for depgraph errors."""

    pass


class NodeNotFoundError(DepGraphError, KeyError):
    """Raised when an operation references a node absent from the graph."""

    def __init__(self, node_id: str, message: str | None = None) -> None:
        self.node_id = node_id
        super().__init__(message or f"Node not found: {node_id!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class EdgeEndpointError(NodeNotFoundError):
    """Raised when an edge is created with an endpoint outside the graph."""

    def __init__(self, node_id: str, edge_id: str | None = None) -> None:
        self.edge_id = edge_id
        super().__init__(
            node_id,
            f"Edge {edge_id!r} endpoint not in graph: {node_id!r}"
            if edge_id
            else f"Edge endpoint not in graph: {node_id!r}",
        )


class DuplicateNodeError(DepGraphError, ValueError):
    """Raised when adding a node whose id is already taken."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Duplicate node id: {node_id!r}")


class DuplicateEdgeError(DepGraphError, ValueError):
    """Raised when adding an edge whose id is already taken."""

    def __init__(self, edge_id: str) -> None:
        self.edge_id = edge_id
        super().__init__(f"Duplicate edge id: {edge_id!r}")


class GraphDeserializationError(DepGraphError, ValueError):
    """Raised when a serialized graph document is malformed."""

    pass
