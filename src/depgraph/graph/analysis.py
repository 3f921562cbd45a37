"""
Traversal and analysis algorithms over a CodeGraph.

Implements the classical questions asked of a dependency graph:
- Program slicing (forward, backward, bidirectional reachability)
- Bounded enumeration of simple paths between two nodes
- Strongly connected components (Tarjan)
- Exhaustive cycle enumeration
- Transitive closure of the dependency relation

Every walk is a depth-first search driven by an explicit stack so large
graphs cannot hit the interpreter's recursion limit. Successors are
visited in edge insertion order, which makes results deterministic.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from depgraph.errors import NodeNotFoundError
from depgraph.graph.model import EdgeType, GraphEdge

if TYPE_CHECKING:
    from depgraph.graph.store import CodeGraph

logger = structlog.get_logger(__name__)


class SliceDirection(str, Enum):
    """Which edges a slice follows from each visited node."""

    FORWARD = "forward"  # Outgoing edges: what this node affects
    BACKWARD = "backward"  # Incoming edges: what affects this node
    BIDIRECTIONAL = "bidirectional"


@dataclass
class SliceOptions:
    """Optional bounds on a slice walk."""

    max_depth: int | None = None  # Hops from the start node
    edge_types: frozenset[EdgeType] | None = None  # Only follow these kinds

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.edge_types is not None:
            self.edge_types = frozenset(EdgeType(kind) for kind in self.edge_types)


def _require_node(graph: "CodeGraph", node_id: str) -> None:
    if graph.get_node(node_id) is None:
        raise NodeNotFoundError(node_id)


def _successors(
    graph: "CodeGraph",
    node_id: str,
    kinds: frozenset[EdgeType] | None = None,
) -> list[str]:
    """Distinct targets of a node's outgoing edges, first edge first."""
    seen: dict[str, None] = {}
    for edge in graph.outgoing_edges(node_id):
        if kinds is None or edge.edge_type in kinds:
            seen.setdefault(edge.target_id)
    return list(seen)


def _slice_steps(
    graph: "CodeGraph",
    node_id: str,
    direction: SliceDirection,
    kinds: frozenset[EdgeType] | None,
) -> Iterator[tuple[GraphEdge, str]]:
    """Yield (edge, neighbor) pairs a slice may follow from node_id."""
    if direction in (SliceDirection.FORWARD, SliceDirection.BIDIRECTIONAL):
        for edge in graph.outgoing_edges(node_id):
            if kinds is None or edge.edge_type in kinds:
                yield edge, edge.target_id

    if direction in (SliceDirection.BACKWARD, SliceDirection.BIDIRECTIONAL):
        for edge in graph.incoming_edges(node_id):
            if kinds is None or edge.edge_type in kinds:
                yield edge, edge.source_id


def compute_slice(
    graph: "CodeGraph",
    start_id: str,
    direction: SliceDirection | str = SliceDirection.FORWARD,
    options: SliceOptions | None = None,
) -> "CodeGraph":
    """
    Extract the subgraph reachable from a node.

    Args:
        graph: Graph to slice.
        start_id: Node the slice starts from.
        direction: Follow outgoing edges, incoming edges, or both.
        options: Optional depth bound and edge-kind filter.

    Returns:
        New graph holding copies of every reached node (start included)
        and every edge followed to reach them. Ids are preserved.

    Raises:
        NodeNotFoundError: If start_id is not in the graph.
    """
    from depgraph.graph.store import CodeGraph

    _require_node(graph, start_id)
    direction = SliceDirection(direction)
    options = options or SliceOptions()
    max_depth = options.max_depth
    kinds = options.edge_types

    depth_of: dict[str, int] = {start_id: 0}
    order: list[str] = [start_id]
    followed: dict[str, GraphEdge] = {}

    stack: list[tuple[str, Iterator[tuple[GraphEdge, str]]]] = [
        (start_id, _slice_steps(graph, start_id, direction, kinds))
    ]
    while stack:
        node_id, steps = stack[-1]
        depth = depth_of[node_id]
        descended = False

        if max_depth is None or depth < max_depth:
            for edge, neighbor in steps:
                followed.setdefault(edge.edge_id, edge)
                known = depth_of.get(neighbor)
                if known is None:
                    order.append(neighbor)
                # A shallower route re-opens a node cut off by max_depth
                if known is None or (max_depth is not None and depth + 1 < known):
                    depth_of[neighbor] = depth + 1
                    stack.append(
                        (neighbor, _slice_steps(graph, neighbor, direction, kinds))
                    )
                    descended = True
                    break

        if not descended:
            stack.pop()

    result = CodeGraph(
        config=graph.config,
        metadata={"slice_start": start_id, "slice_direction": direction.value},
    )
    for node_id in order:
        result.add_node(graph.get_node(node_id))
    for edge in followed.values():
        result.add_edge(edge.detached_copy())

    logger.debug(
        "Slice computed",
        start=start_id,
        direction=direction.value,
        nodes=len(order),
        edges=len(followed),
    )
    return result


def find_paths(
    graph: "CodeGraph",
    start_id: str,
    end_id: str,
    max_depth: int | None = None,
    edge_types: Iterable[EdgeType] | None = None,
) -> list[list[str]]:
    """
    Enumerate simple paths from start_id to end_id along outgoing edges.

    The number of simple paths grows exponentially in dense or cyclic
    graphs; max_depth (in edges) is the only bound, so supply one for
    large graphs. Parallel edges between the same two nodes yield a
    single path.

    Args:
        graph: Graph to search.
        start_id: First node of every path.
        end_id: Last node of every path.
        max_depth: Maximum number of edges per path. Falls back to
            the configured analysis.path_max_depth.
        edge_types: Only follow edges of these kinds.

    Returns:
        Node-id sequences in depth-first discovery order.

    Raises:
        NodeNotFoundError: If either endpoint is not in the graph.
    """
    _require_node(graph, start_id)
    _require_node(graph, end_id)

    limit = max_depth if max_depth is not None else graph.config.analysis.path_max_depth
    kinds = frozenset(EdgeType(k) for k in edge_types) if edge_types is not None else None

    paths: list[list[str]] = []
    path: list[str] = [start_id]
    on_path: set[str] = {start_id}
    stack: list[Iterator[str]] = [iter(_successors(graph, start_id, kinds))]

    while stack:
        depth = len(path) - 1
        for target in stack[-1]:
            if target in on_path:
                continue
            if target == end_id:
                if limit is None or depth + 1 <= limit:
                    paths.append(path + [target])
                continue
            if limit is None or depth + 1 < limit:
                path.append(target)
                on_path.add(target)
                stack.append(iter(_successors(graph, target, kinds)))
                break
        else:
            stack.pop()
            on_path.discard(path.pop())

    logger.debug("Paths enumerated", start=start_id, end=end_id, paths=len(paths), max_depth=limit)
    return paths


def find_strongly_connected_components(graph: "CodeGraph") -> list[set[str]]:
    """
    Partition the graph into strongly connected components (Tarjan).

    Components are emitted in the order Tarjan's algorithm completes
    them, i.e. reverse topological order of the condensation. Nodes on
    no cycle form singleton components.
    """
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    components: list[set[str]] = []
    counter = 0

    for root in [node.node_id for node in graph.nodes]:
        if root in index_of:
            continue

        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work: list[tuple[str, Iterator[str]]] = [(root, iter(_successors(graph, root)))]

        while work:
            node_id, successors = work[-1]
            for succ in successors:
                if succ not in index_of:
                    index_of[succ] = lowlink[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack.add(succ)
                    work.append((succ, iter(_successors(graph, succ))))
                    break
                if succ in on_stack:
                    lowlink[node_id] = min(lowlink[node_id], index_of[succ])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node_id])

                if lowlink[node_id] == index_of[node_id]:
                    component: set[str] = set()
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.add(member)
                        if member == node_id:
                            break
                    components.append(component)

    logger.debug("Strongly connected components found", components=len(components))
    return components


def _rotation_key(cycle: list[str]) -> tuple[str, ...]:
    pivot = cycle.index(min(cycle))
    return tuple(cycle[pivot:] + cycle[:pivot])


def find_cycles(
    graph: "CodeGraph",
    max_length: int | None = None,
    unique: bool | None = None,
) -> list[list[str]]:
    """
    Enumerate closed walks by searching from every node back to itself.

    This is an exhaustive detector, worst-case exponential, and is kept
    separate from the SCC partition: it reports the literal cycles, not
    the clusters they form.

    Args:
        graph: Graph to search.
        max_length: Maximum number of nodes per cycle. Falls back to the
            configured analysis.cycle_max_length.
        unique: Drop rotations of an already-reported cycle. Falls back
            to analysis.unique_cycles.

    Returns:
        Cycles as node-id lists starting at the node the search began
        from, without repeating it at the end. A self-loop is [node].
    """
    analysis = graph.config.analysis
    limit = max_length if max_length is not None else analysis.cycle_max_length
    dedupe = analysis.unique_cycles if unique is None else unique

    cycles: list[list[str]] = []
    seen: set[tuple[str, ...]] = set()

    for start in [node.node_id for node in graph.nodes]:
        path: list[str] = [start]
        on_path: set[str] = {start}
        stack: list[Iterator[str]] = [iter(_successors(graph, start))]

        while stack:
            for target in stack[-1]:
                if target == start:
                    cycle = list(path)
                    key = _rotation_key(cycle)
                    if not dedupe or key not in seen:
                        seen.add(key)
                        cycles.append(cycle)
                    continue
                if target in on_path:
                    continue
                if limit is None or len(path) < limit:
                    path.append(target)
                    on_path.add(target)
                    stack.append(iter(_successors(graph, target)))
                    break
            else:
                stack.pop()
                on_path.discard(path.pop())

    logger.debug("Cycles enumerated", cycles=len(cycles), max_length=limit)
    return cycles


def compute_transitive_closure(
    graph: "CodeGraph",
    edge_types: Iterable[EdgeType] | None = None,
) -> "CodeGraph":
    """
    Add an inferred dependency for every indirectly reachable pair.

    The result holds copies of all nodes and edges plus one DEPENDS_ON
    edge, tagged ``transitive: True``, for each ordered pair (i, j),
    i != j, where j is reachable from i through at least one
    intermediate node and no direct i -> j edge exists.

    Warshall's algorithm over per-node reachability sets: O(V^3) in the
    worst case, meant for analysis-sized graphs.

    Args:
        graph: Source graph, left unchanged.
        edge_types: Relations that count as dependencies (default: all).
    """
    kinds = frozenset(EdgeType(k) for k in edge_types) if edge_types is not None else None
    node_ids = [node.node_id for node in graph.nodes]

    direct: dict[str, set[str]] = {
        node_id: set(_successors(graph, node_id, kinds)) for node_id in node_ids
    }
    reach: dict[str, set[str]] = {node_id: set(targets) for node_id, targets in direct.items()}

    for via in node_ids:
        for source in node_ids:
            if via in reach[source]:
                reach[source] |= reach[via]

    closure = graph.copy()
    added = 0
    for source in node_ids:
        for target in node_ids:
            if target == source or target not in reach[source] or target in direct[source]:
                continue
            closure.create_edge(
                source,
                target,
                EdgeType.DEPENDS_ON,
                metadata={"transitive": True},
            )
            added += 1

    logger.info(
        "Transitive closure computed",
        nodes=len(node_ids),
        edges=len(graph.edges),
        transitive_edges=added,
    )
    return closure
