"""Immutable undirected graph built from a protein interaction edge list.

The graph keeps its nodes in ascending key order. Every algorithm in this
package iterates ``Graph.nodes`` in that order, which is what makes community
detection reproducible across runs on identical input.
"""

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from numbers import Integral, Real
from types import MappingProxyType
from typing import Any

import networkx as nx

from ..config import GraphConfig
from .models import MalformedInputError, NodeKey, WeightedEdge

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1


def node_sort_key(node: NodeKey) -> tuple[str, Any]:
    """Sort key giving a total order over mixed ``str``/``int`` node keys."""
    return type(node).__name__, node


def _validate_key(key: Any, position: int) -> NodeKey:
    """Return a canonical node key or raise MalformedInputError."""
    if key is None:
        raise MalformedInputError(f"Edge {position}: node key is missing")
    if isinstance(key, str):
        if not key.strip():
            raise MalformedInputError(f"Edge {position}: node key is an empty string")
        return key
    if isinstance(key, Integral) and not isinstance(key, bool):
        return int(key)
    raise MalformedInputError(
        f"Edge {position}: unsupported node key type {type(key).__name__} ({key!r})"
    )


def _validate_weight(weight: Any, position: int) -> float:
    if isinstance(weight, bool) or not isinstance(weight, Real):
        raise MalformedInputError(f"Edge {position}: weight {weight!r} is not a number")
    if not math.isfinite(weight) or weight <= 0:
        raise MalformedInputError(f"Edge {position}: weight must be positive, got {weight!r}")
    return weight


def _unpack_edge(edge: Any, position: int) -> tuple[Any, Any, Any]:
    try:
        arity = len(edge)
    except TypeError as e:
        raise MalformedInputError(f"Edge {position}: expected a pair, got {edge!r}") from e
    if arity == 2:  # noqa: PLR2004
        a, b = edge
        return a, b, DEFAULT_WEIGHT
    if arity == 3:  # noqa: PLR2004
        return tuple(edge)
    raise MalformedInputError(
        f"Edge {position}: expected (a, b) or (a, b, weight), got {arity} fields"
    )


class Graph:
    """Undirected, optionally weighted graph with cached adjacency.

    Build instances with :func:`build_graph` (or ``Graph.from_edges``); the
    constructor expects already validated, symmetric adjacency.
    """

    def __init__(
        self,
        adjacency: dict[NodeKey, dict[NodeKey, float]],
        self_loops: dict[NodeKey, float],
    ) -> None:
        self._nodes: tuple[NodeKey, ...] = tuple(sorted(adjacency, key=node_sort_key))
        self._index = {node: i for i, node in enumerate(self._nodes)}
        self._adj = {node: MappingProxyType(adjacency[node]) for node in self._nodes}
        self._neighbors = {node: frozenset(adjacency[node]) for node in self._nodes}
        self._loops = dict(self_loops)

        # A self-loop adds its weight twice to the degree of its node
        self._degree = {
            node: sum(adjacency[node].values()) + 2 * self._loops.get(node, 0)
            for node in self._nodes
        }
        pair_weight = sum(self._degree.values()) - 2 * sum(self._loops.values())
        self._total_weight = pair_weight / 2 + sum(self._loops.values())
        self._num_edges = sum(len(nbrs) for nbrs in adjacency.values()) // 2 + len(self._loops)

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Any],
        nodes: Iterable[NodeKey] | None = None,
        config: GraphConfig | None = None,
    ) -> "Graph":
        """Build a graph from ``(a, b)`` or ``(a, b, weight)`` tuples."""
        return build_graph(edges, nodes=nodes, config=config)

    @property
    def nodes(self) -> tuple[NodeKey, ...]:
        """Nodes in ascending key order."""
        return self._nodes

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        """Number of distinct edges, self-loops included."""
        return self._num_edges

    def total_edge_weight(self) -> float:
        """Sum of all edge weights, each edge counted once (``|E|`` when unweighted)."""
        return self._total_weight

    def has_node(self, node: NodeKey) -> bool:
        return node in self._index

    def index(self, node: NodeKey) -> int:
        """Position of ``node`` in :attr:`nodes`."""
        return self._index[node]

    def degree(self, node: NodeKey) -> float:
        """Weighted degree; equals the neighbour count on a simple unweighted graph."""
        return self._degree[node]

    def neighbors(self, node: NodeKey) -> frozenset[NodeKey]:
        """Adjacent nodes, excluding ``node`` itself when it has a self-loop."""
        return self._neighbors[node]

    def adjacency(self, node: NodeKey) -> Mapping[NodeKey, float]:
        """Read-only ``neighbor -> weight`` view (self-loops excluded)."""
        return self._adj[node]

    def self_loop_weight(self, node: NodeKey) -> float:
        if node not in self._index:
            raise KeyError(node)
        return self._loops.get(node, 0)

    def weight(self, a: NodeKey, b: NodeKey) -> float:
        """Weight of edge (a, b), 0 when the nodes are not adjacent."""
        if a == b:
            return self.self_loop_weight(a)
        return self._adj[a].get(b, 0)

    def edges(self) -> Iterator[WeightedEdge]:
        """Yield every edge once as ``(a, b, weight)`` with ``a`` not after ``b``."""
        for node in self._nodes:
            i = self._index[node]
            if node in self._loops:
                yield node, node, self._loops[node]
            for nbr in sorted(self._adj[node], key=self._index.__getitem__):
                if self._index[nbr] > i:
                    yield node, nbr, self._adj[node][nbr]

    def to_networkx(self) -> nx.Graph:
        """Export as a ``networkx.Graph`` with ``weight`` edge attributes."""
        G = nx.Graph()
        G.add_nodes_from(self._nodes)
        G.add_weighted_edges_from(self.edges())
        return G

    def __contains__(self, node: object) -> bool:
        return node in self._index

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[NodeKey]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        return (
            f"Graph(nodes={self.node_count()}, edges={self.edge_count()}, "
            f"total_weight={self._total_weight})"
        )


def build_graph(
    edges: Iterable[Any],
    nodes: Iterable[NodeKey] | None = None,
    config: GraphConfig | None = None,
) -> Graph:
    """Build an immutable :class:`Graph` from an edge list.

    Args:
        edges: Iterable of ``(a, b)`` or ``(a, b, weight)`` tuples. Pairs are
            unordered; unweighted edges get weight 1.
        nodes: Optional extra node keys, e.g. proteins without interactions.
        config: Self-loop and duplicate handling. Defaults to
            ``GraphConfig()`` (self-loops rejected, duplicates collapsed).

    Returns:
        The constructed graph.

    Raises:
        MalformedInputError: If a node key is missing or empty, a weight is
            not a positive number, an edge has the wrong number of fields, or
            a self-loop appears while ``config.allow_self_loops`` is False.
    """
    config = config or GraphConfig()
    adjacency: dict[NodeKey, dict[NodeKey, float]] = {}
    self_loops: dict[NodeKey, float] = {}
    num_input = 0
    num_duplicates = 0

    for position, edge in enumerate(edges):
        num_input += 1
        raw_a, raw_b, raw_w = _unpack_edge(edge, position)
        a = _validate_key(raw_a, position)
        b = _validate_key(raw_b, position)
        w = _validate_weight(raw_w, position)

        adjacency.setdefault(a, {})
        adjacency.setdefault(b, {})

        if a == b:
            if not config.allow_self_loops:
                raise MalformedInputError(f"Edge {position}: self-loop on {a!r} is not allowed")
            if a in self_loops:
                num_duplicates += 1
                if config.duplicates == "sum":
                    self_loops[a] += w
            else:
                self_loops[a] = w
            continue

        if b in adjacency[a]:
            num_duplicates += 1
            if config.duplicates == "sum":
                adjacency[a][b] += w
                adjacency[b][a] += w
            continue

        adjacency[a][b] = w
        adjacency[b][a] = w

    for position, node in enumerate(nodes or ()):
        adjacency.setdefault(_validate_key(node, position), {})

    graph = Graph(adjacency, self_loops)
    logger.debug(
        f"Built graph from {num_input} edges: {graph.node_count()} nodes, "
        f"{graph.edge_count()} distinct edges, {num_duplicates} duplicates "
        f"({config.duplicates})"
    )
    return graph
