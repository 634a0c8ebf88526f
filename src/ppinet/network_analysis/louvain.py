"""Louvain community detection (Blondel et al. 2008).

Each level runs two phases:

1. Local moving: every node starts in its own community. Nodes are visited in
   ascending order and moved to the neighbouring community with the largest
   modularity gain (ties go to the lowest community id). Sweeps repeat until
   one sweep moves nothing.
2. Aggregation: communities become the nodes of a new level graph. Edge
   weights between communities are summed; each community keeps its internal
   weight as a self-loop of twice the intra-community weight, so degrees and
   ``|E|`` are unchanged.

Level graphs are kept as a list of independent snapshots. A membership array
over the original nodes is composed with each level's assignment, so the
original graph is never touched.
"""

import logging
from collections import defaultdict
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from ..config import LouvainParams
from .graph import Graph, node_sort_key
from .modularity import modularity
from .models import CommunityId, LevelResult, NodeKey, Partition

logger = logging.getLogger(__name__)

MOVE_EPSILON = 1e-12


@dataclass
class _LevelGraph:
    """Integer-indexed snapshot of the graph optimized at one level.

    Attributes:
        adjacency: Per node, ``neighbor index -> weight`` (no self entries).
        loops: Per node, self-loop contribution to its degree, i.e. twice the
            weight of edges collapsed inside it.
        degree: Per node, weighted degree (``sum(adjacency) + loops``).
        total_weight: ``|E|``, identical on every level.
    """

    adjacency: list[dict[int, float]]
    loops: list[float]
    degree: list[float]
    total_weight: float

    @property
    def size(self) -> int:
        return len(self.degree)

    @classmethod
    def from_graph(cls, graph: Graph) -> "_LevelGraph":
        adjacency = [
            {graph.index(nbr): w for nbr, w in graph.adjacency(node).items()}
            for node in graph.nodes
        ]
        loops = [2 * graph.self_loop_weight(node) for node in graph.nodes]
        degree = [graph.degree(node) for node in graph.nodes]
        return cls(adjacency, loops, degree, graph.total_edge_weight())


def _move_nodes(level_graph: _LevelGraph, resolution: float) -> tuple[list[CommunityId], int]:
    """Local moving phase on one level.

    A node moves only when its best gain beats staying by more than
    ``MOVE_EPSILON`` (relative to ``|E|``), which absorbs float rounding.

    Returns:
        (community of each node, number of moves). Community ids are node
        indices of the community's founding node, not yet dense.
    """
    n = level_graph.size
    m = level_graph.total_weight
    community = list(range(n))
    totals = list(level_graph.degree)
    moves = 0

    if m == 0:
        return community, moves

    two_m = 2 * m
    improved = True
    while improved:
        improved = False
        for node in range(n):
            k = level_graph.degree[node]
            current = community[node]

            links: dict[CommunityId, float] = defaultdict(float)
            for nbr, w in level_graph.adjacency[node].items():
                links[community[nbr]] += w

            # Take the node out before comparing, so staying is scored like any move
            totals[current] -= k
            stay_gain = links.get(current, 0.0) - resolution * totals[current] * k / two_m

            best, best_gain = current, stay_gain
            for candidate in sorted(links):
                if candidate == current:
                    continue
                gain = links[candidate] - resolution * totals[candidate] * k / two_m
                if gain > best_gain:
                    best, best_gain = candidate, gain

            if best != current and best_gain - stay_gain <= MOVE_EPSILON * max(1.0, m):
                best = current

            totals[best] += k
            if best != current:
                community[node] = best
                moves += 1
                improved = True

    assert abs(sum(totals) - sum(level_graph.degree)) <= 1e-9 * max(1.0, two_m), (
        "community degree totals drifted from node degrees"
    )
    return community, moves


def _renumber(community: list[CommunityId]) -> tuple[list[CommunityId], int]:
    """Map community labels to dense ids ordered by their first member."""
    dense: dict[CommunityId, CommunityId] = {}
    for label in community:
        if label not in dense:
            dense[label] = len(dense)
    return [dense[label] for label in community], len(dense)


def _aggregate(
    level_graph: _LevelGraph, assignment: list[CommunityId], num_communities: int
) -> _LevelGraph:
    """Collapse each community of ``level_graph`` into a single node."""
    adjacency: list[dict[int, float]] = [defaultdict(float) for _ in range(num_communities)]
    loops = [0.0] * num_communities
    degree = [0.0] * num_communities

    for node in range(level_graph.size):
        c = assignment[node]
        loops[c] += level_graph.loops[node]
        degree[c] += level_graph.degree[node]
        for nbr, w in level_graph.adjacency[node].items():
            # Every internal edge is seen from both endpoints, adding 2w in total
            if assignment[nbr] == c:
                loops[c] += w
            else:
                adjacency[c][assignment[nbr]] += w

    aggregated = _LevelGraph([dict(a) for a in adjacency], loops, degree, level_graph.total_weight)
    for c in range(num_communities):
        expected = sum(aggregated.adjacency[c].values()) + aggregated.loops[c]
        assert abs(expected - aggregated.degree[c]) <= 1e-9 * max(1.0, degree[c]), (
            f"aggregate node {c} lost degree during aggregation"
        )
    return aggregated


def louvain_levels(
    graph: Graph,
    resolution: float = 1.0,
    tolerance: float = 1e-9,
    max_passes: int | None = None,
) -> Iterator[LevelResult]:
    """Run Louvain and yield the partition reached at every aggregation level.

    Nothing is yielded when no node can improve on the singleton partition.
    The last yielded level is the final result.

    Args:
        graph: Graph to partition.
        resolution: Weight of the null-model term (1.0 = classic modularity).
        tolerance: Minimum modularity improvement an aggregation level must
            bring over the previous one. The first level is always kept;
            a later level that falls short is discarded and ends the run.
        max_passes: Optional cap on the number of levels.

    Yields:
        One :class:`LevelResult` per level, partitions over original node keys.

    Raises:
        ValueError: If a parameter is out of range.
    """
    LouvainParams(resolution=resolution, tolerance=tolerance, max_passes=max_passes)
    if graph.node_count() == 0:
        return

    nodes = graph.nodes
    level_graphs = [_LevelGraph.from_graph(graph)]
    membership = list(range(len(nodes)))
    current_q = modularity(graph, dict(zip(nodes, membership, strict=True)), resolution)

    level = 0
    while max_passes is None or level < max_passes:
        level_graph = level_graphs[-1]
        community, moves = _move_nodes(level_graph, resolution)
        if moves == 0:
            logger.debug(f"Level {level}: no improving moves on {level_graph.size} nodes")
            return

        assignment, num_communities = _renumber(community)
        membership = [assignment[c] for c in membership]
        partition = dict(zip(nodes, membership, strict=True))
        new_q = modularity(graph, partition, resolution)
        logger.debug(
            f"Level {level}: {level_graph.size} nodes -> {num_communities} communities "
            f"after {moves} moves, modularity {current_q:.6f} -> {new_q:.6f}"
        )

        if level > 0 and new_q - current_q <= tolerance:
            logger.debug(f"Level {level}: improvement below tolerance {tolerance}, stopping")
            return

        yield LevelResult(
            level=level,
            partition=partition,
            modularity=new_q,
            num_nodes=level_graph.size,
            num_communities=num_communities,
            moves=moves,
        )

        if num_communities == 1:
            return
        current_q = new_q
        level_graphs.append(_aggregate(level_graph, assignment, num_communities))
        level += 1


def detect_communities(
    graph: Graph,
    resolution: float = 1.0,
    tolerance: float = 1e-9,
    max_passes: int | None = None,
) -> tuple[Partition, float]:
    """Partition ``graph`` into communities by Louvain modularity optimization.

    The result is deterministic: nodes are visited in ascending key order and
    ties go to the lowest community id. Being a local search, it is not
    guaranteed to reach the global modularity maximum.

    Args:
        graph: Graph to partition.
        resolution: Weight of the null-model term (1.0 = classic modularity).
        tolerance: Minimum modularity improvement a further aggregation level
            must bring to be kept.
        max_passes: Optional cap on the number of aggregation levels.

    Returns:
        Tuple of (node -> dense community id, modularity of that partition).
        An empty graph yields ``({}, 0.0)``.
    """
    partition: Partition = {node: i for i, node in enumerate(graph.nodes)}
    q = modularity(graph, partition, resolution)
    num_levels = 0
    for result in louvain_levels(graph, resolution, tolerance, max_passes):
        partition, q = result.partition, result.modularity
        num_levels += 1

    logger.info(
        f"Louvain found {len(set(partition.values()))} communities over "
        f"{graph.node_count()} nodes in {num_levels} levels (modularity {q:.4f})"
    )
    return partition, q


def communities_from_partition(partition: Mapping[NodeKey, CommunityId]) -> list[set[NodeKey]]:
    """Group nodes by community, ordered by community id."""
    groups: dict[CommunityId, set[NodeKey]] = defaultdict(set)
    for node, community in partition.items():
        groups[community].add(node)
    return [groups[c] for c in sorted(groups)]


def partition_from_communities(communities: list[set[NodeKey]]) -> Partition:
    """Turn a list of node sets into a partition with dense ids.

    Communities are numbered by their smallest member, matching the
    numbering produced by :func:`detect_communities`.
    """
    ordered = sorted(
        (c for c in communities if c),
        key=lambda members: node_sort_key(min(members, key=node_sort_key)),
    )
    partition: Partition = {}
    for community_id, members in enumerate(ordered):
        for node in members:
            if node in partition:
                raise ValueError(f"Node {node!r} appears in more than one community")
            partition[node] = community_id
    return partition


def community_sizes(partition: Mapping[NodeKey, CommunityId]) -> list[int]:
    """Community sizes, largest first."""
    return sorted((len(c) for c in communities_from_partition(partition)), reverse=True)
