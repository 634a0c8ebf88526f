"""Resolution-parameterized modularity of a node partition.

For each community c, with ``in(c)`` the weight of edges inside c (each edge
counted once) and ``tot(c)`` the summed degree of its members::

    Q = sum_c [ in(c) / |E| - resolution * (tot(c) / (2 |E|))^2 ]

``resolution = 1.0`` gives the classic Newman-Girvan modularity.
"""

import logging
from collections import defaultdict
from collections.abc import Mapping

from .graph import Graph
from .models import CommunityId, CommunityStats, NodeKey

logger = logging.getLogger(__name__)


def _check_coverage(graph: Graph, partition: Mapping[NodeKey, CommunityId]) -> None:
    missing = [node for node in graph.nodes if node not in partition]
    if missing:
        preview = ", ".join(repr(n) for n in missing[:5])
        raise ValueError(
            f"Partition does not assign {len(missing)} of {graph.node_count()} nodes "
            f"(e.g. {preview})"
        )


def community_statistics(
    graph: Graph, partition: Mapping[NodeKey, CommunityId]
) -> dict[CommunityId, CommunityStats]:
    """Compute size, internal weight and total degree of every community.

    Args:
        graph: Graph the partition refers to.
        partition: Node -> community id. Must cover every node of ``graph``;
            keys not in the graph are ignored.

    Returns:
        Community id -> :class:`CommunityStats`, ordered by community id.

    Raises:
        ValueError: If a graph node has no community.
    """
    _check_coverage(graph, partition)

    sizes: dict[CommunityId, int] = defaultdict(int)
    internal: dict[CommunityId, float] = defaultdict(float)
    total: dict[CommunityId, float] = defaultdict(float)

    for node in graph.nodes:
        community = partition[node]
        sizes[community] += 1
        total[community] += graph.degree(node)

    for a, b, w in graph.edges():
        if partition[a] == partition[b]:
            internal[partition[a]] += w

    return {
        c: CommunityStats(
            community_id=c,
            size=sizes[c],
            internal_weight=internal[c],
            total_degree=total[c],
        )
        for c in sorted(sizes)
    }


def modularity(
    graph: Graph,
    partition: Mapping[NodeKey, CommunityId],
    resolution: float = 1.0,
) -> float:
    """Score a partition of ``graph``.

    Works for any partition, including externally supplied ground truth.
    A graph without edges scores 0.

    Args:
        graph: Graph to score against.
        partition: Node -> community id covering every node of ``graph``.
        resolution: Weight of the null-model term.

    Returns:
        Modularity in [-1, 1].

    Raises:
        ValueError: If a graph node has no community.
    """
    m = graph.total_edge_weight()
    if m == 0:
        _check_coverage(graph, partition)
        return 0.0

    q = 0.0
    for stats in community_statistics(graph, partition).values():
        q += stats.internal_weight / m - resolution * (stats.total_degree / (2 * m)) ** 2
    return q
