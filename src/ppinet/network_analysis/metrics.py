"""Per-node and whole-graph statistics used to interpret communities.

All functions are read-only over a :class:`Graph` and independent of
community detection. Betweenness and clustering are topological: edge
weights are ignored.
"""

import logging
from collections import Counter, deque
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np
import pandas as pd
from tqdm import tqdm

from .graph import Graph
from .models import CommunityId, DegreeSummary, NodeKey

logger = logging.getLogger(__name__)

# Columns of the per-node metrics table
METRIC_COLUMNS = ["protein_id", "degree", "betweenness", "transitivity"]


def degree(graph: Graph, node: NodeKey) -> float:
    """Weighted degree of ``node`` (neighbour count on unweighted graphs)."""
    return graph.degree(node)


def degrees(graph: Graph) -> dict[NodeKey, float]:
    return {node: graph.degree(node) for node in graph.nodes}


def degree_distribution(graph: Graph) -> dict[float, int]:
    """Number of nodes per degree value, in ascending degree order."""
    counts = Counter(graph.degree(node) for node in graph.nodes)
    return dict(sorted(counts.items()))


def summarize_degrees(graph: Graph) -> DegreeSummary:
    """Descriptive statistics of the degree sequence."""
    values = np.array([graph.degree(node) for node in graph.nodes], dtype=float)
    if values.size == 0:
        return DegreeSummary(
            count=0, mean=0.0, std=0.0, median=0.0, min=0.0, max=0.0, q25=0.0, q75=0.0
        )

    return DegreeSummary(
        count=int(values.size),
        mean=float(np.mean(values)),
        std=float(np.std(values)),
        median=float(np.median(values)),
        min=float(np.min(values)),
        max=float(np.max(values)),
        q25=float(np.percentile(values, 25)),
        q75=float(np.percentile(values, 75)),
    )


def _accumulate_dependencies(graph: Graph, sources: Iterable[NodeKey]) -> dict[NodeKey, float]:
    """Brandes' single-source accumulation summed over ``sources``.

    Each source s adds, for every target t, the fraction of shortest s-t paths
    running through each intermediate node.
    """
    betweenness = dict.fromkeys(graph.nodes, 0.0)
    for source in sources:
        # 1) BFS from the source, counting shortest paths
        stack: list[NodeKey] = []
        predecessors: dict[NodeKey, list[NodeKey]] = {source: []}
        sigma: dict[NodeKey, int] = {source: 1}
        distance: dict[NodeKey, int] = {source: 0}
        queue = deque([source])
        while queue:
            v = queue.popleft()
            stack.append(v)
            for w in graph.adjacency(v):
                if w not in distance:
                    distance[w] = distance[v] + 1
                    sigma[w] = 0
                    predecessors[w] = []
                    queue.append(w)
                if distance[w] == distance[v] + 1:
                    sigma[w] += sigma[v]
                    predecessors[w].append(v)

        # 2) Back-propagate dependencies in order of decreasing distance
        delta = dict.fromkeys(stack, 0.0)
        while stack:
            w = stack.pop()
            coefficient = (1.0 + delta[w]) / sigma[w]
            for v in predecessors[w]:
                delta[v] += sigma[v] * coefficient
            if w != source:
                betweenness[w] += delta[w]
    return betweenness


def betweenness_centrality(
    graph: Graph,
    normalized: bool = True,
    workers: int = 1,
    progress: bool = False,
) -> dict[NodeKey, float]:
    """Betweenness centrality of every node (Brandes' algorithm, O(V*E)).

    Dependencies are summed over ordered (source, target) pairs, so on an
    undirected graph each unordered pair contributes twice.

    Args:
        graph: Graph to analyse.
        normalized: Divide by ``(n - 1)(n - 2)``, giving values in [0, 1].
        workers: Number of threads sharing the source nodes. Partial sums
            are merged in a fixed order.
        progress: Show a tqdm progress bar.

    Returns:
        Node -> betweenness, in node order.
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    nodes = graph.nodes
    n = len(nodes)

    if workers == 1 or n < 2 * workers:  # noqa: PLR2004
        betweenness = _accumulate_dependencies(
            graph,
            tqdm(nodes, desc="Betweenness", unit="node", disable=not progress),
        )
    else:
        chunks = [nodes[i::workers] for i in range(workers)]
        partials: list[dict[NodeKey, float]] = [{} for _ in chunks]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(_accumulate_dependencies, graph, chunk): i
                for i, chunk in enumerate(chunks)
            }
            with tqdm(
                total=len(chunks), desc="Betweenness", unit="chunk", disable=not progress
            ) as pbar:
                for future in as_completed(futures):
                    partials[futures[future]] = future.result()
                    pbar.update(1)

        betweenness = dict.fromkeys(nodes, 0.0)
        for partial in partials:
            for node, value in partial.items():
                betweenness[node] += value

    if normalized:
        scale = 1.0 / ((n - 1) * (n - 2)) if n > 2 else 0.0  # noqa: PLR2004
        betweenness = {node: value * scale for node, value in betweenness.items()}
    return betweenness


def _neighbor_links(graph: Graph, node: NodeKey) -> int:
    """Number of edges among the neighbours of ``node``."""
    nbrs = graph.neighbors(node)
    return sum(len(graph.neighbors(u) & nbrs) for u in nbrs) // 2


def local_transitivity(graph: Graph, node: NodeKey) -> float:
    """Fraction of neighbour pairs of ``node`` that are themselves connected.

    Returns 0 for nodes with fewer than two neighbours.
    """
    k = len(graph.neighbors(node))
    if k < 2:  # noqa: PLR2004
        return 0.0
    return 2.0 * _neighbor_links(graph, node) / (k * (k - 1))


def transitivity(graph: Graph) -> float:
    """Global transitivity: 3 * triangles / connected triples."""
    closed = 0
    triples = 0
    for node in graph.nodes:
        k = len(graph.neighbors(node))
        if k < 2:  # noqa: PLR2004
            continue
        closed += _neighbor_links(graph, node)
        triples += k * (k - 1) // 2
    return closed / triples if triples else 0.0


def average_clustering(graph: Graph) -> float:
    """Mean local transitivity over all nodes (zeros included)."""
    if graph.node_count() == 0:
        return 0.0
    return sum(local_transitivity(graph, node) for node in graph.nodes) / graph.node_count()


def node_metrics_table(
    graph: Graph,
    partition: Mapping[NodeKey, CommunityId] | None = None,
    normalized: bool = True,
    workers: int = 1,
    progress: bool = False,
) -> pd.DataFrame:
    """One row per node with degree, betweenness and local transitivity.

    If ``partition`` is given, a ``community_id`` column is added.
    """
    logger.info(f"Computing node metrics for {graph.node_count()} nodes")
    betweenness = betweenness_centrality(
        graph, normalized=normalized, workers=workers, progress=progress
    )

    table = pd.DataFrame(
        {
            "protein_id": list(graph.nodes),
            "degree": [graph.degree(node) for node in graph.nodes],
            "betweenness": [betweenness[node] for node in graph.nodes],
            "transitivity": [local_transitivity(graph, node) for node in graph.nodes],
        },
        columns=METRIC_COLUMNS,
    )
    if partition is not None:
        table["community_id"] = [partition[node] for node in graph.nodes]
    return table
