"""Community detection and node metrics for protein interaction networks.

The graph store, modularity evaluator, Louvain optimizer and metrics
collector are implemented from scratch; networkx is only used for export.
"""

from .graph import Graph, build_graph
from .louvain import (
    communities_from_partition,
    community_sizes,
    detect_communities,
    louvain_levels,
    partition_from_communities,
)
from .metrics import (
    average_clustering,
    betweenness_centrality,
    degree_distribution,
    local_transitivity,
    node_metrics_table,
    summarize_degrees,
    transitivity,
)
from .models import MalformedInputError, Partition
from .modularity import community_statistics, modularity

__all__ = [
    "Graph",
    "MalformedInputError",
    "Partition",
    "average_clustering",
    "betweenness_centrality",
    "build_graph",
    "communities_from_partition",
    "community_sizes",
    "community_statistics",
    "degree_distribution",
    "detect_communities",
    "local_transitivity",
    "louvain_levels",
    "modularity",
    "node_metrics_table",
    "partition_from_communities",
    "summarize_degrees",
    "transitivity",
]
