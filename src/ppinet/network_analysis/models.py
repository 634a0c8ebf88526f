"""Data classes, type definitions, and errors for PPI network analysis."""

from dataclasses import dataclass, field

# Type aliases for domain clarity
NodeKey = str | int
CommunityId = int
Partition = dict[NodeKey, CommunityId]
WeightedEdge = tuple[NodeKey, NodeKey, float]


class MalformedInputError(ValueError):
    """Raised when an edge list cannot be turned into a valid graph."""


@dataclass(frozen=True)
class CommunityStats:
    """Modularity bookkeeping for one community.

    Attributes:
        community_id: Dense community id.
        size: Number of member nodes.
        internal_weight: Sum of weights of edges with both endpoints inside
            the community, each edge counted once.
        total_degree: Sum of the (weighted) degrees of the members.
    """

    community_id: CommunityId
    size: int
    internal_weight: float
    total_degree: float


@dataclass(frozen=True)
class LevelResult:
    """Outcome of one Louvain aggregation level.

    Attributes:
        level: Zero-based aggregation level.
        partition: Assignment of original node keys to communities.
        modularity: Modularity of ``partition`` on the original graph.
        num_nodes: Number of nodes in the graph optimized at this level.
        num_communities: Number of communities after the local moving phase.
        moves: Node moves performed during the local moving phase.
    """

    level: int
    partition: Partition
    modularity: float
    num_nodes: int
    num_communities: int
    moves: int


@dataclass(frozen=True)
class DegreeSummary:
    """Descriptive statistics of a degree sequence."""

    count: int
    mean: float
    std: float
    median: float
    min: float
    max: float
    q25: float
    q75: float


@dataclass
class AnalysisSummary:
    """Headline numbers of an analysis run."""

    num_nodes: int
    num_edges: int
    total_edge_weight: float
    num_components: int
    largest_component_size: int
    num_communities: int
    modularity: float
    transitivity: float
    average_clustering: float
    degrees: DegreeSummary
    community_sizes: list[int] = field(default_factory=list)
    timings: dict[str, float] = field(default_factory=dict)
