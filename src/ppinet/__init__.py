"""ppinet: community structure and centrality of protein interaction networks."""

from .config import AnalysisConfig, GraphConfig, LouvainParams
from .network_analysis import MalformedInputError, build_graph, detect_communities, modularity

__all__ = [
    "AnalysisConfig",
    "GraphConfig",
    "LouvainParams",
    "MalformedInputError",
    "build_graph",
    "detect_communities",
    "modularity",
]
