"""
Analysis configuration for PPI network runs.

Graph construction, Louvain parameters and edge-list parsing options live
here so scripts and the pipeline share one set of defaults.
"""

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any

logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("collapse", "sum")


@dataclass(frozen=True)
class GraphConfig:
    """How an edge list is turned into a graph.

    Attributes:
        allow_self_loops: Keep (a, a) edges instead of rejecting them.
        duplicates: "collapse" keeps one copy of a repeated pair (the first
            weight seen), "sum" adds the weights up as multiplicity.
    """

    allow_self_loops: bool = False
    duplicates: str = "collapse"

    def __post_init__(self) -> None:
        if self.duplicates not in DUPLICATE_POLICIES:
            raise ValueError(
                f"Unknown duplicates policy: {self.duplicates!r} "
                f"(expected one of {', '.join(DUPLICATE_POLICIES)})"
            )


@dataclass(frozen=True)
class LouvainParams:
    """Parameters for Louvain community detection.

    Attributes:
        resolution: Weight of the null-model term. 1.0 is classic
            Newman-Girvan modularity, larger values favour smaller communities.
        tolerance: Minimum modularity improvement an aggregation level must
            bring over the previous one to be kept.
        max_passes: Optional cap on the number of aggregation levels.
    """

    resolution: float = 1.0
    tolerance: float = 1e-9
    max_passes: int | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.resolution) or self.resolution < 0:
            raise ValueError(f"resolution must be a non-negative number, got {self.resolution}")
        if not math.isfinite(self.tolerance) or self.tolerance < 0:
            raise ValueError(f"tolerance must be a non-negative number, got {self.tolerance}")
        if self.max_passes is not None and self.max_passes < 1:
            raise ValueError(f"max_passes must be at least 1, got {self.max_passes}")


@dataclass
class AnalysisConfig:
    """Configuration for a full analysis run over one edge-list file."""

    # Edge-list parsing
    delimiter: str = "\t"
    has_header: bool = True
    weight_column: int | None = None
    score_column: int | None = None
    min_score: float | None = None

    # Engine
    graph: GraphConfig = field(default_factory=GraphConfig)
    louvain: LouvainParams = field(default_factory=LouvainParams)

    # Metrics
    normalized_betweenness: bool = True
    betweenness_workers: int = 1
    show_progress: bool = False

    def __post_init__(self) -> None:
        if self.betweenness_workers < 1:
            raise ValueError(
                f"betweenness_workers must be at least 1, got {self.betweenness_workers}"
            )

    @classmethod
    def for_string_db(cls, min_score: float = 700) -> "AnalysisConfig":
        """Create config for STRING ``protein.links`` files.

        STRING ships space-delimited ``protein1 protein2 combined_score`` rows
        with a header. Interactions at or below ``min_score`` are dropped and
        the score is not used as an edge weight, so the network stays
        unweighted.
        """
        return cls(
            delimiter=" ",
            has_header=True,
            score_column=2,
            min_score=min_score,
        )

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AnalysisConfig":
        """Create config from a flat or nested dict (e.g. parsed JSON).

        Nested ``graph`` and ``louvain`` dicts are turned into their
        dataclasses; unknown keys are logged and ignored.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            if key == "graph" and isinstance(value, dict):
                value = GraphConfig(**value)
            elif key == "louvain" and isinstance(value, dict):
                value = LouvainParams(**value)
            kwargs[key] = value
        return cls(**kwargs)
