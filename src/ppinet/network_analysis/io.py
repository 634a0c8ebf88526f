"""Utilities for reading interaction edge lists and writing analysis results."""

import csv
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

import pandas as pd

from .graph import node_sort_key
from .models import CommunityId, NodeKey

logger = logging.getLogger(__name__)


def iter_edges(
    edges_path: Path,
    delimiter: str = "\t",
    has_header: bool = True,
    weight_column: int | None = None,
    score_column: int | None = None,
    min_score: float | None = None,
) -> Iterable[tuple]:
    """Iterate protein-protein edges from a delimited text file.

    Args:
        edges_path: Path to a file with [protein_a, protein_b, ...] columns
        delimiter: Field separator. A single space also splits on runs of
            whitespace (STRING style files).
        has_header: Whether the file has a header row
        weight_column: Optional zero-based column holding edge weights
        score_column: Optional zero-based column used only for filtering
        min_score: Keep rows whose score is strictly above this value

    Yields:
        (protein_a, protein_b) tuples, or (protein_a, protein_b, weight)
        when ``weight_column`` is set
    """
    needed = max(2, (weight_column or 0) + 1, (score_column or 0) + 1)
    skipped = 0
    with open(edges_path, encoding="utf-8") as f:
        if delimiter == " ":
            rows: Iterable[list[str]] = (line.split() for line in f)
        else:
            rows = csv.reader(f, delimiter=delimiter)

        for i, row in enumerate(rows):
            if i == 0 and has_header:
                continue
            if not row or len(row) < needed:
                skipped += 1
                continue
            if score_column is not None and min_score is not None:
                if float(row[score_column]) <= min_score:
                    continue
            if weight_column is not None:
                yield row[0].strip(), row[1].strip(), float(row[weight_column])
            else:
                yield row[0].strip(), row[1].strip()

    if skipped:
        logger.warning(f"Skipped {skipped} short or empty rows in {edges_path}")


def read_edge_list(edges_path: Path, **kwargs) -> list[tuple]:
    """Read all edges of ``edges_path`` into memory (see :func:`iter_edges`)."""
    if not edges_path.exists():
        raise FileNotFoundError(f"Edge list not found: {edges_path}")
    edges = list(iter_edges(edges_path, **kwargs))
    logger.info(f"Loaded {len(edges)} interactions from {edges_path}")
    return edges


def write_membership(membership_tsv: Path, partition: Mapping[NodeKey, CommunityId]) -> None:
    """Write community membership as ``protein_id<TAB>community_id`` rows."""
    membership_tsv.parent.mkdir(parents=True, exist_ok=True)
    with open(membership_tsv, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, delimiter="\t")
        writer.writerow(["protein_id", "community_id"])
        for protein_id in sorted(partition, key=node_sort_key):
            writer.writerow([protein_id, partition[protein_id]])


def read_membership(membership_tsv: Path) -> dict[str, CommunityId]:
    """Read a membership TSV written by :func:`write_membership`.

    Protein ids come back as strings.
    """
    partition: dict[str, CommunityId] = {}
    with open(membership_tsv, encoding="utf-8") as f:
        reader = csv.reader(f, delimiter="\t")
        header = next(reader, None)
        if header and (len(header) < 2 or header[1] != "community_id"):  # noqa: PLR2004
            # no header, rewind
            f.seek(0)
            reader = csv.reader(f, delimiter="\t")
        for row in reader:
            if len(row) < 2:  # noqa: PLR2004
                continue
            partition[row[0]] = int(row[1])
    return partition


def write_node_metrics(metrics_tsv: Path, table: pd.DataFrame) -> None:
    """Write the per-node metrics table as TSV."""
    metrics_tsv.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(metrics_tsv, sep="\t", index=False)
