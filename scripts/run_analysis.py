import argparse
import json
import logging
import sys
from pathlib import Path

from ppinet.config import AnalysisConfig, GraphConfig, LouvainParams
from ppinet.pipeline import PPIAnalysisPipeline


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    if args.config is not None:
        with args.config.open(encoding="utf-8") as f:
            return AnalysisConfig.from_mapping(json.load(f))

    if args.string_db:
        config = AnalysisConfig.for_string_db(min_score=args.min_score)
    else:
        config = AnalysisConfig(delimiter=args.delimiter, has_header=not args.no_header)

    config.graph = GraphConfig(allow_self_loops=args.allow_self_loops, duplicates=args.duplicates)
    config.louvain = LouvainParams(
        resolution=args.resolution,
        tolerance=args.tolerance,
        max_passes=args.max_passes,
    )
    config.betweenness_workers = args.workers
    config.show_progress = args.progress
    return config


def main():
    # Default root path
    default_root = Path(__file__).parents[1] / "datasets"

    parser = argparse.ArgumentParser(description="Run PPI community and centrality analysis.")
    parser.add_argument(
        "edges_path",
        type=Path,
        help="Edge list with one interaction per line (protein_a, protein_b, ...)",
    )
    parser.add_argument(
        "--output_dir",
        type=Path,
        default=default_root / "results",
        help=f"Directory for result files (default: {default_root / 'results'})",
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--delimiter", default="\t", help="Field separator (default: tab)")
    parser.add_argument("--no_header", action="store_true", help="Edge list has no header row")
    parser.add_argument(
        "--string_db",
        action="store_true",
        help="Input is a STRING protein.links file (space separated, scored)",
    )
    parser.add_argument(
        "--min_score",
        type=float,
        default=700,
        help="Minimum STRING combined score (default: 700)",
    )
    parser.add_argument(
        "--resolution",
        type=float,
        default=1.0,
        help="Louvain resolution (default: 1.0)",
    )
    parser.add_argument("--max_passes", type=int, default=None, help="Cap on Louvain levels")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=1e-9,
        help="Minimum modularity gain for a further Louvain level (default: 1e-9)",
    )
    parser.add_argument("--allow_self_loops", action="store_true", help="Keep self-interactions")
    parser.add_argument(
        "--duplicates",
        choices=["collapse", "sum"],
        default="collapse",
        help="How repeated interactions are handled (default: collapse)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads for betweenness centrality (default: 1)",
    )
    parser.add_argument("--progress", action="store_true", help="Show progress bars")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger(__name__)

    try:
        pipeline = PPIAnalysisPipeline(
            edges_path=args.edges_path,
            output_dir=args.output_dir,
            config=build_config(args),
        )
        pipeline.run()
    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
