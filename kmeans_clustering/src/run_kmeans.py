import argparse
import logging
import os
import sys

from config import (
    DEFAULT_MAX_ITERS,
    DEFAULT_TOL,
    DEFAULT_SEED,
    DEFAULT_DELIMITER,
    DEFAULT_MAX_FIELDS,
)
from data import DataLoadError, load_points
from clustering import KMeans, InvalidClusterCountError, kmeans_std
from report import save_report, save_json_report
from utils import make_rng
from visualize import save_clusters_plot

logger = logging.getLogger(__name__)

MANUAL = """Simple K-Means Program

Usage:
 kmeans-cluster -i Iris.csv -o out.txt -k 3
"""


class UsageParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser():
    parser = UsageParser(
        prog="kmeans-cluster",
        description="Lloyd's k-means clustering for delimited numeric data",
    )
    parser.add_argument("-i", dest="input", required=True, help="Input file (first line is a header)")
    parser.add_argument("-o", dest="output", required=True, help="Output text report")
    parser.add_argument("-k", dest="k", type=int, required=True, help="Number of clusters")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--delimiter", default=DEFAULT_DELIMITER)
    parser.add_argument(
        "--max-fields",
        type=int,
        default=DEFAULT_MAX_FIELDS,
        help="Only read the first N fields of each line",
    )
    parser.add_argument("--max-iters", type=int, default=DEFAULT_MAX_ITERS)
    parser.add_argument("--tol", type=float, default=DEFAULT_TOL)
    parser.add_argument("--json", dest="json_path", default=None, help="Optional JSON summary path")
    parser.add_argument("--plot", dest="plot_path", default=None, help="Optional cluster plot (.png)")
    parser.add_argument("--progress", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser


def parse_args(argv):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.k <= 0:
        parser.error(f"-k must be positive, got {args.k}")
    if args.max_fields is not None and args.max_fields <= 0:
        parser.error(f"--max-fields must be positive, got {args.max_fields}")
    if args.max_iters <= 0:
        parser.error(f"--max-iters must be positive, got {args.max_iters}")
    if not args.delimiter:
        parser.error("--delimiter must not be empty")
    return args


def build_summary(args, dataset, model):
    return {
        "input": args.input,
        "output": args.output,
        "k": model.k,
        "dimensions": dataset.dimensions,
        "points": len(dataset),
        "skipped": dataset.skipped,
        "seed": args.seed,
        "iterations": model.iterations,
        "state": model.state.value,
        "converged": model.converged,
        "inertia": model.inertia,
        "kmeans_std": kmeans_std(dataset.points, dataset.labels, model.centroids),
        "centroids": model.centroids.tolist(),
    }


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        print(MANUAL)
        return 0

    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        dataset = load_points(args.input, args.delimiter, args.max_fields)
    except DataLoadError as exc:
        print(exc)
        return 1

    print(f"Loaded points: {len(dataset)}")
    print(f"Detected dimensions: {dataset.dimensions}")
    if dataset.skipped:
        print(f"Skipped lines: {dataset.skipped}")

    try:
        model = KMeans(
            dataset,
            args.k,
            rng=make_rng(args.seed),
            max_iters=args.max_iters,
            tol=args.tol,
            progress=args.progress,
        )
    except InvalidClusterCountError as exc:
        print(f"Error: {exc}")
        return 1

    model.run()
    if model.converged:
        print(f"Converged after {model.iterations} iterations")
    else:
        print(f"Stopped after {model.iterations} iterations without converging")

    if save_report(args.output, dataset, model.centroids):
        print(f"Saved report to {args.output}")

    if args.json_path:
        if save_json_report(args.json_path, build_summary(args, dataset, model)):
            print(f"Saved JSON summary to {args.json_path}")

    if args.plot_path:
        try:
            os.makedirs(os.path.dirname(args.plot_path) or ".", exist_ok=True)
            save_clusters_plot(dataset.points, dataset.labels, model.centroids, args.plot_path)
        except OSError as exc:
            print(f"Cannot write plot file: {args.plot_path}")
            logger.warning("Failed to write plot to %s: %s", args.plot_path, exc)
        else:
            print(f"Saved cluster plot to {args.plot_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
