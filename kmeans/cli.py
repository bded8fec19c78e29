"""
Command-line front end.

Reads columnar data from stdin (or ``--input``), clusters the selected
columns into k groups and prints one cluster id per row to stdout.

Usage:
    kmeans -k 3 -g 0-3 < data.csv > clusters.txt
"""

import argparse
import io
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import KMeansError
from .kmeans import DBL_EPSILON, MAX_ITERATIONS, k_means
from .reader import parse_columns, read_dataset


@dataclass
class KMeansConfig:
    """Settings for one command-line clustering run."""
    k: int = 2
    columns: List[int] = field(default_factory=list)
    generate_kernels: bool = False
    ignore_header: bool = False
    fail_on_errors: bool = False
    field_separator: str = ","
    decimal_separator: str = "."
    input_path: Optional[str] = None
    seed: Optional[int] = None
    max_iter: int = MAX_ITERATIONS
    tol: float = DBL_EPSILON
    verbose: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "KMeansConfig":
        decimal_separator = args.decimal_separator
        if len(decimal_separator) != 1:
            print(
                f"WARNING: decimal separator should only be a single char, but was '{decimal_separator}'.",
                file=sys.stderr,
            )
            decimal_separator = decimal_separator[:1] or "."
        return cls(
            k=args.k,
            columns=parse_columns(args.columns),
            generate_kernels=args.generate_kernels,
            ignore_header=args.ignore_header,
            fail_on_errors=args.fail_on_errors,
            field_separator=args.field_separator,
            decimal_separator=decimal_separator,
            input_path=args.input,
            seed=args.seed,
            max_iter=args.max_iter,
            verbose=args.verbose,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kmeans",
        description="Cluster columnar data into k classes using k-means.",
        epilog=(
            "Kernels are picked randomly from the data rows, or generated from "
            "per-column percentiles with -g. Rows that cannot be parsed are "
            "discarded unless -e is given."
        ),
    )
    parser.add_argument("-k", type=int, default=2, help="number of kernels (clusters)")
    parser.add_argument("-g", "--generate-kernels", action="store_true",
                        help="generate kernels from per-column percentiles")
    parser.add_argument("-i", "--ignore-header", action="store_true",
                        help="skip the first line and print a header line")
    parser.add_argument("-e", "--fail-on-errors", action="store_true",
                        help="fail on rows that cannot be parsed")
    parser.add_argument("-f", dest="field_separator", default=",",
                        help="field separator, may be several characters")
    parser.add_argument("-n", dest="decimal_separator", default=".",
                        help="decimal separator character")
    parser.add_argument("--input", default=None, help="read from this file instead of stdin")
    parser.add_argument("--seed", type=int, default=None, help="seed for random kernel selection")
    parser.add_argument("--max-iter", type=int, default=MAX_ITERATIONS, help="iteration cap")
    parser.add_argument("-v", "--verbose", action="store_true", help="print progress to stderr")
    parser.add_argument("columns", nargs="+", help="column indices or ranges, e.g. 0 2 or 0-9")
    return parser


def run(config: KMeansConfig, stdin=None, stdout=None) -> int:
    """Execute one clustering run; returns the process exit status."""
    if stdin is None:
        stdin = io.TextIOWrapper(sys.stdin.buffer, errors="replace")
    if stdout is None:
        stdout = sys.stdout

    try:
        if config.input_path is not None:
            with open(config.input_path, "r", errors="replace") as f:
                header, data = _read(config, f)
        else:
            header, data = _read(config, stdin)

        if len(data) == 0:
            print("No rows could be read from the input", file=sys.stderr)
            return 1

        result = k_means(
            config.k,
            data,
            generate_kernels=config.generate_kernels,
            random_state=config.seed,
            max_iter=config.max_iter,
            tol=config.tol,
            verbose=config.verbose,
        )
    except KMeansError as exc:
        print(exc.describe(), file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Could not read input: {exc}", file=sys.stderr)
        return 1

    if header is not None:
        stdout.write("kernel\n")
    for label in result.labels:
        stdout.write(f"{label}\n")
    return 0


def _read(config: KMeansConfig, stream):
    return read_dataset(
        stream,
        config.columns,
        field_separator=config.field_separator,
        decimal_separator=config.decimal_separator,
        ignore_header=config.ignore_header,
        fail_on_errors=config.fail_on_errors,
        verbose=config.verbose,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = KMeansConfig.from_args(args)
    except ValueError as exc:
        parser.error(str(exc))
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
