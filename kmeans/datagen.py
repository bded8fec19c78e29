"""
Random test data for the clustering command.

Usage:
    kmeans-gen 1000 4 > data.csv
"""

import argparse
import sys
from typing import TextIO

import numpy as np

from .init import RandomState


def generate_rows(n_rows: int, n_cols: int, random_state: RandomState = None) -> np.ndarray:
    """
    Generate an (n_rows, n_cols) matrix of values ``p * q``.

    ``p`` is uniform on [0, 1) and ``q`` uniform on [0, 10), which skews the
    values towards zero.
    """
    if n_rows < 1 or n_cols < 1:
        raise ValueError("Rows and columns must both be at least 1")
    rng = np.random.default_rng(random_state)
    p = rng.random((n_rows, n_cols))
    q = rng.random((n_rows, n_cols)) * 10.0
    return p * q


def write_rows(rows: np.ndarray, stream: TextIO, field_separator: str = ",") -> None:
    for row in rows:
        stream.write(field_separator.join(f"{value:f}" for value in row))
        stream.write("\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="kmeans-gen", description="Generate random columnar test data.")
    parser.add_argument("rows", type=int, help="number of rows")
    parser.add_argument("cols", type=int, help="number of columns")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    try:
        rows = generate_rows(args.rows, args.cols, args.seed)
    except ValueError as exc:
        parser.error(str(exc))
    write_rows(rows, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
