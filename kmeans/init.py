"""
Initial kernel (centroid) selection.

Two strategies are available:
- ``random``: k distinct rows drawn uniformly from the data.
- ``percentile``: per dimension, k evenly spaced order statistics of that
  dimension's values. A kernel's components may come from different rows.
"""

from typing import Optional, Union

import numpy as np

from .errors import PreconditionError

RandomState = Optional[Union[int, np.random.Generator]]

INIT_METHODS = ("random", "percentile", "generate")


def check_dataset(data) -> np.ndarray:
    """Return ``data`` as an (n, m) float64 matrix, validating shape and values."""
    try:
        X = np.asarray(data, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise PreconditionError(f"Data is not a numeric matrix: {exc}") from exc

    if X.ndim != 2:
        raise PreconditionError("Data must be a 2-D matrix of rows", {"shape": X.shape})
    n, m = X.shape
    if n < 1:
        raise PreconditionError("Data must contain at least one row", {"n": n})
    if m < 1:
        raise PreconditionError("Rows must contain at least one column", {"m": m})
    if not np.all(np.isfinite(X)):
        row = int(np.argwhere(~np.isfinite(X))[0][0])
        raise PreconditionError("Data contains non-finite values", {"row": row, "values": X[row]})
    return X


def check_k(k, n: Optional[int] = None) -> int:
    """Validate the cluster count; with ``n`` also require k distinct rows."""
    if isinstance(k, bool) or int(k) != k:
        raise PreconditionError(f"Number of clusters must be an integer, got {k!r}")
    k = int(k)
    if k < 1:
        raise PreconditionError("Number of clusters must be at least 1", {"k": k})
    if n is not None and k > n:
        raise PreconditionError(
            f"Cannot pick {k} distinct kernels from {n} rows", {"k": k, "n": n}
        )
    return k


def pick_random_kernels(data: np.ndarray, k: int, random_state: RandomState = None) -> np.ndarray:
    """
    Select k distinct rows uniformly at random and copy them into new kernels.

    Args:
        data: Matrix of shape (n, m)
        k: Number of kernels, must not exceed n
        random_state: Seed or ``numpy.random.Generator``

    Returns:
        Kernels of shape (k, m), independent of ``data``.
    """
    data = check_dataset(data)
    n = data.shape[0]
    k = check_k(k, n)
    rng = np.random.default_rng(random_state)

    chosen = []
    while len(chosen) < k:
        row = int(rng.integers(n))
        # Duplicate kernels would never separate, so redraw.
        if row not in chosen:
            chosen.append(row)

    return np.array(data[chosen], dtype=np.float64, copy=True)


def generate_percentile_kernels(data: np.ndarray, k: int) -> np.ndarray:
    """
    Build k kernels from evenly spaced per-dimension order statistics.

    For dimension d the values are sorted (on a private copy) and kernel i
    takes the value at pivot ``int(2i / 2k * n)``. Deterministic.
    """
    data = check_dataset(data)
    n, m = data.shape
    k = check_k(k)

    pivots = [int((2.0 * i) / (2.0 * k) * n) for i in range(k)]
    kernels = np.empty((k, m), dtype=np.float64)
    for d in range(m):
        column = np.sort(data[:, d])
        kernels[:, d] = column[pivots]
    return kernels


def init_kernels(data: np.ndarray, k: int, init: str = "random", random_state: RandomState = None) -> np.ndarray:
    """Produce k initial kernels with the named strategy."""
    if init == "random":
        return pick_random_kernels(data, k, random_state)
    elif init in ("percentile", "generate"):
        return generate_percentile_kernels(data, k)
    else:
        raise ValueError(f"Unknown initialization method: {init}")
