"""
Euclidean distance with checks against impossible numeric results.
"""

import numpy as np

from .errors import NumericError, PreconditionError


def _numeric_failure(p: np.ndarray, q: np.ndarray, sum_sq: float, out: float) -> NumericError:
    if sum_sq < 0:
        message = f"Sum of squares was negative ({sum_sq!r})"
    else:
        message = (
            f"Distance was NaN (sum of squares {sum_sq!r}, root {out!r}); "
            "the input vectors were probably at fault"
        )
    return NumericError(message, {"p": np.array(p), "q": np.array(q), "sum": sum_sq, "distance": out})


def euclidean_distance(p, q) -> float:
    """
    Euclidean distance ``sqrt(sum((p_i - q_i) ** 2))`` between two vectors.

    Args:
        p: First vector of length m
        q: Second vector of length m

    Returns:
        The non-negative distance.

    Raises:
        NumericError: If the sum of squares is negative or the result is NaN.
    """
    p = np.asarray(p, dtype=np.float64)
    q = np.asarray(q, dtype=np.float64)
    if p.shape != q.shape or p.ndim != 1:
        raise PreconditionError(
            "Distance requires two vectors of equal length",
            {"p_shape": p.shape, "q_shape": q.shape},
        )
    diff = p - q
    sum_sq = float(np.sum(diff * diff))
    if sum_sq < 0:
        raise _numeric_failure(p, q, sum_sq, float("nan"))
    out = float(np.sqrt(sum_sq))
    if out != out:
        raise _numeric_failure(p, q, sum_sq, out)
    return out


def pairwise_distances(data: np.ndarray, kernels: np.ndarray) -> np.ndarray:
    """
    Distances from every row of ``data`` to every kernel, shape (n, k).

    The first offending (row, kernel) pair in row-major order is reported,
    i.e. the same pair a row-by-row, kernel-by-kernel loop would reach first.
    """
    # (n, 1, m) - (1, k, m) -> (n, k, m)
    diff = data[:, np.newaxis, :] - kernels[np.newaxis, :, :]
    sums = np.sum(diff * diff, axis=2)

    bad = (sums < 0) | np.isnan(sums)
    if bad.any():
        row, kernel = np.argwhere(bad)[0]
        sum_sq = float(sums[row, kernel])
        raise _numeric_failure(data[row], kernels[kernel], sum_sq, float("nan"))

    return np.sqrt(sums)
