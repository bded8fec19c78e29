"""
K-means clustering with Lloyd's algorithm.

Each iteration snapshots the kernels, assigns every row to its nearest kernel,
moves every followed kernel to the mean of its followers and measures the
total kernel movement. The loop stops once the movement drops below the
tolerance or the iteration cap is reached.
"""

import sys
from dataclasses import dataclass
from typing import Callable, Optional, Union

import numpy as np

from .distance import euclidean_distance, pairwise_distances
from .errors import NumericError, PreconditionError
from .init import RandomState, check_dataset, init_kernels

DBL_EPSILON = float(np.finfo(np.float64).eps)
MAX_ITERATIONS = 2500


@dataclass
class IterationInfo:
    """Snapshot handed to an iteration callback."""
    iteration: int
    labels: np.ndarray
    kernels: np.ndarray
    movement: float


@dataclass
class ClusteringResult:
    """
    Outcome of one clustering run. The arrays belong to the caller.

    ``converged`` is False when the run stopped at the iteration cap.
    """
    labels: np.ndarray
    kernels: np.ndarray
    n_iter: int
    converged: bool
    movement: float


@dataclass
class RunContext:
    """Working state owned by a single clustering run."""
    kernels: np.ndarray
    previous: np.ndarray
    sums: np.ndarray
    counts: np.ndarray
    labels: np.ndarray

    @classmethod
    def create(cls, kernels: np.ndarray, n_rows: int) -> "RunContext":
        k, m = kernels.shape
        return cls(
            kernels=kernels,
            previous=np.empty_like(kernels),
            sums=np.zeros((k, m), dtype=np.float64),
            counts=np.zeros(k, dtype=np.int64),
            labels=np.zeros(n_rows, dtype=np.intp),
        )

    def snapshot(self) -> None:
        self.previous[...] = self.kernels

    def reset(self) -> None:
        self.sums.fill(0.0)
        self.counts.fill(0)


def assign(data: np.ndarray, ctx: RunContext) -> None:
    """Assign every row to its nearest kernel and accumulate follower sums."""
    k = ctx.kernels.shape[0]
    distances = pairwise_distances(data, ctx.kernels)
    # argmin returns the first minimum: ties go to the lowest kernel index.
    labels = np.argmin(distances, axis=1)
    ctx.labels[:] = labels
    ctx.counts += np.bincount(labels, minlength=k)
    np.add.at(ctx.sums, labels, data)


def update(ctx: RunContext) -> None:
    """Move each followed kernel to its followers' mean; others stay put."""
    followed = ctx.counts > 0
    ctx.kernels[followed] = ctx.sums[followed] / ctx.counts[followed, np.newaxis]


def kernel_movement(previous: np.ndarray, kernels: np.ndarray) -> float:
    """Sum of the distances each kernel moved."""
    movement = 0.0
    for ki in range(kernels.shape[0]):
        prev_movement = movement
        current = euclidean_distance(previous[ki], kernels[ki])
        movement += current
        if not np.isfinite(movement):
            raise NumericError(
                f"Movement was {movement!r}",
                {"kernel": ki, "previous_movement": prev_movement, "current_movement": current},
            )
    return movement


def _check_kernels(kernels, m: int) -> np.ndarray:
    K = np.array(kernels, dtype=np.float64, copy=True)
    if K.ndim != 2 or K.shape[0] < 1 or K.shape[1] != m:
        raise PreconditionError(
            f"Kernels must have shape (k, {m})", {"shape": K.shape}
        )
    if not np.all(np.isfinite(K)):
        raise PreconditionError("Kernels contain non-finite values")
    return K


def lloyd(
    data,
    kernels,
    max_iter: int = MAX_ITERATIONS,
    tol: float = DBL_EPSILON,
    callback: Optional[Callable[[IterationInfo], None]] = None,
    verbose: bool = False,
) -> ClusteringResult:
    """
    Run Lloyd iterations from the given starting kernels.

    Args:
        data: Matrix of shape (n, m) with finite values
        kernels: Starting kernels of shape (k, m); copied, never mutated
        max_iter: Iteration cap
        tol: Stop once total kernel movement falls below this
        callback: Called with an ``IterationInfo`` after every iteration
        verbose: Print progress to stderr

    Returns:
        ClusteringResult
    """
    X = check_dataset(data)
    n, m = X.shape
    if max_iter < 1:
        raise PreconditionError("max_iter must be at least 1", {"max_iter": max_iter})

    ctx = RunContext.create(_check_kernels(kernels, m), n)
    movement = float("inf")
    iteration = 0

    while movement >= tol and iteration < max_iter:
        ctx.snapshot()
        ctx.reset()
        assign(X, ctx)
        update(ctx)
        movement = kernel_movement(ctx.previous, ctx.kernels)
        iteration += 1

        if callback is not None:
            callback(IterationInfo(iteration, ctx.labels.copy(), ctx.kernels.copy(), movement))
        if verbose and iteration % 50 == 0:
            print(f"Iteration {iteration}, movement: {movement:.6g}", file=sys.stderr)

    converged = movement < tol
    if verbose:
        state = "Converged" if converged else "Iteration limit reached"
        print(f"{state} after {iteration} iterations (movement {movement:.6g})", file=sys.stderr)

    return ClusteringResult(
        labels=ctx.labels,
        kernels=ctx.kernels,
        n_iter=iteration,
        converged=converged,
        movement=movement,
    )


def k_means(
    k: int,
    data,
    generate_kernels: bool = False,
    random_state: RandomState = None,
    max_iter: int = MAX_ITERATIONS,
    tol: float = DBL_EPSILON,
    verbose: bool = False,
) -> ClusteringResult:
    """
    Cluster ``data`` into ``k`` groups.

    Args:
        k: Number of clusters
        data: Matrix of shape (n, m) with finite values
        generate_kernels: Use percentile kernels instead of random rows
        random_state: Seed or generator for random kernel selection

    Returns:
        ClusteringResult whose ``labels`` hold one kernel index per row.
    """
    X = check_dataset(data)
    init = "percentile" if generate_kernels else "random"
    kernels = init_kernels(X, k, init, random_state)
    return lloyd(X, kernels, max_iter=max_iter, tol=tol, verbose=verbose)


def compute_inertia(data, labels, kernels) -> float:
    """Within-cluster sum of squared distances."""
    X = np.asarray(data, dtype=np.float64)
    assigned = np.asarray(kernels, dtype=np.float64)[np.asarray(labels)]
    return float(np.sum((X - assigned) ** 2))


class KMeans:
    """
    K-means clustering estimator.

    Features:
    - Random-row or percentile initialization, or caller-supplied kernels
    - Stops when total kernel movement falls below ``tol``
    - Kernels without followers keep their position
    """

    def __init__(
        self,
        n_clusters: int,
        max_iter: int = MAX_ITERATIONS,
        tol: float = DBL_EPSILON,
        init: Union[str, np.ndarray] = "random",
        random_state: RandomState = None,
        verbose: bool = False
    ):
        """
        Initialize K-means clustering.

        Args:
            n_clusters: Number of clusters
            max_iter: Maximum number of iterations
            tol: Movement below which the kernels count as converged
            init: 'random', 'percentile' or an array of starting kernels
            random_state: Random seed for reproducibility
            verbose: Whether to print progress information
        """
        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.tol = tol
        self.init = init
        self.random_state = random_state
        self.verbose = verbose

        # Results
        self.cluster_centers_ = None
        self.labels_ = None
        self.inertia_ = None
        self.n_iter_ = None
        self.converged_ = None

    def _init_centroids(self, X: np.ndarray) -> np.ndarray:
        if isinstance(self.init, str):
            return init_kernels(X, self.n_clusters, self.init, self.random_state)
        kernels = _check_kernels(self.init, X.shape[1])
        if kernels.shape[0] != self.n_clusters:
            raise PreconditionError(
                f"Expected {self.n_clusters} initial kernels, got {kernels.shape[0]}"
            )
        return kernels

    def fit(self, X) -> "KMeans":
        """
        Fit K-means clustering to the data.

        Args:
            X: Input data of shape (n_samples, n_features)

        Returns:
            self
        """
        X = check_dataset(X)

        if self.verbose:
            print(
                f"Fitting K-means with {self.n_clusters} clusters on {X.shape[0]} samples...",
                file=sys.stderr,
            )

        result = lloyd(
            X,
            self._init_centroids(X),
            max_iter=self.max_iter,
            tol=self.tol,
            verbose=self.verbose,
        )

        self.cluster_centers_ = result.kernels
        self.labels_ = result.labels
        self.n_iter_ = result.n_iter
        self.converged_ = result.converged
        self.inertia_ = compute_inertia(X, result.labels, result.kernels)
        return self

    def predict(self, X) -> np.ndarray:
        """Nearest fitted kernel for each row of ``X``."""
        if self.cluster_centers_ is None:
            raise ValueError("Model must be fitted before prediction")
        X = check_dataset(X)
        if X.shape[1] != self.cluster_centers_.shape[1]:
            raise PreconditionError(
                "Feature count does not match the fitted kernels",
                {"expected": self.cluster_centers_.shape[1], "got": X.shape[1]},
            )
        return np.argmin(pairwise_distances(X, self.cluster_centers_), axis=1)

    def fit_predict(self, X) -> np.ndarray:
        return self.fit(X).labels_

    def get_cluster_info(self) -> dict:
        """Get information about the clustering results."""
        if self.cluster_centers_ is None:
            raise ValueError("Model must be fitted first")

        sizes = np.bincount(self.labels_, minlength=self.n_clusters)

        return {
            'n_clusters': self.n_clusters,
            'inertia': self.inertia_,
            'n_iterations': self.n_iter_,
            'converged': self.converged_,
            'cluster_sizes': {int(i): int(s) for i, s in enumerate(sizes)},
            'empty_clusters': int(np.sum(sizes == 0)),
            'min_cluster_size': int(sizes.min()),
            'max_cluster_size': int(sizes.max()),
        }
