"""
K-means clustering of fixed numeric datasets with Lloyd's algorithm.
"""

from .distance import euclidean_distance, pairwise_distances
from .errors import KMeansError, NumericError, ParseError, PreconditionError
from .init import generate_percentile_kernels, init_kernels, pick_random_kernels
from .kmeans import ClusteringResult, IterationInfo, KMeans, compute_inertia, k_means, lloyd
from .version import __version__

__all__ = [
    "KMeans",
    "k_means",
    "lloyd",
    "ClusteringResult",
    "IterationInfo",
    "compute_inertia",
    "euclidean_distance",
    "pairwise_distances",
    "pick_random_kernels",
    "generate_percentile_kernels",
    "init_kernels",
    "KMeansError",
    "NumericError",
    "PreconditionError",
    "ParseError",
]
