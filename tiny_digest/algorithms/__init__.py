"""
Algorithm implementations for tiny-digest.
"""

from tiny_digest.algorithms.centroid import Centroid, merge_centroids
from tiny_digest.algorithms.compaction import compress, compress_by_scale, scale_function
from tiny_digest.algorithms.oracle import Oracle
from tiny_digest.algorithms.quantile_sketch import ScaledTDigest, TDigest

__all__ = [
    "Centroid",
    "merge_centroids",
    "scale_function",
    "compress",
    "compress_by_scale",
    "TDigest",
    "ScaledTDigest",
    "Oracle",
]
