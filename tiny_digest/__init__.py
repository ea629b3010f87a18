"""
tiny-digest - Streaming Quantile Estimation

tiny-digest is a Python library for estimating quantiles of unbounded data
streams with a t-digest, using memory far smaller than the stream itself.
"""

__version__ = "0.1.0"

# Import main classes to make them available at the top level
from tiny_digest.algorithms.oracle import Oracle
from tiny_digest.algorithms.quantile_sketch import ScaledTDigest, TDigest
from tiny_digest.core.base import QuantileEstimator

__all__ = [
    # Core base classes
    "QuantileEstimator",
    # Algorithm implementations
    "TDigest",
    "ScaledTDigest",
    # Exact reference
    "Oracle",
]
