"""
Core functionality for tiny-digest.
"""

from tiny_digest.core.base import QuantileEstimator
from tiny_digest.core.log import get_logger

__all__ = [
    # Base classes
    "QuantileEstimator",
    # Utility functions
    "get_logger",
]
