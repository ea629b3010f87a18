"""
Base interface for tiny-digest quantile estimators.

This module defines the abstract base class that every quantile estimator
implements, so drivers and verification harnesses can feed observations and
read quantiles without knowing which compaction policy sits underneath.
It also carries the introspection hooks used when benchmarking.
"""

import abc
import sys
from typing import Any, Dict, Optional


class QuantileEstimator(abc.ABC):
    """
    Abstract base class for streaming quantile estimators.

    Implementations accept scalar observations one at a time through ``add``
    and answer approximate quantile queries through ``estimate``. Both calls
    run to completion synchronously; an estimator is not safe for concurrent
    mutation.
    """

    def __init__(self, memory_limit_bytes: Optional[int] = None):
        """
        Initialize the shared bookkeeping.

        Args:
            memory_limit_bytes: Optional maximum memory usage in bytes.
                                None means no explicit limit.
        """
        self._memory_limit_bytes = memory_limit_bytes
        self._items_processed = 0

    @abc.abstractmethod
    def add(self, x: float) -> None:
        """
        Add one observation to the estimator.

        Args:
            x: A finite real value.
        """
        self._items_processed += 1

    @abc.abstractmethod
    def estimate(self, q: float) -> float:
        """
        Estimate the value at quantile ``q``.

        Args:
            q: Quantile in [0, 1].

        Returns:
            The estimated value.
        """

    @abc.abstractmethod
    def merge(self, other: "QuantileEstimator") -> "QuantileEstimator":
        """
        Combine this estimator with another of the same type.

        Args:
            other: Another estimator of the same type.

        Returns:
            A new estimator summarizing both inputs.

        Raises:
            TypeError: If other is not of the same type.
        """

    def _check_same_type(self, other: "QuantileEstimator") -> None:
        """
        Raise TypeError unless ``other`` is an instance of this class.
        """
        if not isinstance(other, self.__class__):
            raise TypeError(f"Cannot merge with {other.__class__.__name__}")

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of this estimator in bytes.

        Accounts for the object itself and its instance dictionary. Derived
        classes add the size of their own containers.

        Returns:
            Estimated memory usage in bytes.
        """
        size = sys.getsizeof(self)
        if hasattr(self, "__dict__"):
            size += sys.getsizeof(self.__dict__)
        return size

    def check_memory_limit(self) -> bool:
        """
        Check whether the current memory usage is within the configured limit.

        Returns:
            True if no limit is set or usage is within it, False otherwise.
        """
        if self._memory_limit_bytes is None:
            return True

        return self.estimate_size() <= self._memory_limit_bytes

    def clear(self) -> None:
        """
        Reset the base counters. Derived classes clear their own state and
        call super().clear().
        """
        self._items_processed = 0

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the current state of the estimator.

        Derived classes extend the dictionary with algorithm-specific entries.

        Returns:
            A dictionary of statistics.
        """
        stats: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "items_processed": self._items_processed,
            "memory_bytes": self.estimate_size(),
        }

        if self._memory_limit_bytes is not None:
            stats["memory_limit_bytes"] = self._memory_limit_bytes
            stats["memory_usage_pct"] = (
                self.estimate_size() / self._memory_limit_bytes
            ) * 100

        error_bounds = self.error_bounds()
        if error_bounds:
            stats.update(error_bounds)

        return stats

    def error_bounds(self) -> Dict[str, Any]:
        """
        Get the theoretical error characteristics of this estimator.

        The base implementation returns an empty dictionary.
        """
        return {}

    @property
    def items_processed(self) -> int:
        """Get the total number of observations added."""
        return self._items_processed
