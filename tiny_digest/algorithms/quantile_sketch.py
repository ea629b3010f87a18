# tiny_digest/algorithms/quantile_sketch.py

import abc
import logging
import math
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar

from tiny_digest.algorithms.centroid import Centroid
from tiny_digest.algorithms.compaction import compress, compress_by_scale
from tiny_digest.algorithms.oracle import Oracle
from tiny_digest.core.base import QuantileEstimator

logger = logging.getLogger(__name__)

DigestType = TypeVar("DigestType", bound="_BufferedDigest")

DEFAULT_QUANTILES = (0.001, 0.01, 0.05, 0.1, 0.25, 0.5, 0.75, 0.9, 0.95, 0.99, 0.999)


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _interpolate(x1: float, x2: float, fraction: float) -> float:
    """Linear interpolation from x1 (fraction 0) to x2 (fraction 1)."""
    return x1 + (x2 - x1) * fraction


class _BufferedDigest(QuantileEstimator):
    """
    Shared machinery for t-digest variants.

    Observations are appended to a raw buffer and folded into a sorted array
    of centroids when the buffer fills up, or before any read. Subclasses
    only choose the compaction policy through ``_compress``.

    The exact minimum and maximum are tracked on every ``add`` and anchor the
    interpolation at both tails, so ``estimate(0.0)`` and ``estimate(1.0)``
    are exact.
    """

    DEFAULT_BUFFER_SIZE: int = 1000

    def __init__(
        self,
        max_buffer_size: int = DEFAULT_BUFFER_SIZE,
        memory_limit_bytes: Optional[int] = None,
    ):
        super().__init__(memory_limit_bytes=memory_limit_bytes)
        if (
            not isinstance(max_buffer_size, int)
            or isinstance(max_buffer_size, bool)
            or max_buffer_size < 1
        ):
            raise ValueError(
                f"max_buffer_size must be a positive integer, got {max_buffer_size!r}"
            )

        self.max_buffer_size: int = max_buffer_size
        self._centroids: List[Centroid] = []
        self._buffer: List[float] = []

        self.total_weight: float = 0.0
        self._min_val: Optional[float] = None
        self._max_val: Optional[float] = None

    @abc.abstractmethod
    def _compress(self, centroids: List[Centroid]) -> List[Centroid]:
        pass

    @abc.abstractmethod
    def _compaction_parameter(self) -> Tuple[str, float]:
        """Name and value of the parameter that two merged digests must share."""
        pass

    @abc.abstractmethod
    def _empty_copy(self: DigestType) -> DigestType:
        pass

    def add(self, x: float) -> None:
        """
        Add an observation to the digest.

        The value goes to the buffer; a full buffer is compacted before this
        call returns.

        Args:
            x: Finite real value.

        Raises:
            ValueError: If x is not a finite real number.
        """
        if not _is_real(x) or not math.isfinite(x):
            raise ValueError(f"Observation must be a finite real number, got {x!r}")

        super().add(x)

        x = float(x)
        self._buffer.append(x)

        if self._min_val is None or x < self._min_val:
            self._min_val = x
        if self._max_val is None or x > self._max_val:
            self._max_val = x

        if len(self._buffer) >= self.max_buffer_size:
            self.flush()

    def flush(self) -> None:
        """
        Fold buffered observations into the centroid array.

        Calling this with an empty buffer is a no-op.
        """
        if not self._buffer:
            return

        pending = [Centroid.single(x) for x in self._buffer]
        self.total_weight += len(self._buffer)
        self._buffer = []

        self._centroids = self._compress(self._centroids + pending)
        logger.debug(
            "Flushed %d observations, %d centroids now cover weight %s",
            len(pending),
            len(self._centroids),
            self.total_weight,
        )

    def estimate(self, q: float) -> float:
        """
        Estimate the value at the given quantile.

        Args:
            q: Target quantile between 0.0 and 1.0.
               0.0 returns the minimum value.
               0.5 returns the estimated median.
               1.0 returns the maximum value.

        Returns:
            Estimated value at the specified quantile. Returns NaN
            if the digest is empty.

        Raises:
            ValueError: If q is not a number between 0.0 and 1.0.
        """
        if not _is_real(q) or not 0.0 <= q <= 1.0:
            raise ValueError(f"Quantile must be between 0.0 and 1.0, got {q!r}")

        self.flush()

        centroids = self._centroids
        if not centroids:
            return float("nan")
        if q <= 0.0:
            return self._min_val
        if q >= 1.0:
            return self._max_val
        if len(centroids) == 1:
            return centroids[0].mean

        # Position the target would have in the fully sorted stream
        index = q * self.total_weight

        # Left tail: between the minimum and the first centroid's mean
        first = centroids[0]
        if index < first.weight / 2.0:
            return _interpolate(
                self._min_val, first.mean, index / (first.weight / 2.0)
            )

        # Each gap between neighbours spans half of each neighbour's weight
        weight_so_far = first.weight / 2.0
        for left, right in zip(centroids, centroids[1:]):
            dw = (left.weight + right.weight) / 2.0
            if weight_so_far + dw > index:
                return _interpolate(left.mean, right.mean, (index - weight_so_far) / dw)
            weight_so_far += dw

        # Right tail: between the last centroid's mean and the maximum
        last = centroids[-1]
        half = last.weight / 2.0
        fraction = min(1.0, max(0.0, (index - weight_so_far) / half))
        return _interpolate(last.mean, self._max_val, fraction)

    def merge(self: DigestType, other: DigestType) -> DigestType:
        """
        Merge this digest with another of the same type.

        Creates a new digest summarizing the data from both inputs by running
        both centroid arrays through one compaction pass. The inputs have their
        buffers flushed but are otherwise left unchanged.

        Args:
            other: Another digest of the same class and compaction parameter.

        Returns:
            A new digest containing data from both inputs.

        Raises:
            TypeError: If 'other' is not the same type.
            ValueError: If the compaction parameters don't match.
        """
        self._check_same_type(other)

        name, value = self._compaction_parameter()
        _, other_value = other._compaction_parameter()
        if value != other_value:
            raise ValueError(
                f"Cannot merge {self.__class__.__name__} digests with different "
                f"{name}: {value} != {other_value}"
            )

        self.flush()
        other.flush()

        merged = self._empty_copy()
        merged._centroids = merged._compress(self._centroids + other._centroids)
        merged.total_weight = self.total_weight + other.total_weight
        merged._items_processed = self.items_processed + other.items_processed

        mins = [v for v in (self._min_val, other._min_val) if v is not None]
        maxs = [v for v in (self._max_val, other._max_val) if v is not None]
        merged._min_val = min(mins) if mins else None
        merged._max_val = max(maxs) if maxs else None

        return merged

    def centroids(self) -> List[Tuple[float, float]]:
        """
        Return the current centroids as (mean, weight) tuples, sorted by mean.

        Flushes the buffer first.
        """
        self.flush()
        return [(c.mean, c.weight) for c in self._centroids]

    @property
    def min(self) -> Optional[float]:
        """Smallest observation added so far, or None."""
        return self._min_val

    @property
    def max(self) -> Optional[float]:
        """Largest observation added so far, or None."""
        return self._max_val

    def estimate_size(self) -> int:
        """
        Estimate the memory footprint of the digest in bytes.

        Returns:
            Estimated size in bytes.
        """
        size = super().estimate_size()

        size += sys.getsizeof(self.total_weight)
        size += sys.getsizeof(self.max_buffer_size)
        if self._min_val is not None:
            size += sys.getsizeof(self._min_val)
        if self._max_val is not None:
            size += sys.getsizeof(self._max_val)

        size += sys.getsizeof(self._centroids)
        if self._centroids:
            size += sum(sys.getsizeof(c) for c in self._centroids)
            size += sum(
                sys.getsizeof(c.mean) + sys.getsizeof(c.weight) for c in self._centroids
            )

        size += sys.getsizeof(self._buffer)
        size += len(self._buffer) * sys.getsizeof(0.0)

        return size

    def __len__(self) -> int:
        """Return the number of values added to the digest."""
        return self.items_processed

    @property
    def is_empty(self) -> bool:
        """Check if the digest has received any data."""
        return self.items_processed == 0

    def clear(self) -> None:
        """
        Reset the digest to its initial empty state, keeping its configuration.
        """
        super().clear()
        self._centroids = []
        self._buffer = []
        self.total_weight = 0.0
        self._min_val = None
        self._max_val = None

    #
    # Benchmarking hooks
    #
    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the digest.

        Returns:
            A dictionary describing configuration, centroid structure, error
            characteristics and memory usage.
        """
        self.flush()

        stats = super().get_stats()

        name, value = self._compaction_parameter()
        stats.update(
            {
                name: value,
                "max_buffer_size": self.max_buffer_size,
                "total_weight": self.total_weight,
                "num_centroids": len(self._centroids),
                "buffer_items": len(self._buffer),
            }
        )

        if self._min_val is not None:
            stats["min_value"] = self._min_val
        if self._max_val is not None:
            stats["max_value"] = self._max_val

        if self._centroids:
            weights = [c.weight for c in self._centroids]
            stats.update(
                {
                    "min_weight": min(weights),
                    "max_weight": max(weights),
                    "avg_weight": sum(weights) / len(weights),
                }
            )

            # More centroids belong in the tails than in the middle
            n = len(self._centroids)
            cumulative = 0.0
            lower_tail = upper_tail = 0
            for c in self._centroids:
                mid = (cumulative + c.weight / 2.0) / self.total_weight
                if mid < 0.1:
                    lower_tail += 1
                elif mid > 0.9:
                    upper_tail += 1
                cumulative += c.weight
            middle = n - lower_tail - upper_tail
            stats.update(
                {
                    "centroids_lower_10pct": lower_tail,
                    "centroids_middle_80pct": middle,
                    "centroids_upper_10pct": upper_tail,
                    "tail_concentration_ratio": (lower_tail + upper_tail)
                    / max(1, middle),
                }
            )

        if self.items_processed > 0:
            stats["bytes_per_item"] = self.estimate_size() / self.items_processed

        return stats

    def error_bounds(self) -> Dict[str, Any]:
        """
        Calculate the theoretical error bounds for this digest.

        Error varies by quantile: it is roughly proportional to q(1-q)/c, so
        it is smallest at the tails and largest at the median.

        Returns:
            A dictionary with error characteristics at different quantiles.
        """
        self.flush()

        bounds: Dict[str, Any] = {}
        if not self._centroids:
            bounds["state"] = "empty"
            return bounds

        _, c = self._compaction_parameter()
        bounds["accuracy_model"] = "non-uniform (higher at tails)"
        bounds["error_bounds"] = {
            f"q{q:.3f}": q * (1 - q) / c
            for q in (0.001, 0.01, 0.05, 0.25, 0.5, 0.75, 0.95, 0.99, 0.999)
        }
        bounds["actual_centroids"] = len(self._centroids)
        bounds["centroids_per_unit_parameter"] = len(self._centroids) / c
        return bounds

    def analyze_quantile_accuracy(
        self,
        reference_data: Optional[Sequence[float]] = None,
        quantiles: Sequence[float] = DEFAULT_QUANTILES,
    ) -> Dict[str, Any]:
        """
        Analyze the accuracy of quantile estimates against reference data.

        Args:
            reference_data: Optional values to compare against, normally the
                same observations fed to this digest. When given, an Oracle
                is built from them and each estimate is compared with the
                exact quantile and with the exact rank of the estimate. When
                None, theoretical relative errors are reported instead.
            quantiles: Quantiles to evaluate.

        Returns:
            A dictionary containing accuracy analysis information.
        """
        self.flush()

        name, value = self._compaction_parameter()
        analysis: Dict[str, Any] = {
            "algorithm": self.__class__.__name__,
            name: value,
            "num_centroids": len(self._centroids),
            "items_processed": self.items_processed,
        }

        if reference_data is None:
            analysis["theoretical_relative_errors"] = {
                f"q{q:.3f}": q * (1 - q) / value for q in quantiles
            }
            analysis["expected_median_error"] = 0.25 / value
            return analysis

        oracle = Oracle(reference_data)

        exact: Dict[str, float] = {}
        estimates: Dict[str, float] = {}
        rel_errors: Dict[str, float] = {}
        rank_errors: Dict[str, float] = {}
        for q in quantiles:
            key = f"q{q:.3f}"
            exact[key] = oracle.quantile(q)
            estimates[key] = self.estimate(q)
            if not math.isfinite(estimates[key]):
                continue
            abs_error = abs(estimates[key] - exact[key])
            rel_errors[key] = (
                abs_error / abs(exact[key]) if abs(exact[key]) > 1e-10 else abs_error
            )
            rank_errors[key] = oracle.rank(estimates[key]) - q

        analysis.update(
            {
                "reference_data_size": len(oracle),
                "exact_quantiles": exact,
                "estimates": estimates,
                "relative_errors": rel_errors,
                "rank_errors": rank_errors,
            }
        )
        if rel_errors:
            analysis["max_relative_error"] = max(rel_errors.values())
            analysis["max_abs_rank_error"] = max(abs(e) for e in rank_errors.values())

        return analysis


class TDigest(_BufferedDigest):
    """
    T-Digest for efficient and accurate quantile estimation over data streams.

    The T-Digest (Dunning, 2019) clusters observations into centroids whose
    permitted size shrinks toward both ends of the distribution. Key properties:

    1. Memory is bounded by the buffer size plus a number of centroids that
       grows with the compression parameter, not with the data size
    2. Accuracy is non-uniform: extreme quantiles (near 0 or 1) are more precise
    3. The exact minimum and maximum are always returned for q = 0 and q = 1
    4. Mergeable: digests built from separate streams can be combined with the
       same compaction pass used for ingestion

    A digest is not safe for concurrent mutation. Callers ingesting from
    several writers should keep one digest per writer and ``merge`` them.
    """

    DEFAULT_COMPRESSION: float = 100.0

    def __init__(
        self,
        compression: float = DEFAULT_COMPRESSION,
        max_buffer_size: int = _BufferedDigest.DEFAULT_BUFFER_SIZE,
        memory_limit_bytes: Optional[int] = None,
    ):
        """
        Initialize a TDigest.

        Args:
            compression: Controls accuracy and memory usage. Higher values
                produce more centroids and lower error. Must be a positive
                finite number. Default: 100.
            max_buffer_size: Number of raw observations held before a
                compaction pass is forced. Default: 1000.
            memory_limit_bytes: Optional limit consulted by check_memory_limit().

        Raises:
            ValueError: If compression or max_buffer_size is invalid.
        """
        if not _is_real(compression) or not math.isfinite(compression) or compression <= 0:
            raise ValueError(
                f"Compression must be a positive finite number, got {compression!r}"
            )
        super().__init__(
            max_buffer_size=max_buffer_size, memory_limit_bytes=memory_limit_bytes
        )
        self.compression: float = float(compression)

    def _compress(self, centroids: List[Centroid]) -> List[Centroid]:
        return compress(centroids, self.compression)

    def _compaction_parameter(self) -> Tuple[str, float]:
        return "compression", self.compression

    def _empty_copy(self) -> "TDigest":
        return TDigest(
            compression=self.compression,
            max_buffer_size=self.max_buffer_size,
            memory_limit_bytes=self._memory_limit_bytes,
        )

    @classmethod
    def from_accuracy_target(
        cls, accuracy_target: float, tail_focus: bool = True, **kwargs: Any
    ) -> "TDigest":
        """
        Create a TDigest with a compression factor sized for a target accuracy.

        Args:
            accuracy_target: Target relative error for quantile estimates (0.0-1.0).
                            Lower values create more accurate but larger digests.
            tail_focus: If True, sizes for accuracy at the tails (0.01, 0.99).
                       If False, sizes for accuracy at the median (0.5).
            **kwargs: Passed through to the constructor.

        Returns:
            A new TDigest configured for the target accuracy.

        Raises:
            ValueError: If accuracy_target is not between 0 and 1.
        """
        if not (0.0 < accuracy_target < 1.0):
            raise ValueError("Accuracy target must be between 0 and 1")

        # Error at q is about q(1-q)/c: 0.0099/c at the tails, 0.25/c at the median
        if tail_focus:
            compression = math.ceil(0.0099 / accuracy_target)
        else:
            compression = math.ceil(0.25 / accuracy_target)

        return cls(compression=compression, **kwargs)


class ScaledTDigest(_BufferedDigest):
    """
    Fixed-size T-Digest variant.

    Instead of a compression factor, compaction places cluster boundaries at
    the break points ``scale_function(i / max_size) * W``, so the digest keeps
    at most about ``max_size`` centroids. The add/estimate surface is the same
    as ``TDigest``.
    """

    DEFAULT_MAX_SIZE: int = 100

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        max_buffer_size: Optional[int] = None,
        memory_limit_bytes: Optional[int] = None,
    ):
        """
        Initialize a ScaledTDigest.

        Args:
            max_size: Number of scale-function buckets; bounds the centroid count.
            max_buffer_size: Raw observations held before compaction.
                Defaults to max_size.
            memory_limit_bytes: Optional limit consulted by check_memory_limit().

        Raises:
            ValueError: If max_size or max_buffer_size is invalid.
        """
        if not isinstance(max_size, int) or isinstance(max_size, bool) or max_size < 1:
            raise ValueError(f"max_size must be a positive integer, got {max_size!r}")
        super().__init__(
            max_buffer_size=max_size if max_buffer_size is None else max_buffer_size,
            memory_limit_bytes=memory_limit_bytes,
        )
        self.max_size: int = max_size

    def _compress(self, centroids: List[Centroid]) -> List[Centroid]:
        return compress_by_scale(centroids, self.max_size)

    def _compaction_parameter(self) -> Tuple[str, float]:
        return "max_size", self.max_size

    def _empty_copy(self) -> "ScaledTDigest":
        return ScaledTDigest(
            max_size=self.max_size,
            max_buffer_size=self.max_buffer_size,
            memory_limit_bytes=self._memory_limit_bytes,
        )
