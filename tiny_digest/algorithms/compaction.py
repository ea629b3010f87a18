"""
Centroid compaction for the t-digest.

A compaction pass takes a collection of centroids (existing centroids plus
buffered single-observation centroids, or the centroids of two digests being
combined), sorts them by mean and folds neighbours together while the merged
cluster stays within the size bound allowed at its position in the
distribution. The bound shrinks toward both tails, so extreme quantiles are
resolved by small clusters and the median by large ones.

Two interchangeable formulations are provided:

- ``compress`` bounds each cluster by ``compression``: a merge is accepted
  only while ``(w * compression / (pi * W))**2`` stays within
  ``q * (1 - q)`` at both ends of the cluster's cumulative-weight span.
- ``compress_by_scale`` precomputes break points ``k(i / max_size) * W`` from
  ``scale_function`` and closes a cluster each time the running weight
  reaches the next one.
"""

import logging
import math
from operator import attrgetter
from typing import Iterable, List

from tiny_digest.algorithms.centroid import Centroid

logger = logging.getLogger(__name__)

_by_mean = attrgetter("mean")


def scale_function(q: float) -> float:
    """
    Map a cumulative-weight fraction to a bucket position.

    ``k(q) = 2 q**2`` for ``q <= 0.5`` and ``1 - k(1 - q)`` above, so
    ``k(0) = 0``, ``k(0.5) = 0.5`` and ``k(1) = 1``. Equal steps in the
    result correspond to shrinking steps in ``q`` near 0 and 1.

    Raises:
        ValueError: If q is outside [0, 1].
    """
    if not 0.0 <= q <= 1.0:
        raise ValueError(f"{q} expected to be in [0, 1]")
    if q <= 0.5:
        return 2.0 * q * q
    return 1.0 - scale_function(1.0 - q)


def _sorted_by_mean(centroids: Iterable[Centroid]) -> List[Centroid]:
    # list.sort is stable, so ties keep their input order
    return sorted(centroids, key=_by_mean)


def _ensure_sorted(centroids: List[Centroid]) -> List[Centroid]:
    """
    Return ``centroids`` in ascending mean order.

    Each cluster's mean lies between its first and last member, so the output
    of a pass is sorted unless rounding pushed two adjacent means past each
    other. That case is repaired with a re-sort.
    """
    for left, right in zip(centroids, centroids[1:]):
        if right.mean < left.mean:
            logger.debug(
                "Re-sorting %d centroids after compaction: %r > %r",
                len(centroids),
                left,
                right,
            )
            centroids.sort(key=_by_mean)
            break
    return centroids


def compress(centroids: Iterable[Centroid], compression: float) -> List[Centroid]:
    """
    Compact centroids under the compression-parameterized size bound.

    Args:
        centroids: Centroids in any order. They are not modified.
        compression: Positive compression factor. Larger values allow more,
            smaller clusters.

    Returns:
        A new list of centroids sorted by mean with the same total weight.
    """
    ordered = _sorted_by_mean(centroids)
    if not ordered:
        return []

    total_weight = sum(c.weight for c in ordered)
    normalizer = compression / (math.pi * total_weight)

    result: List[Centroid] = []
    weight_so_far = 0.0
    candidate = ordered[0].copy()
    for c in ordered[1:]:
        proposed_weight = candidate.weight + c.weight
        z = proposed_weight * normalizer
        q0 = weight_so_far / total_weight
        q2 = (weight_so_far + proposed_weight) / total_weight

        if z * z <= q0 * (1.0 - q0) and z * z <= q2 * (1.0 - q2):
            candidate.add(c)
        else:
            weight_so_far += candidate.weight
            result.append(candidate)
            candidate = c.copy()
    result.append(candidate)

    logger.debug(
        "Compressed %d centroids into %d (compression=%s, total_weight=%s)",
        len(ordered),
        len(result),
        compression,
        total_weight,
    )
    return _ensure_sorted(result)


def compress_by_scale(centroids: Iterable[Centroid], max_size: int) -> List[Centroid]:
    """
    Compact centroids by closing clusters at scale-function break points.

    Break point ``i`` sits at cumulative weight ``scale_function(i / max_size) * W``,
    so at most about ``max_size`` clusters are produced.

    Args:
        centroids: Centroids in any order. They are not modified.
        max_size: Positive number of scale-function buckets.

    Returns:
        A new list of centroids sorted by mean with the same total weight.
    """
    ordered = _sorted_by_mean(centroids)
    if not ordered:
        return []

    total_weight = sum(c.weight for c in ordered)

    def weight_to_break(k: int) -> float:
        return scale_function(min(1.0, k / max_size)) * total_weight

    result: List[Centroid] = []
    k = 1
    next_break = weight_to_break(k)
    candidate = ordered[0].copy()
    weight_so_far = candidate.weight
    for c in ordered[1:]:
        if weight_so_far >= next_break:
            result.append(candidate)
            candidate = c.copy()
            k += 1
            next_break = weight_to_break(k)
        else:
            candidate.add(c)
        weight_so_far += c.weight
    result.append(candidate)

    logger.debug(
        "Compressed %d centroids into %d (max_size=%d, total_weight=%s)",
        len(ordered),
        len(result),
        max_size,
        total_weight,
    )
    return _ensure_sorted(result)
