# tiny_digest/algorithms/oracle.py

import bisect
import math
import sys
from typing import Iterable, List


class Oracle:
    """
    Exact quantile and rank answers over a finished set of observations.

    The oracle keeps a sorted copy of every value, so it costs memory linear in
    the input. It exists to check approximate estimators against the truth and
    is never used by them internally.
    """

    def __init__(self, values: Iterable[float]):
        """
        Sort and store the observations.

        Args:
            values: Finite real values. Consumed once.

        Raises:
            ValueError: If values is empty or contains a non-finite value.
        """
        sorted_values: List[float] = []
        for value in values:
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"Oracle values must be finite numbers, got {value!r}")
            sorted_values.append(float(value))

        if not sorted_values:
            raise ValueError("Oracle requires at least one value")

        sorted_values.sort()
        self._sorted = sorted_values

    def quantile(self, q: float) -> float:
        """
        Return the exact value at quantile ``q``.

        ``q <= 0`` gives the minimum, ``q >= 1`` the maximum, anything else
        the element at index ``floor(q * (n - 1))``.
        """
        if q <= 0.0:
            return self._sorted[0]
        if q >= 1.0:
            return self._sorted[-1]
        return self._sorted[int(q * (len(self._sorted) - 1))]

    def rank(self, x: float) -> float:
        """
        Return the normalized rank of ``x``.

        The rank is the index of the first element not less than ``x`` (the
        exact position if present, otherwise the insertion point) divided by
        ``n - 1``. A single-value oracle reports 0.0.
        """
        n = len(self._sorted)
        if n == 1:
            return 0.0
        return bisect.bisect_left(self._sorted, x) / (n - 1)

    @property
    def min(self) -> float:
        return self._sorted[0]

    @property
    def max(self) -> float:
        return self._sorted[-1]

    def __len__(self) -> int:
        return len(self._sorted)

    def estimate_size(self) -> int:
        """Estimate the memory footprint of the sorted copy in bytes."""
        size = sys.getsizeof(self) + sys.getsizeof(self._sorted)
        size += len(self._sorted) * sys.getsizeof(0.0)
        return size
