# tiny_digest/algorithms/centroid.py

import math


class Centroid:
    """A weighted point standing in for one or more merged observations."""

    __slots__ = ["mean", "weight"]

    def __init__(self, mean: float, weight: float = 1.0):
        """Initialize a centroid with a mean value and a positive weight."""
        if not weight > 0:
            raise ValueError(f"Centroid weight must be positive, got {weight}")
        if not math.isfinite(mean):
            raise ValueError(f"Centroid mean must be finite, got {mean}")
        self.mean = float(mean)
        self.weight = float(weight)

    @classmethod
    def single(cls, x: float) -> "Centroid":
        """Create a weight-1 centroid representing exactly one observation."""
        return cls(mean=x, weight=1.0)

    def add(self, other: "Centroid") -> None:
        """
        Fold ``other`` into this centroid in place.

        The mean moves toward ``other.mean`` by the fraction of the combined
        weight that ``other`` carries, which keeps it between the two means.
        """
        total = self.weight + other.weight
        self.mean += (other.mean - self.mean) * (other.weight / total)
        self.weight = total

    def merged(self, other: "Centroid") -> "Centroid":
        """Return a new centroid combining this one with ``other``."""
        result = self.copy()
        result.add(other)
        return result

    def copy(self) -> "Centroid":
        return Centroid(self.mean, self.weight)

    def __lt__(self, other: "Centroid") -> bool:
        """Allow centroids to be sorted by mean value."""
        return self.mean < other.mean

    def __repr__(self) -> str:
        """Provide a readable representation of the centroid."""
        return f"Centroid(mean={self.mean:.4g}, weight={self.weight:.4g})"


def merge_centroids(a: Centroid, b: Centroid) -> Centroid:
    """
    Combine two centroids into a new one.

    The result's mean is the weight-weighted average of the two means and its
    weight is their sum. Neither input is modified. The operation is
    commutative and associative up to floating-point rounding.
    """
    return a.merged(b)
