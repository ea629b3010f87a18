"""
Unit tests for the Centroid merge primitive.
"""

import unittest

from tiny_digest.algorithms.centroid import Centroid, merge_centroids


class TestCentroid(unittest.TestCase):
    """Tests for Centroid construction, ordering and merging."""

    def test_init(self):
        c = Centroid(mean=10.0, weight=5.0)
        self.assertEqual(c.mean, 10.0)
        self.assertEqual(c.weight, 5.0)

    def test_init_invalid(self):
        with self.assertRaises(ValueError):
            Centroid(mean=10.0, weight=-1.0)
        with self.assertRaises(ValueError):
            Centroid(mean=10.0, weight=0.0)
        with self.assertRaises(ValueError):
            Centroid(mean=float("nan"))
        with self.assertRaises(ValueError):
            Centroid(mean=float("inf"))

    def test_single(self):
        c = Centroid.single(3)
        self.assertEqual(c.mean, 3.0)
        self.assertIsInstance(c.mean, float)
        self.assertEqual(c.weight, 1.0)

    def test_lt(self):
        c1 = Centroid(mean=5.0, weight=1.0)
        c2 = Centroid(mean=10.0, weight=1.0)
        c3 = Centroid(mean=5.0, weight=2.0)  # Same mean as c1
        self.assertTrue(c1 < c2)
        self.assertFalse(c2 < c1)
        self.assertFalse(c1 < c3)  # Comparison only uses the mean
        self.assertFalse(c3 < c1)

    def test_repr(self):
        c = Centroid(mean=12.3456, weight=7.89)
        self.assertEqual(repr(c), "Centroid(mean=12.35, weight=7.89)")

    def test_add_in_place(self):
        c = Centroid(mean=10.0, weight=1.0)
        c.add(Centroid(mean=20.0, weight=3.0))
        self.assertEqual(c.mean, 17.5)
        self.assertEqual(c.weight, 4.0)

    def test_merged_leaves_inputs_untouched(self):
        a = Centroid(mean=2.0, weight=2.0)
        b = Centroid(mean=8.0, weight=1.0)
        result = a.merged(b)
        self.assertAlmostEqual(result.mean, 4.0, places=12)
        self.assertEqual(result.weight, 3.0)
        self.assertEqual((a.mean, a.weight), (2.0, 2.0))
        self.assertEqual((b.mean, b.weight), (8.0, 1.0))

    def test_merge_centroids_is_commutative(self):
        a = Centroid(mean=1.25, weight=3.0)
        b = Centroid(mean=-7.5, weight=11.0)
        ab = merge_centroids(a, b)
        ba = merge_centroids(b, a)
        self.assertAlmostEqual(ab.mean, ba.mean, places=12)
        self.assertEqual(ab.weight, ba.weight)

    def test_merge_centroids_is_associative(self):
        a = Centroid(mean=0.1, weight=1.0)
        b = Centroid(mean=0.7, weight=4.0)
        c = Centroid(mean=3.3, weight=2.0)
        left = merge_centroids(merge_centroids(a, b), c)
        right = merge_centroids(a, merge_centroids(b, c))
        self.assertAlmostEqual(left.mean, right.mean, places=12)
        self.assertEqual(left.weight, right.weight)
        expected = (0.1 * 1.0 + 0.7 * 4.0 + 3.3 * 2.0) / 7.0
        self.assertAlmostEqual(left.mean, expected, places=12)

    def test_merged_mean_stays_between_inputs(self):
        lo = Centroid(mean=1.0, weight=1e9)
        hi = Centroid(mean=1.0 + 1e-12, weight=1.0)
        result = merge_centroids(lo, hi)
        self.assertGreaterEqual(result.mean, lo.mean)
        self.assertLessEqual(result.mean, hi.mean)

    def test_copy(self):
        c = Centroid(mean=4.0, weight=2.0)
        dup = c.copy()
        dup.add(Centroid(mean=10.0))
        self.assertEqual((c.mean, c.weight), (4.0, 2.0))
        self.assertEqual(dup.weight, 3.0)


if __name__ == "__main__":
    unittest.main()
