"""
Unit tests for the estimator interface and the logging helper.
"""

import logging
import unittest

from tiny_digest import QuantileEstimator, ScaledTDigest, TDigest
from tiny_digest.algorithms.quantile_sketch import _BufferedDigest
from tiny_digest.core.log import get_logger


class _CountingEstimator(QuantileEstimator):
    """Minimal estimator that records values and answers with the last one."""

    def __init__(self):
        super().__init__()
        self.values = []

    def add(self, x):
        super().add(x)
        self.values.append(x)

    def estimate(self, q):
        return self.values[-1]

    def merge(self, other):
        self._check_same_type(other)
        merged = _CountingEstimator()
        for x in self.values + other.values:
            merged.add(x)
        return merged


class TestQuantileEstimator(unittest.TestCase):
    """Tests for the shared estimator interface."""

    def test_cannot_instantiate_abstract(self):
        with self.assertRaises(TypeError):
            QuantileEstimator()

    def test_add_counts_items(self):
        est = _CountingEstimator()
        est.add(1.0)
        est.add(2.0)
        self.assertEqual(est.items_processed, 2)
        self.assertEqual(est.estimate(0.5), 2.0)

        est.clear()
        self.assertEqual(est.items_processed, 0)

    def test_check_same_type(self):
        est = _CountingEstimator()
        with self.assertRaises(TypeError):
            est.merge(TDigest())

    def test_base_stats(self):
        est = _CountingEstimator()
        est.add(3.0)
        stats = est.get_stats()
        self.assertEqual(stats["type"], "_CountingEstimator")
        self.assertEqual(stats["items_processed"], 1)
        self.assertGreater(stats["memory_bytes"], 0)
        self.assertEqual(est.error_bounds(), {})

    def test_digest_without_compaction_hooks_cannot_be_created(self):
        class _NoCompaction(_BufferedDigest):
            def _compress(self, centroids):
                return centroids

        with self.assertRaises(TypeError):
            _NoCompaction()

    def test_digests_share_the_interface(self):
        for estimator in (TDigest(compression=50), ScaledTDigest(max_size=50)):
            self.assertIsInstance(estimator, QuantileEstimator)
            for i in range(100):
                estimator.add(float(i))
            self.assertEqual(estimator.estimate(0.0), 0.0)
            self.assertEqual(estimator.estimate(1.0), 99.0)


class TestGetLogger(unittest.TestCase):
    """Tests for the console logging helper."""

    def tearDown(self):
        logger = logging.getLogger("tiny_digest.test_log")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)

    def test_single_handler(self):
        logger = get_logger("tiny_digest.test_log", level=logging.DEBUG)
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)

        again = get_logger("tiny_digest.test_log", level=logging.WARNING)
        self.assertIs(again, logger)
        self.assertEqual(len(again.handlers), 1)
        self.assertEqual(again.level, logging.WARNING)

    def test_flush_is_logged_at_debug(self):
        td = TDigest(compression=10, max_buffer_size=5)
        with self.assertLogs("tiny_digest.algorithms", level="DEBUG") as cm:
            for i in range(5):
                td.add(float(i))
        self.assertTrue(any("Flushed 5 observations" in line for line in cm.output))


if __name__ == "__main__":
    unittest.main()
