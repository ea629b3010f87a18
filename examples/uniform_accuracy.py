"""
Accuracy report for tiny-digest.

Feeds a seeded uniform stream into a TDigest and a ScaledTDigest, builds an
Oracle over the same values, and prints the relative error of each estimate
together with the error in rank of the estimated value.
"""

import argparse
import logging
import random

from tiny_digest import Oracle, ScaledTDigest, TDigest
from tiny_digest.core.log import get_logger

QUANTILES = [0.0001, 0.01, 0.05, 0.10, 0.25, 0.50, 0.75, 0.90, 0.95, 0.99, 0.9999]


def parse_args():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("-n", "--count", type=int, default=100_000)
    parser.add_argument("--compression", type=float, default=100.0)
    parser.add_argument("--buffer-size", type=int, default=1000)
    parser.add_argument("--max-size", type=int, default=128)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("-v", "--verbose", action="store_true", help="log every flush")
    return parser.parse_args()


def report(name, digest, oracle):
    """Print per-quantile errors of ``digest`` against ``oracle``."""
    print(f"\n=== {name} ===")
    print(f"Centroids: {len(digest.centroids())}")
    print(f"Memory usage: {digest.estimate_size()} bytes (oracle: {oracle.estimate_size()} bytes)")
    print(f"{'q':>8} {'rel err %':>10} {'rank err':>10} {'expected':>10} {'actual':>10}")

    for q in QUANTILES:
        expected = oracle.quantile(q)
        actual = digest.estimate(q)
        rel_error = (actual - expected) / expected if expected else actual
        rank_error = oracle.rank(actual) - q
        print(
            f"{q:8.4f} {100.0 * rel_error:10.4f} {rank_error:10.6f} "
            f"{expected:10.4f} {actual:10.4f}"
        )


def main():
    args = parse_args()
    logger = get_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    rng = random.Random(args.seed)
    digest = TDigest(compression=args.compression, max_buffer_size=args.buffer_size)
    scaled = ScaledTDigest(max_size=args.max_size)
    values = []

    logger.info("Streaming %d uniform samples on [0, 100)", args.count)
    for _ in range(args.count):
        x = rng.uniform(0.0, 100.0)
        digest.add(x)
        scaled.add(x)
        values.append(x)

    oracle = Oracle(values)
    report(f"TDigest(compression={args.compression:g})", digest, oracle)
    report(f"ScaledTDigest(max_size={args.max_size})", scaled, oracle)


if __name__ == "__main__":
    main()
