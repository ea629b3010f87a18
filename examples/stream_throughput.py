"""
Throughput benchmark for tiny-digest.

Streams the deterministic sequence n -> 19 n mod size into a TDigest and
reports items per second, first across stream sizes and then across
compression and buffer-size settings. With --forever the digest keeps
ingesting uniform samples until interrupted, which is useful for watching
memory stay flat.
"""

import argparse
import itertools
import logging
import random
import time

from tiny_digest import TDigest
from tiny_digest.core.log import get_logger


def strided_stream(size):
    """Yield ``size`` values covering (0, 1) in a scattered but repeatable order."""
    n = 1
    for _ in range(size):
        yield n / size
        n = (19 * n) % size


def run(size, compression=100.0, max_buffer_size=1000):
    """Ingest ``size`` values and return (seconds, p99 estimate)."""
    digest = TDigest(compression=compression, max_buffer_size=max_buffer_size)
    start = time.perf_counter()
    for x in strided_stream(size):
        digest.add(x)
    p99 = digest.estimate(0.99)
    return time.perf_counter() - start, p99


def benchmark_stream_sizes():
    print("\n=== Stream size ===")
    size = 1
    for exponent in range(1, 6):
        size *= 10
        elapsed, p99 = run(size)
        print(f"  n=10^{exponent}: {size / elapsed:12.0f} items/s  (p99={p99:.4f})")


def benchmark_parameters(size):
    print(f"\n=== Parameters (n={size}) ===")
    for compression, buffer_size in itertools.product([10, 100, 1000], [10, 100, 1000, 10000]):
        elapsed, _ = run(size, compression=compression, max_buffer_size=buffer_size)
        print(
            f"  compression={compression:<5} buffer={buffer_size:<6} "
            f"{size / elapsed:12.0f} items/s"
        )


def run_forever(logger, report_every):
    digest = TDigest(compression=100.0, max_buffer_size=1000)
    rng = random.Random(42)
    start = time.perf_counter()
    try:
        for count in itertools.count(1):
            digest.add(rng.uniform(0.0, 100.0))
            if count % report_every == 0:
                logger.info(
                    "%d items, %.0f items/s, %d bytes, median=%.4f",
                    count,
                    count / (time.perf_counter() - start),
                    digest.estimate_size(),
                    digest.estimate(0.5),
                )
    except KeyboardInterrupt:
        logger.info("Stopped after %d items", digest.items_processed)


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--size", type=int, default=100_000, help="stream length for the parameter sweep")
    parser.add_argument("--forever", action="store_true")
    parser.add_argument("--report-every", type=int, default=1_000_000)
    args = parser.parse_args()

    logger = get_logger(level=logging.INFO)
    if args.forever:
        run_forever(logger, args.report_every)
        return

    benchmark_stream_sizes()
    benchmark_parameters(args.size)


if __name__ == "__main__":
    main()
