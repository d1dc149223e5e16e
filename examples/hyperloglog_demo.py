"""
HyperLogLog Example for tiny-hll.

This example demonstrates how to use the HyperLogLog estimator for
cardinality estimation on data streams, and compares the byte-per-register
and bit-packed register stores.
"""

import random
import sys
import time

from tiny_hll import HyperLogLog


def demonstrate_basic_hyperloglog():
    """Demonstrate basic HyperLogLog cardinality estimation on a simulated data stream."""
    print("\n=== Basic HyperLogLog Demo ===")

    hll = HyperLogLog(precision=10)

    print(
        f"Using precision p={hll.precision} (error ~{hll.error_bounds()['relative_error']:.2%})"
    )
    print(f"Memory usage: ~{hll.estimate_size()} bytes")

    print("\nProcessing 100,000 integers...")
    unique_count = 0

    for i in range(100000):
        hll.add(i)
        unique_count += 1

        if i % 20000 == 0:
            print(f"  Processed {i} items, current estimate: {hll.estimate():.1f}")

    final_estimate = hll.estimate()
    print(f"\nFinal cardinality estimate: {final_estimate:.1f} (true: {unique_count})")
    print(f"Relative error: {abs(final_estimate - unique_count) / unique_count:.2%}")

    stats = hll.get_stats()
    print("\nEstimator statistics:")
    print(f"  Number of registers: {stats['num_registers']}")
    print(
        f"  Empty registers: {stats['empty_registers']} ({stats['empty_registers']/stats['num_registers']:.2%})"
    )
    print(f"  Maximum register value: {stats['max_register_value']}")
    print(f"  Theoretical standard error: {stats['relative_error']:.2%}")


def demonstrate_zipf_distribution():
    """Demonstrate HyperLogLog on a skewed stream full of repeats."""
    print("\n=== Zipf Distribution Demo ===")

    hll = HyperLogLog(precision=14, registers="packed")
    print(
        f"Using precision p={hll.precision} (error ~{hll.error_bounds()['relative_error']:.2%})"
    )

    n_unique = 100000
    zipf_exponent = 1.2
    stream_size = 200000

    weights = [1.0 / (i + 1) ** zipf_exponent for i in range(n_unique)]
    rng = random.Random(42)
    stream = rng.choices(range(n_unique), weights=weights, k=stream_size)

    true_uniques = set()
    start_time = time.time()

    for value in stream:
        hll.add(value)
        true_uniques.add(value)

    elapsed = time.time() - start_time
    estimate = hll.estimate()
    true_count = len(true_uniques)

    print(f"\nProcessed {stream_size:,} items in {elapsed:.1f}s")
    print(f"  True unique count: {true_count:,}")
    print(f"  HyperLogLog estimate: {estimate:,.1f}")
    print(f"  Relative error: {abs(estimate - true_count) / true_count:.4%}")
    print(f"  Memory usage: {hll.estimate_size():,} bytes")

    exact_bytes = sys.getsizeof(true_uniques)
    print(f"  Memory for exact storage (set): {exact_bytes:,} bytes")
    print(f"  Memory ratio: 1:{exact_bytes/hll.estimate_size():.1f}")


def demonstrate_register_stores():
    """Compare the byte and packed register stores across precisions."""
    print("\n=== Register Store Comparison Demo ===")

    n_unique = 50000
    items = [f"item-{i}" for i in range(n_unique)]

    print("\nPrecision  Store    Estimate   Error     Register bytes")
    print("------------------------------------------------------")
    for p in (4, 8, 12, 16):
        for store in ("byte", "packed"):
            hll = HyperLogLog(precision=p, registers=store)
            for item in items:
                hll.add(item)

            estimate = hll.estimate()
            rel_error = abs(estimate - n_unique) / n_unique
            register_bytes = hll.get_stats()["register_bytes"]
            print(
                f"p = {p:2d}     {store:7s}  {estimate:9,.0f}  {rel_error:7.3%}   {register_bytes:7,}"
            )


if __name__ == "__main__":
    demonstrate_basic_hyperloglog()
    demonstrate_zipf_distribution()
    demonstrate_register_stores()
