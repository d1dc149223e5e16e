"""
Accuracy simulation for tiny-hll.

Feeds many independent streams of random alphanumeric strings into HyperLogLog
estimators, samples the estimate every ``step`` items and writes the mean and
standard deviation of the estimates per step to a CSV file, one file per
register store.

    python examples/hyperloglog_simulation.py --streams 40 --elements 80000
"""

import argparse
import csv
import random
import statistics
import string
import time
from collections import defaultdict
from typing import Dict, Iterator, List, Optional

from tiny_hll import HyperLogLog
from tiny_hll.algorithms.hyperloglog import MAX_PRECISION, MIN_PRECISION

ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


class RandomStreamGen:
    """Endless stream of random alphanumeric strings of length 1 to 30."""

    def __init__(self, seed: Optional[int] = None, max_length: int = 30):
        self._rng = random.Random(seed)
        self._max_length = max_length

    def next(self) -> str:
        length = self._rng.randint(1, self._max_length)
        return "".join(self._rng.choice(ALPHABET) for _ in range(length))

    def __iter__(self) -> Iterator[str]:
        while True:
            yield self.next()


def run_simulation(
    precision: int,
    registers: str,
    num_streams: int,
    max_elements: int,
    step: int,
    seed: Optional[int] = None,
) -> List[Dict[str, float]]:
    """
    Run independent streams and summarize the sampled estimates.

    Returns:
        One row per sampled step with the step, the mean exact distinct count,
        the mean estimate and the population standard deviation of the
        estimates.

    Raises:
        ValueError: If step is not positive.
    """
    if step <= 0:
        raise ValueError(f"Step must be positive, got {step}")

    estimates: Dict[int, List[float]] = defaultdict(list)
    exact_counts: Dict[int, List[int]] = defaultdict(list)

    for run in range(num_streams):
        stream = RandomStreamGen(None if seed is None else seed + run)
        hll = HyperLogLog(precision=precision, registers=registers)
        seen = set()

        for i, item in enumerate(stream, start=1):
            hll.add(item)
            seen.add(item)
            if i % step == 0:
                estimates[i].append(hll.estimate())
                exact_counts[i].append(len(seen))
            if i == max_elements:
                break

    rows = []
    for current_step in sorted(estimates):
        values = estimates[current_step]
        rows.append(
            {
                "Step": current_step,
                "ExactCount": statistics.mean(exact_counts[current_step]),
                "AvgEstimate": statistics.mean(values),
                "StdDev": statistics.pstdev(values),
            }
        )
    return rows


def write_csv(path: str, rows: List[Dict[str, float]]) -> None:
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(
            f, fieldnames=["Step", "ExactCount", "AvgEstimate", "StdDev"]
        )
        writer.writeheader()
        writer.writerows(rows)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--precision", type=int, default=10)
    parser.add_argument("--streams", type=int, default=40)
    parser.add_argument("--elements", type=int, default=80000)
    parser.add_argument("--step", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--registers", choices=["byte", "packed"], action="append", default=None
    )
    args = parser.parse_args(argv)

    if not MIN_PRECISION <= args.precision <= MAX_PRECISION:
        parser.error(
            f"--precision must be between {MIN_PRECISION} and {MAX_PRECISION}"
        )
    for name in ("streams", "elements", "step"):
        if getattr(args, name) <= 0:
            parser.error(f"--{name} must be a positive integer")

    return args


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    for registers in args.registers or ["byte", "packed"]:
        print(f"Simulating {args.streams} streams with {registers} registers...")
        start_time = time.time()

        rows = run_simulation(
            precision=args.precision,
            registers=registers,
            num_streams=args.streams,
            max_elements=args.elements,
            step=args.step,
            seed=args.seed,
        )

        path = f"{registers}_results.csv"
        write_csv(path, rows)

        if not rows:
            print(f"  {path}: no samples (fewer elements than one step)")
            continue

        last = rows[-1]
        print(
            f"  {path}: final mean estimate {last['AvgEstimate']:,.1f} "
            f"for {last['ExactCount']:,.1f} distinct items "
            f"(std {last['StdDev']:,.1f}) in {time.time() - start_time:.1f}s"
        )


if __name__ == "__main__":
    main()
