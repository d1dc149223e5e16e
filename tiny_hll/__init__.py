"""
tiny-hll - Lightweight cardinality estimation for data streams

tiny-hll estimates the number of distinct items in a stream with a small,
fixed memory footprint using HyperLogLog, with either byte-per-register or
bit-packed register storage.
"""

__version__ = "0.1.0"

# Import main classes to make them available at the top level
from tiny_hll.algorithms.hyperloglog import HyperLogLog
from tiny_hll.algorithms.registers import ByteRegisters, PackedRegisters, RegisterStore
from tiny_hll.core.base import CardinalityEstimator, StreamSummary
from tiny_hll.core.hash import murmur_mix_32

__all__ = [
    # Core base classes
    "StreamSummary",
    "CardinalityEstimator",
    # Algorithm implementations
    "HyperLogLog",
    "RegisterStore",
    "ByteRegisters",
    "PackedRegisters",
    # Utility functions
    "murmur_mix_32",
]
