"""
Core functionality for tiny-hll.
"""

from tiny_hll.core.base import CardinalityEstimator, StreamSummary
from tiny_hll.core.hash import murmur_mix_32, to_bytes

__all__ = [
    # Base classes
    "StreamSummary",
    "CardinalityEstimator",
    # Utility functions
    "murmur_mix_32",
    "to_bytes",
]
