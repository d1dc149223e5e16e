"""
Algorithm implementations for tiny-hll.
"""

from tiny_hll.algorithms.hyperloglog import HyperLogLog
from tiny_hll.algorithms.registers import (
    ByteRegisters,
    PackedRegisters,
    RegisterStore,
    get_register_store,
)

__all__ = [
    "HyperLogLog",
    "RegisterStore",
    "ByteRegisters",
    "PackedRegisters",
    "get_register_store",
]
