"""
Hashing functions for tiny-hll.

This module provides the 32-bit mixing hash used to spread stream items over
the HyperLogLog registers. It requires no external dependencies and is tuned
for distribution quality, not cryptographic security.
"""

from typing import Any

# Multiplier shared by the per-byte step and the finalizer (MurmurHash2's 'm')
MIX_MULTIPLIER = 0x5BD1E995
DEFAULT_SEED = 0x9747B28C

_MASK_32 = 0xFFFFFFFF


def to_bytes(key: Any) -> bytes:
    """
    Normalize a stream item to the bytes that get hashed.

    Args:
        key: The item. Byte-like objects are used as-is, strings are UTF-8
             encoded, anything else goes through repr() first.

    Returns:
        The byte representation of the item.
    """
    if isinstance(key, bytes):
        return key
    if isinstance(key, (bytearray, memoryview)):
        return bytes(key)
    if isinstance(key, str):
        return key.encode("utf-8")
    # Use repr() to get a more unique string for various objects
    return repr(key).encode("utf-8")


def murmur_mix_32(key: Any) -> int:
    """
    One-pass Murmur-style mixing hash (32-bit).

    Every input byte is folded into the accumulator with an xor, a multiply and
    an xor-shift; a final round of xor-shifts and a multiply gives the output
    bits good avalanche behaviour, so both the high bits (register index) and
    the low bits (rank) look uniformly random.

    Args:
        key: The key to hash (will be converted to bytes if not already)

    Returns:
        32-bit unsigned hash value
    """
    h = DEFAULT_SEED

    for byte in to_bytes(key):
        h ^= byte
        h = (h * MIX_MULTIPLIER) & _MASK_32
        h ^= h >> 15

    # Finalization mixing
    h ^= h >> 13
    h = (h * MIX_MULTIPLIER) & _MASK_32
    h ^= h >> 15

    return h
