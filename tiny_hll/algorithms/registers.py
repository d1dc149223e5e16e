"""
Register storage strategies for HyperLogLog.

A HyperLogLog register only ever holds a rank in [0, 31], so five bits per
register are enough. Two interchangeable stores are provided:

- ByteRegisters keeps one register per byte in an ``array.array``. It is the
  simplest layout and the fastest to read.
- PackedRegisters keeps every register in a 5-bit field of one contiguous
  ``bytearray``, using about 5/8 of the memory.

Both stores expose the same get/set_if_greater semantics and are observably
equivalent for any sequence of updates.
"""

import abc
import array
import sys
from typing import Dict, Iterator, List, Type, Union

REGISTER_BITS = 5
MAX_REGISTER_VALUE = (1 << REGISTER_BITS) - 1  # 31


class RegisterStore(abc.ABC):
    """
    Fixed-size array of small unsigned registers, all starting at zero.

    Indices must satisfy 0 <= index < len(store) and values must lie in
    [0, MAX_REGISTER_VALUE]; the store does not check either on the update
    path.
    """

    # Short name used to select the store (see get_register_store)
    name = ""

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"Register count must be positive, got {size}")
        self._size = size

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[int]:
        for index in range(self._size):
            yield self.get(index)

    @abc.abstractmethod
    def get(self, index: int) -> int:
        """Return the value of register ``index``."""
        pass

    @abc.abstractmethod
    def set_if_greater(self, index: int, value: int) -> bool:
        """
        Raise register ``index`` to ``value`` if ``value`` is larger.

        Args:
            index: The register to update.
            value: The candidate rank.

        Returns:
            True if the register was changed, False otherwise.
        """
        pass

    @property
    @abc.abstractmethod
    def nbytes(self) -> int:
        """Number of bytes used by the register payload alone."""
        pass

    def count_zeros(self) -> int:
        """Count the registers that have never been raised."""
        return sum(1 for value in self if value == 0)

    def to_list(self) -> List[int]:
        """Return a copy of all register values in index order."""
        return list(self)

    def estimate_size(self) -> int:
        """Rough size of the store object plus its payload, in bytes."""
        return sys.getsizeof(self) + self.nbytes


class ByteRegisters(RegisterStore):
    """One register per byte, backed by an unsigned-char ``array.array``."""

    name = "byte"

    def __init__(self, size: int):
        super().__init__(size)
        # 'B' typecode gives unsigned char (8 bits, 0 to 255)
        self._registers = array.array("B", bytes(size))

    def __iter__(self) -> Iterator[int]:
        return iter(self._registers)

    def get(self, index: int) -> int:
        return self._registers[index]

    def set_if_greater(self, index: int, value: int) -> bool:
        if value > self._registers[index]:
            self._registers[index] = value
            return True
        return False

    def count_zeros(self) -> int:
        return self._registers.count(0)

    def to_list(self) -> List[int]:
        return self._registers.tolist()

    @property
    def nbytes(self) -> int:
        return len(self._registers) * self._registers.itemsize

    def estimate_size(self) -> int:
        # getsizeof on array.array already includes its buffer
        return sys.getsizeof(self) + sys.getsizeof(self._registers)


class PackedRegisters(RegisterStore):
    """
    Registers bit-packed into 5-bit fields of a single ``bytearray``.

    Register ``i`` occupies bits ``5*i`` to ``5*i + 4`` of the buffer, least
    significant bit first, so a field either fits inside one byte or straddles
    two consecutive bytes. The buffer holds exactly ``ceil(5 * size / 8)``
    bytes.
    """

    name = "packed"

    def __init__(self, size: int):
        super().__init__(size)
        self._bytes = bytearray((size * REGISTER_BITS + 7) // 8)

    def get(self, index: int) -> int:
        bit = index * REGISTER_BITS
        pos = bit >> 3
        shift = bit & 7

        word = self._bytes[pos]
        # Fields starting above bit 3 spill into the next byte
        if shift > 8 - REGISTER_BITS:
            word |= self._bytes[pos + 1] << 8

        return (word >> shift) & MAX_REGISTER_VALUE

    def _put(self, index: int, value: int) -> None:
        bit = index * REGISTER_BITS
        pos = bit >> 3
        shift = bit & 7
        spans = shift > 8 - REGISTER_BITS

        word = self._bytes[pos]
        if spans:
            word |= self._bytes[pos + 1] << 8

        word &= ~(MAX_REGISTER_VALUE << shift)
        word |= (value & MAX_REGISTER_VALUE) << shift

        self._bytes[pos] = word & 0xFF
        if spans:
            self._bytes[pos + 1] = (word >> 8) & 0xFF

    def set_if_greater(self, index: int, value: int) -> bool:
        if value > self.get(index):
            self._put(index, value)
            return True
        return False

    @property
    def nbytes(self) -> int:
        return len(self._bytes)

    def estimate_size(self) -> int:
        # getsizeof on bytearray already includes its buffer
        return sys.getsizeof(self) + sys.getsizeof(self._bytes)


REGISTER_STORES: Dict[str, Type[RegisterStore]] = {
    ByteRegisters.name: ByteRegisters,
    PackedRegisters.name: PackedRegisters,
}


def get_register_store(
    registers: Union[str, Type[RegisterStore]]
) -> Type[RegisterStore]:
    """
    Resolve a register store from its short name or class.

    Args:
        registers: "byte", "packed", or a RegisterStore subclass.

    Returns:
        The RegisterStore subclass to instantiate.

    Raises:
        ValueError: If the name is unknown or the class is not a RegisterStore.
    """
    if isinstance(registers, str):
        try:
            return REGISTER_STORES[registers]
        except KeyError:
            raise ValueError(
                f"Unknown register store {registers!r}, "
                f"expected one of {sorted(REGISTER_STORES)}"
            ) from None

    if isinstance(registers, type) and issubclass(registers, RegisterStore):
        return registers

    raise ValueError(f"Not a register store: {registers!r}")
