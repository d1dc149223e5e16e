"""
Unit tests for the HyperLogLog register stores.
"""

import random
import unittest

from tiny_hll.algorithms.registers import (
    MAX_REGISTER_VALUE,
    ByteRegisters,
    PackedRegisters,
    RegisterStore,
    get_register_store,
)


class TestRegisterStores(unittest.TestCase):
    """Behaviour shared by both register stores."""

    STORES = (ByteRegisters, PackedRegisters)

    def test_zero_initialized(self):
        """Test that every register starts at zero."""
        for store_class in self.STORES:
            store = store_class(64)
            self.assertEqual(len(store), 64)
            self.assertEqual(store.to_list(), [0] * 64)
            self.assertEqual(store.count_zeros(), 64)

    def test_set_if_greater(self):
        """Test that registers are only ever raised."""
        for store_class in self.STORES:
            store = store_class(16)

            self.assertTrue(store.set_if_greater(3, 7))
            self.assertEqual(store.get(3), 7)

            # Smaller and equal values are ignored
            self.assertFalse(store.set_if_greater(3, 5))
            self.assertFalse(store.set_if_greater(3, 7))
            self.assertEqual(store.get(3), 7)

            self.assertTrue(store.set_if_greater(3, MAX_REGISTER_VALUE))
            self.assertEqual(store.get(3), MAX_REGISTER_VALUE)

            # Neighbours are untouched
            self.assertEqual(store.get(2), 0)
            self.assertEqual(store.get(4), 0)
            self.assertEqual(store.count_zeros(), 15)

    def test_every_field_position(self):
        """Test each register in isolation, covering fields that straddle bytes."""
        for store_class in self.STORES:
            for index in range(16):
                store = store_class(16)
                store.set_if_greater(index, MAX_REGISTER_VALUE)

                expected = [0] * 16
                expected[index] = MAX_REGISTER_VALUE
                self.assertEqual(
                    store.to_list(), expected, f"{store_class.__name__} index {index}"
                )

    def test_adjacent_fields_do_not_interfere(self):
        """Test alternating bit patterns in neighbouring packed fields."""
        store = PackedRegisters(32)
        for index in range(32):
            store.set_if_greater(index, 0b10101 if index % 2 else 0b01010)

        for index in range(32):
            self.assertEqual(store.get(index), 0b10101 if index % 2 else 0b01010)

    def test_store_equivalence(self):
        """Test that both stores agree after the same random update sequence."""
        rng = random.Random(1234)

        for size in (16, 64, 1024):
            byte_store = ByteRegisters(size)
            packed_store = PackedRegisters(size)

            for _ in range(size * 20):
                index = rng.randrange(size)
                value = rng.randint(0, MAX_REGISTER_VALUE)

                self.assertEqual(
                    byte_store.set_if_greater(index, value),
                    packed_store.set_if_greater(index, value),
                )

            self.assertEqual(byte_store.to_list(), packed_store.to_list())
            self.assertEqual(list(byte_store), list(packed_store))
            self.assertEqual(byte_store.count_zeros(), packed_store.count_zeros())
            for index in range(size):
                self.assertEqual(byte_store.get(index), packed_store.get(index))

    def test_monotonic_values(self):
        """Test that no update ever lowers a register."""
        rng = random.Random(99)

        for store_class in self.STORES:
            store = store_class(64)
            previous = store.to_list()

            for _ in range(2000):
                store.set_if_greater(rng.randrange(64), rng.randint(0, MAX_REGISTER_VALUE))
                current = store.to_list()
                for before, after in zip(previous, current):
                    self.assertGreaterEqual(after, before)
                previous = current

    def test_payload_size(self):
        """Test the memory footprint of each layout."""
        self.assertEqual(ByteRegisters(1024).nbytes, 1024)
        # 1024 registers * 5 bits = 640 bytes
        self.assertEqual(PackedRegisters(1024).nbytes, 640)
        self.assertEqual(PackedRegisters(16).nbytes, 10)

        self.assertLess(
            PackedRegisters(4096).estimate_size(), ByteRegisters(4096).estimate_size()
        )

    def test_invalid_size(self):
        """Test that a store needs at least one register."""
        for store_class in self.STORES:
            with self.assertRaises(ValueError):
                store_class(0)

    def test_get_register_store(self):
        """Test resolving stores by name and class."""
        self.assertIs(get_register_store("byte"), ByteRegisters)
        self.assertIs(get_register_store("packed"), PackedRegisters)
        self.assertIs(get_register_store(PackedRegisters), PackedRegisters)

        with self.assertRaises(ValueError):
            get_register_store("nibble")

        with self.assertRaises(ValueError):
            get_register_store(dict)

        with self.assertRaises(TypeError):
            RegisterStore(16)  # abstract


if __name__ == "__main__":
    unittest.main()
