"""
Unit tests for hashing functions.
"""

import unittest
from collections import Counter

from tiny_hll.core.hash import murmur_mix_32, to_bytes


class TestHashFunctions(unittest.TestCase):
    """Test cases for hash functions in tiny_hll.core.hash."""

    def test_reproducibility(self):
        """Test that the hash produces consistent results for the same input."""
        test_cases = [
            "hello world",
            "python",
            "",  # Empty string
            "a" * 100,  # Long string
            b"\x00\xff",  # Raw bytes
            123,  # Integer
            (1, 2, 3),  # Tuple
        ]

        for input_value in test_cases:
            self.assertEqual(
                murmur_mix_32(input_value),
                murmur_mix_32(input_value),
                f"Hash gave different results for the same input: {input_value!r}",
            )

    def test_known_values(self):
        """Test the hash against reference values of the one-pass mix."""
        test_cases = [
            (b"", 0x106E08D9),
            (b"a", 0x6DF4A9E6),
            (b"hello", 0x5E5A2EC6),
            (b"hello world", 0xB8B31AED),
            (b"item-0", 0x86E48412),
            # High bytes are mixed in as unsigned values
            (b"\xff\x00\x80", 2466201733),
        ]

        for input_value, expected in test_cases:
            hash_value = murmur_mix_32(input_value)
            self.assertEqual(
                hash_value,
                expected,
                f"Hash of {input_value!r} should be {expected:08x}, got {hash_value:08x}",
            )

    def test_key_normalization(self):
        """Test that strings, bytes and other objects hash consistently."""
        self.assertEqual(murmur_mix_32("hello"), murmur_mix_32(b"hello"))
        self.assertEqual(murmur_mix_32(bytearray(b"hello")), murmur_mix_32(b"hello"))
        self.assertEqual(murmur_mix_32(memoryview(b"hello")), murmur_mix_32(b"hello"))
        self.assertEqual(murmur_mix_32("héllo"), murmur_mix_32("héllo".encode("utf-8")))

        # Non-string objects hash through their repr()
        self.assertEqual(murmur_mix_32(123), murmur_mix_32("123"))
        self.assertEqual(murmur_mix_32((1, 2)), murmur_mix_32("(1, 2)"))

        self.assertEqual(to_bytes(b"abc"), b"abc")
        self.assertEqual(to_bytes("abc"), b"abc")
        self.assertEqual(to_bytes(None), b"None")

    def test_different_inputs(self):
        """Test that the hash produces different values for different inputs."""
        inputs = [
            "hello",
            "Hello",  # Case sensitive
            "hello ",  # Extra space
            "world",
            123,
            123.0,  # Different type but same value
            (1, 2),
            (2, 1),  # Different order
        ]

        hashes = [murmur_mix_32(x) for x in inputs]

        self.assertEqual(
            len(set(hashes)), len(inputs), f"Collision among {list(zip(inputs, hashes))}"
        )

    def test_range(self):
        """Test that the hash produces values in the expected range (32-bit)."""
        inputs = ["test", 123, (1, 2, 3), {"a": 1}, "a" * 1000, b"", b"\xff" * 64]

        for input_value in inputs:
            hash_value = murmur_mix_32(input_value)

            self.assertIsInstance(hash_value, int)
            self.assertGreaterEqual(hash_value, 0)
            self.assertLessEqual(hash_value, 0xFFFFFFFF)

    def test_low_bits_distribution(self):
        """Test that the low bits are reasonably uniform."""
        num_samples = 10000
        num_buckets = 10

        counter = Counter(murmur_mix_32(x) % num_buckets for x in range(num_samples))
        expected = num_samples / num_buckets

        self.assertEqual(len(counter), num_buckets)
        for bucket, count in counter.items():
            self.assertGreaterEqual(
                count, expected * 0.8, f"Bucket {bucket} has too few items"
            )
            self.assertLessEqual(
                count, expected * 1.2, f"Bucket {bucket} has too many items"
            )

    def test_high_bits_distribution(self):
        """Test that the top bits, used to pick a register, are reasonably uniform."""
        num_samples = 10000
        num_buckets = 16

        counter = Counter(murmur_mix_32(x) >> 28 for x in range(num_samples))
        expected = num_samples / num_buckets

        self.assertEqual(len(counter), num_buckets)
        for bucket, count in counter.items():
            self.assertGreaterEqual(
                count, expected * 0.8, f"Bucket {bucket} has too few items"
            )
            self.assertLessEqual(
                count, expected * 1.2, f"Bucket {bucket} has too many items"
            )

    def test_avalanche(self):
        """Test that small changes in input cause significant changes in output."""
        base_hash = murmur_mix_32("test_avalanche")
        mod_hash = murmur_mix_32("test_avalanchf")

        diff_bits = bin(base_hash ^ mod_hash).count("1")
        self.assertGreaterEqual(
            diff_bits, 10, f"Hash changed only {diff_bits} bits with small input change"
        )


if __name__ == "__main__":
    unittest.main()
