"""
HyperLogLog cardinality estimator with pluggable register storage.

The estimator hashes every item to 32 bits, uses the top ``p`` bits to pick a
register and the remaining ``32 - p`` bits to compute a rank, and keeps the
maximum rank per register. The estimate is the bias-corrected harmonic mean
of ``2^-register`` with linear counting for small cardinalities.
"""

import math
import time
from typing import Any, Dict, List, Optional, Type, Union

from tiny_hll.algorithms.registers import (
    MAX_REGISTER_VALUE,
    REGISTER_BITS,
    RegisterStore,
    get_register_store,
)
from tiny_hll.core.base import CardinalityEstimator
from tiny_hll.core.hash import murmur_mix_32

HASH_BITS = 32
MIN_PRECISION = 4
MAX_PRECISION = 16

# Share of the 32-bit hash space beyond which the raw estimate drifts low
_LARGE_RANGE_SHARE = 1 / 30


def alpha(m: int) -> float:
    """
    Bias-correction constant for ``m`` registers.

    Args:
        m: Number of registers.

    Returns:
        The alpha_m constant of the HyperLogLog estimator.
    """
    if m == 16:
        return 0.673
    if m == 32:
        return 0.697
    if m == 64:
        return 0.709
    return 0.7213 / (1.0 + 1.079 / m)


def rank(w: int, width: int) -> int:
    """
    Position of the lowest set bit of ``w``, counting from 1.

    A sentinel bit is placed just above the ``width`` value bits, so a zero
    value ranks ``width + 1``. The result is capped at the largest value a
    register can hold.

    Args:
        w: The hash bits left over after the register index is removed.
        width: Number of bits in ``w``.

    Returns:
        The rank, in [1, MAX_REGISTER_VALUE].
    """
    x = w | (1 << width)
    return min((x & -x).bit_length(), MAX_REGISTER_VALUE)


class HyperLogLog(CardinalityEstimator):
    """
    HyperLogLog for cardinality estimation in data streams.

    HyperLogLog estimates the number of unique elements in a large data stream
    using a small, fixed amount of memory. It is based on the observation that
    the cardinality of a set can be estimated from the longest run of trailing
    zero bits seen among the hash values of its elements.

    The precision parameter (p) determines both the accuracy and the memory usage:
    - The estimator keeps m = 2^p registers of 5 significant bits each
    - The standard error is roughly 1.04/sqrt(m)

    For common use cases:
    - p=10: 1024 registers, ~3.25% error (default)
    - p=12: 4096 registers, ~1.62% error
    - p=14: 16384 registers, ~0.81% error
    - p=16: 65536 registers, ~0.41% error

    Registers live in a RegisterStore. "byte" spends one byte per register;
    "packed" spends five bits per register. Both give identical estimates.

    No large-range correction is applied: the raw estimate is returned as-is
    above the linear counting threshold, which is accurate well below the
    2^32 / 30 region where hash collisions start to matter.

    References:
        - Flajolet, P., Fusy, E., Gandouet, O., & Meunier, F. (2007).
          HyperLogLog: the analysis of a near-optimal cardinality estimation algorithm.
    """

    # Linear counting is used while the raw estimate is below this many registers
    _THRESHOLD_SMALL = 2.5

    def __init__(
        self,
        precision: int = 10,
        registers: Union[str, Type[RegisterStore]] = "byte",
        memory_limit_bytes: Optional[int] = None,
    ):
        """
        Initialize a new HyperLogLog estimator.

        Args:
            precision: The precision parameter (p), controlling accuracy and memory usage.
                      Valid values are 4 to 16. Higher values increase accuracy but use more memory.
                      Default is 10, providing ~3.25% standard error.
            registers: Register storage strategy, "byte" or "packed" (or a
                      RegisterStore subclass).
            memory_limit_bytes: Optional maximum memory usage in bytes.

        Raises:
            TypeError: If precision is not an integer.
            ValueError: If precision is outside the valid range of 4 to 16,
                        or the register store is unknown.
        """
        super().__init__(memory_limit_bytes)

        if isinstance(precision, bool) or not isinstance(precision, int):
            raise TypeError(
                f"Precision must be an integer, got {type(precision).__name__}"
            )
        if not MIN_PRECISION <= precision <= MAX_PRECISION:
            raise ValueError(
                f"Precision must be between {MIN_PRECISION} and {MAX_PRECISION} "
                f"(inclusive), got {precision}"
            )

        store_class = get_register_store(registers)

        self._precision = precision
        # Number of registers (m = 2^precision)
        self._m = 1 << precision
        self._alpha = alpha(self._m)
        self._alpha_mm = self._alpha * self._m * self._m

        # The index is the top 'p' bits, the rank comes from the rest
        self._value_bits = HASH_BITS - precision
        self._value_mask = (1 << self._value_bits) - 1

        self._registers = store_class(self._m)

    def add(self, item: Any) -> None:
        """
        Add an item from the stream to the estimator.

        This method:
        1. Hashes the item to a 32-bit value
        2. Uses the top 'p' bits to select a register
        3. Ranks the remaining bits by the position of their lowest set bit
        4. Raises the register to that rank if it is larger

        Args:
            item: The item to add. Bytes are hashed as-is, strings as UTF-8,
                  other objects through their repr().
        """
        super().add(item)

        start = time.perf_counter() if self._track_performance else None

        hash_value = murmur_mix_32(item)
        register_index = hash_value >> self._value_bits
        remaining_hash = hash_value & self._value_mask

        self._registers.set_if_greater(
            register_index, rank(remaining_hash, self._value_bits)
        )

        if start is not None:
            self._record_update_time(time.perf_counter() - start)

    def estimate(self) -> float:
        """
        Estimate the number of unique items in the stream.

        The raw estimate is alpha * m^2 / sum(2^-M[j]). While it is at most
        2.5 * m and some registers are still zero, linear counting
        m * ln(m / V) is returned instead, V being the number of zero registers.
        An empty estimator therefore reports 0.0.

        This does not modify the estimator and can be called at any time.

        Returns:
            The estimated number of unique items in the stream.
        """
        sum_of_inverses = 0.0
        zero_registers = 0

        for register_value in self._registers:
            sum_of_inverses += math.pow(2.0, -register_value)
            if register_value == 0:
                zero_registers += 1

        estimate = self._alpha_mm / sum_of_inverses

        if estimate <= self._THRESHOLD_SMALL * self._m and zero_registers > 0:
            estimate = self._m * math.log(self._m / zero_registers)

        return estimate

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def num_registers(self) -> int:
        return self._m

    @property
    def alpha(self) -> float:
        """Bias-correction constant alpha_m."""
        return self._alpha

    @property
    def register_store(self) -> str:
        """Short name of the register storage strategy."""
        return self._registers.name

    @classmethod
    def create_from_error_rate(
        cls,
        relative_error: float,
        registers: Union[str, Type[RegisterStore]] = "byte",
        memory_limit_bytes: Optional[int] = None,
    ) -> "HyperLogLog":
        """
        Create a HyperLogLog estimator with the desired error guarantees.

        Args:
            relative_error: The target relative error (standard error)
                           For example, 0.01 means a target error of 1%
            registers: Register storage strategy
            memory_limit_bytes: Optional maximum memory usage in bytes

        Returns:
            A new HyperLogLog estimator configured for the specified error bound

        Raises:
            ValueError: If relative_error is too small to achieve with valid precision,
                       or if relative_error is not between 0 and 1
        """
        if not (0 < relative_error < 1):
            raise ValueError("Relative error must be between 0 and 1")

        # Standard error = 1.04/sqrt(2^p), so p = log2((1.04/relative_error)^2)
        precision = math.ceil(math.log2((1.04 / relative_error) ** 2))

        if precision > MAX_PRECISION:
            raise ValueError(
                f"Relative error of {relative_error} is too small to achieve "
                f"with maximum precision of {MAX_PRECISION}. "
                f"Minimum achievable error is approximately "
                f"{1.04 / math.sqrt(1 << MAX_PRECISION):.2%}."
            )

        return cls(
            precision=max(precision, MIN_PRECISION),
            registers=registers,
            memory_limit_bytes=memory_limit_bytes,
        )

    @classmethod
    def create_from_memory_limit(
        cls,
        memory_bytes: int,
        registers: Union[str, Type[RegisterStore]] = "byte",
    ) -> "HyperLogLog":
        """
        Create a HyperLogLog estimator optimized for a given memory limit.

        This factory method chooses the highest precision that fits within
        the specified memory budget. The packed register store fits a higher
        precision into the same budget than the byte store.

        Args:
            memory_bytes: Maximum memory usage in bytes
            registers: Register storage strategy

        Returns:
            A new HyperLogLog estimator optimized for the memory constraint

        Raises:
            ValueError: If memory_bytes is too small for even the minimum precision
        """
        if memory_bytes <= 0:
            raise ValueError("Memory limit must be positive")

        best = None
        for precision in range(MIN_PRECISION, MAX_PRECISION + 1):
            candidate = cls(
                precision=precision,
                registers=registers,
                memory_limit_bytes=memory_bytes,
            )
            if not candidate.check_memory_limit():
                break
            best = candidate

        if best is None:
            smallest = cls(precision=MIN_PRECISION, registers=registers)
            raise ValueError(
                f"Memory limit of {memory_bytes} bytes is too small. "
                f"Minimum size is approximately {smallest.estimate_size()} bytes."
            )

        return best

    def get_register_values(self) -> List[int]:
        """
        Get the current values of all registers.

        Returns:
            A list (a copy) containing the current register values.
        """
        return self._registers.to_list()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the HyperLogLog estimator.

        Extends the base statistics with the precision parameters and, once
        items have been added, the register value distribution and saturation.

        Returns:
            A dictionary containing various statistics about the estimator.
        """
        stats = super().get_stats()

        stats.update(
            {
                "precision": self._precision,
                "num_registers": self._m,
                "alpha_value": self._alpha,
                "register_store": self._registers.name,
                "register_bytes": self._registers.nbytes,
            }
        )

        if self._items_processed > 0:
            register_values = self._registers.to_list()
            empty_registers = register_values.count(0)
            max_register = max(register_values)

            # Keys are strings for JSON compatibility
            register_distribution = {}
            for value in range(max_register + 1):
                count = register_values.count(value)
                if count > 0:
                    register_distribution[str(value)] = count

            stats.update(
                {
                    "empty_registers": empty_registers,
                    "empty_registers_pct": (empty_registers / self._m) * 100,
                    "max_register_value": max_register,
                    "avg_register_value": sum(register_values) / self._m,
                    "register_value_distribution": register_distribution,
                }
            )

            estimate = stats["estimated_cardinality"]
            stats["estimate"] = estimate

            stats["theoretical_max_countable"] = 2**self._value_bits
            stats["saturation_pct"] = min(
                100.0, (estimate / stats["theoretical_max_countable"]) * 100
            )

        return stats

    def error_bounds(self) -> Dict[str, float]:
        """
        Calculate the theoretical error bounds for this estimator.

        Returns:
            A dictionary with the error bounds:
            - relative_error: The standard error (approximately 1.04/sqrt(m))
            - confidence_68pct: Error range for 68% confidence (1 sigma)
            - confidence_95pct: Error range for 95% confidence (2 sigma)
            - confidence_99pct: Error range for 99% confidence (3 sigma)
        """
        bounds = super().error_bounds()

        std_error = 1.04 / math.sqrt(self._m)

        bounds.update(
            {
                "relative_error": std_error,
                "confidence_68pct": std_error,
                "confidence_95pct": std_error * 1.96,
                "confidence_99pct": std_error * 2.58,
            }
        )

        return bounds

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of the HyperLogLog in bytes.

        Returns:
            Estimated size in bytes, dominated by the register store.
        """
        return super().estimate_size() + self._registers.estimate_size()

    def analyze_performance(self) -> Dict[str, Any]:
        """
        Perform a detailed analysis of the HyperLogLog estimator's performance.

        Returns:
            A dictionary containing memory efficiency, accuracy and saturation
            metrics, plus a list of human-readable recommendations.
        """
        total_bytes = self.estimate_size()
        register_bytes = self._registers.nbytes
        estimate = self.estimate()
        empty_registers = self._registers.count_zeros()
        max_register = max(self._registers)
        # Largest rank a register can reach for this precision
        max_rank = min(self._value_bits + 1, MAX_REGISTER_VALUE)

        analysis: Dict[str, Any] = {
            "algorithm": "HyperLogLog",
            "memory_efficiency": {
                "register_store": self._registers.name,
                "bits_per_register": (register_bytes * 8) / self._m,
                "bits_per_item": (total_bytes * 8) / max(1.0, estimate),
                "total_bytes": total_bytes,
                "register_bytes": register_bytes,
                "overhead_bytes": total_bytes - register_bytes,
            },
            "accuracy": {
                "precision_parameter": self._precision,
                "standard_error": 1.04 / math.sqrt(self._m),
                "expected_accuracy": f"{(1 - (1.04 / math.sqrt(self._m))) * 100:.2f}%",
            },
            "saturation": {
                "empty_registers": empty_registers,
                "empty_register_pct": empty_registers / self._m * 100,
                "max_register_value": max_register,
                "theoretical_max_value": max_rank,
                "saturation_level": max_register / max_rank,
                "hash_space_share": estimate / 2**HASH_BITS,
            },
            "recommendations": [],
        }

        if (
            analysis["saturation"]["empty_register_pct"] > 50
            and self.items_processed > 1000
        ):
            analysis["recommendations"].append(
                "Consider reducing precision to save memory (many empty registers)"
            )

        # Hash collisions bias the raw estimate past 2^32 / 30 and nothing corrects it
        if analysis["saturation"]["hash_space_share"] > _LARGE_RANGE_SHARE:
            analysis["recommendations"].append(
                "Warning: Approaching hash space saturation, estimates above "
                f"{2**HASH_BITS * _LARGE_RANGE_SHARE:,.0f} are biased low"
            )

        if (
            self._registers.name != "packed"
            and analysis["memory_efficiency"]["bits_per_register"] > REGISTER_BITS
            and self._m >= 4096
        ):
            analysis["recommendations"].append(
                "Packed registers would store the same state in 5 bits per register"
            )

        return analysis
