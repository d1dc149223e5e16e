"""
Base classes for tiny-hll estimators.

StreamSummary holds the bookkeeping every estimator shares: the count of items
seen, optional per-update timing, and a rough memory footprint checked against
an optional limit. CardinalityEstimator adds the distinct-count query.
"""

import abc
import sys
from collections import deque
from typing import Any, Deque, Dict, Optional


class StreamSummary(abc.ABC):
    """
    Abstract base class for summaries fed one stream item at a time.

    Summaries are not thread-safe; one instance must be driven by a single
    thread of control.
    """

    def __init__(self, memory_limit_bytes: Optional[int] = None):
        """
        Args:
            memory_limit_bytes: Optional maximum memory usage in bytes.
                                None means no explicit limit.
        """
        self._memory_limit_bytes = memory_limit_bytes
        self._items_processed = 0

        # Update timing, only collected while tracking is enabled
        self._track_performance = False
        self._update_count = 0
        self._total_update_time = 0.0
        self._last_update_time = 0.0
        self._recent_update_times: Optional[Deque[float]] = None

    @abc.abstractmethod
    def add(self, item: Any) -> None:
        """
        Feed one item to the summary.

        Subclasses call super().add(item) so items_processed stays accurate.
        """
        self._items_processed += 1

    @property
    def items_processed(self) -> int:
        """Number of items passed to add(), duplicates included."""
        return self._items_processed

    def enable_performance_tracking(
        self, track_recent_updates: bool = True, max_history: int = 100
    ) -> None:
        """
        Start timing every update.

        Timing adds overhead, so it is off by default.

        Args:
            track_recent_updates: Also keep the durations of the latest updates.
            max_history: How many recent durations to keep.
        """
        self._track_performance = True
        if track_recent_updates:
            self._recent_update_times = deque(maxlen=max(1, max_history))
        else:
            self._recent_update_times = None

    def disable_performance_tracking(self) -> None:
        """Stop timing updates. Totals gathered so far are kept."""
        self._track_performance = False
        self._recent_update_times = None

    def _record_update_time(self, elapsed: float) -> None:
        """Account for one timed update lasting ``elapsed`` seconds."""
        self._update_count += 1
        self._total_update_time += elapsed
        self._last_update_time = elapsed
        if self._recent_update_times is not None:
            self._recent_update_times.append(elapsed)

    def get_performance_stats(self) -> Dict[str, Any]:
        """
        Report item count, memory use and update timings.

        Timing keys appear only once at least one update has been timed;
        durations are given in nanoseconds.
        """
        stats: Dict[str, Any] = {
            "items_processed": self._items_processed,
            "memory_bytes": self.estimate_size(),
        }

        if self._update_count:
            stats["avg_update_time_ns"] = (
                self._total_update_time / self._update_count * 1e9
            )
            stats["last_update_time_ns"] = self._last_update_time * 1e9

        if self._recent_update_times:
            recent_ns = [t * 1e9 for t in self._recent_update_times]
            stats["recent_update_times_ns"] = recent_ns
            stats["min_update_time_ns"] = min(recent_ns)
            stats["max_update_time_ns"] = max(recent_ns)

        return stats

    def estimate_size(self) -> int:
        """
        Rough memory footprint in bytes.

        Covers the object and its attribute dict; subclasses add their own
        data structures.
        """
        size = sys.getsizeof(self) + sys.getsizeof(self.__dict__)
        if self._recent_update_times is not None:
            size += sys.getsizeof(self._recent_update_times)
            size += len(self._recent_update_times) * sys.getsizeof(0.0)
        return size

    def check_memory_limit(self) -> bool:
        """True if there is no limit or estimate_size() is within it."""
        if self._memory_limit_bytes is None:
            return True
        return self.estimate_size() <= self._memory_limit_bytes

    def error_bounds(self) -> Dict[str, float]:
        """Theoretical error figures; empty unless a subclass provides them."""
        return {}

    def get_stats(self) -> Dict[str, Any]:
        """
        Summary state for monitoring and debugging.

        Subclasses extend the dictionary returned by super().get_stats().
        """
        memory_bytes = self.estimate_size()
        stats: Dict[str, Any] = {
            "type": type(self).__name__,
            "items_processed": self._items_processed,
            "memory_bytes": memory_bytes,
        }

        if self._memory_limit_bytes is not None:
            stats["memory_limit_bytes"] = self._memory_limit_bytes
            stats["memory_usage_pct"] = memory_bytes / self._memory_limit_bytes * 100

        if self._update_count:
            stats["avg_update_time_ns"] = (
                self._total_update_time / self._update_count * 1e9
            )

        stats.update(self.error_bounds())
        return stats


class CardinalityEstimator(StreamSummary):
    """Summary that estimates the number of distinct items seen."""

    @abc.abstractmethod
    def estimate(self) -> float:
        """Estimated number of distinct items added so far."""

    def query(self) -> float:
        """Alias for estimate()."""
        return self.estimate()

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats["estimated_cardinality"] = self.estimate()
        return stats
