"""Ring buffer storage for monitoring records.

Provides bounded in-memory storage that automatically evicts oldest
entries when the buffer is full. Memory use stays predictable no matter
how much telemetry the host application produces.
"""

import threading
from collections import deque
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class BoundedSeries(Generic[T]):
    """Ring buffer implementation of SeriesStoragePort.

    Stores records in a fixed-size circular buffer. When the buffer
    is full, the oldest record is evicted to make room for the new one.
    Mutations are serialized; reads return a snapshot copy.

    Args:
        max_size: Maximum number of records to store.
    """

    def __init__(self, max_size: int) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._buffer: deque[T] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def append(self, record: T) -> None:
        """Append a record to the end of the series."""
        with self._lock:
            self._buffer.append(record)

    def query(self, predicate: Callable[[T], bool] | None = None) -> list[T]:
        """Return records in insertion order that satisfy predicate."""
        with self._lock:
            snapshot = list(self._buffer)
        if predicate is None:
            return snapshot
        return [record for record in snapshot if predicate(record)]

    def retain(self, predicate: Callable[[T], bool]) -> int:
        """Keep only records satisfying predicate, in place.

        Returns:
            Number of records removed.
        """
        with self._lock:
            kept = [record for record in self._buffer if predicate(record)]
            removed = len(self._buffer) - len(kept)
            self._buffer.clear()
            self._buffer.extend(kept)
        return removed

    def replace(self, match: Callable[[T], bool], update: Callable[[T], T]) -> bool:
        """Replace the first record matching match with update(record).

        Returns:
            True if a record was replaced.
        """
        with self._lock:
            for index, record in enumerate(self._buffer):
                if match(record):
                    self._buffer[index] = update(record)
                    return True
        return False

    def latest(self) -> T | None:
        """Return the most recently appended record, or None."""
        with self._lock:
            return self._buffer[-1] if self._buffer else None

    def tail(self, n: int) -> list[T]:
        """Return the last n records in insertion order."""
        with self._lock:
            snapshot = list(self._buffer)
        return snapshot[-n:] if n > 0 else []

    def __len__(self) -> int:
        return len(self._buffer)


class NamedSeriesStore(Generic[T]):
    """Mapping of metric name to its own BoundedSeries.

    A series is created the first time a name is appended to. The
    capacity applies to each name independently.

    Args:
        max_size_per_name: Maximum number of records kept per name.
    """

    def __init__(self, max_size_per_name: int) -> None:
        self._max_size = max_size_per_name
        self._series: dict[str, BoundedSeries[T]] = {}
        self._lock = threading.Lock()

    def _get_or_create(self, name: str) -> BoundedSeries[T]:
        with self._lock:
            series = self._series.get(name)
            if series is None:
                series = BoundedSeries(self._max_size)
                self._series[name] = series
            return series

    def append(self, name: str, record: T) -> None:
        """Append a record to the series for name."""
        self._get_or_create(name).append(record)

    def query(
        self, name: str, predicate: Callable[[T], bool] | None = None
    ) -> list[T]:
        """Return records for name in insertion order; [] for unknown names."""
        with self._lock:
            series = self._series.get(name)
        if series is None:
            return []
        return series.query(predicate)

    def latest(self, name: str) -> T | None:
        with self._lock:
            series = self._series.get(name)
        return series.latest() if series is not None else None

    def names(self) -> list[str]:
        with self._lock:
            return list(self._series)

    def retain(self, predicate: Callable[[T], bool]) -> int:
        """Keep only matching records in every series.

        Returns:
            Total number of records removed.
        """
        with self._lock:
            all_series = list(self._series.values())
        return sum(series.retain(predicate) for series in all_series)

    def __len__(self) -> int:
        """Number of distinct metric names."""
        with self._lock:
            return len(self._series)
