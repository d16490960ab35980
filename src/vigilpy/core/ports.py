"""Port interfaces for storage and notification adapters.

These protocols define the contracts that adapters must implement.
The engine depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

from vigilpy.core.models import Alert

T = TypeVar("T")


@runtime_checkable
class SeriesStoragePort(Protocol[T]):
    """Port for bounded, append-only record storage.

    Examples: BoundedSeries.
    """

    def append(self, record: T) -> None:
        """Append a record, evicting the oldest records past capacity."""
        ...

    def query(self, predicate: Callable[[T], bool] | None = None) -> list[T]:
        """Return matching records in insertion order.

        Args:
            predicate: Filter applied to each record. None returns all.

        Returns:
            Snapshot list of records; safe to iterate more than once.
        """
        ...

    def retain(self, predicate: Callable[[T], bool]) -> int:
        """Keep only records matching predicate.

        Returns:
            Number of records removed.
        """
        ...


@runtime_checkable
class NotifierPort(Protocol):
    """Port for alert notification.

    Implementations must return without waiting for delivery and must not
    raise on delivery failure. Examples: NotificationDispatcher, NullNotifier.
    """

    def dispatch(self, alert: Alert) -> None:
        """Hand an alert off for delivery."""
        ...
