"""Storage adapters implementing core ports."""

from vigilpy.adapters.storage.alert_store import AlertStore
from vigilpy.adapters.storage.ring_buffer import BoundedSeries, NamedSeriesStore

__all__ = [
    "AlertStore",
    "BoundedSeries",
    "NamedSeriesStore",
]
