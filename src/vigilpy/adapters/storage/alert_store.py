"""Bounded in-memory alert storage."""

from dataclasses import replace

from vigilpy.adapters.storage.ring_buffer import BoundedSeries
from vigilpy.core.models import Alert, Severity


def _detached(alert: Alert) -> Alert:
    return replace(alert, data=dict(alert.data))


class AlertStore:
    """Stores the most recent alerts in a ring buffer.

    Alerts are immutable; acknowledging replaces the stored record with an
    acknowledged copy. The data map is copied on the way in and out, so
    callers never share it with the stored alert.

    Args:
        max_size: Maximum number of alerts to keep.
    """

    def __init__(self, max_size: int) -> None:
        self._alerts: BoundedSeries[Alert] = BoundedSeries(max_size)

    def add(self, alert: Alert) -> None:
        """Store an alert, evicting the oldest when full."""
        self._alerts.append(_detached(alert))

    def query(self, severity: Severity | None = None) -> list[Alert]:
        """Return alerts, most recent first.

        Args:
            severity: Only return alerts with exactly this severity.

        Returns:
            Alerts sorted by timestamp descending. Alerts with equal
            timestamps keep their insertion order.
        """
        if severity is None:
            alerts = self._alerts.query()
        else:
            alerts = self._alerts.query(lambda a: a.severity == severity)
        return sorted(map(_detached, alerts), key=lambda a: a.timestamp, reverse=True)

    def acknowledge(self, alert_id: str) -> bool:
        """Mark the alert with alert_id as acknowledged.

        Returns:
            True if an alert with that id was found.
        """
        return self._alerts.replace(
            lambda a: a.id == alert_id,
            lambda a: replace(a, acknowledged=True),
        )

    def unacknowledged(self) -> list[Alert]:
        """Unacknowledged alerts in insertion order."""
        return [_detached(a) for a in self._alerts.query(lambda a: not a.acknowledged)]

    def recent(self, n: int) -> list[Alert]:
        """The last n alerts in insertion order."""
        return [_detached(a) for a in self._alerts.tail(n)]

    def retain(self, since: float) -> int:
        """Drop alerts with timestamp < since.

        Returns:
            Number of alerts removed.
        """
        return self._alerts.retain(lambda a: a.timestamp >= since)

    def __len__(self) -> int:
        return len(self._alerts)
