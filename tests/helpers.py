"""Test doubles shared across test modules."""

from vigilpy.core.models import Alert

# 2023-11-14T22:13:20Z
START_TIME = 1_700_000_000.0
HOUR = 60 * 60
DAY = 24 * HOUR


class FakeClock:
    """Controllable clock returning Unix seconds."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def set(self, now: float) -> None:
        self.now = now


class RecordingNotifier:
    """Notifier that keeps every dispatched alert."""

    def __init__(self) -> None:
        self.alerts: list[Alert] = []

    def dispatch(self, alert: Alert) -> None:
        self.alerts.append(alert)
