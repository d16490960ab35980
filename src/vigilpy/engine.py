"""The monitoring engine: ingestion, queries, alerting and retention.

A MonitoringEngine owns all monitoring state for one process. Construct
one at application start and pass it to whatever needs it; tests build a
fresh engine per case.

Example:
    ```python
    from vigilpy import MonitoringEngine

    engine = MonitoringEngine.from_env()
    engine.record_api_performance("/api/users", "GET", 120, 200)
    engine.get_health_status().status
    ```
"""

import logging
import math
import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

from vigilpy.adapters.notify.webhooks import NotificationDispatcher
from vigilpy.adapters.storage.alert_store import AlertStore
from vigilpy.adapters.storage.ring_buffer import BoundedSeries, NamedSeriesStore
from vigilpy.config import MonitoringConfig
from vigilpy.core import health, rules, stats
from vigilpy.core.alerts import build_alert
from vigilpy.core.models import (
    Alert,
    AlertDraft,
    DashboardAlerts,
    DashboardData,
    HealthReport,
    MetricPoint,
    PerformanceSample,
    PerformanceSummary,
    SecurityEvent,
    Severity,
    TimeRange,
    UserMetricSample,
    WindowedPerformance,
    WindowedSecurity,
)
from vigilpy.core.ports import NotifierPort

logger = logging.getLogger(__name__)

HOUR_SECONDS = 60 * 60
DAY_SECONDS = 24 * HOUR_SECONDS
RECENT_ALERTS = 10

Clock = Callable[[], float]


def _coerce_severity(severity: Severity | str) -> Severity:
    """Parse a severity for ingestion; unknown values become LOW."""
    try:
        return Severity(severity)
    except ValueError:
        logger.warning("Unknown severity %r recorded as low", severity)
        return Severity.LOW


def _coerce_number(value: Any, name: str) -> float | None:
    """Parse a numeric ingestion argument; None (with a warning) if unusable."""
    if isinstance(value, bool):
        number = None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = None
    if number is None or math.isnan(number) or math.isinf(number):
        logger.warning("Invalid %s %r; sample dropped", name, value)
        return None
    return number


def _in_range(time_range: TimeRange | None) -> Callable[[float], bool]:
    if time_range is None:
        return lambda _: True
    return time_range.contains


class MonitoringEngine:
    """In-memory monitoring and alerting service.

    Ingestion methods (record_*) never raise: rule evaluation and alert
    hand-off are isolated behind their own failure boundary. Query methods
    (get_*) return snapshots and zero-valued results when there is no data.
    """

    def __init__(
        self,
        config: MonitoringConfig | None = None,
        notifier: NotifierPort | None = None,
        clock: Clock = time.time,
    ) -> None:
        """Initialize empty stores.

        Args:
            config: Engine configuration (default: MonitoringConfig()).
            notifier: Alert notifier. Defaults to a NotificationDispatcher
                over config.channels.
            clock: Returns the current Unix time in seconds.
        """
        self.config = config or MonitoringConfig()
        self._clock = clock
        self._started_at = clock()
        if notifier is None:
            notifier = NotificationDispatcher(
                self.config.channels, timeout=self.config.webhook_timeout
            )
        self.notifier = notifier
        capacities = self.config.capacities
        self._performance: BoundedSeries[PerformanceSample] = BoundedSeries(
            capacities.performance
        )
        self._security: BoundedSeries[SecurityEvent] = BoundedSeries(capacities.security)
        self._user_metrics: BoundedSeries[UserMetricSample] = BoundedSeries(
            capacities.user_metrics
        )
        self._metrics: NamedSeriesStore[MetricPoint] = NamedSeriesStore(
            capacities.per_metric
        )
        self._alerts = AlertStore(capacities.alerts)
        self._cleanup_lock = threading.Lock()

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        clock: Clock = time.time,
    ) -> "MonitoringEngine":
        """Build an engine whose webhook channels come from the environment."""
        return cls(MonitoringConfig.from_env(environ), clock=clock)

    def now(self) -> float:
        return self._clock()

    # --- Ingestion ---

    def record_api_performance(
        self,
        endpoint: str,
        method: str,
        response_time_ms: float,
        status_code: int,
    ) -> None:
        """Record one request and evaluate the performance alert rules.

        Samples with a non-numeric response time or status code are logged
        and dropped.
        """
        elapsed = _coerce_number(response_time_ms, "response_time_ms")
        status = _coerce_number(status_code, "status_code")
        if elapsed is None or status is None:
            return
        sample = PerformanceSample(
            endpoint=endpoint,
            method=method,
            response_time_ms=int(elapsed) if elapsed.is_integer() else elapsed,
            status_code=int(status),
            timestamp=self.now(),
        )
        self._performance.append(sample)
        self._raise_alerts(
            lambda: rules.evaluate_performance(sample, self.config.alert_thresholds)
        )

    def record_security_event(
        self,
        event: str,
        severity: Severity | str,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Record a security event; high and critical events raise an alert."""
        security_event = SecurityEvent(
            event=event,
            severity=_coerce_severity(severity),
            data=data if data is not None else {},
            timestamp=self.now(),
        )
        self._security.append(security_event)
        self._raise_alerts(lambda: rules.evaluate_security(security_event))

    def record_user_metric(self, user_id: str, metric_type: str, value: float) -> None:
        """Record a per-user measurement."""
        self._user_metrics.append(
            UserMetricSample(
                user_id=user_id, metric_type=metric_type, value=value, date=self.now()
            )
        )

    def record_metric(
        self, name: str, value: float, tags: dict[str, str] | None = None
    ) -> None:
        """Append a point to the named metric series."""
        point = MetricPoint(timestamp=self.now(), value=value, tags=dict(tags or {}))
        self._metrics.append(name, point)

    def _raise_alerts(self, evaluate: Callable[[], list[AlertDraft]]) -> None:
        try:
            for draft in evaluate():
                self._store_alert(draft)
        except Exception:
            logger.exception("Alert rule evaluation failed")

    # --- Queries ---

    def get_performance_metrics(
        self,
        endpoint: str | None = None,
        time_range: TimeRange | None = None,
    ) -> PerformanceSummary:
        """Aggregate performance samples.

        Args:
            endpoint: Only include samples for this endpoint.
            time_range: Only include samples inside this closed range.

        Returns:
            PerformanceSummary; all zeros when no samples match.
        """
        in_range = _in_range(time_range)
        samples = self._performance.query(
            lambda s: (endpoint is None or s.endpoint == endpoint)
            and in_range(s.timestamp)
        )
        return stats.summarize(samples)

    def get_security_events(
        self, time_range: TimeRange | None = None
    ) -> list[SecurityEvent]:
        in_range = _in_range(time_range)
        return self._security.query(lambda e: in_range(e.timestamp))

    def get_user_metrics(
        self,
        user_id: str,
        metric_type: str | None = None,
        days: float = 30,
    ) -> list[UserMetricSample]:
        """Samples for user_id recorded within the last days."""
        cutoff = self.now() - days * DAY_SECONDS
        return self._user_metrics.query(
            lambda m: m.user_id == user_id
            and m.date >= cutoff
            and (metric_type is None or m.metric_type == metric_type)
        )

    def get_metric(
        self, name: str, time_range: TimeRange | None = None
    ) -> list[MetricPoint]:
        in_range = _in_range(time_range)
        return self._metrics.query(name, lambda p: in_range(p.timestamp))

    def get_latest_metric_value(self, name: str, default: float = 0) -> float:
        point = self._metrics.latest(name)
        return point.value if point is not None else default

    # --- Alerts ---

    def create_alert(
        self,
        alert_type: str,
        severity: Severity | str,
        data: dict[str, Any] | None = None,
    ) -> Alert:
        """Create, store and dispatch an alert.

        Args:
            alert_type: Alert type (e.g., disk_full).
            severity: One of low, medium, high, critical.
            data: Context for the alert.

        Returns:
            The stored alert.

        Raises:
            ValueError: If severity is not a known severity.
        """
        draft = AlertDraft(type=alert_type, severity=Severity(severity), data=data or {})
        return self._store_alert(draft)

    def _store_alert(self, draft: AlertDraft) -> Alert:
        alert = build_alert(draft, self.now())
        self._alerts.add(alert)
        logger.info(
            "Alert %s created: type=%s severity=%s",
            alert.id,
            alert.type,
            alert.severity.value,
        )
        try:
            self.notifier.dispatch(alert)
        except Exception:
            logger.exception("Alert dispatch failed for %s", alert.id)
        return alert

    def get_alerts(self, severity: Severity | str | None = None) -> list[Alert]:
        """Alerts sorted by timestamp descending, optionally by severity.

        An unknown severity matches no alert.
        """
        if severity is None:
            return self._alerts.query()
        try:
            wanted = Severity(severity)
        except ValueError:
            return []
        return self._alerts.query(wanted)

    def acknowledge_alert(self, alert_id: str) -> None:
        """Acknowledge an alert. Unknown ids are ignored."""
        if not self._alerts.acknowledge(alert_id):
            logger.debug("Acknowledge ignored for unknown alert %s", alert_id)

    # --- Health and dashboard ---

    def get_health_status(self) -> HealthReport:
        """Classify health over the whole retained window."""
        performance = stats.summarize(self._performance.query())
        unacknowledged = self._alerts.unacknowledged()
        return HealthReport(
            status=health.classify(
                performance, unacknowledged, self.config.health_thresholds
            ),
            performance=performance,
            security=health.summarize_security(self._security.query()),
            alerts=health.summarize_alerts(unacknowledged),
            uptime_seconds=self.now() - self._started_at,
        )

    def get_dashboard_data(self) -> DashboardData:
        """Snapshot of the last hour and day plus alert and metric state."""
        now = self.now()
        last_hour = TimeRange(now - HOUR_SECONDS, now)
        last_day = TimeRange(now - DAY_SECONDS, now)
        return DashboardData(
            performance=WindowedPerformance(
                last_hour=self.get_performance_metrics(time_range=last_hour),
                last_day=self.get_performance_metrics(time_range=last_day),
            ),
            security=WindowedSecurity(
                last_hour=self.get_security_events(last_hour),
                last_day=self.get_security_events(last_day),
            ),
            alerts=DashboardAlerts(
                unacknowledged=self._alerts.unacknowledged(),
                recent=self._alerts.recent(RECENT_ALERTS),
            ),
            metrics={
                key: self.get_latest_metric_value(name)
                for key, name in self.config.dashboard_metrics.items()
            },
        )

    # --- Retention ---

    def cleanup(self) -> None:
        """Drop records past their retention age.

        Keeps records with timestamp >= now - max_age. A call made while
        another sweep is running returns without doing anything.
        """
        if not self._cleanup_lock.acquire(blocking=False):
            logger.debug("Cleanup already running; skipped")
            return
        try:
            now = self.now()
            policy = self.config.retention
            record_cutoff = now - policy.record_max_age_seconds
            alert_cutoff = now - policy.alert_max_age_seconds
            removed = {
                "performance": self._performance.retain(
                    lambda s: s.timestamp >= record_cutoff
                ),
                "security": self._security.retain(lambda e: e.timestamp >= record_cutoff),
                "user_metrics": self._user_metrics.retain(
                    lambda m: m.date >= record_cutoff
                ),
                "metrics": self._metrics.retain(lambda p: p.timestamp >= record_cutoff),
                "alerts": self._alerts.retain(alert_cutoff),
            }
            logger.debug("Cleanup removed %s", removed)
        finally:
            self._cleanup_lock.release()

    # --- Introspection ---

    def counts(self) -> dict[str, int]:
        """Number of records currently held per store."""
        return {
            "performance": len(self._performance),
            "security": len(self._security),
            "user_metrics": len(self._user_metrics),
            "metrics": sum(len(self._metrics.query(n)) for n in self._metrics.names()),
            "alerts": len(self._alerts),
        }
