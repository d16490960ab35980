"""vigilpy: in-process monitoring and alerting for Python web services."""

from vigilpy.adapters.notify.webhooks import (
    NotificationDispatcher,
    NullNotifier,
    WebhookChannel,
)
from vigilpy.config import (
    AlertThresholds,
    Capacities,
    HealthThresholds,
    MonitoringConfig,
    RetentionPolicy,
)
from vigilpy.core.models import (
    Alert,
    DashboardData,
    HealthReport,
    HealthState,
    MetricPoint,
    PerformanceSample,
    PerformanceSummary,
    SecurityEvent,
    Severity,
    TimeRange,
    UserMetricSample,
)
from vigilpy.engine import MonitoringEngine
from vigilpy.retention import run_periodic_cleanup

__all__ = [
    "Alert",
    "AlertThresholds",
    "Capacities",
    "DashboardData",
    "HealthReport",
    "HealthState",
    "HealthThresholds",
    "MetricPoint",
    "MonitoringConfig",
    "MonitoringEngine",
    "NotificationDispatcher",
    "NullNotifier",
    "PerformanceSample",
    "PerformanceSummary",
    "RetentionPolicy",
    "SecurityEvent",
    "Severity",
    "TimeRange",
    "UserMetricSample",
    "WebhookChannel",
    "run_periodic_cleanup",
]
