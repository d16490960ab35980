"""Core domain models for monitoring data."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Severity shared by security events and alerts."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class HealthState(str, Enum):
    """Tri-state health verdict."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class TimeRange:
    """Closed time interval [start, end] in Unix seconds."""

    start: float
    end: float

    def contains(self, timestamp: float) -> bool:
        return self.start <= timestamp <= self.end


@dataclass(frozen=True)
class PerformanceSample:
    """One observed request.

    Attributes:
        endpoint: Request path (e.g., /api/users).
        method: HTTP method.
        response_time_ms: Time taken to respond, in milliseconds.
        status_code: HTTP status code of the response.
        timestamp: Unix timestamp in seconds.
    """

    endpoint: str
    method: str
    response_time_ms: float
    status_code: int
    timestamp: float


@dataclass(frozen=True)
class SecurityEvent:
    """A security-relevant occurrence.

    Attributes:
        event: Event name (e.g., suspicious_login).
        severity: How serious the event is.
        data: Arbitrary structured payload.
        timestamp: Unix timestamp in seconds.
    """

    event: str
    severity: Severity
    data: dict[str, Any]
    timestamp: float


@dataclass(frozen=True)
class UserMetricSample:
    """A per-user measurement (e.g., login_count for user-123)."""

    user_id: str
    metric_type: str
    value: float
    date: float


@dataclass(frozen=True)
class MetricPoint:
    """A single point of a named metric series."""

    timestamp: float
    value: float
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Alert:
    """An alert raised by a rule or created directly.

    Attributes:
        id: Unique identifier (alert_<epoch-ms>_<hex>).
        type: Alert type (e.g., slow_response).
        severity: Alert severity.
        data: Context describing what triggered the alert.
        timestamp: Unix timestamp in seconds.
        acknowledged: Whether an operator has acknowledged the alert.
    """

    id: str
    type: str
    severity: Severity
    data: dict[str, Any]
    timestamp: float
    acknowledged: bool = False


@dataclass(frozen=True)
class AlertDraft:
    """Alert type, severity and data produced by rule evaluation."""

    type: str
    severity: Severity
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceSummary:
    """Aggregate statistics over a set of performance samples."""

    avg_response_time: float = 0.0
    total_requests: int = 0
    error_rate: float = 0.0
    p95_response_time: float = 0.0
    p99_response_time: float = 0.0


@dataclass(frozen=True)
class SecuritySummary:
    total_events: int = 0
    high_severity_events: int = 0
    critical_events: int = 0


@dataclass(frozen=True)
class AlertSummary:
    total: int = 0
    critical: int = 0


@dataclass(frozen=True)
class HealthReport:
    """Health verdict plus the inputs it was derived from."""

    status: HealthState
    performance: PerformanceSummary
    security: SecuritySummary
    alerts: AlertSummary
    uptime_seconds: float


@dataclass(frozen=True)
class WindowedPerformance:
    last_hour: PerformanceSummary
    last_day: PerformanceSummary


@dataclass(frozen=True)
class WindowedSecurity:
    last_hour: list[SecurityEvent]
    last_day: list[SecurityEvent]


@dataclass(frozen=True)
class DashboardAlerts:
    unacknowledged: list[Alert]
    recent: list[Alert]


@dataclass(frozen=True)
class DashboardData:
    """Snapshot consumed by monitoring dashboards."""

    performance: WindowedPerformance
    security: WindowedSecurity
    alerts: DashboardAlerts
    metrics: dict[str, float]
