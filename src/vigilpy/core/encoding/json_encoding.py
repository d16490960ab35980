"""JSON encoder for monitoring records and reports.

Converts models to plain dicts with the camelCase keys used by webhook
payloads and HTTP endpoints.
"""

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from vigilpy.core.models import (
    Alert,
    DashboardData,
    HealthReport,
    MetricPoint,
    PerformanceSummary,
    SecurityEvent,
    UserMetricSample,
)


def isoformat(timestamp: float) -> str:
    """Render a Unix timestamp as an ISO 8601 UTC string."""
    return datetime.fromtimestamp(timestamp, UTC).isoformat().replace("+00:00", "Z")


def encode_alert(alert: Alert) -> dict[str, Any]:
    return {
        "id": alert.id,
        "type": alert.type,
        "severity": alert.severity.value,
        "data": alert.data,
        "timestamp": alert.timestamp,
        "acknowledged": alert.acknowledged,
    }


def encode_security_event(event: SecurityEvent) -> dict[str, Any]:
    return {
        "event": event.event,
        "severity": event.severity.value,
        "data": event.data,
        "timestamp": event.timestamp,
    }


def encode_user_metric(sample: UserMetricSample) -> dict[str, Any]:
    return {
        "userId": sample.user_id,
        "metricType": sample.metric_type,
        "value": sample.value,
        "date": sample.date,
    }


def encode_metric_point(point: MetricPoint) -> dict[str, Any]:
    return {"timestamp": point.timestamp, "value": point.value, "tags": point.tags}


def encode_summary(summary: PerformanceSummary) -> dict[str, Any]:
    return {
        "avgResponseTime": summary.avg_response_time,
        "totalRequests": summary.total_requests,
        "errorRate": summary.error_rate,
        "p95ResponseTime": summary.p95_response_time,
        "p99ResponseTime": summary.p99_response_time,
    }


def encode_health(report: HealthReport) -> dict[str, Any]:
    """Encode a health report.

    Args:
        report: Report returned by MonitoringEngine.get_health_status().

    Returns:
        Dict with status, performance, security, alerts and uptime keys.
    """
    return {
        "status": report.status.value,
        "performance": encode_summary(report.performance),
        "security": {
            "totalEvents": report.security.total_events,
            "highSeverityEvents": report.security.high_severity_events,
            "criticalEvents": report.security.critical_events,
        },
        "alerts": {
            "total": report.alerts.total,
            "critical": report.alerts.critical,
        },
        "uptime": report.uptime_seconds,
    }


def _encode_events(events: Iterable[SecurityEvent]) -> list[dict[str, Any]]:
    return [encode_security_event(e) for e in events]


def _encode_alerts(alerts: Iterable[Alert]) -> list[dict[str, Any]]:
    return [encode_alert(a) for a in alerts]


def encode_dashboard(data: DashboardData) -> dict[str, Any]:
    """Encode a dashboard snapshot."""
    return {
        "performance": {
            "lastHour": encode_summary(data.performance.last_hour),
            "lastDay": encode_summary(data.performance.last_day),
        },
        "security": {
            "lastHour": _encode_events(data.security.last_hour),
            "lastDay": _encode_events(data.security.last_day),
        },
        "alerts": {
            "unacknowledged": _encode_alerts(data.alerts.unacknowledged),
            "recent": _encode_alerts(data.alerts.recent),
        },
        "metrics": dict(data.metrics),
    }


def dumps(obj: Any, indent: int | None = None) -> str:
    """Serialize an encoded object, stringifying values json cannot handle."""
    return json.dumps(obj, indent=indent, default=str)
