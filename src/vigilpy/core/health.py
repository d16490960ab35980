"""Health classification from aggregate telemetry."""

from collections.abc import Sequence

from vigilpy.config import HealthThresholds
from vigilpy.core.models import (
    Alert,
    AlertSummary,
    HealthState,
    PerformanceSummary,
    SecurityEvent,
    SecuritySummary,
    Severity,
)

_HIGH_SEVERITIES = frozenset({Severity.HIGH, Severity.CRITICAL})


def summarize_security(events: Sequence[SecurityEvent]) -> SecuritySummary:
    """Count events overall, high-or-critical, and critical only."""
    return SecuritySummary(
        total_events=len(events),
        high_severity_events=sum(1 for e in events if e.severity in _HIGH_SEVERITIES),
        critical_events=sum(1 for e in events if e.severity == Severity.CRITICAL),
    )


def summarize_alerts(unacknowledged: Sequence[Alert]) -> AlertSummary:
    return AlertSummary(
        total=len(unacknowledged),
        critical=sum(1 for a in unacknowledged if a.severity == Severity.CRITICAL),
    )


def classify(
    performance: PerformanceSummary,
    unacknowledged: Sequence[Alert],
    thresholds: HealthThresholds,
) -> HealthState:
    """Derive the health verdict. First matching rule wins.

    1. Any unacknowledged critical alert, or error rate above
       thresholds.unhealthy_error_rate -> UNHEALTHY.
    2. Mean response time above thresholds.degraded_response_time_ms
       -> DEGRADED.
    3. Otherwise HEALTHY.

    Args:
        performance: Summary over all retained performance samples.
        unacknowledged: Alerts not yet acknowledged.
        thresholds: Verdict cutoffs.

    Returns:
        The health state.
    """
    has_critical = any(a.severity == Severity.CRITICAL for a in unacknowledged)
    if has_critical or performance.error_rate > thresholds.unhealthy_error_rate:
        return HealthState.UNHEALTHY
    if performance.avg_response_time > thresholds.degraded_response_time_ms:
        return HealthState.DEGRADED
    return HealthState.HEALTHY
