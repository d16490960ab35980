"""Alert rules evaluated on ingestion.

Rules are pure: they map an ingested record to zero or more AlertDraft
objects. The engine turns drafts into stored alerts.
"""

from vigilpy.config import AlertThresholds
from vigilpy.core.models import AlertDraft, PerformanceSample, SecurityEvent, Severity

SLOW_RESPONSE = "slow_response"
HIGH_ERROR_RATE = "high_error_rate"
SECURITY_EVENT = "security_event"

_ALERTING_SECURITY_SEVERITIES = frozenset({Severity.HIGH, Severity.CRITICAL})


def evaluate_performance(
    sample: PerformanceSample, thresholds: AlertThresholds
) -> list[AlertDraft]:
    """Evaluate performance rules against one sample.

    Both rules can fire for the same sample.

    Args:
        sample: The sample just recorded.
        thresholds: Rule cutoffs.

    Returns:
        Drafts for slow_response and/or high_error_rate.
    """
    drafts: list[AlertDraft] = []
    if sample.response_time_ms > thresholds.slow_response_ms:
        drafts.append(
            AlertDraft(
                type=SLOW_RESPONSE,
                severity=Severity.HIGH,
                data={
                    "endpoint": sample.endpoint,
                    "method": sample.method,
                    "responseTime": sample.response_time_ms,
                    "statusCode": sample.status_code,
                },
            )
        )
    # Fires per server error, not on a computed rate.
    if sample.status_code >= thresholds.server_error_status:
        drafts.append(
            AlertDraft(
                type=HIGH_ERROR_RATE,
                severity=Severity.CRITICAL,
                data={
                    "endpoint": sample.endpoint,
                    "method": sample.method,
                    "statusCode": sample.status_code,
                },
            )
        )
    return drafts


def evaluate_security(event: SecurityEvent) -> list[AlertDraft]:
    """Raise a security_event alert for high and critical events."""
    if event.severity not in _ALERTING_SECURITY_SEVERITIES:
        return []
    return [
        AlertDraft(
            type=SECURITY_EVENT,
            severity=event.severity,
            data={"event": event.event, "data": event.data},
        )
    ]
