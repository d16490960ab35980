"""Configuration for the monitoring engine.

Everything has a working default. Webhook destinations are read once from
the environment by MonitoringConfig.from_env().
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from vigilpy.adapters.notify.webhooks import WebhookChannel, channels_from_env

DAY_SECONDS = 24 * 60 * 60

DEFAULT_WEBHOOK_TIMEOUT = 10.0

DEFAULT_DASHBOARD_METRICS = {
    "totalUsers": "total_users",
    "activeSessions": "active_sessions",
    "studySessionsCreated": "study_sessions_created",
}


@dataclass(frozen=True)
class Capacities:
    """Maximum number of records kept per store."""

    performance: int = 1000
    security: int = 1000
    user_metrics: int = 10000
    per_metric: int = 1000
    alerts: int = 100


@dataclass(frozen=True)
class AlertThresholds:
    """Cutoffs for the ingestion alert rules.

    Attributes:
        slow_response_ms: Responses strictly slower than this raise
            slow_response.
        server_error_status: Status codes at or above this raise
            high_error_rate.
    """

    slow_response_ms: int = 5000
    server_error_status: int = 500


@dataclass(frozen=True)
class HealthThresholds:
    """Cutoffs for the health verdict.

    Attributes:
        unhealthy_error_rate: Error percentage above which the system is
            unhealthy.
        degraded_response_time_ms: Mean response time above which the
            system is degraded. Kept below AlertThresholds.slow_response_ms.
    """

    unhealthy_error_rate: float = 10.0
    degraded_response_time_ms: float = 3000.0


@dataclass(frozen=True)
class RetentionPolicy:
    """Maximum record ages kept by cleanup()."""

    record_max_age_seconds: float = 7 * DAY_SECONDS
    alert_max_age_seconds: float = 30 * DAY_SECONDS


@dataclass(frozen=True)
class MonitoringConfig:
    """Complete engine configuration."""

    capacities: Capacities = field(default_factory=Capacities)
    alert_thresholds: AlertThresholds = field(default_factory=AlertThresholds)
    health_thresholds: HealthThresholds = field(default_factory=HealthThresholds)
    retention: RetentionPolicy = field(default_factory=RetentionPolicy)
    channels: tuple[WebhookChannel, ...] = ()
    webhook_timeout: float = DEFAULT_WEBHOOK_TIMEOUT
    dashboard_metrics: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_DASHBOARD_METRICS)
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MonitoringConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ).

        Returns:
            MonitoringConfig with webhook channels for every configured URL.
        """
        env = os.environ if environ is None else environ
        timeout_raw = env.get("VIGILPY_WEBHOOK_TIMEOUT", "")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_WEBHOOK_TIMEOUT
        except ValueError:
            timeout = DEFAULT_WEBHOOK_TIMEOUT
        return cls(channels=tuple(channels_from_env(env)), webhook_timeout=timeout)
