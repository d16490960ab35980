"""FastAPI adapter for monitoring endpoints."""

from typing import Any

from fastapi import APIRouter, Query, Response

from vigilpy.core.encoding.json_encoding import (
    dumps,
    encode_alert,
    encode_dashboard,
    encode_health,
    encode_metric_point,
    encode_security_event,
    encode_summary,
    encode_user_metric,
)
from vigilpy.core.models import HealthState, Severity, TimeRange
from vigilpy.engine import MonitoringEngine


def _json_response(obj: Any, status_code: int = 200) -> Response:
    return Response(content=dumps(obj), status_code=status_code, media_type="application/json")


def _time_range(
    engine: MonitoringEngine, start: float | None, end: float | None
) -> TimeRange | None:
    if start is None and end is None:
        return None
    return TimeRange(
        start=start if start is not None else 0.0,
        end=end if end is not None else engine.now(),
    )


def create_monitoring_router(engine: MonitoringEngine) -> APIRouter:
    """Create a FastAPI router with health, dashboard and alert endpoints.

    Args:
        engine: The engine to query.

    Returns:
        APIRouter with /health, /dashboard, /alerts and
        /metrics/performance endpoints configured.
    """
    router = APIRouter()

    @router.get("/health")
    async def get_health() -> Response:
        """Return the health report; 503 when unhealthy."""
        report = engine.get_health_status()
        status = 503 if report.status == HealthState.UNHEALTHY else 200
        return _json_response(encode_health(report), status)

    @router.get("/dashboard")
    async def get_dashboard() -> Response:
        return _json_response(encode_dashboard(engine.get_dashboard_data()))

    @router.get("/alerts")
    async def get_alerts(severity: Severity | None = Query(default=None)) -> Response:
        """Return alerts, most recent first.

        Args:
            severity: Only return alerts with this severity.
        """
        return _json_response([encode_alert(a) for a in engine.get_alerts(severity)])

    @router.post("/alerts/{alert_id}/acknowledge", status_code=204)
    async def acknowledge_alert(alert_id: str) -> Response:
        engine.acknowledge_alert(alert_id)
        return Response(status_code=204)

    @router.get("/metrics/performance")
    async def get_performance(
        endpoint: str | None = Query(default=None),
        start: float | None = Query(default=None, ge=0),
        end: float | None = Query(default=None, ge=0),
    ) -> Response:
        """Return the performance summary.

        Args:
            endpoint: Only include samples for this endpoint.
            start: Unix timestamp; range start (inclusive).
            end: Unix timestamp; range end (inclusive).
        """
        time_range = _time_range(engine, start, end)
        summary = engine.get_performance_metrics(endpoint or None, time_range)
        return _json_response(encode_summary(summary))

    @router.get("/metrics/series/{name}")
    async def get_metric_series(
        name: str,
        start: float | None = Query(default=None, ge=0),
        end: float | None = Query(default=None, ge=0),
    ) -> Response:
        points = engine.get_metric(name, _time_range(engine, start, end))
        return _json_response([encode_metric_point(p) for p in points])

    @router.get("/security/events")
    async def get_security_events(
        start: float | None = Query(default=None, ge=0),
        end: float | None = Query(default=None, ge=0),
    ) -> Response:
        events = engine.get_security_events(_time_range(engine, start, end))
        return _json_response([encode_security_event(e) for e in events])

    @router.get("/users/{user_id}/metrics")
    async def get_user_metrics(
        user_id: str,
        metric_type: str | None = Query(default=None, alias="type"),
        days: float = Query(default=30, ge=0),
    ) -> Response:
        """Return a user's samples from the last days.

        Args:
            user_id: User to look up.
            metric_type: Only include samples of this type.
            days: Look-back window in days.
        """
        samples = engine.get_user_metrics(user_id, metric_type or None, days)
        return _json_response([encode_user_metric(m) for m in samples])

    return router
