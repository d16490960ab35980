"""ASGI adapter for the monitoring engine.

Provides a middleware that feeds request timings and suspicious requests
into a MonitoringEngine, and a framework-agnostic ASGI application that
serves health, dashboard and alert data as JSON. Works with any ASGI
server (uvicorn, hypercorn, daphne) without requiring FastAPI.
"""

import fnmatch
import logging
import re
import time
import uuid
from collections.abc import Callable, Coroutine
from typing import Any
from urllib.parse import parse_qs, unquote_plus

from vigilpy.adapters.frameworks.query_params import (
    _parse_days_param,
    _parse_endpoint_param,
    _parse_metric_type_param,
    _parse_severity_param,
    _parse_time_range_params,
)
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
from vigilpy.core.models import HealthState, Severity
from vigilpy.engine import MonitoringEngine

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]

SUSPICIOUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"union\s+select", re.IGNORECASE),
    re.compile(r"drop\s+table", re.IGNORECASE),
    re.compile(r"exec\s*\(", re.IGNORECASE),
]

_ACKNOWLEDGE_PATH = re.compile(r"^/alerts/(?P<alert_id>[^/]+)/acknowledge$")
_METRIC_SERIES_PATH = re.compile(r"^/metrics/series/(?P<name>[^/]+)$")
_USER_METRICS_PATH = re.compile(r"^/users/(?P<user_id>[^/]+)/metrics$")


def _parse_query_params(scope: Scope) -> dict[str, list[str]]:
    """Parse query string from ASGI scope into parameter dictionary.

    Returns empty dict if query_string is missing or empty.
    """
    query_string = scope.get("query_string", b"").decode(errors="replace")
    return parse_qs(query_string)


def _get_header(scope: Scope, header_name: str) -> str | None:
    """Return the first value of a header (case-insensitive), or None."""
    header_bytes = header_name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for name, value in headers:
        if name.lower() == header_bytes:
            return str(value.decode("utf-8", errors="replace"))
    return None


def _extract_request_id(scope: Scope, header_name: str = "X-Request-ID") -> str:
    """Extract the request ID header, or generate a new UUID."""
    return _get_header(scope, header_name) or str(uuid.uuid4())


def _client_ip(scope: Scope) -> str:
    forwarded = _get_header(scope, "X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    client = scope.get("client")
    if client:
        return str(client[0])
    return "unknown"


def _request_url(scope: Scope) -> str:
    query_string = scope.get("query_string", b"").decode(errors="replace")
    path = scope.get("path", "")
    return f"{path}?{query_string}" if query_string else path


def is_suspicious(*values: str) -> bool:
    """Return True if any value matches a known injection pattern."""
    return any(pattern.search(value) for value in values for pattern in SUSPICIOUS_PATTERNS)


async def _send_response(
    send: Send, status: int, content_type: str, body: str = ""
) -> None:
    """Send an HTTP response with headers and body."""
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _handle_endpoint(
    send: Send,
    endpoint_func: Callable[[], tuple[int, Any]],
    log_message: str,
) -> None:
    """Run an endpoint function with error handling and send JSON.

    Args:
        send: ASGI send callable for writing response.
        endpoint_func: Returns (status, JSON-ready object).
        log_message: Message to log on error.
    """
    try:
        status, obj = endpoint_func()
        body = dumps(obj)
    except Exception:
        logger.exception(log_message)
        error_body = dumps({"error": "Internal Server Error"})
        await _send_response(send, 500, "application/json", error_body)
        return
    await _send_response(send, status, "application/json", body)


class ASGIMonitoringMiddleware:
    """ASGI middleware that records every HTTP request in a MonitoringEngine.

    Each request is timed and recorded with record_api_performance().
    Requests whose URL or User-Agent look like injection attempts are also
    recorded as high-severity suspicious_request security events.
    """

    def __init__(
        self,
        app: ASGIApp,
        engine: MonitoringEngine,
        exclude_paths: list[str] | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            engine: Engine receiving performance samples and security events.
            exclude_paths: Paths not to record. Supports exact matches and
                wildcard patterns (e.g., "/internal/*").
            request_id_header: Header to read the request ID from.
        """
        self.app = app
        self.engine = engine
        self.exclude_paths = exclude_paths or []
        self.request_id_header = request_id_header

    def _path_excluded(self, path: str) -> bool:
        """Check if path matches any pattern in exclude_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        captured: dict[str, Any] = {"status": None, "exception": None}

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception as e:
            captured["exception"] = e
            captured["status"] = 500

        duration = time.perf_counter() - start_time
        self._record(scope, captured["status"] or 500, duration)
        if captured["exception"] is not None:
            raise captured["exception"]

    def _record(self, scope: Scope, status_code: int, duration: float) -> None:
        path = scope["path"]
        if self._path_excluded(path):
            return
        self.engine.record_api_performance(
            path, scope["method"], round(duration * 1000), status_code
        )
        url = _request_url(scope)
        user_agent = _get_header(scope, "User-Agent") or ""
        if is_suspicious(unquote_plus(url), user_agent):
            self.engine.record_security_event(
                "suspicious_request",
                Severity.HIGH,
                {
                    "url": url,
                    "userAgent": user_agent,
                    "ip": _client_ip(scope),
                    "requestId": _extract_request_id(scope, self.request_id_header),
                },
            )


def create_asgi_app(engine: MonitoringEngine) -> ASGIApp:
    """Create an ASGI app exposing the engine's query API as JSON.

    Routes:
        GET /health: health report; 503 when unhealthy.
        GET /dashboard: dashboard snapshot.
        GET /alerts?severity=: alerts, most recent first.
        POST /alerts/<id>/acknowledge: acknowledge an alert (204).
        GET /metrics/performance?endpoint=&start=&end=: performance summary.
        GET /metrics/series/<name>?start=&end=: points of a named metric.
        GET /security/events?start=&end=: security events.
        GET /users/<user_id>/metrics?type=&days=: per-user samples.

    Args:
        engine: The engine to query.

    Returns:
        ASGI application callable.
    """

    def health() -> tuple[int, Any]:
        report = engine.get_health_status()
        status = 503 if report.status == HealthState.UNHEALTHY else 200
        return status, encode_health(report)

    def dashboard() -> tuple[int, Any]:
        return 200, encode_dashboard(engine.get_dashboard_data())

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        path = scope["path"]
        method = scope.get("method", "GET")
        params = _parse_query_params(scope)
        ack_match = _ACKNOWLEDGE_PATH.match(path)
        series_match = _METRIC_SERIES_PATH.match(path)
        user_match = _USER_METRICS_PATH.match(path)

        if path == "/health" and method == "GET":
            await _handle_endpoint(send, health, "Error encoding health endpoint")
        elif path == "/dashboard" and method == "GET":
            await _handle_endpoint(send, dashboard, "Error encoding dashboard endpoint")
        elif path == "/alerts" and method == "GET":
            severity = _parse_severity_param(params)
            await _handle_endpoint(
                send,
                lambda: (200, [encode_alert(a) for a in engine.get_alerts(severity)]),
                "Error encoding alerts endpoint",
            )
        elif path == "/metrics/performance" and method == "GET":
            endpoint = _parse_endpoint_param(params)
            time_range = _parse_time_range_params(params, engine.now())
            await _handle_endpoint(
                send,
                lambda: (
                    200,
                    encode_summary(engine.get_performance_metrics(endpoint, time_range)),
                ),
                "Error encoding performance endpoint",
            )
        elif path == "/security/events" and method == "GET":
            time_range = _parse_time_range_params(params, engine.now())
            await _handle_endpoint(
                send,
                lambda: (
                    200,
                    [encode_security_event(e) for e in engine.get_security_events(time_range)],
                ),
                "Error encoding security events endpoint",
            )
        elif series_match and method == "GET":
            name = series_match.group("name")
            time_range = _parse_time_range_params(params, engine.now())
            await _handle_endpoint(
                send,
                lambda: (
                    200,
                    [encode_metric_point(p) for p in engine.get_metric(name, time_range)],
                ),
                "Error encoding metric series endpoint",
            )
        elif user_match and method == "GET":
            user_id = user_match.group("user_id")
            metric_type = _parse_metric_type_param(params)
            days = _parse_days_param(params)
            await _handle_endpoint(
                send,
                lambda: (
                    200,
                    [
                        encode_user_metric(m)
                        for m in engine.get_user_metrics(user_id, metric_type, days)
                    ],
                ),
                "Error encoding user metrics endpoint",
            )
        elif ack_match and method == "POST":
            engine.acknowledge_alert(ack_match.group("alert_id"))
            await _send_response(send, 204, "text/plain")
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
