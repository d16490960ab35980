"""Integration tests for the monitoring ASGI app."""

import pytest

from tests.helpers import DAY, START_TIME, FakeClock
from vigilpy.adapters.frameworks.asgi import create_asgi_app
from vigilpy.engine import MonitoringEngine

pytestmark = [pytest.mark.integration, pytest.mark.asgi, pytest.mark.tier(2)]


class TestHealthEndpoint:
    @pytest.mark.tra("Adapter.ASGI.HealthEndpointHealthy")
    async def test_healthy_returns_200(self, engine: MonitoringEngine, asgi_test_client) -> None:
        engine.record_api_performance("/api/test", "GET", 100, 200)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        body = response.json()
        assert body["status"] == "healthy"
        assert body["performance"]["totalRequests"] == 1

    @pytest.mark.tra("Adapter.ASGI.HealthEndpointUnhealthy")
    async def test_unhealthy_returns_503(self, engine: MonitoringEngine, asgi_test_client) -> None:
        engine.create_alert("critical_issue", "critical", {})
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    async def test_degraded_still_returns_200(
        self, engine: MonitoringEngine, asgi_test_client
    ) -> None:
        engine.record_api_performance("/api/slow", "GET", 4000, 200)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    async def test_uptime_is_reported(
        self, engine: MonitoringEngine, clock: FakeClock, asgi_test_client
    ) -> None:
        clock.advance(90)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/health")

        assert response.json()["uptime"] == 90


class TestDashboardEndpoint:
    async def test_returns_dashboard(self, engine: MonitoringEngine, asgi_test_client) -> None:
        engine.record_metric("total_users", 100)
        engine.create_alert("test_alert", "high", {})
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["metrics"]["totalUsers"] == 100
        assert len(body["alerts"]["unacknowledged"]) == 1
        assert set(body["performance"]) == {"lastHour", "lastDay"}


class TestAlertsEndpoint:
    async def test_lists_alerts_most_recent_first(
        self, engine: MonitoringEngine, clock: FakeClock, asgi_test_client
    ) -> None:
        engine.create_alert("first_alert", "low", {})
        clock.advance(1)
        engine.create_alert("second_alert", "high", {})
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/alerts")

        assert [a["type"] for a in response.json()] == ["second_alert", "first_alert"]

    async def test_filters_by_severity(self, engine: MonitoringEngine, asgi_test_client) -> None:
        engine.create_alert("low_alert", "low", {})
        engine.create_alert("high_alert", "high", {})
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/alerts", params={"severity": "high"})

        assert [a["type"] for a in response.json()] == ["high_alert"]

    async def test_unknown_severity_lists_everything(
        self, engine: MonitoringEngine, asgi_test_client
    ) -> None:
        engine.create_alert("low_alert", "low", {})
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/alerts", params={"severity": "bogus"})

        assert len(response.json()) == 1

    async def test_acknowledge(self, engine: MonitoringEngine, asgi_test_client) -> None:
        alert = engine.create_alert("test_alert", "critical", {})
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.post(f"/alerts/{alert.id}/acknowledge")
            alerts = (await client.get("/alerts")).json()

        assert response.status_code == 204
        assert alerts[0]["acknowledged"] is True

    async def test_acknowledge_unknown_alert_is_204(
        self, engine: MonitoringEngine, asgi_test_client
    ) -> None:
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.post("/alerts/alert_missing/acknowledge")

        assert response.status_code == 204


class TestPerformanceEndpoint:
    async def test_summary_for_endpoint(self, engine: MonitoringEngine, asgi_test_client) -> None:
        engine.record_api_performance("/api/a", "GET", 100, 200)
        engine.record_api_performance("/api/b", "GET", 300, 404)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/metrics/performance", params={"endpoint": "/api/b"})

        assert response.json() == {
            "avgResponseTime": 300,
            "totalRequests": 1,
            "errorRate": 100,
            "p95ResponseTime": 300,
            "p99ResponseTime": 300,
        }

    async def test_time_range(
        self, engine: MonitoringEngine, clock: FakeClock, asgi_test_client
    ) -> None:
        engine.record_api_performance("/api/a", "GET", 100, 200)
        clock.advance(100)
        engine.record_api_performance("/api/a", "GET", 300, 200)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get(
                "/metrics/performance", params={"start": str(START_TIME + 50)}
            )

        assert response.json()["totalRequests"] == 1
        assert response.json()["avgResponseTime"] == 300


class TestRecordEndpoints:
    async def test_security_events(
        self, engine: MonitoringEngine, clock: FakeClock, asgi_test_client
    ) -> None:
        engine.record_security_event("old_login", "low", {})
        clock.advance(100)
        engine.record_security_event("failed_login", "medium", {"ip": "10.0.0.1"})
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            everything = await client.get("/security/events")
            recent = await client.get(
                "/security/events", params={"start": str(START_TIME + 50)}
            )

        assert [e["event"] for e in everything.json()] == ["old_login", "failed_login"]
        assert recent.json() == [
            {
                "event": "failed_login",
                "severity": "medium",
                "data": {"ip": "10.0.0.1"},
                "timestamp": START_TIME + 100,
            }
        ]

    async def test_metric_series(self, engine: MonitoringEngine, asgi_test_client) -> None:
        engine.record_metric("queue_depth", 3, {"queue": "emails"})
        engine.record_metric("queue_depth", 5)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/metrics/series/queue_depth")
            unknown = await client.get("/metrics/series/nothing")

        assert response.json() == [
            {"timestamp": START_TIME, "value": 3, "tags": {"queue": "emails"}},
            {"timestamp": START_TIME, "value": 5, "tags": {}},
        ]
        assert unknown.json() == []

    async def test_user_metrics(
        self, engine: MonitoringEngine, clock: FakeClock, asgi_test_client
    ) -> None:
        engine.record_user_metric("user-1", "login_count", 1)
        clock.advance(2 * DAY)
        engine.record_user_metric("user-1", "login_count", 2)
        engine.record_user_metric("user-1", "session_duration", 300)
        engine.record_user_metric("user-2", "login_count", 9)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            logins = await client.get("/users/user-1/metrics", params={"type": "login_count"})
            last_day = await client.get("/users/user-1/metrics", params={"days": "1"})

        assert [m["value"] for m in logins.json()] == [1, 2]
        assert logins.json()[0] == {
            "userId": "user-1",
            "metricType": "login_count",
            "value": 1,
            "date": START_TIME,
        }
        assert [m["metricType"] for m in last_day.json()] == ["login_count", "session_duration"]


class TestRouting:
    async def test_unknown_path_returns_404(
        self, engine: MonitoringEngine, asgi_test_client
    ) -> None:
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/unknown")

        assert response.status_code == 404
        assert response.text == "Not Found"

    async def test_wrong_method_returns_404(
        self, engine: MonitoringEngine, asgi_test_client
    ) -> None:
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.post("/health")

        assert response.status_code == 404

    @pytest.mark.tra("Adapter.ASGI.ErrorHandling")
    async def test_engine_failure_returns_500(
        self,
        engine: MonitoringEngine,
        asgi_test_client,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def explode() -> None:
            raise RuntimeError("storage unavailable")

        monkeypatch.setattr(engine, "get_health_status", explode)
        app = create_asgi_app(engine)

        async with asgi_test_client(app) as client:
            response = await client.get("/health")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}
