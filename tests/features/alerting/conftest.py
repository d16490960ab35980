"""BDD step definitions for alerting and health features."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from tests.helpers import DAY, FakeClock, RecordingNotifier
from vigilpy.config import MonitoringConfig
from vigilpy.engine import MonitoringEngine


@dataclass
class AlertingScenarioContext:
    """State shared between the steps of one scenario."""

    clock: FakeClock = field(default_factory=FakeClock)
    notifier: RecordingNotifier = field(default_factory=RecordingNotifier)
    engine: MonitoringEngine | None = None

    def require_engine(self) -> MonitoringEngine:
        assert self.engine is not None, "Background did not create an engine"
        return self.engine


@pytest.fixture
def ctx() -> AlertingScenarioContext:
    """Fresh scenario context for each test."""
    return AlertingScenarioContext()


# === Background Steps ===
@given("a monitoring engine")
def step_engine(ctx: AlertingScenarioContext) -> None:
    ctx.engine = MonitoringEngine(
        MonitoringConfig(), notifier=ctx.notifier, clock=ctx.clock
    )


# === Action Steps ===
@when(
    parsers.parse(
        '{n:d} requests to "{endpoint}" take {ms:d} ms and return {status:d}'
    )
)
def step_requests(
    ctx: AlertingScenarioContext, n: int, endpoint: str, ms: int, status: int
) -> None:
    engine = ctx.require_engine()
    for _ in range(n):
        engine.record_api_performance(endpoint, "GET", ms, status)


@when(parsers.parse('a "{severity}" alert of type "{alert_type}" is created'))
def step_create_alert(
    ctx: AlertingScenarioContext, severity: str, alert_type: str
) -> None:
    ctx.require_engine().create_alert(alert_type, severity, {})


@when(parsers.parse('a "{severity}" security event "{event}" is recorded'))
def step_security_event(
    ctx: AlertingScenarioContext, severity: str, event: str
) -> None:
    ctx.require_engine().record_security_event(event, severity, {"ip": "192.168.1.1"})


@when("every alert is acknowledged")
def step_acknowledge_all(ctx: AlertingScenarioContext) -> None:
    engine = ctx.require_engine()
    for alert in engine.get_alerts():
        engine.acknowledge_alert(alert.id)


@when(parsers.parse("{days:d} days pass"))
def step_days_pass(ctx: AlertingScenarioContext, days: int) -> None:
    ctx.clock.advance(days * DAY)


@when("retention runs")
def step_retention(ctx: AlertingScenarioContext) -> None:
    ctx.require_engine().cleanup()


# === Assertion Steps ===
@then(parsers.parse('the health status is "{status}"'))
def step_health(ctx: AlertingScenarioContext, status: str) -> None:
    assert ctx.require_engine().get_health_status().status.value == status


@then("there are no alerts")
def step_no_alerts(ctx: AlertingScenarioContext) -> None:
    assert ctx.require_engine().get_alerts() == []


@then(parsers.parse('there is {n:d} "{severity}" alert of type "{alert_type}"'))
@then(parsers.parse('there are {n:d} "{severity}" alerts of type "{alert_type}"'))
def step_alert_count(
    ctx: AlertingScenarioContext, n: int, severity: str, alert_type: str
) -> None:
    alerts = ctx.require_engine().get_alerts(severity)
    assert [a.type for a in alerts] == [alert_type] * n
    assert [a.type for a in ctx.notifier.alerts if a.severity.value == severity] == [
        alert_type
    ] * n
