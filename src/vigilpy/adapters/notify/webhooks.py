"""Webhook notification adapter.

Delivers rendered alerts to chat webhooks (Slack, Discord) or a generic
JSON endpoint. Delivery is fire-and-forget: dispatch() returns at once and
every failure is logged per channel, never raised.
"""

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from vigilpy.core.encoding.json_encoding import dumps, encode_alert, isoformat
from vigilpy.core.models import Alert

logger = logging.getLogger(__name__)

Renderer = Callable[[Alert], dict[str, Any]]

SEVERITY_COLORS = {
    "critical": 0xFF0000,
    "high": 0xFFA500,
    "medium": 0xFFFF00,
    "low": 0x00FF00,
}
DEFAULT_COLOR = 0x808080


def severity_color(severity: str) -> int:
    """Map a severity to an RGB color; gray for unknown values."""
    return SEVERITY_COLORS.get(str(severity), DEFAULT_COLOR)


def alert_title(alert: Alert) -> str:
    """Human title for an alert, e.g. test_alert -> "TEST_ALERT Alert"."""
    return f"{alert.type.upper()} Alert"


def render_slack(alert: Alert) -> dict[str, Any]:
    """Render an alert as a Slack incoming-webhook message."""
    severity = alert.severity.value
    return {
        "text": f"🚨 *{alert_title(alert)}*",
        "attachments": [
            {
                "color": severity_color(severity),
                "fields": [
                    {"title": "Severity", "value": severity.upper(), "short": True},
                    {"title": "Time", "value": isoformat(alert.timestamp), "short": True},
                    {"title": "Details", "value": dumps(alert.data, indent=2), "short": False},
                ],
            }
        ],
    }


def render_discord(alert: Alert) -> dict[str, Any]:
    """Render an alert as a Discord webhook embed."""
    severity = alert.severity.value
    return {
        "embeds": [
            {
                "title": f"🚨 {alert_title(alert)}",
                "color": severity_color(severity),
                "fields": [
                    {"name": "Severity", "value": severity.upper(), "inline": True},
                    {"name": "Time", "value": isoformat(alert.timestamp), "inline": True},
                    {"name": "Details", "value": dumps(alert.data, indent=2), "inline": False},
                ],
                "timestamp": isoformat(alert.timestamp),
            }
        ],
    }


def render_generic(alert: Alert) -> dict[str, Any]:
    """Render an alert as a plain JSON document."""
    return {"title": alert_title(alert), "alert": encode_alert(alert)}


@dataclass(frozen=True)
class WebhookChannel:
    """A configured delivery destination.

    Attributes:
        name: Label used in log messages (e.g., "Slack").
        url: Destination URL.
        render: Builds the JSON body for an alert.
    """

    name: str
    url: str
    render: Renderer


# (environment variable, channel label, renderer)
ENV_CHANNELS: tuple[tuple[str, str, Renderer], ...] = (
    ("SLACK_WEBHOOK_URL", "Slack", render_slack),
    ("DISCORD_WEBHOOK_URL", "Discord", render_discord),
    ("ALERT_WEBHOOK_URL", "Webhook", render_generic),
)


def channels_from_env(environ: Mapping[str, str]) -> list[WebhookChannel]:
    """Build channels for every webhook URL present in environ.

    Unset or empty variables disable their channel.
    """
    channels = []
    for variable, name, render in ENV_CHANNELS:
        url = environ.get(variable, "").strip()
        if url:
            channels.append(WebhookChannel(name=name, url=url, render=render))
    return channels


class NullNotifier:
    """Notifier that drops every alert."""

    def dispatch(self, alert: Alert) -> None:
        return None


class NotificationDispatcher:
    """Fire-and-forget alert delivery to webhook channels.

    Inside a running event loop each channel gets its own task on that
    loop. Without one, a daemon thread runs the deliveries on a private
    loop. Either way dispatch() returns immediately.

    Example:
        ```python
        dispatcher = NotificationDispatcher(channels_from_env(os.environ))
        dispatcher.dispatch(alert)
        ```
    """

    def __init__(
        self,
        channels: Iterable[WebhookChannel] = (),
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            channels: Destinations to deliver to.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (e.g., httpx.MockTransport
                in tests).
        """
        self._channels = tuple(channels)
        self._timeout = timeout
        self._transport = transport
        self._tasks: set[asyncio.Task[bool]] = set()
        self._threads: set[threading.Thread] = set()
        self._lock = threading.Lock()

    @property
    def channels(self) -> tuple[WebhookChannel, ...]:
        return self._channels

    def dispatch(self, alert: Alert) -> None:
        """Schedule delivery of alert to every channel and return."""
        if not self._channels:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._start_thread(alert)
            return
        for channel in self._channels:
            task = loop.create_task(self._deliver(channel, alert))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def _start_thread(self, alert: Alert) -> None:
        thread = threading.Thread(
            target=self._run_in_thread,
            args=(alert,),
            name=f"vigilpy-notify-{alert.id}",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
        thread.start()

    def _run_in_thread(self, alert: Alert) -> None:
        try:
            asyncio.run(self._deliver_all(alert))
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    async def _deliver_all(self, alert: Alert) -> None:
        await asyncio.gather(*(self._deliver(c, alert) for c in self._channels))

    async def _deliver(self, channel: WebhookChannel, alert: Alert) -> bool:
        """POST one alert to one channel. Failures are logged, not raised."""
        try:
            payload = channel.render(alert)
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    channel.url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
        except Exception:
            logger.exception("Failed to send %s alert", channel.name)
            return False
        logger.debug("Delivered %s alert %s", channel.name, alert.id)
        return True

    async def wait(self) -> None:
        """Wait for deliveries scheduled on the current event loop."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def join(self, timeout: float | None = None) -> None:
        """Wait for deliveries running on background threads."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)
