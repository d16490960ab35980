"""Notification adapters implementing NotifierPort."""

from vigilpy.adapters.notify.webhooks import (
    NotificationDispatcher,
    NullNotifier,
    WebhookChannel,
    channels_from_env,
    render_discord,
    render_generic,
    render_slack,
)

__all__ = [
    "NotificationDispatcher",
    "NullNotifier",
    "WebhookChannel",
    "channels_from_env",
    "render_discord",
    "render_generic",
    "render_slack",
]
