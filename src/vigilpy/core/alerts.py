"""Alert construction helpers."""

import uuid

from vigilpy.core.models import Alert, AlertDraft


def new_alert_id(timestamp: float) -> str:
    """Return a unique alert id of the form alert_<epoch-ms>_<hex>.

    The random suffix keeps ids distinct for alerts created in the same
    millisecond.
    """
    return f"alert_{int(timestamp * 1000)}_{uuid.uuid4().hex[:12]}"


def build_alert(draft: AlertDraft, timestamp: float) -> Alert:
    """Create an unacknowledged Alert from a draft."""
    return Alert(
        id=new_alert_id(timestamp),
        type=draft.type,
        severity=draft.severity,
        data=dict(draft.data),
        timestamp=timestamp,
    )
