"""Shared query parameter parsing utilities for framework adapters.

This module provides utilities for parsing and validating query parameters
that are common across the ASGI app and the FastAPI router.
"""

import math

from vigilpy.core.models import Severity, TimeRange


def _first(params: dict[str, list[str]], name: str) -> str | None:
    values = params.get(name)
    return values[0] if values else None


def _parse_timestamp(raw: str | None) -> float | None:
    """Parse a Unix timestamp, rejecting negative, NaN and infinite values."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if value < 0 or math.isnan(value) or math.isinf(value):
        return None
    return value


def _parse_severity_param(params: dict[str, list[str]]) -> Severity | None:
    """Parse the 'severity' query parameter.

    Returns:
        The Severity, or None if missing or not a known severity.
    """
    raw = _first(params, "severity")
    if raw is None:
        return None
    try:
        return Severity(raw.lower())
    except ValueError:
        return None


def _parse_time_range_params(
    params: dict[str, list[str]], now: float
) -> TimeRange | None:
    """Parse 'start' and 'end' query parameters into a TimeRange.

    A missing or invalid 'start' defaults to 0 and 'end' to now. Returns
    None when neither parameter is usable.
    """
    start = _parse_timestamp(_first(params, "start"))
    end = _parse_timestamp(_first(params, "end"))
    if start is None and end is None:
        return None
    return TimeRange(start=start if start is not None else 0.0, end=end if end is not None else now)


def _parse_endpoint_param(params: dict[str, list[str]]) -> str | None:
    raw = _first(params, "endpoint")
    return raw or None


def _parse_metric_type_param(params: dict[str, list[str]]) -> str | None:
    raw = _first(params, "type")
    return raw or None


def _parse_days_param(params: dict[str, list[str]], default: float = 30) -> float:
    """Parse the 'days' query parameter; invalid values fall back to default."""
    value = _parse_timestamp(_first(params, "days"))
    return value if value is not None else default
