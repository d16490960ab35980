"""Statistics over performance samples.

All functions are pure. Callers filter samples (by endpoint, time range)
before passing them in.
"""

import math
from collections.abc import Sequence

from vigilpy.core.models import PerformanceSample, PerformanceSummary

ERROR_STATUS_THRESHOLD = 400


def count(samples: Sequence[PerformanceSample]) -> int:
    """Return the number of samples."""
    return len(samples)


def mean(
    samples: Sequence[PerformanceSample], field: str = "response_time_ms"
) -> float:
    """Arithmetic mean of a numeric sample attribute.

    Args:
        samples: Samples to average.
        field: Attribute name to average (default: response_time_ms).

    Returns:
        The mean, or 0 if samples is empty.
    """
    if not samples:
        return 0
    return sum(getattr(s, field) for s in samples) / len(samples)


def error_rate(samples: Sequence[PerformanceSample]) -> float:
    """Percentage (0-100) of samples with status_code >= 400.

    Returns:
        The error percentage, or 0 if samples is empty.
    """
    if not samples:
        return 0
    errors = sum(1 for s in samples if s.status_code >= ERROR_STATUS_THRESHOLD)
    return (errors / len(samples)) * 100


def percentile(samples: Sequence[PerformanceSample], p: float) -> float:
    """Nearest-rank percentile of response times.

    Sorts response times ascending and picks index ceil(p/100 * n) - 1,
    clamped to [0, n - 1]. No interpolation between points.

    Args:
        samples: Samples to rank.
        p: Percentile in [0, 100].

    Returns:
        The selected response time, or 0 if samples is empty.
    """
    if not samples:
        return 0
    values = sorted(s.response_time_ms for s in samples)
    n = len(values)
    index = math.ceil(p * n / 100) - 1
    index = max(0, min(index, n - 1))
    return values[index]


def summarize(samples: Sequence[PerformanceSample]) -> PerformanceSummary:
    """Build the aggregate returned by performance queries.

    An empty input yields an all-zero summary.
    """
    if not samples:
        return PerformanceSummary()
    return PerformanceSummary(
        avg_response_time=mean(samples),
        total_requests=count(samples),
        error_rate=error_rate(samples),
        p95_response_time=percentile(samples, 95),
        p99_response_time=percentile(samples, 99),
    )
