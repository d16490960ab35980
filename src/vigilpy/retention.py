"""Periodic retention sweeps."""

import asyncio
import logging

from vigilpy.engine import MonitoringEngine

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL = 60 * 60.0


async def run_periodic_cleanup(
    engine: MonitoringEngine, interval_seconds: float = DEFAULT_CLEANUP_INTERVAL
) -> None:
    """Call engine.cleanup() every interval_seconds until cancelled.

    A failing sweep is logged and the loop keeps going.

    Example:
        ```python
        task = asyncio.create_task(run_periodic_cleanup(engine))
        ...
        task.cancel()
        ```
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            engine.cleanup()
        except Exception:
            logger.exception("Retention sweep failed")
