"""Example FastAPI application with monitoring and alerting.

Run with:
    SLACK_WEBHOOK_URL=https://hooks.slack.com/... \
        uvicorn examples.fastapi_example:app --reload

Endpoints:
    /monitoring/health                    - health report (503 when unhealthy)
    /monitoring/dashboard                 - last hour/day snapshot
    /monitoring/alerts?severity=<level>   - alerts, most recent first
    /monitoring/alerts/<id>/acknowledge   - POST to acknowledge an alert
    /monitoring/metrics/performance       - performance summary

Instrumentation:
    ASGIMonitoringMiddleware times every request. /slow and /error
    trigger slow_response and high_error_rate alerts, which are posted to
    every webhook configured in the environment.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from vigilpy import MonitoringEngine, run_periodic_cleanup
from vigilpy.adapters.frameworks.asgi import ASGIMonitoringMiddleware
from vigilpy.adapters.frameworks.fastapi import create_monitoring_router

logging.basicConfig(level=logging.INFO)

engine = MonitoringEngine.from_env()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    cleanup_task = asyncio.create_task(run_periodic_cleanup(engine))
    yield
    cleanup_task.cancel()


app = FastAPI(title="Monitoring Example", lifespan=lifespan)
app.include_router(create_monitoring_router(engine), prefix="/monitoring")
app.add_middleware(
    ASGIMonitoringMiddleware, engine=engine, exclude_paths=["/monitoring/*"]
)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "Hello! Check /monitoring/health and /monitoring/dashboard."}


@app.get("/users")
async def get_users() -> dict[str, list[dict[str, str]]]:
    """Users endpoint; also feeds the dashboard's totalUsers metric."""
    users = [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}]
    engine.record_metric("total_users", len(users))
    engine.record_user_metric("1", "profile_views", 1)
    return {"users": users}


@app.get("/slow")
async def slow_endpoint() -> dict[str, str]:
    """Takes longer than the slow-response threshold."""
    await asyncio.sleep(5.5)
    return {"message": "finally"}


@app.get("/error")
async def error_endpoint() -> dict[str, str]:
    raise HTTPException(status_code=500, detail="Intentional error for demonstration")
