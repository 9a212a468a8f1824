"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.container import get_container
from src.pm_account.api.router import router as account_router
from src.pm_admin.api.router import router as admin_router
from src.pm_common.errors import AppError
from src.pm_common.redis_client import close_redis, get_redis, ping_redis
from src.pm_common.response import error_response
from src.pm_gateway.api.router import router as auth_router
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_market.api.router import router as market_router
from src.pm_market.infrastructure.event_publisher import RedisEventPublisher
from src.pm_trading.api.router import router as trading_router
from src.pm_voting.api.router import router as voting_router

logger = logging.getLogger(__name__)


async def _every(interval: float, name: str, tick: Callable[[], Awaitable[object]]) -> None:
    """Run tick forever; a failed tick is logged and retried next interval."""
    while True:
        await asyncio.sleep(interval)
        try:
            await tick()
        except Exception:
            logger.exception("[%s] tick failed", name)


async def _run_monitor() -> None:
    # jobs take blocking per-market locks
    container = get_container()
    now = container.clock()
    await asyncio.to_thread(container.finalizer.run, now)
    await asyncio.to_thread(container.vote_aggregator.run, now)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: connect Redis and start background loops. Shutdown: stop them."""
    tasks: list[asyncio.Task[None]] = []
    publisher: RedisEventPublisher | None = None
    if settings.PUBLISH_EVENTS:
        redis = await get_redis()
        if await ping_redis(redis):
            logger.info("Publishing events to %s", settings.EVENTS_CHANNEL)
        bus = get_container().bus
        bus.enable_outbox(settings.EVENTS_OUTBOX_LIMIT)
        publisher = RedisEventPublisher(bus, redis, settings.EVENTS_CHANNEL)
        tasks.append(asyncio.create_task(
            _every(settings.EVENTS_FLUSH_INTERVAL_SECONDS, "events", publisher.flush)
        ))
    if settings.RUN_MONITOR:
        tasks.append(asyncio.create_task(
            _every(settings.MONITOR_INTERVAL_SECONDS, "monitor", _run_monitor)
        ))
    yield
    for task in tasks:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    if publisher is not None:
        if await ping_redis(redis):
            await publisher.flush()
        await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(voting_router, prefix="/api/v1")
app.include_router(trading_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
