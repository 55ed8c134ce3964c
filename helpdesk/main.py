import asyncio
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk.config import get_settings
from helpdesk.database import create_tables
from helpdesk.dependencies import get_fallback, get_gateway, get_tracker
from helpdesk.logging_config import get_logger, setup_logging
from helpdesk.routers import admin, dialogflow

settings = get_settings()
setup_logging(settings.log_level)

app = FastAPI(
    title="Helpdesk Webhook",
    description="Dialogflow fulfillment backend for support, FAQ and feedback flows",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dialogflow.router)
app.include_router(admin.router)

logger = get_logger("main")
sweeper_logger = get_logger("session_sweeper")
_sweeper_task: asyncio.Task | None = None


def _is_sweeper_enabled() -> bool:
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return False
    return settings.pending_session_sweep_interval_seconds > 0


async def _session_sweeper_loop() -> None:
    interval_seconds = max(settings.pending_session_sweep_interval_seconds, 1.0)
    tracker = get_tracker()
    while True:
        try:
            await asyncio.sleep(interval_seconds)
            tracker.sweep()
        except asyncio.CancelledError:
            break
        except Exception as exc:
            sweeper_logger.error(
                "Session sweeper loop failed",
                extra={"context": {"error": str(exc)}},
            )


@app.on_event("startup")
async def start_background_services() -> None:
    global _sweeper_task
    gateway = get_gateway()
    if not get_fallback().enabled:
        logger.warning("Generative fallback disabled; canned replies only")

    if settings.database_create_tables and gateway.configured:
        await asyncio.to_thread(create_tables, gateway.session_factory)

    if not _is_sweeper_enabled():
        return
    if _sweeper_task is None or _sweeper_task.done():
        _sweeper_task = asyncio.create_task(_session_sweeper_loop())
        sweeper_logger.info("Session sweeper started")


@app.on_event("shutdown")
async def stop_background_services() -> None:
    global _sweeper_task
    if _sweeper_task is None:
        return
    _sweeper_task.cancel()
    try:
        await _sweeper_task
    except asyncio.CancelledError:
        pass
    _sweeper_task = None


@app.get("/health")
async def health():
    return {"status": "ok"}
