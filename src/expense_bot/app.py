"""FastAPI application with lifespan, health, and scheduler endpoints."""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request

from expense_bot.alerts import backfill_unprocessed, send_stock_alert
from expense_bot.config import Settings, get_settings
from expense_bot.line.client import close_messaging_api, get_messaging_api
from expense_bot.line.router import router as line_router
from expense_bot.logging_config import configure_logging
from expense_bot.store.client import close_record_store, get_record_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and load config on startup, close clients on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    yield
    await close_record_store()
    await close_messaging_api()


app = FastAPI(
    title="Expense Bot",
    lifespan=lifespan,
)
app.include_router(line_router)


async def verify_scheduler(request: Request, settings: Settings = Depends(get_settings)) -> None:
    """Verify the scheduler secret header for protected endpoints.

    Compares the X-Scheduler-Secret header against the configured secret.
    Raises HTTPException 403 if the header is missing, empty, or mismatched.
    """
    secret = request.headers.get("X-Scheduler-Secret", "")
    if not settings.scheduler_secret or secret != settings.scheduler_secret:
        raise HTTPException(status_code=403, detail="Invalid scheduler secret")


@app.get("/health")
async def health():
    """Health check endpoint for Cloud Run and local development."""
    return {
        "status": "ok",
        "service": "expense-bot",
        "version": "0.1.0",
    }


@app.post("/stock-alert")
async def stock_alert_endpoint(
    _: None = Depends(verify_scheduler), settings: Settings = Depends(get_settings)
):
    """Push the low-stock digest to the configured LINE group."""
    return await send_stock_alert(
        settings, get_record_store(settings), get_messaging_api(settings)
    )


@app.post("/backfill")
async def backfill_endpoint(
    _: None = Depends(verify_scheduler), settings: Settings = Depends(get_settings)
):
    """Re-run the expense pipeline for logged messages whose write was never confirmed."""
    return await backfill_unprocessed(settings, get_record_store(settings))
