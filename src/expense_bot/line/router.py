"""LINE webhook router with signature verification."""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from expense_bot.config import Settings, get_settings
from expense_bot.line.client import get_messaging_api
from expense_bot.line.handlers import handle_webhook
from expense_bot.line.verification import SIGNATURE_HEADER, verify_line_request
from expense_bot.store.client import get_record_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["line"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": f"Content-Type, {SIGNATURE_HEADER}",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


@router.options("/line/webhook")
async def line_webhook_preflight() -> Response:
    """Answer CORS preflight with permissive headers."""
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("/line/webhook")
async def line_webhook(
    payload: dict = Depends(verify_line_request),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Receive LINE webhook events.

    Events are processed before responding: reply tokens expire quickly, so
    replies cannot be deferred past the response.
    """
    try:
        result = await handle_webhook(
            payload,
            settings,
            store=get_record_store(settings),
            messaging_api=get_messaging_api(settings),
        )
    except Exception as exc:
        logger.error("Webhook error: %s", exc, exc_info=True)
        return JSONResponse(
            {"success": False, "error": "Internal server error"},
            status_code=500,
            headers=CORS_HEADERS,
        )

    return JSONResponse(
        {
            "success": True,
            "eventsProcessed": result.events_received,
            "processedCount": result.processed_count,
        },
        headers=CORS_HEADERS,
    )
