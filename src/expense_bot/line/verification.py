"""LINE request signature verification.

``verify_signature`` is a pure function of its inputs. ``verify_line_request``
wraps it as a FastAPI dependency that also decodes the JSON body.
"""

import json
import logging
from enum import Enum

from fastapi import Depends, HTTPException, Request
from linebot.v3.webhook import SignatureValidator

from expense_bot.config import Settings, get_settings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Line-Signature"


class VerificationResult(str, Enum):
    AUTHENTIC = "authentic"
    REJECTED = "rejected"


def verify_signature(body: bytes, channel_secret: str, signature: str | None) -> VerificationResult:
    """Check ``signature`` against base64(HMAC-SHA256(channel_secret, body)).

    A missing or empty signature is always rejected. The comparison is
    constant-time.
    """
    if not signature or not channel_secret:
        return VerificationResult.REJECTED
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return VerificationResult.REJECTED
    if SignatureValidator(channel_secret).validate(text, signature):
        return VerificationResult.AUTHENTIC
    return VerificationResult.REJECTED


async def verify_line_request(
    request: Request, settings: Settings = Depends(get_settings)
) -> dict:
    """Verify the LINE signature and return the parsed JSON payload.

    Reads the raw body FIRST so the signature is checked against the exact
    bytes LINE signed.

    Raises HTTPException 500 if the channel secret is not configured or the
    body is not a JSON object, 401 if the signature is missing or invalid.
    """
    if not settings.line_channel_secret:
        logger.error("LINE channel secret not configured")
        raise HTTPException(status_code=500, detail="Channel secret not configured")

    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    if verify_signature(body, settings.line_channel_secret, signature) is VerificationResult.REJECTED:
        logger.warning("Rejected webhook request", extra={"has_signature": bool(signature)})
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(body)
    except ValueError:
        logger.error("Malformed webhook body", extra={"length": len(body)})
        raise HTTPException(status_code=500, detail="Malformed JSON body")
    if not isinstance(payload, dict):
        logger.error("Webhook body is not a JSON object")
        raise HTTPException(status_code=500, detail="Malformed JSON body")
    return payload
