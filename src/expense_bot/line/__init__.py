"""LINE ingress: webhook handling, signature verification, event parsing, and replies."""

from expense_bot.line.client import get_messaging_api, reset_client
from expense_bot.line.notifier import push_text, send_reply
from expense_bot.line.router import router
from expense_bot.line.verification import VerificationResult, verify_signature

__all__ = [
    "get_messaging_api",
    "push_text",
    "reset_client",
    "router",
    "send_reply",
    "VerificationResult",
    "verify_signature",
]
