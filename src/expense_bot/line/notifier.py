"""LINE reply and push functions.

All functions are fire-and-forget: they catch and log errors but never raise.
Each is a single attempt and is never retried. A reply token is single-use
and expires within seconds, so a failed reply cannot be sent again.
"""

import asyncio
import logging

import aiohttp
from linebot.v3.messaging import (
    AsyncMessagingApi,
    PushMessageRequest,
    ReplyMessageRequest,
    TextMessage,
)
from linebot.v3.messaging.exceptions import ApiException

logger = logging.getLogger(__name__)

# LINE accepts at most 5 message objects per reply/push request
MAX_MESSAGES_PER_REQUEST = 5


async def send_reply(
    api: AsyncMessagingApi, reply_token: str, texts: list[str], timeout: float = 5.0
) -> bool:
    """Reply to the event that carried ``reply_token`` with one message per text.

    Args:
        api: LINE Messaging API client.
        reply_token: Token from the originating webhook event.
        texts: Reply texts; sent together in one request.
        timeout: Seconds before the call is abandoned.

    Returns:
        True if LINE accepted the reply.
    """
    if not reply_token or not texts:
        return False
    request = ReplyMessageRequest(
        reply_token=reply_token,
        messages=[TextMessage(text=text) for text in texts[:MAX_MESSAGES_PER_REQUEST]],
    )
    try:
        async with asyncio.timeout(timeout):
            await api.reply_message(request)
    except ApiException as exc:
        logger.warning("LINE reply rejected (%s): %s", exc.status, exc.reason)
        return False
    except TimeoutError:
        logger.warning("LINE reply timed out after %.1fs", timeout)
        return False
    except (aiohttp.ClientError, OSError):
        logger.warning("LINE reply failed", exc_info=True)
        return False
    return True


async def push_text(
    api: AsyncMessagingApi, to: str, text: str, timeout: float = 5.0
) -> bool:
    """Push a text message to a user, group, or room ID.

    Returns:
        True if LINE accepted the message.
    """
    try:
        async with asyncio.timeout(timeout):
            await api.push_message(PushMessageRequest(to=to, messages=[TextMessage(text=text)]))
    except ApiException as exc:
        logger.warning("LINE push rejected (%s): %s", exc.status, exc.reason)
        return False
    except TimeoutError:
        logger.warning("LINE push timed out after %.1fs", timeout)
        return False
    except (aiohttp.ClientError, OSError):
        logger.warning("LINE push failed", exc_info=True)
        return False
    return True
