"""Async LINE Messaging API client singleton.

Creates a cached AsyncMessagingApi configured with the channel access token
from settings. Follows the same lazy-init pattern as the store client.
"""

from linebot.v3.messaging import AsyncApiClient, AsyncMessagingApi, Configuration

from expense_bot.config import Settings

_api_client: AsyncApiClient | None = None
_client: AsyncMessagingApi | None = None


def get_messaging_api(settings: Settings) -> AsyncMessagingApi:
    """Return a cached async Messaging API instance.

    Creates the client on first call using line_channel_access_token.
    Subsequent calls return the cached instance.
    """
    global _api_client, _client
    if _client is None:
        configuration = Configuration(access_token=settings.line_channel_access_token)
        _api_client = AsyncApiClient(configuration)
        _client = AsyncMessagingApi(_api_client)
    return _client


async def close_messaging_api() -> None:
    """Close the underlying HTTP session (application shutdown)."""
    global _api_client, _client
    if _api_client is not None:
        await _api_client.close()
    _api_client = None
    _client = None


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _api_client, _client
    _api_client = None
    _client = None
