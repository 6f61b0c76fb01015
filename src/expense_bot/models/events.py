"""LINE webhook event variants and the normalized inbound message event.

Webhook events are a tagged union on ``type``. Only the ``message`` variant
carries a strict content schema; the other known variants are parsed so they
can be acknowledged and skipped explicitly.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _LineModel(BaseModel):
    """Base for LINE payload models: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SourceType(str, Enum):
    """Chat context an event came from."""

    USER = "user"
    GROUP = "group"
    ROOM = "room"


class MessageType(str, Enum):
    """Message kinds the pipeline distinguishes. Everything else is OTHER."""

    TEXT = "text"
    IMAGE = "image"
    OTHER = "other"


class EventSource(_LineModel):
    type: SourceType
    user_id: str | None = None
    group_id: str | None = None
    room_id: str | None = None

    @property
    def source_id(self) -> str | None:
        """Group, then room, then user ID."""
        return self.group_id or self.room_id or self.user_id


class MessageContent(_LineModel):
    type: str
    id: str | None = None
    text: str | None = None


class MessageEvent(_LineModel):
    type: Literal["message"]
    source: EventSource
    message: MessageContent
    reply_token: str | None = None
    timestamp: int | None = None  # Epoch milliseconds
    webhook_event_id: str | None = None


class FollowEvent(_LineModel):
    type: Literal["follow"]
    source: EventSource | None = None
    reply_token: str | None = None


class UnfollowEvent(_LineModel):
    type: Literal["unfollow"]
    source: EventSource | None = None


class JoinEvent(_LineModel):
    type: Literal["join"]
    source: EventSource | None = None
    reply_token: str | None = None


class LeaveEvent(_LineModel):
    type: Literal["leave"]
    source: EventSource | None = None


class Postback(_LineModel):
    data: str = ""


class PostbackEvent(_LineModel):
    type: Literal["postback"]
    source: EventSource | None = None
    reply_token: str | None = None
    postback: Postback


WebhookEvent = Annotated[
    Union[MessageEvent, FollowEvent, UnfollowEvent, JoinEvent, LeaveEvent, PostbackEvent],
    Field(discriminator="type"),
]

KNOWN_EVENT_TYPES = frozenset({"message", "follow", "unfollow", "join", "leave", "postback"})


class InboundEvent(BaseModel):
    """A message event reduced to the fields the pipelines use, plus the raw payload."""

    model_config = ConfigDict(frozen=True)

    source_type: SourceType
    source_id: str | None = None
    user_id: str | None = None
    message_type: MessageType
    message_id: str | None = None
    text: str = ""
    reply_token: str | None = None
    timestamp: int | None = None
    raw_payload: dict[str, Any]

    @classmethod
    def from_message_event(cls, event: MessageEvent, raw: dict[str, Any]) -> "InboundEvent":
        try:
            message_type = MessageType(event.message.type)
        except ValueError:
            message_type = MessageType.OTHER
        return cls(
            source_type=event.source.type,
            source_id=event.source.source_id,
            user_id=event.source.user_id,
            message_type=message_type,
            message_id=event.message.id,
            text=event.message.text or "",
            reply_token=event.reply_token,
            timestamp=event.timestamp,
            raw_payload=raw,
        )
