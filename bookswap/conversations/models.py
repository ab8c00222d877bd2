"""
Conversation data models.

Records are persisted with camelCase keys so stored conversations keep the
same JSON shape the chat frontend reads:

    {"bookId": ..., "lastUpdated": ..., "messages": [{"id", "sender",
     "senderName", "text", "timestamp"}, ...]}

Timestamps are serialized as ISO-8601 strings and rehydrated to aware
datetimes on validation.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _as_aware(value: datetime) -> datetime:
    # Records written without an offset are read as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """Return the JSON-compatible persisted form."""
        return self.model_dump(mode="json", by_alias=True)


class Message(_CamelModel):
    """A single chat message about a book listing."""

    id: str
    sender: str = Field(..., description="User id of the author")
    sender_name: str = Field(..., description="Author display name at send time")
    text: str
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return _as_aware(v)


class Conversation(_CamelModel):
    """Full message history between two users about one book."""

    book_id: str
    messages: list[Message] = Field(default_factory=list)
    last_updated: datetime

    @field_validator("last_updated")
    @classmethod
    def normalize_last_updated(cls, v: datetime) -> datetime:
        return _as_aware(v)


class ConversationSummary(BaseModel):
    """Row of a user's "My Messages" list."""

    book_id: str
    book_title: str
    other_user_id: str | None = None
    last_sender_name: str
    preview: str
    last_updated: datetime
    message_count: int
