"""
API Request/Response Models

Pydantic models for the FastAPI endpoints. Messages and conversations are
returned in their stored camelCase shape so the chat frontend can reuse the
same parsing for API responses and locally cached records.
"""

from pydantic import BaseModel, Field, field_validator

from bookswap.conversations.models import Message


class ParticipantsRequest(BaseModel):
    """Identifies a conversation within a book by its two participants."""

    user_id: str = Field(..., min_length=1, description="Current user ID")
    owner_id: str = Field(..., min_length=1, description="Book owner user ID")


class ConversationSaveRequest(ParticipantsRequest):
    """Full replacement of a conversation's messages."""

    messages: list[Message] = Field(..., description="Messages in chronological order")


class ConversationOpenRequest(ParticipantsRequest):
    """Open a chat, seeding the owner's welcome message for new conversations."""

    owner_name: str = Field(..., min_length=1, description="Book owner display name")
    book_title: str = Field(..., min_length=1, description="Book title")


class MessageCreateRequest(ParticipantsRequest):
    """Append one message to a conversation."""

    text: str = Field(..., description="Message body")
    sender_name: str | None = Field(
        None, description="Sender display name (defaults to CHAT_DEFAULT_SENDER_NAME)"
    )

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Reject blank messages and trim surrounding whitespace."""
        text = v.strip()
        if not text:
            raise ValueError("Message text must not be empty")
        return text


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status: 'healthy' or 'unhealthy'")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Current timestamp (ISO 8601)")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str = Field(..., description="Readiness status: 'ready' or 'not_ready'")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Current timestamp (ISO 8601)")
    checks: dict[str, bool] = Field(..., description="Individual component checks")
