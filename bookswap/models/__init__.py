"""
BookSwap Models Module

Pydantic request/response models for the HTTP API. Conversation records
themselves live in bookswap.conversations.models.
"""

from .api import (
    ConversationOpenRequest,
    ConversationSaveRequest,
    HealthResponse,
    MessageCreateRequest,
    ParticipantsRequest,
    ReadinessResponse,
)

__all__ = [
    "ConversationOpenRequest",
    "ConversationSaveRequest",
    "HealthResponse",
    "MessageCreateRequest",
    "ParticipantsRequest",
    "ReadinessResponse",
]
