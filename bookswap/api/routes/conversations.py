"""Routes for book chat conversations."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from bookswap.config import get_settings
from bookswap.conversations import (
    BookRef,
    ChatSession,
    Conversation,
    ConversationStore,
    ConversationSummary,
    Message,
    summarize_conversations,
)
from bookswap.models.api import (
    ConversationOpenRequest,
    ConversationSaveRequest,
    MessageCreateRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_conversation_store() -> ConversationStore | None:
    from bookswap.api.main import app_state

    return app_state.get("conversation_store")


def _require_store() -> ConversationStore:
    store = _get_conversation_store()
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Conversation store not initialized",
        )
    return store


@router.get("/books/{book_id}/conversations", response_model=list[Message])
async def get_conversation(
    book_id: str,
    user_id: str = Query(..., min_length=1),
    owner_id: str = Query(..., min_length=1),
) -> list[Message]:
    """Return the messages between two users about a book."""
    store = _get_conversation_store()
    if store is None:
        return []
    return store.get_conversation(book_id, user_id, owner_id)


@router.put("/books/{book_id}/conversations", response_model=list[Message])
async def save_conversation(book_id: str, payload: ConversationSaveRequest) -> list[Message]:
    """Replace the stored messages of a conversation."""
    store = _require_store()
    store.save_conversation(book_id, payload.user_id, payload.owner_id, payload.messages)
    return store.get_conversation(book_id, payload.user_id, payload.owner_id)


@router.post("/books/{book_id}/conversations/open", response_model=list[Message])
async def open_conversation(book_id: str, payload: ConversationOpenRequest) -> list[Message]:
    """Load a conversation, seeding the owner's welcome message when it is new."""
    store = _require_store()
    session = ChatSession(
        store,
        BookRef(
            book_id=book_id,
            title=payload.book_title,
            owner_id=payload.owner_id,
            owner_name=payload.owner_name,
        ),
        current_user_id=payload.user_id,
    )
    messages = session.open()
    session.close()
    return messages


@router.post(
    "/books/{book_id}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
)
async def add_message(book_id: str, payload: MessageCreateRequest) -> Message:
    """Append a message and notify listeners on this book."""
    store = _require_store()
    sender_name = payload.sender_name or get_settings().chat.default_sender_name
    message = store.add_message(
        book_id,
        payload.user_id,
        payload.owner_id,
        payload.text,
        sender_name,
    )
    logger.info(
        "conversation_message_added",
        extra={"book_id": book_id, "sender": payload.user_id, "message_id": message.id},
    )
    return message


@router.get("/users/{user_id}/conversations", response_model=list[Conversation])
async def list_user_conversations(user_id: str) -> list[Conversation]:
    """List a user's conversations, most recently active first."""
    store = _get_conversation_store()
    if store is None:
        return []
    return store.get_user_conversations(user_id)


@router.get(
    "/users/{user_id}/conversations/summary",
    response_model=list[ConversationSummary],
)
async def list_user_conversation_summaries(
    user_id: str,
    book_ids: list[str] = Query([]),
    book_titles: list[str] = Query([]),
) -> list[ConversationSummary]:
    """Summaries for the "My Messages" view.

    Book titles come from the listings service; pass them as parallel
    ``book_ids`` / ``book_titles`` query parameters.
    """
    store = _get_conversation_store()
    if store is None:
        return []
    if len(book_ids) != len(book_titles):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="book_ids and book_titles must have the same length",
        )
    return summarize_conversations(
        store,
        user_id,
        book_titles=dict(zip(book_ids, book_titles)),
        preview_length=get_settings().chat.preview_length,
    )
