"""
Chat session helpers for the book chat UI.

'ChatSession' is what an open chat window does with the store: load the
history, seed the owner's welcome message on first open, listen for messages
from the other participant, and send new ones. 'summarize_conversations'
builds the "My Messages" list shown on a user's profile.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from bookswap.config import get_settings
from bookswap.conversations.keys import derive_key
from bookswap.conversations.models import ConversationSummary, Message
from bookswap.conversations.store import ConversationStore, create_initial_message

logger = logging.getLogger(__name__)

UNKNOWN_BOOK_TITLE = "Unknown book"
DEFAULT_PREVIEW_LENGTH = 50


@dataclass(frozen=True)
class BookRef:
    """The listing a chat is about, as supplied by the listings service."""

    book_id: str
    title: str
    owner_id: str
    owner_name: str


class ChatSession:
    """One user's open chat with a book owner."""

    def __init__(
        self,
        store: ConversationStore,
        book: BookRef,
        current_user_id: str,
        current_user_name: str | None = None,
        on_message: Callable[[Message], None] | None = None,
    ) -> None:
        self.store = store
        self.book = book
        self.current_user_id = current_user_id
        self.current_user_name = current_user_name or get_settings().chat.default_sender_name
        self._on_message = on_message
        self._messages: list[Message] = []
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    def open(self) -> list[Message]:
        """Load history, seeding the welcome message when there is none."""
        if self.is_open:
            return self.messages

        messages = self.store.get_conversation(
            self.book.book_id, self.current_user_id, self.book.owner_id
        )
        if not messages:
            welcome = create_initial_message(
                self.book.owner_id, self.book.owner_name, self.book.title
            )
            messages = [welcome]
            self.store.save_conversation(
                self.book.book_id, self.current_user_id, self.book.owner_id, messages
            )
            logger.debug(
                "Seeded conversation %s",
                derive_key(self.book.book_id, self.current_user_id, self.book.owner_id),
            )

        self._messages = list(messages)
        self._unsubscribe = self.store.bus.subscribe(self._handle_incoming)
        return self.messages

    def send(self, text: str) -> Message | None:
        """Send ``text``; blank input is ignored and returns None."""
        body = text.strip()
        if not body:
            return None
        message = self.store.add_message(
            self.book.book_id,
            self.current_user_id,
            self.book.owner_id,
            body,
            self.current_user_name,
        )
        self._messages.append(message)
        return message

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "ChatSession":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _handle_incoming(self, book_id: str, message: Message) -> None:
        # The sender already appended its own message from add_message.
        if book_id != self.book.book_id or message.sender == self.current_user_id:
            return
        self._messages.append(message)
        if self._on_message is not None:
            self._on_message(message)


def _preview(text: str, length: int) -> str:
    if len(text) > length:
        return f"{text[:length]}..."
    return text


def summarize_conversations(
    store: ConversationStore,
    user_id: str,
    book_titles: Mapping[str, str] | None = None,
    preview_length: int = DEFAULT_PREVIEW_LENGTH,
) -> list[ConversationSummary]:
    """Summaries of a user's conversations, most recently active first."""
    titles = book_titles or {}
    summaries: list[ConversationSummary] = []
    for key, conversation in store.get_user_conversation_entries(user_id):
        if not conversation.messages:
            continue
        last_message = conversation.messages[-1]
        summaries.append(
            ConversationSummary(
                book_id=conversation.book_id,
                book_title=titles.get(conversation.book_id, UNKNOWN_BOOK_TITLE),
                other_user_id=key.other_participant(user_id),
                last_sender_name=last_message.sender_name,
                preview=_preview(last_message.text, preview_length),
                last_updated=conversation.last_updated,
                message_count=len(conversation.messages),
            )
        )
    return summaries
