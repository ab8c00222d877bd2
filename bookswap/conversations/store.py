"""Conversation persistence over a key-value storage backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from bookswap.conversations.events import MessageEventBus
from bookswap.conversations.keys import (
    KEY_PREFIX,
    ConversationKey,
    derive_key,
    parse_key,
    split_key,
)
from bookswap.conversations.models import Conversation, Message
from bookswap.conversations.storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

WELCOME_MESSAGE_ID = "1"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def create_initial_message(
    owner_id: str,
    owner_name: str,
    book_title: str,
    *,
    timestamp: datetime | None = None,
) -> Message:
    """Build the owner's welcome message for a new conversation.

    The id is always ``WELCOME_MESSAGE_ID``; call this only when the
    conversation has no messages yet.
    """
    return Message(
        id=WELCOME_MESSAGE_ID,
        sender=owner_id,
        sender_name=owner_name,
        text=(
            f"Hello! I'm {owner_name}, the owner of \"{book_title}\". "
            "Feel free to ask any questions about this book."
        ),
        timestamp=timestamp or _utcnow(),
    )


class ConversationStore:
    """Persist book conversations keyed by book and participant pair.

    Every operation is best-effort: storage and decoding failures are logged
    and turned into empty results or dropped writes. A store built without a
    storage backend behaves as if nothing was ever saved.

    ``add_message`` reads, appends, and writes back the whole record, so two
    clients appending to the same conversation at once can lose a message.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None,
        bus: MessageEventBus | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._bus = bus or MessageEventBus()
        self._clock = clock

    @property
    def storage(self) -> KeyValueStorage | None:
        return self._storage

    @property
    def bus(self) -> MessageEventBus:
        return self._bus

    def get_conversation(self, book_id: str, user_a: str, user_b: str) -> list[Message]:
        if self._storage is None:
            return []
        key = derive_key(book_id, user_a, user_b)
        try:
            data = self._storage.get(key)
            if not data:
                return []
            return Conversation.model_validate_json(data).messages
        except (StorageError, ValidationError) as exc:
            logger.warning(f"Error retrieving conversation {key}: {exc}")
            return []

    def save_conversation(
        self, book_id: str, user_a: str, user_b: str, messages: list[Message]
    ) -> None:
        if self._storage is None:
            return
        key = derive_key(book_id, user_a, user_b)
        try:
            conversation = Conversation(
                book_id=book_id,
                messages=list(messages),
                last_updated=self._clock(),
            )
            self._storage.set(key, json.dumps(conversation.to_record()))
        except (StorageError, ValidationError, TypeError, ValueError) as exc:
            logger.error(f"Error saving conversation {key}: {exc}")

    def add_message(
        self,
        book_id: str,
        current_user_id: str,
        owner_id: str,
        text: str,
        sender_name: str,
    ) -> Message:
        messages = self.get_conversation(book_id, current_user_id, owner_id)

        now = self._clock()
        message = Message(
            id=str(int(now.timestamp() * 1000)),
            sender=current_user_id,
            sender_name=sender_name,
            text=text,
            timestamp=now,
        )
        self.save_conversation(book_id, current_user_id, owner_id, [*messages, message])
        self._bus.publish(book_id, message)
        return message

    def get_user_conversations(self, user_id: str) -> list[Conversation]:
        return [conversation for _, conversation in self.get_user_conversation_entries(user_id)]

    def get_user_conversation_entries(
        self, user_id: str
    ) -> list[tuple[ConversationKey, Conversation]]:
        """Conversations involving ``user_id`` with their parsed keys, newest first."""
        if self._storage is None:
            return []
        try:
            keys = self._storage.keys(KEY_PREFIX)
        except StorageError as exc:
            logger.error(f"Error listing conversations for user {user_id}: {exc}")
            return []

        entries: list[tuple[ConversationKey, Conversation]] = []
        for key in keys:
            try:
                data = self._storage.get(key)
                if not data:
                    continue
                conversation = Conversation.model_validate_json(data)
            except (StorageError, ValidationError):
                logger.debug(f"Skipping unreadable conversation record {key}")
                continue
            # The stored bookId locates the pair even when the id contains "_".
            parsed = split_key(key, conversation.book_id) or parse_key(key)
            if parsed is None or not parsed.involves(user_id):
                continue
            entries.append((parsed, conversation))

        entries.sort(key=lambda entry: entry[1].last_updated, reverse=True)
        return entries
