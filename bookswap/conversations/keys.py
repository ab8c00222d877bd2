"""Conversation key derivation and parsing.

Keys have the form ``conversation_<bookId>_<userA>-<userB>`` with the pair
sorted. User ids must not contain "-": the pair is split on it, so a
participant such as ``alice-bob`` would also match ``alice`` and ``bob``.
"""

from __future__ import annotations

from dataclasses import dataclass

KEY_PREFIX = "conversation_"
PAIR_SEPARATOR = "-"


def derive_key(book_id: str, user_a: str, user_b: str) -> str:
    """Return the storage key for a book conversation between two users.

    The pair is sorted so either participant may be passed first.
    """
    first, second = sorted([user_a, user_b])
    return f"{KEY_PREFIX}{book_id}_{first}{PAIR_SEPARATOR}{second}"


@dataclass(frozen=True)
class ConversationKey:
    """Parsed form of a conversation storage key."""

    book_id: str
    pair: str

    def involves(self, user_id: str) -> bool:
        """True when ``user_id`` is one side of the pair.

        Exact only for user ids without "-".
        """
        return self.pair.startswith(user_id + PAIR_SEPARATOR) or self.pair.endswith(
            PAIR_SEPARATOR + user_id
        )

    def other_participant(self, user_id: str) -> str | None:
        """Return the participant that is not ``user_id``."""
        if self.pair.startswith(user_id + PAIR_SEPARATOR):
            return self.pair[len(user_id) + 1 :]
        if self.pair.endswith(PAIR_SEPARATOR + user_id):
            return self.pair[: -(len(user_id) + 1)]
        return None


def split_key(key: str, book_id: str) -> ConversationKey | None:
    """Split ``key`` using the book id stored in its record.

    Book ids may contain "_", so this is the reliable way to recover the
    pair. Returns None when the key was not derived for ``book_id``.
    """
    book_prefix = f"{KEY_PREFIX}{book_id}_"
    if not book_id or not key.startswith(book_prefix):
        return None
    pair = key[len(book_prefix) :]
    if PAIR_SEPARATOR not in pair:
        return None
    return ConversationKey(book_id=book_id, pair=pair)


def parse_key(key: str) -> ConversationKey | None:
    """Split a storage key into book id and participant pair without its record.

    The book id is taken up to the first "_" after the prefix, which is only
    right for book ids without underscores; prefer ``split_key`` when the
    record's book id is known. Returns None for keys outside the namespace
    or without a pair segment.
    """
    if not key.startswith(KEY_PREFIX):
        return None
    book_id, sep, pair = key[len(KEY_PREFIX) :].partition("_")
    if not sep or not book_id or PAIR_SEPARATOR not in pair:
        return None
    return ConversationKey(book_id=book_id, pair=pair)
