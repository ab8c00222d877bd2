"""In-process notification channel for new chat messages."""

from __future__ import annotations

import logging
from collections.abc import Callable

from bookswap.conversations.models import Message

logger = logging.getLogger(__name__)

MessageListener = Callable[[str, Message], None]


class MessageEventBus:
    """Registry of ``(book_id, message)`` listeners.

    Delivery is synchronous and in registration order. Nothing crosses the
    process boundary: each application instance owns its own bus.
    """

    def __init__(self) -> None:
        self._listeners: list[MessageListener] = []

    def subscribe(self, callback: MessageListener) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""
        entry = _Registration(callback)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(entry)
            except ValueError:
                pass

        return unsubscribe

    def publish(self, book_id: str, message: Message) -> None:
        for listener in list(self._listeners):
            try:
                listener(book_id, message)
            except Exception:
                logger.exception(
                    "Message listener failed",
                    extra={"book_id": book_id, "message_id": message.id},
                )

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)


class _Registration:
    """Wraps a callback so identical callbacks subscribe independently."""

    __slots__ = ("callback",)

    def __init__(self, callback: MessageListener) -> None:
        self.callback = callback

    def __call__(self, book_id: str, message: Message) -> None:
        self.callback(book_id, message)
