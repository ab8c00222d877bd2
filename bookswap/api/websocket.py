"""
WebSocket Routes

Pushes new chat messages to open chat windows. Each connection subscribes to
the application's message event bus for one book and forwards messages not
authored by the connected user.
"""

import asyncio
import logging
from collections.abc import Callable

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder

from bookswap.conversations import Message, MessageEventBus

logger = logging.getLogger(__name__)

router = APIRouter()


class BookMessageStream:
    """Async queue fed by bus notifications for one book and viewer."""

    def __init__(
        self,
        bus: MessageEventBus,
        book_id: str,
        user_id: str,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.book_id = book_id
        self.user_id = user_id
        self._bus = bus
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue[Message] = asyncio.Queue()
        self._unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._bus.subscribe(self._on_message)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def get(self) -> Message:
        return await self._queue.get()

    def _on_message(self, book_id: str, message: Message) -> None:
        if book_id != self.book_id or message.sender == self.user_id:
            return
        # Publishers may run on a worker thread.
        self._loop.call_soon_threadsafe(self._queue.put_nowait, message)


def _message_event(book_id: str, message: Message) -> dict:
    return {
        "type": "message",
        "book_id": book_id,
        "message": jsonable_encoder(message.to_record()),
    }


@router.websocket("/ws/books/{book_id}")
async def book_messages(websocket: WebSocket, book_id: str) -> None:
    """
    Stream new messages for a book to one viewer.

    Query parameters:
        user_id: the connected user; their own messages are not echoed back.

    Outgoing events:
        {"type": "message", "book_id": "...", "message": {...}}
    """
    from bookswap.api.main import app_state

    user_id = websocket.query_params.get("user_id", "")
    await websocket.accept()

    store = app_state.get("conversation_store")
    if store is None or not user_id:
        await websocket.send_json(
            {
                "type": "error",
                "message": (
                    "Conversation store not initialized"
                    if store is None
                    else "user_id query parameter is required"
                ),
            }
        )
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    stream = BookMessageStream(store.bus, book_id, user_id)
    stream.start()
    logger.info(f"WebSocket subscribed: book={book_id} user={user_id}")

    async def forward() -> None:
        while True:
            message = await stream.get()
            await websocket.send_json(_message_event(book_id, message))

    forward_task = asyncio.create_task(forward())
    try:
        # Client frames are ignored; reading only detects the disconnect.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        stream.stop()
        forward_task.cancel()
        await asyncio.wait({forward_task})
        if not forward_task.cancelled() and forward_task.exception() is not None:
            logger.error(f"WebSocket stream error: {forward_task.exception()}")
        logger.info(f"WebSocket unsubscribed: book={book_id} user={user_id}")
