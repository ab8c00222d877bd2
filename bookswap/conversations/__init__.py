"""Book chat conversations: keyed persistence, notifications, and chat sessions."""

from .events import MessageEventBus
from .keys import derive_key
from .models import Conversation, ConversationSummary, Message
from .session import BookRef, ChatSession, summarize_conversations
from .storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
    StorageError,
    StorageQuotaExceededError,
    create_storage,
)
from .store import WELCOME_MESSAGE_ID, ConversationStore, create_initial_message

__all__ = [
    "BookRef",
    "ChatSession",
    "Conversation",
    "ConversationStore",
    "ConversationSummary",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "Message",
    "MessageEventBus",
    "StorageError",
    "StorageQuotaExceededError",
    "WELCOME_MESSAGE_ID",
    "create_initial_message",
    "create_storage",
    "derive_key",
    "summarize_conversations",
]
