"""
FastAPI Application

Main FastAPI application for BookSwap chat with:
- Lifespan management for conversation storage and the message event bus
- CORS middleware for frontend integration
- Health, conversation, and WebSocket endpoints

Usage:
    uvicorn bookswap.api.main:app --reload --port 8000
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookswap import __version__
from bookswap.api import websocket
from bookswap.api.routes import conversations, health
from bookswap.config import get_settings
from bookswap.conversations import ConversationStore, MessageEventBus, create_storage

logger = logging.getLogger(__name__)

# Application-owned components, populated during lifespan startup
app_state = {
    "event_bus": None,
    "conversation_store": None,
}


def build_conversation_store() -> ConversationStore:
    """Create the store and event bus from current settings."""
    config = get_settings()
    storage = create_storage(config.storage)
    return ConversationStore(storage=storage, bus=MessageEventBus())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Initializes:
    - Conversation storage backend (memory or JSON file)
    - Message event bus shared by HTTP handlers and WebSocket viewers
    """
    config = get_settings()
    logger.info("Starting BookSwap API server...")

    try:
        logger.info(f"Initializing conversation store ({config.storage.backend} storage)...")
        store = build_conversation_store()
        app_state["event_bus"] = store.bus
        app_state["conversation_store"] = store

        logger.info("BookSwap API server started successfully")

        yield

    finally:
        logger.info("Shutting down BookSwap API server...")
        app_state["conversation_store"] = None
        app_state["event_bus"] = None
        logger.info("BookSwap API server shut down complete")


app = FastAPI(
    title="BookSwap API",
    description="Chat between readers and owners of textbook listings",
    version=__version__,
    lifespan=lifespan,
)

cors_origins_env = os.getenv("CORS_ORIGINS", "")
cors_origins = (
    [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    if cors_origins_env
    else ["http://localhost:3000", "http://localhost:3001"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(conversations.router, prefix="/api/v1", tags=["conversations"])
app.include_router(websocket.router, tags=["websocket"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "BookSwap API",
        "version": __version__,
        "description": "Chat between readers and owners of textbook listings",
        "docs": "/docs",
    }
