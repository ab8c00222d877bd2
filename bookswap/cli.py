"""
BookSwap CLI

Command-line interface for inspecting and driving book chats stored in the
configured conversation storage.

Usage:
    bookswap serve                                          # Run the API server
    bookswap status                                         # Show storage status
    bookswap conversations list USER_ID                     # A user's chats
    bookswap conversations show BOOK_ID USER_ID OWNER_ID    # One chat's messages
    bookswap conversations open BOOK_ID USER_ID OWNER_ID --owner-name Alice --title "Calculus"
    bookswap conversations send BOOK_ID USER_ID OWNER_ID "Is this still available?"
"""

import logging
import subprocess
import sys

import click
from rich.console import Console
from rich.table import Table

from bookswap import __version__
from bookswap.config import get_settings
from bookswap.conversations import (
    BookRef,
    ChatSession,
    ConversationStore,
    Message,
    create_storage,
    summarize_conversations,
)
from bookswap.conversations.keys import KEY_PREFIX
from bookswap.conversations.storage import JsonFileStorage, StorageError

console = Console()


def configure_cli_logging() -> None:
    logging.basicConfig(level=logging.ERROR, force=True)
    for logger_name in ("bookswap", "httpx", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


def _open_store() -> ConversationStore:
    settings = get_settings()
    configure_cli_logging()
    if settings.storage.backend == "memory":
        console.print(
            "[yellow]STORAGE_BACKEND=memory: changes made by this command will not persist.[/yellow]"
        )
    elif settings.storage.backend == "disabled":
        console.print("[yellow]Conversation storage is disabled (STORAGE_BACKEND=disabled).[/yellow]")
    return ConversationStore(storage=create_storage(settings.storage))


def _print_messages(messages: list[Message], title: str) -> None:
    if not messages:
        console.print("[dim]No messages yet.[/dim]")
        return
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("From", style="cyan")
    table.add_column("Message")
    for message in messages:
        table.add_row(
            message.timestamp.strftime("%Y-%m-%d %H:%M"),
            message.sender_name,
            message.text,
        )
    console.print(table)


@click.group()
@click.version_option(version=__version__, prog_name="BookSwap")
def cli():
    """BookSwap - chat with owners of textbook listings."""


@cli.command()
@click.option("--host", default=None, help="Bind host (defaults to API_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (defaults to API_PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    settings = get_settings()
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "bookswap.api.main:app",
        "--host",
        host or settings.api_host,
        "--port",
        str(port or settings.api_port),
    ]
    if reload:
        cmd.append("--reload")
    console.print(f"[cyan]Starting API server:[/cyan] {' '.join(cmd)}")
    try:
        subprocess.run(cmd, check=False)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping API server...[/yellow]")


@cli.command()
def status():
    """Show conversation storage status."""
    settings = get_settings()
    store = _open_store()

    table = Table(title="BookSwap Status", show_header=True, header_style="bold cyan")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    table.add_row("Configuration", "ok", f"Environment: {settings.environment}")

    storage = store.storage
    if storage is None:
        table.add_row("Storage", "disabled", "STORAGE_BACKEND=disabled")
    else:
        details = (
            str(storage.path) if isinstance(storage, JsonFileStorage) else settings.storage.backend
        )
        try:
            count = len(storage.keys(KEY_PREFIX))
            table.add_row("Storage", "ok", f"{details} ({count} conversations)")
        except StorageError as e:
            table.add_row("Storage", "error", f"{details}: {str(e)[:60]}")

    console.print(table)


@cli.group(name="conversations")
def conversations():
    """Inspect and send book chat messages."""


@conversations.command(name="list")
@click.argument("user_id")
def list_conversations(user_id: str):
    """List a user's conversations, most recent first."""
    store = _open_store()
    summaries = summarize_conversations(
        store, user_id, preview_length=get_settings().chat.preview_length
    )
    if not summaries:
        console.print("[dim]You don't have any message conversations yet.[/dim]")
        return

    table = Table(title=f"Conversations for {user_id}", show_header=True, header_style="bold cyan")
    table.add_column("Book", style="cyan")
    table.add_column("With")
    table.add_column("Last message")
    table.add_column("Messages", justify="right")
    table.add_column("Updated", style="dim")
    for summary in summaries:
        table.add_row(
            summary.book_id,
            summary.other_user_id or "-",
            f"{summary.last_sender_name}: {summary.preview}",
            str(summary.message_count),
            summary.last_updated.strftime("%Y-%m-%d"),
        )
    console.print(table)


@conversations.command(name="show")
@click.argument("book_id")
@click.argument("user_id")
@click.argument("owner_id")
def show_conversation(book_id: str, user_id: str, owner_id: str):
    """Show the messages between two users about a book."""
    store = _open_store()
    messages = store.get_conversation(book_id, user_id, owner_id)
    _print_messages(messages, f"Book {book_id}")


@conversations.command(name="open")
@click.argument("book_id")
@click.argument("user_id")
@click.argument("owner_id")
@click.option("--owner-name", required=True, help="Display name of the book owner.")
@click.option("--title", "book_title", required=True, help="Book title.")
def open_conversation(book_id: str, user_id: str, owner_id: str, owner_name: str, book_title: str):
    """Open a chat, seeding the owner's welcome message if it is new."""
    store = _open_store()
    book = BookRef(book_id=book_id, title=book_title, owner_id=owner_id, owner_name=owner_name)
    with ChatSession(store, book, current_user_id=user_id) as session:
        _print_messages(session.messages, f"{book_title} - chat with {owner_name}")


@conversations.command(name="send")
@click.argument("book_id")
@click.argument("user_id")
@click.argument("owner_id")
@click.argument("text")
@click.option("--name", "sender_name", default=None, help="Sender display name.")
def send_message(book_id: str, user_id: str, owner_id: str, text: str, sender_name: str | None):
    """Send a message as USER_ID in the chat with OWNER_ID about BOOK_ID."""
    body = text.strip()
    if not body:
        raise click.ClickException("Message text must not be empty.")
    store = _open_store()
    message = store.add_message(
        book_id,
        user_id,
        owner_id,
        body,
        sender_name or get_settings().chat.default_sender_name,
    )
    console.print(f"[green]Sent[/green] message {message.id} as {message.sender_name}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
