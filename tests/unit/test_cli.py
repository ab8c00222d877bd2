"""
Unit Tests for CLI

Tests the BookSwap CLI commands against a temporary storage file.
"""

import pytest
from click.testing import CliRunner

from bookswap.cli import cli
from bookswap.config import clear_settings_cache
from bookswap.conversations import WELCOME_MESSAGE_ID, ConversationStore, JsonFileStorage


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def file_store(isolated_settings):
    """Store reading the same file the CLI writes."""
    return ConversationStore(storage=JsonFileStorage(isolated_settings))


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "BookSwap" in result.output
        assert "conversations" in result.output

    def test_cli_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_status_reports_storage(self, runner):
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "Storage" in result.output
        assert "ok" in result.output


class TestConversationCommands:
    """Test the conversations command group."""

    def test_send_persists_message(self, runner, file_store):
        result = runner.invoke(
            cli,
            ["conversations", "send", "B1", "U_reader", "U_owner", "Is it available?", "--name", "Bob"],
        )

        assert result.exit_code == 0, result.output
        assert "Sent" in result.output
        [message] = file_store.get_conversation("B1", "U_owner", "U_reader")
        assert message.text == "Is it available?"
        assert message.sender_name == "Bob"

    def test_send_uses_default_name(self, runner, file_store):
        result = runner.invoke(cli, ["conversations", "send", "B1", "U_reader", "U_owner", "Hi"])

        assert result.exit_code == 0, result.output
        assert file_store.get_conversation("B1", "U_reader", "U_owner")[0].sender_name == "You"

    def test_send_rejects_blank_text(self, runner, file_store):
        result = runner.invoke(cli, ["conversations", "send", "B1", "U_reader", "U_owner", "   "])

        assert result.exit_code != 0
        assert "must not be empty" in result.output
        assert file_store.get_conversation("B1", "U_reader", "U_owner") == []

    def test_open_seeds_welcome_message(self, runner, file_store):
        args = [
            "conversations",
            "open",
            "B1",
            "U_reader",
            "U_owner",
            "--owner-name",
            "Alice",
            "--title",
            "Calculus",
        ]

        first = runner.invoke(cli, args)
        second = runner.invoke(cli, args)

        assert first.exit_code == 0, first.output
        assert second.exit_code == 0, second.output
        messages = file_store.get_conversation("B1", "U_reader", "U_owner")
        assert [m.id for m in messages] == [WELCOME_MESSAGE_ID]
        assert "Alice" in first.output

    def test_show_empty_conversation(self, runner):
        result = runner.invoke(cli, ["conversations", "show", "B1", "U_reader", "U_owner"])

        assert result.exit_code == 0
        assert "No messages yet." in result.output

    def test_show_lists_messages(self, runner, file_store):
        file_store.add_message("B1", "U_reader", "U_owner", "Hello", "Bob")

        result = runner.invoke(cli, ["conversations", "show", "B1", "U_owner", "U_reader"])

        assert result.exit_code == 0
        assert "Bob" in result.output
        assert "Hello" in result.output

    def test_list_without_conversations(self, runner):
        result = runner.invoke(cli, ["conversations", "list", "U_reader"])

        assert result.exit_code == 0
        assert "don't have any message conversations yet" in result.output

    def test_list_shows_conversations(self, runner, file_store):
        file_store.add_message("B1", "U_reader", "U_owner", "Hello", "Bob")

        result = runner.invoke(cli, ["conversations", "list", "U_owner"])

        assert result.exit_code == 0
        assert "B1" in result.output
        assert "U_reader" in result.output

    def test_disabled_storage_warns(self, runner, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "disabled")
        clear_settings_cache()

        result = runner.invoke(cli, ["conversations", "list", "U_reader"])

        assert result.exit_code == 0
        assert "disabled" in result.output
        assert "don't have any message conversations yet" in result.output
