"""Integration tests for main.py startup sequence."""

import os
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def mock_telegram_bot():
    """Mock TelegramBot to avoid actual Telegram connections."""
    with patch("relaybot.main.TelegramBot") as mock:
        mock_instance = MagicMock()
        mock_instance.run = MagicMock()
        mock_instance.bot = MagicMock()
        mock.return_value = mock_instance
        yield mock


@pytest.fixture
def mock_gemini_client():
    """Mock GeminiClient to avoid building a real SDK client."""
    with patch("relaybot.main.GeminiClient") as mock:
        mock.return_value = MagicMock()
        yield mock


class TestMainStartup:
    """Tests for main.py startup sequence."""

    def test_components_wired_and_bot_started(self, tmp_path, mock_telegram_bot, mock_gemini_client):
        with patch("relaybot.main.setup_logging") as mock_logging:
            from relaybot.main import main
            main()

        assert os.path.isdir(tmp_path / "logs")
        mock_logging.assert_called_once()
        bot = mock_telegram_bot.return_value
        handlers = bot.register_handlers.call_args.args[0]
        assert "message" in handlers
        assert "setmodel" in handlers
        bot.run.assert_called_once()

    def test_new_conversation_state_uses_settings(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_MODEL", "gemini-2.0-flash")
        monkeypatch.setenv("HISTORY_MAX_TURNS", "6")
        from relaybot.main import new_conversation_state

        state = new_conversation_state()

        assert state.selected_model == "gemini-2.0-flash"
        assert state.max_history == 6
        assert state.history == []

    def test_logging_writes_rotating_file(self, tmp_path):
        import logging
        import logging.handlers
        from relaybot.logging_config import setup_logging

        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("DEBUG", str(tmp_path / "logs"), json_logs=True)
            logging.getLogger("relaybot.test").info("hello")

            assert root.level == logging.DEBUG
            assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
            for handler in root.handlers:
                handler.flush()
            assert "hello" in (tmp_path / "logs" / "relaybot.log").read_text()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)
