"""Shared fixtures for relaybot tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from relaybot.models import ConversationState


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Prevent tests from reading real .env or touching real data."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "test_token")
    monkeypatch.setenv("GEMINI_API_KEY", "test_key")
    monkeypatch.setenv("TELEGRAM_ALLOWED_USERS_RAW", "12345")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.delenv("WEBHOOK_URL", raising=False)
    monkeypatch.delenv("HEALTH_PORT", raising=False)

    import relaybot.config
    relaybot.config._settings = None
    yield
    relaybot.config._settings = None


@pytest.fixture
def state():
    return ConversationState(selected_model="gemini-2.5-pro")


@pytest.fixture
def mock_platform():
    """TelegramPlatform stand-in: send_text returns increasing message ids."""
    platform = MagicMock()
    platform.send_text = AsyncMock(side_effect=[101, 102, 103, 104, 105, 106])
    platform.delete_message = AsyncMock()
    platform.resolve_download_url = AsyncMock(return_value="https://files.example/file.bin")
    return platform


