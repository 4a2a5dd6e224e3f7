"""Tests for relaybot/bot/working_message.py — the transient "Thinking…" notice."""

from unittest.mock import AsyncMock

import pytest

from relaybot.bot.working_message import ThinkingNotice


@pytest.mark.asyncio
async def test_start_sends_notice(mock_platform):
    notice = ThinkingNotice(mock_platform, chat_id=999)

    await notice.start()

    mock_platform.send_text.assert_awaited_once_with(999, "Thinking…")
    assert notice.active


@pytest.mark.asyncio
async def test_stop_deletes_notice(mock_platform):
    notice = ThinkingNotice(mock_platform, chat_id=999)

    await notice.start()
    await notice.stop()

    mock_platform.delete_message.assert_awaited_once_with(999, 101)
    assert not notice.active


@pytest.mark.asyncio
async def test_stop_twice_is_safe(mock_platform):
    notice = ThinkingNotice(mock_platform, chat_id=999)

    await notice.start()
    await notice.stop()
    await notice.stop()

    mock_platform.delete_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_stop_without_start_does_nothing(mock_platform):
    notice = ThinkingNotice(mock_platform, chat_id=999)
    await notice.stop()
    mock_platform.delete_message.assert_not_called()


@pytest.mark.asyncio
async def test_send_failure_is_swallowed(mock_platform):
    mock_platform.send_text = AsyncMock(side_effect=RuntimeError("flood"))
    notice = ThinkingNotice(mock_platform, chat_id=999)

    await notice.start()
    await notice.stop()

    assert not notice.active
    mock_platform.delete_message.assert_not_called()


@pytest.mark.asyncio
async def test_delete_failure_is_swallowed(mock_platform):
    mock_platform.delete_message = AsyncMock(side_effect=RuntimeError("already gone"))
    notice = ThinkingNotice(mock_platform, chat_id=999)

    await notice.start()
    await notice.stop()

    assert not notice.active
