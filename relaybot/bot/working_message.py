"""
Transient "Thinking…" notice shown while Gemini is working.

Usage::

    notice = ThinkingNotice(platform, chat_id)
    await notice.start()
    try:
        result = await gateway.send(...)
    finally:
        await notice.stop()

Both calls are best effort: Telegram failures are logged and swallowed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import THINKING_MESSAGE

if TYPE_CHECKING:
    from .platform import TelegramPlatform

logger = logging.getLogger(__name__)


class ThinkingNotice:
    def __init__(self, platform: "TelegramPlatform", chat_id: int, text: str = THINKING_MESSAGE) -> None:
        self._platform = platform
        self._chat_id = chat_id
        self._text = text
        self._message_id: int | None = None

    @property
    def active(self) -> bool:
        return self._message_id is not None

    async def start(self) -> None:
        try:
            self._message_id = await self._platform.send_text(self._chat_id, self._text)
        except Exception as e:
            logger.debug("Thinking notice failed to send: %s", e)

    async def stop(self) -> None:
        if self._message_id is None:
            return
        try:
            await self._platform.delete_message(self._chat_id, self._message_id)
        except Exception as e:
            logger.debug("Thinking notice failed to delete: %s", e)
        self._message_id = None
