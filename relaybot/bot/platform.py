"""
Telegram adapter used by the relay pipeline.

Wraps a python-telegram-bot Bot behind the three operations the pipeline
needs: resolve an attachment's download URL, send text, delete a message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import TELEGRAM_MAX_MESSAGE_LENGTH

if TYPE_CHECKING:
    from telegram import Bot
    from ..models import AttachmentRef

logger = logging.getLogger(__name__)


def split_message(text: str, limit: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> list[str]:
    """Split text into Telegram-sized chunks, preferring newline boundaries."""
    chunks: list[str] = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(text[:cut])
        text = text[cut:].lstrip("\n")
    if text:
        chunks.append(text)
    return chunks


class TelegramPlatform:
    def __init__(self, bot: "Bot") -> None:
        self._bot = bot

    async def resolve_download_url(self, ref: "AttachmentRef") -> str:
        tg_file = await self._bot.get_file(ref.file_id)
        if not tg_file.file_path:
            raise ValueError(f"Telegram returned no file_path for {ref.file_id}")
        return tg_file.file_path

    async def send_text(self, chat_id: int, text: str) -> int:
        """Send ``text`` (split if needed); returns the id of the last message sent."""
        message_id = 0
        for chunk in split_message(text):
            sent = await self._bot.send_message(chat_id=chat_id, text=chunk)
            message_id = sent.message_id
        return message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        await self._bot.delete_message(chat_id=chat_id, message_id=message_id)
