"""
Base utilities for Telegram handlers.

Contains authorisation checks and the mapping from a Telegram update to the
InboundMessage consumed by the relay pipeline.
"""

from __future__ import annotations

import logging

from telegram import Message, Update

from ...config import settings
from ...constants import ERROR_MESSAGES
from ...models import AttachmentRef, InboundMessage

logger = logging.getLogger(__name__)


def is_allowed(user_id: int) -> bool:
    """Check if a user is allowed to use the bot."""
    if not settings.telegram_allowed_users:
        return True
    return user_id in settings.telegram_allowed_users


async def reject_unauthorized(update: Update) -> bool:
    """Reject unauthorized users with a message. Returns True if rejected."""
    if not is_allowed(update.effective_user.id):
        await update.effective_message.reply_text(ERROR_MESSAGES["not_authorised"])
        return True
    return False


def command_argument(update: Update) -> str:
    """Everything after the command word, with inner whitespace and newlines preserved."""
    text = update.effective_message.text or ""
    parts = text.split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""


def _sticker_ref(msg: Message) -> AttachmentRef:
    sticker = msg.sticker
    if sticker.is_animated:
        mime, ext = "application/x-tgsticker", "tgs"
    elif sticker.is_video:
        mime, ext = "video/webm", "webm"
    else:
        mime, ext = "image/webp", "webp"
    return AttachmentRef(
        file_id=sticker.file_id, kind="sticker", hint_mime=mime,
        file_name=f"{sticker.file_id}.{ext}",
    )


def attachment_from_message(msg: Message) -> AttachmentRef | None:
    """
    Pick the attachment of a message, with Telegram's MIME hint and a file name.

    Animations are checked before documents because Telegram also fills in
    ``document`` for animation messages.
    """
    if msg.photo:
        photo = msg.photo[-1]  # largest size
        return AttachmentRef(
            file_id=photo.file_id, kind="photo", hint_mime="image/jpeg",
            file_name=f"{photo.file_id}.jpg",
        )
    if msg.video:
        v = msg.video
        return AttachmentRef(
            file_id=v.file_id, kind="video", hint_mime=v.mime_type or "video/mp4",
            file_name=v.file_name or f"{v.file_id}.mp4",
        )
    if msg.animation:
        a = msg.animation
        return AttachmentRef(
            file_id=a.file_id, kind="animation", hint_mime=a.mime_type or "video/mp4",
            file_name=a.file_name or f"{a.file_id}.mp4",
        )
    if msg.document:
        d = msg.document
        return AttachmentRef(
            file_id=d.file_id, kind="document",
            hint_mime=d.mime_type or "application/octet-stream",
            file_name=d.file_name or f"{d.file_id}.dat",
        )
    if msg.voice:
        v = msg.voice
        return AttachmentRef(
            file_id=v.file_id, kind="voice", hint_mime=v.mime_type or "audio/ogg",
            file_name=f"{v.file_id}.ogg",
        )
    if msg.video_note:
        vn = msg.video_note
        return AttachmentRef(
            file_id=vn.file_id, kind="video_note", hint_mime="video/mp4",
            file_name=f"{vn.file_id}.mp4",
        )
    if msg.audio:
        au = msg.audio
        return AttachmentRef(
            file_id=au.file_id, kind="audio", hint_mime=au.mime_type or "audio/mpeg",
            file_name=au.file_name or f"{au.file_id}.mp3",
        )
    if msg.sticker:
        return _sticker_ref(msg)
    return None


def inbound_from_update(update: Update) -> InboundMessage:
    msg = update.effective_message
    return InboundMessage(
        chat_id=update.effective_chat.id,
        user_id=update.effective_user.id,
        text=msg.text,
        caption=msg.caption,
        attachment=attachment_from_message(msg),
    )
