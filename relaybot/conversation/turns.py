"""
Turn building: one inbound Telegram message → one user Turn.

Text comes from the message body, or the caption when there is no body.
An attachment is downloaded, sniffed and staged; if any of that fails the
media part is replaced by a bracketed note so the turn still goes out with
whatever text the user sent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import (
    ATTACHMENT_DOWNLOAD_FAILED,
    ATTACHMENT_STAGING_FAILED,
    ATTACHMENT_UNSUPPORTED,
)
from ..exceptions import DownloadError, EmptyTurnError, StagingError, UnsupportedMediaError
from ..media.mime import GENERIC_BINARY, detect
from ..models import TextPart, Turn

if TYPE_CHECKING:
    from ..media.fetcher import AttachmentFetcher
    from ..media.staging import AssetStager
    from ..models import AttachmentRef, ContentPart, InboundMessage

logger = logging.getLogger(__name__)


class TurnBuilder:
    def __init__(self, fetcher: "AttachmentFetcher", stager: "AssetStager") -> None:
        self._fetcher = fetcher
        self._stager = stager

    async def build(self, inbound: "InboundMessage", model_id: str) -> Turn:
        parts: list["ContentPart"] = []

        text = inbound.text or inbound.caption
        if text:
            parts.append(TextPart(text=text))

        if inbound.attachment is not None:
            parts.append(await self._attachment_part(inbound.attachment, model_id))

        if not parts:
            raise EmptyTurnError("message has no text, caption or supported attachment")
        return Turn(role="user", parts=parts)

    async def _attachment_part(self, ref: "AttachmentRef", model_id: str) -> "ContentPart":
        mime_type = ref.hint_mime
        try:
            data = await self._fetcher.fetch(ref)
            detected = detect(data, ref.file_name)
            if detected != GENERIC_BINARY:
                mime_type = detected
            logger.info(
                "Attachment %s: kind=%s hint=%s detected=%s",
                ref.file_id, ref.kind, ref.hint_mime, detected,
            )
            return await self._stager.stage(data, mime_type, model_id, ref.file_name or ref.file_id)
        except DownloadError:
            return TextPart(text=ATTACHMENT_DOWNLOAD_FAILED.format(mime_type=mime_type))
        except UnsupportedMediaError as e:
            return TextPart(text=ATTACHMENT_UNSUPPORTED.format(mime_type=e.mime_type, model_id=e.model_id))
        except StagingError as e:
            logger.warning("Staging %s (%s) failed: %s", ref.file_id, mime_type, e)
            return TextPart(text=ATTACHMENT_STAGING_FAILED.format(
                mime_type=mime_type, reason=e.reason.value,
            ))
