"""
Attachment download from Telegram.

The platform adapter resolves a file_id to a download URL; the bytes are then
fetched with httpx. One attempt only, any failure becomes DownloadError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ..exceptions import DownloadError

if TYPE_CHECKING:
    from ..bot.platform import TelegramPlatform
    from ..models import AttachmentRef

logger = logging.getLogger(__name__)


class AttachmentFetcher:
    def __init__(
        self,
        platform: "TelegramPlatform",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._platform = platform
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, ref: "AttachmentRef") -> bytes:
        try:
            url = await self._platform.resolve_download_url(ref)
        except Exception as e:
            logger.error("Could not resolve download URL for %s (%s): %s", ref.file_id, ref.kind, e)
            raise DownloadError(f"could not resolve file {ref.file_id}: {e}") from e

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Download of %s failed with HTTP %d", ref.file_id, e.response.status_code)
            raise DownloadError(f"HTTP {e.response.status_code} for file {ref.file_id}") from e
        except httpx.HTTPError as e:
            logger.error("Download of %s failed: %s", ref.file_id, e)
            raise DownloadError(f"transfer failed for file {ref.file_id}: {e}") from e

        logger.debug("Downloaded %s (%d bytes)", ref.file_id, len(resp.content))
        return resp.content
