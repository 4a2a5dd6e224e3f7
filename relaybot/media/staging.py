"""
Attachment placement: inline bytes or a Gemini File API upload.

Images go inline when the model accepts inline images. Other types Gemini
reads (PDF, text, audio, video) are uploaded and polled until the File API
reports them ACTIVE (Ready) or FAILED. Anything else is unsupported media.
The poll is bounded with a fixed delay (default 12 × 5s ≈ 60s) and is the
only retry loop in the relay pipeline.

Uploaded files are left alive; Gemini expires them after 48 hours.
AssetStager.discard() deletes one explicitly.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable

from ..ai.capabilities import ModelCapabilities, capabilities_for
from ..exceptions import StagingError, StagingFailure, UnsupportedMediaError
from ..models import AssetHandle, AssetState, InlineMediaPart, StagedAssetPart

if TYPE_CHECKING:
    from ..ai.gemini_client import GeminiClient
    from ..models import ContentPart

logger = logging.getLogger(__name__)

_DEFAULT_ATTEMPTS = 12
_DEFAULT_INTERVAL = 5.0  # seconds, fixed (no backoff)


class PollState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def _poll_state(handle: AssetHandle) -> PollState:
    if handle.state is AssetState.READY:
        return PollState.READY
    if handle.state is AssetState.FAILED:
        return PollState.FAILED
    return PollState.PENDING


class AssetPoller:
    """
    Waits for an uploaded asset to leave the Pending state.

    ``get_status`` and ``sleep`` are injected so tests can drive the state
    sequence without a network or a real clock.
    """

    def __init__(
        self,
        get_status: Callable[[AssetHandle], Awaitable[AssetHandle]],
        attempts: int = _DEFAULT_ATTEMPTS,
        interval: float = _DEFAULT_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._get_status = get_status
        self._attempts = attempts
        self._interval = interval
        self._sleep = sleep

    async def wait(self, handle: AssetHandle) -> AssetHandle:
        state = _poll_state(handle)
        polls = 0
        while state is PollState.PENDING:
            if polls >= self._attempts:
                state = PollState.TIMED_OUT
                break
            if polls:
                await self._sleep(self._interval)
            polls += 1
            try:
                handle = await self._get_status(handle)
            except Exception as e:
                logger.error("Status check for %s failed (poll %d): %s", handle.name, polls, e)
                raise StagingError(StagingFailure.PROCESSING_FAILED, str(e)) from e
            state = _poll_state(handle)
            logger.debug("Asset %s poll %d/%d: %s", handle.name, polls, self._attempts, state.value)

        if state is PollState.READY:
            return handle
        if state is PollState.FAILED:
            raise StagingError(StagingFailure.PROCESSING_FAILED, f"{handle.name} failed processing")
        raise StagingError(
            StagingFailure.PROCESSING_TIMEOUT,
            f"{handle.name} not ready after {self._attempts} polls",
        )


class AssetStager:
    def __init__(
        self,
        provider: "GeminiClient",
        poll_attempts: int = _DEFAULT_ATTEMPTS,
        poll_interval: float = _DEFAULT_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        capabilities: Callable[[str], ModelCapabilities] = capabilities_for,
    ) -> None:
        self._provider = provider
        self._capabilities = capabilities
        self._poller = AssetPoller(
            provider.get_status,
            attempts=poll_attempts,
            interval=poll_interval,
            sleep=sleep,
        )

    async def stage(
        self,
        data: bytes,
        mime_type: str,
        model_id: str,
        display_name: str | None = None,
    ) -> "ContentPart":
        caps = self._capabilities(model_id)

        if caps.accepts_inline(mime_type):
            logger.info("Attaching %s inline (%d bytes)", mime_type, len(data))
            return InlineMediaPart(mime_type=mime_type, data=data)

        if not caps.accepts_upload(mime_type):
            logger.warning("%s is not supported by model %s", mime_type, model_id)
            raise UnsupportedMediaError(mime_type, model_id)

        name = display_name or "attachment"
        logger.info("Uploading %r (%s, %d bytes) to the File API", name, mime_type, len(data))
        try:
            handle = await self._provider.upload(data, mime_type, name)
        except Exception as e:
            logger.error("Upload of %r (%s) failed: %s", name, mime_type, e)
            raise StagingError(StagingFailure.UPLOAD_FAILED, str(e)) from e

        handle = await self._poller.wait(handle)
        logger.info("Asset %s ready (%s)", handle.name, handle.uri)
        return StagedAssetPart(mime_type=mime_type, handle=handle)

    async def discard(self, handle: AssetHandle) -> bool:
        """Delete an uploaded asset. Returns False (and logs) on failure."""
        try:
            await self._provider.delete(handle)
        except Exception as e:
            logger.error("Failed to delete asset %s: %s", handle.name, e)
            return False
        logger.info("Deleted asset %s", handle.name)
        return True
