"""
Google Gemini API client (google-genai SDK, async surface).

Translates relaybot's Prompt / ContentPart models into google.genai types and
exposes the four provider operations the relay pipeline needs: generate,
count_tokens, and File API upload / status / delete.

No retries here: the gateway and stager decide what a failure means.
"""

from __future__ import annotations

import io
import logging
from typing import Callable

from google import genai
from google.genai import types

from ..config import settings
from ..models import (
    AssetHandle,
    AssetState,
    ContentPart,
    InlineMediaPart,
    Prompt,
    StagedAssetPart,
    TextPart,
    ToolId,
    Turn,
)

logger = logging.getLogger(__name__)

_WIRE_TOOLS: dict[ToolId, Callable[[], types.Tool]] = {
    ToolId.GOOGLE_SEARCH: lambda: types.Tool(google_search=types.GoogleSearch()),
}

# File API state name -> AssetState. Anything else (PROCESSING,
# STATE_UNSPECIFIED, missing) is still pending.
_FILE_STATES = {
    "ACTIVE": AssetState.READY,
    "FAILED": AssetState.FAILED,
}


def part_to_wire(part: ContentPart) -> types.Part:
    if isinstance(part, TextPart):
        return types.Part(text=part.text)
    if isinstance(part, InlineMediaPart):
        return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
    if isinstance(part, StagedAssetPart):
        return types.Part.from_uri(file_uri=part.handle.uri, mime_type=part.mime_type)
    raise TypeError(f"unknown content part: {type(part).__name__}")


def turn_to_wire(turn: Turn) -> types.Content:
    return types.Content(role=turn.role, parts=[part_to_wire(p) for p in turn.parts])


def file_to_handle(file: types.File) -> AssetHandle:
    state = getattr(file, "state", None)
    state_name = str(getattr(state, "name", state or "")).upper()
    return AssetHandle(
        name=file.name or "",
        uri=file.uri or "",
        state=_FILE_STATES.get(state_name, AssetState.PENDING),
    )


class GeminiClient:
    def __init__(self, api_key: str | None = None, client: genai.Client | None = None) -> None:
        self._client = client or genai.Client(api_key=api_key or settings.gemini_api_key)

    @staticmethod
    def build_contents(prompt: Prompt) -> list[types.Content]:
        return [turn_to_wire(t) for t in prompt.contents]

    @staticmethod
    def build_config(prompt: Prompt) -> types.GenerateContentConfig | None:
        tools = [_WIRE_TOOLS[t]() for t in sorted(prompt.tools, key=lambda t: t.value) if t in _WIRE_TOOLS]
        if not tools and not prompt.system_instruction:
            return None
        return types.GenerateContentConfig(
            system_instruction=prompt.system_instruction or None,
            tools=tools or None,
        )

    async def generate(self, prompt: Prompt, model_id: str) -> types.GenerateContentResponse:
        contents = self.build_contents(prompt)
        logger.debug(
            "generate_content model=%s turns=%d tools=%s system=%s",
            model_id, len(contents), sorted(t.value for t in prompt.tools),
            "set" if prompt.system_instruction else "none",
        )
        return await self._client.aio.models.generate_content(
            model=model_id,
            contents=contents,
            config=self.build_config(prompt),
        )

    async def count_tokens(self, prompt: Prompt, model_id: str) -> int:
        # The Gemini Developer API rejects system_instruction and tools in a
        # count_tokens config, so only the conversation contents are counted.
        result = await self._client.aio.models.count_tokens(
            model=model_id,
            contents=self.build_contents(prompt),
        )
        return result.total_tokens or 0

    async def upload(self, data: bytes, mime_type: str, display_name: str) -> AssetHandle:
        file = await self._client.aio.files.upload(
            file=io.BytesIO(data),
            config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
        )
        handle = file_to_handle(file)
        logger.info("Uploaded %r to File API: name=%s uri=%s", display_name, handle.name, handle.uri)
        return handle

    async def get_status(self, handle: AssetHandle) -> AssetHandle:
        file = await self._client.aio.files.get(name=handle.name)
        return file_to_handle(file)

    async def delete(self, handle: AssetHandle) -> None:
        await self._client.aio.files.delete(name=handle.name)
