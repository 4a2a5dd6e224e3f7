"""
Gemini model catalogue: user-facing aliases and per-model media capabilities.

The table is static and read-only; models missing from it have no media
capabilities, so attachments sent while one is selected become in-band notes.
"""

from __future__ import annotations

from dataclasses import dataclass


# Image types Gemini reads from inline bytes or from an upload
INLINE_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"})

# Everything else the File API accepts for generation. Anything outside these
# (TIFF, BMP, GIF, archives, stickers, generic binary) is rejected by Gemini.
_UPLOAD_TYPES = INLINE_IMAGE_TYPES | {"application/pdf"}
_UPLOAD_PREFIXES = ("text/", "audio/", "video/")


@dataclass(frozen=True)
class ModelCapabilities:
    supports_staged_upload: bool  # File API upload (PDF, video, audio, large files)
    supports_inline: bool         # inline image bytes

    def accepts_inline(self, mime_type: str) -> bool:
        return self.supports_inline and mime_type in INLINE_IMAGE_TYPES

    def accepts_upload(self, mime_type: str) -> bool:
        if not self.supports_staged_upload:
            return False
        return mime_type in _UPLOAD_TYPES or mime_type.startswith(_UPLOAD_PREFIXES)


# API model name -> capabilities
CAPABILITIES: dict[str, ModelCapabilities] = {
    "gemini-2.5-pro": ModelCapabilities(supports_staged_upload=True, supports_inline=True),
    "gemini-2.5-flash": ModelCapabilities(supports_staged_upload=True, supports_inline=True),
    "gemini-2.0-flash": ModelCapabilities(supports_staged_upload=True, supports_inline=True),
    "gemini-2.0-flash-lite": ModelCapabilities(supports_staged_upload=True, supports_inline=True),
}

_NO_CAPABILITIES = ModelCapabilities(supports_staged_upload=False, supports_inline=False)

# Alias -> API model name, in the order shown by /help and /setmodel
MODEL_ALIASES: dict[str, str] = {
    "default": "gemini-2.5-pro",
    "pro2.5": "gemini-2.5-pro",
    "flash2.5": "gemini-2.5-flash",
    "flash": "gemini-2.0-flash",
    "flash-lite": "gemini-2.0-flash-lite",
}

# Models recommended for PDF / video / audio input
RECOMMENDED_MULTIMODAL = frozenset({"gemini-2.5-pro", "gemini-2.5-flash"})


def capabilities_for(model_id: str) -> ModelCapabilities:
    return CAPABILITIES.get(model_id, _NO_CAPABILITIES)


def resolve_alias(name: str) -> str | None:
    """Map a user-supplied alias (or a full API name from the catalogue) to a model id."""
    key = name.strip().lower()
    if key in MODEL_ALIASES:
        return MODEL_ALIASES[key]
    if key in CAPABILITIES:
        return key
    return None


def format_model_list() -> str:
    return "\n".join(f"{alias}: {model}" for alias, model in MODEL_ALIASES.items())
