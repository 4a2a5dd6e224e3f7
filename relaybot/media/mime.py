"""
Content-type detection from file signatures ("magic numbers").

detect() looks at the first 16 bytes against an ordered signature table, then
falls back to the filename extension, then to application/octet-stream. It is
pure and never raises.

Container formats share prefixes (RIFF, ISO-BMFF "ftyp"), so the table lists
the specific sub-type signatures before the generic container entry.
"""

from __future__ import annotations

import os

GENERIC_BINARY = "application/octet-stream"

_PROBE_LEN = 16

# (mime, ((offset, bytes), ...)): every pattern of an entry must match.
# Order is priority: first match wins.
_SIGNATURES: tuple[tuple[str, tuple[tuple[int, bytes], ...]], ...] = (
    # RIFF containers: sub-type at offset 8
    ("image/webp", ((0, b"RIFF"), (8, b"WEBP"))),
    ("audio/wav", ((0, b"RIFF"), (8, b"WAVE"))),
    ("video/x-msvideo", ((0, b"RIFF"), (8, b"AVI "))),
    # ISO base media: brand at offset 8
    ("video/quicktime", ((4, b"ftyp"), (8, b"qt  "))),
    ("audio/mp4", ((4, b"ftyp"), (8, b"M4A "))),
    ("image/heic", ((4, b"ftyp"), (8, b"heic"))),
    ("image/heic", ((4, b"ftyp"), (8, b"heix"))),
    ("image/heif", ((4, b"ftyp"), (8, b"mif1"))),
    ("video/3gpp", ((4, b"ftyp"), (8, b"3gp"))),
    ("video/mp4", ((4, b"ftyp"),)),
    # Images
    ("image/png", ((0, b"\x89PNG\r\n\x1a\n"),)),
    ("image/jpeg", ((0, b"\xff\xd8\xff"),)),
    ("image/gif", ((0, b"GIF87a"),)),
    ("image/gif", ((0, b"GIF89a"),)),
    ("image/tiff", ((0, b"II*\x00"),)),
    ("image/tiff", ((0, b"MM\x00*"),)),
    # Documents
    ("application/pdf", ((0, b"%PDF"),)),
    # Audio / video
    ("audio/ogg", ((0, b"OggS"),)),
    ("audio/flac", ((0, b"fLaC"),)),
    ("audio/mpeg", ((0, b"ID3"),)),
    ("video/webm", ((0, b"\x1a\x45\xdf\xa3"),)),
    ("audio/aac", ((0, b"\xff\xf1"),)),
    ("audio/aac", ((0, b"\xff\xf9"),)),
    ("audio/mpeg", ((0, b"\xff\xfb"),)),
    ("audio/mpeg", ((0, b"\xff\xf3"),)),
    ("audio/mpeg", ((0, b"\xff\xf2"),)),
    # Archives
    ("application/zip", ((0, b"PK\x03\x04"),)),
    ("application/gzip", ((0, b"\x1f\x8b"),)),
    # Weak two-byte signature, kept last
    ("image/bmp", ((0, b"BM"),)),
)

_EXTENSIONS: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".html": "text/html",
    ".htm": "text/html",
    ".json": "application/json",
    ".xml": "text/xml",
    ".py": "text/x-python",
    ".js": "text/javascript",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
    ".avi": "video/x-msvideo",
    ".3gp": "video/3gpp",
    ".mpeg": "video/mpeg",
    ".mpg": "video/mpeg",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".opus": "audio/ogg",
    ".flac": "audio/flac",
    ".aac": "audio/aac",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tgs": "application/x-tgsticker",
}


def _match_signature(head: bytes) -> str | None:
    for mime, patterns in _SIGNATURES:
        if all(head[offset:offset + len(sig)] == sig for offset, sig in patterns):
            return mime
    return None


def _match_extension(filename: str | None) -> str | None:
    if not filename:
        return None
    _, ext = os.path.splitext(filename)
    return _EXTENSIONS.get(ext.lower())


def detect(data: bytes, filename: str | None = None) -> str:
    """Return the MIME type of ``data``; the signature always wins over the filename."""
    head = bytes(data[:_PROBE_LEN]) if data else b""
    return _match_signature(head) or _match_extension(filename) or GENERIC_BINARY
