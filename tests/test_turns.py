"""Tests for relaybot/conversation/turns.py — inbound message to user turn."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from relaybot.conversation.turns import TurnBuilder
from relaybot.exceptions import (
    DownloadError,
    EmptyTurnError,
    StagingError,
    StagingFailure,
    UnsupportedMediaError,
)
from relaybot.models import (
    AssetHandle,
    AssetState,
    AttachmentRef,
    InboundMessage,
    InlineMediaPart,
    StagedAssetPart,
    TextPart,
)

MODEL = "gemini-2.5-pro"


def inbound(text=None, caption=None, attachment=None):
    return InboundMessage(chat_id=1, user_id=12345, text=text, caption=caption, attachment=attachment)


def make_builder(data=b"", staged=None, fetch_error=None, stage_error=None):
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=data, side_effect=fetch_error)
    stager = MagicMock()
    stager.stage = AsyncMock(return_value=staged, side_effect=stage_error)
    return TurnBuilder(fetcher, stager), fetcher, stager


@pytest.mark.asyncio
async def test_text_only_message():
    builder, fetcher, _ = make_builder()

    turn = await builder.build(inbound(text="Hello"), MODEL)

    assert turn.role == "user"
    assert turn.parts == (TextPart(text="Hello"),)
    fetcher.fetch.assert_not_called()


@pytest.mark.asyncio
async def test_photo_with_caption_becomes_text_plus_inline_image():
    png = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
    inline = InlineMediaPart(mime_type="image/png", data=png)
    builder, _, stager = make_builder(data=png, staged=inline)
    photo = AttachmentRef(file_id="ph1", kind="photo", hint_mime="image/jpeg", file_name="ph1.jpg")

    turn = await builder.build(inbound(caption="what is this?", attachment=photo), MODEL)

    assert turn.parts == (TextPart(text="what is this?"), inline)
    # Sniffed type wins over Telegram's image/jpeg hint
    stager.stage.assert_awaited_once_with(png, "image/png", MODEL, "ph1.jpg")


@pytest.mark.asyncio
async def test_hint_used_when_sniffing_finds_nothing():
    staged = StagedAssetPart(
        mime_type="audio/ogg",
        handle=AssetHandle(name="files/v", uri="u", state=AssetState.READY),
    )
    builder, _, stager = make_builder(data=b"\x00\x01\x02", staged=staged)
    voice = AttachmentRef(file_id="v1", kind="voice", hint_mime="audio/ogg")

    await builder.build(inbound(attachment=voice), MODEL)

    stager.stage.assert_awaited_once_with(b"\x00\x01\x02", "audio/ogg", MODEL, "v1")


@pytest.mark.asyncio
async def test_text_wins_over_caption():
    builder, _, _ = make_builder()

    turn = await builder.build(inbound(text="body", caption="cap"), MODEL)

    assert turn.parts == (TextPart(text="body"),)


@pytest.mark.asyncio
async def test_empty_message_raises():
    builder, _, _ = make_builder()

    with pytest.raises(EmptyTurnError):
        await builder.build(inbound(), MODEL)


@pytest.mark.asyncio
async def test_download_failure_becomes_note():
    builder, _, stager = make_builder(fetch_error=DownloadError("404"))
    doc = AttachmentRef(file_id="d1", kind="document", hint_mime="application/pdf")

    turn = await builder.build(inbound(caption="summarise", attachment=doc), MODEL)

    assert turn.parts[0] == TextPart(text="summarise")
    assert "Could not download" in turn.parts[1].text
    assert "application/pdf" in turn.parts[1].text
    stager.stage.assert_not_called()


@pytest.mark.asyncio
async def test_staging_failure_becomes_note_and_text_survives():
    builder, _, _ = make_builder(
        data=b"\x00\x00\x00\x18ftypmp42",
        stage_error=StagingError(StagingFailure.PROCESSING_FAILED),
    )
    video = AttachmentRef(file_id="vid", kind="video", hint_mime="video/mp4")

    turn = await builder.build(inbound(caption="describe", attachment=video), MODEL)

    assert len(turn.parts) == 2
    assert turn.parts[0] == TextPart(text="describe")
    assert isinstance(turn.parts[1], TextPart)
    assert "video/mp4" in turn.parts[1].text
    assert "processing_failed" in turn.parts[1].text


@pytest.mark.asyncio
async def test_unsupported_media_without_text_still_builds_a_turn():
    builder, _, _ = make_builder(
        data=b"%PDF-1.4",
        stage_error=UnsupportedMediaError("application/pdf", "tiny-model"),
    )
    doc = AttachmentRef(file_id="d1", kind="document")

    turn = await builder.build(inbound(attachment=doc), "tiny-model")

    assert len(turn.parts) == 1
    assert "not supported" in turn.parts[0].text
    assert "tiny-model" in turn.parts[0].text


@pytest.mark.asyncio
async def test_photo_without_caption_is_single_inline_part():
    from relaybot.media.staging import AssetStager

    jpeg = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01"
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=jpeg)
    provider = MagicMock()
    provider.upload = AsyncMock()
    builder = TurnBuilder(fetcher, AssetStager(provider, sleep=AsyncMock()))
    photo = AttachmentRef(file_id="ph", kind="photo", hint_mime="image/jpeg", file_name="ph.jpg")

    turn = await builder.build(inbound(attachment=photo), MODEL)

    assert len(turn.parts) == 1
    assert isinstance(turn.parts[0], InlineMediaPart)
    assert turn.parts[0].mime_type == "image/jpeg"
    provider.upload.assert_not_called()


@pytest.mark.asyncio
async def test_animated_sticker_becomes_unsupported_note():
    from relaybot.media.staging import AssetStager

    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=b"\x1f\x8b\x08\x00tgs")
    provider = MagicMock()
    provider.upload = AsyncMock()
    builder = TurnBuilder(fetcher, AssetStager(provider, sleep=AsyncMock()))
    sticker = AttachmentRef(
        file_id="st", kind="sticker", hint_mime="application/x-tgsticker", file_name="st.tgs",
    )

    turn = await builder.build(inbound(attachment=sticker), MODEL)

    assert len(turn.parts) == 1
    assert "not supported" in turn.parts[0].text
    provider.upload.assert_not_called()
