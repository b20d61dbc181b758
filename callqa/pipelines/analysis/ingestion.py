"""Audio ingestion helpers: media-type checks and transport encoding."""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass, field
from typing import BinaryIO, Union

from callqa.domain.errors import EncodingError, UnsupportedMediaError

logger = logging.getLogger("callqa.pipelines.analysis")

AudioSource = Union[bytes, bytearray, memoryview, BinaryIO]


@dataclass(frozen=True)
class EncodedPayload:
    """Base64 audio ready to be embedded in an inference request."""

    data: str = field(repr=False)
    media_type: str
    size: int


def is_audio_media_type(media_type: str | None) -> bool:
    """Return ``True`` for ``audio/<subtype>`` (parameters such as ``;codecs=`` allowed)."""

    if not isinstance(media_type, str):
        return False
    essence = media_type.split(";", 1)[0].strip().lower()
    major, _, subtype = essence.partition("/")
    return major == "audio" and bool(subtype)


def guess_media_type(filename: str | None, declared: str | None = None) -> str | None:
    """Prefer the declared content type, fall back to the file extension."""

    if declared and declared != "application/octet-stream":
        return declared
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return declared


def read_source(audio: AudioSource) -> bytes:
    """Materialise the full audio content, reading streams to completion."""

    if isinstance(audio, (bytes, bytearray, memoryview)):
        return bytes(audio)

    read = getattr(audio, "read", None)
    if read is None:
        raise EncodingError(f"Unsupported audio source type: {type(audio).__name__}")
    try:
        content = read()
    except (OSError, ValueError) as exc:
        raise EncodingError(f"Failed to read the audio source: {exc}") from exc
    if not isinstance(content, (bytes, bytearray)):
        raise EncodingError("Audio source did not yield binary content")
    return bytes(content)


def encode_audio(audio: AudioSource, media_type: str) -> EncodedPayload:
    """Base64-encode the complete audio content, without truncation."""

    if not is_audio_media_type(media_type):
        raise UnsupportedMediaError(f"Unsupported media type: {media_type!r}")

    content = read_source(audio)
    encoded = base64.b64encode(content).decode("ascii")
    logger.debug("Audio encoded media_type=%s bytes=%s", media_type, len(content))
    return EncodedPayload(data=encoded, media_type=media_type, size=len(content))


__all__ = [
    "AudioSource",
    "EncodedPayload",
    "encode_audio",
    "guess_media_type",
    "is_audio_media_type",
    "read_source",
]
