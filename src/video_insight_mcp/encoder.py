"""Turn a VideoSource into a transport-ready payload."""

from __future__ import annotations

import asyncio
import base64
import binascii
import hashlib
import logging
from pathlib import Path

from .errors import EncodingError
from .models.video import AnalysisRequestPayload, InlineData, VideoSource
from .video_url import extract_video_id

logger = logging.getLogger(__name__)

SUPPORTED_VIDEO_EXTENSIONS: dict[str, str] = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".mpeg": "video/mpeg",
    ".wmv": "video/x-ms-wmv",
    ".3gpp": "video/3gpp",
}


def _video_mime_type(source: VideoSource) -> str:
    """Explicit MIME type, else one inferred from the file extension."""
    if source.mime_type:
        return source.mime_type
    name = source.filename or source.path or ""
    ext = Path(name).suffix.lower()
    mime = SUPPORTED_VIDEO_EXTENSIONS.get(ext)
    if not mime:
        allowed = ", ".join(sorted(SUPPORTED_VIDEO_EXTENSIONS))
        raise EncodingError(
            "UnsupportedMedia", f"Unsupported video extension '{ext}'. Supported: {allowed}"
        )
    return mime


async def _read_bytes(source: VideoSource) -> bytes:
    if source.data is not None:
        return source.data
    path = Path(source.path or "").expanduser()
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        raise EncodingError("IOError", f"Cannot read {path}: {exc}") from exc


async def encode(source: VideoSource) -> AnalysisRequestPayload:
    """Build the payload for *source*.

    URL sources are wrapped as-is (no fetch, no validation). File sources
    are read and base64-encoded.

    Raises:
        EncodingError: Unreadable bytes (``IOError``), failed re-encoding
            (``EncodingError``) or no usable MIME type (``UnsupportedMedia``).
    """
    if source.kind == "url":
        return AnalysisRequestPayload(text=source.url)

    mime = _video_mime_type(source)
    raw = await _read_bytes(source)
    try:
        encoded = base64.b64encode(raw).decode("ascii")
    except (binascii.Error, TypeError, UnicodeDecodeError) as exc:
        raise EncodingError("EncodingError", str(exc)) from exc
    logger.debug("Encoded %d bytes of %s", len(raw), mime)
    return AnalysisRequestPayload(inline_data=InlineData(data=encoded, mime_type=mime))


def source_identity(source: VideoSource) -> str:
    """Stable, human-readable identity used as the session-id prefix.

    YouTube URLs map to their video id, files to their name (or a short
    content hash for anonymous in-memory bytes).
    """
    if source.kind == "url":
        url = source.url or ""
        vid = extract_video_id(url)
        if vid:
            return vid
        return hashlib.sha256(url.encode()).hexdigest()[:12]
    if source.filename:
        return Path(source.filename).stem or source.filename
    return hashlib.sha256(source.data or b"").hexdigest()[:12]
