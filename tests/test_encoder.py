"""Tests for the media encoder."""

from __future__ import annotations

import base64

import pytest

from video_insight_mcp.encoder import encode, source_identity
from video_insight_mcp.errors import EncodingError
from video_insight_mcp.models.video import VideoSource

VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00isommp42\xff\xfe"


class TestEncode:
    async def test_url_passes_through_unchanged(self):
        payload = await encode(VideoSource.from_url("https://youtu.be/dQw4w9WgXcQ"))
        assert payload.text == "https://youtu.be/dQw4w9WgXcQ"
        assert payload.inline_data is None

    async def test_url_is_not_validated(self):
        payload = await encode(VideoSource.from_url("not even a url"))
        assert payload.text == "not even a url"

    async def test_bytes_round_trip(self):
        source = VideoSource.from_bytes(VIDEO_BYTES, "video/mp4", filename="clip.mp4")
        payload = await encode(source)
        assert payload.inline_data.mime_type == "video/mp4"
        assert base64.b64decode(payload.inline_data.data) == VIDEO_BYTES

    async def test_file_round_trip_with_inferred_mime(self, tmp_path):
        path = tmp_path / "scene.mov"
        path.write_bytes(VIDEO_BYTES)
        payload = await encode(VideoSource.from_file(path))
        assert payload.inline_data.mime_type == "video/quicktime"
        assert base64.b64decode(payload.inline_data.data) == VIDEO_BYTES

    async def test_explicit_mime_wins_over_extension(self, tmp_path):
        path = tmp_path / "scene.bin"
        path.write_bytes(VIDEO_BYTES)
        payload = await encode(VideoSource.from_file(path, mime_type="video/webm"))
        assert payload.inline_data.mime_type == "video/webm"

    async def test_missing_file_is_io_error(self, tmp_path):
        with pytest.raises(EncodingError) as exc_info:
            await encode(VideoSource.from_file(tmp_path / "missing.mp4"))
        assert exc_info.value.reason == "IOError"

    async def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(EncodingError) as exc_info:
            await encode(VideoSource.from_file(path))
        assert exc_info.value.reason == "UnsupportedMedia"


class TestSourceIdentity:
    def test_youtube_url_uses_video_id(self):
        assert source_identity(VideoSource.from_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ")) == "dQw4w9WgXcQ"

    def test_other_url_is_hashed(self):
        ident = source_identity(VideoSource.from_url("https://example.com/v.mp4"))
        assert len(ident) == 12

    def test_file_uses_stem(self, tmp_path):
        assert source_identity(VideoSource.from_file(tmp_path / "my clip.mp4")) == "my clip"

    def test_anonymous_bytes_are_hashed(self):
        a = source_identity(VideoSource.from_bytes(b"a", "video/mp4"))
        b = source_identity(VideoSource.from_bytes(b"b", "video/mp4"))
        assert a != b
