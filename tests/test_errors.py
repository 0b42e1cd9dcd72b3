"""Tests for structured error categorization and retryability flags."""

from __future__ import annotations

import httpx

from video_insight_mcp.errors import (
    EncodingError,
    ErrorCategory,
    ModelInvocationError,
    SessionNotFoundError,
    make_tool_error,
)


class TestMakeToolError:
    def test_builtin_timeout_maps_to_network_error(self):
        result = make_tool_error(TimeoutError())
        assert result["category"] == "NETWORK_ERROR"
        assert result["retryable"] is True

    def test_gateway_timeout_maps_to_network_error(self):
        result = make_tool_error(ModelInvocationError("Gemini call timed out after 300s"))
        assert result["category"] == "NETWORK_ERROR"

    def test_httpx_network_maps_to_network_error(self):
        result = make_tool_error(httpx.ConnectError("connection refused"))
        assert result["category"] == "NETWORK_ERROR"
        assert result["retryable"] is True

    def test_quota_is_retryable_with_delay(self):
        result = make_tool_error(ModelInvocationError("429 RESOURCE_EXHAUSTED"))
        assert result["category"] == "API_QUOTA_EXCEEDED"
        assert result["retry_after_seconds"] == 60

    def test_missing_api_key(self):
        result = make_tool_error(ValueError("No Gemini API key configured"))
        assert result["category"] == "API_KEY_MISSING"
        assert result["retryable"] is False

    def test_unsupported_media(self):
        result = make_tool_error(EncodingError("UnsupportedMedia", "'.txt'"))
        assert result["category"] == "FILE_UNSUPPORTED"

    def test_unreadable_file(self):
        result = make_tool_error(EncodingError("IOError", "permission denied"))
        assert result["category"] == "FILE_UNREADABLE"

    def test_session_not_found(self):
        result = make_tool_error(SessionNotFoundError("abc-1"))
        assert result["category"] == "SESSION_NOT_FOUND"
        assert result["error"] == "Session abc-1 not found"

    def test_missing_file_is_unreadable_encoding_error(self):
        result = make_tool_error(EncodingError("IOError", "Cannot read /tmp/gone.mp4"))
        assert result["category"] == "FILE_UNREADABLE"

    def test_categories(self):
        assert {c.value for c in ErrorCategory} == {
            "API_KEY_MISSING", "API_PERMISSION_DENIED", "API_QUOTA_EXCEEDED",
            "API_INVALID_ARGUMENT", "API_NOT_FOUND", "NETWORK_ERROR",
            "FILE_UNSUPPORTED", "FILE_UNREADABLE", "SESSION_NOT_FOUND", "UNKNOWN",
        }

    def test_unknown_keeps_message(self):
        result = make_tool_error(RuntimeError("something odd"))
        assert result == {
            "error": "something odd",
            "category": "UNKNOWN",
            "hint": "something odd",
            "retryable": False,
            "retry_after_seconds": None,
        }


class TestExceptions:
    def test_encoding_error_message(self):
        exc = EncodingError("IOError", "cannot read")
        assert exc.reason == "IOError"
        assert str(exc) == "IOError: cannot read"

    def test_model_error_keeps_facet(self):
        assert ModelInvocationError("boom", facet="summary").facet == "summary"
