"""Error kinds, classification, and the structured tool error model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

ANALYSIS_FAILED_MESSAGE = "Failed to analyze video. Please try again."
SESSION_NOT_FOUND_MESSAGE = "Session not found. Please analyze the video again."
FOLLOW_UP_FAILED_MESSAGE = "Failed to answer the question. Please try again."


class VideoInsightError(Exception):
    """Base class for every error raised by this package."""


class EncodingError(VideoInsightError):
    """The video source could not be turned into a transport payload.

    ``reason`` is one of ``IOError`` (bytes unreadable), ``EncodingError``
    (base64 re-encoding failed) or ``UnsupportedMedia`` (no usable MIME type).
    """

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class ModelInvocationError(VideoInsightError):
    """Transport, auth, quota or timeout failure from the hosted model."""

    def __init__(self, message: str, *, facet: str = "") -> None:
        self.facet = facet
        super().__init__(message)


class NormalizationFailure(VideoInsightError):
    """Structured model output could not be repaired or parsed.

    Raised only inside the normalizer, which turns it into an empty result.
    """


class SessionNotFoundError(VideoInsightError, KeyError):
    """Follow-up question against an unknown or evicted session id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")

    def __str__(self) -> str:
        return f"Session {self.session_id} not found"


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    API_KEY_MISSING = "API_KEY_MISSING"
    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_INVALID_ARGUMENT = "API_INVALID_ARGUMENT"
    API_NOT_FOUND = "API_NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    FILE_UNSUPPORTED = "FILE_UNSUPPORTED"
    FILE_UNREADABLE = "FILE_UNREADABLE"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def _categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, SessionNotFoundError):
        return (
            ErrorCategory.SESSION_NOT_FOUND,
            "Session expired or unknown — run video_analyze again to open a new one",
        )
    if isinstance(error, EncodingError):
        if error.reason == "UnsupportedMedia":
            return (
                ErrorCategory.FILE_UNSUPPORTED,
                "File type not supported — use mp4, webm, mov, avi, mkv, mpeg, wmv, or 3gpp",
            )
        return (ErrorCategory.FILE_UNREADABLE, "Video bytes could not be read or encoded")

    s = str(error).lower()

    if "api key" in s and ("no " in s or "missing" in s or "not set" in s):
        return (
            ErrorCategory.API_KEY_MISSING,
            "Set GEMINI_API_KEY in the environment or ~/.config/video-insight-mcp/.env",
        )
    if "403" in s or "permission" in s:
        return (
            ErrorCategory.API_PERMISSION_DENIED,
            "API key lacks permission OR video is restricted (age-gated, region-locked, private)",
        )
    if "429" in s or "quota" in s or "resource_exhausted" in s:
        return (ErrorCategory.API_QUOTA_EXCEEDED, "Rate limit hit — wait and retry")
    if "400" in s:
        return (ErrorCategory.API_INVALID_ARGUMENT, "Bad request — check input format")
    if "404" in s:
        return (ErrorCategory.API_NOT_FOUND, "Resource not found — deleted or invalid ID")
    if isinstance(error, TimeoutError) or "timeout" in s or "timed out" in s:
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out — try again or check connectivity",
        )
    if "connect" in s or "refused" in s:
        return (ErrorCategory.NETWORK_ERROR, "Network failure — check connectivity")

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = _categorize_error(error)
    retryable = cat in {ErrorCategory.API_QUOTA_EXCEEDED, ErrorCategory.NETWORK_ERROR}
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
