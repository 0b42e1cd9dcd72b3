"""Shared type aliases for facets, policies, and tool parameters."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

# ── Literal enums ────────────────────────────────────────────────────────────

Facet = Literal[
    "summary", "shot_analysis", "transcription", "visual_description", "lip_flap_analysis",
]
AggregationMode = Literal["all_or_nothing", "partial"]
RecordPolicy = Literal["drop", "passthrough"]
Speaker = Literal["user", "model"]

# Execution order; summary first because the session is seeded from it.
FACET_ORDER: tuple[Facet, ...] = (
    "summary",
    "shot_analysis",
    "transcription",
    "visual_description",
    "lip_flap_analysis",
)

# ── Annotated aliases ────────────────────────────────────────────────────────

YouTubeUrl = Annotated[str, Field(min_length=10, description="YouTube video URL (youtube.com or youtu.be)")]
VideoFilePath = Annotated[str, Field(
    min_length=1,
    description="Path to a local video file (mp4, webm, mov, avi, mkv, mpeg, wmv, 3gpp)",
)]
SessionId = Annotated[str, Field(min_length=1, description="Session ID returned by video_analyze")]
