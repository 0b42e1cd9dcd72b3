"""Video analysis tools — analyse, follow up, validate URL."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..models.video import FollowUpResponse, UrlCheck, VideoSource
from ..service import VideoAnalysisService
from ..types import SessionId, VideoFilePath, YouTubeUrl
from ..video_url import is_valid_youtube_url

logger = logging.getLogger(__name__)
video_server = FastMCP("video")

_service: VideoAnalysisService | None = None


def set_service(service: VideoAnalysisService | None) -> None:
    """Install the service the tools delegate to (done by the server lifespan)."""
    global _service
    _service = service


def get_service() -> VideoAnalysisService:
    """Return the installed service, building a default one on first use."""
    global _service
    if _service is None:
        _service = VideoAnalysisService()
    return _service


@video_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
async def video_analyze(
    url: YouTubeUrl | None = None,
    file_path: VideoFilePath | None = None,
    custom_prompt: Annotated[str, Field(
        description="Replaces the default summary instruction"
    )] = "",
    include_summary: bool = True,
    include_transcription: bool = False,
    include_visual_description: bool = False,
    include_shot_analysis: bool = False,
    include_lip_flap_analysis: bool = False,
) -> dict:
    """Analyze a video (YouTube URL or local file) and open a follow-up session.

    Provide exactly one of url or file_path. Facets run one after another:
    summary, shot analysis, transcription, visual description, lip-flap.

    Args:
        url: YouTube video URL.
        file_path: Path to a local video file.
        custom_prompt: Optional replacement for the summary instruction.
        include_summary: Run the summary facet.
        include_transcription: Run the transcription facet.
        include_visual_description: Run the visual description facet.
        include_shot_analysis: Run per-shot cinematography tagging.
        include_lip_flap_analysis: Run lip-sync confidence scoring.

    Returns:
        Dict matching AnalysisResult; ``error`` is set when the analysis failed.
    """
    options = dict(
        custom_prompt=custom_prompt,
        include_summary=include_summary,
        include_transcription=include_transcription,
        include_visual_description=include_visual_description,
        include_shot_analysis=include_shot_analysis,
        include_lip_flap_analysis=include_lip_flap_analysis,
    )
    try:
        sources = sum(x is not None for x in (url, file_path))
        if sources == 0:
            raise ValueError("Provide exactly one of: url or file_path")
        if sources > 1:
            raise ValueError("Provide exactly one of: url or file_path, got both")
        if url is not None:
            source = VideoSource.from_url(url, **options)
        else:
            source = VideoSource.from_file(file_path, **options)
    except ValueError as exc:
        return make_tool_error(exc)

    try:
        result = await get_service().analyze_video(source)
    except Exception as exc:
        logger.exception("video_analyze crashed")
        return make_tool_error(exc)
    return result.model_dump(mode="json", exclude_none=True)


@video_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
async def video_ask_followup(
    session_id: SessionId,
    question: Annotated[str, Field(min_length=1, description="Follow-up question about the video")],
) -> dict:
    """Ask a follow-up question about a previously analysed video.

    Args:
        session_id: Session ID returned by video_analyze.
        question: Question about the video.

    Returns:
        Dict with session_id and answer. Failures come back as a plain
        answer string, not a structured error.
    """
    answer = await get_service().ask_follow_up_question(session_id, question)
    return FollowUpResponse(session_id=session_id, answer=answer).model_dump()


@video_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def video_validate_url(
    url: Annotated[str, Field(description="URL to check before submitting")],
) -> dict:
    """Check that a URL is a canonical YouTube watch or youtu.be link."""
    return UrlCheck(url=url, valid=is_valid_youtube_url(url)).model_dump()
