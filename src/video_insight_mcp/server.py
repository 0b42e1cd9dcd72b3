"""Main FastMCP server — mounts the video tools."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from .client import GeminiClient
from .service import VideoAnalysisService
from .tools.video import set_service, video_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Build the analysis service on startup; tear down Gemini clients on shutdown."""
    service = VideoAnalysisService()
    set_service(service)
    logger.info("Video analysis service ready")
    try:
        yield {"service": service}
    finally:
        set_service(None)
        closed = await GeminiClient.close_all()
        logger.info("Lifespan shutdown: closed %d client(s)", closed)


app = FastMCP(
    "video-insight",
    instructions=(
        "Gemini video analysis: summary, transcription, visual description, "
        "per-shot cinematography tags, lip-sync confidence, and follow-up "
        "questions on an analysed video."
    ),
    lifespan=_lifespan,
)

app.mount(video_server)


def main() -> None:
    """Entry-point for ``video-insight-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
