"""Core entry points consumed by the UI layer and the MCP tools."""

from __future__ import annotations

import logging

from .config import get_config
from .errors import (
    FOLLOW_UP_FAILED_MESSAGE,
    SESSION_NOT_FOUND_MESSAGE,
    ModelInvocationError,
    SessionNotFoundError,
)
from .gateway import ModelGateway
from .models.video import AnalysisResult, VideoSource
from .orchestrator import AnalysisOrchestrator
from .sessions import SessionStore
from .video_url import is_valid_youtube_url

logger = logging.getLogger(__name__)


class VideoAnalysisService:
    """Wires gateway, session store and orchestrator together.

    Build one per process (see ``server``) and pass it to whatever serves
    requests; tests build their own with a fake gateway.
    """

    def __init__(
        self,
        gateway: ModelGateway | None = None,
        store: SessionStore | None = None,
    ) -> None:
        self.gateway = gateway or ModelGateway()
        self.store = store if store is not None else SessionStore(get_config().max_sessions)
        self.orchestrator = AnalysisOrchestrator(self.gateway, self.store)

    async def analyze_video(self, source: VideoSource) -> AnalysisResult:
        return await self.orchestrator.analyze(source)

    async def ask_follow_up_question(self, session_id: str, question: str) -> str:
        """Answer *question* about the session's video.

        Returns the model's answer, or a plain failure string for an unknown
        session or a failed model call. Questions on the same session are
        answered one at a time so the history stays in order.
        """
        session = self.store.get(session_id)
        if session is None:
            logger.warning("Follow-up for unknown session %s", session_id)
            return SESSION_NOT_FOUND_MESSAGE

        async with session.lock:
            try:
                answer = await self.gateway.continue_dialogue(session.dialogue, question)
                self.store.append_exchange(session_id, question, answer)
            except ModelInvocationError as exc:
                logger.error("Follow-up failed for session %s: %s", session_id, exc)
                return FOLLOW_UP_FAILED_MESSAGE
            except SessionNotFoundError:
                logger.warning("Session %s evicted during follow-up", session_id)
                return SESSION_NOT_FOUND_MESSAGE
        return answer

    @staticmethod
    def is_valid_youtube_url(url: str) -> bool:
        return is_valid_youtube_url(url)
