"""Model gateway — the one place that talks to the hosted Gemini model.

Every facet funnels through :meth:`ModelGateway.invoke`. Follow-up questions
use the dialogue pair :meth:`start_dialogue` / :meth:`continue_dialogue`,
which replay the full turn history (seed turn with media included) on each
call because the API is stateless between requests.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass, field

from google.genai import types

from .client import GeminiClient
from .config import get_config
from .errors import ModelInvocationError
from .models.video import AnalysisRequestPayload, Turn

logger = logging.getLogger(__name__)


def _media_part(payload: AnalysisRequestPayload) -> types.Part:
    """Build the video Part: inline bytes, or a FileData URI for remote videos."""
    if payload.inline_data is not None:
        return types.Part(
            inline_data=types.Blob(
                data=base64.b64decode(payload.inline_data.data),
                mime_type=payload.inline_data.mime_type,
            )
        )
    return types.Part(file_data=types.FileData(file_uri=payload.text))


def _video_content(payload: AnalysisRequestPayload, prompt: str) -> types.Content:
    """Build a user Content with the video part followed by the text prompt."""
    return types.Content(role="user", parts=[_media_part(payload), types.Part(text=prompt)])


@dataclass
class DialogueHandle:
    """Conversation state needed to continue a dialogue about one video.

    ``history[0]`` is always the seed prompt and ``history[1]`` its response;
    the media is attached to the seed prompt only. Empty turns (a seed
    response when no summary was requested) are not sent.
    """

    payload: AnalysisRequestPayload
    history: list[Turn] = field(default_factory=list)

    def to_contents(self, question: str) -> list[types.Content]:
        """Render the history plus *question* as Gemini contents."""
        contents: list[types.Content] = []
        for i, turn in enumerate(self.history):
            if i == 0:
                contents.append(_video_content(self.payload, turn.text))
            elif turn.text:
                contents.append(
                    types.Content(role=turn.speaker, parts=[types.Part(text=turn.text)])
                )
        contents.append(types.Content(role="user", parts=[types.Part(text=question)]))
        return contents


class ModelGateway:
    """Stateless adapter over GeminiClient with a per-call timeout."""

    def __init__(self, *, model: str | None = None, timeout: float | None = None) -> None:
        self._model = model
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else get_config().facet_timeout_seconds

    async def _generate(self, contents: types.Content | list[types.Content], facet: str) -> str:
        try:
            return await asyncio.wait_for(
                GeminiClient.generate(contents, model=self._model),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ModelInvocationError(
                f"Gemini call timed out after {self.timeout:.0f}s", facet=facet
            ) from exc
        except Exception as exc:
            raise ModelInvocationError(str(exc) or type(exc).__name__, facet=facet) from exc

    async def invoke(
        self, instruction: str, payload: AnalysisRequestPayload, *, facet: str = ""
    ) -> str:
        """One-shot call: (instruction, media) in, raw text out.

        Raises:
            ModelInvocationError: Any transport, auth, quota or timeout failure.
        """
        logger.debug("Invoking Gemini for facet %s", facet or "<unnamed>")
        return await self._generate(_video_content(payload, instruction), facet)

    def start_dialogue(
        self, seed_prompt: str, seed_response: str, payload: AnalysisRequestPayload
    ) -> DialogueHandle:
        """Open a dialogue seeded with an already-answered prompt. No model call."""
        return DialogueHandle(
            payload=payload,
            history=[
                Turn(speaker="user", text=seed_prompt),
                Turn(speaker="model", text=seed_response),
            ],
        )

    async def continue_dialogue(self, handle: DialogueHandle, question: str) -> str:
        """Ask *question* in the context of *handle*; the handle is not mutated.

        Raises:
            ModelInvocationError: Any transport, auth, quota or timeout failure.
        """
        return await self._generate(handle.to_contents(question), "follow_up")
