"""Shared test fixtures for video-insight-mcp."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from video_insight_mcp.errors import ModelInvocationError
from video_insight_mcp.gateway import DialogueHandle, ModelGateway
from video_insight_mcp.models.video import AnalysisRequestPayload
from video_insight_mcp.service import VideoAnalysisService
from video_insight_mcp.sessions import SessionStore

SHOTS_JSON = """{
  "shots": [
    {
      "id": "shot-1",
      "timestamp": "[00:00-00:04]",
      "shot_type": "establishing",
      "frame_size": "wide",
      "movement": "static",
      "camera_rig": "tripod",
      "angle": "eye-level",
      "lens_depth": "deep",
      "eyeline": "none",
      "character": "",
      "character_actions": []
    },
    {
      "id": "shot-2",
      "timestamp": "[00:04-00:09]",
      "shot_type": "single",
      "frame_size": "close-up",
      "movement": "push-in",
      "camera_rig": "dolly",
      "angle": "low",
      "lens_depth": "shallow",
      "eyeline": "clean",
      "character": "Anna",
      "character_actions": [{"character": "Anna", "action": "talking-onscreen"}]
    }
  ]
}"""

LIP_FLAPS_JSON = """{
  "lipFlaps": [
    {"timestamp": "00:05", "character": "Anna", "confidence": 92, "note": null},
    {"timestamp": "00:12", "character": "Ben", "confidence": 40, "note": "audio leads lips"}
  ]
}"""


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped."""
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Make FastMCP FunctionTool objects directly awaitable in tests.

    FastMCP 2.x wraps @server.tool in FunctionTool (not callable); 3.x
    preserves the function.
    """
    import video_insight_mcp.tools.video as video_tools

    for name in list(vars(video_tools)):
        obj = getattr(video_tools, name, None)
        if obj is not None and hasattr(obj, "fn") and not callable(obj):
            setattr(video_tools, name, obj.fn)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")


@pytest.fixture(autouse=True)
def _isolate_config_file(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/video-insight-mcp/.env."""
    monkeypatch.delenv("VIDEO_INSIGHT_ENV_FILE", raising=False)
    monkeypatch.setattr(
        "video_insight_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton between tests."""
    import video_insight_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def mock_gemini_client():
    """Patch GeminiClient.get() and .generate() for unit tests."""
    with (
        patch("video_insight_mcp.client.GeminiClient.get") as mock_get,
        patch(
            "video_insight_mcp.client.GeminiClient.generate", new_callable=AsyncMock
        ) as mock_gen,
    ):
        client = MagicMock()
        mock_get.return_value = client
        yield {"get": mock_get, "generate": mock_gen, "client": client}


class FakeGateway(ModelGateway):
    """Scripted gateway: canned text per facet, optional per-facet failures."""

    def __init__(self) -> None:
        super().__init__(timeout=5)
        self.responses: dict[str, str] = {}
        self.failures: set[str] = set()
        self.answers: list[str] = []
        self.calls: list[tuple[str, str, AnalysisRequestPayload]] = []
        self.questions: list[tuple[int, str]] = []

    async def invoke(self, instruction, payload, *, facet=""):
        self.calls.append((facet, instruction, payload))
        if facet in self.failures:
            raise ModelInvocationError("503 service unavailable", facet=facet)
        return self.responses.get(facet, f"{facet} text")

    async def continue_dialogue(self, handle: DialogueHandle, question: str) -> str:
        self.questions.append((len(handle.history), question))
        await asyncio.sleep(0)
        if "follow_up" in self.failures:
            raise ModelInvocationError("429 quota", facet="follow_up")
        if self.answers:
            return self.answers.pop(0)
        return f"answer: {question}"

    @property
    def facets_called(self) -> list[str]:
        return [facet for facet, _, _ in self.calls]


@pytest.fixture()
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def session_store() -> SessionStore:
    return SessionStore()


@pytest.fixture()
def service(fake_gateway, session_store) -> VideoAnalysisService:
    return VideoAnalysisService(gateway=fake_gateway, store=session_store)


@pytest.fixture()
def shots_json() -> str:
    return SHOTS_JSON


@pytest.fixture()
def lip_flaps_json() -> str:
    return LIP_FLAPS_JSON
