"""Shared Gemini client pool and the single text-generation call."""

from __future__ import annotations

import logging
import os
from typing import Any

from google import genai
from google.genai import types

from .config import get_config

logger = logging.getLogger(__name__)


class GeminiClient:
    """Process-wide Gemini client pool (one client per API key)."""

    _clients: dict[str, genai.Client] = {}

    @classmethod
    def get(cls, api_key: str | None = None) -> genai.Client:
        """Return (or create) the shared client for *api_key*."""
        key = api_key or get_config().gemini_api_key or os.getenv("GEMINI_API_KEY", "")
        if not key:
            raise ValueError("No Gemini API key — set GEMINI_API_KEY or pass api_key explicitly")
        if key not in cls._clients:
            cls._clients[key] = genai.Client(api_key=key)
            logger.info("Created Gemini client (key …%s)", key[-4:])
        return cls._clients[key]

    @classmethod
    async def generate(
        cls,
        contents: Any,
        *,
        model: str | None = None,
        thinking_level: str | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text via Gemini, one attempt, thinking parts stripped.

        Args:
            contents: Prompt contents (text, multimodal parts, or conversation history).
            model: Override model ID (defaults to config's default_model).
            thinking_level: Override thinking level; empty means the model default.
            temperature: Override temperature (defaults to config's default).
            **kwargs: Forwarded to the underlying generate_content call.

        Returns:
            The model's user-visible text.
        """
        cfg = get_config()
        resolved_thinking = thinking_level or cfg.default_thinking_level
        resolved_temperature = temperature if temperature is not None else cfg.default_temperature

        config = types.GenerateContentConfig()
        if resolved_thinking:
            config.thinking_config = types.ThinkingConfig(thinking_level=resolved_thinking)
        if resolved_temperature is not None:
            config.temperature = resolved_temperature

        client = cls.get()
        response = await client.aio.models.generate_content(
            model=model or cfg.default_model,
            contents=contents,
            config=config,
            **kwargs,
        )

        parts = response.candidates[0].content.parts if response.candidates else []
        text_parts = [p.text for p in parts or [] if p.text and not getattr(p, "thought", False)]
        return "\n".join(text_parts) if text_parts else (response.text or "")

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for client in list(cls._clients.values()):
            try:
                await client.aio.aclose()
            except Exception:
                logger.debug("Async client close failed", exc_info=True)
            try:
                client.close()
            except Exception:
                logger.debug("Sync client close failed", exc_info=True)
            count += 1
        cls._clients.clear()
        logger.info("Closed %d Gemini client(s)", count)
        return count
