"""Tests for configuration parsing and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from video_insight_mcp.config import ServerConfig, get_config, update_config


class TestFromEnv:
    def test_defaults(self, monkeypatch):
        for var in (
            "GEMINI_MODEL", "GEMINI_THINKING_LEVEL", "GEMINI_TEMPERATURE",
            "GEMINI_FACET_TIMEOUT", "GEMINI_MAX_SESSIONS",
            "VIDEO_AGGREGATION_MODE", "VIDEO_RECORD_POLICY",
        ):
            monkeypatch.delenv(var, raising=False)
        cfg = ServerConfig.from_env()
        assert cfg.gemini_api_key == "test-key-not-real"
        assert cfg.default_model == "gemini-2.0-flash"
        assert cfg.default_thinking_level == ""
        assert cfg.default_temperature is None
        assert cfg.facet_timeout_seconds == 300
        assert cfg.max_sessions == 0
        assert cfg.aggregation_mode == "all_or_nothing"
        assert cfg.record_policy == "drop"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
        monkeypatch.setenv("GEMINI_THINKING_LEVEL", "HIGH")
        monkeypatch.setenv("GEMINI_TEMPERATURE", "0.4")
        monkeypatch.setenv("GEMINI_FACET_TIMEOUT", "45")
        monkeypatch.setenv("GEMINI_MAX_SESSIONS", "10")
        monkeypatch.setenv("VIDEO_AGGREGATION_MODE", "partial")
        monkeypatch.setenv("VIDEO_RECORD_POLICY", "Passthrough")
        cfg = ServerConfig.from_env()
        assert cfg.default_model == "gemini-2.5-pro"
        assert cfg.default_thinking_level == "high"
        assert cfg.default_temperature == 0.4
        assert cfg.facet_timeout_seconds == 45
        assert cfg.max_sessions == 10
        assert cfg.aggregation_mode == "partial"
        assert cfg.record_policy == "passthrough"

    def test_blank_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("GEMINI_FACET_TIMEOUT", "")
        monkeypatch.setenv("GEMINI_MAX_SESSIONS", "  ")
        monkeypatch.setenv("VIDEO_RECORD_POLICY", "")
        cfg = ServerConfig.from_env()
        assert cfg.facet_timeout_seconds == 300
        assert cfg.max_sessions == 0
        assert cfg.record_policy == "drop"


class TestValidation:
    @pytest.mark.parametrize(
        "field,value",
        [
            ("default_thinking_level", "extreme"),
            ("facet_timeout_seconds", 0),
            ("max_sessions", -1),
            ("aggregation_mode", "best_effort"),
            ("record_policy", "coerce"),
        ],
    )
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValidationError):
            ServerConfig(**{field: value})


class TestSingleton:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_update_config_patches_fields(self):
        cfg = update_config(aggregation_mode="partial", default_model=None)
        assert cfg.aggregation_mode == "partial"
        assert cfg.default_model == get_config().default_model
        assert get_config() is cfg
