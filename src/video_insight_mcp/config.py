"""Server configuration via environment variables."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field, field_validator

from .dotenv import apply_config_file

logger = logging.getLogger(__name__)

VALID_THINKING_LEVELS = {"minimal", "low", "medium", "high"}
VALID_AGGREGATION_MODES = {"all_or_nothing", "partial"}
VALID_RECORD_POLICIES = {"drop", "passthrough"}

ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_THINKING_LEVEL",
    "GEMINI_TEMPERATURE",
    "GEMINI_FACET_TIMEOUT",
    "GEMINI_MAX_SESSIONS",
    "VIDEO_AGGREGATION_MODE",
    "VIDEO_RECORD_POLICY",
)


def _env(name: str, default: str = "") -> str:
    """Value of *name*, or *default* when it is unset or blank."""
    return os.getenv(name, "").strip() or default


def _optional_float(raw: str) -> float | None:
    return float(raw) if raw else None


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    default_model: str = Field(default="gemini-2.0-flash")
    default_thinking_level: str = Field(default="")
    default_temperature: float | None = Field(default=None)
    facet_timeout_seconds: float = Field(default=300.0)
    max_sessions: int = Field(default=0)
    aggregation_mode: str = Field(default="all_or_nothing")
    record_policy: str = Field(default="drop")

    @field_validator("default_thinking_level")
    @classmethod
    def validate_thinking_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level and level not in VALID_THINKING_LEVELS:
            allowed = ", ".join(sorted(VALID_THINKING_LEVELS))
            raise ValueError(f"Invalid thinking level '{value}'. Allowed: {allowed}")
        return level

    @field_validator("facet_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("facet_timeout_seconds must be > 0")
        return value

    @field_validator("max_sessions")
    @classmethod
    def validate_max_sessions(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_sessions must be >= 0 (0 = unbounded)")
        return value

    @field_validator("aggregation_mode")
    @classmethod
    def validate_aggregation_mode(cls, value: str) -> str:
        mode = value.strip().lower()
        if mode not in VALID_AGGREGATION_MODES:
            allowed = ", ".join(sorted(VALID_AGGREGATION_MODES))
            raise ValueError(f"Invalid aggregation mode '{value}'. Allowed: {allowed}")
        return mode

    @field_validator("record_policy")
    @classmethod
    def validate_record_policy(cls, value: str) -> str:
        policy = value.strip().lower()
        if policy not in VALID_RECORD_POLICIES:
            allowed = ", ".join(sorted(VALID_RECORD_POLICIES))
            raise ValueError(f"Invalid record policy '{value}'. Allowed: {allowed}")
        return policy

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        return cls(
            gemini_api_key=_env("GEMINI_API_KEY"),
            default_model=_env("GEMINI_MODEL", "gemini-2.0-flash"),
            default_thinking_level=_env("GEMINI_THINKING_LEVEL"),
            default_temperature=_optional_float(_env("GEMINI_TEMPERATURE")),
            facet_timeout_seconds=float(_env("GEMINI_FACET_TIMEOUT", "300")),
            max_sessions=int(_env("GEMINI_MAX_SESSIONS", "0")),
            aggregation_mode=_env("VIDEO_AGGREGATION_MODE", "all_or_nothing"),
            record_policy=_env("VIDEO_RECORD_POLICY", "drop"),
        )


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Settings from the config file (see :mod:`.dotenv`) fill in any of
    :data:`ENV_VARS` missing from the process environment.
    """
    global _config
    if _config is None:
        applied = apply_config_file(ENV_VARS)
        if applied:
            logger.info("Loaded %s from config file", ", ".join(sorted(applied)))
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config
