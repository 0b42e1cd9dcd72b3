"""Structured facet records — shots and lip-flap windows.

The vocabularies below are closed: a value outside them makes the record
invalid. :func:`vocabulary` is rendered into the shot-analysis prompt
so the requested output contract and the validator cannot drift apart.
"""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

ShotType = Literal[
    "establishing", "master", "single", "two-shot", "group",
    "over-the-shoulder", "point-of-view", "insert", "cutaway", "reaction",
]
FrameSize = Literal[
    "extreme-wide", "wide", "full", "medium-wide", "medium",
    "medium-close-up", "close-up", "extreme-close-up",
]
Movement = Literal[
    "static", "pan", "tilt", "zoom", "dolly", "truck", "tracking",
    "crane", "arc", "push-in", "pull-out",
]
CameraRig = Literal["tripod", "handheld", "steadicam", "gimbal", "dolly", "crane", "drone", "slider"]
Angle = Literal["eye-level", "high", "low", "overhead", "birds-eye", "worms-eye", "dutch"]
LensDepth = Literal["deep", "shallow", "rack-focus"]
Eyeline = Literal["clean", "dirty", "direct-to-camera", "off-screen", "none"]
CharacterActionKind = Literal["talking-onscreen", "talking-offscreen", "listening", "silent"]

TIMESTAMP_RANGE_PATTERN = r"^\[\d{2}:\d{2}-\d{2}:\d{2}\]$"


class CharacterAction(BaseModel):
    """What one character is doing during a shot."""

    model_config = ConfigDict(extra="forbid")

    character: str
    action: CharacterActionKind


class ShotRecord(BaseModel):
    """One detected camera shot with its cinematography tags."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    timestamp: str = Field(pattern=TIMESTAMP_RANGE_PATTERN, description="[MM:SS-MM:SS]")
    shot_type: ShotType
    frame_size: FrameSize
    movement: Movement
    camera_rig: CameraRig
    angle: Angle
    lens_depth: LensDepth
    eyeline: Eyeline
    character: str = ""
    character_actions: list[CharacterAction] = Field(default_factory=list)


class LipFlapRecord(BaseModel):
    """Confidence that mouth movement matches the audio at one moment."""

    model_config = ConfigDict(extra="ignore")

    timestamp: str = Field(min_length=1)
    character: str = ""
    confidence: int = Field(ge=0, le=100)
    note: str | None = None


def vocabulary() -> dict[str, tuple[str, ...]]:
    """Closed vocabularies keyed by shot field name."""
    return {
        "shot_type": get_args(ShotType),
        "frame_size": get_args(FrameSize),
        "movement": get_args(Movement),
        "camera_rig": get_args(CameraRig),
        "angle": get_args(Angle),
        "lens_depth": get_args(LensDepth),
        "eyeline": get_args(Eyeline),
        "action": get_args(CharacterActionKind),
    }
