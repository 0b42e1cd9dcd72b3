"""Video analysis models — sources, transport payloads, and results."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..types import Facet, Speaker


class VideoSource(BaseModel):
    """A video to analyse: local bytes/file, or a remote URL.

    Exactly one variant is populated. ``kind="file"`` carries either raw
    ``data`` (already in memory) or a ``path`` read by the encoder;
    ``kind="url"`` carries ``url``. Instances are immutable.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["file", "url"]
    data: bytes | None = None
    path: str | None = None
    filename: str = ""
    mime_type: str = ""
    url: str | None = None
    custom_prompt: str = ""
    include_summary: bool = True
    include_transcription: bool = False
    include_visual_description: bool = False
    include_shot_analysis: bool = False
    include_lip_flap_analysis: bool = False

    @model_validator(mode="after")
    def _one_variant(self) -> VideoSource:
        if self.kind == "file":
            if (self.data is None) == (self.path is None):
                raise ValueError("File source needs exactly one of: data or path")
            if self.url is not None:
                raise ValueError("File source must not carry a url")
        else:
            if not self.url:
                raise ValueError("URL source needs a url")
            if self.data is not None or self.path is not None:
                raise ValueError("URL source must not carry file data or path")
        return self

    @classmethod
    def from_file(cls, path: str | Path, *, mime_type: str = "", **options: Any) -> VideoSource:
        """Source backed by a file on disk, read lazily by the encoder."""
        p = Path(path)
        return cls(kind="file", path=str(p), filename=p.name, mime_type=mime_type, **options)

    @classmethod
    def from_bytes(
        cls, data: bytes, mime_type: str, *, filename: str = "", **options: Any
    ) -> VideoSource:
        """Source backed by bytes already in memory (e.g. an upload)."""
        return cls(kind="file", data=data, mime_type=mime_type, filename=filename, **options)

    @classmethod
    def from_url(cls, url: str, **options: Any) -> VideoSource:
        """Source referencing a remote video; nothing is fetched."""
        return cls(kind="url", url=url, **options)

    def requested_facets(self) -> set[Facet]:
        """Facets whose inclusion flag is set."""
        flags: dict[Facet, bool] = {
            "summary": self.include_summary,
            "shot_analysis": self.include_shot_analysis,
            "transcription": self.include_transcription,
            "visual_description": self.include_visual_description,
            "lip_flap_analysis": self.include_lip_flap_analysis,
        }
        return {facet for facet, wanted in flags.items() if wanted}


class InlineData(BaseModel):
    """Base64 video content with its MIME type."""

    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str


class AnalysisRequestPayload(BaseModel):
    """Transport-ready form of a VideoSource, reused for every facet call."""

    model_config = ConfigDict(frozen=True)

    inline_data: InlineData | None = None
    text: str | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> AnalysisRequestPayload:
        if (self.inline_data is None) == (self.text is None):
            raise ValueError("Payload needs exactly one of: inline_data or text")
        return self


class Turn(BaseModel):
    """One utterance in a follow-up dialogue."""

    speaker: Speaker
    text: str


class FacetOutcome(BaseModel):
    """Success or failure of a single facet call (partial aggregation mode)."""

    facet: Facet
    ok: bool
    value: Any = None
    error: str = ""


class AnalysisResult(BaseModel):
    """Aggregate result of one analysis.

    ``error`` set means the whole analysis failed. A missing facet field means
    the facet was not requested or normalisation produced no usable records.
    """

    summary: str | None = None
    transcription: str | None = None
    visual_description: str | None = None
    # ShotRecord / LipFlapRecord under the drop policy, raw JSON values under
    # passthrough; Any keeps both unchanged.
    shot_analysis: list[Any] | None = None
    lip_flap_analysis: list[Any] | None = None
    session_id: str | None = None
    error: str | None = None
    facet_errors: dict[str, str] | None = Field(
        default=None,
        description="Per-facet failures, only populated in partial aggregation mode",
    )


class FollowUpResponse(BaseModel):
    """Output schema for video_ask_followup."""

    session_id: str
    answer: str


class UrlCheck(BaseModel):
    """Output schema for video_validate_url."""

    url: str
    valid: bool
