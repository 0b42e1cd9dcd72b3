"""Analysis orchestrator: encode once, run facets in order, open a session.

States: ``IDLE -> ENCODING -> RUNNING_FACETS -> SESSION_OPENING -> DONE``,
with any unrecovered encoder or gateway error ending in ``FAILED``.

Facets run strictly one after another in :data:`FACET_ORDER`. In the default
``all_or_nothing`` mode the first failure aborts the analysis and the caller
gets the generic failure result. In ``partial`` mode each facet yields a
:class:`FacetOutcome` and failures are reported per facet.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import ValidationError

from .config import get_config
from .encoder import encode, source_identity
from .errors import ANALYSIS_FAILED_MESSAGE, EncodingError, ModelInvocationError
from .gateway import ModelGateway
from .models.video import AnalysisRequestPayload, AnalysisResult, FacetOutcome, VideoSource
from .normalizer import normalize_lip_flaps, normalize_shots
from .prompts.video import prompt_for
from .sessions import SessionStore
from .types import FACET_ORDER, AggregationMode, Facet, RecordPolicy

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    IDLE = "idle"
    ENCODING = "encoding"
    RUNNING_FACETS = "running_facets"
    SESSION_OPENING = "session_opening"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AnalysisRun:
    """Bookkeeping for a single analyze() call."""

    states: list[AnalysisState] = field(default_factory=lambda: [AnalysisState.IDLE])
    outcomes: list[FacetOutcome] = field(default_factory=list)

    @property
    def state(self) -> AnalysisState:
        return self.states[-1]

    def to(self, state: AnalysisState) -> None:
        logger.debug("Analysis %s -> %s", self.state.value, state.value)
        self.states.append(state)


def new_session_id(source: VideoSource) -> str:
    """Session id from the source identity and the creation time in ms."""
    slug = re.sub(r"[^A-Za-z0-9_-]+", "-", source_identity(source)).strip("-") or "video"
    return f"{slug}-{time.time_ns() // 1_000_000}"


class AnalysisOrchestrator:
    """Runs the requested facets for one video and assembles the result."""

    def __init__(
        self,
        gateway: ModelGateway,
        store: SessionStore,
        *,
        aggregation_mode: AggregationMode | None = None,
        record_policy: RecordPolicy | None = None,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self._aggregation_mode = aggregation_mode
        self._record_policy = record_policy
        self.last_run: AnalysisRun | None = None

    @property
    def aggregation_mode(self) -> AggregationMode:
        return self._aggregation_mode or get_config().aggregation_mode  # type: ignore[return-value]

    @property
    def record_policy(self) -> RecordPolicy:
        return self._record_policy or get_config().record_policy  # type: ignore[return-value]

    async def _run_facet(
        self, facet: Facet, source: VideoSource, payload: AnalysisRequestPayload
    ) -> Any:
        """Invoke one facet; structured facets go through the normalizer.

        Returns the value to store, or None when normalisation kept nothing.
        """
        raw = await self.gateway.invoke(
            prompt_for(facet, source.custom_prompt), payload, facet=facet
        )
        if facet == "shot_analysis":
            records = normalize_shots(raw, self.record_policy).records
            return records or None
        if facet == "lip_flap_analysis":
            records = normalize_lip_flaps(raw, self.record_policy).records
            return records or None
        if facet == "summary":
            return raw
        return raw or None

    async def analyze(self, source: VideoSource) -> AnalysisResult:
        """Analyse *source* and open a follow-up session.

        Never raises for encoder, model or result-assembly failures; they become
        ``AnalysisResult(summary="", error=...)``.
        """
        run = AnalysisRun()
        self.last_run = run
        try:
            return await self._analyze(source, run)
        except (EncodingError, ModelInvocationError, ValidationError) as exc:
            logger.error("Analysis failed in state %s: %s", run.state.value, exc)
            run.to(AnalysisState.FAILED)
            return AnalysisResult(summary="", error=ANALYSIS_FAILED_MESSAGE)

    async def _analyze(self, source: VideoSource, run: AnalysisRun) -> AnalysisResult:
        run.to(AnalysisState.ENCODING)
        payload = await encode(source)

        run.to(AnalysisState.RUNNING_FACETS)
        requested = source.requested_facets()
        partial = self.aggregation_mode == "partial"
        values: dict[str, Any] = {}
        for facet in FACET_ORDER:
            if facet not in requested:
                continue
            try:
                value = await self._run_facet(facet, source, payload)
            except ModelInvocationError as exc:
                if not partial:
                    raise
                logger.warning("Facet %s failed: %s", facet, exc)
                run.outcomes.append(FacetOutcome(facet=facet, ok=False, error=str(exc)))
                continue
            run.outcomes.append(FacetOutcome(facet=facet, ok=True, value=value))
            if value is not None:
                values[facet] = value

        run.to(AnalysisState.SESSION_OPENING)
        session_id = new_session_id(source)
        failures = {o.facet: o.error for o in run.outcomes if not o.ok}
        result = AnalysisResult(**values, session_id=session_id, facet_errors=failures or None)
        dialogue = self.gateway.start_dialogue(
            prompt_for("summary", source.custom_prompt),
            values.get("summary", ""),
            payload,
        )
        self.store.create(session_id, dialogue)
        run.to(AnalysisState.DONE)
        logger.info(
            "Analysis done: %d facet(s), session %s", len(run.outcomes), session_id
        )
        return result
