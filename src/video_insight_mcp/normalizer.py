"""Response normalizer — repair and parse JSON-ish model output into records.

Gemini is asked for a bare JSON object but regularly wraps it in code fences
or prose, leaves enum values unquoted, or adds trailing commas. The functions
here undo exactly those habits. They are plain ``str -> str`` rewrites applied
outside string literals, not a JSON5 parser.

The chain is::

    strip_code_fences -> strip -> slice_json_object
        -> quote_bare_keys -> quote_bare_values -> strip_trailing_commas
        -> replace_undefined -> json.loads -> array field -> record policy

:func:`normalize_records` is the boundary: it never raises, it returns a
:class:`NormalizationResult` whose ``records`` is empty on any failure.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from .errors import NormalizationFailure
from .models.shots import LipFlapRecord, ShotRecord
from .types import RecordPolicy

logger = logging.getLogger(__name__)

SHOTS_FIELD = "shots"
LIP_FLAPS_FIELD = "lipFlaps"

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*")
_STRING_RE = re.compile(r'("(?:\\.|[^"\\])*")')
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_BARE_VALUE_RE = re.compile(r"([:\[,]\s*)([A-Za-z0-9_][A-Za-z0-9_-]*)(?=\s*(?:[,}\]]|\Z))")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_UNDEFINED_RE = re.compile(r"([:\[,]\s*)undefined(?=\s*(?:[,}\]]|\Z))")
_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?([eE][+-]?\d+)?")
_JSON_LITERALS = {"true", "false", "null", "undefined"}


@dataclass
class NormalizationResult:
    """Outcome of one normalisation: records, or nothing plus a diagnostic."""

    records: list[Any]
    diagnostic: str = ""
    dropped: int = 0

    @property
    def ok(self) -> bool:
        return not self.diagnostic


def _outside_strings(text: str, rewrite: Callable[[str], str]) -> str:
    """Apply *rewrite* to every span of *text* that is not a string literal."""
    pieces = _STRING_RE.split(text)
    # split() with one capture group alternates: code, string, code, ...
    return "".join(rewrite(p) if i % 2 == 0 else p for i, p in enumerate(pieces))


def strip_code_fences(text: str) -> str:
    """Remove every ``` marker, with or without a language tag."""
    return _FENCE_RE.sub("", text)


def slice_json_object(text: str) -> str:
    """Return the span from the first ``{`` to the last ``}`` inclusive.

    Raises:
        NormalizationFailure: No ``{ ... }`` span exists.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise NormalizationFailure("no JSON object found")
    return text[start : end + 1]


def quote_bare_keys(text: str) -> str:
    """``{movement: "static"}`` -> ``{"movement": "static"}``."""
    return _outside_strings(text, lambda s: _BARE_KEY_RE.sub(r'\1"\2"\3', s))


def _quote_value(match: re.Match[str]) -> str:
    token = match.group(2)
    if token in _JSON_LITERALS or _NUMBER_RE.fullmatch(token):
        return match.group(0)
    return f'{match.group(1)}"{token}"'


def quote_bare_values(text: str) -> str:
    """``"movement": static,`` -> ``"movement": "static",``.

    Numbers and the JSON literals are left alone. A number with a leading
    zero (``07``) is left alone too and still fails ``json.loads``.
    """
    return _outside_strings(text, lambda s: _BARE_VALUE_RE.sub(_quote_value, s))


def strip_trailing_commas(text: str) -> str:
    """Drop a comma that directly precedes ``}`` or ``]``."""
    return _outside_strings(text, lambda s: _TRAILING_COMMA_RE.sub(r"\1", s))


def replace_undefined(text: str) -> str:
    """Rewrite bare ``undefined`` values to ``null``."""
    return _outside_strings(text, lambda s: _UNDEFINED_RE.sub(r"\1null", s))


def repair_json(span: str) -> str:
    """Run the four textual repairs in order."""
    for step in (quote_bare_keys, quote_bare_values, strip_trailing_commas, replace_undefined):
        span = step(span)
    return span


def parse_structured(raw: str) -> dict[str, Any]:
    """Steps 1-5: fences, trim, slice, repair, parse.

    Raises:
        NormalizationFailure: No object span, or the repaired span is not JSON.
    """
    span = slice_json_object(strip_code_fences(raw).strip())
    repaired = repair_json(span)
    try:
        parsed = json.loads(repaired)
    except json.JSONDecodeError as exc:
        logger.warning("Unparseable model output\nraw: %r\nrepaired: %r", raw, repaired)
        raise NormalizationFailure(f"JSON parse error: {exc}") from exc
    if not isinstance(parsed, dict):
        raise NormalizationFailure("top-level JSON value is not an object")
    return parsed


def _apply_policy(
    items: list[Any], schema: type[BaseModel], policy: RecordPolicy, field: str
) -> tuple[list[Any], int]:
    if policy == "passthrough":
        return items, 0

    kept: list[BaseModel] = []
    problems: list[str] = []
    for i, item in enumerate(items):
        try:
            kept.append(schema.model_validate(item))
        except ValidationError as exc:
            fields = ", ".join(".".join(str(p) for p in e["loc"]) or "<record>" for e in exc.errors())
            problems.append(f"#{i} ({fields})")
    if problems:
        logger.warning(
            "Dropped %d/%d %s record(s) outside the vocabulary: %s",
            len(problems), len(items), field, "; ".join(problems),
        )
    return kept, len(problems)


def normalize_records(
    raw: str,
    *,
    field: str,
    schema: type[BaseModel],
    policy: RecordPolicy = "drop",
) -> NormalizationResult:
    """Turn raw model text into the records held in ``raw[field]``.

    Args:
        raw: Model output expected to contain one JSON object.
        field: Name of the array field holding the records.
        schema: Record model used by the ``drop`` policy.
        policy: ``drop`` validates each element and discards non-conforming
            ones; ``passthrough`` returns the array untouched.

    Returns:
        Records on success; empty records and a diagnostic on failure.
    """
    try:
        parsed = parse_structured(raw)
        items = parsed.get(field)
        if not isinstance(items, list):
            raise NormalizationFailure(f"missing or non-array field '{field}'")
    except NormalizationFailure as exc:
        logger.warning("Normalization of '%s' failed: %s", field, exc)
        logger.debug("Raw model output for '%s': %r", field, raw)
        return NormalizationResult(records=[], diagnostic=str(exc))

    records, dropped = _apply_policy(items, schema, policy, field)
    return NormalizationResult(records=records, dropped=dropped)


def normalize_shots(raw: str, policy: RecordPolicy = "drop") -> NormalizationResult:
    return normalize_records(raw, field=SHOTS_FIELD, schema=ShotRecord, policy=policy)


def normalize_lip_flaps(raw: str, policy: RecordPolicy = "drop") -> NormalizationResult:
    return normalize_records(raw, field=LIP_FLAPS_FIELD, schema=LipFlapRecord, policy=policy)
