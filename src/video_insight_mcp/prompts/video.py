"""Video analysis prompt catalog — one fixed instruction per facet.

Only the summary instruction can be replaced by a caller-supplied prompt.
The shot and lip-flap instructions spell out a JSON output contract; the
model does not always honour it, which is what ``normalizer`` is for.
"""

from __future__ import annotations

from ..models.shots import vocabulary
from ..types import Facet

SUMMARY = (
    "Please analyze this video and provide a detailed summary of what's happening in it. "
    "Focus on the main events, actions, and any notable details."
)

TRANSCRIPTION = (
    "Please transcribe the speech in this video. Include timestamps if possible and "
    "identify different speakers if there are multiple people talking."
)

VISUAL_DESCRIPTION = (
    "Please provide a detailed visual description of this video. Focus on the visual "
    "elements, scenes, objects, people, and their actions. Describe the visual style, "
    "camera angles, and any notable visual effects."
)


def _choices(field: str) -> str:
    return " | ".join(f'"{v}"' for v in vocabulary()[field])


SHOT_ANALYSIS = f"""\
Break this video into its individual camera shots and tag each one.

Return ONLY a JSON object with exactly one key "shots" whose value is an array
of shot objects in the order they appear. Each shot object has these keys:

  "id": string, unique per shot (e.g. "shot-1")
  "timestamp": string, "[MM:SS-MM:SS]"
  "shot_type": one of {_choices("shot_type")}
  "frame_size": one of {_choices("frame_size")}
  "movement": one of {_choices("movement")}
  "camera_rig": one of {_choices("camera_rig")}
  "angle": one of {_choices("angle")}
  "lens_depth": one of {_choices("lens_depth")}
  "eyeline": one of {_choices("eyeline")}
  "character": string, the primary character on screen ("" if none)
  "character_actions": array of {{"character": string, "action": one of {_choices("action")}}}

Rules: double-quote every key and every string value, no trailing commas,
no comments, no markdown code fences, and no prose before or after the JSON."""

LIP_FLAP_ANALYSIS = """\
Check whether the visible mouth movements of the people in this video match the
spoken audio (lip sync).

Return ONLY a JSON object with exactly one key "lipFlaps" whose value is an array
of objects in chronological order. Each object has these keys:

  "timestamp": string, "MM:SS" or "[MM:SS-MM:SS]"
  "character": string, who is speaking
  "confidence": integer 0-100, how confident you are that lips and audio are in sync
  "note": optional string explaining any mismatch

Rules: double-quote every key and every string value, no trailing commas,
no markdown code fences, and no prose before or after the JSON."""

PROMPTS: dict[Facet, str] = {
    "summary": SUMMARY,
    "shot_analysis": SHOT_ANALYSIS,
    "transcription": TRANSCRIPTION,
    "visual_description": VISUAL_DESCRIPTION,
    "lip_flap_analysis": LIP_FLAP_ANALYSIS,
}


def prompt_for(facet: Facet, custom_prompt: str = "") -> str:
    """Return the instruction for *facet*; *custom_prompt* overrides summary only."""
    if facet == "summary" and custom_prompt.strip():
        return custom_prompt
    return PROMPTS[facet]
