from __future__ import annotations

import json
from typing import Any

REPLY = {
    "message_student": "That sounds stressful. Try a slow breath.",
    "feeling_label": "stressed",
    "skill_tag": ["breathing"],
    "tip_summary": "Box breathing",
    "next_step_prompt": "Want to try it now?",
    "escalation": "none",
}


def gemini_body(text: str | None = None, finish_reason: str = "STOP", **extra: Any) -> dict[str, Any]:
    """Build a ``generateContent`` response with one candidate."""
    candidate: dict[str, Any] = {"finishReason": finish_reason, "index": 0}
    if text is not None:
        candidate["content"] = {"role": "model", "parts": [{"text": text}]}
    body: dict[str, Any] = {"candidates": [candidate]}
    body.update(extra)
    return body


def reply_text(**overrides: Any) -> str:
    return json.dumps({**REPLY, **overrides})
