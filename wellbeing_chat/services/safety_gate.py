"""Safety override and escalation handling."""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from ..models.chat_response import StructuredReply
from ..models.enums import Escalation, FeelingLabel

SAFETY_FINISH_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"})

SAFETY_BLOCK_REPLY = StructuredReply(
    message_student=(
        "It sounds like you might be going through something really hard, and you "
        "deserve support right now. I'm not a crisis line or a counselor, but you can "
        "call or text 988 (Suicide & Crisis Lifeline) any time, day or night. If you "
        "are in danger, call 911. Please also tell a trusted adult, like a parent, "
        "teacher, coach, or school counselor, what's going on."
    ),
    feeling_label=FeelingLabel.UNSURE.value,
    skill_tag=["reach-out"],
    tip_summary="You don't have to handle this alone.",
    next_step_prompt="Call or text 988, or talk to a trusted adult today.",
    resource_suggestion="988 Suicide & Crisis Lifeline: call or text 988",
    escalation=Escalation.CRISIS_988.value,
)


def block_reason(body: Any) -> Optional[str]:
    """Return why the service withheld output, or ``None`` if it did not.

    A block shows up either as ``promptFeedback.blockReason`` (the prompt
    itself was rejected) or as a first candidate that finished for a
    safety reason.
    """
    if not isinstance(body, dict):
        return None

    feedback = body.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        return str(feedback["blockReason"])

    candidates = body.get("candidates")
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        finish_reason = candidates[0].get("finishReason")
        if finish_reason in SAFETY_FINISH_REASONS:
            return finish_reason
    return None


def apply_safety_gate(body: Any) -> Optional[StructuredReply]:
    """Return the fixed crisis reply when ``body`` carries a safety block.

    Any text that came with the block is ignored.  ``None`` means the
    caller should go on to extraction.
    """
    reason = block_reason(body)
    if reason is None:
        return None
    logger.warning("Completion service blocked the request ({}); returning crisis reply", reason)
    return SAFETY_BLOCK_REPLY
