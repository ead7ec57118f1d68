"""Reply model returned to the chat UI."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from .enums import Escalation, FeelingLabel

FALLBACK_MESSAGE = "I'm sorry, I couldn't process that. Could you try rephrasing?"


class StructuredReply(BaseModel):
    """The structured reply the UI renders.

    Fields a parsed model reply leaves out (or sets to ``null``) take the
    fallback values, so every reply carries the full set of required
    fields. ``feeling_label`` and ``escalation`` are kept as plain strings:
    values coming back from the model are trusted as-is. Unknown keys,
    including any ``crisisFlag`` the model invents, are dropped.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    message_student: str = FALLBACK_MESSAGE
    feeling_label: str = FeelingLabel.UNSURE.value
    skill_tag: list[str] = Field(default_factory=list)
    tip_summary: str = ""
    next_step_prompt: str = ""
    resource_suggestion: Optional[str] = None
    escalation: str = Escalation.NONE.value

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def crisisFlag(self) -> bool:
        return self.escalation == Escalation.CRISIS_988.value

    def to_payload(self) -> dict[str, Any]:
        """Serialise for the HTTP response, omitting an unset resource."""
        return self.model_dump(exclude_none=True)


def fallback_reply() -> StructuredReply:
    """Reply used when the model's text cannot be interpreted."""
    return StructuredReply(
        message_student=FALLBACK_MESSAGE,
        feeling_label=FeelingLabel.UNSURE.value,
        skill_tag=[],
        tip_summary="",
        next_step_prompt="",
        resource_suggestion="",
        escalation=Escalation.NONE.value,
    )
