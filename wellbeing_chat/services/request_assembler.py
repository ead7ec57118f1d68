"""Build the request sent to the completion service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..config.llm_config import LlmConfig
from ..models.chat_request import ChatRequest
from ..prompts.system import PERSONA_INSTRUCTION, PERSONA_VERSION, RESPONSE_SCHEMA

JSON_MIME_TYPE = "application/json"


@dataclass(frozen=True)
class UpstreamRequest:
    """One ``generateContent`` call, fixed once built."""

    text: str
    model: str
    temperature: float
    max_output_tokens: int
    persona: str = field(default=PERSONA_INSTRUCTION, init=False)
    persona_version: str = field(default=PERSONA_VERSION, init=False)
    response_mime_type: str = JSON_MIME_TYPE
    response_schema: Optional[Mapping[str, Any]] = field(default=None, repr=False)

    def to_payload(self) -> dict[str, Any]:
        """Render the Gemini REST request body."""
        generation_config: dict[str, Any] = {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
            "responseMimeType": self.response_mime_type,
        }
        if self.response_schema is not None:
            generation_config["responseSchema"] = self.response_schema
        return {
            "systemInstruction": {"parts": [{"text": self.persona}]},
            "contents": [{"role": "user", "parts": [{"text": self.text}]}],
            "generationConfig": generation_config,
        }


def build_upstream_request(chat_request: ChatRequest, llm_config: LlmConfig) -> UpstreamRequest:
    """Combine the persona, the student's text and generation options.

    The persona is always the module constant; nothing in the request can
    replace it.  The schema is only a hint to the service and is attached
    when ``LLM_ENFORCE_SCHEMA`` is on.
    """
    return UpstreamRequest(
        text=chat_request.text,
        model=llm_config.model,
        temperature=llm_config.temperature,
        max_output_tokens=llm_config.max_tokens,
        response_schema=RESPONSE_SCHEMA if llm_config.enforce_schema else None,
    )
