"""Orchestration of the chat pipeline.

The ChatService runs one request through normalisation, request
assembly, the upstream call, the safety gate and reply extraction.  It
holds configuration only, so a single instance can serve concurrent
requests.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from fastapi import Request
from loguru import logger

from ..config.llm_config import LlmConfig, get_llm_config
from ..models.chat_response import StructuredReply
from ..utils.error_handler import (
    ConfigurationError,
    UpstreamRejection,
    UpstreamTransportError,
)
from .input_normalizer import normalize_input
from .request_assembler import build_upstream_request
from .response_extractor import candidate_text, extract_reply
from .safety_gate import apply_safety_gate
from .upstream_client import (
    GeminiClient,
    UpstreamHttpError,
    UpstreamOk,
    UpstreamOutcome,
    UpstreamTimeout,
    UpstreamTransportFailure,
)


class ChatService:
    """Runs the wellbeing chat pipeline for a single inbound message."""

    def __init__(
        self,
        llm_config: LlmConfig | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.llm_config = llm_config or get_llm_config()
        self.client = GeminiClient(self.llm_config, transport=transport)

    async def reply(self, payload: Any) -> StructuredReply:
        """Produce the structured reply for an inbound JSON body.

        Raises
        ------
        ValidationError
            The body has no usable text (400) or too much of it (413).
        ConfigurationError
            No API key is configured.
        UpstreamTransportError
            The completion service timed out or was unreachable.
        UpstreamRejection
            The completion service answered with an error status.
        UpstreamShapeError
            The completion service answered without any candidate.
        """
        chat_request = normalize_input(payload)
        logger.debug("Normalised student message ({} chars)", len(chat_request.text))

        if not self.llm_config.api_key:
            raise ConfigurationError("Missing GEMINI_API_KEY on server")

        upstream_request = build_upstream_request(chat_request, self.llm_config)
        outcome = await self.client.invoke(upstream_request)
        body = self._unwrap(outcome)

        blocked = apply_safety_gate(body)
        if blocked is not None:
            return blocked

        reply = extract_reply(candidate_text(body))
        logger.info(
            "Reply ready: feeling={} escalation={} crisis={}",
            reply.feeling_label,
            reply.escalation,
            reply.crisisFlag,
        )
        return reply

    @staticmethod
    def _unwrap(outcome: UpstreamOutcome) -> Any:
        """Return the body of a successful outcome or raise the matching error."""
        if isinstance(outcome, UpstreamOk):
            return outcome.body
        if isinstance(outcome, UpstreamHttpError):
            raise UpstreamRejection(outcome.status, outcome.message)
        if isinstance(outcome, UpstreamTimeout):
            raise UpstreamTransportError(f"Upstream timed out after {outcome.deadline:g}s")
        if isinstance(outcome, UpstreamTransportFailure):
            raise UpstreamTransportError("Could not reach upstream service")
        raise TypeError(f"Unknown upstream outcome: {outcome!r}")


def get_chat_service(request: Request) -> ChatService:
    """Dependency injector for ChatService instances.

    The service is built once by :func:`create_app` from the injected
    configuration and kept on ``app.state``.
    """
    return request.app.state.chat_service
