"""Single-shot client for the Gemini ``generateContent`` endpoint.

``GeminiClient.invoke`` never raises for network or HTTP problems; it
returns one of the :data:`UpstreamOutcome` variants and leaves the
decision of what to tell the caller to the chat service.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx
from loguru import logger

from ..config.llm_config import LlmConfig
from .request_assembler import UpstreamRequest

GENERIC_ERROR_MESSAGE = "Upstream error"


@dataclass(frozen=True)
class UpstreamOk:
    """2xx response; ``body`` is decoded JSON, or the raw text if it was not JSON."""

    body: Any


@dataclass(frozen=True)
class UpstreamHttpError:
    status: int
    message: str


@dataclass(frozen=True)
class UpstreamTimeout:
    deadline: float


@dataclass(frozen=True)
class UpstreamTransportFailure:
    message: str


UpstreamOutcome = Union[UpstreamOk, UpstreamHttpError, UpstreamTimeout, UpstreamTransportFailure]


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of a Google API error payload."""
    try:
        data = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
    return GENERIC_ERROR_MESSAGE


class _SharedTransport(httpx.AsyncBaseTransport):
    """Delegates to an injected transport without closing it.

    The per-call ``AsyncClient`` closes its transport on exit; the
    injected one belongs to the caller and is reused across calls.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport) -> None:
        self._transport = transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._transport.handle_async_request(request)


class GeminiClient:
    """Posts an :class:`UpstreamRequest` under a wall-clock deadline.

    A new ``httpx.AsyncClient`` is opened for every call, so cancelling
    the call on deadline also closes its connection.  ``transport`` lets
    tests swap in an ``httpx.MockTransport``; it is shared across calls
    and left open.
    """

    def __init__(
        self,
        llm_config: LlmConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.llm_config = llm_config
        self._transport = _SharedTransport(transport) if transport is not None else None

    async def invoke(self, request: UpstreamRequest) -> UpstreamOutcome:
        deadline = self.llm_config.timeout
        started = time.monotonic()
        try:
            response = await asyncio.wait_for(self._post(request), timeout=deadline)
        except asyncio.TimeoutError:
            logger.warning("Completion request cancelled after {:.1f}s deadline", deadline)
            return UpstreamTimeout(deadline=deadline)
        except httpx.TimeoutException:
            logger.warning("Completion request timed out inside the HTTP client")
            return UpstreamTimeout(deadline=deadline)
        except httpx.TransportError as exc:
            logger.warning("Completion request failed: {}: {}", type(exc).__name__, exc)
            return UpstreamTransportFailure(message=str(exc) or type(exc).__name__)

        elapsed = time.monotonic() - started
        if not response.is_success:
            message = _error_message(response)
            logger.error(
                "Completion service returned {} after {:.2f}s: {}",
                response.status_code,
                elapsed,
                response.text,
            )
            return UpstreamHttpError(status=response.status_code, message=message)

        logger.debug("Completion service answered in {:.2f}s", elapsed)
        try:
            return UpstreamOk(body=response.json())
        except ValueError:
            return UpstreamOk(body=response.text)

    async def _post(self, request: UpstreamRequest) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.llm_config.api_key or "",
        }
        # httpx gets the same budget so it never outlives the outer deadline.
        timeout = httpx.Timeout(self.llm_config.timeout)
        async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
            response = await client.post(
                self.llm_config.endpoint,
                json=request.to_payload(),
                headers=headers,
            )
            return response
