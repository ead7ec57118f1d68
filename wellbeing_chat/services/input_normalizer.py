"""Turn an inbound JSON body into a validated :class:`ChatRequest`."""

from __future__ import annotations

import re
from typing import Any

from ..models.chat_request import MAX_INPUT_CHARS, ChatRequest
from ..utils.error_handler import EmptyInputError, InputTooLargeError

TEXT_FIELDS = ("text", "userMessage")

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Trim and collapse internal runs of whitespace to single spaces."""
    return _WHITESPACE_RUN.sub(" ", value).strip()


def normalize_input(payload: Any) -> ChatRequest:
    """Pick the caller's text out of ``payload`` and validate it.

    ``text`` is used unless it is missing, not a string, or blank once
    normalised, in which case ``userMessage`` is tried.

    Raises
    ------
    EmptyInputError
        No string field was supplied or it is empty after normalisation.
    InputTooLargeError
        The normalised text is longer than ``MAX_INPUT_CHARS``.
    """
    text = ""
    if isinstance(payload, dict):
        text = next(
            (
                normalized
                for normalized in (
                    normalize_text(payload[field])
                    for field in TEXT_FIELDS
                    if isinstance(payload.get(field), str)
                )
                if normalized
            ),
            "",
        )
    if not text:
        raise EmptyInputError("Missing 'text' (or 'userMessage')")
    if len(text) > MAX_INPUT_CHARS:
        raise InputTooLargeError("Input too long")
    return ChatRequest(text=text)
