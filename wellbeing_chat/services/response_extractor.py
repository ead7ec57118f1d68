"""Recover a :class:`StructuredReply` from the model's text.

The model is asked for bare JSON but is not trusted to deliver it: it
may wrap the object in a code fence, use typographic quotes, or surround
it with chatty prose.  Each recovery step only runs if the previous one
failed, and anything still unreadable becomes the fallback reply.
"""

from __future__ import annotations

import json
import re
from typing import Any

from loguru import logger
from pydantic import ValidationError

from ..models.chat_response import StructuredReply, fallback_reply
from ..utils.error_handler import UpstreamShapeError

_LEADING_FENCE = re.compile(r"^\s*```(?:json)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")

_QUOTE_TABLE = str.maketrans(
    {
        "“": '"',  # left double quotation mark
        "”": '"',  # right double quotation mark
        "„": '"',  # double low-9 quotation mark
        "″": '"',  # double prime
        "‘": "'",  # left single quotation mark
        "’": "'",  # right single quotation mark
        "‚": "'",  # single low-9 quotation mark
        "′": "'",  # prime
    }
)


def candidate_text(body: Any) -> str | None:
    """Return the text of the first candidate in a ``generateContent`` body.

    Multiple text parts are joined in order.  ``None`` means a candidate
    exists but carries no text (e.g. it stopped on ``MAX_TOKENS``).

    Raises
    ------
    UpstreamShapeError
        ``body`` is not an object or holds no candidate at all.
    """
    if not isinstance(body, dict):
        raise UpstreamShapeError("Invalid upstream response shape")
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        raise UpstreamShapeError("Invalid upstream response shape")

    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    if not texts:
        return None
    return "".join(texts)


def strip_code_fence(text: str) -> str:
    """Drop a leading ```` ``` ```` / ```` ```json ```` marker and a trailing ```` ``` ````."""
    cleaned = _LEADING_FENCE.sub("", text, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def normalize_quotes(text: str) -> str:
    """Replace curly quotes and primes with their ASCII equivalents."""
    return text.translate(_QUOTE_TABLE)


def parse_json_object(text: str) -> Any | None:
    """Parse ``text`` as a JSON object, falling back to its outermost ``{...}`` span.

    A direct parse that yields something other than an object also falls
    through to the span search.
    """
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return parsed
    try:
        return json.loads(text[start : end + 1])
    except ValueError:
        return parsed


def extract_reply(text: str | None) -> StructuredReply:
    """Build a reply from raw model text, never raising for bad content."""
    if text is None:
        logger.warning("Completion candidate had no text; using fallback reply")
        return fallback_reply()

    cleaned = strip_code_fence(text)
    parsed = parse_json_object(cleaned)
    if not isinstance(parsed, dict):
        # Curly quotes inside valid string values must survive, so only
        # rewrite them once the text as given has failed to parse.
        parsed = parse_json_object(normalize_quotes(cleaned))
    if not isinstance(parsed, dict):
        logger.warning("Could not recover a JSON object from model output ({} chars)", len(text))
        return fallback_reply()

    try:
        return StructuredReply.model_validate(parsed)
    except ValidationError as exc:
        logger.warning("Model output had unusable field types: {}", exc.errors(include_input=False))
        return fallback_reply()
