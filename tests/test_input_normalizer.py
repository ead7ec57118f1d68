from __future__ import annotations

import sys
from pathlib import Path

import pytest

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from wellbeing_chat.services.input_normalizer import normalize_input
from wellbeing_chat.utils.error_handler import EmptyInputError, InputTooLargeError


def test_text_is_trimmed_and_whitespace_collapsed() -> None:
    request = normalize_input({"text": "  I feel\n\n  really \t tired  "})

    assert request.text == "I feel really tired"


def test_user_message_is_accepted_when_text_is_absent() -> None:
    assert normalize_input({"userMessage": "hello"}).text == "hello"


def test_first_string_field_wins() -> None:
    assert normalize_input({"text": "from text", "userMessage": "from userMessage"}).text == "from text"
    assert normalize_input({"text": 42, "userMessage": "fallback"}).text == "fallback"


def test_blank_text_falls_through_to_user_message() -> None:
    assert normalize_input({"text": "   ", "userMessage": " hello "}).text == "hello"


def test_blank_text_and_user_message_are_rejected() -> None:
    with pytest.raises(EmptyInputError):
        normalize_input({"text": "   ", "userMessage": "\n\t"})


@pytest.mark.parametrize("payload", [None, [], "hello", {}, {"text": ""}, {"text": None}, {"message": "hi"}])
def test_missing_or_empty_text_is_rejected(payload: object) -> None:
    with pytest.raises(EmptyInputError):
        normalize_input(payload)


def test_length_is_measured_after_normalisation() -> None:
    padded = "  " + "a " * 1000  # 1999 chars once trimmed
    assert len(normalize_input({"text": padded}).text) == 1999

    assert len(normalize_input({"text": "x" * 2000}).text) == 2000


def test_oversized_text_is_rejected() -> None:
    with pytest.raises(InputTooLargeError) as excinfo:
        normalize_input({"text": "x" * 2001})

    assert excinfo.value.status_code == 413
