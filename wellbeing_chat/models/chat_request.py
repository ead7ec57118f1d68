"""Request model for the chat API."""

from pydantic import BaseModel, ConfigDict, Field

MAX_INPUT_CHARS = 2000


class ChatRequest(BaseModel):
    """A student's message after normalisation.

    Instances are only built by the input normaliser, which has already
    trimmed the text and enforced the length bounds; the constraints here
    restate those bounds so a hand-built request cannot bypass them.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(
        ...,
        min_length=1,
        max_length=MAX_INPUT_CHARS,
        description="The student's message, whitespace-normalised.",
    )
