from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class LlmConfig(BaseSettings):
    """Configuration for the Gemini completion service.

    The API key is optional at load time so the app can boot without it;
    the chat service refuses each call with a configuration error instead.
    """

    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )
    base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta",
        alias="LLM_BASE_URL",
    )
    model: str = Field("gemini-2.5-flash", alias="LLM_MODEL")
    temperature: float = Field(0.7, alias="LLM_TEMPERATURE")
    max_tokens: int = Field(512, alias="LLM_MAX_TOKENS")
    timeout: float = Field(15.0, alias="LLM_TIMEOUT")
    enforce_schema: bool = Field(True, alias="LLM_ENFORCE_SCHEMA")

    @field_validator("api_key")
    def validate_api_key(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("temperature")
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("LLM_TEMPERATURE must be between 0.0 and 1.0")
        return value

    @field_validator("timeout")
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("LLM_TIMEOUT must be positive")
        return value

    @field_validator("max_tokens")
    def validate_max_tokens(cls, value: int) -> int:
        # Replies are a handful of sentences; keep the cap in the hundreds.
        if not 1 <= value <= 1024:
            raise ValueError("LLM_MAX_TOKENS must be between 1 and 1024")
        return value

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


@lru_cache()
def get_llm_config() -> LlmConfig:
    """Return a cached language model configuration."""

    return LlmConfig()
