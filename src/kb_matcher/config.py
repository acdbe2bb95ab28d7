"""Centralized configuration for kb-matcher using Pydantic Settings."""

from functools import lru_cache
import math

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value has a default, so the matcher runs without any environment
    at all. Values are validated when the settings object is created.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Matching
    match_threshold: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Minimum combined score for find_best_match to accept a page",
    )
    chat_match_threshold: float = Field(
        default=0.12,
        ge=0.0,
        le=1.0,
        description="Minimum combined score used by the chat responder (lower for wider coverage)",
    )
    tfidf_weight: float = Field(default=0.6, ge=0.0, le=1.0, description="Weight of the TF-IDF cosine score")
    fuzzy_weight: float = Field(default=0.4, ge=0.0, le=1.0, description="Weight of the fuzzy keyword score")
    fuzzy_similarity_threshold: float = Field(
        default=0.75,
        ge=0.0,
        lt=1.0,
        description="Edit similarity two tokens must exceed to count as the same keyword",
    )
    snippet_max_length: int = Field(default=300, ge=10, description="Maximum reply snippet length before '...'")

    # Chat rate limiting
    rate_limit_window_ms: int = Field(default=60_000, ge=1, description="Sliding window for chat rate limiting")
    rate_limit_max_messages: int = Field(default=5, ge=1, description="Messages allowed per user per window")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Observability
    service_name: str = Field(default="kb-matcher", description="Service name reported to OpenTelemetry")

    @model_validator(mode="after")
    def _check_weights(self) -> "Settings":
        if not math.isclose(self.tfidf_weight + self.fuzzy_weight, 1.0, abs_tol=1e-9):
            raise ValueError(
                "TFIDF_WEIGHT and FUZZY_WEIGHT must sum to 1.0 "
                f"(got {self.tfidf_weight} + {self.fuzzy_weight})"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
