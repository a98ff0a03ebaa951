# src/config/settings.py — v1
"""Typed configuration loaded from environment / .env via pydantic-settings.

Single source of truth for provider selection, backend endpoints,
credentials and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lexassist.logging.handlers import parse_size


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from the environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # === Provider selection ===
    model_provider: str = ""

    # Hosted runtime indicators
    vercel: str = ""
    netlify: str = ""
    app_env: str = "development"

    # === Local inference (Ollama) ===
    ollama_base_url: str = "http://localhost:11434"
    ollama_text_model: str = "gemma3:4b"
    ollama_vision_model: str = "llava:7b"

    # === Hosted API (Gemini) ===
    gemini_api_key: str = ""
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_text_model: str = "gemini-2.0-flash"
    gemini_vision_model: str = "gemini-2.0-flash"

    # Network timeout handed to backend clients (no internal retries)
    llm_request_timeout_s: float = 120.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("model_provider", "app_env")
    @classmethod
    def normalize_lower(cls, v: str) -> str:  # noqa: N805
        return v.strip().lower()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        errors: list[str] = []

        if self.llm_request_timeout_s <= 0:
            errors.append("LLM_REQUEST_TIMEOUT_S must be > 0")

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        try:
            parse_size(self.log_rotation)
        except ValueError as exc:
            errors.append(f"LOG_ROTATION invalid: {exc}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def is_hosted(self) -> bool:
        """True when running on a recognized hosted/production runtime."""
        return bool(self.vercel or self.netlify or self.app_env == "production")


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
