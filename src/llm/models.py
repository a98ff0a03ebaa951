# src/llm/models.py — v1
"""Provider-level types: ModelMessage, ImageData, ModelConfig, ModelAvailability, ModelResponse."""

from __future__ import annotations

import base64
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ProviderId = Literal["ollama-local", "gemini", "mock"]


class ModelMessage(BaseModel):
    """Single message in a conversation sent to a provider."""

    role: Literal["system", "user", "assistant"]
    content: str
    images: list[str] | None = None  # base64-encoded image payloads


class ImageData(BaseModel):
    """Uploaded image, base64-encoded and ready for a vision model."""

    data: str
    mime_type: str
    file_name: str
    size: int = 0

    def decoded_bytes(self) -> bytes:
        """Return the original binary image content."""
        return base64.b64decode(self.data)


class ModelConfig(BaseModel):
    """Resolved backend configuration, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    provider: str
    text_model: str
    vision_model: str
    api_url: str | None = None
    description: str
    api_key: str = Field(default="", repr=False, exclude=True)


class ModelAvailability(BaseModel):
    """Result of a provider availability check."""

    text_model_ready: bool = False
    vision_model_ready: bool = False
    errors: list[str] = Field(default_factory=list)


class ModelResponse(BaseModel):
    """Normalized result of a single provider call."""

    model_config = ConfigDict(protected_namespaces=())

    success: bool
    content: str | None = None
    error: str | None = None
    model_used: str | None = None
