# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides sample images, uploads, a scripted fake provider and a clean
environment. No network I/O: every backend is mocked.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Any

import pytest

from lexassist.attachments.models import AttachmentInfo, UploadedFile
from lexassist.llm.base_provider import BaseModelProvider
from lexassist.llm.config import PROVIDER_CONFIGS
from lexassist.llm.models import ImageData, ModelAvailability, ModelConfig, ModelMessage, ModelResponse

# Smallest valid PNG: 1x1 transparent pixel
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

_ENV_VARS = (
    "MODEL_PROVIDER", "VERCEL", "NETLIFY", "APP_ENV",
    "GEMINI_API_KEY", "OLLAMA_BASE_URL", "OLLAMA_TEXT_MODEL", "OLLAMA_VISION_MODEL",
    "GEMINI_API_URL", "GEMINI_TEXT_MODEL", "GEMINI_VISION_MODEL",
    "LLM_REQUEST_TIMEOUT_S", "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE", "LOG_ROTATION", "LOG_RETENTION",
)


# === FIXTURES: Environment ===


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Isolate every test from the developer's shell and .env file."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


# === FIXTURES: Sample data ===


def _make_image(file_name: str = "photo.png", mime_type: str = "image/png") -> ImageData:
    return ImageData(
        data=base64.b64encode(PNG_BYTES).decode("ascii"),
        mime_type=mime_type,
        file_name=file_name,
        size=len(PNG_BYTES),
    )


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_image() -> ImageData:
    return _make_image()


@pytest.fixture
def png_upload() -> UploadedFile:
    return UploadedFile(name="lease.png", mime_type="image/png", content=PNG_BYTES)


@pytest.fixture
def pdf_attachment() -> AttachmentInfo:
    return AttachmentInfo(name="contract.pdf", size=2048, type="application/pdf")


@pytest.fixture
def mock_config() -> ModelConfig:
    return PROVIDER_CONFIGS["mock"]


# === FIXTURES: Scripted provider ===


class ScriptedProvider(BaseModelProvider):
    """Provider double that records calls and returns scripted results.

    image_failures: file names whose analysis should fail.
    delay_s: per-call sleep, used to observe concurrency.
    image_delays: per-file-name sleep overriding delay_s.
    """

    def __init__(
        self,
        config: ModelConfig,
        text_result: ModelResponse | None = None,
        image_failures: set[str] | None = None,
        delay_s: float = 0.0,
        image_delays: dict[str, float] | None = None,
    ) -> None:
        super().__init__(config)
        self.text_result = text_result or ModelResponse(
            success=True, content="Scripted answer", model_used=config.text_model,
        )
        self.image_failures = image_failures or set()
        self.delay_s = delay_s
        self.image_delays = image_delays or {}
        self.text_calls: list[list[ModelMessage]] = []
        self.image_calls: list[tuple[str, str]] = []
        self.completed_images: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def check_availability(self) -> ModelAvailability:
        return ModelAvailability(text_model_ready=True, vision_model_ready=False, errors=["no vision"])

    async def generate_text(self, messages: list[ModelMessage]) -> ModelResponse:
        self.text_calls.append(list(messages))
        return self.text_result

    async def analyze_image(self, image: ImageData, prompt: str) -> ModelResponse:
        self.image_calls.append((image.file_name, prompt))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        delay = self.image_delays.get(image.file_name, self.delay_s)
        try:
            if delay:
                await asyncio.sleep(delay)
        finally:
            self.in_flight -= 1
        self.completed_images.append(image.file_name)
        if image.file_name in self.image_failures:
            return ModelResponse(success=False, error="vision backend down")
        return ModelResponse(success=True, content=f"analysis of {image.file_name}")


@pytest.fixture
def make_image():
    """Factory fixture: make_image(file_name, mime_type) -> ImageData."""
    return _make_image


@pytest.fixture
def scripted_provider(mock_config: ModelConfig) -> ScriptedProvider:
    return ScriptedProvider(mock_config)


@pytest.fixture
def make_provider(mock_config: ModelConfig):
    """Factory fixture: make_provider(**kwargs) -> ScriptedProvider."""

    def _make(config: ModelConfig | None = None, **kwargs: Any) -> ScriptedProvider:
        return ScriptedProvider(config or mock_config, **kwargs)

    return _make


@pytest.fixture
def orchestrator_for():
    """Factory fixture: wrap a provider in a fresh ModelOrchestrator."""
    from lexassist.orchestration.orchestrator import ModelOrchestrator

    def _make(provider: BaseModelProvider) -> ModelOrchestrator:
        return ModelOrchestrator(
            config_loader=lambda: provider.config,
            provider_factory=lambda config: provider,
        )

    return _make
