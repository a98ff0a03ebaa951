# src/llm/adapters/ollama_provider.py — v1
"""Local Ollama inference provider implementing BaseModelProvider.

Uses the ollama Python SDK against a locally hosted daemon. Text and
vision requests go to two different local models (e.g. gemma3:4b and
llava:7b).
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lexassist.llm.base_provider import BaseModelProvider
from lexassist.llm.models import ImageData, ModelAvailability, ModelConfig, ModelMessage, ModelResponse

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:11434"


# --- Typed views over the daemon's JSON responses ---


class _OllamaModelEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Newer daemons report "model", older ones "name"
    model: str | None = None
    name: str | None = None

    @property
    def identifier(self) -> str:
        return (self.model or self.name or "").lower()


class _OllamaListing(BaseModel):
    model_config = ConfigDict(extra="ignore")

    models: list[_OllamaModelEntry] = Field(default_factory=list)


class _OllamaMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    content: str | None = None


class _OllamaChatResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: _OllamaMessage | None = None

    def text(self) -> str:
        if self.message is None or not self.message.content:
            raise ValueError("No content in Ollama response")
        return self.message.content


def _as_dict(resp: Any) -> dict[str, Any]:
    """Normalize SDK response objects (pydantic models or plain dicts)."""
    if isinstance(resp, dict):
        return resp
    dump = getattr(resp, "model_dump", None)
    if callable(dump):
        return dump()
    return dict(resp)


def required_fragments(model_name: str) -> list[str]:
    """Split 'llava:7b' into the fragments an installed model must contain."""
    return [part for part in model_name.lower().split(":") if part]


class OllamaProvider(BaseModelProvider):
    """Ollama local inference provider."""

    def __init__(
        self,
        config: ModelConfig,
        host: str | None = None,
        timeout: float | None = None,
        client: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(config)
        self._host = host or config.api_url or DEFAULT_HOST
        self._timeout = timeout
        self._client = client
        # One pooled AsyncClient per event loop; httpx pools are loop-bound
        self._loop_clients: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Any] = (
            weakref.WeakKeyDictionary()
        )

    def _get_client(self) -> Any:
        """Injected client, else the AsyncClient cached for the running loop."""
        if self._client is not None:
            return self._client
        loop = asyncio.get_running_loop()
        client = self._loop_clients.get(loop)
        if client is None:
            import ollama

            client = ollama.AsyncClient(host=self._host, timeout=self._timeout)
            self._loop_clients[loop] = client
        return client

    async def check_availability(self) -> ModelAvailability:
        errors: list[str] = []
        text_ready = False
        vision_ready = False

        try:
            listing = _OllamaListing.model_validate(_as_dict(await self._get_client().list()))
            names = [m.identifier for m in listing.models]

            vision_ready = _has_model(names, self.config.vision_model)
            text_ready = _has_model(names, self.config.text_model)

            if not vision_ready:
                errors.append(
                    f"{self.config.vision_model} model not found. "
                    f"Run: ollama pull {self.config.vision_model}"
                )
            if not text_ready:
                errors.append(
                    f"{self.config.text_model} model not found. "
                    f"Run: ollama pull {self.config.text_model}"
                )
        except Exception as e:
            logger.warning("Ollama availability check failed (%s): %s", self._host, e)
            return ModelAvailability(
                errors=[f"Failed to connect to local Ollama instance: {e}"],
            )

        return ModelAvailability(
            text_model_ready=text_ready,
            vision_model_ready=vision_ready,
            errors=errors,
        )

    async def generate_text(self, messages: list[ModelMessage]) -> ModelResponse:
        model = self.config.text_model
        try:
            resp = await self._get_client().chat(
                model=model, messages=self.format_messages(messages),
            )
            content = _OllamaChatResponse.model_validate(_as_dict(resp)).text()
        except Exception as e:
            logger.warning("Ollama text generation failed (model=%s): %s", model, e)
            return self._failure(f"Ollama text generation failed: {e}", model)

        return self._success(content, model)

    async def analyze_image(self, image: ImageData, prompt: str) -> ModelResponse:
        model = self.config.vision_model
        try:
            resp = await self._get_client().chat(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": self.vision_prompt(prompt),
                        "images": [self.format_image_for_provider(image)],
                    }
                ],
            )
            content = _OllamaChatResponse.model_validate(_as_dict(resp)).text()
        except Exception as e:
            logger.warning(
                "Ollama image analysis failed (model=%s, file=%s): %s",
                model, image.file_name, e,
            )
            return self._failure(f"Ollama image analysis failed: {e}", model)

        return self._success(content, model)

    @staticmethod
    def format_messages(messages: list[ModelMessage]) -> list[dict[str, Any]]:
        """Convert messages to Ollama chat format (native system role)."""
        formatted: list[dict[str, Any]] = []
        for m in messages:
            entry: dict[str, Any] = {"role": m.role, "content": m.content}
            if m.images:
                entry["images"] = list(m.images)
            formatted.append(entry)
        return formatted


def _has_model(installed: list[str], model_name: str) -> bool:
    fragments = required_fragments(model_name)
    return any(all(f in name for f in fragments) for name in installed)
