# src/llm/adapters/gemini_provider.py — v1
"""Google Gemini hosted-API provider implementing BaseModelProvider.

Uses the google-generativeai SDK. Gemini has no system role: system
messages are hoisted into the first user turn. Images travel as
inline_data parts.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Callable
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from lexassist.llm.base_provider import BaseModelProvider
from lexassist.llm.config import has_usable_api_key
from lexassist.llm.models import ImageData, ModelAvailability, ModelConfig, ModelMessage, ModelResponse

logger = logging.getLogger(__name__)

TEXT_GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 8192,
}

VISION_GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.4,
    "top_k": 32,
    "top_p": 0.95,
    "max_output_tokens": 8192,
}

SAFETY_SETTINGS: list[dict[str, str]] = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

# Ollama-style message images carry no mime type
_DEFAULT_IMAGE_MIME = "image/jpeg"


# --- Typed views over generateContent responses ---


class _GeminiPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str | None = None


class _GeminiContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[_GeminiPart] = Field(default_factory=list)


class _GeminiCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: _GeminiContent | None = None


class _GeminiResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    candidates: list[_GeminiCandidate] = Field(default_factory=list)

    def first_text(self) -> str | None:
        """Text at candidates[0].content.parts[0].text, if present."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text or None


def _as_dict(resp: Any) -> dict[str, Any]:
    if isinstance(resp, dict):
        return resp
    to_dict = getattr(resp, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(resp)


def _error_message(error: Exception) -> str:
    """Prefer the API's human-readable message over the exception repr."""
    return getattr(error, "message", None) or str(error)


def _is_api_error(error: Exception) -> bool:
    from google.api_core.exceptions import GoogleAPICallError

    return isinstance(error, GoogleAPICallError)


class GeminiProvider(BaseModelProvider):
    """Google Gemini provider."""

    def __init__(
        self,
        config: ModelConfig,
        api_key: str | None = None,
        timeout: float | None = None,
        model_factory: Callable[[str], Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(config)
        self._api_key = api_key if api_key is not None else config.api_key
        self._timeout = timeout
        self._model_factory = model_factory or self._default_model_factory

    def _default_model_factory(self, model_name: str) -> Any:
        import google.generativeai as genai

        configure_kwargs: dict[str, Any] = {"api_key": self._api_key}
        endpoint = urlsplit(self.config.api_url or "").netloc
        if endpoint:
            configure_kwargs["client_options"] = {"api_endpoint": endpoint}
        genai.configure(**configure_kwargs)
        return genai.GenerativeModel(model_name)

    async def _generate(self, model_name: str, contents: list[dict[str, Any]], **kwargs: Any) -> str:
        model = self._model_factory(model_name)
        if self._timeout:
            kwargs["request_options"] = {"timeout": self._timeout}
        resp = await model.generate_content_async(contents, **kwargs)
        text = _GeminiResponse.model_validate(_as_dict(resp)).first_text()
        if text is None:
            raise ValueError("No content in Gemini response")
        return text

    async def check_availability(self) -> ModelAvailability:
        if not has_usable_api_key(self._api_key):
            return ModelAvailability(
                errors=["Gemini API key not configured. Set GEMINI_API_KEY environment variable."],
            )

        try:
            await self._generate(
                self.config.text_model, [{"role": "user", "parts": [{"text": "test"}]}],
            )
        except Exception as e:
            logger.warning("Gemini availability check failed: %s", e)
            if _is_api_error(e):
                return ModelAvailability(errors=[f"Gemini API error: {_error_message(e)}"])
            return ModelAvailability(errors=[f"Failed to connect to Gemini API: {e}"])

        # One multimodal model family serves both roles
        return ModelAvailability(text_model_ready=True, vision_model_ready=True)

    async def generate_text(self, messages: list[ModelMessage]) -> ModelResponse:
        model = self.config.text_model
        try:
            content = await self._generate(
                model,
                self.format_messages(messages),
                generation_config=dict(TEXT_GENERATION_CONFIG),
                safety_settings=list(SAFETY_SETTINGS),
            )
        except Exception as e:
            logger.warning("Gemini text generation failed (model=%s): %s", model, e)
            return self._failure(f"Gemini text generation failed: {_error_message(e)}", model)

        return self._success(content, model)

    async def analyze_image(self, image: ImageData, prompt: str) -> ModelResponse:
        model = self.config.vision_model
        try:
            content = await self._generate(
                model,
                self.format_image_request(image, prompt),
                generation_config=dict(VISION_GENERATION_CONFIG),
            )
        except Exception as e:
            logger.warning(
                "Gemini image analysis failed (model=%s, file=%s): %s",
                model, image.file_name, e,
            )
            return self._failure(f"Gemini image analysis failed: {_error_message(e)}", model)

        return self._success(content, model)

    def format_image_request(self, image: ImageData, prompt: str) -> list[dict[str, Any]]:
        return [
            {
                "role": "user",
                "parts": [
                    {"text": self.vision_prompt(prompt)},
                    {
                        "inline_data": {
                            "mime_type": image.mime_type or _DEFAULT_IMAGE_MIME,
                            "data": image.decoded_bytes(),
                        }
                    },
                ],
            }
        ]

    @staticmethod
    def format_messages(messages: list[ModelMessage]) -> list[dict[str, Any]]:
        """Convert messages to Gemini contents, hoisting system prompts.

        All system messages are concatenated and prepended to the first
        user turn. Assistant turns are renamed to "model".
        """
        contents: list[dict[str, Any]] = []
        system_texts: list[str] = []

        for m in messages:
            if m.role == "system":
                system_texts.append(m.content)
                continue

            parts: list[dict[str, Any]] = [{"text": m.content}]
            for encoded in m.images or []:
                parts.append(
                    {
                        "inline_data": {
                            "mime_type": _DEFAULT_IMAGE_MIME,
                            "data": base64.b64decode(encoded),
                        }
                    }
                )
            contents.append(
                {"role": "model" if m.role == "assistant" else "user", "parts": parts}
            )

        if system_texts:
            system_text = "\n\n".join(system_texts)
            first_user = next((c for c in contents if c["role"] == "user"), None)
            if first_user is None:
                contents.insert(0, {"role": "user", "parts": [{"text": system_text}]})
            else:
                first_part = first_user["parts"][0]
                first_part["text"] = f"{system_text}\n\n{first_part['text']}"

        return contents
