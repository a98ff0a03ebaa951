# src/orchestration/orchestrator.py — v1
"""Model orchestrator: single entry point for answering a legal question.

Owns the process-wide provider instance and sequences the two stages:
  1. Vision: every image is analyzed concurrently by the provider
  2. Text: the question, image analyses, attachment notes and history are
     merged into one prompt for the text model

orchestrate_response() is the failure boundary: every error, whatever
the stage, comes back as OrchestratedResponse(success=False).
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Sequence

from lexassist.api.models import AvailabilityReport, OrchestratedResponse
from lexassist.attachments.models import AttachmentInfo
from lexassist.attachments.preprocessor import filter_supported_images
from lexassist.config.settings import Settings
from lexassist.llm.base_provider import BaseModelProvider
from lexassist.llm.config import get_model_config, is_provider_configured
from lexassist.llm.models import ImageData, ModelConfig, ModelMessage
from lexassist.llm.provider_factory import create_provider
from lexassist.logging.context import reset_provider, set_provider, set_step
from lexassist.orchestration.prompts import build_messages, format_image_analysis

logger = logging.getLogger(__name__)


class OrchestrationError(Exception):
    """Base class for failures inside an orchestrated request."""


class ImageAnalysisError(OrchestrationError):
    """A vision call failed; the whole batch fails with it."""


class TextGenerationError(OrchestrationError):
    """The text model returned no usable answer."""


class ProviderNotConfiguredError(OrchestrationError):
    """Credentials or prerequisites for the selected provider are missing."""


class ModelOrchestrator:
    """Sequences vision analysis and text synthesis over one cached provider.

    The provider is built on first use and reused for the lifetime of the
    orchestrator. Construction runs under a lock so concurrent first
    requests still produce a single instance.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        config_loader: Callable[[], ModelConfig] | None = None,
        provider_factory: Callable[[ModelConfig], BaseModelProvider] | None = None,
    ) -> None:
        self._settings = settings
        self._config_loader = config_loader or self._load_config
        self._provider_factory = provider_factory or self._build_provider
        self._provider: BaseModelProvider | None = None
        self._lock = threading.Lock()

    def _get_settings(self) -> Settings:
        if self._settings is None:
            self._settings = Settings()
        return self._settings

    def _load_config(self) -> ModelConfig:
        return get_model_config(self._get_settings())

    def _build_provider(self, config: ModelConfig) -> BaseModelProvider:
        return create_provider(config, settings=self._get_settings())

    @property
    def is_initialized(self) -> bool:
        return self._provider is not None

    def get_provider(self) -> BaseModelProvider:
        """Return the cached provider, constructing it exactly once."""
        provider = self._provider
        if provider is not None:
            return provider

        with self._lock:
            if self._provider is None:
                logger.info("Orchestrator: creating provider for the first time")
                config = self._config_loader()
                logger.info(
                    "Orchestrator: config selected",
                    extra={"data": config.model_dump()},
                )
                self._provider = self._provider_factory(config)
                logger.info("Orchestrator: provider created: %s", self._provider.name)
            return self._provider

    async def analyze_image(self, image: ImageData, user_prompt: str) -> str:
        """Run one vision call, raising ImageAnalysisError on failure."""
        provider = self.get_provider()
        result = await provider.analyze_image(image, user_prompt)
        if not result.success:
            raise ImageAnalysisError(
                f"Failed to analyze image {image.file_name}: "
                f"{result.error or 'Image analysis failed'}"
            )
        return result.content or ""

    async def analyze_images(self, images: Sequence[ImageData], user_prompt: str) -> str:
        """Analyze all images concurrently; any failure fails the batch."""
        logger.info("Processing %d image(s) with vision model", len(images))
        tasks = [asyncio.ensure_future(self.analyze_image(image, user_prompt)) for image in images]
        try:
            analyses = await asyncio.gather(*tasks)
        except BaseException:
            # First failure wins; stop the rest of the batch before re-raising
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return format_image_analysis(images, analyses)

    async def generate_response(
        self,
        user_input: str,
        image_analysis: str = "",
        attachments: Sequence[AttachmentInfo] = (),
        conversation_history: Sequence[ModelMessage] = (),
    ) -> str:
        """Build the prompt and run the text model, raising TextGenerationError on failure."""
        messages = build_messages(
            user_input,
            image_analysis=image_analysis,
            attachments=attachments,
            conversation_history=conversation_history,
        )
        provider = self.get_provider()
        result = await provider.generate_text(messages)
        if not result.success:
            raise TextGenerationError(
                f"Failed to generate response: {result.error or 'Text generation failed'}"
            )
        return result.content or ""

    async def orchestrate_response(
        self,
        user_input: str,
        images: Sequence[ImageData] = (),
        other_attachments: Sequence[AttachmentInfo] = (),
        conversation_history: Sequence[ModelMessage] | None = None,
    ) -> OrchestratedResponse:
        """Answer a question, optionally grounded on images and attachments.

        Args:
            user_input: The user's question or drafting request.
            images: Encoded images; unsupported formats are dropped.
            other_attachments: Non-image uploads (names are mentioned to the model).
            conversation_history: Prior user/assistant turns, oldest first.

        Returns:
            OrchestratedResponse. Never raises.
        """
        provider_token = None
        try:
            provider = self.get_provider()
            provider_token = set_provider(provider.config.provider)
            if not is_provider_configured(provider.config):
                raise ProviderNotConfiguredError(
                    f"AI service unavailable: provider {provider.config.provider!r} "
                    "is not configured"
                )
            logger.info("Using provider: %s", provider.name)

            usable_images = filter_supported_images(images)

            image_analysis = ""
            if usable_images:
                set_step("vision")
                image_analysis = await self.analyze_images(usable_images, user_input)

            set_step("text")
            logger.info("Generating response with text model")
            answer = await self.generate_response(
                user_input,
                image_analysis=image_analysis,
                attachments=other_attachments,
                conversation_history=conversation_history or (),
            )

            modality = "Vision + Text" if usable_images else "Text"
            return OrchestratedResponse(
                success=True,
                response=answer,
                model_used=f"{provider.name} ({modality})",
            )
        except Exception as e:
            logger.error("Error in model orchestration: %s", e)
            return OrchestratedResponse(success=False, error=str(e) or type(e).__name__)
        finally:
            set_step(None)
            if provider_token is not None:
                reset_provider(provider_token)

    async def check_model_availability(self) -> AvailabilityReport:
        """Ask the provider which models are ready; never raises."""
        try:
            availability = await self.get_provider().check_availability()
        except Exception as e:
            logger.error("Model availability check failed: %s", e)
            return AvailabilityReport(errors=[f"Failed to check model availability: {e}"])

        return AvailabilityReport(
            text_ready=availability.text_model_ready,
            vision_ready=availability.vision_model_ready,
            errors=list(availability.errors),
        )


# =============================================================================
# Process-wide orchestrator
# =============================================================================

_default_orchestrator = ModelOrchestrator()


def get_orchestrator() -> ModelOrchestrator:
    return _default_orchestrator


def get_provider() -> BaseModelProvider:
    return _default_orchestrator.get_provider()


async def analyze_image_with_provider(image: ImageData, user_prompt: str) -> str:
    return await _default_orchestrator.analyze_image(image, user_prompt)


async def generate_response_with_provider(
    user_input: str,
    image_analysis: str = "",
    attachments: Sequence[AttachmentInfo] = (),
    conversation_history: Sequence[ModelMessage] = (),
) -> str:
    return await _default_orchestrator.generate_response(
        user_input, image_analysis, attachments, conversation_history,
    )


async def orchestrate_response(
    user_input: str,
    images: Sequence[ImageData] = (),
    other_attachments: Sequence[AttachmentInfo] = (),
    conversation_history: Sequence[ModelMessage] | None = None,
) -> OrchestratedResponse:
    return await _default_orchestrator.orchestrate_response(
        user_input, images, other_attachments, conversation_history,
    )


async def check_model_availability() -> AvailabilityReport:
    return await _default_orchestrator.check_model_availability()
