# src/llm/provider_factory.py — v1
"""Factory: instantiate a model provider from a resolved ModelConfig.

Called once per process by the orchestrator.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lexassist.config.settings import Settings
    from lexassist.llm.base_provider import BaseModelProvider
    from lexassist.llm.models import ModelConfig

logger = logging.getLogger(__name__)

# Registry of provider id -> provider class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "ollama-local": "lexassist.llm.adapters.ollama_provider.OllamaProvider",
    "gemini": "lexassist.llm.adapters.gemini_provider.GeminiProvider",
    "mock": "lexassist.llm.adapters.mock_provider.MockProvider",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_provider(
    config: ModelConfig,
    settings: Settings | None = None,
    **kwargs: Any,
) -> BaseModelProvider:
    """Instantiate the provider class registered for config.provider.

    Args:
        config: Resolved model configuration.
        settings: Application settings (network timeout). Optional.
        **kwargs: Additional provider-specific arguments.

    Raises:
        UnsupportedProviderError: If the provider is not registered.
    """
    if config.provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported model provider: {config.provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    provider_cls = _import_class(_PROVIDER_REGISTRY[config.provider])

    init_kwargs = dict(kwargs)
    if settings is not None:
        init_kwargs.setdefault("timeout", settings.llm_request_timeout_s)

    logger.debug(
        "Creating model provider: provider=%s, text=%s, vision=%s",
        config.provider, config.text_model, config.vision_model,
    )
    return provider_cls(config, **init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider class.

    Args:
        name: Provider identifier (matched against ModelConfig.provider).
        class_path: Fully qualified path of a BaseModelProvider subclass.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered model provider: %s -> %s", name, class_path)


def registered_providers() -> list[str]:
    return sorted(_PROVIDER_REGISTRY)


def _import_class(class_path: str) -> type:
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
