# src/llm/config.py — v2
"""Provider selection: resolve exactly one ModelConfig for the process.

Resolution order:
  1. MODEL_PROVIDER names a known provider
  2. Hosted/production runtime (VERCEL, NETLIFY, APP_ENV=production) -> mock
  3. Local Ollama daemon

Everything here is a pure function of its inputs. Caching the resolved
provider is the orchestrator's job.
"""

from __future__ import annotations

import logging

from lexassist.config.settings import Settings
from lexassist.llm.models import ModelConfig

logger = logging.getLogger(__name__)

OLLAMA_LOCAL = "ollama-local"
GEMINI = "gemini"
MOCK = "mock"

PLACEHOLDER_API_KEY = "your-api-key-here"

PROVIDER_CONFIGS: dict[str, ModelConfig] = {
    OLLAMA_LOCAL: ModelConfig(
        provider=OLLAMA_LOCAL,
        text_model="gemma3:4b",
        vision_model="llava:7b",
        api_url="http://localhost:11434",
        description="Local Ollama instance",
    ),
    GEMINI: ModelConfig(
        provider=GEMINI,
        text_model="gemini-2.0-flash",
        vision_model="gemini-2.0-flash",
        api_url="https://generativelanguage.googleapis.com/v1beta",
        description="Google Gemini API",
    ),
    MOCK: ModelConfig(
        provider=MOCK,
        text_model="Mock Legal AI",
        vision_model="Mock Vision AI",
        description="Mock AI for demo/testing",
    ),
}


def get_model_provider(settings: Settings) -> str:
    """Pick the provider identifier for the given settings."""
    override = settings.model_provider
    if override:
        if override in PROVIDER_CONFIGS:
            return override
        logger.warning(
            "Ignoring unknown MODEL_PROVIDER %r (known: %s)",
            override, ", ".join(sorted(PROVIDER_CONFIGS)),
        )

    if settings.is_hosted:
        return MOCK
    return OLLAMA_LOCAL


def get_model_config(settings: Settings | None = None) -> ModelConfig:
    """Resolve the active ModelConfig.

    Args:
        settings: Application settings. Loaded from the environment if None.

    Returns:
        A fresh ModelConfig with settings-driven model names, endpoint and
        credentials applied.
    """
    settings = settings or Settings()
    provider = get_model_provider(settings)
    base = PROVIDER_CONFIGS[provider]

    if provider == OLLAMA_LOCAL:
        return base.model_copy(update={
            "text_model": settings.ollama_text_model,
            "vision_model": settings.ollama_vision_model,
            "api_url": settings.ollama_base_url,
        })
    if provider == GEMINI:
        return base.model_copy(update={
            "text_model": settings.gemini_text_model,
            "vision_model": settings.gemini_vision_model,
            "api_url": settings.gemini_api_url,
            "api_key": settings.gemini_api_key,
        })
    return base.model_copy()


def has_usable_api_key(api_key: str | None) -> bool:
    return bool(api_key) and api_key.strip() not in ("", PLACEHOLDER_API_KEY)


def is_provider_configured(config: ModelConfig) -> bool:
    """Whether every prerequisite for the config's provider is present.

    Local and mock providers need no credentials. The hosted provider needs
    a real (non-placeholder) API key. No I/O is performed.
    """
    if config.provider in (OLLAMA_LOCAL, MOCK):
        return True
    if config.provider == GEMINI:
        return has_usable_api_key(config.api_key)
    return False
