# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests against a live Ollama daemon.

Set LEXASSIST_OLLAMA_HOST (e.g. http://localhost:11434) to run them; the
text and vision models configured in PROVIDER_CONFIGS must already be
pulled. Without the variable every test here is skipped.
"""

from __future__ import annotations

import os

import pytest

from lexassist.llm.config import PROVIDER_CONFIGS

OLLAMA_HOST_ENV = "LEXASSIST_OLLAMA_HOST"


def pytest_collection_modifyitems(config, items):
    if os.environ.get(OLLAMA_HOST_ENV):
        return
    skip = pytest.mark.skip(reason=f"{OLLAMA_HOST_ENV} not set")
    for item in items:
        if "ollama" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def ollama_host() -> str:
    return os.environ[OLLAMA_HOST_ENV]


@pytest.fixture
def ollama_provider(ollama_host):
    from lexassist.llm.adapters.ollama_provider import OllamaProvider

    return OllamaProvider(PROVIDER_CONFIGS["ollama-local"], host=ollama_host, timeout=300.0)
