# src/api/facade.py — v2
"""Public API facade for callers such as an HTTP route or the CLI.

Usage:
    from lexassist.api.facade import generate_legal_response
    answer = await generate_legal_response("Can my landlord ...?", attachments)
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Iterable, Mapping, Sequence

from lexassist.api.models import ServiceStatus
from lexassist.attachments.models import UploadedFile
from lexassist.attachments.preprocessor import process_attachments
from lexassist.llm.config import is_provider_configured
from lexassist.llm.models import ModelMessage
from lexassist.logging.context import request_scope
from lexassist.orchestration.orchestrator import ModelOrchestrator, get_orchestrator

logger = logging.getLogger(__name__)


class LegalResponseError(Exception):
    """Raised when no answer could be produced for the caller."""


def _coerce_history(
    history: Iterable[ModelMessage | Mapping[str, Any]] | None,
) -> list[ModelMessage]:
    """Accept prior turns as ModelMessage or {role, content} dicts."""
    if not history:
        return []
    turns: list[ModelMessage] = []
    for entry in history:
        turn = entry if isinstance(entry, ModelMessage) else ModelMessage.model_validate(entry)
        if turn.role == "system":
            logger.debug("Skipping system turn in conversation history")
            continue
        turns.append(turn)
    return turns


async def generate_legal_response(
    user_input: str,
    attachments: Sequence[UploadedFile] | None = None,
    conversation_history: Iterable[ModelMessage | Mapping[str, Any]] | None = None,
    orchestrator: ModelOrchestrator | None = None,
) -> str:
    """Answer a legal question end-to-end.

    Preprocesses uploads, runs the orchestrator and unwraps its result.

    Args:
        user_input: The user's question or drafting request.
        attachments: Uploaded files (images are analyzed, others are listed).
        conversation_history: Prior user/assistant turns, oldest first.
        orchestrator: Orchestrator to use. Defaults to the process-wide one.

    Returns:
        The model's answer text.

    Raises:
        ValueError: If user_input is empty.
        LegalResponseError: If orchestration reported a failure.
    """
    if not user_input or not user_input.strip():
        raise ValueError("User input is required")

    orchestrator = orchestrator or get_orchestrator()
    started = time.monotonic()

    with request_scope(uuid.uuid4().hex[:12]):
        processed = process_attachments(attachments or [])
        logger.info(
            "Processed %d image(s) and %d other file(s)",
            len(processed.images), len(processed.other_files),
        )

        result = await orchestrator.orchestrate_response(
            user_input,
            processed.images,
            processed.other_files,
            _coerce_history(conversation_history),
        )
        if not result.success:
            raise LegalResponseError(result.error or "Unknown error occurred")

        logger.info(
            "AI response generated in %.2f seconds using %s",
            time.monotonic() - started, result.model_used or "unknown model",
        )
        return result.response or ""


async def get_service_status(orchestrator: ModelOrchestrator | None = None) -> ServiceStatus:
    """Report the active provider configuration and its live availability."""
    orchestrator = orchestrator or get_orchestrator()
    config = orchestrator.get_provider().config
    availability = await orchestrator.check_model_availability()
    return ServiceStatus(
        config=config,
        configured=is_provider_configured(config),
        availability=availability,
    )
