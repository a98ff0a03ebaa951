# tests/unit/api/test_facade.py — v2
"""Tests for api/facade.py — generate_legal_response and get_service_status."""

from __future__ import annotations

import pytest

from lexassist.api.facade import LegalResponseError, generate_legal_response, get_service_status
from lexassist.attachments.models import UploadedFile
from lexassist.llm.config import PROVIDER_CONFIGS
from lexassist.llm.models import ModelMessage, ModelResponse
from lexassist.logging.context import get_context
from lexassist.orchestration import orchestrator as orchestrator_module


class TestGenerateLegalResponse:
    @pytest.mark.asyncio
    async def test_text_only(self, scripted_provider, orchestrator_for):
        answer = await generate_legal_response(
            "Is a verbal contract binding?", orchestrator=orchestrator_for(scripted_provider),
        )
        assert answer == "Scripted answer"
        assert scripted_provider.image_calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   "])
    async def test_empty_input_rejected(self, text, scripted_provider, orchestrator_for):
        with pytest.raises(ValueError, match="User input is required"):
            await generate_legal_response(text, orchestrator=orchestrator_for(scripted_provider))
        assert scripted_provider.text_calls == []

    @pytest.mark.asyncio
    async def test_mixed_uploads(self, scripted_provider, orchestrator_for, png_upload):
        pdf = UploadedFile(name="contract.pdf", mime_type="application/pdf", content=b"%PDF-1.4")
        tiff = UploadedFile(name="scan.tiff", mime_type="image/tiff", content=b"II*\x00")
        await generate_legal_response(
            "what does this say?",
            attachments=[png_upload, pdf, tiff],
            orchestrator=orchestrator_for(scripted_provider),
        )
        assert [name for name, _ in scripted_provider.image_calls] == ["lease.png"]
        user = scripted_provider.text_calls[0][-1].content
        assert "Image 1 (lease.png): analysis of lease.png" in user
        assert user.endswith("uploaded 1 file(s): contract.pdf")

    @pytest.mark.asyncio
    async def test_history_dicts_accepted(self, scripted_provider, orchestrator_for):
        history = [
            {"role": "user", "content": "earlier"},
            ModelMessage(role="assistant", content="reply"),
            {"role": "system", "content": "ignored"},
        ]
        await generate_legal_response(
            "and now?", conversation_history=history, orchestrator=orchestrator_for(scripted_provider),
        )
        sent = scripted_provider.text_calls[0]
        assert [m.role for m in sent] == ["system", "user", "assistant", "user"]
        assert all(m.content != "ignored" for m in sent)

    @pytest.mark.asyncio
    async def test_failure_raises(self, make_provider, orchestrator_for):
        provider = make_provider(text_result=ModelResponse(success=False, error="quota exceeded"))
        with pytest.raises(LegalResponseError, match="quota exceeded"):
            await generate_legal_response("q", orchestrator=orchestrator_for(provider))

    @pytest.mark.asyncio
    async def test_context_cleared(self, scripted_provider, orchestrator_for):
        await generate_legal_response("q", orchestrator=orchestrator_for(scripted_provider))
        assert get_context().request_id is None

    @pytest.mark.asyncio
    async def test_default_orchestrator(self, scripted_provider, orchestrator_for, monkeypatch):
        monkeypatch.setattr(orchestrator_module, "_default_orchestrator", orchestrator_for(scripted_provider))
        assert await generate_legal_response("q") == "Scripted answer"


class TestGetServiceStatus:
    @pytest.mark.asyncio
    async def test_configured(self, scripted_provider, orchestrator_for):
        status = await get_service_status(orchestrator_for(scripted_provider))
        assert status.configured is True
        assert status.config.provider == "mock"
        assert status.availability.text_ready is True
        assert status.availability.errors == ["no vision"]

    @pytest.mark.asyncio
    async def test_unconfigured_gemini(self, make_provider, orchestrator_for):
        status = await get_service_status(orchestrator_for(make_provider(config=PROVIDER_CONFIGS["gemini"])))
        assert status.configured is False

    @pytest.mark.asyncio
    async def test_api_key_never_serialized(self, make_provider, orchestrator_for):
        config = PROVIDER_CONFIGS["gemini"].model_copy(update={"api_key": "super-secret"})
        status = await get_service_status(orchestrator_for(make_provider(config=config)))
        assert status.configured is True
        assert "super-secret" not in status.model_dump_json()
