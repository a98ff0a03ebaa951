# src/api/models.py — v2
"""Caller-facing models: OrchestratedResponse, AvailabilityReport, ServiceStatus."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from lexassist.llm.models import ModelConfig


class OrchestratedResponse(BaseModel):
    """Return value of orchestrate_response(): never raised, always returned."""

    model_config = ConfigDict(protected_namespaces=())

    success: bool
    response: str | None = None
    error: str | None = None
    model_used: str | None = None


class AvailabilityReport(BaseModel):
    """Provider readiness in caller-facing terms."""

    text_ready: bool = False
    vision_ready: bool = False
    errors: list[str] = Field(default_factory=list)


class ServiceStatus(BaseModel):
    """Resolved configuration plus live availability, for status endpoints."""

    config: ModelConfig
    configured: bool
    availability: AvailabilityReport
