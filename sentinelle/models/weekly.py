"""
Datos del rapport hebdomadaire: incidentes de la semana, análisis de hilos
de correo y hechos extraídos de los correos del periodo.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sentinelle.models.factual import EmailFact
from sentinelle.models.incident import IncidentRecord


class ThreadAnalysis(BaseModel):
    """Análisis de un hilo de correos (resumen cronológico y citas)."""

    id: str
    thread_id: Optional[str] = None
    chronological_summary: Optional[str] = None
    severity: Optional[str] = None
    citations: list[str] = Field(default_factory=list)
    emails_count: int = 0

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("citations", mode="before")
    @classmethod
    def _citation_texts(cls, v: Any) -> list[str]:
        # El pipeline entrega cadenas u objetos {"text": ...}
        texts = []
        for item in v or []:
            text = item.get("text") if isinstance(item, dict) else item
            if isinstance(text, str) and text.strip():
                texts.append(text)
        return texts

    @field_validator("emails_count", mode="before")
    @classmethod
    def _none_is_zero(cls, v: Any) -> Any:
        return v or 0


class WeeklyReportData(BaseModel):
    period_start: str
    period_end: str
    incidents: list[IncidentRecord] = Field(default_factory=list)
    thread_analyses: list[ThreadAnalysis] = Field(default_factory=list)
    email_facts: list[EmailFact] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator("incidents", "thread_analyses", "email_facts", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return v or []
