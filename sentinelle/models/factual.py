"""
Datos del dossier factual: hechos extraídos de correos, disfunciones, actores.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sentinelle.models.severity import Severity


class RawCitation(BaseModel):
    text: str
    context: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class EmailFact(BaseModel):
    """Hechos extraídos de un correo (salida del pipeline de análisis)."""

    id: str
    email_id: Optional[str] = None
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    subject: Optional[str] = None
    received_at: Optional[str] = None
    key_phrases: list[str] = Field(default_factory=list)
    mentioned_institutions: list[str] = Field(default_factory=list)
    raw_citations: list[RawCitation] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("key_phrases", "mentioned_institutions", "raw_citations", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return v or []

    @property
    def sender(self) -> str:
        return self.sender_name or self.sender_email or "Inconnu"


class Dysfunction(BaseModel):
    id: str
    type: Optional[str] = None
    description: str = ""
    date: Optional[str] = None
    proof: Optional[str] = None
    email_id: Optional[str] = None
    severity: Severity = Severity.UNKNOWN

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, v: Any) -> Severity:
        return Severity.parse(v)


class Actor(BaseModel):
    name: str
    email: Optional[str] = None
    institution: Optional[str] = None
    email_count: int = 0
    dysfunction_count: int = 0
    last_contact: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class FactualStats(BaseModel):
    total_emails: int = 0
    total_facts: int = 0
    total_dysfunctions: int = 0
    avg_response_days: Optional[float] = None
    period_start: Optional[str] = None
    period_end: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class FactualDossierData(BaseModel):
    facts: list[EmailFact] = Field(default_factory=list)
    dysfunctions: list[Dysfunction] = Field(default_factory=list)
    actors: list[Actor] = Field(default_factory=list)
    stats: FactualStats = Field(default_factory=FactualStats)

    model_config = ConfigDict(frozen=True)
