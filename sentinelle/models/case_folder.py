"""
Expediente (carpeta de situación) con documentos e incidentes vinculados.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sentinelle.models.incident import score_or_none
from sentinelle.models.severity import Severity


class Participant(BaseModel):
    name: str
    role: Optional[str] = None
    email: Optional[str] = None
    institution: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class Violation(BaseModel):
    type: str
    severity: Severity = Severity.UNKNOWN
    legal_ref: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, v: Any) -> Severity:
        return Severity.parse(v)


class Recommendation(BaseModel):
    action: str
    priority: Optional[str] = None
    deadline: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class FolderTimelineEntry(BaseModel):
    date: str
    event: str
    type: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class FolderDocument(BaseModel):
    id: Optional[str] = None
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    document_type: Optional[str] = None
    page_count: Optional[int] = None
    created_at: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def display_name(self) -> str:
        return self.original_filename or self.filename or "Document sans nom"


class LinkedIncident(BaseModel):
    id: Optional[str] = None
    numero: int
    titre: Optional[str] = None
    gravite: Severity = Severity.UNKNOWN
    statut: Optional[str] = None
    date_incident: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("gravite", mode="before")
    @classmethod
    def _normalize_severity(cls, v: Any) -> Severity:
        return Severity.parse(v)


class CaseFolder(BaseModel):
    """Expediente tal como lo entrega el almacén de casos."""

    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    situation_type: Optional[str] = None
    situation_status: Optional[str] = None
    priority: Optional[str] = None
    institution_concerned: Optional[str] = None
    summary: Optional[str] = None
    problem_score: Optional[int] = Field(default=None, ge=0, le=100)
    participants: list[Participant] = Field(default_factory=list)
    violations_detected: list[Violation] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    timeline: list[FolderTimelineEntry] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    documents: list[FolderDocument] = Field(default_factory=list)
    incidents: list[LinkedIncident] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator(
        "participants",
        "violations_detected",
        "recommendations",
        "timeline",
        "documents",
        "incidents",
        mode="before",
    )
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return v or []

    @field_validator("problem_score", mode="before")
    @classmethod
    def _lenient_score(cls, v: Any) -> Optional[int]:
        return score_or_none(v)
