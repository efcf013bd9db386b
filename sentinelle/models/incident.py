"""
Modelos de incidente, prueba y correo.

IncidentRecord y EmailRecord son datos EXTERNOS de solo lectura: todos los
campos salvo el número son opcionales (None = no informado). La sustitución
por "Non renseigné" se hace una única vez, en la entrada de cada compositor,
mediante normalize_incident() -> IncidentSheet.
"""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sentinelle.models.severity import Severity

NOT_PROVIDED = "Non renseigné"
NOT_AVAILABLE = "N/A"


# =========================================================
# PRUEBAS
# =========================================================


class ProofItem(BaseModel):
    """Prueba adjunta a un incidente (email, captura, documento, enlace)."""

    id: str
    type: Literal["email", "screenshot", "document", "link"] = "document"
    label: str = ""
    url: Optional[str] = Field(default=None, description="No forma parte de la huella")
    hash: Optional[str] = Field(default=None, description="Hash aportado por el almacenamiento")

    model_config = ConfigDict(frozen=True)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> str:
        value = str(v or "").strip().lower()
        return value if value in ("email", "screenshot", "document", "link") else "document"

    @property
    def fingerprint(self) -> str:
        """Huella determinista (id|type|label)."""
        from sentinelle.services.proof_fingerprint import fingerprint

        return fingerprint(self)


# =========================================================
# INCIDENTES
# =========================================================


def score_or_none(value: Any) -> Optional[int]:
    """Puntuación 0-100; un valor no numérico o fuera de rango cuenta como no informado."""
    if value is None or isinstance(value, bool):
        return None
    try:
        score = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return None
    return score if 0 <= score <= 100 else None


class IncidentRecord(BaseModel):
    """Incidente tal como lo entrega el almacén de casos."""

    numero: int = Field(..., ge=0)
    id: Optional[str] = None
    titre: Optional[str] = None
    date_incident: Optional[str] = None
    date_creation: Optional[str] = None
    institution: Optional[str] = None
    type: Optional[str] = None
    gravite: Severity = Severity.UNKNOWN
    priorite: Optional[str] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)
    statut: Optional[str] = None
    faits: Optional[str] = None
    dysfonctionnement: Optional[str] = None
    transmis_jp: Optional[bool] = None
    date_transmission_jp: Optional[str] = None
    preuves: list[ProofItem] = Field(default_factory=list)
    analysis_notes: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("gravite", mode="before")
    @classmethod
    def _normalize_severity(cls, v: Any) -> Severity:
        return Severity.parse(v)

    @field_validator("preuves", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return v or []

    @field_validator("score", mode="before")
    @classmethod
    def _lenient_score(cls, v: Any) -> Optional[int]:
        return score_or_none(v)

    @property
    def reference(self) -> str:
        """Número formateado: INC-0042."""
        return format_incident_number(self.numero)


class IncidentSheet(BaseModel):
    """
    Vista de presentación de un incidente: todos los textos ya sustituidos.

    Los compositores trabajan SOLO con esta vista.
    """

    numero: int
    reference: str
    titre: str
    date_incident: Optional[str]
    date_creation: Optional[str]
    institution: str
    type: str
    raw_type: Optional[str]
    gravite: Severity
    priorite: str
    score: Optional[int]
    statut: str
    faits: str
    dysfonctionnement: str
    transmis_jp: bool
    date_transmission_jp: Optional[str]
    preuves: list[ProofItem]
    analysis_notes: Optional[str]

    model_config = ConfigDict(frozen=True)


def format_incident_number(numero: int) -> str:
    return f"INC-{numero:04d}"


def _text_or(value: Optional[str], placeholder: str = NOT_PROVIDED) -> str:
    if value is None or not str(value).strip():
        return placeholder
    return str(value).strip()


def normalize_incident(record: IncidentRecord) -> IncidentSheet:
    """
    Pasada única de normalización ("Non renseigné" / "N/A").

    Args:
        record: Incidente externo

    Returns:
        IncidentSheet listo para maquetar
    """
    return IncidentSheet(
        numero=record.numero,
        reference=record.reference,
        titre=_text_or(record.titre, "Sans titre"),
        date_incident=record.date_incident,
        date_creation=record.date_creation,
        institution=_text_or(record.institution),
        type=_text_or(record.type),
        raw_type=record.type,
        gravite=record.gravite,
        priorite=_text_or(record.priorite, NOT_AVAILABLE),
        score=record.score,
        statut=_text_or(record.statut),
        faits=_text_or(record.faits),
        dysfonctionnement=_text_or(record.dysfonctionnement),
        transmis_jp=bool(record.transmis_jp),
        date_transmission_jp=record.date_transmission_jp,
        preuves=list(record.preuves),
        analysis_notes=record.analysis_notes.strip() if record.analysis_notes else None,
    )


# =========================================================
# CORREOS
# =========================================================


class EmailRecord(BaseModel):
    """Correo ingerido; `analysis` es la salida opaca del análisis IA."""

    id: Optional[str] = None
    sender: Optional[str] = None
    recipient: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    timestamp: Optional[str] = None
    is_sent: bool = False
    analysis: Optional[dict[str, Any]] = None

    model_config = ConfigDict(frozen=True, extra="ignore")
