"""
Opciones de exportación y artefacto generado.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExportOptions(BaseModel):
    """
    Secciones opcionales, activables de forma independiente.

    Ausente -> False, salvo include_proofs e include_legal_explanations.
    """

    include_proofs: bool = True
    include_legal_explanations: bool = True
    include_emails: bool = False
    include_email_citations: bool = False
    include_legal_search: bool = False
    include_deep_analysis: bool = False
    include_document_list: bool = False
    include_timeline: bool = False
    include_participants: bool = False
    include_incidents: bool = False

    model_config = ConfigDict(frozen=True, extra="ignore")


class GeneratedDocument(BaseModel):
    """Documento PDF compuesto en memoria (el motor nunca persiste)."""

    content: bytes
    filename: str
    page_count: int
    included_sections: list[str] = Field(default_factory=list)
    media_type: str = "application/pdf"

    model_config = ConfigDict(frozen=True)

    @property
    def size_bytes(self) -> int:
        return len(self.content)
