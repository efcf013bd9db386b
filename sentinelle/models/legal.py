"""
Modelos del subsistema jurídico: referencias, explicaciones, búsquedas y citas.
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LegalReference(BaseModel):
    """Par (código, artículo). Ej: CC art. 406."""

    code: str
    article: str

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple[str, str]:
        return (self.code, self.article)

    def __str__(self) -> str:
        return f"{self.code} art. {self.article}"


class LegalExplanation(BaseModel):
    """
    Explicación de una base legal lista para renderizar.

    verified=False cuando solo se disponía de un texto por defecto:
    se pinta con estilo atenuado.
    """

    code: str
    article: str
    title: Optional[str] = None
    text: str
    context_explanation: Optional[str] = None
    verified: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def reference(self) -> LegalReference:
        return LegalReference(code=self.code, article=self.article)


class LegalSearchResult(BaseModel):
    """Resultado del servicio externo de búsqueda jurídica (jurisprudencia/legislación)."""

    title: str
    reference_number: Optional[str] = None
    summary: Optional[str] = None
    source_url: Optional[str] = None
    source_name: Optional[str] = None
    source_type: Literal["jurisprudence", "legislation"] = "legislation"
    decision_date: Optional[str] = None
    relevance_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True, extra="ignore")


class ProbativeCitation(BaseModel):
    """Frase de la correspondencia con valor probatorio."""

    text: str
    source: str
    email_id: Optional[str] = None
    score: float = 0.0
    matched_keywords: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
