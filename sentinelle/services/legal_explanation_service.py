"""
Servicios de explicación jurídica (enriquecimiento de las bases legales).

Dos backends, elegidos por configuración (LEGAL_EXPLAINER_BACKEND):
- llm:  texto del artículo desde el catálogo estático + aplicación al caso
        redactada por el LLM (vía execute_llm, nunca el cliente directo).
- http: endpoint explain-legal-context externo (una sola petición por lote).
- none: sin enriquecimiento; el resolvedor usa solo el catálogo.

Los backends LANZAN LegalServiceException ante cualquier fallo; el
resolvedor (sentinelle.legal.explainer) la captura y degrada.
"""
from __future__ import annotations

import json
from typing import Optional, Protocol, Sequence

import requests
from pydantic import BaseModel, ConfigDict, ValidationError
from requests.exceptions import ConnectionError, Timeout

from sentinelle.core.config import Settings, get_settings
from sentinelle.core.exceptions import LegalServiceException
from sentinelle.core.logger import log_info
from sentinelle.legal.explainer import catalog_entry
from sentinelle.models.legal import LegalExplanation, LegalReference
from sentinelle.services.llm_executor import execute_llm

ARTICLE_NOT_FOUND = "Article non trouvé dans la base de référence"


class LegalExplanationService(Protocol):
    """Contrato de enriquecimiento: UNA llamada por lista de referencias."""

    def explain(
        self,
        references: Sequence[LegalReference],
        facts_summary: str,
        dysfunction: Optional[str],
        incident_type: Optional[str],
    ) -> list[LegalExplanation]:
        ...


# =========================================================
# BACKEND LLM
# =========================================================

SYSTEM_PROMPT = """Tu es un juriste suisse spécialisé en droit de la protection de l'adulte.
Ta tâche est d'expliquer comment chaque article de loi s'applique au cas concret présenté.

RÈGLES STRICTES:
1. Explique UNIQUEMENT comment l'article s'applique aux faits donnés
2. Sois factuel et précis - pas de suppositions
3. Maximum 3-4 phrases par explication
4. Si l'article ne s'applique pas clairement, indique-le
5. Ne cite pas le texte de l'article

FORMAT DE RÉPONSE (JSON strict):
{"explanations": [{"code": "CC", "article": "406", "explanation": "..."}]}"""


def _case_context(facts_summary: str, dysfunction: Optional[str], incident_type: Optional[str]) -> str:
    parts = [f"FAITS DU CAS:\n{facts_summary}"]
    if dysfunction:
        parts.append(f"DYSFONCTIONNEMENT IDENTIFIÉ:\n{dysfunction}")
    if incident_type:
        parts.append(f"TYPE D'INCIDENT: {incident_type}")
    return "\n\n".join(parts)


class _ExplanationItem(BaseModel):
    code: str
    article: str
    explanation: Optional[str] = None
    title: Optional[str] = None
    text: Optional[str] = None
    contextExplanation: Optional[str] = None
    verified: Optional[bool] = None

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class _ExplanationPayload(BaseModel):
    explanations: list[_ExplanationItem] = []

    model_config = ConfigDict(extra="ignore")


def _parse_payload(raw: str | dict) -> _ExplanationPayload:
    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        return _ExplanationPayload.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise LegalServiceException(
            "Respuesta del servicio de explicaciones no interpretable", original_error=e
        ) from e


class LLMLegalExplanationService:
    """
    Explicaciones redactadas por el LLM sobre el texto del catálogo.

    Artículos ausentes del catálogo: texto por defecto y verified=False.
    """

    task_name = "legal_explanations"

    def explain(
        self,
        references: Sequence[LegalReference],
        facts_summary: str,
        dysfunction: Optional[str],
        incident_type: Optional[str],
    ) -> list[LegalExplanation]:
        if not references:
            return []

        known = [(ref, catalog_entry(ref)) for ref in references]
        legal_context = "\n\n".join(
            f"{ref.code} art. {ref.article} ({entry['title']}): {entry['summary']}"
            for ref, entry in known
            if entry is not None
        )

        result = execute_llm(
            task_name=self.task_name,
            prompt_system=SYSTEM_PROMPT,
            prompt_user=(
                f"ARTICLES:\n{legal_context or 'Aucun article de référence.'}\n\n"
                f"{_case_context(facts_summary, dysfunction, incident_type)}"
            ),
            json_output=True,
        )
        if not result.success or not result.output_text:
            raise LegalServiceException(
                "LLM no disponible para explicaciones jurídicas",
                details={"error_type": result.error_type, "degraded": result.degraded},
            )

        payload = _parse_payload(result.output_text)
        contexts = {
            (item.code.upper(), item.article.lower()): item.explanation
            for item in payload.explanations
        }

        explanations = []
        for ref, entry in known:
            context = contexts.get((ref.code.upper(), ref.article.lower()))
            if entry is None:
                explanations.append(
                    LegalExplanation(
                        code=ref.code,
                        article=ref.article,
                        text=ARTICLE_NOT_FOUND,
                        context_explanation=context,
                        verified=False,
                    )
                )
            else:
                explanations.append(
                    LegalExplanation(
                        code=ref.code,
                        article=ref.article,
                        title=entry["title"],
                        text=entry["summary"],
                        context_explanation=context,
                        verified=True,
                    )
                )

        log_info(
            "Explicaciones jurídicas generadas",
            action="legal_explain",
            backend="llm",
            references=len(references),
            model=result.model_used,
        )
        return explanations


# =========================================================
# BACKEND HTTP
# =========================================================


class HttpLegalExplanationService:
    """Cliente del endpoint explain-legal-context."""

    def __init__(self, url: str, timeout_seconds: int = 20, session: Optional[requests.Session] = None):
        """
        Args:
            url: Endpoint completo del servicio
            timeout_seconds: Timeout explícito por petición
            session: Sesión requests (inyectable en tests)
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def explain(
        self,
        references: Sequence[LegalReference],
        facts_summary: str,
        dysfunction: Optional[str],
        incident_type: Optional[str],
    ) -> list[LegalExplanation]:
        if not references:
            return []

        body = {
            "legalReferences": [{"code": r.code, "article": r.article} for r in references],
            "factsSummary": facts_summary,
            "dysfunction": dysfunction,
            "incidentType": incident_type,
        }
        try:
            response = self.session.post(self.url, json=body, timeout=self.timeout_seconds)
            response.raise_for_status()
        except Timeout as e:
            raise LegalServiceException(
                "Timeout del servicio de explicaciones", details={"url": self.url}, original_error=e
            ) from e
        except ConnectionError as e:
            raise LegalServiceException(
                "Servicio de explicaciones inaccesible", details={"url": self.url}, original_error=e
            ) from e
        except requests.RequestException as e:
            raise LegalServiceException(
                "Error HTTP del servicio de explicaciones", details={"url": self.url}, original_error=e
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise LegalServiceException("Respuesta no JSON", original_error=e) from e
        payload = _parse_payload(data)

        explanations = [
            LegalExplanation(
                code=item.code,
                article=item.article,
                title=item.title,
                text=item.text or "",
                context_explanation=item.contextExplanation or item.explanation,
                verified=True if item.verified is None else item.verified,
            )
            for item in payload.explanations
        ]
        log_info(
            "Explicaciones jurídicas recibidas",
            action="legal_explain",
            backend="http",
            references=len(references),
            received=len(explanations),
        )
        return explanations


# =========================================================
# FACTORY
# =========================================================


def get_legal_explanation_service(settings: Optional[Settings] = None) -> Optional[LegalExplanationService]:
    """
    Servicio configurado, o None si el enriquecimiento está desactivado
    (backend none, LLM no disponible o URL ausente).
    """
    settings = settings or get_settings()

    if settings.legal_explainer_backend == "http":
        if not settings.legal_explainer_url:
            return None
        return HttpLegalExplanationService(
            settings.legal_explainer_url, settings.legal_explainer_timeout_seconds
        )

    if settings.legal_explainer_backend == "llm" and settings.llm_available:
        return LLMLegalExplanationService()

    return None
