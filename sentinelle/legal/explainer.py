"""
Resolvedor de explicaciones jurídicas con degradación controlada.

Orden de resolución:
a) sin referencias -> bases por defecto del tipo de incidente
   (coincidencia exacta, luego parcial, luego fallback genérico);
b) UNA llamada por lotes al servicio de explicaciones (LLM o HTTP);
c) si el servicio falla o no cubre un artículo -> catálogo estático;
   si tampoco está en el catálogo -> texto por defecto con verified=False.

REGLAS:
- resolve() NUNCA lanza por un fallo del servicio.
- resolve() NUNCA devuelve una lista vacía.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

from sentinelle.core.logger import log_warning
from sentinelle.legal.legal_mapping import (
    ARTICLE_CATALOG,
    GENERIC_LEGAL_BASES,
    INCIDENT_TYPE_LEGAL_MAP,
    KEYWORD_LEGAL_MAP,
    UNVERIFIED_CAPTION,
)
from sentinelle.legal.references import extract
from sentinelle.models.legal import LegalExplanation, LegalReference


def _refs(entries: Iterable[dict]) -> list[LegalReference]:
    return [LegalReference(code=e["code"], article=e["article"]) for e in entries]


def _dedupe(references: Iterable[LegalReference]) -> list[LegalReference]:
    seen = set()
    result = []
    for reference in references:
        if reference.key not in seen:
            seen.add(reference.key)
            result.append(reference)
    return result


def default_references_for_type(incident_type: Optional[str]) -> list[LegalReference]:
    """
    Bases legales por defecto de un tipo de incidente.

    Nunca vacía: los tipos desconocidos reciben el fallback genérico
    (CC art. 406, Cst art. 29).
    """
    if incident_type:
        mapped = INCIDENT_TYPE_LEGAL_MAP.get(incident_type)
        if mapped:
            return _refs(mapped)

        lowered = incident_type.strip().lower()
        if lowered:
            for key, entries in INCIDENT_TYPE_LEGAL_MAP.items():
                if key.lower() in lowered or lowered in key.lower():
                    return _refs(entries)

    return _refs(GENERIC_LEGAL_BASES)


def detect_legal_bases_from_content(
    faits: Optional[str],
    dysfonctionnement: Optional[str],
    incident_type: Optional[str],
) -> list[LegalReference]:
    """
    Bases legales deducidas del contenido: palabras clave, tipo de incidente
    y referencias explícitas citadas en el texto.
    """
    all_text = f"{faits or ''} {dysfonctionnement or ''}"
    lowered = all_text.lower()
    detected: list[LegalReference] = []

    for mapping in KEYWORD_LEGAL_MAP:
        if any(keyword in lowered for keyword in mapping["keywords"]):
            detected.extend(LegalReference(code=c, article=a) for c, a in mapping["refs"])

    detected.extend(default_references_for_type(incident_type))
    detected.extend(extract(all_text))
    return _dedupe(detected)


def catalog_entry(reference: LegalReference) -> Optional[dict]:
    """Entrada del catálogo estático ("CC 450a", "Cst 29"); ignora alinéas."""
    base = re.match(r"\d+[a-z]?", reference.article)
    article = base.group(0) if base else reference.article
    return ARTICLE_CATALOG.get(f"{reference.code} {article}")


def static_explanation(reference: LegalReference, context: Optional[str] = None) -> LegalExplanation:
    """Explicación desde el catálogo; verified=False si el artículo no figura."""
    entry = catalog_entry(reference)
    if entry is None:
        return LegalExplanation(
            code=reference.code,
            article=reference.article,
            text=UNVERIFIED_CAPTION,
            context_explanation=context,
            verified=False,
        )
    return LegalExplanation(
        code=reference.code,
        article=reference.article,
        title=entry["title"],
        text=entry["summary"],
        context_explanation=context,
        verified=True,
    )


def resolve(
    references: Optional[Iterable[LegalReference]],
    facts: Optional[str] = None,
    dysfunction: Optional[str] = None,
    incident_type: Optional[str] = None,
    service=None,
    limit: Optional[int] = None,
    case_id: Optional[str] = None,
) -> list[LegalExplanation]:
    """
    Resuelve las explicaciones de una lista de referencias.

    Args:
        references: Referencias citadas (vacío -> bases por defecto del tipo)
        facts: Resumen de hechos (contexto para el servicio)
        dysfunction: Disfunción identificada
        incident_type: Tipo de incidente
        service: LegalExplanationService (None -> solo catálogo estático)
        limit: Máximo de referencias a explicar
        case_id: Para trazabilidad en logs

    Returns:
        Lista NO vacía de LegalExplanation, en el orden de las referencias
    """
    refs = _dedupe(references or [])
    if not refs:
        refs = default_references_for_type(incident_type)
    if limit is not None:
        refs = refs[: max(1, limit)]

    enriched: dict[tuple[str, str], LegalExplanation] = {}
    if service is not None:
        try:
            for explanation in service.explain(refs, facts or "", dysfunction, incident_type):
                enriched[(explanation.code.upper(), explanation.article.lower())] = explanation
        except Exception as e:
            log_warning(
                "Servicio de explicaciones jurídicas no disponible, usando catálogo estático",
                case_id=case_id,
                action="legal_resolve_degraded",
                error_type=type(e).__name__,
                error_message=str(e),
                references=len(refs),
            )
            enriched = {}

    resolved = []
    for reference in refs:
        explanation = enriched.get((reference.code.upper(), reference.article.lower()))
        if explanation is not None and explanation.text.strip():
            if explanation.title is None and catalog_entry(reference):
                explanation = explanation.model_copy(update={"title": catalog_entry(reference)["title"]})
            resolved.append(explanation)
        else:
            context = explanation.context_explanation if explanation is not None else None
            resolved.append(static_explanation(reference, context))
    return resolved
