"""
Citas probatorias: frases de la correspondencia con valor de prueba.

Heurística de relevancia por frase, independiente del extractor de
referencias legales: aquí interesa lo que una parte AFIRMA, RECHAZA o
CONSTATA, no el artículo citado.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

from sentinelle.models.incident import EmailRecord
from sentinelle.models.legal import ProbativeCitation
from sentinelle.reports.pdf.styles import format_pdf_date

# Verbos declarativos y términos de incumplimiento
IMPORTANT_INDICATORS = (
    "affirme", "déclare", "confirme", "indique", "précise",
    "refuse", "rejette", "accepte", "demande", "exige",
    "constate", "observe", "note", "remarque",
    "violation", "manquement", "problème", "incident",
)

# Términos que pesan más ante la autoridad
STRONG_INDICATORS = ("refuse", "rejette", "violation", "manquement", "exige")

MIN_SENTENCE_LENGTH = 30
MAX_SENTENCE_LENGTH = 500
MAX_CITATIONS = 20

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WORD = re.compile(r"\w{5,}")


def split_sentences(text: Optional[str]) -> list[str]:
    if not text:
        return []
    return [s.strip() for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > 20]


def score_sentence(sentence: str, context_terms: frozenset = frozenset()) -> tuple[float, list[str]]:
    """
    Puntuación de una frase: 1 por indicador, 2 por indicador fuerte,
    0.5 por término compartido con los hechos del incidente.
    """
    lowered = sentence.lower()
    matched = [k for k in IMPORTANT_INDICATORS if k in lowered]
    if not matched:
        return 0.0, []
    score = sum(2.0 if k in STRONG_INDICATORS else 1.0 for k in matched)
    shared = {w for w in _WORD.findall(lowered)} & context_terms
    score += 0.5 * len(shared)
    return score, matched


def _source(email: EmailRecord) -> str:
    sender = email.sender or "Expéditeur inconnu"
    if email.timestamp:
        return f"{sender}, {format_pdf_date(email.timestamp)}"
    return sender


def extract_probative_citations(
    emails: Iterable[EmailRecord],
    context: Optional[str] = None,
    limit: int = MAX_CITATIONS,
) -> list[ProbativeCitation]:
    """
    Recorre los correos y devuelve las frases más relevantes.

    Args:
        emails: Correspondencia del caso
        context: Hechos/disfunción del incidente (bonifica frases afines)
        limit: Máximo de citas

    Returns:
        Citas ordenadas por puntuación descendente (empates: orden de lectura)
    """
    context_terms = frozenset(_WORD.findall((context or "").lower()))
    candidates = []
    for email in emails:
        for sentence in split_sentences(email.body):
            if not MIN_SENTENCE_LENGTH < len(sentence) < MAX_SENTENCE_LENGTH:
                continue
            score, matched = score_sentence(sentence, context_terms)
            if score <= 0:
                continue
            candidates.append(
                ProbativeCitation(
                    text=sentence,
                    source=_source(email),
                    email_id=email.id,
                    score=score,
                    matched_keywords=matched,
                )
            )

    # sorted() es estable: a igual puntuación se conserva el orden de lectura
    return sorted(candidates, key=lambda c: -c.score)[:limit]
