"""
Extracción de referencias legales (código, artículo) de texto libre.

Formas reconocidas, por orden de prioridad:
1. "Art. 406 CC", "art. 29 al. 2 Cst"
2. "CC art. 406"
3. "article 35 du Code civil" (nombre completo -> sigla)
4. "§ 12 CSIAS" (normas de ayuda social)

Cuando dos formas se solapan en el texto (p.ej. "CC art. 29 Cst"), gana la
de mayor prioridad. El resultado se deduplica por (código, artículo)
conservando el orden de primera aparición.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

from sentinelle.models.legal import LegalReference

CODES = (
    "CC", "CO", "CP", "CPC", "CPP", "Cst", "PA", "LPD", "LPMA", "LVPAE",
    "LPPA-VD", "LAMal", "LTF", "LCA", "CEDH",
)

# Grafía canónica por clave en mayúsculas (CST -> Cst)
CANONICAL_CODES = {code.upper(): code for code in CODES + ("CSIAS",)}

FULL_CODE_NAMES = (
    ("code de procédure civile", "CPC"),
    ("code de procédure pénale", "CPP"),
    ("code des obligations", "CO"),
    ("code civil", "CC"),
    ("code pénal", "CP"),
)

_CODE_ALT = "|".join(re.escape(code) for code in sorted(CODES, key=len, reverse=True))
_ARTICLE = (
    r"\d+[a-z]?"
    r"(?:\s*(?:bis|ter|quater|quinquies))?"
    r"(?:\s*(?:al\.|alinéa|let\.|ch\.|§)\s*\d*[a-z]?)*"
)

PATTERNS = [
    ("article_code", re.compile(rf"\bArt\.?\s*({_ARTICLE})\s+({_CODE_ALT})(?![\w-])", re.IGNORECASE)),
    ("code_article", re.compile(rf"(?<![\w-])({_CODE_ALT})\s+art\.?\s*({_ARTICLE})", re.IGNORECASE)),
    (
        "full_name",
        re.compile(
            rf"\barticle\s+({_ARTICLE})\s+(?:du\s+)?"
            r"(code\s+de\s+procédure\s+civile|code\s+de\s+procédure\s+pénale|"
            r"code\s+des\s+obligations|code\s+civil|code\s+pénal|code\s+de\s+procédure)",
            re.IGNORECASE,
        ),
    ),
    ("csias", re.compile(r"§\s*(\d+(?:\.\d+)?)\s+(CSIAS|normes)\b", re.IGNORECASE)),
]


def _clean_article(raw: str) -> str:
    article = re.sub(r"\s+", " ", raw.strip())
    # "450 a" -> "450a"; locuciones de apartado en minúsculas
    article = re.sub(r"^(\d+)\s+([a-z])\b", r"\1\2", article)
    return article.lower()


def _full_name_code(name: str) -> Optional[str]:
    lowered = re.sub(r"\s+", " ", name.lower())
    for full_name, code in FULL_CODE_NAMES:
        if lowered == full_name:
            return code
    return None


def _reference_from(family: str, match: re.Match) -> Optional[LegalReference]:
    if family == "article_code":
        article, code = match.group(1), CANONICAL_CODES.get(match.group(2).upper())
    elif family == "code_article":
        code, article = CANONICAL_CODES.get(match.group(1).upper()), match.group(2)
    elif family == "full_name":
        article, code = match.group(1), _full_name_code(match.group(2))
    else:
        article, code = match.group(1), "CSIAS"
    if not code:
        return None
    return LegalReference(code=code, article=_clean_article(article))


def extract(text: Optional[str]) -> list[LegalReference]:
    """
    Extrae las referencias legales de `text`.

    Pura y determinista: extract(extract_text) siempre devuelve lo mismo.

    Returns:
        Referencias únicas por (código, artículo), en orden de aparición
    """
    if not text:
        return []

    # (inicio, fin, prioridad, referencia)
    candidates = []
    for priority, (family, pattern) in enumerate(PATTERNS):
        for match in pattern.finditer(text):
            reference = _reference_from(family, match)
            if reference is not None:
                candidates.append((match.start(), match.end(), priority, reference))

    accepted = []
    for start, end, priority, reference in sorted(candidates, key=lambda c: (c[2], c[0])):
        if any(start < a_end and a_start < end for a_start, a_end, _, _ in accepted):
            continue
        accepted.append((start, end, priority, reference))

    seen = set()
    references = []
    for _, _, _, reference in sorted(accepted, key=lambda c: c[0]):
        if reference.key in seen:
            continue
        seen.add(reference.key)
        references.append(reference)
    return references


def format_legal_reference(reference: LegalReference) -> str:
    """CC art. 406"""
    return f"{reference.code} art. {reference.article}"


def format_legal_references(references: Iterable[LegalReference]) -> str:
    return ", ".join(format_legal_reference(r) for r in references)
