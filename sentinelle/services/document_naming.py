"""
Nombres de fichero de los documentos exportados.

Dos convenciones:
- Descarga: <prefijo>-<identidad>[-<sufijos>]-<AAAA-MM-DD>.pdf
- Archivo:  AAAA-MM-DD_PRIORIDAD_INICIALES_NNNN[_PLUS]_V<n>.pdf
"""
from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Iterable, Optional, Union

from sentinelle.reports.pdf.styles import parse_date

IDENTITY_MAX_LENGTH = 40

# Instituciones frecuentes con sigla establecida
INSTITUTION_INITIALS = {
    "juge de paix": "JP",
    "justice de paix": "JP",
    "service curatelle professionnelle": "SCP",
    "service des curatelles et tutelles professionnelles": "SCTP",
    "office des curatelles et tutelles professionnelles": "OCTP",
    "centre social regional": "CSR",
    "direction generale de la cohesion sociale": "DGCS",
    "office de l'assurance invalidite": "OAI",
    "tribunal cantonal": "TC",
}

_STOP_WORDS = {"de", "du", "des", "la", "le", "les", "l", "d", "et", "a", "au", "aux", "pour"}


def _ascii(value: str) -> str:
    folded = unicodedata.normalize("NFKD", value)
    return "".join(c for c in folded if not unicodedata.combining(c))


def sanitize_identity(identity: Optional[str], max_length: int = IDENTITY_MAX_LENGTH) -> str:
    """
    Identidad del caso apta para un nombre de fichero: [A-Za-z0-9-], sin
    guiones repetidos ni en los extremos, como máximo `max_length` caracteres.
    """
    value = _ascii(identity or "")
    value = re.sub(r"[^A-Za-z0-9-]+", "-", value)
    value = re.sub(r"-{2,}", "-", value).strip("-")
    value = value[:max_length].rstrip("-")
    return value or "document"


def _day(when: Union[date, datetime, None]) -> str:
    when = when or datetime.now()
    return when.strftime("%Y-%m-%d")


def document_filename(
    prefix: str,
    identity: Optional[str],
    suffixes: Iterable[str] = (),
    when: Union[date, datetime, None] = None,
) -> str:
    """
    Nombre de descarga.

    Ejemplo: document_filename("dossier-incident", "INC-0042", ["emails"])
    -> "dossier-incident-INC-0042-emails-2026-10-19.pdf"
    """
    parts = [prefix, sanitize_identity(identity)]
    parts.extend(s.strip("-") for s in suffixes if s and s.strip("-"))
    return f"{'-'.join(parts)}-{_day(when)}.pdf"


def institution_initials(institution: Optional[str]) -> str:
    """Sigla de una institución ("Juge de paix" -> "JP"); "XX" si no hay dato."""
    if not institution or not institution.strip():
        return "XX"

    key = _ascii(institution).strip().lower()
    key = re.sub(r"\s+", " ", key)
    for name, initials in INSTITUTION_INITIALS.items():
        if key == name or key.startswith(name):
            return initials

    words = [w for w in re.split(r"[\s'\-]+", key) if w and w not in _STOP_WORDS]
    initials = "".join(w[0] for w in words if w[0].isalnum()).upper()
    return initials[:5] or "XX"


def archive_filename(incident, is_plus: bool = False, version: int = 1) -> str:
    """
    Nombre de archivo interno de una ficha de incidente.

    Ejemplo: 2026-03-14_HAUTE_JP_0042_PLUS_V2.pdf
    """
    incident_date = parse_date(incident.date_incident) or parse_date(incident.date_creation)
    day = _day(incident_date)
    priority = sanitize_identity(_ascii(incident.priorite or "NA").upper(), 15).replace("-", "")
    initials = institution_initials(incident.institution)
    number = f"{incident.numero:04d}"
    plus = "_PLUS" if is_plus else ""
    return f"{day}_{priority}_{initials}_{number}{plus}_V{max(1, version)}.pdf"
