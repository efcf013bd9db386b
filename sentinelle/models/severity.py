"""
Enumeración canónica de gravedad.

Los distintos orígenes de datos usan vocabularios distintos ("Haute" / "Grave",
"Modéré" / "Moyenne", "high" / "medium"...). Se normalizan UNA sola vez aquí,
en la frontera del modelo de datos; la capa de renderizado solo ve Severity.
"""
from __future__ import annotations

import unicodedata
from enum import Enum
from typing import Any


def _fold(label: str) -> str:
    """minúsculas y sin acentos: 'Modéré' -> 'modere'."""
    decomposed = unicodedata.normalize("NFKD", label.strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


class Severity(str, Enum):
    """Gravedad canónica de un incidente, hecho o evento."""

    CRITIQUE = "critique"
    HAUTE = "haute"
    MOYENNE = "moyenne"
    FAIBLE = "faible"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, label: Any) -> "Severity":
        """
        Convierte cualquier etiqueta conocida a la enumeración canónica.

        Etiquetas desconocidas o vacías -> UNKNOWN (estilo neutro).
        """
        if isinstance(label, Severity):
            return label
        if label is None:
            return cls.UNKNOWN
        return _SYNONYMS.get(_fold(str(label)), cls.UNKNOWN)

    @property
    def rank(self) -> int:
        """Orden de presentación: la más grave primero."""
        return _RANK[self]

    @property
    def label(self) -> str:
        """Etiqueta francesa en mayúsculas para las insignias."""
        return _LABELS[self]


_SYNONYMS = {
    "critique": Severity.CRITIQUE,
    "critical": Severity.CRITIQUE,
    "tres grave": Severity.CRITIQUE,
    "haute": Severity.HAUTE,
    "haut": Severity.HAUTE,
    "grave": Severity.HAUTE,
    "high": Severity.HAUTE,
    "elevee": Severity.HAUTE,
    "moyenne": Severity.MOYENNE,
    "moyen": Severity.MOYENNE,
    "modere": Severity.MOYENNE,
    "moderee": Severity.MOYENNE,
    "medium": Severity.MOYENNE,
    "faible": Severity.FAIBLE,
    "mineur": Severity.FAIBLE,
    "mineure": Severity.FAIBLE,
    "basse": Severity.FAIBLE,
    "low": Severity.FAIBLE,
}

_RANK = {
    Severity.CRITIQUE: 0,
    Severity.HAUTE: 1,
    Severity.MOYENNE: 2,
    Severity.FAIBLE: 3,
    Severity.UNKNOWN: 4,
}

_LABELS = {
    Severity.CRITIQUE: "CRITIQUE",
    Severity.HAUTE: "HAUTE",
    Severity.MOYENNE: "MOYENNE",
    Severity.FAIBLE: "FAIBLE",
    Severity.UNKNOWN: "NON CLASSEE",
}
