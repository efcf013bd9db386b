"""
Paleta, geometría de página y tokens de estilo de los documentos PDF.

La paleta es un objeto inmutable que se pasa por referencia a cada lienzo;
nunca se modifica en tiempo de ejecución.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import A3, A4, A5, LETTER, LEGAL
from reportlab.lib.units import mm

from sentinelle.models.incident import NOT_PROVIDED
from sentinelle.models.severity import Severity

# =========================================================
# PALETA
# =========================================================


@dataclass(frozen=True)
class Palette:
    """Colores corporativos de los documentos jurídicos."""

    primary: Color = HexColor("#1A365D")  # Azul institucional
    secondary: Color = HexColor("#475569")  # Gris pizarra
    critique: Color = HexColor("#B91C1C")  # Rojo
    haute: Color = HexColor("#B45309")  # Naranja
    moyenne: Color = HexColor("#A16207")  # Ámbar
    faible: Color = HexColor("#15803D")  # Verde
    text: Color = HexColor("#1E293B")
    muted: Color = HexColor("#64748B")
    light: Color = HexColor("#94A3B8")
    background: Color = HexColor("#F8FAFC")
    white: Color = HexColor("#FFFFFF")
    border: Color = HexColor("#E2E8F0")
    legal: Color = HexColor("#581C87")  # Violeta jurídico
    evidence: Color = HexColor("#0D9488")  # Verde azulado (pruebas)


DEFAULT_PALETTE = Palette()


@dataclass(frozen=True)
class StyleToken:
    """Triple color / peso / tamaño con nombre."""

    name: str
    color: Color
    bold: bool = False
    size: float = 9


def severity_style(severity: Severity, palette: Palette = DEFAULT_PALETTE) -> StyleToken:
    """Token de estilo de una gravedad (UNKNOWN -> neutro)."""
    colors_by_severity = {
        Severity.CRITIQUE: palette.critique,
        Severity.HAUTE: palette.haute,
        Severity.MOYENNE: palette.moyenne,
        Severity.FAIBLE: palette.faible,
    }
    color = colors_by_severity.get(severity, palette.muted)
    return StyleToken(name=f"severity.{severity.value}", color=color, bold=True, size=8)


def status_color(statut: Optional[str], palette: Palette = DEFAULT_PALETTE) -> Color:
    """Color del estado de tramitación de un incidente."""
    value = (statut or "").strip().lower()
    if value == "ouvert":
        return palette.haute
    if value == "en cours":
        return palette.moyenne
    if value == "transmis":
        return palette.legal
    if value in ("fermé", "ferme", "résolu", "resolu"):
        return palette.faible
    return palette.muted


# =========================================================
# GEOMETRÍA DE PÁGINA (mm)
# =========================================================

PAGE_SIZES_PT = {
    "A3": A3,
    "A4": A4,
    "A5": A5,
    "LETTER": LETTER,
    "LEGAL": LEGAL,
}

MARGIN_LEFT = 20
MARGIN_RIGHT = 20
MARGIN_TOP = 20
MARGIN_BOTTOM = 25
LINE_HEIGHT = 5
# Holgura entre el límite útil y la zona del pie de página
SAFE_BOTTOM_GAP = 2


@dataclass(frozen=True)
class PageGeometry:
    """Dimensiones de página en milímetros."""

    name: str
    width: float
    height: float
    margin_left: float = MARGIN_LEFT
    margin_right: float = MARGIN_RIGHT
    margin_top: float = MARGIN_TOP
    margin_bottom: float = MARGIN_BOTTOM

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def right_edge(self) -> float:
        return self.width - self.margin_right

    @property
    def safe_max_y(self) -> float:
        return self.height - self.margin_bottom - SAFE_BOTTOM_GAP

    @property
    def content_top(self) -> float:
        """Y inicial de una página de continuación."""
        return self.margin_top + 5

    @property
    def footer_y(self) -> float:
        return self.height - self.margin_bottom + 10


def page_geometry(page_format: str) -> Optional[PageGeometry]:
    """Geometría de un formato conocido (None si el formato no existe)."""
    key = (page_format or "").strip().upper()
    size = PAGE_SIZES_PT.get(key)
    if size is None:
        return None
    # Redondeo a décima de mm: A4 -> 210 x 297
    return PageGeometry(name=key, width=round(size[0] / mm, 1), height=round(size[1] / mm, 1))


# =========================================================
# TIPOS DE DOCUMENTO
# =========================================================


@dataclass(frozen=True)
class DocumentTypeConfig:
    title: str
    confidential_note: str
    header_color: str = "primary"
    accent_color: str = "secondary"
    show_legal_disclaimer: bool = True


DOCUMENT_TYPES = {
    "incident": DocumentTypeConfig(
        title="FICHE INCIDENT",
        confidential_note="Confidentiel - Art. 13 LPD",
    ),
    "dossier_incident": DocumentTypeConfig(
        title="DOSSIER INCIDENT",
        confidential_note="Confidentiel - Art. 13 LPD",
        accent_color="evidence",
    ),
    "juridique": DocumentTypeConfig(
        title="DOSSIER JURIDIQUE",
        confidential_note="Destiné à la Justice de Paix - Confidentiel",
        accent_color="legal",
    ),
    "factuel": DocumentTypeConfig(
        title="DOSSIER FACTUEL",
        confidential_note="Destiné à la Justice de Paix - Confidentiel",
        accent_color="legal",
    ),
    "chronologique": DocumentTypeConfig(
        title="ANALYSE CHRONOLOGIQUE",
        confidential_note="Document de travail - Confidentiel",
        header_color="secondary",
        accent_color="primary",
        show_legal_disclaimer=False,
    ),
    "hebdomadaire": DocumentTypeConfig(
        title="RAPPORT HEBDOMADAIRE",
        confidential_note="Document confidentiel - Curatelle volontaire de gestion",
        show_legal_disclaimer=False,
    ),
    "complete": DocumentTypeConfig(
        title="DOSSIER COMPLET",
        confidential_note="Mémoire juridique - Art. 13 LPD",
        accent_color="evidence",
    ),
}


def document_type_config(doctype: str) -> DocumentTypeConfig:
    return DOCUMENT_TYPES.get(doctype, DOCUMENT_TYPES["complete"])


def palette_color(palette: Palette, name: str) -> Color:
    return getattr(palette, name, palette.primary)


# =========================================================
# FECHAS (formato suizo dd.mm.yyyy)
# =========================================================

DateLike = Union[str, date, datetime, None]


def parse_date(value: DateLike) -> Optional[datetime]:
    """ISO 8601 (con o sin hora, con 'Z') -> datetime. None si no es interpretable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raw = str(value).strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        pass
    for fmt in ("%d.%m.%Y", "%d/%m/%Y", "%d.%m.%Y %H:%M", "%d/%m/%Y %H:%M"):
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def format_pdf_date(value: DateLike, placeholder: str = NOT_PROVIDED) -> str:
    """dd.mm.yyyy; vacío -> placeholder; no interpretable -> texto original."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return placeholder
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%d.%m.%Y")


def format_pdf_datetime(value: DateLike, placeholder: str = NOT_PROVIDED) -> str:
    """dd.mm.yyyy à HH:MM."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return placeholder
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%d.%m.%Y à %H:%M")
