"""
Piezas comunes de las plantillas (compositores) de documentos.

Ciclo de vida de un documento:
    1. normalización de la entrada (una sola vez)
    2. pliegue de secciones (canvas, y) -> y
    3. finalize_document(): pies de página -> nombre de fichero -> GeneratedDocument
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from reportlab.lib.colors import Color

from sentinelle.core.config import Settings, get_settings
from sentinelle.core.logger import log_info
from sentinelle.models.export import GeneratedDocument
from sentinelle.models.incident import IncidentSheet
from sentinelle.models.severity import Severity
from sentinelle.reports.pdf import primitives
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import TableColumn, draw_section_title, draw_table
from sentinelle.reports.pdf.sections import Section, compose_sections
from sentinelle.reports.pdf.styles import format_pdf_datetime, severity_style
from sentinelle.reports.pdf.text import draw_wrapped_text
from sentinelle.services.document_naming import document_filename

LPD_DISCLAIMER = (
    "Ce document est établi conformément aux dispositions de la Loi fédérale sur la "
    "protection des données (LPD) et aux articles 388-456 du Code civil suisse relatifs "
    "à la protection de l'adulte. Son contenu est strictement confidentiel et destiné "
    "exclusivement aux autorités compétentes."
)


@dataclass
class SectionNumbering:
    """Numeración correlativa de las secciones efectivamente dibujadas."""

    current: int = 0

    def next(self) -> int:
        self.current += 1
        return self.current


@dataclass
class DocumentPlan:
    """Secciones de un documento y secciones opcionales incluidas."""

    sections: list[Section] = field(default_factory=list)
    included: list[str] = field(default_factory=list)
    suffixes: list[str] = field(default_factory=list)

    def add(self, section: Section) -> None:
        self.sections.append(section)

    def add_optional(self, section: Section, suffix: Optional[str] = None) -> None:
        self.sections.append(section)
        self.included.append(section.name)
        if suffix:
            self.suffixes.append(suffix)

    def render(self, canvas: DocumentCanvas, y: float) -> float:
        return compose_sections(canvas, y, self.sections)


def resolve_settings(settings: Optional[Settings]) -> Settings:
    return settings or get_settings()


def open_canvas(settings: Settings, title: str) -> DocumentCanvas:
    """Lienzo nuevo por documento (PageFormatException si el formato no existe)."""
    return DocumentCanvas(settings.page_format, title=title)


# =========================================================
# PIEZAS DE DIBUJO COMPARTIDAS
# =========================================================


def draw_generated_line(canvas: DocumentCanvas, y: float, generated_at: datetime) -> float:
    canvas.set_font("italic", 8)
    canvas.set_text_color(canvas.palette.muted)
    canvas.text(f"Généré le {format_pdf_datetime(generated_at)}", canvas.geometry.margin_left, y)
    return canvas.track(y + 10)


def draw_severity_badge(
    canvas: DocumentCanvas,
    severity: Severity,
    y: float,
    x: Optional[float] = None,
    align: str = "right",
) -> float:
    """Insignia de gravedad (por defecto alineada al margen derecho)."""
    color = severity_style(severity, canvas.palette).color
    x = canvas.geometry.right_edge if x is None else x
    return primitives.draw_badge(canvas, severity.label, x, y, color, align=align)


def draw_placeholder(canvas: DocumentCanvas, y: float, text: str) -> float:
    """Línea en cursiva para las secciones sin contenido."""
    y = draw_wrapped_text(
        canvas, text, canvas.geometry.margin_left + 5, y, canvas.geometry.content_width - 5,
        style="italic", size=9, color=canvas.palette.muted,
    )
    return canvas.track(y + 4)


def draw_numbered_title(
    canvas: DocumentCanvas,
    numbering: SectionNumbering,
    text: str,
    y: float,
    color: Optional[Color] = None,
) -> float:
    return draw_section_title(canvas, text, y, numbered=True, number=numbering.next(), color=color)


PROOF_COLUMNS = (
    TableColumn("N°", 14),
    TableColumn("Type", 26),
    TableColumn("Description", 90, max_length=160),
    TableColumn("Empreinte", 40),
)


def draw_proof_table(canvas: DocumentCanvas, y: float, incidents: Iterable[IncidentSheet]) -> float:
    """Tabla de pruebas con huella (una fila por prueba, numeradas P1..Pn)."""
    rows = []
    for incident in incidents:
        for proof in incident.preuves:
            rows.append(
                [f"P{len(rows) + 1}", proof.type, proof.label or "Sans description", proof.fingerprint]
            )
    return draw_table(canvas, y, PROOF_COLUMNS, rows, header_color=canvas.palette.evidence)


# =========================================================
# FINALIZACIÓN
# =========================================================


def finalize_document(
    canvas: DocumentCanvas,
    doctype: str,
    prefix: str,
    identity: Optional[str],
    footer_info: Optional[str] = None,
    plan: Optional[DocumentPlan] = None,
    generated_at: Optional[datetime] = None,
    case_id: Optional[str] = None,
) -> GeneratedDocument:
    """
    Estampa los pies de página, calcula el nombre y empaqueta el resultado.

    Returns:
        GeneratedDocument con los bytes del PDF
    """
    generated_at = generated_at or datetime.now()
    plan = plan or DocumentPlan()

    page_count = primitives.draw_footers_on_all_pages(canvas, doctype, footer_info, generated_at)
    filename = document_filename(prefix, identity, plan.suffixes, generated_at)
    document = GeneratedDocument(
        content=canvas.to_bytes(),
        filename=filename,
        page_count=page_count,
        included_sections=list(plan.included),
    )

    log_info(
        "Documento PDF generado",
        case_id=case_id,
        action="pdf_export",
        doctype=doctype,
        filename=filename,
        pages=page_count,
        size_bytes=document.size_bytes,
        sections=document.included_sections,
    )
    return document
