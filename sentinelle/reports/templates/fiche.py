"""
Ficha de incidente (una página en el caso habitual).

Secciones: identificación con insignia de gravedad, hechos, disfunción,
pruebas (opcional) y aviso legal.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sentinelle.core.config import Settings
from sentinelle.models.export import ExportOptions, GeneratedDocument
from sentinelle.models.incident import IncidentRecord, IncidentSheet, normalize_incident
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import InfoRow, draw_disclaimer, draw_header, draw_info_table, draw_text_box
from sentinelle.reports.pdf.sections import Section
from sentinelle.reports.pdf.styles import format_pdf_date, severity_style, status_color
from sentinelle.reports.templates.base import (
    LPD_DISCLAIMER,
    DocumentPlan,
    SectionNumbering,
    draw_generated_line,
    draw_numbered_title,
    draw_proof_table,
    draw_severity_badge,
    finalize_document,
    open_canvas,
    resolve_settings,
)

PREFIX = "fiche-incident"


def identification_rows(sheet: IncidentSheet, canvas: DocumentCanvas) -> list[InfoRow]:
    """Filas de identificación (compartidas con el dossier de incidente)."""
    palette = canvas.palette
    score = f"{sheet.score}/100" if sheet.score is not None else "N/A"
    if sheet.transmis_jp:
        transmitted = "Oui - " + (
            format_pdf_date(sheet.date_transmission_jp)
            if sheet.date_transmission_jp
            else "Date non spécifiée"
        )
    else:
        transmitted = "Non"

    return [
        InfoRow("Numéro", sheet.reference, highlight=True),
        InfoRow("Date incident", format_pdf_date(sheet.date_incident)),
        InfoRow("Date création", format_pdf_date(sheet.date_creation)),
        InfoRow("Institution", sheet.institution),
        InfoRow("Type", sheet.type),
        InfoRow("Gravité", sheet.gravite.label, color=severity_style(sheet.gravite, palette).color),
        InfoRow("Priorité", f"{sheet.priorite} (Score: {score})"),
        InfoRow("Statut", sheet.statut, color=status_color(sheet.statut, palette)),
        InfoRow("Transmis JP", transmitted),
    ]


def identification_section(sheet: IncidentSheet, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "IDENTIFICATION", y)
        draw_severity_badge(canvas, sheet.gravite, y - 8)
        return draw_info_table(canvas, y + 2, identification_rows(sheet, canvas))

    return Section("identification", render)


def facts_section(sheet: IncidentSheet, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "FAITS CONSTATÉS", y)
        return draw_text_box(canvas, y, sheet.faits, bar_color=canvas.palette.primary, max_length=4000)

    return Section("faits", render)


def dysfunction_section(sheet: IncidentSheet, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        color = severity_style(sheet.gravite, canvas.palette).color
        y = draw_numbered_title(canvas, numbering, "DYSFONCTIONNEMENT IDENTIFIÉ", y, color=color)
        return draw_text_box(canvas, y, sheet.dysfonctionnement, bar_color=color, max_length=4000)

    return Section("dysfonctionnement", render)


def proofs_section(sheet: IncidentSheet, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "PREUVES RÉFÉRENCÉES", y, color=canvas.palette.evidence)
        return draw_proof_table(canvas, y, [sheet])

    return Section("preuves", render)


def disclaimer_section() -> Section:
    return Section("avertissement", lambda canvas, y: draw_disclaimer(canvas, y, LPD_DISCLAIMER))


def generate_fiche(
    incident: IncidentRecord,
    options: Optional[ExportOptions] = None,
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> GeneratedDocument:
    """
    Genera la ficha de un incidente.

    Args:
        incident: Incidente (datos externos; no se modifica)
        options: Solo include_proofs es relevante
        settings: Configuración (por defecto, la global)
        generated_at: Sello de generación (tests)

    Returns:
        GeneratedDocument ("fiche-incident-INC-0042-AAAA-MM-DD.pdf")
    """
    options = options or ExportOptions()
    settings = resolve_settings(settings)
    generated_at = generated_at or datetime.now()
    sheet = normalize_incident(incident)

    canvas = open_canvas(settings, f"Fiche incident {sheet.reference}")
    numbering = SectionNumbering()
    plan = DocumentPlan()
    plan.add(identification_section(sheet, numbering))
    plan.add(facts_section(sheet, numbering))
    plan.add(dysfunction_section(sheet, numbering))
    if options.include_proofs and sheet.preuves:
        plan.add_optional(proofs_section(sheet, numbering))
    plan.add(disclaimer_section())

    y = draw_header(canvas, "incident", sheet.titre, str(sheet.numero))
    y = draw_generated_line(canvas, y, generated_at)
    plan.render(canvas, y)

    return finalize_document(
        canvas,
        "incident",
        PREFIX,
        sheet.reference,
        footer_info=f"Incident #{sheet.numero}",
        plan=plan,
        generated_at=generated_at,
        case_id=incident.id,
    )
