"""
Dossier de expediente (carpeta de situación).

Secciones: identificación -> síntesis -> [actores] -> violaciones
-> [cronología] -> [inventario de documentos] -> [incidentes vinculados]
-> recomendaciones -> aviso legal.

Sufijos del fichero según las secciones opcionales incluidas:
-documents, -chronologie, -acteurs, -incidents (en ese orden).
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sentinelle.core.config import Settings
from sentinelle.models.case_folder import CaseFolder, LinkedIncident, Recommendation, Violation
from sentinelle.models.export import ExportOptions, GeneratedDocument
from sentinelle.models.incident import NOT_PROVIDED, format_incident_number
from sentinelle.models.severity import Severity
from sentinelle.models.timeline_event import TimelineEvent
from sentinelle.reports.pdf import primitives
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import (
    InfoRow,
    TableColumn,
    draw_disclaimer,
    draw_header,
    draw_info_table,
    draw_table,
    draw_text_box,
)
from sentinelle.reports.pdf.sections import Section
from sentinelle.reports.pdf.styles import format_pdf_date, severity_style, status_color
from sentinelle.reports.pdf.text import clip_lines, normalize, wrap
from sentinelle.reports.pdf.timeline import render_timeline
from sentinelle.reports.templates.base import (
    DocumentPlan,
    SectionNumbering,
    draw_generated_line,
    draw_numbered_title,
    finalize_document,
    open_canvas,
    resolve_settings,
)

PREFIX = "dossier"

FOLDER_DISCLAIMER = (
    "Ce dossier est établi à partir des documents et analyses enregistrés. Les violations "
    "et recommandations sont issues d'une analyse automatisée et doivent être vérifiées "
    "avant toute démarche auprès de l'autorité de protection de l'adulte (art. 388-456 CC)."
)

PARTICIPANT_COLUMNS = (
    TableColumn("Nom", 50, max_length=40),
    TableColumn("Rôle", 45, max_length=35),
    TableColumn("Institution", 75, max_length=60),
)

DOCUMENT_COLUMNS = (
    TableColumn("N°", 14),
    TableColumn("Fichier", 96, max_length=90),
    TableColumn("Type", 40, max_length=30),
    TableColumn("Pages", 20),
)


def folder_events(folder: CaseFolder) -> list[TimelineEvent]:
    return [
        TimelineEvent(date=entry.date, title=entry.event, type=entry.type or "event")
        for entry in folder.timeline
    ]


def _rows(folder: CaseFolder, canvas: DocumentCanvas) -> list[InfoRow]:
    score = f"{folder.problem_score}/100" if folder.problem_score is not None else "N/A"
    return [
        InfoRow("Nom", folder.name, highlight=True),
        InfoRow("Type de situation", folder.situation_type or NOT_PROVIDED),
        InfoRow(
            "Statut",
            folder.situation_status or NOT_PROVIDED,
            color=status_color(folder.situation_status, canvas.palette),
        ),
        InfoRow("Priorité", folder.priority or "N/A"),
        InfoRow("Institution", folder.institution_concerned or NOT_PROVIDED),
        InfoRow("Score de problème", score),
        InfoRow("Créé le", format_pdf_date(folder.created_at)),
        InfoRow("Mis à jour le", format_pdf_date(folder.updated_at)),
        InfoRow("Documents", str(len(folder.documents))),
    ]


# =========================================================
# SECCIONES
# =========================================================


def _identification(folder: CaseFolder, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "IDENTIFICATION", y)
        if folder.priority:
            severity = Severity.parse(folder.priority)
            primitives.draw_badge(
                canvas, folder.priority.upper(), canvas.geometry.right_edge, y - 8,
                severity_style(severity, canvas.palette).color, align="right",
            )
        return draw_info_table(canvas, y + 2, _rows(folder, canvas))

    return Section("identification", render)


def _synthesis(text: str, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "SYNTHÈSE DE LA SITUATION", y)
        return draw_text_box(canvas, y, text, bar_color=canvas.palette.primary, max_length=5000)

    return Section("synthese", render)


def _participants(folder: CaseFolder, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "ACTEURS IMPLIQUÉS", y)
        rows = [[p.name or "Inconnu", p.role or "-", p.institution or "-"] for p in folder.participants]
        return draw_table(canvas, y, PARTICIPANT_COLUMNS, rows)

    return Section("acteurs", render)


def draw_violation(canvas: DocumentCanvas, y: float, violation: Violation) -> float:
    """Tarjeta de violación con barra lateral del color de su gravedad."""
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left
    color = severity_style(violation.severity, palette).color

    measure = canvas.measurer("normal", 8)
    text_width = geometry.content_width - 14
    lines = clip_lines(
        wrap(normalize(violation.description, 500), text_width, measure),
        canvas.page_lines(3.8, reserved=18), text_width, measure,
    )
    height = 9 + (5 if violation.legal_ref else 0) + len(lines) * 3.8
    y = canvas.ensure_space(y, height + 4)

    canvas.set_fill_color(palette.background)
    canvas.rect(x, y, geometry.content_width, height, fill=True)
    canvas.set_fill_color(color)
    canvas.rect(x, y, 2, height, fill=True)

    current = y + 5.5
    canvas.set_font("bold", 9)
    canvas.set_text_color(color)
    canvas.text(normalize(violation.type, 80), x + 6, current)
    primitives.draw_badge(canvas, violation.severity.label, geometry.right_edge - 2, current, color, align="right", size=6)
    if violation.legal_ref:
        current += 5
        canvas.set_font("italic", 8)
        canvas.set_text_color(palette.legal)
        canvas.text(f"Réf: {normalize(violation.legal_ref, 90)}", x + 6, current)
    canvas.set_font("normal", 8)
    canvas.set_text_color(palette.text)
    for line in lines:
        current += 3.8
        canvas.text(line, x + 6, current)
    return canvas.track(y + height + 4)


def _violations(folder: CaseFolder, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "VIOLATIONS DÉTECTÉES", y, color=canvas.palette.critique)
        ordered = sorted(folder.violations_detected, key=lambda v: v.severity.rank)
        for violation in ordered:
            y = draw_violation(canvas, y, violation)
        return y

    return Section("violations", render)


def _chronology(folder: CaseFolder, numbering: SectionNumbering, limit: int) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "CHRONOLOGIE DES ÉVÉNEMENTS", y)
        return render_timeline(canvas, folder_events(folder), y, title="Evénements du dossier", limit=limit)

    return Section("chronologie", render)


def _documents(folder: CaseFolder, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "DOCUMENTS DU DOSSIER", y, color=canvas.palette.evidence)
        rows = [
            [
                f"D{index}",
                document.display_name,
                document.document_type or "PDF",
                str(document.page_count) if document.page_count is not None else "-",
            ]
            for index, document in enumerate(folder.documents, start=1)
        ]
        return draw_table(canvas, y, DOCUMENT_COLUMNS, rows, header_color=canvas.palette.evidence)

    return Section("documents", render)


def draw_linked_incident(canvas: DocumentCanvas, y: float, incident: LinkedIncident) -> float:
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left
    color = severity_style(incident.gravite, palette).color

    y = canvas.ensure_space(y, 18)
    canvas.set_fill_color(palette.background)
    canvas.round_rect(x, y, geometry.content_width, 14, radius=2, fill=True)
    canvas.set_fill_color(color)
    canvas.rect(x, y, 2, 14, fill=True)

    canvas.set_font("bold", 9)
    canvas.set_text_color(palette.text)
    title = normalize(incident.titre or "Sans titre", 90)
    canvas.text(f"{format_incident_number(incident.numero)}: {title}", x + 6, y + 5.5)

    canvas.set_font("normal", 8)
    canvas.set_text_color(palette.muted)
    meta = " | ".join((
        incident.gravite.label,
        incident.statut or NOT_PROVIDED,
        format_pdf_date(incident.date_incident),
    ))
    canvas.text(meta, x + 6, y + 11)
    return canvas.track(y + 17)


def _incidents(folder: CaseFolder, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "INCIDENTS LIÉS", y, color=canvas.palette.critique)
        for incident in folder.incidents:
            y = draw_linked_incident(canvas, y, incident)
        return y

    return Section("incidents", render)


def draw_recommendation(canvas: DocumentCanvas, y: float, number: int, recommendation: Recommendation) -> float:
    palette = canvas.palette
    x = canvas.geometry.margin_left

    measure = canvas.measurer("normal", 9)
    text_width = canvas.geometry.content_width - 12
    lines = clip_lines(
        wrap(normalize(recommendation.action, 400), text_width, measure),
        canvas.page_lines(4, reserved=12), text_width, measure,
    )
    y = canvas.ensure_space(y, len(lines) * 4 + 8)

    canvas.set_font("bold", 9)
    canvas.set_text_color(palette.faible)
    canvas.text(f"{number}.", x + 2, y)
    canvas.set_font("normal", 9)
    canvas.set_text_color(palette.text)
    for index, line in enumerate(lines):
        canvas.text(line, x + 8, y + index * 4)
    current = y + len(lines) * 4

    details = []
    if recommendation.priority:
        details.append(f"Priorité: {recommendation.priority}")
    if recommendation.deadline:
        details.append(f"Échéance: {format_pdf_date(recommendation.deadline)}")
    if details:
        canvas.set_font("italic", 8)
        canvas.set_text_color(palette.muted)
        canvas.text(" | ".join(details), x + 8, current)
        current += 4
    return canvas.track(current + 3)


def _recommendations(folder: CaseFolder, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "RECOMMANDATIONS", y, color=canvas.palette.faible)
        for number, recommendation in enumerate(folder.recommendations, start=1):
            y = draw_recommendation(canvas, y, number, recommendation)
        return y

    return Section("recommandations", render)


# =========================================================
# COMPOSITOR
# =========================================================


def generate_case_folder_dossier(
    folder: CaseFolder,
    options: Optional[ExportOptions] = None,
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> GeneratedDocument:
    """
    Genera el dossier de un expediente.

    Las secciones opcionales (documentos, cronología, actores, incidentes)
    se incluyen si la opción está activa Y hay datos que mostrar.

    Returns:
        GeneratedDocument ("dossier-<nombre>[-documents]...-AAAA-MM-DD.pdf")
    """
    options = options or ExportOptions()
    settings = resolve_settings(settings)
    generated_at = generated_at or datetime.now()

    numbering = SectionNumbering()
    plan = DocumentPlan()
    plan.add(_identification(folder, numbering))
    synthesis = folder.summary or folder.description
    if synthesis and synthesis.strip():
        plan.add(_synthesis(synthesis, numbering))

    # Los sufijos siguen el orden fijo documents, chronologie, acteurs, incidents
    participants = options.include_participants and bool(folder.participants)
    chronology = options.include_timeline and bool(folder.timeline)
    documents = options.include_document_list and bool(folder.documents)
    incidents = options.include_incidents and bool(folder.incidents)

    if participants:
        plan.add_optional(_participants(folder, numbering))
    if folder.violations_detected:
        plan.add(_violations(folder, numbering))
    if chronology:
        plan.add_optional(_chronology(folder, numbering, settings.case_folder_timeline_limit))
    if documents:
        plan.add_optional(_documents(folder, numbering))
    if incidents:
        plan.add_optional(_incidents(folder, numbering))
    if folder.recommendations:
        plan.add(_recommendations(folder, numbering))
    plan.add(Section("avertissement", lambda c, y: draw_disclaimer(c, y, FOLDER_DISCLAIMER)))

    plan.suffixes = [
        suffix
        for suffix, enabled in (
            ("documents", documents),
            ("chronologie", chronology),
            ("acteurs", participants),
            ("incidents", incidents),
        )
        if enabled
    ]

    canvas = open_canvas(settings, f"Dossier {folder.name}")
    y = draw_header(canvas, "complete", folder.name)
    y = draw_generated_line(canvas, y, generated_at)
    plan.render(canvas, y)

    return finalize_document(
        canvas,
        "complete",
        PREFIX,
        folder.name,
        footer_info=normalize(folder.name, 50),
        plan=plan,
        generated_at=generated_at,
        case_id=folder.id,
    )
