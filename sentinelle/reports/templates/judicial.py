"""
Dossier judicial destinado a la Justice de Paix.

Estructura:
    portada (cifras agregadas) -> índice con páginas estimadas
    -> I. objeto -> II. hechos establecidos -> III. calificación jurídica
    -> IV. pruebas documentadas -> V. conclusiones y peticiones -> firma

Con 0 incidentes el documento se genera igualmente (portada, índice y
secciones con texto de sustitución).
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Sequence

from sentinelle.core.config import Settings
from sentinelle.legal.explainer import resolve
from sentinelle.legal.references import extract
from sentinelle.models.export import GeneratedDocument
from sentinelle.models.incident import IncidentRecord, IncidentSheet, normalize_incident
from sentinelle.models.severity import Severity
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import (
    TableColumn,
    draw_header,
    draw_legal_box,
    draw_section_title,
    draw_table,
)
from sentinelle.reports.pdf.sections import Section
from sentinelle.reports.pdf.styles import format_pdf_date, format_pdf_datetime, parse_date
from sentinelle.reports.pdf.text import clip_lines, draw_justified_text, draw_wrapped_text, normalize, wrap
from sentinelle.reports.templates.base import (
    DocumentPlan,
    draw_placeholder,
    draw_severity_badge,
    finalize_document,
    open_canvas,
    resolve_settings,
)
from sentinelle.services.legal_explanation_service import (
    LegalExplanationService,
    get_legal_explanation_service,
)

PREFIX = "dossier-juridique"

REQUESTS = (
    "De prendre connaissance des faits exposés dans le présent rapport;",
    "D'examiner les mesures de surveillance appropriées (art. 450 CC);",
    "D'évaluer la nécessité d'un changement de curateur (art. 423 CC);",
    "De statuer sur les éventuelles mesures correctives à mettre en oeuvre.",
)

PROOF_COLUMNS = (
    TableColumn("N°", 12),
    TableColumn("Incident", 22),
    TableColumn("Type", 24),
    TableColumn("Description", 76, max_length=140),
    TableColumn("Empreinte", 36),
)


def sort_established_facts(incidents: Sequence[IncidentSheet]) -> list[IncidentSheet]:
    """Gravedad (más grave primero) y, a igual gravedad, el más reciente primero."""

    def recency(sheet: IncidentSheet) -> float:
        parsed = parse_date(sheet.date_incident)
        if parsed is None:
            return math.inf
        return -parsed.replace(tzinfo=None).timestamp()

    return sorted(incidents, key=lambda s: (s.gravite.rank, recency(s)))


def toc_entries(incident_count: int) -> list[tuple[str, str, int]]:
    """Índice con estimación de página (se calcula antes de maquetar)."""
    return [
        ("I", "Objet du rapport", 3),
        ("II", "Faits établis", 3),
        ("III", "Qualification juridique", 4 + math.ceil(incident_count / 3)),
        ("IV", "Preuves documentées", 5 + math.ceil(incident_count / 2)),
        ("V", "Conclusions", 6 + incident_count),
    ]


# =========================================================
# PORTADA E ÍNDICE
# =========================================================


def draw_cover(
    canvas: DocumentCanvas,
    incidents: Sequence[IncidentSheet],
    title: str,
    recipient: str,
    jurisdiction: str,
    period: Optional[tuple[str, str]],
    generated_at: datetime,
) -> None:
    """
    Portada maquetada sobre A4 y escalada a la altura de la página.

    El sello de generación se ancla a safe_max_y: nunca entra en el pie.
    """
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left
    center = geometry.width / 2
    width = geometry.content_width
    scale = min(1.0, geometry.height / 297)
    compact = scale < 0.9

    band = 40 * scale
    canvas.set_fill_color(palette.primary)
    canvas.rect(0, 0, geometry.width, band, fill=True)
    canvas.set_fill_color(palette.legal)
    canvas.rect(0, band, geometry.width, 3, fill=True)

    y = band + 20 * scale
    title_size = 20 if compact else 26
    measure = canvas.measurer("bold", title_size)
    canvas.set_font("bold", title_size)
    canvas.set_text_color(palette.primary)
    for index, line in enumerate(clip_lines(wrap(normalize(title, 120), width, measure), 2, width, measure)):
        if index:
            y += title_size * 0.45
        canvas.text(line, center, y, align="center")

    y += 12 * scale
    measure = canvas.measurer("normal", 14)
    canvas.set_font("normal", 14)
    canvas.set_text_color(palette.secondary)
    jurisdiction_line = (clip_lines(wrap(normalize(jurisdiction, 80), width, measure), 1, width, measure) or [""])[0]
    canvas.text(jurisdiction_line, center, y, align="center")

    y = max(y + 8, band + 70 * scale)
    body_size = 10 if compact else 12
    y = draw_wrapped_text(
        canvas, f"À l'attention de: {recipient}", x, y, width,
        line_height=body_size * 0.45, size=body_size, max_length=200, max_lines=2,
    )
    if period:
        y = draw_wrapped_text(
            canvas, f"Période: du {format_pdf_date(period[0])} au {format_pdf_date(period[1])}",
            x, y + 10 * scale - body_size * 0.45, width, line_height=body_size * 0.45, size=body_size,
        )

    critical = sum(1 for s in incidents if s.gravite == Severity.CRITIQUE)
    high = sum(1 for s in incidents if s.gravite == Severity.HAUTE)
    transmitted = sum(1 for s in incidents if s.transmis_jp)

    box_y = max(y + 5, band + 100 * scale)
    box_height = 50 * scale
    canvas.set_fill_color(palette.background)
    canvas.round_rect(x, box_y, width, box_height, radius=3, fill=True)
    canvas.set_font("bold", 10 if compact else 12)
    canvas.set_text_color(palette.primary)
    canvas.text("SYNTHÈSE DU DOSSIER", x + 5, box_y + 10 * scale)
    canvas.set_font("normal", 8 if compact else 11)
    canvas.set_text_color(palette.text)
    lines = (
        f"• Nombre total d'incidents documentés: {len(incidents)}",
        f"• Incidents de gravité critique: {critical}",
        f"• Incidents de haute gravité: {high}",
        f"• Incidents déjà transmis à la Justice de Paix: {transmitted}",
    )
    for index, line in enumerate(lines):
        canvas.text(line, x + 10, box_y + (20 + index * 7) * scale)

    bottom = canvas.safe_max_y - 12
    canvas.set_font("italic", 9)
    canvas.set_text_color(palette.muted)
    canvas.text(f"Document généré le {format_pdf_datetime(generated_at)}", x, bottom - 8)
    canvas.text("Système d'Audit Juridique - Protection de l'Adulte", x, bottom)
    canvas.track(bottom)


def draw_table_of_contents(canvas: DocumentCanvas, incident_count: int) -> float:
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left

    y = draw_header(canvas, "juridique", "Table des matières")
    for number, title, page in toc_entries(incident_count):
        canvas.set_font("normal", 11)
        canvas.set_text_color(palette.text)
        canvas.text(f"{number}.", x, y)
        canvas.text(title, x + 15, y)

        dots_start = x + 15 + canvas.measure(title) + 5
        canvas.set_dash([1, 2])
        canvas.set_draw_color(palette.light)
        canvas.set_line_width(0.2)
        canvas.line(dots_start, y, geometry.right_edge - 20, y)
        canvas.set_dash(None)

        canvas.set_text_color(palette.text)
        canvas.text(str(page), geometry.right_edge, y, align="right")
        y += 10
    return canvas.track(y)


# =========================================================
# SECCIONES
# =========================================================


def _title(canvas: DocumentCanvas, text: str, y: float, color=None) -> float:
    return draw_section_title(canvas, text, y, color=color, font_size=16)


def _object_section(recipient: str, period: Optional[tuple[str, str]]) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        geometry = canvas.geometry
        y = _title(canvas, "I. OBJET DU RAPPORT", y)
        text = (
            f"Le présent rapport a pour objet de porter à la connaissance de la {recipient} "
            "les dysfonctionnements constatés dans le cadre des mesures de protection de "
            "l'adulte, conformément aux articles 388-456 du Code civil suisse et à la "
            "législation cantonale applicable (LVPAE)."
        )
        y = draw_justified_text(canvas, text, geometry.margin_left, y, geometry.content_width, line_height=5, size=11)
        if period:
            scope = f"Ce rapport couvre la période du {format_pdf_date(period[0])} au {format_pdf_date(period[1])}."
        else:
            scope = "Ce rapport présente l'ensemble des incidents documentés à ce jour."
        y = draw_wrapped_text(canvas, scope, geometry.margin_left, y + 4, geometry.content_width, line_height=5, size=11)
        return canvas.track(y + 10)

    return Section("objet", render)


def draw_established_fact(canvas: DocumentCanvas, y: float, number: int, sheet: IncidentSheet) -> float:
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left

    y = canvas.ensure_space(y, 40)
    canvas.set_font("bold", 11)
    canvas.set_text_color(palette.primary)
    label = f"Fait n°{number}"
    canvas.text(label, x, y)
    draw_severity_badge(canvas, sheet.gravite, y, x=x + canvas.measure(label) + 4, align="left")
    y += 6

    meta = f"Date: {format_pdf_date(sheet.date_incident)} | Institution: {sheet.institution} | Réf: {sheet.reference}"
    y = draw_wrapped_text(canvas, meta, x + 5, y, geometry.content_width - 5, size=8, color=palette.muted)
    y = draw_wrapped_text(canvas, sheet.titre, x + 5, y + 1, geometry.content_width - 5, style="bold", size=10, max_length=200)
    y = draw_justified_text(canvas, sheet.faits, x + 5, y + 1, geometry.content_width - 5, size=10, line_height=5, max_length=3000)

    canvas.set_font("bold", 9)
    y = canvas.ensure_space(y + 2, 10)
    canvas.set_text_color(palette.critique)
    canvas.text("Dysfonctionnement:", x + 5, y)
    y = draw_justified_text(
        canvas, sheet.dysfonctionnement, x + 5, y + 5, geometry.content_width - 5,
        style="italic", size=9, color=palette.text, max_length=2000,
    )
    return canvas.track(y + 8)


def _facts_section(ordered: Sequence[IncidentSheet]) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = _title(canvas, "II. FAITS ÉTABLIS", y)
        if not ordered:
            return draw_placeholder(canvas, y, "Aucun fait établi à ce jour: aucun incident n'a été documenté.")
        for number, sheet in enumerate(ordered, start=1):
            y = draw_established_fact(canvas, y, number, sheet)
        return y

    return Section("faits", render)


def _qualification_section(
    ordered: Sequence[IncidentSheet],
    limit: int,
    references_per_incident: int,
    service: Optional[LegalExplanationService],
) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        geometry = canvas.geometry
        y = canvas.new_page()
        y = _title(canvas, "III. QUALIFICATION JURIDIQUE", y, color=canvas.palette.legal)
        if not ordered:
            return draw_placeholder(canvas, y, "Aucun fait à qualifier.")

        intro = (
            "Chaque fait établi ci-dessus peut être qualifié juridiquement au regard des "
            "dispositions légales applicables. L'analyse qui suit identifie les bases légales "
            "pertinentes et leur application au cas d'espèce."
        )
        y = draw_justified_text(canvas, intro, geometry.margin_left, y, geometry.content_width, size=10, line_height=5)
        y += 6

        for number, sheet in enumerate(ordered[:limit], start=1):
            y = canvas.ensure_space(y, 60)
            canvas.set_font("bold", 10)
            canvas.set_text_color(canvas.palette.primary)
            canvas.text(f"Qualification du Fait n°{number} ({sheet.reference})", geometry.margin_left, y)
            y += 8
            explanations = resolve(
                extract(f"{sheet.faits} {sheet.dysfonctionnement}"),
                sheet.faits,
                sheet.dysfonctionnement,
                sheet.raw_type,
                service=service,
                limit=references_per_incident,
            )
            for explanation in explanations:
                y = draw_legal_box(canvas, y, explanation)

        if len(ordered) > limit:
            y = draw_placeholder(
                canvas, y,
                f"Les {len(ordered) - limit} faits suivants relèvent des mêmes bases légales "
                "et ne sont pas qualifiés individuellement.",
            )
        return y

    return Section("qualification", render)


def _proofs_section(ordered: Sequence[IncidentSheet]) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = _title(canvas, "IV. PREUVES DOCUMENTÉES", y + 4, color=canvas.palette.evidence)
        rows = []
        for sheet in ordered:
            for proof in sheet.preuves:
                rows.append([
                    f"P{len(rows) + 1}", f"#{sheet.numero}", proof.type,
                    proof.label or "Sans description", proof.fingerprint,
                ])
        if not rows:
            return draw_placeholder(canvas, y, "Aucune preuve référencée.")
        return draw_table(canvas, y, PROOF_COLUMNS, rows, header_color=canvas.palette.evidence)

    return Section("preuves", render)


def _conclusions_section(generated_at: datetime) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        geometry = canvas.geometry
        x = geometry.margin_left
        y = canvas.new_page()
        y = _title(canvas, "V. CONCLUSIONS", y)
        text = (
            "Au vu des faits établis et de leur qualification juridique, il apparaît que "
            "plusieurs dysfonctionnements ont été constatés dans l'exercice des mesures de "
            "protection de l'adulte. Ces manquements portent principalement sur le non-respect "
            "des obligations de diligence (art. 406 CC), les violations des garanties de "
            "procédure (art. 29 Cst.) et les défauts d'information (art. 413 CC)."
        )
        y = draw_justified_text(canvas, text, x, y, geometry.content_width, size=11, line_height=5)

        y = canvas.ensure_space(y + 8, 12)
        canvas.set_font("bold", 11)
        canvas.set_text_color(canvas.palette.text)
        canvas.text("Il est respectueusement demandé à l'Autorité:", x, y)
        y += 8
        for number, request in enumerate(REQUESTS, start=1):
            y = draw_wrapped_text(canvas, f"{number}. {request}", x + 5, y, geometry.content_width - 5, size=11, line_height=6)
            y += 2

        y = canvas.ensure_space(y + 12, 30)
        canvas.set_font("normal", 11)
        canvas.set_text_color(canvas.palette.text)
        canvas.text(f"Fait à _________________, le {format_pdf_date(generated_at)}", x, y)
        canvas.text("Signature: _________________________", x, y + 20)
        return canvas.track(y + 26)

    return Section("conclusions", render)


# =========================================================
# COMPOSITOR
# =========================================================


def generate_judicial_dossier(
    incidents: Sequence[IncidentRecord],
    case_name: Optional[str] = None,
    recipient: Optional[str] = None,
    title: str = "DOSSIER JURIDIQUE",
    period: Optional[tuple[str, str]] = None,
    legal_service: Optional[LegalExplanationService] = None,
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> GeneratedDocument:
    """
    Genera el dossier judicial de un conjunto de incidentes.

    Args:
        incidents: Incidentes (puede estar vacío)
        case_name: Identidad del caso para el nombre del fichero
        recipient: Autoridad destinataria (por defecto, la configurada)
        period: (inicio, fin) del periodo cubierto
        legal_service: Servicio de explicaciones; None -> el configurado

    Returns:
        GeneratedDocument ("dossier-juridique-<caso>-AAAA-MM-DD.pdf")
    """
    settings = resolve_settings(settings)
    generated_at = generated_at or datetime.now()
    recipient = recipient or settings.recipient_authority
    sheets = [normalize_incident(incident) for incident in incidents]
    ordered = sort_established_facts(sheets)
    if legal_service is None:
        legal_service = get_legal_explanation_service(settings)

    plan = DocumentPlan()
    plan.add(_object_section(recipient, period))
    plan.add(_facts_section(ordered))
    plan.add(
        _qualification_section(
            ordered,
            settings.judicial_qualification_limit,
            settings.legal_references_per_incident,
            legal_service,
        )
    )
    plan.add(_proofs_section(ordered))
    plan.add(_conclusions_section(generated_at))

    canvas = open_canvas(settings, title)
    draw_cover(canvas, sheets, title, recipient, settings.jurisdiction_label, period, generated_at)
    canvas.new_page()
    draw_table_of_contents(canvas, len(sheets))
    canvas.new_page()
    y = draw_header(canvas, "juridique")
    plan.render(canvas, y)

    return finalize_document(
        canvas,
        "juridique",
        PREFIX,
        case_name or "rapport",
        footer_info=f"{len(sheets)} incident(s) documenté(s)",
        plan=plan,
        generated_at=generated_at,
    )
