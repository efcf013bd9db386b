"""
Rapport hebdomadaire del registro de incidentes.

Estructura:
    portada (periodo y cifras) -> 1. síntesis ejecutiva (KPI)
    -> 2. reparto por gravedad -> 3. análisis por institución
    -> 4. detalle de incidentes -> [anexo A: análisis de hilos]
    -> [anexo B: hechos extraídos de correos] -> anexo C: índice de pruebas
    -> notas y advertencias

Los anexos A y B solo aparecen si hay datos.
"""
from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sentinelle.core.config import Settings
from sentinelle.models.export import GeneratedDocument
from sentinelle.models.factual import EmailFact
from sentinelle.models.incident import NOT_PROVIDED, IncidentSheet, normalize_incident
from sentinelle.models.severity import Severity
from sentinelle.models.weekly import ThreadAnalysis, WeeklyReportData
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import (
    TableColumn,
    draw_header,
    draw_kpi_box,
    draw_progress_bar,
    draw_section_title,
    draw_table,
)
from sentinelle.reports.pdf.sections import Section
from sentinelle.reports.pdf.styles import format_pdf_date, format_pdf_datetime, parse_date, severity_style
from sentinelle.reports.pdf.text import clip_lines, draw_wrapped_text, normalize, wrap
from sentinelle.reports.templates.base import (
    DocumentPlan,
    SectionNumbering,
    draw_numbered_title,
    draw_placeholder,
    finalize_document,
    open_canvas,
    resolve_settings,
)

PREFIX = "rapport-hebdomadaire"

INSTITUTIONS_LIMIT = 10
EMAIL_FACTS_LIMIT = 50
THREAD_CITATIONS_LIMIT = 3

DISCLAIMERS = (
    "Ce rapport est généré automatiquement à partir des données du système de suivi des incidents.",
    "Les analyses automatisées ont une marge d'erreur et doivent être vérifiées manuellement.",
    "Les citations sont extraites automatiquement et peuvent être incomplètes.",
    "Ce document est confidentiel et destiné uniquement aux personnes autorisées.",
    "La curatelle volontaire de gestion et représentation est régie par les articles 394-395 CC.",
    "Toute utilisation à des fins autres que le suivi de la curatelle est interdite.",
)

LEGAL_BASES = (
    "Code civil suisse: Art. 388, 389, 390, 392, 393, 394, 395, 406, 413, 416, 419",
    "Constitution fédérale: Art. 7, 8, 9, 10, 13, 29",
)

PROOF_COLUMNS = (
    TableColumn("N°", 12),
    TableColumn("Incident", 22),
    TableColumn("Type", 24),
    TableColumn("Description", 76, max_length=140),
    TableColumn("Empreinte", 36),
)


# =========================================================
# CIFRAS
# =========================================================


@dataclass(frozen=True)
class WeeklyStats:
    total: int
    by_severity: dict[Severity, int]
    by_institution: list[tuple[str, int]]
    by_status: list[tuple[str, int]]
    by_type: list[tuple[str, int]]

    @property
    def critical(self) -> int:
        return self.by_severity.get(Severity.CRITIQUE, 0)

    @property
    def high(self) -> int:
        return self.by_severity.get(Severity.HAUTE, 0)

    def percent(self, count: int) -> float:
        return count * 100 / self.total if self.total else 0.0


def _ranking(values: Sequence[str]) -> list[tuple[str, int]]:
    """(valor, recuento) de mayor a menor; empate -> orden alfabético."""
    return sorted(Counter(values).items(), key=lambda item: (-item[1], item[0]))


def weekly_stats(sheets: Sequence[IncidentSheet]) -> WeeklyStats:
    """Recuentos de la semana; los valores no informados no cuentan como institución."""
    return WeeklyStats(
        total=len(sheets),
        by_severity=dict(Counter(s.gravite for s in sheets)),
        by_institution=_ranking([s.institution for s in sheets if s.institution != NOT_PROVIDED]),
        by_status=_ranking([s.statut for s in sheets]),
        by_type=_ranking([s.type for s in sheets]),
    )


def sort_weekly_incidents(sheets: Sequence[IncidentSheet]) -> list[IncidentSheet]:
    """Gravedad (más grave primero) y, a igual gravedad, el creado más recientemente."""

    def recency(sheet: IncidentSheet) -> float:
        parsed = parse_date(sheet.date_creation)
        if parsed is None:
            return math.inf
        return -parsed.replace(tzinfo=None).timestamp()

    return sorted(sheets, key=lambda s: (s.gravite.rank, recency(s)))


def period_label(data: WeeklyReportData) -> str:
    return f"{format_pdf_date(data.period_start)} - {format_pdf_date(data.period_end)}"


def period_identity(data: WeeklyReportData) -> str:
    """Identidad del fichero: AAAA-MM-DD-AAAA-MM-DD."""
    days = []
    for value in (data.period_start, data.period_end):
        parsed = parse_date(value)
        days.append(parsed.strftime("%Y-%m-%d") if parsed else value)
    return "-".join(days)


def fit_line(text: str, max_width: float, measure) -> str:
    """Primera línea de `text`, con "..." si no cabe entera."""
    return (clip_lines(wrap(text, max_width, measure), 1, max_width, measure) or [""])[0]


# =========================================================
# PORTADA
# =========================================================


def draw_weekly_cover(
    canvas: DocumentCanvas,
    data: WeeklyReportData,
    stats: WeeklyStats,
    generated_at: datetime,
) -> None:
    """Portada a página completa; posiciones relativas a la altura de la página."""
    palette = canvas.palette
    geometry = canvas.geometry
    center = geometry.width / 2
    scale = min(1.0, geometry.height / 297)
    compact = scale < 0.9

    canvas.set_fill_color(palette.primary)
    canvas.rect(0, 0, geometry.width, geometry.height, fill=True)

    canvas.set_font("bold", 20 if compact else 28)
    canvas.set_text_color(palette.white)
    canvas.text("RAPPORT HEBDOMADAIRE", center, 60 * scale, align="center")
    canvas.set_font("normal", 11 if compact else 14)
    canvas.text("Registre des Incidents - Curatelle", center, 72 * scale, align="center")

    box_y = 90 * scale
    box_x = geometry.margin_left + 10
    canvas.set_fill_color(palette.secondary)
    canvas.round_rect(box_x, box_y, geometry.width - 2 * box_x, 20 * scale, radius=3, fill=True)
    canvas.set_text_color(palette.white)
    canvas.set_font("normal", 9 if compact else 12)
    canvas.text("PÉRIODE ANALYSÉE", center, box_y + 8 * scale, align="center")
    canvas.set_font("bold", 11 if compact else 14)
    canvas.text(period_label(data), center, box_y + 16 * scale, align="center")

    items = (
        ("Incidents analysés", stats.total),
        ("Incidents critiques", stats.critical),
        ("Institutions concernées", len(stats.by_institution)),
        ("Threads analysés", len(data.thread_analyses)),
    )
    left = geometry.margin_left + 15 * scale
    right = geometry.right_edge - 15 * scale
    for index, (label, value) in enumerate(items):
        row_y = (130 + index * 12) * scale
        canvas.set_font("normal", 9 if compact else 10)
        canvas.set_text_color(palette.light)
        canvas.text(label, left, row_y)
        canvas.set_font("bold", 10 if compact else 12)
        canvas.set_text_color(palette.white)
        canvas.text(str(value), right, row_y, align="right")

    canvas.set_font("italic", 9)
    canvas.set_text_color(palette.light)
    canvas.text(f"Généré le {format_pdf_datetime(generated_at)}", center, canvas.safe_max_y - 4, align="center")
    canvas.track(canvas.safe_max_y)


# =========================================================
# SECCIONES
# =========================================================


def _executive_summary(stats: WeeklyStats, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        palette = canvas.palette
        geometry = canvas.geometry
        y = canvas.ensure_space(y, 40)
        y = draw_numbered_title(canvas, numbering, "SYNTHÈSE EXÉCUTIVE", y)
        kpis = (
            ("Total incidents", stats.total, palette.primary),
            ("Critiques", stats.critical, palette.critique),
            ("Haute gravité", stats.high, palette.haute),
            ("Institutions", len(stats.by_institution), palette.primary),
        )
        box_width = (geometry.content_width - 9) / 4
        for index, (label, value, color) in enumerate(kpis):
            draw_kpi_box(canvas, geometry.margin_left + index * (box_width + 3), y, box_width, 22, label, value, color)
        return canvas.track(y + 30)

    return Section("synthese", render)


def _severity_breakdown(stats: WeeklyStats, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        geometry = canvas.geometry
        x = geometry.margin_left
        y = draw_numbered_title(canvas, numbering, "RÉPARTITION PAR GRAVITÉ", y)

        severities = [Severity.CRITIQUE, Severity.HAUTE, Severity.MOYENNE, Severity.FAIBLE]
        if stats.by_severity.get(Severity.UNKNOWN):
            severities.append(Severity.UNKNOWN)
        for severity in severities:
            count = stats.by_severity.get(severity, 0)
            percent = stats.percent(count)
            y = canvas.ensure_space(y, 8)
            canvas.set_font("normal", 9)
            canvas.set_text_color(canvas.palette.text)
            canvas.text(severity.label.capitalize(), x, y)
            canvas.text(f"{count} ({percent:.0f}%)", x + 40, y)
            draw_progress_bar(
                canvas, x + 60, y - 2.5, geometry.content_width - 60, percent,
                severity_style(severity, canvas.palette).color,
            )
            y += 8
        return canvas.track(y + 5)

    return Section("gravite", render)


def _institutions(stats: WeeklyStats, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        palette = canvas.palette
        geometry = canvas.geometry
        x = geometry.margin_left
        y = draw_numbered_title(canvas, numbering, "ANALYSE PAR INSTITUTION", y)
        if not stats.by_institution:
            return draw_placeholder(canvas, y, "Aucune institution renseignée sur la période.")

        bar_x = x + geometry.content_width * 0.47
        bar_width = geometry.content_width * 0.44
        for index, (name, count) in enumerate(stats.by_institution[:INSTITUTIONS_LIMIT], start=1):
            y = canvas.ensure_space(y, 10)
            canvas.set_fill_color(palette.primary)
            canvas.circle(x + 3, y - 1, 3, fill=True)
            canvas.set_font("bold", 7)
            canvas.set_text_color(palette.white)
            canvas.text(str(index), x + 3, y, align="center")

            canvas.set_font("normal", 9)
            measure = canvas.measurer()
            name_width = bar_x - x - 14
            canvas.set_text_color(palette.text)
            canvas.text(fit_line(normalize(name, 60), name_width, measure), x + 10, y)

            draw_progress_bar(canvas, bar_x, y - 2.5, bar_width, stats.percent(count), palette.primary)
            canvas.set_text_color(palette.muted)
            canvas.text(str(count), geometry.right_edge, y, align="right")
            y += 10
        return canvas.track(y + 5)

    return Section("institutions", render)


def draw_incident_card(canvas: DocumentCanvas, y: float, sheet: IncidentSheet) -> float:
    """Tarjeta de incidente: banda de gravedad, título, metadatos, hechos y disfunción."""
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left
    width = geometry.content_width
    color = severity_style(sheet.gravite, palette).color

    title_measure = canvas.measurer("bold", 10)
    title_lines = clip_lines(wrap(normalize(sheet.titre, 200), width - 4, title_measure), 2, width - 4, title_measure)
    meta_measure = canvas.measurer("normal", 8)
    meta = f"Institution: {sheet.institution} | Type: {sheet.type} | Statut: {sheet.statut}"
    meta_lines = clip_lines(wrap(normalize(meta, 240), width - 4, meta_measure), 2, width - 4, meta_measure)
    facts_measure = canvas.measurer("italic", 8)
    facts_lines = []
    if sheet.faits != NOT_PROVIDED:
        quoted = f"« {normalize(sheet.faits, 300)} »"
        facts_lines = clip_lines(wrap(quoted, width - 8, facts_measure), 6, width - 8, facts_measure)
    dysfunction_lines = []
    if sheet.dysfonctionnement != NOT_PROVIDED:
        text = f"Dysfonctionnement: {normalize(sheet.dysfonctionnement, 400)}"
        dysfunction_lines = clip_lines(wrap(text, width - 4, meta_measure), 2, width - 4, meta_measure)

    height = 8 + len(title_lines) * 4.5 + len(meta_lines) * 3.8 + 2
    if facts_lines:
        height += len(facts_lines) * 3.6 + 5
    height += len(dysfunction_lines) * 3.6 + 3
    y = canvas.ensure_space(y, height)

    canvas.set_fill_color(color)
    canvas.round_rect(x, y, width, 6, radius=1, fill=True)
    canvas.set_font("bold", 8)
    canvas.set_text_color(palette.white)
    canvas.text(f"#{sheet.numero} - {sheet.gravite.label}", x + 2, y + 4.2)
    canvas.text(format_pdf_date(sheet.date_creation, "-"), geometry.right_edge - 2, y + 4.2, align="right")

    current = y + 11.5
    canvas.set_font("bold", 10)
    canvas.set_text_color(palette.text)
    for line in title_lines:
        canvas.text(line, x + 2, current)
        current += 4.5

    canvas.set_font("normal", 8)
    canvas.set_text_color(palette.muted)
    for line in meta_lines:
        canvas.text(line, x + 2, current)
        current += 3.8
    current += 1

    if facts_lines:
        box_height = len(facts_lines) * 3.6 + 3
        canvas.set_fill_color(palette.background)
        canvas.round_rect(x + 2, current - 3, width - 4, box_height, radius=1, fill=True)
        canvas.set_font("italic", 8)
        canvas.set_text_color(palette.text)
        for line in facts_lines:
            canvas.text(line, x + 4, current)
            current += 3.6
        current += 4

    canvas.set_font("normal", 8)
    canvas.set_text_color(palette.critique)
    for line in dysfunction_lines:
        canvas.text(line, x + 2, current)
        current += 3.6

    return canvas.track(y + height + 5)


def _incidents(ordered: Sequence[IncidentSheet], numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "DÉTAIL DES INCIDENTS", y)
        if not ordered:
            return draw_placeholder(canvas, y, "Aucun incident enregistré sur la période.")
        for sheet in ordered:
            y = draw_incident_card(canvas, y, sheet)
        return y

    return Section("incidents", render)


def draw_thread_card(canvas: DocumentCanvas, y: float, number: int, thread: ThreadAnalysis) -> float:
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left
    width = geometry.content_width

    summary_measure = canvas.measurer("normal", 8)
    summary_lines = []
    if thread.chronological_summary:
        summary_lines = clip_lines(
            wrap(normalize(thread.chronological_summary, 800), width - 4, summary_measure), 4, width - 4, summary_measure
        )
    citation_measure = canvas.measurer("italic", 7)
    citations = [
        clip_lines(wrap(f"« {normalize(text, 150)} »", width - 8, citation_measure), 2, width - 8, citation_measure)
        for text in thread.citations[:THREAD_CITATIONS_LIMIT]
    ]

    height = 9 + len(summary_lines) * 3.6 + sum(len(lines) * 3 + 1 for lines in citations)
    y = canvas.ensure_space(y, height + 4)

    canvas.set_fill_color(palette.border)
    canvas.round_rect(x, y, width, 6, radius=1, fill=True)
    canvas.set_font("bold", 8)
    canvas.set_text_color(palette.text)
    canvas.text(f"Thread #{number} - {thread.emails_count} emails", x + 2, y + 4.2)
    if thread.severity:
        canvas.text(f"Sévérité: {normalize(thread.severity, 20)}", geometry.right_edge - 2, y + 4.2, align="right")

    current = y + 10
    canvas.set_font("normal", 8)
    for line in summary_lines:
        canvas.text(line, x + 2, current)
        current += 3.6

    canvas.set_font("italic", 7)
    canvas.set_text_color(palette.muted)
    for lines in citations:
        for line in lines:
            canvas.text(line, x + 4, current)
            current += 3
        current += 1

    return canvas.track(y + height + 4)


def _thread_annex(threads: Sequence[ThreadAnalysis]) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = canvas.new_page()
        y = draw_section_title(canvas, "ANNEXE A - ANALYSES DE CONVERSATIONS", y)
        for number, thread in enumerate(threads, start=1):
            y = draw_thread_card(canvas, y, number, thread)
        return y

    return Section("analyses_threads", render)


def draw_email_fact(canvas: DocumentCanvas, y: float, number: int, fact: EmailFact) -> float:
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left
    width = geometry.content_width

    def single_line(text: str, available: float, style: str, size: float) -> str:
        measure = canvas.measurer(style, size)
        return fit_line(normalize(text, 300), available, measure)

    y = canvas.ensure_space(y, 18)
    canvas.set_draw_color(palette.border)
    canvas.set_line_width(0.3)
    canvas.round_rect(x, y, width, 14, radius=1, fill=False, stroke=True)

    canvas.set_font("bold", 8)
    canvas.set_text_color(palette.text)
    canvas.text(f"Email #{number}", x + 2, y + 4)

    if fact.sender_name or fact.sender_email:
        sender = f"De: {fact.sender_name or ''} <{fact.sender_email or ''}>"
        canvas.set_font("normal", 8)
        canvas.set_text_color(palette.muted)
        canvas.text(single_line(sender, width - 27, "normal", 8), x + 25, y + 4)

    if fact.mentioned_institutions:
        institutions = "Institutions: " + ", ".join(fact.mentioned_institutions)
        canvas.set_font("normal", 8)
        canvas.set_text_color(palette.primary)
        canvas.text(single_line(institutions, width - 4, "normal", 8), x + 2, y + 8)

    if fact.key_phrases:
        phrases = normalize(" | ".join(fact.key_phrases[:3]), 100)
        canvas.set_font("normal", 7)
        canvas.set_text_color(palette.text)
        canvas.text(single_line(phrases, width - 4, "normal", 7), x + 2, y + 12)

    return canvas.track(y + 16)


def _email_annex(facts: Sequence[EmailFact]) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = canvas.new_page()
        y = draw_section_title(canvas, "ANNEXE B - FAITS EXTRAITS DES EMAILS", y)
        for number, fact in enumerate(facts[:EMAIL_FACTS_LIMIT], start=1):
            y = draw_email_fact(canvas, y, number, fact)
        return y

    return Section("faits_emails", render)


def _proof_index(ordered: Sequence[IncidentSheet]) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = canvas.new_page()
        y = draw_section_title(canvas, "ANNEXE C - INDEX DES PREUVES", y, color=canvas.palette.evidence)
        rows = []
        for sheet in ordered:
            for proof in sheet.preuves:
                rows.append([
                    f"P{len(rows) + 1}", f"#{sheet.numero}", proof.type,
                    proof.label or "Sans description", proof.fingerprint,
                ])
        if not rows:
            return draw_placeholder(canvas, y, "Aucune preuve référencée sur la période.")
        return draw_table(canvas, y, PROOF_COLUMNS, rows, header_color=canvas.palette.evidence)

    return Section("index_preuves", render)


def _notes() -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        palette = canvas.palette
        geometry = canvas.geometry
        x = geometry.margin_left
        y = canvas.new_page()
        y = draw_section_title(canvas, "NOTES ET AVERTISSEMENTS", y)
        for number, text in enumerate(DISCLAIMERS, start=1):
            y = draw_wrapped_text(canvas, f"{number}. {text}", x + 5, y, geometry.content_width - 10, line_height=4, size=8)
            y += 2

        y = canvas.ensure_space(y + 8, 22)
        canvas.set_fill_color(palette.background)
        canvas.round_rect(x, y, geometry.content_width, 20, radius=2, fill=True)
        canvas.set_font("bold", 9)
        canvas.set_text_color(palette.muted)
        canvas.text("Base légale:", x + 5, y + 6)
        canvas.set_font("normal", 7)
        measure = canvas.measurer()
        for index, line in enumerate(LEGAL_BASES):
            fitted = fit_line(line, geometry.content_width - 10, measure)
            canvas.text(fitted, x + 5, y + 11 + index * 4)
        return canvas.track(y + 24)

    return Section("notes", render)


# =========================================================
# COMPOSITOR
# =========================================================


def generate_weekly_report(
    data: WeeklyReportData,
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> GeneratedDocument:
    """
    Genera el rapport hebdomadaire del periodo.

    Returns:
        GeneratedDocument ("rapport-hebdomadaire-<inicio>-<fin>-AAAA-MM-DD.pdf")
    """
    settings = resolve_settings(settings)
    generated_at = generated_at or datetime.now()

    sheets = [normalize_incident(record) for record in data.incidents]
    ordered = sort_weekly_incidents(sheets)
    stats = weekly_stats(sheets)

    numbering = SectionNumbering()
    plan = DocumentPlan()
    plan.add(_executive_summary(stats, numbering))
    plan.add(_severity_breakdown(stats, numbering))
    plan.add(_institutions(stats, numbering))
    plan.add(_incidents(ordered, numbering))
    if data.thread_analyses:
        plan.add_optional(_thread_annex(data.thread_analyses))
    if data.email_facts:
        plan.add_optional(_email_annex(data.email_facts))
    plan.add(_proof_index(ordered))
    plan.add(_notes())

    canvas = open_canvas(settings, "Rapport hebdomadaire")
    draw_weekly_cover(canvas, data, stats, generated_at)
    canvas.new_page()
    y = draw_header(canvas, "hebdomadaire", f"Période: {period_label(data)}")
    plan.render(canvas, y)

    return finalize_document(
        canvas,
        "hebdomadaire",
        PREFIX,
        period_identity(data),
        footer_info=period_label(data),
        plan=plan,
        generated_at=generated_at,
    )
