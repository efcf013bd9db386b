"""
Dossier factual: solo HECHOS extraídos de la correspondencia, sin
interpretación jurídica.

Secciones: metadatos + aviso, disfunciones por gravedad, cronología de
hechos, actores implicados y estadísticas.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sentinelle.core.config import Settings
from sentinelle.models.export import GeneratedDocument
from sentinelle.models.factual import Actor, Dysfunction, EmailFact, FactualDossierData
from sentinelle.models.severity import Severity
from sentinelle.models.timeline_event import EventType, TimelineEvent
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import TableColumn, draw_header, draw_kpi_box, draw_table
from sentinelle.reports.pdf.sections import Section
from sentinelle.reports.pdf.styles import format_pdf_date, parse_date, severity_style
from sentinelle.reports.pdf.text import clip_lines, draw_wrapped_text, normalize, wrap
from sentinelle.reports.pdf.timeline import render_timeline, sort_events
from sentinelle.reports.templates.base import (
    DocumentPlan,
    SectionNumbering,
    draw_numbered_title,
    draw_placeholder,
    finalize_document,
    open_canvas,
    resolve_settings,
)

PREFIX = "dossier-factuel"

CRITICAL_LIMIT = 10
MEDIUM_LIMIT = 8
LOW_LIMIT = 5
ACTORS_LIMIT = 15

NOTICE = (
    "Ce document présente uniquement des FAITS extraits des emails. Aucune interprétation "
    "juridique. Toutes les informations sont vérifiables par les pièces jointes."
)

ACTOR_COLUMNS = (
    TableColumn("Nom", 50, max_length=40),
    TableColumn("Institution", 55, max_length=45),
    TableColumn("Emails", 18),
    TableColumn("Dysf.", 17),
    TableColumn("Dernier contact", 30),
)


def bucket_dysfunctions(dysfunctions: Sequence[Dysfunction]) -> list[tuple[str, Severity, list[Dysfunction]]]:
    """
    Reparto por gravedad con topes: críticas (critique/haute) <= 10,
    moderadas <= 8, leves (y no clasificadas) <= 5.
    """
    critical = [d for d in dysfunctions if d.severity in (Severity.CRITIQUE, Severity.HAUTE)]
    medium = [d for d in dysfunctions if d.severity == Severity.MOYENNE]
    low = [d for d in dysfunctions if d.severity in (Severity.FAIBLE, Severity.UNKNOWN)]
    return [
        (f"Critiques ({len(critical)})", Severity.CRITIQUE, critical[:CRITICAL_LIMIT]),
        (f"Modérés ({len(medium)})", Severity.MOYENNE, medium[:MEDIUM_LIMIT]),
        (f"Faibles ({len(low)})", Severity.FAIBLE, low[:LOW_LIMIT]),
    ]


def fact_events(facts: Sequence[EmailFact], limit: int) -> list[TimelineEvent]:
    """Los `limit` hechos más recientes, como eventos de cronología."""
    events = [
        TimelineEvent(
            date=fact.received_at,
            title=fact.subject or "(sans objet)",
            description=f'"{fact.raw_citations[0].text}"' if fact.raw_citations else None,
            type=EventType.EMAIL,
            actor=fact.sender,
            origin_id=fact.email_id or fact.id,
        )
        for fact in facts
        if parse_date(fact.received_at) is not None
    ]
    ordered = sort_events(events)
    return ordered[-limit:] if limit else ordered


def sort_actors(actors: Sequence[Actor]) -> list[Actor]:
    return sorted(actors, key=lambda a: -a.dysfunction_count)[:ACTORS_LIMIT]


# =========================================================
# SECCIONES
# =========================================================


def _metadata(data: FactualDossierData, generated_at: datetime) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        palette = canvas.palette
        x = canvas.geometry.margin_left
        stats = data.stats
        period = f"{format_pdf_date(stats.period_start)} au {format_pdf_date(stats.period_end)}"
        rows = (
            ("Date de génération:", format_pdf_date(generated_at)),
            ("Période couverte:", period),
            ("Emails analysés:", str(stats.total_emails)),
            ("Dysfonctionnements:", str(stats.total_dysfunctions)),
        )

        y = canvas.ensure_space(y, 75)
        canvas.set_fill_color(palette.background)
        canvas.round_rect(x, y, canvas.geometry.content_width, 40, radius=3, fill=True)
        row_y = y + 10
        for label, value in rows:
            canvas.set_font("bold", 10)
            canvas.set_text_color(palette.text)
            canvas.text(label, x + 5, row_y)
            canvas.set_font("normal", 10)
            canvas.text(value, x + 60, row_y)
            row_y += 8
        y += 50

        canvas.set_draw_color(palette.critique)
        canvas.set_line_width(1)
        canvas.line(x, y, x + 3, y)
        canvas.set_font("bold", 9)
        canvas.set_text_color(palette.critique)
        canvas.text("IMPORTANT", x + 6, y + 1)
        y = draw_wrapped_text(canvas, NOTICE, x + 6, y + 7, canvas.geometry.content_width - 10, size=9)
        return canvas.track(y + 8)

    return Section("metadonnees", render)


def draw_dysfunction(canvas: DocumentCanvas, y: float, dysfunction: Dysfunction, color) -> float:
    x = canvas.geometry.margin_left
    width = canvas.geometry.content_width - 25

    measure = canvas.measurer("normal", 9)
    lines = clip_lines(
        wrap(normalize(dysfunction.description or "Non renseigné", 400), width, measure),
        canvas.page_lines(4, reserved=6), width, measure,
    )
    y = canvas.ensure_space(y, len(lines) * 4 + 4)

    canvas.set_fill_color(color)
    canvas.circle(x + 1.5, y - 1, 1.2, fill=True)
    canvas.set_font("bold", 8)
    canvas.set_text_color(canvas.palette.muted)
    canvas.text(f"[{format_pdf_date(dysfunction.date, 'N/A')}]", x + 4, y)

    canvas.set_font("normal", 9)
    canvas.set_text_color(canvas.palette.text)
    for index, line in enumerate(lines):
        canvas.text(line, x + 25, y + index * 4)
    return canvas.track(y + len(lines) * 4 + 2)


def _dysfunctions(data: FactualDossierData, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "DYSFONCTIONNEMENTS CONSTATÉS", y)
        if not data.dysfunctions:
            return draw_placeholder(canvas, y, "Aucun dysfonctionnement constaté.")
        for heading, severity, items in bucket_dysfunctions(data.dysfunctions):
            if not items:
                continue
            color = severity_style(severity, canvas.palette).color
            y = canvas.ensure_space(y, 14)
            canvas.set_font("bold", 10)
            canvas.set_text_color(color)
            canvas.text(heading, canvas.geometry.margin_left, y)
            y += 6
            for dysfunction in items:
                y = draw_dysfunction(canvas, y, dysfunction, color)
            y += 4
        return canvas.track(y)

    return Section("dysfonctionnements", render)


def _chronology(data: FactualDossierData, numbering: SectionNumbering, limit: int) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "CHRONOLOGIE DES FAITS", y)
        events = fact_events(data.facts, limit)
        if not events:
            return draw_placeholder(canvas, y, "Aucun fait daté disponible.")
        return render_timeline(canvas, events, y, title=f"{len(events)} faits les plus récents")

    return Section("chronologie", render)


def _actors(data: FactualDossierData, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "ACTEURS IMPLIQUÉS", y)
        if not data.actors:
            return draw_placeholder(canvas, y, "Aucun acteur identifié.")
        rows = [
            [
                actor.name,
                actor.institution or "-",
                str(actor.email_count),
                str(actor.dysfunction_count),
                format_pdf_date(actor.last_contact, "-"),
            ]
            for actor in sort_actors(data.actors)
        ]
        return draw_table(canvas, y, ACTOR_COLUMNS, rows)

    return Section("acteurs", render)


def _statistics(data: FactualDossierData, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        palette = canvas.palette
        geometry = canvas.geometry
        stats = data.stats
        critical = sum(1 for d in data.dysfunctions if d.severity in (Severity.CRITIQUE, Severity.HAUTE))
        medium = sum(1 for d in data.dysfunctions if d.severity == Severity.MOYENNE)

        y = canvas.ensure_space(y, 70)
        y = draw_numbered_title(canvas, numbering, "STATISTIQUES", y)

        kpis = (
            ("Emails analysés", stats.total_emails, palette.primary),
            ("Faits extraits", stats.total_facts, palette.evidence),
            ("Dysfonctionnements", stats.total_dysfunctions, palette.critique),
        )
        box_width = (geometry.content_width - 10) / 3
        for index, (label, value, color) in enumerate(kpis):
            draw_kpi_box(canvas, geometry.margin_left + index * (box_width + 5), y, box_width, 22, label, value, color)
        y += 30

        rows = [
            ("Dont critiques", str(critical)),
            ("Dont modérés", str(medium)),
            ("Acteurs identifiés", str(len(data.actors))),
        ]
        if stats.avg_response_days is not None:
            rows.append(("Délai moyen de réponse", f"{stats.avg_response_days:.1f} jours"))
        for label, value in rows:
            y = canvas.ensure_space(y, 7)
            canvas.set_font("normal", 10)
            canvas.set_text_color(palette.text)
            canvas.text(label, geometry.margin_left, y)
            canvas.set_font("bold", 10)
            canvas.text(value, geometry.margin_left + 80, y)
            y += 7
        return canvas.track(y + 4)

    return Section("statistiques", render)


# =========================================================
# COMPOSITOR
# =========================================================


def generate_factual_dossier(
    data: FactualDossierData,
    case_name: Optional[str] = None,
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> GeneratedDocument:
    """
    Genera el dossier factual.

    Returns:
        GeneratedDocument ("dossier-factuel-<caso>-AAAA-MM-DD.pdf")
    """
    settings = resolve_settings(settings)
    generated_at = generated_at or datetime.now()

    numbering = SectionNumbering()
    plan = DocumentPlan()
    plan.add(_metadata(data, generated_at))
    plan.add(_dysfunctions(data, numbering))
    plan.add(_chronology(data, numbering, settings.factual_timeline_limit))
    plan.add(_actors(data, numbering))
    plan.add(_statistics(data, numbering))

    canvas = open_canvas(settings, "Dossier factuel")
    y = draw_header(canvas, "factuel", "Faits extraits de la correspondance")
    plan.render(canvas, y)

    return finalize_document(
        canvas,
        "factuel",
        PREFIX,
        case_name or "faits",
        footer_info=format_pdf_date(generated_at),
        plan=plan,
        generated_at=generated_at,
    )
