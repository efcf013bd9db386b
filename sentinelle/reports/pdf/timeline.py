"""
Cronología visual para los exportes PDF.

Cada evento es un nodo (círculo hueco) sobre una línea vertical, con la fecha
a la izquierda, una insignia de tipo, el título, el actor y hasta dos líneas
de descripción. Un nodo nunca se parte entre dos páginas.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from reportlab.lib.colors import Color

from sentinelle.models.incident import EmailRecord
from sentinelle.models.severity import Severity
from sentinelle.models.timeline_event import EventType, TimelineEvent
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.styles import Palette, format_pdf_date, parse_date, severity_style
from sentinelle.reports.pdf.text import normalize, wrap

NODE_RADIUS = 4
NODE_SPACING = 25
LINE_OFFSET = 30

EVENT_TYPE_LABELS = {
    EventType.EMAIL: "EMAIL",
    EventType.INCIDENT: "INCIDENT",
    EventType.EVENT: "EVENEMENT",
    EventType.DEADLINE: "DELAI",
    EventType.PROMISE: "ENGAGEMENT",
    EventType.CONTRADICTION: "CONTRADICTION",
}

LEGEND = [
    (EventType.EMAIL, "Email"),
    (EventType.INCIDENT, "Incident"),
    (EventType.EVENT, "Evénement"),
    (EventType.DEADLINE, "Délai"),
    (EventType.PROMISE, "Engagement"),
    (EventType.CONTRADICTION, "Contradiction"),
]


def event_type_color(event_type: EventType, palette: Palette) -> Color:
    return {
        EventType.EMAIL: palette.primary,
        EventType.INCIDENT: palette.critique,
        EventType.EVENT: palette.evidence,
        EventType.DEADLINE: palette.haute,
        EventType.PROMISE: palette.faible,
        EventType.CONTRADICTION: palette.critique,
    }.get(event_type, palette.secondary)


def node_color(event: TimelineEvent, palette: Palette) -> Color:
    """La gravedad, si existe, manda sobre el color del tipo."""
    if event.severity is not None and event.severity != Severity.UNKNOWN:
        return severity_style(event.severity, palette).color
    return event_type_color(event.type, palette)


def _sort_key(indexed: tuple[int, TimelineEvent]) -> tuple:
    index, event = indexed
    parsed = parse_date(event.date)
    if parsed is None:
        return (1, datetime.min, index)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return (0, parsed, index)


def sort_events(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    """
    Orden cronológico ascendente y estable.

    Las fechas no interpretables van al final, en su orden de entrada.
    """
    return [event for _, event in sorted(enumerate(events), key=_sort_key)]


# =========================================================
# NODO
# =========================================================


@dataclass(frozen=True)
class NodeLayout:
    """Medidas precalculadas de un nodo (para reservar su altura completa)."""

    title_lines: list[str]
    actor: Optional[str]
    description_lines: list[str]
    badge_label: str
    badge_width: float
    height: float


def measure_node(canvas: DocumentCanvas, x: float, event: TimelineEvent) -> NodeLayout:
    right_edge = canvas.geometry.right_edge
    label = EVENT_TYPE_LABELS.get(event.type, "FAIT")
    badge_width = canvas.measure(label, "bold", 6) + 4

    title_x = x + 8 + badge_width + 4
    title_lines = wrap(
        normalize(event.title, 80), right_edge - title_x, canvas.measurer("bold", 9)
    )[:2] or [""]

    actor = normalize(event.actor, 50) if event.actor else None
    description_lines: list[str] = []
    if event.description:
        description_lines = wrap(
            normalize(event.description, 150), right_edge - (x + 8), canvas.measurer("normal", 8)
        )[:2]

    current = 4 + (len(title_lines) - 1) * 4
    if actor:
        current += 5
    current += len(description_lines) * 4
    height = max(NODE_SPACING, current + 8)
    return NodeLayout(
        title_lines=title_lines,
        actor=actor,
        description_lines=description_lines,
        badge_label=label,
        badge_width=badge_width,
        height=height,
    )


def draw_timeline_node(
    canvas: DocumentCanvas,
    x: float,
    y: float,
    event: TimelineEvent,
    is_last: bool,
    layout: NodeLayout,
) -> float:
    """
    Dibuja un nodo centrado en (x, y).

    Returns:
        Altura ocupada por el nodo
    """
    palette = canvas.palette
    color = node_color(event, palette)

    if not is_last:
        canvas.set_draw_color(palette.secondary)
        canvas.set_line_width(0.5)
        canvas.line(x, y + NODE_RADIUS, x, y + layout.height)

    # Círculo hueco con punto central
    canvas.set_fill_color(color)
    canvas.circle(x, y, NODE_RADIUS, fill=True)
    canvas.set_fill_color(palette.white)
    canvas.circle(x, y, NODE_RADIUS - 1.5, fill=True)
    canvas.set_fill_color(color)
    canvas.circle(x, y, 1.5, fill=True)

    canvas.set_font("bold", 8)
    canvas.set_text_color(palette.muted)
    canvas.text(format_pdf_date(event.date, "Date inconnue"), x - 5, y + 1, align="right")

    canvas.set_fill_color(color)
    canvas.round_rect(x + 8, y - 4, layout.badge_width, 6, radius=1, fill=True)
    canvas.set_font("bold", 6)
    canvas.set_text_color(palette.white)
    canvas.text(layout.badge_label, x + 10, y)

    canvas.set_font("bold", 9)
    canvas.set_text_color(palette.text)
    title_x = x + 8 + layout.badge_width + 4
    for index, line in enumerate(layout.title_lines):
        canvas.text(line, title_x, y + index * 4)
    current = y + 4 + (len(layout.title_lines) - 1) * 4

    if layout.actor:
        canvas.set_font("italic", 7)
        canvas.set_text_color(palette.secondary)
        canvas.text(f"Par: {layout.actor}", x + 8, current + 3)
        current += 5

    if layout.description_lines:
        canvas.set_font("normal", 8)
        canvas.set_text_color(palette.text)
        for index, line in enumerate(layout.description_lines):
            canvas.text(line, x + 8, current + 4 + index * 4)

    return layout.height


# =========================================================
# CRONOLOGÍA
# =========================================================


def render_timeline(
    canvas: DocumentCanvas,
    events: Sequence[TimelineEvent],
    y: float,
    title: str = "CHRONOLOGIE DES EVENEMENTS",
    limit: Optional[int] = None,
) -> float:
    """
    Dibuja la cronología completa.

    Args:
        events: Eventos en cualquier orden
        limit: Máximo de eventos (los primeros en orden cronológico)

    Returns:
        Y tras la cronología (sin cambios si no hay eventos)
    """
    if not events:
        return y

    palette = canvas.palette
    geometry = canvas.geometry
    ordered = sort_events(events)
    if limit is not None:
        ordered = ordered[:limit]

    y = canvas.ensure_space(y, 60)
    heading = normalize(title)
    canvas.set_font("bold", 12)
    canvas.set_text_color(palette.primary)
    canvas.text(heading, geometry.margin_left, y)
    canvas.set_draw_color(palette.primary)
    canvas.set_line_width(0.5)
    canvas.line(geometry.margin_left, y + 2, geometry.margin_left + canvas.measure(heading), y + 2)
    y += 12

    legend_x = geometry.margin_left
    canvas.set_font("normal", 7)
    for event_type, label in LEGEND:
        # En formatos estrechos la leyenda pasa a una segunda fila
        if legend_x + canvas.measure(label) + 6 > geometry.right_edge:
            legend_x = geometry.margin_left
            y += 6
        canvas.set_fill_color(event_type_color(event_type, palette))
        canvas.circle(legend_x + 2, y, 2, fill=True)
        canvas.set_text_color(palette.text)
        canvas.text(label, legend_x + 6, y + 1)
        legend_x += canvas.measure(label) + 15
    y += 10

    line_x = geometry.margin_left + LINE_OFFSET
    for index, event in enumerate(ordered):
        layout = measure_node(canvas, line_x, event)
        y = canvas.ensure_space(y, layout.height)
        y += draw_timeline_node(canvas, line_x, y, event, index == len(ordered) - 1, layout)

    return canvas.track(y + 10)


# =========================================================
# CONSTRUCTORES DE EVENTOS
# =========================================================


def _item_text(item: Any, *keys: str) -> str:
    if isinstance(item, dict):
        for key in keys:
            if item.get(key):
                return str(item[key])
        return ""
    return str(item)


def events_from_emails(emails: Iterable[EmailRecord]) -> list[TimelineEvent]:
    """
    Un evento por correo, más compromisos, plazos y contradicciones
    detectados por el análisis (máximo dos de cada).
    """
    events: list[TimelineEvent] = []
    for email in emails:
        if not email.timestamp:
            continue
        events.append(
            TimelineEvent(
                date=email.timestamp,
                title=normalize(email.subject or "(sans objet)", 60),
                type=EventType.EMAIL,
                actor=email.sender,
                origin_id=email.id,
            )
        )

        analysis = email.analysis or {}
        for commitment in (analysis.get("commitments") or [])[:2]:
            deadline = commitment.get("deadline") if isinstance(commitment, dict) else None
            events.append(
                TimelineEvent(
                    date=email.timestamp,
                    title=normalize(_item_text(commitment, "text"), 60),
                    description=f"Délai: {deadline}" if deadline else None,
                    type=EventType.PROMISE,
                    actor=email.sender,
                    origin_id=email.id,
                )
            )
        for deadline in (analysis.get("deadlines") or [])[:2]:
            deadline_date = deadline.get("date") if isinstance(deadline, dict) else None
            events.append(
                TimelineEvent(
                    date=deadline_date or email.timestamp,
                    title=normalize(_item_text(deadline, "description"), 60),
                    type=EventType.DEADLINE,
                    severity=Severity.HAUTE,
                    origin_id=email.id,
                )
            )
        for contradiction in (analysis.get("contradictions") or [])[:2]:
            actor = contradiction.get("actor") if isinstance(contradiction, dict) else None
            events.append(
                TimelineEvent(
                    date=email.timestamp,
                    title=normalize(_item_text(contradiction, "summary"), 60),
                    type=EventType.CONTRADICTION,
                    severity=Severity.CRITIQUE,
                    actor=actor,
                    origin_id=email.id,
                )
            )
    return sort_events(events)


def events_from_incidents(incidents: Iterable[Any]) -> list[TimelineEvent]:
    """Un evento por incidente: "#42 - titre", con la gravedad del incidente."""
    return [
        TimelineEvent(
            date=incident.date_incident or "",
            title=f"#{incident.numero} - {normalize(incident.titre or 'Sans titre', 50)}",
            type=EventType.INCIDENT,
            severity=incident.gravite,
            actor=getattr(incident, "institution", None),
            origin_id=incident.id,
        )
        for incident in incidents
    ]


def events_from_manual_events(events: Iterable[dict[str, Any]]) -> list[TimelineEvent]:
    """Eventos introducidos a mano (title, event_date, description, ai_analysis)."""
    result = []
    for event in events:
        analysis = event.get("ai_analysis") or {}
        description = event.get("description")
        result.append(
            TimelineEvent(
                date=event.get("event_date") or "",
                title=normalize(event.get("title") or "Evénement", 60),
                description=normalize(description, 100) if description else None,
                type=EventType.EVENT,
                severity=analysis.get("severity") if isinstance(analysis, dict) else None,
                origin_id=event.get("id"),
            )
        )
    return result
