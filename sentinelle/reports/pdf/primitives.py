"""
Primitivas de dibujo reutilizables por todas las plantillas.

Convención: cada primitiva recibe la Y actual (mm desde arriba) y devuelve
la Y siguiente; los saltos de página se insertan con canvas.ensure_space.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from reportlab.lib.colors import Color

from sentinelle.models.legal import LegalExplanation
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.styles import document_type_config, palette_color
from sentinelle.reports.pdf.text import (
    clip_lines,
    draw_justified_text_block,
    draw_wrapped_text,
    normalize,
    wrap,
)

# =========================================================
# CABECERA, TÍTULOS Y PIES DE PÁGINA
# =========================================================


def draw_header(
    canvas: DocumentCanvas,
    doctype: str,
    subtitle: Optional[str] = None,
    number: Optional[str] = None,
) -> float:
    """
    Cabecera de la primera página: banda de color, título, subtítulo y filete.

    Returns:
        Y tras la cabecera
    """
    config = document_type_config(doctype)
    geometry = canvas.geometry
    header_color = palette_color(canvas.palette, config.header_color)

    canvas.set_fill_color(header_color)
    canvas.rect(0, 0, geometry.width, 12, fill=True)

    title = config.title
    if number:
        title += f" #{number}"
    canvas.set_font("bold", 22)
    canvas.set_text_color(header_color)
    canvas.text(title, geometry.margin_left, 28)

    line_y = 34
    if subtitle:
        y = draw_wrapped_text(
            canvas, subtitle, geometry.margin_left, 36, geometry.content_width,
            line_height=5, size=12, color=canvas.palette.secondary, max_length=200,
        )
        line_y = max(42, y + 1)

    canvas.set_draw_color(header_color)
    canvas.set_line_width(0.5)
    canvas.line(geometry.margin_left, line_y, geometry.right_edge, line_y)
    return canvas.track(line_y + 10)


def draw_section_title(
    canvas: DocumentCanvas,
    text: str,
    y: float,
    numbered: bool = False,
    number: Optional[object] = None,
    color: Optional[Color] = None,
    font_size: float = 14,
    underline: bool = True,
) -> float:
    """Título de sección ("3. BASES LÉGALES") con subrayado opcional."""
    color = color or canvas.palette.primary
    y = canvas.ensure_space(y, 20)

    label = normalize(text)
    if numbered and number is not None:
        label = f"{number}. {label}"

    canvas.set_font("bold", font_size)
    canvas.set_text_color(color)
    x = canvas.geometry.margin_left
    canvas.text(label, x, y)

    if underline:
        width = min(canvas.measure(label), canvas.geometry.content_width)
        canvas.set_draw_color(color)
        canvas.set_line_width(0.3)
        canvas.line(x, y + 1.5, x + width, y + 1.5)

    return canvas.track(y + 8)


def draw_footers_on_all_pages(
    canvas: DocumentCanvas,
    doctype: str,
    info: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> int:
    """
    Pasada final: filete, nota de confidencialidad, info central,
    "Page i/N" y sello de generación en cada página.

    Tras esta llamada el lienzo queda cerrado.

    Returns:
        Número total de páginas
    """
    config = document_type_config(doctype)
    stamp = (generated_at or datetime.now()).strftime("Généré le %d.%m.%Y à %H:%M")
    center_text = normalize(info, 70) if info else None

    def paint(target: DocumentCanvas, page_number: int, total: int) -> None:
        geometry = target.geometry
        palette = target.palette
        footer_y = geometry.footer_y

        target.set_draw_color(palette.border)
        target.set_line_width(0.3)
        target.line(geometry.margin_left, footer_y - 5, geometry.right_edge, footer_y - 5)

        target.set_font("italic", 7)
        target.set_text_color(palette.muted)
        target.text(config.confidential_note, geometry.margin_left, footer_y)
        if center_text:
            target.text(center_text, geometry.width / 2, footer_y, align="center")

        target.set_font("normal", 7)
        target.text(f"Page {page_number}/{total}", geometry.right_edge, footer_y, align="right")
        target.text(stamp, geometry.right_edge, footer_y + 4, align="right")

    return canvas.finalize(paint)


# =========================================================
# BLOQUES DE INFORMACIÓN
# =========================================================


@dataclass(frozen=True)
class InfoRow:
    label: str
    value: str
    highlight: bool = False
    color: Optional[Color] = None


def draw_info_table(canvas: DocumentCanvas, y: float, rows: Sequence[InfoRow]) -> float:
    """
    Tabla etiqueta/valor (valor con corte de línea).

    Un valor largo sigue en la página siguiente línea a línea; la etiqueta
    se repite al principio de cada página que ocupa.
    """
    palette = canvas.palette
    x = canvas.geometry.margin_left
    value_width = canvas.geometry.content_width - 50
    line_height = 5

    def draw_label(label: str, at: float) -> None:
        canvas.set_font("bold", 10)
        canvas.set_text_color(palette.secondary)
        canvas.text(label, x + 5, at)

    for row in rows:
        canvas.set_font("normal", 10)
        lines = wrap(normalize(row.value), value_width, canvas.measurer()) or [""]
        label = f"{normalize(row.label)}:"
        if row.color is not None:
            value_color = row.color
        elif row.highlight:
            value_color = palette.primary
        else:
            value_color = palette.text

        # Las filas cortas no se parten
        y = canvas.ensure_space(y, min(len(lines), 3) * line_height + 2)
        draw_label(label, y)
        for index, line in enumerate(lines):
            if index:
                before = canvas.cursor.page
                y = canvas.ensure_space(y, line_height)
                if canvas.cursor.page != before:
                    draw_label(label, y)
            canvas.set_font("normal", 10)
            canvas.set_text_color(value_color)
            canvas.text(line, x + 50, y)
            y += line_height
        y += 2

    return canvas.track(y + 5)


def draw_badge(
    canvas: DocumentCanvas,
    label: str,
    x: float,
    y: float,
    color: Color,
    align: str = "left",
    size: float = 8,
) -> float:
    """
    Insignia de color con texto blanco; `y` es la línea base del texto.

    Returns:
        Ancho de la insignia en mm
    """
    text = normalize(label)
    canvas.set_font("bold", size)
    width = canvas.measure(text) + 6
    left = x - width if align == "right" else x

    canvas.set_fill_color(color)
    canvas.round_rect(left, y - 4.5, width, 6.5, radius=1.5, fill=True)
    canvas.set_text_color(canvas.palette.white)
    canvas.text(text, left + 3, y)
    return width


def draw_legal_box(canvas: DocumentCanvas, y: float, explanation: LegalExplanation) -> float:
    """
    Recuadro de base legal: cabecera "CC art. 406 - Titre", texto del artículo
    y, si existe, "Application au cas présent".

    Las explicaciones no verificadas se pintan atenuadas.
    """
    palette = canvas.palette
    geometry = canvas.geometry
    x = geometry.margin_left
    inner_width = geometry.content_width - 15

    accent = palette.legal if explanation.verified else palette.light
    body_color = palette.text if explanation.verified else palette.muted

    text_measure = canvas.measurer("normal", 9)
    context_measure = canvas.measurer("italic", 9)
    text_lines = wrap(normalize(explanation.text, 900), inner_width, text_measure)
    context_lines = []
    if explanation.context_explanation:
        context_lines = wrap(
            normalize(explanation.context_explanation, 700), inner_width, context_measure
        )

    # El recuadro es atómico: debe caber entero en una página vacía
    budget = canvas.page_lines(4, reserved=20 + (15 if context_lines else 0) + 8)
    if context_lines:
        text_budget = budget - min(len(context_lines), budget // 2)
        text_lines = clip_lines(text_lines, max(1, text_budget), inner_width, text_measure)
        context_lines = clip_lines(
            context_lines, max(1, budget - len(text_lines)), inner_width, context_measure
        )
    else:
        text_lines = clip_lines(text_lines, budget, inner_width, text_measure)

    box_height = 20 + len(text_lines) * 4
    if context_lines:
        box_height += 15 + len(context_lines) * 4
    y = canvas.ensure_space(y, box_height)

    canvas.set_fill_color(palette.background)
    canvas.round_rect(x, y, geometry.content_width, box_height, radius=2, fill=True)
    canvas.set_fill_color(accent)
    canvas.rect(x, y, 3, box_height, fill=True)

    current = y + 6
    header = f"{explanation.code} art. {explanation.article}"
    if explanation.title:
        header += f" - {explanation.title}"
    if not explanation.verified:
        header += " (non vérifié)"
    canvas.set_font("bold", 10)
    canvas.set_text_color(palette.legal if explanation.verified else palette.muted)
    canvas.text(normalize(header, 95), x + 8, current)

    current += 8
    canvas.set_font("normal", 9)
    canvas.set_text_color(body_color)
    for line in text_lines:
        canvas.text(line, x + 8, current)
        current += 4
    current += 2

    if context_lines:
        current += 3
        canvas.set_font("bolditalic", 9)
        canvas.set_text_color(palette.secondary)
        canvas.text("Application au cas présent :", x + 8, current)
        current += 5
        canvas.set_font("italic", 9)
        for line in context_lines:
            canvas.text(line, x + 8, current)
            current += 4

    return canvas.track(y + box_height + 8)


def draw_citation(
    canvas: DocumentCanvas,
    y: float,
    number: int,
    text: str,
    source: Optional[str] = None,
) -> float:
    """Cita numerada: [n] "texto" - fuente. Las citas largas siguen en la página siguiente."""
    palette = canvas.palette
    x = canvas.geometry.margin_left
    width = canvas.geometry.content_width - 25

    canvas.set_font("italic", 9)
    lines = wrap(f'"{normalize(text, 600)}"', width, canvas.measurer())
    y = canvas.ensure_space(y, min(len(lines), 4) * 4 + (6 if source else 0) + 5)

    canvas.set_font("bold", 8)
    canvas.set_text_color(palette.evidence)
    canvas.text(f"[{number}]", x + 5, y)

    current = y
    for index, line in enumerate(lines):
        if index:
            current = canvas.ensure_space(current, 4)
        canvas.set_font("italic", 9)
        canvas.set_text_color(palette.text)
        canvas.text(line, x + 15, current)
        current += 4

    if source:
        current = canvas.ensure_space(current, 6)
        canvas.set_font("normal", 7)
        canvas.set_text_color(palette.muted)
        canvas.text(f"- {normalize(source, 110)}", x + 15, current + 3)
        current += 6

    return canvas.track(current + 5)


@dataclass(frozen=True)
class TableColumn:
    header: str
    width: float
    max_length: Optional[int] = None


def _draw_table_header(canvas: DocumentCanvas, y: float, columns: Sequence[TableColumn], color: Color) -> float:
    palette = canvas.palette
    x = canvas.geometry.margin_left
    canvas.set_fill_color(palette.background)
    canvas.rect(x, y - 4.5, canvas.geometry.content_width, 7, fill=True)
    canvas.set_font("bold", 9)
    canvas.set_text_color(color)
    for column in columns:
        canvas.text(column.header, x + 2, y)
        x += column.width
    canvas.set_draw_color(palette.border)
    canvas.set_line_width(0.3)
    canvas.line(canvas.geometry.margin_left, y + 2.5, canvas.geometry.right_edge, y + 2.5)
    return y + 7


def draw_table(
    canvas: DocumentCanvas,
    y: float,
    columns: Sequence[TableColumn],
    rows: Sequence[Sequence[str]],
    header_color: Optional[Color] = None,
    row_colors: Optional[Sequence[Optional[Color]]] = None,
    font_size: float = 8,
) -> float:
    """
    Tabla simple: cabecera, filete y una fila por registro.

    Cada fila es atómica para el salto de página; la cabecera se repite
    en la página nueva.
    """
    palette = canvas.palette
    header_color = header_color or palette.primary
    line_height = 3.8

    y = canvas.ensure_space(y, 16)
    y = _draw_table_header(canvas, y, columns, header_color)
    # Una fila nunca supera lo que cabe bajo la cabecera de una página nueva
    max_lines = canvas.page_lines(line_height, reserved=12)

    for index, row in enumerate(rows):
        canvas.set_font("normal", font_size)
        measure = canvas.measurer()
        cells = [
            clip_lines(
                wrap(normalize(value, column.max_length), column.width - 4, measure) or [""],
                max_lines,
                column.width - 4,
                measure,
            )
            for column, value in zip(columns, row)
        ]
        row_height = max(len(cell) for cell in cells) * line_height + 2.5
        before = canvas.cursor.page
        y = canvas.ensure_space(y, row_height)
        if canvas.cursor.page != before:
            y = _draw_table_header(canvas, y, columns, header_color)

        color = row_colors[index] if row_colors and index < len(row_colors) else None
        canvas.set_font("normal", font_size)
        canvas.set_text_color(color or palette.text)
        x = canvas.geometry.margin_left
        for column, cell in zip(columns, cells):
            for line_index, line in enumerate(cell):
                canvas.text(line, x + 2, y + line_index * line_height)
            x += column.width

        canvas.set_draw_color(palette.border)
        canvas.set_line_width(0.1)
        canvas.line(
            canvas.geometry.margin_left, y + row_height - 3,
            canvas.geometry.right_edge, y + row_height - 3,
        )
        y += row_height

    return canvas.track(y + 4)


def draw_text_box(
    canvas: DocumentCanvas,
    y: float,
    text: Optional[str],
    label: Optional[str] = None,
    bar_color: Optional[Color] = None,
    max_length: Optional[int] = None,
) -> float:
    """Recuadro de texto justificado, con rótulo opcional encima."""
    if label:
        y = canvas.ensure_space(y, 14)
        canvas.set_font("bold", 9)
        canvas.set_text_color(bar_color or canvas.palette.secondary)
        canvas.text(normalize(label), canvas.geometry.margin_left, y)
        y += 3
    return draw_justified_text_block(
        canvas, text, y, border=bar_color, max_length=max_length
    )


def draw_kpi_box(
    canvas: DocumentCanvas,
    x: float,
    y: float,
    width: float,
    height: float,
    label: str,
    value: object,
    color: Optional[Color] = None,
) -> None:
    """Indicador numérico (no mueve la Y: el llamador reserva el espacio)."""
    palette = canvas.palette
    color = color or palette.primary

    canvas.set_fill_color(palette.background)
    canvas.round_rect(x, y, width, height, radius=2, fill=True)
    canvas.set_fill_color(color)
    canvas.rect(x, y, width, 3, fill=True)

    canvas.set_font("bold", 18)
    canvas.set_text_color(color)
    canvas.text(str(value), x + width / 2, y + height / 2 + 3, align="center")

    canvas.set_font("normal", 8)
    canvas.set_text_color(palette.muted)
    canvas.text(normalize(label, 30), x + width / 2, y + height - 4, align="center")


def draw_progress_bar(
    canvas: DocumentCanvas,
    x: float,
    y: float,
    width: float,
    percent: float,
    color: Color,
    height: float = 3,
) -> None:
    """Barra de proporción; `percent` se acota a 0-100."""
    canvas.set_fill_color(canvas.palette.border)
    canvas.round_rect(x, y, width, height, radius=1, fill=True)
    filled = width * max(0.0, min(percent, 100.0)) / 100
    if filled > 0:
        canvas.set_fill_color(color)
        canvas.round_rect(x, y, filled, height, radius=min(1, filled / 2), fill=True)


DEFAULT_DISCLAIMER = (
    "Ce document a été généré automatiquement à partir des données saisies. "
    "Les bases légales et explications sont fournies à titre indicatif et ne "
    "remplacent pas l'avis d'un professionnel du droit. Les empreintes des "
    "preuves permettent d'identifier les pièces; elles ne constituent pas une "
    "signature cryptographique."
)


def draw_disclaimer(
    canvas: DocumentCanvas,
    y: float,
    text: str = DEFAULT_DISCLAIMER,
    title: str = "AVERTISSEMENT",
) -> float:
    """Aviso legal al pie del documento."""
    palette = canvas.palette
    x = canvas.geometry.margin_left
    width = canvas.geometry.content_width

    canvas.set_font("italic", 8)
    lines = wrap(normalize(text), width - 10, canvas.measurer())
    height = 12 + len(lines) * 3.8
    y = canvas.ensure_space(y + 4, height)

    canvas.set_draw_color(palette.border)
    canvas.set_line_width(0.3)
    canvas.round_rect(x, y, width, height, radius=2, fill=False, stroke=True)

    canvas.set_font("bold", 8)
    canvas.set_text_color(palette.muted)
    canvas.text(title, x + 5, y + 6)
    canvas.set_font("italic", 8)
    current = y + 11
    for line in lines:
        canvas.text(line, x + 5, current)
        current += 3.8

    return canvas.track(y + height + 6)
