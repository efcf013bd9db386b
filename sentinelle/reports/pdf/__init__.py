"""
Paquete PDF (Sentinelle).

Capa de dibujo: lienzo paginado, primitivas, motor de texto y cronología.
Los compositores de documentos viven en sentinelle.reports.templates.
"""

from .canvas import DocumentCanvas, NumberedCanvas, PageCursor
from .primitives import (
    InfoRow,
    TableColumn,
    draw_badge,
    draw_citation,
    draw_disclaimer,
    draw_footers_on_all_pages,
    draw_header,
    draw_info_table,
    draw_kpi_box,
    draw_legal_box,
    draw_section_title,
    draw_table,
    draw_text_box,
)
from .sections import Section, compose_sections
from .styles import (
    DEFAULT_PALETTE,
    Palette,
    StyleToken,
    format_pdf_date,
    format_pdf_datetime,
    severity_style,
    status_color,
)
from .text import draw_justified_text, draw_justified_text_block, draw_wrapped_text, justify, normalize, wrap
from .timeline import render_timeline

__all__ = [
    "DocumentCanvas",
    "NumberedCanvas",
    "PageCursor",
    "DEFAULT_PALETTE",
    "Palette",
    "StyleToken",
    "severity_style",
    "status_color",
    "format_pdf_date",
    "format_pdf_datetime",
    "InfoRow",
    "TableColumn",
    "draw_header",
    "draw_section_title",
    "draw_footers_on_all_pages",
    "draw_info_table",
    "draw_badge",
    "draw_legal_box",
    "draw_citation",
    "draw_table",
    "draw_text_box",
    "draw_kpi_box",
    "draw_disclaimer",
    "Section",
    "compose_sections",
    "normalize",
    "wrap",
    "justify",
    "draw_justified_text",
    "draw_wrapped_text",
    "draw_justified_text_block",
    "render_timeline",
]
