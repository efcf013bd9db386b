"""
Lienzo paginado de los documentos jurídicos.

Dos piezas:
- NumberedCanvas: canvas de ReportLab que retiene las páginas hasta conocer
  el total, para estampar "Page i/N" en una pasada final.
- DocumentCanvas: envoltorio en milímetros medidos desde el borde SUPERIOR
  (como se maqueta un documento), dueño del PageCursor y de los saltos de página.

Invariante: ningún glifo del cuerpo queda por debajo de safe_max_y. Un
bloque que no cabe provoca un salto antes de dibujarse; `track` más allá del
límite deja un salto pendiente que se aplica en el siguiente dibujo.
"""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Optional

from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from sentinelle.core.exceptions import LayoutException, PageFormatException
from sentinelle.reports.pdf.styles import DEFAULT_PALETTE, Palette, PageGeometry, page_geometry

FONTS = {
    "normal": "Helvetica",
    "bold": "Helvetica-Bold",
    "italic": "Helvetica-Oblique",
    "bolditalic": "Helvetica-BoldOblique",
}

PagePainter = Callable[["NumberedCanvas", int, int], None]


class NumberedCanvas(canvas.Canvas):
    """
    Canvas con doble pasada para numeración correcta.

    ReportLab escribe cada página al llamar a showPage(); aquí solo se guarda
    el estado de la página y se confirma en stamp_pages(), cuando el total
    de páginas ya es conocido.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self._stamped = False

    def showPage(self):
        """Primera pasada: guardar estado sin confirmar la página."""
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def stamp_pages(self, painter: Optional[PagePainter] = None) -> int:
        """
        Segunda pasada: cierra la página en curso, pinta cada página con el
        total conocido y la confirma.

        Returns:
            Número total de páginas
        """
        if self._stamped:
            raise LayoutException("Las páginas ya fueron estampadas")

        self.showPage()
        states = list(self._saved_page_states)
        num_pages = len(states)

        for state in states:
            self.__dict__.update(state)
            if painter is not None:
                self.saveState()
                painter(self, self._pageNumber, num_pages)
                self.restoreState()
            super().showPage()

        self._saved_page_states = []
        self._stamped = True
        return num_pages

    def save(self):
        if not self._stamped:
            self.stamp_pages()
        super().save()


@dataclass
class PageCursor:
    """Posición vertical actual (mm desde arriba) y página en curso (1-based)."""

    y: float
    page: int
    safe_max_y: float


class DocumentCanvas:
    """
    Lienzo de un único documento.

    Todas las coordenadas están en mm, con el origen en la esquina superior
    izquierda; los tamaños de fuente en puntos.

    Raises:
        PageFormatException: si el formato de página no existe (único error fatal)
    """

    def __init__(
        self,
        page_format: str = "A4",
        palette: Palette = DEFAULT_PALETTE,
        title: Optional[str] = None,
    ):
        geometry = page_geometry(page_format)
        if geometry is None:
            raise PageFormatException(str(page_format))

        self.geometry: PageGeometry = geometry
        self.palette = palette
        self.buffer = BytesIO()
        self.pdf = NumberedCanvas(
            self.buffer, pagesize=(geometry.width * mm, geometry.height * mm)
        )
        self.pdf.setCreator("Sentinelle")
        if title:
            self.pdf.setTitle(title)

        self.cursor = PageCursor(
            y=geometry.margin_top, page=1, safe_max_y=geometry.safe_max_y
        )
        self._font = ("normal", 10.0)
        self._fill_color: Optional[Color] = None
        self._stroke_color: Optional[Color] = None
        self._line_width: Optional[float] = None
        self._finalized = False
        self._page_count: Optional[int] = None
        self._page_has_content = False
        self._pending_break = False
        self.set_font("normal", 10)

    # =========================================================
    # PAGINACIÓN
    # =========================================================

    @property
    def safe_max_y(self) -> float:
        return self.geometry.safe_max_y

    @property
    def page_count(self) -> int:
        """Páginas del documento (definitivo tras finalize)."""
        return self._page_count if self._page_count is not None else self.cursor.page

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def new_page(self) -> float:
        """Salto de página explícito. Devuelve la Y inicial de la nueva página."""
        self._check_open()
        self._pending_break = False
        self.pdf.showPage()
        self.cursor.page += 1
        self.cursor.y = self.geometry.content_top
        self._page_has_content = False
        self._restore_graphics()
        return self.cursor.y

    def ensure_space(self, y: float, needed: float) -> float:
        """
        Garantiza `needed` mm libres a partir de `y`.

        Salta de página si y + needed > safe_max_y, salvo que la página en
        curso aún esté vacía. Los bloques se recortan a page_lines() para
        que siempre quepan en una página de continuación.
        """
        self._check_open()
        if y + needed > self.safe_max_y and self._page_has_content:
            return self.new_page()
        if y > self.safe_max_y:
            y = self.geometry.content_top
        self.cursor.y = y
        return y

    def track(self, y: float) -> float:
        """
        Registra la Y devuelta por una primitiva.

        Si la primitiva termina por debajo de safe_max_y (margen final de un
        bloque), el salto de página queda pendiente hasta el siguiente dibujo:
        un documento nunca termina con una página en blanco.
        """
        if y > self.safe_max_y:
            self._pending_break = True
            self._page_has_content = False
            y = self.geometry.content_top
        self.cursor.y = y
        return y

    def page_lines(self, line_height: float, reserved: float = 0) -> int:
        """Líneas de `line_height` que caben en una página de continuación."""
        usable = self.safe_max_y - self.geometry.content_top - reserved
        return max(1, int(usable // line_height))

    # =========================================================
    # ESTILO
    # =========================================================

    def set_font(self, style: str = "normal", size: float = 10) -> None:
        self._font = (style, float(size))
        self.pdf.setFont(FONTS.get(style, FONTS["normal"]), size)

    @property
    def font_size(self) -> float:
        return self._font[1]

    def set_text_color(self, color: Color) -> None:
        self.set_fill_color(color)

    def set_fill_color(self, color: Color) -> None:
        self._fill_color = color
        self.pdf.setFillColor(color)

    def set_draw_color(self, color: Color) -> None:
        self._stroke_color = color
        self.pdf.setStrokeColor(color)

    def set_line_width(self, width_mm: float) -> None:
        self._line_width = width_mm
        self.pdf.setLineWidth(width_mm * mm)

    def _restore_graphics(self) -> None:
        # ReportLab reinicia el estado gráfico en cada página nueva
        self.set_font(*self._font)
        if self._fill_color is not None:
            self.pdf.setFillColor(self._fill_color)
        if self._stroke_color is not None:
            self.pdf.setStrokeColor(self._stroke_color)
        if self._line_width is not None:
            self.pdf.setLineWidth(self._line_width * mm)

    def set_dash(self, pattern: Optional[list[float]] = None) -> None:
        self.pdf.setDash([p * mm for p in pattern] if pattern else [])

    # =========================================================
    # MEDIDA
    # =========================================================

    def measure(self, text: str, style: Optional[str] = None, size: Optional[float] = None) -> float:
        """Ancho de `text` en mm con la fuente actual (o la indicada)."""
        font_style = style or self._font[0]
        font_size = size if size is not None else self._font[1]
        return stringWidth(text, FONTS.get(font_style, FONTS["normal"]), font_size) / mm

    def measurer(self, style: Optional[str] = None, size: Optional[float] = None):
        """Función de medida fijada a una fuente (para el motor de texto)."""
        font_style = style or self._font[0]
        font_size = size if size is not None else self._font[1]
        return lambda text: self.measure(text, font_style, font_size)

    # =========================================================
    # DIBUJO (mm desde arriba)
    # =========================================================

    def _y(self, y: float) -> float:
        return (self.geometry.height - y) * mm

    def text(self, value: str, x: float, y: float, align: str = "left") -> None:
        self._begin_drawing()
        if align == "right":
            self.pdf.drawRightString(x * mm, self._y(y), value)
        elif align == "center":
            self.pdf.drawCentredString(x * mm, self._y(y), value)
        else:
            self.pdf.drawString(x * mm, self._y(y), value)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._begin_drawing()
        self.pdf.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def rect(self, x: float, y: float, w: float, h: float, fill: bool = True, stroke: bool = False) -> None:
        self._begin_drawing()
        self.pdf.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=int(stroke), fill=int(fill))

    def round_rect(
        self, x: float, y: float, w: float, h: float, radius: float = 2,
        fill: bool = True, stroke: bool = False,
    ) -> None:
        self._begin_drawing()
        self.pdf.roundRect(
            x * mm, self._y(y + h), w * mm, h * mm, radius * mm,
            stroke=int(stroke), fill=int(fill),
        )

    def circle(self, x: float, y: float, r: float, fill: bool = True, stroke: bool = False) -> None:
        self._begin_drawing()
        self.pdf.circle(x * mm, self._y(y), r * mm, stroke=int(stroke), fill=int(fill))

    # =========================================================
    # CIERRE
    # =========================================================

    def finalize(self, painter: Optional[Callable[["DocumentCanvas", int, int], None]] = None) -> int:
        """
        Estampa las páginas (pies de página) y cierra el documento.

        Args:
            painter: función (lienzo, página, total) llamada una vez por página

        Después de finalize, cualquier dibujo lanza LayoutException.
        """
        self._check_open()
        # Un salto pendiente sin contenido detrás no abre página
        self._pending_break = False
        stamp = None
        if painter is not None:
            def stamp(_pdf, page_number, total):
                painter(self, page_number, total)

        self._page_count = self.pdf.stamp_pages(stamp)
        self.pdf.save()
        self._finalized = True
        return self._page_count

    def to_bytes(self) -> bytes:
        if not self._finalized:
            self.finalize()
        return self.buffer.getvalue()

    def _check_open(self) -> None:
        if self._finalized:
            raise LayoutException("El documento ya fue finalizado; no se puede dibujar más")

    def _begin_drawing(self) -> None:
        self._check_open()
        if self._pending_break:
            self._pending_break = False
            self.pdf.showPage()
            self.cursor.page += 1
            self._restore_graphics()
        self._page_has_content = True
