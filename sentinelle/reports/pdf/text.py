"""
Motor de texto: normalización, corte de líneas y justificación.

Las fuentes estándar de ReportLab (Helvetica) usan WinAnsiEncoding, así que
todo texto se reduce a caracteres codificables en cp1252 antes de medirlo.

Garantías:
- Ninguna línea dibujada excede el ancho disponible (las palabras demasiado
  largas se parten por caracteres).
- Una línea justificada mide exactamente el ancho objetivo (tolerancia 0.5 mm);
  la última línea de cada párrafo queda alineada a la izquierda.
- El espacio entre palabras nunca es negativo.
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, Optional

from reportlab.lib.colors import Color

Measure = Callable[[str], float]

ELLIPSIS = "..."
JUSTIFY_TOLERANCE_MM = 0.5

_TYPOGRAPHIC = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201a": ",",
    "\u201b": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u201e": '"',
    "\u2032": "'",
    "\u2033": '"',
    "\u2010": "-",
    "\u2011": "-",
    "\u2012": "-",
    "\u2013": "-",
    "\u2014": "-",
    "\u2015": "-",
    "\u2212": "-",
    "\u2026": ELLIPSIS,
    "\u00a0": " ",
    "\u2002": " ",
    "\u2003": " ",
    "\u2007": " ",
    "\u2009": " ",
    "\u202f": " ",
    "\t": " ",
    "\u00ad": "",
}

_SPACES = re.compile(r"[ ]{2,}")


def _encodable(char: str) -> bool:
    try:
        char.encode("cp1252")
        return True
    except UnicodeEncodeError:
        return False


def _sanitize_char(char: str) -> str:
    if char in _TYPOGRAPHIC:
        return _TYPOGRAPHIC[char]
    if char == "\n":
        return char
    if unicodedata.category(char) in ("Cc", "Cf", "Cs", "Co", "Cn"):
        return ""
    if _encodable(char):
        return char
    # œ, ł, ő... -> letra base si existe
    decomposed = unicodedata.normalize("NFKD", char)
    return "".join(c for c in decomposed if not unicodedata.combining(c) and _encodable(c))


def normalize(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Deja `text` listo para las fuentes del PDF.

    Args:
        text: Texto libre (None -> "")
        max_length: Longitud máxima; si se supera se corta en el último
            espacio dentro del 10% final del presupuesto y se añade "..."

    Returns:
        Texto normalizado, nunca más largo que max_length
    """
    if text is None:
        return ""
    value = unicodedata.normalize("NFC", str(text))
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    value = "".join(_sanitize_char(c) for c in value)
    value = "\n".join(_SPACES.sub(" ", line).strip() for line in value.split("\n"))
    value = re.sub(r"\n{3,}", "\n\n", value).strip()

    if max_length is not None and len(value) > max_length:
        value = truncate(value, max_length)
    return value


def truncate(value: str, max_length: int) -> str:
    if max_length <= len(ELLIPSIS):
        return value[:max_length]
    budget = max_length - len(ELLIPSIS)
    cut = value[:budget]
    window_start = budget - max(1, budget // 10)
    space = cut.rfind(" ", window_start)
    if space > 0:
        cut = cut[:space]
    return cut.rstrip() + ELLIPSIS


# =========================================================
# CORTE DE LÍNEAS
# =========================================================


def _split_long_word(word: str, max_width: float, measure: Measure) -> list[str]:
    pieces = []
    current = ""
    for char in word:
        if current and measure(current + char) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_paragraph(paragraph: str, max_width: float, measure: Measure) -> list[str]:
    """Corte voraz de un párrafo (sin saltos de línea) en líneas."""
    lines: list[str] = []
    current = ""
    for word in paragraph.split():
        if measure(word) > max_width:
            pieces = _split_long_word(word, max_width, measure)
            if current:
                lines.append(current)
            lines.extend(pieces[:-1])
            current = pieces[-1]
            continue
        candidate = f"{current} {word}" if current else word
        if measure(candidate) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def wrap_paragraphs(text: str, max_width: float, measure: Measure) -> list[list[str]]:
    """Un bloque de líneas por párrafo (los saltos de línea explícitos separan párrafos)."""
    return [wrap_paragraph(p, max_width, measure) or [""] for p in text.split("\n")]


def wrap(text: str, max_width: float, measure: Measure) -> list[str]:
    """Corte voraz por palabras; nunca produce una línea más ancha que max_width."""
    return [line for block in wrap_paragraphs(text, max_width, measure) for line in block]


def clip_lines(lines: list[str], max_lines: int, max_width: float, measure: Measure) -> list[str]:
    """Como mucho `max_lines` líneas; la última acaba en "..." si se recorta."""
    if len(lines) <= max_lines:
        return lines
    kept = lines[: max(1, max_lines)]
    last = kept[-1].rstrip()
    while last and measure(last + ELLIPSIS) > max_width:
        last = last[:-1].rstrip()
    kept[-1] = last + ELLIPSIS
    return kept


# =========================================================
# JUSTIFICACIÓN
# =========================================================


@dataclass(frozen=True)
class JustifiedLine:
    words: list[str]
    positions: list[float] = field(default_factory=list)
    gap: float = 0.0
    justified: bool = False
    width: float = 0.0


def justify(line: str, target_width: float, measure: Measure, space_width: Optional[float] = None) -> JustifiedLine:
    """
    Reparte el espacio sobrante entre palabras para que la línea mida target_width.

    Una sola palabra, o una línea cuyo ancho natural supera el objetivo,
    se deja alineada a la izquierda con el espacio normal.
    """
    words = line.split()
    if space_width is None:
        space_width = measure(" ")
    widths = [measure(w) for w in words]

    def _left_aligned() -> JustifiedLine:
        positions, x = [], 0.0
        for w in widths:
            positions.append(x)
            x += w + space_width
        width = (x - space_width) if widths else 0.0
        return JustifiedLine(words=words, positions=positions, gap=space_width, justified=False, width=width)

    if len(words) < 2:
        return _left_aligned()

    gap = (target_width - sum(widths)) / (len(words) - 1)
    if gap < 0:
        return _left_aligned()

    positions, x = [], 0.0
    for w in widths:
        positions.append(x)
        x += w + gap
    width = positions[-1] + widths[-1]
    return JustifiedLine(words=words, positions=positions, gap=gap, justified=True, width=width)


# =========================================================
# DIBUJO
# =========================================================


def _draw_line(canvas, line: str, x: float, y: float, width: float, justified: bool) -> None:
    if not justified:
        canvas.text(line, x, y)
        return
    layout = justify(line, width, canvas.measurer())
    for word, offset in zip(layout.words, layout.positions):
        canvas.text(word, x + offset, y)


def draw_justified_text(
    canvas,
    text: Optional[str],
    x: float,
    y: float,
    width: float,
    line_height: float = 4.5,
    style: str = "normal",
    size: float = 9,
    color: Optional[Color] = None,
    max_length: Optional[int] = None,
) -> float:
    """
    Dibuja un texto justificado con salto de página por línea.

    Returns:
        Y tras la última línea
    """
    canvas.set_font(style, size)
    canvas.set_text_color(color or canvas.palette.text)
    content = normalize(text, max_length)
    for block in wrap_paragraphs(content, width, canvas.measurer()):
        for index, line in enumerate(block):
            y = canvas.ensure_space(y, line_height)
            if line:
                _draw_line(canvas, line, x, y, width, justified=index < len(block) - 1)
            y += line_height
    return canvas.track(y)


def draw_wrapped_text(
    canvas,
    text: Optional[str],
    x: float,
    y: float,
    width: float,
    line_height: float = 4.5,
    style: str = "normal",
    size: float = 9,
    color: Optional[Color] = None,
    max_length: Optional[int] = None,
    max_lines: Optional[int] = None,
) -> float:
    """Variante alineada a la izquierda (opcionalmente limitada a max_lines)."""
    canvas.set_font(style, size)
    canvas.set_text_color(color or canvas.palette.text)
    lines = wrap(normalize(text, max_length), width, canvas.measurer())
    if max_lines is not None:
        lines = lines[:max_lines]
    for line in lines:
        y = canvas.ensure_space(y, line_height)
        if line:
            canvas.text(line, x, y)
        y += line_height
    return canvas.track(y)


def draw_justified_text_block(
    canvas,
    text: Optional[str],
    y: float,
    x: Optional[float] = None,
    width: Optional[float] = None,
    padding: float = 4,
    line_height: float = 4.5,
    size: float = 9,
    background: Optional[Color] = None,
    border: Optional[Color] = None,
    max_length: Optional[int] = None,
) -> float:
    """
    Texto justificado dentro de un recuadro con fondo y barra lateral.

    Si el texto no cabe, el recuadro se parte en trozos por página.
    """
    geometry = canvas.geometry
    palette = canvas.palette
    x = geometry.margin_left if x is None else x
    width = geometry.content_width if width is None else width
    background = background or palette.background
    border = border or palette.primary
    inner_x = x + padding + 2
    inner_width = width - 2 * padding - 2

    canvas.set_font("normal", size)
    measure = canvas.measurer("normal", size)
    rows = []
    for block in wrap_paragraphs(normalize(text, max_length), inner_width, measure):
        for index, line in enumerate(block):
            rows.append((line, index < len(block) - 1))

    while rows:
        y = canvas.ensure_space(y, 2 * padding + line_height)
        capacity = int((canvas.safe_max_y - y - 2 * padding) // line_height)
        chunk, rows = rows[: max(1, capacity)], rows[max(1, capacity):]
        box_height = 2 * padding + len(chunk) * line_height

        canvas.set_fill_color(background)
        canvas.rect(x, y, width, box_height, fill=True)
        canvas.set_fill_color(border)
        canvas.rect(x, y, 1.5, box_height, fill=True)

        canvas.set_font("normal", size)
        canvas.set_text_color(palette.text)
        line_y = y + padding + line_height - 1.2
        for line, justified in chunk:
            if line:
                _draw_line(canvas, line, inner_x, line_y, inner_width, justified)
            line_y += line_height
        y += box_height
        if rows:
            y = canvas.new_page()

    return canvas.track(y + 4)
