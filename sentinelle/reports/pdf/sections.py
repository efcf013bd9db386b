"""
Composición de secciones.

Una sección es una función (canvas, y) -> y. Un documento es el pliegue
(fold) de su lista de secciones sobre la Y inicial.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Callable, Iterable

from sentinelle.reports.pdf.canvas import DocumentCanvas

SectionFn = Callable[[DocumentCanvas, float], float]


@dataclass(frozen=True)
class Section:
    """Sección con nombre (el nombre se reporta en GeneratedDocument)."""

    name: str
    render: SectionFn

    def __call__(self, canvas: DocumentCanvas, y: float) -> float:
        return self.render(canvas, y)


def compose_sections(canvas: DocumentCanvas, y: float, sections: Iterable[SectionFn]) -> float:
    """Aplica las secciones en orden; cada una recibe la Y de la anterior."""
    return reduce(lambda current, section: canvas.track(section(canvas, current)), sections, y)
