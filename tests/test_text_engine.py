"""
Tests del motor de texto.

Verifican que:
- normalize() deja texto codificable y respeta max_length
- wrap() nunca produce líneas más anchas que el ancho disponible
- justify() alcanza el ancho objetivo (±0.5 mm) y nunca usa huecos negativos
- la última línea de cada párrafo NO se estira
"""
import pytest

from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.text import (
    JUSTIFY_TOLERANCE_MM,
    draw_justified_text,
    justify,
    normalize,
    wrap,
)


def char_measure(text: str) -> float:
    """1 mm por carácter: medidas exactas y legibles en los tests."""
    return float(len(text))


class TestNormalize:

    def test_none_es_cadena_vacia(self):
        assert normalize(None) == ""

    def test_sustituciones_tipograficas(self):
        value = normalize("“Oui” — l’acte… fin")
        assert value == '"Oui" - l\'acte... fin'

    def test_caracteres_de_control_eliminados(self):
        assert normalize("abc\x00\x07def") == "abcdef"

    def test_caracter_no_codificable_se_reduce_a_su_base(self):
        assert normalize("Erdős") == "Erdos"

    def test_acentos_franceses_se_conservan(self):
        assert normalize("Délai dépassé à Genève") == "Délai dépassé à Genève"

    @pytest.mark.parametrize("max_length", [5, 20, 57, 100])
    def test_longitud_nunca_supera_max_length(self, max_length):
        text = "Le curateur n'a pas répondu aux courriers recommandés envoyés en janvier " * 3
        value = normalize(text, max_length)
        assert len(value) <= max_length

    def test_truncado_corta_en_espacio_y_anade_elipsis(self):
        value = normalize("mot " * 30, 50)
        assert value.endswith("...")
        assert not value[:-3].endswith(" ")
        assert len(value) <= 50

    def test_texto_corto_no_se_trunca(self):
        assert normalize("court", 50) == "court"


class TestWrap:

    def test_ninguna_linea_supera_el_ancho(self):
        text = "Les relances successives sont restées sans réponse pendant plusieurs semaines"
        lines = wrap(text, 20, char_measure)
        assert lines
        assert all(char_measure(line) <= 20 for line in lines)

    def test_palabra_larga_se_parte_por_caracteres(self):
        lines = wrap("x" * 45, 20, char_measure)
        assert lines == ["x" * 20, "x" * 20, "x" * 5]

    def test_saltos_de_linea_explicitos_separan_parrafos(self):
        lines = wrap("premier\nsecond", 100, char_measure)
        assert lines == ["premier", "second"]


class TestJustify:

    def test_linea_justificada_mide_el_ancho_objetivo(self):
        layout = justify("aa bb cc", 20, char_measure, space_width=1)
        assert layout.justified is True
        assert layout.gap == pytest.approx(7)
        assert abs(layout.width - 20) <= JUSTIFY_TOLERANCE_MM
        assert layout.positions == [0.0, 9.0, 18.0]

    def test_una_sola_palabra_queda_a_la_izquierda(self):
        layout = justify("solitaire", 50, char_measure, space_width=1)
        assert layout.justified is False
        assert layout.positions == [0.0]

    def test_linea_demasiado_ancha_no_usa_hueco_negativo(self):
        layout = justify("aaaa bbbb cccc", 5, char_measure, space_width=1)
        assert layout.justified is False
        assert layout.gap >= 0


class TestDrawJustifiedText:
    """Dibujo real sobre un DocumentCanvas, registrando cada llamada a text()."""

    def _record(self, canvas):
        calls = []
        original = canvas.text

        def recorder(value, x, y, align="left"):
            calls.append((value, x, y))
            original(value, x, y, align)

        canvas.text = recorder
        return calls

    def test_lineas_intermedias_justificadas_y_final_sin_estirar(self):
        canvas = DocumentCanvas("A4")
        calls = self._record(canvas)
        text = (
            "Le curateur n'a donné aucune suite aux demandes de rendez-vous formulées "
            "par écrit à trois reprises, malgré les délais raisonnables accordés et les "
            "rappels téléphoniques documentés dans le journal de suivi."
        )
        x, width = 20, 80

        draw_justified_text(canvas, text, x, 40, width)

        by_line = {}
        for value, call_x, call_y in calls:
            by_line.setdefault(call_y, []).append((value, call_x))
        ys = sorted(by_line)
        assert len(ys) >= 2

        measure = canvas.measurer("normal", 9)
        for line_y in ys[:-1]:
            words = by_line[line_y]
            right = max(call_x + measure(value) for value, call_x in words)
            assert abs(right - (x + width)) <= JUSTIFY_TOLERANCE_MM

        last = by_line[ys[-1]]
        assert len(last) == 1
        assert last[0][1] == x
        assert measure(last[0][0]) < width

    def test_respeta_el_limite_de_pagina(self):
        canvas = DocumentCanvas("A4")
        y = draw_justified_text(canvas, "Paragraphe long. " * 400, 20, 40, 170)
        assert y <= canvas.safe_max_y
        assert canvas.page_count > 1
