"""
Tests del lienzo paginado.

Invariante: ningún carácter del cuerpo queda por debajo de safe_max_y en el
PDF producido (posiciones leídas con pdfplumber); solo los pies de página
ocupan el margen inferior.
"""
import pytest

from sentinelle.core.exceptions import LayoutException, PageFormatException
from sentinelle.models.legal import LegalExplanation
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import (
    InfoRow,
    TableColumn,
    draw_citation,
    draw_footers_on_all_pages,
    draw_header,
    draw_info_table,
    draw_legal_box,
    draw_section_title,
    draw_table,
)
from sentinelle.reports.pdf.sections import Section, compose_sections


class TestGeometria:

    def test_a4_limites(self):
        canvas = DocumentCanvas("A4")
        assert canvas.safe_max_y == pytest.approx(270)
        assert canvas.geometry.content_top == pytest.approx(25)
        assert canvas.geometry.content_width == pytest.approx(170)

    def test_formato_en_minusculas_aceptado(self):
        assert DocumentCanvas("letter").geometry.name == "LETTER"

    def test_formato_desconocido_es_fatal(self):
        with pytest.raises(PageFormatException) as exc_info:
            DocumentCanvas("B7")
        assert exc_info.value.code == "PAGE_FORMAT_INVALID"


class TestEnsureSpace:

    def test_sin_salto_si_cabe(self):
        canvas = DocumentCanvas("A4")
        assert canvas.ensure_space(100, 10) == 100
        assert canvas.page_count == 1

    def test_salto_si_no_cabe_y_la_pagina_tiene_contenido(self):
        canvas = DocumentCanvas("A4")
        canvas.text("contenu", 20, 30)
        y = canvas.ensure_space(265, 50)
        assert y == pytest.approx(canvas.geometry.content_top)
        assert canvas.page_count == 2

    def test_pagina_vacia_no_salta(self):
        canvas = DocumentCanvas("A4")
        canvas.text("contenu", 20, 30)
        canvas.new_page()
        y = canvas.ensure_space(canvas.geometry.content_top, 400)
        assert canvas.page_count == 2
        assert y <= canvas.safe_max_y

    def test_tabla_larga_se_reparte_en_paginas(self):
        canvas = DocumentCanvas("A4")
        columns = (TableColumn("N°", 20), TableColumn("Description", 150, max_length=80))
        rows = [[str(i), f"Ligne {i}"] for i in range(120)]
        y = draw_table(canvas, 30, columns, rows)
        assert y <= canvas.safe_max_y
        assert canvas.page_count >= 2

    def test_invariante_tras_muchas_primitivas(self, body_overflow):
        canvas = DocumentCanvas("A4")
        y = draw_header(canvas, "incident", "Sous-titre", "7")
        for index in range(40):
            y = draw_section_title(canvas, f"Section {index}", y, numbered=True, number=index + 1)
            assert y <= canvas.safe_max_y
            y = draw_info_table(canvas, y, [InfoRow("Clé", "Valeur"), InfoRow("Autre", "Donnée")])
            assert y <= canvas.safe_max_y
        draw_footers_on_all_pages(canvas, "incident")

        assert canvas.page_count > 1
        assert body_overflow(canvas.to_bytes()) == []

    def test_valor_enorme_en_tabla_de_informacion_sigue_en_paginas_nuevas(self, body_overflow, read_pdf):
        canvas = DocumentCanvas("A4")
        y = draw_info_table(canvas, 30, [InfoRow("Institution", "institution " * 900), InfoRow("Statut", "Ouvert")])
        draw_footers_on_all_pages(canvas, "incident")
        content = canvas.to_bytes()

        assert y <= canvas.safe_max_y
        assert canvas.page_count >= 3
        assert body_overflow(content) == []
        assert "Statut:" in read_pdf(content)

    def test_celda_enorme_se_recorta_a_una_pagina(self, body_overflow):
        canvas = DocumentCanvas("A4")
        columns = (TableColumn("N°", 20), TableColumn("Description", 150))
        y = draw_table(canvas, 30, columns, [["1", "ligne\n" * 400], ["2", "courte"]])
        draw_footers_on_all_pages(canvas, "incident")

        assert y <= canvas.safe_max_y
        assert body_overflow(canvas.to_bytes()) == []

    def test_recuadro_legal_enorme_cabe_en_una_pagina(self, body_overflow):
        canvas = DocumentCanvas("A5")
        canvas.text("contenu", 20, 30)
        explanation = LegalExplanation(
            code="CC", article="406", title="Devoirs",
            text="alinéa\n" * 120, context_explanation="contexte\n" * 100,
        )
        y = draw_legal_box(canvas, 40, explanation)
        draw_footers_on_all_pages(canvas, "juridique")

        assert y <= canvas.safe_max_y
        assert body_overflow(canvas.to_bytes(), "A5") == []

    def test_cita_larga_sigue_en_la_pagina_siguiente(self, body_overflow):
        canvas = DocumentCanvas("A4")
        canvas.text("contenu", 20, 30)
        draw_citation(canvas, 200, 1, "mot\n" * 150, source="Courriel du 3 février")
        draw_footers_on_all_pages(canvas, "dossier_incident")

        assert canvas.page_count >= 3
        assert body_overflow(canvas.to_bytes()) == []


class TestSaltoPendiente:

    def test_track_mas_alla_del_limite_no_deja_pagina_en_blanco(self):
        canvas = DocumentCanvas("A4")
        canvas.text("contenu", 20, 30)
        y = canvas.track(300)

        assert y == pytest.approx(canvas.geometry.content_top)
        assert canvas.finalize() == 1

    def test_el_salto_pendiente_se_aplica_al_dibujar(self):
        canvas = DocumentCanvas("A4")
        canvas.text("Première", 20, 30)
        y = canvas.track(canvas.safe_max_y + 3)
        canvas.text("Suite", 20, y)
        canvas.finalize()

        assert canvas.page_count == 2
        assert canvas.cursor.page == 2

    def test_ensure_space_no_recorta_la_y(self):
        canvas = DocumentCanvas("A4")
        canvas.text("contenu", 20, 30)
        y = canvas.ensure_space(canvas.safe_max_y + 10, 5)

        assert y == pytest.approx(canvas.geometry.content_top)
        assert canvas.page_count == 2

    def test_capacidad_de_pagina(self):
        canvas = DocumentCanvas("A4")
        assert canvas.page_lines(5) == 49
        assert canvas.page_lines(5, reserved=20) == 45
        assert canvas.page_lines(1000) == 1


class TestComposeSections:

    def test_pliegue_en_orden(self):
        canvas = DocumentCanvas("A4")
        seen = []

        def section(name, height):
            def render(c, y):
                seen.append((name, y))
                return y + height
            return Section(name, render)

        y = compose_sections(canvas, 30, [section("a", 10), section("b", 5)])
        assert seen == [("a", 30), ("b", 40)]
        assert y == 45


class TestFinalizacion:

    def test_pies_de_pagina_en_todas_las_paginas(self, read_pdf):
        canvas = DocumentCanvas("A4")
        canvas.text("Première page", 20, 40)
        canvas.new_page()
        canvas.text("Deuxième page", 20, 40)

        pages = draw_footers_on_all_pages(canvas, "incident", "Incident #1")
        text = read_pdf(canvas.to_bytes())

        assert pages == 2
        assert "Page 1/2" in text
        assert "Page 2/2" in text
        assert "Confidentiel - Art. 13 LPD" in text

    def test_dibujar_tras_finalizar_lanza_layout_exception(self):
        canvas = DocumentCanvas("A4")
        canvas.text("contenu", 20, 40)
        canvas.finalize()

        with pytest.raises(LayoutException):
            canvas.text("trop tard", 20, 60)
        with pytest.raises(LayoutException):
            canvas.ensure_space(60, 10)
        with pytest.raises(LayoutException):
            canvas.new_page()

    def test_bytes_son_un_pdf(self):
        canvas = DocumentCanvas("A4")
        canvas.text("contenu", 20, 40)
        content = canvas.to_bytes()
        assert content.startswith(b"%PDF")
        assert canvas.is_finalized
