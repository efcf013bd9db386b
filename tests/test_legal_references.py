"""
Tests del extractor de referencias legales.

SIN red, SIN LLM: extract() es puro.
"""
import pytest

from sentinelle.legal.references import extract, format_legal_reference, format_legal_references
from sentinelle.models.legal import LegalReference


def keys(references):
    return [(r.code, r.article) for r in references]


class TestExtract:

    def test_escenario_mixto_respeta_orden_y_prioridad(self):
        text = "Voir Art. 406 CC et CC art. 29 Cst ainsi que article 35 du Code civil"
        assert keys(extract(text)) == [("CC", "406"), ("Cst", "29"), ("CC", "35")]

    def test_idempotente(self):
        text = "Art. 406 CC, art. 29 al. 2 Cst et CO art. 97"
        assert extract(text) == extract(text)

    def test_deduplicacion_entre_formas(self):
        text = "Art. 406 CC rappelle que ... (cf. CC art. 406 et article 406 du Code civil)"
        assert keys(extract(text)) == [("CC", "406")]

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("selon l'art. 450a CC", ("CC", "450a")),
            ("Art. 29 al. 2 Cst", ("Cst", "29 al. 2")),
            ("Art. 6 bis LPD", ("LPD", "6 bis")),
            ("cst ART. 9", ("Cst", "9")),
            ("article 97 du Code des obligations", ("CO", "97")),
            ("article 12 du code de procédure civile", ("CPC", "12")),
            ("§ 4.2 CSIAS", ("CSIAS", "4.2")),
        ],
    )
    def test_formas_reconocidas(self, text, expected):
        assert keys(extract(text)) == [expected]

    def test_nombre_completo_desconocido_se_descarta(self):
        assert extract("article 12 du Code de la route") == []

    def test_texto_vacio(self):
        assert extract("") == []
        assert extract(None) == []

    def test_codigo_desconocido_no_se_extrae(self):
        assert extract("Art. 12 XYZ") == []


class TestFormat:

    def test_formato_canonico(self):
        assert format_legal_reference(LegalReference(code="CC", article="406")) == "CC art. 406"

    def test_lista(self):
        refs = [LegalReference(code="CC", article="406"), LegalReference(code="Cst", article="29")]
        assert format_legal_references(refs) == "CC art. 406, Cst art. 29"
