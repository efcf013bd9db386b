"""
Tests del resolvedor de explicaciones jurídicas.

Verifican que:
- resolve() NUNCA devuelve una lista vacía (tipos desconocidos incluidos)
- un servicio que falla -> degradación al catálogo estático, sin excepción
- artículos ausentes del catálogo -> verified=False con leyenda por defecto
"""
from unittest.mock import MagicMock

import pytest

from sentinelle.core.exceptions import LegalServiceException
from sentinelle.legal.explainer import (
    default_references_for_type,
    detect_legal_bases_from_content,
    resolve,
)
from sentinelle.legal.legal_mapping import UNVERIFIED_CAPTION
from sentinelle.models.legal import LegalExplanation, LegalReference


def ref(code, article):
    return LegalReference(code=code, article=article)


class TestDefaultReferences:

    def test_tipo_exacto(self):
        refs = default_references_for_type("Non-réponse")
        assert (refs[0].code, refs[0].article) == ("CC", "406")

    def test_tipo_parcial_insensible_a_mayusculas(self):
        assert default_references_for_type("non-réponse du curateur") == default_references_for_type("Non-réponse")

    @pytest.mark.parametrize("incident_type", [None, "", "Type inventé"])
    def test_tipo_desconocido_usa_fallback_generico(self, incident_type):
        refs = default_references_for_type(incident_type)
        assert [(r.code, r.article) for r in refs] == [("CC", "406"), ("Cst", "29")]


class TestResolve:

    @pytest.mark.parametrize("incident_type", [None, "Type inventé", "Délai non respecté"])
    def test_nunca_vacio(self, incident_type):
        explanations = resolve([], incident_type=incident_type)
        assert explanations
        assert all(isinstance(e, LegalExplanation) for e in explanations)

    def test_sin_servicio_usa_catalogo_verificado(self):
        explanations = resolve([ref("CC", "406")])
        assert len(explanations) == 1
        assert explanations[0].verified is True
        assert explanations[0].title
        assert explanations[0].context_explanation is None

    def test_articulo_fuera_de_catalogo_no_verificado(self):
        explanations = resolve([ref("CP", "999")])
        assert explanations[0].verified is False
        assert explanations[0].text == UNVERIFIED_CAPTION

    def test_servicio_que_falla_degrada_sin_lanzar(self):
        service = MagicMock()
        service.explain.side_effect = LegalServiceException("timeout")

        explanations = resolve([ref("CC", "406"), ref("Cst", "29")], "faits", service=service)

        service.explain.assert_called_once()
        assert [(e.code, e.article) for e in explanations] == [("CC", "406"), ("Cst", "29")]
        assert all(e.verified for e in explanations)

    def test_error_inesperado_del_servicio_tambien_degrada(self):
        service = MagicMock()
        service.explain.side_effect = RuntimeError("boom")
        assert resolve([], incident_type="Non-réponse", service=service)

    def test_una_sola_llamada_por_lote(self):
        service = MagicMock()
        service.explain.return_value = []
        resolve([ref("CC", "406"), ref("CC", "413"), ref("PA", "29")], service=service)
        assert service.explain.call_count == 1
        sent = service.explain.call_args[0][0]
        assert len(sent) == 3

    def test_servicio_aporta_contexto(self):
        service = MagicMock()
        service.explain.return_value = [
            LegalExplanation(
                code="CC",
                article="406",
                text="Le curateur sauvegarde les intérêts de la personne.",
                context_explanation="Le silence du curateur contrevient à ce devoir.",
            )
        ]
        explanations = resolve([ref("CC", "406"), ref("Cst", "29")], service=service)

        assert explanations[0].context_explanation == "Le silence du curateur contrevient à ce devoir."
        assert explanations[0].title  # completado desde el catálogo
        assert explanations[1].verified is True  # Cst 29 desde el catálogo

    def test_limite(self):
        explanations = resolve([], incident_type="Non-réponse", limit=3)
        assert len(explanations) == 3

    def test_no_modifica_la_entrada(self):
        refs = [ref("CC", "406"), ref("CC", "406")]
        resolve(refs)
        assert len(refs) == 2


class TestDetectFromContent:

    def test_palabras_clave_tipo_y_referencias_explicitas(self):
        refs = detect_legal_bases_from_content(
            "Aucune réponse depuis trois semaines.",
            "Voir aussi art. 13 LPD.",
            "Type inventé",
        )
        found = [(r.code, r.article) for r in refs]
        assert ("CC", "406") in found
        assert ("Cst", "29") in found
        assert ("LPD", "13") in found
        assert len(found) == len(set(found))
