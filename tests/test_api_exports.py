"""
Tests de los endpoints de exportación (FastAPI TestClient).
"""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from sentinelle.core.config import Settings, get_settings
from sentinelle.main import app

INCIDENT = {
    "numero": 42,
    "id": "inc-42",
    "titre": "Absence de réponse du curateur",
    "date_incident": "2026-02-03",
    "gravite": "Critique",
    "faits": "Trois courriers sont restés sans réponse.",
    "dysfonctionnement": "Violation du devoir de diligence (art. 406 CC).",
    "preuves": [{"id": "p1", "type": "email", "label": "Relance"}],
}


@pytest.fixture
def client(settings):
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def assert_pdf(response, prefix):
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    disposition = response.headers["content-disposition"]
    assert disposition.startswith(f'attachment; filename="{prefix}')
    assert disposition.endswith('.pdf"')
    assert response.content.startswith(b"%PDF")


class TestExports:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_fiche(self, client):
        response = client.post("/exports/fiche", json={"incident": INCIDENT})
        assert_pdf(response, "fiche-incident-INC-0042-")

    def test_dossier_incidente_con_opciones(self, client):
        response = client.post(
            "/exports/incident-dossier",
            json={
                "incident": INCIDENT,
                "options": {"include_emails": True, "include_deep_analysis": True},
                "emails": [{"id": "m1", "subject": "Relance", "body": "Merci de répondre."}],
                "deep_analysis": "Analyse.",
            },
        )
        assert_pdf(response, "dossier-incident-INC-0042-emails-analyse-")

    def test_dossier_judicial_vacio(self, client):
        response = client.post("/exports/judicial", json={"incidents": []})
        assert_pdf(response, "dossier-juridique-rapport-")

    def test_dossier_factual(self, client):
        response = client.post(
            "/exports/factual",
            json={"data": {"facts": [], "dysfunctions": [{"id": "d1", "description": "Retard", "severity": "haute"}]}},
        )
        assert_pdf(response, "dossier-factuel-faits-")

    def test_expediente(self, client):
        response = client.post(
            "/exports/case-folder",
            json={
                "folder": {"name": "Curatelle Dupont", "timeline": [{"date": "2026-01-10", "event": "Courrier"}]},
                "options": {"include_timeline": True},
            },
        )
        assert_pdf(response, "dossier-Curatelle-Dupont-chronologie-")

    def test_rapport_hebdomadaire(self, client):
        response = client.post(
            "/exports/weekly",
            json={
                "data": {
                    "period_start": "2026-03-07",
                    "period_end": "2026-03-13",
                    "incidents": [INCIDENT],
                    "thread_analyses": [{"id": "t1", "citations": ["Nous reviendrons vers vous."], "emails_count": None}],
                }
            },
        )
        assert_pdf(response, "rapport-hebdomadaire-2026-03-07-2026-03-13-")


class TestErrores:

    def test_payload_invalido_422(self, client):
        response = client.post("/exports/fiche", json={"incident": {"titre": "Sans numéro"}})
        assert response.status_code == 422

    def test_fallo_del_compositor_500(self, client):
        with patch("sentinelle.api.exports.generate_fiche", side_effect=RuntimeError("boom")):
            response = client.post("/exports/fiche", json={"incident": INCIDENT})

        assert response.status_code == 500
        assert response.json()["detail"] == "Error al generar el documento fiche: boom"

    def test_formato_de_pagina_desconocido_500(self):
        app.dependency_overrides[get_settings] = lambda: Settings(
            page_format="B7", legal_explainer_backend="none", log_to_file=False, _env_file=None
        )
        try:
            response = TestClient(app).post("/exports/fiche", json={"incident": INCIDENT})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert "fiche" in response.json()["detail"]
