"""Fixtures pytest del motor de composición documental."""
import os
from datetime import datetime
from io import BytesIO

# El logger global se crea al importar sentinelle: sin ficheros ni LLM en tests.
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LLM_ENABLED", "false")
os.environ.setdefault("LEGAL_EXPLAINER_BACKEND", "none")

import pdfplumber
import pytest

from sentinelle.core.config import Settings
from sentinelle.models.incident import IncidentRecord, ProofItem
from sentinelle.reports.pdf.styles import page_geometry


GENERATED_AT = datetime(2026, 3, 14, 10, 30)


@pytest.fixture
def settings():
    """Configuración aislada: sin enriquecimiento externo."""
    return Settings(
        llm_enabled=False,
        openai_api_key=None,
        legal_explainer_backend="none",
        log_to_file=False,
        _env_file=None,
    )


@pytest.fixture
def generated_at():
    return GENERATED_AT


@pytest.fixture
def incident_42():
    """Incidente crítico n.º 42 con dos pruebas."""
    return IncidentRecord(
        numero=42,
        id="inc-42",
        titre="Absence de réponse du curateur",
        date_incident="2026-02-03",
        date_creation="2026-02-05T09:15:00Z",
        institution="Service curatelle professionnelle",
        type="Non-réponse",
        gravite="Critique",
        priorite="Haute",
        score=87,
        statut="Ouvert",
        faits=(
            "Le 3 février, trois courriers recommandés sont restés sans réponse. "
            "Le curateur n'a pas donné suite aux demandes de rendez-vous malgré "
            "les relances successives de la personne concernée."
        ),
        dysfonctionnement="Violation du devoir de diligence (art. 406 CC) et déni de justice formel.",
        transmis_jp=True,
        date_transmission_jp="2026-02-20",
        preuves=[
            ProofItem(id="p1", type="email", label="Relance du 3 février"),
            ProofItem(id="p2", type="screenshot", label="Capture du suivi postal", url="https://files/p2.png"),
        ],
    )


@pytest.fixture
def incident_without_proofs():
    return IncidentRecord(
        numero=42,
        titre="Rendez-vous annulé",
        date_incident="2026-02-03",
        gravite="critical",
        faits="Rendez-vous annulé sans préavis.",
        dysfonctionnement="Aucune justification fournie.",
        preuves=[],
    )


def pdf_text(content: bytes) -> str:
    """Texto de todas las páginas del PDF."""
    with pdfplumber.open(BytesIO(content)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


@pytest.fixture
def read_pdf():
    """Extractor de texto de un PDF generado (pdfplumber)."""
    return pdf_text


POINTS_PER_MM = 72 / 25.4


def overflowing_chars(content: bytes, page_format: str = "A4") -> list[tuple[int, str, float]]:
    """
    Caracteres del cuerpo cuya parte superior cae por debajo de safe_max_y.

    Los pies de página (7 pt, bajo el filete) no cuentan. Devuelve
    (página, carácter, top en mm).
    """
    geometry = page_geometry(page_format)
    found = []
    with pdfplumber.open(BytesIO(content)) as pdf:
        for number, page in enumerate(pdf.pages, start=1):
            for char in page.chars:
                top = char["top"] / POINTS_PER_MM
                in_footer = char["size"] < 7.5 and top >= geometry.footer_y - 5
                if top > geometry.safe_max_y and not in_footer:
                    found.append((number, char["text"], round(top, 1)))
    return found


@pytest.fixture
def body_overflow():
    """Detector de texto del cuerpo fuera de la zona segura (coordenadas pdfplumber)."""
    return overflowing_chars
