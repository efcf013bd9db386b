"""
Tests de los nombres de fichero (descarga y archivo).
"""
from datetime import datetime

import pytest

from sentinelle.models.incident import IncidentRecord
from sentinelle.services.document_naming import (
    archive_filename,
    document_filename,
    institution_initials,
    sanitize_identity,
)

WHEN = datetime(2026, 3, 14, 10, 30)


class TestSanitizeIdentity:

    @pytest.mark.parametrize(
        "identity, expected",
        [
            ("INC-0042", "INC-0042"),
            ("Dossier Mme Müller / 2026", "Dossier-Mme-Muller-2026"),
            ("  --a__b--  ", "a-b"),
            ("", "document"),
            (None, "document"),
            ("???", "document"),
        ],
    )
    def test_caracteres_permitidos(self, identity, expected):
        assert sanitize_identity(identity) == expected

    def test_longitud_maxima(self):
        value = sanitize_identity("x" * 100)
        assert len(value) == 40


class TestDocumentFilename:

    def test_sin_sufijos(self):
        assert document_filename("fiche-incident", "INC-0042", when=WHEN) == "fiche-incident-INC-0042-2026-03-14.pdf"

    def test_con_sufijos_en_orden(self):
        name = document_filename("dossier-incident", "INC-0042", ["emails", "citations"], WHEN)
        assert name == "dossier-incident-INC-0042-emails-citations-2026-03-14.pdf"


class TestArchiveFilename:

    @pytest.mark.parametrize(
        "institution, expected",
        [
            ("Juge de paix", "JP"),
            ("Service curatelle professionnelle", "SCP"),
            ("Centre social régional de Lausanne", "CSR"),
            ("Hôpital psychiatrique de Cery", "HPC"),
            (None, "XX"),
            ("   ", "XX"),
        ],
    )
    def test_iniciales(self, institution, expected):
        assert institution_initials(institution) == expected

    def test_nombre_de_archivo(self):
        incident = IncidentRecord(
            numero=42, date_incident="2026-03-14", priorite="Haute", institution="Juge de paix"
        )
        assert archive_filename(incident, is_plus=True, version=2) == "2026-03-14_HAUTE_JP_0042_PLUS_V2.pdf"

    def test_prioridad_ausente(self):
        incident = IncidentRecord(numero=7, date_incident="2026-01-02T08:00:00Z")
        assert archive_filename(incident) == "2026-01-02_NA_XX_0007_V1.pdf"
