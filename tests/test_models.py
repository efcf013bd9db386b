"""
Tests de los modelos de datos: normalización de gravedad y de incidentes.
"""
import pytest
from pydantic import ValidationError

from sentinelle.models.case_folder import CaseFolder
from sentinelle.models.export import ExportOptions
from sentinelle.models.incident import IncidentRecord, normalize_incident
from sentinelle.models.severity import Severity
from sentinelle.models.timeline_event import EventType, TimelineEvent
from sentinelle.models.weekly import ThreadAnalysis, WeeklyReportData


class TestSeverity:

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Critique", Severity.CRITIQUE),
            ("critical", Severity.CRITIQUE),
            ("Haute", Severity.HAUTE),
            ("grave", Severity.HAUTE),
            ("Élevée", Severity.HAUTE),
            ("high", Severity.HAUTE),
            ("Modéré", Severity.MOYENNE),
            ("modérée", Severity.MOYENNE),
            ("medium", Severity.MOYENNE),
            ("Faible", Severity.FAIBLE),
            ("mineur", Severity.FAIBLE),
            ("low", Severity.FAIBLE),
            ("", Severity.UNKNOWN),
            (None, Severity.UNKNOWN),
            ("???", Severity.UNKNOWN),
        ],
    )
    def test_parse(self, label, expected):
        assert Severity.parse(label) is expected

    def test_orden(self):
        ordered = sorted(Severity, key=lambda s: s.rank)
        assert ordered == [Severity.CRITIQUE, Severity.HAUTE, Severity.MOYENNE, Severity.FAIBLE, Severity.UNKNOWN]

    def test_etiquetas(self):
        assert Severity.CRITIQUE.label == "CRITIQUE"
        assert Severity.UNKNOWN.label == "NON CLASSEE"


class TestIncident:

    def test_gravedad_normalizada_en_la_frontera(self):
        assert IncidentRecord(numero=1, gravite="Grave").gravite is Severity.HAUTE

    def test_numero_obligatorio(self):
        with pytest.raises(ValidationError):
            IncidentRecord(titre="Sans numéro")

    def test_normalizacion_con_marcadores(self):
        sheet = normalize_incident(IncidentRecord(numero=42))
        assert sheet.reference == "INC-0042"
        assert sheet.titre == "Sans titre"
        assert sheet.institution == "Non renseigné"
        assert sheet.faits == "Non renseigné"
        assert sheet.priorite == "N/A"
        assert sheet.transmis_jp is False
        assert sheet.preuves == []

    def test_el_registro_es_inmutable(self):
        record = IncidentRecord(numero=1)
        with pytest.raises(ValidationError):
            record.titre = "modifié"

    @pytest.mark.parametrize("raw", [120, -5, "élevé", "", float("nan"), True])
    def test_score_invalido_queda_sin_informar(self, raw):
        assert IncidentRecord(numero=7, titre="t", score=raw).score is None

    @pytest.mark.parametrize("raw, expected", [(0, 0), (87, 87), ("64", 64), (99.6, 99), (None, None)])
    def test_score_valido(self, raw, expected):
        assert IncidentRecord(numero=7, score=raw).score == expected


class TestOtros:

    def test_opciones_por_defecto(self):
        options = ExportOptions()
        assert options.include_proofs is True
        assert options.include_legal_explanations is True
        assert options.include_emails is False
        assert options.include_timeline is False

    def test_tipo_de_evento_desconocido(self):
        assert TimelineEvent(date="2026-01-01", title="x", type="autre").type is EventType.EVENT

    def test_listas_nulas_del_expediente(self):
        folder = CaseFolder(name="Dossier", participants=None, documents=None)
        assert folder.participants == []
        assert folder.documents == []

    def test_score_de_problema_fuera_de_rango(self):
        assert CaseFolder(name="Dossier", problem_score=250).problem_score is None
        assert CaseFolder(name="Dossier", problem_score="n/a").problem_score is None
        assert CaseFolder(name="Dossier", problem_score=40).problem_score == 40

    def test_citas_de_hilo_como_texto(self):
        thread = ThreadAnalysis(
            id="t1",
            citations=["Première citation", {"text": "Seconde citation"}, {"text": "  "}, None],
            emails_count=None,
        )
        assert thread.citations == ["Première citation", "Seconde citation"]
        assert thread.emails_count == 0

    def test_listas_nulas_del_rapport_hebdomadaire(self):
        data = WeeklyReportData(period_start="2026-03-07", period_end="2026-03-13", incidents=None, email_facts=None)
        assert data.incidents == []
        assert data.email_facts == []
        assert data.thread_analyses == []
