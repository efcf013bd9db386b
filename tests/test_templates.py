"""
Tests de los compositores de documentos (ficha, dossiers y expediente).

Los PDF se leen con pdfplumber; nada sale a la red.
"""
from unittest.mock import MagicMock

import pytest

from sentinelle.core.exceptions import LegalServiceException
from sentinelle.models.case_folder import CaseFolder
from sentinelle.models.export import ExportOptions
from sentinelle.models.factual import Actor, Dysfunction, EmailFact, FactualDossierData
from sentinelle.models.incident import EmailRecord, IncidentRecord, normalize_incident
from sentinelle.models.legal import LegalSearchResult, ProbativeCitation
from sentinelle.models.weekly import ThreadAnalysis, WeeklyReportData
from sentinelle.models.severity import Severity
from sentinelle.reports.pdf import primitives
from sentinelle.reports.pdf.styles import DEFAULT_PALETTE
from sentinelle.reports.templates.case_folder import generate_case_folder_dossier
from sentinelle.reports.templates.factual import (
    bucket_dysfunctions,
    fact_events,
    generate_factual_dossier,
    sort_actors,
)
from sentinelle.reports.templates.fiche import generate_fiche
from sentinelle.reports.templates.incident_dossier import generate_incident_dossier
from sentinelle.reports.templates.judicial import (
    generate_judicial_dossier,
    sort_established_facts,
    toc_entries,
)
from sentinelle.reports.templates.weekly import (
    generate_weekly_report,
    sort_weekly_incidents,
    weekly_stats,
)


@pytest.fixture
def badge_spy(monkeypatch):
    """Registra (etiqueta, color) de cada insignia dibujada."""
    calls = []
    original = primitives.draw_badge

    def spy(canvas, label, x, y, color, *args, **kwargs):
        calls.append((label, color))
        return original(canvas, label, x, y, color, *args, **kwargs)

    monkeypatch.setattr(primitives, "draw_badge", spy)
    return calls


# =========================================================
# FICHA
# =========================================================


class TestFiche:

    def test_ficha_sin_pruebas(self, incident_without_proofs, settings, generated_at, read_pdf, badge_spy):
        doc = generate_fiche(incident_without_proofs, settings=settings, generated_at=generated_at)

        assert doc.filename == "fiche-incident-INC-0042-2026-03-14.pdf"
        assert doc.media_type == "application/pdf"
        assert doc.content.startswith(b"%PDF")
        assert "preuves" not in doc.included_sections
        assert "INC-0042" in read_pdf(doc.content)
        assert ("CRITIQUE", DEFAULT_PALETTE.critique) in badge_spy

    def test_ficha_con_pruebas(self, incident_42, settings, generated_at, read_pdf):
        doc = generate_fiche(incident_42, settings=settings, generated_at=generated_at)

        assert doc.included_sections == ["preuves"]
        text = read_pdf(doc.content)
        assert "Empreinte" in text
        assert "Page 1/" in text

    def test_pruebas_desactivadas(self, incident_42, settings, generated_at):
        doc = generate_fiche(
            incident_42, ExportOptions(include_proofs=False), settings=settings, generated_at=generated_at
        )
        assert doc.included_sections == []

    def test_institucion_enorme_no_invade_el_pie(self, settings, generated_at, read_pdf, body_overflow):
        incident = IncidentRecord(numero=7, institution="institution " * 900)
        doc = generate_fiche(incident, settings=settings, generated_at=generated_at)

        assert doc.page_count >= 3
        assert body_overflow(doc.content) == []
        text = read_pdf(doc.content)
        assert "Type:" in text
        assert "Transmis JP:" in text

    def test_score_fuera_de_rango_se_muestra_como_no_disponible(self, settings, generated_at, read_pdf):
        doc = generate_fiche(IncidentRecord(numero=7, titre="t", score=120), settings=settings, generated_at=generated_at)
        assert "(Score: N/A)" in read_pdf(doc.content)

    def test_el_incidente_no_se_modifica(self, incident_42, settings, generated_at):
        before = incident_42.model_dump()
        generate_fiche(incident_42, settings=settings, generated_at=generated_at)
        assert incident_42.model_dump() == before


# =========================================================
# DOSSIER DE INCIDENTE
# =========================================================


ALL_OPTIONS = ExportOptions(
    include_emails=True,
    include_email_citations=True,
    include_legal_search=True,
    include_deep_analysis=True,
)


class TestIncidentDossier:

    def test_opciones_por_defecto(self, incident_42, settings, generated_at, read_pdf):
        doc = generate_incident_dossier(incident_42, settings=settings, generated_at=generated_at)

        assert doc.filename == "dossier-incident-INC-0042-2026-03-14.pdf"
        assert doc.included_sections == ["bases_legales", "preuves"]
        assert "CC art. 406" in read_pdf(doc.content)

    def test_sufijos_en_orden(self, incident_42, settings, generated_at, read_pdf):
        emails = [
            EmailRecord(
                id="m1",
                sender="curateur@example.ch",
                subject="Votre demande de rendez-vous",
                body="Nous refusons de fixer un rendez-vous avant la fin du mois prochain.",
                timestamp="2026-02-03T10:00:00Z",
            )
        ]
        results = [
            LegalSearchResult(title="ATF 140 III 1", source_type="jurisprudence", relevance_score=0.4),
            LegalSearchResult(title="Art. 406 CC", relevance_score=0.9),
        ]

        doc = generate_incident_dossier(
            incident_42,
            ALL_OPTIONS,
            emails=emails,
            legal_search_results=results,
            deep_analysis="Analyse détaillée de la situation.",
            settings=settings,
            generated_at=generated_at,
        )

        assert doc.filename == "dossier-incident-INC-0042-emails-citations-juridique-analyse-2026-03-14.pdf"
        assert doc.included_sections == [
            "bases_legales", "preuves", "emails", "citations", "recherche_juridique", "analyse",
        ]
        text = read_pdf(doc.content)
        assert "JURISPRUDENCE" in text
        assert "Analyse détaillée" in text

    def test_secciones_vacias_con_marcador(self, incident_42, settings, generated_at, read_pdf):
        doc = generate_incident_dossier(incident_42, ALL_OPTIONS, settings=settings, generated_at=generated_at)

        assert doc.filename == "dossier-incident-INC-0042-emails-citations-juridique-analyse-2026-03-14.pdf"
        text = read_pdf(doc.content)
        assert "Aucun email" in text
        assert "Aucune analyse approfondie" in text

    def test_citas_proporcionadas_sustituyen_a_la_heuristica(self, incident_42, settings, generated_at, read_pdf):
        citations = [ProbativeCitation(text="Nous ne donnerons pas suite.", source="SCP, 03.02.2026")]
        doc = generate_incident_dossier(
            incident_42,
            ExportOptions(include_email_citations=True),
            probative_citations=citations,
            settings=settings,
            generated_at=generated_at,
        )
        assert "Nous ne donnerons pas suite." in read_pdf(doc.content)

    @pytest.mark.parametrize("error", [LegalServiceException("indisponible"), RuntimeError("boom")])
    def test_servicio_juridico_caido_degrada(self, incident_42, settings, generated_at, read_pdf, error):
        service = MagicMock()
        service.explain.side_effect = error

        doc = generate_incident_dossier(incident_42, legal_service=service, settings=settings, generated_at=generated_at)

        assert "bases_legales" in doc.included_sections
        assert "CC art. 406" in read_pdf(doc.content)

    def test_sin_explicaciones_juridicas(self, incident_42, settings, generated_at):
        doc = generate_incident_dossier(
            incident_42,
            ExportOptions(include_legal_explanations=False),
            settings=settings,
            generated_at=generated_at,
        )
        assert "bases_legales" not in doc.included_sections


# =========================================================
# DOSSIER JUDICIAL
# =========================================================


class TestJudicial:

    def test_sin_incidentes(self, settings, generated_at, read_pdf):
        doc = generate_judicial_dossier([], settings=settings, generated_at=generated_at)

        assert doc.filename == "dossier-juridique-rapport-2026-03-14.pdf"
        assert doc.page_count >= 3
        assert "Aucun fait" in read_pdf(doc.content)

    def test_con_incidentes(self, incident_42, incident_without_proofs, settings, generated_at, read_pdf):
        doc = generate_judicial_dossier(
            [incident_42, incident_without_proofs],
            case_name="Curatelle Dupont",
            period=("2026-01-01", "2026-03-01"),
            settings=settings,
            generated_at=generated_at,
        )

        assert doc.filename == "dossier-juridique-Curatelle-Dupont-2026-03-14.pdf"
        text = read_pdf(doc.content)
        assert "INC-0042" in text
        assert f"Page {doc.page_count}/{doc.page_count}" in text

    @pytest.mark.parametrize("page_format", ["LETTER", "A5"])
    def test_portada_fuera_del_pie_en_otros_formatos(
        self, page_format, incident_42, settings, generated_at, read_pdf, body_overflow
    ):
        settings = settings.model_copy(update={"page_format": page_format})
        doc = generate_judicial_dossier(
            [incident_42], period=("2026-01-01", "2026-03-01"), settings=settings, generated_at=generated_at
        )

        assert body_overflow(doc.content, page_format) == []
        text = read_pdf(doc.content)
        assert "Système d'Audit Juridique - Protection de l'Adulte" in text
        assert "SYNTHÈSE DU DOSSIER" in text

    def test_orden_de_los_hechos(self):
        sheets = [
            normalize_incident(IncidentRecord(numero=1, gravite="faible", date_incident="2026-03-01")),
            normalize_incident(IncidentRecord(numero=2, gravite="critique", date_incident="2026-01-01")),
            normalize_incident(IncidentRecord(numero=3, gravite="critique", date_incident="2026-02-01")),
            normalize_incident(IncidentRecord(numero=4, gravite="haute")),
        ]
        assert [s.numero for s in sort_established_facts(sheets)] == [3, 2, 4, 1]

    def test_indice_estimado(self):
        pages = [page for _, _, page in toc_entries(6)]
        assert pages == [3, 3, 6, 8, 12]


# =========================================================
# DOSSIER FACTUAL
# =========================================================


class TestFactual:

    def test_reparto_por_gravedad_con_topes(self):
        dysfunctions = (
            [Dysfunction(id=f"c{i}", severity="critique") for i in range(8)]
            + [Dysfunction(id=f"h{i}", severity="haute") for i in range(4)]
            + [Dysfunction(id=f"m{i}", severity="moyenne") for i in range(9)]
            + [Dysfunction(id=f"f{i}", severity="faible") for i in range(3)]
            + [Dysfunction(id=f"u{i}") for i in range(3)]
        )

        buckets = bucket_dysfunctions(dysfunctions)

        assert [label for label, _, _ in buckets] == ["Critiques (12)", "Modérés (9)", "Faibles (6)"]
        assert [len(items) for _, _, items in buckets] == [10, 8, 5]

    def test_hechos_mas_recientes_en_orden_ascendente(self):
        facts = [EmailFact(id=f"f{i}", received_at=f"2026-01-{i:02d}") for i in range(1, 32)]
        facts.append(EmailFact(id="sans-date"))

        events = fact_events(facts, 30)

        assert len(events) == 30
        assert events[0].date == "2026-01-02"
        assert events[-1].date == "2026-01-31"

    def test_actores_por_disfunciones(self):
        actors = [Actor(name=f"A{i}", dysfunction_count=i) for i in range(20)]
        ordered = sort_actors(actors)
        assert len(ordered) == 15
        assert ordered[0].name == "A19"

    def test_dossier_vacio(self, settings, generated_at, read_pdf):
        doc = generate_factual_dossier(FactualDossierData(), settings=settings, generated_at=generated_at)

        assert doc.filename == "dossier-factuel-faits-2026-03-14.pdf"
        assert "Aucun dysfonctionnement" in read_pdf(doc.content)

    def test_dossier_completo(self, settings, generated_at, read_pdf):
        data = FactualDossierData(
            facts=[
                EmailFact(
                    id="f1",
                    sender_name="Curateur",
                    subject="Refus de rendez-vous",
                    received_at="2026-02-03T10:00:00Z",
                    raw_citations=[{"text": "Nous ne pouvons pas vous recevoir."}],
                )
            ],
            dysfunctions=[Dysfunction(id="d1", type="delai", description="Délai dépassé", severity="haute")],
            actors=[Actor(name="Curateur", institution="SCP", email_count=4, dysfunction_count=1)],
            stats={"total_emails": 4, "total_facts": 1, "total_dysfunctions": 1, "avg_response_days": 12.5},
        )

        doc = generate_factual_dossier(data, case_name="Dupont", settings=settings, generated_at=generated_at)

        assert doc.filename == "dossier-factuel-Dupont-2026-03-14.pdf"
        text = read_pdf(doc.content)
        assert "Délai dépassé" in text
        assert "Refus de rendez-vous" in text


# =========================================================
# EXPEDIENTE
# =========================================================


@pytest.fixture
def folder():
    return CaseFolder(
        id="f-1",
        name="Curatelle Dupont",
        priority="haute",
        summary="Suivi des manquements du curateur depuis janvier.",
        participants=[{"name": "M. Curateur", "role": "curateur", "institution": "SCP"}],
        violations_detected=[
            {"type": "Délai", "severity": "moyenne"},
            {"type": "Déni de justice", "severity": "critique", "legal_ref": "Cst 29"},
        ],
        recommendations=[{"action": "Saisir la justice de paix", "priority": "haute"}],
        timeline=[{"date": "2026-01-10", "event": "Premier courrier"}],
        documents=[{"original_filename": "courrier.pdf", "document_type": "lettre", "page_count": 2}],
        incidents=[{"numero": 42, "titre": "Absence de réponse", "gravite": "critique"}],
    )


class TestCaseFolder:

    def test_sufijos_en_orden_fijo(self, folder, settings, generated_at, read_pdf):
        options = ExportOptions(
            include_participants=True,
            include_timeline=True,
            include_document_list=True,
            include_incidents=True,
        )

        doc = generate_case_folder_dossier(folder, options, settings=settings, generated_at=generated_at)

        assert doc.filename == "dossier-Curatelle-Dupont-documents-chronologie-acteurs-incidents-2026-03-14.pdf"
        assert doc.included_sections == ["acteurs", "chronologie", "documents", "incidents"]
        text = read_pdf(doc.content)
        assert "courrier.pdf" in text
        assert "Saisir la justice de paix" in text

    def test_secciones_sin_datos_se_omiten(self, settings, generated_at):
        options = ExportOptions(include_participants=True, include_timeline=True, include_document_list=True)

        doc = generate_case_folder_dossier(
            CaseFolder(name="Curatelle Dupont"), options, settings=settings, generated_at=generated_at
        )

        assert doc.filename == "dossier-Curatelle-Dupont-2026-03-14.pdf"
        assert doc.included_sections == []

    def test_violaciones_por_gravedad(self, folder, settings, generated_at, badge_spy):
        generate_case_folder_dossier(folder, settings=settings, generated_at=generated_at)
        labels = [label for label, _ in badge_spy]
        assert labels.index("CRITIQUE") < labels.index("MOYENNE")


# =========================================================
# RAPPORT HEBDOMADAIRE
# =========================================================


class TestWeekly:

    def test_cifras_de_la_semana(self):
        sheets = [
            normalize_incident(IncidentRecord(numero=1, gravite="critique", institution="SCP", statut="Ouvert")),
            normalize_incident(IncidentRecord(numero=2, gravite="critique", institution="APEA", statut="Ouvert")),
            normalize_incident(IncidentRecord(numero=3, gravite="haute", institution="SCP", statut="Fermé")),
            normalize_incident(IncidentRecord(numero=4)),
        ]

        stats = weekly_stats(sheets)

        assert stats.total == 4
        assert stats.critical == 2
        assert stats.high == 1
        assert stats.by_severity[Severity.UNKNOWN] == 1
        assert stats.by_institution == [("SCP", 2), ("APEA", 1)]
        assert stats.by_status[0] == ("Ouvert", 2)
        assert stats.percent(stats.critical) == 50

    def test_cifras_sin_incidentes(self):
        stats = weekly_stats([])
        assert stats.total == 0
        assert stats.percent(0) == 0

    def test_orden_por_gravedad_y_fecha(self):
        sheets = [
            normalize_incident(IncidentRecord(numero=1, gravite="faible", date_creation="2026-03-10")),
            normalize_incident(IncidentRecord(numero=2, gravite="critique", date_creation="2026-03-08")),
            normalize_incident(IncidentRecord(numero=3, gravite="critique")),
            normalize_incident(IncidentRecord(numero=4, gravite="critique", date_creation="2026-03-12T08:00:00Z")),
        ]
        assert [s.numero for s in sort_weekly_incidents(sheets)] == [4, 2, 3, 1]

    def test_semana_vacia(self, settings, generated_at, read_pdf):
        data = WeeklyReportData(period_start="2026-03-07", period_end="2026-03-13")

        doc = generate_weekly_report(data, settings=settings, generated_at=generated_at)

        assert doc.filename == "rapport-hebdomadaire-2026-03-07-2026-03-13-2026-03-14.pdf"
        assert doc.included_sections == []
        text = read_pdf(doc.content)
        assert "RAPPORT HEBDOMADAIRE" in text
        assert "07.03.2026 - 13.03.2026" in text
        assert "Aucun incident enregistré" in text
        assert "Aucune preuve référencée" in text
        assert "NOTES ET AVERTISSEMENTS" in text

    def test_semana_completa_con_anexos(self, incident_42, incident_without_proofs, settings, generated_at, read_pdf):
        data = WeeklyReportData(
            period_start="2026-03-07",
            period_end="2026-03-13",
            incidents=[incident_without_proofs, incident_42],
            thread_analyses=[
                ThreadAnalysis(
                    id="t1",
                    chronological_summary="Trois relances sans réponse du service.",
                    severity="haute",
                    citations=[{"text": "Nous reviendrons vers vous."}],
                    emails_count=5,
                )
            ],
            email_facts=[
                EmailFact(
                    id="f1",
                    sender_name="Curateur",
                    sender_email="curateur@scp.ch",
                    mentioned_institutions=["SCP", "Justice de paix"],
                    key_phrases=["rendez-vous refusé"],
                )
            ],
        )

        doc = generate_weekly_report(data, settings=settings, generated_at=generated_at)

        assert doc.included_sections == ["analyses_threads", "faits_emails"]
        text = read_pdf(doc.content)
        for title in (
            "1. SYNTHÈSE EXÉCUTIVE",
            "2. RÉPARTITION PAR GRAVITÉ",
            "3. ANALYSE PAR INSTITUTION",
            "4. DÉTAIL DES INCIDENTS",
            "ANNEXE A - ANALYSES DE CONVERSATIONS",
            "ANNEXE B - FAITS EXTRAITS DES EMAILS",
            "ANNEXE C - INDEX DES PREUVES",
        ):
            assert title in text
        assert "#42 - CRITIQUE" in text
        assert "Thread #1 - 5 emails" in text
        assert "Email #1" in text
        assert "Relance du 3 février" in text
        assert "Base légale:" in text

    @pytest.mark.parametrize("page_format", ["A5", "LETTER"])
    def test_muchos_incidentes_no_invaden_el_pie(self, page_format, settings, generated_at, body_overflow):
        settings = settings.model_copy(update={"page_format": page_format})
        incidents = [
            IncidentRecord(
                numero=n,
                titre="Courrier resté sans réponse " * 6,
                gravite=("critique", "haute", "moyenne", "faible")[n % 4],
                institution=f"Institution {n % 12}",
                faits="Relance sans suite. " * 40,
                dysfonctionnement="Défaut de diligence. " * 20,
            )
            for n in range(1, 31)
        ]
        data = WeeklyReportData(period_start="2026-03-07", period_end="2026-03-13", incidents=incidents)

        doc = generate_weekly_report(data, settings=settings, generated_at=generated_at)

        assert doc.page_count >= 5
        assert body_overflow(doc.content, page_format) == []
