"""
Dossier de incidente enriquecido ("PDF+").

Orden de secciones:
    identificación -> hechos -> disfunción -> [notas de análisis]
    -> bases legales -> pruebas con huella -> [correspondencia]
    -> [citas probatorias] -> [búsqueda jurídica] -> [análisis profundo]
    -> aviso legal

Las secciones opcionales añaden un sufijo al nombre del fichero
(-emails, -citations, -juridique, -analyse).
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sentinelle.core.config import Settings
from sentinelle.legal.explainer import resolve
from sentinelle.legal.references import extract
from sentinelle.models.export import ExportOptions, GeneratedDocument
from sentinelle.models.incident import EmailRecord, IncidentRecord, IncidentSheet, normalize_incident
from sentinelle.models.legal import LegalSearchResult, ProbativeCitation
from sentinelle.reports.pdf import primitives
from sentinelle.reports.pdf.canvas import DocumentCanvas
from sentinelle.reports.pdf.primitives import (
    draw_citation,
    draw_disclaimer,
    draw_header,
    draw_legal_box,
    draw_text_box,
)
from sentinelle.reports.pdf.sections import Section
from sentinelle.reports.pdf.styles import format_pdf_date, format_pdf_datetime
from sentinelle.reports.pdf.text import draw_justified_text, draw_justified_text_block, draw_wrapped_text
from sentinelle.reports.templates.base import (
    LPD_DISCLAIMER,
    DocumentPlan,
    SectionNumbering,
    draw_generated_line,
    draw_numbered_title,
    draw_placeholder,
    draw_proof_table,
    finalize_document,
    open_canvas,
    resolve_settings,
)
from sentinelle.reports.templates.fiche import identification_section
from sentinelle.services.legal_explanation_service import (
    LegalExplanationService,
    get_legal_explanation_service,
)
from sentinelle.services.probative_citations import extract_probative_citations

PREFIX = "dossier-incident"

EMAIL_BODY_MAX_LENGTH = 1500
MAX_EMAILS = 20


# =========================================================
# SECCIONES BÁSICAS
# =========================================================


def _justified(name: str, title: str, text: str, numbering: SectionNumbering, color_name: str) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        color = getattr(canvas.palette, color_name)
        y = draw_numbered_title(canvas, numbering, title, y, color=color)
        return draw_justified_text_block(canvas, text, y, border=color, max_length=6000)

    return Section(name, render)


def _legal_bases(
    sheet: IncidentSheet,
    numbering: SectionNumbering,
    service: Optional[LegalExplanationService],
    case_id: Optional[str],
) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = canvas.ensure_space(y, 60)
        y = draw_numbered_title(canvas, numbering, "BASES LÉGALES APPLICABLES", y, color=canvas.palette.legal)
        references = extract(f"{sheet.faits} {sheet.dysfonctionnement}")
        explanations = resolve(
            references,
            sheet.faits,
            sheet.dysfonctionnement,
            sheet.raw_type,
            service=service,
            case_id=case_id,
        )
        for explanation in explanations:
            y = draw_legal_box(canvas, y, explanation)
        return y

    return Section("bases_legales", render)


def _proofs(sheet: IncidentSheet, numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "PREUVES RÉFÉRENCÉES", y, color=canvas.palette.evidence)
        return draw_proof_table(canvas, y, [sheet])

    return Section("preuves", render)


# =========================================================
# SECCIONES OPCIONALES
# =========================================================


def draw_email(canvas: DocumentCanvas, y: float, index: int, email: EmailRecord) -> float:
    """Un correo: cabecera (fecha, sentido, remitente), asunto y cuerpo truncado."""
    palette = canvas.palette
    x = canvas.geometry.margin_left
    width = canvas.geometry.content_width

    y = canvas.ensure_space(y, 24)
    direction = "ENVOYÉ" if email.is_sent else "REÇU"
    canvas.set_font("bold", 9)
    canvas.set_text_color(palette.primary)
    canvas.text(f"E{index}", x, y)
    primitives.draw_badge(
        canvas, direction, x + 10, y, palette.secondary if email.is_sent else palette.evidence, size=6
    )
    canvas.set_font("normal", 8)
    canvas.set_text_color(palette.muted)
    canvas.text(format_pdf_datetime(email.timestamp, "Date inconnue"), canvas.geometry.right_edge, y, align="right")
    y += 5

    parties = f"De: {email.sender or 'Inconnu'}"
    if email.recipient:
        parties += f"  |  À: {email.recipient}"
    y = draw_wrapped_text(canvas, parties, x + 5, y, width - 5, size=8, color=palette.secondary, max_length=160)
    y = draw_wrapped_text(
        canvas, f"Objet: {email.subject or '(sans objet)'}", x + 5, y, width - 5,
        style="bold", size=9, color=palette.text, max_length=160,
    )
    y = draw_justified_text(
        canvas, email.body or "(corps vide)", x + 5, y + 1, width - 5,
        line_height=4, size=8, color=palette.text, max_length=EMAIL_BODY_MAX_LENGTH,
    )

    canvas.set_draw_color(palette.border)
    canvas.set_line_width(0.2)
    canvas.line(x, y + 1, canvas.geometry.right_edge, y + 1)
    return canvas.track(y + 6)


def _emails(emails: Sequence[EmailRecord], numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "CORRESPONDANCE", y)
        if not emails:
            return draw_placeholder(canvas, y, "Aucun email associé à cet incident.")
        for index, email in enumerate(emails[:MAX_EMAILS], start=1):
            y = draw_email(canvas, y, index, email)
        if len(emails) > MAX_EMAILS:
            y = draw_placeholder(canvas, y, f"... et {len(emails) - MAX_EMAILS} autres emails non reproduits.")
        return y

    return Section("emails", render)


def _citations(citations: Sequence[ProbativeCitation], numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "CITATIONS PROBANTES", y, color=canvas.palette.evidence)
        if not citations:
            return draw_placeholder(canvas, y, "Aucune citation probante identifiée dans la correspondance.")
        for index, citation in enumerate(citations, start=1):
            y = draw_citation(canvas, y, index, citation.text, citation.source)
        return y

    return Section("citations", render)


def draw_search_result(canvas: DocumentCanvas, y: float, result: LegalSearchResult) -> float:
    palette = canvas.palette
    x = canvas.geometry.margin_left
    width = canvas.geometry.content_width

    y = canvas.ensure_space(y, 22)
    is_case_law = result.source_type == "jurisprudence"
    badge_width = primitives.draw_badge(
        canvas, "JURISPRUDENCE" if is_case_law else "LÉGISLATION", x, y,
        palette.legal if is_case_law else palette.primary, size=6,
    )
    y = draw_wrapped_text(
        canvas, result.title, x + badge_width + 3, y, width - badge_width - 3,
        style="bold", size=9, color=palette.text, max_length=200, max_lines=2,
    )

    meta = [m for m in (
        result.reference_number,
        result.source_name,
        format_pdf_date(result.decision_date) if result.decision_date else None,
        f"Pertinence: {round(result.relevance_score * 100)}%" if result.relevance_score is not None else None,
    ) if m]
    if meta:
        y = draw_wrapped_text(canvas, " | ".join(meta), x + 3, y, width - 3, size=7, color=palette.muted)
    if result.summary:
        y = draw_justified_text(canvas, result.summary, x + 3, y + 1, width - 3, line_height=4, size=8, max_length=600)
    if result.source_url:
        y = draw_wrapped_text(canvas, result.source_url, x + 3, y, width - 3, size=7, color=palette.primary)
    return canvas.track(y + 5)


def _legal_search(results: Sequence[LegalSearchResult], numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "RECHERCHE JURIDIQUE", y, color=canvas.palette.legal)
        if not results:
            return draw_placeholder(canvas, y, "Aucun résultat de recherche juridique disponible.")
        ordered = sorted(results, key=lambda r: -(r.relevance_score or 0.0))
        for result in ordered:
            y = draw_search_result(canvas, y, result)
        return y

    return Section("recherche_juridique", render)


def _deep_analysis(text: Optional[str], numbering: SectionNumbering) -> Section:
    def render(canvas: DocumentCanvas, y: float) -> float:
        y = draw_numbered_title(canvas, numbering, "ANALYSE APPROFONDIE", y, color=canvas.palette.legal)
        if not text or not text.strip():
            return draw_placeholder(canvas, y, "Aucune analyse approfondie disponible.")
        return draw_text_box(canvas, y, text, bar_color=canvas.palette.legal, max_length=8000)

    return Section("analyse", render)


# =========================================================
# COMPOSITOR
# =========================================================


def generate_incident_dossier(
    incident: IncidentRecord,
    options: Optional[ExportOptions] = None,
    emails: Optional[Sequence[EmailRecord]] = None,
    legal_search_results: Optional[Sequence[LegalSearchResult]] = None,
    probative_citations: Optional[Sequence[ProbativeCitation]] = None,
    deep_analysis: Optional[str] = None,
    legal_service: Optional[LegalExplanationService] = None,
    settings: Optional[Settings] = None,
    generated_at: Optional[datetime] = None,
) -> GeneratedDocument:
    """
    Genera el dossier enriquecido de un incidente.

    Args:
        incident: Incidente (no se modifica)
        options: Secciones opcionales
        emails: Correspondencia del incidente
        legal_search_results: Resultado externo de búsqueda jurídica
        probative_citations: Citas ya extraídas; None -> heurística local
        deep_analysis: Texto de análisis profundo (opaco)
        legal_service: Servicio de explicaciones; None -> el configurado

    Returns:
        GeneratedDocument ("dossier-incident-INC-0042[-emails]...-AAAA-MM-DD.pdf")
    """
    options = options or ExportOptions()
    settings = resolve_settings(settings)
    generated_at = generated_at or datetime.now()
    emails = list(emails or [])
    sheet = normalize_incident(incident)
    if legal_service is None:
        legal_service = get_legal_explanation_service(settings)

    numbering = SectionNumbering()
    plan = DocumentPlan()
    plan.add(identification_section(sheet, numbering))
    plan.add(_justified("faits", "FAITS CONSTATÉS", sheet.faits, numbering, "primary"))
    plan.add(_justified("dysfonctionnement", "DYSFONCTIONNEMENT IDENTIFIÉ", sheet.dysfonctionnement, numbering, "critique"))
    if sheet.analysis_notes:
        plan.add(_justified("notes", "NOTES D'ANALYSE", sheet.analysis_notes, numbering, "secondary"))
    if options.include_legal_explanations:
        plan.add_optional(_legal_bases(sheet, numbering, legal_service, incident.id))
    if options.include_proofs and sheet.preuves:
        plan.add_optional(_proofs(sheet, numbering))
    if options.include_emails:
        plan.add_optional(_emails(emails, numbering), suffix="emails")
    if options.include_email_citations:
        citations = list(probative_citations) if probative_citations is not None else extract_probative_citations(
            emails, context=f"{sheet.faits} {sheet.dysfonctionnement}"
        )
        plan.add_optional(_citations(citations, numbering), suffix="citations")
    if options.include_legal_search:
        plan.add_optional(_legal_search(list(legal_search_results or []), numbering), suffix="juridique")
    if options.include_deep_analysis:
        plan.add_optional(_deep_analysis(deep_analysis, numbering), suffix="analyse")
    plan.add(Section("avertissement", lambda c, y: draw_disclaimer(c, y, LPD_DISCLAIMER)))

    canvas = open_canvas(settings, f"Dossier incident {sheet.reference}")
    y = draw_header(canvas, "dossier_incident", sheet.titre, str(sheet.numero))
    y = draw_generated_line(canvas, y, generated_at)
    plan.render(canvas, y)

    return finalize_document(
        canvas,
        "dossier_incident",
        PREFIX,
        sheet.reference,
        footer_info=f"Incident #{sheet.numero}",
        plan=plan,
        generated_at=generated_at,
        case_id=incident.id,
    )
