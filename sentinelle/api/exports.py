"""
ENDPOINTS DE EXPORTACIÓN PDF.

Cada endpoint recibe el payload del caso + opciones, compone el documento
en memoria y lo devuelve como descarga (application/pdf).
El motor no persiste nada: no hay almacenamiento ni autenticación aquí.
"""
from __future__ import annotations

from io import BytesIO
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from sentinelle.core.config import Settings, get_settings
from sentinelle.core.logger import log_error
from sentinelle.models.case_folder import CaseFolder
from sentinelle.models.export import ExportOptions, GeneratedDocument
from sentinelle.models.factual import FactualDossierData
from sentinelle.models.incident import EmailRecord, IncidentRecord
from sentinelle.models.legal import LegalSearchResult, ProbativeCitation
from sentinelle.models.weekly import WeeklyReportData
from sentinelle.reports.templates.case_folder import generate_case_folder_dossier
from sentinelle.reports.templates.factual import generate_factual_dossier
from sentinelle.reports.templates.fiche import generate_fiche
from sentinelle.reports.templates.incident_dossier import generate_incident_dossier
from sentinelle.reports.templates.judicial import generate_judicial_dossier
from sentinelle.reports.templates.weekly import generate_weekly_report


router = APIRouter(
    prefix="/exports",
    tags=["exports"],
)

PDF_RESPONSES = {
    200: {
        "content": {"application/pdf": {}},
        "description": "Documento PDF generado",
    },
    422: {"description": "Payload inválido"},
    500: {"description": "Fallo al componer el documento"},
}


# =========================================================
# MODELOS DE PETICIÓN
# =========================================================


class FicheRequest(BaseModel):
    incident: IncidentRecord
    options: ExportOptions = Field(default_factory=ExportOptions)


class IncidentDossierRequest(BaseModel):
    incident: IncidentRecord
    options: ExportOptions = Field(default_factory=ExportOptions)
    emails: list[EmailRecord] = Field(default_factory=list)
    legal_search_results: list[LegalSearchResult] = Field(default_factory=list)
    probative_citations: Optional[list[ProbativeCitation]] = None
    deep_analysis: Optional[str] = None


class JudicialRequest(BaseModel):
    incidents: list[IncidentRecord] = Field(default_factory=list)
    case_name: Optional[str] = None
    recipient: Optional[str] = None
    title: str = "DOSSIER JURIDIQUE"
    period_start: Optional[str] = None
    period_end: Optional[str] = None


class FactualRequest(BaseModel):
    data: FactualDossierData
    case_name: Optional[str] = None


class CaseFolderRequest(BaseModel):
    folder: CaseFolder
    options: ExportOptions = Field(default_factory=ExportOptions)


class WeeklyRequest(BaseModel):
    data: WeeklyReportData


# =========================================================
# UTILIDADES
# =========================================================


def pdf_response(document: GeneratedDocument) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(document.content),
        media_type=document.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"'
        },
    )


def _export(kind: str, build: Callable[[], GeneratedDocument], case_id: Optional[str] = None) -> StreamingResponse:
    """
    Ejecuta el compositor y traduce cualquier fallo inesperado a HTTP 500.

    Los errores de validación del payload ya los devuelve FastAPI como 422.
    """
    try:
        document = build()
    except Exception as e:
        error_detail = f"Error al generar el documento {kind}: {str(e)}"
        log_error(error_detail, case_id=case_id, action="pdf_export_failed", error=e, kind=kind)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail,
        )
    return pdf_response(document)


# =========================================================
# ENDPOINTS
# =========================================================


@router.post("/fiche", summary="Ficha de incidente en PDF", responses=PDF_RESPONSES)
def export_fiche(
    payload: FicheRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    return _export(
        "fiche",
        lambda: generate_fiche(payload.incident, payload.options, settings=settings),
        case_id=payload.incident.id,
    )


@router.post("/incident-dossier", summary="Dossier enriquecido de incidente", responses=PDF_RESPONSES)
def export_incident_dossier(
    payload: IncidentDossierRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """
    Dossier de incidente con bases legales, pruebas y secciones opcionales.

    Si `probative_citations` no viene informado, las citas se extraen
    localmente de los correos (cuando la opción está activa).
    """
    return _export(
        "incident-dossier",
        lambda: generate_incident_dossier(
            payload.incident,
            payload.options,
            emails=payload.emails,
            legal_search_results=payload.legal_search_results,
            probative_citations=payload.probative_citations,
            deep_analysis=payload.deep_analysis,
            settings=settings,
        ),
        case_id=payload.incident.id,
    )


@router.post("/judicial", summary="Dossier juridique para la Justice de Paix", responses=PDF_RESPONSES)
def export_judicial(
    payload: JudicialRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    period = None
    if payload.period_start and payload.period_end:
        period = (payload.period_start, payload.period_end)
    return _export(
        "judicial",
        lambda: generate_judicial_dossier(
            payload.incidents,
            case_name=payload.case_name,
            recipient=payload.recipient,
            title=payload.title,
            period=period,
            settings=settings,
        ),
    )


@router.post("/factual", summary="Dossier factual (solo hechos)", responses=PDF_RESPONSES)
def export_factual(
    payload: FactualRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    return _export(
        "factual",
        lambda: generate_factual_dossier(payload.data, case_name=payload.case_name, settings=settings),
    )


@router.post("/case-folder", summary="Dossier de expediente", responses=PDF_RESPONSES)
def export_case_folder(
    payload: CaseFolderRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    return _export(
        "case-folder",
        lambda: generate_case_folder_dossier(payload.folder, payload.options, settings=settings),
        case_id=payload.folder.id,
    )


@router.post("/weekly", summary="Rapport hebdomadaire del registro de incidentes", responses=PDF_RESPONSES)
def export_weekly(
    payload: WeeklyRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    return _export(
        "weekly",
        lambda: generate_weekly_report(payload.data, settings=settings),
    )
