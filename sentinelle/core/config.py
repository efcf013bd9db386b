"""
Sistema de configuración con Pydantic Settings.

Centraliza la configuración del motor de composición documental:
- Validación automática de tipos
- Valores por defecto seguros (el motor funciona sin ningún servicio externo)
- Límites de contenido de cada plantilla (topes de secciones)
"""
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración global de Sentinelle.

    Todas las variables se pueden sobrescribir con variables de entorno
    (el nombre del campo en mayúsculas, p.ej. PAGE_FORMAT=A4).
    """

    # =========================================================
    # ENTORNO
    # =========================================================

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Entorno de ejecución"
    )

    app_name: str = Field(default="Sentinelle")

    app_version: str = Field(default="1.0.0")

    # =========================================================
    # OPENAI / LLM
    # =========================================================

    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key de OpenAI (opcional, el motor funciona sin ella)",
    )

    llm_enabled: bool = Field(
        default=True, description="Habilitar/deshabilitar LLM globalmente"
    )

    primary_model: str = Field(default="gpt-4o-mini", description="Modelo LLM principal")

    fallback_model: str = Field(default="gpt-3.5-turbo", description="Modelo LLM de fallback")

    llm_timeout_seconds: int = Field(
        default=30, ge=5, le=120, description="Timeout para llamadas LLM"
    )

    llm_max_retries: int = Field(default=2, ge=0, le=5, description="Reintentos máximos para LLM")

    # =========================================================
    # EXPLICACIONES JURÍDICAS (ENRIQUECIMIENTO)
    # =========================================================

    legal_explainer_backend: Literal["llm", "http", "none"] = Field(
        default="llm",
        description="Servicio que explica las bases legales (llm, http o none)",
    )

    legal_explainer_url: Optional[str] = Field(
        default=None,
        description="Endpoint HTTP del servicio explain-legal-context (backend=http)",
    )

    legal_explainer_timeout_seconds: int = Field(
        default=20, ge=1, le=120, description="Timeout del servicio HTTP de explicaciones"
    )

    # =========================================================
    # MAQUETACIÓN
    # =========================================================

    page_format: str = Field(default="A4", description="Formato de página de los documentos")

    judicial_qualification_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Incidentes con calificación jurídica en el dossier judicial",
    )

    legal_references_per_incident: int = Field(
        default=3, ge=1, le=10, description="Bases legales por incidente (dossier judicial)"
    )

    factual_timeline_limit: int = Field(
        default=30, ge=1, le=200, description="Hechos máximos en la cronología factual"
    )

    case_folder_timeline_limit: int = Field(
        default=20, ge=1, le=200, description="Eventos máximos en la cronología del expediente"
    )

    recipient_authority: str = Field(
        default="Justice de Paix du district",
        description="Destinatario por defecto del dossier judicial",
    )

    jurisdiction_label: str = Field(
        default="Protection de l'Adulte - Canton de Vaud",
        description="Subtítulo institucional de la portada",
    )

    # =========================================================
    # PATHS Y LOGS
    # =========================================================

    logs_dir: Path = Field(default=Path("runtime/logs"), description="Directorio de logs")

    log_to_file: bool = Field(default=True, description="Escribir logs JSON en disco")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # =========================================================
    # VALIDACIONES CUSTOM
    # =========================================================

    @field_validator("page_format")
    @classmethod
    def validate_page_format(cls, v: str) -> str:
        """Normaliza el formato (a4 -> A4)."""
        return v.strip().upper()

    @field_validator("legal_explainer_url")
    @classmethod
    def validate_explainer_url(cls, v: Optional[str]) -> Optional[str]:
        """La URL debe ser http(s)."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("legal_explainer_url debe empezar con http:// o https://")
        return v

    # =========================================================
    # PROPIEDADES COMPUTADAS
    # =========================================================

    @property
    def is_production(self) -> bool:
        """Verifica si está en producción."""
        return self.environment == "production"

    @property
    def llm_available(self) -> bool:
        """Verifica si LLM está disponible."""
        return self.llm_enabled and self.openai_api_key is not None

    @property
    def log_file(self) -> Path:
        """Ruta del fichero de log estructurado."""
        return self.logs_dir / "sentinelle.log"

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_assignment=True,
        extra="ignore",
    )


# =========================================================
# INSTANCIA GLOBAL (SINGLETON)
# =========================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Obtiene la instancia global de configuración (singleton).

    Returns:
        Settings: Configuración global validada
    """
    global _settings

    if _settings is None:
        _settings = Settings()
        # El SDK de OpenAI lee OPENAI_API_KEY del entorno.
        if _settings.openai_api_key and not os.getenv("OPENAI_API_KEY"):
            os.environ["OPENAI_API_KEY"] = _settings.openai_api_key

    return _settings


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para tests).

    Returns:
        Settings: Nueva instancia de configuración
    """
    global _settings
    _settings = None
    return get_settings()
