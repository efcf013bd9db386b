"""
Sistema de excepciones estandarizado para Sentinelle.

Todas las excepciones del sistema heredan de SentinelleException y siguen
un formato consistente con:
- Código de error único
- Mensaje descriptivo
- Detalles adicionales (dict)
- Severity level

Política de errores del motor de composición:
- Datos de entrada incompletos -> marcadores ("Non renseigné"), nunca excepción
- Fallo de un servicio externo -> se captura, se registra y se degrada
- Solo la construcción del lienzo (formato de página inválido) es fatal
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(str, Enum):
    """Niveles de severidad para errores."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SentinelleException(Exception):
    """
    Excepción base del sistema Sentinelle.

    Todas las excepciones custom deben heredar de esta clase.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        original_error: Optional[Exception] = None
    ):
        """
        Args:
            code: Código único del error (ej: "PAGE_FORMAT_INVALID")
            message: Mensaje descriptivo para humanos
            details: Detalles adicionales (dict)
            severity: Nivel de severidad
            original_error: Excepción original si es un wrap
        """
        self.code = code
        self.message = message
        self.details = details or {}
        self.severity = severity
        self.original_error = original_error

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario (para API/logging).

        Returns:
            Dict con información de la excepción
        """
        result = {
            "error_code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details
        }

        if self.original_error:
            result["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error)
            }

        return result

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base


# =========================================================
# EXCEPCIONES DE CONFIGURACIÓN
# =========================================================

class ConfigurationException(SentinelleException):
    """Error de configuración del sistema."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            code="CONFIG_ERROR",
            message=message,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class PageFormatException(ConfigurationException):
    """Formato de página desconocido: el lienzo no puede construirse."""

    def __init__(self, page_format: str, **kwargs):
        super().__init__(
            message=f"Formato de página no soportado: {page_format}",
            details={"page_format": page_format},
            **kwargs
        )
        self.code = "PAGE_FORMAT_INVALID"


# =========================================================
# EXCEPCIONES DE MAQUETACIÓN
# =========================================================

class LayoutException(SentinelleException):
    """Uso incorrecto del lienzo (p.ej. dibujar tras estampar los pies de página)."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            code="LAYOUT_ERROR",
            message=message,
            severity=ErrorSeverity.HIGH,
            **kwargs
        )


# =========================================================
# EXCEPCIONES DE SERVICIOS EXTERNOS
# =========================================================

class LegalServiceException(SentinelleException):
    """
    Fallo del servicio de explicaciones jurídicas.

    Nunca llega al llamador de un compositor: el resolvedor la captura
    y degrada a la tabla estática de artículos.
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(
            code="LEGAL_SERVICE_ERROR",
            message=message,
            severity=ErrorSeverity.LOW,
            **kwargs
        )
