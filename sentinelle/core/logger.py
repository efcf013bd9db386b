"""
Logging JSON de Sentinelle: una línea por evento, con el caso (incidente o
expediente) y la acción (pdf_export, legal_resolve, llm_execute...).
"""
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **getattr(record, "data", {}),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Envoltorio de `logging` que adjunta case_id, action y datos extra."""

    def __init__(self, name: str, log_file: Optional[Path] = None, level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level, logging.INFO))
        self.logger.handlers = []

        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        for handler in handlers:
            handler.setFormatter(JsonFormatter())
            self.logger.addHandler(handler)

    def log(
        self,
        level: int,
        message: str,
        case_id: Optional[str] = None,
        action: Optional[str] = None,
        error: Optional[Exception] = None,
        **extra: Any,
    ) -> None:
        if error is not None:
            extra["error_type"] = type(error).__name__
            extra["error_message"] = str(error)
        data = {"case_id": case_id, "action": action, **extra}
        self.logger.log(level, message, extra={"data": {k: v for k, v in data.items() if v is not None}})


_default_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "sentinelle") -> StructuredLogger:
    """Logger del proceso; fichero y nivel salen de Settings (LOG_TO_FILE, LOG_LEVEL)."""
    global _default_logger

    if _default_logger is None:
        from sentinelle.core.config import get_settings

        config = get_settings()
        log_file = config.log_file if config.log_to_file else None
        _default_logger = StructuredLogger(name, log_file, level=config.log_level)

    return _default_logger


logger = get_logger()


def log_info(message: str, case_id: Optional[str] = None, action: Optional[str] = None, **extra):
    logger.log(logging.INFO, message, case_id=case_id, action=action, **extra)


def log_warning(message: str, case_id: Optional[str] = None, action: Optional[str] = None, **extra):
    logger.log(logging.WARNING, message, case_id=case_id, action=action, **extra)


def log_error(
    message: str,
    case_id: Optional[str] = None,
    action: Optional[str] = None,
    error: Optional[Exception] = None,
    **extra,
):
    logger.log(logging.ERROR, message, case_id=case_id, action=action, error=error, **extra)
