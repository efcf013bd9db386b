"""
Evento de cronología.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from sentinelle.models.severity import Severity


class EventType(str, Enum):
    """Tipos de evento representados en la cronología."""

    EMAIL = "email"
    INCIDENT = "incident"
    EVENT = "event"
    DEADLINE = "deadline"
    PROMISE = "promise"
    CONTRADICTION = "contradiction"


class TimelineEvent(BaseModel):
    """
    Evento de la cronología.

    `severity`, si está informada, manda sobre el color del tipo.
    """

    date: str
    title: str
    description: Optional[str] = None
    type: EventType = EventType.EVENT
    severity: Optional[Severity] = None
    actor: Optional[str] = None
    origin_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> EventType:
        if isinstance(v, EventType):
            return v
        try:
            return EventType(str(v or "").strip().lower())
        except ValueError:
            return EventType.EVENT

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, v: Any) -> Optional[Severity]:
        if v is None or v == "":
            return None
        return Severity.parse(v)
