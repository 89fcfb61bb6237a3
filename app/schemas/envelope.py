"""Success and failure envelopes shared by every endpoint."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Single field-level validation or domain issue detail."""

    field: str
    issue: str


class ErrorObject(BaseModel):
    """Canonical error payload object."""

    code: str
    message: str
    details: list[ErrorDetail] | None = None


class SuccessEnvelope(BaseModel):
    """Top-level response for a successful operation."""

    success: Literal[True] = True
    data: Any = None
    timestamp: datetime = Field(default_factory=utc_now)


class FailureEnvelope(BaseModel):
    """Top-level response for a failed operation."""

    success: Literal[False] = False
    error: ErrorObject
    timestamp: datetime = Field(default_factory=utc_now)
