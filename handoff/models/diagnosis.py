"""Error diagnosis model — what the user sees when a phase fails."""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import BaseModel


class FaultKind(str, enum.Enum):
    AUTHENTICATION_FAILURE = "authentication_failure"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    UNKNOWN_PROCESSING_FAULT = "unknown_processing_fault"


class RemedyAction(BaseModel):
    label: str
    kind: Literal["retry", "config", "billing", "refresh"]


class ErrorClassification(BaseModel):
    code: str
    title: str
    message: str
    kind: FaultKind = FaultKind.UNKNOWN_PROCESSING_FAULT
    remedy_action: RemedyAction | None = None
