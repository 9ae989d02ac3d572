"""Error classifier — maps raw failure text to a diagnosis and remedy.

Rules are checked in order and the first match wins. Substrings overlap
("401 quota exceeded"), so a new rule must be inserted at its priority.
"""

from __future__ import annotations

from dataclasses import dataclass

from handoff.models.diagnosis import ErrorClassification, FaultKind, RemedyAction

_FALLBACK_MESSAGE = "An unhandled exception occurred during modular synthesis."


@dataclass(frozen=True)
class _Rule:
    needles: tuple[str, ...]
    code: str
    title: str
    message: str
    kind: FaultKind
    remedy: RemedyAction


_RULES: tuple[_Rule, ...] = (
    _Rule(
        needles=("api_key", "unauthorized", "401"),
        code="AUTH_001",
        title="Authentication Void",
        message="The model provider requires a valid API key.",
        kind=FaultKind.AUTHENTICATION_FAILURE,
        remedy=RemedyAction(label="Verify Key Settings", kind="config"),
    ),
    _Rule(
        needles=("quota", "429", "exhausted"),
        code="SWARM_429",
        title="Bandwidth Saturated",
        message="Rate limit hit. The provider is over capacity.",
        kind=FaultKind.RATE_LIMIT_EXCEEDED,
        remedy=RemedyAction(label="Wait 60s & Retry", kind="retry"),
    ),
)


def classify(raw_error: str | BaseException | None) -> ErrorClassification:
    if isinstance(raw_error, BaseException):
        text = str(raw_error)
    else:
        text = raw_error or ""
    lowered = text.lower()

    for rule in _RULES:
        if any(needle in lowered for needle in rule.needles):
            return ErrorClassification(
                code=rule.code,
                title=rule.title,
                message=rule.message,
                kind=rule.kind,
                remedy_action=rule.remedy,
            )

    return ErrorClassification(
        code="SYS_ERR_UNKNOWN",
        title="Logic Processor Fault",
        message=text or _FALLBACK_MESSAGE,
        kind=FaultKind.UNKNOWN_PROCESSING_FAULT,
    )
