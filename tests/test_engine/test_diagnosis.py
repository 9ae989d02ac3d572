"""Tests for the error classifier."""

from __future__ import annotations

import pytest

from handoff.engine.diagnosis import classify
from handoff.engine.errors import ChunkDecodeError
from handoff.models.diagnosis import FaultKind


@pytest.mark.parametrize(
    "message",
    ["API_KEY invalid", "Request Unauthorized", "Error code: 401 - invalid x-api-key"],
)
def test_auth(message):
    result = classify(message)
    assert result.code == "AUTH_001"
    assert result.kind is FaultKind.AUTHENTICATION_FAILURE
    assert result.remedy_action is not None
    assert result.remedy_action.kind == "config"


@pytest.mark.parametrize(
    "message",
    ["Quota exceeded for project", "Error code: 429", "RESOURCE_EXHAUSTED"],
)
def test_rate_limit(message):
    result = classify(message)
    assert result.code == "SWARM_429"
    assert result.kind is FaultKind.RATE_LIMIT_EXCEEDED
    assert result.remedy_action.kind == "retry"


def test_auth_wins_over_rate_limit():
    assert classify("401: quota check failed").code == "AUTH_001"
    assert classify("quota exhausted, unauthorized").code == "AUTH_001"


def test_unknown_echoes_message():
    result = classify("Something odd: Segment 7 missing")
    assert result.code == "SYS_ERR_UNKNOWN"
    assert result.message == "Something odd: Segment 7 missing"
    assert result.remedy_action is None
    assert result.kind is FaultKind.UNKNOWN_PROCESSING_FAULT


@pytest.mark.parametrize("raw", ["", None])
def test_unknown_empty_message(raw):
    result = classify(raw)
    assert result.code == "SYS_ERR_UNKNOWN"
    assert result.message


def test_accepts_exceptions():
    assert classify(RuntimeError("HTTP 429 Too Many Requests")).code == "SWARM_429"
    decode = classify(ChunkDecodeError("Failed to decode asset a1"))
    assert decode.code == "SYS_ERR_UNKNOWN"
    assert decode.message == "Failed to decode asset a1"
