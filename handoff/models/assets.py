"""Ingested image assets, their derived chunks, and resource accounting."""

from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass, field

from pydantic import BaseModel


@dataclass(frozen=True)
class Asset:
    """One user-supplied screenshot plus its base64 payload."""

    id: str
    raw_bytes: bytes = field(repr=False)
    encoded_payload: str = field(repr=False)
    name: str = ""

    @property
    def raw_size(self) -> int:
        return len(self.raw_bytes)

    @property
    def encoded_size(self) -> int:
        return len(self.encoded_payload)

    @classmethod
    def from_bytes(cls, raw: bytes, name: str = "", asset_id: str | None = None) -> Asset:
        return cls(
            id=asset_id or uuid.uuid4().hex[:9],
            raw_bytes=raw,
            encoded_payload=base64.b64encode(raw).decode("ascii"),
            name=name,
        )

    @classmethod
    def from_base64(cls, payload: str, name: str = "", asset_id: str | None = None) -> Asset:
        """Build an asset from a base64 string, tolerating a ``data:`` URL prefix."""
        if payload.startswith("data:") and "," in payload:
            payload = payload.split(",", 1)[1]
        raw = base64.b64decode(payload, validate=True)
        return cls(
            id=asset_id or uuid.uuid4().hex[:9],
            raw_bytes=raw,
            encoded_payload=payload,
            name=name,
        )


@dataclass(frozen=True)
class Chunk:
    """A vertical slice of an asset, the unit of model input."""

    asset_id: str
    sequence_index: int
    encoded_data: str = field(repr=False)
    mime_type: str = "image/png"


class ResourceMetrics(BaseModel):
    total_bytes: int = 0
    asset_count: int = 0
    saturation: float = 0.0  # 0 to 1
    is_critical: bool = False
