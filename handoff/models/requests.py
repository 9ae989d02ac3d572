"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AssetUploadRequest(BaseModel):
    data: str = Field(..., description="Base64 image bytes (a data: URL prefix is accepted)")
    name: str = Field(default="", description="Original file name, for display")


class OptionUpdateRequest(BaseModel):
    enabled: bool = Field(..., description="New value for the option")
