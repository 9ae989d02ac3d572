"""Blueprint model — the structured output of the staging phase.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON the analyzer model is asked to return.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BlueprintModule(_WireModel):
    id: str
    filename: str
    type: str
    description: str = ""
    technologies: list[str] = Field(default_factory=list)

    @field_validator("technologies")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        # Treated as a set, but keep first-seen order for display
        return list(dict.fromkeys(value))


class Blueprint(_WireModel):
    project_name: str
    tech_stack: list[str]
    modules: list[BlueprintModule]
    estimated_complexity: Literal["low", "medium", "high"] | None = None
    deployment_checklist: list[str] | None = None
