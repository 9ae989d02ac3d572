"""Conversion options — a closed set of boolean switches for the pipeline."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict


class ConversionOption(str, enum.Enum):
    EXTRACT_PROJECT_STRUCTURE = "extract_project_structure"
    EXTRACT_SOURCE_CODE = "extract_source_code"
    ADD_DOCUMENTATION = "add_documentation"
    REFACTOR_FOR_BEST_PRACTICES = "refactor_for_best_practices"
    ENABLE_SPLICE_ASSEMBLY = "enable_splice_assembly"
    ENABLE_NEURAL_PERSISTENCE = "enable_neural_persistence"


class InstructionMode(str, enum.Enum):
    STANDARD = "standard"
    EXHAUSTIVE = "exhaustive"


class ConversionSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    extract_project_structure: bool = True
    extract_source_code: bool = True
    add_documentation: bool = True
    refactor_for_best_practices: bool = True
    enable_splice_assembly: bool = True
    enable_neural_persistence: bool = False

    def as_options(self) -> dict[ConversionOption, bool]:
        return {
            ConversionOption.EXTRACT_PROJECT_STRUCTURE: self.extract_project_structure,
            ConversionOption.EXTRACT_SOURCE_CODE: self.extract_source_code,
            ConversionOption.ADD_DOCUMENTATION: self.add_documentation,
            ConversionOption.REFACTOR_FOR_BEST_PRACTICES: self.refactor_for_best_practices,
            ConversionOption.ENABLE_SPLICE_ASSEMBLY: self.enable_splice_assembly,
            ConversionOption.ENABLE_NEURAL_PERSISTENCE: self.enable_neural_persistence,
        }

    def is_enabled(self, option: ConversionOption) -> bool:
        return self.as_options()[option]

    def with_option(self, option: ConversionOption, enabled: bool) -> ConversionSettings:
        """Return a copy with one option set."""
        values = self.as_options()
        values[ConversionOption(option)] = enabled
        return ConversionSettings(
            extract_project_structure=values[ConversionOption.EXTRACT_PROJECT_STRUCTURE],
            extract_source_code=values[ConversionOption.EXTRACT_SOURCE_CODE],
            add_documentation=values[ConversionOption.ADD_DOCUMENTATION],
            refactor_for_best_practices=values[ConversionOption.REFACTOR_FOR_BEST_PRACTICES],
            enable_splice_assembly=values[ConversionOption.ENABLE_SPLICE_ASSEMBLY],
            enable_neural_persistence=values[ConversionOption.ENABLE_NEURAL_PERSISTENCE],
        )

    @property
    def instruction_mode(self) -> InstructionMode:
        if self.enable_neural_persistence:
            return InstructionMode.EXHAUSTIVE
        return InstructionMode.STANDARD
