"""Instruction templates for the staging and synthesis phases."""

from __future__ import annotations

from handoff.models.blueprint import Blueprint
from handoff.models.options import ConversionOption, ConversionSettings, InstructionMode

_STAGING_STANDARD = "Review the chat screenshots and map out the project structure and primary files."

_STAGING_EXHAUSTIVE = (
    "This is a comprehensive project handoff. Meticulously map every required file for a "
    "production-ready build. Include all configurations (package.json, tailwind, etc.)."
)

_BLUEPRINT_FORMAT = """Do NOT write any source code yet. Respond with ONLY a JSON object of this shape:
{
  "projectName": "string",
  "techStack": ["string", ...],
  "estimatedComplexity": "low" | "medium" | "high",
  "deploymentChecklist": ["string", ...],
  "modules": [
    {"id": "string", "filename": "path/to/file.ext", "type": "string",
     "description": "string", "technologies": ["string", ...]}
  ]
}
projectName, techStack and modules are required; every module needs id, filename and type.
No markdown. No text outside the JSON."""

_SYNTHESIS_TEMPLATE = """You are a Senior Full-Stack Engineer performing a project handoff.
CONTEXT:
Project: {project_name}
Stack: {tech_stack}

PLANNED FILES:
{file_list}

GUIDELINES:
- Write complete, high-quality code.
- Every file must start with a descriptive header comment.
- NO placeholders like "// ... rest of code". Write EVERYTHING.
- For every file, use the format: "### FILE: path/to/filename.extension"
{extra}"""

_FULL_BUILD_CLAUSE = (
    "- FULL BUILD MODE: Ensure all imports are resolved correctly and every config file "
    "needed to run the project is included."
)

# Processing requirements contributed by individual conversion options.
_OPTION_REQUIREMENTS = {
    ConversionOption.EXTRACT_PROJECT_STRUCTURE: (
        "- Capture the planning, architecture and project structure discussed in the screenshots "
        "in a Markdown document file."
    ),
    ConversionOption.EXTRACT_SOURCE_CODE: (
        "- Extract every code snippet visible in the screenshots accurately and place it in the file it belongs to."
    ),
    ConversionOption.ADD_DOCUMENTATION: (
        "- Include a README that explains the project and a glossary of the specialized terms used."
    ),
    ConversionOption.REFACTOR_FOR_BEST_PRACTICES: (
        "- Organize the code cleanly: clear module boundaries, consistent naming, idiomatic structure."
    ),
    ConversionOption.ENABLE_SPLICE_ASSEMBLY: (
        "- Some screenshots were split into overlapping slices. Content repeated at a slice boundary "
        "appears once in the conversation; do not duplicate it."
    ),
}


def staging_instruction(mode: InstructionMode) -> str:
    lead = _STAGING_EXHAUSTIVE if mode is InstructionMode.EXHAUSTIVE else _STAGING_STANDARD
    return f"{lead}\n\n{_BLUEPRINT_FORMAT}"


def synthesis_instruction(
    blueprint: Blueprint,
    mode: InstructionMode,
    options: ConversionSettings | None = None,
) -> str:
    extra: list[str] = []
    if options is not None:
        for option, requirement in _OPTION_REQUIREMENTS.items():
            if options.is_enabled(option):
                extra.append(requirement)
    if mode is InstructionMode.EXHAUSTIVE:
        extra.append(_FULL_BUILD_CLAUSE)

    file_list = "\n".join(
        f"- {m.filename} ({m.type}){': ' + m.description if m.description else ''}"
        for m in blueprint.modules
    ) or "- (decide from the conversation)"

    return _SYNTHESIS_TEMPLATE.format(
        project_name=blueprint.project_name,
        tech_stack=", ".join(blueprint.tech_stack),
        file_list=file_list,
        extra="\n".join(extra),
    )
