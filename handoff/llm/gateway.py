"""Model gateway — the two model calls the stage controller depends on.

``ModelGateway`` is the contract; ``AnthropicGateway`` implements it with
LangChain's ChatAnthropic. Both calls are stateless: no conversation is kept
between them and either may be retried verbatim. Provider errors are not
wrapped; their text is what the error classifier reads.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any, Protocol

from handoff.config import Settings, settings
from handoff.engine.errors import AuthenticationFailure, BlueprintValidationError
from handoff.llm.model_router import get_model_for_task
from handoff.llm.prompts import staging_instruction, synthesis_instruction
from handoff.models.assets import Chunk
from handoff.models.blueprint import Blueprint
from handoff.models.options import ConversionSettings, InstructionMode

logger = logging.getLogger(__name__)

_ANALYZE_MAX_TOKENS = 4096


class ModelGateway(Protocol):
    async def analyze(self, chunks: Sequence[Chunk], mode: InstructionMode) -> Blueprint: ...

    async def synthesize(
        self,
        chunks: Sequence[Chunk],
        blueprint: Blueprint,
        mode: InstructionMode,
        options: ConversionSettings | None = None,
    ) -> str: ...


class AnthropicGateway:
    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings

    async def analyze(self, chunks: Sequence[Chunk], mode: InstructionMode) -> Blueprint:
        from langchain_core.messages import HumanMessage

        llm = self._llm("analyze", max_tokens=_ANALYZE_MAX_TOKENS)
        message = HumanMessage(
            content=[*image_blocks(chunks), {"type": "text", "text": staging_instruction(mode)}]
        )
        logger.info("Staging call: %d chunks, %s mode", len(chunks), mode.value)
        response = await llm.ainvoke([message])
        return parse_blueprint(response_text(response.content))

    async def synthesize(
        self,
        chunks: Sequence[Chunk],
        blueprint: Blueprint,
        mode: InstructionMode,
        options: ConversionSettings | None = None,
    ) -> str:
        from langchain_core.messages import HumanMessage, SystemMessage

        llm = self._llm(
            "synthesize",
            max_tokens=self.config.max_tokens,
            thinking={"type": "enabled", "budget_tokens": self.config.thinking_budget_tokens},
        )
        messages = [
            SystemMessage(content=synthesis_instruction(blueprint, mode, options)),
            HumanMessage(
                content=[
                    *image_blocks(chunks),
                    {"type": "text", "text": "Write every planned file now."},
                ]
            ),
        ]
        logger.info("Synthesis call: %d chunks, %s mode", len(chunks), mode.value)
        response = await llm.ainvoke(messages)
        return response_text(response.content)

    def _llm(self, task: str, **kwargs: Any):
        if not self.config.anthropic_api_key:
            raise AuthenticationFailure("api_key not configured; set ANTHROPIC_API_KEY in .env")

        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=get_model_for_task(task, self.config),
            api_key=self.config.anthropic_api_key,
            **kwargs,
        )


def image_blocks(chunks: Sequence[Chunk]) -> list[dict[str, Any]]:
    return [
        {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": chunk.mime_type,
                "data": chunk.encoded_data,
            },
        }
        for chunk in chunks
    ]


def response_text(content: str | list[Any]) -> str:
    """Plain text of a model reply, skipping thinking blocks."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def parse_blueprint(text: str) -> Blueprint:
    """Validate the staging reply (bare or fenced JSON) as a Blueprint."""
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)
    cleaned = cleaned.strip()

    json_match = re.search(r"\{[\s\S]*\}", cleaned)
    if json_match:
        cleaned = json_match.group(0)

    try:
        data = json.loads(cleaned)
        return Blueprint.model_validate(data)
    except ValueError as e:
        raise BlueprintValidationError(f"Malformed blueprint response: {e}") from e
