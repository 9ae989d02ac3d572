"""Shared test fixtures."""

from __future__ import annotations

import io
from collections.abc import Sequence

import pytest
from PIL import Image

from handoff.engine.checkpoints import CheckpointStore
from handoff.engine.chunker import ImageChunker
from handoff.engine.controller import StageController
from handoff.engine.monitor import Monitor
from handoff.models.assets import Asset, Chunk
from handoff.models.blueprint import Blueprint
from handoff.models.options import ConversionSettings, InstructionMode


BLUEPRINT_JSON = {
    "projectName": "Todo Board",
    "techStack": ["React", "Vite", "Tailwind"],
    "estimatedComplexity": "medium",
    "deploymentChecklist": ["npm install", "npm run build"],
    "modules": [
        {
            "id": "m1",
            "filename": "src/App.jsx",
            "type": "component",
            "description": "Root component",
            "technologies": ["React"],
        },
        {"id": "m2", "filename": "index.html", "type": "entry"},
    ],
}

SYNTHESIS_TEXT = """Sure! Here is the project.

### FILE: index.html
```html
<!DOCTYPE html>
<html><body><div id="root"></div></body></html>
```

### FILE: ./src/App.jsx
```jsx
export default function App() {
  return <h1>Hello</h1>;
}
```

### FILE: README.md
# Todo Board
Run with npm start
"""


def png_bytes(width: int = 8, height: int = 8, fmt: str = "PNG") -> bytes:
    """Image whose pixel rows encode their own y coordinate in (R, G)."""
    image = Image.new("RGB", (width, height))
    image.putdata([(y % 256, (y // 256) % 256, 0) for y in range(height) for _ in range(width)])
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


class FakeGateway:
    """Scripted stand-in for the model gateway; records every call."""

    def __init__(
        self,
        blueprint: dict | None = None,
        synthesis_text: str = SYNTHESIS_TEXT,
    ) -> None:
        self.blueprint = Blueprint.model_validate(blueprint or BLUEPRINT_JSON)
        self.synthesis_text = synthesis_text
        self.analyze_errors: list[Exception] = []
        self.synthesize_errors: list[Exception] = []
        self.calls: list[tuple[str, int, InstructionMode]] = []
        self.last_options: ConversionSettings | None = None

    async def analyze(self, chunks: Sequence[Chunk], mode: InstructionMode) -> Blueprint:
        self.calls.append(("analyze", len(chunks), mode))
        if self.analyze_errors:
            raise self.analyze_errors.pop(0)
        return self.blueprint

    async def synthesize(
        self,
        chunks: Sequence[Chunk],
        blueprint: Blueprint,
        mode: InstructionMode,
        options: ConversionSettings | None = None,
    ) -> str:
        self.calls.append(("synthesize", len(chunks), mode))
        self.last_options = options
        if self.synthesize_errors:
            raise self.synthesize_errors.pop(0)
        return self.synthesis_text


@pytest.fixture
def small_asset() -> Asset:
    return Asset.from_bytes(png_bytes(16, 600), name="short.png")


@pytest.fixture
def tall_asset() -> Asset:
    return Asset.from_bytes(png_bytes(4, 3000), name="tall.png")


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def monitor() -> Monitor:
    return Monitor()


@pytest.fixture
def controller(fake_gateway: FakeGateway, monitor: Monitor) -> StageController:
    return StageController(
        gateway=fake_gateway,
        monitor=monitor,
        chunker=ImageChunker(device_pixel_ratio=1.0),
        checkpoints=CheckpointStore(),
    )
