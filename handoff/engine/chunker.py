"""Image chunker — slices tall screenshots into overlapping windows.

Chat-history captures are often far taller than a model will read at full
resolution. Tall images are cut into vertical windows that share
``OVERLAP_PX`` rows with their neighbour, so a line truncated at the bottom of
chunk k is visible again at the top of chunk k+1.
"""

from __future__ import annotations

import base64
import io
import logging
import math

from PIL import Image

from handoff.engine.errors import ChunkDecodeError, ChunkLimitExceeded
from handoff.models.assets import Asset, Chunk

logger = logging.getLogger(__name__)

OVERLAP_PX = 400

# Window height floor and the device-pixel budget it is derived from.
_MIN_CHUNK_HEIGHT = 1200
_CHUNK_PIXEL_BUDGET = 4000

# A trailing strip thinner than this is already inside the previous overlap.
_MIN_TRAILING_PX = 50

_OUTPUT_FORMAT = "PNG"
_OUTPUT_MIME = "image/png"
_PNG_MODES = {"1", "L", "LA", "I", "P", "RGB", "RGBA"}


def max_chunk_height(device_pixel_ratio: float = 1.0) -> int:
    dpr = device_pixel_ratio if device_pixel_ratio > 0 else 1.0
    return max(_MIN_CHUNK_HEIGHT, math.floor(_CHUNK_PIXEL_BUDGET / dpr))


def slice_windows(height: int, max_height: int) -> list[tuple[int, int]]:
    """Vertical windows as ``(top, window_height)`` pairs.

    Heights up to ``max_height`` give a single full window. Otherwise each
    window starts ``OVERLAP_PX`` rows above the end of the previous one, and
    the walk stops as soon as a window touches the bottom edge.
    """
    if height <= 0:
        raise ValueError(f"Image height must be positive, got {height}")
    if height <= max_height:
        return [(0, height)]
    if max_height <= OVERLAP_PX:
        raise ValueError(f"Window height {max_height} must exceed the {OVERLAP_PX}px overlap")

    windows: list[tuple[int, int]] = []
    y = 0
    while y < height:
        window = min(max_height, height - y)
        windows.append((y, window))
        if y + window >= height:
            break
        y += window - OVERLAP_PX
        if height - y < _MIN_TRAILING_PX:
            break
    return windows


class ImageChunker:
    """Decodes assets and produces their ordered chunk sequence."""

    def __init__(self, device_pixel_ratio: float = 1.0, max_chunks: int | None = None) -> None:
        self.device_pixel_ratio = device_pixel_ratio
        self.max_chunks = max_chunks

    @property
    def max_height(self) -> int:
        return max_chunk_height(self.device_pixel_ratio)

    def chunk(self, asset: Asset) -> list[Chunk]:
        image = _decode(asset)
        width, height = image.size
        if width <= 0 or height <= 0:
            raise ChunkDecodeError(f"Asset {asset.id} has empty dimensions {width}x{height}")

        if height <= self.max_height:
            mime = Image.MIME.get(image.format or "", _OUTPUT_MIME)
            return [Chunk(asset_id=asset.id, sequence_index=0, encoded_data=asset.encoded_payload, mime_type=mime)]

        windows = slice_windows(height, self.max_height)
        if self.max_chunks is not None and len(windows) > self.max_chunks:
            raise ChunkLimitExceeded(
                f"Asset {asset.id} needs {len(windows)} chunks (limit {self.max_chunks})"
            )

        if image.mode not in _PNG_MODES:
            image = image.convert("RGBA")

        chunks: list[Chunk] = []
        for index, (top, window) in enumerate(windows):
            region = image.crop((0, top, width, top + window))
            buf = io.BytesIO()
            region.save(buf, format=_OUTPUT_FORMAT)
            chunks.append(
                Chunk(
                    asset_id=asset.id,
                    sequence_index=index,
                    encoded_data=base64.b64encode(buf.getvalue()).decode("ascii"),
                    mime_type=_OUTPUT_MIME,
                )
            )

        logger.debug("Sliced asset %s (%dx%d) into %d chunks", asset.id, width, height, len(chunks))
        return chunks


def _decode(asset: Asset) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(asset.raw_bytes))
        image.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise ChunkDecodeError(f"Failed to decode asset {asset.id}: {e}") from e
    return image
