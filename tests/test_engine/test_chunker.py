"""Tests for the overlapping image chunker."""

from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from handoff.engine.chunker import (
    OVERLAP_PX,
    ImageChunker,
    max_chunk_height,
    slice_windows,
)
from handoff.engine.errors import ChunkDecodeError, ChunkLimitExceeded, UnknownProcessingFault
from handoff.models.assets import Asset
from tests.conftest import png_bytes


def _decode(chunk) -> Image.Image:
    image = Image.open(io.BytesIO(base64.b64decode(chunk.encoded_data)))
    image.load()
    return image


class TestMaxChunkHeight:
    def test_standard_display(self):
        assert max_chunk_height(1.0) == 4000

    def test_retina_display(self):
        assert max_chunk_height(2.0) == 2000

    def test_floor(self):
        assert max_chunk_height(4.0) == 1200
        assert max_chunk_height(10.0) == 1200

    def test_fractional_ratio_floors(self):
        assert max_chunk_height(1.5) == 2666

    def test_invalid_ratio_falls_back(self):
        assert max_chunk_height(0) == 4000


class TestSliceWindows:
    def test_short_image_single_window(self):
        assert slice_windows(1200, 1200) == [(0, 1200)]
        assert slice_windows(1, 1200) == [(0, 1)]

    def test_known_layout(self):
        assert slice_windows(3000, 1200) == [(0, 1200), (800, 1200), (1600, 1200), (2400, 600)]

    def test_stops_when_window_reaches_bottom(self):
        # The final window ends exactly at the bottom: no zero-advance repeat
        assert slice_windows(2000, 1200) == [(0, 1200), (800, 1200)]

    def test_barely_tall(self):
        assert slice_windows(1201, 1200) == [(0, 1200), (800, 401)]

    @pytest.mark.parametrize("height", list(range(1201, 9000, 113)) + [2400, 4000, 4001])
    def test_coverage_and_overlap(self, height):
        max_height = 1200
        windows = slice_windows(height, max_height)

        assert windows[0][0] == 0
        last_top, last_h = windows[-1]
        assert last_top + last_h == height

        for (top, h), (next_top, next_h) in zip(windows, windows[1:]):
            assert h == max_height
            assert next_top == top + h - OVERLAP_PX
            assert 0 < next_h <= max_height

    def test_no_chunk_cap(self):
        windows = slice_windows(200_000, 1200)
        assert len(windows) == 250

    def test_rejects_empty_height(self):
        with pytest.raises(ValueError):
            slice_windows(0, 1200)


class TestImageChunker:
    def test_short_image_passes_through(self, small_asset):
        chunks = ImageChunker().chunk(small_asset)
        assert len(chunks) == 1
        assert chunks[0].encoded_data == small_asset.encoded_payload
        assert chunks[0].asset_id == small_asset.id
        assert chunks[0].sequence_index == 0
        assert chunks[0].mime_type == "image/png"

    def test_short_jpeg_keeps_mime(self):
        asset = Asset.from_bytes(png_bytes(16, 16, fmt="JPEG"))
        chunks = ImageChunker().chunk(asset)
        assert chunks[0].mime_type == "image/jpeg"

    def test_tall_image_slices(self, tall_asset):
        chunks = ImageChunker(device_pixel_ratio=4.0).chunk(tall_asset)
        assert [c.sequence_index for c in chunks] == [0, 1, 2, 3]
        assert all(c.asset_id == tall_asset.id for c in chunks)
        assert all(c.mime_type == "image/png" for c in chunks)

        heights = [_decode(c).size for c in chunks]
        assert heights == [(4, 1200), (4, 1200), (4, 1200), (4, 600)]

    def test_slices_start_at_window_tops(self, tall_asset):
        chunks = ImageChunker(device_pixel_ratio=4.0).chunk(tall_asset)
        for chunk, top in zip(chunks, [0, 800, 1600, 2400]):
            # Rows encode their own y coordinate
            assert _decode(chunk).getpixel((0, 0)) == (top % 256, top // 256, 0)

    def test_regenerated_per_call(self, tall_asset):
        chunker = ImageChunker(device_pixel_ratio=4.0)
        first = chunker.chunk(tall_asset)
        second = chunker.chunk(tall_asset)
        assert first == second
        assert first is not second

    def test_corrupt_image_raises(self):
        asset = Asset.from_bytes(b"definitely not an image")
        with pytest.raises(ChunkDecodeError):
            ImageChunker().chunk(asset)

    def test_truncated_image_raises(self):
        data = png_bytes(64, 600)
        asset = Asset.from_bytes(data[: len(data) // 2])
        with pytest.raises(ChunkDecodeError):
            ImageChunker().chunk(asset)

    def test_decode_error_is_processing_fault(self):
        asset = Asset.from_bytes(b"")
        with pytest.raises(UnknownProcessingFault):
            ImageChunker().chunk(asset)

    def test_optional_cap(self, tall_asset):
        with pytest.raises(ChunkLimitExceeded):
            ImageChunker(device_pixel_ratio=4.0, max_chunks=2).chunk(tall_asset)

    def test_cap_not_applied_to_single_chunk(self, small_asset):
        assert len(ImageChunker(max_chunks=1).chunk(small_asset)) == 1
