"""Resource governor — ingestion memory pressure from the current asset set."""

from __future__ import annotations

from collections.abc import Iterable

from handoff.models.assets import Asset, ResourceMetrics

# Saturation ceiling: 1.5 GiB.
MEMORY_LIMIT = int(1.5 * 1024 * 1024 * 1024)

# Flat per-image allowance for the decoded bitmap held in memory.
# A 1920x1080 RGBA screenshot is ~8 MiB; dimensions are not inspected.
FIXED_DECODE_OVERHEAD = 8 * 1024 * 1024


def asset_footprint(asset: Asset) -> int:
    """Bytes accounted for one asset: raw file + base64 copy + decode allowance."""
    return asset.raw_size + asset.encoded_size + FIXED_DECODE_OVERHEAD


def compute_metrics(assets: Iterable[Asset]) -> ResourceMetrics:
    total = 0
    count = 0
    for asset in assets:
        total += asset_footprint(asset)
        count += 1

    return ResourceMetrics(
        total_bytes=total,
        asset_count=count,
        saturation=min(total / MEMORY_LIMIT, 1.0),
        is_critical=total >= MEMORY_LIMIT,
    )
