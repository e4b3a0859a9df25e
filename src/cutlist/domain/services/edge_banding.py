"""Edge banding aggregation.

Banding lengths are taken from the as-placed dimensions, so a rotated part
contributes its top/bottom banding along the placed height and its
left/right banding along the placed width.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from cutlist.domain.layout import BandingKey, Placement, SheetLayout
from cutlist.domain.value_objects import PartSpec

logger = logging.getLogger(__name__)


def placement_band_length(placement: Placement, spec: PartSpec) -> float:
    """Total banded edge length for one placed unit, in millimetres."""
    edges = spec.band_edges
    along_width = placement.h if placement.rotated else placement.w
    along_length = placement.w if placement.rotated else placement.h

    total = 0.0
    if edges.top:
        total += along_width
    if edges.bottom:
        total += along_width
    if edges.left:
        total += along_length
    if edges.right:
        total += along_length
    return total


def banding_key(spec: PartSpec) -> BandingKey:
    """Aggregation key for a part's banding."""
    return BandingKey(
        material_id=spec.edging_material_id or spec.material_id,
        thickness_mm=float(spec.band_thickness_mm),
    )


def aggregate_edge_banding(
    sheets: Iterable[SheetLayout],
    parts: Mapping[str, PartSpec],
) -> dict[BandingKey, float]:
    """Sum banding length per (edging material, thickness).

    Args:
        sheets: Finished sheet layouts.
        parts: Part specs keyed by part id.

    Returns:
        Banding length in millimetres per key, in first-seen order. Keys
        with no banded length are omitted. A same-board laminated pair is
        banded once, so instances past the part quantity add nothing.
    """
    totals: dict[BandingKey, float] = {}
    for sheet in sheets:
        for placement in sheet.placements:
            spec = parts[placement.part_id]
            if not spec.band_edges.any or placement.instance > spec.qty:
                continue
            key = banding_key(spec)
            totals[key] = totals.get(key, 0.0) + placement_band_length(placement, spec)

    logger.debug("Edge banding totals: %s", totals)
    return totals


def to_metres(totals: Mapping[BandingKey, float]) -> dict[BandingKey, float]:
    """Convert millimetre banding totals to metres."""
    return {key: mm / 1000.0 for key, mm in totals.items()}
