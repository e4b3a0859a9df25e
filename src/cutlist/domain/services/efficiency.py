"""Efficiency and cut-length accounting for finished sheet layouts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from cutlist.domain.layout import SheetLayout, SheetStats

logger = logging.getLogger(__name__)


def analyze_sheet(layout: SheetLayout) -> SheetStats:
    """Compute utilization and cut length for one sheet.

    Cut length is approximated as the perimeter of every placed part, and
    each part is counted as two cuts (one rip, one cross-cut).

    Args:
        layout: A finished sheet layout.

    Returns:
        SheetStats for the sheet.
    """
    sheet_area = layout.sheet_area_mm2
    used = layout.used_area_mm2
    cut_length = sum(2 * (p.w + p.h) for p in layout.placements)

    return SheetStats(
        sheet_id=layout.sheet_id,
        efficiency=used / sheet_area if sheet_area else 0.0,
        used_area_mm2=used,
        waste_area_mm2=sheet_area - used,
        cut_length_mm=cut_length,
        cuts=2 * len(layout.placements),
    )


def analyze_sheets(layouts: Iterable[SheetLayout]) -> dict[str, SheetStats]:
    """Compute statistics for every sheet, keyed by sheet id."""
    stats = {layout.sheet_id: analyze_sheet(layout) for layout in layouts}
    for sheet_id, s in stats.items():
        logger.debug("Sheet %s: %.1f%% used, %d cuts", sheet_id, s.efficiency_pct, s.cuts)
    return stats


@dataclass(frozen=True)
class EfficiencySummary:
    """Totals across a set of sheets."""

    sheet_count: int
    used_area_mm2: float
    waste_area_mm2: float
    cut_length_mm: float
    cuts: int

    @property
    def efficiency(self) -> float:
        total = self.used_area_mm2 + self.waste_area_mm2
        return self.used_area_mm2 / total if total else 0.0


def summarize(stats: Iterable[SheetStats]) -> EfficiencySummary:
    """Total per-sheet statistics."""
    items = list(stats)
    return EfficiencySummary(
        sheet_count=len(items),
        used_area_mm2=sum(s.used_area_mm2 for s in items),
        waste_area_mm2=sum(s.waste_area_mm2 for s in items),
        cut_length_mm=sum(s.cut_length_mm for s in items),
        cuts=sum(s.cuts for s in items),
    )
