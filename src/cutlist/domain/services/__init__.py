"""Domain services for cutlist optimization.

This package provides the engine's pipeline stages:
- Input normalization and quantity expansion
- Single-sheet shelf packing and multi-sheet allocation
- Efficiency, edge banding and billing accounting
"""

from .allocator import AllocationResult, MultiSheetAllocator, sheet_id_for
from .billing import auto_billed_pct, bill, bill_sheets, billable_quantity
from .edge_banding import aggregate_edge_banding, banding_key, placement_band_length, to_metres
from .efficiency import EfficiencySummary, analyze_sheet, analyze_sheets, summarize
from .normalizer import (
    NormalizedInput,
    allowed_orientations,
    backer_part,
    expand_lamination,
    fits_stock,
    normalize_parts,
    normalize_stock,
)
from .packing import SheetPackOutcome, ShelfPacker

__all__ = [
    "AllocationResult",
    "EfficiencySummary",
    "MultiSheetAllocator",
    "NormalizedInput",
    "SheetPackOutcome",
    "ShelfPacker",
    "aggregate_edge_banding",
    "allowed_orientations",
    "analyze_sheet",
    "analyze_sheets",
    "auto_billed_pct",
    "backer_part",
    "banding_key",
    "bill",
    "bill_sheets",
    "billable_quantity",
    "expand_lamination",
    "fits_stock",
    "normalize_parts",
    "normalize_stock",
    "placement_band_length",
    "sheet_id_for",
    "summarize",
    "to_metres",
]
