"""Application commands (use cases) for cutlist optimization."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cutlist.domain import (
    BillingPolicy,
    LayoutResult,
    PackOptions,
    PartSpec,
    StockSheetSpec,
)
from cutlist.domain.services import (
    MultiSheetAllocator,
    ShelfPacker,
    aggregate_edge_banding,
    analyze_sheets,
    bill_sheets,
    normalize_parts,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CutlistRequest:
    """Everything one optimization run needs.

    Attributes:
        parts: Requested parts.
        stock: Stock catalogue in preference order.
        kerf_mm: Default blade width for stock entries without their own kerf.
        allow_rotation: Allow ``Grain.ANY`` parts to turn 90 degrees.
        single_sheet_only: Open at most one sheet per material.
        billing: Billing policy; defaults to auto billing.
    """

    parts: tuple[PartSpec, ...]
    stock: tuple[StockSheetSpec, ...]
    kerf_mm: float = 3.0
    allow_rotation: bool = True
    single_sheet_only: bool = False
    billing: BillingPolicy = field(default_factory=BillingPolicy)

    @property
    def options(self) -> PackOptions:
        return PackOptions(
            kerf_mm=self.kerf_mm,
            allow_rotation=self.allow_rotation,
            single_sheet_only=self.single_sheet_only,
        )


class OptimizeCutlistCommand:
    """Command to lay out parts on stock sheets and account for the result.

    The pipeline is normalize -> allocate (packing each sheet) -> efficiency
    -> edge banding and billing. Each run is independent; the command keeps
    no state between calls.
    """

    def __init__(self, packer: ShelfPacker | None = None) -> None:
        self.packer = packer

    def execute(self, request: CutlistRequest) -> LayoutResult:
        """Run the optimization.

        Args:
            request: Parts, stock and options for the run.

        Returns:
            LayoutResult with sheets, unplaced parts, statistics, banding and billing.

        Raises:
            InvalidDimension: If a part or stock entry has an unusable dimension.
        """
        normalized = normalize_parts(request.parts, request.stock, request.allow_rotation)

        options = request.options
        packer = self.packer or ShelfPacker(allow_rotation=options.allow_rotation)
        allocation = MultiSheetAllocator(options, packer).allocate(
            normalized.units, normalized.stock
        )

        parts_by_id = {part.id: part for part in normalized.parts}
        result = LayoutResult(
            sheets=allocation.sheets,
            unplaced=normalized.rejected + allocation.unplaced,
            sheet_stats=analyze_sheets(allocation.sheets),
            edge_banding=aggregate_edge_banding(allocation.sheets, parts_by_id),
        )
        result = result.with_billing(bill_sheets(result, request.billing))

        logger.info(
            "Optimized %d parts onto %d sheets (%.1f%% efficiency, %d units unplaced)",
            len(request.parts),
            result.total_sheets,
            result.overall_efficiency * 100,
            result.total_unplaced,
        )
        return result


def optimize_cutlist(request: CutlistRequest) -> LayoutResult:
    """Optimize a cutlist. Pure function over the request."""
    return OptimizeCutlistCommand().execute(request)
