"""Adapters from configuration models to domain objects."""

from __future__ import annotations

from cutlist.application.commands import CutlistRequest
from cutlist.application.config.schema import (
    BillingConfig,
    CutlistConfiguration,
    PartConfig,
    StockConfig,
)
from cutlist.domain.value_objects import (
    BandEdges,
    BillingOverride,
    BillingPolicy,
    PartSpec,
    StockSheetSpec,
)


def part_config_to_spec(part: PartConfig) -> PartSpec:
    """Convert a part configuration to a domain PartSpec."""
    return PartSpec(
        id=part.id,
        length_mm=part.length_mm,
        width_mm=part.width_mm,
        qty=part.qty,
        grain=part.grain,
        band_edges=BandEdges(
            top=part.band_edges.top,
            right=part.band_edges.right,
            bottom=part.band_edges.bottom,
            left=part.band_edges.left,
        ),
        material_id=part.material_id,
        label=part.label,
        lamination=part.lamination,
        thickness_mm=part.thickness_mm,
        edging_material_id=part.edging_material_id,
        backer_material_id=part.backer_material_id,
    )


def stock_config_to_spec(stock: StockConfig) -> StockSheetSpec:
    """Convert a stock configuration to a domain StockSheetSpec."""
    return StockSheetSpec(
        id=stock.id,
        length_mm=stock.length_mm,
        width_mm=stock.width_mm,
        qty=stock.qty,
        kerf_mm=stock.kerf_mm,
        material_id=stock.material_id,
        material_label=stock.material_label,
    )


def billing_config_to_policy(billing: BillingConfig) -> BillingPolicy:
    """Convert a billing configuration to a domain BillingPolicy."""
    return BillingPolicy(
        global_full_board=billing.global_full_board,
        overrides={
            sheet_id: BillingOverride(mode=o.mode, manual_pct=o.manual_pct)
            for sheet_id, o in billing.overrides.items()
        },
        granularity_pct=billing.granularity_pct,
        floor_pct=billing.floor_pct,
    )


def config_to_request(config: CutlistConfiguration) -> CutlistRequest:
    """Convert a validated configuration to a CutlistRequest.

    Args:
        config: A validated CutlistConfiguration.

    Returns:
        CutlistRequest ready for ``optimize_cutlist``.
    """
    return CutlistRequest(
        parts=tuple(part_config_to_spec(p) for p in config.parts),
        stock=tuple(stock_config_to_spec(s) for s in config.stock),
        kerf_mm=config.options.kerf_mm,
        allow_rotation=config.options.allow_rotation,
        single_sheet_only=config.options.single_sheet_only,
        billing=billing_config_to_policy(config.billing),
    )
