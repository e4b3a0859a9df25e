"""Persistence format for finished layouts.

A snapshot stores a ``LayoutResult`` together with the billing policy it was
billed under, so a stored job can be reloaded and re-billed without running
the optimizer again. Snapshots are plain JSON-compatible dicts validated by
pydantic wire models on load.

Older snapshots only carried two banding totals (``edgebanding_16mm_mm`` and
``edgebanding_32mm_mm``). They are migrated into the per-material banding map
at load time; ``legacy_band_totals`` derives those two slots back for
consumers that still read them.

Parts stored before lamination types existed carry a ``laminate`` flag,
read back as same-board lamination.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from cutlist.application.config.loader import ConfigError, validation_details
from cutlist.application.config.schema import migrate_laminate_flag
from cutlist.domain.layout import (
    BandingKey,
    LayoutResult,
    Placement,
    SheetLayout,
    UnplacedPart,
)
from cutlist.domain.services.efficiency import analyze_sheets
from cutlist.domain.value_objects import (
    BandEdges,
    BillingMode,
    BillingOverride,
    BillingPolicy,
    Grain,
    Lamination,
    PartSpec,
    UnplacedReason,
)

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"

LEGACY_16MM_KEY = "edgebanding_16mm_mm"
LEGACY_32MM_KEY = "edgebanding_32mm_mm"


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class BandEdgesWire(_WireModel):
    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False


class PartWire(_WireModel):
    id: str
    length_mm: float
    width_mm: float
    qty: int = 1
    grain: Grain = Grain.ANY
    band_edges: BandEdgesWire = Field(default_factory=BandEdgesWire)
    material_id: str | None = None
    label: str | None = None
    lamination: Lamination = Lamination.NONE
    thickness_mm: float = 16.0
    edging_material_id: str | None = None
    backer_material_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_laminate(cls, data: Any) -> Any:
        return migrate_laminate_flag(data)


class PlacementWire(_WireModel):
    part_id: str
    instance: int
    x: float
    y: float
    w: float
    h: float
    rotated: bool = False
    grain: Grain = Grain.ANY
    original_length_mm: float
    original_width_mm: float
    label: str


class SheetWire(_WireModel):
    sheet_id: str
    stock_id: str
    stock_length_mm: float
    stock_width_mm: float
    material_id: str | None = None
    material_label: str | None = None
    kerf_mm: float
    placements: list[PlacementWire] = Field(default_factory=list)


class UnplacedWire(_WireModel):
    part: PartWire
    count: int
    reason: UnplacedReason


class BandingWire(_WireModel):
    material_id: str | None = None
    thickness_mm: float
    length_mm: float


class ResultWire(_WireModel):
    """Stored layout result.

    Either ``edge_banding`` or the two legacy totals may be present; the
    legacy totals are folded into ``edge_banding`` during validation.
    """

    sheets: list[SheetWire] = Field(default_factory=list)
    unplaced: list[UnplacedWire] = Field(default_factory=list)
    edge_banding: list[BandingWire] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if LEGACY_16MM_KEY not in data and LEGACY_32MM_KEY not in data:
            return data
        data = dict(data)
        legacy = {
            LEGACY_16MM_KEY: data.pop(LEGACY_16MM_KEY, 0.0),
            LEGACY_32MM_KEY: data.pop(LEGACY_32MM_KEY, 0.0),
        }
        if not data.get("edge_banding"):
            data["edge_banding"] = [
                {"material_id": key.material_id, "thickness_mm": key.thickness_mm, "length_mm": mm}
                for key, mm in migrate_legacy_banding(legacy).items()
            ]
        return data


class BillingOverrideWire(_WireModel):
    mode: BillingMode = BillingMode.AUTO
    manual_pct: float = 100.0


class BillingWire(_WireModel):
    global_full_board: bool = False
    granularity_pct: float = Field(default=5.0, gt=0, le=100)
    floor_pct: float = Field(default=10.0, ge=0, le=100)
    overrides: dict[str, BillingOverrideWire] = Field(default_factory=dict)
    quantities: dict[str, Decimal] = Field(default_factory=dict)


class SnapshotWire(_WireModel):
    schema_version: str = SNAPSHOT_VERSION
    result: ResultWire
    billing: BillingWire = Field(default_factory=BillingWire)


def migrate_legacy_banding(legacy: Mapping[str, float]) -> dict[BandingKey, float]:
    """Convert legacy 16mm/32mm banding totals to the per-material map.

    Legacy totals carry no material, so both land under ``material_id=None``.
    Zero totals are dropped.
    """
    banding: dict[BandingKey, float] = {}
    for legacy_key, thickness in ((LEGACY_16MM_KEY, 16.0), (LEGACY_32MM_KEY, 32.0)):
        mm = float(legacy.get(legacy_key) or 0.0)
        if mm > 0:
            banding[BandingKey(None, thickness)] = mm
    return banding


def legacy_band_totals(banding: Mapping[BandingKey, float]) -> dict[str, float]:
    """Derive the two legacy banding totals from a per-material map.

    Thicknesses of 32mm and above count towards the 32mm slot, everything
    else towards the 16mm slot.
    """
    totals = {LEGACY_16MM_KEY: 0.0, LEGACY_32MM_KEY: 0.0}
    for key, mm in banding.items():
        slot = LEGACY_32MM_KEY if key.thickness_mm >= 32 else LEGACY_16MM_KEY
        totals[slot] += mm
    return totals


def _part_to_wire(part: PartSpec) -> PartWire:
    edges = part.band_edges
    return PartWire(
        id=part.id,
        length_mm=part.length_mm,
        width_mm=part.width_mm,
        qty=part.qty,
        grain=part.grain,
        band_edges=BandEdgesWire(
            top=edges.top, right=edges.right, bottom=edges.bottom, left=edges.left
        ),
        material_id=part.material_id,
        label=part.label,
        lamination=part.lamination,
        thickness_mm=part.thickness_mm,
        edging_material_id=part.edging_material_id,
        backer_material_id=part.backer_material_id,
    )


def _part_from_wire(wire: PartWire) -> PartSpec:
    return PartSpec(
        id=wire.id,
        length_mm=wire.length_mm,
        width_mm=wire.width_mm,
        qty=wire.qty,
        grain=wire.grain,
        band_edges=BandEdges(**wire.band_edges.model_dump()),
        material_id=wire.material_id,
        label=wire.label,
        lamination=wire.lamination,
        thickness_mm=wire.thickness_mm,
        edging_material_id=wire.edging_material_id,
        backer_material_id=wire.backer_material_id,
    )


def dump_snapshot(result: LayoutResult, policy: BillingPolicy | None = None) -> dict[str, Any]:
    """Serialize a result and its billing policy to a JSON-compatible dict.

    Args:
        result: A finished layout result.
        policy: Billing policy the result was billed under.

    Returns:
        Snapshot dict; Decimal quantities are written as strings.
    """
    policy = policy or BillingPolicy()
    wire = SnapshotWire(
        result=ResultWire(
            sheets=[
                SheetWire(
                    sheet_id=sheet.sheet_id,
                    stock_id=sheet.stock_id,
                    stock_length_mm=sheet.stock_length_mm,
                    stock_width_mm=sheet.stock_width_mm,
                    material_id=sheet.material_id,
                    material_label=sheet.material_label,
                    kerf_mm=sheet.kerf_mm,
                    placements=[
                        PlacementWire(
                            part_id=p.part_id,
                            instance=p.instance,
                            x=p.x,
                            y=p.y,
                            w=p.w,
                            h=p.h,
                            rotated=p.rotated,
                            grain=p.grain,
                            original_length_mm=p.original_length_mm,
                            original_width_mm=p.original_width_mm,
                            label=p.label,
                        )
                        for p in sheet.placements
                    ],
                )
                for sheet in result.sheets
            ],
            unplaced=[
                UnplacedWire(part=_part_to_wire(u.part), count=u.count, reason=u.reason)
                for u in result.unplaced
            ],
            edge_banding=[
                BandingWire(
                    material_id=key.material_id, thickness_mm=key.thickness_mm, length_mm=mm
                )
                for key, mm in result.edge_banding.items()
            ],
        ),
        billing=BillingWire(
            global_full_board=policy.global_full_board,
            granularity_pct=policy.granularity_pct,
            floor_pct=policy.floor_pct,
            overrides={
                sheet_id: BillingOverrideWire(mode=o.mode, manual_pct=o.manual_pct)
                for sheet_id, o in policy.overrides.items()
            },
            quantities=dict(result.billing),
        ),
    )
    return wire.model_dump(mode="json")


def load_snapshot(data: dict[str, Any]) -> tuple[LayoutResult, BillingPolicy]:
    """Rebuild a frozen result and its billing policy from a snapshot dict.

    Sheet statistics are recomputed from the placements; stored billing
    quantities are kept as-is.

    Raises:
        ConfigError: If the snapshot fails validation.
    """
    try:
        wire = SnapshotWire.model_validate(data)
    except ValidationError as e:
        details = validation_details(e)
        raise ConfigError(
            message="Invalid snapshot: "
            + "; ".join(f"{d['path']}: {d['message']}" for d in details),
            error_type="validation",
            details=details,
        )

    sheets = tuple(
        SheetLayout(
            sheet_id=s.sheet_id,
            stock_id=s.stock_id,
            stock_length_mm=s.stock_length_mm,
            stock_width_mm=s.stock_width_mm,
            material_id=s.material_id,
            material_label=s.material_label,
            kerf_mm=s.kerf_mm,
            placements=tuple(Placement(**p.model_dump()) for p in s.placements),
        )
        for s in wire.result.sheets
    )
    result = LayoutResult(
        sheets=sheets,
        unplaced=tuple(
            UnplacedPart(part=_part_from_wire(u.part), count=u.count, reason=u.reason)
            for u in wire.result.unplaced
        ),
        sheet_stats=analyze_sheets(sheets),
        edge_banding={
            BandingKey(b.material_id, b.thickness_mm): b.length_mm
            for b in wire.result.edge_banding
        },
        billing=wire.billing.quantities,
    )
    policy = BillingPolicy(
        global_full_board=wire.billing.global_full_board,
        overrides={
            sheet_id: BillingOverride(mode=o.mode, manual_pct=o.manual_pct)
            for sheet_id, o in wire.billing.overrides.items()
        },
        granularity_pct=wire.billing.granularity_pct,
        floor_pct=wire.billing.floor_pct,
    )
    logger.debug("Loaded snapshot with %d sheets", len(sheets))
    return result, policy
