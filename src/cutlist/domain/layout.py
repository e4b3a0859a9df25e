"""Layout data models produced by the cutlist engine.

Placements, sheet layouts, per-sheet statistics and the aggregate
``LayoutResult``. All dataclasses are frozen so that a finished layout can be
shared between the renderer, the billing translator and persistence without
copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, NamedTuple

from cutlist.domain.value_objects import Grain, PartSpec, UnplacedReason


class BandingKey(NamedTuple):
    """Edge banding aggregation key: edging material and thickness."""

    material_id: str | None
    thickness_mm: float


@dataclass(frozen=True)
class Placement:
    """A part unit placed on a sheet.

    ``w`` and ``h`` are the as-placed dimensions along the sheet's X (width)
    and Y (length) axes, after any rotation.

    Attributes:
        part_id: Identifier of the originating part.
        instance: 1-based unit number within the part's quantity.
        x: Offset from the sheet's left edge.
        y: Offset from the sheet's top edge.
        w: Placed width (X extent).
        h: Placed height (Y extent).
        rotated: True if the part is turned 90 degrees from its specified orientation.
        grain: Grain constraint of the originating part.
        original_length_mm: Part length as specified.
        original_width_mm: Part width as specified.
        label: Display label for diagrams.
    """

    part_id: str
    instance: int
    x: float
    y: float
    w: float
    h: float
    rotated: bool
    grain: Grain
    original_length_mm: float
    original_width_mm: float
    label: str

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError("Position coordinates must be non-negative")
        if self.w <= 0 or self.h <= 0:
            raise ValueError("Placed dimensions must be positive")

    @property
    def right_edge(self) -> float:
        return self.x + self.w

    @property
    def bottom_edge(self) -> float:
        return self.y + self.h

    @property
    def area(self) -> float:
        return self.w * self.h

    def overlaps(self, other: Placement) -> bool:
        """Check whether two placements share any interior area."""
        return (
            self.x < other.right_edge
            and other.x < self.right_edge
            and self.y < other.bottom_edge
            and other.y < self.bottom_edge
        )


@dataclass(frozen=True)
class SheetLayout:
    """Parts placed on one physical stock sheet.

    Attributes:
        sheet_id: Unique sheet identifier within a result.
        stock_id: Catalogue entry the sheet was taken from.
        stock_length_mm: Sheet length (Y axis).
        stock_width_mm: Sheet width (X axis).
        material_id: Material group the sheet belongs to.
        material_label: Display name of the material, when known.
        kerf_mm: Blade width used when packing the sheet.
        placements: Placed parts in placement order.
    """

    sheet_id: str
    stock_id: str
    stock_length_mm: float
    stock_width_mm: float
    material_id: str | None
    material_label: str | None
    kerf_mm: float
    placements: tuple[Placement, ...]

    @property
    def sheet_area_mm2(self) -> float:
        return self.stock_length_mm * self.stock_width_mm

    @property
    def used_area_mm2(self) -> float:
        """Sum of placed part areas, kerf excluded."""
        return sum(p.area for p in self.placements)

    @property
    def piece_count(self) -> int:
        return len(self.placements)


@dataclass(frozen=True)
class SheetStats:
    """Derived statistics for one sheet."""

    sheet_id: str
    efficiency: float
    used_area_mm2: float
    waste_area_mm2: float
    cut_length_mm: float
    cuts: int

    @property
    def efficiency_pct(self) -> float:
        return self.efficiency * 100


@dataclass(frozen=True)
class UnplacedPart:
    """Units of a part that could not be placed on any sheet."""

    part: PartSpec
    count: int
    reason: UnplacedReason

    @property
    def part_id(self) -> str:
        return self.part.id


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class LayoutResult:
    """Complete output of one optimization run.

    Attributes:
        sheets: Sheet layouts grouped by material, in allocation order.
        unplaced: Parts (or remaining units) that could not be placed.
        sheet_stats: Statistics per sheet id.
        edge_banding: Total banding length in millimetres per banding key.
        billing: Billable quantity per sheet id.
    """

    sheets: tuple[SheetLayout, ...]
    unplaced: tuple[UnplacedPart, ...] = ()
    sheet_stats: Mapping[str, SheetStats] = field(default_factory=dict)
    edge_banding: Mapping[BandingKey, float] = field(default_factory=dict)
    billing: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sheet_stats", _frozen(self.sheet_stats))
        object.__setattr__(self, "edge_banding", _frozen(self.edge_banding))
        object.__setattr__(self, "billing", _frozen(self.billing))

    @property
    def total_sheets(self) -> int:
        return len(self.sheets)

    @property
    def total_used_area_mm2(self) -> float:
        return sum(s.used_area_mm2 for s in self.sheet_stats.values())

    @property
    def total_waste_area_mm2(self) -> float:
        return sum(s.waste_area_mm2 for s in self.sheet_stats.values())

    @property
    def total_cut_length_mm(self) -> float:
        return sum(s.cut_length_mm for s in self.sheet_stats.values())

    @property
    def total_billable_sheets(self) -> Decimal:
        return sum(self.billing.values(), Decimal("0"))

    @property
    def total_pieces_placed(self) -> int:
        return sum(sheet.piece_count for sheet in self.sheets)

    @property
    def total_unplaced(self) -> int:
        return sum(u.count for u in self.unplaced)

    @property
    def overall_efficiency(self) -> float:
        """Used area over total sheet area across all sheets (0 when empty)."""
        total_area = sum(sheet.sheet_area_mm2 for sheet in self.sheets)
        if total_area == 0:
            return 0.0
        return sum(sheet.used_area_mm2 for sheet in self.sheets) / total_area

    @property
    def sheets_by_material(self) -> dict[str | None, int]:
        """Count of sheets per material id, in allocation order."""
        counts: dict[str | None, int] = {}
        for sheet in self.sheets:
            counts[sheet.material_id] = counts.get(sheet.material_id, 0) + 1
        return counts

    def with_billing(self, billing: Mapping[str, Decimal]) -> LayoutResult:
        """Return a copy of this result carrying new billing quantities."""
        return replace(self, billing=billing)
