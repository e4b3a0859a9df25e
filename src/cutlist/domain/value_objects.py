"""Input value objects for the cutlist engine.

Parts, stock sheets and billing policy are immutable snapshots supplied by
the caller. Dimensions are in millimetres. A part's ``length_mm`` runs along
the sheet's length axis (Y) when the part is placed as specified; its
``width_mm`` runs along the sheet's width axis (X).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Grain(str, Enum):
    """Grain orientation constraint for a part.

    Attributes:
        LENGTH: Part length stays aligned with the sheet length (0 degrees only).
        WIDTH: Part length is aligned with the sheet width (90 degrees only).
        ANY: Either orientation, subject to the global rotation option.
    """

    LENGTH = "length"
    WIDTH = "width"
    ANY = "any"


class BillingMode(str, Enum):
    """How a single sheet is charged to the job."""

    AUTO = "auto"
    FULL = "full"
    MANUAL = "manual"


class Lamination(str, Enum):
    """How many boards make up one finished part.

    Attributes:
        NONE: A single board.
        SAME_BOARD: Two boards of the part's own material glued together, both
            faces visible. Twice as many boards are cut.
        WITH_BACKER: One board of the part's material on a backer board, only
            the top visible. The backer is cut from ``backer_material_id``.
    """

    NONE = "none"
    SAME_BOARD = "same-board"
    WITH_BACKER = "with-backer"


class UnplacedReason(str, Enum):
    """Why part units were left off every sheet."""

    TOO_LARGE_FOR_SHEET = "too_large_for_sheet"
    INSUFFICIENT_SHEET_CAPACITY = "insufficient_sheet_capacity"


@dataclass(frozen=True)
class BandEdges:
    """Edge banding flags for the four edges of a part.

    ``top`` and ``bottom`` run along the part's width, ``left`` and
    ``right`` along its length.
    """

    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False

    @property
    def any(self) -> bool:
        """True if at least one edge is banded."""
        return self.top or self.right or self.bottom or self.left

    @classmethod
    def all_edges(cls) -> BandEdges:
        """Banding on all four edges."""
        return cls(top=True, right=True, bottom=True, left=True)


@dataclass(frozen=True)
class PartSpec:
    """A requested cut.

    Dimension checks live in the normalizer so that invalid rows surface as
    ``InvalidDimension`` with the offending field, rather than failing at
    construction time.

    Attributes:
        id: Unique part identifier.
        length_mm: Part length (Y dimension as specified).
        width_mm: Part width (X dimension as specified).
        qty: Number of identical units to cut.
        grain: Grain orientation constraint.
        band_edges: Which edges receive edge banding.
        material_id: Board material this part is cut from (None = unassigned).
        label: Optional display label.
        lamination: Board build-up; laminated parts get double-thickness edging.
        backer_material_id: Backer board material for ``Lamination.WITH_BACKER``
            (None = the part's own material).
        thickness_mm: Board thickness, used to pick the edging width.
        edging_material_id: Optional edging material overriding ``material_id``.
    """

    id: str
    length_mm: float
    width_mm: float
    qty: int = 1
    grain: Grain = Grain.ANY
    band_edges: BandEdges = field(default_factory=BandEdges)
    material_id: str | None = None
    label: str | None = None
    lamination: Lamination = Lamination.NONE
    thickness_mm: float = 16.0
    edging_material_id: str | None = None
    backer_material_id: str | None = None

    @property
    def area(self) -> float:
        """Area of one unit in square millimetres."""
        return self.length_mm * self.width_mm

    @property
    def display_label(self) -> str:
        """Label for diagrams, falling back to the part id."""
        return self.label or self.id

    @property
    def laminated(self) -> bool:
        return self.lamination != Lamination.NONE

    @property
    def cut_qty(self) -> int:
        """Boards of this part's material to cut (two per unit for same-board lamination)."""
        return self.qty * 2 if self.lamination == Lamination.SAME_BOARD else self.qty

    @property
    def band_thickness_mm(self) -> float:
        """Edging width needed for this part's exposed edges."""
        return self.thickness_mm * 2 if self.laminated else self.thickness_mm


@dataclass(frozen=True)
class StockSheetSpec:
    """A stock sheet catalogue entry.

    Attributes:
        id: Catalogue identifier.
        length_mm: Sheet length (Y axis).
        width_mm: Sheet width (X axis).
        qty: Sheets available, or None for unlimited supply.
        kerf_mm: Blade width for this stock; None falls back to the run kerf.
        material_id: Material this entry belongs to; None serves any material.
        material_label: Optional display name for the material.
    """

    id: str
    length_mm: float
    width_mm: float
    qty: int | None = None
    kerf_mm: float | None = None
    material_id: str | None = None
    material_label: str | None = None

    @property
    def area(self) -> float:
        """Sheet area in square millimetres."""
        return self.length_mm * self.width_mm

    @property
    def unlimited(self) -> bool:
        """True when supply for this entry is unbounded."""
        return self.qty is None

    def serves(self, material_id: str | None) -> bool:
        """Check whether this stock entry can be used for a material."""
        return self.material_id is None or self.material_id == material_id


@dataclass(frozen=True)
class PartUnit:
    """One physical instance of a part, produced by quantity expansion."""

    spec: PartSpec
    instance: int

    @property
    def part_id(self) -> str:
        return self.spec.id

    @property
    def uid(self) -> str:
        """Stable per-unit identifier (``part#n``)."""
        return f"{self.spec.id}#{self.instance}"

    @property
    def label(self) -> str:
        base = self.spec.display_label
        return base if self.spec.cut_qty == 1 else f"{base} #{self.instance}"


@dataclass(frozen=True)
class PackOptions:
    """Run-wide packing options."""

    kerf_mm: float = 3.0
    allow_rotation: bool = True
    single_sheet_only: bool = False


@dataclass(frozen=True)
class BillingOverride:
    """Per-sheet billing policy set by the caller.

    ``manual_pct`` is clamped to 0-100 and only used in ``MANUAL`` mode.
    """

    mode: BillingMode = BillingMode.AUTO
    manual_pct: float = 100.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "manual_pct", min(100.0, max(0.0, self.manual_pct)))


@dataclass(frozen=True)
class BillingPolicy:
    """Billing rules applied to a finished layout.

    Attributes:
        global_full_board: Bill every sheet as fully consumed.
        overrides: Per-sheet overrides keyed by sheet id.
        granularity_pct: Auto-mode utilization is rounded up to this step.
        floor_pct: Minimum auto-mode charge per sheet.
    """

    global_full_board: bool = False
    overrides: Mapping[str, BillingOverride] = field(
        default_factory=lambda: MappingProxyType({})
    )
    granularity_pct: float = 5.0
    floor_pct: float = 10.0

    def __post_init__(self) -> None:
        if not 0 < self.granularity_pct <= 100:
            raise ValueError("Billing granularity must be between 0 and 100 percent")
        if not 0 <= self.floor_pct <= 100:
            raise ValueError("Billing floor must be between 0 and 100 percent")
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def override_for(self, sheet_id: str) -> BillingOverride:
        """Return the override for a sheet, defaulting to auto mode."""
        return self.overrides.get(sheet_id, BillingOverride())
