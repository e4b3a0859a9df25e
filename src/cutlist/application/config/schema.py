"""Pydantic models for cutlist configuration files.

A configuration file describes one optimization run: the parts to cut, the
stock catalogue, packing options and the billing policy.

Part and stock dimensions are deliberately not range-checked here. The
domain normalizer owns dimension validation and reports it as
``InvalidDimension`` with the offending part or stock id.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cutlist.domain.value_objects import BillingMode, Grain, Lamination

# Supported schema versions for configuration files
# Version 1.0: Parts, stock, packing options
# Version 1.1: Billing policy and per-sheet overrides
# Version 1.2: Per-stock kerf, edging material override, laminate flag
# Version 1.3: Lamination types and backer material (replaces laminate)
SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0", "1.1", "1.2", "1.3"})

# Aliases kept so schema code reads in configuration terms
GrainConfig = Grain
BillingModeConfig = BillingMode
LaminationConfig = Lamination


def migrate_laminate_flag(data: Any) -> Any:
    """Map the pre-1.3 ``laminate`` flag onto ``lamination``.

    ``laminate: true`` meant two boards of the part's own material glued
    together. An explicit ``lamination`` wins over the old flag.
    """
    if not isinstance(data, dict) or "laminate" not in data:
        return data
    data = dict(data)
    if data.pop("laminate") and "lamination" not in data:
        data["lamination"] = LaminationConfig.SAME_BOARD.value
    return data


class BandEdgesConfig(BaseModel):
    """Edges of a part that receive edge banding."""

    model_config = ConfigDict(extra="forbid")

    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False


class PartConfig(BaseModel):
    """A requested part.

    Attributes:
        id: Unique part identifier.
        length_mm: Part length, along the sheet length when unrotated.
        width_mm: Part width, along the sheet width when unrotated.
        qty: Number of units to cut.
        grain: Grain constraint (length, width or any).
        band_edges: Edges to band.
        material_id: Board material id; omitted parts share the unassigned group.
        label: Display label.
        lamination: Board build-up. ``same-board`` cuts two boards per unit,
            ``with-backer`` adds a backer board per unit.
        thickness_mm: Board thickness.
        edging_material_id: Edging material overriding ``material_id``.
        backer_material_id: Backer board material; omitted uses ``material_id``.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Unique part identifier")
    length_mm: float = Field(..., description="Part length in millimetres")
    width_mm: float = Field(..., description="Part width in millimetres")
    qty: int = Field(default=1, description="Number of units to cut")
    grain: GrainConfig = Field(default=GrainConfig.ANY, description="Grain constraint")
    band_edges: BandEdgesConfig = Field(
        default_factory=BandEdgesConfig, description="Edges to band"
    )
    material_id: str | None = Field(default=None, description="Board material id")
    label: str | None = Field(default=None, description="Display label")
    lamination: LaminationConfig = Field(
        default=LaminationConfig.NONE, description="Board build-up (none, same-board, with-backer)"
    )
    thickness_mm: float = Field(default=16.0, gt=0, description="Board thickness in millimetres")
    edging_material_id: str | None = Field(
        default=None, description="Edging material overriding the board material"
    )
    backer_material_id: str | None = Field(
        default=None, description="Backer board material for with-backer lamination"
    )

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_laminate(cls, data: Any) -> Any:
        return migrate_laminate_flag(data)


class StockConfig(BaseModel):
    """A stock sheet catalogue entry.

    Attributes:
        id: Catalogue identifier.
        length_mm: Sheet length in millimetres.
        width_mm: Sheet width in millimetres.
        qty: Sheets available; omitted means unlimited.
        kerf_mm: Blade width for this stock; omitted uses the run kerf.
        material_id: Material this stock serves; omitted serves every material.
        material_label: Display name for the material.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Stock identifier")
    length_mm: float = Field(..., description="Sheet length in millimetres")
    width_mm: float = Field(..., description="Sheet width in millimetres")
    qty: int | None = Field(default=None, description="Sheets available (omit for unlimited)")
    kerf_mm: float | None = Field(default=None, description="Blade width for this stock")
    material_id: str | None = Field(default=None, description="Material served by this stock")
    material_label: str | None = Field(default=None, description="Material display name")


class OptionsConfig(BaseModel):
    """Packing options for the run."""

    model_config = ConfigDict(extra="forbid")

    kerf_mm: float = Field(default=3.0, ge=0, le=20, description="Saw kerf width in millimetres")
    allow_rotation: bool = Field(default=True, description="Allow 90 degree rotation")
    single_sheet_only: bool = Field(
        default=False, description="Open at most one sheet per material"
    )


class BillingOverrideConfig(BaseModel):
    """Billing override for a single sheet."""

    model_config = ConfigDict(extra="forbid")

    mode: BillingModeConfig = Field(default=BillingModeConfig.AUTO, description="Billing mode")
    manual_pct: float = Field(
        default=100.0, description="Billed percentage in manual mode (clamped to 0-100)"
    )


class BillingConfig(BaseModel):
    """Billing policy for the run.

    Attributes:
        global_full_board: Bill every sheet as a full board.
        granularity_pct: Auto-mode step utilization is rounded up to.
        floor_pct: Minimum auto-mode charge per sheet.
        overrides: Per-sheet overrides keyed by sheet id.
    """

    model_config = ConfigDict(extra="forbid")

    global_full_board: bool = Field(default=False, description="Bill full boards")
    granularity_pct: float = Field(default=5.0, gt=0, le=100, description="Rounding step")
    floor_pct: float = Field(default=10.0, ge=0, le=100, description="Minimum charge")
    overrides: dict[str, BillingOverrideConfig] = Field(
        default_factory=dict, description="Per-sheet overrides keyed by sheet id"
    )


class CutlistConfiguration(BaseModel):
    """Root model for a cutlist configuration file.

    Example:
        >>> config = CutlistConfiguration(
        ...     schema_version="1.0",
        ...     parts=[PartConfig(id="side", length_mm=720, width_mm=560)],
        ...     stock=[StockConfig(id="board", length_mm=2750, width_mm=1830)],
        ... )
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., pattern=r"^\d+\.\d+$")
    parts: list[PartConfig] = Field(default_factory=list, description="Parts to cut")
    stock: list[StockConfig] = Field(..., min_length=1, description="Stock catalogue")
    options: OptionsConfig = Field(default_factory=OptionsConfig)
    billing: BillingConfig = Field(default_factory=BillingConfig)

    @field_validator("schema_version")
    @classmethod
    def validate_supported_version(cls, v: str) -> str:
        """Validate that the schema version is supported.

        Newer minor versions within a supported major version are accepted.
        """
        if v in SUPPORTED_VERSIONS:
            return v

        major_version = int(v.split(".")[0])
        supported_majors = {int(sv.split(".")[0]) for sv in SUPPORTED_VERSIONS}
        if major_version in supported_majors:
            return v

        raise ValueError(
            f"Unsupported schema version '{v}'. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}"
        )

    @model_validator(mode="after")
    def validate_unique_ids(self) -> CutlistConfiguration:
        """Part ids and stock ids must each be unique."""
        for name, items in (("part", self.parts), ("stock", self.stock)):
            seen: set[str] = set()
            for item in items:
                if item.id in seen:
                    raise ValueError(f"Duplicate {name} id '{item.id}'")
                seen.add(item.id)
        return self
