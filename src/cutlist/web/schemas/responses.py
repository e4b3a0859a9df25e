"""Pydantic response schemas for the REST API."""

from typing import Any

from pydantic import BaseModel, Field


class PlacementSchema(BaseModel):
    """A part placed on a sheet."""

    part_id: str
    instance: int
    label: str
    x: float
    y: float
    w: float
    h: float
    rotated: bool
    grain: str


class SheetSchema(BaseModel):
    """One sheet with its statistics and billing."""

    sheet_id: str = Field(..., description="Sheet identifier")
    stock_id: str = Field(..., description="Stock catalogue entry")
    material_id: str | None = Field(default=None, description="Material group")
    length_mm: float
    width_mm: float
    kerf_mm: float
    efficiency: float = Field(..., description="Used area fraction (0-1)")
    used_area_mm2: float
    waste_area_mm2: float
    cut_length_mm: float
    cuts: int
    billed: str = Field(..., description="Billable board fraction as a decimal string")
    placements: list[PlacementSchema] = Field(default_factory=list)


class UnplacedSchema(BaseModel):
    """Part units that could not be placed."""

    part_id: str
    count: int
    reason: str


class EdgeBandingSchema(BaseModel):
    """Edge banding total for one material and thickness."""

    material_id: str | None = None
    thickness_mm: float
    length_mm: float
    length_m: float


class OptimizeResponseSchema(BaseModel):
    """Response for cutlist optimization."""

    sheets: list[SheetSchema] = Field(default_factory=list)
    unplaced: list[UnplacedSchema] = Field(default_factory=list)
    edge_banding: list[EdgeBandingSchema] = Field(default_factory=list)
    total_sheets: int
    overall_efficiency: float
    total_cut_length_mm: float
    total_billable_sheets: str
    sheets_by_material: dict[str, int] = Field(default_factory=dict)
    snapshot: dict[str, Any] = Field(..., description="Persistable snapshot")
    svg: list[str] | None = Field(default=None, description="SVG cut diagrams")


class SheetBillingSchema(BaseModel):
    """Billing result for one sheet."""

    sheet_id: str
    efficiency: float
    billed: str


class BillingResponseSchema(BaseModel):
    """Response for re-billing a snapshot."""

    sheets: list[SheetBillingSchema] = Field(default_factory=list)
    total_billable_sheets: str
    snapshot: dict[str, Any]


class ValidationResultSchema(BaseModel):
    """Response for configuration validation."""

    is_valid: bool = Field(..., description="Whether configuration is valid")
    errors: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[dict[str, Any]] = Field(default_factory=list)


class ErrorResponseSchema(BaseModel):
    """Standard error envelope."""

    error: str
    error_type: str
    details: Any = None
