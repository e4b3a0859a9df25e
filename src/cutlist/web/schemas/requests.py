"""Pydantic request schemas for the REST API."""

from typing import Any

from pydantic import BaseModel, Field

from cutlist.domain.value_objects import BillingMode


class OptimizeRequest(BaseModel):
    """Request for optimizing a cutlist configuration."""

    config: dict[str, Any] = Field(..., description="Full cutlist configuration JSON")
    include_svg: bool = Field(default=False, description="Include SVG cut diagrams")


class ConfigValidateRequest(BaseModel):
    """Request for validating a configuration."""

    config: dict[str, Any] = Field(..., description="Cutlist configuration JSON")


class BillingOverrideSchema(BaseModel):
    """Billing override for one sheet."""

    mode: BillingMode = Field(default=BillingMode.AUTO, description="auto, full or manual")
    manual_pct: float = Field(default=100.0, description="Manual percentage (clamped 0-100)")


class BillingRequest(BaseModel):
    """Request for re-billing a stored snapshot.

    Overrides are merged over those stored in the snapshot; a value of
    ``global_full_board`` replaces the stored flag when given.
    """

    snapshot: dict[str, Any] = Field(..., description="Snapshot from /optimize")
    global_full_board: bool | None = Field(default=None, description="Bill full boards")
    overrides: dict[str, BillingOverrideSchema] = Field(
        default_factory=dict, description="Per-sheet overrides keyed by sheet id"
    )
