"""Domain layer - core cutlist models and rules."""

from .exceptions import CutlistError, DuplicatePartId, InvalidDimension, UnplaceablePart
from .layout import (
    BandingKey,
    LayoutResult,
    Placement,
    SheetLayout,
    SheetStats,
    UnplacedPart,
)
from .value_objects import (
    BandEdges,
    BillingMode,
    BillingOverride,
    BillingPolicy,
    Grain,
    Lamination,
    PackOptions,
    PartSpec,
    PartUnit,
    StockSheetSpec,
    UnplacedReason,
)

__all__ = [
    "BandEdges",
    "BandingKey",
    "BillingMode",
    "BillingOverride",
    "BillingPolicy",
    "CutlistError",
    "DuplicatePartId",
    "Grain",
    "InvalidDimension",
    "Lamination",
    "LayoutResult",
    "PackOptions",
    "PartSpec",
    "PartUnit",
    "Placement",
    "SheetLayout",
    "SheetStats",
    "StockSheetSpec",
    "UnplaceablePart",
    "UnplacedPart",
    "UnplacedReason",
]
