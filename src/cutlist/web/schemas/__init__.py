"""Pydantic schemas for the REST API."""

from cutlist.web.schemas.requests import (
    BillingOverrideSchema,
    BillingRequest,
    ConfigValidateRequest,
    OptimizeRequest,
)
from cutlist.web.schemas.responses import (
    BillingResponseSchema,
    EdgeBandingSchema,
    ErrorResponseSchema,
    OptimizeResponseSchema,
    PlacementSchema,
    SheetBillingSchema,
    SheetSchema,
    UnplacedSchema,
    ValidationResultSchema,
)

__all__ = [
    "BillingOverrideSchema",
    "BillingRequest",
    "BillingResponseSchema",
    "ConfigValidateRequest",
    "EdgeBandingSchema",
    "ErrorResponseSchema",
    "OptimizeRequest",
    "OptimizeResponseSchema",
    "PlacementSchema",
    "SheetBillingSchema",
    "SheetSchema",
    "UnplacedSchema",
    "ValidationResultSchema",
]
