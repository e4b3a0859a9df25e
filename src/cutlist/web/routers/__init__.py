"""API routers for the REST API."""

from cutlist.web.routers.billing import router as billing_router
from cutlist.web.routers.optimize import router as optimize_router
from cutlist.web.routers.validate import router as validate_router

__all__ = [
    "billing_router",
    "optimize_router",
    "validate_router",
]
