"""Error handlers for the REST API.

Every error response has the same envelope: ``error`` (message),
``error_type`` (category) and ``details``.
"""

import math
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cutlist.application.config import ConfigError
from cutlist.domain import DuplicatePartId, InvalidDimension


def _json_number(value: Any) -> float | None:
    """The rejected value as a JSON number, or None when JSON cannot carry it."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers with the FastAPI app."""

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": exc.message,
                "error_type": exc.error_type,
                "details": exc.details,
            },
        )

    @app.exception_handler(InvalidDimension)
    async def invalid_dimension_handler(
        request: Request, exc: InvalidDimension
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": str(exc),
                "error_type": "invalid_dimension",
                "details": [
                    {
                        "subject": exc.subject,
                        "field": exc.field,
                        "value": _json_number(exc.value),
                        "message": exc.reason,
                    }
                ],
            },
        )

    @app.exception_handler(DuplicatePartId)
    async def duplicate_part_id_handler(
        request: Request, exc: DuplicatePartId
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": str(exc),
                "error_type": "duplicate_part_id",
                "details": [{"part_id": exc.part_id, "message": str(exc)}],
            },
        )
