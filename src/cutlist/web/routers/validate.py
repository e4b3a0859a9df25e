"""Configuration validation endpoints."""

from fastapi import APIRouter

from cutlist.application.config import config_to_request, load_config_from_dict
from cutlist.domain.services import normalize_parts
from cutlist.web.schemas.requests import ConfigValidateRequest
from cutlist.web.schemas.responses import ValidationResultSchema

router = APIRouter(prefix="/validate", tags=["validate"])


@router.post("", response_model=ValidationResultSchema)
async def validate_configuration(request: ConfigValidateRequest) -> ValidationResultSchema:
    """Validate a configuration without optimizing.

    Schema and dimension errors are returned as 422 responses by the
    registered exception handlers. Parts too large for every stock sheet are
    reported as warnings.
    """
    config = load_config_from_dict(request.config)
    cutlist_request = config_to_request(config)
    normalized = normalize_parts(
        cutlist_request.parts, cutlist_request.stock, cutlist_request.allow_rotation
    )

    return ValidationResultSchema(
        is_valid=True,
        warnings=[
            {
                "path": f"parts.{u.part_id}",
                "message": "Part is too large for every stock sheet of its material",
            }
            for u in normalized.rejected
        ],
    )
