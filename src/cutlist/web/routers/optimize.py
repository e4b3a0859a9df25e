"""Cutlist optimization endpoints."""

from fastapi import APIRouter

from cutlist.application.config import config_to_request, load_config_from_dict
from cutlist.domain import LayoutResult
from cutlist.domain.services import to_metres
from cutlist.infrastructure import dump_snapshot
from cutlist.web.dependencies import OptimizeCommandDep, RendererDep
from cutlist.web.schemas.requests import OptimizeRequest
from cutlist.web.schemas.responses import (
    EdgeBandingSchema,
    OptimizeResponseSchema,
    PlacementSchema,
    SheetSchema,
    UnplacedSchema,
)

router = APIRouter(prefix="/optimize", tags=["optimize"])


def sheets_to_schema(result: LayoutResult) -> list[SheetSchema]:
    """Convert result sheets, with their statistics and billing, to response schemas."""
    sheets: list[SheetSchema] = []
    for sheet in result.sheets:
        stats = result.sheet_stats[sheet.sheet_id]
        sheets.append(
            SheetSchema(
                sheet_id=sheet.sheet_id,
                stock_id=sheet.stock_id,
                material_id=sheet.material_id,
                length_mm=sheet.stock_length_mm,
                width_mm=sheet.stock_width_mm,
                kerf_mm=sheet.kerf_mm,
                efficiency=stats.efficiency,
                used_area_mm2=stats.used_area_mm2,
                waste_area_mm2=stats.waste_area_mm2,
                cut_length_mm=stats.cut_length_mm,
                cuts=stats.cuts,
                billed=str(result.billing[sheet.sheet_id]),
                placements=[
                    PlacementSchema(
                        part_id=p.part_id,
                        instance=p.instance,
                        label=p.label,
                        x=p.x,
                        y=p.y,
                        w=p.w,
                        h=p.h,
                        rotated=p.rotated,
                        grain=p.grain.value,
                    )
                    for p in sheet.placements
                ],
            )
        )
    return sheets


@router.post("", response_model=OptimizeResponseSchema)
async def optimize_cutlist(
    request: OptimizeRequest,
    command: OptimizeCommandDep,
    renderer: RendererDep,
) -> OptimizeResponseSchema:
    """Optimize a cutlist configuration.

    Args:
        request: Request containing the configuration.
        command: Injected optimize command.
        renderer: Injected diagram renderer.

    Returns:
        Sheets with placements, statistics, banding, billing and a snapshot.
    """
    config = load_config_from_dict(request.config)
    cutlist_request = config_to_request(config)
    result = command.execute(cutlist_request)

    metres = to_metres(result.edge_banding)
    return OptimizeResponseSchema(
        sheets=sheets_to_schema(result),
        unplaced=[
            UnplacedSchema(part_id=u.part_id, count=u.count, reason=u.reason.value)
            for u in result.unplaced
        ],
        edge_banding=[
            EdgeBandingSchema(
                material_id=key.material_id,
                thickness_mm=key.thickness_mm,
                length_mm=mm,
                length_m=metres[key],
            )
            for key, mm in result.edge_banding.items()
        ],
        total_sheets=result.total_sheets,
        overall_efficiency=result.overall_efficiency,
        total_cut_length_mm=result.total_cut_length_mm,
        total_billable_sheets=str(result.total_billable_sheets),
        sheets_by_material={
            material_id or "unassigned": count
            for material_id, count in result.sheets_by_material.items()
        },
        snapshot=dump_snapshot(result, cutlist_request.billing),
        svg=renderer.render_all_svg(result) if request.include_svg else None,
    )
