"""Billing endpoints for stored layouts."""

from fastapi import APIRouter

from cutlist.domain import BillingOverride, BillingPolicy
from cutlist.domain.services import bill
from cutlist.infrastructure import dump_snapshot, load_snapshot
from cutlist.web.schemas.requests import BillingRequest
from cutlist.web.schemas.responses import BillingResponseSchema, SheetBillingSchema

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("", response_model=BillingResponseSchema)
async def rebill_snapshot(request: BillingRequest) -> BillingResponseSchema:
    """Re-bill a stored snapshot under new overrides.

    Layouts in the snapshot are never changed; only billing is recomputed.
    """
    result, stored = load_snapshot(request.snapshot)

    overrides = dict(stored.overrides)
    overrides.update(
        {
            sheet_id: BillingOverride(mode=o.mode, manual_pct=o.manual_pct)
            for sheet_id, o in request.overrides.items()
        }
    )
    policy = BillingPolicy(
        global_full_board=(
            stored.global_full_board
            if request.global_full_board is None
            else request.global_full_board
        ),
        overrides=overrides,
        granularity_pct=stored.granularity_pct,
        floor_pct=stored.floor_pct,
    )
    billed = bill(result, policy)

    return BillingResponseSchema(
        sheets=[
            SheetBillingSchema(
                sheet_id=sheet.sheet_id,
                efficiency=billed.sheet_stats[sheet.sheet_id].efficiency,
                billed=str(billed.billing[sheet.sheet_id]),
            )
            for sheet in billed.sheets
        ],
        total_billable_sheets=str(billed.total_billable_sheets),
        snapshot=dump_snapshot(billed, policy),
    )
