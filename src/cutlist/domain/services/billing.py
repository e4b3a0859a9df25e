"""Billing translator.

Turns sheet utilization into a billable board quantity per sheet. All
arithmetic is done in ``Decimal`` so that step rounding never picks up binary
float artefacts (0.2 * 100 must round to 20, not 25).
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

from cutlist.domain.layout import LayoutResult, SheetLayout
from cutlist.domain.services.efficiency import analyze_sheet
from cutlist.domain.value_objects import BillingMode, BillingOverride, BillingPolicy

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
ONE = Decimal("1")
_PCT_PRECISION = Decimal("0.0001")


def _to_decimal(value: float) -> Decimal:
    return Decimal(str(value))


def auto_billed_pct(efficiency: float, policy: BillingPolicy) -> Decimal:
    """Round utilization up to the billing step, then apply the floor and cap.

    Args:
        efficiency: Sheet utilization as a 0..1 fraction.
        policy: Billing policy supplying granularity and floor.

    Returns:
        Billed percentage in the range [floor, 100].
    """
    pct = (_to_decimal(efficiency) * HUNDRED).quantize(_PCT_PRECISION, rounding=ROUND_HALF_UP)
    step = _to_decimal(policy.granularity_pct)
    rounded = (pct / step).to_integral_value(rounding=ROUND_CEILING) * step
    return min(HUNDRED, max(_to_decimal(policy.floor_pct), rounded))


def billable_quantity(
    layout: SheetLayout,
    efficiency: float,
    override: BillingOverride,
    policy: BillingPolicy,
) -> Decimal:
    """Billable fraction of one board for a sheet.

    Args:
        layout: The sheet being billed.
        efficiency: Sheet utilization (0..1).
        override: Per-sheet billing override.
        policy: Run-wide billing policy.

    Returns:
        A Decimal in [0, 1].
    """
    if policy.global_full_board or override.mode == BillingMode.FULL:
        quantity = ONE
    elif override.mode == BillingMode.MANUAL:
        quantity = _to_decimal(override.manual_pct) / HUNDRED
    else:
        quantity = auto_billed_pct(efficiency, policy) / HUNDRED

    logger.debug(
        "Sheet %s billed %s (mode %s, efficiency %.4f)",
        layout.sheet_id,
        quantity,
        "full" if policy.global_full_board else override.mode.value,
        efficiency,
    )
    return quantity


def bill_sheets(result: LayoutResult, policy: BillingPolicy) -> dict[str, Decimal]:
    """Billable quantity for every sheet of a result, keyed by sheet id."""
    billing: dict[str, Decimal] = {}
    for sheet in result.sheets:
        stats = result.sheet_stats.get(sheet.sheet_id) or analyze_sheet(sheet)
        billing[sheet.sheet_id] = billable_quantity(
            sheet, stats.efficiency, policy.override_for(sheet.sheet_id), policy
        )
    return billing


def bill(result: LayoutResult, policy: BillingPolicy) -> LayoutResult:
    """Re-bill a finished result under a new policy.

    Layouts are never touched; only the billing mapping changes.
    """
    unknown = set(policy.overrides) - {sheet.sheet_id for sheet in result.sheets}
    if unknown:
        logger.warning("Ignoring billing overrides for unknown sheets: %s", sorted(unknown))

    billed = result.with_billing(bill_sheets(result, policy))
    logger.info(
        "Billed %d sheets: %s boards total",
        billed.total_sheets,
        billed.total_billable_sheets,
    )
    return billed
