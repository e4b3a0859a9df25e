"""Multi-sheet allocation across material groups.

Units are grouped by material and each group is packed independently. For
every new sheet the allocator picks the first catalogue entry serving that
material that still has supply and can take at least one remaining unit,
then asks the packing engine to fill it.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from cutlist.domain.exceptions import UnplaceablePart
from cutlist.domain.layout import SheetLayout, UnplacedPart
from cutlist.domain.services.normalizer import fits_stock
from cutlist.domain.services.packing import ShelfPacker
from cutlist.domain.value_objects import (
    PackOptions,
    PartSpec,
    PartUnit,
    StockSheetSpec,
    UnplacedReason,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationResult:
    """Sheets opened and units left over by the allocator."""

    sheets: tuple[SheetLayout, ...]
    unplaced: tuple[UnplacedPart, ...]


def sheet_id_for(stock_id: str, material_id: str | None, n: int) -> str:
    """Build a sheet identifier, unique per (stock, material) pair."""
    if material_id is None:
        return f"{stock_id}:{n}"
    return f"{stock_id}:{material_id}:{n}"


class MultiSheetAllocator:
    """Coordinates sheet selection and packing per material group.

    Attributes:
        options: Run-wide packing options (kerf, rotation, single sheet).
        packer: Packing engine invoked once per opened sheet.
    """

    def __init__(self, options: PackOptions, packer: ShelfPacker | None = None) -> None:
        self.options = options
        self.packer = packer or ShelfPacker(allow_rotation=options.allow_rotation)

    def allocate(
        self,
        units: Sequence[PartUnit],
        stock: Sequence[StockSheetSpec],
    ) -> AllocationResult:
        """Allocate units onto sheets.

        Args:
            units: Normalized part units.
            stock: Validated stock catalogue in preference order.

        Returns:
            AllocationResult with sheets in group order and any leftover units.
        """
        groups = self._group_by_material(units)

        logger.info(
            "Allocating %d units across %d material groups",
            len(units),
            len(groups),
        )

        sheets: list[SheetLayout] = []
        leftovers: list[tuple[PartUnit, UnplacedReason]] = []

        for material_id, group_units in groups.items():
            group_sheets, group_leftovers = self._allocate_group(material_id, group_units, stock)
            sheets.extend(group_sheets)
            leftovers.extend(group_leftovers)

            logger.debug(
                "Material %s: %d units -> %d sheets, %d unplaced",
                material_id,
                len(group_units),
                len(group_sheets),
                len(group_leftovers),
            )

        return AllocationResult(sheets=tuple(sheets), unplaced=self._collapse(leftovers))

    def _group_by_material(
        self,
        units: Sequence[PartUnit],
    ) -> dict[str | None, list[PartUnit]]:
        """Group units by material id, keeping first-appearance order."""
        groups: dict[str | None, list[PartUnit]] = {}
        for unit in units:
            groups.setdefault(unit.spec.material_id, []).append(unit)
        return groups

    def _allocate_group(
        self,
        material_id: str | None,
        units: list[PartUnit],
        stock: Sequence[StockSheetSpec],
    ) -> tuple[list[SheetLayout], list[tuple[PartUnit, UnplacedReason]]]:
        candidates = [s for s in stock if s.serves(material_id)]
        # Supply is tracked per group, so generic stock gives each material its own count
        supply: dict[int, int | None] = {i: s.qty for i, s in enumerate(candidates)}
        counters: dict[str, int] = {}

        sheets: list[SheetLayout] = []
        leftovers: list[tuple[PartUnit, UnplacedReason]] = []
        remaining = list(units)

        while remaining:
            choice = self._choose_stock(candidates, supply, remaining)
            if choice is None:
                exhausted = any(supply[i] == 0 for i in supply)
                reason = (
                    UnplacedReason.INSUFFICIENT_SHEET_CAPACITY
                    if exhausted
                    else UnplacedReason.TOO_LARGE_FOR_SHEET
                )
                leftovers.extend((unit, reason) for unit in remaining)
                break

            index, sheet_spec = choice
            kerf = sheet_spec.kerf_mm if sheet_spec.kerf_mm is not None else self.options.kerf_mm
            fitting = [u for u in remaining if self._unit_fits(u, sheet_spec)]

            try:
                outcome = self.packer.pack_sheet(
                    fitting, sheet_spec.length_mm, sheet_spec.width_mm, kerf
                )
            except UnplaceablePart as exc:
                logger.warning("Dropping unplaceable part '%s': %s", exc.part_id, exc)
                leftovers.extend(
                    (u, UnplacedReason.TOO_LARGE_FOR_SHEET)
                    for u in remaining
                    if u.part_id == exc.part_id
                )
                remaining = [u for u in remaining if u.part_id != exc.part_id]
                continue

            if supply[index] is not None:
                supply[index] -= 1

            counters[sheet_spec.id] = counters.get(sheet_spec.id, 0) + 1
            layout = SheetLayout(
                sheet_id=sheet_id_for(sheet_spec.id, material_id, counters[sheet_spec.id]),
                stock_id=sheet_spec.id,
                stock_length_mm=sheet_spec.length_mm,
                stock_width_mm=sheet_spec.width_mm,
                material_id=material_id,
                material_label=sheet_spec.material_label,
                kerf_mm=kerf,
                placements=outcome.placements,
            )
            sheets.append(layout)
            logger.debug(
                "Opened sheet %s: %d parts placed, %d overflow",
                layout.sheet_id,
                layout.piece_count,
                len(outcome.overflow),
            )

            remaining = self._still_open(remaining, outcome.overflow, sheet_spec)

            if self.options.single_sheet_only and remaining:
                leftovers.extend(
                    (unit, UnplacedReason.INSUFFICIENT_SHEET_CAPACITY) for unit in remaining
                )
                break

        return sheets, leftovers

    def _still_open(
        self,
        remaining: list[PartUnit],
        overflow: Sequence[PartUnit],
        sheet_spec: StockSheetSpec,
    ) -> list[PartUnit]:
        """Units still to place after a sheet: its overflow plus units it could not take.

        Overflow is matched by object identity, one entry per occurrence, so
        equal units never stand in for each other. Input order is kept.
        """
        pending = Counter(id(u) for u in overflow)
        still_open: list[PartUnit] = []
        for unit in remaining:
            if not self._unit_fits(unit, sheet_spec):
                still_open.append(unit)
            elif pending[id(unit)]:
                pending[id(unit)] -= 1
                still_open.append(unit)
        return still_open

    def _choose_stock(
        self,
        candidates: list[StockSheetSpec],
        supply: dict[int, int | None],
        remaining: list[PartUnit],
    ) -> tuple[int, StockSheetSpec] | None:
        """Pick the first entry with supply left that fits a remaining unit."""
        for index, sheet_spec in enumerate(candidates):
            if supply[index] == 0:
                continue
            if any(self._unit_fits(u, sheet_spec) for u in remaining):
                return index, sheet_spec
        return None

    def _unit_fits(self, unit: PartUnit, sheet_spec: StockSheetSpec) -> bool:
        return fits_stock(
            unit.spec, sheet_spec.width_mm, sheet_spec.length_mm, self.options.allow_rotation
        )

    def _collapse(
        self,
        leftovers: list[tuple[PartUnit, UnplacedReason]],
    ) -> tuple[UnplacedPart, ...]:
        """Collapse per-unit leftovers into one entry per (part, reason)."""
        counts: dict[tuple[str, UnplacedReason], int] = {}
        specs: dict[str, PartSpec] = {}
        for unit, reason in leftovers:
            key = (unit.part_id, reason)
            counts[key] = counts.get(key, 0) + 1
            specs[unit.part_id] = unit.spec

        for (part_id, reason), count in counts.items():
            logger.warning(
                "%d unit(s) of part '%s' left unplaced: %s", count, part_id, reason.value
            )
        return tuple(
            UnplacedPart(part=specs[part_id], count=count, reason=reason)
            for (part_id, reason), count in counts.items()
        )
