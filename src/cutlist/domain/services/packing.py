"""Shelf packing engine for a single stock sheet.

The shelf algorithm creates horizontal bands (shelves) down the sheet. Each
shelf's height is set by the first part placed on it, and parts are placed
left-to-right within a shelf. This produces guillotine-compatible layouts
where every cut runs edge-to-edge, suitable for panel saws and table saws.

Kerf is only reserved between neighbouring parts and between shelves, never
along the sheet perimeter.

A wider kerf never places more parts on a sheet. Shelf offsets are kept as
kerf-free sums plus a count of kerf gaps, so every packing pass knows the
widest kerf at which it would make exactly the same decisions. The packer
replays those kerf ranges from zero up to the requested kerf and caps the
sheet at the fewest parts any of them places.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from cutlist.domain.exceptions import UnplaceablePart
from cutlist.domain.layout import Placement
from cutlist.domain.services.normalizer import allowed_orientations
from cutlist.domain.value_objects import PartUnit

logger = logging.getLogger(__name__)

Orientation = tuple[float, float, bool]


@dataclass(frozen=True)
class SheetPackOutcome:
    """Result of packing one sheet.

    Attributes:
        placements: Placed units in placement order.
        overflow: Units that did not fit, in sorted order.
    """

    placements: tuple[Placement, ...]
    overflow: tuple[PartUnit, ...]


@dataclass
class _Shelf:
    """Internal shelf representation for one packing pass.

    Attributes:
        above: Total height of the shelves above this one.
        index: Number of shelves above (one kerf gap each).
        height: Height of the shelf (set by the first part placed).
        filled: Total width of the parts on the shelf.
        parts: Number of parts on the shelf.
    """

    above: float
    index: int
    height: float
    filled: float = 0.0
    parts: int = 0


@dataclass(frozen=True)
class _Slot:
    """A unit's position chosen by a packing pass."""

    order: int
    unit: PartUnit
    x: float
    y: float
    orientation: Orientation


class _PackingPass:
    """Best-fit shelf placement of sorted units at one kerf.

    ``stable_until`` is the widest kerf at which every placement this pass
    made still fits. Rejected candidates only get worse as the kerf grows,
    so the pass makes the same decisions for any kerf up to that value.
    """

    def __init__(self, sheet_length: float, sheet_width: float, kerf: float) -> None:
        self.sheet_length = sheet_length
        self.sheet_width = sheet_width
        self.kerf = kerf
        self.shelves: list[_Shelf] = []
        self.slots: list[_Slot] = []
        self.overflow: list[tuple[int, PartUnit]] = []
        self.stable_until = math.inf

    def run(self, ordered: Sequence[PartUnit], allow_rotation: bool) -> _PackingPass:
        for order, unit in enumerate(ordered):
            orientations = allowed_orientations(unit.spec, allow_rotation)
            if not (
                self._place_on_existing_shelf(order, unit, orientations)
                or self._place_on_new_shelf(order, unit, orientations)
            ):
                self.overflow.append((order, unit))
        return self

    def _holds_until(self, fixed: float, gaps: int, limit: float) -> None:
        """Record the kerf at which ``fixed + gaps * kerf <= limit`` stops holding."""
        if gaps:
            self.stable_until = min(self.stable_until, (limit - fixed) / gaps)

    def _place_on_existing_shelf(
        self, order: int, unit: PartUnit, orientations: list[Orientation]
    ) -> bool:
        """Best-fit placement on an open shelf (least wasted shelf height)."""
        best: tuple[float, _Shelf, Orientation] | None = None

        for shelf in self.shelves:
            next_x = shelf.filled + shelf.parts * self.kerf
            for orientation in orientations:
                w, h, _ = orientation
                if h > shelf.height or next_x + w > self.sheet_width:
                    continue
                waste = shelf.height - h
                # Strict comparison keeps the earliest shelf and orientation on ties
                if best is None or waste < best[0]:
                    best = (waste, shelf, orientation)

        if best is None:
            return False
        _, shelf, orientation = best
        self._holds_until(shelf.filled + orientation[0], shelf.parts, self.sheet_width)
        self._place(order, unit, shelf, orientation)
        return True

    def _place_on_new_shelf(
        self, order: int, unit: PartUnit, orientations: list[Orientation]
    ) -> bool:
        """Open a shelf below the existing ones, using the flattest fitting orientation."""
        above = sum(s.height for s in self.shelves)
        index = len(self.shelves)
        y = above + index * self.kerf

        fitting = [
            (w, h, rotated)
            for w, h, rotated in orientations
            if y + h <= self.sheet_length and w <= self.sheet_width
        ]
        if not fitting:
            return False

        orientation = min(fitting, key=lambda o: (o[1], o[0]))
        self._holds_until(above + orientation[1], index, self.sheet_length)
        shelf = _Shelf(above=above, index=index, height=orientation[1])
        self.shelves.append(shelf)
        self._place(order, unit, shelf, orientation)
        return True

    def _place(self, order: int, unit: PartUnit, shelf: _Shelf, orientation: Orientation) -> None:
        """Place a unit at the shelf's next position and advance the shelf."""
        self.slots.append(
            _Slot(
                order=order,
                unit=unit,
                x=shelf.filled + shelf.parts * self.kerf,
                y=shelf.above + shelf.index * self.kerf,
                orientation=orientation,
            )
        )
        shelf.filled += orientation[0]
        shelf.parts += 1


class ShelfPacker:
    """Packs part units onto one sheet using a best-fit shelf heuristic.

    Attributes:
        allow_rotation: Whether ``Grain.ANY`` parts may be turned 90 degrees.
    """

    def __init__(self, allow_rotation: bool = True) -> None:
        self.allow_rotation = allow_rotation

    def pack_sheet(
        self,
        units: Sequence[PartUnit],
        sheet_length: float,
        sheet_width: float,
        kerf: float,
    ) -> SheetPackOutcome:
        """Place as many units as possible onto one sheet.

        Args:
            units: Units to place, all of the same material.
            sheet_length: Sheet length (Y extent).
            sheet_width: Sheet width (X extent).
            kerf: Blade width reserved between parts and between shelves.

        Returns:
            SheetPackOutcome with placements and overflow.

        Raises:
            UnplaceablePart: If a unit fits the empty sheet in no allowed orientation.
        """
        for unit in units:
            if not self._fits_empty_sheet(unit, sheet_length, sheet_width):
                raise UnplaceablePart(
                    unit.part_id,
                    f"Part '{unit.part_id}' ({unit.spec.length_mm}x{unit.spec.width_mm}) "
                    f"exceeds sheet ({sheet_length}x{sheet_width}) in every allowed orientation",
                )

        ordered = self._sort_units(units)
        packing = self._run(ordered, sheet_length, sheet_width, kerf)
        limit = self._fewest_placed(ordered, sheet_length, sheet_width, kerf)

        kept = packing.slots[:limit]
        dropped = [(slot.order, slot.unit) for slot in packing.slots[limit:]]
        if dropped:
            logger.debug(
                "Holding back %d units that a narrower kerf could not place",
                len(dropped),
            )
        overflow = sorted(packing.overflow + dropped, key=lambda entry: entry[0])

        logger.debug(
            "Packed %d of %d units onto %sx%s sheet in %d shelves",
            len(kept),
            len(units),
            sheet_length,
            sheet_width,
            len(packing.shelves),
        )
        return SheetPackOutcome(
            placements=tuple(self._to_placement(slot) for slot in kept),
            overflow=tuple(unit for _, unit in overflow),
        )

    def _run(
        self,
        ordered: Sequence[PartUnit],
        sheet_length: float,
        sheet_width: float,
        kerf: float,
    ) -> _PackingPass:
        return _PackingPass(sheet_length, sheet_width, kerf).run(ordered, self.allow_rotation)

    def _fewest_placed(
        self,
        ordered: Sequence[PartUnit],
        sheet_length: float,
        sheet_width: float,
        kerf: float,
    ) -> int:
        """Fewest units placed by any kerf from zero up to ``kerf``.

        Each pass holds over a closed kerf range, so the next distinct layout
        starts just past the end of the previous one.
        """
        fewest = len(ordered)
        at = 0.0
        while at <= kerf:
            packing = self._run(ordered, sheet_length, sheet_width, at)
            fewest = min(fewest, len(packing.slots))
            if packing.stable_until >= kerf:
                break
            at = math.nextafter(max(packing.stable_until, at), math.inf)
        return fewest

    def _sort_units(self, units: Sequence[PartUnit]) -> list[PartUnit]:
        """Sort units by area then longer side, both descending.

        ``sorted`` is stable, so equal keys keep their input order.
        """
        return sorted(
            units,
            key=lambda u: (-u.spec.area, -max(u.spec.length_mm, u.spec.width_mm)),
        )

    def _fits_empty_sheet(self, unit: PartUnit, sheet_length: float, sheet_width: float) -> bool:
        return any(
            w <= sheet_width and h <= sheet_length
            for w, h, _ in allowed_orientations(unit.spec, self.allow_rotation)
        )

    def _to_placement(self, slot: _Slot) -> Placement:
        unit = slot.unit
        w, h, rotated = slot.orientation
        if rotated:
            logger.debug(
                "Unit '%s' placed rotated at (%s, %s) as %sx%s",
                unit.uid,
                slot.x,
                slot.y,
                w,
                h,
            )
        return Placement(
            part_id=unit.part_id,
            instance=unit.instance,
            x=slot.x,
            y=slot.y,
            w=w,
            h=h,
            rotated=rotated,
            grain=unit.spec.grain,
            original_length_mm=unit.spec.length_mm,
            original_width_mm=unit.spec.width_mm,
            label=unit.label,
        )
