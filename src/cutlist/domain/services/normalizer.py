"""Input validation and quantity expansion ahead of packing.

The normalizer is the only place that rejects bad dimensions. It raises
``InvalidDimension`` for values that can never be packed, and reports parts
that are valid but larger than every usable stock sheet as unplaced, so the
rest of the run can proceed.

Laminated parts are expanded here too, into the boards that are actually
cut, so packing and billing only ever see plain boards.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Sequence

from cutlist.domain.exceptions import DuplicatePartId, InvalidDimension
from cutlist.domain.layout import UnplacedPart
from cutlist.domain.value_objects import (
    BandEdges,
    Grain,
    Lamination,
    PartSpec,
    PartUnit,
    StockSheetSpec,
    UnplacedReason,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedInput:
    """Validated input ready for allocation.

    Attributes:
        parts: Requested parts and derived backer parts, in expansion order.
        units: Expanded part units in input order.
        stock: Validated stock catalogue in input order.
        rejected: Parts that fit no stock sheet of their material.
    """

    parts: tuple[PartSpec, ...]
    units: tuple[PartUnit, ...]
    stock: tuple[StockSheetSpec, ...]
    rejected: tuple[UnplacedPart, ...]


def allowed_orientations(spec: PartSpec, allow_rotation: bool) -> list[tuple[float, float, bool]]:
    """List the (w, h, rotated) orientations a part may be placed in.

    ``w`` runs along the sheet width, ``h`` along the sheet length. Square
    parts collapse to a single orientation.

    Args:
        spec: The part to orient.
        allow_rotation: Global rotation switch; only affects ``Grain.ANY``.

    Returns:
        Orientations in preference order (as specified first).
    """
    as_specified = (spec.width_mm, spec.length_mm, False)
    rotated = (spec.length_mm, spec.width_mm, True)

    if spec.grain == Grain.LENGTH:
        return [as_specified]
    if spec.grain == Grain.WIDTH:
        return [rotated]
    if not allow_rotation or spec.length_mm == spec.width_mm:
        return [as_specified]
    return [as_specified, rotated]


def fits_stock(
    spec: PartSpec, sheet_width: float, sheet_length: float, allow_rotation: bool
) -> bool:
    """Check whether a part fits an empty sheet in any allowed orientation."""
    return any(
        w <= sheet_width and h <= sheet_length
        for w, h, _ in allowed_orientations(spec, allow_rotation)
    )


def _check_positive(subject: str, field_name: str, value: object) -> None:
    if value is None:
        raise InvalidDimension(subject, field_name, value, "is required")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidDimension(subject, field_name, value, "must be a number")
    if math.isnan(value) or math.isinf(value):
        raise InvalidDimension(subject, field_name, value, "must be finite")
    if value <= 0:
        raise InvalidDimension(subject, field_name, value, "must be positive")


def normalize_stock(stock: Sequence[StockSheetSpec]) -> tuple[StockSheetSpec, ...]:
    """Validate the stock catalogue.

    Args:
        stock: Stock sheet entries in catalogue order.

    Returns:
        The same entries as a tuple.

    Raises:
        InvalidDimension: If a length or width is missing or non-positive,
            a kerf is negative, or a quantity is negative.
    """
    for sheet in stock:
        subject = f"stock '{sheet.id}'"
        _check_positive(subject, "length_mm", sheet.length_mm)
        _check_positive(subject, "width_mm", sheet.width_mm)
        if sheet.kerf_mm is not None and sheet.kerf_mm < 0:
            raise InvalidDimension(subject, "kerf_mm", sheet.kerf_mm, "must be non-negative")
        if sheet.qty is not None and sheet.qty < 0:
            raise InvalidDimension(subject, "qty", sheet.qty, "must be non-negative")
    return tuple(stock)


def backer_part(spec: PartSpec) -> PartSpec:
    """The backer board behind a ``Lamination.WITH_BACKER`` part.

    The backer has the part's size and grain, is cut from the backer
    material and carries no edging of its own.
    """
    return replace(
        spec,
        id=f"{spec.id}-backer",
        material_id=spec.backer_material_id or spec.material_id,
        label=f"{spec.display_label} (backer)",
        band_edges=BandEdges(),
        lamination=Lamination.NONE,
        edging_material_id=None,
        backer_material_id=None,
    )


def expand_lamination(spec: PartSpec) -> tuple[PartSpec, ...]:
    """Board sets needed for one part.

    Same-board lamination doubles the part's own cut quantity (see
    ``PartSpec.cut_qty``); a backer lamination adds a backer part.
    """
    if spec.lamination == Lamination.WITH_BACKER:
        return (spec, backer_part(spec))
    return (spec,)


def normalize_parts(
    parts: Sequence[PartSpec],
    stock: Sequence[StockSheetSpec],
    allow_rotation: bool = True,
) -> NormalizedInput:
    """Validate parts and expand them into individual units.

    Args:
        parts: Requested parts in input order.
        stock: Stock catalogue (validated with ``normalize_stock``).
        allow_rotation: Global rotation switch.

    Returns:
        NormalizedInput with placeable units and rejected parts.

    Raises:
        InvalidDimension: If a part has a non-positive dimension or quantity.
        DuplicatePartId: If two parts, or a part and a derived backer, share an id.
    """
    stock = normalize_stock(stock)

    seen: set[str] = set()
    for spec in parts:
        if spec.id in seen:
            raise DuplicatePartId(spec.id)
        seen.add(spec.id)

    expanded: list[PartSpec] = []
    units: list[PartUnit] = []
    rejected: list[UnplacedPart] = []

    for requested in parts:
        subject = f"part '{requested.id}'"
        _check_positive(subject, "length_mm", requested.length_mm)
        _check_positive(subject, "width_mm", requested.width_mm)
        if (
            isinstance(requested.qty, bool)
            or not isinstance(requested.qty, int)
            or requested.qty < 1
        ):
            raise InvalidDimension(subject, "qty", requested.qty, "must be a positive integer")

        for spec in expand_lamination(requested):
            if spec is not requested:
                if spec.id in seen:
                    raise DuplicatePartId(spec.id)
                seen.add(spec.id)
            expanded.append(spec)

            candidates = [s for s in stock if s.serves(spec.material_id)]
            if not any(
                fits_stock(spec, s.width_mm, s.length_mm, allow_rotation) for s in candidates
            ):
                logger.warning(
                    "Part '%s' (%sx%s, grain %s) fits no stock sheet for material %s",
                    spec.id,
                    spec.length_mm,
                    spec.width_mm,
                    spec.grain.value,
                    spec.material_id,
                )
                rejected.append(
                    UnplacedPart(
                        part=spec,
                        count=spec.cut_qty,
                        reason=UnplacedReason.TOO_LARGE_FOR_SHEET,
                    )
                )
                continue

            units.extend(PartUnit(spec=spec, instance=i + 1) for i in range(spec.cut_qty))

    logger.debug(
        "Normalized %d parts into %d units (%d rejected)",
        len(parts),
        len(units),
        len(rejected),
    )
    return NormalizedInput(
        parts=tuple(expanded), units=tuple(units), stock=stock, rejected=tuple(rejected)
    )
