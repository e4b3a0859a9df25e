"""Tests for input normalization and quantity expansion."""

from __future__ import annotations

import math
from typing import Callable

import pytest

from cutlist.domain import (
    BandEdges,
    DuplicatePartId,
    Grain,
    InvalidDimension,
    Lamination,
    PartSpec,
    StockSheetSpec,
    UnplacedReason,
)
from cutlist.domain.services import (
    backer_part,
    expand_lamination,
    fits_stock,
    normalize_parts,
    normalize_stock,
)


class TestNormalizeStock:
    """Tests for stock catalogue validation."""

    def test_valid_stock_is_returned_in_order(self) -> None:
        """Valid entries pass through unchanged."""
        stock = [
            StockSheetSpec(id="a", length_mm=2440, width_mm=1220),
            StockSheetSpec(id="b", length_mm=2750, width_mm=1830, qty=0, kerf_mm=0),
        ]
        assert normalize_stock(stock) == tuple(stock)

    @pytest.mark.parametrize("field", ["length_mm", "width_mm"])
    @pytest.mark.parametrize("value", [0, -10])
    def test_non_positive_dimension_rejected(self, field: str, value: float) -> None:
        """Zero or negative sheet dimensions raise InvalidDimension."""
        kwargs = {"length_mm": 2750, "width_mm": 1830, field: value}
        with pytest.raises(InvalidDimension) as exc_info:
            normalize_stock([StockSheetSpec(id="bad", **kwargs)])
        assert exc_info.value.field == field
        assert exc_info.value.subject == "stock 'bad'"

    def test_negative_kerf_rejected(self) -> None:
        """A negative per-stock kerf is invalid."""
        with pytest.raises(InvalidDimension, match="kerf_mm"):
            normalize_stock([StockSheetSpec(id="s", length_mm=100, width_mm=100, kerf_mm=-1)])

    def test_negative_qty_rejected(self) -> None:
        """A negative supply is invalid."""
        with pytest.raises(InvalidDimension, match="qty"):
            normalize_stock([StockSheetSpec(id="s", length_mm=100, width_mm=100, qty=-1)])


class TestNormalizeParts:
    """Tests for part validation and expansion."""

    def test_quantity_expansion_keeps_order(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        """Each part expands into qty numbered units, in input order."""
        parts = [make_part("a", qty=3), make_part("b", qty=1)]
        normalized = normalize_parts(parts, [standard_stock])

        assert [u.uid for u in normalized.units] == ["a#1", "a#2", "a#3", "b#1"]
        assert normalized.rejected == ()

    def test_unit_labels(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        """Multi-quantity units are numbered; single units keep the base label."""
        parts = [make_part("a", qty=2, label="Shelf"), make_part("b", label="Top")]
        normalized = normalize_parts(parts, [standard_stock])
        assert [u.label for u in normalized.units] == ["Shelf #1", "Shelf #2", "Top"]

    @pytest.mark.parametrize("value", [0, -1, None, math.nan, math.inf, "500"])
    def test_invalid_length_rejected(
        self,
        value: object,
        make_part: Callable[..., PartSpec],
        standard_stock: StockSheetSpec,
    ) -> None:
        """Unusable lengths raise InvalidDimension naming the part and field."""
        with pytest.raises(InvalidDimension) as exc_info:
            normalize_parts([make_part("bad", length_mm=value)], [standard_stock])
        assert exc_info.value.subject == "part 'bad'"
        assert exc_info.value.field == "length_mm"

    def test_negative_width_rejected(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        with pytest.raises(InvalidDimension, match="width_mm"):
            normalize_parts([make_part(width_mm=-5)], [standard_stock])

    @pytest.mark.parametrize("qty", [0, -2, 1.5, True])
    def test_invalid_quantity_rejected(
        self,
        qty: object,
        make_part: Callable[..., PartSpec],
        standard_stock: StockSheetSpec,
    ) -> None:
        """Quantities must be positive integers."""
        with pytest.raises(InvalidDimension, match="qty"):
            normalize_parts([make_part(qty=qty)], [standard_stock])

    def test_oversized_part_reported_not_raised(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        """A valid part larger than every sheet is rejected with a reason."""
        parts = [make_part("huge", length_mm=3000, width_mm=2000, qty=2), make_part("ok")]
        normalized = normalize_parts(parts, [standard_stock])

        assert [u.part_id for u in normalized.units] == ["ok"]
        assert len(normalized.rejected) == 1
        rejected = normalized.rejected[0]
        assert rejected.part_id == "huge"
        assert rejected.count == 2
        assert rejected.reason == UnplacedReason.TOO_LARGE_FOR_SHEET

    def test_grain_lock_can_make_part_oversized(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        """A part that only fits rotated is rejected when its grain forbids rotation."""
        locked = make_part("locked", length_mm=1000, width_mm=2000, grain=Grain.LENGTH)
        free = make_part("free", length_mm=1000, width_mm=2000, grain=Grain.ANY)
        normalized = normalize_parts([locked, free], [standard_stock])

        assert [u.part_id for u in normalized.units] == ["free"]
        assert [r.part_id for r in normalized.rejected] == ["locked"]

    def test_rotation_switch_applies(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        """With rotation disabled, free parts are checked as specified only."""
        part = make_part(length_mm=1000, width_mm=2000)
        normalized = normalize_parts([part], [standard_stock], allow_rotation=False)
        assert normalized.units == ()
        assert len(normalized.rejected) == 1

    def test_part_without_matching_material_stock(
        self, make_part: Callable[..., PartSpec]
    ) -> None:
        """Parts are only checked against stock serving their material."""
        stock = [StockSheetSpec(id="pine", length_mm=2440, width_mm=1220, material_id="pine")]
        normalized = normalize_parts([make_part(material_id="oak")], stock)
        assert normalized.units == ()
        assert normalized.rejected[0].reason == UnplacedReason.TOO_LARGE_FOR_SHEET

    def test_generic_stock_serves_any_material(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        normalized = normalize_parts([make_part(material_id="oak")], [standard_stock])
        assert len(normalized.units) == 1

    def test_repeated_part_id_rejected(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        """Two parts with one id would share units and banding, so they are refused."""
        parts = [make_part("p", length_mm=1000, width_mm=1000), make_part("p", 900, 900)]
        with pytest.raises(DuplicatePartId) as exc_info:
            normalize_parts(parts, [standard_stock])
        assert exc_info.value.part_id == "p"

    def test_parts_are_returned_in_input_order(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        parts = [make_part("a"), make_part("b")]
        assert normalize_parts(parts, [standard_stock]).parts == tuple(parts)


class TestFitsStock:
    """Tests for the empty-sheet fit check."""

    def test_exact_fit(self, make_part: Callable[..., PartSpec]) -> None:
        """A part exactly the size of the sheet fits."""
        part = make_part(length_mm=2750, width_mm=1830, grain=Grain.LENGTH)
        assert fits_stock(part, 1830, 2750, allow_rotation=True)

    def test_rotation_needed(self, make_part: Callable[..., PartSpec]) -> None:
        part = make_part(length_mm=1000, width_mm=2000)
        assert fits_stock(part, 1830, 2750, allow_rotation=True)
        assert not fits_stock(part, 1830, 2750, allow_rotation=False)


class TestLamination:
    """Tests for laminated board expansion."""

    def test_plain_part_is_unchanged(self, make_part: Callable[..., PartSpec]) -> None:
        spec = make_part()
        assert expand_lamination(spec) == (spec,)

    def test_same_board_doubles_units(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        """Each laminated unit is cut as two boards of the part's own material."""
        spec = make_part("door", qty=2, label="Door", lamination=Lamination.SAME_BOARD)
        normalized = normalize_parts([spec], [standard_stock])

        assert normalized.parts == (spec,)
        assert [u.uid for u in normalized.units] == ["door#1", "door#2", "door#3", "door#4"]
        assert normalized.units[0].label == "Door #1"

    def test_single_same_board_part_is_numbered(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        spec = make_part("top", label="Top", lamination=Lamination.SAME_BOARD)
        normalized = normalize_parts([spec], [standard_stock])
        assert [u.label for u in normalized.units] == ["Top #1", "Top #2"]

    def test_backer_part(self, make_part: Callable[..., PartSpec]) -> None:
        """A backer matches the part's size and grain, on the backer material, unbanded."""
        spec = make_part(
            "door",
            qty=3,
            grain=Grain.LENGTH,
            band_edges=BandEdges.all_edges(),
            label="Door",
            material_id="oak",
            lamination=Lamination.WITH_BACKER,
            backer_material_id="mdf",
            edging_material_id="abs",
        )
        backer = backer_part(spec)

        assert backer.id == "door-backer"
        assert backer.material_id == "mdf"
        assert (backer.length_mm, backer.width_mm, backer.qty) == (1000, 500, 3)
        assert backer.grain == Grain.LENGTH
        assert not backer.band_edges.any
        assert backer.lamination == Lamination.NONE
        assert backer.edging_material_id is None
        assert backer.label == "Door (backer)"

    def test_backer_defaults_to_part_material(self, make_part: Callable[..., PartSpec]) -> None:
        spec = make_part("door", material_id="oak", lamination=Lamination.WITH_BACKER)
        assert backer_part(spec).material_id == "oak"

    def test_with_backer_adds_backer_units(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        spec = make_part(
            "door", qty=2, lamination=Lamination.WITH_BACKER, backer_material_id="mdf"
        )
        normalized = normalize_parts([spec, make_part("shelf")], [standard_stock])

        assert [p.id for p in normalized.parts] == ["door", "door-backer", "shelf"]
        assert [u.uid for u in normalized.units] == [
            "door#1",
            "door#2",
            "door-backer#1",
            "door-backer#2",
            "shelf#1",
        ]

    def test_backer_checked_against_its_own_material(
        self, make_part: Callable[..., PartSpec]
    ) -> None:
        """A backer with no stock for its material is rejected on its own."""
        stock = [StockSheetSpec(id="oak", length_mm=2750, width_mm=1830, material_id="oak")]
        spec = make_part(
            "door",
            qty=2,
            material_id="oak",
            lamination=Lamination.WITH_BACKER,
            backer_material_id="mdf",
        )
        normalized = normalize_parts([spec], stock)

        assert [u.part_id for u in normalized.units] == ["door", "door"]
        assert [(r.part_id, r.count) for r in normalized.rejected] == [("door-backer", 2)]

    def test_oversized_same_board_counts_every_board(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        spec = make_part("slab", length_mm=4000, qty=2, lamination=Lamination.SAME_BOARD)
        normalized = normalize_parts([spec], [standard_stock])
        assert normalized.rejected[0].count == 4

    def test_backer_id_collision_rejected(
        self, make_part: Callable[..., PartSpec], standard_stock: StockSheetSpec
    ) -> None:
        parts = [
            make_part("door", lamination=Lamination.WITH_BACKER),
            make_part("door-backer"),
        ]
        with pytest.raises(DuplicatePartId) as exc_info:
            normalize_parts(parts, [standard_stock])
        assert exc_info.value.part_id == "door-backer"
