"""Tests for result snapshots and legacy banding migration."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Callable

import pytest

from cutlist.application import CutlistRequest, optimize_cutlist
from cutlist.application.config import ConfigError
from cutlist.domain import (
    BandEdges,
    BandingKey,
    BillingMode,
    BillingOverride,
    BillingPolicy,
    Grain,
    Lamination,
    LayoutResult,
    PartSpec,
    StockSheetSpec,
)
from cutlist.domain.services import bill
from cutlist.infrastructure import (
    dump_snapshot,
    legacy_band_totals,
    load_snapshot,
    migrate_legacy_banding,
)


@pytest.fixture
def result(make_part: Callable[..., PartSpec]) -> LayoutResult:
    """A small two-material job with banding and one oversized part."""
    parts = (
        make_part(
            "side",
            length_mm=720,
            width_mm=560,
            qty=2,
            grain=Grain.LENGTH,
            material_id="oak",
            band_edges=BandEdges(top=True),
        ),
        make_part(
            "top",
            length_mm=1200,
            width_mm=600,
            material_id="oak",
            lamination=Lamination.SAME_BOARD,
            band_edges=BandEdges(left=True, right=True),
        ),
        make_part("back", length_mm=720, width_mm=800, material_id="hdf"),
        make_part(
            "slab",
            length_mm=4000,
            width_mm=600,
            material_id="oak",
            lamination=Lamination.WITH_BACKER,
            backer_material_id="hdf",
        ),
    )
    stock = (StockSheetSpec(id="board", length_mm=2750, width_mm=1830, material_label="Board"),)
    return optimize_cutlist(CutlistRequest(parts=parts, stock=stock))


class TestSnapshotRoundTrip:
    """Tests for dump_snapshot and load_snapshot."""

    def test_snapshot_is_json_serializable(self, result: LayoutResult) -> None:
        data = dump_snapshot(result)
        text = json.dumps(data)
        assert json.loads(text) == data
        assert data["schema_version"] == "1.0"

    def test_quantities_written_as_strings(self, result: LayoutResult) -> None:
        data = dump_snapshot(result)
        assert all(isinstance(q, str) for q in data["billing"]["quantities"].values())

    def test_reload_preserves_result(self, result: LayoutResult) -> None:
        policy = BillingPolicy(
            overrides={"board:hdf:1": BillingOverride(mode=BillingMode.MANUAL, manual_pct=60)},
            floor_pct=15,
        )
        billed = bill(result, policy)
        loaded, loaded_policy = load_snapshot(json.loads(json.dumps(dump_snapshot(billed, policy))))

        assert loaded.sheets == billed.sheets
        assert loaded.unplaced == billed.unplaced
        assert [u.part_id for u in loaded.unplaced] == ["slab", "slab-backer"]
        assert loaded.unplaced[0].part.backer_material_id == "hdf"
        assert dict(loaded.edge_banding) == dict(billed.edge_banding)
        assert dict(loaded.billing) == dict(billed.billing)
        assert dict(loaded.sheet_stats) == dict(billed.sheet_stats)
        assert loaded_policy.floor_pct == 15
        assert loaded_policy.override_for("board:hdf:1").manual_pct == 60

    def test_reload_then_rebill(self, result: LayoutResult) -> None:
        """A stored job can be re-billed without re-optimizing."""
        loaded, policy = load_snapshot(dump_snapshot(result))
        rebilled = bill(loaded, BillingPolicy(global_full_board=True))
        assert rebilled.total_billable_sheets == Decimal(len(result.sheets))
        assert rebilled.sheets == result.sheets

    def test_invalid_snapshot(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_snapshot({"result": {"sheets": [{"sheet_id": "x"}]}})
        assert exc_info.value.error_type == "validation"
        assert "result.sheets[0]" in exc_info.value.message

    def test_legacy_laminate_flag(self) -> None:
        """Parts stored with the old laminate flag load as same-board lamination."""
        part = {"id": "top", "length_mm": 4000, "width_mm": 600, "laminate": True}
        data: dict[str, Any] = {
            "result": {"unplaced": [{"part": part, "count": 2, "reason": "too_large_for_sheet"}]}
        }
        loaded, _ = load_snapshot(data)
        assert loaded.unplaced[0].part.lamination == Lamination.SAME_BOARD
        assert loaded.unplaced[0].part.cut_qty == 2

    def test_unknown_field_rejected(self, result: LayoutResult) -> None:
        data = dump_snapshot(result)
        data["result"]["extra"] = 1
        with pytest.raises(ConfigError):
            load_snapshot(data)


class TestLegacyBanding:
    """Tests for the legacy 16mm/32mm banding totals."""

    def test_migrate(self) -> None:
        migrated = migrate_legacy_banding({"edgebanding_16mm_mm": 1200, "edgebanding_32mm_mm": 0})
        assert migrated == {BandingKey(None, 16.0): 1200.0}

    def test_migrate_both(self) -> None:
        migrated = migrate_legacy_banding({"edgebanding_16mm_mm": 100, "edgebanding_32mm_mm": 50})
        assert migrated == {BandingKey(None, 16.0): 100.0, BandingKey(None, 32.0): 50.0}

    def test_legacy_totals(self) -> None:
        totals = legacy_band_totals(
            {
                BandingKey("oak", 16.0): 1000.0,
                BandingKey("oak", 32.0): 500.0,
                BandingKey(None, 18.0): 200.0,
            }
        )
        assert totals == {"edgebanding_16mm_mm": 1200.0, "edgebanding_32mm_mm": 500.0}

    def test_legacy_snapshot_loads(self) -> None:
        """Snapshots with only the two legacy totals are migrated on load."""
        data: dict[str, Any] = {
            "result": {
                "sheets": [],
                "edgebanding_16mm_mm": 2400,
                "edgebanding_32mm_mm": 800,
            }
        }
        loaded, _ = load_snapshot(data)
        assert dict(loaded.edge_banding) == {
            BandingKey(None, 16.0): 2400.0,
            BandingKey(None, 32.0): 800.0,
        }

    def test_legacy_totals_ignored_when_map_present(self) -> None:
        data: dict[str, Any] = {
            "result": {
                "edge_banding": [{"material_id": "oak", "thickness_mm": 16, "length_mm": 10}],
                "edgebanding_16mm_mm": 2400,
            }
        }
        loaded, _ = load_snapshot(data)
        assert dict(loaded.edge_banding) == {BandingKey("oak", 16.0): 10.0}
