"""Tests for configuration loading, validation, merging and adaptation.

Tests cover:
- Schema validation (versions, unknown fields, duplicate ids)
- Loader error categories and JSON path formatting
- CLI override merging
- Conversion to domain objects
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from cutlist.application.config import (
    ConfigError,
    CutlistConfiguration,
    config_to_request,
    load_config,
    load_config_from_dict,
    merge_config_with_cli,
)
from cutlist.domain import BillingMode, Grain, Lamination


def write_config(tmp_path: Path, data: Any) -> Path:
    path = tmp_path / "cutlist.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


# =============================================================================
# Schema Tests
# =============================================================================


class TestCutlistConfiguration:
    """Tests for the root configuration model."""

    def test_minimal_config(self) -> None:
        config = CutlistConfiguration.model_validate(
            {"schema_version": "1.0", "stock": [{"id": "b", "length_mm": 2440, "width_mm": 1220}]}
        )
        assert config.parts == []
        assert config.options.kerf_mm == 3.0
        assert config.options.allow_rotation is True
        assert config.billing.granularity_pct == 5.0
        assert config.billing.floor_pct == 10.0

    def test_full_config(self, kitchen_config: dict[str, Any]) -> None:
        config = CutlistConfiguration.model_validate(kitchen_config)
        assert len(config.parts) == 3
        assert config.parts[0].grain == Grain.LENGTH
        assert config.parts[0].band_edges.top is True
        assert config.stock[0].qty == 5
        assert config.stock[1].qty is None

    def test_newer_minor_version_accepted(self, simple_config: dict[str, Any]) -> None:
        simple_config["schema_version"] = "1.9"
        assert CutlistConfiguration.model_validate(simple_config).schema_version == "1.9"

    @pytest.mark.parametrize("version", ["2.0", "0.9", "one"])
    def test_unsupported_version_rejected(
        self, version: str, simple_config: dict[str, Any]
    ) -> None:
        simple_config["schema_version"] = version
        with pytest.raises(ValidationError):
            CutlistConfiguration.model_validate(simple_config)

    def test_unknown_field_rejected(self, simple_config: dict[str, Any]) -> None:
        simple_config["parts"][0]["colour"] = "red"
        with pytest.raises(ValidationError):
            CutlistConfiguration.model_validate(simple_config)

    def test_stock_required(self) -> None:
        with pytest.raises(ValidationError):
            CutlistConfiguration.model_validate({"schema_version": "1.0", "stock": []})

    def test_duplicate_part_ids_rejected(self, simple_config: dict[str, Any]) -> None:
        simple_config["parts"].append(dict(simple_config["parts"][0]))
        with pytest.raises(ValidationError, match="Duplicate part id 'door'"):
            CutlistConfiguration.model_validate(simple_config)

    def test_duplicate_stock_ids_rejected(self, simple_config: dict[str, Any]) -> None:
        simple_config["stock"].append(dict(simple_config["stock"][0]))
        with pytest.raises(ValidationError, match="Duplicate stock id 'board'"):
            CutlistConfiguration.model_validate(simple_config)

    def test_kerf_range(self, simple_config: dict[str, Any]) -> None:
        simple_config["options"]["kerf_mm"] = -1
        with pytest.raises(ValidationError):
            CutlistConfiguration.model_validate(simple_config)

    def test_dimensions_not_range_checked(self, simple_config: dict[str, Any]) -> None:
        """Zero dimensions pass the schema and are left to the normalizer."""
        simple_config["parts"][0]["length_mm"] = 0
        config = CutlistConfiguration.model_validate(simple_config)
        assert config.parts[0].length_mm == 0

    def test_billing_overrides(self, simple_config: dict[str, Any]) -> None:
        simple_config["billing"] = {
            "overrides": {"board:1": {"mode": "manual", "manual_pct": 40}},
        }
        config = CutlistConfiguration.model_validate(simple_config)
        override = config.billing.overrides["board:1"]
        assert override.mode == BillingMode.MANUAL
        assert override.manual_pct == 40

    def test_lamination_types(self, simple_config: dict[str, Any]) -> None:
        simple_config["schema_version"] = "1.3"
        simple_config["parts"][0]["lamination"] = "with-backer"
        simple_config["parts"][0]["backer_material_id"] = "mdf"
        part = CutlistConfiguration.model_validate(simple_config).parts[0]
        assert part.lamination == Lamination.WITH_BACKER
        assert part.backer_material_id == "mdf"

    def test_unknown_lamination_rejected(self, simple_config: dict[str, Any]) -> None:
        simple_config["parts"][0]["lamination"] = "custom"
        with pytest.raises(ValidationError):
            CutlistConfiguration.model_validate(simple_config)

    @pytest.mark.parametrize(
        ("flag", "expected"),
        [(True, Lamination.SAME_BOARD), (False, Lamination.NONE)],
    )
    def test_legacy_laminate_flag(
        self, simple_config: dict[str, Any], flag: bool, expected: Lamination
    ) -> None:
        """Pre-1.3 files mark same-board lamination with a boolean flag."""
        simple_config["parts"][0]["laminate"] = flag
        part = CutlistConfiguration.model_validate(simple_config).parts[0]
        assert part.lamination == expected

    def test_lamination_wins_over_legacy_flag(self, simple_config: dict[str, Any]) -> None:
        simple_config["parts"][0]["laminate"] = True
        simple_config["parts"][0]["lamination"] = "with-backer"
        part = CutlistConfiguration.model_validate(simple_config).parts[0]
        assert part.lamination == Lamination.WITH_BACKER


# =============================================================================
# Loader Tests
# =============================================================================


class TestLoadConfig:
    """Tests for load_config error reporting."""

    def test_load_valid_file(self, tmp_path: Path, simple_config: dict[str, Any]) -> None:
        config = load_config(write_config(tmp_path, simple_config))
        assert config.parts[0].id == "door"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "missing.json")
        assert exc_info.value.error_type == "file_not_found"
        assert exc_info.value.path == tmp_path / "missing.json"

    def test_invalid_json(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, '{"schema_version": "1.0",\n  "stock": [}'))
        error = exc_info.value
        assert error.error_type == "json_parse"
        assert error.details[0]["line"] == 2
        assert "line 2" in str(error)

    def test_validation_error_paths(self, tmp_path: Path, simple_config: dict[str, Any]) -> None:
        """Validation failures report a JSON path per error."""
        simple_config["parts"][0]["qty"] = "many"
        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, simple_config))

        error = exc_info.value
        assert error.error_type == "validation"
        assert error.details[0]["path"] == "parts[0].qty"
        assert "parts[0].qty" in error.message
        assert error.message.startswith("Configuration validation failed:")

    def test_load_from_dict(self, simple_config: dict[str, Any]) -> None:
        assert load_config_from_dict(simple_config).stock[0].id == "board"

    def test_load_from_dict_invalid(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config_from_dict({"schema_version": "1.0"})
        assert exc_info.value.error_type == "validation"
        assert exc_info.value.path is None
        assert exc_info.value.details[0]["path"] == "stock"


# =============================================================================
# Merger Tests
# =============================================================================


class TestMergeConfigWithCli:
    """Tests for CLI override precedence."""

    def test_no_overrides_keeps_values(self, kitchen_config: dict[str, Any]) -> None:
        config = CutlistConfiguration.model_validate(kitchen_config)
        assert merge_config_with_cli(config) == config

    def test_overrides_applied(self, kitchen_config: dict[str, Any]) -> None:
        config = CutlistConfiguration.model_validate(kitchen_config)
        merged = merge_config_with_cli(
            config,
            kerf_mm=2.5,
            allow_rotation=False,
            single_sheet_only=True,
            global_full_board=True,
        )
        assert merged.options.kerf_mm == 2.5
        assert merged.options.allow_rotation is False
        assert merged.options.single_sheet_only is True
        assert merged.billing.global_full_board is True
        assert config.options.kerf_mm == 4

    def test_override_revalidated(self, simple_config: dict[str, Any]) -> None:
        config = CutlistConfiguration.model_validate(simple_config)
        with pytest.raises(ValidationError):
            merge_config_with_cli(config, kerf_mm=50)


# =============================================================================
# Adapter Tests
# =============================================================================


class TestConfigToRequest:
    """Tests for conversion to a CutlistRequest."""

    def test_request_fields(self, kitchen_config: dict[str, Any]) -> None:
        kitchen_config["billing"] = {
            "floor_pct": 0,
            "overrides": {"oak-board:oak:1": {"mode": "full"}},
        }
        request = config_to_request(CutlistConfiguration.model_validate(kitchen_config))

        assert request.kerf_mm == 4
        assert [p.id for p in request.parts] == ["side", "shelf", "back"]
        side = request.parts[0]
        assert side.grain == Grain.LENGTH
        assert side.band_edges.top and not side.band_edges.bottom
        assert side.material_id == "oak"
        assert request.stock[0].qty == 5
        assert request.stock[1].unlimited
        assert request.billing.floor_pct == 0
        assert request.billing.override_for("oak-board:oak:1").mode == BillingMode.FULL
        assert request.options.kerf_mm == 4

    def test_lamination_carried_to_parts(self, simple_config: dict[str, Any]) -> None:
        simple_config["parts"][0]["lamination"] = "with-backer"
        simple_config["parts"][0]["backer_material_id"] = "mdf"
        request = config_to_request(CutlistConfiguration.model_validate(simple_config))

        door = request.parts[0]
        assert door.lamination == Lamination.WITH_BACKER
        assert door.backer_material_id == "mdf"
