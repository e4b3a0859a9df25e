"""Pytest configuration and shared fixtures for cutlist tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from cutlist.domain import BandEdges, Grain, PartSpec, StockSheetSpec


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: tests that take a long time to run")


# =============================================================================
# Shared domain fixtures
# =============================================================================


@pytest.fixture
def standard_stock() -> StockSheetSpec:
    """A standard 2750x1830 board with unlimited supply."""
    return StockSheetSpec(id="board", length_mm=2750, width_mm=1830)


@pytest.fixture
def make_part() -> Callable[..., PartSpec]:
    """Factory for PartSpecs with sensible defaults."""

    def _make(
        part_id: str = "part",
        length_mm: float = 1000,
        width_mm: float = 500,
        qty: int = 1,
        grain: Grain = Grain.ANY,
        band_edges: BandEdges | None = None,
        **kwargs: Any,
    ) -> PartSpec:
        return PartSpec(
            id=part_id,
            length_mm=length_mm,
            width_mm=width_mm,
            qty=qty,
            grain=grain,
            band_edges=band_edges or BandEdges(),
            **kwargs,
        )

    return _make


# =============================================================================
# Configuration fixtures
# =============================================================================


@pytest.fixture
def simple_config() -> dict[str, Any]:
    """Two 1000x500 parts on one standard board."""
    return {
        "schema_version": "1.2",
        "parts": [
            {"id": "door", "length_mm": 1000, "width_mm": 500, "qty": 2, "label": "Door"},
        ],
        "stock": [
            {"id": "board", "length_mm": 2750, "width_mm": 1830},
        ],
        "options": {"kerf_mm": 3},
    }


@pytest.fixture
def kitchen_config() -> dict[str, Any]:
    """Two materials, grain-locked parts, banding and limited supply."""
    return {
        "schema_version": "1.2",
        "parts": [
            {
                "id": "side",
                "length_mm": 720,
                "width_mm": 560,
                "qty": 4,
                "grain": "length",
                "material_id": "oak",
                "band_edges": {"top": True},
            },
            {
                "id": "shelf",
                "length_mm": 764,
                "width_mm": 540,
                "qty": 6,
                "material_id": "oak",
                "band_edges": {"top": True, "bottom": True},
            },
            {
                "id": "back",
                "length_mm": 720,
                "width_mm": 800,
                "qty": 2,
                "material_id": "hdf",
            },
        ],
        "stock": [
            {
                "id": "oak-board",
                "length_mm": 2750,
                "width_mm": 1830,
                "material_id": "oak",
                "qty": 5,
            },
            {"id": "hdf-board", "length_mm": 2440, "width_mm": 1220, "material_id": "hdf"},
        ],
        "options": {"kerf_mm": 4},
    }
