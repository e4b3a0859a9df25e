"""Configuration schema and loading for cutlist runs.

This package provides JSON-based configuration loading and validation.

Public API:
    - CutlistConfiguration: Root configuration model
    - PartConfig / StockConfig: Part and stock entries
    - OptionsConfig / BillingConfig: Packing options and billing policy
    - load_config: Load configuration from a JSON file
    - load_config_from_dict: Load configuration from a dictionary
    - ConfigError: Exception for configuration errors
    - config_to_request: Convert a configuration to a CutlistRequest
    - merge_config_with_cli: Apply CLI overrides to a configuration

Example:
    >>> from pathlib import Path
    >>> from cutlist.application.config import load_config, ConfigError
    >>>
    >>> try:
    ...     config = load_config(Path("kitchen.json"))
    ...     print(f"{len(config.parts)} parts, {len(config.stock)} stock sizes")
    ... except ConfigError as e:
    ...     print(f"Error: {e}")
"""

from cutlist.application.config.adapter import (
    billing_config_to_policy,
    config_to_request,
    part_config_to_spec,
    stock_config_to_spec,
)
from cutlist.application.config.loader import (
    ConfigError,
    load_config,
    load_config_from_dict,
    validation_details,
)
from cutlist.application.config.merger import merge_config_with_cli
from cutlist.application.config.schema import (
    SUPPORTED_VERSIONS,
    BandEdgesConfig,
    BillingConfig,
    BillingModeConfig,
    BillingOverrideConfig,
    CutlistConfiguration,
    GrainConfig,
    OptionsConfig,
    PartConfig,
    StockConfig,
)

__all__ = [
    "SUPPORTED_VERSIONS",
    "BandEdgesConfig",
    "BillingConfig",
    "BillingModeConfig",
    "BillingOverrideConfig",
    "ConfigError",
    "CutlistConfiguration",
    "GrainConfig",
    "OptionsConfig",
    "PartConfig",
    "StockConfig",
    "billing_config_to_policy",
    "config_to_request",
    "load_config",
    "load_config_from_dict",
    "merge_config_with_cli",
    "part_config_to_spec",
    "stock_config_to_spec",
    "validation_details",
]
