"""Configuration merging for CLI override support.

Precedence is CLI args > config values > defaults. Only non-None CLI
arguments override configuration values.
"""

from __future__ import annotations

from cutlist.application.config.schema import CutlistConfiguration


def merge_config_with_cli(
    config: CutlistConfiguration,
    *,
    kerf_mm: float | None = None,
    allow_rotation: bool | None = None,
    single_sheet_only: bool | None = None,
    global_full_board: bool | None = None,
) -> CutlistConfiguration:
    """Merge CLI arguments with configuration values.

    Args:
        config: The base configuration.
        kerf_mm: Override for options.kerf_mm.
        allow_rotation: Override for options.allow_rotation.
        single_sheet_only: Override for options.single_sheet_only.
        global_full_board: Override for billing.global_full_board.

    Returns:
        A new, re-validated CutlistConfiguration.

    Example:
        >>> merged = merge_config_with_cli(config, kerf_mm=4.0)
        >>> merged.options.kerf_mm
        4.0
    """
    options = config.options.model_dump()
    for key, value in (
        ("kerf_mm", kerf_mm),
        ("allow_rotation", allow_rotation),
        ("single_sheet_only", single_sheet_only),
    ):
        if value is not None:
            options[key] = value

    billing = config.billing.model_dump()
    if global_full_board is not None:
        billing["global_full_board"] = global_full_board

    data = config.model_dump()
    data["options"] = options
    data["billing"] = billing
    return CutlistConfiguration.model_validate(data)
