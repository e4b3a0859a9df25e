"""Validate command for checking configuration files.

This module provides the `validate` command that checks a JSON configuration
file for syntax, schema and dimension errors without running the optimizer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from cutlist.application.config import (
    ConfigError,
    config_to_request,
    load_config,
)
from cutlist.domain import CutlistError, UnplacedReason
from cutlist.domain.services import normalize_parts


def display_load_error(error: ConfigError) -> None:
    """Display a configuration loading error on stderr.

    Args:
        error: The ConfigError to display.
    """
    typer.echo("Errors:", err=True)
    if error.error_type == "file_not_found":
        typer.echo(f"  File not found: {error.path}", err=True)
    elif error.error_type == "json_parse":
        typer.echo("  Invalid JSON syntax", err=True)
        for detail in error.details:
            typer.echo(
                f"    Line {detail.get('line', '?')}, Column {detail.get('column', '?')}: "
                f"{detail.get('message', 'Unknown error')}",
                err=True,
            )
    elif error.error_type == "validation":
        for detail in error.details:
            typer.echo(f"  {detail.get('path', 'unknown')}: {detail.get('message')}", err=True)
            value = detail.get("value")
            if value is not None and not isinstance(value, (dict, list)):
                typer.echo(f"    Value: {value!r}", err=True)
    else:
        typer.echo(f"  {error.message}", err=True)


def display_domain_error(error: CutlistError) -> None:
    """Display a dimension or part id error found while normalizing input."""
    typer.echo("Errors:", err=True)
    typer.echo(f"  {error}", err=True)


def validate_command(
    config_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON configuration file to validate"),
    ],
) -> None:
    """Validate a cutlist configuration file.

    Checks the configuration file for:
    - JSON syntax errors
    - Schema validation errors (missing fields, unknown keys, bad types)
    - Invalid part and stock dimensions
    - Part ids repeated by a derived backer part
    - Parts too large for every stock sheet of their material

    Exit codes:
        0 - Configuration is valid
        1 - Configuration has errors (cannot be used)
        2 - Configuration is valid but some parts can never be placed

    Example:
        cutlist validate kitchen.json
    """
    typer.echo(f"Validating {config_file}...")

    try:
        config = load_config(config_file)
        request = config_to_request(config)
        normalized = normalize_parts(request.parts, request.stock, request.allow_rotation)
    except ConfigError as e:
        display_load_error(e)
        typer.echo("Validation failed.", err=True)
        raise typer.Exit(code=1)
    except CutlistError as e:
        display_domain_error(e)
        typer.echo("Validation failed.", err=True)
        raise typer.Exit(code=1)

    oversized = [
        u for u in normalized.rejected if u.reason == UnplacedReason.TOO_LARGE_FOR_SHEET
    ]
    if oversized:
        typer.echo("Warnings:")
        for unplaced in oversized:
            typer.echo(
                f"  parts.{unplaced.part_id}: too large for every stock sheet "
                f"({unplaced.part.length_mm:g}x{unplaced.part.width_mm:g})"
            )
        typer.echo(f"Validation passed with {len(oversized)} warning(s)")
        raise typer.Exit(code=2)

    typer.echo(
        f"Validation passed. {len(config.parts)} parts ({len(normalized.units)} units), "
        f"{len(config.stock)} stock sizes."
    )
