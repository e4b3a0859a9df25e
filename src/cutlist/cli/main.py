"""Typer CLI for cutlist optimization."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from cutlist.application import optimize_cutlist
from cutlist.application.config import (
    ConfigError,
    config_to_request,
    load_config,
    merge_config_with_cli,
)
from cutlist.cli.commands import import_csv_command, validate_command
from cutlist.cli.commands.output_handlers import OutputFormat, emit, render_result
from cutlist.cli.commands.validate import display_domain_error, display_load_error
from cutlist.domain import BillingPolicy, CutlistError
from cutlist.domain.services import bill
from cutlist.infrastructure import load_snapshot

EXIT_ERROR = 1
EXIT_UNPLACED = 2

app = typer.Typer(
    name="cutlist",
    help="Lay out cabinet parts on stock sheets with minimal waste.",
)

app.command(name="validate")(validate_command)
app.command(name="import-csv")(import_csv_command)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log packing decisions to stderr"),
    ] = False,
) -> None:
    """Lay out cabinet parts on stock sheets with minimal waste."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


@app.command()
def optimize(
    config_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON configuration file"),
    ],
    kerf: Annotated[
        float | None,
        typer.Option("--kerf", "-k", help="Saw kerf in millimetres (overrides config)"),
    ] = None,
    no_rotation: Annotated[
        bool,
        typer.Option("--no-rotation", help="Never rotate parts, whatever their grain"),
    ] = False,
    single_sheet: Annotated[
        bool,
        typer.Option("--single-sheet", help="Open at most one sheet per material"),
    ] = False,
    full_board: Annotated[
        bool,
        typer.Option("--full-board", help="Bill every sheet as a full board"),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: text, ascii, svg, json"),
    ] = OutputFormat.TEXT,
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write output to this file"),
    ] = None,
) -> None:
    """Optimize a cutlist configuration.

    Exit codes:
        0 - Every part was placed
        1 - Configuration, dimension or part id errors
        2 - Layout produced, but some parts could not be placed

    Example:
        cutlist optimize kitchen.json --format ascii
    """
    try:
        config = load_config(config_file)
        config = merge_config_with_cli(
            config,
            kerf_mm=kerf,
            allow_rotation=False if no_rotation else None,
            single_sheet_only=True if single_sheet else None,
            global_full_board=True if full_board else None,
        )
        request = config_to_request(config)
        result = optimize_cutlist(request)
    except ConfigError as e:
        display_load_error(e)
        raise typer.Exit(code=EXIT_ERROR)
    except CutlistError as e:
        display_domain_error(e)
        raise typer.Exit(code=EXIT_ERROR)

    emit(render_result(result, output_format, request.billing), output_file)

    if result.unplaced:
        typer.echo(
            f"Warning: {result.total_unplaced} part unit(s) could not be placed",
            err=True,
        )
        raise typer.Exit(code=EXIT_UNPLACED)


@app.command(name="bill")
def bill_command(
    snapshot_file: Annotated[
        Path,
        typer.Argument(help="Snapshot JSON written by 'optimize --format json'"),
    ],
    full_board: Annotated[
        bool,
        typer.Option("--full-board", help="Bill every sheet as a full board"),
    ] = False,
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the re-billed snapshot to this file"),
    ] = None,
) -> None:
    """Re-bill a stored layout without re-running the optimizer.

    Example:
        cutlist bill job-42.json --full-board
    """
    try:
        data = json.loads(snapshot_file.read_text(encoding="utf-8"))
        result, policy = load_snapshot(data)
    except FileNotFoundError:
        typer.echo(f"Error: snapshot not found: {snapshot_file}", err=True)
        raise typer.Exit(code=EXIT_ERROR)
    except OSError as e:
        typer.echo(f"Error: cannot read snapshot {snapshot_file}: {e.strerror or e}", err=True)
        raise typer.Exit(code=EXIT_ERROR)
    except json.JSONDecodeError as e:
        typer.echo(f"Error: invalid JSON in {snapshot_file}: {e.msg}", err=True)
        raise typer.Exit(code=EXIT_ERROR)
    except ConfigError as e:
        display_load_error(e)
        raise typer.Exit(code=EXIT_ERROR)

    if full_board:
        policy = BillingPolicy(
            global_full_board=True,
            overrides=policy.overrides,
            granularity_pct=policy.granularity_pct,
            floor_pct=policy.floor_pct,
        )
    result = bill(result, policy)

    if output_file is not None:
        emit(render_result(result, OutputFormat.JSON, policy), output_file)

    typer.echo("BILLING")
    typer.echo("=" * 40)
    for sheet in result.sheets:
        typer.echo(f"  {sheet.sheet_id}: {result.billing[sheet.sheet_id]}")
    typer.echo(f"Total billable boards: {result.total_billable_sheets}")


if __name__ == "__main__":
    app()
