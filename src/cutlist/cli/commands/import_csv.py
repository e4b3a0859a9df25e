"""Import command for SketchUp cutlist CSV exports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from cutlist.application.config import SUPPORTED_VERSIONS
from cutlist.domain import PartSpec
from cutlist.infrastructure import parse_sketchup_csv, rows_to_part_specs


def _part_to_config(spec: PartSpec) -> dict:
    edges = spec.band_edges
    data: dict = {
        "id": spec.id,
        "length_mm": spec.length_mm,
        "width_mm": spec.width_mm,
        "qty": spec.qty,
        "grain": spec.grain.value,
        "thickness_mm": spec.thickness_mm,
    }
    if edges.any:
        data["band_edges"] = {
            "top": edges.top,
            "right": edges.right,
            "bottom": edges.bottom,
            "left": edges.left,
        }
    if spec.material_id:
        data["material_id"] = spec.material_id
    if spec.label:
        data["label"] = spec.label
    return data


def import_csv_command(
    csv_file: Annotated[
        Path,
        typer.Argument(help="SketchUp cutlist CSV export"),
    ],
    material: Annotated[
        str | None,
        typer.Option("--material", "-m", help="Material id to assign to every part"),
    ] = None,
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the parts JSON to this file"),
    ] = None,
) -> None:
    """Convert a SketchUp cutlist CSV into configuration parts.

    Prints a JSON object with a ``parts`` list ready to merge into a
    configuration file. Rows with errors are reported and skipped.

    Example:
        cutlist import-csv export.csv --material oak-16 -o parts.json
    """
    try:
        text = csv_file.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        typer.echo(f"Error: CSV file not found: {csv_file}", err=True)
        raise typer.Exit(code=1)
    except OSError as e:
        typer.echo(f"Error: could not read {csv_file}: {e}", err=True)
        raise typer.Exit(code=1)

    parsed = parse_sketchup_csv(text)
    for warning in parsed.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    if parsed.errors:
        for error in parsed.errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1)

    for row in parsed.sheet_goods_rows:
        if not row.valid:
            typer.echo(
                f"Skipping row {row.row_index + 1} ({row.designation or row.no}): "
                f"{'; '.join(row.errors)}",
                err=True,
            )

    specs = rows_to_part_specs(parsed.sheet_goods_rows, material_id=material)
    payload = {
        "schema_version": max(SUPPORTED_VERSIONS, key=lambda v: tuple(map(int, v.split(".")))),
        "parts": [_part_to_config(spec) for spec in specs],
    }
    text_out = json.dumps(payload, indent=2)

    if output_file is None:
        typer.echo(text_out)
    else:
        output_file.write_text(text_out, encoding="utf-8")
        typer.echo(f"Imported {len(specs)} parts to: {output_file}")
