"""Output format handling for the cutlist CLI.

Renders a LayoutResult in one of the supported formats and writes it to
stdout or a file.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

import typer

from cutlist.domain import BillingPolicy, LayoutResult
from cutlist.infrastructure import CutDiagramRenderer, dump_snapshot

__all__ = [
    "OutputFormat",
    "emit",
    "render_result",
]


class OutputFormat(str, Enum):
    """Output formats accepted by ``--format``."""

    TEXT = "text"
    ASCII = "ascii"
    SVG = "svg"
    JSON = "json"


def render_result(
    result: LayoutResult,
    output_format: OutputFormat,
    policy: BillingPolicy | None = None,
) -> str:
    """Render a result in the requested format.

    Args:
        result: The optimization result.
        output_format: Requested output format.
        policy: Billing policy to embed in JSON snapshots.

    Returns:
        Rendered output as text.
    """
    renderer = CutDiagramRenderer()
    if output_format == OutputFormat.ASCII:
        return renderer.render_all_ascii(result)
    if output_format == OutputFormat.SVG:
        return renderer.render_combined_svg(result)
    if output_format == OutputFormat.JSON:
        return json.dumps(dump_snapshot(result, policy), indent=2)
    return renderer.render_summary(result)


def emit(text: str, output_file: Path | None) -> None:
    """Write rendered output to a file, or echo it when no file is given."""
    if output_file is None:
        typer.echo(text)
        return
    try:
        output_file.write_text(text, encoding="utf-8")
    except OSError as e:
        typer.echo(f"Error: could not write {output_file}: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Output written to: {output_file}")
