"""Import of SketchUp cutlist CSV exports.

SketchUp cutlist extensions export one row per part with semicolon
separated columns, dimensions suffixed with ``mm`` and, depending on locale,
comma decimals. Only "Sheet Goods" rows are panels; edge banding rows are
ignored when sheet goods are present.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field

from cutlist.domain.value_objects import BandEdges, Grain, PartSpec

logger = logging.getLogger(__name__)

COLUMN_MAP: dict[str, str] = {
    "no.": "no",
    "no": "no",
    "designation": "designation",
    "quantity": "quantity",
    "length": "length",
    "length - raw": "length",
    "width": "width",
    "width - raw": "width",
    "thickness": "thickness",
    "thickness - raw": "thickness",
    "material type": "material_type",
    "material name": "material_name",
    "edge length 1": "edge_length_1",
    "edge length 2": "edge_length_2",
    "edge width 1": "edge_width_1",
    "edge width 2": "edge_width_2",
    "tags": "tags",
}

REQUIRED_COLUMNS = ("length", "width", "quantity")
SHEET_GOODS = "sheet goods"

_MM_SUFFIX = re.compile(r"\s*mm\s*", re.IGNORECASE)
_SPACES = re.compile(r"[\s\u00a0\u2009]")


@dataclass
class CsvRow:
    """One parsed data row with its validation messages."""

    row_index: int
    no: str = ""
    designation: str = ""
    quantity: int = 1
    length_mm: float = 0.0
    width_mm: float = 0.0
    thickness_mm: float = 0.0
    material_type: str = ""
    material_name: str = ""
    edge_length_1: str = ""
    edge_length_2: str = ""
    edge_width_1: str = ""
    edge_width_2: str = ""
    tags: str = ""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def band_edges(self) -> BandEdges:
        return BandEdges(
            top=bool(self.edge_length_1.strip()),
            bottom=bool(self.edge_length_2.strip()),
            right=bool(self.edge_width_1.strip()),
            left=bool(self.edge_width_2.strip()),
        )


@dataclass
class CsvImportResult:
    """Result of parsing a CSV export.

    Attributes:
        rows: Every parsed data row.
        sheet_goods_rows: Rows to import (all rows if none are sheet goods).
        delimiter: Detected field delimiter.
        headers: Header row as read.
        errors: File-level errors (empty file, missing required columns).
        warnings: File-level warnings (unmapped columns, no sheet goods).
    """

    rows: list[CsvRow]
    sheet_goods_rows: list[CsvRow]
    delimiter: str
    headers: list[str]
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid_rows(self) -> list[CsvRow]:
        return [row for row in self.sheet_goods_rows if row.valid]


def detect_delimiter(first_line: str) -> str:
    """Prefer semicolon (SketchUp default) unless commas outnumber it."""
    return ";" if first_line.count(";") >= first_line.count(",") else ","


def parse_dimension(value: str) -> float:
    """Parse a dimension such as ``"600 mm"`` or ``"18,5"``.

    Returns 0.0 for empty, negative or unparseable values.
    """
    if not value:
        return 0.0
    cleaned = _MM_SUFFIX.sub("", value).strip()
    if "," in cleaned and "." not in cleaned:
        cleaned = cleaned.replace(",", ".", 1)
    cleaned = _SPACES.sub("", cleaned)
    try:
        parsed = float(cleaned)
    except ValueError:
        return 0.0
    return parsed if parsed >= 0 and parsed != float("inf") else 0.0


def _parse_quantity(value: str) -> int:
    match = re.match(r"\s*(-?\d+)", value or "")
    if not match:
        return 1
    return int(match.group(1)) or 1


def _validate_row(row: CsvRow) -> None:
    if row.length_mm <= 0:
        row.errors.append("Invalid or missing length")
    if row.width_mm <= 0:
        row.errors.append("Invalid or missing width")
    if row.quantity <= 0:
        row.errors.append("Invalid or missing quantity")
    if row.thickness_mm <= 0:
        row.warnings.append("No thickness specified")
    if not row.material_name.strip():
        row.warnings.append("No material name")
    if not row.designation.strip():
        row.warnings.append("No designation/name")


def parse_sketchup_csv(text: str) -> CsvImportResult:
    """Parse SketchUp cutlist CSV content.

    Args:
        text: Raw file content (BOM and any line endings allowed).

    Returns:
        CsvImportResult with parsed rows and file-level messages.
    """
    content = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
    lines = [line for line in content.split("\n") if line.strip()]
    if not lines:
        return CsvImportResult(
            rows=[], sheet_goods_rows=[], delimiter=";", headers=[], errors=["CSV file is empty"]
        )

    delimiter = detect_delimiter(lines[0])
    reader = csv.reader(io.StringIO("\n".join(lines)), delimiter=delimiter, quotechar='"')
    records = [[cell.strip() for cell in record] for record in reader]
    headers = records[0]

    mapping: dict[str, int] = {}
    unmapped: list[str] = []
    for index, header in enumerate(headers):
        key = COLUMN_MAP.get(header.lower().strip())
        if key is None:
            unmapped.append(header)
        elif key not in mapping:
            mapping[key] = index

    errors: list[str] = []
    warnings: list[str] = []
    missing = [col for col in REQUIRED_COLUMNS if col not in mapping]
    if missing:
        errors.append(f"Missing required columns: {', '.join(missing)}")
    if unmapped:
        warnings.append(f"Unmapped columns: {', '.join(unmapped)}")

    rows: list[CsvRow] = []
    for row_index, record in enumerate(records[1:]):

        def value(column: str) -> str:
            idx = mapping.get(column)
            return record[idx] if idx is not None and idx < len(record) else ""

        row = CsvRow(
            row_index=row_index,
            no=value("no"),
            designation=value("designation"),
            quantity=_parse_quantity(value("quantity")),
            length_mm=parse_dimension(value("length")),
            width_mm=parse_dimension(value("width")),
            thickness_mm=parse_dimension(value("thickness")),
            material_type=value("material_type"),
            material_name=value("material_name"),
            edge_length_1=value("edge_length_1"),
            edge_length_2=value("edge_length_2"),
            edge_width_1=value("edge_width_1"),
            edge_width_2=value("edge_width_2"),
            tags=value("tags"),
        )
        _validate_row(row)
        if not row.valid:
            logger.warning("CSV row %d skipped: %s", row_index + 1, "; ".join(row.errors))
        rows.append(row)

    sheet_goods = [
        row for row in rows if not row.material_type or row.material_type.lower() == SHEET_GOODS
    ]
    if rows and not sheet_goods:
        warnings.append('No "Sheet Goods" rows found. Using all rows.')
        sheet_goods = rows

    logger.info(
        "Parsed %d CSV rows (%d sheet goods) with delimiter %r",
        len(rows),
        len(sheet_goods),
        delimiter,
    )
    return CsvImportResult(
        rows=rows,
        sheet_goods_rows=sheet_goods,
        delimiter=delimiter,
        headers=headers,
        errors=errors,
        warnings=warnings,
    )


def _material_id(name: str) -> str | None:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    return slug or None


def rows_to_part_specs(
    rows: list[CsvRow],
    material_id: str | None = None,
) -> list[PartSpec]:
    """Convert valid CSV rows to part specs.

    Parts are grain-locked to their length. The material id is taken from
    ``material_id`` when given, otherwise derived from the row's material
    name.

    Args:
        rows: Parsed rows (invalid rows are skipped).
        material_id: Material id to assign to every part.

    Returns:
        PartSpecs with unique ids, in row order.
    """
    specs: list[PartSpec] = []
    used_ids: set[str] = set()

    for row in rows:
        if not row.valid:
            continue
        base_id = row.no or row.designation or f"row-{row.row_index + 1}"
        part_id = base_id
        suffix = 2
        while part_id in used_ids:
            part_id = f"{base_id}-{suffix}"
            suffix += 1
        used_ids.add(part_id)

        specs.append(
            PartSpec(
                id=part_id,
                length_mm=row.length_mm,
                width_mm=row.width_mm,
                qty=row.quantity,
                grain=Grain.LENGTH,
                band_edges=row.band_edges,
                material_id=material_id or _material_id(row.material_name),
                label=row.designation.strip() or None,
                thickness_mm=row.thickness_mm if row.thickness_mm > 0 else 16.0,
            )
        )
    return specs
