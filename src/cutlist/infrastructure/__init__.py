"""Infrastructure layer - rendering, import and persistence."""

from .csv_import import CsvImportResult, CsvRow, parse_sketchup_csv, rows_to_part_specs
from .cut_diagram_renderer import CutDiagramRenderer
from .snapshot import dump_snapshot, legacy_band_totals, load_snapshot, migrate_legacy_banding

__all__ = [
    "CsvImportResult",
    "CsvRow",
    "CutDiagramRenderer",
    "dump_snapshot",
    "legacy_band_totals",
    "load_snapshot",
    "migrate_legacy_banding",
    "parse_sketchup_csv",
    "rows_to_part_specs",
]
