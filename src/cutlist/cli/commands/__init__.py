"""CLI command implementations for the cutlist application.

This package contains subcommands for the cutlist CLI, including:
- validate: Validate a configuration file
- import-csv: Convert a SketchUp cutlist CSV export into parts
"""

from cutlist.cli.commands.import_csv import import_csv_command
from cutlist.cli.commands.validate import validate_command

__all__ = ["import_csv_command", "validate_command"]
