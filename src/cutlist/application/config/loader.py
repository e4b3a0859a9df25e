"""Configuration file loader with error reporting.

Loads JSON cutlist configurations and turns file system failures, JSON
syntax errors and pydantic validation errors into a single ``ConfigError``
type that the CLI and the web layer can report uniformly.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cutlist.application.config.schema import CutlistConfiguration


class ConfigError(Exception):
    """Exception raised for configuration-related errors.

    Attributes:
        message: The primary error message.
        error_type: Category of error (file_not_found, permission_denied,
            file_read_error, json_parse, validation).
        path: Path to the configuration file, if loaded from disk.
        details: Per-error details (JSON path and message, or line/column).
    """

    def __init__(
        self,
        message: str,
        error_type: str = "unknown",
        path: Path | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message
        self.error_type = error_type
        self.path = path
        self.details = details or []
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


def _format_json_path(loc: tuple[str | int, ...]) -> str:
    """Format a pydantic location tuple as a JSON path.

    Examples:
        >>> _format_json_path(("parts", 0, "length_mm"))
        'parts[0].length_mm'
        >>> _format_json_path(("billing", "overrides", "board:1", "mode"))
        'billing.overrides.board:1.mode'
    """
    segments: list[str] = []
    for segment in loc:
        if isinstance(segment, int) and segments:
            segments[-1] = f"{segments[-1]}[{segment}]"
        elif isinstance(segment, int):
            segments.append(f"[{segment}]")
        else:
            segments.append(str(segment))
    return ".".join(segments)


def validation_details(error: PydanticValidationError) -> list[dict[str, Any]]:
    """Flatten a pydantic ValidationError into path/message/value dicts."""
    return [
        {
            "path": _format_json_path(err["loc"]),
            "message": err["msg"],
            "value": err.get("input"),
            "error_type": err["type"],
        }
        for err in error.errors()
    ]


def _format_validation_message(details: list[dict[str, Any]]) -> str:
    lines = ["Configuration validation failed:"]
    for detail in details:
        value = detail.get("value")
        if value is not None and not isinstance(value, (dict, list)):
            lines.append(f"  - {detail['path']}: {detail['message']} (got: {value!r})")
        else:
            lines.append(f"  - {detail['path']}: {detail['message']}")
    return "\n".join(lines)


def load_config(path: Path) -> CutlistConfiguration:
    """Load and validate a cutlist configuration from a JSON file.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        A validated CutlistConfiguration.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated. The
            ``error_type`` attribute names the failure category.
    """
    if not path.exists():
        raise ConfigError(
            message=f"Config file not found: {path}",
            error_type="file_not_found",
            path=path,
        )

    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError:
        raise ConfigError(
            message=f"Permission denied reading config file: {path}",
            error_type="permission_denied",
            path=path,
        )
    except OSError as e:
        raise ConfigError(
            message=f"Error reading config file: {path}: {e}",
            error_type="file_read_error",
            path=path,
        )

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(
            message=(
                f"Invalid JSON in config file: {path} "
                f"(line {e.lineno}, column {e.colno}): {e.msg}"
            ),
            error_type="json_parse",
            path=path,
            details=[{"line": e.lineno, "column": e.colno, "message": e.msg}],
        )

    try:
        return CutlistConfiguration.model_validate(data)
    except PydanticValidationError as e:
        details = validation_details(e)
        raise ConfigError(
            message=_format_validation_message(details),
            error_type="validation",
            path=path,
            details=details,
        )


def load_config_from_dict(data: dict[str, Any]) -> CutlistConfiguration:
    """Load and validate a cutlist configuration from a dictionary.

    Used for configurations that arrive through the API rather than a file.

    Raises:
        ConfigError: If the data fails validation.
    """
    try:
        return CutlistConfiguration.model_validate(data)
    except PydanticValidationError as e:
        details = validation_details(e)
        raise ConfigError(
            message=_format_validation_message(details),
            error_type="validation",
            details=details,
        )
