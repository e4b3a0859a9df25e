"""Domain exceptions for the cutlist engine.

All engine errors derive from ``CutlistError``, which is itself a
``ValueError`` so callers that already guard input validation with
``except ValueError`` keep working.
"""

from __future__ import annotations

from typing import Any


class CutlistError(ValueError):
    """Base class for cutlist engine errors."""


class InvalidDimension(CutlistError):
    """Raised when a part or stock entry has an unusable dimension.

    Non-positive or missing lengths/widths are rejected before packing and
    are never silently coerced.

    Attributes:
        subject: Identifier of the offending part or stock entry.
        field: Name of the invalid field (e.g. ``"length_mm"``).
        value: The rejected value.
    """

    def __init__(self, subject: str, field: str, value: Any, reason: str) -> None:
        self.subject = subject
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{subject}: {field} {reason} (got {value!r})")


class UnplaceablePart(CutlistError):
    """Raised when a part cannot fit the assigned stock in any allowed orientation."""

    def __init__(self, part_id: str, message: str) -> None:
        self.part_id = part_id
        super().__init__(message)


class DuplicatePartId(CutlistError):
    """Raised when two parts in one run share an id.

    Units, placements and banding are all keyed by part id, so ids must be
    unique across the requested parts and the backer parts derived from them.
    """

    def __init__(self, part_id: str) -> None:
        self.part_id = part_id
        super().__init__(f"Duplicate part id '{part_id}'")
