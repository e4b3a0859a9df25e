"""FastAPI REST API for cutlist optimization.

This module provides a REST API for optimizing cutlists, validating
configurations and re-billing stored layouts.

Usage:
    uvicorn cutlist.web:app --reload
"""

from cutlist.web.app import app, create_app

__all__ = ["app", "create_app"]
