"""Application layer - use cases and orchestration."""

from .commands import CutlistRequest, OptimizeCutlistCommand, optimize_cutlist

__all__ = [
    "CutlistRequest",
    "OptimizeCutlistCommand",
    "optimize_cutlist",
]
