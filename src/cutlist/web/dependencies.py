"""FastAPI dependency injection for cutlist services."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from cutlist.application.commands import OptimizeCutlistCommand
from cutlist.infrastructure import CutDiagramRenderer


@lru_cache(maxsize=1)
def get_optimize_command() -> OptimizeCutlistCommand:
    """Get the shared OptimizeCutlistCommand (it keeps no state between runs)."""
    return OptimizeCutlistCommand()


def get_renderer() -> CutDiagramRenderer:
    """Dependency for CutDiagramRenderer."""
    return CutDiagramRenderer()


# Type aliases for cleaner endpoint signatures
OptimizeCommandDep = Annotated[OptimizeCutlistCommand, Depends(get_optimize_command)]
RendererDep = Annotated[CutDiagramRenderer, Depends(get_renderer)]
