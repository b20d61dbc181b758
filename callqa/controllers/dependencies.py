"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from callqa.config.settings import settings
from callqa.pipelines.analysis import AnalysisOrchestrator, create_orchestrator


async def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    """Return the process-wide orchestrator, building it on first use.

    A missing or malformed credential raises ``ConfigurationError`` here,
    before the upload is processed or any network call is attempted.
    """

    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        orchestrator = create_orchestrator(settings)
        request.app.state.orchestrator = orchestrator
    return orchestrator


OrchestratorDep = Annotated[AnalysisOrchestrator, Depends(get_orchestrator)]


__all__ = ["get_orchestrator", "OrchestratorDep"]
