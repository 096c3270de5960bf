"""
FastAPI dependencies for dependency injection.

The orchestrator lives on app.state, set during the app lifespan, and is
handed to route handlers through get_orchestrator.
"""

from fastapi import Request

from manager.orchestrator import WikiOrchestrator


async def get_orchestrator(request: Request) -> WikiOrchestrator:
    """
    Dependency that provides the orchestrator.
    
    Usage:
        @router.get("/pages")
        async def list_pages(
            orchestrator: WikiOrchestrator = Depends(get_orchestrator)
        ):
            ...
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None or not orchestrator.is_initialized:
        raise RuntimeError("Orchestrator not initialized")
    return orchestrator
