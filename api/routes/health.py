"""
Health check endpoints.

Provides endpoints for monitoring and load balancer health checks.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from core.logging import get_logger


logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """
    Basic health check.
    
    Returns 200 if the service is running.
    """
    return {
        "status": "healthy",
        "service": "wiki-core",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness check.
    
    Returns 200 once the document has been loaded, 503 before that.
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None or not orchestrator.is_initialized:
        return JSONResponse(status_code=503, content={"status": "starting"})
    
    state = orchestrator.state
    return {
        "status": "ready",
        "storage": orchestrator.store.location,
        "counts": {
            "users": len(state.users),
            "pages": len(state.pages),
            "sessions": orchestrator.sessions.active_count,
        },
    }
