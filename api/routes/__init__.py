"""
API route modules.
"""

from api.routes.auth import router as auth_router
from api.routes.health import router as health_router
from api.routes.pages import router as pages_router

__all__ = ["auth_router", "health_router", "pages_router"]
