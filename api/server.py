"""
FastAPI application entry point.

Sets up the application with:
- Lifespan management (startup/shutdown)
- Route registration
- Middleware configuration
- Error handling
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import auth_router, health_router, pages_router
from core.config import Settings, get_settings
from core.errors import InvalidInputError, WikiError
from core.logging import configure_logging, get_logger
from manager.orchestrator import WikiOrchestrator


logger = get_logger(__name__)


def create_app(
    orchestrator: Optional[WikiOrchestrator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Application factory.
    
    Args:
        orchestrator: Pre-built orchestrator (tests); built from settings otherwise
        settings: Application settings (default get_settings())
    """
    settings = settings or (orchestrator.settings if orchestrator else get_settings())
    
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Startup: load the document (fatal on failure) and publish the
        orchestrator on app.state. Shutdown: close the store.
        """
        configure_logging(settings)
        logger.info("Starting wiki service...", storage_backend=settings.storage_backend)
        
        instance = orchestrator or WikiOrchestrator(settings=settings)
        await instance.initialize()
        app.state.orchestrator = instance
        
        logger.info(
            "Wiki service started",
            host=settings.server_host,
            port=settings.server_port,
            storage=instance.store.location,
        )
        
        yield
        
        logger.info("Shutting down wiki service...")
        await instance.shutdown()
        app.state.orchestrator = None
        logger.info("Wiki service stopped")
    
    app = FastAPI(
        title="Wiki Page Store",
        description=(
            "Hierarchical documentation pages with token sessions.\n\n"
            "Queries are public; page mutations need an EDITOR or ADMIN session."
        ),
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(pages_router)
    
    @app.exception_handler(WikiError)
    async def wiki_error_handler(request: Request, exc: WikiError):
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            "Request failed",
            path=request.url.path,
            method=request.method,
            code=exc.code,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())
    
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        error = InvalidInputError(
            first.get("msg", "Invalid request"),
            field=location or None,
        )
        return JSONResponse(status_code=error.http_status, content=error.to_response())
    
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc) if settings.debug else "An error occurred",
                    "category": "internal",
                }
            },
        )
    
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    
    settings = get_settings()
    uvicorn.run(
        "api.server:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
