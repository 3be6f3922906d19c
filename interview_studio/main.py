"""
Interview Studio API - FastAPI Application

Main entry point for the API server.
Run with: uvicorn interview_studio.main:app --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interview_studio.config.settings import settings
from interview_studio.config.database import init_db
from interview_studio.endpoints import api_router
from interview_studio.middleware.auth import AuthMiddleware
from interview_studio.middleware.error_handler import setup_exception_handlers
from interview_studio.middleware.logging import LoggingMiddleware, configure_logging
from interview_studio.services.session import SessionManager
from interview_studio.services.workspace import WorkspaceRegistry

# Configure structured logging
configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(
        "Starting Interview Studio API",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
    )

    init_db()

    session_manager = SessionManager(settings)
    session_manager.init()
    workspaces = WorkspaceRegistry()
    workspaces.attach(session_manager)

    app.state.session_manager = session_manager
    app.state.workspaces = workspaces

    yield

    logger.info("Shutting down Interview Studio API")
    workspaces.detach()
    session_manager.teardown()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Authoring and results review for AI-led candidate interviews",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

setup_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(AuthMiddleware)

# Added last, so it wraps auth and logs rejected requests too
app.add_middleware(LoggingMiddleware)

app.include_router(api_router, prefix="/api/v1")


# Root health endpoint (for ALB)
@app.get("/health")
async def root_health():
    """Simple health check for load balancer."""
    return {"status": "ok", "version": settings.APP_VERSION}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs" if settings.DEBUG else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "interview_studio.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
