"""API endpoints for Interview Studio."""

from fastapi import APIRouter

from interview_studio.schemas.base import ErrorResponse

from .auth import router as auth_router
from .health import router as health_router
from .templates import router as templates_router
from .workspace import router as workspace_router
from .editor import router as editor_router
from .results import router as results_router

# Error envelopes shared by every screen route
SCREEN_ERRORS = {
    401: {"model": ErrorResponse, "description": "No valid session"},
    404: {"model": ErrorResponse, "description": "Interview, task, criterion or candidate not found"},
    409: {"model": ErrorResponse, "description": "Wrong view or another action is still in progress"},
    422: {"model": ErrorResponse, "description": "Rejected edit"},
    503: {"model": ErrorResponse, "description": "Database read or write failed"},
}

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(templates_router, prefix="/task-templates", tags=["Task Templates"])
api_router.include_router(workspace_router, prefix="/workspace", tags=["Workspace"], responses=SCREEN_ERRORS)
api_router.include_router(editor_router, prefix="/editor", tags=["Editor"], responses=SCREEN_ERRORS)
api_router.include_router(results_router, prefix="/results", tags=["Results"], responses=SCREEN_ERRORS)

__all__ = ["api_router"]
