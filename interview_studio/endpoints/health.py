"""Health endpoints for the load balancer and uptime checks."""

from datetime import datetime, timezone
from typing import Literal, Optional

import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interview_studio.config.database import get_db
from interview_studio.config.settings import settings
from interview_studio.schemas.base import CamelModel

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(CamelModel):
    status: Literal["healthy", "unhealthy"]
    version: str
    timestamp: datetime
    database: Literal["connected", "disconnected"]
    sessions: Literal["running", "stopped"]
    email: Literal["ses", "disabled"]
    sso_key_configured: bool


class ReadinessResponse(CamelModel):
    ready: bool
    reason: Optional[str] = None


def check_database(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        return False
    return True


def sessions_running(request: Request) -> bool:
    manager = getattr(request.app.state, "session_manager", None)
    return bool(manager and manager.started)


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse)
async def health_check(request: Request, db: Session = Depends(get_db)) -> HealthResponse:
    database_ok = check_database(db)
    running = sessions_running(request)

    return HealthResponse(
        status="healthy" if database_ok and running else "unhealthy",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
        database="connected" if database_ok else "disconnected",
        sessions="running" if running else "stopped",
        email="ses" if settings.SES_ENABLED else "disabled",
        sso_key_configured=bool(settings.SSO_PUBLIC_KEY_PATH),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request, db: Session = Depends(get_db)) -> ReadinessResponse:
    """Ready once the database answers and sign-in sessions can be served."""
    if not check_database(db):
        return ReadinessResponse(ready=False, reason="Database not connected")
    if not sessions_running(request):
        return ReadinessResponse(ready=False, reason="Session manager not started")
    return ReadinessResponse(ready=True)


@router.get("/live")
async def liveness_check() -> dict:
    return {"alive": True}
