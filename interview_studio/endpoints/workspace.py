"""Workspace endpoints: dashboard listing and navigation between screens."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from interview_studio.config.database import get_db
from interview_studio.schemas.interviews import EditorState, InterviewCreate
from interview_studio.schemas.workspace import DashboardResponse, WorkspaceState
from interview_studio.services.store import InterviewStore
from interview_studio.services.workspace import Workspace, get_workspace

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=WorkspaceState)
async def get_state(workspace: Workspace = Depends(get_workspace)):
    """Which screen is active and what it is bound to."""
    return workspace.state()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    search: str = Query("", description="Case-insensitive title filter"),
    refresh: bool = Query(False),
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    """List the caller's interviews, fetching them on first view or on refresh."""
    if refresh or not workspace.dashboard.loaded:
        with workspace.action("load interviews"):
            workspace.dashboard.load(InterviewStore(db))
    return workspace.dashboard.to_response(search)


@router.post("/interviews", response_model=EditorState, status_code=201)
async def create_interview(
    data: Optional[InterviewCreate] = None,
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    """Create a draft interview and open it in the editor."""
    with workspace.action("create interview"):
        editor = workspace.create_interview(InterviewStore(db), data.title if data else None)
    return editor.state()


@router.post("/interviews/{interview_id}/open", response_model=WorkspaceState)
async def open_interview(
    interview_id: str,
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    """Open an interview: results if anyone completed it, otherwise the editor."""
    with workspace.action("open interview"):
        workspace.open_interview(InterviewStore(db), interview_id)
    return workspace.state()


@router.post("/back", response_model=WorkspaceState)
async def back_to_dashboard(workspace: Workspace = Depends(get_workspace)):
    workspace.back()
    return workspace.state()
