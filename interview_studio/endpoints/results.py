"""Results endpoints for the interview open on the results screen."""

import re

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from interview_studio.config.database import get_db
from interview_studio.schemas.results import (
    CandidateDetail,
    CandidateTable,
    NoteCreate,
    PerformanceOverview,
    ResultsHeader,
    ScoreEdits,
    SortState,
)
from interview_studio.services.store import InterviewStore
from interview_studio.services.workspace import Workspace, get_workspace

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=ResultsHeader)
async def get_results_header(workspace: Workspace = Depends(get_workspace)):
    return workspace.require_results().header()


@router.get("/overview", response_model=PerformanceOverview)
async def get_overview(workspace: Workspace = Depends(get_workspace)):
    """Aggregate performance across all candidates."""
    return workspace.require_results().overview()


@router.get("/table", response_model=CandidateTable)
async def get_table(
    search: str = Query("", description="Matches candidate name or email"),
    workspace: Workspace = Depends(get_workspace),
):
    return workspace.require_results().table_view(search)


@router.post("/sort/{key}", response_model=SortState)
async def toggle_sort(key: str, workspace: Workspace = Depends(get_workspace)):
    """Cycle the sort on a column: ascending, descending, unsorted."""
    return workspace.require_results().toggle_sort(key)


@router.get("/export")
async def export_csv(
    search: str = Query(""),
    workspace: Workspace = Depends(get_workspace),
) -> Response:
    """Download the candidate table as CSV."""
    results = workspace.require_results()
    slug = re.sub(r"[^a-z0-9]+", "-", results.interview.title.lower()).strip("-") or "interview"
    logger.info("Results exported", interview_id=results.interview_id, search=search)
    return Response(
        content=results.export_csv(search),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{slug}-results.csv"'},
    )


@router.get("/candidates/{candidate_id}", response_model=CandidateDetail)
async def get_candidate(candidate_id: str, workspace: Workspace = Depends(get_workspace)):
    return workspace.require_results().open_candidate(candidate_id)


@router.patch("/candidates/{candidate_id}", response_model=CandidateDetail)
async def stage_scores(
    candidate_id: str,
    data: ScoreEdits,
    workspace: Workspace = Depends(get_workspace),
):
    """Stage numeric score edits; nothing is written until saved."""
    return workspace.require_results().stage_scores(candidate_id, data.scores)


@router.delete("/candidates/{candidate_id}/scores/pending", response_model=CandidateDetail)
async def discard_scores(candidate_id: str, workspace: Workspace = Depends(get_workspace)):
    return workspace.require_results().discard_scores(candidate_id)


@router.post("/candidates/{candidate_id}/scores/save", response_model=CandidateDetail)
async def save_scores(
    candidate_id: str,
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    results = workspace.require_results()
    with workspace.action("save scores"):
        return results.save_scores(InterviewStore(db), candidate_id)


@router.post("/candidates/{candidate_id}/notes", response_model=CandidateDetail, status_code=201)
async def add_note(
    candidate_id: str,
    data: NoteCreate,
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    results = workspace.require_results()
    with workspace.action("add note"):
        return results.add_note(
            InterviewStore(db),
            candidate_id,
            column=data.column,
            content=data.content,
            author=workspace.identity.display_name,
        )
