"""Interview editor endpoints.

Every route works on the interview currently open in the caller's
workspace. Mutations change the in-memory draft only; ``/save``,
``/publish`` and ``/close`` write it to the database.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from interview_studio.config.database import get_db
from interview_studio.middleware.error_handler import ValidationAPIError
from interview_studio.schemas.interviews import (
    Criterion,
    CriterionCreate,
    CriterionUpdate,
    EditorState,
    InterviewDetailsUpdate,
    InviteLinkResponse,
    InviteRequest,
    InviteResponse,
    MoveTaskRequest,
    PublishResponse,
    ReorderTasksRequest,
    TaskCreate,
    TaskUpdate,
    TemplateSelection,
)
from interview_studio.services.invitations import InvitationService, invite_link, parse_emails
from interview_studio.services.store import InterviewStore
from interview_studio.services.workspace import Workspace, get_workspace

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=EditorState)
async def get_editor(workspace: Workspace = Depends(get_workspace)):
    return workspace.require_editor().state()


@router.patch("", response_model=EditorState)
async def update_details(
    data: InterviewDetailsUpdate,
    workspace: Workspace = Depends(get_workspace),
):
    editor = workspace.require_editor()
    editor.update_details(**data.model_dump(exclude_unset=True))
    return editor.state()


# Tasks


@router.post("/tasks", response_model=EditorState, status_code=201)
async def add_task(data: TaskCreate, workspace: Workspace = Depends(get_workspace)):
    """Add a blank task at the end and select it."""
    editor = workspace.require_editor()
    editor.add_task(**data.model_dump())
    return editor.state()


@router.post("/tasks/from-template", response_model=EditorState, status_code=201)
async def add_task_from_template(
    data: TemplateSelection,
    workspace: Workspace = Depends(get_workspace),
):
    editor = workspace.require_editor()
    editor.add_task_from_template(data.template_id)
    return editor.state()


@router.post("/tasks/move", response_model=EditorState)
async def move_task(data: MoveTaskRequest, workspace: Workspace = Depends(get_workspace)):
    """Drag-and-drop reorder."""
    editor = workspace.require_editor()
    editor.move_task(data.from_index, data.to_index)
    return editor.state()


@router.put("/tasks/order", response_model=EditorState)
async def reorder_tasks(data: ReorderTasksRequest, workspace: Workspace = Depends(get_workspace)):
    editor = workspace.require_editor()
    editor.reorder_tasks(data.task_ids)
    return editor.state()


@router.patch("/tasks/{task_id}", response_model=EditorState)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    workspace: Workspace = Depends(get_workspace),
):
    editor = workspace.require_editor()
    editor.update_task(task_id, data.model_dump(exclude_unset=True))
    return editor.state()


@router.delete("/tasks/{task_id}", response_model=EditorState)
async def delete_task(task_id: str, workspace: Workspace = Depends(get_workspace)):
    editor = workspace.require_editor()
    editor.delete_task(task_id)
    return editor.state()


@router.post("/tasks/{task_id}/select", response_model=EditorState)
async def select_task(task_id: str, workspace: Workspace = Depends(get_workspace)):
    editor = workspace.require_editor()
    editor.select_task(task_id)
    return editor.state()


# Criteria


@router.put("/criteria/general", response_model=EditorState)
async def set_general_criteria(
    data: list[Criterion],
    workspace: Workspace = Depends(get_workspace),
):
    """Replace the whole general rubric."""
    editor = workspace.require_editor()
    editor.set_general_criteria(data)
    return editor.state()


@router.post("/criteria/general", response_model=EditorState, status_code=201)
async def add_general_criterion(
    data: CriterionCreate,
    workspace: Workspace = Depends(get_workspace),
):
    editor = workspace.require_editor()
    editor.add_criterion("general", **data.model_dump())
    return editor.state()


@router.post("/tasks/{task_id}/criteria", response_model=EditorState, status_code=201)
async def add_task_criterion(
    task_id: str,
    data: CriterionCreate,
    workspace: Workspace = Depends(get_workspace),
):
    editor = workspace.require_editor()
    editor.add_criterion("task", task_id=task_id, **data.model_dump())
    return editor.state()


@router.patch("/criteria/{criterion_id}", response_model=EditorState)
async def update_criterion(
    criterion_id: str,
    data: CriterionUpdate,
    workspace: Workspace = Depends(get_workspace),
):
    editor = workspace.require_editor()
    editor.update_criterion(criterion_id, data.model_dump(exclude_unset=True))
    return editor.state()


@router.delete("/criteria/{criterion_id}", response_model=EditorState)
async def remove_criterion(criterion_id: str, workspace: Workspace = Depends(get_workspace)):
    editor = workspace.require_editor()
    editor.remove_criterion(criterion_id)
    return editor.state()


# Persistence


@router.post("/save", response_model=EditorState)
async def save_interview(
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    with workspace.action("save"):
        workspace.save_editor(InterviewStore(db))
    return workspace.require_editor().state()


@router.post("/publish", response_model=PublishResponse)
async def publish_interview(
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    """Save with status live and hand back the candidate link."""
    with workspace.action("publish"):
        workspace.save_editor(InterviewStore(db), mode="publish")
    editor = workspace.require_editor()
    logger.info("Interview published", interview_id=editor.interview_id)
    return PublishResponse(editor=editor.state(), invite_link=invite_link(editor.draft))


@router.post("/close", response_model=EditorState)
async def close_interview(
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    with workspace.action("close"):
        workspace.save_editor(InterviewStore(db), mode="close")
    editor = workspace.require_editor()
    logger.info("Interview closed", interview_id=editor.interview_id)
    return editor.state()


# Invitations


@router.get("/invite", response_model=InviteLinkResponse)
async def get_invite_link(workspace: Workspace = Depends(get_workspace)):
    draft = workspace.require_editor().draft
    if draft.status != "live":
        raise ValidationAPIError("Publish the interview to get an invite link", field="status")
    return InviteLinkResponse(interview_title=draft.title, invite_link=invite_link(draft))


@router.post("/invitations", response_model=InviteResponse)
async def send_invitations(
    data: InviteRequest,
    db: Session = Depends(get_db),
    workspace: Workspace = Depends(get_workspace),
):
    """Invite candidates by email to the open (live) interview."""
    editor = workspace.require_editor()
    emails = parse_emails(data.emails)
    with workspace.action("send invitations"):
        service = InvitationService.from_settings(InterviewStore(db))
        return await service.send(editor.draft, emails, workspace.identity)
