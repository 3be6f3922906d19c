"""Pydantic schemas for interviews, tasks and criteria.

These models double as the in-memory draft representation used by the
editor, so they carry client-only fields (supporting files) that are never
written to the database.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

CriterionType = Literal["rating", "numeric", "boolean", "text"]
CriterionScope = Literal["general", "task"]
AIBehavior = Literal["passive", "neutral", "active", "very_active"]
InterviewStatus = Literal["draft", "live", "closed"]


class Criterion(CamelModel):
    """One evaluation dimension."""

    id: str
    name: str
    description: Optional[str] = None
    type: CriterionType = "rating"
    scope: CriterionScope


class CriterionCreate(CamelModel):
    """Schema for adding a criterion (scope comes from the route)."""

    name: str = ""
    description: Optional[str] = None
    type: CriterionType = "rating"


class CriterionUpdate(CamelModel):
    """Schema for editing a criterion. Scope is not editable."""

    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[CriterionType] = None


class SupportingFile(CamelModel):
    name: str
    url: str


class TaskRequirements(CamelModel):
    """Media the candidate must provide during a task."""

    audio: bool = False
    screen_share: bool = False
    webcam: bool = False
    file_upload: bool = False


class Task(CamelModel):
    """One ordered section of an interview."""

    id: str
    interview_id: str
    title: str = ""
    prompt: str = ""
    ai_behavior: AIBehavior = "neutral"
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    requirements: TaskRequirements = Field(default_factory=TaskRequirements)
    order: int = 0
    supporting_files: list[SupportingFile] = []
    criteria: list[Criterion] = []


class TaskCreate(CamelModel):
    """Schema for creating a task without a template."""

    title: str = "Untitled Task"
    prompt: str = ""
    ai_behavior: AIBehavior = "neutral"
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    requirements: TaskRequirements = Field(default_factory=TaskRequirements)
    supporting_files: list[SupportingFile] = []


class TaskUpdate(CamelModel):
    """Schema for editing a task (all fields optional)."""

    title: Optional[str] = None
    prompt: Optional[str] = None
    ai_behavior: Optional[AIBehavior] = None
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    requirements: Optional[TaskRequirements] = None
    supporting_files: Optional[list[SupportingFile]] = None
    criteria: Optional[list[Criterion]] = None


class Stats(CamelModel):
    invited: int = 0
    completed: int = 0
    graded: int = 0


class Interview(CamelModel):
    """Full interview with its ordered tasks."""

    id: str
    title: str
    status: InterviewStatus = "draft"
    owner_email: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    general_criteria: list[Criterion] = []
    tasks: list[Task] = []
    stats: Optional[Stats] = None
    invite_token: Optional[str] = None


class InterviewListItem(CamelModel):
    """Schema for interview in the dashboard list."""

    id: str
    title: str
    status: InterviewStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    task_count: int = 0
    stats: Optional[Stats] = None


class InterviewCreate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)


class InterviewDetailsUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)


class CriterionSeed(CamelModel):
    """Criterion suggested by a task template."""

    name: str
    description: Optional[str] = None
    type: CriterionType = "rating"


class TaskTemplate(CamelModel):
    """Fixed starting point for a new task."""

    id: str
    name: str
    description: str
    default_prompt: str
    default_behavior: AIBehavior
    default_duration: Optional[int] = None
    default_requirements: TaskRequirements
    suggested_criteria: list[CriterionSeed] = []


class TemplateSelection(CamelModel):
    template_id: str


class MoveTaskRequest(CamelModel):
    from_index: int = Field(ge=0)
    to_index: int = Field(ge=0)


class ReorderTasksRequest(CamelModel):
    task_ids: list[str]


class SaveReport(CamelModel):
    """What the last save sent to the database."""

    deleted_task_ids: list[str] = []
    upserted_count: int = 0
    saved_at: datetime


class EditorState(CamelModel):
    """Snapshot of the interview editor."""

    interview: Interview
    selected_task_id: Optional[str] = None
    has_unsaved_changes: bool = False
    total_criteria: int = 0
    last_save: Optional[SaveReport] = None


class PublishResponse(CamelModel):
    editor: EditorState
    invite_link: str


class InviteRequest(CamelModel):
    """Email addresses separated by commas or new lines."""

    emails: str = Field(min_length=1)


class InvitationResult(CamelModel):
    email: str
    status: Literal["sent", "queued", "failed"]
    message_id: Optional[str] = None
    error: Optional[str] = None


class InviteResponse(CamelModel):
    invite_link: str
    results: list[InvitationResult] = []


class InviteLinkResponse(CamelModel):
    interview_title: str
    invite_link: str
