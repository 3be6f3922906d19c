"""Pydantic schemas for API request/response validation.

All schemas use CamelCase for JSON field names (via alias_generator).
"""

from .base import CamelModel, ErrorResponse
from .interviews import (
    Criterion,
    CriterionCreate,
    CriterionUpdate,
    SupportingFile,
    TaskRequirements,
    Task,
    TaskCreate,
    TaskUpdate,
    Stats,
    Interview,
    InterviewListItem,
    InterviewCreate,
    InterviewDetailsUpdate,
    TaskTemplate,
    TemplateSelection,
    MoveTaskRequest,
    ReorderTasksRequest,
    SaveReport,
    EditorState,
    PublishResponse,
    InviteRequest,
    InvitationResult,
    InviteResponse,
    InviteLinkResponse,
)
from .results import (
    CandidateScore,
    CandidateNote,
    CandidateResult,
    CriteriaColumn,
    CriterionAverage,
    PerformanceData,
    PerformanceOverview,
    SortState,
    CandidateTable,
    ScoreEdits,
    CandidateDetail,
    NoteCreate,
    ResultsHeader,
)
from .workspace import WorkspaceState, DashboardResponse

__all__ = [
    # Base
    "CamelModel",
    "ErrorResponse",
    # Interviews
    "Criterion",
    "CriterionCreate",
    "CriterionUpdate",
    "SupportingFile",
    "TaskRequirements",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "Stats",
    "Interview",
    "InterviewListItem",
    "InterviewCreate",
    "InterviewDetailsUpdate",
    "TaskTemplate",
    "TemplateSelection",
    "MoveTaskRequest",
    "ReorderTasksRequest",
    "SaveReport",
    "EditorState",
    "PublishResponse",
    "InviteRequest",
    "InvitationResult",
    "InviteResponse",
    "InviteLinkResponse",
    # Results
    "CandidateScore",
    "CandidateNote",
    "CandidateResult",
    "CriteriaColumn",
    "CriterionAverage",
    "PerformanceData",
    "PerformanceOverview",
    "SortState",
    "CandidateTable",
    "ScoreEdits",
    "CandidateDetail",
    "NoteCreate",
    "ResultsHeader",
    # Workspace
    "WorkspaceState",
    "DashboardResponse",
]
