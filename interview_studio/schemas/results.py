"""Pydantic schemas for candidate results."""

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import Field

from .base import CamelModel
from .interviews import CriterionScope, CriterionType

# Order matters: bool before int so True is not read as 1
ScoreValue = Union[bool, int, float, str]


class CandidateScore(CamelModel):
    criterion_id: str
    criterion_name: str
    score: ScoreValue
    max_score: Optional[float] = None


class CandidateNote(CamelModel):
    author: str
    column: str
    content: str
    created_at: datetime


class CandidateResult(CamelModel):
    """One candidate's graded attempt."""

    id: str
    name: str
    email: str
    completed_at: datetime
    scores: list[CandidateScore] = []
    notes: list[CandidateNote] = []
    overall_score: Optional[float] = None
    summary: Optional[str] = None


class CriteriaColumn(CamelModel):
    id: str
    name: str
    type: CriterionType
    scope: CriterionScope
    task_name: Optional[str] = None


class PerformanceData(CamelModel):
    """Candidates plus the union of general and task criteria columns."""

    candidates: list[CandidateResult] = []
    criteria_columns: list[CriteriaColumn] = []


class CriterionAverage(CriteriaColumn):
    average: float


class PerformanceOverview(CamelModel):
    total_candidates: int
    average_overall_score: float
    top_performer: Optional[CandidateResult] = None
    criterion_averages: list[CriterionAverage] = []
    strongest_area: Optional[CriterionAverage] = None
    weakest_area: Optional[CriterionAverage] = None
    high_performer_count: int = 0


class SortState(CamelModel):
    key: Optional[str] = None
    direction: Optional[Literal["asc", "desc"]] = None


class CandidateTable(CamelModel):
    search: str = ""
    sort: SortState
    criteria_columns: list[CriteriaColumn] = []
    rows: list[CandidateResult] = []
    empty_state: Optional[Literal["no_candidates", "no_matches"]] = None


class ScoreEdits(CamelModel):
    """Staged numeric score edits keyed by criterion id."""

    scores: dict[str, float] = Field(default_factory=dict)


class CandidateDetail(CamelModel):
    candidate: CandidateResult
    pending_scores: dict[str, float] = {}
    has_unsaved_changes: bool = False


class NoteCreate(CamelModel):
    column: str = Field(min_length=1)
    content: str = Field(min_length=1)


class ResultsHeader(CamelModel):
    interview_id: str
    interview_title: str
    status: str
    candidate_count: int
