"""Results screen: performance overview, candidate table and candidate detail.

The view works on a snapshot of the interview's candidate results. Score
edits are staged per candidate and only reach the database on save.
"""

import csv
import io
from typing import Any, Optional

import structlog

from interview_studio.middleware.error_handler import NotFoundError, ValidationAPIError
from interview_studio.models.base import utcnow
from interview_studio.schemas.interviews import Interview
from interview_studio.schemas.results import (
    CandidateDetail,
    CandidateNote,
    CandidateResult,
    CandidateTable,
    CriteriaColumn,
    CriterionAverage,
    PerformanceData,
    PerformanceOverview,
    ResultsHeader,
    SortState,
)
from interview_studio.services.store import InterviewStore

logger = structlog.get_logger()

# Sortable fixed columns (API key -> attribute)
FIXED_SORT_KEYS = {
    "name": "name",
    "email": "email",
    "completedAt": "completed_at",
    "overallScore": "overall_score",
}

HIGH_PERFORMER_THRESHOLD = 4.0


def is_numeric(value: Any) -> bool:
    """Numbers only; booleans are not scores to average."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def overall_score(scores: list) -> Optional[float]:
    """Mean of the numeric scores, or None if there are none."""
    numeric = [s.score for s in scores if is_numeric(s.score)]
    if not numeric:
        return None
    return sum(numeric) / len(numeric)


def format_score(value: Any) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if is_numeric(value):
        return f"{value:.1f}"
    return str(value)


def build_criteria_columns(interview: Interview) -> list[CriteriaColumn]:
    """General criteria first, then each task's criteria tagged with its title."""
    columns = [
        CriteriaColumn(id=c.id, name=c.name, type=c.type, scope="general")
        for c in interview.general_criteria
    ]
    for task in sorted(interview.tasks, key=lambda t: t.order):
        columns.extend(
            CriteriaColumn(id=c.id, name=c.name, type=c.type, scope="task", task_name=task.title)
            for c in task.criteria
        )
    return columns


def score_for(candidate: CandidateResult, criterion_id: str) -> Any:
    for score in candidate.scores:
        if score.criterion_id == criterion_id:
            return score.score
    return None


def numeric_or_zero(value: Any) -> float:
    return value if is_numeric(value) else 0


def performance_overview(data: PerformanceData) -> PerformanceOverview:
    """
    Summary statistics for the overview tab.

    Missing overall scores count as 0 in the average. Per-criterion averages
    count non-numeric or missing scores as 0 and are rounded to one decimal.
    """
    candidates = data.candidates
    total = len(candidates)

    average = sum(numeric_or_zero(c.overall_score) for c in candidates) / total if total else 0.0

    top_performer = None
    for candidate in candidates:
        if top_performer is None or numeric_or_zero(candidate.overall_score) > numeric_or_zero(
            top_performer.overall_score
        ):
            top_performer = candidate

    averages = []
    for column in data.criteria_columns:
        values = [numeric_or_zero(score_for(c, column.id)) for c in candidates]
        mean = sum(values) / len(values) if values else 0.0
        averages.append(CriterionAverage(**column.model_dump(), average=round(mean, 1)))

    # max/min return the first extreme on ties
    strongest = max(averages, key=lambda a: a.average) if averages else None
    weakest = min(averages, key=lambda a: a.average) if averages else None

    return PerformanceOverview(
        total_candidates=total,
        average_overall_score=average,
        top_performer=top_performer,
        criterion_averages=averages,
        strongest_area=strongest,
        weakest_area=weakest,
        high_performer_count=sum(
            1 for c in candidates if numeric_or_zero(c.overall_score) >= HIGH_PERFORMER_THRESHOLD
        ),
    )


def next_sort(current: SortState, key: str) -> SortState:
    """asc -> desc -> unsorted on the same column; a new column starts at asc."""
    if current.key == key:
        if current.direction == "asc":
            return SortState(key=key, direction="desc")
        if current.direction == "desc":
            return SortState()
    return SortState(key=key, direction="asc")


def search_candidates(candidates: list[CandidateResult], search: str) -> list[CandidateResult]:
    needle = search.lower()
    if not needle:
        return list(candidates)
    return [c for c in candidates if needle in c.name.lower() or needle in c.email.lower()]


def sort_candidates(candidates: list[CandidateResult], sort: SortState) -> list[CandidateResult]:
    if not sort.key or not sort.direction:
        return list(candidates)

    attribute = FIXED_SORT_KEYS.get(sort.key)

    def sort_value(candidate: CandidateResult) -> Any:
        if attribute == "overall_score":
            return numeric_or_zero(candidate.overall_score)
        if attribute is not None:
            return getattr(candidate, attribute)
        return numeric_or_zero(score_for(candidate, sort.key))

    # sorted() is stable in both directions, so ties keep filtered order
    return sorted(candidates, key=sort_value, reverse=sort.direction == "desc")


class ResultsView:
    """Read view over one interview's candidate results."""

    def __init__(self, interview: Interview, candidates: list[CandidateResult]):
        self.interview = interview
        self.data = PerformanceData(
            candidates=candidates,
            criteria_columns=build_criteria_columns(interview),
        )
        self.sort = SortState()
        self.pending_scores: dict[str, dict[str, float]] = {}

    @classmethod
    def load(cls, store: InterviewStore, interview: Interview) -> "ResultsView":
        return cls(interview, store.list_results(interview.id))

    @property
    def interview_id(self) -> str:
        return self.interview.id

    def header(self) -> ResultsHeader:
        return ResultsHeader(
            interview_id=self.interview.id,
            interview_title=self.interview.title,
            status=self.interview.status,
            candidate_count=len(self.data.candidates),
        )

    def overview(self) -> PerformanceOverview:
        return performance_overview(self.data)

    # Table

    def toggle_sort(self, key: str) -> SortState:
        column_ids = {column.id for column in self.data.criteria_columns}
        if key not in FIXED_SORT_KEYS and key not in column_ids:
            raise ValidationAPIError(f"Unknown sort column: {key}", field="key")
        self.sort = next_sort(self.sort, key)
        return self.sort

    def rows(self, search: str = "") -> list[CandidateResult]:
        """Filtered then sorted candidates."""
        return sort_candidates(search_candidates(self.data.candidates, search), self.sort)

    def table_view(self, search: str = "") -> CandidateTable:
        rows = self.rows(search)
        empty_state = None
        if not self.data.candidates:
            empty_state = "no_candidates"
        elif not rows:
            empty_state = "no_matches"
        return CandidateTable(
            search=search,
            sort=self.sort,
            criteria_columns=self.data.criteria_columns,
            rows=rows,
            empty_state=empty_state,
        )

    def export_csv(self, search: str = "") -> str:
        """The table as CSV, in the order currently shown."""
        columns = self.data.criteria_columns
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(
            ["Name", "Email", "Completed At", "Overall Score"] + [column.name for column in columns]
        )
        for candidate in self.rows(search):
            writer.writerow(
                [
                    candidate.name,
                    candidate.email,
                    candidate.completed_at.isoformat(),
                    format_score(candidate.overall_score),
                ]
                + [format_score(score_for(candidate, column.id)) for column in columns]
            )
        return buffer.getvalue()

    # Candidate detail

    def candidate(self, candidate_id: str) -> CandidateResult:
        for candidate in self.data.candidates:
            if candidate.id == candidate_id:
                return candidate
        raise NotFoundError("Candidate", candidate_id)

    def _replace(self, updated: CandidateResult) -> None:
        self.data.candidates = [updated if c.id == updated.id else c for c in self.data.candidates]

    def open_candidate(self, candidate_id: str) -> CandidateDetail:
        candidate = self.candidate(candidate_id)
        pending = self.pending_scores.get(candidate_id, {})
        return CandidateDetail(
            candidate=candidate,
            pending_scores=pending,
            has_unsaved_changes=bool(pending),
        )

    def stage_scores(self, candidate_id: str, edits: dict[str, float]) -> CandidateDetail:
        """Hold numeric score edits for a candidate until saved."""
        candidate = self.candidate(candidate_id)
        current = {score.criterion_id: score.score for score in candidate.scores}
        for criterion_id in edits:
            if criterion_id not in current:
                raise ValidationAPIError(f"Candidate has no score for {criterion_id}", field="scores")
            if not is_numeric(current[criterion_id]):
                raise ValidationAPIError(f"Score for {criterion_id} is not numeric", field="scores")

        self.pending_scores[candidate_id] = {**self.pending_scores.get(candidate_id, {}), **edits}
        return self.open_candidate(candidate_id)

    def discard_scores(self, candidate_id: str) -> CandidateDetail:
        self.candidate(candidate_id)
        self.pending_scores.pop(candidate_id, None)
        return self.open_candidate(candidate_id)

    def save_scores(self, store: InterviewStore, candidate_id: str) -> CandidateDetail:
        """Apply staged edits, recompute the overall score and persist."""
        candidate = self.candidate(candidate_id)
        pending = self.pending_scores.get(candidate_id)
        if not pending:
            return self.open_candidate(candidate_id)

        scores = [
            score.model_copy(update={"score": pending[score.criterion_id]})
            if score.criterion_id in pending
            else score
            for score in candidate.scores
        ]
        updated = store.update_scores(candidate_id, scores, overall_score(scores))

        self._replace(updated)
        self.pending_scores.pop(candidate_id, None)
        logger.info("Candidate scores saved", candidate_id=candidate_id, edited=sorted(pending))
        return self.open_candidate(candidate_id)

    def add_note(
        self,
        store: InterviewStore,
        candidate_id: str,
        column: str,
        content: str,
        author: str,
    ) -> CandidateDetail:
        """Append a reviewer note tagged to one of the candidate's criteria."""
        candidate = self.candidate(candidate_id)
        if column not in {score.criterion_name for score in candidate.scores}:
            raise ValidationAPIError(f"Unknown criterion: {column}", field="column")
        if not content.strip():
            raise ValidationAPIError("Note cannot be empty", field="content")

        note = CandidateNote(author=author, column=column, content=content.strip(), created_at=utcnow())
        self._replace(store.add_note(candidate_id, note))
        return self.open_candidate(candidate_id)
