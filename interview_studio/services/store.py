"""Persistence adapter over the interview database.

Exposes the record operations the screens need (select by owner, select
with children, insert, update, upsert-many, delete-many) and translates
between database rows and the draft models. Every database failure is
logged here and re-raised as RecordFetchError / RecordWriteError.
"""

import json
import uuid
from typing import Any, Callable, Optional, TypeVar

import structlog
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from interview_studio.config.settings import settings
from interview_studio.middleware.error_handler import (
    NotFoundError,
    RecordFetchError,
    RecordWriteError,
)
from interview_studio.models import (
    CandidateNote as CandidateNoteModel,
    CandidateResult as CandidateResultModel,
    Interview as InterviewModel,
    Invitation as InvitationModel,
    Task as TaskModel,
)
from interview_studio.models.base import new_id, utcnow
from interview_studio.schemas.interviews import (
    Criterion,
    Interview,
    Stats,
    SupportingFile,
    Task,
    TaskRequirements,
)
from interview_studio.schemas.results import CandidateNote, CandidateResult, CandidateScore

logger = structlog.get_logger()

T = TypeVar("T")

# In-memory attribute -> column
REQUIREMENT_COLUMNS = {
    "audio": "req_audio",
    "screen_share": "req_screen_share",
    "webcam": "req_webcam",
    "file_upload": "req_file_upload",
}
ORDER_COLUMN = "task_order"

# Columns accepted from an upsert row
TASK_COLUMNS = (
    "title",
    "prompt",
    "ai_behavior",
    "duration_minutes",
    ORDER_COLUMN,
    "criteria",
    *REQUIREMENT_COLUMNS.values(),
)


def is_temporary_id(record_id: str) -> bool:
    """True for client ids of tasks that were never saved."""
    return record_id.startswith(settings.TEMP_ID_PREFIX)


def new_temporary_id() -> str:
    return f"{settings.TEMP_ID_PREFIX}{uuid.uuid4().hex}"


def new_criterion_id() -> str:
    return uuid.uuid4().hex


def task_to_row(task: Task) -> dict[str, Any]:
    """
    Build an upsert row from a draft task.

    Supporting files are client-only and left out. Temporary ids are
    stripped so the database assigns one; the draft id always travels as
    ``client_ref`` so the returned row can be matched back.
    """
    row = {
        "client_ref": task.id,
        "title": task.title,
        "prompt": task.prompt,
        "ai_behavior": task.ai_behavior,
        "duration_minutes": task.duration_minutes,
        ORDER_COLUMN: task.order,
        "criteria": [criterion.model_dump() for criterion in task.criteria],
    }
    for attribute, column in REQUIREMENT_COLUMNS.items():
        row[column] = getattr(task.requirements, attribute)
    if not is_temporary_id(task.id):
        row["id"] = task.id
    return row


def row_to_task(row: dict[str, Any], supporting_files: Optional[list[SupportingFile]] = None) -> Task:
    """Build a draft task from a persisted row plus its client-only fields."""
    return Task(
        id=row["id"],
        interview_id=row["interview_id"],
        title=row["title"],
        prompt=row["prompt"],
        ai_behavior=row["ai_behavior"],
        duration_minutes=row["duration_minutes"],
        requirements=TaskRequirements(**{
            attribute: bool(row[column]) for attribute, column in REQUIREMENT_COLUMNS.items()
        }),
        order=row[ORDER_COLUMN],
        supporting_files=list(supporting_files or []),
        criteria=[Criterion(**c) for c in row["criteria"]],
    )


def _task_row(task: TaskModel, client_ref: Optional[str] = None) -> dict[str, Any]:
    row = task.to_dict()
    row["criteria"] = json.loads(task.criteria or "[]")
    row["client_ref"] = client_ref
    return row


def _interview_from_model(
    interview: InterviewModel,
    stats: Optional[Stats] = None,
) -> Interview:
    return Interview(
        id=interview.id,
        title=interview.title,
        status=interview.status,
        owner_email=interview.owner_email,
        created_at=interview.created_at,
        updated_at=interview.updated_at,
        general_criteria=[Criterion(**c) for c in json.loads(interview.general_criteria or "[]")],
        tasks=[row_to_task(_task_row(t)) for t in sorted(interview.tasks, key=lambda t: t.task_order)],
        stats=stats,
        invite_token=interview.invite_token,
    )


def _result_from_model(result: CandidateResultModel) -> CandidateResult:
    return CandidateResult(
        id=result.id,
        name=result.name,
        email=result.email,
        completed_at=result.completed_at,
        scores=[CandidateScore(**s) for s in json.loads(result.scores or "[]")],
        notes=[
            CandidateNote(
                author=n.author,
                column=n.criterion_name,
                content=n.content,
                created_at=n.created_at,
            )
            for n in result.notes
        ],
        overall_score=result.overall_score,
        summary=result.summary,
    )


class InterviewStore:
    """Record operations on interviews, tasks, results and invitations."""

    def __init__(self, db: Session):
        self.db = db

    def _fetch(self, resource: str, query: Callable[[], T]) -> T:
        try:
            return query()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Record fetch failed", resource=resource, error=str(e))
            raise RecordFetchError(resource, str(e)) from e

    def _write(self, resource: str, operation: str, apply: Callable[[], T]) -> T:
        try:
            result = apply()
            self.db.commit()
            return result
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Record write failed",
                resource=resource,
                operation=operation,
                error=str(e),
            )
            raise RecordWriteError(resource, operation, str(e)) from e

    # Interviews

    def _stats_for(self, interview_ids: list[str]) -> dict[str, Stats]:
        if not interview_ids:
            return {}
        invited = dict(
            self.db.query(InvitationModel.interview_id, func.count(InvitationModel.id))
            .filter(InvitationModel.interview_id.in_(interview_ids))
            .group_by(InvitationModel.interview_id)
            .all()
        )
        completed = dict(
            self.db.query(CandidateResultModel.interview_id, func.count(CandidateResultModel.id))
            .filter(CandidateResultModel.interview_id.in_(interview_ids))
            .group_by(CandidateResultModel.interview_id)
            .all()
        )
        graded = dict(
            self.db.query(CandidateResultModel.interview_id, func.count(CandidateResultModel.id))
            .filter(
                CandidateResultModel.interview_id.in_(interview_ids),
                CandidateResultModel.overall_score.isnot(None),
            )
            .group_by(CandidateResultModel.interview_id)
            .all()
        )
        return {
            interview_id: Stats(
                invited=invited.get(interview_id, 0),
                completed=completed.get(interview_id, 0),
                graded=graded.get(interview_id, 0),
            )
            for interview_id in interview_ids
        }

    def list_by_owner(self, owner_email: str) -> list[Interview]:
        """All interviews owned by this identity, newest first."""

        def query() -> list[Interview]:
            interviews = (
                self.db.query(InterviewModel)
                .options(selectinload(InterviewModel.tasks))
                .filter(InterviewModel.owner_email == owner_email)
                .order_by(InterviewModel.created_at.desc())
                .all()
            )
            stats = self._stats_for([i.id for i in interviews])
            return [_interview_from_model(i, stats.get(i.id)) for i in interviews]

        return self._fetch("interviews", query)

    def get_with_tasks(self, interview_id: str, owner_email: str) -> Interview:
        """One interview joined with its tasks. Other owners see 404."""

        def query() -> Optional[Interview]:
            interview = (
                self.db.query(InterviewModel)
                .options(selectinload(InterviewModel.tasks))
                .filter(
                    InterviewModel.id == interview_id,
                    InterviewModel.owner_email == owner_email,
                )
                .first()
            )
            if interview is None:
                return None
            return _interview_from_model(interview, self._stats_for([interview.id])[interview.id])

        interview = self._fetch("interview", query)
        if interview is None:
            raise NotFoundError("Interview", interview_id)
        return interview

    def insert_interview(self, owner_email: str, title: str) -> Interview:
        def apply() -> InterviewModel:
            interview = InterviewModel(
                title=title,
                status="draft",
                owner_email=owner_email,
                general_criteria="[]",
            )
            self.db.add(interview)
            self.db.flush()
            return interview

        interview = self._write("interview", "create", apply)
        logger.info("Interview created", interview_id=interview.id, owner=owner_email)
        return _interview_from_model(interview, Stats())

    def update_interview(self, interview_id: str, values: dict[str, Any]) -> Interview:
        """Write scalar interview fields (title, status, general_criteria)."""

        def apply() -> Optional[InterviewModel]:
            interview = self.db.query(InterviewModel).filter(InterviewModel.id == interview_id).first()
            if interview is None:
                return None
            for key, value in values.items():
                if key == "general_criteria":
                    value = json.dumps(value)
                setattr(interview, key, value)
            interview.updated_at = utcnow()
            self.db.flush()
            return interview

        interview = self._write("interview", "update", apply)
        if interview is None:
            raise NotFoundError("Interview", interview_id)
        logger.info("Interview updated", interview_id=interview_id, fields=sorted(values))
        return _interview_from_model(interview)

    # Tasks

    def upsert_tasks(self, interview_id: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Insert-or-update task rows by id in one transaction.

        Rows without an ``id`` are inserted and get a new one. Every returned
        row echoes the ``client_ref`` it was submitted with.
        """

        def apply() -> list[tuple[Optional[str], TaskModel]]:
            existing = {
                task.id: task
                for task in self.db.query(TaskModel).filter(TaskModel.interview_id == interview_id).all()
            }
            persisted = []
            for row in rows:
                task = existing.get(row.get("id"))
                if task is None:
                    task = TaskModel(id=row.get("id") or new_id(), interview_id=interview_id)
                    self.db.add(task)
                for column in TASK_COLUMNS:
                    if column not in row:
                        continue
                    value = row[column]
                    if column == "criteria":
                        value = json.dumps(value)
                    setattr(task, column, value)
                persisted.append((row.get("client_ref"), task))
            self.db.flush()
            return persisted

        persisted = self._write("tasks", "upsert", apply)
        logger.info("Tasks upserted", interview_id=interview_id, count=len(persisted))
        return [_task_row(task, client_ref) for client_ref, task in persisted]

    def delete_tasks(self, task_ids: list[str]) -> int:
        if not task_ids:
            return 0

        def apply() -> int:
            return (
                self.db.query(TaskModel)
                .filter(TaskModel.id.in_(task_ids))
                .delete(synchronize_session=False)
            )

        deleted = self._write("tasks", "delete", apply)
        logger.info("Tasks deleted", task_ids=task_ids, count=deleted)
        return deleted

    # Candidate results

    def list_results(self, interview_id: str) -> list[CandidateResult]:
        def query() -> list[CandidateResult]:
            results = (
                self.db.query(CandidateResultModel)
                .options(selectinload(CandidateResultModel.notes))
                .filter(CandidateResultModel.interview_id == interview_id)
                .order_by(CandidateResultModel.completed_at, CandidateResultModel.id)
                .all()
            )
            return [_result_from_model(r) for r in results]

        return self._fetch("candidate results", query)

    def insert_result(self, interview_id: str, result: CandidateResult) -> CandidateResult:
        """Record a graded attempt (grading service ingestion and seeding)."""

        def apply() -> CandidateResultModel:
            model = CandidateResultModel(
                id=result.id or new_id(),
                interview_id=interview_id,
                name=result.name,
                email=result.email,
                completed_at=result.completed_at,
                scores=json.dumps([s.model_dump() for s in result.scores]),
                overall_score=result.overall_score,
                summary=result.summary,
            )
            for note in result.notes:
                model.notes.append(CandidateNoteModel(
                    author=note.author,
                    criterion_name=note.column,
                    content=note.content,
                    created_at=note.created_at,
                ))
            self.db.add(model)
            self.db.flush()
            return model

        return _result_from_model(self._write("candidate result", "create", apply))

    def _get_result_model(self, candidate_id: str) -> CandidateResultModel:
        result = self._fetch(
            "candidate result",
            lambda: self.db.query(CandidateResultModel).filter(CandidateResultModel.id == candidate_id).first(),
        )
        if result is None:
            raise NotFoundError("Candidate", candidate_id)
        return result

    def update_scores(
        self,
        candidate_id: str,
        scores: list[CandidateScore],
        overall_score: Optional[float],
    ) -> CandidateResult:
        result = self._get_result_model(candidate_id)

        def apply() -> CandidateResultModel:
            result.scores = json.dumps([s.model_dump() for s in scores])
            result.overall_score = overall_score
            self.db.flush()
            return result

        updated = self._write("candidate scores", "update", apply)
        logger.info("Candidate scores updated", candidate_id=candidate_id, overall=overall_score)
        return _result_from_model(updated)

    def add_note(self, candidate_id: str, note: CandidateNote) -> CandidateResult:
        result = self._get_result_model(candidate_id)

        def apply() -> CandidateResultModel:
            result.notes.append(CandidateNoteModel(
                author=note.author,
                criterion_name=note.column,
                content=note.content,
                created_at=note.created_at,
            ))
            self.db.flush()
            return result

        updated = self._write("candidate note", "create", apply)
        logger.info("Candidate note added", candidate_id=candidate_id, column=note.column)
        return _result_from_model(updated)

    # Invitations

    def add_invitation(self, interview_id: str, email: str) -> int:
        def apply() -> int:
            invitation = InvitationModel(interview_id=interview_id, email=email)
            self.db.add(invitation)
            self.db.flush()
            return invitation.id

        return self._write("invitation", "create", apply)

    def mark_invitation_sent(self, invitation_id: int, message_id: str) -> None:
        def apply() -> None:
            self.db.query(InvitationModel).filter(InvitationModel.id == invitation_id).update({
                "sent_at": utcnow(),
                "message_id": message_id,
            })

        self._write("invitation", "update", apply)
