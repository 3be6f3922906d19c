"""In-memory interview editor and its save protocol.

The editor holds a full draft copy of one interview plus the last task list
known to be persisted (the baseline). Mutations touch only the draft; the
database is written on ``save`` (and ``publish`` / ``close``, which are saves
with a forced status).
"""

from typing import Any, Optional

import structlog

from interview_studio.middleware.error_handler import NotFoundError, ValidationAPIError
from interview_studio.models.base import utcnow
from interview_studio.schemas.interviews import (
    Criterion,
    CriterionScope,
    EditorState,
    Interview,
    InterviewStatus,
    SaveReport,
    Task,
)
from interview_studio.services.store import (
    InterviewStore,
    is_temporary_id,
    new_criterion_id,
    new_temporary_id,
    row_to_task,
    task_to_row,
)
from interview_studio.services.templates import get_template

logger = structlog.get_logger()

# Allowed status changes on save (forward only)
STATUS_TRANSITIONS: dict[str, set[str]] = {
    "draft": {"draft", "live"},
    "live": {"live", "closed"},
    "closed": {"closed"},
}


def renumber(tasks: list[Task]) -> list[Task]:
    """Return the tasks with ``order`` reset to 0..n-1 in list order."""
    return [task.model_copy(update={"order": index}) for index, task in enumerate(tasks)]


def move_item(items: list, from_index: int, to_index: int) -> list:
    """Remove the item at ``from_index`` and reinsert it at ``to_index``."""
    if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
        raise ValidationAPIError(
            f"Move from {from_index} to {to_index} is out of range",
            field="index",
        )
    moved = list(items)
    if from_index != to_index:
        item = moved.pop(from_index)
        moved.insert(to_index, item)
    return moved


def merge_persisted_tasks(draft_tasks: list[Task], rows: list[dict[str, Any]]) -> list[Task]:
    """
    Match returned upsert rows back to draft tasks.

    Known tasks are matched by id, new ones by the echoed ``client_ref``.
    Persisted columns win; client-only fields come from the draft. Draft
    tasks with no returned row are dropped.
    """
    by_id = {row["id"]: row for row in rows}
    by_ref = {row["client_ref"]: row for row in rows if row.get("client_ref")}

    merged = []
    for task in draft_tasks:
        row = None if is_temporary_id(task.id) else by_id.get(task.id)
        if row is None:
            row = by_ref.get(task.id)
        if row is None:
            logger.warning("Task missing from save response", task_id=task.id)
            continue
        merged.append(row_to_task(row, task.supporting_files))
    return merged


class InterviewEditor:
    """Draft state of one interview being edited."""

    def __init__(self, interview: Interview):
        self.draft = interview.model_copy(deep=True)
        self.draft.tasks = renumber(sorted(self.draft.tasks, key=lambda t: t.order))
        self.baseline: list[Task] = [task.model_copy(deep=True) for task in self.draft.tasks]
        self.selected_task_id: Optional[str] = self.draft.tasks[0].id if self.draft.tasks else None
        self.has_unsaved_changes = False
        self.last_save: Optional[SaveReport] = None

    @property
    def interview_id(self) -> str:
        return self.draft.id

    @property
    def total_criteria(self) -> int:
        return len(self.draft.general_criteria) + sum(len(t.criteria) for t in self.draft.tasks)

    def _touch(self) -> None:
        self.has_unsaved_changes = True

    def _task_index(self, task_id: str) -> int:
        for index, task in enumerate(self.draft.tasks):
            if task.id == task_id:
                return index
        raise NotFoundError("Task", task_id)

    def get_task(self, task_id: str) -> Task:
        return self.draft.tasks[self._task_index(task_id)]

    # Details

    def update_details(self, title: Optional[str] = None) -> None:
        if title is None:
            return
        if not title.strip():
            raise ValidationAPIError("Title cannot be empty", field="title")
        self.draft.title = title
        self._touch()

    # Tasks

    def _append_task(self, task: Task) -> Task:
        task = task.model_copy(update={"order": len(self.draft.tasks)})
        self.draft.tasks = self.draft.tasks + [task]
        self.selected_task_id = task.id
        self._touch()
        return task

    def add_task_from_template(self, template_id: str) -> Task:
        """Append a task built from a catalogue template and select it."""
        template = get_template(template_id)
        task = Task(
            id=new_temporary_id(),
            interview_id=self.draft.id,
            title=template.name,
            prompt=template.default_prompt,
            ai_behavior=template.default_behavior,
            duration_minutes=template.default_duration,
            requirements=template.default_requirements.model_copy(),
            criteria=[
                Criterion(
                    id=new_criterion_id(),
                    name=seed.name,
                    description=seed.description,
                    type=seed.type,
                    scope="task",
                )
                for seed in template.suggested_criteria
            ],
        )
        logger.debug("Task added from template", interview_id=self.draft.id, template_id=template_id)
        return self._append_task(task)

    def add_task(self, **fields: Any) -> Task:
        task = Task(id=new_temporary_id(), interview_id=self.draft.id, **fields)
        return self._append_task(task)

    def update_task(self, task_id: str, changes: dict[str, Any]) -> Task:
        """Apply field changes to one task. ``id`` and ``order`` are fixed."""
        index = self._task_index(task_id)
        current = self.draft.tasks[index]
        changes = {k: v for k, v in changes.items() if k not in ("id", "interview_id", "order")}
        if changes.get("criteria") is not None:
            changes["criteria"] = [
                {**Criterion.model_validate(c).model_dump(), "scope": "task"}
                for c in changes["criteria"]
            ]
        updated = Task.model_validate({**current.model_dump(), **changes})

        tasks = list(self.draft.tasks)
        tasks[index] = updated
        self.draft.tasks = tasks
        self._touch()
        return updated

    def delete_task(self, task_id: str) -> None:
        index = self._task_index(task_id)
        remaining = self.draft.tasks[:index] + self.draft.tasks[index + 1:]
        self.draft.tasks = renumber(remaining)
        if self.selected_task_id == task_id:
            self.selected_task_id = remaining[0].id if remaining else None
        self._touch()

    def move_task(self, from_index: int, to_index: int) -> None:
        """Drag-and-drop: move one task to a new position."""
        if from_index == to_index and 0 <= from_index < len(self.draft.tasks):
            return
        self.draft.tasks = renumber(move_item(self.draft.tasks, from_index, to_index))
        self._touch()

    def reorder_tasks(self, task_ids: list[str]) -> None:
        current = {task.id: task for task in self.draft.tasks}
        if sorted(task_ids) != sorted(current):
            raise ValidationAPIError("Task order must list every task exactly once", field="taskIds")
        self.draft.tasks = renumber([current[task_id] for task_id in task_ids])
        self._touch()

    def select_task(self, task_id: Optional[str]) -> None:
        if task_id is not None:
            self._task_index(task_id)
        self.selected_task_id = task_id

    # Criteria

    def set_general_criteria(self, criteria: list[Criterion]) -> None:
        self.draft.general_criteria = [c.model_copy(update={"scope": "general"}) for c in criteria]
        self._touch()

    def add_criterion(
        self,
        scope: CriterionScope,
        task_id: Optional[str] = None,
        name: str = "",
        description: Optional[str] = None,
        type: str = "rating",
    ) -> Criterion:
        criterion = Criterion(
            id=new_criterion_id(),
            name=name,
            description=description,
            type=type,
            scope=scope,
        )
        if scope == "general":
            self.draft.general_criteria = self.draft.general_criteria + [criterion]
        else:
            if task_id is None:
                raise ValidationAPIError("Task criteria need a task", field="taskId")
            index = self._task_index(task_id)
            task = self.draft.tasks[index]
            tasks = list(self.draft.tasks)
            tasks[index] = task.model_copy(update={"criteria": task.criteria + [criterion]})
            self.draft.tasks = tasks
        self._touch()
        return criterion

    def _locate_criterion(self, criterion_id: str) -> tuple[Optional[int], int]:
        """(task index or None for general, criterion index)."""
        for index, criterion in enumerate(self.draft.general_criteria):
            if criterion.id == criterion_id:
                return None, index
        for task_index, task in enumerate(self.draft.tasks):
            for index, criterion in enumerate(task.criteria):
                if criterion.id == criterion_id:
                    return task_index, index
        raise NotFoundError("Criterion", criterion_id)

    def _replace_criteria(self, task_index: Optional[int], criteria: list[Criterion]) -> None:
        if task_index is None:
            self.draft.general_criteria = criteria
            return
        tasks = list(self.draft.tasks)
        tasks[task_index] = tasks[task_index].model_copy(update={"criteria": criteria})
        self.draft.tasks = tasks

    def update_criterion(self, criterion_id: str, changes: dict[str, Any]) -> Criterion:
        task_index, index = self._locate_criterion(criterion_id)
        owner = self.draft.general_criteria if task_index is None else self.draft.tasks[task_index].criteria
        changes = {k: v for k, v in changes.items() if k not in ("id", "scope")}
        updated = Criterion.model_validate({**owner[index].model_dump(), **changes})

        criteria = list(owner)
        criteria[index] = updated
        self._replace_criteria(task_index, criteria)
        self._touch()
        return updated

    def remove_criterion(self, criterion_id: str) -> None:
        task_index, index = self._locate_criterion(criterion_id)
        owner = self.draft.general_criteria if task_index is None else self.draft.tasks[task_index].criteria
        self._replace_criteria(task_index, owner[:index] + owner[index + 1:])
        self._touch()

    # Persistence

    def save(self, store: InterviewStore, status: Optional[InterviewStatus] = None) -> SaveReport:
        """
        Write the draft to the database and reconcile ids.

        Any store failure propagates with the in-memory draft, baseline and
        selection untouched.
        """
        draft = self.draft
        target_status = status or draft.status
        if target_status not in STATUS_TRANSITIONS[draft.status]:
            raise ValidationAPIError(
                f"Cannot change status from {draft.status} to {target_status}",
                field="status",
            )

        saved = store.update_interview(draft.id, {
            "title": draft.title,
            "status": target_status,
            "general_criteria": [c.model_dump() for c in draft.general_criteria],
        })

        draft_ids = {task.id for task in draft.tasks}
        deleted_ids = [
            task.id for task in self.baseline
            if task.id not in draft_ids and not is_temporary_id(task.id)
        ]
        store.delete_tasks(deleted_ids)

        rows = [task_to_row(task) for task in draft.tasks]
        returned = store.upsert_tasks(draft.id, rows) if rows else []
        merged = renumber(merge_persisted_tasks(draft.tasks, returned))

        # Carry the selection over to the persisted id
        id_map = {}
        for task in draft.tasks:
            for row in returned:
                if row.get("client_ref") == task.id:
                    id_map[task.id] = row["id"]
        selected = id_map.get(self.selected_task_id, self.selected_task_id)
        if selected not in {task.id for task in merged}:
            selected = merged[0].id if merged else None

        self.draft = draft.model_copy(update={
            "status": target_status,
            "updated_at": saved.updated_at,
            "tasks": merged,
        })
        self.baseline = [task.model_copy(deep=True) for task in merged]
        self.selected_task_id = selected
        self.has_unsaved_changes = False
        self.last_save = SaveReport(
            deleted_task_ids=deleted_ids,
            upserted_count=len(returned),
            saved_at=saved.updated_at or utcnow(),
        )

        logger.info(
            "Interview saved",
            interview_id=draft.id,
            status=target_status,
            deleted=len(deleted_ids),
            upserted=len(returned),
        )
        return self.last_save

    def publish(self, store: InterviewStore) -> SaveReport:
        if not self.draft.tasks:
            raise ValidationAPIError("Add at least one task before publishing", field="tasks")
        return self.save(store, status="live")

    def close(self, store: InterviewStore) -> SaveReport:
        if self.draft.status != "live":
            raise ValidationAPIError("Only live interviews can be closed", field="status")
        return self.save(store, status="closed")

    def state(self) -> EditorState:
        return EditorState(
            interview=self.draft,
            selected_task_id=self.selected_task_id,
            has_unsaved_changes=self.has_unsaved_changes,
            total_criteria=self.total_criteria,
            last_save=self.last_save,
        )
