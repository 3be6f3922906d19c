"""Tests for the editor save protocol against the database."""

import pytest

from interview_studio.middleware.error_handler import RecordWriteError
from interview_studio.schemas.interviews import SupportingFile
from interview_studio.services.editor import InterviewEditor, merge_persisted_tasks
from interview_studio.services.store import is_temporary_id, task_to_row


@pytest.fixture
def editor(store, identity):
    interview = store.insert_interview(identity.email, "New Interview")
    return InterviewEditor(interview)


def reload(store, editor, identity):
    return store.get_with_tasks(editor.interview_id, identity.email)


def test_save_assigns_backend_ids(store, editor, identity):
    editor.add_task_from_template("behavioral")
    editor.add_task_from_template("merger-math")

    report = editor.save(store)

    assert report.deleted_task_ids == []
    assert report.upserted_count == 2
    assert editor.has_unsaved_changes is False
    assert not any(is_temporary_id(t.id) for t in editor.draft.tasks)
    assert [t.title for t in editor.draft.tasks] == ["Behavioral Questions", "Merger Math"]

    persisted = reload(store, editor, identity)
    assert [t.id for t in persisted.tasks] == [t.id for t in editor.draft.tasks]
    assert [t.order for t in persisted.tasks] == [0, 1]


def test_save_persists_requirements_and_criteria(store, editor, identity):
    editor.add_task_from_template("merger-math")
    editor.add_criterion("general", name="Communication")
    editor.update_details(title="Summer 2025 Junior Interns")
    editor.save(store)

    persisted = reload(store, editor, identity)
    task = persisted.tasks[0]
    assert persisted.title == "Summer 2025 Junior Interns"
    assert task.requirements.screen_share is True
    assert task.requirements.webcam is False
    assert task.duration_minutes == 25
    assert [c.name for c in task.criteria] == ["Calculation Accuracy", "Excel Proficiency"]
    assert [c.name for c in persisted.general_criteria] == ["Communication"]


def test_save_is_idempotent(store, editor):
    editor.add_task_from_template("behavioral")
    editor.add_task_from_template("accounting")
    editor.save(store)
    first = editor.draft.model_dump(exclude={"updated_at"})

    report = editor.save(store)

    assert report.deleted_task_ids == []
    assert report.upserted_count == 2
    assert editor.draft.model_dump(exclude={"updated_at"}) == first


def test_deleted_tasks_are_removed(store, editor, identity):
    editor.add_task(title="A")
    editor.add_task(title="B")
    editor.add_task(title="C")
    editor.save(store)
    doomed = editor.draft.tasks[1].id

    editor.delete_task(doomed)
    report = editor.save(store)

    assert report.deleted_task_ids == [doomed]
    persisted = reload(store, editor, identity)
    assert [t.title for t in persisted.tasks] == ["A", "C"]
    assert [t.order for t in persisted.tasks] == [0, 1]


def test_unsaved_deleted_task_is_not_sent_for_deletion(store, editor):
    temp = editor.add_task(title="Draft only")
    editor.delete_task(temp.id)

    report = editor.save(store)
    assert report.deleted_task_ids == []
    assert report.upserted_count == 0


def test_reorder_is_persisted(store, editor, identity):
    for title in ["A", "B", "C"]:
        editor.add_task(title=title)
    editor.save(store)

    editor.move_task(2, 0)
    editor.save(store)

    persisted = reload(store, editor, identity)
    assert [t.title for t in persisted.tasks] == ["C", "A", "B"]


def test_supporting_files_survive_save_in_memory_only(store, editor, identity):
    task = editor.add_task(title="Model review")
    editor.update_task(task.id, {
        "supporting_files": [{"name": "Financial Statements.xlsx", "url": "https://example.com/f.xlsx"}],
    })

    editor.save(store)

    assert editor.draft.tasks[0].supporting_files[0].name == "Financial Statements.xlsx"
    assert reload(store, editor, identity).tasks[0].supporting_files == []


def test_selection_follows_new_id(store, editor):
    editor.add_task(title="A")
    second = editor.add_task(title="B")
    assert editor.selected_task_id == second.id

    editor.save(store)

    assert editor.selected_task_id == editor.draft.tasks[1].id
    assert not is_temporary_id(editor.selected_task_id)


def test_publish_sets_live(store, editor, identity):
    editor.add_task_from_template("custom")
    editor.publish(store)

    assert editor.draft.status == "live"
    assert reload(store, editor, identity).status == "live"

    editor.close(store)
    assert reload(store, editor, identity).status == "closed"


class FailingUpsertStore:
    """Wraps a real store but fails the task upsert."""

    def __init__(self, store):
        self.store = store

    def update_interview(self, interview_id, values):
        return self.store.update_interview(interview_id, values)

    def delete_tasks(self, task_ids):
        return self.store.delete_tasks(task_ids)

    def upsert_tasks(self, interview_id, rows):
        raise RecordWriteError("tasks", "upsert", "disk full")


def test_failed_save_leaves_draft_untouched(store, editor):
    task = editor.add_task_from_template("behavioral")
    before = editor.draft.model_copy(deep=True)

    with pytest.raises(RecordWriteError):
        editor.save(FailingUpsertStore(store))

    assert editor.draft == before
    assert editor.selected_task_id == task.id
    assert editor.has_unsaved_changes is True
    assert editor.baseline == []
    assert editor.last_save is None


def test_merge_matches_new_tasks_by_correlation_id(editor):
    first = editor.add_task(title="First")
    second = editor.add_task(title="Second")
    editor.update_task(second.id, {
        "supporting_files": [SupportingFile(name="a.txt", url="https://example.com/a.txt").model_dump()],
    })
    rows = [task_to_row(t) for t in editor.draft.tasks]

    # Database returns rows in a different order than submitted
    returned = []
    for number, row in enumerate(reversed(rows)):
        returned.append({**row, "id": f"db-{number}", "interview_id": editor.interview_id})

    merged = merge_persisted_tasks(editor.draft.tasks, returned)

    assert [t.title for t in merged] == ["First", "Second"]
    assert merged[0].id == "db-1"
    assert merged[1].id == "db-0"
    assert merged[1].supporting_files[0].name == "a.txt"
    assert first.id != merged[0].id


def test_merge_drops_unmatched_tasks(editor):
    editor.add_task(title="Kept")
    editor.add_task(title="Lost")
    kept_row = {**task_to_row(editor.draft.tasks[0]), "id": "db-1", "interview_id": editor.interview_id}

    merged = merge_persisted_tasks(editor.draft.tasks, [kept_row])
    assert [t.title for t in merged] == ["Kept"]


def test_task_to_row_strips_client_fields(editor):
    task = editor.add_task(title="A")
    row = task_to_row(task)

    assert "id" not in row
    assert row["client_ref"] == task.id
    assert row["task_order"] == 0
    assert "supporting_files" not in row
    assert row["req_audio"] is False
