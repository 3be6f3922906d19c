"""Tests for view routing, the dashboard and per-identity workspaces."""

from datetime import datetime

import pytest

from interview_studio.middleware.error_handler import ConflictError, RecordFetchError, RecordWriteError
from interview_studio.schemas.interviews import Interview, Stats
from interview_studio.services.dashboard import Dashboard
from interview_studio.services.router import ViewRouter
from interview_studio.services.session import Identity, SessionManager
from interview_studio.services.workspace import Workspace, WorkspaceRegistry


def interview(title, completed=0, **extra):
    return Interview(
        id=title.lower().replace(" ", "-"),
        title=title,
        owner_email="jordan.lee@acme.com",
        created_at=datetime(2024, 1, 15),
        stats=Stats(invited=completed, completed=completed, graded=completed),
        **extra,
    )


class StubStore:
    def __init__(self, interviews=(), fail=None):
        self.interviews = list(interviews)
        self.fail = fail

    def list_by_owner(self, owner_email):
        if self.fail == "fetch":
            raise RecordFetchError("interviews", "connection reset")
        return list(self.interviews)

    def insert_interview(self, owner_email, title):
        if self.fail == "write":
            raise RecordWriteError("interview", "create", "read-only database")
        return interview(title)


def test_completed_interview_opens_results():
    router = ViewRouter()
    view = router.open(interview("Summer Interns", completed=32))

    assert view == "results"
    assert router.viewing_results.title == "Summer Interns"
    assert router.editing_interview is None


def test_uncompleted_interview_opens_editor():
    router = ViewRouter()
    view = router.open(interview("Full-Time August"))

    assert view == "editor"
    assert router.editing_interview.title == "Full-Time August"
    assert router.viewing_results is None


def test_interview_without_stats_opens_editor():
    assert ViewRouter.destination(interview("Fresh").model_copy(update={"stats": None})) == "editor"


def test_back_clears_bindings():
    router = ViewRouter()
    router.open(interview("Summer Interns", completed=1))
    router.back()

    assert router.view == "dashboard"
    assert router.editing_interview is None
    assert router.viewing_results is None


def test_dashboard_search_is_case_insensitive():
    dashboard = Dashboard("jordan.lee@acme.com")
    dashboard.load(StubStore([interview("Summer 2025 Interns"), interview("Fall Co-Op Program")]))

    assert [i.title for i in dashboard.filter("summer")] == ["Summer 2025 Interns"]
    assert [i.title for i in dashboard.filter("CO-OP")] == ["Fall Co-Op Program"]
    assert len(dashboard.filter("")) == 2


def test_dashboard_empty_states():
    dashboard = Dashboard("jordan.lee@acme.com")
    dashboard.load(StubStore())
    assert dashboard.empty_state() == "no_interviews"
    assert dashboard.empty_state("anything") == "no_interviews"

    dashboard.load(StubStore([interview("Summer Interns")]))
    assert dashboard.empty_state("winter") == "no_matches"
    assert dashboard.empty_state("summer") is None


def test_dashboard_reports_nothing_while_fetching():
    dashboard = Dashboard("jordan.lee@acme.com")
    dashboard.is_fetching = True
    assert dashboard.empty_state() is None


def test_dashboard_keeps_list_when_fetch_fails():
    dashboard = Dashboard("jordan.lee@acme.com")
    dashboard.load(StubStore([interview("Summer Interns")]))

    with pytest.raises(RecordFetchError):
        dashboard.load(StubStore(fail="fetch"))

    assert dashboard.is_fetching is False
    assert [i.title for i in dashboard.interviews] == ["Summer Interns"]


def test_dashboard_response_counts_tasks():
    dashboard = Dashboard("jordan.lee@acme.com")
    dashboard.load(StubStore([
        interview("Summer Interns", tasks=[{"id": "t1", "interview_id": "summer-interns"}]),
    ]))
    response = dashboard.to_response()

    assert response.total == 1
    assert response.interviews[0].task_count == 1
    assert response.empty_state is None


def test_create_interview_opens_editor(identity):
    workspace = Workspace(identity)
    editor = workspace.create_interview(StubStore())

    assert workspace.router.view == "editor"
    assert editor.draft.title == "New Interview"
    assert workspace.state().editing_interview_id == editor.interview_id


def test_failed_create_stays_on_dashboard(identity):
    workspace = Workspace(identity)

    with pytest.raises(RecordWriteError):
        workspace.create_interview(StubStore(fail="write"))

    assert workspace.router.view == "dashboard"
    assert workspace.editor is None


def test_back_discards_editor(identity):
    workspace = Workspace(identity)
    workspace.create_interview(StubStore()).add_task(title="Unsaved")

    workspace.back()

    assert workspace.editor is None
    assert workspace.state().view == "dashboard"


def test_wrong_view_is_a_conflict(identity):
    workspace = Workspace(identity)

    with pytest.raises(ConflictError) as exc:
        workspace.require_editor()
    assert exc.value.code == "WRONG_VIEW"

    with pytest.raises(ConflictError):
        workspace.require_results()


def test_second_action_while_pending_is_refused(identity):
    workspace = Workspace(identity)

    with workspace.action("save"):
        assert workspace.state().pending is True
        with pytest.raises(ConflictError) as exc:
            with workspace.action("publish"):
                pass
        assert exc.value.code == "ACTION_PENDING"

    assert workspace.state().pending is False
    with workspace.action("publish"):
        pass


def test_action_releases_after_failure(identity):
    workspace = Workspace(identity)

    with pytest.raises(RecordWriteError):
        with workspace.action("create interview"):
            workspace.create_interview(StubStore(fail="write"))

    with workspace.action("create interview"):
        workspace.create_interview(StubStore())


def test_registry_gives_one_workspace_per_identity(identity):
    registry = WorkspaceRegistry()
    first = registry.get(identity)

    assert registry.get(Identity.from_email("JORDAN.LEE@acme.com")) is first
    assert registry.get(Identity.from_email("sam@acme.com")) is not first


def test_registry_drops_workspace_on_sign_out(identity):
    manager = SessionManager()
    manager.init()
    registry = WorkspaceRegistry()
    registry.attach(manager)
    registry.get(identity)

    manager.sign_out_everywhere(identity)

    assert identity.email not in registry

    registry.detach()
    registry.get(identity)
    manager.sign_out_everywhere(identity)
    assert identity.email in registry


def test_dashboard_search_is_not_trimmed():
    dashboard = Dashboard("jordan.lee@acme.com")
    dashboard.load(StubStore([interview("Summer Interns"), interview("Analysts")]))

    assert [i.title for i in dashboard.filter(" ")] == ["Summer Interns"]
    assert dashboard.empty_state("analysts ") == "no_matches"
