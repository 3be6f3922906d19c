"""Per-identity workspace: router, dashboard, editor and results view.

Each signed-in identity owns one workspace holding its draft state. The
registry creates workspaces on first use and drops them when the session
manager reports a sign-out.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from fastapi import Depends, Request

from interview_studio.config.settings import settings
from interview_studio.middleware.error_handler import ConflictError
from interview_studio.schemas.interviews import SaveReport
from interview_studio.schemas.workspace import WorkspaceState
from interview_studio.services.dashboard import Dashboard
from interview_studio.services.editor import InterviewEditor
from interview_studio.services.results import ResultsView
from interview_studio.services.router import ViewRouter
from interview_studio.services.session import (
    Identity,
    SessionEvent,
    SessionManager,
    get_current_identity,
)
from interview_studio.services.store import InterviewStore

logger = structlog.get_logger()


class Workspace:
    """Screen state of one identity."""

    def __init__(self, identity: Identity):
        self.identity = identity
        self.router = ViewRouter()
        self.dashboard = Dashboard(identity.email)
        self.editor: Optional[InterviewEditor] = None
        self.results: Optional[ResultsView] = None
        self.pending: Optional[str] = None
        self._lock = threading.Lock()

    @contextmanager
    def action(self, name: str) -> Iterator[None]:
        """Run one collaborator call; a second concurrent call is refused."""
        if not self._lock.acquire(blocking=False):
            logger.info("Action refused", email=self.identity.email, action=name, pending=self.pending)
            raise ConflictError(f"'{self.pending}' is still in progress", code="ACTION_PENDING")
        self.pending = name
        try:
            yield
        finally:
            self.pending = None
            self._lock.release()

    def open_interview(self, store: InterviewStore, interview_id: str) -> str:
        """Open an interview on the editor or on results, depending on its stats."""
        interview = store.get_with_tasks(interview_id, self.identity.email)
        if ViewRouter.destination(interview) == "results":
            results = ResultsView.load(store, interview)
            self.editor = None
            self.results = results
        else:
            self.editor = InterviewEditor(interview)
            self.results = None
        return self.router.open(interview)

    def create_interview(self, store: InterviewStore, title: Optional[str] = None) -> InterviewEditor:
        """Insert a new draft and open it. Nothing changes if the insert fails."""
        interview = store.insert_interview(self.identity.email, title or settings.DEFAULT_INTERVIEW_TITLE)
        self.editor = InterviewEditor(interview)
        self.results = None
        self.router.open_editor(interview)
        self.dashboard.loaded = False
        return self.editor

    def back(self) -> None:
        """Return to the dashboard, discarding unsaved editor state."""
        if self.editor is not None and self.editor.has_unsaved_changes:
            logger.info("Discarding unsaved changes", interview_id=self.editor.interview_id)
        self.router.back()
        self.editor = None
        self.results = None
        self.dashboard.loaded = False

    def require_editor(self) -> InterviewEditor:
        if self.router.view != "editor" or self.editor is None:
            raise ConflictError("No interview is open in the editor", code="WRONG_VIEW")
        return self.editor

    def require_results(self) -> ResultsView:
        if self.router.view != "results" or self.results is None:
            raise ConflictError("No interview results are open", code="WRONG_VIEW")
        return self.results

    def save_editor(self, store: InterviewStore, mode: str = "save") -> SaveReport:
        """Save, publish or close the open interview."""
        editor = self.require_editor()
        if mode == "publish":
            report = editor.publish(store)
        elif mode == "close":
            report = editor.close(store)
        else:
            report = editor.save(store)
        self.router.editing_interview = editor.draft
        self.dashboard.loaded = False
        return report

    def state(self) -> WorkspaceState:
        return WorkspaceState(
            view=self.router.view,
            editing_interview_id=self.router.editing_interview.id if self.router.editing_interview else None,
            viewing_results_id=self.router.viewing_results.id if self.router.viewing_results else None,
            pending=self.pending is not None,
        )


class WorkspaceRegistry:
    """Workspaces keyed by identity email."""

    def __init__(self):
        self._workspaces: dict[str, Workspace] = {}
        self._lock = threading.Lock()
        self._unsubscribe = None

    def attach(self, manager: SessionManager) -> None:
        self._unsubscribe = manager.subscribe(self.on_session_event)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        with self._lock:
            self._workspaces.clear()

    def on_session_event(self, event: SessionEvent) -> None:
        if not event.present:
            self.drop(event.identity.email)

    def get(self, identity: Identity) -> Workspace:
        with self._lock:
            workspace = self._workspaces.get(identity.email)
            if workspace is None:
                workspace = Workspace(identity)
                self._workspaces[identity.email] = workspace
                logger.debug("Workspace created", email=identity.email)
            return workspace

    def drop(self, email: str) -> None:
        with self._lock:
            if self._workspaces.pop(email, None) is not None:
                logger.info("Workspace dropped", email=email)

    def __contains__(self, email: str) -> bool:
        return email in self._workspaces


def get_workspace(
    request: Request,
    identity: Identity = Depends(get_current_identity),
) -> Workspace:
    """Dependency returning the caller's workspace."""
    return request.app.state.workspaces.get(identity)
