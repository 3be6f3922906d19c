"""Which screen a workspace is showing and what it is bound to."""

from typing import Optional

import structlog

from interview_studio.schemas.interviews import Interview
from interview_studio.schemas.workspace import View

logger = structlog.get_logger()


class ViewRouter:
    """
    Dashboard / editor / results navigation.

    On the editor exactly ``editing_interview`` is set, on results exactly
    ``viewing_results``; the dashboard has neither.
    """

    def __init__(self):
        self.view: View = "dashboard"
        self.editing_interview: Optional[Interview] = None
        self.viewing_results: Optional[Interview] = None

    @staticmethod
    def destination(interview: Interview) -> View:
        """Interviews with completed attempts open on results, others in the editor."""
        completed = interview.stats.completed if interview.stats else 0
        return "results" if completed > 0 else "editor"

    def open(self, interview: Interview) -> View:
        view = self.destination(interview)
        if view == "results":
            self.view = "results"
            self.editing_interview = None
            self.viewing_results = interview
        else:
            self.open_editor(interview)
        logger.debug("View opened", view=view, interview_id=interview.id)
        return view

    def open_editor(self, interview: Interview) -> None:
        self.view = "editor"
        self.editing_interview = interview
        self.viewing_results = None

    def back(self) -> None:
        self.view = "dashboard"
        self.editing_interview = None
        self.viewing_results = None
