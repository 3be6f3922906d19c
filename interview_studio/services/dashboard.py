"""Dashboard: the signed-in user's interview list with title search."""

from typing import Optional

import structlog

from interview_studio.schemas.interviews import Interview, InterviewListItem
from interview_studio.schemas.workspace import DashboardResponse
from interview_studio.services.store import InterviewStore

logger = structlog.get_logger()


class Dashboard:
    """Cached interview list for one identity."""

    def __init__(self, owner_email: str):
        self.owner_email = owner_email
        self.interviews: list[Interview] = []
        self.is_fetching = False
        self.loaded = False

    def load(self, store: InterviewStore) -> list[Interview]:
        """Fetch every interview of the owner. On failure the old list stays."""
        self.is_fetching = True
        try:
            interviews = store.list_by_owner(self.owner_email)
        finally:
            self.is_fetching = False
        self.interviews = interviews
        self.loaded = True
        logger.debug("Dashboard loaded", owner=self.owner_email, count=len(interviews))
        return interviews

    def filter(self, search: str = "") -> list[Interview]:
        """Interviews whose title contains ``search``, ignoring case."""
        needle = search.lower()
        if not needle:
            return list(self.interviews)
        return [i for i in self.interviews if needle in i.title.lower()]

    def empty_state(self, search: str = "") -> Optional[str]:
        if self.is_fetching:
            return None
        if not self.interviews:
            return "no_interviews"
        if not self.filter(search):
            return "no_matches"
        return None

    def to_response(self, search: str = "") -> DashboardResponse:
        visible = self.filter(search)
        return DashboardResponse(
            search=search,
            is_fetching=self.is_fetching,
            interviews=[
                InterviewListItem(
                    id=i.id,
                    title=i.title,
                    status=i.status,
                    created_at=i.created_at,
                    updated_at=i.updated_at,
                    task_count=len(i.tasks),
                    stats=i.stats,
                )
                for i in visible
            ],
            total=len(self.interviews),
            empty_state=self.empty_state(search),
        )
