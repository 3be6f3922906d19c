"""Pydantic schemas for the workspace (view router and dashboard)."""

from typing import Literal, Optional

from .base import CamelModel
from .interviews import InterviewListItem

View = Literal["dashboard", "editor", "results"]


class WorkspaceState(CamelModel):
    view: View
    editing_interview_id: Optional[str] = None
    viewing_results_id: Optional[str] = None
    pending: bool = False


class DashboardResponse(CamelModel):
    search: str = ""
    is_fetching: bool = False
    interviews: list[InterviewListItem] = []
    total: int = 0
    empty_state: Optional[Literal["no_interviews", "no_matches"]] = None
