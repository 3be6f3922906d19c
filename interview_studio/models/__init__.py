"""SQLAlchemy ORM models for Interview Studio.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from interview_studio.config.database import Base

from .interviews import Interview
from .tasks import Task
from .results import CandidateResult, CandidateNote
from .invitations import Invitation

__all__ = [
    "Base",
    "Interview",
    "Task",
    "CandidateResult",
    "CandidateNote",
    "Invitation",
]
