"""Interview model for interview templates."""

import secrets

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel, new_id


def new_invite_token() -> str:
    return secrets.token_urlsafe(24)


class Interview(BaseModel):
    """
    An interview template owned by one hiring-team user.

    Status Values:
    - draft: Being authored, not visible to candidates
    - live: Published, candidates can be invited and take it
    - closed: No longer accepting candidates

    Transitions are forward only: draft -> live -> closed.
    """

    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)

    # Status: draft, live, closed
    status = Column(String(20), nullable=False, default="draft")

    # Identity of the owner (email from the session)
    owner_email = Column(String(255), nullable=False, index=True)

    # JSON: list of general-scope criteria
    general_criteria = Column(Text, nullable=False, default="[]")

    # Shareable candidate link
    invite_token = Column(String(64), unique=True, nullable=False, default=new_invite_token)

    # Relationships
    tasks = relationship(
        "Task",
        back_populates="interview",
        order_by="Task.task_order",
        cascade="all, delete-orphan",
    )
    results = relationship("CandidateResult", back_populates="interview")
    invitations = relationship("Invitation", back_populates="interview")

    def __repr__(self) -> str:
        return f"<Interview(id={self.id}, status={self.status})>"
