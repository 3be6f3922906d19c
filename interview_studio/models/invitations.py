"""Invitation model for candidate interview invites."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import utcnow
from interview_studio.config.database import Base


class Invitation(Base):
    """
    An invite sent (or queued) to a candidate email address.

    sent_at stays NULL when email delivery is disabled or failed.
    """

    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    interview_id = Column(
        String(36),
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    email = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    sent_at = Column(DateTime, nullable=True)
    message_id = Column(String(255), nullable=True)

    interview = relationship("Interview", back_populates="invitations")

    def __repr__(self) -> str:
        return f"<Invitation(id={self.id}, email={self.email})>"
