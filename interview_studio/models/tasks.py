"""Task model for ordered interview sections."""

from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import BaseModel, new_id


class Task(BaseModel):
    """
    One ordered section of an interview.

    The in-memory ``order`` attribute is stored as ``task_order`` and the
    requirements mapping as four ``req_*`` columns.
    """

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    interview_id = Column(
        String(36),
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
    )

    title = Column(String(255), nullable=False, default="")
    prompt = Column(Text, nullable=False, default="")

    # AI interaction intensity: passive, neutral, active, very_active
    ai_behavior = Column(String(20), nullable=False, default="neutral")
    duration_minutes = Column(Integer, nullable=True)

    # Media requirements
    req_audio = Column(Boolean, nullable=False, default=False)
    req_screen_share = Column(Boolean, nullable=False, default=False)
    req_webcam = Column(Boolean, nullable=False, default=False)
    req_file_upload = Column(Boolean, nullable=False, default=False)

    # Zero-based position within the interview
    task_order = Column(Integer, nullable=False, default=0)

    # JSON: list of task-scope criteria
    criteria = Column(Text, nullable=False, default="[]")

    # Relationships
    interview = relationship("Interview", back_populates="tasks")

    __table_args__ = (
        Index("idx_tasks_interview_order", "interview_id", "task_order"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, order={self.task_order})>"
