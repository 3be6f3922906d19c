"""Candidate result and note models for graded interview attempts."""

from sqlalchemy import Column, Integer, String, DateTime, Text, Float, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel, new_id, utcnow
from interview_studio.config.database import Base


class CandidateResult(BaseModel):
    """
    One candidate's completed attempt at an interview.

    Rows are written by the external grading service; this application only
    edits scores and appends notes.
    """

    __tablename__ = "candidate_results"

    id = Column(String(36), primary_key=True, default=new_id)
    interview_id = Column(
        String(36),
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    completed_at = Column(DateTime, nullable=False, default=utcnow)

    # JSON: [{"criterion_id", "criterion_name", "score", "max_score"}]
    scores = Column(Text, nullable=False, default="[]")
    overall_score = Column(Float, nullable=True)

    # AI-written interview summary
    summary = Column(Text, nullable=True)

    # Relationships
    interview = relationship("Interview", back_populates="results")
    notes = relationship(
        "CandidateNote",
        back_populates="candidate",
        order_by="CandidateNote.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<CandidateResult(id={self.id}, overall={self.overall_score})>"


class CandidateNote(Base):
    """Reviewer note attached to one criterion of a candidate result."""

    __tablename__ = "candidate_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    candidate_id = Column(
        String(36),
        ForeignKey("candidate_results.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    author = Column(String(255), nullable=False)
    criterion_name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    candidate = relationship("CandidateResult", back_populates="notes")

    def __repr__(self) -> str:
        return f"<CandidateNote(id={self.id}, criterion={self.criterion_name})>"
