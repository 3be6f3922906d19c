#!/usr/bin/env python3
"""Seed demo interviews and graded candidates.

Usage:
    python scripts/seed_demo_data.py [owner_email]

Creates two interviews for the owner (default: demo@acme.com):
    - "Summer 2025 Junior Interns": live, with five graded candidates
    - "Full-Time August Analysts": draft, no results yet

Running it twice creates a second copy; point DATABASE_URL at a scratch database.
"""

import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent directory to path so we can import interview_studio
sys.path.insert(0, str(Path(__file__).parent.parent))

from interview_studio.config.database import SessionLocal, init_db
from interview_studio.schemas.interviews import Criterion
from interview_studio.schemas.results import CandidateNote, CandidateResult, CandidateScore
from interview_studio.services.editor import InterviewEditor
from interview_studio.services.results import overall_score
from interview_studio.services.store import InterviewStore

DEFAULT_OWNER = "demo@acme.com"

GENERAL_CRITERIA = [
    ("Communication", "Clarity of expression and active listening"),
    ("Professionalism", "Tone, preparedness and conduct"),
]

# name, email, scores in column order: Communication, Professionalism,
# Depth of Answer, Calculation Accuracy, Excel Proficiency
CANDIDATES = [
    ("Sarah Johnson", "sarah.johnson@email.com", [4, 5, 4, 5, True]),
    ("Michael Chen", "michael.chen@email.com", [3, 4, 4, 4, True]),
    ("Emily Rodriguez", "emily.rodriguez@email.com", [5, 5, 5, 3, False]),
    ("David Park", "david.park@email.com", [3, 4, 3, 4, True]),
    ("Lisa Thompson", "lisa.thompson@email.com", [4, 4, 4, 4, True]),
]


def create_live_interview(store: InterviewStore, owner_email: str) -> InterviewEditor:
    """Author and publish the graded demo interview."""
    editor = InterviewEditor(store.insert_interview(owner_email, "Summer 2025 Junior Interns"))
    editor.set_general_criteria([
        Criterion(id=str(uuid.uuid4()), name=name, description=description, scope="general")
        for name, description in GENERAL_CRITERIA
    ])
    editor.add_task_from_template("behavioral")
    editor.add_task_from_template("merger-math")
    report = editor.publish(store)

    print(f"  Created interview: {editor.draft.title} (id={editor.interview_id})")
    print(f"    tasks={report.upserted_count} status={editor.draft.status}")
    return editor


def columns_for(editor: InterviewEditor) -> list[Criterion]:
    """Score columns: Communication, Professionalism, then the first criterion of each template task."""
    behavioral, merger = editor.draft.tasks
    return list(editor.draft.general_criteria) + [behavioral.criteria[0]] + merger.criteria[:2]


def seed_candidates(store: InterviewStore, editor: InterviewEditor) -> None:
    columns = columns_for(editor)
    started = datetime(2024, 1, 22, 14, 30, tzinfo=timezone.utc)

    for offset, (name, email, values) in enumerate(CANDIDATES):
        scores = [
            CandidateScore(
                criterion_id=column.id,
                criterion_name=column.name,
                score=value,
                max_score=None if isinstance(value, bool) else 5,
            )
            for column, value in zip(columns, values)
        ]
        completed_at = started + timedelta(days=offset)
        notes = []
        if offset == 0:
            notes.append(CandidateNote(
                author="AI Interviewer",
                column="Communication",
                content="Clear articulation and confident tone throughout the interview.",
                created_at=completed_at + timedelta(minutes=5),
            ))

        result = store.insert_result(editor.interview_id, CandidateResult(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            completed_at=completed_at,
            scores=scores,
            notes=notes,
            overall_score=overall_score(scores),
        ))
        print(f"    Candidate {result.name}: overall={result.overall_score}")


def create_draft_interview(store: InterviewStore, owner_email: str) -> None:
    editor = InterviewEditor(store.insert_interview(owner_email, "Full-Time August Analysts"))
    editor.add_task_from_template("accounting")
    editor.save(store)
    print(f"  Created interview: {editor.draft.title} (id={editor.interview_id}, draft)")


def main():
    owner_email = (sys.argv[1] if len(sys.argv) > 1 else DEFAULT_OWNER).strip().lower()

    init_db()
    db = SessionLocal()
    try:
        store = InterviewStore(db)
        print(f"Seeding demo data for {owner_email}")
        editor = create_live_interview(store, owner_email)
        seed_candidates(store, editor)
        create_draft_interview(store, owner_email)
        print("Done.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
