"""Shared fixtures: in-memory database, app client and signed-in identity."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SES_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from interview_studio import models  # noqa: E402,F401
from interview_studio.config.database import Base, SessionLocal, engine  # noqa: E402
from interview_studio.main import app  # noqa: E402
from interview_studio.schemas.interviews import Criterion  # noqa: E402
from interview_studio.schemas.results import CandidateNote, CandidateResult, CandidateScore  # noqa: E402
from interview_studio.services.session import Identity  # noqa: E402
from interview_studio.services.editor import InterviewEditor  # noqa: E402
from interview_studio.services.store import InterviewStore  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return InterviewStore(db)


@pytest.fixture
def identity():
    return Identity.from_email("Jordan.Lee@Acme.com", "Jordan Lee")


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client, identity):
    token = client.app.state.session_manager.issue_token(identity)
    return {"Authorization": f"Bearer {token}"}


def _candidate(candidate_id, name, email, overall, scores, notes=(), day=22):
    return CandidateResult(
        id=candidate_id,
        name=name,
        email=email,
        completed_at=datetime(2024, 1, day, 14, 30),
        overall_score=overall,
        scores=[
            CandidateScore(criterion_id=cid, criterion_name=cname, score=value)
            for cid, cname, value in scores
        ],
        notes=list(notes),
    )


@pytest.fixture
def candidate_factory():
    return _candidate


@pytest.fixture
def mock_candidates():
    """Five graded candidates across general and task criteria."""
    columns = [
        ("comm-general", "Communication"),
        ("prof-general", "Professionalism"),
        ("depth-task1", "Depth of Answer"),
        ("calc-task2", "Calculation Accuracy"),
    ]

    def scores(*values):
        return [(cid, cname, value) for (cid, cname), value in zip(columns, values)]

    return [
        _candidate(
            "candidate-1", "Sarah Johnson", "sarah.johnson@email.com", 4.2, scores(4, 5, 4, 5), day=22,
            notes=[CandidateNote(
                author="AI Interviewer",
                column="Communication",
                content="Clear articulation and confident tone throughout the interview.",
                created_at=datetime(2024, 1, 22, 14, 35),
            )],
        ),
        _candidate(
            "candidate-2", "Michael Chen", "michael.chen@email.com", 3.8, scores(3, 4, 4, 4), day=23,
        ),
        _candidate(
            "candidate-3", "Emily Rodriguez", "emily.rodriguez@email.com", 4.5, scores(5, 5, 5, 3), day=24,
        ),
        _candidate(
            "candidate-4", "David Park", "david.park@email.com", 3.5, scores(3, 4, 3, 4), day=25,
        ),
        _candidate(
            "candidate-5", "Lisa Thompson", "lisa.thompson@email.com", 4.0, scores(4, 4, 4, True), day=26,
        ),
    ]


@pytest.fixture
def graded_interview(store, identity, mock_candidates):
    """A live interview with two tasks, rubric criteria and five results."""
    interview = store.insert_interview(identity.email, "Summer 2025 Junior Interns")
    editor = InterviewEditor(interview)
    editor.set_general_criteria([
        Criterion(id="comm-general", name="Communication", scope="general"),
        Criterion(id="prof-general", name="Professionalism", scope="general"),
    ])
    behavioral = editor.add_task_from_template("behavioral")
    merger = editor.add_task_from_template("merger-math")
    editor.update_task(behavioral.id, {"criteria": [
        {"id": "depth-task1", "name": "Depth of Answer", "scope": "task"},
    ]})
    editor.update_task(merger.id, {"criteria": [
        {"id": "calc-task2", "name": "Calculation Accuracy", "scope": "task"},
    ]})
    editor.publish(store)

    for candidate in mock_candidates:
        store.insert_result(interview.id, candidate)
    return store.get_with_tasks(interview.id, identity.email)
