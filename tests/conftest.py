import os

# Keep the module-level engine in memory and out of ./data.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from exam_api.app import app
from exam_api.database import create_db_engine, get_db, init_db
from exam_api.models.db import Attempt, Paper, User
from exam_api.services import attempt_service, auth_service, catalog_service


@pytest.fixture()
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_student(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(display_name: str | None = None) -> User:
        counter["n"] += 1
        return auth_service.create_user(db, f"student{counter['n']}", display_name)

    return _make


def _question(point: float = 5, correct: list[int] | None = None, answers: int = 4) -> dict[str, Any]:
    return {
        "question": "Pick the right option",
        "answers": [f"Option {i}" for i in range(answers)],
        "correctIndexes": correct if correct is not None else [0],
        "point": point,
        "explanationText": "Because.",
    }


@pytest.fixture()
def make_paper(db: Session) -> Callable[..., Paper]:
    def _make(
        payment_type: str = "free",
        attempts_allowed: int = 1,
        questions: list[dict[str, Any]] | None = None,
        amount: float = 0,
        title: str = "Sample paper",
    ) -> Paper:
        payload = {
            "title": title,
            "paymentType": payment_type,
            "attemptsAllowed": attempts_allowed,
            "timeMinutes": 30,
            "amount": amount,
            "isPublished": True,
            "questions": questions or [_question(), _question()],
        }
        return catalog_service.import_paper(db, payload)

    return _make


@pytest.fixture()
def question_payload() -> Callable[..., dict[str, Any]]:
    return _question


@pytest.fixture()
def complete_attempt(db: Session) -> Callable[..., Attempt]:
    """Start, answer and submit; ``selections`` maps question position to indexes."""

    def _complete(student: User, paper: Paper, selections: dict[int, list[int]]) -> Attempt:
        questions = catalog_service.get_questions(db, paper.id)
        attempt = attempt_service.start_attempt(db, student.id, paper.id)
        for position, indexes in selections.items():
            attempt_service.save_answer(db, attempt.id, student.id, questions[position].id, indexes)
        return attempt_service.submit_attempt(db, attempt.id, student.id)

    return _complete


@pytest.fixture()
def client(session_factory) -> Iterator[TestClient]:
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_service.create_access_token(user.id)}"}

    return _headers
