from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_generation_backends
from app.db.deps import get_db
from app.db.models.daily_plan import DailyPlan
from app.db.models.long_term_goal import LongTermGoal
from app.db.models.profile import Profile
from app.db.models.user import User
from app.main import app
from app.services.llm_backends import BackendError, GenerationBackend


class FakeBackend(GenerationBackend):
    """Backend returning canned text (or failing) and recording every call."""

    def __init__(self, name: str, text: str | None = None, error: str | None = None):
        self.name = name
        self.text = text
        self.error = error
        self.calls: list = []

    def complete(self, prompt, params) -> str:
        self.calls.append((prompt, params))
        if self.error is not None:
            raise BackendError(self.error)
        return self.text or ""


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    User.__table__.create(bind=engine)
    Profile.__table__.create(bind=engine)
    LongTermGoal.__table__.create(bind=engine)
    DailyPlan.__table__.create(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def backends() -> List[GenerationBackend]:
    """Backends handed to the API; empty means every request uses the fallback."""
    return []


@pytest.fixture()
def client(session_factory, backends):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_generation_backends] = lambda: backends
    with TestClient(app) as test_client:
        yield test_client, session_factory
    app.dependency_overrides.clear()


PROFILE_FIELDS = {
    "work_study": "Software engineer",
    "hobbies": "Guitar",
    "sports": "Running",
    "location": "Lisbon",
    "age_years": 31,
    "reading": "Science fiction",
}


@pytest.fixture()
def fake_backend():
    """Factory for ``FakeBackend`` instances."""
    return FakeBackend


@pytest.fixture()
def profile_fields() -> dict:
    return dict(PROFILE_FIELDS)
