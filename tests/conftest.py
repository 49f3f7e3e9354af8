"""
EduQuest - Test Configuration
Pytest fixtures: in-memory SQLite, a fake Redis and signed tokens per role
"""
import fnmatch
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["QUESTION_BANK_API_KEY"] = "test-key"

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.cache import QuestionSetCache, get_question_cache
from app.core.database import Base, SessionLocal, engine, get_db
from app.models import Quiz, User
from main import app
from tests.factories import auth_headers, make_quiz, make_user


class FakeRedis:
    """In-process stand-in for the redis commands the question cache uses"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def scan_iter(self, match="*"):
        return [key for key in list(self.store) if fnmatch.fnmatch(key, match)]

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def question_cache(fake_redis) -> QuestionSetCache:
    return QuestionSetCache(fake_redis, ttl=300)


@pytest.fixture(scope="function")
def client(db_session, question_cache):
    """Test client bound to the test session and the fake cache."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_question_cache] = lambda: question_cache

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def student(db_session) -> User:
    return make_user(db_session, "student@example.com", "Sara Student")


@pytest.fixture
def other_student(db_session) -> User:
    return make_user(db_session, "omar@example.com", "Omar Student")


@pytest.fixture
def teacher(db_session) -> User:
    return make_user(db_session, "teacher@example.com", "Tamer Teacher", role="teacher")


@pytest.fixture
def admin(db_session) -> User:
    return make_user(db_session, "root@example.com", "Ada Admin", role="admin")


@pytest.fixture
def student_headers(student) -> dict:
    return auth_headers(student)


@pytest.fixture
def teacher_headers(teacher) -> dict:
    return auth_headers(teacher)


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_headers(admin)


@pytest.fixture
def quiz(db_session, teacher) -> Quiz:
    """Five questions keyed [0, 1, 2, 3, 1]"""
    return make_quiz(db_session, teacher)


@pytest.fixture
def base_time() -> datetime:
    return datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
