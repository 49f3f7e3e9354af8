import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.database import Base
from app.core.exceptions import ConflictError
from app.models import QuizResult, User
from app.schemas.quiz_result import AuthoredSubmission
from app.services.quiz_result import QuizResultService
from tests.factories import make_quiz, make_user


@pytest.fixture
def file_sessionmaker(tmp_path):
    """Sessions on a file-backed database so each thread has its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'submissions.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def test_simultaneous_submissions_store_one_row(file_sessionmaker):
    setup = file_sessionmaker()
    teacher = make_user(setup, "teacher@example.com", "Tamer Teacher", role="teacher")
    student = make_user(setup, "student@example.com", "Sara Student")
    quiz = make_quiz(setup, teacher)
    student_id, quiz_id = student.id, quiz.id
    setup.close()

    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def attempt():
        db = file_sessionmaker()
        try:
            user = db.get(User, student_id)
            submission = AuthoredSubmission(answers=[0, 1, 2, 3, 1], time_spent=30)
            barrier.wait()
            try:
                QuizResultService(db).submit_authored(user, quiz_id, submission)
                outcome = "ok"
            except ConflictError:
                outcome = "conflict"
            with lock:
                outcomes.append(outcome)
        finally:
            db.close()

    threads = [threading.Thread(target=attempt) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert sorted(outcomes) == ["conflict", "ok"]

    check = file_sessionmaker()
    try:
        assert check.query(QuizResult).filter(QuizResult.quiz_id == quiz_id).count() == 1
    finally:
        check.close()
