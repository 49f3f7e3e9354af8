from datetime import timedelta

from app.core.schedular import purge_expired_results
from app.models import QuizResult
from app.services.quiz_result import QuizResultService, get_utc_now
from tests.factories import make_result


def test_purge_by_filters(client, db_session, student, other_student, admin_headers, base_time):
    make_result(db_session, student.id, "Mathematics", 50, base_time)
    make_result(db_session, student.id, "Science", 60, base_time)
    make_result(db_session, other_student.id, "Mathematics", 70, base_time + timedelta(days=10))

    response = client.delete(
        "/admin/quiz-results",
        params={"subject": "Mathematics", "before": (base_time + timedelta(days=1)).isoformat()},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"deleted": 1}
    assert db_session.query(QuizResult).count() == 2

    response = client.delete(
        "/admin/quiz-results", params={"user_id": other_student.id}, headers=admin_headers
    )
    assert response.json() == {"deleted": 1}


def test_purge_everything_needs_confirmation(client, db_session, student, admin_headers, base_time):
    make_result(db_session, student.id, "Mathematics", 50, base_time)

    response = client.delete("/admin/quiz-results", headers=admin_headers)
    assert response.status_code == 422
    assert db_session.query(QuizResult).count() == 1

    response = client.delete("/admin/quiz-results?confirm_all=true", headers=admin_headers)
    assert response.json() == {"deleted": 1}


def test_purge_is_admin_only(client, teacher_headers):
    response = client.delete("/admin/quiz-results?subject=Mathematics", headers=teacher_headers)
    assert response.status_code == 403


def test_retention_purge_keeps_recent_results(db_session, student):
    now = get_utc_now()
    make_result(db_session, student.id, "Mathematics", 50, now - timedelta(days=40))
    make_result(db_session, student.id, "Mathematics", 90, now - timedelta(days=2))

    deleted = QuizResultService(db_session).purge_results(before=now - timedelta(days=30))
    assert deleted == 1
    assert [r.score for r in db_session.query(QuizResult).all()] == [90]


def test_retention_job_is_noop_without_window():
    assert purge_expired_results(retention_days=0) == 0


def test_purge_by_user_id_zero_matches_nobody(db_session, student, base_time):
    make_result(db_session, student.id, "Mathematics", 50, base_time)

    assert QuizResultService(db_session).purge_results(user_id=0) == 0
    assert db_session.query(QuizResult).count() == 1
