from datetime import timedelta

from app.services.leaderboard import LeaderboardService
from tests.factories import make_result, make_user


def test_subject_ranking_by_latest_score_then_recency(db_session, base_time):
    alice = make_user(db_session, "alice@example.com", "Alice")
    bob = make_user(db_session, "bob@example.com", "Bob")
    cara = make_user(db_session, "cara@example.com", "Cara")

    # Alice: old 100, latest 70
    make_result(db_session, alice.id, "Mathematics", 100, base_time)
    make_result(db_session, alice.id, "Mathematics", 70, base_time + timedelta(hours=2))
    # Bob: latest 90
    make_result(db_session, bob.id, "Mathematics", 90, base_time + timedelta(hours=1))
    # Cara: latest 70, more recent than Alice's
    make_result(db_session, cara.id, "Mathematics", 70, base_time + timedelta(hours=3))
    # Other subjects do not count
    make_result(db_session, alice.id, "Science", 100, base_time + timedelta(hours=4))

    entries = LeaderboardService(db_session).get_subject_leaderboard("Mathematics", 10)

    assert [e.user_id for e in entries] == [bob.id, cara.id, alice.id]
    assert [e.rank for e in entries] == [1, 2, 3]
    assert [e.latest_score for e in entries] == [90, 70, 70]

    alice_entry = entries[2]
    assert alice_entry.user_name == "Alice"
    assert alice_entry.best_score == 100
    assert alice_entry.total_quizzes == 2
    assert alice_entry.average_score == 85.0


def test_subject_statistics_over_full_history(db_session, base_time):
    user = make_user(db_session, "dina@example.com", "Dina")
    for offset, score in enumerate([60, 80, 100]):
        make_result(db_session, user.id, "Science", score, base_time + timedelta(days=offset))

    [entry] = LeaderboardService(db_session).get_subject_leaderboard("Science", 10)
    assert entry.latest_score == 100
    assert entry.average_score == 80.0
    assert entry.best_score == 100
    assert entry.total_quizzes == 3


def test_average_is_rounded_to_one_decimal(db_session, base_time):
    user = make_user(db_session, "eve@example.com", "Eve")
    for offset, score in enumerate([70, 70, 71]):
        make_result(db_session, user.id, "History", score, base_time + timedelta(days=offset))

    [entry] = LeaderboardService(db_session).get_subject_leaderboard("History", 10)
    assert entry.average_score == 70.3


def test_ranking_does_not_depend_on_insertion_order(db_session, base_time):
    first = make_user(db_session, "first@example.com", "First")
    second = make_user(db_session, "second@example.com", "Second")
    service = LeaderboardService(db_session)

    make_result(db_session, second.id, "English", 75, base_time)
    make_result(db_session, first.id, "English", 75, base_time)
    forward = [e.user_id for e in service.get_subject_leaderboard("English", 10)]

    assert forward == [first.id, second.id]
    assert forward == [e.user_id for e in service.get_subject_leaderboard("English", 10)]


def test_limit_truncates_and_non_positive_limit_is_empty(db_session, base_time):
    for i in range(4):
        user = make_user(db_session, f"user{i}@example.com", f"User {i}")
        make_result(db_session, user.id, "Geography", 50 + i * 10, base_time)

    service = LeaderboardService(db_session)
    top_two = service.get_subject_leaderboard("Geography", 2)
    assert [e.latest_score for e in top_two] == [80, 70]

    assert service.get_subject_leaderboard("Geography", 0) == []
    assert service.get_subject_leaderboard("Geography", -3) == []
    assert service.get_overall_leaderboard(0) == []


def test_unknown_subject_is_empty(db_session):
    assert LeaderboardService(db_session).get_subject_leaderboard("Astrology", 10) == []


def test_results_of_deleted_users_are_skipped(db_session, base_time):
    kept = make_user(db_session, "kept@example.com", "Kept")
    make_result(db_session, kept.id, "Mathematics", 40, base_time)
    make_result(db_session, 9999, "Mathematics", 100, base_time)

    service = LeaderboardService(db_session)
    assert [e.user_id for e in service.get_subject_leaderboard("Mathematics", 10)] == [kept.id]
    assert [e.user_id for e in service.get_overall_leaderboard(10)] == [kept.id]


def test_overall_ranking_by_average_then_quiz_count(db_session, base_time):
    steady = make_user(db_session, "steady@example.com", "Steady")
    busy = make_user(db_session, "busy@example.com", "Busy")
    star = make_user(db_session, "star@example.com", "Star")

    make_result(db_session, steady.id, "Mathematics", 80, base_time)
    for offset in range(3):
        make_result(db_session, busy.id, "Science", 80, base_time + timedelta(hours=offset))
    make_result(db_session, star.id, "English", 90, base_time)
    make_result(db_session, star.id, "History", 100, base_time + timedelta(hours=5))

    entries = LeaderboardService(db_session).get_overall_leaderboard(10)

    assert [e.user_id for e in entries] == [star.id, busy.id, steady.id]
    assert entries[0].average_score == 95.0
    assert entries[0].total_score == 190
    assert entries[0].total_quizzes == 2
    assert entries[0].last_quiz.replace(tzinfo=None) == (base_time + timedelta(hours=5)).replace(tzinfo=None)
    assert entries[1].total_quizzes == 3


def test_leaderboard_endpoints(client, db_session, student, student_headers, base_time):
    make_result(db_session, student.id, "Mathematics", 65, base_time)

    response = client.get("/leaderboards/Mathematics?limit=5", headers=student_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["subject"] == "Mathematics"
    assert body["leaderboard"][0]["user_name"] == "Sara Student"
    assert body["leaderboard"][0]["avatar"].startswith("https://ui-avatars.com/api/")

    response = client.get("/leaderboards/Mathematics?limit=0", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["leaderboard"] == []

    response = client.get("/leaderboards/", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["leaderboard"][0]["average_score"] == 65.0

    assert client.get("/leaderboards/Mathematics").status_code == 401
    assert client.get("/leaderboards/Mathematics?limit=1000", headers=student_headers).status_code == 422
