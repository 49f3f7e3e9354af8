from tests.factories import auth_headers, make_quiz, make_user, sample_questions


def quiz_payload(**overrides):
    payload = {
        "title": "Fractions",
        "description": "Adding and comparing fractions",
        "subject": "Mathematics",
        "questions": sample_questions([1, 0, 3]),
        "time_limit": 900,
        "difficulty": "easy",
    }
    payload.update(overrides)
    return payload


def test_teacher_creates_quiz(client, teacher, teacher_headers):
    response = client.post("/quizzes/", json=quiz_payload(), headers=teacher_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Fractions"
    assert body["created_by"] == teacher.id
    assert body["question_count"] == 3
    assert body["is_active"] is True
    assert body["questions"][0]["correct_answer"] == 1


def test_student_cannot_create_quiz(client, student_headers):
    response = client.post("/quizzes/", json=quiz_payload(), headers=student_headers)
    assert response.status_code == 403


def test_create_quiz_validation(client, teacher_headers):
    bad_key = quiz_payload(
        questions=[{"question": "Q", "options": ["A", "B"], "correct_answer": 2}]
    )
    assert client.post("/quizzes/", json=bad_key, headers=teacher_headers).status_code == 422

    unknown_subject = quiz_payload(subject="Alchemy")
    assert client.post("/quizzes/", json=unknown_subject, headers=teacher_headers).status_code == 422

    no_questions = quiz_payload(questions=[])
    assert client.post("/quizzes/", json=no_questions, headers=teacher_headers).status_code == 422

    too_many = quiz_payload(questions=sample_questions([0] * 51))
    assert client.post("/quizzes/", json=too_many, headers=teacher_headers).status_code == 422


def test_student_view_hides_answer_key(client, student_headers, teacher_headers, quiz):
    student_view = client.get(f"/quizzes/{quiz.id}", headers=student_headers).json()
    assert all("correct_answer" not in q for q in student_view["questions"])
    assert student_view["question_count"] == 5

    teacher_view = client.get(f"/quizzes/{quiz.id}", headers=teacher_headers).json()
    assert [q["correct_answer"] for q in teacher_view["questions"]] == [0, 1, 2, 3, 1]


def test_get_unknown_quiz(client, student_headers):
    response = client.get("/quizzes/424242", headers=student_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Quiz not found", "type": "not_found"}


def test_list_quizzes_only_active_with_filters(client, db_session, teacher, student_headers):
    make_quiz(db_session, teacher, subject="Mathematics")
    make_quiz(db_session, teacher, subject="Science")
    make_quiz(db_session, teacher, subject="Science", is_active=False)

    body = client.get("/quizzes/", headers=student_headers).json()
    assert body["total"] == 2
    assert all("questions" not in q for q in body["quizzes"])

    body = client.get("/quizzes/?subject=Science", headers=student_headers).json()
    assert body["total"] == 1
    assert body["quizzes"][0]["subject"] == "Science"


def test_subjects_listing(client, db_session, teacher, student_headers):
    body = client.get("/quizzes/subjects", headers=student_headers).json()
    assert "Mathematics" in body["subjects"]
    assert len(body["subjects"]) == 6

    make_quiz(db_session, teacher, subject="History")
    body = client.get("/quizzes/subjects", headers=student_headers).json()
    assert body["subjects"] == ["History"]


def test_deactivate_quiz(client, db_session, quiz, teacher_headers, student_headers):
    other_teacher = make_user(db_session, "t2@example.com", "Other Teacher", role="teacher")
    response = client.delete(f"/quizzes/{quiz.id}", headers=auth_headers(other_teacher))
    assert response.status_code == 403

    response = client.delete(f"/quizzes/{quiz.id}", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = client.post(
        f"/quizzes/{quiz.id}/submit",
        json={"answers": [0], "time_spent": 5},
        headers=student_headers,
    )
    assert response.status_code == 404


def test_admin_can_deactivate_any_quiz(client, quiz, admin_headers):
    response = client.delete(f"/quizzes/{quiz.id}", headers=admin_headers)
    assert response.status_code == 200


def test_current_user_profile(client, student, student_headers):
    body = client.get("/users/me", headers=student_headers).json()
    assert body["id"] == student.id
    assert body["role"] == "student"
    assert "Sara" in body["avatar"]


def test_inactive_user_is_rejected(client, db_session):
    blocked = make_user(db_session, "blocked@example.com", "Blocked", is_active=False)
    response = client.get("/users/me", headers=auth_headers(blocked))
    assert response.status_code == 403


def test_invalid_token_is_rejected(client):
    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
