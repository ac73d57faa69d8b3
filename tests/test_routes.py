from exam_api.services import auth_service, catalog_service


def test_health(client) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_requires_bearer_token(client) -> None:
    assert client.get("/api/stats/me").status_code == 401
    response = client.get("/api/stats/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_inactive_user_is_rejected(client, db, make_student, auth_headers) -> None:
    student = make_student()
    student.is_active = False
    db.commit()
    assert client.get("/api/stats/me", headers=auth_headers(student)).status_code == 401


def test_attempt_flow_over_http(client, db, make_student, make_paper, auth_headers) -> None:
    student = make_student()
    headers = auth_headers(student)
    paper = make_paper()
    q1, q2 = [q.id for q in catalog_service.get_questions(db, paper.id)]

    started = client.post("/api/attempts/start", json={"paperId": paper.id}, headers=headers)
    assert started.status_code == 201
    body = started.json()
    attempt_id = body["attempt"]["id"]
    assert body["meta"] == {
        "attemptNo": 1,
        "attemptsAllowed": 1,
        "attemptsUsed": 1,
        "attemptsLeft": 0,
    }
    assert body["paper"]["paperTitle"] == "Sample paper"

    for question_id, selection in ((q1, [0]), (q2, [1])):
        saved = client.post(
            "/api/attempts/answer",
            json={"attemptId": attempt_id, "questionId": question_id, "selectedIndexes": selection},
            headers=headers,
        )
        assert saved.status_code == 200

    sheet = client.get(f"/api/attempts/{attempt_id}/questions", headers=headers).json()
    assert [q["selectedIndexes"] for q in sheet["questions"]] == [[0], [1]]

    submitted = client.post(f"/api/attempts/{attempt_id}/submit", headers=headers)
    assert submitted.status_code == 200
    assert submitted.json()["status"] == "submitted"
    assert submitted.json()["result"]["totalPointsEarned"] == 5.0
    assert submitted.json()["result"]["percentage"] == 50

    again = client.post(f"/api/attempts/{attempt_id}/submit", headers=headers)
    assert again.json()["result"] == submitted.json()["result"]

    review = client.get(f"/api/attempts/{attempt_id}/review", headers=headers).json()
    assert [row["questionNumber"] for row in review["wrongFirst"]] == [2]

    blocked = client.post("/api/attempts/start", json={"paperId": paper.id}, headers=headers)
    assert blocked.status_code == 400
    assert blocked.json()["detail"]["code"] == "quota_exceeded"
    assert blocked.json()["detail"]["lastAttemptId"] == attempt_id

    quota = client.get(f"/api/attempts/my/{paper.id}", headers=headers).json()
    assert quota["lastSubmittedAttemptId"] == attempt_id
    assert quota["attemptsLeft"] == 0

    stats = client.get("/api/stats/me", headers=headers).json()
    assert stats == {"totalCoins": 5.0, "totalFinishedExams": 1}

    completed = client.get("/api/stats/completed", headers=headers).json()
    assert [item["attemptId"] for item in completed["items"]] == [attempt_id]

    progress = client.get("/api/progress/my", headers=headers).json()
    assert progress["progress"] == 0.03

    board = client.get("/api/rank/leaderboard", params={"limit": 999}, headers=headers).json()
    assert board["me"]["rank"] == 1

    listing = client.get("/api/attempts/my", headers=headers).json()
    assert [a["id"] for a in listing["attempts"]] == [attempt_id]


def test_paid_paper_returns_402_until_paid(client, db, make_student, make_paper, auth_headers) -> None:
    from exam_api.services import payment_service

    student = make_student()
    headers = auth_headers(student)
    paper = make_paper(payment_type="paid", amount=7)

    status = client.get(f"/api/payments/my/{paper.id}", headers=headers).json()
    assert status == {
        "paperId": paper.id,
        "payment": "paid",
        "required": True,
        "unlocked": False,
        "amount": 7.0,
    }

    response = client.post("/api/attempts/start", json={"paperId": paper.id}, headers=headers)
    assert response.status_code == 402
    assert response.json()["detail"]["amount"] == 7.0

    payment_service.record_payment(db, student.id, paper.id, 7)
    response = client.post("/api/attempts/start", json={"paperId": paper.id}, headers=headers)
    assert response.status_code == 201


def test_other_students_attempt_is_forbidden(client, db, make_student, make_paper, auth_headers) -> None:
    owner = make_student()
    intruder = make_student()
    paper = make_paper()

    started = client.post(
        "/api/attempts/start", json={"paperId": paper.id}, headers=auth_headers(owner)
    )
    attempt_id = started.json()["attempt"]["id"]

    response = client.post(f"/api/attempts/{attempt_id}/submit", headers=auth_headers(intruder))
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "forbidden"


def test_second_active_attempt_conflicts(client, db, make_student, make_paper, auth_headers) -> None:
    student = make_student()
    headers = auth_headers(student)
    paper = make_paper(attempts_allowed=2)

    first = client.post("/api/attempts/start", json={"paperId": paper.id}, headers=headers)
    second = client.post("/api/attempts/start", json={"paperId": paper.id}, headers=headers)
    assert second.status_code == 409
    assert second.json()["detail"]["activeAttemptId"] == first.json()["attempt"]["id"]

    review = client.get(f"/api/attempts/{first.json()['attempt']['id']}/review", headers=headers)
    assert review.status_code == 409


def test_unknown_paper_is_404(client, make_student, auth_headers) -> None:
    student = make_student()
    response = client.post(
        "/api/attempts/start", json={"paperId": 12345}, headers=auth_headers(student)
    )
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "not_found"


def test_expired_token_is_rejected(client, make_student) -> None:
    student = make_student()
    token = auth_service.create_access_token(student.id, expires_minutes=-1)
    response = client.get("/api/stats/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
