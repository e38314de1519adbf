from fastapi.testclient import TestClient

SLOT = {"startTime": "2026-11-02T15:00:00Z", "endTime": "2026-11-02T16:30:00Z"}


def _tutor_id(client: TestClient, tutor_headers: dict[str, str]) -> int:
    return client.get("/api/tutor/profile", headers=tutor_headers).json()["id"]


def _book(client: TestClient, student_headers: dict[str, str], tutor_id: int) -> dict:
    resp = client.post("/api/bookings", json={"tutorId": tutor_id, **SLOT}, headers=student_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_student_books_tutor_and_both_see_it(
    client: TestClient, tutor_headers: dict[str, str], login_as
) -> None:
    student = login_as("student@example.com", "STUDENT")
    tutor_id = _tutor_id(client, tutor_headers)

    booking = _book(client, student, tutor_id)
    assert booking["status"] == "PENDING"
    assert booking["durationHours"] == 1.5

    assert [row["id"] for row in client.get("/api/bookings/my", headers=student).json()] == [booking["id"]]
    assert [row["id"] for row in client.get("/api/bookings/my", headers=tutor_headers).json()] == [booking["id"]]


def test_booking_validation(client: TestClient, tutor_headers: dict[str, str], login_as) -> None:
    student = login_as("student@example.com", "STUDENT")
    tutor_id = _tutor_id(client, tutor_headers)

    backwards = {"tutorId": tutor_id, "startTime": SLOT["endTime"], "endTime": SLOT["startTime"]}
    assert client.post("/api/bookings", json=backwards, headers=student).status_code == 400
    assert client.post("/api/bookings", json={"tutorId": 9999, **SLOT}, headers=student).status_code == 404
    assert client.post("/api/bookings", json={"tutorId": tutor_id, **SLOT}, headers=tutor_headers).status_code == 403


def test_confirm_creates_class_session_once(
    client: TestClient, tutor_headers: dict[str, str], login_as
) -> None:
    student = login_as("student@example.com", "STUDENT")
    booking = _book(client, student, _tutor_id(client, tutor_headers))

    assert client.post(f"/api/bookings/{booking['id']}/confirm", headers=student).status_code == 403

    confirmed = client.post(f"/api/bookings/{booking['id']}/confirm", headers=tutor_headers)
    assert confirmed.status_code == 200
    assert confirmed.json()["booking"]["status"] == "CONFIRMED"
    assert confirmed.json()["classSession"]["status"] == "SCHEDULED"

    assert client.post(f"/api/bookings/{booking['id']}/confirm", headers=tutor_headers).status_code == 409
    assert client.post(f"/api/bookings/{booking['id']}/cancel", headers=student).status_code == 409
    assert len(client.get("/api/class-sessions/my", headers=student).json()) == 1


def test_cancelled_booking_cannot_be_confirmed(
    client: TestClient, tutor_headers: dict[str, str], login_as
) -> None:
    student = login_as("student@example.com", "STUDENT")
    booking = _book(client, student, _tutor_id(client, tutor_headers))

    cancelled = client.post(f"/api/bookings/{booking['id']}/cancel", headers=student)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "CANCELLED"
    assert client.post(f"/api/bookings/{booking['id']}/confirm", headers=tutor_headers).status_code == 409


def test_unrelated_users_cannot_see_a_booking(
    client: TestClient, tutor_headers: dict[str, str], login_as
) -> None:
    student = login_as("student@example.com", "STUDENT")
    other_student = login_as("other-student@example.com", "STUDENT")
    other_tutor = login_as("other-tutor@example.com", "TUTOR")
    booking = _book(client, student, _tutor_id(client, tutor_headers))

    assert client.post(f"/api/bookings/{booking['id']}/cancel", headers=other_student).status_code == 404
    assert client.post(f"/api/bookings/{booking['id']}/confirm", headers=other_tutor).status_code == 404
    assert client.get("/api/bookings/my", headers=other_student).json() == []


def test_class_session_completion_and_admin_approval(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str], login_as
) -> None:
    student = login_as("student@example.com", "STUDENT")
    booking = _book(client, student, _tutor_id(client, tutor_headers))
    session_id = client.post(f"/api/bookings/{booking['id']}/confirm", headers=tutor_headers).json()["classSession"]["id"]

    early = client.post(f"/api/admin/class-sessions/{session_id}/approve", headers=admin_headers)
    assert early.status_code == 409

    assert client.post(f"/api/class-sessions/{session_id}/complete", headers=student).status_code == 403

    done = client.post(f"/api/class-sessions/{session_id}/complete", json={"notes": "covered fractions"}, headers=tutor_headers)
    assert done.status_code == 200
    assert done.json()["status"] == "COMPLETED"
    assert done.json()["tutorApproved"] is True
    assert done.json()["notes"] == "covered fractions"

    again = client.post(f"/api/class-sessions/{session_id}/complete", headers=tutor_headers)
    assert again.status_code == 200
    assert again.json()["completedAt"] == done.json()["completedAt"]

    pending = client.get("/api/admin/class-sessions", params={"adminApproved": False}, headers=admin_headers).json()
    assert [row["id"] for row in pending] == [session_id]

    approved = client.post(f"/api/admin/class-sessions/{session_id}/approve", json={"notes": "paid"}, headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["adminApproved"] is True
    assert approved.json()["notes"] == "covered fractions\npaid"

    repeat = client.post(f"/api/admin/class-sessions/{session_id}/approve", headers=admin_headers)
    assert repeat.status_code == 200
    assert repeat.json()["adminApprovedAt"] == approved.json()["adminApprovedAt"]

    assert client.post(f"/api/admin/class-sessions/{session_id}/approve", headers=tutor_headers).status_code == 403
    assert client.post("/api/admin/class-sessions/4242/approve", headers=admin_headers).status_code == 404
