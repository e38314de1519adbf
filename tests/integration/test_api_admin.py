from fastapi.testclient import TestClient

BACKGROUND_CHECK = {
    "fullLegalFirstName": "Ada",
    "fullLegalLastName": "Lovelace",
    "dateOfBirth": "1990-12-10",
    "socialSecurityNumber": "987654321",
    "consentGiven": True,
}


def _submit_check(client: TestClient, headers: dict[str, str]) -> int:
    resp = client.post("/api/tutor/profile/background-check", json=BACKGROUND_CHECK, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["backgroundCheck"]["id"]


def test_admin_routes_require_admin_role(client: TestClient, tutor_headers: dict[str, str]) -> None:
    assert client.get("/api/admin/analytics", headers=tutor_headers).status_code == 403
    assert client.get("/api/admin/settings").status_code == 401


def test_approve_background_check_once(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str]
) -> None:
    check_id = _submit_check(client, tutor_headers)

    pending = client.get("/api/admin/background-checks", params={"status": "PENDING"}, headers=admin_headers)
    assert [item["id"] for item in pending.json()] == [check_id]
    assert pending.json()[0]["socialSecurityNumber"] == "***-**-4321"

    approved = client.post(
        f"/api/admin/background-checks/{check_id}/approve",
        json={"notes": "looks good"},
        headers=admin_headers,
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"
    assert approved.json()["reviewNotes"] == "looks good"

    again = client.post(f"/api/admin/background-checks/{check_id}/reject", headers=admin_headers)
    assert again.status_code == 409

    profile = client.get("/api/tutor/profile", headers=tutor_headers).json()
    assert profile["backgroundCheckStatus"] == "APPROVED"


def test_resubmitting_background_check_resets_review(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str]
) -> None:
    check_id = _submit_check(client, tutor_headers)
    client.post(f"/api/admin/background-checks/{check_id}/reject", headers=admin_headers)

    assert _submit_check(client, tutor_headers) == check_id
    pending = client.get("/api/admin/background-checks", params={"status": "PENDING"}, headers=admin_headers)
    assert len(pending.json()) == 1


def test_review_unknown_background_check(client: TestClient, admin_headers: dict[str, str]) -> None:
    resp = client.post("/api/admin/background-checks/4242/approve", headers=admin_headers)
    assert resp.status_code == 404


def test_settings_patch_changes_allowed_payout_methods(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str]
) -> None:
    defaults = client.get("/api/admin/settings", headers=admin_headers).json()
    assert defaults["withdrawMethods"] == ["Stripe Connect", "Bank Transfer"]
    assert defaults["sendProfileCompletionEmail"] is True

    patched = client.patch(
        "/api/admin/settings",
        json={"withdrawMethods": ["PayPal"], "emailSenderName": "JTutors Team"},
        headers=admin_headers,
    )
    assert patched.status_code == 200
    assert patched.json()["withdrawMethods"] == ["PayPal"]
    assert patched.json()["emailSenderName"] == "JTutors Team"
    assert patched.json()["emailSenderEmail"] == defaults["emailSenderEmail"]

    resp = client.put(
        "/api/tutor/profile/payout",
        json={"method": "Stripe Connect", "accountRef": "acct_1"},
        headers=tutor_headers,
    )
    assert resp.status_code == 400


def test_analytics_and_tutor_list(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str], login_as
) -> None:
    login_as("student@example.com", "STUDENT")
    subjects = client.get("/api/subjects", params={"category": "Mathematics"}).json()
    client.post("/api/tutor/profile/subjects", json={"subjectIds": [subjects[0]["id"]]}, headers=tutor_headers)
    _submit_check(client, tutor_headers)

    analytics = client.get("/api/admin/analytics", headers=admin_headers).json()
    assert analytics["users"] == 3
    assert analytics["tutors"] == 1
    assert analytics["students"] == 1
    assert analytics["pendingBackgroundChecks"] == 1
    assert analytics["averageTutorCompletion"] == 25.0
    assert analytics["popularSubjects"] == [{"name": subjects[0]["name"], "tutors": 1}]

    tutors = client.get("/api/admin/tutors", headers=admin_headers).json()
    assert len(tutors) == 1
    assert tutors[0]["profileCompletion"] == 25


def test_admin_can_add_subject(client: TestClient, admin_headers: dict[str, str]) -> None:
    created = client.post("/api/subjects", json={"name": "Astrophysics", "category": "Science"}, headers=admin_headers)
    assert created.status_code == 201
    duplicate = client.post("/api/subjects", json={"name": "astrophysics"}, headers=admin_headers)
    assert duplicate.status_code == 400
