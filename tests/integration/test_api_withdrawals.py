import pytest
from fastapi.testclient import TestClient


def _request(client: TestClient, headers: dict[str, str], amount: float = 120.0) -> dict:
    resp = client.post("/api/withdrawals", json={"amount": amount, "notes": "October"}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _set_payout(client: TestClient, tutor_headers: dict[str, str]) -> None:
    resp = client.put(
        "/api/tutor/profile/payout",
        json={"method": "Bank Transfer", "accountRef": "GB00-1234"},
        headers=tutor_headers,
    )
    assert resp.status_code == 200, resp.text


def test_tutor_withdrawal_full_lifecycle(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str]
) -> None:
    _set_payout(client, tutor_headers)
    item = _request(client, tutor_headers)
    assert item["status"] == "PENDING"
    assert item["userType"] == "TUTOR"
    wid = item["id"]

    approved = client.post(f"/api/admin/withdrawals/{wid}/approve", json={"notes": "ok"}, headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"
    assert approved.json()["notes"] == "October\nok"
    assert approved.json()["approvedAt"] is not None

    processing = client.post(f"/api/admin/withdrawals/{wid}/process", headers=admin_headers)
    assert processing.status_code == 200
    assert processing.json()["status"] == "PROCESSING"
    assert processing.json()["payoutReference"] == "GB00-1234"

    completed = client.post(
        f"/api/admin/withdrawals/{wid}/complete", json={"payoutReference": "po_42"}, headers=admin_headers
    )
    assert completed.status_code == 200
    assert completed.json()["status"] == "COMPLETED"
    assert completed.json()["payoutReference"] == "po_42"

    mine = client.get("/api/withdrawals/my", headers=tutor_headers).json()
    assert [row["status"] for row in mine] == ["COMPLETED"]


@pytest.mark.parametrize(
    ("steps", "illegal"),
    [
        ([], "process"),
        ([], "complete"),
        (["approve"], "reject"),
        (["approve"], "approve"),
        (["approve"], "complete"),
        (["reject"], "approve"),
        (["reject"], "process"),
        (["approve", "process"], "reject"),
        (["approve", "process", "complete"], "process"),
    ],
)
def test_illegal_withdrawal_transitions_conflict(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str], steps, illegal
) -> None:
    _set_payout(client, tutor_headers)
    wid = _request(client, tutor_headers)["id"]
    for step in steps:
        assert client.post(f"/api/admin/withdrawals/{wid}/{step}", headers=admin_headers).status_code == 200

    before = client.get("/api/withdrawals/my", headers=tutor_headers).json()[0]["status"]
    resp = client.post(f"/api/admin/withdrawals/{wid}/{illegal}", headers=admin_headers)
    assert resp.status_code == 409
    assert client.get("/api/withdrawals/my", headers=tutor_headers).json()[0]["status"] == before


def test_reject_records_reason(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str]
) -> None:
    wid = _request(client, tutor_headers)["id"]
    rejected = client.post(
        f"/api/admin/withdrawals/{wid}/reject", json={"reason": "insufficient balance"}, headers=admin_headers
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "REJECTED"
    assert rejected.json()["notes"] == "October\nRejection reason: insufficient balance"


def test_processing_requires_payout_account(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str]
) -> None:
    wid = _request(client, tutor_headers)["id"]
    client.post(f"/api/admin/withdrawals/{wid}/approve", headers=admin_headers)

    resp = client.post(f"/api/admin/withdrawals/{wid}/process", headers=admin_headers)
    assert resp.status_code == 400
    listed = client.get("/api/admin/withdrawals", params={"status": "APPROVED"}, headers=admin_headers).json()
    assert [row["id"] for row in listed] == [wid]


def test_withdrawal_access_rules(
    client: TestClient, tutor_headers: dict[str, str], admin_headers: dict[str, str], login_as
) -> None:
    student = login_as("student@example.com", "STUDENT")
    assert client.post("/api/withdrawals", json={"amount": 10}, headers=student).status_code == 403
    assert client.post("/api/withdrawals", json={"amount": -5}, headers=tutor_headers).status_code == 422

    wid = _request(client, tutor_headers)["id"]
    assert client.post(f"/api/admin/withdrawals/{wid}/approve", headers=tutor_headers).status_code == 403
    assert client.post("/api/admin/withdrawals/4242/approve", headers=admin_headers).status_code == 404

    admin_item = _request(client, admin_headers, amount=50)
    assert admin_item["userType"] == "ADMIN"
    assert [row["id"] for row in client.get("/api/withdrawals/my", headers=tutor_headers).json()] == [wid]
