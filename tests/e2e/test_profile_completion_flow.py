import time

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from jtutors.api.app import create_app
from jtutors.core.runtime import get_event_bus


def _register_tutor(client: TestClient, email: str) -> tuple[str, dict[str, str]]:
    client.post("/api/auth/register", json={"email": email, "password": "pass-word-1", "role": "tutor"})
    token = client.post("/api/auth/login", json={"email": email, "password": "pass-word-1"}).json()["accessToken"]
    return token, {"Authorization": f"Bearer {token}"}


def test_tutor_walks_every_section_to_100() -> None:
    client = TestClient(create_app())
    _, headers = _register_tutor(client, "walkthrough@example.com")

    subjects = client.get("/api/subjects").json()
    steps = [
        lambda: client.put(
            "/api/tutor/profile/personal",
            json={
                "firstName": "Marie",
                "lastName": "Curie",
                "hourlyFee": 80,
                "country": "France",
                "city": "Paris",
                "tagline": "Physics and chemistry",
            },
            headers=headers,
        ),
        lambda: client.post(
            "/api/tutor/profile/experience",
            json={"jobTitle": "Lab Instructor", "company": "Sorbonne", "startDate": "2015-01-01"},
            headers=headers,
        ),
        lambda: client.post(
            "/api/tutor/profile/education",
            json={"degreeTitle": "PhD Physics", "university": "Sorbonne", "startDate": "2008-10-01", "endDate": "2012-06-30"},
            headers=headers,
        ),
        lambda: client.post(
            "/api/tutor/profile/subjects",
            json={"subjectIds": [subjects[0]["id"], subjects[1]["id"]]},
            headers=headers,
        ),
        lambda: client.post(
            "/api/tutor/profile/availability",
            json={
                "daysAvailable": ["Saturday", "Sunday"],
                "startTime": "10:00",
                "endTime": "14:00",
                "sessionDuration": 45,
                "breakTime": 15,
                "numberOfSlots": 3,
            },
            headers=headers,
        ),
        lambda: client.put(
            "/api/tutor/profile/payout",
            json={"method": "Bank Transfer", "accountRef": "FR76-0000"},
            headers=headers,
        ),
        lambda: client.post(
            "/api/tutor/profile/background-check",
            json={
                "fullLegalFirstName": "Marie",
                "fullLegalLastName": "Curie",
                "dateOfBirth": "1980-11-07",
                "socialSecurityNumber": "111-22-3333",
                "consentGiven": True,
            },
            headers=headers,
        ),
        lambda: client.put(
            "/api/tutor/profile/personal",
            json={"profileImage": "https://cdn.example.com/marie.png"},
            headers=headers,
        ),
    ]

    seen = []
    for step in steps:
        resp = step()
        assert resp.status_code in (200, 201), resp.text
        seen.append(resp.json()["profileCompletion"])
    assert seen == [12, 25, 37, 50, 62, 75, 87, 100]

    report = client.get("/api/tutor/profile/completion", headers=headers).json()
    assert report["profileCompletion"] == 100
    assert report["completed"] is True
    assert report["missingSections"] == []
    assert report["redirectTo"] == "/tutor/dashboard"
    assert report["redirectDelayMs"] == 2000

    me = client.get("/api/auth/me", headers=headers).json()
    assert me["profileCompletion"] == 100
    assert me["tutor"]["profileCompleted"] is True
    assert len(me["tutor"]["subjects"]) == 2
    assert me["tutor"]["backgroundCheckStatus"] == "PENDING"


def _wait_for_subscriber(tutor_id: int, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while get_event_bus().subscriber_count(tutor_id) == 0:
        if time.monotonic() > deadline:
            raise AssertionError("stream subscriber never registered")
        time.sleep(0.01)


def test_profile_stream_pushes_updates_to_the_tutor() -> None:
    client = TestClient(create_app())
    token, headers = _register_tutor(client, "streamer@example.com")
    tutor_id = client.get("/api/tutor/profile", headers=headers).json()["id"]

    with client.websocket_connect(f"/api/tutor/profile/stream?token={token}") as websocket:
        _wait_for_subscriber(tutor_id)
        client.put(
            "/api/tutor/profile/personal",
            json={"profileImage": "https://cdn.example.com/me.png"},
            headers=headers,
        )
        event = websocket.receive_json()

    assert event == {
        "type": "profile_updated",
        "tutorId": tutor_id,
        "section": "personal_info",
        "action": "updated",
        "profileCompletion": 12,
    }


def test_profile_stream_rejects_unknown_token() -> None:
    client = TestClient(create_app())
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/tutor/profile/stream?token=nope") as websocket:
            websocket.receive_json()


def test_profile_stream_unsubscribes_when_client_leaves() -> None:
    client = TestClient(create_app())
    token, headers = _register_tutor(client, "leaver@example.com")
    tutor_id = client.get("/api/tutor/profile", headers=headers).json()["id"]

    with client.websocket_connect(f"/api/tutor/profile/stream?token={token}"):
        _wait_for_subscriber(tutor_id)

    deadline = time.monotonic() + 2.0
    while get_event_bus().subscriber_count(tutor_id) != 0:
        if time.monotonic() > deadline:
            raise AssertionError("stream subscriber was not released after disconnect")
        time.sleep(0.01)

    # publishing afterwards reaches nobody
    resp = client.put(
        "/api/tutor/profile/personal",
        json={"profileImage": "https://cdn.example.com/gone.png"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert get_event_bus().subscriber_count(tutor_id) == 0
