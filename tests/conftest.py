from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

# the engine binds DATABASE_URL at import time, before any pytest fixture runs
_TEST_DIR = Path(tempfile.mkdtemp(prefix="jtutors-tests-"))
_TEST_DB = _TEST_DIR / "jtutors.db"
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DB}")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from jtutors.api.app import create_app
from jtutors.db.base import Base
from jtutors.db.seed import seed_admin_settings, seed_subjects
from jtutors.db.session import SessionLocal, engine


def pytest_sessionfinish(session, exitstatus) -> None:
    engine.dispose()
    shutil.rmtree(_TEST_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_subjects(session)
        seed_admin_settings(session)
    yield


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())


def register_and_login(client: TestClient, email: str, role: str, password: str = "s3cret-pass") -> dict[str, str]:
    register_resp = client.post("/api/auth/register", json={"email": email, "password": password, "role": role})
    assert register_resp.status_code == 201, register_resp.text
    login_resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert login_resp.status_code == 200, login_resp.text
    return {"Authorization": f"Bearer {login_resp.json()['accessToken']}"}


@pytest.fixture()
def tutor_headers(client: TestClient) -> dict[str, str]:
    return register_and_login(client, "tutor@example.com", "TUTOR")


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    return register_and_login(client, "admin@example.com", "ADMIN")


@pytest.fixture()
def login_as(client: TestClient):
    def _login(email: str, role: str, password: str = "s3cret-pass") -> dict[str, str]:
        return register_and_login(client, email, role, password)

    return _login
