import logging
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi_mail import FastMail

from jtutors.config import get_settings
from jtutors.core.notifications import EmailNotifier


@pytest.fixture()
def executor():
    pool = ThreadPoolExecutor(max_workers=1)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture()
def smtp_settings():
    return get_settings().model_copy(update={"smtp_host": "smtp.test", "frontend_url": "https://app.jtutors.test/"})


def test_disabled_email_returns_none(executor) -> None:
    settings = get_settings().model_copy(update={"smtp_host": ""})
    notifier = EmailNotifier(settings, executor)
    assert notifier.send_profile_complete(to="a@example.com", sender_name="J", sender_email="j@example.com") is None


def test_send_returns_before_delivery_finishes(monkeypatch, executor, smtp_settings) -> None:
    async def slow_send(self, message, template_name=None):
        time.sleep(1.0)

    monkeypatch.setattr(FastMail, "send_message", slow_send)
    notifier = EmailNotifier(smtp_settings, executor)

    started = time.monotonic()
    future = notifier.send_profile_complete(to="a@example.com", sender_name="J Tutors", sender_email="info@jtutors.com")
    assert time.monotonic() - started < 0.5
    assert future is not None
    assert future.result(timeout=5) is True


def test_delivery_failure_is_logged_not_raised(monkeypatch, executor, smtp_settings, caplog) -> None:
    async def broken_send(self, message, template_name=None):
        raise ValueError("header injection")

    monkeypatch.setattr(FastMail, "send_message", broken_send)
    notifier = EmailNotifier(smtp_settings, executor)

    with caplog.at_level(logging.ERROR, logger="jtutors.core.notifications"):
        future = notifier.send_signup_confirmation(to="a@example.com", sender_name="J", sender_email="info@jtutors.com")
        assert future.result(timeout=5) is False

    assert "Failed to send email" in caplog.text


def test_bad_sender_address_resolves_to_false(monkeypatch, executor, smtp_settings) -> None:
    sent = []

    async def record(self, message, template_name=None):
        sent.append(message)

    monkeypatch.setattr(FastMail, "send_message", record)
    notifier = EmailNotifier(smtp_settings, executor)

    future = notifier.send_profile_complete(to="a@example.com", sender_name="J", sender_email="bogus\r\nBcc: x@y.z")
    assert future.result(timeout=5) is False
    assert sent == []


def test_bodies_link_to_the_frontend(monkeypatch, executor, smtp_settings) -> None:
    sent = []

    async def record(self, message, template_name=None):
        sent.append(message)

    monkeypatch.setattr(FastMail, "send_message", record)
    notifier = EmailNotifier(smtp_settings, executor)

    notifier.send_profile_complete(to="a@example.com", sender_name="J", sender_email="info@jtutors.com").result(timeout=5)
    notifier.send_signup_confirmation(to="b@example.com", sender_name="J", sender_email="info@jtutors.com").result(timeout=5)

    assert "https://app.jtutors.test/tutor/dashboard" in sent[0].body
    assert "https://app.jtutors.test/login" in sent[1].body
    assert sent[1].subject == "Welcome to JTutor"
