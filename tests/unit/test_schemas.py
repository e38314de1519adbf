import pytest
from pydantic import ValidationError

from jtutors.api.schemas import (
    AdminSettingsUpdateRequest,
    AvailabilityRequest,
    BackgroundCheckRequest,
    ExperienceRequest,
    WithdrawalCreateRequest,
)
from jtutors.types import ProfileChangeEvent


def test_requests_accept_camel_and_snake_case() -> None:
    camel = ExperienceRequest.model_validate(
        {"jobTitle": "Math Tutor", "company": "Acme", "startDate": "2020-01-01"}
    )
    snake = ExperienceRequest.model_validate(
        {"job_title": "Math Tutor", "company": "Acme", "start_date": "2020-01-01"}
    )
    assert camel == snake
    assert camel.model_dump(by_alias=True)["jobTitle"] == "Math Tutor"


def test_experience_requires_title_and_start_date() -> None:
    with pytest.raises(ValidationError):
        ExperienceRequest.model_validate({"company": "Acme", "startDate": "2020-01-01"})
    with pytest.raises(ValidationError):
        ExperienceRequest.model_validate({"jobTitle": "Tutor", "company": "Acme"})


def test_availability_rejects_bad_clock_values_and_days() -> None:
    base = {"daysAvailable": ["Monday"], "startTime": "09:00", "endTime": "12:00", "sessionDuration": 60}
    assert AvailabilityRequest.model_validate(base).number_of_slots == 1
    with pytest.raises(ValidationError):
        AvailabilityRequest.model_validate(base | {"startTime": "25:00"})
    with pytest.raises(ValidationError):
        AvailabilityRequest.model_validate(base | {"daysAvailable": ["Someday"]})
    with pytest.raises(ValidationError):
        AvailabilityRequest.model_validate(base | {"daysAvailable": []})


def test_background_check_ssn_format() -> None:
    payload = {
        "fullLegalFirstName": "Ada",
        "fullLegalLastName": "Lovelace",
        "dateOfBirth": "1990-12-10",
        "socialSecurityNumber": "123-45-6789",
    }
    assert BackgroundCheckRequest.model_validate(payload).consent_given is False
    with pytest.raises(ValidationError):
        BackgroundCheckRequest.model_validate(payload | {"socialSecurityNumber": "12-345"})


def test_profile_change_event_serializes_with_camel_keys() -> None:
    event = ProfileChangeEvent(tutor_id=3, section="education", action="created", profile_completion=25)
    assert event.model_dump(by_alias=True) == {
        "type": "profile_updated",
        "tutorId": 3,
        "section": "education",
        "action": "created",
        "profileCompletion": 25,
    }


@pytest.mark.parametrize(
    "payload",
    [
        {"emailSenderName": "J Tutors\r\nBcc: victim@example.com"},
        {"emailSenderName": "J Tutors\nX-Injected: 1"},
        {"emailSenderEmail": "info@jtutors.com\r\nBcc: victim@example.com"},
        {"emailSenderEmail": "not-an-email"},
    ],
)
def test_admin_settings_reject_unsafe_sender_values(payload) -> None:
    with pytest.raises(ValidationError):
        AdminSettingsUpdateRequest.model_validate(payload)


def test_admin_settings_accept_plain_sender_values() -> None:
    parsed = AdminSettingsUpdateRequest.model_validate(
        {"emailSenderName": "JTutors Team", "emailSenderEmail": "team@jtutors.com"}
    )
    assert parsed.email_sender_name == "JTutors Team"
    assert parsed.email_sender_email == "team@jtutors.com"


def test_withdrawal_amount_must_be_positive() -> None:
    assert WithdrawalCreateRequest.model_validate({"amount": 25}).currency == "USD"
    with pytest.raises(ValidationError):
        WithdrawalCreateRequest.model_validate({"amount": 0})
