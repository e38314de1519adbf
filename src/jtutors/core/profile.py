from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from jtutors.config import Settings, get_settings
from jtutors.core.completion import SectionPresence, completion_percentage, is_complete
from jtutors.core.events import EventBus
from jtutors.core.notifications import EmailNotifier
from jtutors.core.runtime import get_event_bus
from jtutors.db.models import Availability, BackgroundCheck, Education, Experience, Subject, Tutor
from jtutors.db.repositories import SECTION_MODELS, Repository
from jtutors.types import CompletionReport, ProfileChangeAction, ProfileChangeEvent, ProfileSectionName

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class MutationResult(Generic[T]):
    item: T
    completion: CompletionReport


def _parse_clock(value: str) -> time:
    try:
        return time.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"invalid time '{value}', expected HH:MM") from exc


class TutorProfileService:
    """Section mutators for a single tutor's profile.

    Every successful mutation recalculates the completion percentage, caches
    it on the tutor row and broadcasts a ``profile_updated`` event.
    """

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        event_bus: EventBus | None = None,
        notifier: EmailNotifier | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.event_bus = event_bus or get_event_bus()
        self.notifier = notifier or EmailNotifier(self.settings)

    # completion

    def collect_presence(self, tutor: Tutor) -> SectionPresence:
        personal = all(
            [tutor.first_name, tutor.last_name, tutor.hourly_fee, tutor.country, tutor.city]
        )
        return SectionPresence(
            personal_info=personal,
            experience=self.repo.count_section_rows(Experience, tutor.id) > 0,
            education=self.repo.count_section_rows(Education, tutor.id) > 0,
            subjects=len(self.repo.list_tutor_subjects(tutor.id)) > 0,
            availability=self.repo.count_section_rows(Availability, tutor.id) > 0,
            payout_method=bool(tutor.payout_account_ref) and tutor.payout_onboarded,
            background_check=self.repo.get_background_check(tutor.id) is not None,
            profile_photo=bool(tutor.profile_image),
        )

    def recalculate(self, tutor_id: int) -> CompletionReport:
        tutor = self._require_tutor(tutor_id)
        was_complete = tutor.profile_completed

        presence = self.collect_presence(tutor)
        percentage = completion_percentage(presence)
        complete = is_complete(percentage)
        self.repo.set_tutor_completion(tutor_id, percentage=percentage, completed=complete)
        logger.info("Profile completion tutor_id=%s percentage=%s", tutor_id, percentage)

        if complete and not was_complete:
            self._notify_profile_complete(tutor)

        return CompletionReport(
            tutor_id=tutor_id,
            percentage=percentage,
            completed=complete,
            sections=presence.as_dict(),
            missing_sections=presence.missing_sections(),
            redirect_to=self.settings.dashboard_redirect_path if complete else None,
            redirect_delay_ms=self.settings.dashboard_redirect_delay_ms if complete else None,
        )

    # personal information

    def update_personal_info(self, tutor_id: int, values: dict[str, Any]) -> MutationResult[Tutor]:
        self._require_tutor(tutor_id)
        fee = values.get("hourly_fee")
        if fee is not None and not (self.settings.min_hourly_fee <= fee <= self.settings.max_hourly_fee):
            raise ValueError(
                f"Hourly fee must be between ${self.settings.min_hourly_fee:g} "
                f"and ${self.settings.max_hourly_fee:g}"
            )

        payload = {key: value for key, value in values.items() if value is not None or key == "hourly_fee"}
        if "grades_can_teach" in payload:
            payload["grades_can_teach_json"] = list(payload.pop("grades_can_teach") or [])
        if "languages_spoken" in payload:
            payload["languages_spoken_json"] = list(payload.pop("languages_spoken") or [])

        tutor = self.repo.update_tutor(tutor_id, payload)
        report = self._after_mutation(tutor_id, "personal_info", "updated")
        return MutationResult(item=tutor, completion=report)

    # experience, education, availability

    def add_item(self, section: ProfileSectionName, tutor_id: int, values: dict[str, Any]) -> MutationResult:
        model = self._section_model(section)
        self._require_tutor(tutor_id)
        values = self._prepare_item_values(section, values)
        self._validate_item(section, values)

        item = self.repo.create_section_item(model, tutor_id, values)
        report = self._after_mutation(tutor_id, section, "created")
        return MutationResult(item=item, completion=report)

    def update_item(
        self,
        section: ProfileSectionName,
        tutor_id: int,
        item_id: int,
        values: dict[str, Any],
    ) -> MutationResult | None:
        model = self._section_model(section)
        existing = self.repo.get_section_item(model, tutor_id, item_id)
        if existing is None:
            return None

        values = self._prepare_item_values(section, values)
        merged = dict(values)
        bounds = ("start_time", "end_time") if section == "availability" else ("start_date", "end_date")
        for column in bounds:
            merged.setdefault(column, getattr(existing, column))
        self._validate_item(section, merged)

        item = self.repo.update_section_item(model, tutor_id, item_id, values)
        report = self._after_mutation(tutor_id, section, "updated")
        return MutationResult(item=item, completion=report)

    def delete_item(self, section: ProfileSectionName, tutor_id: int, item_id: int) -> CompletionReport | None:
        model = self._section_model(section)
        if not self.repo.delete_section_item(model, tutor_id, item_id):
            return None
        return self._after_mutation(tutor_id, section, "deleted")

    # subjects

    def add_subjects(self, tutor_id: int, subject_ids: list[int]) -> MutationResult[list[Subject]]:
        self._require_tutor(tutor_id)
        subjects = self.repo.add_tutor_subjects(tutor_id, subject_ids)
        report = self._after_mutation(tutor_id, "subjects", "created")
        return MutationResult(item=subjects, completion=report)

    def remove_subject(self, tutor_id: int, subject_id: int) -> CompletionReport:
        self._require_tutor(tutor_id)
        self.repo.remove_tutor_subject(tutor_id, subject_id)
        return self._after_mutation(tutor_id, "subjects", "deleted")

    # payout method

    def set_payout_method(self, tutor_id: int, *, method: str, account_ref: str) -> MutationResult[Tutor]:
        self._require_tutor(tutor_id)
        allowed = self.repo.get_admin_settings().withdraw_methods_json or []
        if method not in allowed:
            raise ValueError(f"payout method must be one of {allowed}")
        if not account_ref.strip():
            raise ValueError("payout account reference is required")

        tutor = self.repo.update_tutor(
            tutor_id,
            {"payout_method": method, "payout_account_ref": account_ref.strip(), "payout_onboarded": True},
        )
        report = self._after_mutation(tutor_id, "payout_method", "updated")
        return MutationResult(item=tutor, completion=report)

    def clear_payout_method(self, tutor_id: int) -> CompletionReport:
        self._require_tutor(tutor_id)
        self.repo.update_tutor(
            tutor_id, {"payout_method": "", "payout_account_ref": "", "payout_onboarded": False}
        )
        return self._after_mutation(tutor_id, "payout_method", "deleted")

    # background check

    def submit_background_check(self, tutor_id: int, values: dict[str, Any]) -> MutationResult[BackgroundCheck]:
        self._require_tutor(tutor_id)
        if not values.get("consent_given"):
            raise ValueError("Consent is required to submit background check")

        payload = dict(values)
        ssn = "".join(ch for ch in str(payload.pop("social_security_number", "") or "") if ch.isdigit())
        payload["ssn_last4"] = ssn[-4:]

        check = self.repo.upsert_background_check(tutor_id, payload)
        report = self._after_mutation(tutor_id, "background_check", "submitted")
        return MutationResult(item=check, completion=report)

    # internals

    def _require_tutor(self, tutor_id: int) -> Tutor:
        tutor = self.repo.get_tutor(tutor_id)
        if tutor is None:
            raise LookupError(f"tutor {tutor_id} not found")
        return tutor

    @staticmethod
    def _section_model(section: str) -> type:
        try:
            return SECTION_MODELS[section]
        except KeyError as exc:
            raise ValueError(f"unsupported profile section '{section}'") from exc

    @staticmethod
    def _prepare_item_values(section: str, values: dict[str, Any]) -> dict[str, Any]:
        payload = {key: value for key, value in values.items() if value is not None or key == "end_date"}
        if section == "availability" and "days_available" in payload:
            payload["days_available_json"] = list(payload.pop("days_available") or [])
        return payload

    @staticmethod
    def _validate_item(section: str, values: dict[str, Any]) -> None:
        if section == "availability":
            start = _parse_clock(values["start_time"])
            end = _parse_clock(values["end_time"])
            if end <= start:
                raise ValueError("end time must be after start time")
            if "days_available_json" in values and not values["days_available_json"]:
                raise ValueError("at least one available day is required")
            return

        start_date = values.get("start_date")
        end_date = values.get("end_date")
        if start_date and end_date and end_date < start_date:
            raise ValueError("end date must not be before start date")

    def _after_mutation(
        self,
        tutor_id: int,
        section: ProfileSectionName,
        action: ProfileChangeAction,
    ) -> CompletionReport:
        report = self.recalculate(tutor_id)
        logger.info("Profile section changed tutor_id=%s section=%s action=%s", tutor_id, section, action)
        event = ProfileChangeEvent(
            tutor_id=tutor_id,
            section=section,
            action=action,
            profile_completion=report.percentage,
        )
        self.event_bus.publish(tutor_id, event.model_dump(by_alias=True))
        return report

    def _notify_profile_complete(self, tutor: Tutor) -> None:
        admin_settings = self.repo.get_admin_settings()
        if not admin_settings.send_profile_completion_email:
            return
        user = self.repo.get_user(tutor.user_id)
        if user is None or not user.email:
            return
        self.notifier.send_profile_complete(
            to=user.email,
            sender_name=admin_settings.email_sender_name,
            sender_email=admin_settings.email_sender_email,
        )
