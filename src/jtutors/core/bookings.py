from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from jtutors.core.transitions import (
    BOOKING_TRANSITIONS,
    CLASS_SESSION_TRANSITIONS,
    TransitionError,
    ensure_transition,
)
from jtutors.db.models import Booking, ClassSession, User
from jtutors.db.repositories import Repository

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def append_note(existing: str, note: str) -> str:
    if not note:
        return existing
    return f"{existing}\n{note}" if existing else note


class BookingService:
    """Student bookings and the class session created when a tutor confirms one.

    Users unrelated to a booking get ``LookupError``. A participant acting
    outside their role gets ``PermissionError``.
    """

    def __init__(self, session: Session):
        self.session = session
        self.repo = Repository(session)

    # bookings

    def create_booking(self, student: User, *, tutor_id: int, start_time: datetime, end_time: datetime) -> Booking:
        start_time, end_time = as_utc(start_time), as_utc(end_time)
        if end_time <= start_time:
            raise ValueError("End time must be after start time")
        if self.repo.get_tutor(tutor_id) is None:
            raise LookupError("Tutor not found")

        booking = self.repo.create_booking(
            student_user_id=student.id,
            tutor_id=tutor_id,
            start_time=start_time,
            end_time=end_time,
        )
        logger.info("Booking created booking_id=%s tutor_id=%s student_user_id=%s", booking.id, tutor_id, student.id)
        return booking

    def list_for_user(self, user: User) -> list[Booking]:
        if user.role == "STUDENT":
            return self.repo.list_bookings(student_user_id=user.id)
        if user.role == "TUTOR":
            tutor = self.repo.get_tutor_by_user(user.id)
            return self.repo.list_bookings(tutor_id=tutor.id) if tutor else []
        return self.repo.list_bookings()

    def confirm_booking(self, user: User, booking_id: int) -> tuple[Booking, ClassSession]:
        booking = self._booking_for(user, booking_id, student_allowed=False)
        ensure_transition("booking", BOOKING_TRANSITIONS, booking.status, "CONFIRMED")

        booking.status = "CONFIRMED"
        class_session = self.repo.create_class_session(booking.id)
        logger.info("Booking confirmed booking_id=%s class_session_id=%s", booking.id, class_session.id)
        return booking, class_session

    def cancel_booking(self, user: User, booking_id: int) -> Booking:
        booking = self._booking_for(user, booking_id, student_allowed=True)
        ensure_transition("booking", BOOKING_TRANSITIONS, booking.status, "CANCELLED")

        booking.status = "CANCELLED"
        self.repo.save(booking)
        logger.info("Booking cancelled booking_id=%s by user_id=%s", booking.id, user.id)
        return booking

    # class sessions

    def list_class_sessions_for_user(self, user: User) -> list[ClassSession]:
        if user.role == "STUDENT":
            return self.repo.list_class_sessions(student_user_id=user.id)
        if user.role == "TUTOR":
            tutor = self.repo.get_tutor_by_user(user.id)
            return self.repo.list_class_sessions(tutor_id=tutor.id) if tutor else []
        return self.repo.list_class_sessions()

    def complete_class_session(self, user: User, session_id: int, notes: str = "") -> ClassSession:
        item = self.repo.get_class_session(session_id)
        if item is None:
            raise LookupError("Class session not found")
        booking = self.repo.get_booking(item.booking_id)
        if booking is None or not self._is_booking_tutor(user, booking):
            if booking is not None and booking.student_user_id == user.id:
                raise PermissionError("Only the assigned tutor can complete this class")
            raise LookupError("Class session not found")

        if item.status == "COMPLETED":
            return item
        ensure_transition("class session", CLASS_SESSION_TRANSITIONS, item.status, "COMPLETED")

        item.status = "COMPLETED"
        item.completed_at = datetime.now(UTC)
        item.tutor_approved = True
        if notes:
            item.notes = notes
        self.repo.save(item)
        logger.info("Class session completed class_session_id=%s", item.id)
        return item

    def approve_class_session(self, session_id: int, notes: str = "") -> ClassSession:
        item = self.repo.get_class_session(session_id)
        if item is None:
            raise LookupError("Class session not found")
        if item.status != "COMPLETED" or not item.tutor_approved:
            raise TransitionError("Class must be completed and approved by tutor before admin approval")
        if item.admin_approved:
            return item

        item.admin_approved = True
        item.admin_approved_at = datetime.now(UTC)
        item.notes = append_note(item.notes, notes)
        self.repo.save(item)
        logger.info("Class session approved class_session_id=%s", item.id)
        return item

    def _is_booking_tutor(self, user: User, booking: Booking) -> bool:
        if user.role != "TUTOR":
            return False
        tutor = self.repo.get_tutor_by_user(user.id)
        return tutor is not None and tutor.id == booking.tutor_id

    def _booking_for(self, user: User, booking_id: int, *, student_allowed: bool) -> Booking:
        booking = self.repo.get_booking(booking_id)
        if booking is None:
            raise LookupError("Booking not found")
        if user.role == "ADMIN" or self._is_booking_tutor(user, booking):
            return booking
        if booking.student_user_id == user.id:
            if not student_allowed:
                raise PermissionError("Only the tutor or an admin can confirm this booking")
            return booking
        raise LookupError("Booking not found")
