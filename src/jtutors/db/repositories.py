from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, TypeVar

from sqlalchemy import and_, delete, func, select
from sqlalchemy.orm import Session

from jtutors.core.transitions import BACKGROUND_CHECK_TRANSITIONS, ensure_transition
from jtutors.db.models import (
    AdminSettings,
    AuthSession,
    Availability,
    BackgroundCheck,
    Booking,
    ClassSession,
    Education,
    Experience,
    Subject,
    Tutor,
    TutorSubject,
    User,
    Withdrawal,
)
from jtutors.types import DEFAULT_WITHDRAW_METHODS, AnalyticsSummary

SectionItem = TypeVar("SectionItem", Experience, Education, Availability)

SECTION_MODELS: dict[str, type] = {
    "experience": Experience,
    "education": Education,
    "availability": Availability,
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


class Repository:
    def __init__(self, session: Session):
        self.session = session

    # users and sessions

    def create_user(self, *, email: str, password_hash: str, role: str) -> User:
        user = User(email=normalize_email(email), password_hash=password_hash, role=role)
        self.session.add(user)
        self.session.flush()
        if role == "TUTOR":
            self.session.add(Tutor(user_id=user.id))
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == normalize_email(email)))

    def create_auth_session(self, *, user_id: int, token_hash: str, expires_at: datetime) -> AuthSession:
        item = AuthSession(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def get_user_by_token_hash(self, token_hash: str) -> User | None:
        statement = (
            select(User)
            .join(AuthSession, AuthSession.user_id == User.id)
            .where(
                and_(
                    AuthSession.token_hash == token_hash,
                    AuthSession.expires_at > datetime.now(UTC),
                    User.is_active.is_(True),
                )
            )
        )
        return self.session.scalar(statement)

    def delete_auth_session(self, token_hash: str) -> None:
        self.session.execute(delete(AuthSession).where(AuthSession.token_hash == token_hash))
        self.session.commit()

    # tutors

    def get_tutor(self, tutor_id: int) -> Tutor | None:
        return self.session.get(Tutor, tutor_id)

    def get_tutor_by_user(self, user_id: int) -> Tutor | None:
        return self.session.scalar(select(Tutor).where(Tutor.user_id == user_id))

    def list_tutors(self, limit: int = 100) -> list[Tutor]:
        statement = select(Tutor).order_by(Tutor.created_at.desc(), Tutor.id.desc()).limit(limit)
        return list(self.session.scalars(statement).all())

    def search_tutors(
        self,
        *,
        subject: str | None = None,
        min_fee: float | None = None,
        max_fee: float | None = None,
        city: str | None = None,
        country: str | None = None,
        limit: int = 50,
    ) -> list[Tutor]:
        statement = select(Tutor)
        if subject:
            statement = (
                statement.join(TutorSubject, TutorSubject.tutor_id == Tutor.id)
                .join(Subject, Subject.id == TutorSubject.subject_id)
                .where(func.lower(Subject.name) == subject.strip().lower())
            )
        if min_fee is not None:
            statement = statement.where(Tutor.hourly_fee >= min_fee)
        if max_fee is not None:
            statement = statement.where(Tutor.hourly_fee <= max_fee)
        if city:
            statement = statement.where(Tutor.city == city)
        if country:
            statement = statement.where(Tutor.country == country)
        statement = statement.order_by(Tutor.created_at.desc(), Tutor.id.desc()).limit(limit)
        return list(self.session.scalars(statement).unique().all())

    def update_tutor(self, tutor_id: int, values: dict[str, Any]) -> Tutor:
        tutor = self.session.get(Tutor, tutor_id)
        if not tutor:
            raise ValueError(f"tutor {tutor_id} not found")
        for key, value in values.items():
            setattr(tutor, key, value)
        self.session.commit()
        self.session.refresh(tutor)
        return tutor

    def set_tutor_completion(self, tutor_id: int, *, percentage: int, completed: bool) -> Tutor:
        tutor = self.session.get(Tutor, tutor_id)
        if not tutor:
            raise ValueError(f"tutor {tutor_id} not found")
        if tutor.profile_completion_percentage != percentage or tutor.profile_completed != completed:
            tutor.profile_completion_percentage = percentage
            tutor.profile_completed = completed
            self.session.commit()
            self.session.refresh(tutor)
        return tutor

    def count_section_rows(self, model: type, tutor_id: int) -> int:
        statement = select(func.count()).select_from(model).where(model.tutor_id == tutor_id)
        return int(self.session.scalar(statement) or 0)

    # experience, education, availability

    def list_section_items(self, model: type[SectionItem], tutor_id: int) -> list[SectionItem]:
        statement = select(model).where(model.tutor_id == tutor_id).order_by(model.id.asc())
        return list(self.session.scalars(statement).all())

    def get_section_item(self, model: type[SectionItem], tutor_id: int, item_id: int) -> SectionItem | None:
        return self.session.scalar(
            select(model).where(and_(model.id == item_id, model.tutor_id == tutor_id))
        )

    def create_section_item(
        self, model: type[SectionItem], tutor_id: int, values: dict[str, Any]
    ) -> SectionItem:
        item = model(tutor_id=tutor_id, **values)
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def update_section_item(
        self,
        model: type[SectionItem],
        tutor_id: int,
        item_id: int,
        values: dict[str, Any],
    ) -> SectionItem | None:
        item = self.get_section_item(model, tutor_id, item_id)
        if item is None:
            return None
        for key, value in values.items():
            setattr(item, key, value)
        self.session.commit()
        self.session.refresh(item)
        return item

    def delete_section_item(self, model: type[SectionItem], tutor_id: int, item_id: int) -> bool:
        item = self.get_section_item(model, tutor_id, item_id)
        if item is None:
            return False
        self.session.delete(item)
        self.session.commit()
        return True

    # subjects

    def list_subjects(self, category: str | None = None) -> list[Subject]:
        statement = select(Subject)
        if category:
            statement = statement.where(Subject.category == category)
        statement = statement.order_by(Subject.category.asc(), Subject.name.asc())
        return list(self.session.scalars(statement).all())

    def get_subject(self, subject_id: int) -> Subject | None:
        return self.session.get(Subject, subject_id)

    def get_subject_by_name(self, name: str) -> Subject | None:
        return self.session.scalar(select(Subject).where(func.lower(Subject.name) == name.strip().lower()))

    def create_subject(self, *, name: str, category: str = "") -> Subject:
        if self.get_subject_by_name(name):
            raise ValueError(f"subject '{name}' already exists")
        subject = Subject(name=name.strip(), category=category.strip())
        self.session.add(subject)
        self.session.commit()
        self.session.refresh(subject)
        return subject

    def list_tutor_subjects(self, tutor_id: int) -> list[Subject]:
        statement = (
            select(Subject)
            .join(TutorSubject, TutorSubject.subject_id == Subject.id)
            .where(TutorSubject.tutor_id == tutor_id)
            .order_by(TutorSubject.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def add_tutor_subjects(self, tutor_id: int, subject_ids: list[int]) -> list[Subject]:
        requested = list(dict.fromkeys(subject_ids))
        for subject_id in requested:
            if self.session.get(Subject, subject_id) is None:
                raise LookupError(f"subject {subject_id} not found")

        existing = {subject.id for subject in self.list_tutor_subjects(tutor_id)}
        for subject_id in requested:
            if subject_id in existing:
                continue
            self.session.add(TutorSubject(tutor_id=tutor_id, subject_id=subject_id))
            existing.add(subject_id)
        self.session.commit()
        return self.list_tutor_subjects(tutor_id)

    def remove_tutor_subject(self, tutor_id: int, subject_id: int) -> int:
        result = self.session.execute(
            delete(TutorSubject).where(
                and_(TutorSubject.tutor_id == tutor_id, TutorSubject.subject_id == subject_id)
            )
        )
        self.session.commit()
        return result.rowcount or 0

    # background checks

    def get_background_check(self, tutor_id: int) -> BackgroundCheck | None:
        return self.session.scalar(select(BackgroundCheck).where(BackgroundCheck.tutor_id == tutor_id))

    def get_background_check_by_id(self, check_id: int) -> BackgroundCheck | None:
        return self.session.get(BackgroundCheck, check_id)

    def upsert_background_check(self, tutor_id: int, values: dict[str, Any]) -> BackgroundCheck:
        existing = self.get_background_check(tutor_id)
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            obj = existing
        else:
            obj = BackgroundCheck(tutor_id=tutor_id, **values)
            self.session.add(obj)

        obj.status = "PENDING"
        obj.reviewed_at = None
        obj.review_notes = ""
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def list_background_checks(self, status: str | None = None) -> list[BackgroundCheck]:
        statement = select(BackgroundCheck)
        if status:
            statement = statement.where(BackgroundCheck.status == status)
        statement = statement.order_by(BackgroundCheck.id.asc())
        return list(self.session.scalars(statement).all())

    def set_background_check_status(self, check_id: int, status: str, notes: str = "") -> BackgroundCheck:
        check = self.session.get(BackgroundCheck, check_id)
        if not check:
            raise LookupError(f"background check {check_id} not found")
        ensure_transition("background check", BACKGROUND_CHECK_TRANSITIONS, check.status, status)
        check.status = status
        check.review_notes = notes
        check.reviewed_at = datetime.now(UTC)
        self.session.commit()
        self.session.refresh(check)
        return check

    # bookings and class sessions

    def create_booking(
        self, *, student_user_id: int, tutor_id: int, start_time: datetime, end_time: datetime
    ) -> Booking:
        booking = Booking(
            student_user_id=student_user_id,
            tutor_id=tutor_id,
            start_time=start_time,
            end_time=end_time,
            status="PENDING",
        )
        self.session.add(booking)
        self.session.commit()
        self.session.refresh(booking)
        return booking

    def get_booking(self, booking_id: int) -> Booking | None:
        return self.session.get(Booking, booking_id)

    def list_bookings(self, *, student_user_id: int | None = None, tutor_id: int | None = None) -> list[Booking]:
        statement = select(Booking)
        if student_user_id is not None:
            statement = statement.where(Booking.student_user_id == student_user_id)
        if tutor_id is not None:
            statement = statement.where(Booking.tutor_id == tutor_id)
        statement = statement.order_by(Booking.start_time.desc(), Booking.id.desc())
        return list(self.session.scalars(statement).all())

    def create_class_session(self, booking_id: int) -> ClassSession:
        item = ClassSession(booking_id=booking_id, status="SCHEDULED")
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def get_class_session(self, session_id: int) -> ClassSession | None:
        return self.session.get(ClassSession, session_id)

    def get_class_session_by_booking(self, booking_id: int) -> ClassSession | None:
        return self.session.scalar(select(ClassSession).where(ClassSession.booking_id == booking_id))

    def list_class_sessions(
        self,
        *,
        tutor_id: int | None = None,
        student_user_id: int | None = None,
        status: str | None = None,
        admin_approved: bool | None = None,
    ) -> list[ClassSession]:
        statement = select(ClassSession).join(Booking, Booking.id == ClassSession.booking_id)
        if tutor_id is not None:
            statement = statement.where(Booking.tutor_id == tutor_id)
        if student_user_id is not None:
            statement = statement.where(Booking.student_user_id == student_user_id)
        if status:
            statement = statement.where(ClassSession.status == status)
        if admin_approved is not None:
            statement = statement.where(ClassSession.admin_approved.is_(admin_approved))
        statement = statement.order_by(ClassSession.id.asc())
        return list(self.session.scalars(statement).all())

    # withdrawals

    def create_withdrawal(
        self, *, user_id: int, user_type: str, amount: float, currency: str, notes: str
    ) -> Withdrawal:
        item = Withdrawal(
            user_id=user_id,
            user_type=user_type,
            amount=amount,
            currency=currency,
            notes=notes,
            status="PENDING",
            requested_at=datetime.now(UTC),
        )
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def get_withdrawal(self, withdrawal_id: int) -> Withdrawal | None:
        return self.session.get(Withdrawal, withdrawal_id)

    def list_withdrawals(self, *, user_id: int | None = None, status: str | None = None) -> list[Withdrawal]:
        statement = select(Withdrawal)
        if user_id is not None:
            statement = statement.where(Withdrawal.user_id == user_id)
        if status:
            statement = statement.where(Withdrawal.status == status)
        statement = statement.order_by(Withdrawal.requested_at.desc(), Withdrawal.id.desc())
        return list(self.session.scalars(statement).all())

    def save(self, obj: Any) -> Any:
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    # admin settings

    def get_admin_settings(self) -> AdminSettings:
        existing = self.session.scalar(select(AdminSettings).order_by(AdminSettings.id.asc()))
        if existing:
            return existing

        settings = AdminSettings(withdraw_methods_json=list(DEFAULT_WITHDRAW_METHODS))
        self.session.add(settings)
        self.session.commit()
        self.session.refresh(settings)
        return settings

    def update_admin_settings(self, values: dict[str, Any]) -> AdminSettings:
        settings = self.get_admin_settings()
        for key, value in values.items():
            setattr(settings, key, value)
        self.session.commit()
        self.session.refresh(settings)
        return settings

    # analytics

    def analytics_summary(self, popular_limit: int = 5) -> AnalyticsSummary:
        role_counts = dict(
            self.session.execute(select(User.role, func.count()).group_by(User.role)).all()
        )
        average = self.session.scalar(select(func.avg(Tutor.profile_completion_percentage)))
        completed = self.session.scalar(
            select(func.count()).select_from(Tutor).where(Tutor.profile_completed.is_(True))
        )
        pending_checks = self.session.scalar(
            select(func.count()).select_from(BackgroundCheck).where(BackgroundCheck.status == "PENDING")
        )
        popular_rows = self.session.execute(
            select(Subject.name, func.count(TutorSubject.id).label("tutors"))
            .join(TutorSubject, TutorSubject.subject_id == Subject.id)
            .group_by(Subject.id, Subject.name)
            .order_by(func.count(TutorSubject.id).desc(), Subject.name.asc())
            .limit(popular_limit)
        ).all()

        return AnalyticsSummary(
            users=sum(role_counts.values()),
            tutors=role_counts.get("TUTOR", 0),
            students=role_counts.get("STUDENT", 0),
            average_tutor_completion=round(float(average or 0), 2),
            completed_tutors=int(completed or 0),
            pending_background_checks=int(pending_checks or 0),
            popular_subjects=[{"name": name, "tutors": count} for name, count in popular_rows],
        )
