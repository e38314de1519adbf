from __future__ import annotations

from jtutors.api.schemas import (
    AdminSettingsResponse,
    AvailabilityResponse,
    BackgroundCheckResponse,
    BookingResponse,
    ClassSessionResponse,
    CompletionResponse,
    EducationResponse,
    ExperienceResponse,
    SubjectResponse,
    TutorProfileResponse,
    TutorSummaryResponse,
    UserResponse,
    WithdrawalResponse,
)
from jtutors.core.security import mask_ssn
from jtutors.db.models import (
    AdminSettings,
    Availability,
    BackgroundCheck,
    Booking,
    ClassSession,
    Education,
    Experience,
    Subject,
    Tutor,
    User,
    Withdrawal,
)
from jtutors.db.repositories import Repository
from jtutors.types import CompletionReport


def user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, role=user.role, is_active=user.is_active)


def subject_response(subject: Subject) -> SubjectResponse:
    return SubjectResponse(id=subject.id, name=subject.name, category=subject.category)


def experience_response(row: Experience) -> ExperienceResponse:
    return ExperienceResponse(
        id=row.id,
        job_title=row.job_title,
        company=row.company,
        location=row.location,
        start_date=row.start_date,
        end_date=row.end_date,
        is_current=row.is_current,
        teaching_mode=row.teaching_mode,
        description=row.description,
    )


def education_response(row: Education) -> EducationResponse:
    return EducationResponse(
        id=row.id,
        degree_title=row.degree_title,
        university=row.university,
        location=row.location,
        start_date=row.start_date,
        end_date=row.end_date,
        is_ongoing=row.is_ongoing,
    )


def availability_response(row: Availability) -> AvailabilityResponse:
    return AvailabilityResponse(
        id=row.id,
        block_title=row.block_title,
        days_available=list(row.days_available_json or []),
        start_time=row.start_time,
        end_time=row.end_time,
        break_time=row.break_time,
        session_duration=row.session_duration,
        number_of_slots=row.number_of_slots,
    )


def background_check_response(row: BackgroundCheck) -> BackgroundCheckResponse:
    return BackgroundCheckResponse(
        id=row.id,
        tutor_id=row.tutor_id,
        full_legal_first_name=row.full_legal_first_name,
        full_legal_last_name=row.full_legal_last_name,
        date_of_birth=row.date_of_birth,
        social_security_number=mask_ssn(row.ssn_last4),
        consent_given=row.consent_given,
        status=row.status,
        review_notes=row.review_notes,
    )


def completion_response(report: CompletionReport) -> CompletionResponse:
    return CompletionResponse(
        profile_completion=report.percentage,
        completed=report.completed,
        sections=report.sections,
        missing_sections=report.missing_sections,
        redirect_to=report.redirect_to,
        redirect_delay_ms=report.redirect_delay_ms,
    )


def tutor_profile_response(repo: Repository, tutor: Tutor) -> TutorProfileResponse:
    check = repo.get_background_check(tutor.id)
    return TutorProfileResponse(
        id=tutor.id,
        user_id=tutor.user_id,
        first_name=tutor.first_name,
        last_name=tutor.last_name,
        gender=tutor.gender,
        grades_can_teach=list(tutor.grades_can_teach_json or []),
        hourly_fee=tutor.hourly_fee,
        tagline=tutor.tagline,
        country=tutor.country,
        state=tutor.state,
        city=tutor.city,
        address=tutor.address,
        zipcode=tutor.zipcode,
        languages_spoken=list(tutor.languages_spoken_json or []),
        profile_image=tutor.profile_image,
        payout_method=tutor.payout_method,
        payout_onboarded=tutor.payout_onboarded,
        profile_completion=tutor.profile_completion_percentage,
        profile_completed=tutor.profile_completed,
        experiences=[experience_response(row) for row in repo.list_section_items(Experience, tutor.id)],
        educations=[education_response(row) for row in repo.list_section_items(Education, tutor.id)],
        subjects=[subject_response(row) for row in repo.list_tutor_subjects(tutor.id)],
        availabilities=[
            availability_response(row) for row in repo.list_section_items(Availability, tutor.id)
        ],
        background_check_status=check.status if check else None,
    )


def tutor_summary_response(repo: Repository, tutor: Tutor) -> TutorSummaryResponse:
    return TutorSummaryResponse(
        id=tutor.id,
        first_name=tutor.first_name,
        last_name=tutor.last_name,
        tagline=tutor.tagline,
        hourly_fee=tutor.hourly_fee,
        city=tutor.city,
        country=tutor.country,
        profile_image=tutor.profile_image,
        subjects=[subject.name for subject in repo.list_tutor_subjects(tutor.id)],
        profile_completion=tutor.profile_completion_percentage,
    )


def admin_settings_response(settings: AdminSettings) -> AdminSettingsResponse:
    return AdminSettingsResponse(
        send_signup_confirmation=settings.send_signup_confirmation,
        send_profile_completion_email=settings.send_profile_completion_email,
        email_sender_name=settings.email_sender_name,
        email_sender_email=settings.email_sender_email,
        withdraw_methods=list(settings.withdraw_methods_json or []),
    )


def booking_response(row: Booking) -> BookingResponse:
    hours = max(0.0, (row.end_time - row.start_time).total_seconds() / 3600)
    return BookingResponse(
        id=row.id,
        student_user_id=row.student_user_id,
        tutor_id=row.tutor_id,
        start_time=row.start_time,
        end_time=row.end_time,
        duration_hours=round(hours, 2),
        status=row.status,
    )


def class_session_response(row: ClassSession) -> ClassSessionResponse:
    return ClassSessionResponse(
        id=row.id,
        booking_id=row.booking_id,
        status=row.status,
        tutor_approved=row.tutor_approved,
        admin_approved=row.admin_approved,
        completed_at=row.completed_at,
        admin_approved_at=row.admin_approved_at,
        notes=row.notes,
    )


def withdrawal_response(row: Withdrawal) -> WithdrawalResponse:
    return WithdrawalResponse(
        id=row.id,
        user_id=row.user_id,
        user_type=row.user_type,
        amount=row.amount,
        currency=row.currency,
        notes=row.notes,
        status=row.status,
        requested_at=row.requested_at,
        approved_at=row.approved_at,
        approved_by_user_id=row.approved_by_user_id,
        processed_at=row.processed_at,
        completed_at=row.completed_at,
        payout_reference=row.payout_reference,
    )
