from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from jtutors.types import (
    BackgroundCheckStatus,
    BookingStatus,
    ClassSessionStatus,
    Weekday,
    WithdrawalStatus,
    WithdrawalUserType,
)

CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# auth


class RegisterRequest(CamelModel):
    email: str
    password: str
    role: str


class LoginRequest(CamelModel):
    email: str
    password: str


class UserResponse(CamelModel):
    id: int
    email: str
    role: str
    is_active: bool


class TokenResponse(CamelModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: UserResponse


class MessageResponse(CamelModel):
    message: str


# subjects


class SubjectCreateRequest(CamelModel):
    name: str = Field(min_length=1)
    category: str = ""


class SubjectResponse(CamelModel):
    id: int
    name: str
    category: str


class SubjectsAddRequest(CamelModel):
    subject_ids: list[int] = Field(min_length=1)


# profile sections


class PersonalInfoRequest(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    gender: str | None = None
    grades_can_teach: list[str] | None = None
    hourly_fee: float | None = None
    tagline: str | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None
    address: str | None = None
    zipcode: str | None = None
    languages_spoken: list[str] | None = None
    profile_image: str | None = None


class ExperienceRequest(CamelModel):
    job_title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: str = ""
    start_date: date
    end_date: date | None = None
    is_current: bool = False
    teaching_mode: str = ""
    description: str = ""


class ExperienceUpdateRequest(CamelModel):
    job_title: str | None = Field(default=None, min_length=1)
    company: str | None = Field(default=None, min_length=1)
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool | None = None
    teaching_mode: str | None = None
    description: str | None = None


class ExperienceResponse(ExperienceRequest):
    id: int


class EducationRequest(CamelModel):
    degree_title: str = Field(min_length=1)
    university: str = Field(min_length=1)
    location: str = ""
    start_date: date
    end_date: date | None = None
    is_ongoing: bool = False


class EducationUpdateRequest(CamelModel):
    degree_title: str | None = Field(default=None, min_length=1)
    university: str | None = Field(default=None, min_length=1)
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_ongoing: bool | None = None


class EducationResponse(EducationRequest):
    id: int


class AvailabilityRequest(CamelModel):
    block_title: str = ""
    days_available: list[Weekday] = Field(min_length=1)
    start_time: str = Field(pattern=CLOCK_PATTERN)
    end_time: str = Field(pattern=CLOCK_PATTERN)
    break_time: int = Field(default=0, ge=0)
    session_duration: int = Field(gt=0)
    number_of_slots: int = Field(default=1, ge=1)


class AvailabilityUpdateRequest(CamelModel):
    block_title: str | None = None
    days_available: list[Weekday] | None = None
    start_time: str | None = Field(default=None, pattern=CLOCK_PATTERN)
    end_time: str | None = Field(default=None, pattern=CLOCK_PATTERN)
    break_time: int | None = Field(default=None, ge=0)
    session_duration: int | None = Field(default=None, gt=0)
    number_of_slots: int | None = Field(default=None, ge=1)


class AvailabilityResponse(AvailabilityRequest):
    id: int


class PayoutMethodRequest(CamelModel):
    method: str
    account_ref: str


class PayoutMethodResponse(CamelModel):
    method: str
    account_ref: str
    onboarded: bool


class BackgroundCheckRequest(CamelModel):
    full_legal_first_name: str = Field(min_length=1)
    full_legal_last_name: str = Field(min_length=1)
    other_names_used: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state_province_region: str = ""
    postal_code: str = ""
    country: str = ""
    lived_more_than_3_years: bool = False
    date_of_birth: date
    social_security_number: str = Field(pattern=r"^\d{3}-?\d{2}-?\d{4}$")
    has_us_driver_license: bool = False
    email: str = ""
    consent_given: bool = False
    comments: str = ""


class BackgroundCheckResponse(CamelModel):
    id: int
    tutor_id: int
    full_legal_first_name: str
    full_legal_last_name: str
    date_of_birth: date
    social_security_number: str
    consent_given: bool
    status: BackgroundCheckStatus
    review_notes: str = ""


# completion and mutation results


class CompletionResponse(CamelModel):
    profile_completion: int
    completed: bool
    sections: dict[str, bool]
    missing_sections: list[str]
    redirect_to: str | None = None
    redirect_delay_ms: int | None = None


class DeletedResponse(MessageResponse):
    profile_completion: int


class TutorProfileResponse(CamelModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    gender: str
    grades_can_teach: list[str]
    hourly_fee: float | None
    tagline: str
    country: str
    state: str
    city: str
    address: str
    zipcode: str
    languages_spoken: list[str]
    profile_image: str
    payout_method: str
    payout_onboarded: bool
    profile_completion: int
    profile_completed: bool
    experiences: list[ExperienceResponse] = Field(default_factory=list)
    educations: list[EducationResponse] = Field(default_factory=list)
    subjects: list[SubjectResponse] = Field(default_factory=list)
    availabilities: list[AvailabilityResponse] = Field(default_factory=list)
    background_check_status: BackgroundCheckStatus | None = None


class TutorSummaryResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    tagline: str
    hourly_fee: float | None
    city: str
    country: str
    profile_image: str
    subjects: list[str]
    profile_completion: int


class PersonalInfoMutationResponse(MessageResponse):
    tutor: TutorProfileResponse
    profile_completion: int


class ExperienceMutationResponse(MessageResponse):
    experience: ExperienceResponse
    profile_completion: int


class EducationMutationResponse(MessageResponse):
    education: EducationResponse
    profile_completion: int


class AvailabilityMutationResponse(MessageResponse):
    availability: AvailabilityResponse
    profile_completion: int


class SubjectsMutationResponse(MessageResponse):
    subjects: list[SubjectResponse]
    profile_completion: int


class PayoutMutationResponse(MessageResponse):
    payout: PayoutMethodResponse
    profile_completion: int


class BackgroundCheckMutationResponse(MessageResponse):
    background_check: BackgroundCheckResponse
    profile_completion: int


class MeResponse(CamelModel):
    user: UserResponse
    tutor: TutorProfileResponse | None = None
    profile_completion: int | None = None


# admin


class BackgroundCheckReviewRequest(CamelModel):
    notes: str = ""


class AdminTutorResponse(CamelModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    profile_completion: int
    profile_completed: bool


class AdminSettingsResponse(CamelModel):
    send_signup_confirmation: bool
    send_profile_completion_email: bool
    email_sender_name: str
    email_sender_email: str
    withdraw_methods: list[str]


class AdminSettingsUpdateRequest(CamelModel):
    send_signup_confirmation: bool | None = None
    send_profile_completion_email: bool | None = None
    email_sender_name: str | None = Field(default=None, min_length=1, max_length=120)
    email_sender_email: EmailStr | None = None
    withdraw_methods: list[str] | None = None

    @field_validator("email_sender_name", "email_sender_email", mode="before")
    @classmethod
    def reject_header_breaks(cls, value: object) -> object:
        # these values end up in the From header of outgoing mail
        if isinstance(value, str) and ("\r" in value or "\n" in value):
            raise ValueError("must not contain line breaks")
        return value


class PopularSubjectResponse(CamelModel):
    name: str
    tutors: int


class AnalyticsResponse(CamelModel):
    users: int
    tutors: int
    students: int
    average_tutor_completion: float
    completed_tutors: int
    pending_background_checks: int
    popular_subjects: list[PopularSubjectResponse]


# bookings and class sessions


class BookingCreateRequest(CamelModel):
    tutor_id: int
    start_time: datetime
    end_time: datetime


class BookingResponse(CamelModel):
    id: int
    student_user_id: int
    tutor_id: int
    start_time: datetime
    end_time: datetime
    duration_hours: float
    status: BookingStatus


class ClassSessionResponse(CamelModel):
    id: int
    booking_id: int
    status: ClassSessionStatus
    tutor_approved: bool
    admin_approved: bool
    completed_at: datetime | None = None
    admin_approved_at: datetime | None = None
    notes: str = ""


class BookingConfirmResponse(CamelModel):
    booking: BookingResponse
    class_session: ClassSessionResponse


class NotesRequest(CamelModel):
    notes: str = ""


# withdrawals


class WithdrawalCreateRequest(CamelModel):
    amount: float = Field(gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    notes: str = ""


class WithdrawalRejectRequest(CamelModel):
    reason: str = ""


class WithdrawalCompleteRequest(CamelModel):
    payout_reference: str = ""


class WithdrawalResponse(CamelModel):
    id: int
    user_id: int
    user_type: WithdrawalUserType
    amount: float
    currency: str
    notes: str
    status: WithdrawalStatus
    requested_at: datetime
    approved_at: datetime | None = None
    approved_by_user_id: int | None = None
    processed_at: datetime | None = None
    completed_at: datetime | None = None
    payout_reference: str = ""
