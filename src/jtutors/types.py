from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UserRole = Literal["TUTOR", "STUDENT", "ADMIN"]
BackgroundCheckStatus = Literal["PENDING", "APPROVED", "REJECTED"]
BookingStatus = Literal["PENDING", "CONFIRMED", "CANCELLED"]
ClassSessionStatus = Literal["SCHEDULED", "COMPLETED"]
WithdrawalStatus = Literal["PENDING", "APPROVED", "REJECTED", "PROCESSING", "COMPLETED"]
WithdrawalUserType = Literal["TUTOR", "ADMIN"]
ProfileSectionName = Literal[
    "personal_info",
    "experience",
    "education",
    "subjects",
    "availability",
    "payout_method",
    "background_check",
    "profile_photo",
]
ProfileChangeAction = Literal["created", "updated", "deleted", "submitted", "recalculated"]
Weekday = Literal[
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

USER_ROLES: tuple[str, ...] = ("TUTOR", "STUDENT", "ADMIN")
DEFAULT_WITHDRAW_METHODS: list[str] = ["Stripe Connect", "Bank Transfer"]


class CompletionReport(BaseModel):
    tutor_id: int
    percentage: int = Field(ge=0, le=100)
    completed: bool = False
    sections: dict[str, bool] = Field(default_factory=dict)
    missing_sections: list[str] = Field(default_factory=list)
    redirect_to: str | None = None
    redirect_delay_ms: int | None = None


class ProfileChangeEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["profile_updated"] = "profile_updated"
    tutor_id: int
    section: ProfileSectionName
    action: ProfileChangeAction
    profile_completion: int = Field(ge=0, le=100)


class AnalyticsSummary(BaseModel):
    users: int = 0
    tutors: int = 0
    students: int = 0
    average_tutor_completion: float = 0.0
    completed_tutors: int = 0
    pending_background_checks: int = 0
    popular_subjects: list[dict[str, int | str]] = Field(default_factory=list)
