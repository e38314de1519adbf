from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from jtutors.api.deps import get_db, require_role, service_errors
from jtutors.api.schemas import (
    AdminSettingsResponse,
    AdminSettingsUpdateRequest,
    AdminTutorResponse,
    AnalyticsResponse,
    BackgroundCheckResponse,
    BackgroundCheckReviewRequest,
    ClassSessionResponse,
    NotesRequest,
    WithdrawalCompleteRequest,
    WithdrawalRejectRequest,
    WithdrawalResponse,
)
from jtutors.api.serializers import (
    admin_settings_response,
    background_check_response,
    class_session_response,
    withdrawal_response,
)
from jtutors.core.bookings import BookingService
from jtutors.core.withdrawals import WithdrawalService
from jtutors.db.models import User
from jtutors.db.repositories import Repository
from jtutors.types import BackgroundCheckStatus, ClassSessionStatus, WithdrawalStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(_: User = Depends(require_role("ADMIN")), db: Session = Depends(get_db)) -> AnalyticsResponse:
    summary = Repository(db).analytics_summary()
    return AnalyticsResponse.model_validate(summary.model_dump())


@router.get("/tutors", response_model=list[AdminTutorResponse])
def list_tutors(
    limit: int = 100,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> list[AdminTutorResponse]:
    rows = Repository(db).list_tutors(limit=limit)
    return [
        AdminTutorResponse(
            id=row.id,
            user_id=row.user_id,
            first_name=row.first_name,
            last_name=row.last_name,
            profile_completion=row.profile_completion_percentage,
            profile_completed=row.profile_completed,
        )
        for row in rows
    ]


@router.get("/background-checks", response_model=list[BackgroundCheckResponse])
def list_background_checks(
    status: BackgroundCheckStatus | None = None,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> list[BackgroundCheckResponse]:
    return [background_check_response(row) for row in Repository(db).list_background_checks(status=status)]


def _review_background_check(db: Session, check_id: int, status: str, notes: str) -> BackgroundCheckResponse:
    try:
        check = Repository(db).set_background_check_status(check_id, status, notes)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    logger.info("Background check reviewed check_id=%s status=%s", check_id, status)
    return background_check_response(check)


@router.post("/background-checks/{check_id}/approve", response_model=BackgroundCheckResponse)
def approve_background_check(
    check_id: int,
    payload: BackgroundCheckReviewRequest | None = None,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> BackgroundCheckResponse:
    notes = payload.notes if payload else ""
    return _review_background_check(db, check_id, "APPROVED", notes)


@router.post("/background-checks/{check_id}/reject", response_model=BackgroundCheckResponse)
def reject_background_check(
    check_id: int,
    payload: BackgroundCheckReviewRequest | None = None,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> BackgroundCheckResponse:
    notes = payload.notes if payload else ""
    return _review_background_check(db, check_id, "REJECTED", notes)


@router.get("/settings", response_model=AdminSettingsResponse)
def get_settings(_: User = Depends(require_role("ADMIN")), db: Session = Depends(get_db)) -> AdminSettingsResponse:
    return admin_settings_response(Repository(db).get_admin_settings())


@router.patch("/settings", response_model=AdminSettingsResponse)
def update_settings(
    payload: AdminSettingsUpdateRequest,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> AdminSettingsResponse:
    values = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if "withdraw_methods" in values:
        values["withdraw_methods_json"] = list(values.pop("withdraw_methods"))
    return admin_settings_response(Repository(db).update_admin_settings(values))


@router.get("/class-sessions", response_model=list[ClassSessionResponse])
def list_class_sessions(
    status: ClassSessionStatus | None = None,
    admin_approved: bool | None = Query(None, alias="adminApproved"),
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> list[ClassSessionResponse]:
    rows = Repository(db).list_class_sessions(status=status, admin_approved=admin_approved)
    return [class_session_response(row) for row in rows]


@router.post("/class-sessions/{session_id}/approve", response_model=ClassSessionResponse)
def approve_class_session(
    session_id: int,
    payload: NotesRequest | None = None,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> ClassSessionResponse:
    notes = payload.notes if payload else ""
    with service_errors():
        item = BookingService(db).approve_class_session(session_id, notes)
    return class_session_response(item)


@router.get("/withdrawals", response_model=list[WithdrawalResponse])
def list_withdrawals(
    status: WithdrawalStatus | None = None,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> list[WithdrawalResponse]:
    return [withdrawal_response(row) for row in WithdrawalService(db).list_withdrawals(status=status)]


@router.post("/withdrawals/{withdrawal_id}/approve", response_model=WithdrawalResponse)
def approve_withdrawal(
    withdrawal_id: int,
    payload: NotesRequest | None = None,
    admin: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> WithdrawalResponse:
    notes = payload.notes if payload else ""
    with service_errors():
        item = WithdrawalService(db).approve(withdrawal_id, admin, notes)
    return withdrawal_response(item)


@router.post("/withdrawals/{withdrawal_id}/reject", response_model=WithdrawalResponse)
def reject_withdrawal(
    withdrawal_id: int,
    payload: WithdrawalRejectRequest | None = None,
    admin: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> WithdrawalResponse:
    reason = payload.reason if payload else ""
    with service_errors():
        item = WithdrawalService(db).reject(withdrawal_id, admin, reason)
    return withdrawal_response(item)


@router.post("/withdrawals/{withdrawal_id}/process", response_model=WithdrawalResponse)
def process_withdrawal(
    withdrawal_id: int,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> WithdrawalResponse:
    with service_errors():
        item = WithdrawalService(db).process(withdrawal_id)
    return withdrawal_response(item)


@router.post("/withdrawals/{withdrawal_id}/complete", response_model=WithdrawalResponse)
def complete_withdrawal(
    withdrawal_id: int,
    payload: WithdrawalCompleteRequest | None = None,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> WithdrawalResponse:
    payout_reference = payload.payout_reference if payload else ""
    with service_errors():
        item = WithdrawalService(db).complete(withdrawal_id, payout_reference)
    return withdrawal_response(item)
