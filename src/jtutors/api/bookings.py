from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jtutors.api.deps import get_current_user, get_db, require_role, service_errors
from jtutors.api.schemas import (
    BookingConfirmResponse,
    BookingCreateRequest,
    BookingResponse,
    ClassSessionResponse,
    NotesRequest,
)
from jtutors.api.serializers import booking_response, class_session_response
from jtutors.core.bookings import BookingService
from jtutors.db.models import User

router = APIRouter(prefix="/api", tags=["bookings"])


@router.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreateRequest,
    user: User = Depends(require_role("STUDENT")),
    db: Session = Depends(get_db),
) -> BookingResponse:
    with service_errors():
        booking = BookingService(db).create_booking(
            user,
            tutor_id=payload.tutor_id,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    return booking_response(booking)


@router.get("/bookings/my", response_model=list[BookingResponse])
def my_bookings(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[BookingResponse]:
    return [booking_response(row) for row in BookingService(db).list_for_user(user)]


@router.post("/bookings/{booking_id}/confirm", response_model=BookingConfirmResponse)
def confirm_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BookingConfirmResponse:
    with service_errors():
        booking, class_session = BookingService(db).confirm_booking(user, booking_id)
    return BookingConfirmResponse(
        booking=booking_response(booking),
        class_session=class_session_response(class_session),
    )


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BookingResponse:
    with service_errors():
        booking = BookingService(db).cancel_booking(user, booking_id)
    return booking_response(booking)


@router.get("/class-sessions/my", response_model=list[ClassSessionResponse])
def my_class_sessions(
    user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> list[ClassSessionResponse]:
    return [class_session_response(row) for row in BookingService(db).list_class_sessions_for_user(user)]


@router.post("/class-sessions/{session_id}/complete", response_model=ClassSessionResponse)
def complete_class_session(
    session_id: int,
    payload: NotesRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClassSessionResponse:
    notes = payload.notes if payload else ""
    with service_errors():
        item = BookingService(db).complete_class_session(user, session_id, notes)
    return class_session_response(item)
