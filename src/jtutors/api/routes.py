from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from jtutors.api.deps import get_bearer_token, get_current_user, get_db, require_role
from jtutors.api.schemas import (
    LoginRequest,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    SubjectCreateRequest,
    SubjectResponse,
    TokenResponse,
    TutorProfileResponse,
    TutorSummaryResponse,
    UserResponse,
)
from jtutors.api.serializers import (
    subject_response,
    tutor_profile_response,
    tutor_summary_response,
    user_response,
)
from jtutors.core.accounts import AccountService
from jtutors.db.models import User
from jtutors.db.repositories import Repository

router = APIRouter(prefix="/api", tags=["api"])


@router.post("/auth/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> UserResponse:
    try:
        user = AccountService(db).register(email=payload.email, password=payload.password, role=payload.role)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return user_response(user)


@router.post("/auth/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    try:
        token, user = AccountService(db).login(email=payload.email, password=payload.password)
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return TokenResponse(access_token=token, user=user_response(user))


@router.post("/auth/logout", response_model=MessageResponse)
def logout(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)) -> MessageResponse:
    AccountService(db).logout(token)
    return MessageResponse(message="Logged out")


@router.get("/auth/me", response_model=MeResponse)
def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> MeResponse:
    repo = Repository(db)
    if user.role != "TUTOR":
        return MeResponse(user=user_response(user))

    tutor = repo.get_tutor_by_user(user.id)
    if tutor is None:
        return MeResponse(user=user_response(user))
    return MeResponse(
        user=user_response(user),
        tutor=tutor_profile_response(repo, tutor),
        profile_completion=tutor.profile_completion_percentage,
    )


@router.get("/subjects", response_model=list[SubjectResponse])
def list_subjects(category: str | None = None, db: Session = Depends(get_db)) -> list[SubjectResponse]:
    return [subject_response(row) for row in Repository(db).list_subjects(category=category)]


@router.post("/subjects", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreateRequest,
    _: User = Depends(require_role("ADMIN")),
    db: Session = Depends(get_db),
) -> SubjectResponse:
    try:
        subject = Repository(db).create_subject(name=payload.name, category=payload.category)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return subject_response(subject)


@router.get("/tutors", response_model=list[TutorSummaryResponse])
def search_tutors(
    subject: str | None = None,
    min_fee: float | None = Query(None, alias="minFee"),
    max_fee: float | None = Query(None, alias="maxFee"),
    city: str | None = None,
    country: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TutorSummaryResponse]:
    repo = Repository(db)
    rows = repo.search_tutors(
        subject=subject,
        min_fee=min_fee,
        max_fee=max_fee,
        city=city,
        country=country,
        limit=limit,
    )
    return [tutor_summary_response(repo, row) for row in rows]


@router.get("/tutors/{tutor_id}", response_model=TutorProfileResponse)
def get_tutor(
    tutor_id: int,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TutorProfileResponse:
    repo = Repository(db)
    tutor = repo.get_tutor(tutor_id)
    if tutor is None:
        raise HTTPException(status_code=404, detail="Tutor not found")
    return tutor_profile_response(repo, tutor)
