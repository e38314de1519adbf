from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from jtutors.api.deps import get_current_tutor, get_db
from jtutors.api.schemas import (
    AvailabilityMutationResponse,
    AvailabilityRequest,
    AvailabilityUpdateRequest,
    BackgroundCheckMutationResponse,
    BackgroundCheckRequest,
    CompletionResponse,
    DeletedResponse,
    EducationMutationResponse,
    EducationRequest,
    EducationUpdateRequest,
    ExperienceMutationResponse,
    ExperienceRequest,
    ExperienceUpdateRequest,
    PayoutMethodRequest,
    PayoutMethodResponse,
    PayoutMutationResponse,
    PersonalInfoMutationResponse,
    PersonalInfoRequest,
    SubjectsAddRequest,
    SubjectsMutationResponse,
    TutorProfileResponse,
)
from jtutors.api.serializers import (
    availability_response,
    background_check_response,
    completion_response,
    education_response,
    experience_response,
    subject_response,
    tutor_profile_response,
)
from jtutors.core.accounts import AccountService
from jtutors.core.profile import TutorProfileService
from jtutors.core.runtime import get_event_bus
from jtutors.db.models import Tutor
from jtutors.db.repositories import Repository
from jtutors.db.session import SessionLocal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tutor", tags=["tutor"])


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


@router.get("/profile", response_model=TutorProfileResponse)
def get_profile(tutor: Tutor = Depends(get_current_tutor), db: Session = Depends(get_db)) -> TutorProfileResponse:
    return tutor_profile_response(Repository(db), tutor)


@router.get("/profile/completion", response_model=CompletionResponse)
def get_profile_completion(
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> CompletionResponse:
    report = TutorProfileService(db).recalculate(tutor.id)
    return completion_response(report)


@router.put("/profile/personal", response_model=PersonalInfoMutationResponse)
def update_personal_info(
    payload: PersonalInfoRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> PersonalInfoMutationResponse:
    service = TutorProfileService(db)
    try:
        result = service.update_personal_info(tutor.id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return PersonalInfoMutationResponse(
        message="Personal information updated successfully",
        tutor=tutor_profile_response(service.repo, result.item),
        profile_completion=result.completion.percentage,
    )


# experience


@router.post(
    "/profile/experience",
    response_model=ExperienceMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_experience(
    payload: ExperienceRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> ExperienceMutationResponse:
    try:
        result = TutorProfileService(db).add_item("experience", tutor.id, payload.model_dump())
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return ExperienceMutationResponse(
        message="Experience added successfully",
        experience=experience_response(result.item),
        profile_completion=result.completion.percentage,
    )


@router.put("/profile/experience/{item_id}", response_model=ExperienceMutationResponse)
def update_experience(
    item_id: int,
    payload: ExperienceUpdateRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> ExperienceMutationResponse:
    try:
        result = TutorProfileService(db).update_item(
            "experience", tutor.id, item_id, payload.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc
    if result is None:
        raise HTTPException(status_code=404, detail="Experience not found")
    return ExperienceMutationResponse(
        message="Experience updated successfully",
        experience=experience_response(result.item),
        profile_completion=result.completion.percentage,
    )


@router.delete("/profile/experience/{item_id}", response_model=DeletedResponse)
def delete_experience(
    item_id: int,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> DeletedResponse:
    report = TutorProfileService(db).delete_item("experience", tutor.id, item_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Experience not found")
    return DeletedResponse(message="Experience deleted successfully", profile_completion=report.percentage)


# education


@router.post(
    "/profile/education",
    response_model=EducationMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_education(
    payload: EducationRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> EducationMutationResponse:
    try:
        result = TutorProfileService(db).add_item("education", tutor.id, payload.model_dump())
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return EducationMutationResponse(
        message="Education added successfully",
        education=education_response(result.item),
        profile_completion=result.completion.percentage,
    )


@router.put("/profile/education/{item_id}", response_model=EducationMutationResponse)
def update_education(
    item_id: int,
    payload: EducationUpdateRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> EducationMutationResponse:
    try:
        result = TutorProfileService(db).update_item(
            "education", tutor.id, item_id, payload.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc
    if result is None:
        raise HTTPException(status_code=404, detail="Education not found")
    return EducationMutationResponse(
        message="Education updated successfully",
        education=education_response(result.item),
        profile_completion=result.completion.percentage,
    )


@router.delete("/profile/education/{item_id}", response_model=DeletedResponse)
def delete_education(
    item_id: int,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> DeletedResponse:
    report = TutorProfileService(db).delete_item("education", tutor.id, item_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Education not found")
    return DeletedResponse(message="Education deleted successfully", profile_completion=report.percentage)


# subjects


@router.post("/profile/subjects", response_model=SubjectsMutationResponse)
def add_subjects(
    payload: SubjectsAddRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> SubjectsMutationResponse:
    try:
        result = TutorProfileService(db).add_subjects(tutor.id, payload.subject_ids)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return SubjectsMutationResponse(
        message="Subjects added successfully",
        subjects=[subject_response(row) for row in result.item],
        profile_completion=result.completion.percentage,
    )


@router.delete("/profile/subjects/{subject_id}", response_model=DeletedResponse)
def remove_subject(
    subject_id: int,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> DeletedResponse:
    report = TutorProfileService(db).remove_subject(tutor.id, subject_id)
    return DeletedResponse(message="Subject removed successfully", profile_completion=report.percentage)


# availability


@router.post(
    "/profile/availability",
    response_model=AvailabilityMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_availability(
    payload: AvailabilityRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> AvailabilityMutationResponse:
    try:
        result = TutorProfileService(db).add_item("availability", tutor.id, payload.model_dump())
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return AvailabilityMutationResponse(
        message="Availability added successfully",
        availability=availability_response(result.item),
        profile_completion=result.completion.percentage,
    )


@router.put("/profile/availability/{item_id}", response_model=AvailabilityMutationResponse)
def update_availability(
    item_id: int,
    payload: AvailabilityUpdateRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> AvailabilityMutationResponse:
    try:
        result = TutorProfileService(db).update_item(
            "availability", tutor.id, item_id, payload.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc
    if result is None:
        raise HTTPException(status_code=404, detail="Availability not found")
    return AvailabilityMutationResponse(
        message="Availability updated successfully",
        availability=availability_response(result.item),
        profile_completion=result.completion.percentage,
    )


@router.delete("/profile/availability/{item_id}", response_model=DeletedResponse)
def delete_availability(
    item_id: int,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> DeletedResponse:
    report = TutorProfileService(db).delete_item("availability", tutor.id, item_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Availability not found")
    return DeletedResponse(message="Availability deleted successfully", profile_completion=report.percentage)


# payout method and background check


@router.put("/profile/payout", response_model=PayoutMutationResponse)
def set_payout_method(
    payload: PayoutMethodRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> PayoutMutationResponse:
    try:
        result = TutorProfileService(db).set_payout_method(
            tutor.id, method=payload.method, account_ref=payload.account_ref
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return PayoutMutationResponse(
        message="Payout method saved successfully",
        payout=PayoutMethodResponse(
            method=result.item.payout_method,
            account_ref=result.item.payout_account_ref,
            onboarded=result.item.payout_onboarded,
        ),
        profile_completion=result.completion.percentage,
    )


@router.delete("/profile/payout", response_model=DeletedResponse)
def clear_payout_method(
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> DeletedResponse:
    report = TutorProfileService(db).clear_payout_method(tutor.id)
    return DeletedResponse(message="Payout method removed successfully", profile_completion=report.percentage)


@router.post("/profile/background-check", response_model=BackgroundCheckMutationResponse)
def submit_background_check(
    payload: BackgroundCheckRequest,
    tutor: Tutor = Depends(get_current_tutor),
    db: Session = Depends(get_db),
) -> BackgroundCheckMutationResponse:
    try:
        result = TutorProfileService(db).submit_background_check(tutor.id, payload.model_dump())
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return BackgroundCheckMutationResponse(
        message="Background check submitted successfully",
        background_check=background_check_response(result.item),
        profile_completion=result.completion.percentage,
    )


def _resolve_stream_tutor(token: str) -> int | None:
    with SessionLocal() as db:
        user = AccountService(db).resolve_token(token)
        if user is None or user.role != "TUTOR":
            return None
        tutor = Repository(db).get_tutor_by_user(user.id)
        return tutor.id if tutor else None


@router.websocket("/profile/stream")
async def stream_profile_events(websocket: WebSocket, token: str = "") -> None:
    tutor_id = await run_in_threadpool(_resolve_stream_tutor, token)
    if tutor_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    events = get_event_bus().subscribe(tutor_id)

    async def forward_events() -> None:
        async for event in events:
            await websocket.send_json(event)

    async def wait_for_disconnect() -> None:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return

    tasks = {asyncio.create_task(forward_events()), asyncio.create_task(wait_for_disconnect())}
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        await events.aclose()
        for result in results:
            if isinstance(result, Exception):
                logger.debug("Profile stream for tutor_id=%s ended: %r", tutor_id, result)
