from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jtutors.api.deps import get_db, require_role, service_errors
from jtutors.api.schemas import WithdrawalCreateRequest, WithdrawalResponse
from jtutors.api.serializers import withdrawal_response
from jtutors.core.withdrawals import WithdrawalService
from jtutors.db.models import User

router = APIRouter(prefix="/api/withdrawals", tags=["withdrawals"])


@router.post("", response_model=WithdrawalResponse, status_code=status.HTTP_201_CREATED)
def request_withdrawal(
    payload: WithdrawalCreateRequest,
    user: User = Depends(require_role("TUTOR", "ADMIN")),
    db: Session = Depends(get_db),
) -> WithdrawalResponse:
    with service_errors():
        item = WithdrawalService(db).request_withdrawal(
            user,
            amount=payload.amount,
            currency=payload.currency,
            notes=payload.notes,
        )
    return withdrawal_response(item)


@router.get("/my", response_model=list[WithdrawalResponse])
def my_withdrawals(
    user: User = Depends(require_role("TUTOR", "ADMIN")),
    db: Session = Depends(get_db),
) -> list[WithdrawalResponse]:
    return [withdrawal_response(row) for row in WithdrawalService(db).list_for_user(user)]
