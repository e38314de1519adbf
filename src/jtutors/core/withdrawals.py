from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from jtutors.config import Settings, get_settings
from jtutors.core.bookings import append_note
from jtutors.core.transitions import WITHDRAWAL_TRANSITIONS, ensure_transition
from jtutors.db.models import User, Withdrawal
from jtutors.db.repositories import Repository

logger = logging.getLogger(__name__)


class WithdrawalService:
    """Payout requests moving PENDING -> APPROVED -> PROCESSING -> COMPLETED.

    Only a pending request can be rejected.
    """

    def __init__(self, session: Session, *, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)

    def request_withdrawal(self, user: User, *, amount: float, currency: str = "USD", notes: str = "") -> Withdrawal:
        if user.role not in ("TUTOR", "ADMIN"):
            raise PermissionError("Only tutors and admins can request withdrawals")
        if amount <= 0:
            raise ValueError("Withdrawal amount must be positive")

        item = self.repo.create_withdrawal(
            user_id=user.id,
            user_type=user.role,
            amount=amount,
            currency=currency.strip().upper(),
            notes=notes,
        )
        logger.info("Withdrawal requested withdrawal_id=%s user_id=%s amount=%s", item.id, user.id, amount)
        return item

    def list_for_user(self, user: User) -> list[Withdrawal]:
        return self.repo.list_withdrawals(user_id=user.id)

    def list_withdrawals(self, status: str | None = None) -> list[Withdrawal]:
        return self.repo.list_withdrawals(status=status)

    def approve(self, withdrawal_id: int, admin: User, notes: str = "") -> Withdrawal:
        item = self._checked(withdrawal_id, "APPROVED")
        item.status = "APPROVED"
        item.approved_at = datetime.now(UTC)
        item.approved_by_user_id = admin.id
        item.notes = append_note(item.notes, notes)
        return self._save(item)

    def reject(self, withdrawal_id: int, admin: User, reason: str = "") -> Withdrawal:
        item = self._checked(withdrawal_id, "REJECTED")
        item.status = "REJECTED"
        item.approved_by_user_id = admin.id
        if reason:
            item.notes = append_note(item.notes, f"Rejection reason: {reason}")
        return self._save(item)

    def process(self, withdrawal_id: int) -> Withdrawal:
        item = self._checked(withdrawal_id, "PROCESSING")
        item.payout_reference = self._payout_account(item)
        item.status = "PROCESSING"
        item.processed_at = datetime.now(UTC)
        return self._save(item)

    def complete(self, withdrawal_id: int, payout_reference: str = "") -> Withdrawal:
        item = self._checked(withdrawal_id, "COMPLETED")
        item.status = "COMPLETED"
        item.completed_at = datetime.now(UTC)
        if payout_reference:
            item.payout_reference = payout_reference
        return self._save(item)

    def _payout_account(self, item: Withdrawal) -> str:
        if item.user_type == "TUTOR":
            tutor = self.repo.get_tutor_by_user(item.user_id)
            account_ref = tutor.payout_account_ref if tutor else ""
        else:
            account_ref = self.settings.admin_payout_account_ref
        if not account_ref:
            raise ValueError("Payout account not configured for user")
        return account_ref

    def _checked(self, withdrawal_id: int, target: str) -> Withdrawal:
        item = self.repo.get_withdrawal(withdrawal_id)
        if item is None:
            raise LookupError("Withdrawal not found")
        ensure_transition("withdrawal", WITHDRAWAL_TRANSITIONS, item.status, target)
        return item

    def _save(self, item: Withdrawal) -> Withdrawal:
        self.repo.save(item)
        logger.info("Withdrawal withdrawal_id=%s moved to %s", item.id, item.status)
        return item
