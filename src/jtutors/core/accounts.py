from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from sqlalchemy.orm import Session

from jtutors.config import Settings, get_settings
from jtutors.core.notifications import EmailNotifier
from jtutors.core.security import (
    BCRYPT_MAX_BYTES,
    hash_password,
    hash_token,
    new_session_token,
    verify_password,
)
from jtutors.db.models import User
from jtutors.db.repositories import Repository
from jtutors.types import USER_ROLES

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AccountService:
    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        notifier: EmailNotifier | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.notifier = notifier or EmailNotifier(self.settings)

    def register(self, *, email: str, password: str, role: str) -> User:
        normalized_role = role.strip().upper()
        if normalized_role not in USER_ROLES:
            raise ValueError("Role must be STUDENT, TUTOR or ADMIN")
        if "@" not in email:
            raise ValueError("A valid email is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        if self.repo.get_user_by_email(email):
            raise ValueError("User already exists with this email")

        user = self.repo.create_user(
            email=email,
            password_hash=hash_password(password, rounds=self.settings.bcrypt_rounds),
            role=normalized_role,
        )
        logger.info("Registered user_id=%s role=%s", user.id, user.role)

        admin_settings = self.repo.get_admin_settings()
        if admin_settings.send_signup_confirmation and user.role != "ADMIN":
            self.notifier.send_signup_confirmation(
                to=user.email,
                sender_name=admin_settings.email_sender_name,
                sender_email=admin_settings.email_sender_email,
            )
        return user

    def login(self, *, email: str, password: str) -> tuple[str, User]:
        user = self.repo.get_user_by_email(email)
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            raise PermissionError("Invalid credentials")

        token = new_session_token()
        self.repo.create_auth_session(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=datetime.now(UTC) + timedelta(minutes=self.settings.session_ttl_min),
        )
        logger.info("Login user_id=%s", user.id)
        return token, user

    def resolve_token(self, token: str) -> User | None:
        if not token:
            return None
        return self.repo.get_user_by_token_hash(hash_token(token))

    def logout(self, token: str) -> None:
        self.repo.delete_auth_session(hash_token(token))
