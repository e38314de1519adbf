from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor, Future

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from jtutors.config import Settings, get_settings
from jtutors.core.runtime import get_mail_executor

logger = logging.getLogger(__name__)

PROFILE_COMPLETE_SUBJECT = "JTutor Tutor Profile Complete"
PROFILE_COMPLETE_TEXT = (
    "Well done!\n\n"
    "Your JTutor tutor profile is now 100% complete. Students can now find you more easily.\n"
    "Manage your sessions from your dashboard: {dashboard_url}\n\n"
    "Keep inspiring learners,\n"
    "The JTutor Team\n"
)
SIGNUP_SUBJECT = "Welcome to JTutor"
SIGNUP_TEXT = (
    "Hi {email},\n\n"
    "Your JTutor account has been created. You can sign in at {login_url}\n\n"
    "The JTutor Team\n"
)


class EmailNotifier:
    """Queues plain-text emails on a worker pool.

    ``send`` returns immediately with a future (``None`` when SMTP is not
    configured). Delivery errors are logged in the worker and resolve the
    future to ``False``; they never reach the caller.
    """

    def __init__(self, settings: Settings | None = None, executor: Executor | None = None):
        self.settings = settings or get_settings()
        self.executor = executor or get_mail_executor()

    def connection_config(self, *, sender_name: str, sender_email: str) -> ConnectionConfig:
        return ConnectionConfig(
            MAIL_USERNAME=self.settings.smtp_username,
            MAIL_PASSWORD=self.settings.smtp_password,
            MAIL_FROM=sender_email,
            MAIL_FROM_NAME=sender_name,
            MAIL_SERVER=self.settings.smtp_host,
            MAIL_PORT=self.settings.smtp_port,
            MAIL_STARTTLS=self.settings.smtp_use_tls,
            MAIL_SSL_TLS=self.settings.smtp_use_ssl,
            USE_CREDENTIALS=bool(self.settings.smtp_username),
            TIMEOUT=self.settings.smtp_timeout_sec,
        )

    def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        sender_name: str,
        sender_email: str,
    ) -> Future[bool] | None:
        if not self.settings.email_enabled:
            logger.info("Email disabled, skipping message to=%s subject=%s", to, subject)
            return None
        return self.executor.submit(
            self._deliver,
            to=to,
            subject=subject,
            body=body,
            sender_name=sender_name,
            sender_email=sender_email,
        )

    def send_profile_complete(self, *, to: str, sender_name: str, sender_email: str) -> Future[bool] | None:
        dashboard_url = f"{self.settings.frontend_url.rstrip('/')}{self.settings.dashboard_redirect_path}"
        return self.send(
            to=to,
            subject=PROFILE_COMPLETE_SUBJECT,
            body=PROFILE_COMPLETE_TEXT.format(dashboard_url=dashboard_url),
            sender_name=sender_name,
            sender_email=sender_email,
        )

    def send_signup_confirmation(self, *, to: str, sender_name: str, sender_email: str) -> Future[bool] | None:
        login_url = f"{self.settings.frontend_url.rstrip('/')}/login"
        return self.send(
            to=to,
            subject=SIGNUP_SUBJECT,
            body=SIGNUP_TEXT.format(email=to, login_url=login_url),
            sender_name=sender_name,
            sender_email=sender_email,
        )

    def _deliver(self, *, to: str, subject: str, body: str, sender_name: str, sender_email: str) -> bool:
        try:
            message = MessageSchema(subject=subject, recipients=[to], body=body, subtype=MessageType.plain)
            mailer = FastMail(self.connection_config(sender_name=sender_name, sender_email=sender_email))
            asyncio.run(mailer.send_message(message))
        except Exception:
            logger.exception("Failed to send email to=%s subject=%s", to, subject)
            return False

        logger.info("Email sent to=%s subject=%s", to, subject)
        return True
