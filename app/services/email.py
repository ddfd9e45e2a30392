"""
Email Notifier

Renders the transactional templates and hands them to Celery. In debug/test
mode the local task only prints the message. Broker failures propagate to
the caller; nothing is retried here.
"""

import asyncio

from app.helpers.getters import isDebugMode
from app.logging import get_logger
from app.mycelery.worker import send_email, send_email_local
from app.services.email_templates import (
    email_confirmation_template,
    password_reset_template,
    two_factor_code_template,
)

logger = get_logger("email")


class EmailService:
    async def send_email(self, to: str, subject: str, body: str, is_html: bool = True) -> None:
        task = send_email_local if isDebugMode() else send_email
        try:
            await asyncio.to_thread(task.delay, to, subject, body, is_html)
        except Exception:
            logger.error("Failed to dispatch email", to=to, subject=subject)
            raise
        logger.info("Email dispatched", to=to, subject=subject)

    async def send_email_confirmation(self, email: str, first_name: str, confirmation_link: str) -> None:
        body = email_confirmation_template(first_name, confirmation_link)
        await self.send_email(email, "Confirm Your Email", body)

    async def send_password_reset(self, email: str, first_name: str, reset_link: str) -> None:
        body = password_reset_template(first_name, reset_link)
        await self.send_email(email, "Password Reset Request", body)

    async def send_two_factor_code(self, email: str, first_name: str, code: str) -> None:
        body = two_factor_code_template(first_name, code)
        await self.send_email(email, "Your Two-Factor Authentication Code", body)


def get_email_service() -> EmailService:
    return EmailService()
