"""Welcome emails for accounts created by the bulk importer."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from config import settings
from utils import program_log

logger = logging.getLogger(__name__)


def is_email_configured() -> bool:
    return bool(settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASS)


def _build_welcome_message(
    recipient: str,
    first_name: str,
    last_name: str,
    program_name: str,
    year: int,
    kind: str,
    role_label: Optional[str],
    temp_password: Optional[str],
) -> EmailMessage:
    role_text = "delegate" if kind == "delegate" else (role_label or "Staff")
    lines = [
        f"Hello {first_name} {last_name},",
        "",
        f"Welcome to {program_name} {year}! You have been registered as {role_text}.",
        "",
        f"Sign in with your email address: {recipient}",
    ]
    if temp_password:
        lines += [
            f"Your temporary password is: {temp_password}",
            "Please change it after your first sign-in.",
        ]

    msg = EmailMessage()
    msg["Subject"] = f"Welcome to {program_name} {year}"
    msg["From"] = formataddr((settings.EMAIL_FROM_NAME, settings.EMAIL_FROM))
    msg["To"] = recipient
    msg.set_content("\n".join(lines))
    return msg


def send_welcome_email(
    program_id: str,
    recipient: str,
    first_name: str,
    last_name: str,
    program_name: str,
    year: int,
    kind: str,
    role_label: Optional[str] = None,
    temp_password: Optional[str] = None,
) -> bool:
    """Send the welcome email.

    Returns False when SMTP is not configured. Transport errors propagate;
    the importer counts both outcomes as a failed email.
    """
    if not is_email_configured():
        program_log.info(program_id, f"Email not configured, skipping welcome email to {recipient}")
        return False

    msg = _build_welcome_message(
        recipient, first_name, last_name, program_name, year, kind, role_label, temp_password
    )
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
        if settings.SMTP_PORT != 25:
            smtp.starttls()
        smtp.login(settings.SMTP_USER, settings.SMTP_PASS)
        smtp.send_message(msg)
    logger.debug("Welcome email sent to %s", recipient)
    program_log.info(program_id, f"Welcome email sent to {recipient}")
    return True
