# odesa/utils/email_utils.py
import logging
import smtplib
from email.message import EmailMessage

from odesa.core.config import Settings
from odesa.core.logging import OUTBOX_LOGGER
from odesa.serialize import utcnow

logger = logging.getLogger(__name__)
outbox = logging.getLogger(OUTBOX_LOGGER)


def send_email(to_email: str, subject: str, body: str, settings: Settings):
    """Deliver over SMTP when configured, otherwise append to the outbox log."""
    if not settings.SMTP_SERVER:
        outbox.info(
            "\n=== EMAIL SENT %s ===\nTo: %s\nSubject: %s\nContent: %s\n%s",
            utcnow().isoformat(), to_email, subject, body, "=" * 42,
        )
        logger.info("📧 Email logged for: %s (%s)", to_email, subject)
        return

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_USER
    msg["To"] = to_email
    msg.set_content(body)

    try:
        with smtplib.SMTP_SSL(settings.SMTP_SERVER, settings.SMTP_PORT) as smtp:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
            logger.info("📧 Email sent to %s", to_email)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send email to %s: %s", to_email, e)
        raise


def send_password_reset_email(to_email: str, token: str, settings: Settings):
    reset_url = f"{settings.CLIENT_URL}/reset-password?token={token}"
    subject = "Reset Your Password - Odesa Holiday Postcards"
    body = f"""
Password Reset - Odesa Holiday Postcards

Hello,

We received a request to reset the password for your Odesa Holiday Postcards account.

Reset your password by visiting this link:
{reset_url}

This link will expire in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes for security reasons.

If you didn't request this password reset, please ignore this email.

Best regards,
The Odesa Holiday Postcards Team
"""
    send_email(to_email, subject, body, settings)
