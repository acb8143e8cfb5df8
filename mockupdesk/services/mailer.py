# mockupdesk/services/mailer.py
from email.message import EmailMessage
from typing import Optional

import aiosmtplib
import structlog

from mockupdesk.config import settings

logger = structlog.get_logger(__name__)


async def send_email(
    to_email: str,
    subject: str,
    plain_text: str,
    html: Optional[str] = None,
) -> None:
    """
    Send an email asynchronously over SMTP (aiosmtplib).

    Runs as a background task after the response is sent, so failures are
    logged and not raised: nothing is left to report them to.
    """
    if settings.is_development and not settings.SMTP_HOST:
        logger.info("email_send_stub_dev", to=to_email, subject=subject)
        return

    msg = EmailMessage()
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(plain_text)
    if html:
        msg.add_alternative(html, subtype="html")

    try:
        await aiosmtplib.send(
            msg,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=settings.SMTP_PORT in (587, 25),
        )
        logger.info("email_sent", to=to_email, subject=subject)
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.exception("email_send_failed", to=to_email, subject=subject, error=str(e))
