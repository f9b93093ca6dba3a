"""Delivery of verification codes.

E-mail goes through SMTP when ``SMTP_HOST`` is set and is only logged
otherwise. SMS has no provider yet, so messages are logged.
"""

import smtplib
from email.mime.text import MIMEText

from fastapi import Depends

from app.core_settings import Settings, get_settings
from app.domain.errors import UpstreamFailure
from shared.core import get_logger

logger = get_logger(__name__)


class Notifier:
    def __init__(self, settings: Settings):
        self.settings = settings

    def send_email(self, to: str, subject: str, body: str) -> None:
        if not self.settings.SMTP_HOST:
            logger.info(f"SMTP not configured, e-mail to {to} not sent", extra={'extra_fields': {'subject': subject}})
            return

        message = MIMEText(body, "plain", "utf-8")
        message["Subject"] = subject
        message["From"] = self.settings.MAIL_FROM
        message["To"] = to

        try:
            with smtplib.SMTP(
                self.settings.SMTP_HOST,
                self.settings.SMTP_PORT,
                timeout=self.settings.MAIL_TIMEOUT_SECONDS,
            ) as server:
                if self.settings.SMTP_USE_TLS:
                    server.starttls()
                if self.settings.SMTP_USER:
                    server.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD or "")
                server.sendmail(self.settings.MAIL_FROM, [to], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send e-mail to {to}: {e}")
            raise UpstreamFailure("Could not deliver the verification code") from e

        logger.info(f"E-mail sent to {to}")

    def send_sms(self, phone: str, body: str) -> None:
        logger.info(f"SMS to {phone} queued (stub)", extra={'extra_fields': {'length': len(body)}})


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    return Notifier(settings)
