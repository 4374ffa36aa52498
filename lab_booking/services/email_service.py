import logging
import re
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from lab_booking.core.config import settings

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class EmailResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


class Notifier(Protocol):
    def send(self, to_email: str, subject: str, body_html: str) -> EmailResult: ...


def html_to_text(body_html: str) -> str:
    return _SPACE_RE.sub(" ", _TAG_RE.sub("", body_html)).strip()


class LoggingNotifier:
    """Used when SMTP is not configured: the message is written to the log."""

    def send(self, to_email: str, subject: str, body_html: str) -> EmailResult:
        preview = html_to_text(body_html)
        if len(preview) > 500:
            preview = preview[:500] + "..."
        logger.info("email_logged to=%s subject=%r body=%r", to_email, subject, preview)
        return EmailResult(success=True, message_id="console-log")


class SmtpNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        username: str | None,
        password: str | None,
        from_email: str,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email

    def send(self, to_email: str, subject: str, body_html: str) -> EmailResult:
        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(html_to_text(body_html))
        msg.add_alternative(body_html, subtype="html")

        try:
            if self.port == 465:
                server = smtplib.SMTP_SSL(self.host, self.port, timeout=10)
            else:
                server = smtplib.SMTP(self.host, self.port, timeout=10)
            with server:
                if self.port != 465:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            return EmailResult(success=False, error=str(exc))
        return EmailResult(success=True, message_id=msg.get("Message-ID"))


def build_notifier() -> Notifier:
    if not settings.smtp_host or settings.email_from == "console":
        return LoggingNotifier()
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        from_email=settings.email_from,
    )


def get_notifier() -> Notifier:
    return build_notifier()
