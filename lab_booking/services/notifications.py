import logging
from collections.abc import Iterable
from dataclasses import dataclass

from fastapi import BackgroundTasks

from lab_booking.core.config import settings
from lab_booking.core.metrics import NOTIFICATION_FAILURES
from lab_booking.domain.events import BookingEvent, BookingPlaced, BookingStatusChanged
from lab_booking.services.email_service import Notifier
from lab_booking.services.email_templates import booking_placed_email, booking_status_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    kind: str
    to_email: str
    subject: str
    body_html: str


def render_booking_event(event: BookingEvent, lab_name: str, base_url: str) -> OutgoingEmail | None:
    if not event.recipient_email:
        logger.warning("notification_skipped booking_id=%s reason=no_recipient", event.booking_id)
        return None
    if isinstance(event, BookingPlaced):
        subject, body = booking_placed_email(event, lab_name, base_url)
        return OutgoingEmail("booking_placed", event.recipient_email, subject, body)
    if isinstance(event, BookingStatusChanged):
        subject, body = booking_status_email(event, lab_name, base_url)
        return OutgoingEmail("booking_status", event.recipient_email, subject, body)
    logger.warning("notification_skipped booking_id=%s reason=unknown_event", event.booking_id)
    return None


def deliver(notifier: Notifier, email: OutgoingEmail) -> bool:
    try:
        result = notifier.send(email.to_email, email.subject, email.body_html)
    except Exception:
        NOTIFICATION_FAILURES.labels(kind=email.kind).inc()
        logger.exception("notification_failed kind=%s to=%s", email.kind, email.to_email)
        return False

    if not result.success:
        NOTIFICATION_FAILURES.labels(kind=email.kind).inc()
        logger.warning("notification_failed kind=%s to=%s error=%s", email.kind, email.to_email, result.error)
        return False

    logger.info("notification_sent kind=%s to=%s message_id=%s", email.kind, email.to_email, result.message_id)
    return True


def deliver_all(notifier: Notifier, emails: Iterable[OutgoingEmail]) -> int:
    return sum(1 for email in emails if deliver(notifier, email))


def dispatch_booking_events(
    events: Iterable[BookingEvent],
    notifier: Notifier,
    lab_name: str,
    base_url: str | None = None,
) -> int:
    url = base_url or settings.app_base_url
    emails = [email for event in events if (email := render_booking_event(event, lab_name, url))]
    return deliver_all(notifier, emails)


def enqueue_all(emails: Iterable[OutgoingEmail]) -> int:
    from lab_booking.tasks.notifications import send_email_task

    queued = 0
    for email in emails:
        try:
            send_email_task.delay(email.to_email, email.subject, email.body_html, email.kind)
        except Exception:
            NOTIFICATION_FAILURES.labels(kind=email.kind).inc()
            logger.exception("notification_enqueue_failed kind=%s to=%s", email.kind, email.to_email)
            continue
        queued += 1
    return queued


def schedule_emails(
    background_tasks: BackgroundTasks,
    notifier: Notifier,
    emails: Iterable[OutgoingEmail],
) -> None:
    emails = list(emails)
    if not emails:
        return

    if settings.notification_dispatch == "celery":
        background_tasks.add_task(enqueue_all, emails)
        return

    background_tasks.add_task(deliver_all, notifier, emails)


def schedule_booking_events(
    background_tasks: BackgroundTasks,
    notifier: Notifier,
    events: Iterable[BookingEvent],
    lab_name: str,
) -> None:
    emails = [
        email
        for event in events
        if (email := render_booking_event(event, lab_name, settings.app_base_url))
    ]
    schedule_emails(background_tasks, notifier, emails)
