from lab_booking.services.email_service import build_notifier
from lab_booking.services.notifications import OutgoingEmail, deliver
from lab_booking.tasks.celery_app import celery_app


@celery_app.task(name="notifications.send_email")
def send_email_task(to_email: str, subject: str, body_html: str, kind: str = "email") -> dict[str, bool]:
    email = OutgoingEmail(kind=kind, to_email=to_email, subject=subject, body_html=body_html)
    return {"sent": deliver(build_notifier(), email)}
