from celery import Celery

from lab_booking.core.config import settings

celery_app = Celery(
    "lab_booking",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["lab_booking.tasks.notifications"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_ignore_result=True,
)
