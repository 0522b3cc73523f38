"""Celery producer used to hand work to the pdf preprocessing worker."""

from celery import Celery
from .config import Settings


def create_celery_app(settings: Settings) -> Celery:
    """Create the producer-side Celery app.

    The preprocessing worker registers its tasks itself; this process only
    sends tasks by name with ``send_task`` and never waits for results.
    """
    celery_app = Celery(
        "document-processing",
        broker=settings.CELERY_BROKER_URL,
    )

    celery_app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        accept_content=settings.CELERY_ACCEPT_CONTENT,
        timezone=settings.CELERY_TIMEZONE,
        enable_utc=True,
        task_ignore_result=True,
        task_default_queue=settings.PREPROCESS_QUEUE,
    )
    return celery_app
