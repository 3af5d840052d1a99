import logging

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from app.core.config import get_settings
from app.core.logging import setup_logging
from app.workers.schedules import CELERY_BEAT_SCHEDULE

settings = get_settings()

celery = Celery(
    "hcm_photo_sync",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.workers.tasks"],
)

celery.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # A sync run owns the checkpoint; never run two at once on one worker.
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
    beat_schedule=CELERY_BEAT_SCHEDULE,
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs) -> None:
    setup_logging(logging.DEBUG if settings.debug else logging.INFO)
