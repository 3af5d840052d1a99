from datetime import timedelta

from app.core.config import get_settings

settings = get_settings()

CELERY_BEAT_SCHEDULE = {
    "hcm-newhire-photo-sync": {
        "task": "app.workers.tasks.run_photo_sync",
        "schedule": timedelta(minutes=settings.sync_interval_minutes),
    },
}
