import asyncio

from app.core.config import Settings, get_settings
from app.services.sync_service import invoke
from app.workers.celery_app import celery


def scheduled_request(settings: Settings) -> dict[str, str]:
    values = {
        "bucket": settings.sync_bucket,
        "namespace": settings.sync_namespace,
        "object": settings.sync_object,
        "hostname": settings.vault_hostname,
        "compartmentOcid": settings.compartment_ocid,
        "secretOcid": settings.secret_ocid,
        "hcmhostname": settings.hcm_hostname,
    }
    return {key: value for key, value in values.items() if value}


@celery.task(name="app.workers.tasks.run_photo_sync")
def run_photo_sync(payload: dict | None = None) -> dict:
    if payload is None:
        payload = scheduled_request(get_settings())
    result = asyncio.run(invoke(payload))
    return result.model_dump(mode="json")
