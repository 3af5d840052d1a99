from dataclasses import dataclass

from app.core.config import Settings
from app.core.models import SyncRequest
from app.services.blob_store import BlobStore
from app.services.hcm_client import HcmClient
from app.services.photo_transform import PhotoTransformer


@dataclass(frozen=True)
class SyncContext:
    """Everything one sync run needs; built per run and never shared."""

    run_id: str
    request: SyncRequest
    settings: Settings
    blob_store: BlobStore
    hcm: HcmClient
    transformer: PhotoTransformer
