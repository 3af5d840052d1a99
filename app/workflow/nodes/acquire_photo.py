from typing import Awaitable, Callable

from app.core.enums import PhotoSource, WorkflowStep
from app.core.errors import BlobStoreError
from app.core.logging import get_logger, log_fields
from app.core.models import PhotoAsset
from app.workflow.context import SyncContext
from app.workflow.state import HirePhotoState, mark_failed

logger = get_logger(__name__)


async def _read_photo(ctx: SyncContext, name: str, source: PhotoSource) -> PhotoAsset | None:
    request = ctx.request
    try:
        data = await ctx.blob_store.read(request.namespace, request.bucket, name)
    except BlobStoreError as exc:
        logger.warning(
            "Photo read failed",
            extra=log_fields(run_id=ctx.run_id, object_name=name, error=str(exc)),
        )
        return None
    if not data:
        return None
    return PhotoAsset(
        data=data,
        encoding=ctx.settings.photo_encoding,
        source=source,
        object_name=name,
    )


def make_node(ctx: SyncContext) -> Callable[[HirePhotoState], Awaitable[HirePhotoState]]:
    async def acquire_photo_node(state: HirePhotoState) -> HirePhotoState:
        state["step"] = WorkflowStep.ACQUIRE_PHOTO.value
        person_number = state["person_number"]

        photo = await _read_photo(ctx, person_number, PhotoSource.HIRE)
        if photo is None:
            logger.info(
                "Photo not available. Fetching default photo.",
                extra=log_fields(run_id=ctx.run_id, person_number=person_number),
            )
            photo = await _read_photo(ctx, ctx.settings.default_photo_object, PhotoSource.DEFAULT)

        if photo is None:
            return mark_failed(
                state,
                WorkflowStep.ACQUIRE_PHOTO,
                f"No photo for {person_number} and default photo "
                f"'{ctx.settings.default_photo_object}' is unavailable",
            )

        state["photo"] = photo
        return state

    return acquire_photo_node
