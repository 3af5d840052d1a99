from typing import Awaitable, Callable

from app.core.enums import WorkflowStep
from app.core.errors import HcmApiError
from app.core.logging import get_logger, log_fields
from app.core.models import ExistingPhotoRef
from app.workflow.context import SyncContext
from app.workflow.state import HirePhotoState, mark_failed

logger = get_logger(__name__)


def make_node(ctx: SyncContext) -> Callable[[HirePhotoState], Awaitable[HirePhotoState]]:
    async def reconcile_existing_node(state: HirePhotoState) -> HirePhotoState:
        state["step"] = WorkflowStep.RECONCILE_EXISTING.value
        worker_id = state["identity"].internal_id
        try:
            photos = await ctx.hcm.find_profile_photos(worker_id)
        except HcmApiError as exc:
            return mark_failed(
                state,
                WorkflowStep.RECONCILE_EXISTING,
                f"Unable to determine existence of a profile photo: {exc}",
            )

        # A worker holds at most one PROFILE photo.
        photo_id = photos[0].get("PhotoId") if photos else None
        existing = ExistingPhotoRef(photo_id=str(photo_id) if photo_id not in (None, "") else None)

        if existing.photo_id is not None:
            try:
                await ctx.hcm.delete_photo(worker_id, existing.photo_id)
            except HcmApiError as exc:
                return mark_failed(
                    state,
                    WorkflowStep.RECONCILE_EXISTING,
                    f"Unable to delete existing profile photo: {exc}",
                )
            logger.info(
                "Deleted existing profile photo",
                extra=log_fields(
                    run_id=ctx.run_id,
                    person_number=state["person_number"],
                    photo_id=existing.photo_id,
                ),
            )

        state["existing_photo"] = existing
        return state

    return reconcile_existing_node
