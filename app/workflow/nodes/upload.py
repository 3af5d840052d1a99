from typing import Awaitable, Callable

from app.core.enums import WorkflowStep
from app.core.errors import HcmApiError
from app.workflow.context import SyncContext
from app.workflow.state import HirePhotoState, mark_failed


def make_node(ctx: SyncContext) -> Callable[[HirePhotoState], Awaitable[HirePhotoState]]:
    async def upload_node(state: HirePhotoState) -> HirePhotoState:
        state["step"] = WorkflowStep.UPLOAD.value
        try:
            await ctx.hcm.add_profile_photo(state["identity"].internal_id, state["transformed_photo"])
        except HcmApiError as exc:
            return mark_failed(state, WorkflowStep.UPLOAD, f"Unable to add profile photo: {exc}")
        return state

    return upload_node
