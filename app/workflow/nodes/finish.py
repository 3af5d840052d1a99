from typing import Awaitable, Callable

from app.core.enums import WorkflowStep
from app.core.logging import get_logger, log_fields
from app.workflow.context import SyncContext
from app.workflow.state import HirePhotoState

logger = get_logger(__name__)


def make_done_node(ctx: SyncContext) -> Callable[[HirePhotoState], Awaitable[HirePhotoState]]:
    async def done_node(state: HirePhotoState) -> HirePhotoState:
        state["step"] = WorkflowStep.DONE.value
        photo = state.get("photo")
        logger.info(
            "Profile photo updated",
            extra=log_fields(
                run_id=ctx.run_id,
                person_number=state["person_number"],
                photo_source=photo.source.value if photo else None,
            ),
        )
        return state

    return done_node


def make_failed_node(ctx: SyncContext) -> Callable[[HirePhotoState], Awaitable[HirePhotoState]]:
    async def failed_node(state: HirePhotoState) -> HirePhotoState:
        # `step` stays on the state that failed.
        logger.error(
            f"Error processing newhire: {state['person_number']}",
            extra=log_fields(
                run_id=ctx.run_id,
                person_number=state["person_number"],
                step=state.get("step"),
                reason=state.get("failure"),
                error=state.get("error"),
            ),
        )
        return state

    return failed_node
