from typing import Awaitable, Callable

from app.core.enums import WorkflowStep
from app.core.errors import HcmApiError
from app.core.models import WorkerIdentity
from app.services.hcm_client import worker_id_from_href
from app.workflow.context import SyncContext
from app.workflow.state import HirePhotoState, mark_failed


def make_node(ctx: SyncContext) -> Callable[[HirePhotoState], Awaitable[HirePhotoState]]:
    async def resolve_identity_node(state: HirePhotoState) -> HirePhotoState:
        state["step"] = WorkflowStep.RESOLVE_IDENTITY.value
        person_number = state["person_number"]
        try:
            workers = await ctx.hcm.search_workers(person_number)
        except HcmApiError as exc:
            return mark_failed(state, WorkflowStep.RESOLVE_IDENTITY, f"Unable to get worker info: {exc}")

        if len(workers) != 1:
            return mark_failed(
                state,
                WorkflowStep.RESOLVE_IDENTITY,
                f"Expected exactly one worker for {person_number}, found {len(workers)}",
            )

        links = workers[0].get("links") or []
        href = links[0].get("href") if links and isinstance(links[0], dict) else None
        internal_id = worker_id_from_href(href) if isinstance(href, str) else None
        if not internal_id:
            return mark_failed(
                state,
                WorkflowStep.RESOLVE_IDENTITY,
                f"Worker record for {person_number} has no self link",
            )

        state["identity"] = WorkerIdentity(internal_id=internal_id)
        return state

    return resolve_identity_node
