from typing import Awaitable, Callable

from langgraph.graph import END, StateGraph

from app.core.enums import HireFailureReason, HireStatus, WorkflowStep
from app.core.logging import get_logger, log_fields
from app.core.models import HireOutcome, NewHire
from app.workflow.context import SyncContext
from app.workflow.nodes import acquire_photo, finish, reconcile_existing, resolve_identity, transform, upload
from app.workflow.state import HirePhotoState, mark_failed

logger = get_logger(__name__)

Node = Callable[[HirePhotoState], Awaitable[HirePhotoState]]

STEP_ORDER = [
    WorkflowStep.ACQUIRE_PHOTO,
    WorkflowStep.TRANSFORM,
    WorkflowStep.RESOLVE_IDENTITY,
    WorkflowStep.RECONCILE_EXISTING,
    WorkflowStep.UPLOAD,
]


def _guarded(ctx: SyncContext, step: WorkflowStep, node: Node) -> Node:
    async def guarded_node(state: HirePhotoState) -> HirePhotoState:
        try:
            return await node(state)
        except Exception as exc:
            logger.exception(
                "Unexpected error in photo workflow",
                extra=log_fields(run_id=ctx.run_id, person_number=state.get("person_number"), step=step.value),
            )
            return mark_failed(state, step, f"Unexpected error: {exc}")

    return guarded_node


def _route_after(next_step: str) -> Callable[[HirePhotoState], str]:
    def route(state: HirePhotoState) -> str:
        if state.get("failure"):
            return WorkflowStep.FAILED.value
        return next_step

    return route


def build_workflow(ctx: SyncContext):
    graph = StateGraph(HirePhotoState)

    makers = {
        WorkflowStep.ACQUIRE_PHOTO: acquire_photo.make_node,
        WorkflowStep.TRANSFORM: transform.make_node,
        WorkflowStep.RESOLVE_IDENTITY: resolve_identity.make_node,
        WorkflowStep.RECONCILE_EXISTING: reconcile_existing.make_node,
        WorkflowStep.UPLOAD: upload.make_node,
    }
    for step in STEP_ORDER:
        graph.add_node(step.value, _guarded(ctx, step, makers[step](ctx)))
    graph.add_node(WorkflowStep.DONE.value, finish.make_done_node(ctx))
    graph.add_node(WorkflowStep.FAILED.value, finish.make_failed_node(ctx))

    graph.set_entry_point(STEP_ORDER[0].value)
    successors = [step.value for step in STEP_ORDER[1:]] + [WorkflowStep.DONE.value]
    for step, next_step in zip(STEP_ORDER, successors):
        graph.add_conditional_edges(
            step.value,
            _route_after(next_step),
            {
                next_step: next_step,
                WorkflowStep.FAILED.value: WorkflowStep.FAILED.value,
            },
        )
    graph.add_edge(WorkflowStep.DONE.value, END)
    graph.add_edge(WorkflowStep.FAILED.value, END)

    return graph.compile()


def outcome_from_state(state: HirePhotoState) -> HireOutcome:
    photo = state.get("photo")
    existing = state.get("existing_photo")
    if state.get("failure"):
        return HireOutcome(
            person_number=state["person_number"],
            status=HireStatus.FAILED,
            reason=HireFailureReason(state["failure"]),
            message=state.get("error"),
            photo_source=photo.source if photo else None,
        )
    return HireOutcome(
        person_number=state["person_number"],
        status=HireStatus.SUCCEEDED,
        photo_source=photo.source if photo else None,
        replaced_photo_id=existing.photo_id if existing else None,
    )


async def run_hire_workflow(ctx: SyncContext, hire: NewHire, workflow=None) -> HireOutcome:
    """Run one hire through the photo workflow. Never raises; errors become a failed outcome."""
    app = workflow or build_workflow(ctx)
    state: HirePhotoState = {
        "run_id": ctx.run_id,
        "person_number": hire.person_number,
        "new_hire": hire.model_dump(by_alias=True),
    }
    try:
        async for state in app.astream(state, stream_mode="values"):
            pass
    except Exception as exc:
        step = WorkflowStep(state.get("step") or WorkflowStep.ACQUIRE_PHOTO.value)
        logger.exception(
            f"Error processing newhire: {hire.person_number}",
            extra=log_fields(run_id=ctx.run_id, person_number=hire.person_number, step=step.value),
        )
        if state.get("failure") or step == WorkflowStep.DONE:
            return outcome_from_state(state)
        return outcome_from_state(mark_failed(dict(state), step, f"Unexpected error: {exc}"))
    return outcome_from_state(state)
