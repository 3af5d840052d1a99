from typing import Any, TypedDict

from app.core.enums import STEP_FAILURES, WorkflowStep
from app.core.models import ExistingPhotoRef, PhotoAsset, WorkerIdentity


class HirePhotoState(TypedDict, total=False):
    run_id: str
    person_number: str
    new_hire: dict[str, Any]

    step: str
    photo: PhotoAsset
    transformed_photo: str
    identity: WorkerIdentity
    existing_photo: ExistingPhotoRef

    failure: str
    error: str


def mark_failed(state: HirePhotoState, step: WorkflowStep, message: str) -> HirePhotoState:
    state["step"] = step.value
    state["failure"] = STEP_FAILURES[step].value
    state["error"] = message
    return state
