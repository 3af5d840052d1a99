import base64
import binascii
from typing import Awaitable, Callable

from app.core.enums import PhotoEncoding, WorkflowStep
from app.core.models import PhotoAsset
from app.workflow.context import SyncContext
from app.workflow.state import HirePhotoState, mark_failed


def decode_photo(photo: PhotoAsset) -> bytes:
    if photo.encoding == PhotoEncoding.BINARY:
        return photo.data
    text = photo.data.decode("ascii").strip()
    # Tolerate data URLs such as "data:image/png;base64,...."
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    return base64.b64decode("".join(text.split()), validate=True)


def make_node(ctx: SyncContext) -> Callable[[HirePhotoState], Awaitable[HirePhotoState]]:
    async def transform_node(state: HirePhotoState) -> HirePhotoState:
        state["step"] = WorkflowStep.TRANSFORM.value
        try:
            raw = decode_photo(state["photo"])
        except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
            return mark_failed(state, WorkflowStep.TRANSFORM, f"Photo is not valid base64: {exc}")

        try:
            transformed = ctx.transformer.transform(raw)
        except Exception as exc:
            return mark_failed(state, WorkflowStep.TRANSFORM, f"Unable to enhance photo: {exc}")

        state["transformed_photo"] = base64.b64encode(transformed).decode("ascii")
        return state

    return transform_node
