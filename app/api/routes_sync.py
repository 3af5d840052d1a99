from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.api.deps import require_api_key
from app.core.errors import ConfigInvalid
from app.core.models import SyncResult
from app.services.sync_service import invoke

router = APIRouter(prefix="/sync", tags=["sync"], dependencies=[Depends(require_api_key)])


@router.post("/run", response_model=SyncResult)
async def run_sync_now(payload: dict[str, Any] = Body(...)):
    result = await invoke(payload)
    if result.ok:
        return result
    status_code = 400 if result.error and result.error.kind == ConfigInvalid.kind else 502
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
