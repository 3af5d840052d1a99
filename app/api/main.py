import logging

from fastapi import FastAPI

from app.api import routes_sync
from app.core.config import get_settings
from app.core.logging import setup_logging

settings = get_settings()
setup_logging(logging.DEBUG if settings.debug else logging.INFO)

app = FastAPI(title=settings.app_name)


@app.get("/healthz")
def healthz():
    return {"status": "ok", "service": settings.app_name}


app.include_router(routes_sync.router)
