from fastapi import Header

from app.core.security import validate_api_key


def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
    validate_api_key(x_api_key)
