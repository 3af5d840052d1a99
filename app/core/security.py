import hmac

from fastapi import HTTPException, status

from app.core.config import get_settings


def validate_api_key(api_key: str | None) -> None:
    settings = get_settings()
    if not api_key or not hmac.compare_digest(api_key, settings.local_api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
