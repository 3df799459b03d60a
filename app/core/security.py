from fastapi import Header, HTTPException, status

from app.core.config import get_settings


def api_key_auth(x_api_key: str | None = Header(default=None)) -> None:
    """Reject requests that do not carry the configured X-API-Key."""
    if x_api_key != get_settings().API_KEY:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
