import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_api_client, get_credentials_store
from app.core.security import api_key_auth
from app.remote.client import ApiError, PharmacyApiClient
from app.remote.credentials import FileCredentialsStore
from app.schemas.dto import LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(api_key_auth)])


@router.post("/login")
def login(
    payload: LoginRequest,
    client: PharmacyApiClient = Depends(get_api_client),
    store: FileCredentialsStore = Depends(get_credentials_store),
) -> dict[str, Any]:
    try:
        auth = client.login(payload.mobile, payload.password)
    except ApiError as exc:
        raise HTTPException(status_code=exc.status_code or status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    if not auth.get("token"):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Login response did not include a token")
    store.save(auth)
    logger.info("Logged in as %s", payload.mobile)
    return {"status": "ok", "user": auth.get("user")}


@router.post("/logout")
def logout(store: FileCredentialsStore = Depends(get_credentials_store)) -> dict[str, str]:
    store.clear()
    return {"status": "ok"}
