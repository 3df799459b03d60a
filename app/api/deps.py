from fastapi import Depends, HTTPException, status

from app.core.config import get_settings
from app.remote.client import PharmacyApiClient
from app.remote.credentials import FileCredentialsStore


def get_credentials_store() -> FileCredentialsStore:
    return FileCredentialsStore(get_settings().CREDENTIALS_PATH)


def get_api_client(store: FileCredentialsStore = Depends(get_credentials_store)) -> PharmacyApiClient:
    settings = get_settings()
    return PharmacyApiClient(settings.API_BASE_URL, store, timeout=settings.REQUEST_TIMEOUT)


def get_authenticated_client(
    store: FileCredentialsStore = Depends(get_credentials_store),
    client: PharmacyApiClient = Depends(get_api_client),
) -> PharmacyApiClient:
    if not store.is_authenticated():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    return client
