from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_authenticated_client
from app.core.security import api_key_auth
from app.remote.client import AuthenticationRequired, PharmacyApiClient
from app.remote.search import LatestOnlySearch
from app.schemas.dto import MedicineOption

router = APIRouter(dependencies=[Depends(api_key_auth)])


@router.get("/medicines", response_model=list[MedicineOption])
def search_medicines(
    q: str = Query(default="", description="Medicine name, at least 2 characters"),
    client: PharmacyApiClient = Depends(get_authenticated_client),
) -> list[MedicineOption]:
    try:
        return LatestOnlySearch(client).search(q)
    except AuthenticationRequired as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
