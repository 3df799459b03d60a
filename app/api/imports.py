from fastapi import APIRouter, Depends, File, UploadFile

from app.core.security import api_key_auth
from app.imports.parsers import parse_import_file
from app.schemas.dto import ImportResult

router = APIRouter(dependencies=[Depends(api_key_auth)])


@router.post("/medicines", response_model=ImportResult)
async def import_medicines(file: UploadFile = File(...)) -> ImportResult:
    """Parse an uploaded CSV / XLSX into line items for review; nothing is saved."""
    content = await file.read()
    parsed = parse_import_file(file.filename or "", content)
    return ImportResult(success=parsed.success, items=parsed.items, errors=parsed.errors)
