import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from config import ApiConfig
from schemas.verification_schemas import ExtractionOut, PhotoQualityOut, VerificationOut
from services.verification_service import assess_photo, extract_identity, verify_identity

router = APIRouter(prefix="/api", tags=["verification"])
logger = logging.getLogger("idverify.api")


async def _read_upload(file: UploadFile, field: str) -> bytes:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail=f"{field} is empty")
    if len(data) > ApiConfig().max_upload_bytes:
        raise HTTPException(status_code=413, detail=f"{field} exceeds the upload size limit")
    return data


@router.post("/extract", response_model=ExtractionOut)
def extract_document(text: str = Form(...)):
    """Extract name, date of birth and document number from recognized text."""
    return extract_identity(text)


@router.post("/quality", response_model=PhotoQualityOut)
async def photo_quality(image: UploadFile = File(...)):
    data = await _read_upload(image, "image")
    try:
        return assess_photo(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/verify", response_model=VerificationOut)
async def verify(
    document_text: str = Form(...),
    selfie: UploadFile = File(...),
    full_name: Optional[str] = Form(None),
    date_of_birth: Optional[str] = Form(None),
):
    selfie_bytes = await _read_upload(selfie, "selfie")
    try:
        return verify_identity(
            document_text=document_text,
            selfie_bytes=selfie_bytes,
            claimed_name=full_name,
            claimed_dob=date_of_birth,
        )
    except ValueError as e:
        logger.warning("verification rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
