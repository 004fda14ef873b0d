from datetime import date
from typing import List, Optional
from pydantic import BaseModel


class DocumentInfoOut(BaseModel):
    name: Optional[str] = None
    date_of_birth: Optional[date] = None
    document_number: Optional[str] = None
    age: Optional[int] = None


class QualityMetricsOut(BaseModel):
    brightness: float
    blur_score: float
    overall_score: int
    too_dark: bool
    too_light: bool
    is_blurry: bool


class QualityFeedbackOut(BaseModel):
    severity: str
    issues: List[str] = []
    suggestions: List[str] = []
    message: str


class CaptureActionOut(BaseModel):
    enabled: bool
    label: str


class PhotoQualityOut(BaseModel):
    metrics: QualityMetricsOut
    feedback: QualityFeedbackOut
    status: str
    lighting: str
    sharpness: str
    accepted: bool
    capture_action: CaptureActionOut


class VerificationChecksOut(BaseModel):
    is_adult: bool = False
    name_match: Optional[bool] = None
    dob_match: Optional[bool] = None


class VerificationOut(BaseModel):
    success: bool = True
    document_info: DocumentInfoOut
    verification: VerificationChecksOut
    photo_quality: PhotoQualityOut


class ExtractionOut(BaseModel):
    document_info: DocumentInfoOut
    is_adult: bool = False
