"""
Identity verification service.

Combines document field extraction with selfie photo quality assessment.
Document text comes from an external OCR / PDF text extractor; the selfie is
an encoded image (JPEG/PNG). Face comparison is not performed here.
"""

import logging
import re
from datetime import date
from typing import Optional

from rapidfuzz import fuzz

from config import ApiConfig, GateConfig, QualityConfig
from models.date_normalizer import parse_birth_date
from models.document_field_extraction_model import (
    DocumentFields,
    extract_document_fields,
    is_adult,
)
from models.photo_quality_model import (
    PixelFrame,
    lighting_label,
    quality_status,
    sharpness_label,
)
from models.quality_gate import capture_action, gate_capture

logger = logging.getLogger("idverify.service")


def _normalize_text(text: str) -> str:
    """Lowercase, strip, collapse whitespace and remove punctuation."""
    text = text.lower().strip()
    text = re.sub(r"[^a-z0-9\s]", "", text)
    return " ".join(text.split())


def names_match(claimed: str, extracted: str, threshold: Optional[float] = None) -> bool:
    """Fuzzy comparison tolerant to OCR noise and partial names."""
    threshold = threshold if threshold is not None else ApiConfig().name_match_threshold
    na, nb = _normalize_text(claimed), _normalize_text(extracted)
    if not na or not nb:
        return False
    if na == nb or na in nb or nb in na:
        return True
    return fuzz.token_sort_ratio(na, nb) >= threshold


def _parse_claimed_dob(value: str) -> Optional[date]:
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return parse_birth_date(text, window=None)


# =========================
# DOCUMENT
# =========================

def document_info(fields: DocumentFields) -> dict:
    info = fields.to_dict()
    info["age"] = fields.age
    return info


def extract_identity(document_text: str, cfg: Optional[ApiConfig] = None) -> dict:
    cfg = cfg or ApiConfig()
    fields = extract_document_fields(document_text)
    return {
        "document_info": document_info(fields),
        "is_adult": is_adult(fields.age, cfg.adult_age),
    }


# =========================
# PHOTO
# =========================

def assess_photo(
    image_bytes: bytes,
    quality_cfg: Optional[QualityConfig] = None,
    gate_cfg: Optional[GateConfig] = None,
) -> dict:
    """Decode and gate a selfie. Raises ``InvalidFrameError`` for bad images."""
    quality_cfg = quality_cfg or QualityConfig()
    frame = PixelFrame.from_image_bytes(image_bytes)
    decision = gate_capture(frame, quality_cfg)
    metrics = decision.metrics
    action = capture_action(metrics, gate_cfg)

    return {
        "metrics": metrics.to_dict(),
        "feedback": decision.feedback.to_dict(),
        "status": quality_status(metrics.overall_score, quality_cfg),
        "lighting": lighting_label(metrics, quality_cfg),
        "sharpness": sharpness_label(metrics, quality_cfg),
        "accepted": decision.accepted,
        "capture_action": {"enabled": action.enabled, "label": action.label},
    }


# =========================
# FULL VERIFICATION
# =========================

def verify_identity(
    document_text: str,
    selfie_bytes: bytes,
    claimed_name: Optional[str] = None,
    claimed_dob: Optional[str] = None,
    cfg: Optional[ApiConfig] = None,
) -> dict:
    """
    Run document extraction and selfie quality assessment.

    Fields that could not be extracted stay ``None``; deciding whether that
    fails the verification is left to the caller.
    """
    cfg = cfg or ApiConfig()
    photo = assess_photo(selfie_bytes)
    fields = extract_document_fields(document_text)

    name_match = None
    if claimed_name:
        name_match = bool(fields.name) and names_match(
            claimed_name, fields.name, cfg.name_match_threshold)

    dob_match = None
    if claimed_dob:
        claimed = _parse_claimed_dob(claimed_dob)
        dob_match = claimed is not None and claimed == fields.date_of_birth

    result = {
        "success": True,
        "document_info": document_info(fields),
        "verification": {
            "is_adult": is_adult(fields.age, cfg.adult_age),
            "name_match": name_match,
            "dob_match": dob_match,
        },
        "photo_quality": photo,
    }

    logger.info(
        "verification done: adult=%s name_match=%s dob_match=%s photo=%s",
        result["verification"]["is_adult"], name_match, dob_match, photo["status"],
    )
    return result
