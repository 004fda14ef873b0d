"""
DOCUMENT FIELD EXTRACTION
-------------------------
Turn raw OCR / PDF text into structured identity fields.

Fields:
- document number (Aadhaar, PAN, voter ID, driving license, generic IDs)
- full name
- date of birth (ISO calendar date)

Each field is resolved by an ordered pattern cascade: the first pattern whose
candidate passes validation wins. Unmatched fields are ``None``; extraction
never substitutes placeholder values and never raises.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from models.date_normalizer import parse_birth_date
from models.pattern_cascade import CascadeRule, first_validated_rule, regex_matcher

logger = logging.getLogger("idverify.extraction")


# =========================
# OUTPUT DATA STRUCTURE
# =========================

@dataclass(frozen=True)
class DocumentFields:
    name: Optional[str] = None
    date_of_birth: Optional[date] = None
    document_number: Optional[str] = None

    @property
    def age(self) -> Optional[int]:
        return calculate_age(self.date_of_birth)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "document_number": self.document_number,
        }


# =========================
# DOCUMENT NUMBER
# =========================

_TWELVE_DIGITS_RE = re.compile(r"^(\d{4})(\d{4})(\d{4})$")


def _validate_document_number(candidate: str) -> Optional[str]:
    cleaned = re.sub(r"[^A-Za-z0-9\-]", "", candidate.strip())
    if not 8 <= len(cleaned) <= 20:
        return None
    m = _TWELVE_DIGITS_RE.match(cleaned)
    if m:
        return " ".join(m.groups())
    return cleaned


DOCUMENT_NUMBER_RULES: Tuple[CascadeRule, ...] = (
    # Aadhaar: 12 digits, usually printed as XXXX XXXX XXXX
    CascadeRule("aadhaar_keyword",
                regex_matcher(r"(?:Aadhaar|Aadhar|UIDAI).*?(\d{4}\s?\d{4}\s?\d{4})", flags=re.I),
                _validate_document_number),
    CascadeRule("aadhaar_digits",
                regex_matcher(r"(\d{4}\s?\d{4}\s?\d{4})"),
                _validate_document_number),
    # PAN: 5 letters + 4 digits + 1 letter
    CascadeRule("pan", regex_matcher(r"[A-Z]{5}\d{4}[A-Z]"), _validate_document_number),
    CascadeRule("voter_id", regex_matcher(r"[A-Z]{3}\d{7}"), _validate_document_number),
    CascadeRule("driving_license_dashed",
                regex_matcher(r"[A-Z]{2}-?\d{2}-?\d{4}-?\d{7}"),
                _validate_document_number),
    CascadeRule("driving_license", regex_matcher(r"[A-Z]{2}\d{13}"), _validate_document_number),
    # value stays on the label's line
    CascadeRule("labelled_generic",
                regex_matcher(r"(?:ID|Number|No\.?)\s*[:=]\s*([A-Z0-9 \-]{8,20})", flags=re.I),
                _validate_document_number),
    CascadeRule("generic_grouped",
                regex_matcher(r"\b[A-Z0-9]{4}[\s\-]?[A-Z0-9]{4}[\s\-]?[A-Z0-9]{4,8}\b"),
                _validate_document_number),
)


def extract_document_number(text: str) -> Optional[str]:
    winner = first_validated_rule(DOCUMENT_NUMBER_RULES, text or "")
    if winner is None:
        logger.debug("document number not found")
        return None
    rule, value = winner
    logger.debug("document number matched by %s", rule.name)
    return value


# =========================
# NAME
# =========================

EXCLUDED_NAME_WORDS = frozenset({
    "address", "street", "road", "lane", "avenue", "city", "state", "country",
    "mobile", "phone", "email", "website", "number", "issue", "expiry", "valid",
    "government", "india", "authority", "department", "ministry", "office",
    "proof", "identity", "card", "document", "certificate", "license", "passport",
    "aadhaar", "aadhar", "pan", "voter", "driving", "election", "commission",
    "date", "birth", "issued", "expires", "download", "print", "scan",
    "information", "details", "verification", "authentic", "secure",
    "your", "this", "that", "with", "from", "very", "help", "avail",
    "income", "tax", "permanent", "account", "fathers", "signature",
    # recurring OCR garbage on PAN card scans
    "form", "sae", "foam", "turd", "govt", "colony", "zero", "zeropur",
})

# Lines containing any of these are never treated as a name by the line scan.
_ADMIN_LINE_RE = re.compile(
    r"government|income|tax|department|card|number|dob|gender|address|permanent|"
    r"account|fathers|signature",
    re.I,
)
_NAME_LABEL_RE = re.compile(r"name|1h")
_ALPHA_WORD_RE = re.compile(r"^[A-Za-z]+$")

_NAME_WORDS = r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*?"
_DATE_DMY = r"\d{2}/\d{2}/\d{4}"


def _title_case(words: List[str]) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def _validate_name(candidate: str) -> Optional[str]:
    cleaned = re.sub(r"[^A-Za-z0-9_\s]", " ", candidate.strip())
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    words = cleaned.lower().split(" ") if cleaned else []

    if not 4 <= len(cleaned) <= 50 or not 1 <= len(words) <= 4:
        return None
    if any(w in EXCLUDED_NAME_WORDS for w in words):
        return None
    if cleaned.isdigit() or re.search(r"\d{4}", cleaned):
        return None
    if not all(len(w) >= 2 and _ALPHA_WORD_RE.match(w) for w in words):
        return None
    return _title_case(words)


NAME_RULES: Tuple[CascadeRule, ...] = (
    # PAN card: "1H / Name" label with the value on the next line
    CascadeRule("pan_label_next_line", regex_matcher(
        r"(?:1H\s*/\s*Name|Name)\s*[:=]?\s*\n\s*([A-Z][A-Z\s]+?)"
        r"(?:\n|$|FIT|Father|DOB|Male|Female|MALE|FEMALE|" + _DATE_DMY + ")",
        flags=re.I), _validate_name),
    CascadeRule("label_next_line", regex_matcher(
        r"(?:Name|Full Name)\s*[:=]?\s*\n\s*([A-Z][A-Z\s]+?)"
        r"(?:\n|$|FIT|Father|DOB|Male|Female|" + _DATE_DMY + ")",
        flags=re.I), _validate_name),
    CascadeRule("label_inline", regex_matcher(
        r"(?:Name|Full Name)\s*[:=]\s*(" + _NAME_WORDS + r")"
        r"(?:\n|$|DOB|Male|Female|" + _DATE_DMY + ")",
        flags=re.I), _validate_name),
    CascadeRule("before_gender", regex_matcher(
        r"(" + _NAME_WORDS + r")\s+(?:Male|Female)", flags=re.I), _validate_name),
    CascadeRule("before_date", regex_matcher(
        r"(" + _NAME_WORDS + r")\s+(?:" + _DATE_DMY + r"|\d{2}-\d{2}-\d{4})"), _validate_name),
    CascadeRule("indian_title", regex_matcher(
        r"(?:Shri|Smt|Kumar|Kumari)\s+(" + _NAME_WORDS + r")"
        r"(?:\n|$|Male|Female|DOB|" + _DATE_DMY + ")",
        flags=re.I), _validate_name),
    CascadeRule("western_title", regex_matcher(
        r"(?:Mr\.?|Mrs\.?|Ms\.?|Dr\.?)\s+(" + _NAME_WORDS + r")"
        r"(?:\n|$|Male|Female|DOB|" + _DATE_DMY + ")",
        flags=re.I), _validate_name),
    CascadeRule("standalone_caps", regex_matcher(
        r"(?:^|\n)\s*([A-Z]{2,}(?:\s+[A-Z]{2,})*)\s*(?:\n|$|FIT|Father|DOB|Male|Female)"),
        _validate_name),
    CascadeRule("standalone_mixed_case", regex_matcher(
        r"(?:^|\n)\s*([A-Z][a-z]{2,}\s+[A-Z][a-z]{2,}(?:\s+[A-Z][a-z]{2,})?(?:\s+[A-Z][a-z]{2,})?)"
        r"\s*(?:\n|$|Male|Female|DOB)"), _validate_name),
)


def _scan_lines_for_name(text: str) -> Optional[str]:
    """Line-by-line fallback when no context pattern produced a name.

    A line right after a name label wins immediately; otherwise the first
    plausible line is kept as a backup while the scan continues.
    """
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    backup: Optional[str] = None

    for i, line in enumerate(lines):
        if len(line) < 4 or len(line) > 50:
            continue
        if re.search(r"\d{4}", line) or _ADMIN_LINE_RE.search(line):
            continue

        words = [w for w in line.split() if len(w) >= 2 and _ALPHA_WORD_RE.match(w)]
        if not 1 <= len(words) <= 3:
            continue
        if any(w.lower() in EXCLUDED_NAME_WORDS for w in words):
            continue

        candidate = _title_case(words)
        prev_line = lines[i - 1].lower() if i > 0 else ""
        if _NAME_LABEL_RE.search(prev_line):
            logger.debug("name taken from line after label: %r", candidate)
            return candidate
        if backup is None:
            backup = candidate

    return backup


def extract_name(text: str) -> Optional[str]:
    text = text or ""
    winner = first_validated_rule(NAME_RULES, text)
    if winner is not None:
        rule, value = winner
        logger.debug("name matched by %s: %r", rule.name, value)
        return value

    name = _scan_lines_for_name(text)
    if name is None:
        logger.debug("name not found")
    return name


# =========================
# DATE OF BIRTH
# =========================

_DATE_TOKEN = r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"

DOB_RULES: Tuple[CascadeRule, ...] = (
    CascadeRule("labelled", regex_matcher(
        r"(?:DOB|Date of Birth|Birth Date|Born)\s*[:=]?\s*(" + _DATE_TOKEN + ")", flags=re.I),
        parse_birth_date),
    CascadeRule("before_gender", regex_matcher(
        r"(" + _DATE_TOKEN + r")\s*(?:\([^)]*\))?\s*(?:Male|Female)", flags=re.I),
        parse_birth_date),
    CascadeRule("parenthesized", regex_matcher(r"\((" + _DATE_TOKEN + r")\)"), parse_birth_date),
    CascadeRule("bare_century", regex_matcher(
        r"\b(\d{1,2}[/\-.]\d{1,2}[/\-.](?:19|20)\d{2})\b"), parse_birth_date),
    CascadeRule("any_date", regex_matcher(r"(" + _DATE_TOKEN + ")"), parse_birth_date),
)


def extract_date_of_birth(text: str) -> Optional[date]:
    winner = first_validated_rule(DOB_RULES, text or "")
    if winner is None:
        logger.debug("date of birth not found")
        return None
    rule, value = winner
    logger.debug("date of birth matched by %s: %s", rule.name, value.isoformat())
    return value


# =========================
# AGE
# =========================

def calculate_age(dob: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Completed years between ``dob`` and ``today``."""
    if dob is None:
        return None
    today = today or date.today()
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


def is_adult(age: Optional[int], adult_age: int = 18) -> bool:
    return age is not None and age >= adult_age


# =========================
# ENTRY POINT
# =========================

def extract_document_fields(text: str) -> DocumentFields:
    """
    Extract name, date of birth and document number from recognized text.
    """
    fields = DocumentFields(
        name=extract_name(text),
        date_of_birth=extract_date_of_birth(text),
        document_number=extract_document_number(text),
    )
    logger.info(
        "extracted fields: name=%s dob=%s document_number=%s",
        fields.name is not None,
        fields.date_of_birth is not None,
        fields.document_number is not None,
    )
    return fields


# =========================
# LOCAL TEST
# =========================

if __name__ == "__main__":
    sample = (
        "GOVERNMENT OF INDIA\n"
        "Name: RAHUL SHARMA\n"
        "DOB: 14/08/1992 Male\n"
        "1234 5678 9012\n"
    )

    result = extract_document_fields(sample)
    print("FIELD EXTRACTION RESULT:")
    print(result.to_dict(), "age:", result.age)
