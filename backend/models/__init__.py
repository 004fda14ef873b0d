# Identity document & selfie quality models
# This package contains:
#   - pattern_cascade: first-validated-match combinator over ordered rules
#   - date_normalizer: birth date template parsing with plausibility window
#   - document_field_extraction_model: name / DOB / document number extraction
#   - photo_quality_model: brightness, Laplacian sharpness and quality score
#   - quality_gate: live quality monitoring and capture-time gating
