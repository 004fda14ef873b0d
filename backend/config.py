"""Runtime configuration.

Defaults mirror the tuned thresholds; deployment-specific knobs can be
overridden through environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, default))
    except (TypeError, ValueError):
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, default))
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------- quality ---

@dataclass
class QualityConfig:
    """Brightness / sharpness thresholds for selfie frames."""
    too_dark_below: float = 60.0
    dim_below: float = 80.0
    bright_above: float = 180.0
    too_light_above: float = 200.0

    # Laplacian energy; higher = sharper
    very_blurry_below: float = 50.0
    blurry_below: float = 100.0
    slightly_blurry_below: float = 200.0

    too_dark_penalty: int = 30
    too_light_penalty: int = 20
    suboptimal_light_penalty: int = 10
    very_blurry_penalty: int = 40
    blurry_penalty: int = 20
    slightly_blurry_penalty: int = 10

    # overall_score below this -> feedback severity "error"
    error_score_below: int = 50

    # status labels
    good_score: int = 70
    fair_score: int = 50


# ------------------------------------------------------------------- gate ---

@dataclass
class GateConfig:
    """Live monitoring and capture-action policy."""
    monitor_interval: float = field(
        default_factory=lambda: _env_float("QUALITY_MONITOR_INTERVAL", 2.0))
    # capture button disabled below this score
    hard_floor: int = field(
        default_factory=lambda: _env_int("CAPTURE_HARD_FLOOR", 30))
    # capture button relabelled below this score
    warning_threshold: int = field(
        default_factory=lambda: _env_int("CAPTURE_WARNING_THRESHOLD", 50))
    capture_label: str = "Capture Selfie"
    override_label: str = "Capture Anyway"


# -------------------------------------------------------------------- api ---

def _default_origins() -> List[str]:
    raw = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    )
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class ApiConfig:
    cors_origins: List[str] = field(default_factory=_default_origins)
    max_upload_bytes: int = field(
        default_factory=lambda: _env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
    adult_age: int = field(default_factory=lambda: _env_int("ADULT_AGE", 18))
    name_match_threshold: float = field(
        default_factory=lambda: _env_float("NAME_MATCH_THRESHOLD", 65.0))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
