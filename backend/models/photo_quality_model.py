"""
PHOTO QUALITY ANALYSIS
----------------------
Scores the technical quality of a captured selfie frame.

Metrics:
- brightness: mean luminance (0.299 R + 0.587 G + 0.114 B)
- blur score: mean squared 3x3 Laplacian response over interior pixels
- overall score: 0-100, penalised for poor lighting and blur

Analysis is a pure function of one frame; no state is kept across frames.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from config import QualityConfig

logger = logging.getLogger("idverify.quality")

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

# Zero-sum kernel: flat regions respond with 0.
LAPLACIAN_KERNEL = np.array([[-1, -1, -1],
                             [-1,  8, -1],
                             [-1, -1, -1]], dtype=np.float64)

SEVERITY_OK = "ok"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


class InvalidFrameError(ValueError):
    """Frame is empty, undecodable or has an inconsistent pixel buffer."""


# =========================
# DATA STRUCTURES
# =========================

@dataclass(frozen=True, eq=False)
class PixelFrame:
    """RGBA frame; ``pixels`` has shape ``(height, width, 4)``."""
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidFrameError(
                f"Frame must have positive dimensions, got {self.width}x{self.height}")
        expected = (self.height, self.width, 4)
        if tuple(self.pixels.shape) != expected:
            raise InvalidFrameError(
                f"Pixel buffer shape {tuple(self.pixels.shape)} does not match {expected}")

    @classmethod
    def from_rgba(cls, buffer: Union[bytes, bytearray, np.ndarray], width: int, height: int) -> "PixelFrame":
        """Wrap a flat RGBA buffer (canvas ``ImageData`` layout)."""
        if width <= 0 or height <= 0:
            raise InvalidFrameError(f"Frame must have positive dimensions, got {width}x{height}")
        if isinstance(buffer, np.ndarray):
            flat = buffer.astype(np.uint8, copy=False).reshape(-1)
        else:
            flat = np.frombuffer(bytes(buffer), dtype=np.uint8)
        if flat.size != width * height * 4:
            raise InvalidFrameError(
                f"RGBA buffer holds {flat.size} bytes, expected {width * height * 4} for {width}x{height}")
        return cls(width=width, height=height, pixels=flat.reshape(height, width, 4))

    @classmethod
    def from_image_bytes(cls, data: bytes) -> "PixelFrame":
        """Decode an encoded image (JPEG, PNG, ...) into an RGBA frame."""
        if not data:
            raise InvalidFrameError("Image payload is empty")
        image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise InvalidFrameError("Unable to decode image")
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        height, width = rgba.shape[:2]
        return cls(width=width, height=height, pixels=rgba)


@dataclass(frozen=True)
class QualityMetrics:
    brightness: float
    blur_score: float
    overall_score: int
    too_dark: bool
    too_light: bool
    is_blurry: bool

    def to_dict(self) -> dict:
        return {
            "brightness": round(self.brightness, 2),
            "blur_score": round(self.blur_score, 2),
            "overall_score": self.overall_score,
            "too_dark": self.too_dark,
            "too_light": self.too_light,
            "is_blurry": self.is_blurry,
        }


@dataclass(frozen=True)
class QualityFeedback:
    severity: str
    issues: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        if not self.issues:
            return "Good photo quality!"
        return (f"Photo quality issues detected: {', '.join(self.issues)}. "
                f"{'. '.join(self.suggestions)}.")

    def to_dict(self) -> dict:
        return {
            "severity": self.severity,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
            "message": self.message,
        }


# =========================
# METRICS
# =========================

def luminance(frame: PixelFrame) -> np.ndarray:
    """2-D float luminance field of the frame (alpha ignored)."""
    rgb = frame.pixels[..., :3].astype(np.float64)
    return rgb @ LUMA_WEIGHTS


def laplacian_energy(gray: np.ndarray) -> float:
    """Mean squared Laplacian response, excluding the 1-pixel border."""
    if gray.shape[0] < 3 or gray.shape[1] < 3:
        return 0.0
    response = cv2.filter2D(gray, cv2.CV_64F, LAPLACIAN_KERNEL)[1:-1, 1:-1]
    return float(np.mean(response * response))


def compute_overall_score(brightness: float, blur_score: float,
                          cfg: Optional[QualityConfig] = None) -> int:
    cfg = cfg or QualityConfig()
    score = 100

    if brightness < cfg.too_dark_below:
        score -= cfg.too_dark_penalty
    elif brightness > cfg.too_light_above:
        score -= cfg.too_light_penalty
    elif brightness < cfg.dim_below or brightness > cfg.bright_above:
        score -= cfg.suboptimal_light_penalty

    if blur_score < cfg.very_blurry_below:
        score -= cfg.very_blurry_penalty
    elif blur_score < cfg.blurry_below:
        score -= cfg.blurry_penalty
    elif blur_score < cfg.slightly_blurry_below:
        score -= cfg.slightly_blurry_penalty

    return int(min(100, max(0, score)))


def metrics_from_values(brightness: float, blur_score: float,
                        cfg: Optional[QualityConfig] = None) -> QualityMetrics:
    cfg = cfg or QualityConfig()
    return QualityMetrics(
        brightness=float(brightness),
        blur_score=float(blur_score),
        overall_score=compute_overall_score(brightness, blur_score, cfg),
        too_dark=brightness < cfg.too_dark_below,
        too_light=brightness > cfg.too_light_above,
        is_blurry=blur_score < cfg.blurry_below,
    )


def analyze_frame(frame: PixelFrame, cfg: Optional[QualityConfig] = None) -> QualityMetrics:
    """
    Compute brightness, sharpness and the overall quality score of a frame.
    """
    gray = luminance(frame)
    metrics = metrics_from_values(float(gray.mean()), laplacian_energy(gray), cfg)
    logger.debug(
        "frame %dx%d brightness=%.1f blur=%.1f score=%d",
        frame.width, frame.height, metrics.brightness, metrics.blur_score, metrics.overall_score,
    )
    return metrics


# =========================
# FEEDBACK
# =========================

def build_feedback(metrics: QualityMetrics, cfg: Optional[QualityConfig] = None) -> QualityFeedback:
    cfg = cfg or QualityConfig()
    issues = []
    suggestions = []

    if metrics.too_dark:
        issues.append("Image is too dark")
        suggestions.append("Move to a brighter location or turn on more lights")
    elif metrics.too_light:
        issues.append("Image is overexposed")
        suggestions.append("Reduce lighting or move away from bright light sources")
    elif metrics.brightness < cfg.dim_below:
        issues.append("Lighting could be better")
        suggestions.append("Try to find better lighting for clearer image")

    if metrics.is_blurry:
        if metrics.blur_score < cfg.very_blurry_below:
            issues.append("Image is very blurry")
            suggestions.append("Hold the camera steady and ensure proper focus")
        else:
            issues.append("Image appears blurry")
            suggestions.append("Try to keep the camera still while taking the photo")

    if not issues:
        return QualityFeedback(severity=SEVERITY_OK)

    severity = SEVERITY_ERROR if metrics.overall_score < cfg.error_score_below else SEVERITY_WARNING
    return QualityFeedback(severity=severity, issues=tuple(issues), suggestions=tuple(suggestions))


def quality_status(score: int, cfg: Optional[QualityConfig] = None) -> str:
    cfg = cfg or QualityConfig()
    if score >= cfg.good_score:
        return "good"
    if score >= cfg.fair_score:
        return "fair"
    return "poor"


def lighting_label(metrics: QualityMetrics, cfg: Optional[QualityConfig] = None) -> str:
    cfg = cfg or QualityConfig()
    if metrics.too_dark:
        return "too_dark"
    if metrics.too_light:
        return "too_bright"
    if metrics.brightness < cfg.dim_below:
        return "fair"
    return "good"


def sharpness_label(metrics: QualityMetrics, cfg: Optional[QualityConfig] = None) -> str:
    cfg = cfg or QualityConfig()
    if not metrics.is_blurry:
        return "sharp"
    return "very_blurry" if metrics.blur_score < cfg.very_blurry_below else "blurry"


# =========================
# LOCAL TEST
# =========================

if __name__ == "__main__":
    rng = np.random.default_rng(0)
    noisy = rng.integers(0, 256, size=(120, 160, 4), dtype=np.uint8)
    noisy[..., 3] = 255
    frame = PixelFrame(width=160, height=120, pixels=noisy)
    m = analyze_frame(frame)
    print("PHOTO QUALITY RESULT:")
    print(m.to_dict())
    print(build_feedback(m).to_dict())
