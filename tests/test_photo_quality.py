import numpy as np
import pytest

from config import QualityConfig
from conftest import checkerboard, gray_frame, png_bytes, uniform
from models.photo_quality_model import (
    SEVERITY_ERROR,
    SEVERITY_OK,
    SEVERITY_WARNING,
    InvalidFrameError,
    PixelFrame,
    analyze_frame,
    build_feedback,
    compute_overall_score,
    laplacian_energy,
    lighting_label,
    metrics_from_values,
    quality_status,
    sharpness_label,
)


# ------------------------------------------------------------------- frames ---

def test_uniform_frame_has_no_detail(mid_flat_frame):
    m = analyze_frame(mid_flat_frame)
    assert m.brightness == pytest.approx(128.0)
    assert m.blur_score == pytest.approx(0.0, abs=1e-9)
    assert m.is_blurry
    assert m.overall_score == 60


def test_black_frame_is_dark_and_blurry(dark_flat_frame):
    m = analyze_frame(dark_flat_frame)
    assert m.brightness == 0.0
    assert m.blur_score == 0.0
    assert m.too_dark and m.is_blurry and not m.too_light
    assert m.overall_score == 30


def test_checkerboard_is_sharp(sharp_frame):
    m = analyze_frame(sharp_frame)
    assert m.brightness == pytest.approx(127.5)
    # every interior pixel responds with +-1020
    assert m.blur_score == pytest.approx(1020.0 ** 2)
    assert not m.is_blurry
    assert m.overall_score == 100


def test_luminance_weights_rgb_channels():
    rgba = np.zeros((4, 4, 4), dtype=np.uint8)
    rgba[..., 0] = 30
    rgba[..., 1] = 20
    rgba[..., 2] = 10
    m = analyze_frame(PixelFrame(width=4, height=4, pixels=rgba))
    assert m.brightness == pytest.approx(0.299 * 30 + 0.587 * 20 + 0.114 * 10)


def test_border_pixels_are_excluded():
    gray = uniform(100, 5, 5).astype(np.float64)
    gray[0, :] = 255
    gray[:, 0] = 255
    # interior pixel (1,1) sees the bright border
    assert laplacian_energy(gray) > 0
    gray = uniform(100, 5, 5).astype(np.float64)
    gray[0, 0] = 255
    gray[4, 4] = 0
    # corners touch no interior neighbourhood centre except (1,1) and (3,3)
    assert laplacian_energy(gray) == pytest.approx((155.0 ** 2 + 100.0 ** 2) / 9)


def test_frames_without_interior_have_zero_blur_score():
    m = analyze_frame(gray_frame(checkerboard(2, 8)))
    assert m.blur_score == 0.0


def test_analysis_is_deterministic(sharp_frame):
    assert analyze_frame(sharp_frame) == analyze_frame(sharp_frame)


# ---------------------------------------------------------- frame contracts ---

def test_zero_sized_frame_fails_fast():
    with pytest.raises(InvalidFrameError):
        PixelFrame(width=0, height=0, pixels=np.zeros((0, 0, 4), dtype=np.uint8))
    with pytest.raises(InvalidFrameError):
        PixelFrame.from_rgba(b"", 0, 10)


def test_mismatched_buffer_is_rejected():
    with pytest.raises(InvalidFrameError):
        PixelFrame.from_rgba(bytes(15), 2, 2)
    with pytest.raises(InvalidFrameError):
        PixelFrame(width=3, height=2, pixels=np.zeros((2, 2, 4), dtype=np.uint8))


def test_from_rgba_reads_canvas_layout():
    frame = PixelFrame.from_rgba(bytes([255, 255, 255, 255] * 6), 3, 2)
    assert frame.pixels.shape == (2, 3, 4)
    assert analyze_frame(frame).brightness == pytest.approx(255.0)


def test_from_image_bytes_decodes_png():
    frame = PixelFrame.from_image_bytes(png_bytes(checkerboard(16, 24)))
    assert (frame.width, frame.height) == (24, 16)
    assert analyze_frame(frame).overall_score == 100


@pytest.mark.parametrize("payload", [b"", b"definitely not an image"])
def test_undecodable_images_are_rejected(payload):
    with pytest.raises(InvalidFrameError):
        PixelFrame.from_image_bytes(payload)


# -------------------------------------------------------------------- score ---

def test_perfect_conditions_score_100_and_ok():
    m = metrics_from_values(150, 250)
    assert m.overall_score == 100
    assert build_feedback(m).severity == SEVERITY_OK


def test_score_non_increasing_as_blur_worsens():
    scores = [compute_overall_score(150, b) for b in (250, 200, 150, 100, 75, 50, 25, 0)]
    assert scores == sorted(scores, reverse=True)
    assert scores == [100, 100, 90, 90, 80, 80, 60, 60]


@pytest.mark.parametrize("brightness,expected", [
    (30, 70), (59.9, 70), (60, 90), (79.9, 90), (80, 100),
    (180, 100), (180.1, 90), (200, 90), (200.1, 80), (255, 80),
])
def test_brightness_penalties(brightness, expected):
    assert compute_overall_score(brightness, 250) == expected


def test_brightness_and_blur_penalties_stack():
    assert compute_overall_score(30, 10) == 30
    assert compute_overall_score(230, 10) == 40
    assert compute_overall_score(70, 75) == 70


def test_score_always_within_bounds():
    for b in np.linspace(0, 255, 52):
        for blur in (0, 10, 49.9, 50, 99.9, 100, 199.9, 200, 1e6):
            assert 0 <= compute_overall_score(b, blur) <= 100


# ----------------------------------------------------------------- feedback ---

def test_dark_and_very_blurry_is_an_error():
    fb = build_feedback(metrics_from_values(30, 0))
    assert fb.severity == SEVERITY_ERROR
    assert fb.issues == ("Image is too dark", "Image is very blurry")
    assert len(fb.suggestions) == 2
    assert fb.message.startswith("Photo quality issues detected: Image is too dark, Image is very blurry.")


def test_overexposure_reported_before_blur():
    fb = build_feedback(metrics_from_values(230, 75))
    assert fb.issues == ("Image is overexposed", "Image appears blurry")
    assert fb.severity == SEVERITY_WARNING


def test_dim_lighting_is_a_warning():
    fb = build_feedback(metrics_from_values(70, 150))
    assert fb.issues == ("Lighting could be better",)
    assert fb.severity == SEVERITY_WARNING


def test_bright_band_has_no_issue_but_costs_points():
    m = metrics_from_values(190, 250)
    assert m.overall_score == 90
    fb = build_feedback(m)
    assert fb.severity == SEVERITY_OK
    assert fb.message == "Good photo quality!"


# ------------------------------------------------------------------- labels ---

def test_status_and_labels():
    assert quality_status(100) == "good"
    assert quality_status(70) == "good"
    assert quality_status(50) == "fair"
    assert quality_status(49) == "poor"

    assert lighting_label(metrics_from_values(30, 250)) == "too_dark"
    assert lighting_label(metrics_from_values(230, 250)) == "too_bright"
    assert lighting_label(metrics_from_values(70, 250)) == "fair"
    assert lighting_label(metrics_from_values(150, 250)) == "good"

    assert sharpness_label(metrics_from_values(150, 10)) == "very_blurry"
    assert sharpness_label(metrics_from_values(150, 75)) == "blurry"
    assert sharpness_label(metrics_from_values(150, 150)) == "sharp"


def test_thresholds_are_overridden_by_construction():
    cfg = QualityConfig(too_dark_below=40.0)
    assert compute_overall_score(50, 250) == 70
    assert compute_overall_score(50, 250, cfg) == 90
    assert not metrics_from_values(50, 250, cfg).too_dark
