import cv2
import numpy as np
import pytest

from models.photo_quality_model import PixelFrame


def gray_frame(gray) -> PixelFrame:
    """Build an opaque RGBA frame whose R, G and B channels all equal ``gray``."""
    gray = np.asarray(gray, dtype=np.uint8)
    h, w = gray.shape
    rgba = np.empty((h, w, 4), dtype=np.uint8)
    rgba[..., 0] = gray
    rgba[..., 1] = gray
    rgba[..., 2] = gray
    rgba[..., 3] = 255
    return PixelFrame(width=w, height=h, pixels=rgba)


def checkerboard(h=32, w=32) -> np.ndarray:
    return (np.indices((h, w)).sum(axis=0) % 2 * 255).astype(np.uint8)


def uniform(value, h=32, w=32) -> np.ndarray:
    return np.full((h, w), value, dtype=np.uint8)


def png_bytes(gray: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR))
    assert ok
    return buf.tobytes()


@pytest.fixture
def sharp_frame():
    return gray_frame(checkerboard())


@pytest.fixture
def dark_flat_frame():
    return gray_frame(uniform(0))


@pytest.fixture
def mid_flat_frame():
    return gray_frame(uniform(128))
