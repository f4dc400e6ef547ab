import numpy as np
import pytest


@pytest.fixture
def gradient():
    """100x100 opaque RGBA buffer covering a spread of hues and lightness."""
    h, w = 100, 100
    y, x = np.mgrid[0:h, 0:w]
    buf = np.empty((h, w, 4), dtype=np.uint8)
    buf[..., 0] = x * 255 // (w - 1)
    buf[..., 1] = y * 255 // (h - 1)
    buf[..., 2] = (x + y) * 255 // (w + h - 2)
    buf[..., 3] = 255
    return buf


@pytest.fixture
def solid():
    """Factory for single-color RGBA buffers: solid(w, h, (r, g, b, a))."""
    def make(width, height, color=(128, 128, 128, 255)):
        buf = np.empty((height, width, 4), dtype=np.uint8)
        buf[...] = color
        return buf
    return make


@pytest.fixture
def landscape():
    """400x300 RGBA buffer where every pixel encodes its own position."""
    h, w = 300, 400
    y, x = np.mgrid[0:h, 0:w]
    buf = np.empty((h, w, 4), dtype=np.uint8)
    buf[..., 0] = x % 256
    buf[..., 1] = y % 256
    buf[..., 2] = (x // 256) * 100 + (y // 256) * 50
    buf[..., 3] = 255
    return buf


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
