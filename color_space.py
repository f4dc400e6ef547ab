"""
LIGHTBOX IMAGE EDITOR - Color Space Converters

RGB <-> HSL conversion on normalized (0.0-1.0) values.
Scalar versions for single colors and vectorized versions for pixel buffers.
Hue is cyclic (wraps at 1.0). Saturation and lightness are never clamped here;
callers clamp before converting back.
"""

import numpy as np


def rgb_to_hsl(r: float, g: float, b: float) -> tuple:
    """Convert normalized RGB to (h, s, l), all in 0-1."""
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    l = (max_c + min_c) / 2.0
    d = max_c - min_c

    if d == 0:
        return (0.0, 0.0, l)

    s = d / (1.0 - abs(2.0 * l - 1.0))

    if max_c == r:
        h = ((g - b) / d) % 6.0
    elif max_c == g:
        h = (b - r) / d + 2.0
    else:
        h = (r - g) / d + 4.0

    return ((h / 6.0) % 1.0, s, l)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    t = t % 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 0.5:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> tuple:
    """Convert (h, s, l) in 0-1 back to normalized RGB. Hue wraps."""
    h = h % 1.0
    if s == 0:
        return (l, l, l)

    q = l * (1.0 + s) if l < 0.5 else l + s - l * s
    p = 2.0 * l - q

    return (
        _hue_to_channel(p, q, h + 1.0 / 3.0),
        _hue_to_channel(p, q, h),
        _hue_to_channel(p, q, h - 1.0 / 3.0),
    )


def rgb_to_hsl_array(rgb: np.ndarray) -> np.ndarray:
    """Convert an (..., 3) float RGB array to an (..., 3) HSL array.

    Same math as rgb_to_hsl, applied to every pixel at once.
    """
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    max_c = np.maximum(np.maximum(r, g), b)
    min_c = np.minimum(np.minimum(r, g), b)
    l = (max_c + min_c) * 0.5
    d = max_c - min_c

    chromatic = d > 0
    # Avoid division by zero on achromatic pixels; their s/h stay 0
    safe_d = np.where(chromatic, d, 1.0)
    denom = 1.0 - np.abs(2.0 * l - 1.0)
    safe_denom = np.where(chromatic & (denom > 0), denom, 1.0)
    s = np.where(chromatic, d / safe_denom, 0.0)

    is_r = chromatic & (max_c == r)
    is_g = chromatic & (max_c == g) & ~is_r
    is_b = chromatic & ~is_r & ~is_g

    h = np.zeros_like(l)
    h = np.where(is_r, ((g - b) / safe_d) % 6.0, h)
    h = np.where(is_g, (b - r) / safe_d + 2.0, h)
    h = np.where(is_b, (r - g) / safe_d + 4.0, h)
    h = (h / 6.0) % 1.0

    return np.stack([h, s, l], axis=-1).astype(rgb.dtype, copy=False)


def hsl_to_rgb_array(hsl: np.ndarray) -> np.ndarray:
    """Convert an (..., 3) HSL array back to an (..., 3) RGB array."""
    h = hsl[..., 0] % 1.0
    s = hsl[..., 1]
    l = hsl[..., 2]

    q = np.where(l < 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q

    def channel(t):
        t = t % 1.0
        return np.where(
            t < 1.0 / 6.0, p + (q - p) * 6.0 * t,
            np.where(
                t < 0.5, q,
                np.where(t < 2.0 / 3.0, p + (q - p) * (2.0 / 3.0 - t) * 6.0, p)
            )
        )

    rgb = np.stack([
        channel(h + 1.0 / 3.0),
        channel(h),
        channel(h - 1.0 / 3.0),
    ], axis=-1)

    # s == 0 collapses to gray exactly
    gray = (s == 0)[..., None]
    rgb = np.where(gray, l[..., None], rgb)
    return rgb.astype(hsl.dtype, copy=False)
