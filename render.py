"""
LIGHTBOX IMAGE EDITOR - Render / Composition

Builds the live preview surface from the source buffer:

    1. orient (rotation, then mirroring)
    2. scale to fit the viewport, preserving aspect
    3. run the adjustment pipeline
    4. in crop mode, dim everything outside the crop rectangle and draw
       its border and eight handles

render_preview() is a pure function. PreviewRenderer adds a cache of the
oriented + scaled base so slider drags only re-run the pipeline.
"""

import logging
import time
from typing import Optional, Tuple

import cv2
import numpy as np

from crop import CropRect, Handle
from pipeline import AdjustmentParams, apply_adjustments
from state import TransformState
from ui_constants import Colors, Dimensions

logger = logging.getLogger(__name__)


def orient_image(buffer: np.ndarray, transform: TransformState) -> np.ndarray:
    """Apply rotation then mirroring. Returns the input itself for the identity."""
    rotation = transform.rotation
    if rotation == 90:
        img = cv2.rotate(buffer, cv2.ROTATE_90_CLOCKWISE)
    elif rotation == 180:
        img = cv2.rotate(buffer, cv2.ROTATE_180)
    elif rotation == 270:
        img = cv2.rotate(buffer, cv2.ROTATE_90_COUNTERCLOCKWISE)
    else:
        img = buffer

    if transform.flip_horizontal and transform.flip_vertical:
        img = cv2.flip(img, -1)
    elif transform.flip_horizontal:
        img = cv2.flip(img, 1)
    elif transform.flip_vertical:
        img = cv2.flip(img, 0)
    return img


def fit_size(width: int, height: int, viewport_w: int, viewport_h: int) -> Tuple[int, int]:
    """Largest (w, h) with the same aspect that fits the viewport."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size: {width}x{height}")
    if viewport_w <= 0 or viewport_h <= 0:
        return (width, height)
    scale = min(viewport_w / width, viewport_h / height)
    return (max(1, int(round(width * scale))), max(1, int(round(height * scale))))


def surface_size(source_shape: tuple, transform: TransformState,
                 viewport: Tuple[int, int]) -> Tuple[int, int]:
    """Preview surface (width, height) for a source of the given shape."""
    h, w = source_shape[:2]
    ow, oh = transform.oriented_size(w, h)
    return fit_size(ow, oh, viewport[0], viewport[1])


def scale_to(buffer: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Resize to (width, height). Area averaging when shrinking."""
    h, w = buffer.shape[:2]
    if (w, h) == tuple(size):
        return buffer
    interpolation = cv2.INTER_AREA if size[0] < w else cv2.INTER_LINEAR
    return cv2.resize(buffer, tuple(size), interpolation=interpolation)


def _to_pixels(rect: CropRect, width: int, height: int) -> Tuple[int, int, int, int]:
    """Round a rectangle to pixel edges (x0, y0, x1, y1), clamped to the surface."""
    x0 = min(max(0, int(round(rect.x))), width)
    y0 = min(max(0, int(round(rect.y))), height)
    x1 = min(max(x0, int(round(rect.right))), width)
    y1 = min(max(y0, int(round(rect.bottom))), height)
    return (x0, y0, x1, y1)


def draw_crop_overlay(surface: np.ndarray, rect: CropRect) -> np.ndarray:
    """Dim outside the crop rectangle and draw its border and handles.

    Returns a new buffer; the input surface is not modified.
    """
    h, w = surface.shape[:2]
    out = surface.copy()
    out[..., :3] = (surface[..., :3] * Colors.MASK_DIM_FACTOR).astype(np.uint8)

    x0, y0, x1, y1 = _to_pixels(rect, w, h)
    if x1 <= x0 or y1 <= y0:
        return out

    # Interior at full clarity
    out[y0:y1, x0:x1] = surface[y0:y1, x0:x1]

    border = Colors.CROP_BORDER + (255,)
    cv2.rectangle(out, (x0, y0), (x1 - 1, y1 - 1), border, Dimensions.CROP_BORDER_WIDTH)

    half = Dimensions.HANDLE_SIZE // 2
    fill = Colors.CROP_HANDLE + (255,)
    outline = Colors.CROP_HANDLE_OUTLINE + (255,)
    for handle in Handle:
        hx, hy = handle.position(rect)
        hx, hy = int(round(hx)), int(round(hy))
        p1 = (hx - half, hy - half)
        p2 = (hx + half, hy + half)
        cv2.rectangle(out, p1, p2, fill, -1)
        cv2.rectangle(out, p1, p2, outline, 1)
    return out


def prepare_base(source: np.ndarray, transform: TransformState,
                 viewport: Tuple[int, int]) -> np.ndarray:
    """Oriented and viewport-scaled copy of the source, before adjustments."""
    oriented = orient_image(source, transform)
    size = surface_size(source.shape, transform, viewport)
    return scale_to(oriented, size)


def render_preview(source: np.ndarray, params: AdjustmentParams, transform: TransformState,
                   crop_rect: Optional[CropRect], viewport: Tuple[int, int],
                   crop_mode: bool = False,
                   rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Pure render entry point: (params, transform, crop) -> preview surface."""
    base = prepare_base(source, transform, viewport)
    return compose(base, params, crop_rect, crop_mode, rng)


def compose(base: np.ndarray, params: AdjustmentParams, crop_rect: Optional[CropRect],
            crop_mode: bool, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Adjust an already oriented/scaled base and add the crop overlay."""
    surface = apply_adjustments(base, params, rng)
    if crop_mode and crop_rect is not None and crop_rect.is_valid():
        surface = draw_crop_overlay(surface, crop_rect)
    return surface


class PreviewRenderer:
    """Preview renderer that caches the oriented + scaled base image.

    The cache is keyed by source identity, transform and viewport, so only
    adjustment and crop changes skip the resample.
    """

    def __init__(self):
        self._cache_key = None
        self._base: Optional[np.ndarray] = None

    def invalidate(self):
        self._cache_key = None
        self._base = None

    def base(self, source: np.ndarray, transform: TransformState,
             viewport: Tuple[int, int]) -> np.ndarray:
        key = (id(source), source.shape, transform.key(), tuple(viewport))
        if key != self._cache_key:
            self._base = prepare_base(source, transform, viewport)
            self._cache_key = key
        return self._base

    def render(self, source: np.ndarray, params: AdjustmentParams, transform: TransformState,
               crop_rect: Optional[CropRect], viewport: Tuple[int, int],
               crop_mode: bool = False,
               rng: Optional[np.random.Generator] = None) -> np.ndarray:
        _t_start = time.perf_counter()
        base = self.base(source, transform, viewport)
        surface = compose(base, params, crop_rect, crop_mode, rng)
        logger.debug("render %dx%d in %.1fms", surface.shape[1], surface.shape[0],
                     (time.perf_counter() - _t_start) * 1000)
        return surface
