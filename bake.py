"""
LIGHTBOX IMAGE EDITOR - Export / Bake

One-shot, full-resolution re-execution of the preview pipeline used to
produce the saved image:

    orient at source resolution -> adjust once -> extract the crop

The crop rectangle lives in preview-surface coordinates and is scaled by
(full / preview) per axis. Nothing passed in is modified.
"""

import logging
import time
from typing import Optional, Tuple

import cv2
import numpy as np

from crop import CropRect
from pipeline import AdjustmentParams, apply_adjustments
from render import orient_image
from services.memory_manager import MemoryManager
from state import TransformState

logger = logging.getLogger(__name__)


class BakeError(Exception):
    """The full-resolution pipeline could not complete. No output was produced."""


def crop_region(full_size: Tuple[int, int], crop_rect: CropRect,
                preview_size: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """Map a preview-space rectangle to pixel edges (x0, y0, x1, y1) at full size.

    Edges are rounded independently, so a rectangle covering the whole
    preview maps to exactly the whole image.
    """
    full_w, full_h = full_size
    preview_w, preview_h = preview_size
    if preview_w <= 0 or preview_h <= 0:
        raise ValueError(f"Invalid preview size: {preview_size}")
    sx = full_w / preview_w
    sy = full_h / preview_h

    x0 = min(max(0, int(round(crop_rect.x * sx))), full_w)
    y0 = min(max(0, int(round(crop_rect.y * sy))), full_h)
    x1 = min(max(0, int(round(crop_rect.right * sx))), full_w)
    y1 = min(max(0, int(round(crop_rect.bottom * sy))), full_h)
    return (x0, y0, x1, y1)


def bake(source: np.ndarray, params: AdjustmentParams, transform: TransformState,
         crop_rect: Optional[CropRect] = None,
         preview_size: Optional[Tuple[int, int]] = None,
         rng: Optional[np.random.Generator] = None,
         memory_manager: Optional[MemoryManager] = None) -> np.ndarray:
    """Produce the final output buffer at full resolution.

    Args:
        source: (H, W, 4) uint8 RGBA source, never modified
        params: adjustment parameters to apply once
        transform: rotation / mirroring at source resolution
        crop_rect: crop in preview-surface coordinates, or None for no crop
        preview_size: (width, height) of the surface crop_rect was drawn on;
            defaults to the oriented source size
        rng: random generator for grain

    Returns:
        New (H', W', 4) uint8 buffer

    Raises:
        BakeError: memory pre-check refused or processing failed
    """
    if source is None or source.ndim != 3 or source.shape[2] != 4:
        raise BakeError(f"Invalid source buffer: {getattr(source, 'shape', None)}")

    src_h, src_w = source.shape[:2]
    manager = memory_manager or MemoryManager()
    if not manager.can_process_image(src_w, src_h):
        summary = manager.get_resource_summary()
        logger.warning("Bake refused: not enough memory for %dx%d (%.1f of %.1f GB free)",
                       src_w, src_h, summary['available_memory_gb'], summary['total_memory_gb'])
        raise BakeError(f"Not enough memory to process {src_w}x{src_h} image")

    _t_start = time.perf_counter()
    try:
        oriented = orient_image(source, transform)
        full_h, full_w = oriented.shape[:2]
        adjusted = apply_adjustments(oriented, params, rng)

        if crop_rect is not None and crop_rect.is_valid():
            if preview_size is None:
                preview_size = (full_w, full_h)
            x0, y0, x1, y1 = crop_region((full_w, full_h), crop_rect, preview_size)
            if x1 > x0 and y1 > y0:
                output = adjusted[y0:y1, x0:x1].copy()
            else:
                output = adjusted
        else:
            output = adjusted
    except (MemoryError, cv2.error, ValueError) as e:
        logger.error("Bake failed for %dx%d source: %s", src_w, src_h, e)
        raise BakeError(str(e) or type(e).__name__) from e

    # The identity pipeline can hand back the source itself
    if output is source:
        output = source.copy()

    logger.info("Baked %dx%d -> %dx%d in %.0fms", src_w, src_h,
                output.shape[1], output.shape[0],
                (time.perf_counter() - _t_start) * 1000)
    return output
