"""
LIGHTBOX IMAGE EDITOR - Editor Session

The single owned editor state: source buffer, adjustment parameters,
transform, crop controller and preview renderer. Hosts drive it through
plain method calls and schedule render() themselves; nothing here observes
anything or keeps global state.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from bake import bake
from crop import CropController, CropRect, InteractionMode
from pipeline import AdjustmentParams
from processing import ImageLoadError, load_image, to_rgba
from render import PreviewRenderer, surface_size
from state import TransformState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BakeRequest:
    """Immutable copy of everything bake() needs, safe to hand to another thread."""
    source: np.ndarray
    params: AdjustmentParams
    transform: TransformState
    crop_rect: Optional[CropRect]
    preview_size: Tuple[int, int]


class EditorSession:
    """One editing session over one source image.

    All state resets when a new source is loaded. close() discards
    everything without producing output (the cancel path).
    """

    def __init__(self, on_save: Optional[Callable[[np.ndarray], None]] = None):
        self._on_save = on_save
        self._source: Optional[np.ndarray] = None
        self._viewport: Tuple[int, int] = (0, 0)
        self._renderer = PreviewRenderer()

        self.params = AdjustmentParams()
        self.transform = TransformState()
        self.crop = CropController()
        self.crop_mode = False
        self.render_dirty = False

    # -- lifecycle ----------------------------------------------------------

    def load(self, image):
        """Open a source: an in-memory image array or a path to decode.

        Raises:
            ImageLoadError: the image could not be turned into a pixel buffer.
                The session is left closed.
        """
        try:
            if isinstance(image, (str, os.PathLike)):
                buffer = load_image(image)
            else:
                buffer = to_rgba(image)
        except ImageLoadError:
            self.close()
            raise

        self._source = buffer
        self._renderer.invalidate()
        self.params = AdjustmentParams()
        self.transform = TransformState()
        self.crop = CropController(*self.surface_size)
        self.crop_mode = False
        self.mark_dirty()
        logger.info("Editor opened on %dx%d source", buffer.shape[1], buffer.shape[0])

    @property
    def is_open(self) -> bool:
        return self._source is not None

    @property
    def source(self) -> Optional[np.ndarray]:
        return self._source

    def close(self):
        """Discard the source and all editing state."""
        if self._source is not None:
            logger.info("Editor closed without saving")
        self._source = None
        self._renderer.invalidate()
        self.params = AdjustmentParams()
        self.transform = TransformState()
        self.crop = CropController()
        self.crop_mode = False
        self.render_dirty = False

    def _require_open(self):
        if self._source is None:
            raise RuntimeError("No image loaded")

    # -- viewport -----------------------------------------------------------

    @property
    def viewport(self) -> Tuple[int, int]:
        return self._viewport

    def set_viewport(self, width: int, height: int):
        """Set the area the preview is fitted into. (0, 0) means source size."""
        viewport = (max(0, int(width)), max(0, int(height)))
        if viewport == self._viewport:
            return
        self._viewport = viewport
        self._sync_surface()

    @property
    def surface_size(self) -> Tuple[int, int]:
        """(width, height) of the preview surface, (0, 0) when closed."""
        if self._source is None:
            return (0, 0)
        return surface_size(self._source.shape, self.transform, self._viewport)

    def _sync_surface(self):
        self.crop.set_surface_size(*self.surface_size)
        self.mark_dirty()

    # -- adjustments --------------------------------------------------------

    def set_params(self, params: AdjustmentParams):
        """Replace the whole parameter set (a copy is kept)."""
        self.params = params.copy()
        self.mark_dirty()

    def set_param(self, name: str, value: float):
        self.params.set(name, value)
        self.mark_dirty()

    def set_band(self, band: str, hue: float = None, saturation: float = None,
                 luminance: float = None):
        self.params.set_band(band, hue=hue, saturation=saturation, luminance=luminance)
        self.mark_dirty()

    def reset_param(self, name: str):
        self.params.reset(name)
        self.mark_dirty()

    def reset_adjustments(self):
        """Return every adjustment to neutral. Transform and crop are kept."""
        self.params.reset_all()
        self.mark_dirty()

    # -- transform ----------------------------------------------------------

    def set_rotation(self, degrees: int):
        """Absolute quarter-turn rotation. Any change drops the crop rectangle."""
        if self.transform.set_rotation(degrees):
            self._on_rotation_changed()

    def rotate_cw(self):
        self.transform.rotate_cw()
        self._on_rotation_changed()

    def rotate_ccw(self):
        self.transform.rotate_ccw()
        self._on_rotation_changed()

    def _on_rotation_changed(self):
        self.crop.reset()
        self._sync_surface()
        logger.debug("Rotation -> %d, crop reset", self.transform.rotation)

    def toggle_flip_horizontal(self):
        self.transform.toggle_flip_horizontal()
        self.mark_dirty()

    def toggle_flip_vertical(self):
        self.transform.toggle_flip_vertical()
        self.mark_dirty()

    # -- crop ---------------------------------------------------------------

    def set_crop_mode(self, enabled: bool):
        """Enter or leave crop mode. Leaving ends any active interaction."""
        enabled = bool(enabled)
        if enabled == self.crop_mode:
            return
        self.crop_mode = enabled
        if not enabled:
            self.crop.cancel_interaction()
        self.mark_dirty()

    def select_aspect(self, key: str):
        self.crop.select_aspect(key)
        self.mark_dirty()

    def pointer_down(self, x: float, y: float) -> InteractionMode:
        """Pointer pressed at surface coordinates. Ignored outside crop mode."""
        if not self.crop_mode or self._source is None:
            return InteractionMode.IDLE
        mode = self.crop.pointer_down(x, y)
        self.mark_dirty()
        return mode

    def pointer_move(self, x: float, y: float) -> bool:
        if not self.crop_mode:
            return False
        changed = self.crop.pointer_move(x, y)
        if changed:
            self.mark_dirty()
        return changed

    def pointer_up(self) -> Optional[CropRect]:
        rect = self.crop.pointer_up()
        if self.crop_mode:
            self.mark_dirty()
        return rect

    def set_crop_rect(self, rect: CropRect) -> bool:
        """Place a crop rectangle in surface coordinates. False if refused."""
        accepted = self.crop.set_rect(rect)
        if accepted:
            self.mark_dirty()
        return accepted

    @property
    def crop_rect(self) -> Optional[CropRect]:
        return self.crop.rect

    # -- rendering ----------------------------------------------------------

    def mark_dirty(self):
        self.render_dirty = True

    def render(self, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Render the preview surface for the current state and clear the dirty flag."""
        self._require_open()
        surface = self._renderer.render(
            self._source, self.params, self.transform, self.crop.rect,
            self._viewport, crop_mode=self.crop_mode, rng=rng,
        )
        self.render_dirty = False
        return surface

    # -- saving -------------------------------------------------------------

    def snapshot(self) -> BakeRequest:
        """Freeze the state a bake needs. In-progress crop gestures are ignored."""
        self._require_open()
        return BakeRequest(
            source=self._source,
            params=self.params.copy(),
            transform=self.transform.copy(),
            crop_rect=self.crop.committed_rect,
            preview_size=self.surface_size,
        )

    def save(self, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Bake at full resolution, hand the result to on_save and return it.

        Raises:
            BakeError: processing failed; on_save is not called.
        """
        request = self.snapshot()
        output = bake(request.source, request.params, request.transform,
                      crop_rect=request.crop_rect, preview_size=request.preview_size,
                      rng=rng)
        if self._on_save is not None:
            self._on_save(output)
        return output
