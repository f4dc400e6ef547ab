"""
LIGHTBOX IMAGE EDITOR - Crop State Machine

Interactive crop rectangle in preview-surface coordinates.
Pointer-driven drawing, moving and 8-handle resizing, with optional
aspect-ratio lock and canvas-boundary clamping.

States: IDLE -> DRAWING | MOVING | RESIZING(handle) -> IDLE (on pointer-up).
Only one interaction can be active; pointer-down during one is ignored.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from state import ASPECT_RATIOS, aspect_ratio_value
from ui_constants import Dimensions

logger = logging.getLogger(__name__)

# Smallest width/height a crop rectangle may have; smaller mutations are refused
MIN_CROP_SIZE = 1.0

# Lock the dominant axis of a ratio-locked corner drag after this much movement
AXIS_LOCK_THRESHOLD = 10.0


@dataclass(frozen=True)
class CropRect:
    """Axis-aligned rectangle (x, y, width, height)."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> 'CropRect':
        """Build from two corners in any order."""
        return cls(min(left, right), min(top, bottom), abs(right - left), abs(bottom - top))

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    def contains(self, px: float, py: float) -> bool:
        """Strict interior test (edges belong to the handles)."""
        return self.x < px < self.right and self.y < py < self.bottom

    def scaled(self, sx: float, sy: float) -> 'CropRect':
        return CropRect(self.x * sx, self.y * sy, self.width * sx, self.height * sy)


class Handle(Enum):
    """The eight resize handles: four corners, four edge midpoints."""
    TOP_LEFT = 'top_left'
    TOP = 'top'
    TOP_RIGHT = 'top_right'
    RIGHT = 'right'
    BOTTOM_RIGHT = 'bottom_right'
    BOTTOM = 'bottom'
    BOTTOM_LEFT = 'bottom_left'
    LEFT = 'left'

    @property
    def edges(self) -> Tuple[str, ...]:
        """Rectangle edges this handle drives."""
        return _HANDLE_EDGES[self]

    @property
    def is_corner(self) -> bool:
        return len(self.edges) == 2

    def position(self, rect: CropRect) -> Tuple[float, float]:
        """Handle location on the given rectangle."""
        cx, cy = rect.center
        edges = self.edges
        if 'left' in edges:
            x = rect.x
        elif 'right' in edges:
            x = rect.right
        else:
            x = cx
        if 'top' in edges:
            y = rect.y
        elif 'bottom' in edges:
            y = rect.bottom
        else:
            y = cy
        return (x, y)


_HANDLE_EDGES = {
    Handle.TOP_LEFT: ('left', 'top'),
    Handle.TOP: ('top',),
    Handle.TOP_RIGHT: ('right', 'top'),
    Handle.RIGHT: ('right',),
    Handle.BOTTOM_RIGHT: ('right', 'bottom'),
    Handle.BOTTOM: ('bottom',),
    Handle.BOTTOM_LEFT: ('left', 'bottom'),
    Handle.LEFT: ('left',),
}

# Corners overlap edges on small rectangles, so they are hit-tested first
_HIT_ORDER = (
    Handle.TOP_LEFT, Handle.TOP_RIGHT, Handle.BOTTOM_LEFT, Handle.BOTTOM_RIGHT,
    Handle.LEFT, Handle.RIGHT, Handle.TOP, Handle.BOTTOM,
)


class InteractionMode(Enum):
    IDLE = 'idle'
    DRAWING = 'drawing'
    MOVING = 'moving'
    RESIZING = 'resizing'


class CropController:
    """Owns the crop rectangle and the pointer interaction mutating it.

    Invariants after every mutation:
    - the rectangle lies inside (0, 0, surface_width, surface_height)
    - width and height are at least MIN_CROP_SIZE
    - width / height equals the locked ratio when an aspect preset is active
    """

    def __init__(self, surface_width: float = 0, surface_height: float = 0,
                 aspect_key: str = 'free'):
        if aspect_key not in ASPECT_RATIOS:
            raise KeyError(f"Unknown aspect ratio: {aspect_key}")
        self._width = float(surface_width)
        self._height = float(surface_height)
        self._aspect_key = aspect_key
        self.rect: Optional[CropRect] = None

        # Interaction state
        self._mode = InteractionMode.IDLE
        self._handle: Optional[Handle] = None
        self._start_pos: Optional[Tuple[float, float]] = None
        self._start_rect: Optional[CropRect] = None
        self._dominant_axis: Optional[str] = None

    # -- properties ---------------------------------------------------------

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    @property
    def active_handle(self) -> Optional[Handle]:
        return self._handle

    @property
    def aspect_key(self) -> str:
        return self._aspect_key

    @property
    def surface_size(self) -> Tuple[float, float]:
        return (self._width, self._height)

    @property
    def ratio(self) -> Optional[float]:
        """Locked width/height ratio, or None when free."""
        return aspect_ratio_value(self._aspect_key, (self._width, self._height))

    @property
    def has_crop(self) -> bool:
        return self.rect is not None and self.rect.is_valid()

    @property
    def committed_rect(self) -> Optional[CropRect]:
        """The rectangle as of the last pointer-up, ignoring any gesture in progress."""
        if self._mode is InteractionMode.IDLE:
            return self.rect
        return self._start_rect

    # -- surface / presets --------------------------------------------------

    def set_surface_size(self, width: float, height: float):
        """Change the surface bounds, rescaling an existing rectangle to match."""
        width, height = float(width), float(height)
        if (width, height) == (self._width, self._height):
            return
        old_w, old_h = self._width, self._height
        self._width, self._height = width, height
        self.cancel_interaction()

        if self.rect is None:
            return
        if old_w <= 0 or old_h <= 0 or width <= 0 or height <= 0:
            self.rect = None
            return

        rect = self.rect.scaled(width / old_w, height / old_h)
        if self.ratio is not None:
            rect = self._fit_ratio_around_center(rect, self.ratio)
        rect = self._clamp_position(rect) if rect is not None else None
        self.rect = rect if rect is not None and self._acceptable(rect) else None

    def select_aspect(self, key: str):
        """Switch aspect preset: centered, largest rectangle at that ratio."""
        if key not in ASPECT_RATIOS:
            raise KeyError(f"Unknown aspect ratio: {key}")
        self.cancel_interaction()
        self._aspect_key = key

        if self._width <= 0 or self._height <= 0:
            self.rect = None
            return

        ratio = self.ratio
        if ratio is None:
            rect = CropRect(0.0, 0.0, self._width, self._height)
        else:
            w = self._width
            h = w / ratio
            if h > self._height:
                h = self._height
                w = h * ratio
            rect = CropRect((self._width - w) / 2, (self._height - h) / 2, w, h)
        # Surfaces too small for the preset get no rectangle
        self.rect = rect if self._acceptable(rect) else None
        logger.debug("Aspect %s -> %s", key, self.rect)

    def set_rect(self, rect: CropRect) -> bool:
        """Place a rectangle directly (restoring a saved edit).

        The rectangle is clipped to the surface; one that ends up below
        MIN_CROP_SIZE is refused and the current rectangle kept.
        """
        if self._mode is not InteractionMode.IDLE:
            return False
        left = max(0.0, rect.x)
        top = max(0.0, rect.y)
        right = min(self._width, rect.right)
        bottom = min(self._height, rect.bottom)
        candidate = CropRect(left, top, right - left, bottom - top)
        if not self._acceptable(candidate):
            return False
        if self.ratio is not None:
            candidate = self._fit_ratio_around_center(candidate, self.ratio)
            if not self._acceptable(candidate):
                return False
        self.rect = candidate
        return True

    def reset(self):
        """Drop the rectangle and any interaction. The aspect preset is kept."""
        self.cancel_interaction()
        self.rect = None

    def cancel_interaction(self):
        self._mode = InteractionMode.IDLE
        self._handle = None
        self._start_pos = None
        self._start_rect = None
        self._dominant_axis = None

    # -- pointer events -----------------------------------------------------

    def hit_test(self, x: float, y: float) -> Tuple[InteractionMode, Optional[Handle]]:
        """Which interaction a pointer-down at (x, y) would start."""
        if self.rect is not None:
            radius = Dimensions.HANDLE_HIT_RADIUS
            for handle in _HIT_ORDER:
                hx, hy = handle.position(self.rect)
                if abs(x - hx) <= radius and abs(y - hy) <= radius:
                    return (InteractionMode.RESIZING, handle)
            if self.rect.contains(x, y):
                return (InteractionMode.MOVING, None)
        return (InteractionMode.DRAWING, None)

    def pointer_down(self, x: float, y: float) -> InteractionMode:
        """Start an interaction. Ignored while another one is active."""
        if self._mode is not InteractionMode.IDLE:
            return self._mode
        if self._width <= 0 or self._height <= 0:
            return self._mode

        mode, handle = self.hit_test(x, y)
        self._mode = mode
        self._handle = handle
        self._start_pos = self._clamp_point(x, y)
        self._start_rect = self.rect
        self._dominant_axis = None
        logger.debug("Crop %s start at (%.1f, %.1f) handle=%s", mode.value, x, y,
                     handle.value if handle else None)
        return mode

    def pointer_move(self, x: float, y: float) -> bool:
        """Update the active interaction. Returns True if the rectangle changed."""
        if self._mode is InteractionMode.IDLE:
            return False

        px, py = self._clamp_point(x, y)
        if self._mode is InteractionMode.DRAWING:
            new_rect = self._draw_to(px, py)
        elif self._mode is InteractionMode.MOVING:
            new_rect = self._move_to(px, py)
        else:
            new_rect = self._resize_to(px, py)

        if new_rect is None or new_rect == self.rect:
            return False
        self.rect = new_rect
        return True

    def pointer_up(self) -> Optional[CropRect]:
        """Finish the active interaction unconditionally."""
        if self._mode is not InteractionMode.IDLE:
            logger.debug("Crop %s end -> %s", self._mode.value, self.rect)
        self.cancel_interaction()
        return self.rect

    # -- interaction math ---------------------------------------------------

    def _draw_to(self, px: float, py: float) -> Optional[CropRect]:
        ax, ay = self._start_pos
        dx, dy = px - ax, py - ay
        w, h = abs(dx), abs(dy)
        ratio = self.ratio

        if ratio is not None:
            if w / ratio >= h:
                h = w / ratio
            else:
                w = h * ratio
            sign_x = 1 if dx >= 0 else -1
            sign_y = 1 if dy >= 0 else -1
            max_w = self._width - ax if sign_x > 0 else ax
            max_h = self._height - ay if sign_y > 0 else ay
            w, h = self._shrink_to_fit(w, h, max_w, max_h)
            dx, dy = sign_x * w, sign_y * h

        candidate = CropRect.from_edges(ax, ay, ax + dx, ay + dy)
        if not self._acceptable(candidate):
            # Nothing drawn yet: keep whatever was there before
            return self._start_rect
        return self._clamp_position(candidate)

    def _move_to(self, px: float, py: float) -> Optional[CropRect]:
        start = self._start_rect
        if start is None:
            return None
        sx, sy = self._start_pos
        x = min(max(0.0, start.x + px - sx), self._width - start.width)
        y = min(max(0.0, start.y + py - sy), self._height - start.height)
        return CropRect(x, y, start.width, start.height)

    def _resize_to(self, px: float, py: float) -> Optional[CropRect]:
        start = self._start_rect
        if start is None:
            return None
        sx, sy = self._start_pos
        dx, dy = px - sx, py - sy
        ratio = self.ratio

        if ratio is None:
            candidate = self._resize_free(start, dx, dy)
        elif self._handle.is_corner:
            candidate = self._resize_locked_corner(start, dx, dy, ratio)
        else:
            candidate = self._resize_locked_edge(start, dx, dy, ratio)

        if candidate is None or not self._acceptable(candidate):
            # Invalid geometry: keep the last valid rectangle
            return None
        return self._clamp_position(candidate)

    def _resize_free(self, start: CropRect, dx: float, dy: float) -> Optional[CropRect]:
        left, top, right, bottom = start.x, start.y, start.right, start.bottom
        edges = self._handle.edges
        if 'left' in edges:
            left = max(0.0, left + dx)
        if 'right' in edges:
            right = min(self._width, right + dx)
        if 'top' in edges:
            top = max(0.0, top + dy)
        if 'bottom' in edges:
            bottom = min(self._height, bottom + dy)
        if right - left < MIN_CROP_SIZE or bottom - top < MIN_CROP_SIZE:
            return None
        return CropRect(left, top, right - left, bottom - top)

    def _resize_locked_corner(self, start: CropRect, dx: float, dy: float,
                              ratio: float) -> Optional[CropRect]:
        """Anchor the opposite corner; the dominant drag axis drives the size."""
        edges = self._handle.edges
        sign_x = -1 if 'left' in edges else 1
        sign_y = -1 if 'top' in edges else 1
        anchor_x = start.right if sign_x < 0 else start.x
        anchor_y = start.bottom if sign_y < 0 else start.y

        # Positive = rectangle gets bigger
        grow_w = sign_x * dx
        grow_h = sign_y * dy

        w_as_h = abs(grow_w) / ratio
        h_magnitude = abs(grow_h)
        if self._dominant_axis is None and max(w_as_h, h_magnitude) >= AXIS_LOCK_THRESHOLD:
            self._dominant_axis = 'width' if w_as_h >= h_magnitude else 'height'
        axis = self._dominant_axis or ('width' if w_as_h >= h_magnitude else 'height')

        if axis == 'width':
            w = start.width + grow_w
            h = w / ratio
        else:
            h = start.height + grow_h
            w = h * ratio
        if w < MIN_CROP_SIZE or h < MIN_CROP_SIZE:
            return None

        max_w = self._width - anchor_x if sign_x > 0 else anchor_x
        max_h = self._height - anchor_y if sign_y > 0 else anchor_y
        w, h = self._shrink_to_fit(w, h, max_w, max_h)

        x = anchor_x if sign_x > 0 else anchor_x - w
        y = anchor_y if sign_y > 0 else anchor_y - h
        return CropRect(x, y, w, h)

    def _resize_locked_edge(self, start: CropRect, dx: float, dy: float,
                            ratio: float) -> Optional[CropRect]:
        """Anchor the opposite edge and keep the perpendicular center fixed."""
        edge = self._handle.edges[0]
        cx, cy = start.center

        if edge in ('left', 'right'):
            sign = -1 if edge == 'left' else 1
            anchor = start.right if sign < 0 else start.x
            w = start.width + sign * dx
            h = w / ratio
            if w < MIN_CROP_SIZE or h < MIN_CROP_SIZE:
                return None
            max_w = self._width - anchor if sign > 0 else anchor
            max_h = 2 * min(cy, self._height - cy)
            w, h = self._shrink_to_fit(w, h, max_w, max_h)
            x = anchor if sign > 0 else anchor - w
            return CropRect(x, cy - h / 2, w, h)

        sign = -1 if edge == 'top' else 1
        anchor = start.bottom if sign < 0 else start.y
        h = start.height + sign * dy
        w = h * ratio
        if w < MIN_CROP_SIZE or h < MIN_CROP_SIZE:
            return None
        max_h = self._height - anchor if sign > 0 else anchor
        max_w = 2 * min(cx, self._width - cx)
        w, h = self._shrink_to_fit(w, h, max_w, max_h)
        y = anchor if sign > 0 else anchor - h
        return CropRect(cx - w / 2, y, w, h)

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _shrink_to_fit(w: float, h: float, max_w: float, max_h: float) -> Tuple[float, float]:
        """Scale (w, h) down uniformly until it fits (max_w, max_h)."""
        scale = 1.0
        if w > 0:
            scale = min(scale, max(0.0, max_w) / w)
        if h > 0:
            scale = min(scale, max(0.0, max_h) / h)
        return (w * scale, h * scale)

    def _fit_ratio_around_center(self, rect: CropRect, ratio: float) -> Optional[CropRect]:
        """Re-derive height from width at the given ratio, shrinking to fit the surface."""
        cx, cy = rect.center
        w = rect.width
        h = w / ratio
        max_w = 2 * min(cx, self._width - cx)
        max_h = 2 * min(cy, self._height - cy)
        w, h = self._shrink_to_fit(w, h, max_w, max_h)
        return CropRect(cx - w / 2, cy - h / 2, w, h)

    def _clamp_point(self, x: float, y: float) -> Tuple[float, float]:
        return (min(max(0.0, float(x)), self._width), min(max(0.0, float(y)), self._height))

    def _clamp_position(self, rect: CropRect) -> CropRect:
        """Nudge a rectangle back inside the surface without resizing it."""
        w = min(rect.width, self._width)
        h = min(rect.height, self._height)
        x = min(max(0.0, rect.x), self._width - w)
        y = min(max(0.0, rect.y), self._height - h)
        return CropRect(x, y, w, h)

    @staticmethod
    def _acceptable(rect: CropRect) -> bool:
        return rect.width >= MIN_CROP_SIZE and rect.height >= MIN_CROP_SIZE
