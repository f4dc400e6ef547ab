"""
LIGHTBOX IMAGE EDITOR - Transform State

Rotation and mirror state for the editor, plus the crop aspect-ratio presets.
"""

from typing import Optional, Tuple


# Crop aspect presets: key -> (width_ratio, height_ratio, display_name)
# 'original' follows the working image (source as currently rotated)
ASPECT_RATIOS = {
    'free': (None, None, 'Free'),
    'original': (None, None, 'Original'),
    '1:1': (1, 1, '1:1'),
    '4:3': (4, 3, '4:3'),
    '3:2': (3, 2, '3:2'),
    '16:9': (16, 9, '16:9'),
    '3:4': (3, 4, '3:4'),
    '2:3': (2, 3, '2:3'),
    '9:16': (9, 16, '9:16'),
}


def aspect_ratio_value(key: str, surface_size: Tuple[float, float] = None) -> Optional[float]:
    """Get an aspect preset as a float (width/height), or None if free.

    'original' needs the current surface size (width, height).
    """
    if key not in ASPECT_RATIOS:
        raise KeyError(f"Unknown aspect ratio: {key}")
    if key == 'original':
        if surface_size is None or surface_size[1] <= 0:
            return None
        return surface_size[0] / surface_size[1]
    w, h, _ = ASPECT_RATIOS[key]
    if w is None:
        return None
    return w / h


class TransformState:
    """Quarter-turn rotation and horizontal/vertical mirroring.

    Rotation is applied first, mirroring second (in the rotated frame).
    """

    def __init__(self, rotation: int = 0, flip_horizontal: bool = False,
                 flip_vertical: bool = False):
        self._rotation = 0
        self.rotation = rotation
        self.flip_horizontal = bool(flip_horizontal)
        self.flip_vertical = bool(flip_vertical)

    @property
    def rotation(self) -> int:
        return self._rotation

    @rotation.setter
    def rotation(self, value: int):
        if value % 90 != 0:
            raise ValueError(f"Rotation must be a multiple of 90, got {value}")
        self._rotation = int(value) % 360

    def set_rotation(self, degrees: int) -> bool:
        """Set absolute rotation. Returns True if it changed."""
        old = self._rotation
        self.rotation = degrees
        return self._rotation != old

    def rotate_cw(self):
        """Rotate 90 degrees clockwise."""
        self.rotation = self._rotation + 90

    def rotate_ccw(self):
        """Rotate 90 degrees counter-clockwise."""
        self.rotation = self._rotation - 90

    def rotate_180(self):
        self.rotation = self._rotation + 180

    def toggle_flip_horizontal(self):
        self.flip_horizontal = not self.flip_horizontal

    def toggle_flip_vertical(self):
        self.flip_vertical = not self.flip_vertical

    def reset(self):
        self._rotation = 0
        self.flip_horizontal = False
        self.flip_vertical = False

    @property
    def swaps_dimensions(self) -> bool:
        return self._rotation in (90, 270)

    def oriented_size(self, width: int, height: int) -> Tuple[int, int]:
        """Size of a (width, height) image after this transform."""
        if self.swaps_dimensions:
            return (height, width)
        return (width, height)

    def is_identity(self) -> bool:
        return self._rotation == 0 and not self.flip_horizontal and not self.flip_vertical

    def key(self) -> tuple:
        """Hashable snapshot, used for render caching."""
        return (self._rotation, self.flip_horizontal, self.flip_vertical)

    def copy(self) -> 'TransformState':
        return TransformState(self._rotation, self.flip_horizontal, self.flip_vertical)

    def __eq__(self, other):
        if not isinstance(other, TransformState):
            return NotImplemented
        return self.key() == other.key()

    def __repr__(self):
        return (f"TransformState(rotation={self._rotation}, "
                f"flip_horizontal={self.flip_horizontal}, flip_vertical={self.flip_vertical})")
