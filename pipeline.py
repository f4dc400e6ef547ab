"""
LIGHTBOX IMAGE EDITOR - Color Adjustment Pipeline

Global and per-hue-band color adjustments applied to RGBA pixel buffers.

Every pixel goes through the same fixed sequence:

    1. exposure            6. vibrance
    2. contrast            7. clarity
    3. temperature / tint  8. dehaze
    4. RGB -> HSL          9. selective hue bands
    5. hue / lum / sat    10. HSL -> RGB
                          11. grain

All steps are vectorized with numpy. The pipeline is deterministic except for
grain, which draws fresh noise on every call.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from color_space import rgb_to_hsl_array, hsl_to_rgb_array

logger = logging.getLogger(__name__)


# Strength of each control at the end of its slider range (0-1 units)
TEMPERATURE_SCALE = 0.2
TINT_SCALE = 0.2
LUMINANCE_SCALE = 0.5
CLARITY_SCALE = 0.5
DEHAZE_LUMINANCE_SCALE = 0.15
DEHAZE_SATURATION_SCALE = 0.4
BAND_LUMINANCE_SCALE = 0.5
GRAIN_SCALE = 0.25

# name -> (min, max); neutral is 0 for every control
PARAM_RANGES = {
    'exposure': (-3.0, 3.0),     # stops
    'contrast': (-100.0, 100.0),
    'temperature': (-100.0, 100.0),
    'tint': (-100.0, 100.0),
    'hue': (-180.0, 180.0),      # degrees
    'luminance': (-100.0, 100.0),
    'saturation': (-100.0, 100.0),
    'vibrance': (-100.0, 100.0),
    'clarity': (-100.0, 100.0),
    'dehaze': (-100.0, 100.0),
    'grain': (0.0, 100.0),
}

SCALAR_PARAMS = tuple(PARAM_RANGES)

BAND_RANGES = {
    'hue': (-180.0, 180.0),
    'saturation': (-100.0, 100.0),
    'luminance': (-100.0, 100.0),
}


def _clamp(value: float, bounds: tuple) -> float:
    lo, hi = bounds
    return float(max(lo, min(hi, value)))


@dataclass(frozen=True)
class HueBand:
    """A contiguous hue-angle range in degrees. start > end means it wraps through 0."""
    name: str
    start: float
    end: float

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def contains(self, hue_deg):
        """Works on scalars and numpy arrays."""
        if self.wraps:
            return (hue_deg >= self.start) | (hue_deg < self.end)
        return (hue_deg >= self.start) & (hue_deg < self.end)


# Ordered; first match wins. Together they cover [0, 360) without gaps.
HUE_BANDS = (
    HueBand('reds', 330.0, 30.0),
    HueBand('yellows', 30.0, 90.0),
    HueBand('greens', 90.0, 150.0),
    HueBand('aquas', 150.0, 210.0),
    HueBand('blues', 210.0, 270.0),
    HueBand('magentas', 270.0, 330.0),
)

BAND_NAMES = tuple(band.name for band in HUE_BANDS)


def band_index(hue_deg: float) -> int:
    """Return the index into HUE_BANDS for a hue angle in degrees."""
    hue_deg = hue_deg % 360.0
    for i, band in enumerate(HUE_BANDS):
        if band.contains(hue_deg):
            return i
    raise ValueError(f"Hue {hue_deg} not covered by any band")


def band_indices(hue_deg: np.ndarray) -> np.ndarray:
    """Vectorized band_index: int8 array of band indices, same shape as input."""
    hue_deg = np.mod(hue_deg, 360.0)
    indices = np.full(hue_deg.shape, -1, dtype=np.int8)
    for i, band in enumerate(HUE_BANDS):
        unassigned = indices < 0
        indices[unassigned & band.contains(hue_deg)] = i
    return indices


@dataclass
class BandAdjustment:
    """Hue (degrees), saturation and luminance offsets for one hue band."""
    hue: float = 0.0
    saturation: float = 0.0
    luminance: float = 0.0

    def __post_init__(self):
        for name, bounds in BAND_RANGES.items():
            setattr(self, name, _clamp(getattr(self, name), bounds))

    def is_neutral(self) -> bool:
        return self.hue == 0 and self.saturation == 0 and self.luminance == 0


def _neutral_bands() -> Dict[str, BandAdjustment]:
    return {name: BandAdjustment() for name in BAND_NAMES}


@dataclass
class AdjustmentParams:
    """Complete set of adjustment controls. All-zero is the identity."""
    exposure: float = 0.0
    contrast: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    hue: float = 0.0
    luminance: float = 0.0
    saturation: float = 0.0
    vibrance: float = 0.0
    clarity: float = 0.0
    dehaze: float = 0.0
    grain: float = 0.0
    bands: Dict[str, BandAdjustment] = field(default_factory=_neutral_bands)

    def __post_init__(self):
        for name in SCALAR_PARAMS:
            setattr(self, name, _clamp(getattr(self, name), PARAM_RANGES[name]))
        bands = _neutral_bands()
        for name, adj in self.bands.items():
            if name not in bands:
                raise KeyError(f"Unknown hue band: {name}")
            bands[name] = adj
        self.bands = bands

    def set(self, name: str, value: float):
        """Set one scalar control, clamped to its range."""
        if name not in PARAM_RANGES:
            raise ValueError(f"Unknown adjustment: {name}")
        setattr(self, name, _clamp(value, PARAM_RANGES[name]))

    def set_band(self, band: str, hue: float = None, saturation: float = None,
                 luminance: float = None):
        """Update any subset of a band's offsets."""
        if band not in self.bands:
            raise KeyError(f"Unknown hue band: {band}")
        current = self.bands[band]
        self.bands[band] = BandAdjustment(
            hue=current.hue if hue is None else hue,
            saturation=current.saturation if saturation is None else saturation,
            luminance=current.luminance if luminance is None else luminance,
        )

    def reset(self, name: str):
        """Reset one scalar control or one whole hue band to neutral."""
        if name in PARAM_RANGES:
            setattr(self, name, 0.0)
        elif name in self.bands:
            self.bands[name] = BandAdjustment()
        else:
            raise ValueError(f"Unknown adjustment: {name}")

    def reset_all(self):
        for name in SCALAR_PARAMS:
            setattr(self, name, 0.0)
        self.bands = _neutral_bands()

    def is_neutral(self) -> bool:
        if any(getattr(self, name) != 0 for name in SCALAR_PARAMS):
            return False
        return all(adj.is_neutral() for adj in self.bands.values())

    def copy(self) -> 'AdjustmentParams':
        return AdjustmentParams.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        result = {name: getattr(self, name) for name in SCALAR_PARAMS}
        result['bands'] = {
            name: {'hue': adj.hue, 'saturation': adj.saturation, 'luminance': adj.luminance}
            for name, adj in self.bands.items()
        }
        return result

    @classmethod
    def from_dict(cls, data: dict) -> 'AdjustmentParams':
        """Build from a plain dict. Unknown keys are ignored, missing keys are neutral."""
        if not data:
            return cls()
        scalars = {name: float(data[name]) for name in SCALAR_PARAMS if name in data}
        bands = {}
        for name, values in (data.get('bands') or {}).items():
            if name in BAND_NAMES:
                bands[name] = BandAdjustment(
                    hue=float(values.get('hue', 0.0)),
                    saturation=float(values.get('saturation', 0.0)),
                    luminance=float(values.get('luminance', 0.0)),
                )
        return cls(bands=bands, **scalars)


def apply_adjustments(buffer: np.ndarray, params: AdjustmentParams,
                      rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Apply the full adjustment chain to an (H, W, 4) uint8 RGBA buffer.

    Args:
        buffer: Source pixels, left untouched.
        params: Adjustment controls.
        rng: Generator for grain noise. A new unseeded one is created per call
             when omitted, so grain changes on every render.

    Returns:
        New (H, W, 4) uint8 buffer. Alpha is copied through unchanged.
    """
    if buffer.ndim != 3 or buffer.shape[2] != 4 or buffer.dtype != np.uint8:
        raise ValueError(f"Expected (H, W, 4) uint8 buffer, got {buffer.shape} {buffer.dtype}")

    if params.is_neutral():
        return buffer.copy()

    _t_start = time.perf_counter()

    out = np.empty_like(buffer)
    out[..., 3] = buffer[..., 3]

    rgb = buffer[..., :3].astype(np.float32) / np.float32(255.0)

    # 1. Exposure (in stops)
    if params.exposure != 0:
        rgb *= np.float32(2.0 ** params.exposure)

    # 2. Contrast around mid-gray
    if params.contrast != 0:
        factor = np.float32((100.0 + params.contrast) / 100.0)
        rgb -= 0.5
        rgb *= factor
        rgb += 0.5

    # 3. Temperature (red/blue axis) and tint (green/magenta axis)
    if params.temperature != 0:
        push = np.float32(params.temperature / 100.0 * TEMPERATURE_SCALE)
        rgb[..., 0] += push
        rgb[..., 2] -= push
    if params.tint != 0:
        # positive tint = magenta
        rgb[..., 1] -= np.float32(params.tint / 100.0 * TINT_SCALE)

    np.clip(rgb, 0.0, 1.0, out=rgb)

    # Vibrance weights by raw channel spread, measured before HSL
    spread = None
    if params.vibrance != 0:
        spread = rgb.max(axis=2) - rgb.min(axis=2)

    # 4. RGB -> HSL
    hsl = rgb_to_hsl_array(rgb)
    h, s, l = hsl[..., 0], hsl[..., 1], hsl[..., 2]

    # 5. Global hue, luminance and saturation
    if params.hue != 0:
        h += np.float32(params.hue / 360.0)
    if params.luminance != 0:
        l += np.float32(params.luminance / 100.0 * LUMINANCE_SCALE)
    if params.saturation != 0:
        s *= np.float32(1.0 + params.saturation / 100.0)
    _clamp_hsl(hsl)

    # 6. Vibrance - stronger on pixels with little channel spread
    if spread is not None:
        s *= 1.0 + np.float32(params.vibrance / 100.0) * (1.0 - spread)
        _clamp_hsl(hsl)

    # 7. Clarity - push lightness away from mid-gray
    if params.clarity != 0:
        l += np.float32(params.clarity / 100.0 * CLARITY_SCALE) * (l - 0.5)
        _clamp_hsl(hsl)

    # 8. Dehaze - darker and more saturated (inverse when negative)
    if params.dehaze != 0:
        amount = params.dehaze / 100.0
        l -= np.float32(amount * DEHAZE_LUMINANCE_SCALE) * l
        s *= np.float32(1.0 + amount * DEHAZE_SATURATION_SCALE)
        _clamp_hsl(hsl)

    # 9. Selective hue bands
    active = [(i, band.name) for i, band in enumerate(HUE_BANDS)
              if not params.bands[band.name].is_neutral()]
    if active:
        indices = band_indices(h * np.float32(360.0))
        for i, name in active:
            adj = params.bands[name]
            mask = indices == i
            if adj.hue != 0:
                h[mask] += np.float32(adj.hue / 360.0)
            if adj.saturation != 0:
                s[mask] *= np.float32(1.0 + adj.saturation / 100.0)
            if adj.luminance != 0:
                # Gate by saturation so neutral pixels (hue 0) keep their lightness
                l[mask] += np.float32(adj.luminance / 100.0 * BAND_LUMINANCE_SCALE) * s[mask]
        _clamp_hsl(hsl)

    # 10. HSL -> RGB
    rgb = hsl_to_rgb_array(hsl)

    # 11. Grain - fresh noise per call, per channel, per pixel
    if params.grain > 0:
        if rng is None:
            rng = np.random.default_rng()
        noise = rng.uniform(-1.0, 1.0, size=rgb.shape).astype(np.float32)
        rgb += noise * np.float32(params.grain / 100.0 * GRAIN_SCALE)

    out[..., :3] = np.clip(np.rint(rgb * 255.0), 0, 255).astype(np.uint8)

    logger.debug("apply_adjustments %dx%d in %.1fms", buffer.shape[1], buffer.shape[0],
                 (time.perf_counter() - _t_start) * 1000)
    return out


def _clamp_hsl(hsl: np.ndarray):
    """Wrap hue and clamp saturation/lightness in place."""
    np.mod(hsl[..., 0], 1.0, out=hsl[..., 0])
    np.clip(hsl[..., 1:], 0.0, 1.0, out=hsl[..., 1:])
