import itertools

import numpy as np
import pytest

from color_space import hsl_to_rgb, hsl_to_rgb_array, rgb_to_hsl, rgb_to_hsl_array

LEVELS = list(range(0, 256, 15)) + [255]


def test_scalar_round_trip_over_8bit_grid():
    for r, g, b in itertools.product(LEVELS, repeat=3):
        rgb = (r / 255.0, g / 255.0, b / 255.0)
        back = hsl_to_rgb(*rgb_to_hsl(*rgb))
        assert back == pytest.approx(rgb, abs=1e-9)


def test_array_round_trip_over_8bit_grid():
    values = np.arange(0, 256, 5, dtype=np.float64) / 255.0
    grid = np.stack(np.meshgrid(values, values, values, indexing='ij'), axis=-1)
    back = hsl_to_rgb_array(rgb_to_hsl_array(grid))
    np.testing.assert_allclose(back, grid, atol=1e-9)


def test_array_matches_scalar():
    rng = np.random.default_rng(7)
    rgb = rng.integers(0, 256, size=(50, 3)) / 255.0
    hsl = rgb_to_hsl_array(rgb)
    for i in range(len(rgb)):
        assert tuple(hsl[i]) == pytest.approx(rgb_to_hsl(*rgb[i]), abs=1e-9)


@pytest.mark.parametrize("rgb, hsl", [
    ((1.0, 0.0, 0.0), (0.0, 1.0, 0.5)),
    ((0.0, 1.0, 0.0), (1 / 3, 1.0, 0.5)),
    ((0.0, 0.0, 1.0), (2 / 3, 1.0, 0.5)),
    ((1.0, 1.0, 1.0), (0.0, 0.0, 1.0)),
    ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
    ((0.5, 0.5, 0.5), (0.0, 0.0, 0.5)),
])
def test_known_colors(rgb, hsl):
    assert rgb_to_hsl(*rgb) == pytest.approx(hsl, abs=1e-9)
    assert hsl_to_rgb(*hsl) == pytest.approx(rgb, abs=1e-9)


def test_hue_is_cyclic():
    assert hsl_to_rgb(1.25, 1.0, 0.5) == pytest.approx(hsl_to_rgb(0.25, 1.0, 0.5))
    assert hsl_to_rgb(-0.75, 1.0, 0.5) == pytest.approx(hsl_to_rgb(0.25, 1.0, 0.5))


def test_zero_saturation_is_gray():
    assert hsl_to_rgb(0.4, 0.0, 0.3) == (0.3, 0.3, 0.3)
    out = hsl_to_rgb_array(np.array([[0.4, 0.0, 0.3]]))
    np.testing.assert_array_equal(out, [[0.3, 0.3, 0.3]])


def test_converters_do_not_clamp():
    r, g, b = hsl_to_rgb(0.0, 1.5, 0.5)
    assert r > 1.0
    assert b < 0.0


def test_array_keeps_float32():
    rgb = np.full((2, 2, 3), 0.25, dtype=np.float32)
    assert rgb_to_hsl_array(rgb).dtype == np.float32
    assert hsl_to_rgb_array(rgb_to_hsl_array(rgb)).dtype == np.float32
