import cv2
import numpy as np
import pytest

from processing import ImageLoadError, load_image, save_image, to_rgba


def test_gray_to_rgba():
    gray = np.array([[0, 128], [200, 255]], dtype=np.uint8)
    out = to_rgba(gray)
    assert out.shape == (2, 2, 4)
    np.testing.assert_array_equal(out[1, 0], [200, 200, 200, 255])


def test_single_channel_to_rgba():
    out = to_rgba(np.full((3, 3, 1), 7, dtype=np.uint8))
    np.testing.assert_array_equal(out[0, 0], [7, 7, 7, 255])


def test_rgb_gets_opaque_alpha():
    rgb = np.zeros((2, 3, 3), dtype=np.uint8)
    rgb[..., 0] = 10
    rgb[..., 2] = 30
    out = to_rgba(rgb)
    np.testing.assert_array_equal(out[0, 0], [10, 0, 30, 255])


def test_rgba_is_copied():
    rgba = np.full((2, 2, 4), 9, dtype=np.uint8)
    out = to_rgba(rgba)
    np.testing.assert_array_equal(out, rgba)
    assert not np.shares_memory(out, rgba)


def test_high_bit_depth_and_float():
    deep = np.full((2, 2, 3), 65535, dtype=np.uint16)
    np.testing.assert_array_equal(to_rgba(deep)[0, 0], [255, 255, 255, 255])

    floats = np.full((2, 2, 3), 0.5, dtype=np.float32)
    assert to_rgba(floats)[0, 0, 0] == 128


def test_non_contiguous_input():
    rgb = np.zeros((4, 6, 3), dtype=np.uint8)
    rgb[..., 1] = 50
    out = to_rgba(rgb[:, ::2])
    assert out.shape == (4, 3, 4)
    assert (out[..., 1] == 50).all()


@pytest.mark.parametrize("bad", [
    None,
    np.zeros((2, 2, 2), dtype=np.uint8),
    np.zeros((2, 2, 2, 2), dtype=np.uint8),
    np.zeros((0, 0, 3), dtype=np.uint8),
    np.zeros((2, 2, 3), dtype=np.int64),
    [[1, 2], [3, 4]],
])
def test_unsupported_inputs(bad):
    with pytest.raises(ImageLoadError):
        to_rgba(bad)


def test_load_missing_file(tmp_path):
    with pytest.raises(ImageLoadError):
        load_image(str(tmp_path / "nope.png"))


def test_load_corrupt_file(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")
    with pytest.raises(ImageLoadError):
        load_image(str(path))


def test_save_and_load_keep_channel_order(tmp_path):
    rgba = np.zeros((4, 5, 4), dtype=np.uint8)
    rgba[..., 0] = 255
    rgba[..., 3] = 128
    path = str(tmp_path / "red.png")

    assert save_image(path, rgba)
    # On disk it is BGRA
    raw = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    np.testing.assert_array_equal(raw[0, 0], [0, 0, 255, 128])

    np.testing.assert_array_equal(load_image(path), rgba)


def test_jpeg_drops_alpha(tmp_path):
    rgba = np.full((8, 8, 4), 100, dtype=np.uint8)
    path = str(tmp_path / "flat.jpg")
    assert save_image(path, rgba)
    loaded = load_image(path)
    assert loaded.shape == (8, 8, 4)
    assert (loaded[..., 3] == 255).all()
