import json

import cv2
import numpy as np

from main import default_output_path, run_headless


def write_source(tmp_path, landscape):
    path = tmp_path / "source.png"
    cv2.imwrite(str(path), cv2.cvtColor(landscape, cv2.COLOR_RGBA2BGRA))
    return str(path)


def write_edit(tmp_path, edit):
    path = tmp_path / "edit.json"
    path.write_text(json.dumps(edit))
    return str(path)


def test_headless_apply_with_aspect_crop(tmp_path, landscape):
    source = write_source(tmp_path, landscape)
    edit = write_edit(tmp_path, {
        "adjustments": {"exposure": 0.5, "bands": {"blues": {"saturation": 20}}},
        "transform": {"rotation": 90},
        "crop": {"aspect": "1:1"},
    })
    output = str(tmp_path / "out.png")

    assert run_headless(source, edit, output) == 0
    result = cv2.imread(output, cv2.IMREAD_UNCHANGED)
    # Rotated to 300x400, then the centered 300x300 square
    assert result.shape == (300, 300, 4)


def test_headless_apply_with_explicit_rect(tmp_path, landscape):
    source = write_source(tmp_path, landscape)
    edit = write_edit(tmp_path, {
        "crop": {"rect": [50, 0, 100, 100], "preview_size": [200, 150]},
    })
    output = str(tmp_path / "out.png")

    assert run_headless(source, edit, output) == 0
    result = cv2.cvtColor(cv2.imread(output, cv2.IMREAD_UNCHANGED), cv2.COLOR_BGRA2RGBA)
    np.testing.assert_array_equal(result, landscape[0:200, 100:300])


def test_headless_rect_from_differently_shaped_preview(tmp_path, landscape):
    source = write_source(tmp_path, landscape)
    # A square preview of a 400x300 source: x scales by 4, y by 3
    edit = write_edit(tmp_path, {
        "crop": {"rect": [25, 0, 50, 50], "preview_size": [100, 100]},
    })
    output = str(tmp_path / "out.png")

    assert run_headless(source, edit, output) == 0
    result = cv2.cvtColor(cv2.imread(output, cv2.IMREAD_UNCHANGED), cv2.COLOR_BGRA2RGBA)
    np.testing.assert_array_equal(result, landscape[0:150, 100:300])


def test_headless_reports_bad_inputs(tmp_path, landscape):
    output = str(tmp_path / "out.png")
    edit = write_edit(tmp_path, {})
    assert run_headless(str(tmp_path / "missing.png"), edit, output) == 1

    source = write_source(tmp_path, landscape)
    assert run_headless(source, str(tmp_path / "missing.json"), output) == 1

    bad = write_edit(tmp_path, {"transform": {"rotation": 45}})
    assert run_headless(source, bad, output) == 1

    bad = write_edit(tmp_path, {"crop": {"rect": [0, 0, 10, 10], "preview_size": [0, 100]}})
    assert run_headless(source, bad, output) == 1


def test_default_output_path():
    assert default_output_path("/photos/cat.jpg") == "/photos/cat_edited.png"
