import numpy as np
import pytest

from crop import CropRect, InteractionMode
from editor import BakeRequest, EditorSession
from pipeline import AdjustmentParams
from processing import ImageLoadError


@pytest.fixture
def session(landscape):
    s = EditorSession()
    s.load(landscape)
    return s


def test_load_opens_and_resets(session, landscape):
    assert session.is_open
    assert session.surface_size == (400, 300)
    assert session.params.is_neutral()
    assert session.transform.is_identity()
    assert session.crop_rect is None
    assert session.render_dirty

    session.set_param('exposure', 1.0)
    session.rotate_cw()
    session.load(landscape)
    assert session.params.is_neutral()
    assert session.transform.is_identity()


def test_source_is_a_private_copy(landscape):
    s = EditorSession()
    s.load(landscape)
    landscape[...] = 0
    assert s.source.any()


def test_load_failure_leaves_session_closed(session, tmp_path):
    with pytest.raises(ImageLoadError):
        session.load(str(tmp_path / "missing.png"))
    assert not session.is_open
    with pytest.raises(ImageLoadError):
        session.load(np.zeros((2, 2, 2), dtype=np.uint8))
    assert not session.is_open


def test_render_requires_open_session():
    with pytest.raises(RuntimeError):
        EditorSession().render()


def test_render_clears_dirty_flag(session):
    surface = session.render()
    assert surface.shape == (300, 400, 4)
    assert not session.render_dirty
    session.set_param('contrast', 20)
    assert session.render_dirty


def test_viewport_scales_surface_and_crop(session):
    session.select_aspect('1:1')
    session.set_viewport(200, 200)
    assert session.surface_size == (200, 150)
    assert session.crop_rect == CropRect(25, 0, 150, 150)
    assert session.render().shape == (150, 200, 4)


def test_rotation_swaps_dimensions_and_resets_crop(session):
    session.select_aspect('1:1')
    assert session.crop_rect is not None
    session.set_rotation(90)
    assert session.surface_size == (300, 400)
    assert session.crop_rect is None
    assert session.crop.surface_size == (300, 400)


def test_same_rotation_keeps_crop(session):
    session.select_aspect('1:1')
    session.set_rotation(360)
    assert session.crop_rect == CropRect(50, 0, 300, 300)


def test_flip_keeps_crop(session):
    session.select_aspect('1:1')
    session.toggle_flip_horizontal()
    session.toggle_flip_vertical()
    assert session.crop_rect == CropRect(50, 0, 300, 300)


def test_reset_adjustments_keeps_transform(session):
    session.set_param('saturation', 40)
    session.set_band('greens', hue=20)
    session.rotate_ccw()
    session.reset_adjustments()
    assert session.params.is_neutral()
    assert session.transform.rotation == 270


def test_reset_single_param(session):
    session.set_param('saturation', 40)
    session.set_param('vibrance', 10)
    session.reset_param('saturation')
    assert session.params.saturation == 0
    assert session.params.vibrance == 10


def test_pointer_events_need_crop_mode(session):
    assert session.pointer_down(10, 10) is InteractionMode.IDLE
    assert session.pointer_move(100, 100) is False
    session.pointer_up()
    assert session.crop_rect is None

    session.set_crop_mode(True)
    assert session.pointer_down(10, 10) is InteractionMode.DRAWING
    assert session.pointer_move(110, 60)
    assert session.pointer_up() == CropRect(10, 10, 100, 50)


def test_leaving_crop_mode_ends_interaction(session):
    session.set_crop_mode(True)
    session.pointer_down(10, 10)
    session.set_crop_mode(False)
    assert session.crop.mode is InteractionMode.IDLE


def test_snapshot_is_independent(session):
    session.set_param('exposure', 0.5)
    session.select_aspect('1:1')
    request = session.snapshot()
    assert isinstance(request, BakeRequest)

    session.set_param('exposure', -1.0)
    session.rotate_cw()
    assert request.params.exposure == 0.5
    assert request.transform.rotation == 0
    assert request.crop_rect == CropRect(50, 0, 300, 300)
    assert request.preview_size == (400, 300)


def test_snapshot_ignores_gesture_in_progress(session):
    session.select_aspect('1:1')
    session.set_crop_mode(True)
    session.pointer_down(200, 150)
    session.pointer_move(150, 150)
    assert session.crop_rect == CropRect(0, 0, 300, 300)
    assert session.snapshot().crop_rect == CropRect(50, 0, 300, 300)


def test_save_bakes_full_resolution_and_calls_back(landscape):
    saved = []
    s = EditorSession(on_save=saved.append)
    s.load(landscape)
    s.set_viewport(200, 200)
    s.select_aspect('free')          # crop covers the whole 200x150 preview
    out = s.save()

    assert out.shape == landscape.shape
    assert len(saved) == 1 and saved[0] is out


def test_save_applies_crop_and_adjustments(session, landscape):
    session.set_crop_rect(CropRect(100, 50, 200, 100))
    session.set_params(AdjustmentParams(saturation=-100))
    out = session.save()
    assert out.shape == (100, 200, 4)
    rgb = out[..., :3].astype(int)
    assert (rgb.max(axis=2) - rgb.min(axis=2) <= 1).all()
    # Live state untouched
    assert session.crop_rect == CropRect(100, 50, 200, 100)
    np.testing.assert_array_equal(session.source, landscape)


def test_close_discards_everything(session):
    session.set_param('exposure', 1.0)
    session.select_aspect('1:1')
    session.close()
    assert not session.is_open
    assert session.surface_size == (0, 0)
    assert session.params.is_neutral()
    assert session.crop_rect is None
    with pytest.raises(RuntimeError):
        session.snapshot()


def test_grain_changes_every_render(session):
    session.set_param('grain', 50)
    first = session.render()
    second = session.render()
    assert not np.array_equal(first, second)
