import pytest

from state import ASPECT_RATIOS, TransformState, aspect_ratio_value


def test_rotation_normalizes():
    t = TransformState(rotation=-90)
    assert t.rotation == 270
    t.rotate_cw()
    assert t.rotation == 0
    t.rotate_ccw()
    assert t.rotation == 270
    t.rotate_180()
    assert t.rotation == 90


def test_rotation_must_be_quarter_turn():
    with pytest.raises(ValueError):
        TransformState(rotation=45)
    t = TransformState()
    with pytest.raises(ValueError):
        t.set_rotation(100)
    assert t.rotation == 0


def test_set_rotation_reports_change():
    t = TransformState()
    assert t.set_rotation(90) is True
    assert t.set_rotation(450) is False
    assert t.rotation == 90


def test_oriented_size_swaps_on_quarter_turns():
    t = TransformState()
    assert t.oriented_size(400, 300) == (400, 300)
    t.set_rotation(90)
    assert t.oriented_size(400, 300) == (300, 400)
    t.set_rotation(180)
    assert t.oriented_size(400, 300) == (400, 300)
    t.set_rotation(270)
    assert t.swaps_dimensions


def test_flips_toggle_and_reset():
    t = TransformState()
    t.toggle_flip_horizontal()
    t.toggle_flip_vertical()
    t.toggle_flip_vertical()
    assert t.flip_horizontal and not t.flip_vertical
    assert not t.is_identity()
    t.reset()
    assert t.is_identity()


def test_copy_and_equality():
    t = TransformState(90, flip_horizontal=True)
    clone = t.copy()
    assert clone == t
    assert clone.key() == (90, True, False)
    clone.toggle_flip_vertical()
    assert clone != t


def test_aspect_values():
    assert aspect_ratio_value('free') is None
    assert aspect_ratio_value('1:1') == 1.0
    assert aspect_ratio_value('16:9') == pytest.approx(16 / 9)
    assert aspect_ratio_value('9:16') == pytest.approx(9 / 16)
    assert aspect_ratio_value('original', (400, 300)) == pytest.approx(4 / 3)
    assert aspect_ratio_value('original') is None
    with pytest.raises(KeyError):
        aspect_ratio_value('5:4')


def test_all_presets_have_display_names():
    for key, (w, h, name) in ASPECT_RATIOS.items():
        assert name
        assert (w is None) == (h is None)
