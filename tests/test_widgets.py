import os
import time

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6")

from PySide6.QtWidgets import QApplication  # noqa: E402

import bake as bake_module  # noqa: E402
from editor import EditorSession  # noqa: E402
from services.bake_service import BakeService  # noqa: E402
from widgets import AdjustmentsPanel, EditorCanvas, ImageEditorDialog, SliderWithButtons  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def wait_for(qapp, condition, timeout=10.0):
    deadline = time.monotonic() + timeout
    while not condition() and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)
    return condition()


def test_slider_steps_and_resets(qapp):
    slider = SliderWithButtons("Exposure", -3.0, 3.0, 0.0, step=0.05, decimals=2)
    seen = []
    slider.valueChanged.connect(seen.append)

    slider._increment()
    assert slider.value() == pytest.approx(0.05)
    slider.setValue(2.5)
    assert seen == [pytest.approx(0.05)]
    slider._reset()
    assert slider.value() == 0.0
    assert seen[-1] == 0.0


def test_slider_clamps_at_range(qapp):
    slider = SliderWithButtons("Grain", 0, 100, 0)
    slider._decrement()
    assert slider.value() == 0


def test_panel_emits_param_and_band_changes(qapp):
    panel = AdjustmentsPanel()
    params, bands = [], []
    panel.paramChanged.connect(lambda n, v: params.append((n, v)))
    panel.bandChanged.connect(lambda b, f, v: bands.append((b, f, v)))

    panel.slider('contrast').slider.setValue(25)
    assert params == [('contrast', 25.0)]

    panel._select_band('blues')
    panel.band_slider('saturation').slider.setValue(-40)
    assert bands == [('blues', 'saturation', -40.0)]


def test_canvas_coalesces_renders(qapp, gradient):
    session = EditorSession()
    session.load(gradient)
    canvas = EditorCanvas(session)

    calls = []
    original = session.render
    session.render = lambda *a, **kw: calls.append(1) or original(*a, **kw)

    for value in (10, 20, 30):
        session.set_param('contrast', value)
        canvas.schedule_render()

    assert wait_for(qapp, lambda: calls)
    qapp.processEvents()
    assert len(calls) == 1
    assert not session.render_dirty
    assert canvas._pixmap is not None


def test_bake_service_runs_off_thread(qapp, gradient):
    session = EditorSession()
    session.load(gradient)
    session.set_param('exposure', 0.5)

    service = BakeService()
    results, errors = [], []
    service.bakeFinished.connect(results.append)
    service.bakeFailed.connect(errors.append)

    assert service.start(session.snapshot())
    assert not service.start(session.snapshot())
    assert wait_for(qapp, lambda: results or errors)
    assert errors == []
    assert results[0].shape == gradient.shape
    assert not service.is_running


def test_bake_service_reports_unexpected_errors(qapp, gradient, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("pipeline exploded")

    monkeypatch.setattr(bake_module, "apply_adjustments", explode)
    session = EditorSession()
    session.load(gradient)

    service = BakeService()
    results, errors = [], []
    service.bakeFinished.connect(results.append)
    service.bakeFailed.connect(errors.append)

    assert service.start(session.snapshot())
    assert wait_for(qapp, lambda: results or errors)
    assert results == []
    assert errors == ["pipeline exploded"]
    assert not service.is_running


def test_dialog_save_calls_back(qapp, gradient):
    saved = []
    dialog = ImageEditorDialog(gradient, on_save=saved.append)
    dialog._on_param_changed('saturation', -100)
    dialog._start_save()

    assert wait_for(qapp, lambda: saved)
    out = saved[0]
    assert out.shape == gradient.shape
    rgb = out[..., :3].astype(int)
    assert (rgb.max(axis=2) - rgb.min(axis=2) <= 1).all()
    assert dialog.result is out


def test_dialog_cancel_discards_session(qapp, gradient):
    saved = []
    dialog = ImageEditorDialog(gradient, on_save=saved.append)
    dialog.reject()
    assert not dialog.session.is_open
    assert saved == []
    assert dialog.result is None
