"""
LIGHTBOX IMAGE EDITOR - Editor Dialog

Modal editor: preview canvas, transform/crop toolbar, adjustments panel and
Save/Cancel. Saving runs the full-resolution bake on a worker thread.
"""

import logging
from typing import Callable, Optional

import numpy as np
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QComboBox, QDialogButtonBox, QMessageBox
)
from PySide6.QtCore import Qt

from editor import EditorSession
from services.bake_service import BakeService
from state import ASPECT_RATIOS
from ui_constants import Dimensions, get_accent_button_style
from widgets.adjustments_panel import AdjustmentsPanel
from widgets.editor_canvas import EditorCanvas

logger = logging.getLogger(__name__)


class ImageEditorDialog(QDialog):
    """Edit one image and hand the baked result to on_save.

    Cancel (or closing the window) discards everything; on_save is only
    called after a successful bake.
    """

    def __init__(self, image, on_save: Optional[Callable[[np.ndarray], None]] = None,
                 parent=None):
        super().__init__(parent)
        self.setWindowTitle("Edit Image")
        self.setMinimumSize(1000, 700)

        self._on_save = on_save
        self._result: Optional[np.ndarray] = None
        self._session = EditorSession()
        self._session.load(image)

        self._bake_service = BakeService(self)
        self._bake_service.bakeFinished.connect(self._on_bake_finished)
        self._bake_service.bakeFailed.connect(self._on_bake_failed)

        self._setup_ui()
        self.canvas.schedule_render()

    @property
    def session(self) -> EditorSession:
        return self._session

    @property
    def result(self) -> Optional[np.ndarray]:
        """The baked output after a successful save, else None."""
        return self._result

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(8)

        layout.addLayout(self._build_toolbar())

        body = QHBoxLayout()
        self.canvas = EditorCanvas(self._session)
        body.addWidget(self.canvas, stretch=1)

        self.adjustments = AdjustmentsPanel()
        self.adjustments.paramChanged.connect(self._on_param_changed)
        self.adjustments.bandChanged.connect(self._on_band_changed)
        self.adjustments.resetAllRequested.connect(self._on_reset_all)
        body.addWidget(self.adjustments)
        layout.addLayout(body, stretch=1)

        # Dialog buttons
        footer = QHBoxLayout()
        self._status_label = QLabel("")
        footer.addWidget(self._status_label)
        footer.addStretch()
        self._button_box = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        self._save_button = self._button_box.button(QDialogButtonBox.Save)
        self._save_button.setStyleSheet(get_accent_button_style())
        self._button_box.accepted.connect(self._start_save)
        self._button_box.rejected.connect(self.reject)
        footer.addWidget(self._button_box)
        layout.addLayout(footer)

    def _build_toolbar(self) -> QHBoxLayout:
        toolbar = QHBoxLayout()

        self.rotate_ccw_btn = QPushButton("↺ 90°")
        self.rotate_ccw_btn.setFixedWidth(Dimensions.BUTTON_WIDTH_STANDARD)
        self.rotate_ccw_btn.setToolTip("Rotate counter-clockwise (resets crop)")
        self.rotate_ccw_btn.clicked.connect(lambda: self._apply(self._session.rotate_ccw))
        toolbar.addWidget(self.rotate_ccw_btn)

        self.rotate_cw_btn = QPushButton("↻ 90°")
        self.rotate_cw_btn.setFixedWidth(Dimensions.BUTTON_WIDTH_STANDARD)
        self.rotate_cw_btn.setToolTip("Rotate clockwise (resets crop)")
        self.rotate_cw_btn.clicked.connect(lambda: self._apply(self._session.rotate_cw))
        toolbar.addWidget(self.rotate_cw_btn)

        self.flip_h_btn = QPushButton("⇆")
        self.flip_h_btn.setFixedWidth(Dimensions.BUTTON_WIDTH_STANDARD)
        self.flip_h_btn.setToolTip("Flip horizontal")
        self.flip_h_btn.clicked.connect(lambda: self._apply(self._session.toggle_flip_horizontal))
        toolbar.addWidget(self.flip_h_btn)

        self.flip_v_btn = QPushButton("⇅")
        self.flip_v_btn.setFixedWidth(Dimensions.BUTTON_WIDTH_STANDARD)
        self.flip_v_btn.setToolTip("Flip vertical")
        self.flip_v_btn.clicked.connect(lambda: self._apply(self._session.toggle_flip_vertical))
        toolbar.addWidget(self.flip_v_btn)

        toolbar.addSpacing(20)

        self.crop_btn = QPushButton("Crop")
        self.crop_btn.setCheckable(True)
        self.crop_btn.toggled.connect(self._on_crop_toggled)
        toolbar.addWidget(self.crop_btn)

        toolbar.addWidget(QLabel("Aspect:"))
        self.aspect_combo = QComboBox()
        self.aspect_combo.setFixedWidth(Dimensions.COMBO_WIDTH)
        for key, (_, _, display_name) in ASPECT_RATIOS.items():
            self.aspect_combo.addItem(display_name, key)
        self.aspect_combo.currentIndexChanged.connect(self._on_aspect_changed)
        toolbar.addWidget(self.aspect_combo)

        toolbar.addStretch()
        return toolbar

    # -- session updates ------------------------------------------------------

    def _apply(self, action: Callable[[], None]):
        action()
        self.canvas.schedule_render()

    def _on_param_changed(self, name: str, value: float):
        self._session.set_param(name, value)
        self.canvas.schedule_render()

    def _on_band_changed(self, band: str, field_name: str, value: float):
        self._session.set_band(band, **{field_name: value})
        self.canvas.schedule_render()

    def _on_reset_all(self):
        self._session.reset_adjustments()
        self.canvas.schedule_render()

    def _on_crop_toggled(self, checked: bool):
        self._session.set_crop_mode(checked)
        self.canvas.schedule_render()

    def _on_aspect_changed(self, index: int):
        key = self.aspect_combo.itemData(index)
        self._session.select_aspect(key)
        self.canvas.schedule_render()

    # -- save -----------------------------------------------------------------

    def _set_busy(self, busy: bool):
        self._button_box.setEnabled(not busy)
        self.adjustments.setEnabled(not busy)
        self.canvas.setEnabled(not busy)
        self._status_label.setText("Saving..." if busy else "")
        if busy:
            self.setCursor(Qt.WaitCursor)
        else:
            self.unsetCursor()

    def _start_save(self):
        if self._bake_service.is_running:
            return
        self._set_busy(True)
        self._bake_service.start(self._session.snapshot())

    def _on_bake_finished(self, output):
        self._set_busy(False)
        self._result = output
        if self._on_save is not None:
            self._on_save(output)
        self.accept()

    def _on_bake_failed(self, message: str):
        self._set_busy(False)
        QMessageBox.warning(self, "Save Failed", f"Could not save the image:\n{message}")

    # -- close ----------------------------------------------------------------

    def reject(self):
        # A running bake cannot be cancelled; wait for it before discarding state
        if self._bake_service.is_running:
            return
        self._session.close()
        super().reject()

    def closeEvent(self, event):
        if self._bake_service.is_running:
            event.ignore()
            return
        self._session.close()
        event.accept()
