"""
LIGHTBOX IMAGE EDITOR - Control Widgets

Reusable control widgets.
"""

from PySide6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QSlider, QPushButton
from PySide6.QtCore import Qt, Signal

from ui_constants import Dimensions, get_accent_button_style


class SliderWithButtons(QWidget):
    """A slider with +/- buttons for fine adjustment and a reset button.

    The reset button turns orange while the value differs from the default.
    """

    valueChanged = Signal(float)

    def __init__(self, label: str, min_val: float, max_val: float, default: float = 0.0,
                 step: float = 1.0, decimals: int = 0):
        super().__init__()
        self.step = step
        self.decimals = decimals
        self.min_val = min_val
        self.max_val = max_val
        self.default = default

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 10)

        # Label, value, and reset button
        header = QHBoxLayout()
        self.name_label = QLabel(label)
        header.addWidget(self.name_label)
        header.addStretch()
        self.value_label = QLabel(self._format(default))
        self.value_label.setStyleSheet("font-weight: bold;")
        header.addWidget(self.value_label)

        self.reset_btn = QPushButton("↺")
        self.reset_btn.setFixedSize(*Dimensions.BUTTON_SMALL)
        self.reset_btn.clicked.connect(self._reset)
        header.addWidget(self.reset_btn)

        layout.addLayout(header)

        # Slider
        self.slider = QSlider(Qt.Horizontal)
        self.slider.setRange(round(min_val / step), round(max_val / step))
        self.slider.setValue(round(default / step))
        self.slider.valueChanged.connect(self._on_slider_change)
        layout.addWidget(self.slider)

        # +/- buttons
        btn_layout = QHBoxLayout()

        self.minus_btn = QPushButton(f"-{step:g}")
        self.minus_btn.setFixedWidth(Dimensions.BUTTON_WIDTH_STANDARD)
        self.minus_btn.clicked.connect(self._decrement)
        btn_layout.addWidget(self.minus_btn)

        btn_layout.addStretch()

        self.plus_btn = QPushButton(f"+{step:g}")
        self.plus_btn.setFixedWidth(Dimensions.BUTTON_WIDTH_STANDARD)
        self.plus_btn.clicked.connect(self._increment)
        btn_layout.addWidget(self.plus_btn)

        layout.addLayout(btn_layout)

        # Initial style (at default, so not highlighted)
        self._update_reset_style()

    def _format(self, val: float) -> str:
        return f"{val:.{self.decimals}f}"

    def value(self) -> float:
        return round(self.slider.value() * self.step, self.decimals)

    def setValue(self, val: float):
        """Set the value without emitting valueChanged."""
        self.slider.blockSignals(True)
        self.slider.setValue(round(val / self.step))
        self.value_label.setText(self._format(self.value()))
        self.slider.blockSignals(False)
        self._update_reset_style()

    def _on_slider_change(self, val):
        real_val = round(val * self.step, self.decimals)
        self.value_label.setText(self._format(real_val))
        self._update_reset_style()
        self.valueChanged.emit(real_val)

    def _step_by(self, delta: float):
        new_val = round(self.value() + delta, self.decimals)
        new_val = max(self.min_val, min(new_val, self.max_val))
        self.setValue(new_val)
        self.valueChanged.emit(new_val)

    def _increment(self):
        self._step_by(self.step)

    def _decrement(self):
        self._step_by(-self.step)

    def _reset(self):
        self.setValue(self.default)
        self.valueChanged.emit(self.default)

    def _update_reset_style(self):
        """Highlight the reset button when the value is away from default."""
        if abs(self.value() - self.default) < self.step / 2:
            self.reset_btn.setStyleSheet("")
            self.reset_btn.setToolTip(f"At default: {self._format(self.default)}")
        else:
            self.reset_btn.setStyleSheet(get_accent_button_style())
            self.reset_btn.setToolTip(f"Reset → {self._format(self.default)}")
