"""
LIGHTBOX IMAGE EDITOR - Adjustments Panel

Slider groups for every adjustment control plus the per-band selector.
"""

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QButtonGroup, QGroupBox, QScrollArea
)
from PySide6.QtCore import Qt, Signal

from pipeline import AdjustmentParams, BAND_NAMES, BAND_RANGES, PARAM_RANGES
from ui_constants import Dimensions, Styles, get_accent_button_style
from widgets.controls import SliderWithButtons

# (group title, [(param, label, step, decimals), ...])
_SLIDER_GROUPS = [
    ("Light", [
        ('exposure', "Exposure", 0.05, 2),
        ('contrast', "Contrast", 1, 0),
        ('luminance', "Luminance", 1, 0),
    ]),
    ("Color", [
        ('temperature', "Temperature", 1, 0),
        ('tint', "Tint", 1, 0),
        ('hue', "Hue", 1, 0),
        ('saturation', "Saturation", 1, 0),
        ('vibrance', "Vibrance", 1, 0),
    ]),
    ("Effects", [
        ('clarity', "Clarity", 1, 0),
        ('dehaze', "Dehaze", 1, 0),
        ('grain', "Grain", 1, 0),
    ]),
]


class AdjustmentsPanel(QWidget):
    """Scrollable adjustment controls.

    Emits paramChanged(name, value) for scalar controls and
    bandChanged(band, field, value) for the selective hue bands.
    Call set_params() to sync the sliders from a parameter set.
    """

    paramChanged = Signal(str, float)
    bandChanged = Signal(str, str, float)
    resetAllRequested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedWidth(Dimensions.PANEL_WIDTH_WIDE)
        self._sliders = {}
        self._band_sliders = {}
        self._band_values = {name: {'hue': 0.0, 'saturation': 0.0, 'luminance': 0.0}
                             for name in BAND_NAMES}
        self._current_band = BAND_NAMES[0]
        self._setup_ui()

    def _setup_ui(self):
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        scroll_area.setStyleSheet(Styles.SCROLL_AREA_DARK)

        controls_panel = QWidget()
        controls_layout = QVBoxLayout(controls_panel)
        controls_layout.setContentsMargins(10, 10, 10, 0)

        for title, entries in _SLIDER_GROUPS:
            group = QGroupBox(title)
            group_layout = QVBoxLayout(group)
            for name, label, step, decimals in entries:
                lo, hi = PARAM_RANGES[name]
                slider = SliderWithButtons(label, lo, hi, 0.0, step=step, decimals=decimals)
                slider.valueChanged.connect(lambda v, n=name: self.paramChanged.emit(n, v))
                slider.valueChanged.connect(lambda _v: self._update_reset_all_style())
                group_layout.addWidget(slider)
                self._sliders[name] = slider
            controls_layout.addWidget(group)

        controls_layout.addWidget(self._build_band_group())

        self._reset_all_btn = QPushButton("Reset All")
        self._reset_all_btn.clicked.connect(self._on_reset_all)
        controls_layout.addWidget(self._reset_all_btn)
        controls_layout.addStretch()

        scroll_area.setWidget(controls_panel)
        outer.addWidget(scroll_area)

    def _build_band_group(self) -> QGroupBox:
        group = QGroupBox("Color Mixer")
        layout = QVBoxLayout(group)

        # One checkable button per band
        band_row = QHBoxLayout()
        self._band_buttons = QButtonGroup(self)
        self._band_buttons.setExclusive(True)
        for name in BAND_NAMES:
            btn = QPushButton(name[0].upper())
            btn.setToolTip(name.capitalize())
            btn.setCheckable(True)
            btn.setFixedSize(*Dimensions.BUTTON_SMALL)
            btn.setChecked(name == self._current_band)
            btn.clicked.connect(lambda checked, n=name: self._select_band(n))
            self._band_buttons.addButton(btn)
            band_row.addWidget(btn)
        band_row.addStretch()
        layout.addLayout(band_row)

        self._band_label = QLabel(self._current_band.capitalize())
        layout.addWidget(self._band_label)

        for field_name, label, step in (('hue', "Hue", 1),
                                        ('saturation', "Saturation", 1),
                                        ('luminance', "Luminance", 1)):
            lo, hi = BAND_RANGES[field_name]
            slider = SliderWithButtons(label, lo, hi, 0.0, step=step, decimals=0)
            slider.valueChanged.connect(lambda v, f=field_name: self._on_band_slider(f, v))
            layout.addWidget(slider)
            self._band_sliders[field_name] = slider
        return group

    def _select_band(self, band: str):
        self._current_band = band
        self._band_label.setText(band.capitalize())
        for field_name, slider in self._band_sliders.items():
            slider.setValue(self._band_values[band][field_name])

    def _on_band_slider(self, field_name: str, value: float):
        self._band_values[self._current_band][field_name] = value
        self._update_reset_all_style()
        self.bandChanged.emit(self._current_band, field_name, value)

    def _on_reset_all(self):
        self.set_params(AdjustmentParams())
        self.resetAllRequested.emit()

    def set_params(self, params: AdjustmentParams):
        """Sync every slider to the given parameters without emitting signals."""
        for name, slider in self._sliders.items():
            slider.setValue(getattr(params, name))
        for name, adj in params.bands.items():
            self._band_values[name] = {
                'hue': adj.hue, 'saturation': adj.saturation, 'luminance': adj.luminance,
            }
        self._select_band(self._current_band)
        self._update_reset_all_style(params)

    def _update_reset_all_style(self, params: AdjustmentParams = None):
        """Highlight Reset All when anything is away from neutral."""
        if params is not None:
            modified = not params.is_neutral()
        else:
            modified = (any(s.value() != 0 for s in self._sliders.values()) or
                        any(v != 0 for band in self._band_values.values() for v in band.values()))
        self._reset_all_btn.setStyleSheet(get_accent_button_style() if modified else "")

    def slider(self, name: str) -> SliderWithButtons:
        return self._sliders[name]

    def band_slider(self, field_name: str) -> SliderWithButtons:
        return self._band_sliders[field_name]
