"""
LIGHTBOX IMAGE EDITOR - Widgets Package

Re-exports all widget classes for convenient imports.
"""

# Controls
from widgets.controls import SliderWithButtons

# Canvas
from widgets.editor_canvas import EditorCanvas

# Adjustments
from widgets.adjustments_panel import AdjustmentsPanel

# Dialogs
from widgets.editor_dialog import ImageEditorDialog

__all__ = [
    # Controls
    'SliderWithButtons',
    # Canvas
    'EditorCanvas',
    # Adjustments
    'AdjustmentsPanel',
    # Dialogs
    'ImageEditorDialog',
]
