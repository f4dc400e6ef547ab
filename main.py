#!/usr/bin/env python3
"""
LIGHTBOX IMAGE EDITOR - Demo Host

Opens an image in the editor dialog and writes the saved result, or bakes
an edit described in a JSON file without any UI.

    lightbox-editor photo.jpg -o edited.png
    lightbox-editor photo.jpg --apply edit.json -o edited.png

Edit JSON layout:

    {
      "adjustments": {"exposure": 0.5, "bands": {"blues": {"saturation": 20}}},
      "transform": {"rotation": 90, "flip_horizontal": false, "flip_vertical": false},
      "crop": {"aspect": "1:1"}                       # or
      "crop": {"rect": [x, y, w, h], "preview_size": [w, h]}
    }
"""

import os
os.environ.setdefault("QT_LOGGING_RULES", "qt.qpa.fonts=false")

import sys
import argparse
import json
import logging
from pathlib import Path

from bake import BakeError
from crop import CropRect
from editor import EditorSession
from pipeline import AdjustmentParams
from processing import ImageLoadError, save_image

logger = logging.getLogger("lightbox")


def default_output_path(input_path: str) -> str:
    p = Path(input_path)
    return str(p.with_name(f"{p.stem}_edited.png"))


def apply_edit_file(session: EditorSession, edit: dict):
    """Replay an edit description onto an open session."""
    transform = edit.get('transform') or {}
    if 'rotation' in transform:
        session.set_rotation(int(transform['rotation']))
    if transform.get('flip_horizontal'):
        session.toggle_flip_horizontal()
    if transform.get('flip_vertical'):
        session.toggle_flip_vertical()

    session.set_params(AdjustmentParams.from_dict(edit.get('adjustments') or {}))

    crop = edit.get('crop') or {}
    if 'aspect' in crop:
        session.select_aspect(crop['aspect'])
    elif 'rect' in crop:
        rect = CropRect(*(float(v) for v in crop['rect']))
        preview_size = crop.get('preview_size')
        if preview_size:
            # Rectangle was drawn on a preview of this size; map it per axis
            preview_w, preview_h = (float(v) for v in preview_size)
            if preview_w <= 0 or preview_h <= 0:
                raise ValueError(f"Invalid preview size: {preview_size}")
            surface_w, surface_h = session.surface_size
            rect = rect.scaled(surface_w / preview_w, surface_h / preview_h)
        if not session.set_crop_rect(rect):
            raise ValueError(f"Crop rectangle {crop['rect']} is outside the image")


def run_headless(image_path: str, edit_path: str, output_path: str) -> int:
    try:
        with open(edit_path, 'r') as f:
            edit = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Could not read edit file %s: %s", edit_path, e)
        return 1

    session = EditorSession()
    try:
        session.load(image_path)
        apply_edit_file(session, edit)
        output = session.save()
    except ImageLoadError as e:
        logger.error("%s", e)
        return 1
    except BakeError as e:
        logger.error("Save failed: %s", e)
        return 1
    except (KeyError, ValueError, TypeError) as e:
        logger.error("Invalid edit file %s: %s", edit_path, e)
        return 1

    return 0 if save_image(output_path, output) else 1


def run_gui(image_path: str, output_path: str) -> int:
    from PySide6.QtWidgets import QApplication, QMessageBox
    from PySide6.QtCore import Qt
    from PySide6.QtGui import QPalette, QColor

    from widgets import ImageEditorDialog

    app = QApplication(sys.argv)
    app.setStyle('Fusion')

    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(53, 53, 53))
    palette.setColor(QPalette.WindowText, Qt.white)
    palette.setColor(QPalette.Base, QColor(25, 25, 25))
    palette.setColor(QPalette.AlternateBase, QColor(53, 53, 53))
    palette.setColor(QPalette.ToolTipBase, QColor(40, 40, 40))
    palette.setColor(QPalette.ToolTipText, Qt.white)
    palette.setColor(QPalette.Text, Qt.white)
    palette.setColor(QPalette.Button, QColor(53, 53, 53))
    palette.setColor(QPalette.ButtonText, Qt.white)
    palette.setColor(QPalette.BrightText, Qt.red)
    palette.setColor(QPalette.Link, QColor(230, 126, 34))  # Orange accent
    palette.setColor(QPalette.Highlight, QColor(230, 126, 34))  # Orange accent
    palette.setColor(QPalette.HighlightedText, Qt.white)
    app.setPalette(palette)

    try:
        dialog = ImageEditorDialog(image_path, on_save=lambda buf: save_image(output_path, buf))
    except ImageLoadError as e:
        QMessageBox.critical(None, "Open Failed", str(e))
        return 1

    dialog.show()
    app.exec()
    return 0 if dialog.result is not None else 1


def main():
    parser = argparse.ArgumentParser(description='Lightbox Image Editor')
    parser.add_argument('image', help='Image file to edit')
    parser.add_argument('-o', '--output', help='Output file (default: <name>_edited.png)')
    parser.add_argument('--apply', metavar='EDIT.json',
                        help='Apply an edit description without opening the editor')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    output_path = args.output or default_output_path(args.image)
    if args.apply:
        sys.exit(run_headless(args.image, args.apply, output_path))
    sys.exit(run_gui(args.image, output_path))


if __name__ == "__main__":
    main()
