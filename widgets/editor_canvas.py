"""
LIGHTBOX IMAGE EDITOR - Editor Canvas

Preview surface display with crop interaction.
"""

import logging

from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtCore import Qt, Signal, QTimer
from PySide6.QtGui import QPixmap, QImage, QPainter, QColor, QPen

from crop import Handle, InteractionMode
from ui_constants import Colors, Dimensions, Timing

logger = logging.getLogger(__name__)

_HANDLE_CURSORS = {
    Handle.LEFT: Qt.SizeHorCursor,
    Handle.RIGHT: Qt.SizeHorCursor,
    Handle.TOP: Qt.SizeVerCursor,
    Handle.BOTTOM: Qt.SizeVerCursor,
    Handle.TOP_LEFT: Qt.SizeFDiagCursor,
    Handle.BOTTOM_RIGHT: Qt.SizeFDiagCursor,
    Handle.TOP_RIGHT: Qt.SizeBDiagCursor,
    Handle.BOTTOM_LEFT: Qt.SizeBDiagCursor,
}


class EditorCanvas(QWidget):
    """Shows the session's preview surface and feeds it pointer events.

    Renders are coalesced: any number of schedule_render() calls within one
    frame interval produce a single render of the latest state.
    """

    rendered = Signal()
    cropChanged = Signal()

    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.setMinimumSize(*Dimensions.CANVAS_MIN_SIZE)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMouseTracking(True)

        self._session = session
        self._pixmap = None
        self._dragging = False

        self._render_timer = QTimer(self)
        self._render_timer.setSingleShot(True)
        self._render_timer.timeout.connect(self._render_now)

    @property
    def session(self):
        return self._session

    def schedule_render(self):
        """Request a render on the next frame tick."""
        self._session.mark_dirty()
        if not self._render_timer.isActive():
            self._render_timer.start(Timing.RENDER_INTERVAL_MS)

    def _render_now(self):
        if not self._session.is_open:
            self._pixmap = None
            self.update()
            return
        if not self._session.render_dirty and self._pixmap is not None:
            return

        surface = self._session.render()
        h, w = surface.shape[:2]
        qimg = QImage(surface.data, w, h, w * 4, QImage.Format_RGBA8888)
        self._pixmap = QPixmap.fromImage(qimg)
        self.update()
        self.rendered.emit()

    def _image_origin(self) -> tuple:
        """Top-left of the preview inside the widget (centered)."""
        if self._pixmap is None:
            return (0, 0)
        x = (self.width() - self._pixmap.width()) // 2
        y = (self.height() - self._pixmap.height()) // 2
        return (x, y)

    def _widget_to_surface(self, pos) -> tuple:
        """Convert widget coordinates to preview-surface coordinates."""
        ox, oy = self._image_origin()
        return (pos.x() - ox, pos.y() - oy)

    # -- Qt events ------------------------------------------------------------

    def resizeEvent(self, event):
        self._session.set_viewport(self.width(), self.height())
        self.schedule_render()
        super().resizeEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(Colors.BACKGROUND_DARKEST))

        painter.setPen(QPen(QColor(Colors.BACKGROUND_MEDIUM), 1))
        painter.drawRect(0, 0, self.width() - 1, self.height() - 1)

        if self._pixmap is None:
            painter.setPen(QColor(Colors.TEXT_MUTED))
            painter.drawText(self.rect(), Qt.AlignCenter, "No image")
            return

        x, y = self._image_origin()
        painter.drawPixmap(x, y, self._pixmap)

    def mousePressEvent(self, event):
        """Start a crop interaction at the pointer."""
        if event.button() == Qt.LeftButton and self._session.crop_mode:
            x, y = self._widget_to_surface(event.position())
            mode = self._session.pointer_down(x, y)
            self._dragging = mode is not InteractionMode.IDLE
            self.schedule_render()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        """Drive the active interaction, or update the cursor for what is under it."""
        x, y = self._widget_to_surface(event.position())
        if self._dragging:
            if self._session.pointer_move(x, y):
                self.schedule_render()
            event.accept()
            return

        if self._session.crop_mode and self._session.is_open:
            mode, handle = self._session.crop.hit_test(x, y)
            if handle is not None:
                self.setCursor(_HANDLE_CURSORS[handle])
            elif mode is InteractionMode.MOVING:
                self.setCursor(Qt.SizeAllCursor)
            else:
                self.setCursor(Qt.CrossCursor)
        else:
            self.setCursor(Qt.ArrowCursor)
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        """Finish the crop interaction."""
        if event.button() == Qt.LeftButton and self._dragging:
            self._dragging = False
            self._session.pointer_up()
            self.schedule_render()
            self.cropChanged.emit()
            event.accept()
            return
        super().mouseReleaseEvent(event)
