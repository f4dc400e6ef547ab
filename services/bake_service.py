"""
LIGHTBOX IMAGE EDITOR - Bake Service

Qt-compatible coordinator for the full-resolution save step.
Runs bake() in a QThread so the dialog stays responsive while it works.
Once started a bake runs to completion; there is no cancel.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal, QThread

from bake import BakeError, bake

logger = logging.getLogger(__name__)


class BakeWorker(QObject):
    """Worker that runs a single bake in a QThread."""

    finished = Signal(object)   # output buffer
    failed = Signal(str)        # error message

    def __init__(self, request):
        super().__init__()
        self._request = request

    def run(self):
        """Execute the bake (called when thread starts)."""
        request = self._request
        try:
            output = bake(
                request.source,
                request.params,
                request.transform,
                crop_rect=request.crop_rect,
                preview_size=request.preview_size,
            )
        except BakeError as e:
            self.failed.emit(str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error during bake")
            self.failed.emit(str(e) or type(e).__name__)
            return
        self.finished.emit(output)


class BakeService(QObject):
    """
    Runs one background bake at a time.

    Use this from the editor dialog: start() with a session snapshot, then
    wait for bakeFinished or bakeFailed.
    """

    bakeFinished = Signal(object)   # output buffer
    bakeFailed = Signal(str)        # error message

    def __init__(self, parent: QObject = None):
        super().__init__(parent)
        self._worker: Optional[BakeWorker] = None
        self._thread: Optional[QThread] = None

    def start(self, request) -> bool:
        """
        Start baking a snapshot taken with EditorSession.snapshot().

        Returns:
            False if a bake is already running (the request is dropped)
        """
        if self.is_running:
            logger.debug("Bake already running, request ignored")
            return False
        self._cleanup()

        self._thread = QThread()
        self._worker = BakeWorker(request)
        self._worker.moveToThread(self._thread)

        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self._on_finished)
        self._worker.failed.connect(self._on_failed)

        self._thread.start()
        return True

    def _on_finished(self, output):
        self._cleanup()
        self.bakeFinished.emit(output)

    def _on_failed(self, message: str):
        self._cleanup()
        self.bakeFailed.emit(message)

    def _cleanup(self):
        """Clean up thread and worker."""
        if self._thread:
            self._thread.quit()
            if not self._thread.wait(5000):  # 5 second timeout
                logger.warning("Bake thread did not quit cleanly")
            self._thread = None
        self._worker = None

    def wait(self, timeout_ms: int = 30000) -> bool:
        """Block until the running bake thread exits. For tests and shutdown."""
        if self._thread is None:
            return True
        return self._thread.wait(timeout_ms)

    @property
    def is_running(self) -> bool:
        """Check if a bake is currently running."""
        return self._thread is not None and self._thread.isRunning()
