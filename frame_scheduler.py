import itertools
import logging
from collections import OrderedDict

from PyQt6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)


class QtFrameScheduler(QObject):
    """Runs callbacks on the next display frame using single-shot QTimers."""

    def __init__(self, interval_ms=16, parent=None):
        super().__init__(parent)
        self.interval_ms = interval_ms
        self._timers = {}  # handle -> QTimer
        self._ids = itertools.count(1)

    def schedule_frame(self, callback):
        handle = next(self._ids)
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._fire(handle, callback))
        self._timers[handle] = timer
        timer.start(self.interval_ms)
        return handle

    def cancel_frame(self, handle):
        timer = self._timers.pop(handle, None)
        if timer is None:
            return False
        timer.stop()
        timer.deleteLater()
        return True

    def _fire(self, handle, callback):
        timer = self._timers.pop(handle, None)
        if timer is None:
            # Cancelled after the timeout was already queued
            return
        timer.deleteLater()
        callback()

    @property
    def pending(self):
        return len(self._timers)


class ManualFrameScheduler:
    """
    Queues frame callbacks until the caller steps them explicitly.
    Used for headless runs and tests.
    """

    def __init__(self):
        self._queue = OrderedDict()  # handle -> callback
        self._ids = itertools.count(1)
        self.frames_run = 0

    def schedule_frame(self, callback):
        handle = next(self._ids)
        self._queue[handle] = callback
        return handle

    def cancel_frame(self, handle):
        return self._queue.pop(handle, None) is not None

    @property
    def pending(self):
        return len(self._queue)

    def run_next_frame(self):
        """Runs every callback queued before this frame started."""
        if not self._queue:
            return False
        self.frames_run += 1
        for handle in list(self._queue):
            # A callback earlier in this frame may have cancelled this one
            callback = self._queue.pop(handle, None)
            if callback is not None:
                callback()
        return True

    def run_until_idle(self, max_frames=10000):
        frames = 0
        while self._queue and frames < max_frames:
            self.run_next_frame()
            frames += 1
        if self._queue:
            logger.warning(f"Frame queue still busy after {max_frames} frames")
        return frames
