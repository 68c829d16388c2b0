"""Scheduler backed by single-shot QTimers on the GUI thread."""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import QObject, QTimer

from fade.core.scheduler import Scheduler


class QtScheduler(Scheduler):
    def __init__(self, parent: QObject | None = None):
        super().__init__()
        self._parent = parent

    def _arm(self, delay: float, fire: Callable[[], None]) -> QTimer:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.timeout.connect(fire)
        timer.timeout.connect(timer.deleteLater)
        timer.start(int(delay * 1000))
        return timer

    def _disarm(self, handle: QTimer) -> None:
        handle.stop()
        handle.deleteLater()
