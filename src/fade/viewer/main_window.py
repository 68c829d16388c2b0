"""Main window: draws what the session decides and forwards user input."""

from __future__ import annotations

import logging
from typing import Any

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QGuiApplication, QKeyEvent, QMouseEvent
from PyQt6.QtWidgets import QHBoxLayout, QMainWindow, QWidget

from fade.config.config import ConfigManager, SlideshowSettings
from fade.core.dispatcher import EventKind, InputDispatcher, InputEvent
from fade.core.modes import ModeKind
from fade.core.renderer import Direction, Icon, Role
from fade.viewer.image_canvas import ImageCanvas
from fade.viewer.image_loader import PreloadWorker
from fade.viewer.key_handler import KeyHandler
from fade.viewer.status_overlay import StatusOverlay

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Slideshow window.

    Holds three image canvases side by side; only the middle one is shown
    outside Triptych mode, and it also carries the Compare split view.
    """

    def __init__(self, settings: SlideshowSettings, config: ConfigManager | None = None):
        super().__init__()
        self._config = config or ConfigManager()
        self._settings = settings
        self._dispatcher: InputDispatcher | None = None
        self._closing = False
        self._triptych_sized = False

        self.setWindowTitle(f"fade - {settings.directory}")
        self.setStyleSheet("background-color: black;")
        self.resize(settings.window_width, settings.window_height)

        central = QWidget(self)
        layout = QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(int(self._config.get("ui.triptych_gap", 2)))

        saturation = float(self._config.get("ui.trash_saturation", 0.3))
        self._left = ImageCanvas(central, settings.fit_screen, saturation, settings.fade_duration)
        self._middle = ImageCanvas(central, settings.fit_screen, saturation, settings.fade_duration)
        self._right = ImageCanvas(central, settings.fit_screen, saturation, settings.fade_duration)
        for canvas in (self._left, self._middle, self._right):
            layout.addWidget(canvas)
        self._left.hide()
        self._right.hide()
        self.setCentralWidget(central)
        self._middle.divider_dragged.connect(self._on_divider_dragged)

        self._overlay = StatusOverlay(
            central, float(self._config.get("ui.arrow_flash_seconds", 0.5))
        )
        self._overlay.raise_()

        self._key_handler = KeyHandler(self)
        self._key_handler.event_triggered.connect(self._dispatch)

        # Results cross back to this thread through a queued connection.
        self._worker = PreloadWorker(self)
        self._worker.image_loaded.connect(self._on_preload_loaded)
        self._worker.start()

    def attach(self, dispatcher: InputDispatcher) -> None:
        self._dispatcher = dispatcher

    def present(self) -> None:
        if self._settings.fit_screen:
            screen = QGuiApplication.primaryScreen()
            if screen is not None:
                self.setGeometry(screen.availableGeometry())
            self.showMaximized()
        else:
            self.show()

    def request_preload(self, index: int, path: str) -> None:
        self._worker.request(index, path)

    # --- Renderer ---

    def set_mode(self, mode: ModeKind) -> None:
        triptych = mode == ModeKind.TRIPTYCH
        self._left.setVisible(triptych)
        self._right.setVisible(triptych)
        if mode != ModeKind.COMPARE:
            self._middle.clear_comparison()
        if triptych:
            self._overlay.clear_banner()
        self._resize_for_triptych(triptych)

    def show_image(self, role: Role, handle: Any, dimmed: bool, fade: bool = False) -> None:
        if role == Role.COMPARISON:
            self._middle.set_comparison(handle, dimmed)
            return
        canvas = self._canvas_for(role)
        if canvas is self._middle:
            self._overlay.clear_banner()
        canvas.set_image(handle, dimmed, fade)

    def set_dimmed(self, role: Role, dimmed: bool) -> None:
        if role == Role.COMPARISON:
            self._middle.set_comparison_dimmed(dimmed)
        else:
            self._canvas_for(role).set_dimmed(dimmed)

    def set_titles(self, titles: list[str]) -> None:
        self._overlay.set_titles(titles)

    def set_divider(self, position: float) -> None:
        self._middle.set_divider(position)

    def show_status(self, text: str) -> None:
        self._overlay.show_status(text)

    def show_icon(self, icon: Icon) -> None:
        self._overlay.show_icon(icon)

    def clear_status(self) -> None:
        self._overlay.clear_status()

    def flash_arrow(self, direction: Direction) -> None:
        self._overlay.flash(direction)

    def flash_dash(self, direction: Direction) -> None:
        self._overlay.flash(direction, dash=True)

    def show_all_trashed(self, text: str) -> None:
        self._middle.clear()
        self._overlay.show_banner(text)

    def close(self) -> bool:
        if self._closing:
            return True
        return super().close()

    # --- Internals ---

    def _canvas_for(self, role: Role) -> ImageCanvas:
        if role == Role.TRIPTYCH_LEFT:
            return self._left
        if role == Role.TRIPTYCH_RIGHT:
            return self._right
        return self._middle

    def _resize_for_triptych(self, triptych: bool) -> None:
        """Triple the window width for Triptych unless it fills the screen."""
        if self._settings.fit_screen or self.isMaximized() or self.isFullScreen():
            return
        if triptych and not self._triptych_sized:
            self.resize(self.width() * 3, self.height())
            self._triptych_sized = True
        elif not triptych and self._triptych_sized:
            self.resize(max(1, self.width() // 3), self.height())
            self._triptych_sized = False

    def _dispatch(self, event: InputEvent) -> None:
        if self._dispatcher is not None:
            self._dispatcher.dispatch(event)

    def _on_divider_dragged(self, position: float) -> None:
        self._dispatch(InputEvent(EventKind.DRAG_DIVIDER, position))

    def _on_preload_loaded(self, index: int, path: str, image: Any) -> None:
        if self._dispatcher is not None:
            self._dispatcher.session.on_preload_delivered(index, path, image)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if not self._key_handler.handle_key_event(event):
            super().keyPressEvent(event)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        # Accept so the matching release is delivered here.
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton or self.width() <= 0:
            return
        self._dispatch(InputEvent(EventKind.CLICK, event.position().x() / self.width()))

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if hasattr(self, "_overlay"):
            self._overlay.setGeometry(self.centralWidget().rect())

    def closeEvent(self, event) -> None:
        self._closing = True
        if self._dispatcher is not None and not self._dispatcher.session.finished:
            self._dispatcher.session.quit()
        self._worker.stop()
        super().closeEvent(event)
