"""Image panel widget: fit/actual-size drawing, cross-fades, trash dimming
and the Compare split view."""

from __future__ import annotations

from PyQt6.QtCore import QRectF, Qt, QVariantAnimation, QEasingCurve, pyqtSignal
from PyQt6.QtGui import QColor, QImage, QMouseEvent, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QWidget

from fade.viewer.image_loader import desaturate


class ImageCanvas(QWidget):
    """Draws one image, or a reference/comparison pair split by a divider.

    Mouse presses are only consumed while the divider is shown; otherwise
    they propagate to the window, which turns them into click events.
    """

    divider_dragged = pyqtSignal(float)  # fraction of the canvas width

    def __init__(
        self,
        parent: QWidget | None = None,
        fit_screen: bool = True,
        trash_saturation: float = 0.3,
        fade_duration: float = 1.5,
    ):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent)
        self._fit = fit_screen
        self._trash_saturation = trash_saturation

        self._source: QImage | None = None
        self._pixmap: QPixmap | None = None
        self._dimmed = False
        self._previous: QPixmap | None = None
        self._fade = 1.0

        self._comparison_source: QImage | None = None
        self._comparison: QPixmap | None = None
        self._comparison_dimmed = False
        self._divider: float | None = None
        self._dragging = False

        self._animation = QVariantAnimation(self)
        self._animation.setDuration(int(fade_duration * 1000))
        self._animation.setStartValue(0.0)
        self._animation.setEndValue(1.0)
        self._animation.setEasingCurve(QEasingCurve.Type.InOutCubic)
        self._animation.valueChanged.connect(self._on_fade_step)
        self._animation.finished.connect(self._on_fade_finished)

    @property
    def has_image(self) -> bool:
        return self._pixmap is not None

    @property
    def is_fading(self) -> bool:
        return self._previous is not None

    @property
    def divider(self) -> float | None:
        return self._divider

    def set_image(self, image: QImage | None, dimmed: bool = False, fade: bool = False) -> None:
        previous = self._pixmap
        self._source = image
        self._dimmed = dimmed
        self._pixmap = self._render(image, dimmed)

        self._animation.stop()
        if fade and previous is not None and self._animation.duration() > 0:
            self._previous = previous
            self._fade = 0.0
            self._animation.start()
        else:
            self._previous = None
            self._fade = 1.0
        self.update()

    def set_dimmed(self, dimmed: bool) -> None:
        if dimmed == self._dimmed:
            return
        self._dimmed = dimmed
        self._pixmap = self._render(self._source, dimmed)
        self.update()

    def clear(self) -> None:
        self._animation.stop()
        self._source = None
        self._pixmap = None
        self._previous = None
        self.update()

    # --- Compare ---

    def set_comparison(self, image: QImage | None, dimmed: bool = False) -> None:
        self._comparison_source = image
        self._comparison_dimmed = dimmed
        self._comparison = self._render(image, dimmed)
        if self._divider is None:
            self._divider = 1.0
        self.update()

    def set_comparison_dimmed(self, dimmed: bool) -> None:
        if dimmed == self._comparison_dimmed:
            return
        self._comparison_dimmed = dimmed
        self._comparison = self._render(self._comparison_source, dimmed)
        self.update()

    def set_divider(self, position: float) -> None:
        self._divider = max(0.0, min(1.0, position))
        self.update()

    def clear_comparison(self) -> None:
        self._comparison_source = None
        self._comparison = None
        self._divider = None
        self._dragging = False
        self.update()

    # --- Paint ---

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), Qt.GlobalColor.black)

        if self._divider is not None:
            self._paint_split(painter)
        elif self._previous is not None:
            painter.setOpacity(1.0 - self._fade)
            self._draw(painter, self._previous)
            painter.setOpacity(self._fade)
            self._draw(painter, self._pixmap)
        else:
            self._draw(painter, self._pixmap)
        painter.end()

    def _paint_split(self, painter: QPainter) -> None:
        split = int(self._divider * self.width())

        painter.save()
        painter.setClipRect(0, 0, split, self.height())
        self._draw(painter, self._pixmap)
        painter.restore()

        painter.save()
        painter.setClipRect(split, 0, self.width() - split, self.height())
        self._draw(painter, self._comparison)
        painter.restore()

        painter.setPen(QPen(QColor(255, 255, 255, 200), 2))
        painter.drawLine(split, 0, split, self.height())

    def _draw(self, painter: QPainter, pm: QPixmap | None) -> None:
        if pm is None or pm.isNull():
            return
        painter.drawPixmap(self._target_rect(pm), pm, QRectF(pm.rect()))

    def _target_rect(self, pm: QPixmap) -> QRectF:
        """Centered rectangle, scaled to fit when fitting is on."""
        scale = 1.0
        if self._fit and pm.width() > 0 and pm.height() > 0:
            scale = min(self.width() / pm.width(), self.height() / pm.height())
        w = pm.width() * scale
        h = pm.height() * scale
        return QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)

    def _render(self, image: QImage | None, dimmed: bool) -> QPixmap | None:
        if image is None or image.isNull():
            return None
        if dimmed:
            image = desaturate(image, self._trash_saturation)
        return QPixmap.fromImage(image)

    def _on_fade_step(self, value) -> None:
        self._fade = float(value)
        self.update()

    def _on_fade_finished(self) -> None:
        self._previous = None
        self._fade = 1.0
        self.update()

    # --- Mouse events ---

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if self._divider is None or event.button() != Qt.MouseButton.LeftButton:
            event.ignore()
            return
        self._dragging = True
        self._emit_divider(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if not self._dragging:
            event.ignore()
            return
        self._emit_divider(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if not self._dragging:
            event.ignore()
            return
        self._dragging = False

    def _emit_divider(self, event: QMouseEvent) -> None:
        if self.width() > 0:
            self.divider_dragged.emit(event.position().x() / self.width())
