"""Transparent overlay for titles, transient notices and flashes."""

from __future__ import annotations

from PyQt6.QtCore import QRectF, Qt, QTimer
from PyQt6.QtGui import QColor, QFont, QFontMetrics, QPainter
from PyQt6.QtWidgets import QWidget

from fade.core.renderer import Direction, Icon

ARROWS = {
    Direction.LEFT: "←",
    Direction.RIGHT: "→",
    Direction.UP: "↑",
    Direction.DOWN: "↓",
}
DASH = "–"
ICONS = {Icon.PAUSE: "❚❚", Icon.PLAY: "▶"}

GREEN = QColor(60, 200, 90)
RED = QColor(220, 60, 60)
WHITE = QColor(255, 255, 255)


def flash_color(direction: Direction, dash: bool) -> QColor:
    """Up reads as Favorite-ward (green), down as Trash-ward (red).

    A dash is drawn in the opposite colour of its arrow.
    """
    if direction == Direction.UP:
        return RED if dash else GREEN
    if direction == Direction.DOWN:
        return GREEN if dash else RED
    return WHITE


class StatusOverlay(QWidget):
    """Draws per-panel titles, a centred notice or icon, and edge flashes."""

    def __init__(self, parent: QWidget | None = None, arrow_flash_seconds: float = 0.5):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self._titles: list[str] = []
        self._status = ""
        self._icon: Icon | None = None
        self._banner = ""
        self._flash: tuple[Direction, bool] | None = None

        self._flash_timer = QTimer(self)
        self._flash_timer.setSingleShot(True)
        self._flash_timer.setInterval(int(arrow_flash_seconds * 1000))
        self._flash_timer.timeout.connect(self._clear_flash)

    def set_titles(self, titles: list[str]) -> None:
        self._titles = list(titles)
        self.update()

    def show_status(self, text: str) -> None:
        self._status = text
        self._icon = None
        self.update()

    def show_icon(self, icon: Icon) -> None:
        self._icon = icon
        self._status = ""
        self.update()

    def clear_status(self) -> None:
        self._status = ""
        self._icon = None
        self.update()

    def show_banner(self, text: str) -> None:
        self._banner = text
        self.update()

    def clear_banner(self) -> None:
        if self._banner:
            self._banner = ""
            self.update()

    def flash(self, direction: Direction, dash: bool = False) -> None:
        self._flash = (direction, dash)
        self._flash_timer.start()
        self.update()

    def _clear_flash(self) -> None:
        self._flash = None
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        self._paint_titles(painter)
        if self._banner:
            self._paint_centered(painter, self._banner, 28)
        if self._icon is not None:
            self._paint_centered(painter, ICONS[self._icon], 48)
        elif self._status:
            self._paint_centered(painter, self._status, 22)
        if self._flash is not None:
            self._paint_flash(painter, *self._flash)
        painter.end()

    def _paint_titles(self, painter: QPainter) -> None:
        if not self._titles:
            return
        font = QFont()
        font.setPointSize(12)
        painter.setFont(font)
        fm = QFontMetrics(font)
        padding = 6
        column = self.width() / len(self._titles)
        for i, title in enumerate(self._titles):
            if not title:
                continue
            text_w = fm.horizontalAdvance(title) + padding * 2
            text_h = fm.height() + padding * 2
            x = i * column + (column - text_w) / 2
            y = 10

            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QColor(0, 0, 0, 160))
            painter.drawRoundedRect(QRectF(x, y, text_w, text_h), 4, 4)
            painter.setPen(WHITE)
            painter.drawText(int(x + padding), int(y + padding + fm.ascent()), title)

    def _paint_centered(self, painter: QPainter, text: str, point_size: int) -> None:
        font = QFont()
        font.setPointSize(point_size)
        painter.setFont(font)
        fm = QFontMetrics(font)
        padding = 12
        text_w = fm.horizontalAdvance(text) + padding * 2
        text_h = fm.height() + padding * 2
        rect = QRectF((self.width() - text_w) / 2, (self.height() - text_h) / 2, text_w, text_h)

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(0, 0, 0, 180))
        painter.drawRoundedRect(rect, 8, 8)
        painter.setPen(WHITE)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)

    def _paint_flash(self, painter: QPainter, direction: Direction, dash: bool) -> None:
        font = QFont()
        font.setPointSize(64)
        font.setBold(True)
        painter.setFont(font)
        painter.setPen(flash_color(direction, dash))
        glyph = DASH if dash else ARROWS[direction]

        margin = 40
        w, h = self.width(), self.height()
        box = QRectF(0, 0, 120, 120)
        if direction == Direction.LEFT:
            box.moveCenter(QRectF(margin, 0, 120, h).center())
        elif direction == Direction.RIGHT:
            box.moveCenter(QRectF(w - margin - 120, 0, 120, h).center())
        elif direction == Direction.UP:
            box.moveCenter(QRectF(0, margin, w, 120).center())
        else:
            box.moveCenter(QRectF(0, h - margin - 120, w, 120).center())
        painter.drawText(box, Qt.AlignmentFlag.AlignCenter, glyph)
