"""Image decoding and the background preload thread."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageEnhance
from PyQt6.QtCore import QMutex, QMutexLocker, QObject, QThread, pyqtSignal
from PyQt6.QtGui import QImage

logger = logging.getLogger(__name__)

_ORIENTATION_TAG = 0x0112


def get_oriented_image(filepath: str | Path) -> Image.Image:
    """Open an image and apply EXIF orientation correction."""
    img = Image.open(filepath)
    exif_raw = img.getexif()
    if exif_raw:
        orientation = exif_raw.get(_ORIENTATION_TAG)
        if orientation:
            img = _apply_orientation(img, orientation)
    return img


def _apply_orientation(img: Image.Image, orientation: int) -> Image.Image:
    """Apply EXIF orientation transform to an image."""
    transforms = {
        2: (Image.Transpose.FLIP_LEFT_RIGHT,),
        3: (Image.Transpose.ROTATE_180,),
        4: (Image.Transpose.FLIP_TOP_BOTTOM,),
        5: (Image.Transpose.FLIP_LEFT_RIGHT, Image.Transpose.ROTATE_90),
        6: (Image.Transpose.ROTATE_270,),
        7: (Image.Transpose.FLIP_LEFT_RIGHT, Image.Transpose.ROTATE_270),
        8: (Image.Transpose.ROTATE_90,),
    }
    for op in transforms.get(orientation, ()):
        img = img.transpose(op)
    return img


def pil_to_qimage(pil_image: Image.Image) -> QImage:
    """Convert a PIL Image to a QImage that owns its pixel data."""
    if pil_image.mode == "RGBA":
        qimage = QImage(
            pil_image.tobytes("raw", "RGBA"),
            pil_image.width, pil_image.height,
            4 * pil_image.width,
            QImage.Format.Format_RGBA8888,
        )
    else:
        rgb = pil_image.convert("RGB")
        qimage = QImage(
            rgb.tobytes("raw", "RGB"),
            rgb.width, rgb.height,
            3 * rgb.width,
            QImage.Format.Format_RGB888,
        )
    # The constructor only wraps the byte buffer; copy so it outlives it.
    return qimage.copy()


def qimage_to_pil(qimage: QImage) -> Image.Image:
    qimage = qimage.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = qimage.width(), qimage.height()
    ptr = qimage.bits()
    ptr.setsize(qimage.sizeInBytes())
    return Image.frombuffer("RGBA", (width, height), bytes(ptr), "raw", "RGBA", 0, 1)


def desaturate(qimage: QImage, saturation: float) -> QImage:
    """Return a copy of ``qimage`` with colour saturation scaled by ``saturation``."""
    pil_img = ImageEnhance.Color(qimage_to_pil(qimage)).enhance(saturation)
    return pil_to_qimage(pil_img)


def load_image(filepath: str | Path) -> QImage | None:
    """Decode ``filepath``; None if it cannot be read as an image.

    Returns a QImage rather than a QPixmap so it may be called off the GUI
    thread.
    """
    try:
        with get_oriented_image(filepath) as pil_img:
            return pil_to_qimage(pil_img)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Could not load {filepath}: {e}")
        return None


class PreloadWorker(QThread):
    """Background thread that decodes the single pending preload request.

    A new request replaces any request not yet started. Results are emitted
    with the index and path they were requested for, so the receiver can
    discard stale ones.
    """

    image_loaded = pyqtSignal(int, str, object)  # index, path, QImage | None

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._request: tuple[int, str] | None = None
        self._mutex = QMutex()
        self._running = True

    def request(self, index: int, filepath: str) -> None:
        with QMutexLocker(self._mutex):
            self._request = (index, filepath)

    def run(self) -> None:
        while self._running:
            with QMutexLocker(self._mutex):
                request, self._request = self._request, None

            if request is None:
                self.msleep(50)
                continue

            index, filepath = request
            self.image_loaded.emit(index, filepath, load_image(filepath))

    def stop(self) -> None:
        self._running = False
        self.wait()
