"""Directory listing and seeded shuffling of image paths."""

from __future__ import annotations

import logging
import os
import random
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("jpg", "jpeg", "png")
MAX_SEED = 2**64 - 1


def list_images(
    directory: str | Path,
    supported_formats: Iterable[str] = SUPPORTED_FORMATS,
    ignore_hidden: bool = True,
) -> list[str]:
    """List the images directly inside ``directory``, sorted by path.

    Extensions match case-insensitively. Hidden entries are skipped. A
    missing or unreadable directory yields an empty list.
    """
    directory = Path(directory)
    supported = {f".{ext.lower().lstrip('.')}" for ext in supported_formats}
    try:
        names = os.listdir(directory)
    except OSError as e:
        logger.warning(f"Could not list {directory}: {e}")
        return []

    files: list[str] = []
    for fn in names:
        if ignore_hidden and fn.startswith("."):
            continue
        fp = directory / fn
        if fp.suffix.lower() in supported and fp.is_file():
            files.append(str(fp))
    return sorted(files)


def draw_seed() -> int:
    """Draw a fresh unsigned 64-bit shuffle seed."""
    return random.getrandbits(64)


def shuffle_paths(paths: Iterable[str], seed: int) -> list[str]:
    """Return ``paths`` in a permutation fully determined by ``seed``."""
    if not 0 <= seed <= MAX_SEED:
        raise ValueError(f"Seed out of range: {seed}")
    shuffled = list(paths)
    random.Random(seed).shuffle(shuffled)
    return shuffled
