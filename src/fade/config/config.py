"""Configuration manager for the slideshow."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG: dict[str, Any] = {
    "slideshow": {
        "duration": 10.0,
        "fade_duration": 1.5,
        "loop": True,
        "random": False,
        "seed": None,
        "scan_interval": 30.0,
        "start_mode": "normal",
    },
    "tagging": {
        "backend": "auto",
        "favorite_marker": "Green",
        "trash_marker": "Red",
        "database": ".fade_tags.db",
        "advance_delay": 0.5,
        "compare_advance_delay": 0.05,
    },
    "file_scanning": {
        "supported_formats": ["jpg", "jpeg", "png"],
        "ignore_hidden_files": True,
    },
    "ui": {
        "fit_screen": True,
        "window_width": 800,
        "window_height": 1200,
        "status_icon_seconds": 0.8,
        "status_message_seconds": 1.5,
        "trash_saturation": 0.3,
        "triptych_gap": 2,
        "arrow_flash_seconds": 0.5,
    },
    "logging": {
        "level": "INFO",
        "log_to_file": False,
        "log_file": "fade.log",
    },
}

START_MODES = ("normal", "compare", "triptych")


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def get_directory_config_path(directory: str | Path) -> Path:
    """Return the hidden per-directory config file, <directory>/.fade.yaml."""
    return Path(directory) / ".fade.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class ConfigManager:
    """Layered YAML configuration on top of built-in defaults."""

    def __init__(self):
        self._config: dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

    @property
    def config(self) -> dict[str, Any]:
        return self._config

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a config value using dotted notation (e.g. 'slideshow.duration')."""
        keys = dotted_key.split(".")
        value = self._config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, dotted_key: str, value: Any) -> None:
        """Set a config value using dotted notation."""
        keys = dotted_key.split(".")
        target = self._config
        for key in keys[:-1]:
            if key not in target or not isinstance(target[key], dict):
                target[key] = {}
            target = target[key]
        target[keys[-1]] = value

    def load_layered(
        self,
        directory_config_path: str | Path | None = None,
        cli_config_path: str | Path | None = None,
    ) -> None:
        """Load config with layered priority: DEFAULT <- directory config <- cli config.

        Missing files are skipped.
        """
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        for layer in (directory_config_path, cli_config_path):
            if layer is None:
                continue
            layer = Path(layer)
            if layer.exists():
                self._config = _deep_merge(self._config, _read_yaml(layer))


@dataclass
class SlideshowSettings:
    """Typed view of the configuration consumed by the slideshow core."""

    directory: Path
    duration: float = 10.0
    fade_duration: float = 1.5
    loop: bool = True
    randomize: bool = False
    seed: int | None = None
    scan_interval: float = 30.0
    start_mode: str = "normal"
    start_file: str | None = None
    fit_screen: bool = True
    window_width: int = 800
    window_height: int = 1200
    tag_backend: str = "auto"
    favorite_marker: str = "Green"
    trash_marker: str = "Red"
    tag_database: str = ".fade_tags.db"
    tag_advance_delay: float = 0.5
    compare_advance_delay: float = 0.05
    status_icon_seconds: float = 0.8
    status_message_seconds: float = 1.5
    supported_formats: tuple[str, ...] = ("jpg", "jpeg", "png")
    ignore_hidden: bool = True

    def __post_init__(self):
        if self.start_mode not in START_MODES:
            raise ValueError(f"Unknown start mode: {self.start_mode}")
        if self.duration <= 0:
            raise ValueError("Display duration must be positive")
        if self.scan_interval <= 0:
            raise ValueError("Scan interval must be positive")

    @classmethod
    def from_config(
        cls,
        config: ConfigManager,
        directory: str | Path,
        start_file: str | None = None,
    ) -> SlideshowSettings:
        d = DEFAULT_CONFIG
        return cls(
            directory=Path(directory),
            duration=float(config.get("slideshow.duration", d["slideshow"]["duration"])),
            fade_duration=float(config.get("slideshow.fade_duration", d["slideshow"]["fade_duration"])),
            loop=bool(config.get("slideshow.loop", True)),
            randomize=bool(config.get("slideshow.random", False)),
            seed=config.get("slideshow.seed"),
            scan_interval=float(config.get("slideshow.scan_interval", d["slideshow"]["scan_interval"])),
            start_mode=config.get("slideshow.start_mode", "normal"),
            start_file=start_file,
            fit_screen=bool(config.get("ui.fit_screen", True)),
            window_width=int(config.get("ui.window_width", d["ui"]["window_width"])),
            window_height=int(config.get("ui.window_height", d["ui"]["window_height"])),
            tag_backend=config.get("tagging.backend", "auto"),
            favorite_marker=config.get("tagging.favorite_marker", "Green"),
            trash_marker=config.get("tagging.trash_marker", "Red"),
            tag_database=config.get("tagging.database", ".fade_tags.db"),
            tag_advance_delay=float(config.get("tagging.advance_delay", 0.5)),
            compare_advance_delay=float(config.get("tagging.compare_advance_delay", 0.05)),
            status_icon_seconds=float(config.get("ui.status_icon_seconds", 0.8)),
            status_message_seconds=float(config.get("ui.status_message_seconds", 1.5)),
            supported_formats=tuple(config.get("file_scanning.supported_formats", ["jpg", "jpeg", "png"])),
            ignore_hidden=bool(config.get("file_scanning.ignore_hidden_files", True)),
        )
