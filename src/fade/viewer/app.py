"""Application entry point for the slideshow.

Usage:
    fade [PATH] [options]
    python -m fade [PATH] [options]

    PATH can be:
        - A directory: show the images directly inside it
        - An image file: show its directory, starting on that file
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from fade.config.config import (
    ConfigManager,
    SlideshowSettings,
    get_directory_config_path,
)
from fade.core.dispatcher import InputDispatcher
from fade.core.errors import EmptyPlaylistError
from fade.core.reconciler import DirectoryReconciler
from fade.core.session import SlideshowSession
from fade.scanner.listing import MAX_SEED
from fade.tags.store import open_tag_store
from fade.viewer.image_loader import load_image
from fade.viewer.main_window import MainWindow
from fade.viewer.qt_scheduler import QtScheduler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _seed(value: str) -> int:
    try:
        seed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid seed: {value!r}")
    if not 0 <= seed <= MAX_SEED:
        raise argparse.ArgumentTypeError("seed must be an unsigned 64-bit integer")
    return seed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fading image slideshow with Favorite/Trash tagging",
        prog="fade",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory of images, or an image to start from (default: current directory)",
    )
    parser.add_argument("--duration", "-d", type=float, help="Seconds per image")
    parser.add_argument("--fade", "-f", type=float, help="Cross-fade duration in seconds")
    parser.add_argument(
        "--random", "-r",
        action="store_true",
        default=None,
        help="Shuffle the images",
    )
    parser.add_argument(
        "--seed", "-s",
        type=_seed,
        help="Shuffle seed (implies --random)",
    )
    parser.add_argument(
        "--no-loop",
        action="store_true",
        help="Stop after the last image instead of wrapping around",
    )
    parser.add_argument(
        "--actual-size",
        action="store_true",
        help="Use --width/--height instead of fitting to the screen",
    )
    parser.add_argument("--scan", type=float, help="Directory rescan interval in seconds")
    parser.add_argument("--width", type=int, help="Window width")
    parser.add_argument("--height", type=int, help="Window height")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--compare", action="store_true", help="Start in Compare mode")
    mode.add_argument("--triptych", action="store_true", help="Start in Triptych mode")

    parser.add_argument(
        "--config", "-c",
        help="Path to config YAML file",
        default=None,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def apply_cli_overrides(config: ConfigManager, args: argparse.Namespace) -> None:
    """Fold explicitly given command-line options into ``config``."""
    overrides = {
        "slideshow.duration": args.duration,
        "slideshow.fade_duration": args.fade,
        "slideshow.scan_interval": args.scan,
        "ui.window_width": args.width,
        "ui.window_height": args.height,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)

    if args.random:
        config.set("slideshow.random", True)
    if args.seed is not None:
        config.set("slideshow.random", True)
        config.set("slideshow.seed", args.seed)
    if args.no_loop:
        config.set("slideshow.loop", False)
    if args.actual_size:
        config.set("ui.fit_screen", False)
    if args.compare:
        config.set("slideshow.start_mode", "compare")
    elif args.triptych:
        config.set("slideshow.start_mode", "triptych")


def setup_logging(level: str = "INFO", verbose: bool = False, log_file: str | None = None) -> None:
    """Setup logging configuration."""
    if verbose:
        numeric = logging.DEBUG
    else:
        numeric = getattr(logging, str(level).upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def resolve_target(path: str | Path) -> tuple[Path, str | None]:
    """Split PATH into the directory to show and an optional start file."""
    target = Path(path).resolve()
    if target.is_file():
        return target.parent, str(target)
    return target, None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    target_path = Path(args.path)
    if not target_path.exists():
        print(f"Error: '{args.path}' does not exist.")
        return 1
    directory, start_file = resolve_target(target_path)
    if args.config and not Path(args.config).exists():
        print(f"Error: config file '{args.config}' does not exist.")
        return 1

    # Load config: defaults <- <directory>/.fade.yaml <- --config <- flags
    config = ConfigManager()
    config.load_layered(get_directory_config_path(directory), args.config)
    apply_cli_overrides(config, args)

    log_file = config.get("logging.log_file") if config.get("logging.log_to_file") else None
    setup_logging(config.get("logging.level", "INFO"), args.verbose, log_file)

    try:
        settings = SlideshowSettings.from_config(config, directory, start_file)
        reconciler = DirectoryReconciler(
            settings.directory,
            randomize=settings.randomize,
            supported_formats=settings.supported_formats,
            ignore_hidden=settings.ignore_hidden,
        )
        paths, seed = reconciler.listing(settings.seed)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if seed is not None:
        logger.info(f"Shuffle seed: {seed}")
    if not paths:
        logger.error(str(EmptyPlaylistError(str(directory))))
        return 1

    tag_store = open_tag_store(
        directory,
        backend=settings.tag_backend,
        database=settings.tag_database,
        favorite_marker=settings.favorite_marker,
        trash_marker=settings.trash_marker,
    )
    logger.info(f"Showing {len(paths)} images from {directory}")

    # Create/get QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)

    try:
        window = MainWindow(settings, config)
        session = SlideshowSession(
            settings,
            paths,
            tag_store,
            renderer=window,
            scheduler=QtScheduler(window),
            loader=load_image,
            preload_fetch=window.request_preload,
            reconciler=reconciler,
        )
        window.attach(InputDispatcher(session))
        window.present()
        session.start()
        return app.exec()
    finally:
        tag_store.close()


if __name__ == "__main__":
    sys.exit(main())
