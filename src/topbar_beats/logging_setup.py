"""Logging setup for TopBarBeats."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path

LOG_LEVEL_ENV = "TOPBARBEATS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def _default_log_dir() -> Path:
    local_appdata = os.getenv("LOCALAPPDATA")
    if local_appdata:
        return Path(local_appdata) / "TopBarBeats" / "logs"
    return Path.home() / ".topbar_beats" / "logs"


def _resolve_level() -> int:
    level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _is_console_handler(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.StreamHandler) and not isinstance(
        handler, logging.FileHandler
    )


def init_logging(app_name: str = "topbar_beats") -> Path:
    """Initialize root logging (rotating file plus stderr) and return the log path.

    Calling it again does not stack duplicate handlers.
    """
    log_dir = _default_log_dir()
    log_path = log_dir / "app.log"
    level = _resolve_level()

    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=2_000_000,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        if not any(_is_console_handler(h) for h in root.handlers):
            console = logging.StreamHandler()
            console.setLevel(level)
            console.setFormatter(formatter)
            root.addHandler(console)
    except OSError:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    logging.getLogger(app_name).info("Logging initialized at %s", log_path)
    return log_path


def set_console_level(level: int) -> None:
    """Adjust console (stderr) handler level; file handlers keep theirs."""
    for handler in logging.getLogger().handlers:
        if _is_console_handler(handler):
            handler.setLevel(level)
