"""Configuration persistence for TopBarBeats."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_TOGGLE_KEY = "m"


@dataclass(frozen=True)
class AppConfig:
    """Immutable user configuration loaded from disk."""

    library_dir: Optional[str] = None
    volume: int = 100
    shuffle: bool = False
    autostart: bool = True
    toggle_key: str = DEFAULT_TOGGLE_KEY


def get_config_dir(app_name: str = "topbar-beats") -> Path:
    """Return the per-user config directory for the current platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            root = Path(base)
        else:
            root = Path.home() / "AppData" / "Roaming"
        return _ensure_dir(root / app_name)
    elif os.name == "posix":
        if _is_macos():
            return _ensure_dir(
                Path.home() / "Library" / "Application Support" / app_name
            )
        base = os.environ.get("XDG_CONFIG_HOME")
        root = Path(base) if base else Path.home() / ".config"
        return _ensure_dir(root / app_name)
    else:
        return _ensure_dir(Path.home() / ".config" / app_name)


def get_config_path() -> Path:
    """Return the full config file path."""
    return get_config_dir() / "config.json"


def load_config() -> AppConfig:
    """Load configuration from disk, falling back to defaults on error."""
    path = get_config_path()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.debug("No config at %s; using defaults", path)
        return AppConfig()
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to load config from %s", path)
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()
    return _config_from_mapping(raw)


def save_config(cfg: AppConfig) -> None:
    """Persist configuration to disk atomically."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(".tmp")
    data = {
        "library_dir": cfg.library_dir,
        "volume": cfg.volume,
        "shuffle": cfg.shuffle,
        "autostart": cfg.autostart,
        "toggle_key": cfg.toggle_key,
    }
    temp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(temp_path, path)


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _is_macos() -> bool:
    return os.uname().sysname == "Darwin" if hasattr(os, "uname") else False  # pyright: ignore[reportAttributeAccessIssue]


def _get_bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key, default)
    if isinstance(value, bool):
        return value
    return default


def _get_int(
    raw: dict[str, Any],
    key: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Fetch an integer value with optional clamping."""
    value = raw.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        value = default
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value


def _config_from_mapping(raw: dict[str, Any]) -> AppConfig:
    """Normalize raw JSON data into an AppConfig."""
    library_dir = raw.get("library_dir")
    if not isinstance(library_dir, str) or not library_dir:
        library_dir = None
    toggle_key = raw.get("toggle_key", DEFAULT_TOGGLE_KEY)
    if not isinstance(toggle_key, str) or not toggle_key.strip():
        toggle_key = DEFAULT_TOGGLE_KEY
    return AppConfig(
        library_dir=library_dir,
        volume=_get_int(raw, "volume", 100, min_value=0, max_value=100),
        shuffle=_get_bool(raw, "shuffle", False),
        autostart=_get_bool(raw, "autostart", True),
        toggle_key=toggle_key.strip(),
    )
