"""Track title resolution for TopBarBeats."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Optional, Protocol

from topbar_beats.track_id import extract_asset_id

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".mp3", ".flac", ".wav", ".ogg", ".m4a", ".aac")


class MetadataLookup(Protocol):
    """Resolves a numeric asset id to a display name."""

    def lookup(self, asset_id: int) -> Optional[str]: ...


@dataclass(frozen=True)
class TrackMeta:
    artist: str | None
    title: str | None


_TRACK_META_CACHE: dict[Path, TrackMeta] = {}


def _extract_text(value: object | None) -> str | None:
    if value is None:
        return None
    if hasattr(value, "text"):
        try:
            value = value.text
        except Exception:
            value = value
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="replace")
    else:
        text = str(value)
    text = text.strip()
    return text or None


def _read_tag(tags: object | None, keys: tuple[str, ...]) -> str | None:
    if tags is None:
        return None
    getter = getattr(tags, "get", None)
    if getter is None:
        return None
    for key in keys:
        try:
            value = getter(key)
        except Exception:
            continue
        text = _extract_text(value)
        if text:
            return text
    return None


def read_track_meta(path: Path) -> TrackMeta:
    """Read artist/title tags, returning empty metadata on any failure."""
    try:
        from mutagen import File as MutagenFile
    except Exception:
        return TrackMeta(artist=None, title=None)
    try:
        audio = MutagenFile(path)
    except Exception:
        return TrackMeta(artist=None, title=None)
    if not audio:
        return TrackMeta(artist=None, title=None)
    tags = getattr(audio, "tags", None)
    artist = _read_tag(tags, ("artist", "ARTIST", "TPE1", "TPE2", "\xa9ART", "aART"))
    title = _read_tag(tags, ("title", "TITLE", "TIT2", "\xa9nam"))
    return TrackMeta(artist=artist, title=title)


def get_track_meta(path: Path) -> TrackMeta:
    cached = _TRACK_META_CACHE.get(path)
    if cached is not None:
        return cached
    meta = read_track_meta(path)
    _TRACK_META_CACHE[path] = meta
    return meta


def format_display_title(path: Path, meta: TrackMeta | None = None) -> str:
    if meta and meta.title:
        if meta.artist:
            return f"{meta.artist} – {meta.title}"
        return meta.title
    return path.stem


class AssetLibrary:
    """Directory of audio assets named ``<asset id>.<ext>``.

    Acts as the metadata lookup for the resolver and as the media locator for
    the audio backend.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def find_asset(self, asset_id: int) -> Optional[Path]:
        for ext in SUPPORTED_EXTENSIONS:
            candidate = self.root / f"{asset_id}{ext}"
            if candidate.is_file():
                return candidate
        return None

    def locate(self, track_id: str) -> Optional[Path]:
        asset_id = extract_asset_id(track_id)
        if asset_id is None:
            return None
        return self.find_asset(asset_id)

    def lookup(self, asset_id: int) -> Optional[str]:
        path = self.find_asset(asset_id)
        if path is None:
            return None
        return format_display_title(path, get_track_meta(path))


class NameResolver:
    """Resolve human readable titles for track ids."""

    def __init__(self, lookup: MetadataLookup) -> None:
        self._lookup = lookup

    async def resolve(self, track_id: str) -> Optional[str]:
        """Return the track title, or None when it cannot be resolved.

        The lookup is blocking (disk or service access), so it runs in a
        worker thread. There is no timeout.
        """
        asset_id = extract_asset_id(track_id)
        if asset_id is None:
            return None
        try:
            name = await asyncio.to_thread(self._lookup.lookup, asset_id)
        except Exception as exc:
            logger.warning("Failed to get info for %s: %s", track_id, exc)
            return None
        if not name:
            logger.warning("No info for %s", track_id)
            return None
        return name
