"""Track id parsing and validation."""

from __future__ import annotations

import re
from typing import Optional

from topbar_beats.errors import MalformedIdError

TRACK_ID_PREFIX = "rbxassetid://"

_TRACK_ID_RE = re.compile(r"rbxassetid://[0-9]+", re.ASCII)
_DIGITS_RE = re.compile(r"[0-9]+", re.ASCII)


def validate_track_id(track_id: str) -> str:
    """Return ``track_id`` unchanged, or raise MalformedIdError."""
    if not isinstance(track_id, str) or not _TRACK_ID_RE.fullmatch(track_id):
        raise MalformedIdError(str(track_id))
    return track_id


def normalize_track_id(raw: str) -> str:
    """Prefix bare ids and validate the result."""
    if not isinstance(raw, str):
        raise MalformedIdError(str(raw))
    track_id = raw if raw.startswith(TRACK_ID_PREFIX) else TRACK_ID_PREFIX + raw
    return validate_track_id(track_id)


def extract_asset_id(track_id: str) -> Optional[int]:
    """Return the first run of digits in ``track_id`` as an int."""
    match = _DIGITS_RE.search(track_id)
    if match is None:
        return None
    return int(match.group())
