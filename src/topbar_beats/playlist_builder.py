"""Build validated, named track lists from raw ids."""

from __future__ import annotations

import logging
import random
from typing import Iterable, Optional

from topbar_beats.errors import NameResolutionError
from topbar_beats.metadata import NameResolver
from topbar_beats.play_order import shuffle_tracks
from topbar_beats.playlist import Track
from topbar_beats.track_id import normalize_track_id

logger = logging.getLogger(__name__)


async def build_tracks(
    raw_ids: Iterable[str],
    resolver: NameResolver,
    *,
    shuffle: bool = False,
    rng: Optional[random.Random] = None,
) -> Optional[list[Track]]:
    """Validate and name each id in order.

    Raises MalformedIdError for a bad id. Returns None, after logging a
    warning, as soon as one title fails to resolve; later ids are not looked
    at.
    """
    tracks: list[Track] = []
    for raw in raw_ids:
        track_id = normalize_track_id(raw)
        name = await resolver.resolve(track_id)
        if not name:
            logger.warning("%s", NameResolutionError(track_id))
            return None
        tracks.append(Track(name=name, id=track_id))
    if shuffle:
        tracks = shuffle_tracks(tracks, rng)
    return tracks
