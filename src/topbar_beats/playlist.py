"""Track and playlist modeling for TopBarBeats."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class Track:
    """A playable item: resolved display name plus validated source id."""

    name: str
    id: str


class Playlist:
    """Ordered tracks with a cyclic current index."""

    def __init__(self, tracks: Iterable[Track] = (), index: int = 0):
        self.tracks = list(tracks)
        self.index = index
        self.clamp_index()

    def __len__(self) -> int:
        return len(self.tracks)

    def is_empty(self) -> bool:
        return not self.tracks

    def clamp_index(self) -> None:
        if self.is_empty():
            self.index = -1
            return
        self.index = max(0, min(self.index, len(self.tracks) - 1))

    def current(self) -> Optional[Track]:
        if self.is_empty():
            return None
        return self.tracks[self.index]

    def set_index(self, index: int) -> Optional[Track]:
        self.index = index
        self.clamp_index()
        return self.current()

    def replace(self, tracks: Iterable[Track]) -> None:
        """Swap in a new track list and rewind to the first track."""
        self.tracks = list(tracks)
        self.index = 0
        self.clamp_index()

    def clear(self) -> None:
        self.replace(())

    def next(self) -> Optional[Track]:
        if self.is_empty():
            return None
        self.index = (self.index + 1) % len(self.tracks)
        return self.current()

    def prev(self) -> Optional[Track]:
        if self.is_empty():
            return None
        self.index = (self.index - 1) % len(self.tracks)
        return self.current()
