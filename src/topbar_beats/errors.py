"""Error types raised by TopBarBeats."""

from __future__ import annotations


class TopBarBeatsError(Exception):
    """Base class for TopBarBeats failures."""


class MalformedIdError(TopBarBeatsError, ValueError):
    """Raised when a track id does not match ``rbxassetid://<digits>``."""

    def __init__(self, track_id: str) -> None:
        super().__init__(
            f"Malformed track id: {track_id!r}. "
            "Must be in format 'rbxassetid://<digits>'"
        )
        self.track_id = track_id


class NameResolutionError(TopBarBeatsError):
    """A track title could not be resolved.

    Loads report this by logging it and returning False rather than raising.
    """

    def __init__(self, track_id: str) -> None:
        super().__init__(f"Issue loading track: {track_id}")
        self.track_id = track_id


class UninitializedError(TopBarBeatsError):
    """Raised when an operation needs ``init()`` to have run first."""


class MissingTrackError(TopBarBeatsError):
    """Raised when playback is requested without a current track."""


class FrameworkError(TopBarBeatsError, TypeError):
    """Raised when ``init()`` receives an unusable icon framework."""


class AudioError(TopBarBeatsError):
    """Raised by audio backends when a source cannot be played."""
