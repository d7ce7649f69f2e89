"""Audio object contract consumed by the playback controller."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Protocol


class AudioEvent(Enum):
    """Notifications emitted by an audio object."""

    ENDED = "ended"
    PAUSED = "paused"
    RESUMED = "resumed"
    PLAYED = "played"


AudioEventHandler = Callable[[AudioEvent], None]


class AudioObject(Protocol):
    """A single playable sound with a mutable source."""

    source_id: Optional[str]
    position: float

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def stop(self) -> None: ...

    def release(self) -> None: ...

    def subscribe(self, handler: AudioEventHandler) -> None: ...
