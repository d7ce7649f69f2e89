"""VLC-backed audio object."""

from __future__ import annotations

import logging
from pathlib import Path
import queue
from typing import Any, Callable, Optional, cast

from topbar_beats.audio import AudioEvent, AudioEventHandler
from topbar_beats.errors import AudioError

logger = logging.getLogger(__name__)

vlc: Any | None = None
_VLC_IMPORT_ERROR: Optional[Exception] = None


def _load_vlc() -> None:
    global vlc
    global _VLC_IMPORT_ERROR
    if vlc is not None or _VLC_IMPORT_ERROR is not None:
        return
    try:
        import vlc as vlc_module  # type: ignore
    except Exception as exc:  # pragma: no cover - platform-dependent import
        vlc = None
        _VLC_IMPORT_ERROR = exc
    else:
        vlc = cast(Any, vlc_module)
        _VLC_IMPORT_ERROR = None


def require_vlc() -> None:
    """Import python-vlc or raise RuntimeError explaining what is missing."""
    _load_vlc()
    if vlc is None:
        raise RuntimeError(
            "VLC backend is unavailable. Install VLC and the python-vlc package."
        ) from _VLC_IMPORT_ERROR


class VlcAudio:
    """Audio object on top of python-vlc's MediaPlayer.

    The VLC instance is the audio group owning the player; ``release()`` frees
    both. Native VLC callbacks arrive on a VLC thread, so they are only
    queued; ``dispatch_pending()`` delivers them to subscribers on the
    caller's thread.
    """

    def __init__(self, locate: Callable[[str], Optional[Path]]) -> None:
        require_vlc()
        self._locate = locate
        self._instance: Any = cast(Any, vlc).Instance()
        self._player: Any = self._instance.media_player_new()
        self._source_id: Optional[str] = None
        self._loaded_id: Optional[str] = None
        self._pending_position: Optional[float] = None
        self._paused = False
        self._events: queue.Queue[AudioEvent] = queue.Queue()
        self._handlers: list[AudioEventHandler] = []
        self._attach_events()

    def _attach_events(self) -> None:
        if vlc is None:
            return
        vlc_module = cast(Any, vlc)
        try:
            event_manager = self._player.event_manager()
            event_manager.event_attach(
                vlc_module.EventType.MediaPlayerEndReached, self._handle_end_reached
            )
            event_manager.event_attach(
                vlc_module.EventType.MediaPlayerPaused, self._handle_paused
            )
            event_manager.event_attach(
                vlc_module.EventType.MediaPlayerPlaying, self._handle_playing
            )
        except Exception:
            logger.warning("VLC event attach failed; notifications disabled")

    def _handle_end_reached(self, event: object) -> None:
        del event
        self._events.put(AudioEvent.ENDED)

    def _handle_paused(self, event: object) -> None:
        del event
        self._paused = True
        self._events.put(AudioEvent.PAUSED)

    def _handle_playing(self, event: object) -> None:
        del event
        resumed = self._paused
        self._paused = False
        self._events.put(AudioEvent.RESUMED if resumed else AudioEvent.PLAYED)

    def subscribe(self, handler: AudioEventHandler) -> None:
        self._handlers.append(handler)

    def dispatch_pending(self) -> int:
        """Deliver queued notifications to subscribers, returning the count."""
        count = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return count
            count += 1
            for handler in list(self._handlers):
                handler(event)

    @property
    def source_id(self) -> Optional[str]:
        return self._source_id

    @source_id.setter
    def source_id(self, value: Optional[str]) -> None:
        self._source_id = value

    @property
    def position(self) -> float:
        """Playback position in seconds."""
        if self._player is None or self._loaded_id is None:
            return self._pending_position or 0.0
        try:
            time_ms = self._player.get_time()
        except Exception:
            return 0.0
        if time_ms is None or time_ms < 0:
            return 0.0
        return time_ms / 1000.0

    @position.setter
    def position(self, seconds: float) -> None:
        seconds = max(0.0, float(seconds))
        if self._player is None or self._loaded_id != self._source_id:
            self._pending_position = seconds
            return
        try:
            self._player.set_time(int(seconds * 1000))
        except Exception:
            self._pending_position = seconds

    def _load_source(self) -> None:
        source_id = self._source_id
        if not source_id:
            raise AudioError("No source id set")
        path = self._locate(source_id)
        if path is None:
            raise AudioError(f"No media found for {source_id}")
        media = self._instance.media_new(str(path))
        self._player.set_media(media)
        self._loaded_id = source_id
        self._paused = False

    def resume(self) -> None:
        """Start or resume playback of the current source."""
        if self._player is None:
            raise AudioError("Audio object has been released")
        if self._loaded_id != self._source_id:
            self._load_source()
        self._player.play()
        pending = self._pending_position
        self._pending_position = None
        if pending:
            try:
                self._player.set_time(int(pending * 1000))
            except Exception:
                logger.warning("Seek to %.2fs failed", pending)

    def pause(self) -> None:
        if self._player is None:
            raise AudioError("Audio object has been released")
        self._player.set_pause(1)

    def stop(self) -> None:
        if self._player is None:
            return
        try:
            self._player.stop()
        except Exception:
            logger.warning("VLC stop failed", exc_info=True)

    def set_volume(self, volume: int) -> None:
        """Set volume (0-100)."""
        if self._player is not None:
            self._player.audio_set_volume(volume)

    def release(self) -> None:
        """Free the player and its VLC instance."""
        player, instance = self._player, self._instance
        self._player = None
        self._instance = None
        self._loaded_id = None
        self._handlers.clear()
        for resource in (player, instance):
            if resource is None:
                continue
            try:
                resource.release()
            except Exception:
                logger.warning("VLC release failed", exc_info=True)
