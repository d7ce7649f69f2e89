"""Playback state machine for TopBarBeats."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import random
from typing import Iterable, Optional, Protocol

from topbar_beats.audio import AudioEvent, AudioObject
from topbar_beats.errors import MissingTrackError, UninitializedError
from topbar_beats.metadata import NameResolver
from topbar_beats.playlist import Playlist, Track
from topbar_beats.playlist_builder import build_tracks
from topbar_beats.track_id import validate_track_id

logger = logging.getLogger(__name__)

RESTART_THRESHOLD_SECONDS = 5.0


class PlaybackStatus(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the controller's playback fields."""

    current_index: int
    is_playing: bool
    current_source_id: Optional[str]
    position_seconds: float


class PlaybackListener(Protocol):
    def on_track_changed(self, track: Track) -> None: ...

    def on_playing_changed(self, is_playing: bool) -> None: ...


class PlaybackController:
    """Owns the playlist, the play/pause mirror and the transport operations.

    Every method is expected to run on one thread; audio notifications must
    be delivered serially through ``handle_audio_event``.
    """

    def __init__(
        self,
        resolver: NameResolver,
        *,
        audio: Optional[AudioObject] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.resolver = resolver
        self.audio = audio
        self.playlist = Playlist()
        self.is_playing = False
        self._started = False
        self._rng = rng
        self._listeners: list[PlaybackListener] = []

    # --- Observers ---
    def add_listener(self, listener: PlaybackListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: PlaybackListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_playing(self, is_playing: bool) -> None:
        self.is_playing = is_playing
        if is_playing:
            self._started = True
        for listener in list(self._listeners):
            listener.on_playing_changed(is_playing)

    def _announce_track(self, track: Track) -> None:
        for listener in list(self._listeners):
            listener.on_track_changed(track)

    # --- State ---
    @property
    def status(self) -> PlaybackStatus:
        if self.is_playing:
            return PlaybackStatus.PLAYING
        if self._started and self.audio is not None:
            return PlaybackStatus.PAUSED
        return PlaybackStatus.STOPPED

    def current_track(self) -> Optional[Track]:
        return self.playlist.current()

    def state(self) -> PlaybackState:
        audio = self.audio
        return PlaybackState(
            current_index=self.playlist.index,
            is_playing=self.is_playing,
            current_source_id=audio.source_id if audio is not None else None,
            position_seconds=audio.position if audio is not None else 0.0,
        )

    # --- Loading ---
    async def load_tracks(
        self,
        raw_ids: Iterable[str],
        *,
        autostart: bool = False,
        shuffle: bool = False,
    ) -> bool:
        """Replace the playlist with ``raw_ids``.

        MalformedIdError propagates and leaves the old playlist in place. A
        failed title lookup also leaves it in place and returns False. On
        success the index rewinds to the first track.
        """
        tracks = await build_tracks(
            list(raw_ids), self.resolver, shuffle=shuffle, rng=self._rng
        )
        if tracks is None:
            return False
        self.playlist.replace(tracks)
        logger.info("Tracks loaded count=%s shuffle=%s", len(tracks), shuffle)
        if autostart:
            self.toggle(True)
        return True

    # --- Transport ---
    def toggle(self, enable: bool, restart: bool = False) -> bool:
        """Play or pause; failures are logged and leave state unchanged."""
        try:
            self._toggle(enable, restart)
        except Exception as exc:
            logger.warning("TopBarBeats Error: %s", exc)
            return False
        self._set_playing(enable)
        return True

    def _toggle(self, enable: bool, restart: bool) -> None:
        audio = self.audio
        if audio is None:
            raise UninitializedError(
                "Unable to play track - did you initialize TopBarBeats with init()?"
            )
        if not enable:
            audio.pause()
            logger.info("Playback paused")
            return
        track = self.playlist.current()
        if track is None:
            raise MissingTrackError("No current track to play")
        validate_track_id(track.id)
        self._announce_track(track)
        if restart:
            audio.position = 0.0
        audio.source_id = track.id
        audio.resume()
        logger.info(
            "Playing index=%s id=%s restart=%s", self.playlist.index, track.id, restart
        )

    def _can_navigate(self) -> bool:
        if self.audio is None:
            logger.warning("Transport ignored: TopBarBeats is not initialized")
            return False
        if self.playlist.is_empty():
            logger.warning("Transport ignored: no tracks loaded")
            return False
        return True

    def rewind(self) -> bool:
        """Restart the track after five seconds of play, else go back one."""
        if not self._can_navigate():
            return False
        audio = self.audio
        if audio is None or audio.position <= RESTART_THRESHOLD_SECONDS:
            self.playlist.prev()
        return self.toggle(True, restart=True)

    def fast_forward(self) -> bool:
        if not self._can_navigate():
            return False
        self.playlist.next()
        return self.toggle(True, restart=True)

    # --- Audio notifications ---
    def on_track_ended(self) -> bool:
        if not self._can_navigate():
            return False
        self.playlist.next()
        return self.toggle(True)

    def on_audio_paused(self) -> None:
        self._set_playing(False)

    def on_audio_resumed(self) -> None:
        self._set_playing(True)

    def on_audio_played(self) -> None:
        self._set_playing(True)

    def handle_audio_event(self, event: AudioEvent) -> None:
        if event is AudioEvent.ENDED:
            self.on_track_ended()
        elif event is AudioEvent.PAUSED:
            self.on_audio_paused()
        elif event is AudioEvent.RESUMED:
            self.on_audio_resumed()
        elif event is AudioEvent.PLAYED:
            self.on_audio_played()

    def reset(self) -> None:
        """Forget the playlist and the play state."""
        self.playlist.clear()
        self.is_playing = False
        self._started = False
