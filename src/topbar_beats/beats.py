"""Control surface binding: wires icons and audio to the playback controller."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Iterable, Mapping, Optional

from topbar_beats.audio import AudioObject
from topbar_beats.controller import PlaybackController
from topbar_beats.errors import FrameworkError, UninitializedError
from topbar_beats.metadata import NameResolver
from topbar_beats.playlist import Track
from topbar_beats.ui import images as img
from topbar_beats.ui.icon import Icon, IconFramework

logger = logging.getLogger(__name__)

TITLE_NAME = "Made with 💖 by Blankscarface23"
TITLE_LABEL = "TopBarBeats! 😎"
APP_NAME = "TopBarBeats"


def play_pause_face(is_playing: bool) -> tuple[str, str]:
    """Return the (image, caption) pair shown on the play/pause icon."""
    if is_playing:
        return img.PAUSE, "Pause"
    return img.PLAY, "Play"


class TopBarBeats:
    """Music player bound to a bar of icons.

    ``init()`` allocates the audio object and the icon tree, ``destroy()``
    releases them. One instance is one playback session.
    """

    def __init__(
        self,
        resolver: NameResolver,
        audio_factory: Callable[[], AudioObject],
        *,
        toggle_key: str = "m",
        rng: Optional[random.Random] = None,
    ) -> None:
        self.controller = PlaybackController(resolver, rng=rng)
        self._audio_factory = audio_factory
        self._toggle_key = toggle_key
        self.framework: Optional[IconFramework] = None
        self.root_icon: Optional[Icon] = None
        self.title_icon: Optional[Icon] = None
        self.play_pause_icon: Optional[Icon] = None
        self.controller.add_listener(self)

    @property
    def is_playing(self) -> bool:
        return self.controller.is_playing

    @property
    def toggle_key(self) -> str:
        return self._toggle_key

    @property
    def audio(self) -> Optional[AudioObject]:
        return self.controller.audio

    # --- Lifecycle ---
    def init(self, framework: Any) -> None:
        if framework is None or not callable(getattr(framework, "new", None)):
            raise FrameworkError(
                "TopBarBeats could not be initialized; pass an icon framework "
                "exposing new()."
            )
        if self.root_icon is not None:
            logger.warning("TopBarBeats is already initialized")
            return
        self.framework = framework
        if self.controller.audio is None:
            audio = self._audio_factory()
            audio.subscribe(self.controller.handle_audio_event)
            self.controller.audio = audio
        self.setup_controls()
        logger.info("TopBarBeats initialized")

    def destroy(self) -> None:
        """Stop playback and release audio, icons and framework references."""
        audio = self.controller.audio
        self.controller.audio = None
        if audio is not None:
            self._shutdown_audio(audio)
        self.controller.reset()
        for icon in (self.root_icon, self.title_icon, self.play_pause_icon):
            if icon is not None:
                icon.destroy()
        self.root_icon = None
        self.title_icon = None
        self.play_pause_icon = None
        self.framework = None
        logger.info("TopBarBeats destroyed")

    def _shutdown_audio(self, audio: AudioObject) -> None:
        for step in (audio.stop, audio.release):
            try:
                step()
            except Exception:
                logger.warning(
                    "Audio %s failed during destroy", step.__name__, exc_info=True
                )

    def get_icon(self) -> Optional[Icon]:
        return self.root_icon

    # --- Controls ---
    def setup_controls(self) -> None:
        try:
            self._setup_controls()
        except Exception as exc:
            logger.warning("TopBarBeats Error: %s", exc)

    def _setup_controls(self) -> None:
        framework = self.framework
        if framework is None:
            raise UninitializedError(
                "Unable to setup controls - did you initialize TopBarBeats with init()?"
            )
        title = (
            framework.new()
            .set_name(TITLE_NAME)
            .set_label(TITLE_LABEL)
            .lock()
            .one_click()
        )
        rewind = (
            framework.new()
            .set_image(img.REWIND)
            .set_caption("Rewind")
            .bind_event("selected", lambda _icon: self.rewind())
            .one_click()
        )
        play_pause = (
            framework.new()
            .set_image(img.PLAY)
            .set_caption("Play")
            .bind_event("selected", lambda _icon: self._handle_play_pause())
            .one_click()
        )
        fast_forward = (
            framework.new()
            .set_image(img.FASTFORWARD)
            .set_caption("Fast Forward")
            .bind_event("selected", lambda _icon: self.fast_forward())
            .one_click()
        )
        self.title_icon = title
        self.play_pause_icon = play_pause
        self.root_icon = (
            framework.new()
            .set_image(img.APP_ICON)
            .set_name(APP_NAME)
            .set_caption(APP_NAME)
            .bind_toggle_key(self._toggle_key)
            .set_menu([title, rewind, play_pause, fast_forward])
        )
        self._render_play_pause()

    def _handle_play_pause(self) -> None:
        self.toggle_music(not self.controller.is_playing)

    def _render_play_pause(self) -> None:
        icon = self.play_pause_icon
        if icon is None:
            return
        image, caption = play_pause_face(self.controller.is_playing)
        icon.set_image(image).set_caption(caption)

    # --- PlaybackListener ---
    def on_track_changed(self, track: Track) -> None:
        if self.title_icon is not None:
            self.title_icon.set_label(track.name)

    def on_playing_changed(self, is_playing: bool) -> None:
        del is_playing
        self._render_play_pause()

    # --- Public API ---
    async def load_tracks(
        self,
        playlist: Iterable[str],
        config: Optional[Mapping[str, bool]] = None,
    ) -> bool:
        """Load track ids; ``config`` may set ``autostart`` and ``shuffle``.

        Bare numeric ids are prefixed with ``rbxassetid://``. Raises
        MalformedIdError for a malformed entry.
        """
        options = dict(config or {})
        return await self.controller.load_tracks(
            playlist,
            autostart=bool(options.get("autostart", False)),
            shuffle=bool(options.get("shuffle", False)),
        )

    def toggle_music(self, enable: bool, restart: bool = False) -> bool:
        result = self.controller.toggle(enable, restart)
        self._render_play_pause()
        return result

    def rewind(self) -> bool:
        result = self.controller.rewind()
        self._render_play_pause()
        return result

    def fast_forward(self) -> bool:
        result = self.controller.fast_forward()
        self._render_play_pause()
        return result
