"""Textual host application for TopBarBeats."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Sequence

try:
    from textual import events
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.css.query import NoMatches
    from textual.widgets import Header, Static
    from rich.text import Text
except Exception as exc:  # pragma: no cover - depends on environment
    raise RuntimeError(
        "Textual is required for the TUI. Install the 'textual' dependency."
    ) from exc

from topbar_beats.beats import TopBarBeats
from topbar_beats.config import AppConfig
from topbar_beats.errors import MalformedIdError
from topbar_beats.logging_setup import set_console_level
from topbar_beats.ui.status_controller import StatusController, StatusLogHandler
from topbar_beats.ui.topbar import TopBar

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "topbar_beats"


class StatusBar(Static):
    """Status bar widget."""

    def __init__(self, controller: StatusController, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._controller = controller

    def render(self) -> Text:
        return self._controller.render_line(max(1, self.size.width))


class TopBarBeatsApp(App):
    """Hosts the top bar and pumps audio notifications into the controller."""

    TITLE = "TopBarBeats"
    CSS = """
    #topbar { dock: top; height: 1; }
    #now_playing { height: 1; padding: 0 1; }
    #status_bar { dock: bottom; height: 1; }
    """

    BINDINGS = [
        Binding("space", "toggle_playback", "Play/Pause"),
        Binding("p", "rewind", "Rewind"),
        Binding("n", "fast_forward", "Next"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(
        self,
        *,
        beats: TopBarBeats,
        track_ids: Sequence[str] = (),
        config: Optional[AppConfig] = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.beats = beats
        self.track_ids = list(track_ids)
        self.config = config or AppConfig()
        self._status_controller = StatusController(now, toggle_key=beats.toggle_key)
        self._log_handler = StatusLogHandler(self._status_controller)
        self._topbar: Optional[TopBar] = None

    def compose(self) -> ComposeResult:
        yield TopBar(id="topbar")
        yield Header(show_clock=False)
        yield Static("Nothing loaded", id="now_playing")
        yield StatusBar(self._status_controller, id="status_bar")

    async def on_mount(self) -> None:
        logging.getLogger(PACKAGE_LOGGER).addHandler(self._log_handler)
        self._topbar = self.query_one(TopBar)
        self.beats.init(self._topbar)
        setter = getattr(self.beats.audio, "set_volume", None)
        if callable(setter):
            setter(self.config.volume)
        self.set_interval(0.1, self._on_tick)
        if self.track_ids:
            self.run_worker(self.load_initial_tracks(), exclusive=True)
        logger.info("TUI mounted")

    def on_unmount(self) -> None:
        if self.beats.framework is not None:
            self.beats.destroy()
        logging.getLogger(PACKAGE_LOGGER).removeHandler(self._log_handler)
        logger.info("TUI unmounted")

    async def load_initial_tracks(self) -> bool:
        self._status_controller.show_message("Loading tracks...", timeout=0)
        try:
            loaded = await self.beats.load_tracks(
                self.track_ids,
                {"autostart": self.config.autostart, "shuffle": self.config.shuffle},
            )
        except MalformedIdError as exc:
            logger.warning("%s", exc)
            return False
        if loaded:
            count = len(self.beats.controller.playlist)
            self._status_controller.show_message(f"Loaded {count} tracks")
        self._refresh_now_playing()
        return loaded

    def _on_tick(self) -> None:
        dispatch = getattr(self.beats.audio, "dispatch_pending", None)
        if callable(dispatch):
            dispatch()
        self._refresh_now_playing()

    def now_playing_text(self) -> str:
        controller = self.beats.controller
        track = controller.current_track()
        if track is None:
            return "Nothing loaded"
        return (
            f"[{controller.status.value.upper()}] "
            f"{controller.playlist.index + 1}/{len(controller.playlist)} "
            f"{track.name}"
        )

    def _refresh_now_playing(self) -> None:
        text = Text(self.now_playing_text())
        try:
            self.query_one("#now_playing", Static).update(text)
            self.query_one(StatusBar).refresh()
        except NoMatches:
            return

    def on_key(self, event: events.Key) -> None:
        if self._topbar is not None and self._topbar.handle_key(event.key):
            event.stop()

    def action_toggle_playback(self) -> None:
        self.beats.toggle_music(not self.beats.is_playing)
        self._refresh_now_playing()

    def action_rewind(self) -> None:
        self.beats.rewind()
        self._refresh_now_playing()

    def action_fast_forward(self) -> None:
        self.beats.fast_forward()
        self._refresh_now_playing()

    def action_quit_app(self) -> None:
        logger.info("TUI exit requested")
        self.beats.destroy()
        self.exit()


def run_tui(
    beats: TopBarBeats,
    track_ids: Sequence[str],
    *,
    config: Optional[AppConfig] = None,
) -> int:
    """Run the TUI and return an exit code."""
    logger.info("TUI start tracks=%s", len(track_ids))
    try:
        set_console_level(logging.WARNING)
    except Exception:
        logger.exception("Failed to set console log level for TUI")
    app = TopBarBeatsApp(beats=beats, track_ids=track_ids, config=config)
    app.run()
    logger.info("TUI exit")
    return 0

