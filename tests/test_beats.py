"""Tests for the TopBarBeats control surface."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Callable, Optional

import pytest

from topbar_beats.audio import AudioEvent, AudioEventHandler
from topbar_beats.beats import APP_NAME, TITLE_LABEL, TITLE_NAME, TopBarBeats
from topbar_beats.errors import FrameworkError
from topbar_beats.metadata import NameResolver
from topbar_beats.ui import images as img


class FakeLookup:
    def lookup(self, asset_id: int) -> str | None:
        return {111: "Alpha", 222: "Beta"}.get(asset_id)


class FakeAudio:
    def __init__(self) -> None:
        self.source_id: Optional[str] = None
        self.position = 0.0
        self.calls: list[str] = []
        self.fail_resume = False
        self.handlers: list[AudioEventHandler] = []

    def pause(self) -> None:
        self.calls.append("pause")

    def resume(self) -> None:
        if self.fail_resume:
            raise RuntimeError("device lost")
        self.calls.append("resume")

    def stop(self) -> None:
        self.calls.append("stop")

    def release(self) -> None:
        self.calls.append("release")

    def subscribe(self, handler: AudioEventHandler) -> None:
        self.handlers.append(handler)

    def emit(self, event: AudioEvent) -> None:
        for handler in list(self.handlers):
            handler(event)


class FakeIcon:
    def __init__(self) -> None:
        self.name = ""
        self.label = ""
        self.image = ""
        self.caption = ""
        self.locked = False
        self.is_one_click = False
        self.toggle_key: Optional[str] = None
        self.menu: list[FakeIcon] = []
        self.handlers: dict[str, list[Callable[[FakeIcon], None]]] = defaultdict(list)
        self.destroyed = 0

    def set_name(self, name: str) -> "FakeIcon":
        self.name = name
        return self

    def set_label(self, text: str) -> "FakeIcon":
        self.label = text
        return self

    def set_image(self, image: str) -> "FakeIcon":
        self.image = image
        return self

    def set_caption(self, text: str) -> "FakeIcon":
        self.caption = text
        return self

    def lock(self) -> "FakeIcon":
        self.locked = True
        return self

    def one_click(self) -> "FakeIcon":
        self.is_one_click = True
        return self

    def bind_event(self, event_name: str, handler) -> "FakeIcon":
        self.handlers[event_name].append(handler)
        return self

    def bind_toggle_key(self, key: str) -> "FakeIcon":
        self.toggle_key = key
        return self

    def set_menu(self, children) -> "FakeIcon":
        self.menu = list(children)
        return self

    def click(self) -> None:
        for handler in self.handlers["selected"]:
            handler(self)

    def destroy(self) -> None:
        self.destroyed += 1
        for child in self.menu:
            child.destroy()


class FakeFramework:
    def __init__(self) -> None:
        self.icons: list[FakeIcon] = []

    def new(self) -> FakeIcon:
        icon = FakeIcon()
        self.icons.append(icon)
        return icon


def _beats(audio: Optional[FakeAudio] = None) -> tuple[TopBarBeats, FakeAudio]:
    audio = audio or FakeAudio()
    beats = TopBarBeats(NameResolver(FakeLookup()), audio_factory=lambda: audio)
    return beats, audio


def _ready() -> tuple[TopBarBeats, FakeAudio, FakeFramework]:
    beats, audio = _beats()
    framework = FakeFramework()
    beats.init(framework)
    assert asyncio.run(
        beats.load_tracks(["rbxassetid://111", "rbxassetid://222"])
    ) is True
    return beats, audio, framework


@pytest.mark.parametrize("framework", [None, object()])
def test_init_rejects_invalid_framework(framework) -> None:
    beats, _audio = _beats()
    with pytest.raises(FrameworkError) as excinfo:
        beats.init(framework)
    assert isinstance(excinfo.value, TypeError)
    assert beats.audio is None


def test_init_builds_control_tree() -> None:
    beats, audio, _framework = _ready()
    root = beats.get_icon()
    assert root is not None
    assert root.name == APP_NAME
    assert root.image == img.APP_ICON
    assert root.toggle_key == "m"
    title, rewind, play_pause, fast_forward = root.menu
    assert title.name == TITLE_NAME
    assert title.label == TITLE_LABEL
    assert title.locked is True
    assert rewind.image == img.REWIND
    assert (play_pause.image, play_pause.caption) == (img.PLAY, "Play")
    assert fast_forward.image == img.FASTFORWARD
    assert all(icon.is_one_click for icon in root.menu)
    assert beats.audio is audio
    assert len(audio.handlers) == 1


def test_init_twice_warns(caplog) -> None:
    beats, _audio, framework = _ready()
    count = len(framework.icons)
    with caplog.at_level("WARNING"):
        beats.init(framework)
    assert len(framework.icons) == count
    assert "already initialized" in caplog.text


def test_play_pause_icon_follows_state() -> None:
    beats, audio, _framework = _ready()
    play_pause = beats.play_pause_icon
    assert play_pause is not None

    play_pause.click()
    assert beats.is_playing is True
    assert (play_pause.image, play_pause.caption) == (img.PAUSE, "Pause")

    audio.emit(AudioEvent.PAUSED)
    assert play_pause.image == img.PLAY

    audio.emit(AudioEvent.RESUMED)
    assert play_pause.image == img.PAUSE

    beats.toggle_music(False)
    assert beats.is_playing is False
    assert play_pause.image == img.PLAY
    assert audio.calls == ["resume", "pause"]


def test_failed_click_keeps_play_face() -> None:
    beats, audio, _framework = _ready()
    audio.fail_resume = True
    play_pause = beats.play_pause_icon
    assert play_pause is not None
    play_pause.click()
    assert beats.is_playing is False
    assert play_pause.image == img.PLAY


def test_title_label_tracks_current_song() -> None:
    beats, _audio, _framework = _ready()
    root = beats.get_icon()
    assert root is not None
    _title, rewind, _play_pause, fast_forward = root.menu

    fast_forward.click()
    assert beats.title_icon is not None
    assert beats.title_icon.label == "Beta"
    rewind.click()
    assert beats.title_icon.label == "Alpha"


def test_transport_before_init_is_logged(caplog) -> None:
    beats, audio = _beats()
    with caplog.at_level("WARNING"):
        assert beats.toggle_music(True) is False
        assert beats.fast_forward() is False
        assert beats.rewind() is False
    assert beats.is_playing is False
    assert audio.calls == []
    assert "not initialized" in caplog.text


def test_setup_controls_before_init_warns(caplog) -> None:
    beats, _audio = _beats()
    with caplog.at_level("WARNING"):
        beats.setup_controls()
    assert "Unable to setup controls" in caplog.text
    assert beats.get_icon() is None


def test_destroy_releases_everything_once() -> None:
    beats, audio, _framework = _ready()
    beats.toggle_music(True)
    root = beats.get_icon()
    assert root is not None
    title = beats.title_icon

    beats.destroy()
    beats.destroy()

    assert audio.calls[-2:] == ["stop", "release"]
    assert audio.calls.count("release") == 1
    assert beats.controller.playlist.is_empty()
    assert beats.is_playing is False
    assert beats.get_icon() is None
    assert beats.audio is None
    assert root.destroyed >= 1
    assert title is not None and title.destroyed >= 1


def test_destroy_then_init_starts_fresh() -> None:
    beats, _audio, _framework = _ready()
    beats.destroy()
    framework = FakeFramework()
    beats.init(framework)
    assert beats.get_icon() is not None
    assert beats.controller.playlist.is_empty()


def test_load_tracks_config_options() -> None:
    beats, audio = _beats()
    beats.init(FakeFramework())
    loaded = asyncio.run(
        beats.load_tracks(["111", "222"], {"autostart": True, "shuffle": False})
    )
    assert loaded is True
    assert beats.is_playing is True
    assert audio.source_id == "rbxassetid://111"
    assert beats.play_pause_icon is not None
    assert beats.play_pause_icon.image == img.PAUSE


def test_destroy_finishes_when_audio_stop_fails(caplog) -> None:
    class StuckAudio(FakeAudio):
        def stop(self) -> None:
            raise RuntimeError("stop failed")

    audio = StuckAudio()
    beats, _audio = _beats(audio)
    beats.init(FakeFramework())
    root = beats.get_icon()
    assert root is not None

    with caplog.at_level("WARNING"):
        beats.destroy()

    assert "Audio stop failed during destroy" in caplog.text
    assert audio.calls == ["release"]
    assert beats.get_icon() is None
    assert beats.framework is None
    assert beats.audio is None
    assert root.destroyed >= 1
    assert beats.controller.playlist.is_empty()
