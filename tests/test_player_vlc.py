"""Tests for the VLC audio object using fakes."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from topbar_beats import player_vlc
from topbar_beats.audio import AudioEvent
from topbar_beats.errors import AudioError


class FakeEventManager:
    def __init__(self) -> None:
        self.callbacks: dict[str, object] = {}

    def event_attach(self, event_type: str, callback) -> None:
        self.callbacks[event_type] = callback

    def fire(self, event_type: str) -> None:
        self.callbacks[event_type](object())  # type: ignore[operator]


class FakeMediaPlayer:
    def __init__(self) -> None:
        self.media: Optional[str] = None
        self.volume: Optional[int] = None
        self.time = 0
        self.calls: list[str] = []
        self.events = FakeEventManager()
        self.released = False

    def event_manager(self) -> FakeEventManager:
        return self.events

    def set_media(self, media: str) -> None:
        self.media = media

    def play(self) -> None:
        self.calls.append("play")

    def set_pause(self, flag: int) -> None:
        self.calls.append(f"set_pause:{flag}")

    def stop(self) -> None:
        self.calls.append("stop")

    def audio_set_volume(self, volume: int) -> None:
        self.volume = volume

    def get_time(self) -> int:
        return self.time

    def set_time(self, value: int) -> None:
        self.time = value

    def release(self) -> None:
        self.released = True


class FakeInstance:
    def __init__(self) -> None:
        self.player = FakeMediaPlayer()
        self.released = False

    def media_player_new(self) -> FakeMediaPlayer:
        return self.player

    def media_new(self, path: str) -> str:
        return path

    def release(self) -> None:
        self.released = True


class FakeEventType:
    MediaPlayerEndReached = "end"
    MediaPlayerPaused = "paused"
    MediaPlayerPlaying = "playing"


class FakeVlc:
    EventType = FakeEventType
    last_instance: Optional[FakeInstance] = None

    @classmethod
    def Instance(cls) -> FakeInstance:
        cls.last_instance = FakeInstance()
        return cls.last_instance


MEDIA = {"rbxassetid://1": Path("lib/1.mp3"), "rbxassetid://2": Path("lib/2.ogg")}


@pytest.fixture
def fake_vlc(monkeypatch: pytest.MonkeyPatch) -> type[FakeVlc]:
    monkeypatch.setattr(player_vlc, "vlc", FakeVlc)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", None)
    return FakeVlc


def _audio(fake_vlc: type[FakeVlc]) -> tuple[player_vlc.VlcAudio, FakeMediaPlayer]:
    audio = player_vlc.VlcAudio(MEDIA.get)
    assert fake_vlc.last_instance is not None
    return audio, fake_vlc.last_instance.player


def test_resume_loads_current_source(fake_vlc) -> None:
    audio, player = _audio(fake_vlc)
    audio.source_id = "rbxassetid://1"
    audio.resume()
    assert player.media == str(Path("lib/1.mp3"))
    assert player.calls == ["play"]

    audio.source_id = "rbxassetid://2"
    audio.resume()
    assert player.media == str(Path("lib/2.ogg"))


def test_resume_without_media_raises(fake_vlc) -> None:
    audio, player = _audio(fake_vlc)
    with pytest.raises(AudioError):
        audio.resume()
    audio.source_id = "rbxassetid://404"
    with pytest.raises(AudioError, match="No media found"):
        audio.resume()
    assert player.calls == []


def test_position_seek_and_pending_seek(fake_vlc) -> None:
    audio, player = _audio(fake_vlc)
    audio.source_id = "rbxassetid://1"
    audio.position = 7.5
    assert audio.position == 7.5
    audio.resume()
    assert player.time == 7500
    player.time = 12_000
    assert audio.position == 12.0
    audio.position = 0.0
    assert player.time == 0


def test_restart_before_switching_source_does_not_seek_old_media(fake_vlc) -> None:
    audio, player = _audio(fake_vlc)
    audio.source_id = "rbxassetid://1"
    audio.resume()
    player.time = 9000
    audio.source_id = "rbxassetid://2"
    audio.position = 0.0
    assert player.time == 9000
    audio.resume()
    assert player.media == str(Path("lib/2.ogg"))


def test_pause_stop_and_volume(fake_vlc) -> None:
    audio, player = _audio(fake_vlc)
    audio.pause()
    audio.stop()
    audio.set_volume(40)
    assert player.calls == ["set_pause:1", "stop"]
    assert player.volume == 40


def test_native_events_are_queued_until_dispatch(fake_vlc) -> None:
    audio, player = _audio(fake_vlc)
    received: list[AudioEvent] = []
    audio.subscribe(received.append)

    player.events.fire("playing")
    player.events.fire("paused")
    player.events.fire("playing")
    player.events.fire("end")
    assert received == []

    assert audio.dispatch_pending() == 4
    assert received == [
        AudioEvent.PLAYED,
        AudioEvent.PAUSED,
        AudioEvent.RESUMED,
        AudioEvent.ENDED,
    ]
    assert audio.dispatch_pending() == 0


def test_release_frees_player_and_instance(fake_vlc) -> None:
    audio, player = _audio(fake_vlc)
    instance = fake_vlc.last_instance
    audio.release()
    audio.release()
    assert player.released is True
    assert instance is not None and instance.released is True
    audio.stop()
    with pytest.raises(AudioError):
        audio.resume()
    with pytest.raises(AudioError):
        audio.pause()


def test_native_failures_are_logged(
    monkeypatch: pytest.MonkeyPatch, caplog
) -> None:
    class ErrorPlayer(FakeMediaPlayer):
        def event_manager(self):  # type: ignore[override]
            raise RuntimeError("no events")

        def stop(self) -> None:
            raise RuntimeError("device gone")

    class ErrorInstance(FakeInstance):
        def media_player_new(self) -> ErrorPlayer:  # type: ignore[override]
            return ErrorPlayer()

    class ErrorVlc(FakeVlc):
        @classmethod
        def Instance(cls) -> ErrorInstance:  # type: ignore[override]
            return ErrorInstance()

    monkeypatch.setattr(player_vlc, "vlc", ErrorVlc)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", None)
    with caplog.at_level("WARNING"):
        audio = player_vlc.VlcAudio(MEDIA.get)
    assert "notifications disabled" in caplog.text
    with caplog.at_level("WARNING"):
        audio.stop()
    assert "VLC stop failed" in caplog.text
    audio.release()


def test_missing_vlc_raises_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(player_vlc, "vlc", None)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", RuntimeError("missing"))
    with pytest.raises(RuntimeError, match="python-vlc"):
        player_vlc.require_vlc()
    with pytest.raises(RuntimeError):
        player_vlc.VlcAudio(MEDIA.get)


def test_load_vlc_import_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    import builtins

    original_import = builtins.__import__

    def fake_import(name, *args, **kwargs):
        if name == "vlc":
            raise ModuleNotFoundError("vlc")
        return original_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", fake_import)
    monkeypatch.setattr(player_vlc, "vlc", None)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", None)
    player_vlc._load_vlc()
    assert player_vlc.vlc is None
    assert isinstance(player_vlc._VLC_IMPORT_ERROR, ModuleNotFoundError)


def test_load_vlc_success(monkeypatch: pytest.MonkeyPatch) -> None:
    import sys

    class DummyVlc:
        pass

    monkeypatch.setitem(sys.modules, "vlc", DummyVlc)
    monkeypatch.setattr(player_vlc, "vlc", None)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", None)
    player_vlc._load_vlc()
    assert player_vlc.vlc is DummyVlc
    assert player_vlc._VLC_IMPORT_ERROR is None


@pytest.mark.vlc
def test_real_vlc_rejects_unknown_media() -> None:
    try:
        player_vlc.require_vlc()
    except RuntimeError as exc:
        pytest.skip(str(exc))
    audio = player_vlc.VlcAudio(lambda _track_id: None)
    audio.source_id = "rbxassetid://1"
    with pytest.raises(AudioError):
        audio.resume()
    audio.release()
    with pytest.raises(AudioError):
        audio.pause()
