"""Command-line interface for TopBarBeats."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys
import threading
from types import TracebackType
from typing import Iterable, NoReturn, Optional, Sequence, Tuple

from topbar_beats.beats import TopBarBeats
from topbar_beats.config import AppConfig, load_config, save_config
from topbar_beats.errors import MalformedIdError
from topbar_beats.logging_setup import init_logging
from topbar_beats.metadata import AssetLibrary, NameResolver
from topbar_beats.player_vlc import VlcAudio, require_vlc

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="topbar-beats", description="TopBarBeats")
    parser.add_argument(
        "track_ids",
        nargs="*",
        help="Track ids, either 'rbxassetid://<digits>' or bare digits",
    )
    parser.add_argument(
        "--library",
        default=None,
        help="Directory holding <asset id>.<ext> audio files",
    )
    parser.add_argument(
        "--shuffle",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Shuffle the playlist on load",
    )
    parser.add_argument(
        "--autostart",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Start playing once the playlist is loaded",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Resolve the track names, print them and exit without playing",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Remember --library, --shuffle and --autostart for later runs",
    )
    return parser


def _install_exception_hooks() -> None:
    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = excepthook

    def thread_hook(args: threading.ExceptHookArgs) -> None:
        exc_value = args.exc_value or RuntimeError("unknown")
        exc_info: Tuple[type[BaseException], BaseException, Optional[TracebackType]] = (
            args.exc_type,
            exc_value,
            args.exc_traceback,
        )
        thread_name = args.thread.name if args.thread else "thread"
        logger.exception("Thread exception in %s", thread_name, exc_info=exc_info)

    threading.excepthook = thread_hook


def _effective_config(args: argparse.Namespace, config: AppConfig) -> AppConfig:
    return AppConfig(
        library_dir=args.library or config.library_dir,
        volume=config.volume,
        shuffle=config.shuffle if args.shuffle is None else args.shuffle,
        autostart=config.autostart if args.autostart is None else args.autostart,
        toggle_key=config.toggle_key,
    )


def _save_settings(config: AppConfig) -> None:
    try:
        save_config(config)
    except OSError:
        logger.exception("Failed to save config")
        return
    logger.info("Config saved")


def _check_tracks(resolver: NameResolver, track_ids: Sequence[str]) -> int:
    beats = TopBarBeats(resolver, audio_factory=_no_audio)
    try:
        loaded = asyncio.run(beats.load_tracks(track_ids))
    except MalformedIdError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    if not loaded:
        print("Failed to resolve every track; see the log.", file=sys.stderr)
        return 1
    for position, track in enumerate(beats.controller.playlist.tracks, start=1):
        print(f"{position:>3}. {track.name} ({track.id})")
    return 0


def _no_audio() -> NoReturn:
    raise RuntimeError("--check does not play audio")


def _run_tui(beats: TopBarBeats, track_ids: Sequence[str], config: AppConfig) -> int:
    try:
        from topbar_beats.tui import run_tui
    except (ImportError, RuntimeError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return run_tui(beats, track_ids, config=config)


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    init_logging()
    logger.info("App start")
    _install_exception_hooks()

    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    config = _effective_config(args, load_config())
    if args.save:
        _save_settings(config)
    library = AssetLibrary(Path(config.library_dir or Path.cwd()))
    resolver = NameResolver(library)

    if args.check:
        return _check_tracks(resolver, args.track_ids)

    try:
        require_vlc()
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    beats = TopBarBeats(
        resolver,
        audio_factory=lambda: VlcAudio(library.locate),
        toggle_key=config.toggle_key,
    )
    exit_code = _run_tui(beats, args.track_ids, config)
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
