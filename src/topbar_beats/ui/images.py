"""Glyphs used as icon images in the terminal."""

from __future__ import annotations

APP_ICON = "♫"
REWIND = "⏮"
PLAY = "▶"
PAUSE = "⏸"
FASTFORWARD = "⏭"
