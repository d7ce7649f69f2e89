"""Status line state for the host app."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Optional

from rich.text import Text

LEVEL_STYLES = {"warn": "#ffcc66", "error": "#ff5f52"}


@dataclass(frozen=True)
class StatusMessage:
    text: str
    level: str
    until: Optional[float]


def _truncate_line(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return "…"
    return text[: width - 1] + "…"


class StatusController:
    """Transient status message with a key hint fallback."""

    def __init__(self, now: Callable[[], float], *, toggle_key: str = "m") -> None:
        self._now = now
        self._hint = (
            f"{toggle_key.upper()}: menu  "
            "Space: play/pause  P: rewind  N: next  Q: quit"
        )
        self._message: Optional[StatusMessage] = None

    def show_message(
        self,
        text: str,
        *,
        level: str = "info",
        timeout: Optional[float] = None,
    ) -> None:
        if timeout is None:
            timeout = 6.0 if level in LEVEL_STYLES else 3.0
        until = None if timeout == 0 else self._now() + max(0.0, timeout)
        self._message = StatusMessage(text=text, level=level, until=until)

    def clear_message(self) -> None:
        self._message = None

    def current_message(self) -> Optional[StatusMessage]:
        if not self._message:
            return None
        if self._message.until is None or self._message.until > self._now():
            return self._message
        self._message = None
        return None

    def render_line(self, width: int) -> Text:
        message = self.current_message()
        if message is None:
            return Text(_truncate_line(self._hint, width))
        line = _truncate_line(message.text, width)
        style = LEVEL_STYLES.get(message.level)
        return Text(line, style=style) if style else Text(line)


class StatusLogHandler(logging.Handler):
    """Mirror warnings and errors from the package logger onto the status line."""

    def __init__(self, controller: StatusController) -> None:
        super().__init__(level=logging.WARNING)
        self._controller = controller

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = record.getMessage()
        except Exception:
            self.handleError(record)
            return
        level = "error" if record.levelno >= logging.ERROR else "warn"
        self._controller.show_message(text, level=level)
