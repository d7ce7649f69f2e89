"""Icon framework contract used by the control surface."""

from __future__ import annotations

from typing import Callable, Iterable, Protocol

IconHandler = Callable[["Icon"], None]


class Icon(Protocol):
    """A clickable, optionally toggleable bar icon with chainable setters."""

    def set_name(self, name: str) -> "Icon": ...

    def set_label(self, text: str) -> "Icon": ...

    def set_image(self, image: str) -> "Icon": ...

    def set_caption(self, text: str) -> "Icon": ...

    def lock(self) -> "Icon": ...

    def one_click(self) -> "Icon": ...

    def bind_event(self, event_name: str, handler: IconHandler) -> "Icon": ...

    def bind_toggle_key(self, key: str) -> "Icon": ...

    def set_menu(self, children: Iterable["Icon"]) -> "Icon": ...

    def destroy(self) -> None: ...


class IconFramework(Protocol):
    """Factory for icons."""

    def new(self) -> Icon: ...
