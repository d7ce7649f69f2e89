"""Textual implementation of the icon framework."""

from __future__ import annotations

from collections import defaultdict
import logging
from typing import Iterable, Optional

from rich.text import Text
from textual.containers import Horizontal
from textual.widgets import Button

from topbar_beats.ui.icon import IconHandler

logger = logging.getLogger(__name__)


class TopBarIcon(Button):
    """A bar button with chainable setters.

    One-click icons fire ``selected`` then ``deselected`` on every press;
    other icons toggle between the two and show or hide their menu.
    """

    DEFAULT_CSS = """
    TopBarIcon {
        min-width: 3;
        height: 1;
        border: none;
        margin: 0 1 0 0;
    }
    TopBarIcon.-selected {
        text-style: bold reverse;
    }
    """

    def __init__(self, bar: "TopBar") -> None:
        super().__init__("", classes="topbar_icon")
        self.bar = bar
        self.icon_name = ""
        self.label_text = ""
        self.image = ""
        self.caption = ""
        self.locked = False
        self.is_one_click = False
        self.is_selected = False
        self.toggle_key: Optional[str] = None
        self.menu: list[TopBarIcon] = []
        self.parent_icon: Optional[TopBarIcon] = None
        self.destroyed = False
        self._handlers: dict[str, list[IconHandler]] = defaultdict(list)

    def _refresh_face(self) -> None:
        parts = [part for part in (self.image, self.label_text) if part]
        text = " ".join(parts) or self.caption or self.icon_name
        self.label = Text(text)
        self.tooltip = self.caption or None

    def set_name(self, name: str) -> "TopBarIcon":
        self.icon_name = name
        self._refresh_face()
        return self

    def set_label(self, text: str) -> "TopBarIcon":
        self.label_text = text
        self._refresh_face()
        return self

    def set_image(self, image: str) -> "TopBarIcon":
        self.image = image
        self._refresh_face()
        return self

    def set_caption(self, text: str) -> "TopBarIcon":
        self.caption = text
        self._refresh_face()
        return self

    def lock(self) -> "TopBarIcon":
        self.locked = True
        self.can_focus = False
        return self

    def one_click(self) -> "TopBarIcon":
        self.is_one_click = True
        return self

    def bind_event(self, event_name: str, handler: IconHandler) -> "TopBarIcon":
        self._handlers[event_name].append(handler)
        return self

    def bind_toggle_key(self, key: str) -> "TopBarIcon":
        self.toggle_key = key
        return self

    def set_menu(self, children: Iterable["TopBarIcon"]) -> "TopBarIcon":
        self.menu = list(children)
        for child in self.menu:
            child.parent_icon = self
            child.display = self.is_selected
        return self

    def _fire(self, event_name: str) -> None:
        for handler in list(self._handlers.get(event_name, [])):
            try:
                handler(self)
            except Exception:
                logger.exception("Icon handler failed event=%s", event_name)

    def set_selected(self, selected: bool) -> None:
        if selected == self.is_selected:
            return
        self.is_selected = selected
        self.set_class(selected, "-selected")
        for child in self.menu:
            child.display = selected
        self._fire("selected" if selected else "deselected")

    def activate(self) -> None:
        """Apply one user click."""
        if self.locked or self.destroyed:
            return
        if self.is_one_click:
            self._fire("selected")
            self._fire("deselected")
            return
        self.set_selected(not self.is_selected)

    def press(self) -> "TopBarIcon":
        self.activate()
        super().press()
        return self

    def destroy(self) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        for child in self.menu:
            child.destroy()
        self.menu = []
        self._handlers.clear()
        self.bar.forget(self)
        if not self.is_attached:
            return
        try:
            self.remove()
        except Exception:
            logger.debug("Icon removal skipped during shutdown", exc_info=True)


class TopBar(Horizontal):
    """Row of icons; ``new()`` is the icon factory."""

    DEFAULT_CSS = """
    TopBar {
        height: 1;
        width: 1fr;
    }
    """

    def __init__(self, *, id: str | None = None, classes: str | None = None) -> None:
        super().__init__(id=id, classes=classes)
        self.icons: list[TopBarIcon] = []
        self._placed: set[int] = set()
        self._flush_scheduled = False

    def new(self) -> TopBarIcon:
        icon = TopBarIcon(self)
        self.icons.append(icon)
        self._schedule_flush()
        return icon

    def forget(self, icon: TopBarIcon) -> None:
        if icon in self.icons:
            self.icons.remove(icon)
        self._placed.discard(id(icon))

    def handle_key(self, key: str) -> bool:
        """Toggle the icon bound to ``key``; return True when one matched."""
        for icon in self.icons:
            if icon.toggle_key == key and not icon.destroyed:
                icon.set_selected(not icon.is_selected)
                return True
        return False

    def on_mount(self) -> None:
        self._flush()

    def _schedule_flush(self) -> None:
        if self._flush_scheduled or not self.is_mounted:
            return
        self._flush_scheduled = True
        self.call_later(self._flush)

    def _ordered_icons(self) -> list[TopBarIcon]:
        ordered: list[TopBarIcon] = []
        for icon in self.icons:
            if icon.parent_icon is None:
                ordered.append(icon)
                ordered.extend(child for child in icon.menu if child in self.icons)
        ordered.extend(icon for icon in self.icons if icon not in ordered)
        return ordered

    def _flush(self) -> None:
        # Icons are mounted in batches so a root lands ahead of its menu.
        self._flush_scheduled = False
        pending = [
            icon for icon in self._ordered_icons() if id(icon) not in self._placed
        ]
        if not pending:
            return
        self._placed.update(id(icon) for icon in pending)
        self.mount(*pending)
