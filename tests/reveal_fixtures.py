"""In-memory stand-ins for the host pieces the reveal core talks to."""

from __future__ import annotations

from typing import Callable

from orgreveal.core.markers import VisibilityMarkers
from orgreveal.core.tracker import CommandEvent, CommandHandler
from orgreveal.elements import Element, ElementKind


def bold(begin: int, end: int, post_blank: int = 0) -> Element:
    return Element(
        kind=ElementKind.BOLD,
        begin=begin,
        end=end + post_blank,
        post_blank=post_blank,
        contents_begin=begin + 1,
        contents_end=end - 1,
    )


class FauxParser:
    """``element_at`` over a fixed, editable list of elements."""

    def __init__(self, elements: list[Element] | None = None) -> None:
        self.elements: list[Element] = list(elements or [])
        self.calls = 0

    def element_at(self, position: int) -> Element | None:
        self.calls += 1
        best: Element | None = None
        for element in self.elements:
            if element.begin <= position < element.end:
                if best is None or element.end - element.begin < best.end - best.begin:
                    best = element
        return best

    def shift_from(self, position: int, delta: int) -> None:
        self.elements = [el.shifted(delta) if el.begin >= position else el for el in self.elements]


class FauxScheduler:
    """Records scheduler calls; ``rerender`` re-derives markers like a renderer would."""

    def __init__(self, rerender: Callable[[int, int], None] | None = None) -> None:
        self.calls: list[tuple[str, int, int]] = []
        self._rerender = rerender

    def ensure_rendered(self, start: int, end: int) -> None:
        self.calls.append(("ensure_rendered", start, end))

    def request_rerender(self, start: int, end: int) -> None:
        self.calls.append(("request_rerender", start, end))
        if self._rerender is not None:
            self._rerender(start, end)

    def repaint(self, start: int, end: int) -> None:
        self.calls.append(("repaint", start, end))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.calls]


class FauxEvents:
    def __init__(self, position: int = 0) -> None:
        self.position = position
        self.handlers: list[CommandHandler] = []
        self.edit_handlers: list[CommandHandler] = []

    def subscribe(self, handler: CommandHandler) -> None:
        if handler not in self.handlers:
            self.handlers.append(handler)

    def unsubscribe(self, handler: CommandHandler) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def subscribe_edits(self, handler: CommandHandler) -> None:
        if handler not in self.edit_handlers:
            self.edit_handlers.append(handler)

    def unsubscribe_edits(self, handler: CommandHandler) -> None:
        if handler in self.edit_handlers:
            self.edit_handlers.remove(handler)

    def cursor_position(self) -> int:
        return self.position

    def move(self, position: int, *, edited: bool = False) -> None:
        self.position = position
        event = CommandEvent(position=position, edited=edited)
        if edited:
            for handler in list(self.edit_handlers):
                handler(event)
        for handler in list(self.handlers):
            handler(event)


class FauxTimer:
    def __init__(self) -> None:
        self.delay_ms: int | None = None
        self.callback: Callable[[], None] | None = None
        self.cancelled = 0

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.delay_ms = delay_ms
        self.callback = callback

    def cancel(self) -> None:
        self.cancelled += 1
        self.callback = None

    def fire(self) -> None:
        callback, self.callback = self.callback, None
        if callback is not None:
            callback()


def hide_delimiters(markers: VisibilityMarkers, elements: list[Element]) -> None:
    """Resting state a renderer would derive for emphasis elements."""
    for element in elements:
        markers.add("hidden", element.begin, element.begin + 1)
        markers.add("hidden", element.text_end - 1, element.text_end)
