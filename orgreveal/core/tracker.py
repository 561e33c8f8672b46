"""Cursor tracking: reveal the element under the cursor, conceal the one it left."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from orgreveal.core.eligibility import EligibilityFilter
from orgreveal.core.markers import Anchor, VisibilityMarkers
from orgreveal.core.toggler import VisibilityToggler
from orgreveal.elements import Element
from orgreveal.settings_models import RevealTrigger

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandEvent:
    """One completed host command: where the cursor ended up, and whether text changed."""

    position: int
    edited: bool = False


CommandHandler = Callable[[CommandEvent], None]


class ElementParser(Protocol):
    def element_at(self, position: int) -> Element | None:
        """Innermost element whose span contains ``position``."""


class CommandEventSource(Protocol):
    """Host command loop. Subscribing twice or unsubscribing an unknown handler is a no-op."""

    def subscribe(self, handler: CommandHandler) -> None: ...

    def unsubscribe(self, handler: CommandHandler) -> None: ...

    def subscribe_edits(self, handler: CommandHandler) -> None: ...

    def unsubscribe_edits(self, handler: CommandHandler) -> None: ...

    def cursor_position(self) -> int: ...


class RevealTimer(Protocol):
    def start(self, delay_ms: int, callback: Callable[[], None]) -> None: ...

    def cancel(self) -> None: ...


class TrackerState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


class CursorTracker:
    def __init__(
        self,
        *,
        parser: ElementParser,
        eligibility: EligibilityFilter,
        toggler: VisibilityToggler,
        markers: VisibilityMarkers,
        events: CommandEventSource,
        timer: RevealTimer | None = None,
        trigger: RevealTrigger = "always",
        delay_ms: int = 0,
        manual_linger: bool = False,
    ) -> None:
        self.parser = parser
        self.eligibility = eligibility
        self.toggler = toggler
        self.markers = markers
        self.events = events
        self.timer = timer
        self.trigger: RevealTrigger = trigger
        self.delay_ms = max(0, int(delay_ms))
        self.manual_linger = bool(manual_linger)

        self.active = False
        self.state = TrackerState.IDLE
        self.previous_element: Element | None = None
        self._anchor: Anchor | None = None
        self._revealed = False
        self._pending: Element | None = None
        self._listening = False

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self.active:
            return
        self.active = True
        self._reset()
        if self.trigger == "always":
            self._listen(True)
        elif self.trigger == "on_change":
            self.events.subscribe_edits(self._on_edit)
        logger.debug("Cursor tracking started (trigger=%s)", self.trigger)

    def stop(self) -> None:
        if not self.active:
            return
        self._cancel_pending()
        self._conceal_previous()
        self._listen(False)
        self.events.unsubscribe_edits(self._on_edit)
        self.active = False
        self._reset()
        logger.debug("Cursor tracking stopped")

    def configure(self, *, trigger: RevealTrigger, delay_ms: int, manual_linger: bool) -> None:
        restart = self.active and trigger != self.trigger
        if restart:
            self.stop()
        self.trigger = trigger
        self.delay_ms = max(0, int(delay_ms))
        self.manual_linger = bool(manual_linger)
        if restart:
            self.start()

    def reapply(self) -> None:
        """Reveal the tracked element again after the renderer re-derived its markers."""
        if not self.active or not self._revealed:
            return
        element = self._resolve_previous()
        if element is not None:
            self.toggler.reveal(element)

    @property
    def listening(self) -> bool:
        return self._listening

    @property
    def revealed(self) -> bool:
        return self._revealed

    # ------------------------------------------------------------------
    # classification
    # ------------------------------------------------------------------
    def classify(self, position: int) -> Element | None:
        if self.eligibility.inert:
            return None
        return self.eligibility.filter(self.parser.element_at(position), position)

    def _previous_start(self) -> int | None:
        return self._anchor.position if self._anchor is not None else None

    # ------------------------------------------------------------------
    # events
    # ------------------------------------------------------------------
    def handle(self, event: CommandEvent) -> None:
        if not self.active:
            return
        was_pending = self._pending is not None
        self._cancel_pending()
        current = self.classify(event.position)
        current_start = current.begin if current is not None else None

        if current_start == self._previous_start():
            # Same element, or still outside any.
            if current is None:
                if self.trigger != "always":
                    self._listen(False)
            elif not self._revealed:
                if was_pending or self._may_reveal(event):
                    # Still waiting: the delay restarts with every command.
                    self._schedule_reveal(current)
            elif event.edited and self._may_reveal(event):
                self._reveal_now(current)
        else:
            self._conceal_previous()
            if current is not None and self.trigger == "manual":
                # Manual tracking covers only the element it was started on.
                current = None
            if current is None:
                self.state = TrackerState.IDLE
                if self.trigger != "always":
                    self._listen(False)
            else:
                self.state = TrackerState.TRACKING
                self._listen(True)
                if self._may_reveal(event):
                    self._schedule_reveal(current)

        self._remember(current)

    def _on_edit(self, event: CommandEvent) -> None:
        if self.active and self.trigger == "on_change":
            self._listen(True)

    def _may_reveal(self, event: CommandEvent) -> bool:
        if self.trigger == "on_change":
            return event.edited or self._revealed
        if self.trigger == "manual":
            return self._revealed
        return True

    # ------------------------------------------------------------------
    # manual entry points
    # ------------------------------------------------------------------
    def manual_start(self, position: int) -> bool:
        """Reveal the element at ``position`` and track it until the cursor leaves."""
        if not self.active:
            return False
        self._cancel_pending()
        current = self.classify(position)
        if current is None:
            return False
        if current.begin != self._previous_start():
            self._conceal_previous()
        self._remember(current)
        self.state = TrackerState.TRACKING
        self._listen(True)
        self._reveal_now(current)
        return self._revealed

    def manual_stop(self) -> None:
        if not self.active:
            return
        if self.manual_linger and self._revealed:
            # Stays visible until the cursor leaves; the next leave event unsubscribes.
            return
        self._cancel_pending()
        self._conceal_previous()
        if self.trigger != "always":
            self._listen(False)
        self._reset()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _reveal_now(self, element: Element) -> None:
        if self.toggler.reveal(element):
            self._revealed = True

    def _schedule_reveal(self, element: Element) -> None:
        if self.delay_ms <= 0 or self.timer is None:
            self._reveal_now(element)
            return
        self._pending = element
        self.timer.start(self.delay_ms, self._fire_pending)

    def _fire_pending(self) -> None:
        element, self._pending = self._pending, None
        if element is None or not self.active:
            return
        if element.begin == self._previous_start():
            self._reveal_now(element)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending = None
            if self.timer is not None:
                self.timer.cancel()

    def _conceal_previous(self) -> None:
        if self.previous_element is None or not self._revealed:
            return
        self._revealed = False
        element = self._resolve_previous()
        if element is None:
            logger.debug("Previous element no longer resolvable; nothing to conceal")
            return
        self.toggler.conceal(element)

    def _resolve_previous(self) -> Element | None:
        previous, start = self.previous_element, self._previous_start()
        if previous is None or start is None:
            return None
        fresh = self.parser.element_at(start)
        if fresh is None or fresh.kind != previous.kind or fresh.begin != start:
            return None
        return fresh

    def _remember(self, element: Element | None) -> None:
        if element is None:
            self.previous_element = None
            self._anchor = None
            self._revealed = False
            return
        same = self._anchor is not None and self._anchor.position == element.begin
        self.previous_element = element
        if not same:
            self._anchor = self.markers.anchor(element.begin)

    def _listen(self, enabled: bool) -> None:
        if enabled and not self._listening:
            self.events.subscribe(self.handle)
        elif not enabled and self._listening:
            self.events.unsubscribe(self.handle)
        self._listening = enabled

    def _reset(self) -> None:
        self.state = TrackerState.IDLE
        self.previous_element = None
        self._anchor = None
        self._revealed = False
        self._pending = None
