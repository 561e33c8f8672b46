"""Per-document reveal session: the host's single entry point."""

from __future__ import annotations

import logging

from orgreveal.core.eligibility import EligibilityFilter
from orgreveal.core.markers import VisibilityMarkers
from orgreveal.core.toggler import RenderScheduler, VisibilityToggler
from orgreveal.core.tracker import CommandEventSource, CursorTracker, ElementParser, RevealTimer
from orgreveal.settings_manager import RevealSettingsManager

logger = logging.getLogger(__name__)


class RevealSession:
    """Owns the tracking state of one open document.

    The host creates one session per document view and calls :meth:`enable`
    and :meth:`disable` as the reveal mode is switched on and off.
    """

    def __init__(
        self,
        *,
        parser: ElementParser,
        markers: VisibilityMarkers,
        scheduler: RenderScheduler,
        events: CommandEventSource,
        settings: RevealSettingsManager,
        timer: RevealTimer | None = None,
    ) -> None:
        self.parser = parser
        self.markers = markers
        self.events = events
        self.settings = settings
        self.eligibility = EligibilityFilter()
        self.toggler = VisibilityToggler(markers, scheduler)
        self.tracker = CursorTracker(
            parser=parser,
            eligibility=self.eligibility,
            toggler=self.toggler,
            markers=markers,
            events=events,
            timer=timer,
        )
        self._apply_settings()

    @property
    def enabled(self) -> bool:
        return self.tracker.active

    @property
    def is_mutating(self) -> bool:
        return self.toggler.is_silent

    def enable(self) -> None:
        if self.enabled:
            return
        self._apply_settings()
        self.settings.add_listener(self._on_settings_changed)
        self.tracker.start()

    def disable(self) -> None:
        if not self.enabled:
            return
        self.settings.remove_listener(self._on_settings_changed)
        self.tracker.stop()

    def toggle(self) -> bool:
        if self.enabled:
            self.disable()
        else:
            self.enable()
        return self.enabled

    def reveal_at_point(self) -> bool:
        """Reveal the element under the cursor regardless of the trigger mode."""
        if not self.enabled:
            logger.debug("reveal_at_point ignored: session disabled")
            return False
        return self.tracker.manual_start(self.events.cursor_position())

    def stop_manual(self) -> None:
        self.tracker.manual_stop()

    def reapply(self) -> None:
        self.tracker.reapply()

    def _apply_settings(self) -> None:
        self.eligibility.update(self.settings.eligible_kinds(), self.settings.hidden_keywords())
        self.tracker.configure(
            trigger=self.settings.trigger,
            delay_ms=self.settings.delay_ms,
            manual_linger=self.settings.manual_linger,
        )

    def _on_settings_changed(self, key: str) -> None:
        logger.debug("Settings changed (%s); refreshing eligibility", key or "all")
        self._apply_settings()
