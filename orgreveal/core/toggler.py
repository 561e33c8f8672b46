"""Show and hide element delimiters in the visibility markers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Protocol

from orgreveal.core.bounds import compute_descriptor
from orgreveal.core.markers import DECORATED, HIDDEN, VisibilityMarkers
from orgreveal.elements import DescriptorTag, Element, ElementDescriptor

logger = logging.getLogger(__name__)


class RenderScheduler(Protocol):
    def ensure_rendered(self, start: int, end: int) -> None:
        """Fontify ``[start, end)`` now if the renderer has not done so yet."""

    def request_rerender(self, start: int, end: int) -> None:
        """Drop what was derived for ``[start, end)`` and fontify it again."""

    def repaint(self, start: int, end: int) -> None:
        """Redraw ``[start, end)`` from the current markers without re-deriving them."""


class VisibilityToggler:
    def __init__(self, markers: VisibilityMarkers, scheduler: RenderScheduler) -> None:
        self.markers = markers
        self.scheduler = scheduler
        self._silent_depth = 0

    @property
    def is_silent(self) -> bool:
        """True while a toggle is mutating; hosts must not treat that as an edit."""
        return self._silent_depth > 0

    @contextmanager
    def silent(self) -> Iterator[None]:
        self._silent_depth += 1
        try:
            yield
        finally:
            self._silent_depth -= 1

    def describe(self, element: Element | None) -> ElementDescriptor | None:
        return compute_descriptor(element, foreign_overlay_at=self.markers.has_foreign_overlay)

    def reveal(self, element: Element | None) -> bool:
        descriptor = self.describe(element)
        if descriptor is None:
            return False
        start, end = descriptor.start, descriptor.end
        with self.silent():
            self.scheduler.ensure_rendered(start, end)
            tag = descriptor.tag
            if tag is DescriptorTag.MATH:
                self.markers.decompose(start, end)
                self.markers.remove(HIDDEN, start, end)
            elif tag is DescriptorTag.ENTITY:
                self.markers.decompose(start, end)
            elif tag is DescriptorTag.KEYWORD:
                self.markers.remove(HIDDEN, start, end)
                self.markers.remove(DECORATED, start, end)
            else:
                for lo, hi in descriptor.delimiter_ranges():
                    self.markers.remove(HIDDEN, lo, hi)
                    self.markers.remove(DECORATED, lo, hi)
            self.scheduler.repaint(start, end)
        logger.debug("Revealed %s at %d-%d", tag.value, start, end)
        return True

    def conceal(self, element: Element | None) -> bool:
        # Always derived again: the element may have moved since it was revealed.
        descriptor = self.describe(element)
        if descriptor is None or element is None:
            return False
        start, end = descriptor.start, descriptor.end
        with self.silent():
            tag = descriptor.tag
            if tag is DescriptorTag.ENTITY:
                glyph = str(element.prop("utf8") or "")
                if glyph:
                    self.markers.compose(start, end, glyph)
                self.scheduler.repaint(start, end)
            elif tag in (DescriptorTag.KEYWORD, DescriptorTag.MATH):
                self.scheduler.request_rerender(start, end)
            else:
                for lo, hi in descriptor.delimiter_ranges():
                    self.markers.add(HIDDEN, lo, hi)
                self.scheduler.repaint(start, end)
        logger.debug("Concealed %s at %d-%d", tag.value, start, end)
        return True
