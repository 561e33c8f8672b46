"""Decide whether a parsed element takes part in cursor reveal."""

from __future__ import annotations

from typing import Iterable

from orgreveal.elements import Element, ElementKind


class EligibilityFilter:
    def __init__(
        self,
        eligible_kinds: Iterable[ElementKind] = (),
        hidden_keywords: Iterable[str] = (),
    ) -> None:
        self.eligible_kinds: frozenset[ElementKind] = frozenset()
        self.hidden_keywords: frozenset[str] = frozenset()
        self.update(eligible_kinds, hidden_keywords)

    def update(self, eligible_kinds: Iterable[ElementKind], hidden_keywords: Iterable[str]) -> None:
        self.eligible_kinds = frozenset(ElementKind(kind) for kind in eligible_kinds)
        self.hidden_keywords = frozenset(str(key).lower() for key in hidden_keywords)

    @property
    def inert(self) -> bool:
        return not self.eligible_kinds

    def filter(self, element: Element | None, position: int) -> Element | None:
        if element is None or element.kind not in self.eligible_kinds:
            return None
        # Cursor in the trailing blanks is outside the element.
        if not element.contains(position):
            return None
        if element.kind == ElementKind.LINK and self._ignored_link(element):
            return None
        if element.kind == ElementKind.KEYWORD:
            key = str(element.prop("key") or "").lower()
            if key not in self.hidden_keywords:
                return None
        return element

    def is_eligible(self, element: Element | None, position: int) -> bool:
        return self.filter(element, position) is not None

    @staticmethod
    def _ignored_link(element: Element) -> bool:
        return bool(element.prop("display_override")) or element.prop("format") == "plain"
