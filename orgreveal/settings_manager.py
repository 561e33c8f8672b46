from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from orgreveal.elements import EMPHASIS_KINDS, MATH_KINDS, SCRIPT_KINDS, ElementKind
from orgreveal.settings_models import (
    REVEAL_TRIGGERS,
    RevealTrigger,
    SettingsPaths,
    default_org_reveal_settings,
)
from orgreveal.settings_store import JsonSettingsStore

logger = logging.getLogger(__name__)

SettingsListener = Callable[[str], None]


class RevealSettingsManager:
    """Typed access to the reveal settings plus change notification."""

    def __init__(self, paths: SettingsPaths | None = None) -> None:
        self.paths = paths
        path = paths.settings_file if paths is not None else None
        self.store = JsonSettingsStore(path, default_org_reveal_settings())
        self._listeners: list[SettingsListener] = []

    @classmethod
    def in_memory(cls, overrides: dict[str, Any] | None = None) -> "RevealSettingsManager":
        manager = cls()
        for key, value in (overrides or {}).items():
            manager.store.set(key, value)
        return manager

    @classmethod
    def for_app_dir(cls, app_dir: Path) -> "RevealSettingsManager":
        manager = cls(SettingsPaths(app_dir=app_dir))
        manager.load()
        return manager

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        self.store.load()
        self._notify("")

    def save(self) -> None:
        if self.store.dirty:
            self.store.save()

    def get(self, key: str, default: Any = None) -> Any:
        return self.store.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        changed = self.store.set(key, value)
        if changed:
            self._notify(key)
        return changed

    # ------------------------------------------------------------------
    # listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: SettingsListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SettingsListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)

    # ------------------------------------------------------------------
    # typed accessors
    # ------------------------------------------------------------------
    def _flag(self, key: str) -> bool:
        return bool(self.store.get(key, False))

    @property
    def hide_emphasis_markers(self) -> bool:
        return self._flag("org.hide_emphasis_markers")

    @property
    def pretty_entities(self) -> bool:
        return self._flag("org.pretty_entities")

    @property
    def link_descriptive(self) -> bool:
        return self._flag("org.link_descriptive")

    @property
    def prettify_math(self) -> bool:
        return self._flag("org.prettify_math")

    def hidden_keywords(self) -> frozenset[str]:
        raw = self.store.get("org.hidden_keywords", [])
        if not isinstance(raw, (list, tuple, set, frozenset)):
            return frozenset()
        return frozenset(str(item).strip().lower() for item in raw if str(item).strip())

    @property
    def trigger(self) -> RevealTrigger:
        value = str(self.store.get("reveal.trigger", "always") or "").strip().lower()
        if value not in REVEAL_TRIGGERS:
            logger.warning("Unknown reveal trigger %r, using 'always'", value)
            return "always"
        return value  # type: ignore[return-value]

    @property
    def delay_ms(self) -> int:
        raw = self.store.get("reveal.delay_ms", 0)
        try:
            value = int(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid reveal delay %r, using 0", raw)
            return 0
        if value < 0:
            logger.warning("Negative reveal delay %d, using 0", value)
            return 0
        return value

    @property
    def manual_linger(self) -> bool:
        return self._flag("reveal.manual_linger")

    def eligible_kinds(self) -> frozenset[ElementKind]:
        kinds: set[ElementKind] = set()
        if self.hide_emphasis_markers and self._flag("reveal.emphasis"):
            kinds.update(EMPHASIS_KINDS)
        if self.pretty_entities and self._flag("reveal.submarkers"):
            kinds.update(SCRIPT_KINDS)
        if self.pretty_entities and self._flag("reveal.entities"):
            kinds.add(ElementKind.ENTITY)
        if self.link_descriptive and self._flag("reveal.links"):
            kinds.add(ElementKind.LINK)
        if self.hidden_keywords() and self._flag("reveal.keywords"):
            kinds.add(ElementKind.KEYWORD)
        if self._flag("reveal.math"):
            kinds.update(MATH_KINDS)
        return frozenset(kinds)
