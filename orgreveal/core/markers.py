"""Per-document visibility markers kept outside the text.

Markers behave like text properties: they are attached to character offsets,
move when text is inserted or removed before them and vanish with the text
they cover. The renderer paints from them; the toggler edits them.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass

HIDDEN = "hidden"
DECORATED = "decorated"
MARKER_PROPERTIES = (HIDDEN, DECORATED)


@dataclass(slots=True)
class Composition:
    start: int
    end: int
    glyph: str


@dataclass(slots=True, eq=False)
class Overlay:
    start: int
    end: int
    owner: str


class Anchor:
    """A position that follows edits; ``advance`` moves it past text inserted at it."""

    __slots__ = ("position", "advance", "__weakref__")

    def __init__(self, position: int, *, advance: bool = True) -> None:
        self.position = int(position)
        self.advance = bool(advance)

    def __repr__(self) -> str:
        return f"Anchor({self.position})"


def _map_position(value: int, position: int, removed: int, added: int, *, advance: bool) -> int:
    if value < position:
        return value
    if value == position and removed == 0 and not advance:
        return value
    if value >= position + removed:
        return value + added - removed
    return position


class VisibilityMarkers:
    def __init__(self) -> None:
        self._props: dict[str, set[int]] = {name: set() for name in MARKER_PROPERTIES}
        self._compositions: dict[int, Composition] = {}
        self._overlays: list[Overlay] = []
        self._anchors: "weakref.WeakSet[Anchor]" = weakref.WeakSet()

    # ------------------------------------------------------------------
    # character properties
    # ------------------------------------------------------------------
    def add(self, name: str, start: int, end: int) -> bool:
        target = self._props[name]
        before = len(target)
        target.update(range(max(0, start), max(0, end)))
        return len(target) != before

    def remove(self, name: str, start: int, end: int) -> bool:
        target = self._props[name]
        before = len(target)
        target.difference_update(range(max(0, start), max(0, end)))
        return len(target) != before

    def has(self, name: str, position: int) -> bool:
        return position in self._props[name]

    def positions(self, name: str, start: int | None = None, end: int | None = None) -> list[int]:
        values = self._props[name]
        if start is None and end is None:
            return sorted(values)
        lo = 0 if start is None else start
        hi = max(values, default=-1) + 1 if end is None else end
        return sorted(pos for pos in values if lo <= pos < hi)

    def runs(self, name: str, start: int, end: int) -> list[tuple[int, int]]:
        """Contiguous ``(start, end)`` runs of ``name`` inside ``[start, end)``."""
        out: list[tuple[int, int]] = []
        for pos in self.positions(name, start, end):
            if out and out[-1][1] == pos:
                out[-1] = (out[-1][0], pos + 1)
            else:
                out.append((pos, pos + 1))
        return out

    # ------------------------------------------------------------------
    # compositions (raw text displayed as a single glyph)
    # ------------------------------------------------------------------
    def compose(self, start: int, end: int, glyph: str) -> bool:
        if end <= start or not glyph:
            return False
        current = self._compositions.get(start)
        if current is not None and current.end == end and current.glyph == glyph:
            return False
        self.decompose(start, end)
        self._compositions[start] = Composition(start, end, glyph)
        return True

    def decompose(self, start: int, end: int) -> bool:
        doomed = [key for key, comp in self._compositions.items() if comp.start < end and comp.end > start]
        for key in doomed:
            del self._compositions[key]
        return bool(doomed)

    def composition_at(self, position: int) -> Composition | None:
        for comp in self._compositions.values():
            if comp.start <= position < comp.end:
                return comp
        return None

    def compositions(self, start: int = 0, end: int | None = None) -> list[Composition]:
        return sorted(
            (
                comp
                for comp in self._compositions.values()
                if comp.end > start and (end is None or comp.start < end)
            ),
            key=lambda comp: comp.start,
        )

    # ------------------------------------------------------------------
    # overlays owned by other rendering layers
    # ------------------------------------------------------------------
    def add_overlay(self, start: int, end: int, owner: str) -> Overlay:
        overlay = Overlay(int(start), int(end), str(owner))
        self._overlays.append(overlay)
        return overlay

    def remove_overlay(self, overlay: Overlay) -> None:
        if overlay in self._overlays:
            self._overlays.remove(overlay)

    def overlays_at(self, position: int) -> list[Overlay]:
        return [ov for ov in self._overlays if ov.start <= position < ov.end]

    def has_foreign_overlay(self, position: int) -> bool:
        return bool(self.overlays_at(position))

    # ------------------------------------------------------------------
    # anchors and edits
    # ------------------------------------------------------------------
    def anchor(self, position: int, *, advance: bool = True) -> Anchor:
        anchor = Anchor(position, advance=advance)
        self._anchors.add(anchor)
        return anchor

    def clear(self, start: int, end: int) -> None:
        """Drop every character property and composition in ``[start, end)``."""
        for name in MARKER_PROPERTIES:
            self.remove(name, start, end)
        self.decompose(start, end)

    def reset(self) -> None:
        for values in self._props.values():
            values.clear()
        self._compositions.clear()
        self._overlays.clear()

    def adjust(self, position: int, removed: int, added: int) -> None:
        """Follow a text change of ``removed`` chars replaced by ``added`` at ``position``."""
        if removed == added:
            return
        delta = added - removed
        cut_end = position + removed
        for name, values in self._props.items():
            self._props[name] = {
                pos if pos < position else pos + delta
                for pos in values
                if pos < position or pos >= cut_end
            }

        moved: dict[int, Composition] = {}
        for comp in self._compositions.values():
            if comp.end <= position:
                moved[comp.start] = comp
            elif comp.start >= cut_end:
                comp.start += delta
                comp.end += delta
                moved[comp.start] = comp
            # anything straddling the change is broken text and dropped
        self._compositions = moved

        kept: list[Overlay] = []
        for overlay in self._overlays:
            overlay.start = _map_position(overlay.start, position, removed, added, advance=True)
            overlay.end = _map_position(overlay.end, position, removed, added, advance=False)
            if overlay.end > overlay.start:
                kept.append(overlay)
        self._overlays = kept

        for anchor in list(self._anchors):
            anchor.position = _map_position(anchor.position, position, removed, added, advance=anchor.advance)

    def snapshot(self) -> dict[str, object]:
        return {
            **{name: tuple(sorted(values)) for name, values in self._props.items()},
            "compositions": tuple(
                (comp.start, comp.end, comp.glyph) for comp in self.compositions()
            ),
        }
