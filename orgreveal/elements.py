"""Parsed org elements and the descriptors derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ElementKind(str, Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKE_THROUGH = "strike-through"
    VERBATIM = "verbatim"
    CODE = "code"
    SUBSCRIPT = "subscript"
    SUPERSCRIPT = "superscript"
    ENTITY = "entity"
    LINK = "link"
    KEYWORD = "keyword"
    LATEX_FRAGMENT = "latex-fragment"
    LATEX_ENVIRONMENT = "latex-environment"


class DescriptorTag(str, Enum):
    EMPHASIS = "emphasis"
    SCRIPT = "script"
    ENTITY = "entity"
    LINK = "link"
    KEYWORD = "keyword"
    MATH = "math"


EMPHASIS_KINDS = frozenset(
    {
        ElementKind.BOLD,
        ElementKind.ITALIC,
        ElementKind.UNDERLINE,
        ElementKind.STRIKE_THROUGH,
        ElementKind.VERBATIM,
        ElementKind.CODE,
    }
)
SCRIPT_KINDS = frozenset({ElementKind.SUBSCRIPT, ElementKind.SUPERSCRIPT})
MATH_KINDS = frozenset({ElementKind.LATEX_FRAGMENT, ElementKind.LATEX_ENVIRONMENT})

_TAG_BY_KIND: dict[ElementKind, DescriptorTag] = {
    **{kind: DescriptorTag.EMPHASIS for kind in EMPHASIS_KINDS},
    **{kind: DescriptorTag.SCRIPT for kind in SCRIPT_KINDS},
    **{kind: DescriptorTag.MATH for kind in MATH_KINDS},
    ElementKind.ENTITY: DescriptorTag.ENTITY,
    ElementKind.LINK: DescriptorTag.LINK,
    ElementKind.KEYWORD: DescriptorTag.KEYWORD,
}

# Tags whose delimiters are hidden around a displayed interior.
PARTIAL_TAGS = frozenset({DescriptorTag.EMPHASIS, DescriptorTag.SCRIPT, DescriptorTag.LINK})


def tag_for_kind(kind: Any) -> DescriptorTag | None:
    try:
        return _TAG_BY_KIND.get(ElementKind(kind))
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class Element:
    """An org object as reported by the parser. Never mutated by the core."""

    kind: ElementKind
    begin: int
    end: int
    post_blank: int = 0
    contents_begin: int | None = None
    contents_end: int | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def prop(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    @property
    def text_end(self) -> int:
        """End offset without the trailing blanks."""
        return self.end - self.post_blank

    def contains(self, position: int) -> bool:
        return self.begin <= position < self.text_end

    def shifted(self, delta: int) -> "Element":
        if not delta:
            return self

        def _move(value: int | None) -> int | None:
            return None if value is None else value + delta

        return Element(
            kind=self.kind,
            begin=self.begin + delta,
            end=self.end + delta,
            post_blank=self.post_blank,
            contents_begin=_move(self.contents_begin),
            contents_end=_move(self.contents_end),
            properties=self.properties,
        )


@dataclass(frozen=True, slots=True)
class ElementDescriptor:
    tag: DescriptorTag
    start: int
    end: int
    visible_start: int | None = None
    visible_end: int | None = None

    @property
    def is_partial(self) -> bool:
        return self.visible_start is not None and self.visible_end is not None

    def delimiter_ranges(self) -> list[tuple[int, int]]:
        """Ranges hidden in the resting state: ``[start, visible_start)`` and ``[visible_end, end)``."""
        if not self.is_partial:
            return []
        return [(self.start, int(self.visible_start)), (int(self.visible_end), self.end)]
