"""Locate org objects in plain text.

This is a boundary adapter for the reveal core: it recognises exactly the
object kinds the core toggles and reports them with org-element style offsets
(``begin``/``end`` including trailing blanks, ``post_blank``, ``contents``).
It is not a general org parser.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable

from orgreveal.elements import Element, ElementKind
from orgreveal.entities import entity_glyph

EMPHASIS_MARKERS: dict[str, ElementKind] = {
    "*": ElementKind.BOLD,
    "/": ElementKind.ITALIC,
    "_": ElementKind.UNDERLINE,
    "+": ElementKind.STRIKE_THROUGH,
    "=": ElementKind.VERBATIM,
    "~": ElementKind.CODE,
}
OPAQUE_EMPHASIS = frozenset({ElementKind.VERBATIM, ElementKind.CODE})

# org-emphasis-regexp-components: pre, post, border
_EMPHASIS_RE = re.compile(
    r"(?:^|(?<=[\s\-({'\"]))"
    r"(?P<marker>[*/_+=~])"
    r"(?P<body>\S|\S.*?\S)"
    r"(?P=marker)"
    r"(?=[\s\-.,:!?;'\")}\[\\]|$)"
)
_KEYWORD_RE = re.compile(r"^[ \t]*#\+(?P<key>[^\s:]+):(?:[ \t]+(?P<value>.*))?$")
_BRACKET_LINK_RE = re.compile(r"\[\[(?P<path>[^\[\]]+)\](?:\[(?P<desc>[^\[\]]*(?:\[[^\[\]]*\][^\[\]]*)*)\])?\]")
_PLAIN_LINK_RE = re.compile(r"\b(?P<type>https?|ftp|mailto|file|news|doi):[^\s<>\[\]()\"']+[^\s<>\[\]()\"'.,;:!?]")
_LINK_TYPE_RE = re.compile(r"^(?P<type>[A-Za-z][\w+-]*):")
_ENTITY_RE = re.compile(r"\\(?P<name>[A-Za-z]+)(?:(?P<braces>\{\})|(?![A-Za-z]))")
_LATEX_FRAGMENT_RE = re.compile(
    r"\\\((?:.*?)\\\)"
    r"|\\\[(?:.*?)\\\]"
    r"|\$\$(?:.+?)\$\$"
    r"|(?<![\w$])\$(?=[^\s$])(?:[^$]*?[^\s$])?\$(?![\w$])"
)
_SCRIPT_RE = re.compile(
    r"(?<=[^\s_^])(?P<marker>[_^])"
    r"(?:\{(?P<braced>[^{}\n]*)\}|(?P<word>[+-]?[A-Za-z0-9]+(?:[.,][A-Za-z0-9]+)*))"
)
_ENV_BEGIN_RE = re.compile(r"[ \t]*\\begin\{(?P<name>[A-Za-z]+\*?)\}")
_ENV_END_RE = re.compile(r"[ \t]*\\end\{(?P<name>[A-Za-z]+\*?)\}[ \t]*")


def _post_blank(text: str, end: int) -> int:
    count = 0
    while end + count < len(text) and text[end + count] in " \t":
        count += 1
    return count


def _make(
    kind: ElementKind,
    text: str,
    offset: int,
    begin: int,
    end: int,
    *,
    contents: tuple[int, int] | None = None,
    **properties,
) -> Element:
    blanks = _post_blank(text, end)
    return Element(
        kind=kind,
        begin=offset + begin,
        end=offset + end + blanks,
        post_blank=blanks,
        contents_begin=offset + contents[0] if contents else None,
        contents_end=offset + contents[1] if contents else None,
        properties=properties,
    )


class OrgInlineScanner:
    def scan(self, line: str, offset: int = 0) -> list[Element]:
        """All reveal-relevant objects on one line, offsets shifted by ``offset``."""
        keyword = _KEYWORD_RE.match(line)
        if keyword:
            return [
                Element(
                    kind=ElementKind.KEYWORD,
                    begin=offset + keyword.start(),
                    end=offset + len(line),
                    properties={"key": keyword.group("key"), "value": keyword.group("value") or ""},
                )
            ]

        found: list[Element] = []
        opaque: list[tuple[int, int]] = []
        links: list[tuple[int, int]] = []
        descriptions: list[tuple[int, int]] = []

        for match in _LATEX_FRAGMENT_RE.finditer(line):
            found.append(_make(ElementKind.LATEX_FRAGMENT, line, offset, match.start(), match.end()))
            opaque.append((match.start(), match.end()))

        for match in _BRACKET_LINK_RE.finditer(line):
            if _inside(match.start(), opaque):
                continue
            path = match.group("path")
            type_match = _LINK_TYPE_RE.match(path)
            contents = match.span("desc") if match.group("desc") is not None else None
            found.append(
                _make(
                    ElementKind.LINK,
                    line,
                    offset,
                    match.start(),
                    match.end(),
                    contents=contents,
                    type=type_match.group("type") if type_match else "fuzzy",
                    format="bracket",
                    path=path,
                    display_override=False,
                )
            )
            # The target is not markup; the description is.
            opaque.append(match.span("path"))
            links.append(match.span())
            if contents is not None:
                descriptions.append(contents)

        for match in _PLAIN_LINK_RE.finditer(line):
            if _inside(match.start(), opaque, inclusive=True):
                continue
            found.append(
                _make(
                    ElementKind.LINK,
                    line,
                    offset,
                    match.start(),
                    match.end(),
                    type=match.group("type"),
                    format="plain",
                    path=match.group(0),
                    display_override=False,
                )
            )
            opaque.append(match.span())

        emphasis = list(self._emphasis(line, 0, len(line), opaque + links))
        for lo, hi in descriptions:
            # A description starts and ends like a line of its own.
            local = [(a - lo, b - lo) for a, b in opaque]
            emphasis.extend(
                (lo + start, lo + end, kind) for start, end, kind in self._emphasis(line[lo:hi], 0, hi - lo, local)
            )
        for match_start, match_end, kind in emphasis:
            found.append(
                _make(kind, line, offset, match_start, match_end, contents=(match_start + 1, match_end - 1))
            )
            if kind in OPAQUE_EMPHASIS:
                opaque.append((match_start + 1, match_end - 1))
        delimiters = {pos for start, end, _ in emphasis for pos in (start, end - 1)}

        for match in _ENTITY_RE.finditer(line):
            glyph = entity_glyph(match.group("name"))
            if glyph is None or _inside(match.start(), opaque, inclusive=True):
                continue
            found.append(
                _make(
                    ElementKind.ENTITY,
                    line,
                    offset,
                    match.start(),
                    match.end(),
                    name=match.group("name"),
                    utf8=glyph,
                    use_brackets=bool(match.group("braces")),
                )
            )
            opaque.append(match.span())

        for match in _SCRIPT_RE.finditer(line):
            if match.start() in delimiters or _inside(match.start(), opaque, inclusive=True):
                continue
            kind = ElementKind.SUBSCRIPT if match.group("marker") == "_" else ElementKind.SUPERSCRIPT
            group = "braced" if match.group("braced") is not None else "word"
            found.append(
                _make(
                    kind,
                    line,
                    offset,
                    match.start(),
                    match.end(),
                    contents=match.span(group),
                    use_brackets=group == "braced",
                )
            )

        found.sort(key=lambda element: (element.begin, -element.end))
        return found

    def _emphasis(
        self, line: str, start: int, end: int, opaque: list[tuple[int, int]]
    ) -> Iterable[tuple[int, int, ElementKind]]:
        position = start
        while position < end:
            match = _EMPHASIS_RE.search(line, position, end)
            if match is None:
                return
            if _inside(match.start(), opaque, inclusive=True):
                position = match.start() + 1
                continue
            kind = EMPHASIS_MARKERS[match.group("marker")]
            yield match.start(), match.end(), kind
            if kind not in OPAQUE_EMPHASIS:
                yield from self._emphasis(line, match.start() + 1, match.end() - 1, opaque)
            position = match.end()


def _inside(position: int, spans: Iterable[tuple[int, int]], *, inclusive: bool = False) -> bool:
    for lo, hi in spans:
        if (lo <= position < hi) if inclusive else (lo < position < hi):
            return True
    return False


class TextElementParser:
    """``element_at`` over a whole document supplied by ``text_provider``.

    With a ``revision_provider`` the text and its LaTeX environments are read
    once per document revision instead of on every lookup.
    """

    def __init__(
        self,
        text_provider: Callable[[], str],
        scanner: OrgInlineScanner | None = None,
        *,
        revision_provider: Callable[[], int] | None = None,
    ) -> None:
        self.text_provider = text_provider
        self.scanner = scanner or OrgInlineScanner()
        self.revision_provider = revision_provider
        self._cached_revision: int | None = None
        self._cached_text = ""
        self._cached_environments: list[Element] = []

    def environments(self, text: str | None = None) -> list[Element]:
        """Multi-line ``\\begin{..}`` / ``\\end{..}`` spans, closing lines included."""
        source = self.text_provider() if text is None else text
        out: list[Element] = []
        open_name = ""
        open_start = 0
        position = 0
        for line in source.split("\n"):
            line_end = position + len(line)
            if not open_name:
                begin = _ENV_BEGIN_RE.match(line)
                if begin:
                    open_name, open_start = begin.group("name"), position
            else:
                end = _ENV_END_RE.fullmatch(line)
                if end and end.group("name") == open_name:
                    out.append(
                        Element(
                            kind=ElementKind.LATEX_ENVIRONMENT,
                            begin=open_start,
                            end=min(line_end + 1, len(source)),
                            properties={"name": open_name},
                        )
                    )
                    open_name = ""
            position = line_end + 1
        return out

    def _snapshot(self) -> tuple[str, list[Element]]:
        if self.revision_provider is None:
            text = self.text_provider()
            return text, self.environments(text)
        revision = self.revision_provider()
        if revision != self._cached_revision:
            self._cached_text = self.text_provider()
            self._cached_environments = self.environments(self._cached_text)
            self._cached_revision = revision
        return self._cached_text, self._cached_environments

    def element_at(self, position: int) -> Element | None:
        text, environments = self._snapshot()
        if position < 0 or position > len(text):
            return None
        for environment in environments:
            if environment.begin <= position < environment.end:
                return environment

        line_start = text.rfind("\n", 0, position) + 1
        line_end = text.find("\n", position)
        if line_end < 0:
            line_end = len(text)
        line = text[line_start:line_end]

        best: Element | None = None
        for element in self.scanner.scan(line, line_start):
            end = element.end
            if element.kind == ElementKind.KEYWORD and line_end < len(text):
                # A keyword owns its line, newline included.
                end += 1
                element = Element(
                    kind=element.kind,
                    begin=element.begin,
                    end=end,
                    properties=element.properties,
                )
            if not element.begin <= position < end:
                continue
            if best is None or (end - element.begin) < (best.end - best.begin):
                best = element
        return best
