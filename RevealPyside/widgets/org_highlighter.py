"""Org highlighter that derives visibility markers and paints from them."""

from __future__ import annotations

import re
from typing import Iterator

from PySide6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QSyntaxHighlighter,
    QTextBlock,
    QTextBlockUserData,
    QTextCharFormat,
    QTextDocument,
)

from orgreveal.core.bounds import compute_descriptor
from orgreveal.core.markers import DECORATED, HIDDEN, VisibilityMarkers
from orgreveal.elements import (
    EMPHASIS_KINDS,
    MATH_KINDS,
    SCRIPT_KINDS,
    Element,
    ElementKind,
)
from orgreveal.entities import entity_glyph
from orgreveal.services.inline_scanner import OrgInlineScanner
from orgreveal.settings_manager import RevealSettingsManager

_MATH_MACRO_RE = re.compile(r"\\(?P<name>[A-Za-z]+)(?![A-Za-z])")
_ENV_BEGIN_RE = re.compile(r"^[ \t]*\\begin\{(?P<name>[A-Za-z]+\*?)\}")
_KEYWORD_PREFIX_RE = re.compile(r"[ \t]*#\+[^\s:]+:[ \t]*")

STATE_NORMAL = 0
STATE_ENVIRONMENT = 1


class OrgBlockData(QTextBlockUserData):
    def __init__(self, *, text: str = "", fontified: bool = False, in_math: bool = False, environment: str = ""):
        super().__init__()
        self.text = text
        self.fontified = fontified
        self.in_math = in_math
        self.environment = environment


class OrgHighlighter(QSyntaxHighlighter):
    """
    Two passes per block, like a font-lock engine:
    - fontify: derive hidden/decorated/composition markers from the text
    - paint: turn markers and element faces into character formats

    A block is fontified once and then only repainted until its text differs
    from the text it was fontified from, or a rerender is requested, so markers edited by the reveal toggler
    survive Qt's own (sometimes delayed) rehighlight passes.
    """

    def __init__(self, document: QTextDocument, markers: VisibilityMarkers, settings: RevealSettingsManager):
        super().__init__(None)
        self.markers = markers
        self.settings = settings
        self.scanner = OrgInlineScanner()
        self._init_formats()
        # Connected ahead of setDocument(): markers shift before Qt re-highlights
        # the edited blocks.
        document.contentsChange.connect(self.markers.adjust)
        self.setDocument(document)

    def _init_formats(self) -> None:
        self.fmt_bold = QTextCharFormat()
        self.fmt_bold.setFontWeight(QFont.Bold)

        self.fmt_italic = QTextCharFormat()
        self.fmt_italic.setFontItalic(True)

        self.fmt_underline = QTextCharFormat()
        self.fmt_underline.setFontUnderline(True)

        self.fmt_strike = QTextCharFormat()
        self.fmt_strike.setFontStrikeOut(True)

        self.fmt_verbatim = QTextCharFormat()
        self.fmt_verbatim.setForeground(QColor("#D7BA7D"))
        self.fmt_verbatim.setFontFamily("monospace")

        self.fmt_link = QTextCharFormat()
        self.fmt_link.setForeground(QColor("#4FC1FF"))
        self.fmt_link.setFontUnderline(True)

        self.fmt_keyword = QTextCharFormat()
        self.fmt_keyword.setForeground(QColor("#808080"))

        self.fmt_keyword_value = QTextCharFormat()
        self.fmt_keyword_value.setForeground(QColor("#C586C0"))
        self.fmt_keyword_value.setFontWeight(QFont.Bold)

        self.fmt_math = QTextCharFormat()
        self.fmt_math.setForeground(QColor("#B5CEA8"))

        self.fmt_subscript = QTextCharFormat()
        self.fmt_subscript.setVerticalAlignment(QTextCharFormat.AlignSubScript)

        self.fmt_superscript = QTextCharFormat()
        self.fmt_superscript.setVerticalAlignment(QTextCharFormat.AlignSuperScript)

        self.fmt_hidden = QTextCharFormat()
        self.fmt_hidden.setForeground(QBrush(QColor(0, 0, 0, 0)))  # fully transparent
        # Tiny size so hidden delimiters don't leave visible gaps
        self.fmt_hidden.setFontPointSize(0.01)

        # First char of a composition keeps its width; the editor draws the glyph over it.
        self.fmt_glyph_slot = QTextCharFormat()
        self.fmt_glyph_slot.setForeground(QBrush(QColor(0, 0, 0, 0)))

        self.emphasis_formats = {
            ElementKind.BOLD: self.fmt_bold,
            ElementKind.ITALIC: self.fmt_italic,
            ElementKind.UNDERLINE: self.fmt_underline,
            ElementKind.STRIKE_THROUGH: self.fmt_strike,
            ElementKind.VERBATIM: self.fmt_verbatim,
            ElementKind.CODE: self.fmt_verbatim,
        }

    # -------------------------------------------------
    # Render scheduler
    # -------------------------------------------------
    def _blocks_between(self, start: int, end: int) -> Iterator[QTextBlock]:
        doc = self.document()
        if doc is None:
            return
        block = doc.findBlock(max(0, start))
        while block.isValid() and block.position() <= end:
            yield block
            block = block.next()

    @staticmethod
    def _mark_stale(block: QTextBlock) -> None:
        data = block.userData()
        if isinstance(data, OrgBlockData):
            data.fontified = False

    def ensure_rendered(self, start: int, end: int) -> None:
        for block in self._blocks_between(start, end):
            data = block.userData()
            if not isinstance(data, OrgBlockData) or not data.fontified or data.text != block.text():
                self.rehighlightBlock(block)

    def request_rerender(self, start: int, end: int) -> None:
        for block in self._blocks_between(start, end):
            self._mark_stale(block)
            self.rehighlightBlock(block)

    def repaint(self, start: int, end: int) -> None:
        # Fontified blocks only go through the paint pass.
        for block in self._blocks_between(start, end):
            self.rehighlightBlock(block)

    def refresh(self) -> None:
        """Re-derive everything, e.g. after the display settings changed."""
        doc = self.document()
        if doc is None:
            return
        block = doc.begin()
        while block.isValid():
            self._mark_stale(block)
            block = block.next()
        self.rehighlight()

    def is_fontified(self, position: int) -> bool:
        doc = self.document()
        if doc is None:
            return False
        data = doc.findBlock(position).userData()
        return isinstance(data, OrgBlockData) and data.fontified

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------
    def _previous_environment(self) -> str:
        prev_block = self.currentBlock().previous()
        if not prev_block.isValid():
            return ""
        data = prev_block.userData()
        return data.environment if isinstance(data, OrgBlockData) else ""

    def _environment_state(self, text: str) -> tuple[bool, str]:
        """Whether this line is math, and the environment still open after it."""
        open_env = self._previous_environment()
        if open_env:
            if re.match(rf"^[ \t]*\\end\{{{re.escape(open_env)}\}}", text):
                return True, ""
            return True, open_env
        begin = _ENV_BEGIN_RE.match(text)
        if begin:
            name = begin.group("name")
            closes = re.search(rf"\\end\{{{re.escape(name)}\}}", text[begin.end():])
            return True, "" if closes else name
        return False, ""

    def _set_format_range(self, block_start: int, start: int, end: int, fmt: QTextCharFormat) -> None:
        if end > start:
            self.setFormat(start - block_start, end - start, fmt)

    # -------------------------------------------------
    # Fontify
    # -------------------------------------------------
    def _fontify(self, elements: list[Element], block_start: int, block_end: int) -> None:
        self.markers.clear(block_start, block_end + 1)
        settings = self.settings
        hidden_keywords = settings.hidden_keywords()
        for element in elements:
            kind = element.kind
            if kind in EMPHASIS_KINDS:
                if settings.hide_emphasis_markers:
                    self._hide_delimiters(element)
            elif kind in SCRIPT_KINDS:
                if settings.pretty_entities:
                    self._hide_delimiters(element)
            elif kind == ElementKind.ENTITY:
                if settings.pretty_entities:
                    self.markers.compose(element.begin, element.text_end, str(element.prop("utf8") or ""))
            elif kind == ElementKind.LINK:
                self._fontify_link(element)
            elif kind == ElementKind.KEYWORD:
                if str(element.prop("key") or "").lower() in hidden_keywords:
                    prefix = _KEYWORD_PREFIX_RE.match(self.currentBlock().text())
                    if prefix:
                        self.markers.add(HIDDEN, element.begin, block_start + prefix.end())
            elif kind in MATH_KINDS:
                if settings.prettify_math:
                    self._compose_math(element, block_start)

    def _hide_delimiters(self, element: Element) -> None:
        descriptor = compute_descriptor(element)
        if descriptor is None:
            return
        for lo, hi in descriptor.delimiter_ranges():
            self.markers.add(HIDDEN, lo, hi)

    def _fontify_link(self, element: Element) -> None:
        if element.prop("format") == "plain" or not self.settings.link_descriptive:
            self.markers.add(DECORATED, element.begin, element.text_end)
            return
        descriptor = compute_descriptor(element)
        if descriptor is None:
            return
        for lo, hi in descriptor.delimiter_ranges():
            self.markers.add(HIDDEN, lo, hi)
        self.markers.add(DECORATED, int(descriptor.visible_start), int(descriptor.visible_end))

    def _compose_math(self, element: Element, block_start: int) -> None:
        text = self.currentBlock().text()
        lo = element.begin - block_start
        hi = min(len(text), element.text_end - block_start)
        for match in _MATH_MACRO_RE.finditer(text, max(0, lo), max(0, hi)):
            glyph = entity_glyph(match.group("name"))
            if glyph:
                self.markers.compose(block_start + match.start(), block_start + match.end(), glyph)

    # -------------------------------------------------
    # Paint
    # -------------------------------------------------
    def _paint(self, elements: list[Element], block_start: int, block_end: int) -> None:
        for element in elements:
            kind = element.kind
            fmt = self.emphasis_formats.get(kind)
            if fmt is not None:
                self._set_format_range(block_start, element.begin, element.text_end, fmt)
            elif kind == ElementKind.SUBSCRIPT and element.contents_begin is not None:
                self._set_format_range(block_start, element.contents_begin, element.contents_end, self.fmt_subscript)
            elif kind == ElementKind.SUPERSCRIPT and element.contents_begin is not None:
                self._set_format_range(block_start, element.contents_begin, element.contents_end, self.fmt_superscript)
            elif kind == ElementKind.KEYWORD:
                self._set_format_range(block_start, element.begin, block_end, self.fmt_keyword)
                prefix = _KEYWORD_PREFIX_RE.match(self.currentBlock().text())
                if prefix:
                    self._set_format_range(block_start, block_start + prefix.end(), block_end, self.fmt_keyword_value)
            elif kind in MATH_KINDS:
                self._set_format_range(block_start, element.begin, min(block_end, element.text_end), self.fmt_math)

        for lo, hi in self.markers.runs(DECORATED, block_start, block_end):
            self._set_format_range(block_start, lo, hi, self.fmt_link)
        for comp in self.markers.compositions(block_start, block_end):
            self._set_format_range(block_start, comp.start, comp.start + 1, self.fmt_glyph_slot)
            self._set_format_range(block_start, comp.start + 1, min(comp.end, block_end), self.fmt_hidden)
        for lo, hi in self.markers.runs(HIDDEN, block_start, block_end):
            self._set_format_range(block_start, lo, hi, self.fmt_hidden)

    # -------------------------------------------------
    # Main
    # -------------------------------------------------
    def highlightBlock(self, text: str):
        block = self.currentBlock()
        block_start = block.position()
        block_end = block_start + len(text)

        in_math, open_env = self._environment_state(text)
        if in_math:
            elements = [Element(kind=ElementKind.LATEX_ENVIRONMENT, begin=block_start, end=block_end)]
        else:
            elements = self.scanner.scan(text, block_start)

        data = block.userData()
        current = (
            isinstance(data, OrgBlockData)
            and data.fontified
            and data.text == text
            and data.in_math == in_math
            and data.environment == open_env
        )
        if not current:
            self._fontify(elements, block_start, block_end)

        self._paint(elements, block_start, block_end)
        self.setCurrentBlockState(STATE_ENVIRONMENT if open_env else STATE_NORMAL)
        self.setCurrentBlockUserData(OrgBlockData(text=text, fontified=True, in_math=in_math, environment=open_env))
