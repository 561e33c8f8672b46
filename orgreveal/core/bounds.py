"""Derive element descriptors: outer span and the interior left displayed."""

from __future__ import annotations

import logging
from typing import Callable

from orgreveal.elements import DescriptorTag, Element, ElementDescriptor, tag_for_kind

logger = logging.getLogger(__name__)

# Answers "is a span starting here already drawn by another layer?".
OverlayProbe = Callable[[int], bool]

EMPHASIS_DELIMITER_WIDTH = 1
LINK_BRACKET_WIDTH = 2


def compute_descriptor(
    element: Element | None,
    *,
    foreign_overlay_at: OverlayProbe | None = None,
) -> ElementDescriptor | None:
    if element is None:
        return None
    tag = tag_for_kind(element.kind)
    if tag is None:
        logger.debug("No bounds for unrecognized kind %r", element.kind)
        return None
    if not _valid_offset(element.begin) or not _valid_offset(element.end):
        logger.debug("Malformed %s element: begin=%r end=%r", tag.value, element.begin, element.end)
        return None

    start = element.begin
    end = element.end - max(0, int(element.post_blank or 0))
    if end < start:
        logger.debug("Malformed %s element: end %d before start %d", tag.value, end, start)
        return None

    if tag is DescriptorTag.EMPHASIS:
        visible = (start + EMPHASIS_DELIMITER_WIDTH, end - EMPHASIS_DELIMITER_WIDTH)
    elif tag is DescriptorTag.SCRIPT:
        visible = _contents_span(element)
        if visible is None:
            logger.debug("Script element at %d carries no contents span", start)
            return None
    elif tag is DescriptorTag.LINK:
        visible = _contents_span(element) or (start + LINK_BRACKET_WIDTH, end - LINK_BRACKET_WIDTH)
    elif tag is DescriptorTag.MATH:
        if foreign_overlay_at is not None and foreign_overlay_at(start):
            logger.debug("Math element at %d is owned by another overlay", start)
            return None
        return ElementDescriptor(tag=tag, start=start, end=end)
    else:
        # entity and keyword toggle as a whole
        return ElementDescriptor(tag=tag, start=start, end=end)

    visible_start, visible_end = visible
    if not start <= visible_start <= visible_end <= end:
        logger.debug(
            "Interior %d-%d outside %s span %d-%d", visible_start, visible_end, tag.value, start, end
        )
        return None
    return ElementDescriptor(
        tag=tag,
        start=start,
        end=end,
        visible_start=visible_start,
        visible_end=visible_end,
    )


def _valid_offset(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _contents_span(element: Element) -> tuple[int, int] | None:
    begin, end = element.contents_begin, element.contents_end
    if not _valid_offset(begin) or not _valid_offset(end):
        return None
    return int(begin), int(end)
