from orgreveal.core.bounds import compute_descriptor
from orgreveal.elements import DescriptorTag, Element, ElementKind


def test_emphasis_hides_one_char_on_each_side() -> None:
    element = Element(kind=ElementKind.BOLD, begin=0, end=7, post_blank=1, contents_begin=1, contents_end=5)
    descriptor = compute_descriptor(element)
    assert descriptor is not None
    assert descriptor.tag is DescriptorTag.EMPHASIS
    assert (descriptor.start, descriptor.end) == (0, 6)
    assert (descriptor.visible_start, descriptor.visible_end) == (1, 5)
    assert descriptor.delimiter_ranges() == [(0, 1), (5, 6)]


def test_script_uses_contents_span() -> None:
    element = Element(kind=ElementKind.SUBSCRIPT, begin=1, end=5, contents_begin=3, contents_end=4)
    descriptor = compute_descriptor(element)
    assert descriptor is not None
    assert descriptor.tag is DescriptorTag.SCRIPT
    assert descriptor.delimiter_ranges() == [(1, 3), (4, 5)]


def test_script_without_contents_is_rejected() -> None:
    element = Element(kind=ElementKind.SUPERSCRIPT, begin=1, end=3)
    assert compute_descriptor(element) is None


def test_link_with_description_keeps_description_visible() -> None:
    # [[https://x][X]]
    element = Element(kind=ElementKind.LINK, begin=0, end=16, contents_begin=13, contents_end=14)
    descriptor = compute_descriptor(element)
    assert descriptor is not None
    assert descriptor.delimiter_ranges() == [(0, 13), (14, 16)]


def test_link_without_description_hides_double_brackets() -> None:
    # [[https://x]]
    element = Element(kind=ElementKind.LINK, begin=0, end=13)
    descriptor = compute_descriptor(element)
    assert descriptor is not None
    assert (descriptor.visible_start, descriptor.visible_end) == (2, 11)


def test_entity_and_keyword_are_atomic() -> None:
    entity = Element(kind=ElementKind.ENTITY, begin=4, end=11, post_blank=1)
    keyword = Element(kind=ElementKind.KEYWORD, begin=0, end=15)
    entity_desc = compute_descriptor(entity)
    keyword_desc = compute_descriptor(keyword)
    assert entity_desc is not None and not entity_desc.is_partial
    assert (entity_desc.start, entity_desc.end) == (4, 10)
    assert keyword_desc is not None and keyword_desc.delimiter_ranges() == []


def test_math_owned_by_foreign_overlay_is_skipped() -> None:
    element = Element(kind=ElementKind.LATEX_FRAGMENT, begin=2, end=9)
    assert compute_descriptor(element, foreign_overlay_at=lambda pos: pos == 2) is None
    descriptor = compute_descriptor(element, foreign_overlay_at=lambda pos: False)
    assert descriptor is not None and descriptor.tag is DescriptorTag.MATH


def test_malformed_elements_yield_none() -> None:
    assert compute_descriptor(None) is None
    assert compute_descriptor(Element(kind=ElementKind.BOLD, begin=-1, end=4)) is None
    assert compute_descriptor(Element(kind=ElementKind.BOLD, begin=5, end=3)) is None
    # interior would run past the span
    assert compute_descriptor(Element(kind=ElementKind.LINK, begin=0, end=6, contents_begin=2, contents_end=9)) is None
