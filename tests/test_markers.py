from orgreveal.core.markers import DECORATED, HIDDEN, VisibilityMarkers


def test_add_and_remove_report_changes() -> None:
    markers = VisibilityMarkers()
    assert markers.add(HIDDEN, 0, 2)
    assert not markers.add(HIDDEN, 0, 2)
    assert markers.runs(HIDDEN, 0, 10) == [(0, 2)]
    assert markers.remove(HIDDEN, 1, 2)
    assert not markers.remove(HIDDEN, 1, 2)
    assert markers.positions(HIDDEN) == [0]


def test_runs_are_contiguous_and_clipped() -> None:
    markers = VisibilityMarkers()
    markers.add(DECORATED, 2, 5)
    markers.add(DECORATED, 7, 9)
    assert markers.runs(DECORATED, 0, 20) == [(2, 5), (7, 9)]
    assert markers.runs(DECORATED, 3, 8) == [(3, 5), (7, 8)]


def test_insertion_before_shifts_properties_and_compositions() -> None:
    markers = VisibilityMarkers()
    markers.add(HIDDEN, 4, 5)
    markers.compose(10, 16, "α")
    markers.adjust(0, 0, 3)
    assert markers.positions(HIDDEN) == [7]
    comp = markers.composition_at(13)
    assert comp is not None and (comp.start, comp.end, comp.glyph) == (13, 19, "α")


def test_deleted_text_takes_its_markers_along() -> None:
    markers = VisibilityMarkers()
    markers.add(HIDDEN, 0, 1)
    markers.add(HIDDEN, 5, 6)
    markers.compose(2, 4, "→")
    markers.adjust(0, 3, 0)
    assert markers.positions(HIDDEN) == [2]
    assert markers.compositions() == []


def test_same_length_change_leaves_markers_alone() -> None:
    markers = VisibilityMarkers()
    markers.add(HIDDEN, 3, 4)
    markers.adjust(3, 1, 1)
    assert markers.positions(HIDDEN) == [3]


def test_anchor_follows_edits() -> None:
    markers = VisibilityMarkers()
    anchor = markers.anchor(5)
    markers.adjust(0, 0, 2)
    assert anchor.position == 7
    markers.adjust(7, 0, 1)
    assert anchor.position == 8
    markers.adjust(10, 0, 4)
    assert anchor.position == 8
    markers.adjust(6, 4, 0)
    assert anchor.position == 6


def test_anchor_without_advance_stays_before_insertion() -> None:
    markers = VisibilityMarkers()
    anchor = markers.anchor(5, advance=False)
    markers.adjust(5, 0, 3)
    assert anchor.position == 5


def test_foreign_overlays_are_reported_and_follow_edits() -> None:
    markers = VisibilityMarkers()
    overlay = markers.add_overlay(10, 20, "preview")
    assert markers.has_foreign_overlay(10)
    assert not markers.has_foreign_overlay(20)
    markers.adjust(0, 0, 5)
    assert (overlay.start, overlay.end) == (15, 25)
    markers.remove_overlay(overlay)
    assert not markers.has_foreign_overlay(15)


def test_clear_drops_range() -> None:
    markers = VisibilityMarkers()
    markers.add(HIDDEN, 0, 10)
    markers.add(DECORATED, 0, 10)
    markers.compose(3, 5, "π")
    markers.clear(2, 6)
    assert markers.runs(HIDDEN, 0, 10) == [(0, 2), (6, 10)]
    assert markers.runs(DECORATED, 0, 10) == [(0, 2), (6, 10)]
    assert markers.composition_at(3) is None
    snapshot = markers.snapshot()
    assert snapshot["compositions"] == ()
