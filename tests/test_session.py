from orgreveal.core.markers import HIDDEN, VisibilityMarkers
from orgreveal.core.session import RevealSession
from orgreveal.elements import Element, ElementKind
from orgreveal.settings_manager import RevealSettingsManager
from tests.reveal_fixtures import FauxEvents, FauxParser, FauxScheduler, FauxTimer, bold, hide_delimiters


def make_session(overrides: dict | None = None) -> tuple[RevealSession, FauxEvents, VisibilityMarkers]:
    elements = [bold(0, 6), Element(kind=ElementKind.ENTITY, begin=8, end=14, properties={"utf8": "α"})]
    markers = VisibilityMarkers()
    hide_delimiters(markers, elements[:1])
    markers.compose(8, 14, "α")
    events = FauxEvents()
    session = RevealSession(
        parser=FauxParser(elements),
        markers=markers,
        scheduler=FauxScheduler(),
        events=events,
        settings=RevealSettingsManager.in_memory(overrides),
        timer=FauxTimer(),
    )
    return session, events, markers


def test_disabled_session_ignores_movement() -> None:
    session, events, markers = make_session()
    events.move(2)
    assert not session.enabled
    assert markers.positions(HIDDEN) == [0, 5]
    assert not session.reveal_at_point()


def test_enable_disable_toggle() -> None:
    session, events, markers = make_session()
    assert session.toggle()
    events.move(2)
    assert markers.positions(HIDDEN) == []
    assert not session.toggle()
    assert markers.positions(HIDDEN) == [0, 5]
    assert events.handlers == []


def test_entities_follow_settings() -> None:
    session, events, markers = make_session()
    session.enable()
    events.move(9)
    assert markers.composition_at(9) is not None

    session.settings.set("reveal.entities", True)
    events.move(10)
    assert markers.composition_at(9) is None
    events.move(20)
    comp = markers.composition_at(9)
    assert comp is not None and comp.glyph == "α"


def test_settings_change_reconfigures_trigger() -> None:
    session, events, _markers = make_session()
    session.enable()
    assert session.tracker.listening
    session.settings.set("reveal.trigger", "manual")
    assert session.tracker.trigger == "manual"
    assert not session.tracker.listening

    events.position = 3
    assert session.reveal_at_point()
    session.stop_manual()
    assert not session.tracker.revealed


def test_disabled_session_stops_following_settings() -> None:
    session, _events, _markers = make_session()
    session.enable()
    session.disable()
    session.settings.set("reveal.trigger", "on_change")
    assert session.tracker.trigger == "always"


def test_is_mutating_is_false_between_toggles() -> None:
    session, events, _markers = make_session()
    session.enable()
    events.move(2)
    assert not session.is_mutating
