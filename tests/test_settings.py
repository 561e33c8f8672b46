import json
import logging
from pathlib import Path

import pytest

from orgreveal.elements import EMPHASIS_KINDS, MATH_KINDS, SCRIPT_KINDS, ElementKind
from orgreveal.settings_manager import RevealSettingsManager
from orgreveal.settings_models import SettingsPaths, default_org_reveal_settings
from orgreveal.settings_store import JsonSettingsStore, SettingsStoreError, deep_merge_defaults, dot_get, dot_set


def test_dot_helpers() -> None:
    data: dict = {}
    dot_set(data, "reveal.trigger", "manual")
    assert data == {"reveal": {"trigger": "manual"}}
    assert dot_get(data, "reveal.trigger") == "manual"
    assert dot_get(data, "reveal.missing", 3) == 3
    with pytest.raises(ValueError):
        dot_set(data, "", 1)


def test_merge_keeps_explicit_values() -> None:
    merged = deep_merge_defaults({"reveal": {"delay_ms": 200}}, default_org_reveal_settings())
    assert merged["reveal"]["delay_ms"] == 200
    assert merged["reveal"]["trigger"] == "always"
    assert merged["org"]["hidden_keywords"] == ["title", "author", "email", "date"]


def test_missing_file_loads_defaults_and_saves(tmp_path: Path) -> None:
    manager = RevealSettingsManager.for_app_dir(tmp_path / "app")
    assert manager.store.dirty
    manager.set("reveal.delay_ms", 300)
    manager.save()
    saved = json.loads((tmp_path / "app" / "org-reveal.json").read_text(encoding="utf-8"))
    assert saved["reveal"]["delay_ms"] == 300

    reloaded = RevealSettingsManager.for_app_dir(tmp_path / "app")
    assert reloaded.delay_ms == 300
    assert not reloaded.store.dirty


def test_broken_json_falls_back_to_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    paths = SettingsPaths(app_dir=tmp_path)
    paths.settings_file.write_text("{not json", encoding="utf-8")
    store = JsonSettingsStore(paths.settings_file, default_org_reveal_settings())
    with caplog.at_level(logging.WARNING, logger="orgreveal.settings_store"):
        data = store.load()
    assert data["reveal"]["trigger"] == "always"
    assert store.last_error
    assert any("Could not read settings file" in rec.getMessage() for rec in caplog.records)


def test_non_object_root_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "org-reveal.json"
    path.write_text("[1, 2]", encoding="utf-8")
    store = JsonSettingsStore(path, default_org_reveal_settings())
    store.load()
    assert store.last_error is not None and "JSON object" in store.last_error


def test_save_failure_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonSettingsStore(blocker / "org-reveal.json", default_org_reveal_settings())
    with pytest.raises(SettingsStoreError):
        store.save()


def test_in_memory_store_is_not_persistent() -> None:
    manager = RevealSettingsManager.in_memory({"reveal.math": True})
    assert not manager.store.persistent
    assert manager.get("reveal.math") is True
    manager.save()


def test_default_eligible_kinds_are_emphasis_only() -> None:
    assert RevealSettingsManager.in_memory().eligible_kinds() == EMPHASIS_KINDS


def test_eligible_kinds_require_display_setting() -> None:
    manager = RevealSettingsManager.in_memory(
        {
            "reveal.submarkers": True,
            "reveal.entities": True,
            "reveal.links": True,
            "reveal.keywords": True,
            "reveal.math": True,
        }
    )
    kinds = manager.eligible_kinds()
    assert SCRIPT_KINDS <= kinds
    assert MATH_KINDS <= kinds
    assert {ElementKind.ENTITY, ElementKind.LINK, ElementKind.KEYWORD} <= kinds

    manager.set("org.hide_emphasis_markers", False)
    manager.set("org.pretty_entities", False)
    manager.set("org.link_descriptive", False)
    manager.set("org.hidden_keywords", [])
    kinds = manager.eligible_kinds()
    assert kinds == MATH_KINDS


def test_invalid_trigger_and_delay_are_coerced(caplog: pytest.LogCaptureFixture) -> None:
    manager = RevealSettingsManager.in_memory({"reveal.trigger": "sometimes", "reveal.delay_ms": -5})
    with caplog.at_level(logging.WARNING, logger="orgreveal.settings_manager"):
        assert manager.trigger == "always"
        assert manager.delay_ms == 0
    assert len(caplog.records) == 2

    manager.set("reveal.delay_ms", "soon")
    assert manager.delay_ms == 0
    manager.set("reveal.trigger", "ON_CHANGE")
    assert manager.trigger == "on_change"


def test_hidden_keywords_are_lowercased() -> None:
    manager = RevealSettingsManager.in_memory({"org.hidden_keywords": ["TITLE", " Author ", ""]})
    assert manager.hidden_keywords() == frozenset({"title", "author"})


def test_listeners_receive_changed_key() -> None:
    manager = RevealSettingsManager.in_memory()
    seen: list[str] = []
    manager.add_listener(seen.append)
    manager.set("reveal.links", True)
    manager.set("reveal.links", True)
    manager.remove_listener(seen.append)
    manager.set("reveal.links", False)
    assert seen == ["reveal.links"]
