from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TypedDict

RevealTrigger = Literal["always", "on_change", "manual"]
REVEAL_TRIGGERS: tuple[str, ...] = ("always", "on_change", "manual")


class OrgDisplaySettings(TypedDict, total=False):
    hide_emphasis_markers: bool
    pretty_entities: bool
    link_descriptive: bool
    hidden_keywords: list[str]
    prettify_math: bool


class RevealSettings(TypedDict, total=False):
    emphasis: bool
    submarkers: bool
    entities: bool
    links: bool
    keywords: bool
    math: bool
    trigger: RevealTrigger
    delay_ms: int
    manual_linger: bool


class EditorSettings(TypedDict, total=False):
    font_family: str
    font_size: int


class OrgRevealSettings(TypedDict, total=False):
    org: OrgDisplaySettings
    reveal: RevealSettings
    editor: EditorSettings


@dataclass(slots=True, frozen=True)
class SettingsPaths:
    app_dir: Path
    settings_filename: str = "org-reveal.json"
    settings_file: Path = field(init=False)

    def __post_init__(self) -> None:
        app_dir = Path(self.app_dir).expanduser().resolve()
        object.__setattr__(self, "app_dir", app_dir)
        object.__setattr__(self, "settings_file", app_dir / self.settings_filename)


def default_org_reveal_settings() -> OrgRevealSettings:
    defaults: OrgRevealSettings = {
        "org": {
            "hide_emphasis_markers": True,
            "pretty_entities": True,
            "link_descriptive": True,
            "hidden_keywords": ["title", "author", "email", "date"],
            "prettify_math": True,
        },
        "reveal": {
            "emphasis": True,
            "submarkers": False,
            "entities": False,
            "links": False,
            "keywords": False,
            "math": False,
            "trigger": "always",
            "delay_ms": 0,
            "manual_linger": False,
        },
        "editor": {
            "font_family": "monospace",
            "font_size": 11,
        },
    }
    return defaults
