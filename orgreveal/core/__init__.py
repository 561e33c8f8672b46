from __future__ import annotations

from .bounds import compute_descriptor
from .eligibility import EligibilityFilter
from .markers import DECORATED, HIDDEN, Anchor, Composition, Overlay, VisibilityMarkers
from .session import RevealSession
from .toggler import RenderScheduler, VisibilityToggler
from .tracker import CommandEvent, CommandEventSource, CursorTracker, ElementParser, RevealTimer, TrackerState

__all__ = [
    "Anchor",
    "CommandEvent",
    "CommandEventSource",
    "Composition",
    "CursorTracker",
    "DECORATED",
    "ElementParser",
    "EligibilityFilter",
    "HIDDEN",
    "Overlay",
    "RenderScheduler",
    "RevealSession",
    "RevealTimer",
    "TrackerState",
    "VisibilityMarkers",
    "VisibilityToggler",
    "compute_descriptor",
]
