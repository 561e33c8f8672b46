"""PySide widgets hosting org markup reveal."""

from .org_editor import EditorCommandEvents, OrgEditor, QtRevealTimer
from .org_highlighter import OrgBlockData, OrgHighlighter

__all__ = ["EditorCommandEvents", "OrgBlockData", "OrgEditor", "OrgHighlighter", "QtRevealTimer"]
