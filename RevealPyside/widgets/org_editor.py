"""Plain text editor for org files with cursor-driven markup reveal."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, Qt, QTimer, Signal
from PySide6.QtGui import QAction, QColor, QFont, QKeySequence, QPainter, QPalette, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit, QWidget

from orgreveal.core.markers import VisibilityMarkers
from orgreveal.core.session import RevealSession
from orgreveal.core.tracker import CommandEvent, CommandHandler
from orgreveal.services.inline_scanner import TextElementParser
from orgreveal.settings_manager import RevealSettingsManager
from RevealPyside.widgets.org_highlighter import OrgHighlighter

logger = logging.getLogger(__name__)

_ORG_EDITOR_DEFAULT_KEYBINDINGS: dict[str, list[str]] = {
    "action.toggle_reveal_mode": ["Ctrl+Alt+R"],
    "action.reveal_at_point": ["Ctrl+Alt+Space"],
    "action.stop_reveal_at_point": ["Ctrl+Alt+Shift+Space"],
}


class EditorCommandEvents(QObject):
    """Turns the editor's per-command signals into one ``CommandEvent``.

    A command may move the cursor and change text; both signals are coalesced
    through a zero-length timer so handlers run once, after the command and
    after the highlighter has reformatted the touched blocks.
    """

    def __init__(self, editor: QPlainTextEdit, is_muted: Callable[[], bool]):
        super().__init__(editor)
        self._editor = editor
        self._is_muted = is_muted
        self._handlers: list[CommandHandler] = []
        self._edit_handlers: list[CommandHandler] = []
        self._last_revision = int(editor.document().revision())

        self._dispatch_timer = QTimer(self)
        self._dispatch_timer.setSingleShot(True)
        self._dispatch_timer.setInterval(0)
        self._dispatch_timer.timeout.connect(self.dispatch)

        editor.cursorPositionChanged.connect(self._schedule)
        editor.document().contentsChange.connect(self._on_contents_change)

    def subscribe(self, handler: CommandHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: CommandHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def subscribe_edits(self, handler: CommandHandler) -> None:
        if handler not in self._edit_handlers:
            self._edit_handlers.append(handler)

    def unsubscribe_edits(self, handler: CommandHandler) -> None:
        if handler in self._edit_handlers:
            self._edit_handlers.remove(handler)

    def cursor_position(self) -> int:
        return int(self._editor.textCursor().position())

    def _on_contents_change(self, position: int, removed: int, added: int) -> None:
        if self._is_muted():
            return
        self._schedule()

    def _schedule(self) -> None:
        if self._is_muted():
            return
        if not self._dispatch_timer.isActive():
            self._dispatch_timer.start()

    def dispatch(self) -> None:
        self._dispatch_timer.stop()
        revision = int(self._editor.document().revision())
        edited = revision != self._last_revision
        self._last_revision = revision
        event = CommandEvent(position=self.cursor_position(), edited=edited)
        if edited:
            for handler in list(self._edit_handlers):
                handler(event)
        # Read after the edit handlers: they may have subscribed the tracker.
        for handler in list(self._handlers):
            handler(event)


class QtRevealTimer(QObject):
    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._callback: Callable[[], None] | None = None
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start(max(0, int(delay_ms)))

    def cancel(self) -> None:
        self._timer.stop()
        self._callback = None

    def _fire(self) -> None:
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()


class OrgEditor(QPlainTextEdit):
    revealModeChanged = Signal(bool)

    def __init__(self, settings: RevealSettingsManager | None = None, parent: QWidget | None = None):
        super().__init__(parent)
        self.settings = settings or RevealSettingsManager.in_memory()
        self.setLineWrapMode(QPlainTextEdit.WidgetWidth)
        self._apply_font()

        self.markers = VisibilityMarkers()
        self.highlighter = OrgHighlighter(self.document(), self.markers, self.settings)

        # setPlainText() does not always bump QTextDocument.revision(); count changes here.
        self._text_generation = 0
        self.document().contentsChange.connect(self._on_text_changed)
        self.parser = TextElementParser(self.toPlainText, revision_provider=lambda: self._text_generation)
        self.command_events = EditorCommandEvents(self, is_muted=self._is_reveal_mutating)
        self.reveal_timer = QtRevealTimer(self)
        self.session = RevealSession(
            parser=self.parser,
            markers=self.markers,
            scheduler=self.highlighter,
            events=self.command_events,
            settings=self.settings,
            timer=self.reveal_timer,
        )
        self.settings.add_listener(self._on_settings_changed)
        self._install_actions()

    # -------------------------------------------------
    # Reveal mode
    # -------------------------------------------------
    def _on_text_changed(self, position: int, removed: int, added: int) -> None:
        self._text_generation += 1

    def _is_reveal_mutating(self) -> bool:
        session = getattr(self, "session", None)
        return bool(session is not None and session.is_mutating)

    def is_reveal_enabled(self) -> bool:
        return self.session.enabled

    def set_reveal_enabled(self, enabled: bool) -> None:
        if bool(enabled) == self.session.enabled:
            return
        if enabled:
            self.session.enable()
        else:
            self.session.disable()
        logger.debug("Reveal mode %s", "enabled" if enabled else "disabled")
        self.revealModeChanged.emit(self.session.enabled)

    def toggle_reveal_mode(self) -> bool:
        self.set_reveal_enabled(not self.session.enabled)
        return self.session.enabled

    def reveal_at_point(self) -> bool:
        return self.session.reveal_at_point()

    def stop_reveal_at_point(self) -> None:
        self.session.stop_manual()

    def _on_settings_changed(self, key: str) -> None:
        if not key or key.startswith("org."):
            self.highlighter.refresh()
            self.session.reapply()
        if not key or key.startswith("editor."):
            self._apply_font()

    def _apply_font(self) -> None:
        family = str(self.settings.get("editor.font_family", "monospace") or "monospace")
        size = int(self.settings.get("editor.font_size", 11) or 11)
        font = QFont(family)
        font.setPointSize(max(6, size))
        font.setStyleHint(QFont.Monospace)
        self.setFont(font)

    def _install_actions(self) -> None:
        handlers = {
            "action.toggle_reveal_mode": self.toggle_reveal_mode,
            "action.reveal_at_point": self.reveal_at_point,
            "action.stop_reveal_at_point": self.stop_reveal_at_point,
        }
        self._actions: dict[str, QAction] = {}
        for action_id, sequences in _ORG_EDITOR_DEFAULT_KEYBINDINGS.items():
            action = QAction(self)
            action.setShortcuts([QKeySequence(seq) for seq in sequences])
            action.setShortcutContext(Qt.WidgetShortcut)
            callback = handlers[action_id]
            action.triggered.connect(lambda _checked=False, cb=callback: cb())
            self.addAction(action)
            self._actions[action_id] = action

    def action(self, action_id: str) -> QAction | None:
        return self._actions.get(action_id)

    # -------------------------------------------------
    # Painting
    # -------------------------------------------------
    def paintEvent(self, event):
        super().paintEvent(event)
        self._paint_compositions(event)

    def _paint_compositions(self, event) -> None:
        first = self.firstVisibleBlock()
        if not first.isValid():
            return
        start = first.position()
        last_cursor = self.cursorForPosition(self.viewport().rect().bottomRight())
        end = last_cursor.block().position() + last_cursor.block().length()
        compositions = self.markers.compositions(start, end)
        if not compositions:
            return

        painter = QPainter(self.viewport())
        painter.setPen(QColor(self.palette().color(QPalette.Text)))
        fm = self.fontMetrics()
        cursor = QTextCursor(self.document())
        for comp in compositions:
            cursor.setPosition(comp.start)
            rect = self.cursorRect(cursor)
            if not rect.intersects(event.rect()):
                continue
            y = int(rect.top() + max(0, (rect.height() - fm.height()) // 2) + fm.ascent())
            painter.drawText(int(rect.left()), y, comp.glyph)
        painter.end()
