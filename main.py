import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QMainWindow

from orgreveal.settings_manager import RevealSettingsManager
from RevealPyside.widgets.org_editor import OrgEditor

APP_NAME = "Org Reveal"


def _default_app_dir() -> Path:
    return Path.home() / ".org-reveal"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="org-reveal", description="Edit an org file with markup reveal at point.")
    parser.add_argument("file", nargs="?", help="org file to open")
    parser.add_argument("--app-dir", default=None, help="directory holding org-reveal.json")
    parser.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, ...)")
    parser.add_argument("--no-reveal", action="store_true", help="start with reveal mode off")
    return parser.parse_args(argv)


def _load_settings(app_dir: str | None) -> RevealSettingsManager:
    target = Path(app_dir).expanduser() if app_dir else _default_app_dir()
    return RevealSettingsManager.for_app_dir(target)


def _read_text(path_value: str | None) -> tuple[str, str]:
    if not path_value:
        return "", "untitled.org"
    path = Path(path_value).expanduser()
    try:
        return path.read_text(encoding="utf-8"), path.name
    except OSError as exc:
        logging.getLogger(__name__).warning("Could not read %s: %s", path, exc)
        return "", path.name


if __name__ == "__main__":
    args = _parse_args(sys.argv[1:])
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication([sys.argv[0]])
    app.setStyle("Fusion")
    app.setApplicationName(APP_NAME)

    settings = _load_settings(args.app_dir)
    text, title = _read_text(args.file)

    window = QMainWindow()
    editor = OrgEditor(settings=settings, parent=window)
    editor.setPlainText(text)
    editor.set_reveal_enabled(not args.no_reveal)
    editor.revealModeChanged.connect(
        lambda enabled: window.setWindowTitle(f"{title} - {APP_NAME}{'' if enabled else ' (reveal off)'}")
    )
    window.setCentralWidget(editor)
    window.setWindowTitle(f"{title} - {APP_NAME}{'' if editor.is_reveal_enabled() else ' (reveal off)'}")
    window.resize(900, 640)
    window.show()
    sys.exit(app.exec())
