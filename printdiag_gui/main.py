# printdiag_gui/main.py
"""
Printer Diagnostic Tool: queue manager
Entry point: creates the Qt app, applies theme, and shows the queue window.
"""

from __future__ import annotations

import sys
from PySide6.QtWidgets import QApplication, QMessageBox
from PySide6.QtGui import QIcon

# Local modules
from .queue_manager import ManagerOptions, QueueManager
from .settings_store import APP_NAME, APP_ORG, get_settings
from .theme import apply_dark_theme
from .ui.queue_window import QueueWindow
from .utils import get_app_icon, missing_cups_tools


def main():
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_ORG)

    icon: QIcon = get_app_icon()
    app.setWindowIcon(icon)

    apply_dark_theme(app)

    settings = get_settings()
    manager = QueueManager(options=ManagerOptions.from_settings(settings))

    win = QueueWindow(manager, settings=settings, app_icon=icon)
    win.show()

    missing = missing_cups_tools()
    if missing:
        QMessageBox.warning(
            win,
            "CUPS tools not found",
            "These commands are not on PATH: " + ", ".join(missing)
            + "\nQueue information will be unavailable until they are installed.",
        )

    manager.start()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
