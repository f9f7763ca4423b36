# printdiag_gui/theme.py
"""
Qt dark theme for the print queue manager.

Keep this file UI-agnostic: no imports of app widgets beyond Qt.
"""

from __future__ import annotations

from PySide6.QtGui import QPalette, QColor
from PySide6.QtWidgets import QApplication

# Shared with widgets that colour rows / log lines themselves
STALE_ROW_BG = "#3b2f1b"
SEVERITY_COLORS = {
    "info": "#b5bcc9",
    "success": "#8ad7a0",
    "warning": "#f4a261",
    "error": "#f7768e",
}


def apply_dark_theme(app: QApplication) -> None:
    """
    Apply a dark palette and a compact stylesheet across the app.
    """
    bg         = QColor("#10141b")  # window background
    bg_alt     = QColor("#161c25")  # panels / buttons
    surface    = QColor("#1b222d")  # inputs, tables
    border     = QColor("#2a313c")  # outlines
    text       = QColor("#e6eaf2")  # primary text
    text_muted = QColor("#a9b1be")  # secondary text
    accent     = QColor("#5fb3f0")  # blue accent
    danger     = QColor(SEVERITY_COLORS["error"])

    pal = QPalette()
    pal.setColor(QPalette.Window, bg)
    pal.setColor(QPalette.WindowText, text)
    pal.setColor(QPalette.Base, surface)
    pal.setColor(QPalette.AlternateBase, bg_alt)
    pal.setColor(QPalette.Text, text)
    pal.setColor(QPalette.Button, bg_alt)
    pal.setColor(QPalette.ButtonText, text)
    pal.setColor(QPalette.BrightText, danger)
    pal.setColor(QPalette.Highlight, accent)
    pal.setColor(QPalette.HighlightedText, QColor("#0b0f16"))
    pal.setColor(QPalette.PlaceholderText, text_muted)
    app.setPalette(pal)

    app.setStyleSheet(f"""
        QWidget {{
            background: {bg.name()};
            color: {text.name()};
            font-size: 12.5px;
        }}
        .muted {{ color: {text_muted.name()}; }}

        QSpinBox, QTextEdit, QTableWidget {{
            background: {surface.name()};
            border: 1px solid {border.name()};
            border-radius: 8px;
            padding: 4px;
        }}
        QHeaderView::section {{
            background: {bg_alt.name()};
            border: none;
            border-bottom: 1px solid {border.name()};
            padding: 6px;
        }}

        QPushButton {{
            background: {bg_alt.name()};
            border: 1px solid {border.name()};
            border-radius: 8px;
            padding: 7px 12px;
        }}
        QPushButton:hover {{ border-color: {accent.name()}; }}
        QPushButton:disabled {{ color: {text_muted.name()}; }}
        QPushButton[class="danger"] {{ border-color: {danger.name()}; color: {danger.name()}; }}
    """)
