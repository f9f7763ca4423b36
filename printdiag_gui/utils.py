# printdiag_gui/utils.py
"""
Utility helpers for the print queue manager.

Includes:
- get_app_icon (loads .ico/.png from app dir or system theme)
- tool resolution for the CUPS command-line utilities
- diagnostic log export
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from shutil import which as _which
from typing import List

CUPS_TOOLS = ("lpstat", "cancel", "cupsenable", "cupsdisable", "lpr")


# ----------------------------
# Icons
# ----------------------------
def get_app_icon():
    """
    Load the application icon.
    Looks for printdiag.ico/png next to the frozen exe or source,
    falls back to the system theme printer icon.
    """
    from PySide6.QtGui import QIcon

    base = Path(getattr(sys, "_MEIPASS", Path(__file__).parent))
    for name in ("printdiag.ico", "printdiag.png"):
        p = base / name
        if p.exists():
            return QIcon(str(p))
    return QIcon.fromTheme("printer") or QIcon()


# ----------------------------
# Tool resolution
# ----------------------------
def which(cmd: str) -> str | None:
    return _which(cmd)


def missing_cups_tools() -> List[str]:
    """Names of CUPS utilities that are not on PATH."""
    return [tool for tool in CUPS_TOOLS if not which(tool)]


# ----------------------------
# Export
# ----------------------------
EXPORT_STAMP = "%Y%m%d_%H%M%S"


def export_file_name(now: datetime) -> str:
    return f"printer_diagnostic_{now.strftime(EXPORT_STAMP)}.txt"


def write_export(path: str, text: str) -> Path:
    """Write the diagnostic log to `path`, creating parent folders if needed."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    return target
