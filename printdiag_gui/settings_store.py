# printdiag_gui/settings_store.py
"""
Settings store and constants for the print queue manager.

Centralizes QSettings keys, defaults, app metadata, and helper utilities.
"""

from __future__ import annotations
from PySide6.QtCore import QSettings

# Application metadata
APP_NAME = "Printer Diagnostic Tool"
APP_ORG = "PrintDiag"
APP_VER = "v1.2"

# Common keys (to avoid typos)
KEYS = {
    "printer_name": "printer_name",
    "refresh_interval_sec": "refresh_interval_sec",
    "highlight_minutes": "highlight_minutes",
    "use_sudo": "use_sudo",
    "strip_ansi": "strip_ansi",
    "command_timeout_sec": "command_timeout_sec",
}

DEFAULTS = {
    "printer_name": "HP_LaserJet_Professional_P1102w",
    "refresh_interval_sec": 5,
    "highlight_minutes": 10,
    "use_sudo": True,
    "strip_ansi": True,
    "command_timeout_sec": 20,
}

REFRESH_RANGE = (0, 3600)
HIGHLIGHT_RANGE = (0, 1440)


def get_settings() -> QSettings:
    """
    Factory for QSettings, consistently using org/name.
    """
    return QSettings(APP_ORG, APP_NAME)


def read_bool(settings: QSettings, key: str, default: bool = False) -> bool:
    """
    Read a boolean value from QSettings.
    """
    return str(settings.value(key, "true" if default else "false")).lower() == "true"


def write_bool(settings: QSettings, key: str, value: bool) -> None:
    """
    Write a boolean value to QSettings.
    """
    settings.setValue(key, "true" if value else "false")


def read_int(settings: QSettings, key: str, default: int = 0, lo: int | None = None, hi: int | None = None) -> int:
    """
    Read an integer from QSettings, clamped to [lo, hi] when given.
    Garbage values fall back to the default.
    """
    try:
        value = int(settings.value(key, default))
    except (TypeError, ValueError):
        value = default
    if lo is not None:
        value = max(lo, value)
    if hi is not None:
        value = min(hi, value)
    return value


def read_str(settings: QSettings, key: str, default: str = "") -> str:
    value = settings.value(key, default)
    return str(value).strip() if value is not None else default
