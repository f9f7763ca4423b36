# printdiag_gui/__init__.py
"""
Printer Diagnostic Tool: package init
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "main",
]

__version__ = "1.2"


def main():
    # Imported lazily so the queue engine can be used without a display
    from .main import main as _main

    _main()
