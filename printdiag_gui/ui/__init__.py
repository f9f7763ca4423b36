# printdiag_gui/ui/__init__.py
