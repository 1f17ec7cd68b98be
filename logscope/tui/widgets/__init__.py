"""Textual widgets for the logscope live viewer."""

from logscope.tui.widgets.status_bar import StatusBar

__all__ = ["StatusBar"]
