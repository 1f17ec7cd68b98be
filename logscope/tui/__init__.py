"""Textual UI for logscope.

This module provides the live viewer: a terminal front end that streams,
filters and exports entries through a ViewerSession.
"""

from logscope.tui.app import LogscopeApp, run_tui

__all__ = ["LogscopeApp", "run_tui"]
