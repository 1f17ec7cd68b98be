"""Nord theme for the logscope live viewer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textual.app import App

THEME_NAME = "logscope-nord"


def register_logscope_theme(app: App, transparent: bool = True) -> None:
    """Register the viewer theme on ``app`` and make it active.

    Args:
        app: The Textual application to register the theme on.
        transparent: Let the terminal background show through.
    """
    from textual.theme import Theme

    app.register_theme(
        Theme(
            name=THEME_NAME,
            primary="#88C0D0",
            secondary="#81A1C1",
            accent="#B48EAD",
            foreground="#D8DEE9",
            success="#A3BE8C",
            warning="#EBCB8B",
            error="#BF616A",
            surface="#3B4252",
            panel="#434C5E",
            dark=True,
        )
    )
    app.theme = THEME_NAME
    if transparent:
        app.ansi_color = True
