"""Status bar for the live viewer.

Shows the stream state and active quick filters on the left and the
key hints on the right, docked to the bottom of the screen.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import HorizontalGroup
from textual.widget import Widget
from textual.widgets import Static

DEFAULT_HINTS = [
    ("p", "Pause/Resume"),
    ("r", "Reset"),
    ("c", "Critical"),
    ("t", "Time range"),
    ("1-5", "Levels"),
    ("/", "Search"),
    ("e", "Export"),
    ("q", "Quit"),
]


def format_state(
    streaming: bool,
    time_range: str,
    critical_only: bool,
    dropped: int = 0,
) -> str:
    """Markup for the left-hand state section."""
    if streaming:
        parts = ["[green bold]● Streaming[/green bold]"]
    else:
        parts = ["[yellow bold]❚❚ Paused[/yellow bold]"]
    parts.append(f"range {time_range}")
    if critical_only:
        parts.append("[red]critical only[/red]")
    if dropped:
        parts.append(f"[dim]dropped {dropped}[/dim]")
    return "  ".join(parts)


class StatusBar(Widget):
    """Stream state plus keybinding hints.

    Args:
        hints: List of (key, label) tuples to display.
    """

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: transparent;
    }

    StatusBar > HorizontalGroup {
        background: transparent;
        height: 1;
    }

    StatusBar #stream-state {
        width: auto;
        padding: 0 2 0 1;
    }

    StatusBar .hint-key {
        color: $primary;
        text-style: bold;
        width: auto;
    }

    StatusBar .hint-label {
        color: $text;
        width: auto;
        padding: 0 1 0 0;
    }
    """

    def __init__(
        self,
        hints: list[tuple[str, str]] | None = None,
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._hints = DEFAULT_HINTS if hints is None else hints
        self.state_text = format_state(True, "1h", False)

    def compose(self) -> ComposeResult:
        with HorizontalGroup():
            yield Static(self.state_text, id="stream-state")
            for key, label in self._hints:
                yield Static(f" {key} ", classes="hint-key")
                yield Static(label, classes="hint-label")

    def set_state(
        self,
        streaming: bool,
        time_range: str,
        critical_only: bool,
        dropped: int = 0,
    ) -> None:
        self.state_text = format_state(streaming, time_range, critical_only, dropped)
        if self.is_mounted:
            self.query_one("#stream-state", Static).update(self.state_text)
