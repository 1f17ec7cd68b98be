"""Live viewer for logscope.

A Textual front end over a ViewerSession. A Textual interval polls the
Ticker, which runs one ingestion tick per stream interval. Every filter
pass of the session re-renders the table. Layout:
header / level bar / search / entries / detail / status.
"""

from __future__ import annotations

from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.events import Resize
from textual.widgets import DataTable, Input, Static

from logscope.core.classifier import ClassifiedEntry
from logscope.core.export import export_filename
from logscope.core.session import ViewerSession
from logscope.core.stream import DEFAULT_INTERVAL, Ticker
from logscope.core.summary import CLASSIFICATION_STYLES, LEVEL_STYLES
from logscope.models.criteria import TIME_RANGES
from logscope.models.entry import LEVELS
from logscope.tui.theme import register_logscope_theme
from logscope.tui.widgets.status_bar import StatusBar

# How often the ticker is polled, in seconds
POLL_SECONDS = 0.25


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------

class LevelStats(Static):
    """Per-level counts of the visible entries.

    Levels excluded by the current criteria are dimmed.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.counts: dict[str, int] = {level: 0 for level in LEVELS}
        self.active: set[str] = set(LEVELS)
        self.total = 0
        self.critical = 0

    def set_stats(
        self,
        counts: dict[str, int],
        active: set[str],
        total: int,
        critical: int,
    ) -> None:
        self.counts = dict(counts)
        self.active = set(active)
        self.total = total
        self.critical = critical
        self.refresh()

    def render(self) -> str:
        parts = [f"Total: {self.total}", f"[red bold]Critical: {self.critical}[/red bold]"]
        for key, level in enumerate(LEVELS, start=1):
            label = f"{key}:{level} {self.counts.get(level, 0)}"
            style = LEVEL_STYLES.get(level, "")
            if level not in self.active:
                parts.append(f"[dim]{label}[/dim]")
            elif style:
                parts.append(f"[{style}]{label}[/{style}]")
            else:
                parts.append(label)
        return " | ".join(parts)


class EntryTable(DataTable):
    """Scrollable table of visible entries.

    The Message column absorbs whatever width the fixed columns leave.
    """

    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("g", "scroll_top", "Top", show=False),
        Binding("G", "scroll_bottom", "Bottom", show=False),
    ]

    FIXED_COLUMNS = [
        ("time", "Time", 10),
        ("level", "Level", 7),
        ("source", "Source", 26),
    ]
    FLEX_COL_KEY = "message"
    FLEX_COL_MIN = 20

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cursor_type = "row"
        self.zebra_stripes = True
        self.flex_width = 60

    def on_mount(self) -> None:
        for key, label, width in self.FIXED_COLUMNS:
            self.add_column(label, key=key, width=width)
        self.add_column("Message", key=self.FLEX_COL_KEY, width=self.flex_width)

    def on_resize(self, event: Resize) -> None:
        fixed_total = sum(width for _, _, width in self.FIXED_COLUMNS)
        spacing = (len(self.FIXED_COLUMNS) + 1) * 2 + 1
        width = max(self.FLEX_COL_MIN, event.size.width - fixed_total - spacing)
        if width != self.flex_width:
            self.flex_width = width
            column = self.columns.get(self.FLEX_COL_KEY)
            if column is not None:
                column.width = width
            self.refresh()

    def truncate(self, text: str) -> str:
        if len(text) <= self.flex_width:
            return text
        return text[: self.flex_width - 1] + "…"

    def action_scroll_top(self) -> None:
        self.move_cursor(row=0)

    def action_scroll_bottom(self) -> None:
        if self.row_count > 0:
            self.move_cursor(row=self.row_count - 1)


class SearchInput(Input):
    """Input for the case-insensitive message search."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("placeholder", "Search messages...")
        super().__init__(*args, **kwargs)


def describe_entry(item: ClassifiedEntry) -> str:
    """Full text shown in the detail panel for one entry."""
    entry = item.entry
    lines = [
        f"{entry.timestamp.isoformat()}  {item.effective_level}"
        f" (declared {entry.level})",
        f"source: {entry.source}"
        + (f"  container: {entry.container}" if entry.container else ""),
        "",
        entry.message,
    ]
    if item.critical is not None:
        lines += [
            "",
            f"{item.critical.classification.upper()}: {item.critical.description}",
        ]
        if item.critical.suggestion:
            lines.append(f"Suggestion: {item.critical.suggestion}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Main application
# ---------------------------------------------------------------------------

class LogscopeApp(App):
    """Live log viewer over a ViewerSession.

    Attributes:
        session: The engine session being displayed.
        ticker: Schedules ingestion ticks on the session's clock.
        rows: Entries currently rendered in the table.
    """

    CSS_PATH = ["base.tcss"]

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("p", "toggle_stream", "Pause/Resume"),
        Binding("r", "reset_view", "Reset"),
        Binding("c", "toggle_critical", "Critical only"),
        Binding("t", "cycle_time_range", "Time range"),
        Binding("e", "export", "Export"),
        Binding("/", "focus_search", "Search", show=False),
        Binding("escape", "clear_search", "Clear search", show=False),
        Binding("tab", "toggle_focus", "Toggle focus", show=False),
        Binding("1", "toggle_level(1)", "Level 1", show=False),
        Binding("2", "toggle_level(2)", "Level 2", show=False),
        Binding("3", "toggle_level(3)", "Level 3", show=False),
        Binding("4", "toggle_level(4)", "Level 4", show=False),
        Binding("5", "toggle_level(5)", "Level 5", show=False),
    ]

    def __init__(
        self,
        session: ViewerSession,
        interval: float = DEFAULT_INTERVAL,
        export_dir: Path | None = None,
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.session = session
        self.ticker = Ticker(session.clock, interval, session.tick)
        self.export_dir = export_dir or Path.cwd()
        self.rows: list[ClassifiedEntry] = []
        # Ids cleared from the transcript by reset; the buffer keeps them
        self._cleared_ids: set[str] = set()

        self._stats_widget: LevelStats | None = None
        self._table: EntryTable | None = None
        self._search_input: SearchInput | None = None
        self._detail: Static | None = None
        self._status: StatusBar | None = None

        session.subscribe(self._sync_view)
        session.on_reset(self._clear_transcript)
        self._sync_view()

    # -- Compose & Mount -----------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Static("logscope: live log stream", id="header")
        yield LevelStats(id="level-bar")
        with Vertical(id="search-panel", classes="panel"):
            yield SearchInput(id="search-input")
        with Vertical(id="entries-panel", classes="panel"):
            yield EntryTable(id="entry-table")
        with Vertical(id="detail-panel", classes="panel"):
            yield Static("Select a log line to view details", id="detail-content",
                         markup=False)
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        register_logscope_theme(self)

        self._stats_widget = self.query_one("#level-bar", LevelStats)
        self._table = self.query_one("#entry-table", EntryTable)
        self._search_input = self.query_one("#search-input", SearchInput)
        self._detail = self.query_one("#detail-content", Static)
        self._status = self.query_one("#status-bar", StatusBar)

        self.query_one("#search-panel").border_title = "Search"
        self.query_one("#entries-panel").border_title = "Logs"
        self.query_one("#detail-panel").border_title = "Detail"

        self.ticker.start()
        self.set_interval(POLL_SECONDS, self.ticker.poll)

        self.call_after_refresh(self._sync_view)
        self._table.focus()

    # -- Rendering -----------------------------------------------------------

    def _sync_view(self) -> None:
        """Pull the latest filter pass from the session and redraw."""
        self.rows = [
            item for item in self.session.visible_entries()
            if item.entry.id not in self._cleared_ids
        ]
        self._update_stats()
        self._populate_table()
        self._update_status()

    def _update_stats(self) -> None:
        if not self._stats_widget:
            return
        counts = self.session.summary_counts()
        self._stats_widget.set_stats(
            counts=self.session.level_counts(),
            active=self.session.criteria.levels,
            total=counts.total,
            critical=counts.critical,
        )

    def _populate_table(self) -> None:
        if not self._table:
            return

        table = self._table
        prev_row = table.cursor_row
        prev_count = table.row_count

        with self.batch_update():
            table.clear()
            for i, item in enumerate(self.rows):
                entry = item.entry
                if item.critical is not None:
                    level_style = CLASSIFICATION_STYLES.get(item.critical.classification, "")
                    level_label = f"⚡{item.effective_level}"
                else:
                    level_style = LEVEL_STYLES.get(item.effective_level, "")
                    level_label = item.effective_level
                table.add_row(
                    entry.timestamp.strftime("%H:%M:%S"),
                    Text(level_label, style=level_style),
                    Text(entry.source),
                    Text(table.truncate(entry.message)),
                    key=str(i),
                )

            if self.rows:
                # Follow the newest line unless the user moved the cursor up
                at_bottom = prev_row >= prev_count - 1
                row = len(self.rows) - 1 if at_bottom else min(prev_row, len(self.rows) - 1)
                table.move_cursor(row=row)
                self._update_detail(row)
            else:
                self._update_detail(-1)

    def _update_detail(self, row_index: int) -> None:
        if not self._detail:
            return
        if 0 <= row_index < len(self.rows):
            self._detail.update(describe_entry(self.rows[row_index]))
        elif self.session.entries and not self.rows:
            self._detail.update("No logs match the current filters")
        else:
            self._detail.update("Select a log line to view details")

    def _update_status(self) -> None:
        if not self._status:
            return
        criteria = self.session.criteria
        self._status.set_state(
            streaming=self.session.is_streaming,
            time_range=criteria.time_range,
            critical_only=criteria.critical_only,
            dropped=self.session.dropped,
        )

    def _clear_transcript(self) -> None:
        self._cleared_ids = {entry.id for entry in self.session.entries}
        self._sync_view()

    # -- Event handlers ------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self.session.set_filter_criteria(search_query=event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search-input" and self._table:
            self._table.focus()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.cursor_row is not None:
            self._update_detail(event.cursor_row)

    # -- Actions -------------------------------------------------------------

    def action_toggle_stream(self) -> None:
        self.session.controller.toggle()
        self._update_status()

    def action_reset_view(self) -> None:
        self.session.reset()

    def action_toggle_critical(self) -> None:
        criteria = self.session.criteria
        self.session.set_filter_criteria(critical_only=not criteria.critical_only)

    def action_cycle_time_range(self) -> None:
        current = TIME_RANGES.index(self.session.criteria.time_range)
        self.session.set_filter_criteria(
            time_range=TIME_RANGES[(current + 1) % len(TIME_RANGES)]
        )

    def action_toggle_level(self, key_num: int) -> None:
        if 1 <= key_num <= len(LEVELS):
            self.session.toggle_level(LEVELS[key_num - 1])

    def action_clear_search(self) -> None:
        if self._search_input:
            self._search_input.value = ""
        self.session.set_filter_criteria(search_query="")
        if self._table:
            self._table.focus()

    def action_focus_search(self) -> None:
        if self._search_input:
            self._search_input.focus()

    def action_toggle_focus(self) -> None:
        if self._search_input and self._table:
            if self._search_input.has_focus:
                self._table.focus()
            else:
                self._search_input.focus()

    def action_export(self) -> Path:
        """Write the filtered view to a dated file in ``export_dir``."""
        path = self.export_dir / export_filename(self.session.clock.now())
        text = self.session.export_text()
        path.write_text(text + "\n" if text else "", encoding="utf-8")
        if self.is_running:
            self.notify(f"Exported {len(self.session.visible_entries())} lines to {path}")
        return path


# ---------------------------------------------------------------------------
# Entry point helper
# ---------------------------------------------------------------------------

def run_tui(session: ViewerSession, interval: float = DEFAULT_INTERVAL) -> None:
    """Run the live viewer until the user quits.

    Args:
        session: Session to display and drive.
        interval: Seconds between ingestion ticks.
    """
    app = LogscopeApp(session, interval=interval)
    app.run()
