"""Entry point for logscope CLI."""

import json
import logging
from pathlib import Path

import rich_click as click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from logscope.core.classifier import ClassifiedEntry, Classifier
from logscope.core.config import OUTPUT_FORMATS, Config, ConfigError, ConfigLoader
from logscope.core.export import format_line, format_timestamp
from logscope.core.producers import (
    NoProducerFoundError,
    ProducerConflictError,
    ProducerManager,
)
from logscope.core.session import ViewerSession
from logscope.core.summary import CLASSIFICATION_STYLES, LEVEL_STYLES, Aggregator
from logscope.models.criteria import ALL_SOURCES, TIME_RANGES, FilterCriteria
from logscope.models.entry import LEVELS, ClusterEvent
from logscope.plugin import ProducerPlugin
from logscope.plugins.scenario import SCENARIOS, ScenarioProducer

click.rich_click.TEXT_MARKUP = "rich"
click.rich_click.SHOW_ARGUMENTS = True

# Ticks run for a live producer when --ticks is not given
DEFAULT_TICKS = 10


def _get_producer_manager() -> ProducerManager:
    """Create a producer manager with every available producer registered."""
    manager = ProducerManager()
    manager.discover()
    return manager


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(ctx: click.Context, console: Console, message: str) -> None:
    console.print(f"[red]Error:[/red] {message}", markup=True, highlight=False)
    ctx.exit(1)


def _list_available(console: Console, manager: ProducerManager) -> None:
    console.print("\nAvailable producers:")
    for name in manager.list_producers():
        console.print(f"  - {name}")


def _select_producer(
    ctx: click.Context,
    console: Console,
    manager: ProducerManager,
    name: str | None,
    logfile: str | None,
) -> ProducerPlugin:
    """Pick and prepare the producer for this run.

    An explicit name wins. Otherwise a log file selects a file producer by
    confidence, and without a file the scenario producer is used.
    """
    if name is None and logfile:
        try:
            name = manager.auto_detect(Path(logfile))
        except NoProducerFoundError as e:
            console.print("[red]Error:[/red] No producer can replay this file.")
            console.print(f"  {e}", markup=False)
            console.print("\nUse --producer to specify a producer manually.")
            ctx.exit(1)
        except ProducerConflictError as e:
            _fail(ctx, console, str(e))

    if name is None:
        name = ScenarioProducer.name

    producer = manager.get_producer(name)
    if producer is None:
        console.print(f"[red]Error:[/red] Producer '{name}' not found.")
        _list_available(console, manager)
        ctx.exit(1)

    if producer.needs_file:
        if not logfile:
            _fail(ctx, console, f"Producer '{name}' needs a LOGFILE to replay.")
        producer.open(Path(logfile))
    elif logfile:
        _fail(ctx, console, f"Producer '{name}' does not read files.")

    return producer


def _build_criteria(
    config: Config,
    levels: tuple[str, ...],
    sources: tuple[str, ...],
    pod: str | None,
    search: str | None,
    time_range: str | None,
    critical_only: bool,
) -> FilterCriteria:
    return FilterCriteria(
        levels=set(levels) if levels else set(config.filter.levels),
        sources=set(sources),
        selected_source=pod or ALL_SOURCES,
        time_range=time_range or config.filter.time_range,
        search_query=search or "",
        critical_only=critical_only,
    )


def _output_entries(
    console: Console,
    session: ViewerSession,
    output_format: str,
) -> None:
    """Print the visible entries in the requested format.

    Args:
        console: Rich console for output.
        session: Session holding the filtered view.
        output_format: text, json or count.
    """
    visible = session.visible_entries()

    if output_format == "json":
        if visible:
            print(session.export_jsonl())

    elif output_format == "count":
        counts = session.summary_counts()
        by_level = session.level_counts()
        parts = [f"total={counts.total}", f"critical={counts.critical}"]
        parts.extend(f"{level}={by_level[level]}" for level in LEVELS)
        console.print(" ".join(parts), markup=False, highlight=False)

    else:
        if not visible:
            console.print("[dim]No logs match the current filters.[/dim]")
            return
        # markup=False keeps "[timestamp]" from being read as a Rich tag
        for item in visible:
            _print_entry(console, item)


def _print_entry(console: Console, item: ClassifiedEntry) -> None:
    line = format_line(item)
    if item.critical is not None:
        style = CLASSIFICATION_STYLES.get(item.critical.classification, "")
        console.print(f"{line}  <{item.critical.description}>", style=style, soft_wrap=True,
                      markup=False, highlight=False)
    else:
        console.print(line, style=LEVEL_STYLES.get(item.effective_level, ""), soft_wrap=True,
                      markup=False, highlight=False)


def _output_events(
    console: Console,
    events: list[ClusterEvent],
    output_format: str,
) -> None:
    if output_format == "json":
        for event in events:
            print(json.dumps(event.model_dump(mode="json")))
        return

    if output_format == "count":
        warnings = sum(1 for event in events if event.type == "Warning")
        console.print(
            f"total={len(events)} warning={warnings} normal={len(events) - warnings}",
            markup=False, highlight=False,
        )
        return

    if not events:
        console.print("[dim]No events match the current filters.[/dim]")
        return

    table = Table(title="Cluster Events")
    table.add_column("Last Seen", no_wrap=True)
    table.add_column("Type")
    table.add_column("Reason", style="cyan")
    table.add_column("Object")
    table.add_column("Count", justify="right")
    table.add_column("Message")

    for event in events:
        obj = event.involved_object
        obj_name = f"{obj.kind.lower()}/{obj.name}"
        type_style = "yellow" if event.type == "Warning" else "green"
        table.add_row(
            format_timestamp(event.last_time),
            f"[{type_style}]{event.type}[/{type_style}]",
            escape(event.reason),
            obj_name,
            str(event.count),
            escape(event.message),
        )
    console.print(table)


def _print_summary(console: Console, session: ViewerSession) -> None:
    """Print level counts and a breakdown of matched critical patterns."""
    visible = session.visible_entries()
    aggregator = Aggregator()
    counts = aggregator.summary_counts(visible)
    by_level = aggregator.count_by_level(visible)
    groups = aggregator.sorted_groups(aggregator.group_by_pattern(visible))

    console.print()
    console.print("=" * 70)
    console.print("Log Stream Summary")
    console.print("=" * 70)

    console.print()
    for level in LEVELS:
        style = LEVEL_STYLES.get(level, "")
        console.print(f" [{style}]{level:16s}[/{style}] : ({by_level[level]})")

    if groups:
        console.print("\n Critical conditions:")
        for description, stats in groups:
            style = CLASSIFICATION_STYLES.get(stats.classification, "")
            console.print(
                f"  [{style}]{stats.classification:9s}[/{style}] "
                f"{escape(description)} ({stats.count})"
            )
            if stats.suggestion:
                console.print(f"            [dim]{escape(stats.suggestion)}[/dim]")
            console.print(f"            sources: {', '.join(stats.sources)}",
                          markup=False, highlight=False)

    console.print()
    console.print("=" * 70)
    console.print(f"Total: {counts.total} logs, {counts.critical} critical")
    if session.dropped:
        console.print(f"Dropped: {session.dropped} malformed records")
    console.print("=" * 70)


def _print_patterns(console: Console, classifier: Classifier) -> None:
    table = Table(title="Critical Patterns (first match wins)")
    table.add_column("#", justify="right")
    table.add_column("Classification")
    table.add_column("Description", style="cyan")
    table.add_column("Pattern")
    table.add_column("Suggestion")

    for index, pattern in enumerate(classifier.patterns, start=1):
        style = CLASSIFICATION_STYLES.get(pattern.classification, "")
        table.add_row(
            str(index),
            f"[{style}]{pattern.classification}[/{style}]",
            escape(pattern.description),
            escape(pattern.pattern),
            escape(pattern.suggestion or ""),
        )
    console.print(table)


def _print_producers(console: Console, manager: ProducerManager) -> None:
    table = Table(title="Available Producers")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Version", style="green")
    table.add_column("Description")

    for name in sorted(manager.list_producers()):
        info = manager.get_producer_info(name)
        if info:
            table.add_row(info["name"], info.get("version", "unknown"),
                          info.get("description", ""))
    console.print(table)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("logfile", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--version", is_flag=True, help="Show version and exit.")
@click.option("--list-producers", is_flag=True, help="List all available producers and exit.")
@click.option("--list-patterns", is_flag=True,
              help="List the critical patterns in match order and exit.")
@click.option("--producer", "producer_name", type=str,
              help="Force a specific producer (bypasses auto-detection).")
@click.option("--scenario", type=click.Choice(SCENARIOS), default=None,
              help="Scenario for the scenario producer.")
@click.option("--seed", type=int, default=None,
              help="Random seed for the scenario producer.")
@click.option("--ticks", type=click.IntRange(min=0), default=None,
              help="Number of ingestion ticks to run. Default: replay the whole "
                   f"file for file producers, {DEFAULT_TICKS} otherwise.")
@click.option("--level", "-l", "levels", multiple=True,
              type=click.Choice(LEVELS, case_sensitive=False),
              help="Effective level to show (can be repeated). Default: INFO, WARN, ERROR.")
@click.option("--source", "sources", multiple=True,
              help="Source to show (can be repeated). Default: all sources.")
@click.option("--pod", type=str, help="Pin the view to a single source.")
@click.option("--search", type=str, help="Case-insensitive text the message must contain.")
@click.option("--time-range", type=click.Choice(TIME_RANGES), default=None,
              help="Maximum entry age. Default: from config, else 1h.")
@click.option("--critical-only", is_flag=True,
              help="Only show entries matching a critical pattern.")
@click.option("--format", "output_format",
              type=click.Choice(OUTPUT_FORMATS, case_sensitive=False), default=None,
              help="Output format: text (colored), json (JSONL), or count (summary).")
@click.option("--summary", is_flag=True,
              help="Show level counts and matched critical conditions.")
@click.option("--events", is_flag=True, help="Show cluster events instead of log lines.")
@click.option("--export", "export_path", type=click.Path(dir_okay=False),
              help="Write the filtered view to this file in the text export format.")
@click.option("--tui", is_flag=True, help="Open the live viewer.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Extra config file, applied over discovered ones.")
@click.option("--verbose", "-v", is_flag=True, help="Log engine activity to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    logfile: str | None,
    version: bool,
    list_producers: bool,
    list_patterns: bool,
    producer_name: str | None,
    scenario: str | None,
    seed: int | None,
    ticks: int | None,
    levels: tuple[str, ...],
    sources: tuple[str, ...],
    pod: str | None,
    search: str | None,
    time_range: str | None,
    critical_only: bool,
    output_format: str | None,
    summary: bool,
    events: bool,
    export_path: str | None,
    tui: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """logscope - classify and filter a live stream of cluster logs.

    Replay a log file, or stream synthetic scenario logs, through the
    classifier and filters, then print, summarize or export the result.
    """
    console = Console()

    if version:
        from logscope import __version__
        click.echo(f"logscope {__version__}")
        return

    _configure_logging(verbose)

    try:
        config = ConfigLoader().load_merged(
            extra=Path(config_path) if config_path else None
        )
    except (ConfigError, FileNotFoundError) as e:
        _fail(ctx, console, str(e))

    if not config.output.color:
        console = Console(no_color=True)

    classifier = Classifier.with_extra_patterns(config.patterns.custom)

    if list_patterns:
        _print_patterns(console, classifier)
        return

    manager = _get_producer_manager()

    if list_producers:
        _print_producers(console, manager)
        return

    producer = _select_producer(
        ctx, console, manager, producer_name or config.stream.producer, logfile
    )
    if isinstance(producer, ScenarioProducer):
        producer.configure(
            scenario=scenario or config.stream.scenario,
            event_probability=config.stream.event_probability,
            seed=seed,
        )

    try:
        criteria = _build_criteria(
            config, levels, sources, pod, search, time_range, critical_only
        )
    except ValidationError as e:
        _fail(ctx, console, f"Invalid filter: {e}")

    session = ViewerSession(
        producer,
        classifier=classifier,
        criteria=criteria,
        max_entries=config.buffer.max_entries,
        max_events=config.buffer.max_events,
    )

    if tui:
        from logscope.tui.app import run_tui

        run_tui(session, interval=config.stream.interval)
        return

    if ticks is None:
        if producer.needs_file:
            session.controller.drain()
        else:
            session.controller.run(DEFAULT_TICKS)
    else:
        session.controller.run(ticks)

    if export_path:
        text = session.export_text()
        Path(export_path).write_text(text + "\n" if text else "", encoding="utf-8")
        console.print(
            f"Exported {len(session.visible_entries())} entries to {export_path}",
            markup=False, highlight=False,
        )
        return

    fmt = (output_format or config.output.format).lower()

    if summary:
        _print_summary(console, session)
    elif events:
        _output_events(console, session.visible_events(), fmt)
    else:
        _output_entries(console, session, fmt)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
