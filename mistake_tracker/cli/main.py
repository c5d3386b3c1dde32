"""
Typer CLI for the mistake tracker.

Commands:
    mistakes add               - Log a mistake and schedule its retests
    mistakes list              - List logged mistakes
    mistakes show ID           - Show a mistake and its retests
    mistakes edit ID           - Edit a mistake's text or category
    mistakes delete ID         - Delete a mistake and its retests
    mistakes retests           - Show overdue, today's and upcoming retests
    mistakes complete ID RES   - Record a retest result (correct/incorrect)
    mistakes stats             - Weekly statistics
    mistakes quiz              - Quiz questions from unmastered mistakes
    mistakes db init           - Initialize database tables
    mistakes serve             - Run the REST API
    mistakes info              - Show configuration

IDs may be abbreviated to any unique prefix.

Usage:
    mistakes --help
    mistakes add "Off-by-one in loop" "Used <= instead of <" --category careless
    mistakes complete 3fa2 correct
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import Settings, get_settings
from mistake_tracker.core.categories import policy_for
from mistake_tracker.core.exceptions import TrackerError
from mistake_tracker.core.records import ErrorCategory, Mistake, Retest, RetestResult
from mistake_tracker.logging_setup import configure_logging
from mistake_tracker.service.agenda import AgendaItem
from mistake_tracker.service.factory import build_tracker
from mistake_tracker.service.tracker import MistakeTracker

app = typer.Typer(
    help="mistake-tracker CLI: log mistakes, retest them, track mastery",
    no_args_is_help=True,
)

console = Console()

SHORT_ID = 8


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class CLIContext:
    """
    Dependency injection container for CLI commands.

    The CLI always persists through SQLAlchemy; an in-memory store would
    forget everything between invocations.
    """

    def __init__(self, database_url: str | None = None, verbose: bool = False):
        base = get_settings()
        self.settings: Settings = base.model_copy(
            update={
                "storage_backend": "sql",
                "database_url": database_url or base.database_url,
            }
        )
        self.verbose = verbose
        self._tracker: MistakeTracker | None = None

    @property
    def tracker(self) -> MistakeTracker:
        if self._tracker is None:
            self._tracker = build_tracker(self.settings)
        return self._tracker


def _ctx(ctx: typer.Context) -> CLIContext:
    return ctx.obj


@app.callback()
def main_callback(
    ctx: typer.Context,
    database_url: Optional[str] = typer.Option(
        None, "--database-url", envvar="MISTAKES_DATABASE_URL", help="Override DATABASE_URL"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Track mistakes with spaced-repetition retests."""
    cli_ctx = CLIContext(database_url=database_url, verbose=verbose)
    configure_logging(cli_ctx.settings, level="DEBUG" if verbose else "WARNING")
    ctx.obj = cli_ctx


# ========================================
# Helpers
# ========================================


def _short(record_id: str) -> str:
    return record_id[:SHORT_ID]


def _fmt(value: datetime | None, tracker: MistakeTracker) -> str:
    if value is None:
        return "-"
    return value.astimezone(tracker.timezone).strftime("%Y-%m-%d %H:%M")


def _resolve(prefix: str, records: Sequence[Mistake] | Sequence[Retest], kind: str) -> str:
    """Expand an id prefix to a full id; exits on zero or ambiguous matches."""
    matches = [r.id for r in records if r.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        rprint(f"[red]✗[/red] {kind} not found: {prefix}")
    else:
        rprint(f"[red]✗[/red] Ambiguous {kind.lower()} id {prefix!r} ({len(matches)} matches)")
    raise typer.Exit(code=1)


def _category_cell(category: ErrorCategory) -> str:
    return policy_for(category).label


def _fail(exc: TrackerError) -> None:
    rprint(f"[red]✗[/red] {exc}")
    raise typer.Exit(code=1)


# ========================================
# MISTAKE COMMANDS
# ========================================


@app.command("add")
def add_mistake(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Short name of the mistake"),
    description: str = typer.Argument(..., help="What went wrong"),
    category: ErrorCategory = typer.Option(..., "--category", "-c", help="Error category"),
    root_cause: Optional[str] = typer.Option(None, "--root-cause", "-r", help="Why it happened"),
    principle: Optional[str] = typer.Option(None, "--principle", "-p", help="Rule to remember"),
) -> None:
    """Log a mistake and schedule its retests."""
    tracker = _ctx(ctx).tracker
    try:
        mistake = tracker.create_mistake(title, description, category, root_cause, principle)
    except TrackerError as e:
        _fail(e)

    retests = tracker.list_retests_for_mistake(mistake.id)
    rprint(f"[green]✓[/green] Logged [bold]{mistake.title}[/bold] ({_short(mistake.id)})")
    rprint(
        "  Retests: "
        + ", ".join(_fmt(r.scheduled_date, tracker) for r in retests)
    )


@app.command("list")
def list_mistakes(
    ctx: typer.Context,
    category: Optional[ErrorCategory] = typer.Option(None, "--category", "-c", help="Filter by category"),
    active: bool = typer.Option(False, "--active", help="Hide mastered mistakes"),
) -> None:
    """List logged mistakes, newest first."""
    tracker = _ctx(ctx).tracker
    mistakes = tracker.list_mistakes()
    if category:
        mistakes = [m for m in mistakes if m.category == category]
    if active:
        mistakes = [m for m in mistakes if not m.mastered]

    if not mistakes:
        rprint("[yellow]No mistakes logged yet.[/yellow]")
        return

    table = Table(title=f"Mistakes ({len(mistakes)})")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Category")
    table.add_column("Logged")
    table.add_column("Retests", justify="right")
    table.add_column("Mastered", justify="center")

    for m in mistakes:
        table.add_row(
            _short(m.id),
            m.title,
            _category_cell(m.category),
            _fmt(m.created_at, tracker),
            str(m.retest_count),
            "[green]●[/green]" if m.mastered else "○",
        )
    console.print(table)


@app.command("show")
def show_mistake(
    ctx: typer.Context,
    mistake_id: str = typer.Argument(..., help="Mistake id or unique prefix"),
) -> None:
    """Show a mistake with its notes and retest history."""
    tracker = _ctx(ctx).tracker
    full_id = _resolve(mistake_id, tracker.list_mistakes(), "Mistake")
    mistake = tracker.get_mistake(full_id)

    body = [
        f"[bold]{mistake.title}[/bold]  [dim]{_category_cell(mistake.category)}[/dim]",
        "",
        mistake.description,
    ]
    if mistake.root_cause:
        body += ["", f"[yellow]Root cause:[/yellow] {mistake.root_cause}"]
    if mistake.corrected_principle:
        body += ["", f"[green]Principle:[/green] {mistake.corrected_principle}"]
    status = "[green]Mastered[/green]" if mistake.mastered else "Active"
    body += ["", f"Status: {status}   Retests done: {mistake.retest_count}"]
    console.print(Panel("\n".join(body), title=_short(mistake.id), border_style="blue"))

    table = Table(title="Retests")
    table.add_column("ID", style="dim")
    table.add_column("Due")
    table.add_column("Result")
    table.add_column("Completed")
    for r in tracker.list_retests_for_mistake(full_id):
        result = "-"
        if r.result == RetestResult.CORRECT:
            result = "[green]correct[/green]"
        elif r.result == RetestResult.INCORRECT:
            result = "[red]incorrect[/red]"
        table.add_row(_short(r.id), _fmt(r.scheduled_date, tracker), result, _fmt(r.completed_at, tracker))
    console.print(table)


@app.command("edit")
def edit_mistake(
    ctx: typer.Context,
    mistake_id: str = typer.Argument(..., help="Mistake id or unique prefix"),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    category: Optional[ErrorCategory] = typer.Option(None, "--category", "-c"),
    root_cause: Optional[str] = typer.Option(None, "--root-cause", "-r"),
    principle: Optional[str] = typer.Option(None, "--principle", "-p"),
) -> None:
    """
    Edit a mistake. Options left out keep their current value.

    Changing the category does not reschedule existing retests.
    """
    tracker = _ctx(ctx).tracker
    full_id = _resolve(mistake_id, tracker.list_mistakes(), "Mistake")
    current = tracker.get_mistake(full_id)
    try:
        updated = tracker.update_mistake(
            full_id,
            title=title if title is not None else current.title,
            description=description if description is not None else current.description,
            category=category or current.category,
            root_cause=root_cause if root_cause is not None else current.root_cause,
            corrected_principle=principle if principle is not None else current.corrected_principle,
        )
    except TrackerError as e:
        _fail(e)
    rprint(f"[green]✓[/green] Updated [bold]{updated.title}[/bold]")


@app.command("delete")
def delete_mistake(
    ctx: typer.Context,
    mistake_id: str = typer.Argument(..., help="Mistake id or unique prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a mistake and all of its retests."""
    tracker = _ctx(ctx).tracker
    full_id = _resolve(mistake_id, tracker.list_mistakes(), "Mistake")
    if not yes:
        typer.confirm(f"Delete mistake {_short(full_id)} and its retests?", abort=True)
    tracker.delete_mistake(full_id)
    rprint(f"[green]✓[/green] Deleted {_short(full_id)}")


# ========================================
# RETEST COMMANDS
# ========================================


def _agenda_table(title: str, items: list[AgendaItem], tracker: MistakeTracker, style: str) -> Table:
    table = Table(title=title, title_style=style)
    table.add_column("Retest", style="dim")
    table.add_column("Due")
    table.add_column("Mistake", style="cyan")
    table.add_column("Category")
    for item in items:
        table.add_row(
            _short(item.retest.id),
            _fmt(item.retest.scheduled_date, tracker),
            item.mistake.title,
            _category_cell(item.mistake.category),
        )
    return table


@app.command("retests")
def show_retests(
    ctx: typer.Context,
    upcoming: bool = typer.Option(True, "--upcoming/--due-only", help="Include future retests"),
) -> None:
    """Show pending retests: overdue, due today and upcoming."""
    tracker = _ctx(ctx).tracker
    agenda = tracker.retest_agenda()

    if not (agenda.overdue or agenda.today or agenda.upcoming):
        rprint("[green]No pending retests.[/green]")
        return

    if agenda.overdue:
        console.print(_agenda_table("Overdue", agenda.overdue, tracker, "bold red"))
    if agenda.today:
        console.print(_agenda_table("Today", agenda.today, tracker, "bold yellow"))
    if upcoming and agenda.upcoming:
        console.print(_agenda_table("Upcoming", agenda.upcoming, tracker, "bold cyan"))
    rprint(f"\n[bold]{agenda.due_count}[/bold] retest(s) due now")


@app.command("complete")
def complete_retest(
    ctx: typer.Context,
    retest_id: str = typer.Argument(..., help="Retest id or unique prefix"),
    result: RetestResult = typer.Argument(..., help="correct or incorrect"),
) -> None:
    """Record the result of a retest."""
    tracker = _ctx(ctx).tracker
    full_id = _resolve(retest_id, tracker.list_retests(), "Retest")
    try:
        retest = tracker.complete_retest(full_id, result)
    except TrackerError as e:
        _fail(e)

    mistake = tracker.get_mistake(retest.mistake_id)
    mark = "[green]✓ correct[/green]" if result == RetestResult.CORRECT else "[red]✗ incorrect[/red]"
    rprint(f"{mark}  {mistake.title}")
    if mistake.mastered:
        rprint("[bold green]Mastered![/bold green]")
    elif result == RetestResult.INCORRECT:
        rprint(f"  Follow-up retest in {tracker.scheduler.remediation_interval_days} day(s)")


# ========================================
# STATS & QUIZ
# ========================================


@app.command("stats")
def show_stats(ctx: typer.Context) -> None:
    """Weekly statistics and the last 7 days of activity."""
    tracker = _ctx(ctx).tracker
    stats = tracker.weekly_stats()

    summary = Table(title=f"Week of {stats.week_start.date().isoformat()}")
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right", style="green")
    summary.add_row("Mistakes logged", str(stats.total_mistakes))
    summary.add_row("Retests completed", str(stats.total_retests))
    summary.add_row("Correct retests", str(stats.correct_retests))
    if stats.accuracy is not None:
        summary.add_row("Accuracy", f"{stats.accuracy:.0%}")
    console.print(summary)

    if stats.top_patterns:
        patterns = Table(title="Top Patterns")
        patterns.add_column("Category", style="cyan")
        patterns.add_column("Mistakes", justify="right")
        for p in stats.top_patterns:
            patterns.add_row(_category_cell(p.category), str(p.count))
        console.print(patterns)

    activity = Table(title="Last 7 Days")
    activity.add_column("Date")
    activity.add_column("Mistakes", justify="right")
    activity.add_column("Retests", justify="right")
    for day in stats.recent_activity:
        activity.add_row(day.date.isoformat(), str(day.mistakes), str(day.retests))
    console.print(activity)


@app.command("quiz")
def show_quiz(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum questions"),
) -> None:
    """Print quiz questions built from unmastered mistakes."""
    tracker = _ctx(ctx).tracker
    questions = tracker.quiz_questions(limit)
    if not questions:
        rprint("[yellow]Nothing to quiz: log a mistake first.[/yellow]")
        return

    for i, q in enumerate(questions, 1):
        answer = q.correct_principle or "[dim]No principle recorded for this mistake.[/dim]"
        console.print(
            Panel(
                f"{q.description}\n\n[green]Answer:[/green] {answer}",
                title=f"{i}. {q.question}",
                subtitle=_category_cell(q.category),
                border_style="cyan",
            )
        )


# ========================================
# DATABASE & SERVICE
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init(ctx: typer.Context) -> None:
    """
    Initialize database tables.

    Safe to run multiple times (idempotent).
    """
    logger.info("Initializing database tables...")
    tracker = _ctx(ctx).tracker
    counts = tracker.health()
    rprint(
        f"[green]✓[/green] Database initialized! "
        f"({counts['mistakes']} mistakes, {counts['retests']} retests)"
    )


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
) -> None:
    """Run the REST API with uvicorn."""
    import uvicorn

    from mistake_tracker.api.main import create_app

    cli_ctx = _ctx(ctx)
    settings = cli_ctx.settings
    configure_logging(settings)
    uvicorn.run(
        create_app(settings, cli_ctx.tracker),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


@app.command("info")
def show_info(ctx: typer.Context) -> None:
    """Show configuration."""
    settings = _ctx(ctx).settings

    table = Table(title="mistake-tracker Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Database URL", settings.database_url)
    table.add_row("Remediation interval", f"{settings.remediation_interval_days} day(s)")
    table.add_row("Mastery streak", str(settings.mastery_streak))
    table.add_row("Stats timezone", settings.stats_timezone)
    table.add_row("Quiz size", str(settings.quiz_question_limit))
    table.add_row("Log Level", settings.log_level)
    console.print(table)

    categories = Table(title="Retest Schedule by Category")
    categories.add_column("Category", style="cyan")
    categories.add_column("Days after logging")
    for category in ErrorCategory:
        policy = policy_for(category)
        categories.add_row(policy.label, ", ".join(str(d) for d in policy.retest_days))
    console.print(categories)


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
