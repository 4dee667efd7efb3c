"""
Typer CLI for the curriculum engine.

Commands:
    curriculum session PLAN_ID          - Show today's practice session
    curriculum grade PLAN_ID ITEM GRADE - Submit one graded response
    curriculum sweep                    - Move due learned items to review
    curriculum sweep --watch            - Keep sweeping on the configured cadence
    curriculum import-plan FILE         - Load a plan document into the store
    curriculum init-db                  - Initialize database tables
    curriculum serve                    - Run the HTTP API
    curriculum info                     - Show configuration

Usage:
    curriculum --help
    curriculum session plan-42 --now 2024-03-04T09:00
    curriculum grade plan-42 vocab-7 4 --lesson lesson-3
    curriculum sweep --watch
"""

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from curriculum_engine import __version__
from curriculum_engine.config import get_settings
from curriculum_engine.content.models import ItemType
from curriculum_engine.errors import CurriculumError

console = Console()

app = typer.Typer(
    help="curriculum-engine CLI: daily practice sessions and SM-2 scheduling",
    no_args_is_help=True,
)

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}"


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", "-l", help="Override LOG_LEVEL"),
) -> None:
    """
    Adaptive spaced-repetition practice engine.
    """
    logger.remove()
    logger.add(sys.stderr, level=(log_level or get_settings().log_level).upper(), format=LOG_FORMAT)


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class CLIContext:
    """
    Dependency injection container for CLI commands.

    Lazily initializes stores so commands that only read settings never
    open a database connection.
    """

    def __init__(self, plan_store=None, contents=None):
        self.settings = get_settings()
        self._plan_store = plan_store
        self._contents = contents
        self._service = None

    @property
    def plan_store(self):
        """Lazy load SqlPlanStore."""
        if self._plan_store is None:
            from curriculum_engine.db.plan_store import SqlPlanStore

            self._plan_store = SqlPlanStore()
        return self._plan_store

    @property
    def contents(self):
        """Lazy load content from CONTENT_DIR."""
        if self._contents is None:
            from curriculum_engine.content.loader import ContentLoader

            self._contents = ContentLoader(self.settings.content_dir).load()
        return self._contents

    @property
    def service(self):
        if self._service is None:
            from curriculum_engine.study.practice_service import PracticeService

            self._service = PracticeService(self.plan_store, self.contents, self.settings)
        return self._service


def _build_context() -> CLIContext:
    """Build CLI context with dependency injection."""
    return CLIContext()


def _parse_now(now: str | None) -> datetime:
    if not now:
        return datetime.now()
    try:
        return datetime.fromisoformat(now)
    except ValueError:
        rprint(f"[red]✗[/red] Not an ISO date/time: {now}")
        raise typer.Exit(code=2)


# ========================================
# PRACTICE COMMANDS
# ========================================


@app.command("session")
def show_session(
    plan_id: str = typer.Argument(..., help="Plan id"),
    now: str = typer.Option(None, "--now", help="ISO date/time to build the session for"),
) -> None:
    """Show today's practice session for a plan."""
    ctx = _build_context()
    try:
        session = ctx.service.get_session(plan_id, _parse_now(now))
    except CurriculumError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if session.error:
        rprint(f"[yellow]⚠[/yellow] {session.error}")

    table = Table(title=f"Day {session.day_index}: {session.modality.value} ({session.total_items} items)")
    table.add_column("Item", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("Modality", style="magenta")
    table.add_column("Text")
    table.add_column("Due", style="green")

    for item in session.items:
        due = str(item.state.due_date) if item.state and item.state.due_date else "-"
        table.add_row(item.id, item.item_type.value, item.modality.value, item.text, due)

    console.print(table)
    if session.review_count:
        rprint(f"  {session.review_count} review items")


@app.command("grade")
def grade_item(
    plan_id: str = typer.Argument(..., help="Plan id"),
    item_id: str = typer.Argument(..., help="Vocabulary or structure id"),
    grade: int = typer.Argument(..., help="SM-2 grade 0-5"),
    item_type: ItemType = typer.Option(ItemType.VOCABULARY, "--type", "-t", help="Item type"),
    lesson_id: str = typer.Option(None, "--lesson", help="Lesson the item was practiced in"),
    now: str = typer.Option(None, "--now", help="ISO date/time of the response"),
) -> None:
    """Submit one graded response."""
    ctx = _build_context()
    try:
        result = ctx.service.submit_response(plan_id, lesson_id, item_id, item_type, grade, _parse_now(now))
    except CurriculumError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    state = result.state
    rprint(
        f"[green]✓[/green] {item_id}: interval {state.interval}d, repetition {state.repetition}, "
        f"ease {state.ease_factor:.2f}, due {state.due_date}"
    )
    if result.moved:
        rprint(f"  moved to [bold]{result.queue.value}[/bold]")


@app.command("sweep")
def sweep(
    watch: bool = typer.Option(False, "--watch", help="Keep running on the configured cadence"),
    interval: int = typer.Option(None, "--interval", help="Minutes between sweeps (with --watch)"),
) -> None:
    """Move learned items whose due date has arrived to the review queue."""
    from curriculum_engine.study.review_sweep import run_review_sweep, watch_review_sweep

    ctx = _build_context()
    retries = ctx.settings.max_update_retries

    if watch:
        minutes = interval or ctx.settings.review_sweep_interval_minutes
        rprint(f"Sweeping every {minutes} minutes (Ctrl+C to stop)")
        try:
            watch_review_sweep(ctx.plan_store, minutes, retries)
        except KeyboardInterrupt:
            rprint("Stopped")
        return

    report = run_review_sweep(ctx.plan_store, datetime.now(), retries)

    table = Table(title="Review Sweep")
    table.add_column("Plan", style="cyan")
    table.add_column("Moved to review", style="green")
    for plan_id, moved in report.moved.items():
        table.add_row(plan_id, ", ".join(moved))
    console.print(table)
    rprint(f"{report.plans_checked} plans checked, {report.total_moved} items moved")
    if report.failed:
        rprint(f"[yellow]⚠[/yellow] Could not update: {', '.join(report.failed)}")
        raise typer.Exit(code=1)


@app.command("import-plan")
def import_plan(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Plan JSON document"),
) -> None:
    """Load a plan document into the plan store."""
    from pydantic import ValidationError

    from curriculum_engine.plan.store import plan_from_document

    try:
        plan = plan_from_document(json.loads(path.read_text(encoding="utf-8")))
    except (ValueError, ValidationError) as e:
        rprint(f"[red]✗[/red] Invalid plan document: {e}")
        raise typer.Exit(code=1)

    ctx = _build_context()
    try:
        ctx.plan_store.add(plan)
    except ValueError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    rprint(f"[green]✓[/green] Imported plan {plan.id} ({len(plan.lessons)} lessons)")


# ========================================
# SERVICE COMMANDS
# ========================================


@app.command("init-db")
def init_database() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from sqlalchemy.exc import SQLAlchemyError

    from curriculum_engine.db.database import init_db

    logger.info("Initializing database tables...")
    try:
        init_db()
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise typer.Exit(code=1)
    rprint("[green]✓[/green] Database initialized!")


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind host (default API_HOST)"),
    port: int = typer.Option(None, "--port", help="Bind port (default API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "curriculum_engine.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("info")
def show_info() -> None:
    """Show configuration."""
    settings = get_settings()

    table = Table(title="curriculum-engine Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Database URL", settings.database_url.split("@")[-1])
    table.add_row("Content dir", str(settings.content_dir))
    table.add_row("API", f"{settings.api_host}:{settings.api_port}")
    table.add_row("Promotion threshold", str(settings.promotion_min_repetitions))
    table.add_row("Sweep interval (min)", str(settings.review_sweep_interval_minutes))
    table.add_row("Update retries", str(settings.max_update_retries))
    table.add_row("Short segment (s)", str(settings.short_segment_seconds))
    table.add_row("Log Level", settings.log_level)

    console.print(table)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]curriculum-engine[/bold] v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
