"""ladder CLI — item registration, review sessions, statistics, and the API server."""

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
from pydantic import ValidationError

from ladder.application.config import AppConfig, resolve_config
from ladder.application.factory import Services, build_services
from ladder.domain.errors import InvalidInput, LadderError, NotFound, StoreUnavailable
from ladder.domain.models import LearningItem

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="ladder: spaced-repetition review scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage ladder configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

QUALITY_PROMPT = "Rating (0=forgot, 1=hard, 2=good, 3=easy, q=quit)"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def humanize_error(error: LadderError) -> str:
    """Turn an engine error into a one-line message for the terminal."""
    if isinstance(error, StoreUnavailable):
        return f"Storage is unavailable, try again later ({error})"
    return str(error)


def _exit_code(error: LadderError) -> int:
    if isinstance(error, InvalidInput):
        return 2
    return 1


def _resolve_with_overrides(ctx: typer.Context, **overrides: Any) -> AppConfig:
    obj = ctx.obj or {}
    try:
        return resolve_config(
            {
                "backend": obj.get("backend"),
                "db_path": obj.get("db_path"),
                **overrides,
            }
        )
    except ValidationError as e:
        typer.secho(f"Invalid configuration:\n{e}", fg="red", err=True)
        raise typer.Exit(2) from e


def _run(ctx: typer.Context, action: Callable[[Services], Awaitable[T]]) -> T:
    """Wire the services for this invocation and run one async action."""
    try:
        services = build_services(_resolve_with_overrides(ctx))
        return asyncio.run(action(services))
    except (NotFound, InvalidInput, StoreUnavailable) as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(_exit_code(e)) from e


def _item_text(item: LearningItem, width: int = 60) -> str:
    text = item.content.get("text") or next(
        (v for v in item.content.values() if isinstance(v, str)), ""
    )
    text = " ".join(str(text).split())
    return text if len(text) <= width else text[: width - 3] + "..."


def _print_item_row(item: LearningItem) -> None:
    from ladder.application.scheduler import interval_label

    sched = item.schedule
    typer.echo(
        f"{item.id}  {sched.next_review_date}  {interval_label(sched.interval_index):<14}"
        f"  {item.category or '-':<10}  {_item_text(item)}"
    )


def _to_jsonable(value: Any) -> Any:
    return json.loads(json.dumps(value, default=str))


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    db_path: Annotated[
        Path | None, typer.Option("--db-path", help="SQLite database file.")
    ] = None,
    backend: Annotated[
        str | None, typer.Option(help="Item store backend: sqlite, memory.")
    ] = None,
):
    """Global settings for ladder."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path
    ctx.obj["backend"] = backend
    if verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger().setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Item commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Content to memorize.")],
    category: Annotated[str, typer.Option(help="Category tag used in statistics.")] = "",
):
    """Register a new item. It is due for review today."""
    from ladder.application.id_service import register_item

    async def run(services: Services) -> LearningItem:
        return await register_item(
            services.store, services.clock, category=category, content={"text": text}
        )

    item = _run(ctx, run)
    typer.secho(f"Added {item.id}", fg="green")


@app.command()
def due(ctx: typer.Context):
    """List items due for review today."""
    from ladder.application.queue_builder import load_due_items, order_oldest_first

    async def run(services: Services) -> list[LearningItem]:
        return await load_due_items(services.store, services.clock.today())

    items = _run(ctx, run)
    if not items:
        typer.secho("Nothing due today.", fg="green")
        return
    typer.echo(f"Due today: {len(items)}")
    for item in order_oldest_first(items):
        _print_item_row(item)


@app.command()
def upcoming(
    ctx: typer.Context,
    days: Annotated[int, typer.Option(help="Days ahead to look.")] = 7,
):
    """List items coming due in the next few days."""
    from ladder.application.queue_builder import load_upcoming_items

    async def run(services: Services) -> list[LearningItem]:
        return await load_upcoming_items(services.store, services.clock.today(), days=days)

    items = _run(ctx, run)
    if not items:
        typer.echo(f"Nothing due in the next {days} days.")
        return
    for item in items:
        _print_item_row(item)


@app.command()
def rate(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Item to rate.")],
    quality: Annotated[int, typer.Argument(help="0=forgot, 1=hard, 2=good, 3=easy.")],
):
    """Record a single rating outside a session."""

    async def run(services: Services) -> LearningItem:
        return await services.recorder.record_review(item_id, quality)

    item = _run(ctx, run)
    sched = item.schedule
    typer.echo(
        f"{item.id}: {sched.status.value}, next review {sched.next_review_date} "
        f"(rung {sched.interval_index})"
    )


@app.command()
def suspend(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Item to suspend.")],
):
    """Exclude an item from reviews until resumed."""
    item = _run(ctx, lambda services: services.recorder.suspend(item_id))
    typer.echo(f"{item.id}: {item.schedule.status.value}")


@app.command()
def resume(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Item to resume.")],
):
    """Return a suspended item to rotation."""
    item = _run(ctx, lambda services: services.recorder.resume(item_id))
    typer.echo(f"{item.id}: {item.schedule.status.value}")


@app.command()
def reset(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Item to restart.")],
):
    """Restart an item's schedule from the first rung."""
    item = _run(ctx, lambda services: services.recorder.reset_to_new(item_id))
    typer.echo(f"{item.id}: {item.schedule.status.value}, due {item.schedule.next_review_date}")


# ---------------------------------------------------------------------------
# Review session
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    order: Annotated[
        str | None,
        typer.Option(help="Queue order: oldest_first, random. Defaults to config."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option(help="Maximum items this session. Defaults to config.daily_review_limit."),
    ] = None,
):
    """[bold green]Review[/bold green] today's due items one at a time."""
    from ladder.application.queue_builder import REVIEW_ORDERS, load_due_items
    from ladder.application.session import ReviewSession, SessionState

    config = _resolve_with_overrides(ctx)
    session_order = order or config.review_order
    if session_order not in REVIEW_ORDERS:
        typer.secho(f"Unknown order '{session_order}'. Use oldest_first or random.", fg="red")
        raise typer.Exit(2)
    session_limit = limit if limit is not None else config.daily_review_limit

    async def run(services: Services) -> None:
        session = ReviewSession(services.recorder, clock=services.clock)
        items = await load_due_items(services.store, services.clock.today())
        if not session.start(items, order=session_order, limit=session_limit):
            typer.secho("Nothing to review today.", fg="green")
            return

        while session.state == SessionState.IN_PROGRESS:
            item = session.current()
            progress = session.progress()
            typer.echo(f"\n[{progress.current}/{progress.total}] {item.category or '-'}")
            typer.echo(_item_text(item, width=400))

            answer = typer.prompt(QUALITY_PROMPT).strip().lower()
            if answer == "q":
                session.complete()
                break
            try:
                await session.record_current(int(answer))
            except (ValueError, InvalidInput):
                typer.secho("Please answer 0, 1, 2, 3 or q.", fg="yellow")
                continue
            except NotFound as e:
                typer.secho(f"{humanize_error(e)}; skipping.", fg="yellow", err=True)
                if not session.has_next():
                    session.complete()
            except StoreUnavailable as e:
                typer.secho(humanize_error(e), fg="red", err=True)
                session.complete()
                break

            if session.has_next():
                session.advance()

        summary = session.summary()
        session.end()

        breakdown = summary.ratings_breakdown
        typer.secho("\nSession complete!", fg="green")
        typer.echo(f"Reviews: {summary.total_reviews}  Time: {summary.duration_minutes} min")
        typer.echo(
            f"Forgot: {breakdown.forgot}  Hard: {breakdown.hard}  "
            f"Good: {breakdown.good}  Easy: {breakdown.easy}  "
            f"Average: {summary.average_quality}"
        )
        try:
            ledger = await services.ledger.get()
        except StoreUnavailable as e:
            logger.warning(f"Could not load streak after session: {e}")
            return
        typer.echo(f"Streak: {ledger.current_streak} days")

    _run(ctx, run)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    category: Annotated[str | None, typer.Option(help="Restrict to one category.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show learning progress, streaks, and projected mastery dates."""
    from ladder.domain.models import ItemFilter

    async def run(services: Services) -> dict[str, Any]:
        today = services.clock.today()
        item_filter = ItemFilter(category=category) if category else None
        items = await services.store.list_items(item_filter)
        ledger = await services.ledger.get()
        calc = services.calculator
        return {
            "statistics": asdict(calc.compute(items, today)),
            "ledger": {
                "total_reviews": ledger.total_reviews,
                "current_streak": ledger.current_streak,
                "longest_streak": ledger.longest_streak,
                "last_review_date": ledger.last_review_date,
            },
            "categories": {
                name: {**asdict(progress), "mastered_percent": progress.mastered_percent}
                for name, progress in calc.category_breakdown(items).items()
            },
            "mastery_timeline": [asdict(p) for p in calc.mastery_timeline(items, today)],
        }

    report = _run(ctx, run)

    if json_output:
        typer.echo(json.dumps(_to_jsonable(report), indent=2))
        return

    s = report["statistics"]
    ledger = report["ledger"]
    typer.echo(
        f"Items: {s['total']}  New: {s['new']}  Learning: {s['learning']}"
        f"  Mastered: {s['mastered']}  Suspended: {s['suspended']}"
    )
    typer.echo(
        f"Due today: {s['due_today']}  Tomorrow: {s['due_tomorrow']}"
        f"  Within 7 days: {s['due_within_7_days']}"
    )
    typer.echo(f"Accuracy: {s['accuracy_rate']}%")
    typer.echo(
        f"Reviews: {ledger['total_reviews']}  Streak: {ledger['current_streak']}"
        f"  Longest: {ledger['longest_streak']}"
    )

    if report["categories"]:
        typer.echo("\nBy category:")
        for name, progress in report["categories"].items():
            typer.echo(
                f"  {name:<12} {progress['mastered']}/{progress['total']} mastered"
                f" ({progress['mastered_percent']}%)"
            )

    if report["mastery_timeline"]:
        typer.echo("\nProjected mastery:")
        for p in report["mastery_timeline"]:
            typer.echo(f"  {p['estimated_date']}  {p['category']:<12} {p['item_id']}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8777,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API server."""
    import uvicorn

    uvicorn.run("ladder.server:app", host=host, port=port, reload=reload)
