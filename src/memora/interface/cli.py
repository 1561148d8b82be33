"""memora CLI — record reviews and inspect deck schedules."""

import asyncio
import dataclasses
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer

from memora.application.config import AppConfig, resolve_config
from memora.application.factory import get_review_repository, get_review_service
from memora.domain.errors import MemoraError
from memora.domain.scheduling.models import ReviewOutcome, ReviewSubmission

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="memora: SM-2 spaced repetition scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage memora configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve(ctx: typer.Context, **overrides: Any) -> AppConfig:
    obj = ctx.obj or {}
    config = resolve_config(
        {"store_path": obj.get("store_path"), "verbose": obj.get("verbose_bonus"), **overrides}
    )
    logging.getLogger("memora").setLevel(logging.DEBUG if config.verbose > 1 else logging.INFO)
    return config


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def _dump(value: Any) -> str:
    if dataclasses.is_dataclass(value):
        value = dataclasses.asdict(value)
    elif isinstance(value, list):
        value = [dataclasses.asdict(v) if dataclasses.is_dataclass(v) else v for v in value]
    return json.dumps(value, indent=2, default=_json_default)


def _run(coro):
    try:
        return asyncio.run(coro)
    except MemoraError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)


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
    ] = 1,
    store: Annotated[
        Path | None, typer.Option("--store", help="Review store file. Defaults to config.")
    ] = None,
):
    """Global settings for memora."""
    ctx.ensure_object(dict)
    ctx.obj["verbose_bonus"] = verbose
    ctx.obj["store_path"] = store


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card that was answered.")],
    deck: Annotated[str, typer.Option("--deck", "-d", help="Deck the card belongs to.")],
    incorrect: Annotated[
        bool, typer.Option("--incorrect", help="The answer was wrong.")
    ] = False,
    time_ms: Annotated[
        float, typer.Option("--time-ms", help="Response time in milliseconds.")
    ] = 0.0,
    timed_out: Annotated[
        bool, typer.Option("--timed-out", help="No answer was given in time.")
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Record[/bold green] one answered card and reschedule it."""
    config = _resolve(ctx)
    submission = ReviewSubmission(
        card_id=card_id,
        deck_id=deck,
        outcome=ReviewOutcome(correct=not incorrect, response_time_ms=time_ms, timed_out=timed_out),
    )

    async def run():
        await get_review_repository(config).add_deck_cards(deck, [card_id])
        return await get_review_service(config).submit_reviews([submission])

    results = _run(run())
    if not results:
        typer.secho("Review was not recorded.", fg="yellow")
        raise typer.Exit(1)

    result = results[0]
    if json_output:
        typer.echo(_dump(result))
    else:
        typer.echo(
            f"{result.card_id}: quality {result.quality}, "
            f"next review in {result.interval_days}d ({result.next_review:%Y-%m-%d %H:%M}), "
            f"strength {result.memory_strength:.2f}"
        )


@app.command("add-cards")
def add_cards(
    ctx: typer.Context,
    deck: Annotated[str, typer.Argument(help="Deck to add cards to.")],
    card_ids: Annotated[list[str], typer.Argument(help="Card IDs to add.")],
):
    """Register cards as members of a deck."""
    config = _resolve(ctx)
    _run(get_review_repository(config).add_deck_cards(deck, card_ids))
    typer.secho(f"Deck '{deck}' now tracks {len(card_ids)} more card(s).", fg="green")


@app.command()
def study(
    ctx: typer.Context,
    deck: Annotated[str, typer.Argument(help="Deck the cards belong to.")],
    card_ids: Annotated[list[str], typer.Argument(help="Card IDs that were studied.")],
):
    """Mark cards as studied so they enter review scheduling."""
    config = _resolve(ctx)

    async def run():
        await get_review_repository(config).add_deck_cards(deck, card_ids)
        return await get_review_service(config).mark_studied(deck, card_ids)

    count = _run(run())
    typer.secho(f"Marked {count} card(s) as studied.", fg="green")


@app.command()
def queue(
    ctx: typer.Context,
    deck: Annotated[str, typer.Argument(help="Deck to build the queue for.")],
    limit: Annotated[int | None, typer.Option(help="Maximum queue length.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show cards needing review, most urgent first."""
    config = _resolve(ctx, queue_limit=limit)
    overview = _run(get_review_service(config).get_deck_overview(deck, limit=config.queue_limit))
    entries = overview.cards_for_review

    if json_output:
        typer.echo(_dump(entries))
        return

    if not entries:
        typer.secho("No cards need review.", fg="green")
        return

    for entry in entries:
        typer.echo(
            f"  {entry.card_id}  overdue {entry.overdue_days:.1f}d  strength {entry.strength:.2f}"
        )


@app.command()
def session(
    ctx: typer.Context,
    deck: Annotated[str, typer.Argument(help="Deck to study.")],
    size: Annotated[int | None, typer.Option(help="Cards per session.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Pick the cards for the next study session."""
    config = _resolve(ctx, session_size=size)
    picked = _run(get_review_service(config).get_review_session(deck, size=config.session_size))

    if json_output:
        typer.echo(_dump(picked))
        return

    if not picked.cards:
        typer.secho("Nothing to review.", fg="green")
        return

    typer.echo(f"Showing {len(picked.cards)} of {picked.total_due} due card(s):")
    for card in picked.cards:
        typer.echo(
            f"  {card.card_id}  overdue {card.overdue_days:.1f}d  "
            f"strength {card.strength:.2f}  accuracy {card.accuracy:.0%} ({card.seen} seen)"
        )


@app.command()
def stats(
    ctx: typer.Context,
    deck: Annotated[str, typer.Argument(help="Deck to summarize.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show deck health: due, overdue, learning and mature counts."""
    config = _resolve(ctx)
    overview = _run(
        get_review_service(config).get_deck_overview(
            deck, limit=config.queue_limit, heat_map_days=config.heat_map_days
        )
    )

    if json_output:
        typer.echo(_dump(overview))
        return

    s = overview.stats
    typer.echo(
        f"Cards: {overview.total_cards}  Studied: {overview.studied_cards}  New: {overview.new_cards}"
    )
    typer.echo(f"Due today: {s.due_today}  Overdue: {s.overdue}")
    typer.echo(f"Learning: {s.learning}  Mature: {s.mature}")
    typer.echo(f"Average ease: {s.average_ease:.2f}  Average strength: {s.average_strength:.2f}")
    if s.next_review_date is not None:
        typer.echo(f"Next review: {s.next_review_date:%Y-%m-%d %H:%M}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
