"""CLI interface for contentq."""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from contentq.config import load_config, merge_cli_overrides
from contentq.content import ContentCategory
from contentq.engine import Engine, build_engine
from contentq.errors import ContentQError
from contentq.pipeline import InboundMessage, build_lineup

app = typer.Typer(
    name="contentq",
    help="Content lifecycle and publishing queue.",
)
queue_app = typer.Typer(help="Inspect and reorder publishing queues.")
app.add_typer(queue_app, name="queue")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from contentq import __version__

        console.print(f"contentq {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a .contentq.toml file."),
    ] = None,
    store: Annotated[
        Path | None,
        typer.Option("--store", help="Path to the content store JSON file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """contentq - review, queue and publish blog and LinkedIn content."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"config": config, "store": store}


def _engine(ctx: typer.Context) -> Engine:
    opts = ctx.obj or {}
    cfg = load_config(opts.get("config"))
    store = opts.get("store")
    cfg = merge_cli_overrides(cfg, store_path=str(store) if store else None)
    try:
        return build_engine(cfg)
    except ContentQError as exc:
        _fail(exc)


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(1)


def _category_of(engine: Engine, content_id: str) -> ContentCategory:
    item = engine.store.get(content_id)
    if item is None:
        console.print(f"[red]Error:[/red] Content not found: {content_id}")
        raise typer.Exit(1)
    return item.category


# ── queue ────────────────────────────────────────────────────────


@queue_app.command("show")
def queue_show(
    ctx: typer.Context,
    category: Annotated[
        ContentCategory | None,
        typer.Argument(help="Only show this category."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Show at most this many items per queue."),
    ] = None,
) -> None:
    """Show queued items in publish order."""
    engine = _engine(ctx)
    categories = [category] if category else list(ContentCategory)
    for cat in categories:
        items = engine.queue.list(cat, limit=limit)
        table = Table(title=f"{cat.value} queue")
        table.add_column("#", justify="right")
        table.add_column("ID")
        table.add_column("Title")
        table.add_column("v", justify="right")
        for item in items:
            table.add_row(str(item.queue_position), item.id[:8], item.label, str(item.version))
        if items:
            console.print(table)
        else:
            console.print(f"[yellow]No {cat.value} content queued.[/yellow]")


@queue_app.command("swap")
def queue_swap(
    ctx: typer.Context,
    content_id: Annotated[str, typer.Argument(help="Item to move one slot back.")],
) -> None:
    """Swap an item with the one right behind it."""
    engine = _engine(ctx)
    category = _category_of(engine, content_id)
    try:
        position = engine.queue.swap_with_next(content_id, category)
    except ContentQError as exc:
        _fail(exc)
    console.print(f"[green]Moved[/green] {content_id} to {category.value} #{position}")


@queue_app.command("move")
def queue_move(
    ctx: typer.Context,
    content_id: Annotated[str, typer.Argument(help="Item to move.")],
    position: Annotated[int, typer.Argument(help="Target queue position (1 = next).")],
) -> None:
    """Move an item to a position, swapping with the item already there."""
    engine = _engine(ctx)
    category = _category_of(engine, content_id)
    try:
        moved = engine.queue.move_to(content_id, category, position)
    except ContentQError as exc:
        _fail(exc)
    if moved:
        console.print(f"[green]Moved[/green] {content_id} to {category.value} #{position}")
    else:
        console.print(f"{content_id} is already at {category.value} #{position}")


@queue_app.command("health")
def queue_health(
    ctx: typer.Context,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with status 2 when any queue is below minimum."),
    ] = False,
) -> None:
    """Compare queue depth with the configured minimum per category."""
    engine = _engine(ctx)
    low = False
    for cat in ContentCategory:
        health = engine.queue.health(cat)
        if health.needs_content:
            low = True
            console.print(
                f"[yellow]{cat.value}: {health.depth} queued (minimum {health.minimum})"
                "[/yellow]"
            )
        else:
            console.print(f"{cat.value}: {health.depth} queued (minimum {health.minimum})")
    if strict and low:
        raise typer.Exit(2)


# ── pipelines ────────────────────────────────────────────────────


@app.command()
def publish(
    ctx: typer.Context,
    category: Annotated[ContentCategory, typer.Argument(help="Category to publish.")],
) -> None:
    """Publish the head of a category's queue."""
    engine = _engine(ctx)
    try:
        result = engine.publish_driver().tick(category)
    except (ContentQError, ValueError) as exc:
        _fail(exc)
    if not result.published:
        console.print(f"[yellow]Nothing queued for {category.value}.[/yellow]")
        return
    console.print(
        f"[green]Published[/green] {result.content_id} "
        f"({result.external_id or 'no external id'}), {result.remaining} left"
    )


@app.command()
def ingest(
    ctx: typer.Context,
    message_id: Annotated[str, typer.Option("--message-id", help="Inbound message id.")],
    body_file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Read the message body from a file."),
    ] = None,
    body: Annotated[
        str | None,
        typer.Option("--body", "-b", help="Message body (default: stdin)."),
    ] = None,
    thread_id: Annotated[
        str | None,
        typer.Option("--thread", "-t", help="Thread the message replies to."),
    ] = None,
    received_at: Annotated[
        datetime | None,
        typer.Option("--received-at", help="When the message arrived (default: now)."),
    ] = None,
) -> None:
    """Handle one inbound message: a new idea, or a reply on a review thread."""
    if body is None:
        body = body_file.read_text(encoding="utf-8") if body_file else sys.stdin.read()
    if not body.strip():
        console.print("[red]Error:[/red] Message body is empty")
        raise typer.Exit(1)

    when = received_at or datetime.now(tz=UTC)
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)

    engine = _engine(ctx)
    message = InboundMessage(
        message_id=message_id, body=body, thread_id=thread_id, received_at=when
    )
    try:
        result = engine.intake_pipeline().handle(message)
    except ContentQError as exc:
        _fail(exc)

    if result.status == "created":
        console.print(f"[green]Created[/green] {len(result.content_ids)} item(s) for review")
        for cid in result.content_ids:
            console.print(f"  {cid}")
    elif result.status == "applied" and result.resolution is not None:
        res = result.resolution
        console.print(
            f"[green]Applied[/green] {res.action} to {res.content_id} "
            f"(state={res.state}, position={res.queue_position})"
        )
    elif result.status == "unclear":
        console.print(f"[yellow]Could not act on reply:[/yellow] {result.detail}")
    else:
        console.print(f"[yellow]Skipped:[/yellow] {result.detail or 'already applied'}")


@app.command()
def lineup(
    ctx: typer.Context,
    depth: Annotated[
        int,
        typer.Option("--depth", help="Upcoming items to list after the scheduled ones."),
    ] = 3,
) -> None:
    """Print the coming week's publishing lineup."""
    engine = _engine(ctx)
    console.print(build_lineup(engine.queue, depth), markup=False, highlight=False)


if __name__ == "__main__":
    app()
