"""
Command-line interface for plaintext-casa.

Uses Typer to expose the parser and the timeline assembler. Parsed feeds and
timelines are written to stdout as JSON for other tools to render;
diagnostics go to stderr.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from .config import load_config
from .logging_utils import setup_logging
from .parser import read_feed
from .pages import list_pages
from .posts import append_post
from .timeline import assemble_timeline_sync
from .types import DebugMessage, FeedParserResult, TimelineResult
from .util import info_msg, is_rfc3339_date

app = typer.Typer(add_completion=False)
console = Console(stderr=True)

SEVERITY_STYLES = {
    "debug": "dim",
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
}


@app.command()
def check(
    feed: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
):
    """Parse a feed and report warnings and errors.

    Exits with code 1 when the feed has errors.
    """
    result = _read_or_exit(feed)

    messages = 0
    for message in result.warnings.header + result.errors.header:
        _print_message("header", message)
        messages += 1
    for index, post in enumerate(result.feed.posts):
        label = f"post {index + 1} ({post.id or 'no id'})"
        post_messages = result.warnings.posts[index] + result.errors.posts[index]
        if post.id and not is_rfc3339_date(post.id):
            post_messages.append(info_msg("id is not an RFC 3339 timestamp"))
        for message in post_messages:
            _print_message(label, message)
            messages += 1

    if result.errors:
        raise typer.Exit(code=1)
    if messages == 0:
        console.print(f"{escape(str(feed))}: ok ({len(result.feed.posts)} posts)")


@app.command()
def parse(
    feed: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
):
    """Print the parsed feed as JSON."""
    result = _read_or_exit(feed)
    typer.echo(json.dumps(asdict(result.feed), indent=2, ensure_ascii=False))


@app.command()
def timeline(
    feed: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    feed_only: bool = typer.Option(False, "--feed-only", help="Skip followed feeds."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Assemble the timeline of a feed and the feeds it follows, as JSON."""
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    logger = setup_logging(cfg.logging)

    result = _read_or_exit(feed)
    user_feed = result.feed
    if feed_only:
        user_feed.follows = []
    elif user_feed.follows:
        count = len(user_feed.follows)
        console.print(f"Assembling timeline from {count} followed feed{'' if count == 1 else 's'}...")

    assembled = assemble_timeline_sync(user_feed, feed.resolve().as_uri(), cfg=cfg.fetch, logger=logger)

    if assembled.errors:
        console.print("[bold red]Errors fetching followed feeds:[/bold red]")
        for error in assembled.errors:
            console.print(f"  - {escape(error.url)}: {escape(error.error)}")

    typer.echo(json.dumps(_timeline_payload(assembled), indent=2, ensure_ascii=False))


@app.command()
def add(
    feed: Path = typer.Argument(..., exists=True, dir_okay=False),
    client: str = typer.Option("casa", "--client", help="Value of the :client: field."),
    edit: bool = typer.Option(True, "--edit/--no-edit", help="Open the feed in $VISUAL/$EDITOR."),
):
    """Append a new post to a feed and open it in an editor."""
    if not os.access(feed, os.W_OK):
        console.print("Cannot add post, because file is not writable!")
        raise typer.Exit(code=1)

    post_id = append_post(feed, client)
    console.print(f"New post added with ID: {post_id}")
    if edit:
        typer.edit(filename=str(feed))


@app.command()
def pages(
    feed: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
):
    """List the pages a feed declares and flag the ones that cannot be read."""
    result = _read_or_exit(feed)
    declared = list_pages(feed, result.feed)
    if not declared:
        typer.echo("No pages defined.")
        return

    console.print("[yellow]Pages are not yet included in feeds![/yellow]")
    typer.echo("Pages:")
    for page, readable in declared:
        typer.echo(f"  - {page}" if readable else f"  - {page} (not readable!)")


def _read_or_exit(feed: Path) -> FeedParserResult:
    try:
        return read_feed(feed)
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"Failed to read feed at {escape(str(feed.resolve()))}: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _print_message(label: str, message: DebugMessage) -> None:
    style = SEVERITY_STYLES.get(message.severity, "")
    where = f"{label}, line {message.line}" if message.line >= 0 else label
    console.print(f"[{style}]{message.severity}[/{style}] {escape(where)}: {escape(message.message)}")


def _timeline_payload(result: TimelineResult) -> dict[str, Any]:
    posts = []
    for post in result.posts:
        data = asdict(post)
        data["fetched_at"] = post.fetched_at.isoformat()
        posts.append(data)
    return {"posts": posts, "errors": [asdict(error) for error in result.errors]}


if __name__ == "__main__":
    app()
