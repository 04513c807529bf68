"""Appending new posts to a feed file."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from .parser import POST_MARKER
from .util import rfc3339_now


PLACEHOLDER = "Write here..."


def new_post_block(post_id: str, client: str) -> str:
    """Return the text of an empty post, preceded by a blank line."""
    return f"\n{POST_MARKER}\n:id: {post_id}\n:client: {client}\n\n{PLACEHOLDER}\n"


def append_post(path: Path, client: str, now: datetime | None = None) -> str:
    """Append a new post stub to a feed file and return the new post id.

    The id is the current UTC time as an RFC 3339 timestamp.
    """
    post_id = rfc3339_now(now)
    text = path.read_text(encoding="utf-8")
    block = new_post_block(post_id, client)
    if text and not text.endswith("\n"):
        block = "\n" + block
    with path.open("a", encoding="utf-8") as handle:
        handle.write(block)
    return post_id
