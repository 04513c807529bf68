"""Locating the additional pages a feed declares."""

from __future__ import annotations

import os
from pathlib import Path

from .types import Feed


PAGES_DIR = "plaintext.casa"


def page_path(feed_path: Path, page: str) -> Path:
    """Pages live in a "plaintext.casa" directory next to the feed file."""
    return feed_path.parent / PAGES_DIR / page


def list_pages(feed_path: Path, feed: Feed) -> list[tuple[str, bool]]:
    """Return every declared page together with whether its file is readable."""
    return [(page, os.access(page_path(feed_path, page), os.R_OK)) for page in feed.pages]
