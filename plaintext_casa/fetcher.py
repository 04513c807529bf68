"""
Retrieval of followed feeds.

Feeds are addressed by URL: "file://" URLs are read from the local
filesystem, anything else is requested with httpx. Retrieval is one-shot
(no retry, no cache) and bounded by FetchConfig.timeout_seconds.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from .config import FetchConfig
from .logging_utils import log_event
from .parser import parse_feed
from .types import Feed


@dataclass
class FetchResult:
    """Result of a feed retrieval.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code is None for local files and for failures
    before a response was received.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None
        text: The feed document text, or None on error
        error: Error message if retrieval failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None


@dataclass
class FollowEntry:
    url: str
    given_name: str | None = None


def parse_follow_entry(entry: str) -> FollowEntry | None:
    """Split a follow entry into given name and URL.

    The URL is the last whitespace-separated token; everything before it,
    joined by single spaces, is the name the user gave the feed.

    Examples:
        >>> parse_follow_entry("bob https://bob.tld/social.md")
        FollowEntry(url='https://bob.tld/social.md', given_name='bob')
        >>> parse_follow_entry("https://bob.tld/social.md")
        FollowEntry(url='https://bob.tld/social.md', given_name=None)
        >>> parse_follow_entry("   ") is None
        True
    """
    parts = entry.split()
    if not parts:
        return None
    if len(parts) == 1:
        return FollowEntry(url=parts[0])
    return FollowEntry(url=parts[-1], given_name=" ".join(parts[:-1]))


def build_client(cfg: FetchConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=cfg.follow_redirects,
        trust_env=cfg.trust_env,
    )


def file_url_to_path(url: str) -> Path:
    parsed = urlparse(url)
    path = url2pathname(parsed.path)
    if parsed.netloc and parsed.netloc != "localhost":
        path = f"//{parsed.netloc}{path}"
    return Path(path)


async def fetch_feed_text(
    url: str,
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Retrieve the raw text of a feed.

    The whole retrieval (file read or HTTP request including the body) is
    bounded by cfg.timeout_seconds.

    Args:
        url: A file:// or http(s):// URL
        cfg: Fetch settings; timeout_seconds applies even with a shared client
        client: Optional shared client (the timeline reuses one for all follows)

    Returns:
        FetchResult with text on success or error message on failure.
        Non-2xx responses are failures.
    """
    try:
        return await asyncio.wait_for(_retrieve(url, cfg, client), timeout=cfg.timeout_seconds)
    except Exception as exc:  # noqa: BLE001
        return FetchResult(url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")


async def _retrieve(url: str, cfg: FetchConfig, client: httpx.AsyncClient | None) -> FetchResult:
    if url.startswith("file://"):
        path = file_url_to_path(url)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return FetchResult(url=url, status_code=None, text=text, error=None)

    if client is None:
        async with build_client(cfg) as own_client:
            resp = await own_client.get(url)
    else:
        resp = await client.get(url)

    if not resp.is_success:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            text=None,
            error=f"HTTP {resp.status_code}: {resp.reason_phrase}",
        )
    return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)


async def fetch_and_parse_feed(
    url: str,
    cfg: FetchConfig | None = None,
    client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
) -> Feed | None:
    """Retrieve and parse a followed feed.

    Never raises: every failure (unreadable file, network error, non-2xx
    status, parser crash) results in None so that the caller can report it
    against the URL.
    """
    cfg = cfg or FetchConfig()
    log_event(logger, "Fetch start", level=logging.DEBUG, event="fetch_start", url=url)

    result = await fetch_feed_text(url, cfg, client)
    if result.text is None:
        log_event(
            logger,
            "Fetch failed",
            level=logging.DEBUG,
            event="fetch_failed",
            url=url,
            status_code=result.status_code,
            error=result.error,
        )
        return None

    try:
        parsed = parse_feed(result.text)
    except Exception as exc:  # noqa: BLE001
        log_event(
            logger,
            "Parse failed",
            level=logging.DEBUG,
            event="parse_failed",
            url=url,
            error=f"{type(exc).__name__}: {exc}",
        )
        return None

    if parsed.errors:
        log_event(
            logger,
            "Feed has parse errors",
            level=logging.DEBUG,
            event="feed_parse_errors",
            url=url,
            errors=[e.message for e in parsed.errors.header],
        )
    return parsed.feed
