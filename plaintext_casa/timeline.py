"""
Timeline assembly from the user's feed and the feeds it follows.

Steps:
1. Tag the user's own posts with their feed of origin
2. Fetch and parse every followed feed concurrently
3. Sort all posts by effective date (newest last)
4. Drop posts superseded by a later post of the same feed
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import httpx

from .config import FetchConfig
from .fetcher import build_client, fetch_and_parse_feed, parse_follow_entry
from .logging_utils import log_event
from .types import Feed, FollowError, TimelinePost, TimelineResult
from .util import parse_timestamp


INVALID_FOLLOW_ERROR = "Invalid follow entry format"
FETCH_FAILED_ERROR = "Could not fetch or parse the feed (check URL or network connection)"


async def assemble_timeline(
    user_feed: Feed,
    user_feed_url: str | None = None,
    cfg: FetchConfig | None = None,
    client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
) -> TimelineResult:
    """Merge the user's posts with the posts of every followed feed.

    All follows are retrieved concurrently and the timeline is built only
    once every retrieval has finished. A failing follow never aborts the
    assembly; it is reported in the result's errors instead.

    Args:
        user_feed: The user's parsed feed
        user_feed_url: URL of the user's feed, used as its identity if given
        cfg: Fetch settings for followed feeds
        client: Optional shared HTTP client (one is created otherwise)
        logger: Optional logger for fetch events

    Returns:
        TimelineResult with posts sorted oldest first and one error per
        follow that could not be used
    """
    cfg = cfg or FetchConfig()
    posts = tag_posts(user_feed, user_feed_url, "me")
    errors: list[FollowError] = []

    if user_feed.follows:
        if client is None:
            async with build_client(cfg) as own_client:
                results = await _fetch_follows(user_feed.follows, cfg, own_client, logger)
        else:
            results = await _fetch_follows(user_feed.follows, cfg, client, logger)

        for follow_posts, error in results:
            posts.extend(follow_posts)
            if error is not None:
                errors.append(error)

    timeline = filter_superseded(sort_posts(posts))
    log_event(
        logger,
        "Timeline assembled",
        event="timeline_assembled",
        posts=len(timeline),
        follows=len(user_feed.follows),
        errors=len(errors),
    )
    return TimelineResult(posts=timeline, errors=errors)


def assemble_timeline_sync(
    user_feed: Feed,
    user_feed_url: str | None = None,
    cfg: FetchConfig | None = None,
    logger: logging.Logger | None = None,
) -> TimelineResult:
    """Synchronous wrapper around assemble_timeline for non-async callers."""
    return asyncio.run(assemble_timeline(user_feed, user_feed_url, cfg=cfg, logger=logger))


async def _fetch_follows(
    follows: list[str],
    cfg: FetchConfig,
    client: httpx.AsyncClient,
    logger: logging.Logger | None,
) -> list[tuple[list[TimelinePost], FollowError | None]]:
    async def _fetch_single(entry: str) -> tuple[list[TimelinePost], FollowError | None]:
        follow = parse_follow_entry(entry)
        if follow is None:
            log_event(logger, "Invalid follow entry", level=logging.WARNING, event="follow_invalid", entry=entry)
            return [], FollowError(url=entry, error=INVALID_FOLLOW_ERROR)

        try:
            feed = await fetch_and_parse_feed(follow.url, cfg, client, logger)
        except Exception as exc:  # noqa: BLE001
            return [], FollowError(url=follow.url, error=str(exc) or "Unknown error occurred")

        if feed is None:
            return [], FollowError(url=follow.url, error=FETCH_FAILED_ERROR)
        return tag_posts(feed, follow.url, follow.given_name), None

    tasks = [asyncio.create_task(_fetch_single(entry)) for entry in follows]
    return await asyncio.gather(*tasks)


def tag_posts(feed: Feed, feed_url: str | None, given_name: str | None) -> list[TimelinePost]:
    """Wrap every post of a feed in a TimelinePost carrying its provenance."""
    fetched_at = datetime.now(timezone.utc)
    return [
        TimelinePost.from_post(post, feed, feed_url, given_name, fetched_at)
        for post in feed.posts
    ]


def effective_date(post: TimelinePost) -> datetime:
    """Date used for ordering: the date field, else the id as a timestamp, else fetch time."""
    return parse_timestamp(post.date) or parse_timestamp(post.id) or post.fetched_at


def sort_posts(posts: list[TimelinePost]) -> list[TimelinePost]:
    """Sort oldest first. The sort is stable, so ties keep insertion order."""
    return sorted(posts, key=effective_date)


def filter_superseded(posts: list[TimelinePost]) -> list[TimelinePost]:
    """Remove posts replaced by another post of the same feed.

    A feed can only supersede its own posts: a reference to an id of a
    different feed, or to an id that does not exist, is ignored.
    """
    superseded = {
        (post.feed_identity, post.supersedes)
        for post in posts
        if post.supersedes and post.supersedes != post.id
    }
    return [post for post in posts if (post.feed_identity, post.id) not in superseded]
