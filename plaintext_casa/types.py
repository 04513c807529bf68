"""
Core data types for plaintext-casa.

This module defines the data structures passed between the stages:
- Feed / Post: a parsed feed document and its entries
- DebugMessage / Diagnostics: parser warnings and errors
- TimelinePost / TimelineResult: the assembled timeline with provenance
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Literal, Union


Severity = Literal["debug", "info", "warning", "error"]
MetaValue = Union[str, list[str]]


@dataclass
class DebugMessage:
    """A parser diagnostic.

    Attributes:
        line: Line index within the parsed block, or -1 if not line-specific
        message: Human-readable description
        severity: One of "debug", "info", "warning", "error"
    """
    line: int
    message: str
    severity: Severity = "debug"


@dataclass
class Post:
    """One entry within a feed.

    Attributes:
        id: Identifier chosen by the author, by convention an RFC 3339 timestamp
        date: Optional explicit timestamp, preferred over id for sorting
        lang: Optional language code
        tags: Optional tag string
        reply_to: Optional reference to the post this one answers
        supersedes: Optional id of an earlier post of the same feed this one replaces
        mood: Optional mood
        content_warning: Optional content warning
        content: Post body with surrounding whitespace removed
        extra: Metadata keys without a dedicated attribute (e.g. "client")
    """
    id: str = ""
    date: str | None = None
    lang: str | None = None
    tags: str | None = None
    reply_to: str | None = None
    supersedes: str | None = None
    mood: str | None = None
    content_warning: str | None = None
    content: str = ""
    extra: dict[str, MetaValue] = field(default_factory=dict)

    @classmethod
    def from_meta(cls, meta: dict[str, Any], content: str) -> "Post":
        known, extra = _split_known(cls, meta)
        return cls(**known, content=content, extra=extra)


@dataclass
class Feed:
    """One parsed feed document.

    Attributes:
        title: Feed title (required)
        author: Feed author (required, may be given as "nick")
        description: Optional description
        lang: Optional language code
        avatar: Optional avatar path or URL
        links: Links in document order
        follows: Raw follow entries ("<name> <url>" or "<url>")
        pages: Additional pages
        about: Prose between the header and the first post
        posts: Posts in document order
        extra: Header keys without a dedicated attribute
    """
    title: str = ""
    author: str = ""
    description: str | None = None
    lang: str | None = None
    avatar: str | None = None
    links: list[str] = field(default_factory=list)
    follows: list[str] = field(default_factory=list)
    pages: list[str] = field(default_factory=list)
    about: str | None = None
    posts: list[Post] = field(default_factory=list)
    extra: dict[str, MetaValue] = field(default_factory=dict)

    @classmethod
    def from_meta(cls, meta: dict[str, Any], about: str | None, posts: list[Post]) -> "Feed":
        known, extra = _split_known(cls, meta)
        return cls(**known, about=about, posts=posts, extra=extra)


@dataclass
class Diagnostics:
    """Messages of one severity class, split by header and per post.

    posts[i] holds the messages of the i-th post of the feed.
    """
    header: list[DebugMessage] = field(default_factory=list)
    posts: list[list[DebugMessage]] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.header) or any(self.posts)


@dataclass
class FeedParserResult:
    feed: Feed
    warnings: Diagnostics
    errors: Diagnostics


@dataclass
class TimelinePost(Post):
    """A Post tagged with the feed it came from.

    Attributes:
        feed_title: Title of the feed of origin
        feed_author: Author of the feed of origin
        given_name: Name given in the follow entry ("me" for the user's own feed)
        feed_url: URL of the feed of origin, if known
        fetched_at: When the feed of origin was retrieved (UTC)
    """
    feed_title: str = ""
    feed_author: str = ""
    given_name: str | None = None
    feed_url: str | None = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_post(
        cls,
        post: Post,
        feed: Feed,
        feed_url: str | None,
        given_name: str | None,
        fetched_at: datetime,
    ) -> "TimelinePost":
        values = {f.name: getattr(post, f.name) for f in fields(Post)}
        values["extra"] = dict(post.extra)
        return cls(
            **values,
            feed_title=feed.title,
            feed_author=feed.author,
            given_name=given_name,
            feed_url=feed_url,
            fetched_at=fetched_at,
        )

    @property
    def feed_identity(self) -> str:
        """The feed URL, or "author::title" when the URL is unknown."""
        return self.feed_url or f"{self.feed_author}::{self.feed_title}"


@dataclass
class FollowError:
    url: str
    error: str


@dataclass
class TimelineResult:
    posts: list[TimelinePost] = field(default_factory=list)
    errors: list[FollowError] = field(default_factory=list)


def _split_known(cls: type, meta: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split parsed metadata into dataclass attributes and leftover keys."""
    reserved = {"content", "about", "posts", "extra"}
    names = {f.name for f in fields(cls)} - reserved
    known: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in meta.items():
        if key in names:
            known[key] = value
        else:
            extra[key] = value
    return known, extra
