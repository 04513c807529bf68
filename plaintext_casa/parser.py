"""
Document parser for plaintext feed files.

A feed document looks like this:

    :title: Alice's Wonderland
    :author: Alice
    :follow: bob https://bob.tld/social.md

    Some words about this feed.

    **
    :id: 2025-01-01T10:00:00Z

    The first post.

The header runs until the first blank line. Everything up to the first post
is the "about" section. A post starts at a line consisting of "**" that is
followed by a metadata line (starting with ":"); its metadata runs until the
next blank line and its content until the next post or the end of the file.
"""

from __future__ import annotations

from pathlib import Path

from .fields import DEFAULT_FEED_CONFIG, DEFAULT_POST_CONFIG, ParserConfig, parse_header
from .types import Diagnostics, Feed, FeedParserResult, Post


POST_MARKER = "**"


def parse_from_raw(
    raw: str,
    feed_config: ParserConfig = DEFAULT_FEED_CONFIG,
    post_config: ParserConfig = DEFAULT_POST_CONFIG,
) -> FeedParserResult:
    """Parse a raw feed document into a Feed.

    The document is scanned line by line with four states: "meta" (feed
    header), "about", "post-meta" and "post-content". Metadata blocks are
    handed to parse_header with the matching config.

    Args:
        raw: The full document text
        feed_config: Schema for the feed header
        post_config: Schema for post headers

    Returns:
        FeedParserResult holding the Feed plus the header and per-post
        warnings and errors. Errors do not stop parsing; the caller decides
        whether they are fatal.
    """
    lines = [line[:-1] if line.endswith("\r") else line for line in raw.split("\n")]
    header_lines: list[str] = []
    about_lines: list[str] = []
    posts: list[tuple[list[str], list[str]]] = []  # (meta lines, content lines)

    state = "meta"
    for i, line in enumerate(lines):
        blank = not line.strip()

        if state == "meta":
            if blank:
                state = "about"
            else:
                header_lines.append(line)
        elif state == "about":
            if _starts_post(lines, i):
                posts.append(([], []))
                state = "post-meta"
            else:
                about_lines.append(line)
        elif state == "post-meta":
            if blank:
                state = "post-content"
            else:
                posts[-1][0].append(line)
        else:  # post-content
            if _starts_post(lines, i):
                posts.append(([], []))
                state = "post-meta"
            else:
                posts[-1][1].append(line)

    header = parse_header(header_lines, feed_config)
    warnings = Diagnostics(header=header.warnings)
    errors = Diagnostics(header=header.errors)

    parsed_posts: list[Post] = []
    for meta_lines, content_lines in posts:
        post_header = parse_header(meta_lines, post_config)
        parsed_posts.append(Post.from_meta(post_header.content, _join(content_lines)))
        warnings.posts.append(post_header.warnings)
        errors.posts.append(post_header.errors)

    about = _join(about_lines) or None
    feed = Feed.from_meta(header.content, about, parsed_posts)
    return FeedParserResult(feed=feed, warnings=warnings, errors=errors)


def parse_feed(
    raw: str,
    feed_config: ParserConfig | None = None,
    post_config: ParserConfig | None = None,
) -> FeedParserResult:
    """Parse a feed document, using the built-in schemas unless others are given."""
    return parse_from_raw(
        raw,
        feed_config or DEFAULT_FEED_CONFIG,
        post_config or DEFAULT_POST_CONFIG,
    )


def read_feed(path: Path) -> FeedParserResult:
    """Read a UTF-8 feed file and parse it. OSError propagates to the caller."""
    return parse_feed(path.read_text(encoding="utf-8"))


def _starts_post(lines: list[str], i: int) -> bool:
    """A lone "**" only opens a post when the next line starts a metadata block."""
    if lines[i].strip() != POST_MARKER:
        return False
    if i + 1 >= len(lines):
        return False
    return lines[i + 1].lstrip().startswith(":")


def _join(lines: list[str]) -> str:
    return "\n".join(lines).strip()
