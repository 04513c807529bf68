"""
plaintext-casa - plaintext social feeds.

This package parses plaintext feed documents (":key: value" headers followed
by "**"-separated posts) and assembles a timeline from a user's feed and the
feeds it follows.

Main entry point is the CLI via the `casa` command.

Example:
    $ casa timeline social.md
"""

__all__ = [
    "__version__",
    "assemble_timeline",
    "parse_feed",
    "parse_from_raw",
    "parse_header",
    "Feed",
    "Post",
    "TimelinePost",
]
__version__ = "0.1.0"

from .fields import parse_header
from .parser import parse_feed, parse_from_raw
from .timeline import assemble_timeline
from .types import Feed, Post, TimelinePost
