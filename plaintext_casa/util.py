"""
Small helpers shared by the parser, the fetcher and the timeline assembler.

- Debug message constructors (parser diagnostics are values, never raised)
- Timestamp helpers for post ids and dates
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from .types import DebugMessage, Severity


RFC3339_RE = re.compile(
    r"^([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})(Z|[+-]?[0-9]{2}:[0-9]{2})$"
)


def debug_msg(message: str, line: int = -1, severity: Severity = "debug") -> DebugMessage:
    return DebugMessage(line=line, message=message, severity=severity)


def info_msg(message: str, line: int = -1) -> DebugMessage:
    return debug_msg(message, line, "info")


def warn_msg(message: str, line: int = -1) -> DebugMessage:
    return debug_msg(message, line, "warning")


def err_msg(message: str, line: int = -1) -> DebugMessage:
    return debug_msg(message, line, "error")


def is_rfc3339_date(value: str) -> bool:
    """Check that a string is of the form YYYY-MM-DDTHH:MM:SS followed by Z or an offset."""
    return RFC3339_RE.match(value) is not None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp string into a timezone-aware datetime.

    Accepts a trailing "Z" and treats naive values as UTC, so that every
    parsed value can be compared with every other one.

    Returns:
        The parsed datetime, or None when the value is empty or not a timestamp
    """
    if not value:
        return None
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = f"{raw[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def rfc3339_now(now: datetime | None = None) -> str:
    """Return the given (or current) time in UTC as YYYY-MM-DDTHH:MM:SSZ."""
    current = now or datetime.now(timezone.utc)
    current = current.astimezone(timezone.utc)
    return current.strftime("%Y-%m-%dT%H:%M:%SZ")
