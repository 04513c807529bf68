"""
Header field parsing for feed and post metadata blocks.

A metadata block is a run of lines of the form ":key: value". Which keys are
expected, which may repeat and which are mandatory is described by a
ParserConfig. Two built-in configs exist: one for the feed header and one for
post headers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from .types import DebugMessage
from .util import err_msg, warn_msg


FIELD_RE = re.compile(r"^:([^:]+):\s*(.*)$")  # Matches ":key: value"
TITLE_MARKERS = ("# ", "= ")  # Markdown and AsciiDoc document titles


@dataclass(frozen=True)
class FieldConfig:
    """Schema entry for one metadata key.

    Attributes:
        label: Key name as written between the colons
        multi: Accumulate every occurrence into a list stored under "<label>s"
        required: Report an error when the key is missing
        alias: Second key name that satisfies the requirement and is renamed to label
    """
    label: str
    multi: bool = False
    required: bool = False
    alias: str | None = None

    @property
    def key(self) -> str:
        return f"{self.label}s" if self.multi else self.label


@dataclass(frozen=True)
class ParserConfig:
    fields: tuple[FieldConfig, ...] = field(default_factory=tuple)


@dataclass
class HeaderResult:
    content: dict[str, Any]
    warnings: list[DebugMessage]
    errors: list[DebugMessage]


DEFAULT_FEED_CONFIG = ParserConfig(
    fields=(
        FieldConfig("title", required=True),
        FieldConfig("author", required=True, alias="nick"),
        FieldConfig("description"),
        FieldConfig("lang"),
        FieldConfig("avatar"),
        FieldConfig("link", multi=True),
        FieldConfig("follow", multi=True),
        FieldConfig("page", multi=True),
    )
)

DEFAULT_POST_CONFIG = ParserConfig(
    fields=(
        FieldConfig("id", required=True),
        FieldConfig("date"),
        FieldConfig("lang"),
        FieldConfig("tags"),
        FieldConfig("mood"),
        FieldConfig("content_warning"),
    )
)


def parse_header(lines: Sequence[str], config: ParserConfig) -> HeaderResult:
    """Parse a metadata block into a dict according to a field schema.

    Lines that are not ":key: value" pairs are skipped. Keys missing from the
    schema are kept verbatim, except a key equal to a multi field's list key,
    which is ignored with a warning. A repeated single-valued key keeps its last
    value and produces a warning. A missing required key produces an error,
    unless its alias was given instead, in which case the value is moved to
    the canonical key.

    If the first line is a Markdown ("# ") or AsciiDoc ("= ") title, it
    provides the "title" value.

    Args:
        lines: The raw lines of the block
        config: Schema describing the accepted keys

    Returns:
        HeaderResult with the parsed content and the collected diagnostics.
        The content is returned even when errors were found.
    """
    single = {f.label for f in config.fields if not f.multi}
    multi = {f.label for f in config.fields if f.multi}
    list_keys = {f.key for f in config.fields if f.multi} - single - multi
    required = [f for f in config.fields if f.required]

    content: dict[str, Any] = {f.key: [] for f in config.fields if f.multi}
    warnings: list[DebugMessage] = []
    errors: list[DebugMessage] = []

    numbered = list(enumerate(lines))
    if numbered and numbered[0][1].startswith(TITLE_MARKERS):
        content["title"] = numbered[0][1][2:].strip()
        numbered = numbered[1:]

    for index, line in numbered:
        match = FIELD_RE.match(line)
        if not match:
            continue
        key, value = match.group(1), match.group(2).strip()

        if key in single:
            if key in content:
                warnings.append(
                    warn_msg(f'Field "{key}" defined more than once, using last value', index)
                )
            content[key] = value
        elif key in multi:
            content[f"{key}s"].append(value)
        elif key in list_keys:
            # the plural name is reserved for the accumulated list
            warnings.append(
                warn_msg(f'Field "{key}" is reserved for the list of "{key[:-1]}" values, ignored', index)
            )
        else:
            content[key] = value

    for schema_field in required:
        if _is_present(content, schema_field):
            continue
        if schema_field.alias and schema_field.alias in content:
            content[schema_field.label] = content.pop(schema_field.alias)
            continue
        errors.append(err_msg(f'Required field "{schema_field.label}" not defined!'))

    return HeaderResult(content=content, warnings=warnings, errors=errors)


def _is_present(content: dict[str, Any], schema_field: FieldConfig) -> bool:
    if schema_field.multi:
        return bool(content.get(schema_field.key))
    return schema_field.label in content
