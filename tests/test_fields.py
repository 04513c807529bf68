"""Tests for header field parsing."""

from plaintext_casa.fields import (
    DEFAULT_FEED_CONFIG,
    DEFAULT_POST_CONFIG,
    FieldConfig,
    ParserConfig,
    parse_header,
)


HEADER_PLAIN = """:title: Alice's Wonderland
:description: HTTP based social media and simplicity enthusiast
:author: Alice
:lang: en
:avatar: /avatar.jpg
:link: https://alice.wonder.land
:link: https://codeberg.org/alice
:link: mailto:alice@wonder.land
:follow: bob https://bob.tld/social.md
:follow: charlie https://charlie.tld/social.org
:follow: dieter https://dieter.tld/social.adoc
"""

PARSER_CONFIG = ParserConfig(
    fields=(
        FieldConfig("title", required=True),
        FieldConfig("author", required=True),
        FieldConfig("description"),
        FieldConfig("link", multi=True),
        FieldConfig("follow", multi=True),
    )
)


def test_plain_header_without_errors():
    result = parse_header(HEADER_PLAIN.split("\n"), PARSER_CONFIG)

    assert result.warnings == []
    assert result.errors == []
    assert result.content["title"] == "Alice's Wonderland"
    assert result.content["author"] == "Alice"
    assert result.content["description"] == "HTTP based social media and simplicity enthusiast"
    # unknown keys pass through
    assert result.content["lang"] == "en"
    assert result.content["avatar"] == "/avatar.jpg"
    assert result.content["links"] == [
        "https://alice.wonder.land",
        "https://codeberg.org/alice",
        "mailto:alice@wonder.land",
    ]
    assert result.content["follows"] == [
        "bob https://bob.tld/social.md",
        "charlie https://charlie.tld/social.org",
        "dieter https://dieter.tld/social.adoc",
    ]


def test_missing_required_field_is_an_error():
    lines = [":title: Yet another feed", ":description: This feed misses an author"]
    result = parse_header(lines, PARSER_CONFIG)

    assert result.warnings == []
    assert len(result.errors) == 1
    assert result.errors[0].line == -1
    assert result.errors[0].severity == "error"
    assert result.errors[0].message == 'Required field "author" not defined!'
    assert result.content["title"] == "Yet another feed"
    assert result.content["description"] == "This feed misses an author"


def test_markdown_title_line():
    lines = [
        "# Alice's Wonderland",
        ":author: Alice",
        ":description: HTTP based social media and simplicity enthusiast",
    ]
    result = parse_header(lines, PARSER_CONFIG)

    assert result.errors == []
    assert result.warnings == []
    assert result.content["title"] == "Alice's Wonderland"
    assert result.content["author"] == "Alice"


def test_asciidoc_title_line():
    result = parse_header(["= Title Text", ":author: Alice"], PARSER_CONFIG)

    assert result.errors == []
    assert result.content["title"] == "Title Text"


def test_title_marker_only_counts_on_first_line():
    result = parse_header([":author: Alice", "# Not a title"], PARSER_CONFIG)

    assert "title" not in result.content
    assert [e.message for e in result.errors] == ['Required field "title" not defined!']


def test_alias_is_renamed_to_canonical_field():
    result = parse_header([":title: Feed", ":nick: al"], DEFAULT_FEED_CONFIG)

    assert result.errors == []
    assert result.content["author"] == "al"
    assert "nick" not in result.content


def test_canonical_field_wins_over_alias():
    result = parse_header([":title: Feed", ":author: Alice", ":nick: al"], DEFAULT_FEED_CONFIG)

    assert result.errors == []
    assert result.content["author"] == "Alice"
    assert result.content["nick"] == "al"


def test_repeated_single_field_warns_and_keeps_last_value():
    lines = [":title: First", ":author: Alice", ":title: Second"]
    result = parse_header(lines, PARSER_CONFIG)

    assert result.errors == []
    assert len(result.warnings) == 1
    assert result.warnings[0].severity == "warning"
    assert result.warnings[0].line == 2
    assert result.content["title"] == "Second"


def test_multi_fields_default_to_empty_lists():
    result = parse_header([":title: Feed", ":author: Alice"], DEFAULT_FEED_CONFIG)

    assert result.content["links"] == []
    assert result.content["follows"] == []
    assert result.content["pages"] == []


def test_non_matching_lines_are_skipped():
    lines = [":id: 2025-01-01T10:00:00Z", "just some text", "", "key: no leading colon"]
    result = parse_header(lines, DEFAULT_POST_CONFIG)

    assert result.errors == []
    assert result.warnings == []
    assert result.content == {"id": "2025-01-01T10:00:00Z"}


def test_value_may_contain_colons():
    result = parse_header([":id: 2025-01-01T10:00:00+01:00"], DEFAULT_POST_CONFIG)

    assert result.content["id"] == "2025-01-01T10:00:00+01:00"


def test_missing_post_id():
    result = parse_header([":mood: happy"], DEFAULT_POST_CONFIG)

    assert [e.message for e in result.errors] == ['Required field "id" not defined!']
    assert result.content["mood"] == "happy"


def test_plural_list_key_does_not_replace_list():
    lines = [":title: Feed", ":author: Alice", ":follow: bob https://bob.tld/social.md", ":follows: ab"]
    result = parse_header(lines, DEFAULT_FEED_CONFIG)

    assert result.content["follows"] == ["bob https://bob.tld/social.md"]
    assert result.errors == []
    assert len(result.warnings) == 1
    assert result.warnings[0].line == 3
    assert "follows" in result.warnings[0].message
