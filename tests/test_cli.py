"""Tests for the casa command-line interface."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from typer.testing import CliRunner

from plaintext_casa import cli
from plaintext_casa.parser import read_feed
from plaintext_casa.posts import append_post, new_post_block


runner = CliRunner()

FEED = """:title: Alice's Wonderland
:author: Alice

About Alice.

**
:id: 2025-01-02T10:00:00Z

Second.

**
:id: 2025-01-01T10:00:00Z

First.
"""


def _write(tmp_path: Path, text: str, name: str = "social.md") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def _json_output(result) -> dict:
    # older Click versions mix stderr into stdout; the JSON document comes last
    text = result.stdout
    return json.loads(text[text.index("{"):])


def test_check_ok(tmp_path: Path):
    path = _write(tmp_path, FEED)

    result = runner.invoke(cli.app, ["check", str(path)])

    assert result.exit_code == 0


def test_check_reports_errors(tmp_path: Path):
    path = _write(tmp_path, ":title: No author\n\n**\n:id: custom-id\n\ntext\n")

    result = runner.invoke(cli.app, ["check", str(path)])

    assert result.exit_code == 1
    assert 'Required field "author" not defined!' in result.output
    assert "id is not an RFC 3339 timestamp" in result.output


def test_parse_prints_json(tmp_path: Path):
    path = _write(tmp_path, FEED)

    result = runner.invoke(cli.app, ["parse", str(path)])

    assert result.exit_code == 0
    payload = _json_output(result)
    assert payload["title"] == "Alice's Wonderland"
    assert payload["about"] == "About Alice."
    assert [p["content"] for p in payload["posts"]] == ["Second.", "First."]


def test_timeline_feed_only(tmp_path: Path):
    path = _write(tmp_path, FEED.replace(":author: Alice\n", ":author: Alice\n:follow: https://nowhere.invalid/x.md\n"))

    result = runner.invoke(cli.app, ["timeline", str(path), "--feed-only"])

    assert result.exit_code == 0
    payload = _json_output(result)
    assert payload["errors"] == []
    assert [p["content"] for p in payload["posts"]] == ["First.", "Second."]
    assert payload["posts"][0]["feed_url"] == path.resolve().as_uri()
    assert payload["posts"][0]["given_name"] == "me"


def test_timeline_reports_follow_errors(tmp_path: Path):
    missing = (tmp_path / "missing.md").as_uri()
    path = _write(tmp_path, FEED.replace(":author: Alice\n", f":author: Alice\n:follow: ghost {missing}\n"))

    result = runner.invoke(cli.app, ["timeline", str(path)])

    assert result.exit_code == 0
    payload = _json_output(result)
    assert payload["errors"] == [
        {"url": missing, "error": "Could not fetch or parse the feed (check URL or network connection)"}
    ]
    assert len(payload["posts"]) == 2


def test_add_appends_post(tmp_path: Path):
    path = _write(tmp_path, FEED)

    result = runner.invoke(cli.app, ["add", str(path), "--client", "tests", "--no-edit"])

    assert result.exit_code == 0
    feed = read_feed(path).feed
    assert len(feed.posts) == 3
    assert feed.posts[-1].extra == {"client": "tests"}
    assert feed.posts[-1].content == "Write here..."


def test_append_post_without_trailing_newline(tmp_path: Path):
    path = _write(tmp_path, FEED.rstrip("\n"))
    now = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)

    post_id = append_post(path, "tests", now=now)

    assert post_id == "2025-03-01T08:00:00Z"
    assert path.read_text(encoding="utf-8").endswith(new_post_block(post_id, "tests"))
    feed = read_feed(path).feed
    assert [p.id for p in feed.posts][-1] == "2025-03-01T08:00:00Z"
    assert feed.posts[1].content == "First."


def test_pages_flags_unreadable_pages(tmp_path: Path):
    path = _write(tmp_path, FEED.replace(":author: Alice\n", ":author: Alice\n:page: about.md\n:page: missing.md\n"))
    (tmp_path / "plaintext.casa").mkdir()
    (tmp_path / "plaintext.casa" / "about.md").write_text("About page\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["pages", str(path)])

    assert result.exit_code == 0
    assert "Pages:\n  - about.md\n  - missing.md (not readable!)\n" in result.stdout


def test_pages_without_pages(tmp_path: Path):
    path = _write(tmp_path, FEED)

    result = runner.invoke(cli.app, ["pages", str(path)])

    assert result.exit_code == 0
    assert "No pages defined." in result.stdout
