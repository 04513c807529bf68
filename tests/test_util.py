from datetime import datetime, timedelta, timezone

from plaintext_casa.util import err_msg, is_rfc3339_date, parse_timestamp, rfc3339_now, warn_msg


def test_is_rfc3339_date():
    assert is_rfc3339_date("2025-10-10T10:00:00Z")
    assert not is_rfc3339_date("2025-10-10T10:00:00+0100")
    assert is_rfc3339_date("2025-10-10T10:00:00+01:00")
    assert not is_rfc3339_date("2025-10-10 10:00:00+01:00")
    assert not is_rfc3339_date("25-10-10T10:00:00+01:00")
    assert not is_rfc3339_date("20251010T100000Z")


def test_parse_timestamp_variants():
    assert parse_timestamp("2025-10-10T10:00:00Z") == datetime(2025, 10, 10, 10, tzinfo=timezone.utc)
    assert parse_timestamp("2025-10-10T12:00:00+02:00") == datetime(2025, 10, 10, 10, tzinfo=timezone.utc)
    # naive values are read as UTC
    assert parse_timestamp("2025-10-10T10:00:00") == datetime(2025, 10, 10, 10, tzinfo=timezone.utc)
    assert parse_timestamp("2025-10-10") == datetime(2025, 10, 10, tzinfo=timezone.utc)


def test_parse_timestamp_invalid():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("post-1") is None
    assert parse_timestamp("2025-13-40T10:00:00Z") is None


def test_rfc3339_now_is_utc():
    now = datetime(2025, 1, 1, 12, 30, 5, 999, tzinfo=timezone(timedelta(hours=2)))

    assert rfc3339_now(now) == "2025-01-01T10:30:05Z"
    assert is_rfc3339_date(rfc3339_now())


def test_message_helpers():
    assert warn_msg("careful", 3).severity == "warning"
    assert warn_msg("careful", 3).line == 3
    assert err_msg("broken").line == -1
