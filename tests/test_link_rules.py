from datetime import datetime, timedelta, timezone

from linkhub_app.core.link_rules import as_utc, click_windows, expiry_from, is_expired

NOW = datetime(2024, 3, 14, 15, 9, 26, tzinfo=timezone.utc)


def test_naive_datetimes_are_read_as_utc():
    naive = datetime(2024, 3, 14, 15, 9, 26)
    assert as_utc(naive) == NOW
    assert as_utc(None) is None


def test_other_timezones_are_converted():
    plus_two = NOW.astimezone(timezone(timedelta(hours=2)))
    assert as_utc(plus_two).tzinfo == timezone.utc
    assert as_utc(plus_two) == NOW


def test_expiry():
    assert is_expired(None, NOW) is False
    assert is_expired(NOW + timedelta(seconds=1), NOW) is False
    assert is_expired(NOW, NOW) is True
    assert is_expired(NOW - timedelta(seconds=1), NOW) is True
    # SQLite hands the stored value back without tzinfo
    assert is_expired(datetime(2024, 3, 14, 15, 0), NOW) is True


def test_expiry_from():
    assert expiry_from(NOW, None) is None
    assert expiry_from(NOW, 3600) == NOW + timedelta(hours=1)


def test_click_windows():
    windows = click_windows(NOW)

    assert windows["today"] == datetime(2024, 3, 14, tzinfo=timezone.utc)
    assert windows["week"] == NOW - timedelta(days=7)
    assert windows["month"] == datetime(2024, 3, 1, tzinfo=timezone.utc)
