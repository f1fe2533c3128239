from datetime import datetime, timedelta, timezone

import pytest

from pricealert.utils.time import fmt_minute_utc, iso_z, parse_utc, seconds_until_next_boundary

def test_parse_utc_variants():
    want = datetime(2024, 1, 1, 0, 5, tzinfo=timezone.utc)
    assert parse_utc("2024-01-01 00:05:00") == want
    assert parse_utc("2024-01-01T00:05:00Z") == want
    assert parse_utc("2024-01-01T00:05:00.750Z") == want
    assert parse_utc("2024-01-01T01:05:00+01:00") == want
    assert parse_utc("2024-01-01") == datetime(2024, 1, 1, tzinfo=timezone.utc)

@pytest.mark.parametrize("bad", ["", "   ", "01/02/2024 garbage", "nope"])
def test_parse_utc_rejects(bad):
    with pytest.raises(ValueError):
        parse_utc(bad)

def test_formatters():
    dt = datetime(2024, 1, 1, 3, 5, 9, tzinfo=timezone(timedelta(hours=2)))
    assert iso_z(dt) == "2024-01-01T01:05:09Z"
    assert fmt_minute_utc(dt) == "2024-01-01 01:05"

def test_seconds_until_next_boundary():
    assert seconds_until_next_boundary(300, now_s=600.0) == 300.0
    assert seconds_until_next_boundary(300, now_s=601.0) == 299.0
    assert seconds_until_next_boundary(300, now_s=899.5) == 0.5
    with pytest.raises(ValueError):
        seconds_until_next_boundary(0, now_s=1.0)
