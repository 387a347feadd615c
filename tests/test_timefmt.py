import time

import pytest

from lastview.timefmt import (
    TimeFormat,
    TimeFormatSpec,
    format_time,
    spec_for,
    which_time_format,
)


@pytest.fixture
def utc(monkeypatch):
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.mark.parametrize(
    "name, fmt",
    [
        ("notime", TimeFormat.NONE),
        ("short", TimeFormat.SHORT),
        ("full", TimeFormat.CTIME),
        ("iso", TimeFormat.ISO8601),
    ],
)
def test_which_time_format(name, fmt):
    assert which_time_format(name) is fmt


def test_which_time_format_unknown():
    with pytest.raises(ValueError, match="unknown time format: bogus"):
        which_time_format("bogus")


def test_hhmm_is_not_public():
    with pytest.raises(ValueError):
        spec_for(TimeFormat.HHMM)


def test_spec_short():
    spec = spec_for(TimeFormat.SHORT)
    assert spec == TimeFormatSpec(
        name="short",
        in_len=16,
        in_fmt=TimeFormat.CTIME,
        out_len=7,
        out_fmt=TimeFormat.HHMM,
    )


def test_spec_iso_widths():
    spec = spec_for(TimeFormat.ISO8601)
    assert (spec.in_len, spec.out_len) == (25, 27)


def test_none_is_empty():
    assert format_time(TimeFormat.NONE, 123456) == ""


def test_ctime_epoch(utc):
    assert format_time(TimeFormat.CTIME, 0) == "Thu Jan  1 00:00:00 1970"


def test_iso_epoch(utc):
    assert format_time(TimeFormat.ISO8601, 0) == "1970-01-01T00:00:00+00:00"


@pytest.mark.parametrize("when", [0, 86399, 1595978419, 1700000000])
def test_ctime_width(utc, when):
    assert len(format_time(TimeFormat.CTIME, when)) == spec_for(TimeFormat.CTIME).in_len


@pytest.mark.parametrize("when", [0, 1595978419, 1700000000])
def test_iso_width(utc, when):
    assert len(format_time(TimeFormat.ISO8601, when)) == spec_for(TimeFormat.ISO8601).in_len


@pytest.mark.parametrize("when", [0, 3661, 1595978419])
def test_hhmm_matches_ctime_clock(utc, when):
    full = format_time(TimeFormat.CTIME, when)
    assert format_time(TimeFormat.HHMM, when) == full[11:16]


def test_iso_offset_follows_zone(monkeypatch):
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    try:
        base = format_time(TimeFormat.ISO8601, 1595978419)
    finally:
        monkeypatch.undo()
        time.tzset()
    assert base.endswith("+00:00")
    assert base[:10] == time.strftime("%Y-%m-%d", time.gmtime(1595978419))