from datetime import date, datetime, timedelta, timezone

import pytest

from studymate.core.errors import CodecError
from studymate.services.codec import (
    decode_bool,
    decode_date,
    decode_progress,
    decode_timestamp,
    encode_bool,
    encode_progress,
    encode_timestamp,
)


@pytest.mark.parametrize("raw,expected", [(True, True), (False, False), ("true", True), ("FALSE", False), (" true ", True)])
def test_decode_bool_accepts_native_and_string(raw, expected):
    assert decode_bool(raw) is expected


@pytest.mark.parametrize("raw", ["yes", "1", 1, None, ""])
def test_decode_bool_rejects_unknown_representations(raw):
    with pytest.raises(CodecError):
        decode_bool(raw)


def test_encode_bool_is_canonical():
    assert encode_bool(True) == "true"
    assert encode_bool(False) == "false"
    with pytest.raises(CodecError):
        encode_bool("true")


def test_progress_round_trip_and_bounds():
    assert decode_progress("42") == 42
    assert decode_progress(100) == 100
    assert encode_progress(7) == "7"
    with pytest.raises(CodecError):
        decode_progress("101")
    with pytest.raises(CodecError):
        decode_progress("half")
    with pytest.raises(CodecError):
        encode_progress(-1)
    with pytest.raises(CodecError):
        decode_progress(True)


def test_timestamps_sort_lexically_in_time_order():
    t0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    a = encode_timestamp(t0)
    b = encode_timestamp(t0 + timedelta(microseconds=1))
    assert len(a) == len(b)
    assert a < b
    assert decode_timestamp(a) == t0


def test_decode_timestamp_accepts_zulu_and_naive():
    assert decode_timestamp("2026-03-01T10:00:00Z").tzinfo is not None
    assert decode_timestamp("2026-03-01T10:00:00").tzinfo == timezone.utc
    with pytest.raises(CodecError):
        decode_timestamp("yesterday")


def test_decode_date():
    assert decode_date("2026-05-04") == date(2026, 5, 4)
    assert decode_date("2026-05-04T00:00:00+00:00") == date(2026, 5, 4)
    with pytest.raises(CodecError):
        decode_date(20260504)
