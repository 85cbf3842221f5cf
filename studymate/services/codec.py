"""
Encode/decode pair for values the datastore keeps as text.

Session `progress` and `completed` are persisted as strings ("42", "true").
Reads accept either the native type or its string form and fail loudly on
anything else; writes always produce the canonical string.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from studymate.core.errors import CodecError

_TRUE = "true"
_FALSE = "false"


def encode_bool(value: bool) -> str:
    if not isinstance(value, bool):
        raise CodecError(f"Expected a boolean, got {value!r}")
    return _TRUE if value else _FALSE


def decode_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        s = raw.strip().lower()
        if s == _TRUE:
            return True
        if s == _FALSE:
            return False
    raise CodecError(f"Unrecognized boolean value: {raw!r}")


def encode_int(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CodecError(f"Expected an integer, got {value!r}")
    return str(value)


def decode_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise CodecError(f"Unrecognized integer value: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        s = raw.strip()
        if s.lstrip("-").isdigit():
            return int(s)
    raise CodecError(f"Unrecognized integer value: {raw!r}")


def decode_progress(raw: Any) -> int:
    value = decode_int(raw)
    if not 0 <= value <= 100:
        raise CodecError(f"Progress out of range (0..100): {value}")
    return value


def encode_progress(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 100:
        raise CodecError(f"Progress must be an integer in 0..100, got {value!r}")
    return encode_int(value)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def encode_timestamp(value: datetime) -> str:
    # fixed width so lexical order == chronological order
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def decode_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, str):
        try:
            value = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise CodecError(f"Unrecognized timestamp: {raw!r}") from e
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    raise CodecError(f"Unrecognized timestamp: {raw!r}")


def encode_date(value: date) -> str:
    return value.isoformat()


def decode_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        try:
            return date.fromisoformat(raw.strip()[:10])
        except ValueError as e:
            raise CodecError(f"Unrecognized date: {raw!r}") from e
    raise CodecError(f"Unrecognized date: {raw!r}")
