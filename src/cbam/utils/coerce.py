"""Lenient converters for entity payloads coming from the external store.

None of these raise: a value that cannot be interpreted becomes ``None`` so the
rules can report it as missing.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Iterable, Mapping


def as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            result = float(value)
        else:
            result = float(str(value).strip())
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def as_int(value: Any) -> int | None:
    number = as_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def as_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"true", "yes", "1", "y"}:
        return True
    if text in {"false", "no", "0", "n"}:
        return False
    return None


def as_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def as_tuple(value: Any) -> tuple[Any, ...]:
    """Return list-like payload values as a tuple; scalars become one-item tuples."""

    if value is None:
        return ()
    if isinstance(value, (str, bytes, Mapping)):
        return (value,) if value else ()
    if isinstance(value, Iterable):
        return tuple(item for item in value if item is not None)
    return (value,)


__all__ = ["as_bool", "as_date", "as_float", "as_int", "as_str", "as_tuple"]
