"""Value coercion shared by filtering and sorting.

Every helper returns ``None`` for values it cannot interpret instead of
raising, so user-typed filter input degrades to "no filter".
"""

from __future__ import annotations

import math
import re

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any


_DAY_FIRST_DATE = re.compile(r"^\d{2}-\d{2}-\d{4}")


class _PandasHolder:
    """Holder for the lazily imported pandas module (None when not installed)."""

    module: Any = None
    resolved: bool = False


def _get_pandas() -> Any:
    """Import pandas on first use and remember the outcome."""
    if not _PandasHolder.resolved:
        try:
            import pandas as pd  # type: ignore[import-untyped]
        except ImportError:
            pd = None
        _PandasHolder.module = pd
        _PandasHolder.resolved = True
    return _PandasHolder.module


def is_missing(value: Any) -> bool:
    """Return True for None, NaN, and pandas NA/NaT scalars."""
    if value is None:
        return True
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, Decimal):
        return value.is_nan()
    if isinstance(value, (int, str, bytes, time, list, tuple, dict, set, frozenset)):
        return False
    if isinstance(value, date):
        # pandas NaT is a datetime subclass and never equals itself
        return value != value  # pylint: disable=comparison-with-itself

    # pandas NA and numpy NaN / NaT scalars
    pd = _get_pandas()
    if pd is None:
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_number(value: Any) -> float | None:
    """Coerce a cell or filter value to a float."""
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
        return None if math.isnan(result) else result

    # numpy scalar types -> Python native
    if hasattr(value, "item"):
        try:
            return to_number(value.item())
        except (AttributeError, ValueError):
            return None
    return None


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_datetime(value: Any) -> datetime | None:
    """Coerce a cell or filter value to a naive UTC datetime.

    Accepts ``datetime`` (including pandas ``Timestamp``), ``date``, POSIX
    seconds, ISO-8601 strings (a trailing ``Z`` is allowed) and
    ``DD-MM-YYYY`` strings.
    """
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _naive_utc(datetime.fromisoformat(text))
        except ValueError:
            pass
        if _DAY_FIRST_DATE.match(text):
            try:
                return datetime.strptime(text[:10], "%d-%m-%Y")
            except ValueError:
                return None
    return None


def to_date(value: Any) -> date | None:
    """Coerce a value to a calendar date (time of day dropped)."""
    moment = to_datetime(value)
    return moment.date() if moment is not None else None


def looks_like_date(value: Any) -> bool:
    """Return True when a value can be read as a date or datetime."""
    if isinstance(value, (date, datetime)):
        return True
    return isinstance(value, str) and to_datetime(value) is not None
