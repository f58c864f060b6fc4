"""Multi-column sorting.

Sort state is an ordered list of ``SortEntry(field, order)``; the first entry
is the primary key and later entries break ties. Sorting is stable, so rows
that tie on every key keep their original relative order. ``None`` always
sorts last, whatever the direction.
"""

from __future__ import annotations

import re

from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .coerce import is_missing, to_datetime, to_number
from .exceptions import SortStateError
from .models import FieldType, SortEntry, SortOrder


if TYPE_CHECKING:
    from .models import ColumnDef, Row


_DIGITS = re.compile(r"(\d+)")


def normalize_sort_state(sort_state: Iterable[Any] | None) -> list[SortEntry]:
    """Validate a sort state and convert its entries to ``SortEntry``.

    Accepts ``SortEntry`` objects, ``{"field", "order"}`` dicts, and
    ``(field, order)`` pairs.

    Raises
    ------
    SortStateError
        If a field appears more than once or an entry is malformed.
    """
    if not sort_state:
        return []

    entries: list[SortEntry] = []
    seen: set[str] = set()
    for raw in sort_state:
        try:
            if isinstance(raw, SortEntry):
                entry = raw
            elif isinstance(raw, (tuple, list)):
                entry = SortEntry(field=raw[0], order=raw[1] if len(raw) > 1 else SortOrder.ASC)
            else:
                entry = SortEntry.model_validate(raw)
        except (ValidationError, IndexError) as exc:
            msg = f"Invalid sort entry: {raw!r}"
            raise SortStateError(msg, field=str(raw)) from exc
        if entry.field in seen:
            msg = f"Field '{entry.field}' appears more than once in the sort state"
            raise SortStateError(msg, field=entry.field)
        seen.add(entry.field)
        entries.append(entry)
    return entries


def _natural_key(text: str) -> list[tuple[int, Any]]:
    """Split text into case-folded chunks so "item 2" sorts before "item 10"."""
    return [
        (0, int(chunk)) if _DIGITS.fullmatch(chunk) else (1, chunk)
        for chunk in _DIGITS.split(text.casefold())
        if chunk
    ]


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _compare_text(a: Any, b: Any) -> int:
    key_a, key_b = _natural_key(str(a)), _natural_key(str(b))
    if key_a != key_b:
        return -1 if key_a < key_b else 1
    # Case-insensitive tie: fall back to the raw strings for a total order
    raw_a, raw_b = str(a), str(b)
    return (raw_a > raw_b) - (raw_a < raw_b)


def compare_values(a: Any, b: Any, field_type: FieldType | None = None) -> int:
    """Compare two cell values in ascending order.

    Returns -1, 0 or 1. Missing values compare greater than anything else, so
    they end up last in an ascending sort; :func:`compare_rows` keeps them last
    for descending sorts too.
    """
    a_missing, b_missing = is_missing(a), is_missing(b)
    if a_missing and b_missing:
        return 0
    if a_missing:
        return 1
    if b_missing:
        return -1

    if field_type is FieldType.NUMBER or (_is_real(a) and _is_real(b)):
        num_a, num_b = to_number(a), to_number(b)
        if num_a is not None and num_b is not None:
            return _sign(num_a - num_b)

    if field_type in (FieldType.DATE, FieldType.DATETIME) or (
        isinstance(a, date) and isinstance(b, date)
    ):
        time_a, time_b = to_datetime(a), to_datetime(b)
        if time_a is not None and time_b is not None:
            return (time_a > time_b) - (time_a < time_b)

    return _compare_text(a, b)


def compare_rows(
    a: Row,
    b: Row,
    sort_state: Sequence[SortEntry],
    field_types: Mapping[str, FieldType] | None = None,
) -> int:
    """Compare two rows under a multi-column sort state.

    The first sort entry with a non-zero comparison decides. Missing values
    are last for both directions.
    """
    field_types = field_types or {}
    for entry in sort_state:
        va, vb = a.get(entry.field), b.get(entry.field)
        a_missing, b_missing = is_missing(va), is_missing(vb)
        if a_missing or b_missing:
            if a_missing and b_missing:
                continue
            return 1 if a_missing else -1
        cmp = compare_values(va, vb, field_types.get(entry.field))
        if cmp != 0:
            return cmp if entry.order is SortOrder.ASC else -cmp
    return 0


def apply_sort(
    rows: Iterable[Row],
    sort_state: Iterable[Any] | None,
    columns: Iterable[ColumnDef] = (),
) -> list[Row]:
    """Return a new, stably sorted list of rows."""
    entries = normalize_sort_state(sort_state)
    if not entries:
        return list(rows)
    field_types = {column.field: column.type for column in columns}
    return sorted(rows, key=cmp_to_key(lambda a, b: compare_rows(a, b, entries, field_types)))


def toggle_sort(
    sort_state: Iterable[Any] | None,
    field: str,
    multi: bool = False,
) -> list[SortEntry]:
    """Advance a column's sort through none -> asc -> desc -> none.

    Parameters
    ----------
    sort_state : iterable
        Current sort state.
    field : str
        The column header that was clicked.
    multi : bool, optional
        Keep the other sort keys (Ctrl+click). Otherwise the clicked column
        replaces the whole sort state.

    Returns
    -------
    list of SortEntry
        The next sort state.
    """
    entries = normalize_sort_state(sort_state)
    current = next((entry for entry in entries if entry.field == field), None)

    if not multi:
        if current is None:
            return [SortEntry(field=field, order=SortOrder.ASC)]
        if current.order is SortOrder.ASC:
            return [SortEntry(field=field, order=SortOrder.DESC)]
        return []

    if current is None:
        return [*entries, SortEntry(field=field, order=SortOrder.ASC)]
    if current.order is SortOrder.ASC:
        return [
            SortEntry(field=field, order=SortOrder.DESC) if entry.field == field else entry
            for entry in entries
        ]
    return [entry for entry in entries if entry.field != field]


def sort_index_map(sort_state: Iterable[Any] | None) -> dict[str, tuple[int, SortOrder]]:
    """Map each sorted field to its 1-based priority and direction."""
    return {
        entry.field: (index, entry.order)
        for index, entry in enumerate(normalize_sort_state(sort_state), start=1)
    }
