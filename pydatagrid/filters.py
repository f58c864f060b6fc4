"""Filter predicate evaluation.

A row is visible only when it satisfies every active filter (logical AND
across fields). Filter state maps a field to a descriptor:

- text: ``TextFilter`` (or ``{"operator": ..., "value": ...}``)
- number/date/datetime: ``RangeFilter`` (``{"operator", "value", "valueTo"}``)
- list: a bare list of selected option keys

Usage:
    from pydatagrid.filters import apply_filters

    visible = apply_filters(rows, {"name": {"value": "ann"}, "age": {
        "operator": "inRange", "value": 18, "valueTo": 30,
    }}, columns)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .coerce import is_missing, looks_like_date, to_date, to_datetime, to_number
from .exceptions import ConfigurationError
from .log import debug, warn
from .models import (
    RANGE_TYPES,
    FieldType,
    RangeFilter,
    RangeOperator,
    TextFilter,
    TextOperator,
    is_blank,
)
from .options import option_keys


if TYPE_CHECKING:
    from .config import FilterSettings
    from .models import ColumnDef, FilterDescriptor, Row


# Operators only a range filter understands
_RANGE_ONLY = frozenset(op.value for op in RangeOperator) - frozenset(
    op.value for op in TextOperator
)


def _is_range_dict(raw: Mapping[str, Any]) -> bool:
    operator = raw.get("operator")
    if raw.get("valueTo") is not None or raw.get("value_to") is not None:
        return True
    if not isinstance(operator, str):
        return False
    try:
        return RangeOperator(operator).value in _RANGE_ONLY
    except ValueError:
        return False


def parse_filter(raw: Any, field_type: FieldType | None = None) -> FilterDescriptor | None:
    """Turn a raw filter value into a typed descriptor.

    Parameters
    ----------
    raw : Any
        A descriptor model, a dict, a list of selected keys, or a bare value.
    field_type : FieldType or None
        The column's filter type. ``None`` infers it from the shape of ``raw``.

    Returns
    -------
    TextFilter or RangeFilter or list or None
        ``None`` when ``raw`` is ``None``.

    Raises
    ------
    ConfigurationError
        If a dict descriptor names an unknown operator.
    """
    if raw is None:
        return None
    if isinstance(raw, (TextFilter, RangeFilter)):
        return raw
    if isinstance(raw, (list, tuple, set, frozenset)):
        return option_keys(raw)

    if field_type is FieldType.LIST:
        value = raw.get("value") if isinstance(raw, Mapping) else raw
        if value is None:
            return []
        if isinstance(value, (list, tuple, set, frozenset)):
            return option_keys(value)
        return option_keys([value])

    if isinstance(raw, Mapping):
        use_range = field_type in RANGE_TYPES or (field_type is None and _is_range_dict(raw))
        model = RangeFilter if use_range else TextFilter
        try:
            return model.model_validate(dict(raw))
        except ValidationError as exc:
            msg = f"Invalid filter descriptor: {exc.errors()[0]['msg']}"
            raise ConfigurationError(msg, descriptor=dict(raw)) from exc

    if field_type in RANGE_TYPES:
        return RangeFilter(value=raw)
    return TextFilter(value=raw)


def is_active(descriptor: FilterDescriptor | None) -> bool:
    """Return False for descriptors that are equivalent to "no filter"."""
    if descriptor is None:
        return False
    if isinstance(descriptor, list):
        return len(descriptor) > 0
    return descriptor.is_active


def sanitize_filter(descriptor: FilterDescriptor, limits: FilterSettings) -> FilterDescriptor:
    """Truncate user-typed filter values to the configured input limits."""
    if isinstance(descriptor, TextFilter) and isinstance(descriptor.value, str):
        if len(descriptor.value) > limits.max_text_length:
            return descriptor.model_copy(
                update={"value": descriptor.value[: limits.max_text_length]}
            )
    elif isinstance(descriptor, RangeFilter):
        update = {
            name: value[: limits.max_number_input_length]
            for name, value in (("value", descriptor.value), ("value_to", descriptor.value_to))
            if isinstance(value, str) and len(value) > limits.max_number_input_length
        }
        if update:
            return descriptor.model_copy(update=update)
    elif isinstance(descriptor, list):
        return [
            key[: limits.max_list_input_length] if isinstance(key, str) else key
            for key in descriptor
        ]
    return descriptor


def _match_text(cell: Any, descriptor: TextFilter) -> bool:
    operator = descriptor.operator
    if is_missing(cell):
        return operator is TextOperator.EMPTY

    text = str(cell).casefold()
    if operator is TextOperator.EMPTY:
        return text.strip() == ""
    if operator is TextOperator.NOT_EMPTY:
        return text.strip() != ""

    needle = str(descriptor.value).casefold()
    if operator is TextOperator.CONTAINS:
        return needle in text
    if operator is TextOperator.NOT_CONTAINS:
        return needle not in text
    if operator is TextOperator.EQUALS:
        return text == needle
    if operator is TextOperator.NOT_EQUAL:
        return text != needle
    if operator is TextOperator.STARTS_WITH:
        return text.startswith(needle)
    if operator is TextOperator.ENDS_WITH:
        return text.endswith(needle)
    return True


def _coercer_for(field_type: FieldType | None, cell: Any) -> Callable[[Any], Any]:
    if field_type is FieldType.NUMBER:
        return to_number
    if field_type is FieldType.DATE:
        return to_date
    if field_type is FieldType.DATETIME:
        return to_datetime
    # No declared range type: infer from the cell
    if not isinstance(cell, str) and to_number(cell) is not None:
        return to_number
    if looks_like_date(cell):
        return to_datetime
    return to_number


def _compare(operator: RangeOperator, cell: Any, target: Any) -> bool:
    # pylint: disable=too-many-return-statements
    if operator is RangeOperator.EQUALS:
        return cell == target
    if operator is RangeOperator.NOT_EQUAL:
        return cell != target
    if operator is RangeOperator.GREATER_THAN:
        return cell > target
    if operator is RangeOperator.LESS_THAN:
        return cell < target
    if operator is RangeOperator.GREATER_OR_EQUAL:
        return cell >= target
    if operator is RangeOperator.LESS_OR_EQUAL:
        return cell <= target
    return True


def _match_range(cell: Any, descriptor: RangeFilter, field_type: FieldType | None) -> bool:
    operator = descriptor.operator
    if is_missing(cell) or (isinstance(cell, str) and not cell.strip()):
        return operator is RangeOperator.EMPTY
    if operator is RangeOperator.EMPTY:
        return False
    if operator is RangeOperator.NOT_EMPTY:
        return True

    coerce = _coercer_for(field_type, cell)
    value = coerce(cell)
    if value is None:
        return False

    low = None if is_blank(descriptor.value) else coerce(descriptor.value)

    if operator is RangeOperator.IN_RANGE:
        high = None if is_blank(descriptor.value_to) else coerce(descriptor.value_to)
        if low is None and high is None:
            debug(f"Ignoring inRange filter with unreadable bounds: {descriptor!r}")
            return True
        if low is not None and high is not None and low > high:
            low, high = high, low
        # A missing bound never filters anything out on its side
        return (low is None or value >= low) and (high is None or value <= high)

    if low is None:
        debug(f"Ignoring filter with unreadable value: {descriptor!r}")
        return True
    return _compare(operator, value, low)


def _match_list(cell: Any, keys: Sequence[Any]) -> bool:
    if is_missing(cell):
        return False
    return any(cell == key or str(cell) == str(key) for key in keys)


def matches(
    row: Row,
    field: str,
    descriptor: Any,
    field_type: FieldType | str | None = None,
) -> bool:
    """Decide whether one row satisfies one field's filter.

    Parameters
    ----------
    row : Mapping
        The row record.
    field : str
        The field key the filter applies to.
    descriptor : Any
        The filter descriptor (typed or raw).
    field_type : FieldType or str or None
        The column's filter type.

    Returns
    -------
    bool
        True when the row passes, or when the descriptor is inactive.
    """
    if field_type is not None and not isinstance(field_type, FieldType):
        field_type = FieldType(field_type)
    parsed = parse_filter(descriptor, field_type)
    if not is_active(parsed):
        return True

    cell = row.get(field)
    if isinstance(parsed, list):
        return _match_list(cell, parsed)
    if isinstance(parsed, RangeFilter):
        return _match_range(cell, parsed, field_type)
    return _match_text(cell, parsed)


def active_filters(
    filter_state: Mapping[str, Any] | None,
    columns: Iterable[ColumnDef],
) -> list[tuple[str, FilterDescriptor, FieldType | None]]:
    """Resolve a filter state into ``(field, descriptor, type)`` triples.

    Inactive descriptors and filters on columns with filtering disabled are
    dropped.
    """
    if not filter_state:
        return []

    column_map = {column.field: column for column in columns}
    resolved: list[tuple[str, FilterDescriptor, FieldType | None]] = []
    for field, raw in filter_state.items():
        column = column_map.get(field)
        if column is not None and column.effective_filter_type is None:
            warn(f"Ignoring filter on '{field}': filtering is disabled for this column")
            continue
        field_type = column.effective_filter_type if column is not None else None
        descriptor = parse_filter(raw, field_type)
        if descriptor is None or not is_active(descriptor):
            continue
        resolved.append((field, descriptor, field_type))
    return resolved


def apply_filters(
    rows: Iterable[Row],
    filter_state: Mapping[str, Any] | None,
    columns: Iterable[ColumnDef],
) -> list[Row]:
    """Return the rows that satisfy every active filter, in original order."""
    resolved = active_filters(filter_state, columns)
    if not resolved:
        return list(rows)
    return [
        row
        for row in rows
        if all(matches(row, field, descriptor, field_type) for field, descriptor, field_type in resolved)
    ]
