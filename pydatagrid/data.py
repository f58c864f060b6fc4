"""Row ingestion, column inference and row-identity checks.

``normalize_rows`` accepts the shapes hosts commonly hold their data in:

- pandas DataFrame
- list of dicts: [{'a': 1}, {'a': 2}]
- dict of lists: {'a': [1, 2], 'b': [3, 4]}
- single dict: {'a': 1, 'b': 2}

Missing values (NaN, NaT, pandas NA) become ``None`` so the filter and sort
engines treat them as null cells.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .coerce import is_missing
from .exceptions import ConfigurationError, DuplicateFieldError, RowIdError
from .log import debug, warn
from .models import ColumnDef, FieldType


if TYPE_CHECKING:
    from .models import Row, RowId


# Rows sampled for type inference
_SAMPLE_SIZE = 100


def require_row_id(row_id: Any) -> RowId:
    """Reject a missing row id.

    Raises
    ------
    RowIdError
        If ``row_id`` is None.
    """
    if row_id is None:
        msg = "Row id must not be None"
        raise RowIdError(msg)
    return row_id


def index_rows(rows: Iterable[Row], get_row_id: Callable[[Row], Any]) -> dict[RowId, Row]:
    """Map each row id to its row, enforcing presence and uniqueness.

    Raises
    ------
    RowIdError
        If ``get_row_id`` returns None or two rows share an id.
    """
    index: dict[RowId, Row] = {}
    for position, row in enumerate(rows):
        row_id = get_row_id(row)
        if row_id is None:
            msg = f"get_row_id returned None for the row at position {position}"
            raise RowIdError(msg, position=position)
        if row_id in index:
            msg = f"Duplicate row id {row_id!r} at position {position}"
            raise RowIdError(msg, row_id=row_id, position=position)
        index[row_id] = row
    return index


def check_columns(columns: Iterable[ColumnDef | Mapping[str, Any]]) -> list[ColumnDef]:
    """Convert column dicts to ``ColumnDef`` and enforce unique fields.

    Raises
    ------
    DuplicateFieldError
        If two columns share a ``field``.
    ConfigurationError
        If a column dict is not a valid column definition.
    """
    result: list[ColumnDef] = []
    seen: set[str] = set()
    for column in columns:
        if not isinstance(column, ColumnDef):
            try:
                column = ColumnDef.model_validate(column)
            except ValidationError as exc:
                msg = f"Invalid column definition: {exc.errors()[0]['msg']}"
                raise ConfigurationError(msg, column=dict(column)) from exc
        if column.field in seen:
            msg = f"Duplicate column field '{column.field}'"
            raise DuplicateFieldError(msg, field=column.field)
        seen.add(column.field)
        result.append(column)
    return result


def _clean_row(row: Mapping[Any, Any]) -> dict[str, Any]:
    return {str(k): (None if is_missing(v) else v) for k, v in row.items()}


def normalize_rows(data: Any) -> list[dict[str, Any]]:
    """Convert supported data shapes into a list of row dicts."""
    if data is None:
        return []

    try:
        # pandas DataFrame (duck typing)
        if hasattr(data, "to_dict") and hasattr(data, "columns"):
            records = data.to_dict(orient="records")
            debug(f"Normalized DataFrame with {len(records)} rows")
        # dict - could be column-oriented or single row
        elif isinstance(data, Mapping):
            first_value = next(iter(data.values()), None)
            if isinstance(first_value, (list, tuple)):
                columns = list(data.keys())
                num_rows = len(first_value)
                records = [{col: data[col][i] for col in columns} for i in range(num_rows)]
            else:
                records = [data]
        else:
            records = list(data)
    except (ValueError, TypeError, IndexError) as e:
        warn(f"Failed to convert data: {e}")
        return []

    return [_clean_row(row) for row in records if isinstance(row, Mapping)]


def _detect_dtype_types(data: Any) -> dict[str, FieldType]:
    """Map pandas dtypes to field types."""
    field_types: dict[str, FieldType] = {}
    for col, dtype in data.dtypes.items():
        dtype_str = str(dtype)
        if "datetime64" in dtype_str:
            field_types[str(col)] = FieldType.DATETIME
        elif dtype_str == "category":
            field_types[str(col)] = FieldType.LIST
        elif dtype_str in {"bool", "boolean"}:
            field_types[str(col)] = FieldType.TEXT
        elif "int" in dtype_str.lower() or "float" in dtype_str.lower():
            field_types[str(col)] = FieldType.NUMBER
        else:
            field_types[str(col)] = FieldType.TEXT
    return field_types


def _infer_from_values(rows: list[dict[str, Any]]) -> dict[str, FieldType]:
    """Infer field types from the first non-null value of each column."""
    field_types: dict[str, FieldType] = {}
    sample = rows[:_SAMPLE_SIZE]
    fields = list(dict.fromkeys(key for row in sample for key in row))
    for field in fields:
        first = next((row[field] for row in sample if row.get(field) is not None), None)
        if isinstance(first, bool) or first is None:
            field_types[field] = FieldType.TEXT
        elif isinstance(first, (int, float)):
            field_types[field] = FieldType.NUMBER
        elif isinstance(first, datetime):
            field_types[field] = FieldType.DATETIME
        elif isinstance(first, date):
            field_types[field] = FieldType.DATE
        else:
            field_types[field] = FieldType.TEXT
    return field_types


def infer_field_types(data: Any) -> dict[str, FieldType]:
    """Detect a field type for every column of ``data``."""
    if hasattr(data, "dtypes") and hasattr(data, "columns"):
        return _detect_dtype_types(data)
    return _infer_from_values(normalize_rows(data))


def build_columns(
    data: Any,
    column_defs: Iterable[ColumnDef | Mapping[str, Any]] | None = None,
) -> list[ColumnDef]:
    """Build column definitions for ``data``.

    Inferred columns come first, in data order. An explicit definition
    replaces the inferred column with the same field; explicit definitions for
    fields absent from the data are appended.
    """
    explicit = {column.field: column for column in check_columns(column_defs or [])}
    result: list[ColumnDef] = []
    for field, field_type in infer_field_types(data).items():
        result.append(explicit.pop(field, None) or ColumnDef(field=field, type=field_type))
    result.extend(explicit.values())
    return result
