"""Row validation against column validator chains.

Validation honors conditional editability: a column that is not editable
for the row being edited is skipped entirely. Within a column, validators
run in declared order and the first failure stops the chain, so each column
reports at most one error. Errors across columns come back in column order.

Usage:
    from pydatagrid.validation import required, min_value, validate_row

    columns = [
        ColumnDef(field="name", editable=True, validators=[required()]),
        ColumnDef(field="age", type="number", editable=True, validators=[min_value(18)]),
    ]
    errors = validate_row({"name": "", "age": 12}, columns)
    # [FieldError(field='name', message='Required'), FieldError(field='age', ...)]
"""

from __future__ import annotations

import re

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .coerce import to_number
from .exceptions import ValidatorError
from .models import FieldError, ValidatorSpec, is_blank
from .translations import Translator


if TYPE_CHECKING:
    from .models import ColumnDef, Row


_DEFAULT_TRANSLATOR = Translator()


def resolve_editable(column: ColumnDef, row: Row | None) -> bool:
    """Return whether ``column`` is editable for ``row``.

    The single place where static and conditional editability are resolved.
    """
    return column.editable.resolve(row)


def _failure_message(spec: ValidatorSpec, t: Callable[..., str]) -> str:
    if spec.message:
        return spec.message
    return t(spec.message_key, **dict(spec.message_params))


def _run_validator(
    column: ColumnDef,
    spec: ValidatorSpec,
    value: Any,
    row: Row,
    t: Callable[..., str],
) -> str | None:
    """Run one validator; return the failure message or None when it passes."""
    try:
        result = spec.validate(value, row)
    except Exception as exc:  # pylint: disable=broad-except
        msg = f"Validator for '{column.field}' raised {type(exc).__name__}: {exc}"
        raise ValidatorError(msg, field=column.field) from exc

    # numpy.bool_ and friends -> Python native
    if not isinstance(result, (bool, str)) and hasattr(result, "item"):
        result = result.item()

    if result is True:
        return None
    if result is False:
        return _failure_message(spec, t)
    if isinstance(result, str):
        return result or None

    msg = (
        f"Validator for '{column.field}' returned {type(result).__name__}; "
        "expected True, False or a message string"
    )
    raise ValidatorError(msg, field=column.field)


def validate_field(
    draft_row: Row,
    column: ColumnDef,
    original_row: Row | None = None,
    t: Callable[..., str] | None = None,
) -> list[FieldError]:
    """Validate a single column of a draft row (e.g. on blur).

    Parameters
    ----------
    draft_row : Mapping
        The in-progress row values.
    column : ColumnDef
        The column to check.
    original_row : Mapping or None
        The row as it was before editing; ``None`` for a new row, in which
        case conditional editability is decided on ``draft_row``.
    t : callable, optional
        Translation lookup for default messages.

    Returns
    -------
    list of FieldError
        Empty when valid, otherwise exactly one error.

    Raises
    ------
    ValidatorError
        If a validator raises or returns an unsupported result.
    """
    if not column.validators:
        return []

    editability_row = original_row if original_row is not None else draft_row
    if not resolve_editable(column, editability_row):
        return []

    translate = t or _DEFAULT_TRANSLATOR
    value = draft_row.get(column.field)
    for spec in column.validators:
        message = _run_validator(column, spec, value, draft_row, translate)
        if message is not None:
            return [FieldError(field=column.field, message=message)]
    return []


def validate_row(
    draft_row: Row,
    columns: Iterable[ColumnDef],
    original_row: Row | None = None,
    t: Callable[..., str] | None = None,
) -> list[FieldError]:
    """Validate every editable column of a draft row.

    Returns an empty list when the row is valid.
    """
    errors: list[FieldError] = []
    for column in columns:
        errors.extend(validate_field(draft_row, column, original_row, t))
    return errors


def errors_by_field(errors: Iterable[FieldError]) -> dict[str, tuple[FieldError, ...]]:
    """Group a flat error list by field, keeping order."""
    grouped: dict[str, list[FieldError]] = {}
    for err in errors:
        grouped.setdefault(err.field, []).append(err)
    return {field: tuple(items) for field, items in grouped.items()}


# --- Validator factories ---


def required(message: str | None = None) -> ValidatorSpec:
    """Fail on ``None``, empty or whitespace-only values."""
    return ValidatorSpec(
        lambda value, row: not is_blank(value),
        message=message,
        message_key="validationRequired",
    )


def min_length(length: int, message: str | None = None) -> ValidatorSpec:
    """Fail when the text is shorter than ``length``. Blank values pass."""
    return ValidatorSpec(
        lambda value, row: is_blank(value) or len(str(value).strip()) >= length,
        message=message,
        message_key="validationMinLength",
        message_params={"min": length},
    )


def max_length(length: int, message: str | None = None) -> ValidatorSpec:
    """Fail when the text is longer than ``length``."""
    return ValidatorSpec(
        lambda value, row: is_blank(value) or len(str(value)) <= length,
        message=message,
        message_key="validationMaxLength",
        message_params={"max": length},
    )


def _bounded(limit: float, compare: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def check(value: Any, row: Mapping[str, Any]) -> bool:  # pylint: disable=unused-argument
        if is_blank(value):
            return True
        number = to_number(value)
        return number is not None and compare(number, limit)

    return check


def min_value(limit: float, message: str | None = None) -> ValidatorSpec:
    """Fail when the number is below ``limit`` or not a number. Blank values pass."""
    return ValidatorSpec(
        _bounded(limit, lambda number, bound: number >= bound),
        message=message,
        message_key="validationMinValue",
        message_params={"min": limit},
    )


def max_value(limit: float, message: str | None = None) -> ValidatorSpec:
    """Fail when the number is above ``limit`` or not a number. Blank values pass."""
    return ValidatorSpec(
        _bounded(limit, lambda number, bound: number <= bound),
        message=message,
        message_key="validationMaxValue",
        message_params={"max": limit},
    )


def pattern(regex: str | re.Pattern[str], message: str | None = None) -> ValidatorSpec:
    """Fail when the text does not fully match ``regex``. Blank values pass."""
    compiled = re.compile(regex) if isinstance(regex, str) else regex
    return ValidatorSpec(
        lambda value, row: is_blank(value) or compiled.fullmatch(str(value)) is not None,
        message=message,
        message_key="validationPattern",
    )
