"""Pydantic models for the grid schema and query state.

- ColumnDef: column definition (field, type, filter, editability, validators)
- TextFilter / RangeFilter: per-column filter descriptors
- SortEntry / PageState: sort and page state
- FieldError: one validation failure for one field

Models accept camelCase aliases (``headerName``, ``valueTo``, ``pageSize``)
as well as snake_case names, so column sets written for a JavaScript grid can
be loaded unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Type Aliases ---

Row = Mapping[str, Any]
RowId = Union[str, int]
FilterDescriptor = Union["TextFilter", "RangeFilter", list[Any]]


class FieldType(str, Enum):
    """Closed set of column value types.

    Governs which operators apply when filtering and how values are compared
    when sorting.
    """

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    LIST = "list"


RANGE_TYPES = frozenset({FieldType.NUMBER, FieldType.DATE, FieldType.DATETIME})


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class EditMode(str, Enum):
    """Whether the row being edited already exists or is being created."""

    CREATE = "create"
    UPDATE = "update"


class Severity(str, Enum):
    """Validation error severity. Only ``error`` is produced today."""

    ERROR = "error"


# Symbolic spellings used by filter widgets -> canonical operator names
_OPERATOR_ALIASES: dict[str, str] = {
    "=": "equals",
    "==": "equals",
    "!=": "notEqual",
    ">": "greaterThan",
    "<": "lessThan",
    ">=": "greaterOrEqual",
    "<=": "lessOrEqual",
}


class TextOperator(str, Enum):
    """Operators for text filters."""

    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    EQUALS = "equals"
    NOT_EQUAL = "notEqual"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    EMPTY = "empty"
    NOT_EMPTY = "notEmpty"

    @classmethod
    def _missing_(cls, value: object) -> TextOperator | None:
        alias = _OPERATOR_ALIASES.get(value) if isinstance(value, str) else None
        return cls._value2member_map_.get(alias) if alias else None  # type: ignore[return-value]


class RangeOperator(str, Enum):
    """Operators for number, date and datetime filters."""

    EQUALS = "equals"
    NOT_EQUAL = "notEqual"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_OR_EQUAL = "greaterOrEqual"
    LESS_OR_EQUAL = "lessOrEqual"
    IN_RANGE = "inRange"
    EMPTY = "empty"
    NOT_EMPTY = "notEmpty"

    @classmethod
    def _missing_(cls, value: object) -> RangeOperator | None:
        alias = _OPERATOR_ALIASES.get(value) if isinstance(value, str) else None
        return cls._value2member_map_.get(alias) if alias else None  # type: ignore[return-value]


# Operators that need no value: an "is empty" style check
VALUELESS_OPERATORS = frozenset({"empty", "notEmpty"})


def is_blank(value: Any) -> bool:
    """Return True for values a filter treats as "not provided"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


# --- Base Model with camelCase serialization ---


class GridModel(BaseModel):
    """Base model for grid objects with camelCase serialization."""

    model_config = ConfigDict(
        populate_by_name=True,  # Accept both snake_case and camelCase
        arbitrary_types_allowed=True,
        use_enum_values=False,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict with camelCase keys, excluding None values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# --- Filter descriptors ---


class TextFilter(GridModel):
    """Filter descriptor for text columns."""

    operator: TextOperator = TextOperator.CONTAINS
    value: Any = None

    @property
    def is_active(self) -> bool:
        """A text filter with no value is equivalent to no filter."""
        return self.operator.value in VALUELESS_OPERATORS or not is_blank(self.value)


class RangeFilter(GridModel):
    """Filter descriptor for number, date and datetime columns.

    ``value_to`` is only read when ``operator`` is ``inRange``.
    """

    operator: RangeOperator = RangeOperator.EQUALS
    value: Any = None
    value_to: Any = Field(default=None, alias="valueTo")

    @property
    def is_active(self) -> bool:
        """A range filter with neither bound set is equivalent to no filter."""
        if self.operator.value in VALUELESS_OPERATORS:
            return True
        if self.operator is RangeOperator.IN_RANGE:
            return not (is_blank(self.value) and is_blank(self.value_to))
        return not is_blank(self.value)


# --- Sort / page state ---


class SortEntry(GridModel):
    """One key of a multi-column sort."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field: str
    order: SortOrder = SortOrder.ASC


class PageState(GridModel):
    """Zero-based page index and page size."""

    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=10, gt=0, alias="pageSize")


# --- Editability (tagged variant) ---


class StaticEditable(BaseModel):
    """Column editability fixed for every row."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["static"] = "static"
    value: bool = False

    def resolve(self, row: Row | None) -> bool:  # pylint: disable=unused-argument
        return self.value


class ConditionalEditable(BaseModel):
    """Column editability decided per row by a predicate."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["conditional"] = "conditional"
    predicate: Callable[[Any], Any]

    def resolve(self, row: Row | None) -> bool:
        return bool(self.predicate(row if row is not None else {}))


Editable = Annotated[Union[StaticEditable, ConditionalEditable], Field(discriminator="kind")]


# --- Validation ---


@dataclass(frozen=True)
class ValidatorSpec:
    """One validator of a column.

    ``validate(value, row)`` returns ``True`` to pass, ``False`` to fail with
    ``message``, or a non-empty string to fail with that string instead.
    Without a ``message`` the failure text comes from the translation key
    ``message_key`` (formatted with ``message_params``).
    """

    validate: Callable[[Any, Any], Any]
    message: str | None = None
    message_key: str = "validationInvalid"
    message_params: Mapping[str, Any] = dataclass_field(default_factory=dict)


class FieldError(BaseModel):
    """A single validation failure for one field of a row."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    severity: Severity = Severity.ERROR


class Option(GridModel):
    """A ``{value, label}`` choice for list filters and editors."""

    value: str | int | float | bool
    label: str | None = None


# --- Column definition ---


class ColumnDef(GridModel):
    """Grid column definition.

    Example:
        ColumnDef(field="age", type="number", editable=True, validators=[
            ValidatorSpec(lambda v, row: v >= 18, "Must be an adult"),
        ])
    """

    field: str = Field(min_length=1)
    header_name: str | None = Field(default=None, alias="headerName")
    type: FieldType = FieldType.TEXT
    filter_type: FieldType | Literal[False] | None = Field(default=None, alias="filter")
    editable: Editable = Field(default_factory=StaticEditable)
    validators: list[ValidatorSpec] = Field(default_factory=list)
    options: list[Any] = Field(default_factory=list)
    value_formatter: Callable[[Any, Any], Any] | None = Field(
        default=None, alias="valueFormatter"
    )
    align: Literal["left", "right", "center"] | None = None

    @field_validator("filter_type", mode="before")
    @classmethod
    def normalize_filter_type(cls, v: Any) -> Any:
        """``filter=True`` means "filter by the column type"."""
        if v is True:
            return None
        return v

    @field_validator("editable", mode="before")
    @classmethod
    def normalize_editable(cls, v: Any) -> Any:
        """Wrap a bare bool or predicate into the tagged editability variant."""
        if v is None or isinstance(v, bool):
            return StaticEditable(value=bool(v))
        if isinstance(v, (StaticEditable, ConditionalEditable, dict)):
            return v
        if callable(v):
            return ConditionalEditable(predicate=v)
        msg = f"editable must be a bool or a callable, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("validators", mode="before")
    @classmethod
    def normalize_validators(cls, v: Any) -> Any:
        """Accept bare callables and ``(validate, message)`` pairs."""
        if v is None:
            return []
        normalized = []
        for item in v:
            if isinstance(item, tuple):
                item = ValidatorSpec(*item)
            elif callable(item) and not isinstance(item, ValidatorSpec):
                item = ValidatorSpec(item)
            normalized.append(item)
        return normalized

    @property
    def label(self) -> str:
        """Display label, falling back to the field key."""
        return self.header_name or self.field

    @property
    def effective_filter_type(self) -> FieldType | None:
        """Field type used for filtering, or None when filtering is disabled."""
        if self.filter_type is False:
            return None
        return self.filter_type or self.type

    def format_value(self, row: Row) -> Any:
        """Apply ``value_formatter`` to this column's cell, if one is set."""
        value = row.get(self.field)
        if self.value_formatter is None:
            return value
        return self.value_formatter(value, row)
