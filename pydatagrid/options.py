"""Option resolution for list filters and list editors.

An option is either a bare scalar (``"Active"``) or a ``{value, label}`` pair
(a dict or an :class:`~pydatagrid.models.Option`). The key is what list
filters store and compare; the label is what a user sees.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .models import Option


if TYPE_CHECKING:
    from .models import ColumnDef, Row


def option_key(option: Any) -> Any:
    """Return the stable key of an option.

    Examples
    --------
    >>> option_key({"value": 1, "label": "One"})
    1
    >>> option_key("Active")
    'Active'
    """
    if isinstance(option, Option):
        return option.value
    if isinstance(option, dict) and "value" in option:
        return option["value"]
    return option


def option_label(option: Any) -> str:
    """Return the display label of an option, falling back to ``str(key)``."""
    if isinstance(option, Option) and option.label is not None:
        return option.label
    if isinstance(option, dict) and option.get("label") is not None:
        return str(option["label"])
    return str(option_key(option))


def resolve_option(option: Any) -> tuple[Any, str]:
    """Normalize any option descriptor into a ``(key, label)`` pair."""
    return option_key(option), option_label(option)


def option_map(options: Any) -> dict[Any, Any]:
    """Build a key -> option mapping for O(1) lookup.

    Anything that is not a list or tuple yields an empty mapping.
    """
    if not isinstance(options, (list, tuple)):
        return {}
    result: dict[Any, Any] = {}
    for option in options:
        key = option_key(option)
        try:
            result[key] = option
        except TypeError:
            # Unhashable keys (e.g. dict values) cannot be looked up
            continue
    return result


def option_keys(options: Iterable[Any]) -> list[Any]:
    """Reduce a selection of options to their keys."""
    return [option_key(o) for o in options]


def list_filter_choices(column: ColumnDef, rows: Iterable[Row]) -> list[tuple[Any, str]]:
    """Return ``(key, label)`` choices for a column's list filter.

    Declared ``options`` win. Without them the distinct non-null row values
    are offered in first-seen order.
    """
    if column.options:
        return [resolve_option(o) for o in column.options]

    seen: dict[Any, None] = {}
    for row in rows:
        value = row.get(column.field)
        if value is None:
            continue
        try:
            seen.setdefault(value, None)
        except TypeError:
            seen.setdefault(str(value), None)
    return [(value, str(value)) for value in seen]
