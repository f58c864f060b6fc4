"""Translation lookup for user-facing grid messages.

A :class:`Translator` is an explicit, ordered chain of lookup tables:
instance overrides, then the locale table, then the English defaults, and
finally the key itself. The engine only uses it to produce messages, never
for control flow.

Examples
--------
>>> t = build_translator({"save": "Apply"}, locale="he")
>>> t("save")
'Apply'
>>> t("cancel")
'בטל'
>>> t("paginationRange", **{"from": 1, "to": 10, "count": 95})
'1–10 מתוך 95'
"""

from __future__ import annotations

import re

from collections.abc import Mapping, Sequence
from typing import Any

from .log import warn


_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


DEFAULT_TRANSLATIONS: dict[str, str] = {
    # Sort / filters
    "clearSort": "Clear sort",
    "clearAllFilters": "Clear all filters",
    "clearColumnFilter": "Clear filter",
    "sortAsc": "Sort ascending",
    "sortDesc": "Sort descending",
    "sortMultiColumnHint": "Hold Ctrl to sort by multiple columns",
    # Filter placeholders
    "filterPlaceholder": "Filter",
    "filterNumber": "Filter",
    "filterDate": "Filter",
    "selectOption": "Select",
    "filterTo": "To",
    # Operators
    "operatorEquals": "Equals",
    "operatorNotEqual": "Not Equal",
    "operatorGreaterThan": "Greater Than",
    "operatorLessThan": "Less Than",
    "operatorGreaterOrEqual": "Greater Or Equal",
    "operatorLessOrEqual": "Less Or Equal",
    "operatorInRange": "In Range",
    "operatorEmpty": "Empty",
    "operatorNotEmpty": "Not Empty",
    "operatorContains": "Contains",
    "operatorNotContains": "Does Not Contain",
    "operatorStartsWith": "Starts With",
    "operatorEndsWith": "Ends With",
    # Pagination
    "rowsPerPage": "Rows per page",
    "paginationRange": "{{from}}–{{to}} of {{count}}",
    "firstPage": "First page",
    "lastPage": "Last page",
    "prevPage": "Previous page",
    "nextPage": "Next page",
    # Empty / state
    "noRows": "No rows",
    "noResults": "No results match filters",
    # Edit
    "save": "Save",
    "cancel": "Cancel",
    "edit": "Edit",
    # Validation
    "validationErrors": "Please correct the following:",
    "validationRequired": "Required",
    "validationInvalid": "Invalid",
    "validationMinLength": "Must be at least {{min}} characters",
    "validationMaxLength": "Must be at most {{max}} characters",
    "validationMinValue": "Must be at least {{min}}",
    "validationMaxValue": "Must be at most {{max}}",
    "validationPattern": "Invalid format",
}

HEBREW_TRANSLATIONS: dict[str, str] = {
    **DEFAULT_TRANSLATIONS,
    # Sort / filters
    "clearSort": "נקה מיון",
    "clearAllFilters": "נקה כל הסינונים",
    "clearColumnFilter": "נקה סינון",
    "sortAsc": "מיין בסדר עולה",
    "sortDesc": "מיין בסדר יורד",
    "sortMultiColumnHint": "החזק Ctrl למיון לפי מספר עמודות",
    # Filter placeholders
    "filterPlaceholder": "סינון",
    "filterNumber": "סינון",
    "filterDate": "סינון",
    "selectOption": "בחר",
    "filterTo": "עד",
    # Operators
    "operatorEquals": "שווה",
    "operatorNotEqual": "לא שווה",
    "operatorGreaterThan": "גדול מ",
    "operatorLessThan": "קטן מ",
    "operatorGreaterOrEqual": "גדול או שווה",
    "operatorLessOrEqual": "קטן או שווה",
    "operatorInRange": "בטווח",
    "operatorEmpty": "ריק",
    "operatorNotEmpty": "לא ריק",
    "operatorContains": "מכיל",
    "operatorNotContains": "לא מכיל",
    "operatorStartsWith": "מתחיל ב",
    "operatorEndsWith": "מסתיים ב",
    # Pagination
    "rowsPerPage": "שורות לדף",
    "paginationRange": "{{from}}–{{to}} מתוך {{count}}",
    "firstPage": "דף ראשון",
    "lastPage": "דף אחרון",
    "prevPage": "דף קודם",
    "nextPage": "דף הבא",
    # Empty / state
    "noRows": "אין שורות",
    "noResults": "אין תוצאות התואמות לסינונים",
    # Edit
    "save": "שמור",
    "cancel": "בטל",
    "edit": "ערוך",
    # Validation
    "validationErrors": "יש לתקן את השגיאות הבאות:",
    "validationRequired": "נדרש",
}

LOCALE_TABLES: dict[str, Mapping[str, str]] = {
    "en": DEFAULT_TRANSLATIONS,
    "he": HEBREW_TRANSLATIONS,
}


def replace_params(text: str, params: Mapping[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders; unknown placeholders are kept."""
    if not params:
        return text
    return _PLACEHOLDER.sub(
        lambda m: str(params[m.group(1)]) if m.group(1) in params else m.group(0), text
    )


class Translator:
    """Ordered chain of translation tables.

    Parameters
    ----------
    sources : Sequence of Mapping
        Lookup tables, highest priority first. A key found in none of them
        is returned unchanged.
    """

    def __init__(self, sources: Sequence[Mapping[str, Any]] = (DEFAULT_TRANSLATIONS,)) -> None:
        self.sources: tuple[Mapping[str, Any], ...] = tuple(sources)

    def lookup(self, key: str) -> str:
        """Return the raw (unformatted) string for ``key``."""
        for source in self.sources:
            if key in source and source[key] is not None:
                return str(source[key])
        return key

    def __call__(self, key: str, **params: Any) -> str:
        return replace_params(self.lookup(key), params)

    def __repr__(self) -> str:
        return f"Translator(sources={len(self.sources)})"


def build_translator(
    overrides: Mapping[str, Any] | None = None,
    locale: str | None = None,
    defaults: Mapping[str, Any] = DEFAULT_TRANSLATIONS,
) -> Translator:
    """Build the ``overrides -> locale table -> defaults -> key`` chain."""
    sources: list[Mapping[str, Any]] = []
    if overrides:
        sources.append(overrides)
    if locale and locale not in LOCALE_TABLES:
        warn(f"No bundled translations for locale '{locale}', using defaults")
    elif locale and LOCALE_TABLES[locale] is not defaults:
        sources.append(LOCALE_TABLES[locale])
    sources.append(defaults)
    return Translator(sources)
