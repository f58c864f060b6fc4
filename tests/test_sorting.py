"""Tests for multi-column sorting."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from pydatagrid.exceptions import SortStateError
from pydatagrid.models import ColumnDef, FieldType, SortEntry, SortOrder
from pydatagrid.sorting import (
    apply_sort,
    compare_values,
    normalize_sort_state,
    sort_index_map,
    toggle_sort,
)


def _ids(rows):
    return [row["id"] for row in rows]


class TestNormalizeSortState:
    """Sort state accepts several entry shapes."""

    def test_empty(self):
        assert normalize_sort_state(None) == []
        assert normalize_sort_state([]) == []

    def test_mixed_shapes(self):
        state = normalize_sort_state(
            [SortEntry(field="a"), {"field": "b", "order": "desc"}, ("c", "asc"), ["d"]]
        )
        assert state == [
            SortEntry(field="a", order=SortOrder.ASC),
            SortEntry(field="b", order=SortOrder.DESC),
            SortEntry(field="c", order=SortOrder.ASC),
            SortEntry(field="d", order=SortOrder.ASC),
        ]

    def test_duplicate_field_rejected(self):
        with pytest.raises(SortStateError) as exc_info:
            normalize_sort_state([("a", "asc"), ("a", "desc")])
        assert exc_info.value.field == "a"

    @pytest.mark.parametrize("entry", [("a", "up"), (), {"order": "asc"}])
    def test_malformed_entry(self, entry):
        with pytest.raises(SortStateError):
            normalize_sort_state([entry])


class TestCompareValues:
    """Pairwise comparison of cell values."""

    def test_numbers(self):
        assert compare_values(2, 10) == -1
        assert compare_values(10, 2) == 1
        assert compare_values(2.0, 2) == 0

    def test_number_strings_on_number_column(self):
        assert compare_values("9", "10", FieldType.NUMBER) == -1

    def test_text_is_natural_and_case_insensitive(self):
        assert compare_values("item 2", "item 10") == -1
        assert compare_values("apple", "Banana") == -1

    def test_text_with_superscript_digits(self):
        assert compare_values("x10²", "x9") == 1
        assert compare_values("m²", "m³") == -1
        rows = [{"id": 1, "v": "x10²"}, {"id": 2, "v": "x9"}]
        assert _ids(apply_sort(rows, [{"field": "v", "order": "asc"}])) == [2, 1]

    def test_dates(self):
        assert compare_values(date(2024, 1, 2), date(2023, 12, 31)) == 1
        assert compare_values("2024-01-02", "2023-12-31", FieldType.DATE) == 1
        assert compare_values(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10)) == -1

    def test_missing_is_greater(self):
        assert compare_values(None, 1) == 1
        assert compare_values(1, None) == -1
        assert compare_values(None, float("nan")) == 0


class TestApplySort:
    """Sorting rows."""

    def test_no_sort_returns_copy_in_original_order(self):
        rows = [{"id": 3}, {"id": 1}, {"id": 2}]
        result = apply_sort(rows, [])
        assert _ids(result) == [3, 1, 2]
        assert result is not rows

    def test_ties_keep_original_order(self):
        rows = [{"id": 3, "g": "x"}, {"id": 1, "g": "x"}, {"id": 2, "g": "x"}]
        assert _ids(apply_sort(rows, [("g", "asc")])) == [3, 1, 2]
        assert _ids(apply_sort(rows, [("g", "desc")])) == [3, 1, 2]

    def test_ties_stay_in_original_order_both_directions(self):
        rows = [{"id": 1, "v": "a"}, {"id": 2, "v": "a"}, {"id": 3, "v": "b"}]
        assert _ids(apply_sort(rows, [("v", "asc")])) == [1, 2, 3]
        assert _ids(apply_sort(rows, [("v", "desc")])) == [3, 1, 2]

    def test_stable_within_groups(self):
        rows = [{"id": 1, "g": "b"}, {"id": 2, "g": "a"}, {"id": 3, "g": "b"}]
        assert _ids(apply_sort(rows, [("g", "asc")])) == [2, 1, 3]
        assert _ids(apply_sort(rows, [("g", "desc")])) == [1, 3, 2]

    def test_nulls_last_in_both_directions(self):
        rows = [{"id": 1, "v": 3}, {"id": 2, "v": None}, {"id": 3, "v": 1}, {"id": 4}]
        assert _ids(apply_sort(rows, [("v", "asc")])) == [3, 1, 2, 4]
        assert _ids(apply_sort(rows, [("v", "desc")])) == [1, 3, 2, 4]

    def test_multi_column(self):
        rows = [
            {"id": 1, "dept": "ops", "age": 30},
            {"id": 2, "dept": "dev", "age": 25},
            {"id": 3, "dept": "ops", "age": 40},
            {"id": 4, "dept": "dev", "age": 35},
        ]
        state = [SortEntry(field="dept"), SortEntry(field="age", order="desc")]
        assert _ids(apply_sort(rows, state)) == [4, 2, 3, 1]

    def test_column_type_drives_comparison(self):
        rows = [{"id": 1, "n": "1,000"}, {"id": 2, "n": "999"}]
        assert _ids(apply_sort(rows, [("n", "asc")])) == [1, 2]
        numeric = [ColumnDef(field="n", type="number")]
        assert _ids(apply_sort(rows, [("n", "asc")], numeric)) == [2, 1]

    def test_input_not_mutated(self):
        rows = [{"id": 2, "v": 2}, {"id": 1, "v": 1}]
        apply_sort(rows, [("v", "asc")])
        assert _ids(rows) == [2, 1]


class TestToggleSort:
    """Header clicks cycle none -> asc -> desc -> none."""

    def test_single_column_cycle(self):
        state = toggle_sort([], "name")
        assert state == [SortEntry(field="name", order=SortOrder.ASC)]
        state = toggle_sort(state, "name")
        assert state == [SortEntry(field="name", order=SortOrder.DESC)]
        assert toggle_sort(state, "name") == []

    def test_single_click_replaces_other_keys(self):
        state = [SortEntry(field="a"), SortEntry(field="b")]
        assert toggle_sort(state, "c") == [SortEntry(field="c")]

    def test_multi_appends_and_keeps_position(self):
        state = toggle_sort([SortEntry(field="a")], "b", multi=True)
        assert [e.field for e in state] == ["a", "b"]
        state = toggle_sort(state, "a", multi=True)
        assert state == [SortEntry(field="a", order=SortOrder.DESC), SortEntry(field="b")]
        assert toggle_sort(state, "a", multi=True) == [SortEntry(field="b")]

    def test_sort_index_map(self):
        state = [SortEntry(field="a", order="desc"), SortEntry(field="b")]
        assert sort_index_map(state) == {"a": (1, SortOrder.DESC), "b": (2, SortOrder.ASC)}
