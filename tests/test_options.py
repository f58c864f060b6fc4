"""Tests for option resolution used by list filters and editors."""

from __future__ import annotations

from pydatagrid.models import ColumnDef, Option
from pydatagrid.options import (
    list_filter_choices,
    option_key,
    option_keys,
    option_label,
    option_map,
    resolve_option,
)


class TestOptionResolution:
    """Scalars and {value, label} pairs resolve to keys and labels."""

    def test_scalar(self):
        assert resolve_option("Active") == ("Active", "Active")

    def test_dict_pair(self):
        assert resolve_option({"value": 1, "label": "One"}) == (1, "One")

    def test_dict_without_label_uses_key(self):
        assert option_label({"value": 2}) == "2"

    def test_option_model(self):
        assert resolve_option(Option(value="a", label="Alpha")) == ("a", "Alpha")
        assert option_label(Option(value=3)) == "3"

    def test_dict_without_value_is_its_own_key(self):
        option = {"label": "Orphan"}
        assert option_key(option) is option

    def test_option_keys(self):
        assert option_keys(["a", {"value": 2, "label": "Two"}]) == ["a", 2]


class TestOptionMap:
    """option_map builds a key -> option lookup."""

    def test_builds_lookup(self):
        options = [{"value": 1, "label": "One"}, "two"]
        assert option_map(options) == {1: {"value": 1, "label": "One"}, "two": "two"}

    def test_non_list_gives_empty_mapping(self):
        assert option_map(None) == {}
        assert option_map("abc") == {}
        assert option_map({"value": 1}) == {}

    def test_unhashable_keys_skipped(self):
        options = [{"value": {"nested": True}}, "ok"]
        assert option_map(options) == {"ok": "ok"}


class TestListFilterChoices:
    """Choices come from declared options, else from the rows."""

    def test_declared_options(self):
        col = ColumnDef(field="status", type="list", options=[{"value": "a", "label": "Active"}])
        assert list_filter_choices(col, [{"status": "zzz"}]) == [("a", "Active")]

    def test_distinct_row_values_in_first_seen_order(self):
        col = ColumnDef(field="status", type="list")
        rows = [{"status": "b"}, {"status": "a"}, {"status": None}, {"status": "b"}, {}]
        assert list_filter_choices(col, rows) == [("b", "b"), ("a", "a")]
