"""Tests for observable selection and edit stores."""

from __future__ import annotations

import pytest

from pydatagrid.models import EditMode, FieldError
from pydatagrid.store import (
    EMPTY_EDIT_STATE,
    NOT_EDITING,
    EditStore,
    MultiSelectionStore,
    ObservableCell,
    SelectionStore,
)


class TestObservableCell:
    """Subscription and change suppression."""

    def test_notifies_on_change(self):
        cell = ObservableCell(1)
        seen = []
        cell.subscribe(lambda: seen.append(cell.get_snapshot()))
        assert cell.set(2) is True
        assert seen == [2]

    def test_equal_value_is_a_no_op(self):
        cell = ObservableCell((1, 2))
        snapshot = cell.get_snapshot()
        calls = []
        cell.subscribe(lambda: calls.append(1))
        assert cell.set((1, 2)) is False
        assert calls == []
        assert cell.get_snapshot() is snapshot

    def test_listeners_called_in_subscription_order(self):
        cell = ObservableCell(0)
        order = []
        cell.subscribe(lambda: order.append("a"))
        cell.subscribe(lambda: order.append("b"))
        cell.set(1)
        assert order == ["a", "b"]

    def test_unsubscribe(self):
        cell = ObservableCell(0)
        calls = []
        unsubscribe = cell.subscribe(lambda: calls.append(1))
        unsubscribe()
        unsubscribe()
        cell.set(1)
        assert calls == []
        assert cell.listener_count == 0

    def test_unsubscribe_during_notification(self):
        cell = ObservableCell(0)
        calls = []
        unsubscribe_b = None

        def listener_a():
            calls.append("a")
            unsubscribe_b()

        cell.subscribe(listener_a)
        unsubscribe_b = cell.subscribe(lambda: calls.append("b"))
        cell.set(1)
        assert calls == ["a"]
        cell.set(2)
        assert calls == ["a", "a"]

    def test_same_listener_twice_is_called_twice(self):
        cell = ObservableCell(0)
        calls = []

        def listener():
            calls.append(1)

        cell.subscribe(listener)
        cell.subscribe(listener)
        cell.set(1)
        assert len(calls) == 2

    def test_update(self):
        cell = ObservableCell(1)
        assert cell.update(lambda v: v + 1) is True
        assert cell.get_snapshot() == 2

    def test_listener_errors_propagate(self):
        cell = ObservableCell(0)

        def broken():
            raise RuntimeError("listener failed")

        cell.subscribe(broken)
        with pytest.raises(RuntimeError):
            cell.set(1)


class TestSelectionStores:
    """Single and multi selection."""

    def test_single_selection(self):
        store = SelectionStore()
        assert store.get_snapshot() is None
        assert store.set(5)
        assert not store.set(5)
        assert store.get_snapshot() == 5

    def test_reselecting_same_row_does_not_notify(self):
        store = SelectionStore("row-1")
        calls = []
        store.subscribe(lambda: calls.append(store.get_snapshot()))
        store.set("row-1")
        assert calls == []
        store.set("row-2")
        assert calls == ["row-2"]

    def test_multi_selection_toggle(self):
        store = MultiSelectionStore()
        calls = []
        store.subscribe(lambda: calls.append(store.get_snapshot()))
        assert store.toggle(1, True)
        assert store.toggle(2, True)
        assert not store.toggle(2, True)
        assert store.toggle(1, False)
        assert store.get_snapshot() == frozenset({2})
        assert len(calls) == 3
        assert store.is_selected(2)
        assert not store.is_selected(1)

    def test_multi_selection_set_many_and_clear(self):
        store = MultiSelectionStore([1])
        assert store.set_many([1, 2, 3])
        assert not store.set_many([3, 2, 1])
        assert store.clear()
        assert store.get_snapshot() == frozenset()


class TestEditStore:
    """Edit state snapshots."""

    def test_initial_state(self):
        store = EditStore()
        assert store.get_snapshot() is EMPTY_EDIT_STATE
        assert not store.get_snapshot().is_editing
        assert store.row_state(1) is NOT_EDITING

    def test_start_edit_copies_row(self):
        store = EditStore()
        row = {"id": 1, "name": "Ann"}
        store.start_edit(1, row)
        state = store.get_snapshot()
        assert state.edit_row_id == 1
        assert state.mode is EditMode.UPDATE
        assert dict(state.draft_values) == row
        store.set_draft_value("name", "Bob")
        assert row["name"] == "Ann"
        assert store.get_snapshot().draft_values["name"] == "Bob"

    def test_start_new_row(self):
        store = EditStore()
        store.start_new_row("new")
        state = store.get_snapshot()
        assert state.mode is EditMode.CREATE
        assert dict(state.draft_values) == {}
        assert state.original_row is None

    def test_snapshot_is_read_only(self):
        store = EditStore()
        store.start_edit(1, {"name": "Ann"})
        with pytest.raises(TypeError):
            store.get_snapshot().draft_values["name"] = "x"

    def test_row_state_selector(self):
        store = EditStore()
        store.start_edit(1, {"name": "Ann"})
        editing = store.row_state(1)
        assert editing.is_editing
        assert store.row_state(1) is editing
        assert store.row_state(2) is NOT_EDITING

    def test_row_state_changes_with_errors(self):
        store = EditStore()
        store.start_edit(1, {"name": ""})
        before = store.row_state(1)
        store.set_field_errors(1, "name", [FieldError(field="name", message="Required")])
        after = store.row_state(1)
        assert after is not before
        assert after.error_fields == frozenset({"name"})
        assert [e.message for e in store.get_snapshot().errors] == ["Required"]

    def test_clearing_field_errors(self):
        store = EditStore()
        store.start_edit(1, {"name": ""})
        store.set_field_errors(1, "name", [FieldError(field="name", message="Required")])
        store.set_field_errors(1, "name", [])
        assert store.get_snapshot().errors_for(1) == {}
        assert store.row_state(1).error_fields == frozenset()

    def test_same_draft_value_does_not_notify(self):
        store = EditStore()
        store.start_edit(1, {"name": "Ann"})
        calls = []
        store.subscribe(lambda: calls.append(1))
        assert not store.set_draft_value("name", "Ann")
        assert calls == []

    def test_clear_edit(self):
        store = EditStore()
        store.start_edit(1, {"name": "Ann"})
        store.set_row_errors(1, {"name": (FieldError(field="name", message="x"),)})
        assert store.clear_edit()
        assert store.get_snapshot() is EMPTY_EDIT_STATE
        assert store.get_snapshot().errors_for(1) == {}
