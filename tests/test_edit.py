"""Tests for the inline edit session.

Covers the Idle -> Editing -> Idle lifecycle, the single-active-row rule,
validation on save, and the callbacks fired on each transition.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pydatagrid.callbacks import GridCallbacks
from pydatagrid.edit import EditSession
from pydatagrid.exceptions import EditSessionError, RowIdError
from pydatagrid.models import ColumnDef, EditMode
from pydatagrid.validation import min_value, required


@pytest.fixture
def columns():
    return [
        ColumnDef(field="id", type="number"),
        ColumnDef(field="name", editable=True, validators=[required()]),
        ColumnDef(field="age", type="number", editable=True, validators=[min_value(0)]),
    ]


@pytest.fixture
def callbacks():
    return GridCallbacks(
        on_edit_start=MagicMock(),
        on_edit_cancel=MagicMock(),
        on_edit_commit=MagicMock(),
        on_validation_fail=MagicMock(),
    )


@pytest.fixture
def session(columns, callbacks):
    return EditSession(columns, callbacks=callbacks)


ROW = {"id": 1, "name": "Ann", "age": 30}


class TestLifecycle:
    """Start, edit, save."""

    def test_starts_idle(self, session):
        assert not session.is_editing
        assert session.edit_row_id is None
        assert session.errors == []

    def test_start_edit(self, session, callbacks):
        assert session.start_edit(1, ROW)
        assert session.is_editing
        assert session.mode is EditMode.UPDATE
        assert dict(session.draft_values) == ROW
        callbacks.on_edit_start.assert_called_once_with(1, ROW)

    def test_save_commits_draft(self, session, callbacks):
        session.start_edit(1, ROW)
        session.set_draft_value("name", "Annie")
        assert session.save()
        callbacks.on_edit_commit.assert_called_once_with(1, {"id": 1, "name": "Annie", "age": 30})
        assert not session.is_editing
        assert session.draft_values is None

    def test_commit_hook_runs_before_session_closes(self, columns):
        seen = []
        session = EditSession(columns)
        session.callbacks.on_edit_commit = lambda row_id, values: seen.append(session.edit_row_id)
        session.start_edit(1, ROW)
        session.save()
        assert seen == [1]

    def test_save_without_changes_commits_original_values(self, session, callbacks):
        session.start_edit(1, ROW)
        session.save()
        callbacks.on_edit_commit.assert_called_once_with(1, ROW)

    def test_cancel(self, session, callbacks):
        session.start_edit(1, ROW)
        session.set_draft_value("name", "Changed")
        assert session.cancel()
        callbacks.on_edit_cancel.assert_called_once_with(1)
        callbacks.on_edit_commit.assert_not_called()
        assert not session.is_editing

    def test_cancel_when_idle(self, session, callbacks):
        assert not session.cancel()
        callbacks.on_edit_cancel.assert_not_called()

    def test_save_when_idle(self, session, callbacks):
        assert not session.save()
        callbacks.on_edit_commit.assert_not_called()

    def test_round_trip_returns_to_clean_state(self, session):
        session.start_edit(1, ROW)
        session.set_draft_value("name", "")
        session.save()
        session.cancel()
        assert session.state == session.store.get_snapshot()
        assert not session.is_editing
        assert session.state.errors_for(1) == {}


class TestSingleActiveRow:
    """Only one row is edited at a time."""

    def test_other_row_refused(self, session, callbacks):
        session.start_edit(1, ROW)
        assert not session.start_edit(2, {"id": 2, "name": "Bob", "age": 5})
        assert session.edit_row_id == 1
        assert callbacks.on_edit_start.call_count == 1

    def test_same_row_is_a_no_op(self, session, callbacks):
        session.start_edit(1, ROW)
        session.set_draft_value("name", "Draft")
        assert not session.start_edit(1, ROW)
        assert session.draft_values["name"] == "Draft"
        callbacks.on_edit_start.assert_called_once()

    def test_new_edit_after_cancel(self, session):
        session.start_edit(1, ROW)
        session.cancel()
        assert session.start_edit(2, {"id": 2})
        assert session.edit_row_id == 2

    def test_none_row_id_rejected(self, session):
        with pytest.raises(RowIdError):
            session.start_edit(None, ROW)


class TestValidationOnSave:
    """Invalid drafts stay open and report errors."""

    def test_invalid_draft_not_committed(self, session, callbacks):
        session.start_edit(1, ROW)
        session.set_draft_value("name", " ")
        session.set_draft_value("age", -4)
        assert not session.save()
        assert session.is_editing
        callbacks.on_edit_commit.assert_not_called()
        row_id, errors = callbacks.on_validation_fail.call_args.args
        assert row_id == 1
        assert [e.field for e in errors] == ["name", "age"]
        assert [e.field for e in session.errors] == ["name", "age"]
        assert session.store.row_state(1).error_fields == frozenset({"name", "age"})

    def test_fixing_draft_then_saving(self, session, callbacks):
        session.start_edit(1, ROW)
        session.set_draft_value("name", "")
        session.save()
        session.set_draft_value("name", "Fixed")
        assert session.save()
        callbacks.on_edit_commit.assert_called_once()
        assert session.state.errors_for(1) == {}

    def test_validate_field_on_blur(self, session):
        session.start_edit(1, ROW)
        session.set_draft_value("name", "")
        errors = session.validate_field("name")
        assert [e.message for e in errors] == ["Required"]
        assert session.store.row_state(1).error_fields == frozenset({"name"})

        session.set_draft_value("name", "Ok")
        assert session.validate_field("name") == []
        assert session.store.row_state(1).error_fields == frozenset()

    def test_validate_unknown_field(self, session):
        session.start_edit(1, ROW)
        assert session.validate_field("nope") == []

    def test_validate_field_when_idle(self, session):
        with pytest.raises(EditSessionError):
            session.validate_field("name")


class TestNewRows:
    """Creating rows through the edit session."""

    def test_start_new_row_edit(self, session, callbacks):
        assert session.start_new_row_edit("tmp-1")
        assert session.mode is EditMode.CREATE
        assert dict(session.draft_values) == {}
        callbacks.on_edit_start.assert_not_called()

    def test_new_row_requires_values(self, session, callbacks):
        session.start_new_row_edit("tmp-1")
        assert not session.save()
        session.set_draft_value("name", "New")
        assert session.save()
        callbacks.on_edit_commit.assert_called_once_with("tmp-1", {"name": "New"})


class TestMisuse:
    """Calls in the wrong state."""

    def test_set_draft_value_when_idle(self, session):
        with pytest.raises(EditSessionError):
            session.set_draft_value("name", "x")

    def test_callback_errors_propagate(self, columns):
        def broken(row_id, row):
            raise RuntimeError("host failed")

        session = EditSession(columns, callbacks=GridCallbacks(on_edit_start=broken))
        with pytest.raises(RuntimeError, match="host failed"):
            session.start_edit(1, ROW)
