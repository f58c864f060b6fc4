"""Inline edit session state machine.

States are ``Idle`` and ``Editing(update | create)``::

    Idle --start_edit / start_new_row_edit--> Editing
    Editing --save (valid)--> Idle        (on_edit_commit)
    Editing --save (invalid)--> Editing   (on_validation_fail, errors stored)
    Editing --cancel--> Idle              (on_edit_cancel)

Only one row can be edited at a time: starting an edit on another row while
one is open is refused until the open one is saved or cancelled.
Validation runs synchronously inside ``save``; failures are data, reported
through ``on_validation_fail`` and the edit store, never raised.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .callbacks import GridCallbacks
from .data import require_row_id
from .exceptions import EditSessionError
from .log import debug, warn
from .store import EditStore
from .translations import Translator
from .validation import errors_by_field, validate_field, validate_row


if TYPE_CHECKING:
    from .models import ColumnDef, EditMode, FieldError, Row, RowId
    from .store import EditState


class EditSession:
    """Owns "which row is being edited, with what draft and which errors".

    Parameters
    ----------
    columns : iterable of ColumnDef
        Columns whose validators run on save.
    store : EditStore, optional
        Store the session publishes to. A new one is created by default.
    callbacks : GridCallbacks, optional
        Host hooks (``on_edit_start``, ``on_edit_commit``, ...).
    translator : callable, optional
        Translation lookup for default validation messages.
    """

    def __init__(
        self,
        columns: Iterable[ColumnDef],
        store: EditStore | None = None,
        callbacks: GridCallbacks | None = None,
        translator: Callable[..., str] | None = None,
    ) -> None:
        self.columns: list[ColumnDef] = list(columns)
        self.store = store if store is not None else EditStore()
        self.callbacks = callbacks if callbacks is not None else GridCallbacks()
        self.translator = translator if translator is not None else Translator()

    # --- Read-only views ---

    @property
    def state(self) -> EditState:
        return self.store.get_snapshot()

    @property
    def is_editing(self) -> bool:
        return self.state.is_editing

    @property
    def edit_row_id(self) -> RowId | None:
        return self.state.edit_row_id

    @property
    def mode(self) -> EditMode | None:
        return self.state.mode

    @property
    def draft_values(self) -> Mapping[str, Any] | None:
        return self.state.draft_values

    @property
    def errors(self) -> list[FieldError]:
        return self.state.errors

    def set_columns(self, columns: Iterable[ColumnDef]) -> None:
        self.columns = list(columns)

    # --- Transitions ---

    def _can_start(self, row_id: RowId) -> bool:
        current = self.state
        if current.edit_row_id == row_id:
            debug(f"Row {row_id!r} is already being edited")
            return False
        if current.is_editing:
            warn(
                f"Cannot edit row {row_id!r} while row {current.edit_row_id!r} "
                "is being edited; save or cancel it first"
            )
            return False
        return True

    def start_edit(self, row_id: RowId, row: Row) -> bool:
        """Idle -> Editing(update).

        Draft values start as a shallow copy of ``row`` and stale errors are
        cleared. Fires ``on_edit_start(row_id, row)``.

        Returns
        -------
        bool
            False when nothing changed (same row already open, or another row
            is open).

        Raises
        ------
        RowIdError
            If ``row_id`` is None.
        """
        require_row_id(row_id)
        if not self._can_start(row_id):
            return False
        self.store.start_edit(row_id, row)
        self.callbacks.emit("on_edit_start", row_id, row)
        return True

    def start_new_row_edit(self, row_id: RowId) -> bool:
        """Idle -> Editing(create) with empty draft values."""
        require_row_id(row_id)
        if not self._can_start(row_id):
            return False
        self.store.start_new_row(row_id)
        return True

    def set_draft_value(self, field: str, value: Any) -> None:
        """Write one draft value. Does not validate.

        Raises
        ------
        EditSessionError
            If no row is being edited.
        """
        if not self.is_editing:
            msg = f"Cannot set draft value for '{field}': no row is being edited"
            raise EditSessionError(msg, field=field)
        self.store.set_draft_value(field, value)

    def validate_field(self, field: str) -> list[FieldError]:
        """Check one field of the draft (on blur) and record the outcome.

        Fields without a column validate as clean.

        Raises
        ------
        EditSessionError
            If no row is being edited.
        """
        state = self.state
        if state.edit_row_id is None:
            msg = f"Cannot validate '{field}': no row is being edited"
            raise EditSessionError(msg, field=field)

        column = next((c for c in self.columns if c.field == field), None)
        if column is None:
            return []

        errors = validate_field(
            dict(state.draft_values or {}), column, state.original_row, self.translator
        )
        self.store.set_field_errors(state.edit_row_id, field, errors)
        return errors

    def save(self) -> bool:
        """Validate the draft and commit it if valid.

        On failure the session stays open, errors are published to the
        store and ``on_validation_fail(row_id, errors)`` fires. On success
        ``on_edit_commit(row_id, values)`` fires and the session returns to
        idle.

        Returns
        -------
        bool
            True when the draft was committed.
        """
        state = self.state
        if state.edit_row_id is None:
            warn("save() called with no row being edited")
            return False

        row_id = state.edit_row_id
        values = dict(state.draft_values or {})
        errors = validate_row(values, self.columns, state.original_row, self.translator)
        if errors:
            debug(f"Row {row_id!r} failed validation on {len(errors)} field(s)")
            self.store.set_row_errors(row_id, errors_by_field(errors))
            self.callbacks.emit("on_validation_fail", row_id, errors)
            return False

        self.callbacks.emit("on_edit_commit", row_id, values)
        self.store.clear_edit()
        return True

    def cancel(self) -> bool:
        """Editing -> Idle, discarding the draft. Fires ``on_edit_cancel(row_id)``.

        Returns
        -------
        bool
            False when no row was being edited.
        """
        row_id = self.state.edit_row_id
        if row_id is None:
            debug("cancel() called with no row being edited")
            return False
        self.store.clear_edit()
        self.callbacks.emit("on_edit_cancel", row_id)
        return True
