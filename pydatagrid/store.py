"""Observable state containers for selection and inline editing.

Every store is an :class:`ObservableCell`: an immutable snapshot behind
``get_snapshot()``, ``subscribe(listener) -> unsubscribe`` and typed
mutators. Mutators replace the snapshot (never mutate it in place) and then
synchronously call every current listener once, in subscription order.
Writing a value equal to the current snapshot is a no-op: listeners are not
called and ``get_snapshot()`` keeps returning the same object, so consumers
can gate re-rendering on identity.

Listeners take no arguments; they read the new state with ``get_snapshot()``.

Examples
--------
>>> store = SelectionStore()
>>> calls = []
>>> unsubscribe = store.subscribe(lambda: calls.append(store.get_snapshot()))
>>> store.set("row-1")
True
>>> store.set("row-1")
False
>>> calls
['row-1']
"""

from __future__ import annotations

import dataclasses

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .log import debug
from .models import EditMode


if TYPE_CHECKING:
    from .models import FieldError, Row, RowId


T = TypeVar("T")

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]


def _frozen_mapping(values: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(values or {}))


class ObservableCell(Generic[T]):
    """A single immutable value with change subscription.

    Parameters
    ----------
    initial : T
        The initial snapshot.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: dict[int, Listener] = {}
        self._next_token = 0

    def get_snapshot(self) -> T:
        """Return the current snapshot."""
        return self._value

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a listener; returns a function that removes it.

        Calling the returned function more than once is harmless.
        """
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def set(self, value: T) -> bool:
        """Replace the snapshot and notify listeners.

        Returns
        -------
        bool
            False when ``value`` equals the current snapshot (nothing happens).
        """
        current = self._value
        if value is current or value == current:
            return False
        self._value = value
        self._notify()
        return True

    def update(self, fn: Callable[[T], T]) -> bool:
        """Replace the snapshot with ``fn(current)``."""
        return self.set(fn(self._value))

    def _notify(self) -> None:
        for token, listener in list(self._listeners.items()):
            # Skip listeners removed by an earlier listener in this round
            if token in self._listeners:
                listener()


class SelectionStore(ObservableCell["RowId | None"]):
    """Single "last clicked row" selection."""

    def __init__(self, initial: RowId | None = None) -> None:
        super().__init__(initial)


class MultiSelectionStore(ObservableCell["frozenset[RowId]"]):
    """Checkbox multi-selection for bulk operations."""

    def __init__(self, initial: Iterable[RowId] = ()) -> None:
        super().__init__(frozenset(initial))

    def toggle(self, row_id: RowId, checked: bool) -> bool:
        """Add (``checked``) or remove a row id."""
        if checked:
            return self.update(lambda ids: ids | {row_id})
        return self.update(lambda ids: ids - {row_id})

    def set_many(self, row_ids: Iterable[RowId]) -> bool:
        """Replace the whole selection."""
        return self.set(frozenset(row_ids))

    def clear(self) -> bool:
        return self.set(frozenset())

    def is_selected(self, row_id: RowId) -> bool:
        return row_id in self._value


# --- Edit store ---


@dataclass(frozen=True)
class RowEditState:
    """What a single row needs to know to render itself.

    Every non-editing row shares the :data:`NOT_EDITING` instance.
    """

    is_editing: bool
    draft_values: Mapping[str, Any] = field(default_factory=_frozen_mapping)
    error_fields: frozenset[str] = frozenset()


NOT_EDITING = RowEditState(is_editing=False)


@dataclass(frozen=True)
class EditState:
    """Snapshot of the edit session.

    ``row_errors`` maps a row id to ``{field: (FieldError, ...)}``.
    ``row_state`` is the cached :class:`RowEditState` of the editing row.
    """

    edit_row_id: RowId | None = None
    mode: EditMode | None = None
    draft_values: Mapping[str, Any] | None = None
    original_row: Row | None = None
    row_errors: Mapping[RowId, Mapping[str, tuple[FieldError, ...]]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    row_state: RowEditState | None = None

    @property
    def is_editing(self) -> bool:
        return self.edit_row_id is not None

    def errors_for(self, row_id: RowId) -> Mapping[str, tuple[FieldError, ...]]:
        """Field errors recorded for ``row_id`` (empty mapping when none)."""
        return self.row_errors.get(row_id, MappingProxyType({}))

    @property
    def errors(self) -> list[FieldError]:
        """Flat error list for the row being edited."""
        if self.edit_row_id is None:
            return []
        return [err for errs in self.errors_for(self.edit_row_id).values() for err in errs]


EMPTY_EDIT_STATE = EditState()


class EditStore(ObservableCell[EditState]):
    """Inline edit state for one grid.

    Only the edit session writes to this store; everything else reads and
    subscribes.
    """

    def __init__(self) -> None:
        super().__init__(EMPTY_EDIT_STATE)

    def _replace(self, **changes: Any) -> bool:
        state = dataclasses.replace(self._value, **changes)
        if state.edit_row_id is None:
            row_state = None
        else:
            row_state = RowEditState(
                is_editing=True,
                draft_values=state.draft_values or _frozen_mapping(),
                error_fields=frozenset(state.errors_for(state.edit_row_id)),
            )
        return self.set(dataclasses.replace(state, row_state=row_state))

    def start_edit(self, row_id: RowId, row: Row) -> bool:
        """Begin editing an existing row; draft values start as a shallow copy."""
        if self._value.edit_row_id == row_id:
            return False
        debug(f"Edit store: start update of row {row_id!r}")
        return self._replace(
            edit_row_id=row_id,
            mode=EditMode.UPDATE,
            draft_values=_frozen_mapping(row),
            original_row=row,
            row_errors=MappingProxyType({}),
        )

    def start_new_row(self, row_id: RowId) -> bool:
        """Begin editing a row that does not exist yet."""
        if self._value.edit_row_id == row_id:
            return False
        debug(f"Edit store: start create of row {row_id!r}")
        return self._replace(
            edit_row_id=row_id,
            mode=EditMode.CREATE,
            draft_values=_frozen_mapping(),
            original_row=None,
            row_errors=MappingProxyType({}),
        )

    def set_draft_value(self, field_name: str, value: Any) -> bool:
        """Replace one draft value."""
        draft = dict(self._value.draft_values or {})
        draft[field_name] = value
        return self._replace(draft_values=MappingProxyType(draft))

    def set_row_errors(
        self,
        row_id: RowId,
        errors: Mapping[str, tuple[FieldError, ...]],
    ) -> bool:
        """Replace every field error of a row; an empty mapping removes the row."""
        row_errors = dict(self._value.row_errors)
        if errors:
            row_errors[row_id] = MappingProxyType(dict(errors))
        else:
            row_errors.pop(row_id, None)
        return self._replace(row_errors=MappingProxyType(row_errors))

    def set_field_errors(
        self,
        row_id: RowId,
        field_name: str,
        errors: Iterable[FieldError],
    ) -> bool:
        """Replace the errors of one field of a row."""
        fields = dict(self._value.errors_for(row_id))
        errors = tuple(errors)
        if errors:
            fields[field_name] = errors
        else:
            fields.pop(field_name, None)
        return self.set_row_errors(row_id, fields)

    def clear_edit(self) -> bool:
        """Drop all edit state, including recorded errors."""
        return self.set(EMPTY_EDIT_STATE)

    def row_state(self, row_id: RowId) -> RowEditState:
        """Selector for one row; returns a stable object between updates."""
        state = self._value
        if state.edit_row_id is None or state.edit_row_id != row_id:
            return NOT_EDITING
        return state.row_state or NOT_EDITING
