"""Collaborator callbacks a host application plugs into a grid.

Every slot is optional. :meth:`GridCallbacks.emit` calls a slot if it is set;
an exception raised by the host is logged with its traceback and re-raised
to the caller that triggered the event.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import Any

from .log import debug, log_callback_error


CallbackFunc = Callable[..., Any]


@dataclass
class GridCallbacks:
    """Host hooks fired by the grid.

    Attributes
    ----------
    on_filter_change : callable(field, descriptor)
        A column filter was set (descriptor) or cleared (``None``).
    on_sort_change : callable(sort_state)
        The sort state changed.
    on_page_change : callable(page)
        The current page changed.
    on_page_size_change : callable(page_size)
        The page size changed.
    on_edit_start : callable(row_id, row)
        A row entered edit mode.
    on_edit_cancel : callable(row_id)
        An edit was discarded.
    on_edit_commit : callable(row_id, values)
        A validated edit should be persisted by the host.
    on_validation_fail : callable(row_id, errors)
        Saving was refused because of validation errors.
    on_row_select : callable(row_id, row)
        A row was clicked.
    on_selection_change : callable(row_ids)
        The checkbox selection changed.
    """

    on_filter_change: CallbackFunc | None = None
    on_sort_change: CallbackFunc | None = None
    on_page_change: CallbackFunc | None = None
    on_page_size_change: CallbackFunc | None = None
    on_edit_start: CallbackFunc | None = None
    on_edit_cancel: CallbackFunc | None = None
    on_edit_commit: CallbackFunc | None = None
    on_validation_fail: CallbackFunc | None = None
    on_row_select: CallbackFunc | None = None
    on_selection_change: CallbackFunc | None = None

    @classmethod
    def slot_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def has(self, name: str) -> bool:
        """Return True when the host supplied a callback for ``name``."""
        return getattr(self, name, None) is not None

    def emit(self, name: str, *args: Any) -> Any:
        """Invoke the callback ``name`` with ``args`` if it is set.

        Raises
        ------
        AttributeError
            If ``name`` is not a known callback slot.
        """
        if name not in self.slot_names():
            msg = f"Unknown grid callback '{name}'"
            raise AttributeError(msg)

        handler = getattr(self, name)
        if handler is None:
            return None

        debug(f"Invoking callback '{name}'")
        try:
            return handler(*args)
        except Exception as exc:
            log_callback_error(name, exc)
            raise
