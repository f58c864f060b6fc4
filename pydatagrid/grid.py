"""Grid façade: query pipeline, selection and editing for one row collection.

Usage:
    from pydatagrid import DataGrid, GridCallbacks

    grid = DataGrid(
        rows,
        columns=[ColumnDef(field="name"), ColumnDef(field="age", type="number")],
        get_row_id=lambda row: row["id"],
        pagination=True,
        page_size=25,
        callbacks=GridCallbacks(on_edit_commit=save_row),
    )
    grid.set_filter("age", {"operator": "inRange", "value": 18, "valueTo": 30})
    grid.toggle_sort("name")
    view = grid.view()  # view.rows is the visible window

Filtering always runs before sorting and sorting before pagination. The
filtered and sorted sequences are cached and invalidated whenever rows,
columns, filters or sort change.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .callbacks import GridCallbacks
from .config import get_settings
from .data import build_columns, check_columns, index_rows, normalize_rows, require_row_id
from .edit import EditSession
from .exceptions import ConfigurationError
from .filters import active_filters, apply_filters, is_active, parse_filter, sanitize_filter
from .log import debug, warn
from .models import PageState, RangeFilter, RangeOperator, SortOrder
from .pagination import PageWindow, clamp_page, format_range, paginate, total_pages, unpaginated
from .sorting import apply_sort, normalize_sort_state, sort_index_map, toggle_sort
from .store import EditStore, MultiSelectionStore, RowEditState, SelectionStore
from .translations import build_translator


if TYPE_CHECKING:
    from .config import DataGridSettings
    from .models import ColumnDef, FilterDescriptor, Row, RowId, SortEntry


@dataclass(frozen=True)
class GridView:
    """Everything the rendering layer needs for one render pass."""

    window: PageWindow
    source_rows: int = 0
    has_active_filters: bool = False
    has_active_range_filter: bool = False
    sort_index: Mapping[str, tuple[int, SortOrder]] = field(default_factory=dict)
    range_label: str = ""

    @property
    def rows(self) -> list[Row]:
        return self.window.rows

    @property
    def total_rows(self) -> int:
        """Row count after filtering."""
        return self.window.total_rows


def _as_rows(rows: Any) -> list[Row]:
    if isinstance(rows, (list, tuple)) and all(isinstance(row, Mapping) for row in rows):
        return list(rows)
    return normalize_rows(rows)


class DataGrid:  # pylint: disable=too-many-instance-attributes,too-many-public-methods
    """Filter, sort, paginate, select and edit an in-memory row collection.

    Parameters
    ----------
    rows : Any
        A list of row mappings, a pandas DataFrame, a dict of lists, or a
        single dict.
    columns : iterable of ColumnDef or dict, optional
        Column schema. Inferred from ``rows`` when omitted.
    get_row_id : callable
        Returns a stable, unique id for a row.
    callbacks : GridCallbacks, optional
        Host hooks.
    settings : DataGridSettings, optional
        Defaults for flags not passed explicitly. Uses ``get_settings()``.
    translations : Mapping, optional
        Per-grid message overrides.
    locale : str, optional
        Bundled translation table (``"en"``, ``"he"``).
    editable, selectable, multi_selectable, pagination : bool, optional
        Feature flags; ``None`` takes the configured default.
    page_size : int, optional
        Initial page size.
    is_row_editable : callable(row) -> bool, optional
        Row-level gate for entering edit mode.
    filter_state, sort_state : optional
        Initial filter and sort state owned by the grid (no callbacks fire
        for these).
    filter_model, sort_model, page : optional
        Host-owned state. When given, the grid never changes that piece of
        state itself: user actions only fire the matching callback, and the
        host pushes the new value back through :meth:`sync_state`.

    Raises
    ------
    ConfigurationError
        On missing ``get_row_id``, duplicate column fields, or missing or
        duplicate row ids.
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-locals
        self,
        rows: Any = None,
        columns: Iterable[ColumnDef | Mapping[str, Any]] | None = None,
        get_row_id: Callable[[Row], Any] | None = None,
        *,
        callbacks: GridCallbacks | None = None,
        settings: DataGridSettings | None = None,
        translations: Mapping[str, Any] | None = None,
        locale: str | None = None,
        editable: bool | None = None,
        selectable: bool | None = None,
        multi_selectable: bool | None = None,
        pagination: bool | None = None,
        page_size: int | None = None,
        is_row_editable: Callable[[Row], bool] | None = None,
        filter_state: Mapping[str, Any] | None = None,
        sort_state: Iterable[Any] | None = None,
        filter_model: Mapping[str, Any] | None = None,
        sort_model: Iterable[Any] | None = None,
        page: int | None = None,
    ) -> None:
        if get_row_id is None:
            msg = "get_row_id is required"
            raise ConfigurationError(msg)
        if filter_state is not None and filter_model is not None:
            msg = "Pass either filter_state (grid-owned) or filter_model (host-owned), not both"
            raise ConfigurationError(msg)
        if sort_state is not None and sort_model is not None:
            msg = "Pass either sort_state (grid-owned) or sort_model (host-owned), not both"
            raise ConfigurationError(msg)

        self.settings = settings if settings is not None else get_settings()
        grid_defaults = self.settings.grid
        self.get_row_id = get_row_id
        self.callbacks = callbacks if callbacks is not None else GridCallbacks()
        self.editable = grid_defaults.editable if editable is None else editable
        self.selectable = grid_defaults.selectable if selectable is None else selectable
        self.multi_selectable = (
            grid_defaults.multi_selectable if multi_selectable is None else multi_selectable
        )
        self.pagination = self.settings.pagination.enabled if pagination is None else pagination
        self.page_size_options = list(self.settings.pagination.page_size_options)
        self.is_row_editable = is_row_editable
        self.t = build_translator(translations, locale or grid_defaults.locale)

        self._rows = _as_rows(rows if rows is not None else [])
        self._row_index = index_rows(self._rows, get_row_id)
        self._columns = (
            check_columns(columns) if columns is not None else build_columns(self._rows)
        )

        self.filter_controlled = filter_model is not None
        self.sort_controlled = sort_model is not None
        self.page_controlled = page is not None
        self._filter_state = self._parse_filter_state(
            filter_model if self.filter_controlled else filter_state
        )
        self._sort_state: list[SortEntry] = normalize_sort_state(
            sort_model if self.sort_controlled else sort_state
        )

        size = page_size if page_size is not None else self.settings.pagination.page_size
        total_pages(0, size)  # validates the page size
        self._page_state = PageState(page=max(page or 0, 0), page_size=size)

        self._filtered: list[Row] | None = None
        self._sorted: list[Row] | None = None

        self.selection = SelectionStore()
        self.multi_selection = MultiSelectionStore()
        self.edit = EditSession(self._columns, EditStore(), self.callbacks, self.t)

        debug(f"DataGrid created with {len(self._rows)} rows and {len(self._columns)} columns")

    # --- State accessors ---

    @property
    def rows(self) -> list[Row]:
        return list(self._rows)

    @property
    def columns(self) -> list[ColumnDef]:
        return list(self._columns)

    @property
    def filter_state(self) -> Mapping[str, FilterDescriptor]:
        return MappingProxyType(self._filter_state)

    @property
    def sort_state(self) -> list[SortEntry]:
        return list(self._sort_state)

    @property
    def page_state(self) -> PageState:
        return self._page_state

    @property
    def page(self) -> int:
        return self._page_state.page

    @property
    def page_size(self) -> int:
        return self._page_state.page_size

    def sync_state(
        self,
        *,
        filter_model: Mapping[str, Any] | None = None,
        sort_model: Iterable[Any] | None = None,
        page: int | None = None,
    ) -> None:
        """Push new values for host-owned state. No callbacks fire.

        Raises
        ------
        ConfigurationError
            If a value is given for state the grid owns itself.
        """
        if filter_model is not None:
            self._require_controlled("filter", self.filter_controlled)
            self._filter_state = self._parse_filter_state(filter_model)
            self._invalidate()
        if sort_model is not None:
            self._require_controlled("sort", self.sort_controlled)
            self._sort_state = normalize_sort_state(sort_model)
            self._invalidate(filters=False)
        if page is not None:
            self._require_controlled("page", self.page_controlled)
            self._page_state = self._page_state.model_copy(update={"page": max(page, 0)})

    @staticmethod
    def _require_controlled(name: str, controlled: bool) -> None:
        if not controlled:
            msg = f"The {name} state is owned by the grid; use the grid's setters instead"
            raise ConfigurationError(msg)

    def column(self, field_name: str) -> ColumnDef | None:
        """Look up a column by field."""
        return next((c for c in self._columns if c.field == field_name), None)

    def row_by_id(self, row_id: RowId) -> Row | None:
        return self._row_index.get(row_id)

    def row_id(self, row: Row) -> RowId:
        """Return the id of ``row``; raises RowIdError when it is None."""
        return require_row_id(self.get_row_id(row))

    # --- Pipeline ---

    def _invalidate(self, filters: bool = True) -> None:
        if filters:
            self._filtered = None
        self._sorted = None

    def filtered_rows(self) -> list[Row]:
        """Rows passing every active filter, in original order."""
        if self._filtered is None:
            self._filtered = apply_filters(self._rows, self._filter_state, self._columns)
        return self._filtered

    def sorted_rows(self) -> list[Row]:
        """Filtered rows in sort order."""
        if self._sorted is None:
            self._sorted = apply_sort(self.filtered_rows(), self._sort_state, self._columns)
        return self._sorted

    def view(self) -> GridView:
        """Compute the visible window and display state."""
        rows = self.sorted_rows()
        window = paginate(rows, self.page, self.page_size) if self.pagination else unpaginated(rows)
        return GridView(
            window=window,
            source_rows=len(self._rows),
            has_active_filters=bool(active_filters(self._filter_state, self._columns)),
            has_active_range_filter=any(
                isinstance(d, RangeFilter) and d.operator is RangeOperator.IN_RANGE
                for d in self._filter_state.values()
            ),
            sort_index=sort_index_map(self._sort_state),
            range_label=format_range(window, self.t),
        )

    def _set_page(self, page: int) -> bool:
        if page == self.page:
            return False
        if not self.page_controlled:
            self._page_state = self._page_state.model_copy(update={"page": page})
        self.callbacks.emit("on_page_change", page)
        return True

    def _reset_page(self) -> None:
        self._set_page(0)

    def _reclamp(self) -> None:
        self._set_page(clamp_page(self.page, len(self.sorted_rows()), self.page_size))

    # --- Rows / columns ---

    def set_rows(self, rows: Any) -> None:
        """Replace the row collection; the current page is re-clamped."""
        new_rows = _as_rows(rows)
        self._row_index = index_rows(new_rows, self.get_row_id)
        self._rows = new_rows
        self._invalidate()
        self._reclamp()

    def set_columns(self, columns: Iterable[ColumnDef | Mapping[str, Any]]) -> None:
        """Replace the column schema."""
        self._columns = check_columns(columns)
        self.edit.set_columns(self._columns)
        self._invalidate()
        self._reclamp()

    # --- Filters ---

    def _parse_for(self, field_name: str, raw: Any) -> FilterDescriptor | None:
        column = self.column(field_name)
        if column is not None and column.effective_filter_type is None:
            warn(f"Ignoring filter on '{field_name}': filtering is disabled for this column")
            return None
        field_type = column.effective_filter_type if column is not None else None
        descriptor = parse_filter(raw, field_type)
        if descriptor is None or not is_active(descriptor):
            return None
        return sanitize_filter(descriptor, self.settings.filter)

    def _parse_filter_state(self, raw: Mapping[str, Any] | None) -> dict[str, FilterDescriptor]:
        state: dict[str, FilterDescriptor] = {}
        for field_name, value in (raw or {}).items():
            descriptor = self._parse_for(field_name, value)
            if descriptor is not None:
                state[field_name] = descriptor
        return state

    def _apply_filter_state(self, next_state: dict[str, FilterDescriptor]) -> None:
        if not self.filter_controlled:
            self._filter_state = next_state
            self._invalidate()

    def set_filter(self, field_name: str, descriptor: Any) -> bool:
        """Set or clear (``None`` / empty value) one column's filter.

        Fires ``on_filter_change(field, descriptor)`` and resets the page.
        With a host-owned filter model only the callback fires.

        Returns
        -------
        bool
            False when the filter state would not change.
        """
        parsed = self._parse_for(field_name, descriptor)
        next_state = dict(self._filter_state)
        if parsed is None:
            next_state.pop(field_name, None)
        else:
            next_state[field_name] = parsed
        if next_state == self._filter_state:
            return False

        self._apply_filter_state(next_state)
        self.callbacks.emit("on_filter_change", field_name, parsed)
        self._reset_page()
        return True

    def clear_filter(self, field_name: str) -> bool:
        return self.set_filter(field_name, None)

    def clear_all_filters(self) -> bool:
        """Remove every filter, firing ``on_filter_change(field, None)`` for each."""
        if not self._filter_state:
            return False
        cleared = list(self._filter_state)
        self._apply_filter_state({})
        for field_name in cleared:
            self.callbacks.emit("on_filter_change", field_name, None)
        self._reset_page()
        return True

    # --- Sort ---

    def set_sort(self, sort_state: Iterable[Any] | None) -> bool:
        """Replace the sort state. Fires ``on_sort_change`` and resets the page.

        With a host-owned sort model only the callback fires.
        """
        entries = normalize_sort_state(sort_state)
        if entries == self._sort_state:
            return False
        if not self.sort_controlled:
            self._sort_state = entries
            self._invalidate(filters=False)
        self.callbacks.emit("on_sort_change", list(entries))
        self._reset_page()
        return True

    def toggle_sort(self, field_name: str, multi: bool = False) -> bool:
        """Header click: cycle the column through asc, desc and unsorted."""
        return self.set_sort(toggle_sort(self._sort_state, field_name, multi))

    def clear_sort(self) -> bool:
        return self.set_sort([])

    # --- Pagination ---

    def set_page(self, page: int) -> bool:
        """Go to a page; out-of-range requests are clamped."""
        return self._set_page(clamp_page(page, len(self.sorted_rows()), self.page_size))

    def set_page_size(self, page_size: int) -> bool:
        """Change rows per page. Fires ``on_page_size_change`` and resets the page."""
        total_pages(0, page_size)  # validates
        if page_size == self.page_size:
            return False
        if page_size not in self.page_size_options:
            debug(f"Page size {page_size} is not one of {self.page_size_options}")
        self._page_state = self._page_state.model_copy(update={"page_size": page_size})
        self.callbacks.emit("on_page_size_change", page_size)
        self._reset_page()
        return True

    # --- Selection ---

    def click_row(self, row: Row) -> bool:
        """Single-select a row and fire ``on_row_select(row_id, row)``."""
        if not (self.selectable or self.callbacks.has("on_row_select")):
            return False
        row_id = self.row_id(row)
        self.selection.set(row_id)
        self.callbacks.emit("on_row_select", row_id, row)
        return True

    def select_row(self, row_id: RowId, checked: bool = True) -> bool:
        """Check or uncheck a row's selection box."""
        if not self.multi_selectable:
            warn("select_row() ignored: multi-select is disabled for this grid")
            return False
        if not self.multi_selection.toggle(require_row_id(row_id), checked):
            return False
        self.callbacks.emit("on_selection_change", list(self.multi_selection.get_snapshot()))
        return True

    def select_all(self, checked: bool = True) -> bool:
        """Check (or clear) every row that passes the current filters."""
        if not self.multi_selectable:
            warn("select_all() ignored: multi-select is disabled for this grid")
            return False
        ids = [self.row_id(row) for row in self.filtered_rows()] if checked else []
        if not self.multi_selection.set_many(ids):
            return False
        self.callbacks.emit("on_selection_change", list(self.multi_selection.get_snapshot()))
        return True

    # --- Editing ---

    def can_edit_row(self, row: Row) -> bool:
        """Whether a double-click on ``row`` would open it for editing."""
        if not self.editable or not self.callbacks.has("on_edit_commit"):
            return False
        return self.is_row_editable is None or bool(self.is_row_editable(row))

    def double_click_row(self, row: Row) -> bool:
        """Open ``row`` for editing when the grid and the row allow it."""
        if not self.can_edit_row(row):
            return False
        return self.edit.start_edit(self.row_id(row), row)

    def add_row(self, row_id: RowId) -> bool:
        """Open an empty draft for a new row."""
        if not self.editable:
            warn("add_row() ignored: editing is disabled for this grid")
            return False
        return self.edit.start_new_row_edit(row_id)

    def row_edit_state(self, row_id: RowId) -> RowEditState:
        """Edit-state selector for one row (stable between edit-store updates)."""
        return self.edit.store.row_state(row_id)
