"""pydatagrid - headless engine for interactive data grids.

This package filters, sorts, paginates, validates and edits an in-memory
collection of rows. Rendering is left to the host: the engine produces the
visible window of rows plus observable selection and edit state.
"""

from .callbacks import CallbackFunc, GridCallbacks
from .config import (
    DataGridSettings,
    FilterSettings,
    GridBehaviorSettings,
    LogSettings,
    PaginationSettings,
    clear_settings,
    get_settings,
    reload_settings,
)
from .data import build_columns, index_rows, infer_field_types, normalize_rows
from .edit import EditSession
from .exceptions import (
    ConfigurationError,
    DataGridException,
    DuplicateFieldError,
    EditSessionError,
    PageSizeError,
    RowIdError,
    SortStateError,
    ValidatorError,
)
from .filters import apply_filters, matches, parse_filter
from .grid import DataGrid, GridView
from .log import enable_debug, set_level
from .models import (
    ColumnDef,
    ConditionalEditable,
    EditMode,
    FieldError,
    FieldType,
    Option,
    PageState,
    RangeFilter,
    RangeOperator,
    Severity,
    SortEntry,
    SortOrder,
    StaticEditable,
    TextFilter,
    TextOperator,
    ValidatorSpec,
)
from .options import option_label, option_map, resolve_option
from .pagination import PageWindow, paginate, total_pages
from .sorting import apply_sort, compare_values, toggle_sort
from .store import (
    EditState,
    EditStore,
    MultiSelectionStore,
    ObservableCell,
    RowEditState,
    SelectionStore,
)
from .translations import DEFAULT_TRANSLATIONS, Translator, build_translator
from .validation import (
    max_length,
    max_value,
    min_length,
    min_value,
    pattern,
    required,
    validate_field,
    validate_row,
)


__version__ = "0.1.0"

__all__ = [
    # Grid
    "DataGrid",
    "GridView",
    "GridCallbacks",
    "CallbackFunc",
    "EditSession",
    # Models
    "ColumnDef",
    "ConditionalEditable",
    "EditMode",
    "FieldError",
    "FieldType",
    "Option",
    "PageState",
    "RangeFilter",
    "RangeOperator",
    "Severity",
    "SortEntry",
    "SortOrder",
    "StaticEditable",
    "TextFilter",
    "TextOperator",
    "ValidatorSpec",
    # Engines
    "apply_filters",
    "apply_sort",
    "build_columns",
    "compare_values",
    "index_rows",
    "infer_field_types",
    "matches",
    "normalize_rows",
    "paginate",
    "PageWindow",
    "parse_filter",
    "toggle_sort",
    "total_pages",
    # Options
    "option_label",
    "option_map",
    "resolve_option",
    # Validation
    "max_length",
    "max_value",
    "min_length",
    "min_value",
    "pattern",
    "required",
    "validate_field",
    "validate_row",
    # Stores
    "EditState",
    "EditStore",
    "MultiSelectionStore",
    "ObservableCell",
    "RowEditState",
    "SelectionStore",
    # Translations
    "DEFAULT_TRANSLATIONS",
    "Translator",
    "build_translator",
    # Config
    "DataGridSettings",
    "FilterSettings",
    "GridBehaviorSettings",
    "LogSettings",
    "PaginationSettings",
    "clear_settings",
    "get_settings",
    "reload_settings",
    # Logging
    "enable_debug",
    "set_level",
    # Exceptions
    "ConfigurationError",
    "DataGridException",
    "DuplicateFieldError",
    "EditSessionError",
    "PageSizeError",
    "RowIdError",
    "SortStateError",
    "ValidatorError",
    "__version__",
]
