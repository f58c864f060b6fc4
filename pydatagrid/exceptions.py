"""pydatagrid exception hierarchy.

All pydatagrid-specific exceptions inherit from DataGridException, enabling
catch-all handling while supporting specific error types.

Validation failures are *not* exceptions: they are reported as
:class:`~pydatagrid.models.FieldError` values. Everything raised from here is
a programmer error in the host configuration and is meant to fail fast.
"""

from __future__ import annotations

from typing import Any


class DataGridException(Exception):
    """Base exception for all pydatagrid errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize pydatagrid exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (field, row_id, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ConfigurationError(DataGridException):
    """Invalid grid configuration supplied by the host application."""


class DuplicateFieldError(ConfigurationError):
    """Two columns in the same column set share a ``field`` key."""

    def __init__(self, message: str, field: str, **context: Any) -> None:
        """Initialize duplicate field error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        field : str
            The duplicated field key.
        **context : Any
            Additional context.
        """
        super().__init__(message, field=field, **context)
        self.field = field


class RowIdError(ConfigurationError):
    """A row identifier is missing or not unique.

    Raised when ``get_row_id`` returns ``None`` or when two rows in the
    same collection resolve to the same id.
    """

    def __init__(self, message: str, row_id: Any = None, **context: Any) -> None:
        """Initialize row id error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        row_id : Any, optional
            The offending row id, if one was produced.
        **context : Any
            Additional context.
        """
        super().__init__(message, row_id=row_id, **context)
        self.row_id = row_id


class ValidatorError(ConfigurationError):
    """A column validator raised or returned an unsupported result."""

    def __init__(self, message: str, field: str, **context: Any) -> None:
        """Initialize validator error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        field : str
            The column whose validator misbehaved.
        **context : Any
            Additional context.
        """
        super().__init__(message, field=field, **context)
        self.field = field


class SortStateError(ConfigurationError):
    """A sort state lists the same field more than once."""

    def __init__(self, message: str, field: str, **context: Any) -> None:
        super().__init__(message, field=field, **context)
        self.field = field


class PageSizeError(ConfigurationError):
    """A page size that is not a positive integer."""

    def __init__(self, message: str, page_size: Any, **context: Any) -> None:
        super().__init__(message, page_size=page_size, **context)
        self.page_size = page_size


class EditSessionError(DataGridException):
    """An edit session operation was called in the wrong state.

    Raised when draft values are written while no row is being edited.
    """

    def __init__(self, message: str, row_id: Any = None, **context: Any) -> None:
        """Initialize edit session error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        row_id : Any, optional
            The row id involved, if any.
        **context : Any
            Additional context.
        """
        super().__init__(message, row_id=row_id, **context)
        self.row_id = row_id
