"""Pagination of the filtered and sorted row sequence."""

from __future__ import annotations

import math

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .exceptions import PageSizeError
from .log import debug


if TYPE_CHECKING:
    from .models import Row


@dataclass(frozen=True)
class PageWindow:
    """The visible slice of rows plus the numbers a pagination bar shows.

    ``range_start`` and ``range_end`` are 1-based and inclusive ("11-20 of
    95"); both are 0 when there are no rows.
    """

    rows: list[Row] = field(default_factory=list)
    page: int = 0
    page_size: int = 0
    total_rows: int = 0
    total_pages: int = 1
    range_start: int = 0
    range_end: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1


def _check_page_size(page_size: int) -> None:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        msg = "Page size must be a positive integer"
        raise PageSizeError(msg, page_size=page_size)


def total_pages(total_rows: int, page_size: int) -> int:
    """Number of pages, never less than one."""
    _check_page_size(page_size)
    return max(1, math.ceil(total_rows / page_size))


def clamp_page(page: int, total_rows: int, page_size: int) -> int:
    """Clamp a page index into ``[0, total_pages - 1]``."""
    last = total_pages(total_rows, page_size) - 1
    clamped = min(max(page, 0), last)
    if clamped != page:
        debug(f"Clamped page {page} to {clamped} ({total_rows} rows, page size {page_size})")
    return clamped


def paginate(rows: Sequence[Row], page: int, page_size: int) -> PageWindow:
    """Extract the visible window for a page.

    Parameters
    ----------
    rows : Sequence
        Filtered and sorted rows.
    page : int
        Zero-based page index; out-of-range values are clamped.
    page_size : int
        Rows per page.

    Returns
    -------
    PageWindow
        The window rows and range numbers.

    Raises
    ------
    PageSizeError
        If ``page_size`` is not a positive integer.
    """
    total = len(rows)
    pages = total_pages(total, page_size)
    page = clamp_page(page, total, page_size)
    start = page * page_size
    end = min(start + page_size, total)
    return PageWindow(
        rows=list(rows[start:end]),
        page=page,
        page_size=page_size,
        total_rows=total,
        total_pages=pages,
        range_start=start + 1 if total else 0,
        range_end=end,
    )


def unpaginated(rows: Sequence[Row]) -> PageWindow:
    """Window containing every row, for grids with pagination turned off."""
    total = len(rows)
    return PageWindow(
        rows=list(rows),
        page=0,
        page_size=total,
        total_rows=total,
        total_pages=1,
        range_start=1 if total else 0,
        range_end=total,
    )


def format_range(window: PageWindow, t: Callable[..., str]) -> str:
    """Render the "X–Y of N" label through a translation lookup."""
    return t(
        "paginationRange",
        **{"from": window.range_start, "to": window.range_end, "count": window.total_rows},
    )


def page_numbers(window: PageWindow) -> dict[str, Any]:
    """Targets for the first/previous/next/last buttons (None when disabled)."""
    last = window.total_pages - 1
    return {
        "first": 0 if window.has_previous else None,
        "previous": window.page - 1 if window.has_previous else None,
        "next": window.page + 1 if window.has_next else None,
        "last": last if window.has_next else None,
    }
