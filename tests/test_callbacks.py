"""Tests for host callback dispatch."""

from __future__ import annotations

import logging

from unittest.mock import MagicMock

import pytest

from pydatagrid.callbacks import GridCallbacks


class TestGridCallbacks:
    def test_slot_names(self):
        names = GridCallbacks.slot_names()
        assert "on_filter_change" in names
        assert "on_edit_commit" in names
        assert len(names) == 10

    def test_has(self):
        callbacks = GridCallbacks(on_sort_change=print)
        assert callbacks.has("on_sort_change")
        assert not callbacks.has("on_page_change")

    def test_emit_calls_handler(self):
        handler = MagicMock(return_value="ok")
        callbacks = GridCallbacks(on_page_change=handler)
        assert callbacks.emit("on_page_change", 3) == "ok"
        handler.assert_called_once_with(3)

    def test_emit_unset_slot_is_silent(self):
        assert GridCallbacks().emit("on_page_change", 3) is None

    def test_emit_unknown_slot(self):
        with pytest.raises(AttributeError):
            GridCallbacks().emit("on_explode")

    def test_handler_errors_logged_and_reraised(self, caplog):
        def broken(page):
            raise ValueError("bad page")

        callbacks = GridCallbacks(on_page_change=broken)
        with caplog.at_level(logging.ERROR, logger="pydatagrid"), pytest.raises(ValueError):
            callbacks.emit("on_page_change", 1)
        assert "on_page_change" in caplog.text
        assert "bad page" in caplog.text
