"""Tests for value coercion helpers."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from pydatagrid import coerce
from pydatagrid.coerce import is_missing, looks_like_date, to_date, to_datetime, to_number


class TestIsMissing:
    @pytest.mark.parametrize("value", [None, float("nan"), Decimal("NaN")])
    def test_missing(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize(
        "value", ["", 0, 7, False, [], "nan", Decimal("1.5"), date(2024, 1, 1), datetime(2024, 1, 1)]
    )
    def test_present(self, value):
        assert not is_missing(value)

    def test_pandas_missing_scalars(self):
        pd = pytest.importorskip("pandas")
        assert is_missing(pd.NaT)
        assert is_missing(pd.NA)
        assert not is_missing(pd.Timestamp("2024-01-01"))

    def test_plain_scalars_never_reach_pandas(self, monkeypatch):
        """Numbers, decimals and dates are answered without a pandas lookup."""
        calls = []

        class RecordingPandas:
            @staticmethod
            def isna(value):
                calls.append(value)
                return False

        monkeypatch.setattr(coerce._PandasHolder, "module", RecordingPandas)
        monkeypatch.setattr(coerce._PandasHolder, "resolved", True)
        for value in (5, Decimal("2"), date(2024, 1, 1), datetime(2024, 1, 1), "x"):
            assert not is_missing(value)
        assert calls == []
        assert not is_missing(object())
        assert len(calls) == 1

    def test_without_pandas(self, monkeypatch):
        monkeypatch.setattr(coerce._PandasHolder, "module", None)
        monkeypatch.setattr(coerce._PandasHolder, "resolved", True)
        assert not is_missing(object())
        assert is_missing(None)


class TestToNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(3, 3.0), (2.5, 2.5), ("42", 42.0), (" 1,234.5 ", 1234.5), (Decimal("1.5"), 1.5)],
    )
    def test_numbers(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [None, True, "", "abc", "nan", object()])
    def test_not_numbers(self, value):
        assert to_number(value) is None


class TestToDatetime:
    def test_iso_string(self):
        assert to_datetime("2024-03-15") == datetime(2024, 3, 15)

    def test_trailing_z_is_utc(self):
        assert to_datetime("2024-03-15T10:30:00Z") == datetime(2024, 3, 15, 10, 30)

    def test_aware_datetime_converted_to_utc(self):
        moment = datetime(2024, 3, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_datetime(moment) == datetime(2024, 3, 15, 10, 0)

    def test_day_first_string(self):
        assert to_datetime("15-03-2024") == datetime(2024, 3, 15)

    def test_date_becomes_midnight(self):
        assert to_datetime(date(2024, 3, 15)) == datetime(2024, 3, 15)

    def test_posix_seconds(self):
        assert to_datetime(0) == datetime(1970, 1, 1)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, "31-02-2024"])
    def test_unreadable(self, value):
        assert to_datetime(value) is None

    def test_to_date_drops_time(self):
        assert to_date("2024-03-15T23:59:00") == date(2024, 3, 15)
        assert to_date("garbage") is None

    def test_looks_like_date(self):
        assert looks_like_date(date(2024, 1, 1))
        assert looks_like_date("2024-01-01")
        assert not looks_like_date("hello")
        assert not looks_like_date(5)
