"""Tests for continuity checks of daily series."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import pytest
import xarray as xr

import hydrobaseflow as hb
from hydrobaseflow import ContinuityWarning, EmptySeriesError, ValidationError


def daily(values, start: str = "2020-01-01") -> pd.Series:
    return pd.Series(values, index=pd.date_range(start, periods=len(values), freq="D"), dtype="f8")


def test_absent_day():
    q = daily([1.0, 2.0, 3.0, 4.0, 5.0, 6.0]).drop(pd.Timestamp("2020-01-04"))
    with pytest.warns(ContinuityWarning, match="1 missing day"):
        report = hb.check_continuity(q)
    assert list(report.missing) == [pd.Timestamp("2020-01-04")]
    assert report.n_missing == 1
    assert not report.is_continuous
    assert report.start == pd.Timestamp("2020-01-01")
    assert report.end == pd.Timestamp("2020-01-06")


def test_missing_value():
    q = daily([1.0, 2.0, 3.0, np.nan, 5.0, 6.0])
    report = hb.check_continuity(q, warn=False)
    assert list(report.missing) == [pd.Timestamp("2020-01-04")]


def test_continuous():
    q = daily(np.arange(10.0))
    report = hb.check_continuity(q)
    assert report.is_continuous
    assert report.gaps().empty


def test_gap_ranges():
    q = daily(np.arange(1.0, 13.0))
    q.iloc[[2, 3, 7]] = np.nan
    q = q.drop(q.index[10])
    gaps = hb.check_continuity(q, warn=False).gaps()
    starts = pd.to_datetime(["2020-01-03", "2020-01-08", "2020-01-11"])
    ends = pd.to_datetime(["2020-01-04", "2020-01-08", "2020-01-11"])
    assert gaps["start"].tolist() == starts.tolist()
    assert gaps["end"].tolist() == ends.tolist()
    assert gaps["days"].tolist() == [2, 1, 1]


def test_input_not_modified():
    q = daily([1.0, np.nan, 3.0])
    expected = q.copy()
    _ = hb.check_continuity(q, warn=False)
    pd.testing.assert_series_equal(q, expected)


def test_empty():
    q = pd.Series([], index=pd.DatetimeIndex([]), dtype="f8")
    with pytest.raises(EmptySeriesError):
        _ = hb.check_continuity(q)
    with pytest.raises(ValidationError):
        _ = hb.check_continuity(q)


def test_duplicate_dates():
    q = pd.Series([1.0, 2.0], index=pd.to_datetime(["2020-01-01", "2020-01-01"]))
    with pytest.raises(hb.InputValueError, match="unique dates"):
        _ = hb.to_daily_series(q)


def test_unsorted_dates():
    q = pd.Series([1.0, 2.0], index=pd.to_datetime(["2020-01-02", "2020-01-01"]))
    with pytest.raises(hb.InputValueError, match="ascending"):
        _ = hb.to_daily_series(q)


def test_negative_discharge():
    with pytest.raises(hb.InputRangeError, match="non-negative"):
        _ = hb.to_daily_series(daily([1.0, -1.0]))


def test_no_datetime_index():
    with pytest.raises(hb.InputTypeError, match="DatetimeIndex"):
        _ = hb.to_daily_series(pd.Series([1.0, 2.0]))


def test_dataarray():
    q = daily([1.0, 2.0, 3.0, 4.0]).drop(pd.Timestamp("2020-01-02"))
    da = xr.DataArray(q.to_numpy(), coords={"time": q.index}, dims="time")
    report = hb.check_continuity(da, warn=False)
    assert list(report.missing) == [pd.Timestamp("2020-01-02")]


def test_spans():
    q = daily(np.arange(1.0, 11.0))
    q.iloc[[2, 5]] = np.nan
    spans = hb.continuous_spans(q)
    assert spans["days"].tolist() == [4, 2, 2]
    assert spans.loc[0, "start"] == pd.Timestamp("2020-01-07")
    assert spans.loc[1, "start"] == pd.Timestamp("2020-01-01")

    longest = hb.longest_continuous_span(q)
    assert longest.tolist() == [7.0, 8.0, 9.0, 10.0]
    assert hb.check_continuity(longest).is_continuous


def test_spans_all_missing():
    with pytest.raises(hb.InputValueError):
        _ = hb.longest_continuous_span(daily([np.nan, np.nan]))


def test_report_equality():
    q = daily([1.0, 2.0, np.nan, 4.0])
    first = hb.check_continuity(q, warn=False)
    second = hb.check_continuity(q.copy(), warn=False)
    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second}) == 1

    other = hb.check_continuity(daily([1.0, 2.0, 3.0, 4.0]))
    assert first != other
    assert other == hb.check_continuity(daily([5.0, 6.0, 7.0, 8.0]))


def test_gap_logged(caplog):
    q = daily([1.0, np.nan, 3.0])
    with caplog.at_level(logging.INFO, logger="hydrobaseflow.series"):
        _ = hb.check_continuity(q, warn=False)
    assert "1 missing day(s)" in caplog.text
