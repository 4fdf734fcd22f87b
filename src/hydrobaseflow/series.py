"""Validation and continuity checks for daily discharge series."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

import numpy as np
import pandas as pd
import xarray as xr

from hydrobaseflow.exceptions import (
    ContinuityWarning,
    EmptySeriesError,
    InputRangeError,
    InputTypeError,
    InputValueError,
)

if TYPE_CHECKING:
    SeriesLike = Union[pd.Series, xr.DataArray]

__all__ = [
    "ContinuityReport",
    "check_continuity",
    "continuous_spans",
    "ensure_continuous",
    "longest_continuous_span",
    "to_daily_series",
]

log = logging.getLogger(__name__)
ONE_DAY = pd.Timedelta(days=1)


def to_daily_series(discharge: SeriesLike) -> pd.Series:
    """Validate a discharge series and return it as a float series.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Daily discharge indexed by date. ``NaN`` marks an absent value.
        A ``DataArray`` must be one-dimensional along a datetime dimension.

    Returns
    -------
    pandas.Series
        A new float series indexed by calendar day (``date``). The input
        is never modified.

    Examples
    --------
    >>> import pandas as pd
    >>> q = pd.Series([1, 2], index=pd.to_datetime(["2020-01-01 12:00", "2020-01-02 00:00"]))
    >>> hb.to_daily_series(q).index.hour.tolist()
    [0, 0]
    """
    if isinstance(discharge, xr.DataArray):
        if discharge.ndim != 1:
            raise InputTypeError("discharge", "one-dimensional xarray.DataArray")
        discharge = discharge.to_series()

    if not isinstance(discharge, pd.Series):
        raise InputTypeError("discharge", "pandas.Series or xarray.DataArray")

    if discharge.empty:
        raise EmptySeriesError("discharge")

    if not isinstance(discharge.index, pd.DatetimeIndex):
        raise InputTypeError("discharge", "pandas.Series with a DatetimeIndex")

    dates = discharge.index.normalize().rename("date")
    if dates.has_duplicates:
        dup = dates[dates.duplicated()][0]
        raise InputValueError("discharge", "a series with unique dates", given=str(dup.date()))
    if not dates.is_monotonic_increasing:
        raise InputValueError("discharge", "a series sorted by ascending date")

    values = discharge.to_numpy("f8", na_value=np.nan)
    if (values < 0).any():
        raise InputRangeError("discharge", "non-negative values")
    return pd.Series(values, index=dates, name=discharge.name)


@dataclass(frozen=True, eq=False)
class ContinuityReport:
    """Calendar days without a discharge value.

    Parameters
    ----------
    start : pandas.Timestamp
        First date of the series.
    end : pandas.Timestamp
        Last date of the series.
    missing : pandas.DatetimeIndex
        Days in ``[start, end]`` that are absent or hold ``NaN``.
    """

    start: pd.Timestamp
    end: pd.Timestamp
    missing: pd.DatetimeIndex

    @property
    def is_continuous(self) -> bool:
        """Whether the series has one value for every day."""
        return len(self.missing) == 0

    @property
    def n_missing(self) -> int:
        """Number of missing days."""
        return len(self.missing)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContinuityReport):
            return NotImplemented
        return (
            self.start == other.start
            and self.end == other.end
            and self.missing.equals(other.missing)
        )

    def __hash__(self) -> int:
        return hash((self.start, self.end, tuple(self.missing)))

    def gaps(self) -> pd.DataFrame:
        """Group missing days into ranges with ``start``, ``end``, and ``days`` columns."""
        return _runs(self.missing)


def _runs(days: pd.DatetimeIndex) -> pd.DataFrame:
    """Collapse a sorted set of days into runs of consecutive days."""
    if len(days) == 0:
        return pd.DataFrame(
            {
                "start": pd.Series(dtype="datetime64[ns]"),
                "end": pd.Series(dtype="datetime64[ns]"),
                "days": pd.Series(dtype="int64"),
            }
        )
    days_s = days.to_series()
    run = days_s.diff().ne(ONE_DAY).cumsum().to_numpy()
    grouped = days_s.groupby(run)
    return pd.DataFrame(
        {
            "start": grouped.min().to_numpy(),
            "end": grouped.max().to_numpy(),
            "days": grouped.size().to_numpy(),
        }
    )


def _calendar(q: pd.Series) -> pd.DatetimeIndex:
    return pd.date_range(q.index[0], q.index[-1], freq="D", name="date")


def check_continuity(discharge: SeriesLike, warn: bool = True) -> ContinuityReport:
    """Find the calendar days missing from a daily discharge series.

    The full daily calendar between the first and last date is compared
    with the dates that carry a value. Gaps are reported, never filled.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Daily discharge indexed by date.
    warn : bool, optional
        Issue a :class:`~hydrobaseflow.exceptions.ContinuityWarning` when
        gaps are found, defaults to ``True``.

    Returns
    -------
    ContinuityReport
        The missing days; empty when the series is continuous.

    Examples
    --------
    >>> import pandas as pd
    >>> dates = pd.to_datetime(["2020-01-01", "2020-01-02", "2020-01-04"])
    >>> q = pd.Series([1.0, 2.0, 3.0], index=dates)
    >>> report = hb.check_continuity(q, warn=False)
    >>> report.missing.strftime("%Y-%m-%d").tolist()
    ['2020-01-03']
    """
    q = to_daily_series(discharge)
    calendar = _calendar(q)
    observed = q.index[q.notna().to_numpy()]
    missing = calendar.difference(observed)
    report = ContinuityReport(calendar[0], calendar[-1], missing)
    if not report.is_continuous:
        log.info(
            "%d missing day(s) between %s and %s", report.n_missing, report.start, report.end
        )
        if warn:
            warnings.warn(
                f"Discharge has {report.n_missing} missing day(s) in {len(report.gaps())} gap(s) "
                f"between {report.start.date()} and {report.end.date()}.",
                ContinuityWarning,
                stacklevel=2,
            )
    return report


def ensure_continuous(discharge: SeriesLike) -> pd.Series:
    """Return the validated series or raise if any day is missing."""
    q = to_daily_series(discharge)
    report = check_continuity(q, warn=False)
    if not report.is_continuous:
        raise InputValueError(
            "discharge",
            "a gap-free daily series (select a continuous window first)",
            given=f"{report.n_missing} missing day(s) starting {report.missing[0].date()}",
        )
    return q


def continuous_spans(discharge: SeriesLike) -> pd.DataFrame:
    """List gap-free windows of a daily series, longest first.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Daily discharge indexed by date.

    Returns
    -------
    pandas.DataFrame
        One row per window with ``start``, ``end``, and ``days`` columns.
        Windows of equal length keep their chronological order.
    """
    q = to_daily_series(discharge)
    observed = q.index[q.notna().to_numpy()]
    spans = _runs(observed)
    return spans.sort_values("days", ascending=False, kind="stable").reset_index(drop=True)


def longest_continuous_span(discharge: SeriesLike) -> pd.Series:
    """Return the longest gap-free window of a daily series.

    This is a convenience for callers that choose to analyse the longest
    window; it is never applied implicitly by the separators.
    """
    q = to_daily_series(discharge)
    spans = continuous_spans(q)
    if spans.empty:
        raise InputValueError("discharge", "a series with at least one non-missing value")
    start, end = spans.loc[0, "start"], spans.loc[0, "end"]
    log.debug("Longest continuous span: %s to %s", start, end)
    return q.loc[start:end].copy()
