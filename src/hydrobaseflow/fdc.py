"""Flow duration curve of daily discharge."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import pandas as pd
from scipy import stats

from hydrobaseflow.exceptions import EmptySeriesError, InputRangeError, InputValueError
from hydrobaseflow.series import to_daily_series

if TYPE_CHECKING:
    from collections.abc import Iterator

    import xarray as xr

    FloatArray = npt.NDArray[np.float64]

__all__ = ["FlowDurationCurve", "FlowDurationPoint", "exceedance"]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowDurationPoint:
    """A point of the flow duration curve.

    Parameters
    ----------
    rank : int
        Rank of the discharge, 1 being the highest.
    exceedance : float
        Exceedance probability, ``rank / n``.
    discharge : float
        Discharge value.
    date : pandas.Timestamp
        Date of the discharge value.
    """

    rank: int
    exceedance: float
    discharge: float
    date: pd.Timestamp


class FlowDurationCurve:
    """Flow duration curve of a daily discharge series.

    Missing values are dropped, the remaining ``n`` values are sorted in
    descending order, and the value with rank ``r`` (1 is the highest) has
    an exceedance probability of ``r / n``. Equal discharges get distinct
    ranks in chronological order.

    Iterating over the curve yields :class:`FlowDurationPoint` from the
    highest to the lowest discharge and can be repeated.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Daily discharge indexed by date, gaps are allowed.

    Examples
    --------
    >>> import pandas as pd
    >>> q = pd.Series([5.0, 1.0, 3.0], index=pd.date_range("2020-01-01", periods=3))
    >>> fdc = hb.FlowDurationCurve(q)
    >>> [(p.rank, p.discharge) for p in fdc]
    [(1, 5.0), (2, 3.0), (3, 1.0)]
    >>> fdc.probability_at("2020-01-02")
    1.0
    """

    def __init__(self, discharge: pd.Series | xr.DataArray) -> None:
        q = to_daily_series(discharge).dropna()
        if q.empty:
            raise EmptySeriesError("discharge")

        ranks = stats.rankdata(-q.to_numpy(), method="ordinal").astype("i8")
        order = np.argsort(ranks)
        self._n = len(q)
        self._ranks = ranks[order]
        self._discharge = q.to_numpy()[order]
        self._dates = q.index[order]
        self._rank_at = pd.Series(ranks, index=q.index)
        log.debug("Flow duration curve of %d values", self._n)

    def __len__(self) -> int:
        return self._n

    def __iter__(self) -> Iterator[FlowDurationPoint]:
        for rank, discharge, date in zip(self._ranks, self._discharge, self._dates):
            yield self._point(rank, discharge, date)

    def __repr__(self) -> str:
        return f"FlowDurationCurve(n={self._n})"

    def _point(self, rank: int, discharge: float, date: pd.Timestamp) -> FlowDurationPoint:
        return FlowDurationPoint(int(rank), int(rank) / self._n, float(discharge), date)

    @property
    def exceedances(self) -> FloatArray:
        """Exceedance probabilities in ascending order."""
        return self._ranks / self._n

    @property
    def discharges(self) -> FloatArray:
        """Discharge values in descending order."""
        return self._discharge.copy()

    def probability_at(self, date: str | pd.Timestamp) -> float:
        """Get the exceedance probability of the discharge observed on a date."""
        day = pd.Timestamp(date)
        tz = self._rank_at.index.tz
        if tz is not None and day.tz is None:
            day = day.tz_localize(tz)
        day = day.normalize()
        if day not in self._rank_at.index:
            raise InputValueError("date", "a date with a discharge value", given=str(day.date()))
        return float(self._rank_at.loc[day] / self._n)

    def points_at(self, discharge: float) -> list[FlowDurationPoint]:
        """Get all points whose discharge equals ``discharge``, each with its own rank."""
        idx = np.flatnonzero(self._discharge == discharge)
        return [self._point(self._ranks[i], self._discharge[i], self._dates[i]) for i in idx]

    def discharge_at(self, probability: float | npt.ArrayLike) -> float | FloatArray:
        """Get the discharge at exceedance probabilities by linear interpolation.

        Parameters
        ----------
        probability : float or array_like
            Exceedance probabilities in ``(0, 1]``, e.g., 0.95 for Q95.

        Returns
        -------
        float or numpy.ndarray
            Discharge values. Probabilities smaller than ``1 / n`` give the
            highest discharge.
        """
        p = np.asarray(probability, dtype="f8")
        if ((p <= 0) | (p > 1)).any():
            raise InputRangeError("probability", "greater than 0 and less than or equal to 1")
        q = np.interp(p, self.exceedances, self._discharge)
        return float(q) if q.ndim == 0 else q

    def slope(self, bins: tuple[int, ...] = (33, 67), log: bool = True) -> FloatArray:
        """Compute FDC slopes between exceedance percentiles.

        Parameters
        ----------
        bins : tuple of int
            Sorted exceedance percentiles between 1 and 100, e.g., (33, 67)
            returns the slope between the 33rd and 67th percentiles.
        log : bool, optional
            Whether to use log-transformed discharge, defaults to ``True``.

        Returns
        -------
        numpy.ndarray
            The slopes between consecutive percentiles, negative for a
            falling curve.
        """
        if not (
            isinstance(bins, (tuple, list))
            and len(bins) >= 2
            and all(0 < p <= 100 for p in bins)
            and list(bins) == sorted(bins)
        ):
            raise InputRangeError("bins", "tuple with sorted values between 1 and 100")

        p = np.asarray(bins, dtype="f8") / 100.0
        q = np.asarray(self.discharge_at(p))
        q = np.log(q.clip(1e-3)) if log else q
        return np.diff(q) / np.diff(p)

    def to_frame(self) -> pd.DataFrame:
        """Return the curve as a table of ``rank``, ``exceedance``, and ``discharge`` by date."""
        return pd.DataFrame(
            {
                "rank": self._ranks,
                "exceedance": self.exceedances,
                "discharge": self._discharge,
            },
            index=self._dates,
        )


def exceedance(discharge: pd.Series | xr.DataArray) -> pd.DataFrame:
    """Compute exceedance probability from daily data.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Daily discharge indexed by date.

    Returns
    -------
    pandas.DataFrame
        Ranked discharge with ``rank``, ``exceedance``, and ``discharge``
        columns, sorted by descending discharge.
    """
    return FlowDurationCurve(discharge).to_frame()
