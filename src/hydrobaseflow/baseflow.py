"""Baseflow separation and baseflow index."""

from __future__ import annotations

import functools
import logging
import warnings
from enum import Enum
from typing import TYPE_CHECKING, TypeVar, Union

import numpy as np
import numpy.typing as npt
import pandas as pd
import xarray as xr
from numba import config as numba_config
from numba import njit, prange

from hydrobaseflow.exceptions import (
    EmptySeriesError,
    InputRangeError,
    InputTypeError,
    InputValueError,
    UndefinedResultWarning,
)
from hydrobaseflow.series import ensure_continuous

if TYPE_CHECKING:
    from collections.abc import Iterable

    FloatArray = npt.NDArray[np.float64]
    ArrayVar = TypeVar("ArrayVar", pd.Series, pd.DataFrame, FloatArray, xr.DataArray)
    ArrayLike = Union[pd.Series, pd.DataFrame, FloatArray, xr.DataArray]

ngjit = functools.partial(njit, nogil=True)
numba_config.THREADING_LAYER = "workqueue"  # pyright: ignore[reportAttributeAccessIssue]

__all__ = [
    "DEFAULT_ALPHA",
    "DEFAULT_BLOCK_LENGTH",
    "DEFAULT_PASSES",
    "DEFAULT_TURNING_POINT_FACTOR",
    "Method",
    "annual_baseflow_index",
    "baseflow_index",
    "rdf_baseflow",
    "separate",
    "smm_baseflow",
    "turning_points",
]

log = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.925
DEFAULT_PASSES = 3
DEFAULT_BLOCK_LENGTH = 5
DEFAULT_TURNING_POINT_FACTOR = 0.9
RECORD_COLUMNS = ["date", "discharge", "baseflow", "quickflow", "method", "parameter"]


class Method(str, Enum):
    """Baseflow separation methods."""

    RDF = "RDF"
    SMM = "SMM"

    @classmethod
    def parse(cls, method: Method | str) -> Method:
        """Get a method from its name, case-insensitive."""
        if isinstance(method, cls):
            return method
        try:
            return cls(str(method).upper())
        except ValueError:
            raise InputValueError("method", [m.value for m in cls], given=str(method)) from None


def _to_numpy(arr: ArrayLike) -> FloatArray:
    """Convert discharge to a 2D array where each row is a daily series."""
    if isinstance(arr, (pd.Series, xr.DataArray)):
        q = ensure_continuous(arr).to_numpy("f8")
    elif isinstance(arr, pd.DataFrame):
        if arr.empty:
            raise EmptySeriesError("discharge")
        q = np.column_stack([ensure_continuous(arr[c]).to_numpy("f8") for c in arr]).T
    elif isinstance(arr, np.ndarray):
        q = arr.astype("f8")
        if q.ndim not in (1, 2):
            raise InputTypeError("discharge", "1D or 2D numpy.ndarray")
        if q.size == 0:
            raise EmptySeriesError("discharge")
        if (q < 0).any():
            raise InputRangeError("discharge", "non-negative values")
    else:
        raise InputTypeError(
            "discharge", "pandas.Series, pandas.DataFrame, numpy.ndarray or xarray.DataArray"
        )

    if np.isnan(q).any():
        raise InputTypeError("discharge", "array/dataframe without NaN values")

    return np.ascontiguousarray(np.atleast_2d(q))


def _from_numpy(discharge: ArrayVar, qb: FloatArray) -> ArrayVar:
    """Wrap a 2D baseflow array in the same container as ``discharge``."""
    if isinstance(discharge, pd.Series):
        return pd.Series(qb[0], index=discharge.index, name=discharge.name)
    if isinstance(discharge, pd.DataFrame):
        return pd.DataFrame(qb.T, index=discharge.index, columns=discharge.columns)
    if isinstance(discharge, xr.DataArray):
        return discharge.copy(data=qb[0])
    return qb[0] if discharge.ndim == 1 else qb


@ngjit()
def _forward_pass(q: FloatArray, alpha: np.float64) -> FloatArray:
    """Perform a forward pass of the recursive digital filter."""
    qb = np.empty_like(q)
    qb[0] = q[0]
    qf = 0.0
    gain = 0.5 * (1.0 + alpha)
    for i in range(1, q.size):
        qf = alpha * qf + gain * (q[i] - q[i - 1])
        qf = min(max(qf, 0.0), q[i])
        qb[i] = q[i] - qf
    return qb


@ngjit()
def _backward_pass(q: FloatArray, alpha: np.float64) -> FloatArray:
    """Perform a backward pass of the recursive digital filter."""
    qb = np.empty_like(q)
    qb[-1] = q[-1]
    qf = 0.0
    gain = 0.5 * (1.0 + alpha)
    for i in range(q.size - 2, -1, -1):
        qf = alpha * qf + gain * (q[i] - q[i + 1])
        qf = min(max(qf, 0.0), q[i])
        qb[i] = q[i] - qf
    return qb


@ngjit(parallel=True)
def _batch_filter(q: FloatArray, alpha: np.float64, n_passes: np.int64) -> FloatArray:
    """Apply alternating filter passes to each row."""
    qb = np.empty_like(q)
    for i in prange(q.shape[0]):
        row = _forward_pass(q[i], alpha)
        for p in range(1, n_passes):
            if p % 2 == 1:
                row = _backward_pass(row, alpha)
            else:
                row = _forward_pass(row, alpha)
        qb[i] = row
    return qb


def _check_rdf_params(alpha: float, n_passes: int) -> None:
    """Validate the filter parameter and the number of passes."""
    if not (0 < alpha < 1):
        raise InputRangeError("alpha", "between zero and one")

    if (
        isinstance(n_passes, bool)
        or not isinstance(n_passes, (int, np.integer))
        or n_passes < 1
        or n_passes % 2 == 0
    ):
        raise InputRangeError("n_passes", "odd integers greater than or equal to 1")


def _check_smm_params(block_length: int, turning_point_factor: float) -> None:
    """Validate the block length and the turning point factor."""
    if (
        isinstance(block_length, bool)
        or not isinstance(block_length, (int, np.integer))
        or block_length < 1
    ):
        raise InputRangeError("block_length", "integers greater than or equal to 1")

    if not (0 < turning_point_factor < 1):
        raise InputRangeError("turning_point_factor", "between zero and one")


def rdf_baseflow(
    discharge: ArrayVar, alpha: float = DEFAULT_ALPHA, n_passes: int = DEFAULT_PASSES
) -> ArrayVar:
    """Extract baseflow using a recursive digital filter (Lyne and Hollick, 1979).

    Each pass filters the quickflow as

    .. math::

        f_t = \\alpha f_{t-1} + \\frac{1 + \\alpha}{2} (Q_t - Q_{t-1})

    with :math:`f_0 = 0`, and keeps the baseflow :math:`b_t = Q_t - f_t`
    within :math:`[0, Q_t]`. Passes alternate between forward and backward
    directions, and each pass filters the baseflow of the previous one.

    Parameters
    ----------
    discharge : numpy.ndarray or pandas.DataFrame or pandas.Series or xarray.DataArray
        Daily discharge that must not have any missing values or missing days.
        It can also be a 2D array where each row is a time series or a
        dataframe where each column is a time series.
    alpha : float, optional
        Filter parameter that must be between 0 and 1, defaults to 0.925.
        Values closer to 1 give a slower baseflow recession.
    n_passes : int, optional
        Number of filter passes, defaults to 3. It must be an odd number so
        that the last pass runs forward.

    Returns
    -------
    numpy.ndarray or pandas.DataFrame or pandas.Series or xarray.DataArray
        Same discharge input array-like but values replaced with computed baseflow values.

    Examples
    --------
    >>> import numpy as np
    >>> q = np.array([10.0, 10.0, 10.0, 50.0, 10.0, 10.0, 10.0])
    >>> qb = hb.rdf_baseflow(q, alpha=0.925, n_passes=3)
    >>> bool(qb[0] == 10.0 and qb[3] < 50.0)
    True
    """
    _check_rdf_params(alpha, n_passes)
    q = _to_numpy(discharge)
    log.debug(
        "RDF separation of %d series with alpha=%s, n_passes=%s", q.shape[0], alpha, n_passes
    )
    qb = _batch_filter(q, np.float64(alpha), np.int64(n_passes))
    return _from_numpy(discharge, qb)


def _block_minima(q: FloatArray, block_length: int) -> tuple[npt.NDArray[np.int64], FloatArray]:
    """Get the position and value of the minimum of each block of ``block_length`` days."""
    blocks = np.arange(q.size) // block_length
    loc = pd.Series(q).groupby(blocks).idxmin().to_numpy("i8")
    return loc, q[loc]


def _accepted(minima: FloatArray, turning_point_factor: float) -> npt.NDArray[np.bool_]:
    """Flag the block minima that are turning points."""
    accepted = np.ones(minima.size, dtype=bool)
    if minima.size >= 3:
        neighbor = np.minimum(minima[:-2], minima[2:])
        accepted[1:-1] = turning_point_factor * minima[1:-1] < neighbor
    return accepted


def _smm_1d(q: FloatArray, block_length: int, turning_point_factor: float) -> FloatArray:
    loc, minima = _block_minima(q, block_length)
    accepted = _accepted(minima, turning_point_factor)
    qb = np.interp(np.arange(q.size), loc[accepted], minima[accepted])
    return np.maximum(np.minimum(qb, q), 0.0)


def turning_points(
    discharge: pd.Series | xr.DataArray,
    block_length: int = DEFAULT_BLOCK_LENGTH,
    turning_point_factor: float = DEFAULT_TURNING_POINT_FACTOR,
) -> pd.Series:
    """Get the turning points of the smoothed minima method.

    The series is split into consecutive blocks of ``block_length`` days
    (the last block may be shorter) and the minimum of each block is
    a candidate. A candidate is a turning point when
    ``turning_point_factor * minimum`` is strictly less than the minima of
    both neighbouring blocks. The first and last blocks are always turning
    points, and so are all blocks when there are fewer than three.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Gap-free daily discharge.
    block_length : int, optional
        Block length in days, defaults to 5.
    turning_point_factor : float, optional
        Turning point factor between 0 and 1, defaults to 0.9.

    Returns
    -------
    pandas.Series
        Block minima of the turning points indexed by their dates.
    """
    _check_smm_params(block_length, turning_point_factor)
    q = ensure_continuous(discharge)
    loc, minima = _block_minima(q.to_numpy("f8"), block_length)
    accepted = _accepted(minima, turning_point_factor)
    return pd.Series(minima[accepted], index=q.index[loc[accepted]], name="turning_point")


def smm_baseflow(
    discharge: ArrayVar,
    block_length: int = DEFAULT_BLOCK_LENGTH,
    turning_point_factor: float = DEFAULT_TURNING_POINT_FACTOR,
) -> ArrayVar:
    """Extract baseflow using the smoothed minima method (Institute of Hydrology, 1980).

    Baseflow is the linear interpolation between turning points (see
    :func:`turning_points`), held constant before the first and after the
    last one, and bounded by zero and the observed discharge.

    Parameters
    ----------
    discharge : numpy.ndarray or pandas.DataFrame or pandas.Series or xarray.DataArray
        Daily discharge that must not have any missing values or missing days.
    block_length : int, optional
        Block length in days, defaults to 5.
    turning_point_factor : float, optional
        Turning point factor between 0 and 1, defaults to 0.9.

    Returns
    -------
    numpy.ndarray or pandas.DataFrame or pandas.Series or xarray.DataArray
        Same discharge input array-like but values replaced with computed baseflow values.
    """
    _check_smm_params(block_length, turning_point_factor)
    q = _to_numpy(discharge)
    log.debug(
        "SMM separation of %d series with block_length=%s, turning_point_factor=%s",
        q.shape[0],
        block_length,
        turning_point_factor,
    )
    qb = np.vstack([_smm_1d(row, int(block_length), turning_point_factor) for row in q])
    return _from_numpy(discharge, qb)


def _records(
    q: pd.Series, method: Method, parameter: float, n_passes: int, turning_point_factor: float
) -> pd.DataFrame:
    """Separate one series with one parameter value."""
    if method is Method.RDF:
        qb = rdf_baseflow(q, parameter, n_passes)
    else:
        qb = smm_baseflow(q, parameter, turning_point_factor)
    return pd.DataFrame(
        {
            "date": q.index,
            "discharge": q.to_numpy(),
            "baseflow": qb.to_numpy(),
            "quickflow": q.to_numpy() - qb.to_numpy(),
            "method": method.value,
            "parameter": parameter,
        },
        columns=RECORD_COLUMNS,
    )


def separate(
    discharge: pd.Series | xr.DataArray,
    method: Method | str,
    parameters: Iterable[float],
    n_passes: int = DEFAULT_PASSES,
    turning_point_factor: float = DEFAULT_TURNING_POINT_FACTOR,
) -> pd.DataFrame:
    """Separate baseflow for several values of a method parameter.

    Each parameter value is an independent run over the same series and
    the runs are only concatenated in the returned table.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Gap-free daily discharge.
    method : {"RDF", "SMM"} or Method
        Separation method, recursive digital filter or smoothed minima.
    parameters : iterable of float
        Filter parameters (``alpha``) for RDF or block lengths in days for SMM.
    n_passes : int, optional
        Number of RDF passes, defaults to 3.
    turning_point_factor : float, optional
        SMM turning point factor, defaults to 0.9.

    Returns
    -------
    pandas.DataFrame
        Records with ``date``, ``discharge``, ``baseflow``, ``quickflow``,
        ``method``, and ``parameter`` columns.
    """
    method = Method.parse(method)
    params = list(parameters)
    if not params:
        raise InputValueError("parameters", "a non-empty sequence of parameter values")

    if method is Method.RDF:
        for alpha in params:
            _check_rdf_params(alpha, n_passes)
    else:
        for block_length in params:
            _check_smm_params(block_length, turning_point_factor)

    q = ensure_continuous(discharge)
    log.debug("Separating %d days with %s for parameters %s", len(q), method.value, params)
    return pd.concat(
        (_records(q, method, p, n_passes, turning_point_factor) for p in params),
        ignore_index=True,
    )


def _as_records(records: pd.DataFrame | Iterable[pd.DataFrame]) -> pd.DataFrame:
    if not isinstance(records, pd.DataFrame):
        frames = list(records)
        if not frames:
            raise InputValueError("records", "at least one record table")
        records = pd.concat(frames, ignore_index=True)

    missing = set(RECORD_COLUMNS).difference(records.columns)
    if missing:
        columns = ", ".join(RECORD_COLUMNS)
        raise InputTypeError("records", f"pandas.DataFrame with {columns} columns")
    return records


def _ratio(group: pd.DataFrame) -> float:
    valid = group[group["discharge"].notna()]
    qsum = valid["discharge"].sum()
    if qsum <= 0:
        return np.nan
    return float(valid["baseflow"].sum() / qsum)


def _warn_undefined(bfi: pd.DataFrame) -> None:
    n_undefined = int(bfi["bfi"].isna().sum())
    if n_undefined:
        warnings.warn(
            f"Total discharge is zero for {n_undefined} group(s), baseflow index is undefined.",
            UndefinedResultWarning,
            stacklevel=3,
        )


def baseflow_index(records: pd.DataFrame | Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Compute the baseflow index for each separation method and parameter.

    Parameters
    ----------
    records : pandas.DataFrame or iterable of pandas.DataFrame
        Baseflow records, e.g., outputs of :func:`separate`.

    Returns
    -------
    pandas.DataFrame
        One row per ``(method, parameter)`` in order of first appearance,
        with the ratio of total baseflow to total discharge in ``bfi``.
        The index is ``NaN`` when total discharge is zero.

    Examples
    --------
    >>> import pandas as pd
    >>> q = pd.Series(4.0, index=pd.date_range("2020-01-01", periods=10))
    >>> hb.baseflow_index(hb.separate(q, "RDF", [0.9, 0.95]))
      method  parameter  bfi
    0    RDF       0.90  1.0
    1    RDF       0.95  1.0
    """
    records = _as_records(records)
    rows = [
        {"method": method, "parameter": parameter, "bfi": _ratio(group)}
        for (method, parameter), group in records.groupby(["method", "parameter"], sort=False)
    ]
    bfi = pd.DataFrame(rows, columns=["method", "parameter", "bfi"])
    _warn_undefined(bfi)
    return bfi


def annual_baseflow_index(records: pd.DataFrame | Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Compute the baseflow index of each calendar year.

    Parameters
    ----------
    records : pandas.DataFrame or iterable of pandas.DataFrame
        Baseflow records, e.g., outputs of :func:`separate`.

    Returns
    -------
    pandas.DataFrame
        One row per ``(method, parameter, year)`` with the baseflow index in ``bfi``.
    """
    records = _as_records(records)
    years = pd.DatetimeIndex(records["date"]).year
    rows = [
        {"method": method, "parameter": parameter, "year": year, "bfi": _ratio(group)}
        for (method, parameter, year), group in records.groupby(
            [records["method"], records["parameter"], years], sort=False
        )
    ]
    bfi = pd.DataFrame(rows, columns=["method", "parameter", "year", "bfi"])
    _warn_undefined(bfi)
    return bfi
