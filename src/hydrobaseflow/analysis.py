"""Baseflow analysis of a daily discharge series."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import pandas as pd

from hydrobaseflow.baseflow import (
    DEFAULT_ALPHA,
    DEFAULT_BLOCK_LENGTH,
    DEFAULT_PASSES,
    DEFAULT_TURNING_POINT_FACTOR,
    Method,
    baseflow_index,
    _check_rdf_params,
    _check_smm_params,
    separate,
)
from hydrobaseflow.exceptions import InputValueError
from hydrobaseflow.fdc import FlowDurationCurve
from hydrobaseflow.series import check_continuity, to_daily_series

if TYPE_CHECKING:
    import xarray as xr

__all__ = ["BaseflowAnalysis"]

log = logging.getLogger(__name__)

FDC_PROBABILITIES = {"Q5": 0.05, "Q50": 0.5, "Q95": 0.95}


@dataclass
class BaseflowAnalysis:
    """Baseflow separation, baseflow index, and flow duration curve of a series.

    Parameters
    ----------
    discharge : pandas.Series or xarray.DataArray
        Gap-free daily discharge indexed by date.
    alphas : tuple of float, optional
        Filter parameters of the recursive digital filter, defaults to ``(0.925,)``.
        An empty tuple skips the filter.
    n_passes : int, optional
        Number of filter passes, defaults to 3.
    block_lengths : tuple of int, optional
        Block lengths in days of the smoothed minima method, defaults to ``(5,)``.
        An empty tuple skips the method.
    turning_point_factor : float, optional
        Turning point factor of the smoothed minima method, defaults to 0.9.
    """

    discharge: pd.Series | xr.DataArray
    alphas: tuple[float, ...] = (DEFAULT_ALPHA,)
    n_passes: int = DEFAULT_PASSES
    block_lengths: tuple[int, ...] = (DEFAULT_BLOCK_LENGTH,)
    turning_point_factor: float = DEFAULT_TURNING_POINT_FACTOR

    def __post_init__(self) -> None:
        if not self.alphas and not self.block_lengths:
            raise InputValueError("alphas/block_lengths", "at least one non-empty sequence")
        for alpha in self.alphas:
            _check_rdf_params(alpha, self.n_passes)
        for block_length in self.block_lengths:
            _check_smm_params(block_length, self.turning_point_factor)

        q = to_daily_series(self.discharge)
        report = check_continuity(q, warn=False)
        if not report.is_continuous:
            raise InputValueError(
                "discharge",
                "a gap-free daily series (select a continuous window first)",
                given=f"{report.n_missing} missing day(s) in {len(report.gaps())} gap(s)",
            )

        frames = []
        if self.alphas:
            frames.append(separate(q, Method.RDF, self.alphas, n_passes=self.n_passes))
        if self.block_lengths:
            frames.append(
                separate(
                    q,
                    Method.SMM,
                    self.block_lengths,
                    turning_point_factor=self.turning_point_factor,
                )
            )
        self._q = q
        self._records = pd.concat(frames, ignore_index=True)
        self._bfi = baseflow_index(self._records)
        self._fdc = FlowDurationCurve(q)
        log.debug("Analysed %d days from %s to %s", len(q), report.start, report.end)

    @property
    def records(self) -> pd.DataFrame:
        """Baseflow records of all methods and parameters."""
        return self._records

    @property
    def bfi(self) -> pd.DataFrame:
        """Baseflow index of each method and parameter."""
        return self._bfi

    @property
    def fdc(self) -> FlowDurationCurve:
        """Flow duration curve of the discharge."""
        return self._fdc

    def to_dict(self) -> dict[str, Any]:
        """Return a dictionary with the summary of the analysis."""
        return {
            "start": self._q.index[0].strftime("%Y-%m-%d"),
            "end": self._q.index[-1].strftime("%Y-%m-%d"),
            "n_days": len(self._q),
            "bfi": [
                {"method": m, "parameter": float(p), "bfi": None if pd.isna(b) else float(b)}
                for m, p, b in self._bfi.itertuples(index=False)
            ],
            "fdc": {k: self._fdc.discharge_at(p) for k, p in FDC_PROBABILITIES.items()},
        }

    def to_json(self) -> str:
        """Return a JSON string with the summary of the analysis."""
        return json.dumps(self.to_dict())
