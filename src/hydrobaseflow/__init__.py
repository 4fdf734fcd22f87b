"""Top-level package for HydroBaseflow."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from hydrobaseflow import exceptions
from hydrobaseflow.analysis import BaseflowAnalysis
from hydrobaseflow.baseflow import (
    Method,
    annual_baseflow_index,
    baseflow_index,
    rdf_baseflow,
    separate,
    smm_baseflow,
    turning_points,
)
from hydrobaseflow.exceptions import (
    ContinuityWarning,
    EmptySeriesError,
    InputRangeError,
    InputTypeError,
    InputValueError,
    UndefinedResultWarning,
    ValidationError,
)
from hydrobaseflow.fdc import FlowDurationCurve, FlowDurationPoint, exceedance
from hydrobaseflow.series import (
    ContinuityReport,
    check_continuity,
    continuous_spans,
    longest_continuous_span,
    to_daily_series,
)

try:
    __version__ = version("hydrobaseflow")
except PackageNotFoundError:
    __version__ = "999"

__all__ = [
    "BaseflowAnalysis",
    "ContinuityReport",
    "ContinuityWarning",
    "EmptySeriesError",
    "FlowDurationCurve",
    "FlowDurationPoint",
    "InputRangeError",
    "InputTypeError",
    "InputValueError",
    "Method",
    "UndefinedResultWarning",
    "ValidationError",
    "__version__",
    "annual_baseflow_index",
    "baseflow_index",
    "check_continuity",
    "continuous_spans",
    "exceedance",
    "exceptions",
    "longest_continuous_span",
    "rdf_baseflow",
    "separate",
    "smm_baseflow",
    "to_daily_series",
    "turning_points",
]
