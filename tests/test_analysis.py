"""Tests for the baseflow analysis summary."""

from __future__ import annotations

import json

import numpy as np
import pandas as pd
import pytest

import hydrobaseflow as hb
from hydrobaseflow import InputRangeError, InputValueError


@pytest.fixture()
def streamflow() -> pd.Series:
    rng = np.random.default_rng(0)
    dates = pd.date_range("2010-01-01", "2011-12-31", freq="D")
    seasonal = 2.0 + np.cos(2.0 * np.pi * dates.dayofyear.to_numpy() / 365.25)
    storms = rng.gamma(0.3, 5.0, dates.size)
    return pd.Series(seasonal + storms, index=dates)


@pytest.mark.speedup()
def test_analysis(streamflow):
    ana = hb.BaseflowAnalysis(streamflow, alphas=(0.9, 0.95), block_lengths=(5, 7))
    assert ana.bfi["method"].tolist() == ["RDF", "RDF", "SMM", "SMM"]
    assert ana.bfi["parameter"].tolist() == [0.9, 0.95, 5, 7]
    assert ana.bfi["bfi"].between(0, 1).all()
    assert len(ana.records) == 4 * len(streamflow)
    assert len(ana.fdc) == len(streamflow)

    summary = json.loads(ana.to_json())
    assert summary["start"] == "2010-01-01"
    assert summary["end"] == "2011-12-31"
    assert summary["n_days"] == 730
    assert [b["method"] for b in summary["bfi"]] == ["RDF", "RDF", "SMM", "SMM"]
    assert summary["fdc"]["Q5"] >= summary["fdc"]["Q50"] >= summary["fdc"]["Q95"]


def test_single_method(streamflow):
    ana = hb.BaseflowAnalysis(streamflow, alphas=(), block_lengths=(2,))
    assert ana.bfi["method"].tolist() == ["SMM"]


def test_gapped(streamflow):
    q = streamflow.drop(streamflow.index[100:103])
    with pytest.raises(InputValueError, match="3 missing day"):
        _ = hb.BaseflowAnalysis(q)

    ana = hb.BaseflowAnalysis(hb.longest_continuous_span(q))
    assert ana.to_dict()["start"] == "2010-04-14"


def test_invalid_config(streamflow):
    with pytest.raises(InputValueError):
        _ = hb.BaseflowAnalysis(streamflow, alphas=(), block_lengths=())
    with pytest.raises(InputRangeError, match="alpha"):
        _ = hb.BaseflowAnalysis(streamflow, alphas=(1.2,))
    with pytest.raises(InputRangeError, match="n_passes"):
        _ = hb.BaseflowAnalysis(streamflow, n_passes=2)
    with pytest.raises(InputRangeError, match="turning_point_factor"):
        _ = hb.BaseflowAnalysis(streamflow, turning_point_factor=1.0)


def test_undefined_bfi_json():
    q = pd.Series(0.0, index=pd.date_range("2020-01-01", periods=20))
    with pytest.warns(hb.UndefinedResultWarning):
        ana = hb.BaseflowAnalysis(q, alphas=(0.925,), block_lengths=(5,))
    text = ana.to_json()
    assert "NaN" not in text
    summary = json.loads(text)
    assert [b["bfi"] for b in summary["bfi"]] == [None, None]
