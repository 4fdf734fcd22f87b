import numpy as np
import pandas as pd
import pytest

import hydrobaseflow as hb
from hydrobaseflow import (
    EmptySeriesError,
    InputRangeError,
    InputTypeError,
    InputValueError,
    ValidationError,
)


def test_errors_are_validation_errors():
    for err in (InputTypeError, InputValueError, InputRangeError, EmptySeriesError):
        assert issubclass(err, ValidationError)
        assert issubclass(err, ValueError)
    assert issubclass(InputTypeError, TypeError)


def test_type_message():
    err = InputTypeError("discharge", "pandas.Series", "pd.Series([1.0])")
    assert str(err) == "The discharge argument should be of type pandas.Series:\npd.Series([1.0])"


def test_value_message():
    err = InputValueError("method", ["RDF", "SMM"], given="XYZ")
    assert str(err) == "Given method is invalid. Valid options are:\nRDF, SMM\nGot XYZ"


def test_range_message():
    err = InputRangeError("alpha", "between zero and one")
    assert str(err) == "Valid range for alpha is between zero and one."


def test_invalid_input_type():
    with pytest.raises(InputTypeError, match="pandas.Series"):
        _ = hb.check_continuity([1.0, 2.0])


def test_invalid_method():
    q = pd.Series(np.ones(5), index=pd.date_range("2020-01-01", periods=5))
    with pytest.raises(InputValueError, match="RDF, SMM"):
        _ = hb.separate(q, "UKIH", [5])
