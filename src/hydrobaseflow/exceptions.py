"""Customized HydroBaseflow exceptions and warnings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ValidationError(ValueError):
    """Base class for invalid discharge series or parameters."""


class InputTypeError(ValidationError, TypeError):
    """Exception raised when a function argument type is invalid.

    Parameters
    ----------
    arg : str
        Name of the function argument
    valid_type : str
        The valid type of the argument
    example : str, optional
        An example of a valid form of the argument, defaults to None.
    """

    def __init__(self, arg: str, valid_type: str, example: str | None = None) -> None:
        self.message = f"The {arg} argument should be of type {valid_type}"
        if example is not None:
            self.message += f":\n{example}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InputValueError(ValidationError):
    """Exception raised for invalid input.

    Parameters
    ----------
    inp : str
        Name of the input parameter
    valid_inputs : str or sequence of str
        Valid inputs, or a description of them
    given : str, optional
        The given input, defaults to None.
    """

    def __init__(
        self, inp: str, valid_inputs: str | Sequence[str], given: str | None = None
    ) -> None:
        if isinstance(valid_inputs, str):
            self.message = f"Given {inp} is invalid. It should be {valid_inputs}"
        else:
            valid = ", ".join(str(v) for v in valid_inputs)
            self.message = f"Given {inp} is invalid. Valid options are:\n{valid}"
        if given is not None:
            self.message += f"\nGot {given}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InputRangeError(ValidationError):
    """Exception raised when a function argument is not in the valid range.

    Parameters
    ----------
    variable : str
        Variable with invalid value
    valid_range : str
        Valid range
    """

    def __init__(self, variable: str, valid_range: str) -> None:
        self.message = f"Valid range for {variable} is {valid_range}."
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class EmptySeriesError(ValidationError):
    """Exception raised when a discharge series has no values."""

    def __init__(self, arg: str = "discharge") -> None:
        self.message = f"The {arg} series is empty."
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ContinuityWarning(UserWarning):
    """Warning issued when a daily series has missing calendar days."""


class UndefinedResultWarning(RuntimeWarning):
    """Warning issued when a ratio is requested over a zero total."""
