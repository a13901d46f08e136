# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Custom exceptions and error handling types for wearsim"""

__all__ = [
    'MissingParamError',
    'UserConfigError',
    'InvalidTypeError',
    'IncompatibleShapeError',
]


class MissingParamError(Exception):
    """Used to indicate when a model fails to receive all the required values to perform the requested operation."""


class UserConfigError(Exception):
    """Error raised when user specified options are missing, incorrectly formatted, or otherwise unsuitable."""


class InvalidTypeError(Exception):
    """Error raised when the user requests a type variable to be an invalid value."""


class IncompatibleShapeError(ValueError):
    """Raised when combining Weibull distributions whose shape parameters differ, as the result is not Weibull."""
