"""
Australian FIRB Foreign Buyer Calculator - Errors

Every failure raised by the calculation core carries the offending field so
the UI can build its own message.
"""

from typing import Any, Optional


class FIRBCalculatorError(Exception):
    """Base class for calculator failures."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class InvalidArgumentError(FIRBCalculatorError, ValueError):
    """Missing or unrecognised enum value / required field."""


class UnknownStateError(FIRBCalculatorError, ValueError):
    """State code outside NSW, VIC, QLD, SA, WA, TAS, ACT, NT."""


class InvalidValueError(FIRBCalculatorError, ValueError):
    """Non-positive, non-finite or non-numeric monetary input."""


class ComputationOverflowError(FIRBCalculatorError, ArithmeticError):
    """A computed amount came out NaN, infinite, negative or too large."""


class UnhandledRuleCombinationError(FIRBCalculatorError):
    """No eligibility rule covers the given combination."""
