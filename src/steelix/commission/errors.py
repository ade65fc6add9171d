"""Commission error taxonomy.

Input errors are raised before any calculation stage runs. A caller
never sees a partially computed breakdown, and retrying with the same
input always fails the same way.
"""

from __future__ import annotations

from typing import Any


class CommissionError(ValueError):
    """Base class for rejected commission inputs."""

    def __init__(self, message: str, field: str = "", value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class InvalidAmount(CommissionError):
    """A monetary input is negative, non-finite or not a number."""


class InvalidPercent(CommissionError):
    """A percentage input lies outside [0, 100]."""


class InvalidRepresentationCombination(CommissionError):
    """Representation mode and co-broker split cannot be reconciled."""


class UnsupportedRateKind(CommissionError):
    """The rate kind is neither percentage nor fixed."""


class ArithmeticOverflow(CommissionError):
    """A value exceeds the configured decimal precision."""
