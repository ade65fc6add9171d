"""Commission subsystem — the cascading commission distribution engine.

The engine itself is pure. Configuration is resolved by the policy layer
and auditing is handled by the service layer.
"""

from steelix.commission.engine import CommissionCalculator, compute
from steelix.commission.errors import (
    ArithmeticOverflow,
    CommissionError,
    InvalidAmount,
    InvalidPercent,
    InvalidRepresentationCombination,
    UnsupportedRateKind,
)
from steelix.commission.params import CommissionParams

__all__ = [
    "ArithmeticOverflow",
    "CommissionCalculator",
    "CommissionError",
    "CommissionParams",
    "InvalidAmount",
    "InvalidPercent",
    "InvalidRepresentationCombination",
    "UnsupportedRateKind",
    "compute",
]
