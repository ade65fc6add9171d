"""Commission policy parameters.

Defaults mirror config/commission_params.json so the calculator can run
without a config directory.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict

ROUNDING_MODES = frozenset({
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_FLOOR,
    decimal.ROUND_CEILING,
})

CO_BROKER_POLICIES = frozenset({"default", "strict"})


def _default_suggested_rates() -> Dict[str, Dict[str, Decimal]]:
    return {
        "residential": {"sale": Decimal("6"), "lease": Decimal("10")},
        "commercial": {"sale": Decimal("6"), "lease": Decimal("4")},
    }


@dataclass(frozen=True)
class CommissionParams:
    """Rounding, defaults and advisory thresholds for the engine.

    money_scale: quantum every stage rounds its monetary outputs to.
    percent_display_scale: quantum for your_share_percent.
    max_digits: significant digits a value may carry before it is
        rejected as an overflow.
    co_broker_split_policy: "default" fills a missing co-broker split
        with co_broker_split_default; "strict" rejects it.
    """
    money_scale: Decimal = Decimal("0.01")
    rounding: str = decimal.ROUND_HALF_UP
    percent_display_scale: Decimal = Decimal("0.1")
    max_digits: int = 28
    co_broker_split_default: Decimal = Decimal("50")
    co_broker_split_policy: str = "default"
    unusual_rate_percent: Decimal = Decimal("20")
    suggested_rates: Dict[str, Dict[str, Decimal]] = field(
        default_factory=_default_suggested_rates,
    )

    def __post_init__(self) -> None:
        if self.rounding not in ROUNDING_MODES:
            raise ValueError(f"Unknown rounding mode: {self.rounding}")
        if self.co_broker_split_policy not in CO_BROKER_POLICIES:
            raise ValueError(
                f"Unknown co-broker split policy: {self.co_broker_split_policy}. "
                f"Allowed: {', '.join(sorted(CO_BROKER_POLICIES))}"
            )
        if self.money_scale <= 0 or self.percent_display_scale <= 0:
            raise ValueError("Scales must be positive")
        if self.max_digits < 1:
            raise ValueError("max_digits must be >= 1")
        if not (Decimal("0") <= self.co_broker_split_default <= Decimal("100")):
            raise ValueError("co_broker_split_default must be in [0, 100]")
