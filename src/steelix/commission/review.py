"""Advisory review and presentation helpers for commission breakdowns.

Nothing here can reject a calculation. Warnings are notices a caller may
surface next to a valid breakdown (an unusually high rate, a fixed
commission at or above the property price).
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from steelix.commission.params import CommissionParams
from steelix.commission.validation import HUNDRED, ZERO, normalize
from steelix.models.commission import (
    CommissionBreakdown,
    CommissionInput,
    RateKind,
)

LEASE_TRANSACTION_TYPES = frozenset({"lease", "rental"})


def review_warnings(
    commission_input: CommissionInput,
    params: Optional[CommissionParams] = None,
) -> List[str]:
    """Return advisory warnings for an input.

    Raises CommissionError when the input is invalid outright; warnings
    are only meaningful for inputs the engine would accept.
    """
    params = params or CommissionParams()
    normalized = normalize(commission_input, params)
    threshold = params.unusual_rate_percent
    warnings: List[str] = []

    if normalized.rate_kind is RateKind.PERCENTAGE:
        if normalized.rate_value > threshold:
            warnings.append(
                f"Commission percentage seems unusually high (>{threshold}%)"
            )
        return warnings

    price = normalized.property_price
    if price > ZERO and normalized.rate_value >= price:
        warnings.append("Fixed commission is at or above the property price")
    if price > ZERO and normalized.rate_value * HUNDRED / price > threshold:
        warnings.append(f"Commission rate seems unusually high (>{threshold}%)")
    return warnings


def suggested_rate(
    property_type: str,
    transaction_type: str,
    params: Optional[CommissionParams] = None,
) -> Decimal:
    """Typical percentage rate for a property and transaction type.

    Anything not commercial is priced as residential; rentals are leases.
    """
    params = params or CommissionParams()
    rates = params.suggested_rates
    category = "commercial" if property_type == "commercial" else "residential"
    kind = "lease" if transaction_type in LEASE_TRANSACTION_TYPES else "sale"
    return rates[category][kind]


def format_currency(amount: Decimal, currency: str = "RM") -> str:
    """Whole-unit display amount with thousands separators, e.g. RM 25,000."""
    whole = amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{currency} {whole:,}"


def format_percentage(value: Optional[Decimal], decimals: int = 1) -> str:
    if value is None:
        value = ZERO
    quantum = Decimal(1).scaleb(-decimals)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP)}%"


def summarize(breakdown: CommissionBreakdown, currency: str = "RM") -> str:
    """One-paragraph summary of a breakdown for notifications and logs."""
    parts = [
        f"Commission of {format_currency(breakdown.total_commission, currency)} "
        f"on property price of {format_currency(breakdown.property_price, currency)}"
    ]
    if breakdown.co_broker_share is not None:
        co_pct = breakdown.co_broker_split_percent or ZERO
        parts.append(
            f"Split: Agent side "
            f"{format_currency(breakdown.agent_commission_share, currency)} "
            f"({format_percentage(HUNDRED - co_pct, 0)}), Co-broker "
            f"{format_currency(breakdown.co_broker_share, currency)} "
            f"({format_percentage(co_pct, 0)})"
        )
    parts.append(
        f"Agent earns {format_currency(breakdown.agent_earnings, currency)} "
        f"({format_percentage(breakdown.your_share_percent)} of total)"
    )
    if breakdown.leadership_bonus is not None:
        bonus = breakdown.leadership_bonus
        parts.append(
            f"Leadership bonus {format_currency(bonus.bonus_amount, currency)} "
            f"to {bonus.upline_identity}"
        )
    parts.append(
        f"Company keeps {format_currency(breakdown.company_share_net, currency)}"
    )
    return ". ".join(parts)
