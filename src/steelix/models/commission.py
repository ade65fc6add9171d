"""Commission models — inputs, leadership bonus and the published breakdown.

All monetary values use Decimal for exact arithmetic. No floats in finance.

Invariants enforced by the engine that produces these models:
- total_commission == agent_commission_share + co_broker_share
- agent_commission_share == company_share_gross + agent_earnings
- company_share_gross == leadership_bonus.bonus_amount + company_share_net
- Every monetary field is non-negative
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Union


class RateKind(str, enum.Enum):
    """How the commission rate value is interpreted."""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class RepresentationMode(str, enum.Enum):
    """Who shares in the transaction's commission.

    DIRECT: the agent represents only their own client.
    CO_BROKING: another agency takes an agreed split of the commission.
    """
    DIRECT = "direct"
    CO_BROKING = "co_broking"


Numeric = Union[Decimal, int, str]


@dataclass(frozen=True)
class UplineInfo:
    """The agent's recruiter, already resolved by the caller.

    The bonus rate is a percent of the company's share, not of the
    total commission.
    """
    identity: str
    leadership_bonus_rate_percent: Numeric
    tier: Optional[str] = None


@dataclass(frozen=True)
class CommissionInput:
    """Raw inputs for one commission calculation.

    Field values are normalised and validated by the engine; the input
    itself is never mutated.
    """
    property_price: Numeric
    rate_kind: Union[RateKind, str]
    rate_value: Numeric
    representation_mode: Union[RepresentationMode, str]
    company_commission_split_percent: Numeric
    agent_tier: str = ""
    co_broker_split_percent: Optional[Numeric] = None
    upline: Optional[UplineInfo] = None


@dataclass(frozen=True)
class LeadershipBonus:
    """Override paid to the upline out of the company's gross share."""
    upline_identity: str
    bonus_rate_percent: Decimal
    bonus_amount: Decimal
    upline_tier: Optional[str] = None


@dataclass(frozen=True)
class CommissionBreakdown:
    """Full breakdown of a commission computation.

    Created fresh on every calculation and never mutated. The attribution
    fields echo the normalised input so a persisted breakdown can be
    read on its own.
    """
    # Stage 1
    property_price: Decimal
    rate_kind: RateKind
    rate_value: Decimal
    total_commission: Decimal
    # Stage 2
    representation_mode: RepresentationMode
    co_broker_split_percent: Optional[Decimal]
    agent_commission_share: Decimal
    co_broker_share: Optional[Decimal]
    # Stage 3
    agent_tier: str
    company_commission_split_percent: Decimal
    company_share_gross: Decimal
    agent_earnings: Decimal
    # Stage 4
    leadership_bonus: Optional[LeadershipBonus]
    company_share_net: Decimal
    # Display-only ratios
    your_share_percent: Decimal
    effective_rate_percent: Decimal

    @property
    def bonus_amount(self) -> Decimal:
        if self.leadership_bonus is None:
            return Decimal("0")
        return self.leadership_bonus.bonus_amount

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to JSON-safe primitives. Decimals become strings."""
        bonus = None
        if self.leadership_bonus is not None:
            bonus = {
                "upline_identity": self.leadership_bonus.upline_identity,
                "upline_tier": self.leadership_bonus.upline_tier,
                "bonus_rate_percent": str(self.leadership_bonus.bonus_rate_percent),
                "bonus_amount": str(self.leadership_bonus.bonus_amount),
            }
        return {
            "property_price": str(self.property_price),
            "rate_kind": self.rate_kind.value,
            "rate_value": str(self.rate_value),
            "total_commission": str(self.total_commission),
            "representation_mode": self.representation_mode.value,
            "co_broker_split_percent": _opt_str(self.co_broker_split_percent),
            "agent_commission_share": str(self.agent_commission_share),
            "co_broker_share": _opt_str(self.co_broker_share),
            "agent_tier": self.agent_tier,
            "company_commission_split_percent": str(
                self.company_commission_split_percent
            ),
            "company_share_gross": str(self.company_share_gross),
            "agent_earnings": str(self.agent_earnings),
            "leadership_bonus": bonus,
            "company_share_net": str(self.company_share_net),
            "your_share_percent": str(self.your_share_percent),
            "effective_rate_percent": str(self.effective_rate_percent),
        }


def _opt_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)
