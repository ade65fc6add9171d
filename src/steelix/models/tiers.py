"""Agent tier models — the commission ladder agents progress through."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TierRequirements:
    """Monthly performance needed to hold a tier."""
    monthly_sales: int
    team_members: int


@dataclass(frozen=True)
class TierConfig:
    """Commission terms for one agent tier.

    commission_split is the percent of the agent's commission share the
    agent keeps. leadership_bonus_rate is the percent of the company's
    share paid to an agent of this tier when they are someone's upline.
    """
    tier: str
    commission_split: Decimal
    leadership_bonus_rate: Decimal
    requirements: TierRequirements
    display_name: str
    description: str = ""


@dataclass(frozen=True)
class TierProgress:
    """Progress toward the next tier, each value a percent in [0, 100]."""
    current_tier: str
    next_tier: str | None
    sales_progress: Decimal
    team_progress: Decimal
    overall_progress: Decimal
