"""Tier registry — commission terms and progression for each agent tier.

The registry is the source the service layer resolves an agent's
company commission split and an upline's leadership bonus rate from.
The calculator never reads it directly; it only ever sees the resolved
percentages.

Tier ladder (shipped config, New Leadership Plan):
    advisor → sales_leader → team_leader → group_leader → supreme_leader
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence, Tuple

from steelix.models.commission import UplineInfo
from steelix.models.tiers import TierConfig, TierProgress

HUNDRED = Decimal("100")


class TierRegistry:
    """Ordered, immutable set of tier configurations.

    Usage:
        registry = resolver.tier_registry()
        split = registry.commission_split("sales_leader")
        upline = registry.resolve_upline("agent_42", "team_leader")
    """

    def __init__(self, tiers: Sequence[TierConfig]) -> None:
        if not tiers:
            raise ValueError("Tier registry requires at least one tier")
        self._order: List[str] = [t.tier for t in tiers]
        if len(set(self._order)) != len(self._order):
            raise ValueError(f"Duplicate tier in ladder: {self._order}")
        self._tiers: Dict[str, TierConfig] = {t.tier: t for t in tiers}

    @property
    def order(self) -> List[str]:
        return list(self._order)

    def all(self) -> List[TierConfig]:
        return [self._tiers[t] for t in self._order]

    def get(self, tier: str) -> TierConfig:
        config = self._tiers.get(tier)
        if config is None:
            raise ValueError(
                f"Unknown agent tier: {tier!r}. Known: {', '.join(self._order)}"
            )
        return config

    def __contains__(self, tier: object) -> bool:
        return tier in self._tiers

    def commission_split(self, tier: str) -> Decimal:
        return self.get(tier).commission_split

    def leadership_bonus_rate(self, tier: str) -> Decimal:
        return self.get(tier).leadership_bonus_rate

    def has_leadership_bonus(self, tier: str) -> bool:
        return self.leadership_bonus_rate(tier) > Decimal("0")

    def tier_index(self, tier: str) -> int:
        self.get(tier)
        return self._order.index(tier)

    def next_tier(self, tier: str) -> Optional[str]:
        index = self.tier_index(tier)
        if index < len(self._order) - 1:
            return self._order[index + 1]
        return None

    def previous_tier(self, tier: str) -> Optional[str]:
        index = self.tier_index(tier)
        return self._order[index - 1] if index > 0 else None

    def commission_benefit(self, tier: str) -> str:
        config = self.get(tier)
        split = _plain(config.commission_split)
        if config.leadership_bonus_rate > 0:
            return (
                f"{split}% commission + "
                f"{_plain(config.leadership_bonus_rate)}% leadership bonus"
            )
        return f"{split}% commission split"

    def resolve_upline(
        self,
        identity: Optional[str],
        upline_tier: Optional[str],
    ) -> Optional[UplineInfo]:
        """Build the upline record for a calculation.

        Returns None when the agent has no upline or the upline's tier
        pays no leadership bonus.
        """
        if not identity or not upline_tier:
            return None
        rate = self.leadership_bonus_rate(upline_tier)
        if rate <= 0:
            return None
        return UplineInfo(
            identity=identity,
            leadership_bonus_rate_percent=rate,
            tier=upline_tier,
        )

    def tier_progress(
        self,
        current_tier: str,
        monthly_sales: int,
        team_members: int,
    ) -> TierProgress:
        """Progress toward the next tier. The top tier is always 100%."""
        nxt = self.next_tier(current_tier)
        if nxt is None:
            return TierProgress(
                current_tier=current_tier,
                next_tier=None,
                sales_progress=HUNDRED,
                team_progress=HUNDRED,
                overall_progress=HUNDRED,
            )
        requirements = self.get(nxt).requirements
        sales = _progress(monthly_sales, requirements.monthly_sales)
        team = _progress(team_members, requirements.team_members)
        overall = ((sales + team) / 2).quantize(
            Decimal("0.1"), rounding=ROUND_HALF_UP,
        )
        return TierProgress(
            current_tier=current_tier,
            next_tier=nxt,
            sales_progress=sales,
            team_progress=team,
            overall_progress=overall,
        )

    def validate_requirements(
        self,
        target_tier: str,
        monthly_sales: int,
        team_members: int,
    ) -> Tuple[bool, List[str]]:
        """Check whether performance meets a tier's requirements.

        Returns:
            (eligible, missing_requirements)
        """
        requirements = self.get(target_tier).requirements
        missing: List[str] = []
        if monthly_sales < requirements.monthly_sales:
            missing.append(
                f"Need {requirements.monthly_sales} monthly sales "
                f"(current: {monthly_sales})"
            )
        if team_members < requirements.team_members:
            missing.append(
                f"Need {requirements.team_members} team members "
                f"(current: {team_members})"
            )
        return not missing, missing

    def check_promotion(self, current_tier: Optional[str], target_tier: str) -> None:
        """Raise ValueError when a tier change would be a demotion."""
        target_index = self.tier_index(target_tier)
        if current_tier is None:
            return
        if target_index < self.tier_index(current_tier):
            raise ValueError(
                f"Cannot demote agent from {current_tier} to {target_tier}. "
                f"Use the separate demotion process."
            )


def _progress(actual: int, required: int) -> Decimal:
    if required <= 0:
        return HUNDRED
    ratio = Decimal(actual) * HUNDRED / Decimal(required)
    return min(HUNDRED, ratio).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def _plain(value: Decimal) -> str:
    """Render 80 or 82.5 without trailing zeros or exponent."""
    return format(value.normalize(), "f")
