"""Tests for the tier registry — proves split resolution and progression rules."""

from decimal import Decimal
from pathlib import Path

import pytest

from steelix.models.tiers import TierConfig, TierRequirements
from steelix.policy.resolver import PolicyResolver
from steelix.tiers.registry import TierRegistry


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def registry() -> TierRegistry:
    return PolicyResolver.from_config_dir(CONFIG_DIR).tier_registry()


def _make_tier(name: str, split: str = "70", bonus: str = "0") -> TierConfig:
    return TierConfig(
        tier=name,
        commission_split=Decimal(split),
        leadership_bonus_rate=Decimal(bonus),
        requirements=TierRequirements(monthly_sales=0, team_members=0),
        display_name=name.title(),
    )


class TestConstruction:
    def test_empty_ladder_rejected(self) -> None:
        with pytest.raises(ValueError):
            TierRegistry([])

    def test_duplicate_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            TierRegistry([_make_tier("a"), _make_tier("a")])

    def test_contains(self, registry: TierRegistry) -> None:
        assert "advisor" in registry
        assert "director" not in registry


class TestLookup:
    def test_unknown_tier(self, registry: TierRegistry) -> None:
        with pytest.raises(ValueError, match="Unknown agent tier"):
            registry.get("director")

    def test_next_and_previous(self, registry: TierRegistry) -> None:
        assert registry.next_tier("advisor") == "sales_leader"
        assert registry.next_tier("supreme_leader") is None
        assert registry.previous_tier("advisor") is None
        assert registry.previous_tier("team_leader") == "sales_leader"

    def test_has_leadership_bonus(self, registry: TierRegistry) -> None:
        assert not registry.has_leadership_bonus("advisor")
        assert registry.has_leadership_bonus("sales_leader")

    def test_commission_benefit(self, registry: TierRegistry) -> None:
        assert registry.commission_benefit("advisor") == "70% commission split"
        assert (
            registry.commission_benefit("sales_leader")
            == "80% commission + 7% leadership bonus"
        )

    def test_commission_benefit_fractional(self) -> None:
        registry = TierRegistry([_make_tier("a", split="82.50", bonus="2.5")])
        assert registry.commission_benefit("a") == "82.5% commission + 2.5% leadership bonus"


class TestResolveUpline:
    def test_bonus_paying_upline(self, registry: TierRegistry) -> None:
        upline = registry.resolve_upline("agent_7", "team_leader")
        assert upline is not None
        assert upline.identity == "agent_7"
        assert upline.leadership_bonus_rate_percent == Decimal("5")
        assert upline.tier == "team_leader"

    def test_advisor_upline_pays_nothing(self, registry: TierRegistry) -> None:
        assert registry.resolve_upline("agent_7", "advisor") is None

    def test_missing_identity_or_tier(self, registry: TierRegistry) -> None:
        assert registry.resolve_upline(None, "sales_leader") is None
        assert registry.resolve_upline("agent_7", None) is None

    def test_unknown_upline_tier(self, registry: TierRegistry) -> None:
        with pytest.raises(ValueError):
            registry.resolve_upline("agent_7", "director")


class TestProgress:
    def test_partial_progress(self, registry: TierRegistry) -> None:
        progress = registry.tier_progress("advisor", 1, 0)
        assert progress.next_tier == "sales_leader"
        assert progress.sales_progress == Decimal("50.0")
        assert progress.team_progress == Decimal("100")
        assert progress.overall_progress == Decimal("75.0")

    def test_progress_capped(self, registry: TierRegistry) -> None:
        progress = registry.tier_progress("sales_leader", 9, 7)
        assert progress.sales_progress == Decimal("100")
        assert progress.team_progress == Decimal("100")

    def test_thirds_round_half_up(self, registry: TierRegistry) -> None:
        progress = registry.tier_progress("sales_leader", 2, 1)
        assert progress.sales_progress == Decimal("66.7")
        assert progress.team_progress == Decimal("33.3")
        assert progress.overall_progress == Decimal("50.0")

    def test_top_tier_is_complete(self, registry: TierRegistry) -> None:
        progress = registry.tier_progress("supreme_leader", 0, 0)
        assert progress.next_tier is None
        assert progress.overall_progress == Decimal("100")


class TestRequirements:
    def test_eligible(self, registry: TierRegistry) -> None:
        eligible, missing = registry.validate_requirements("team_leader", 3, 3)
        assert eligible
        assert missing == []

    def test_missing_listed(self, registry: TierRegistry) -> None:
        eligible, missing = registry.validate_requirements("group_leader", 4, 2)
        assert not eligible
        assert missing == [
            "Need 5 monthly sales (current: 4)",
            "Need 5 team members (current: 2)",
        ]

    def test_promotion_allowed(self, registry: TierRegistry) -> None:
        registry.check_promotion("advisor", "team_leader")
        registry.check_promotion(None, "advisor")

    def test_demotion_rejected(self, registry: TierRegistry) -> None:
        with pytest.raises(ValueError, match="Cannot demote"):
            registry.check_promotion("group_leader", "sales_leader")
