"""Tests for the commission service — proves the facade resolves tiers, audits and reports."""

from decimal import Decimal
from pathlib import Path

import pytest

from steelix.audit import AuditKind, AuditTrail
from steelix.commission.engine import compute
from steelix.models.commission import CommissionInput, UplineInfo
from steelix.policy.resolver import PolicyResolver
from steelix.service import CommissionService


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def service() -> CommissionService:
    return CommissionService(PolicyResolver.from_config_dir(CONFIG_DIR))


def _make_input(**overrides) -> CommissionInput:
    fields = {
        "property_price": Decimal("500000"),
        "rate_kind": "percentage",
        "rate_value": Decimal("5"),
        "representation_mode": "direct",
        "company_commission_split_percent": Decimal("70"),
    }
    fields.update(overrides)
    return CommissionInput(**fields)


class TestCalculate:
    def test_success_payload(self, service: CommissionService) -> None:
        result = service.calculate(_make_input(), transaction_id="txn_1")
        assert result.success
        assert result.errors == []
        breakdown = result.data["breakdown"]
        assert breakdown["total_commission"] == "25000.00"
        assert breakdown["agent_earnings"] == "17500.00"
        assert breakdown["company_share_net"] == "7500.00"
        assert result.data["warnings"] == []
        assert result.data["summary"].startswith("Commission of RM 25,000")
        assert result.data["audit_record_id"].startswith("audit_")

    def test_warnings_ride_along(self, service: CommissionService) -> None:
        result = service.calculate(_make_input(rate_value="25"))
        assert result.success
        assert result.data["warnings"] == [
            "Commission percentage seems unusually high (>20%)",
        ]

    def test_rejection_is_typed(self, service: CommissionService) -> None:
        result = service.calculate(
            _make_input(
                representation_mode="co_broking", co_broker_split_percent="150",
            ),
        )
        assert not result.success
        assert result.data["error_type"] == "InvalidPercent"
        assert result.data["field"] == "co_broker_split_percent"
        assert "co_broker_split_percent" in result.errors[0]

    def test_negative_price_is_typed(self, service: CommissionService) -> None:
        result = service.calculate(_make_input(property_price="-1"))
        assert not result.success
        assert result.data["error_type"] == "InvalidAmount"


class TestCalculateForAgent:
    def test_advisor_direct(self, service: CommissionService) -> None:
        result = service.calculate_for_agent(
            property_price="500000",
            rate_kind="percentage",
            rate_value="5",
            representation_mode="direct",
            agent_tier="advisor",
        )
        assert result.success
        breakdown = result.data["breakdown"]
        assert breakdown["company_commission_split_percent"] == "70"
        assert breakdown["agent_earnings"] == "17500.00"
        assert breakdown["agent_tier"] == "advisor"
        assert breakdown["leadership_bonus"] is None

    def test_upline_bonus_from_tier(self, service: CommissionService) -> None:
        result = service.calculate_for_agent(
            property_price="500000",
            rate_kind="percentage",
            rate_value="5",
            representation_mode="co_broking",
            agent_tier="advisor",
            co_broker_split_percent="50",
            upline_id="agent_7",
            upline_tier="sales_leader",
        )
        assert result.success
        breakdown = result.data["breakdown"]
        assert breakdown["company_share_gross"] == "3750.00"
        assert breakdown["leadership_bonus"]["bonus_amount"] == "262.50"
        assert breakdown["leadership_bonus"]["upline_tier"] == "sales_leader"
        assert breakdown["company_share_net"] == "3487.50"

    def test_advisor_upline_pays_no_bonus(self, service: CommissionService) -> None:
        result = service.calculate_for_agent(
            property_price="500000",
            rate_kind="percentage",
            rate_value="5",
            representation_mode="direct",
            agent_tier="sales_leader",
            upline_id="agent_7",
            upline_tier="advisor",
        )
        assert result.success
        assert result.data["breakdown"]["leadership_bonus"] is None
        assert result.data["breakdown"]["agent_earnings"] == "20000.00"

    def test_split_override(self, service: CommissionService) -> None:
        result = service.calculate_for_agent(
            property_price="500000",
            rate_kind="percentage",
            rate_value="5",
            representation_mode="direct",
            agent_tier="advisor",
            company_split_override="75",
        )
        assert result.data["breakdown"]["agent_earnings"] == "18750.00"

    def test_unknown_tier(self, service: CommissionService) -> None:
        result = service.calculate_for_agent(
            property_price="500000",
            rate_kind="percentage",
            rate_value="5",
            representation_mode="direct",
            agent_tier="director",
        )
        assert not result.success
        assert result.data["error_type"] == "UnknownTier"
        assert "director" in result.errors[0]
        assert result.data["field"] == "agent_tier"
        rejected = service.audit_trail.records(AuditKind.COMMISSION_REJECTED)
        assert rejected[0].payload["error_type"] == "UnknownTier"

    def test_unknown_upline_tier_is_audited(self, service: CommissionService) -> None:
        result = service.calculate_for_agent(
            property_price="500000",
            rate_kind="percentage",
            rate_value="5",
            representation_mode="direct",
            agent_tier="advisor",
            upline_id="agent_7",
            upline_tier="director",
        )
        assert not result.success
        assert result.data == {"error_type": "UnknownTier", "field": "upline_tier"}
        assert service.audit_trail.count == 1

    @pytest.mark.parametrize(
        "upline_id,upline_tier", [("agent_7", None), (None, "sales_leader")],
    )
    def test_incomplete_upline_rejected(
        self, service: CommissionService, upline_id, upline_tier,
    ) -> None:
        result = service.calculate_for_agent(
            property_price="500000",
            rate_kind="percentage",
            rate_value="5",
            representation_mode="direct",
            agent_tier="advisor",
            upline_id=upline_id,
            upline_tier=upline_tier,
        )
        assert not result.success
        assert result.data["error_type"] == "IncompleteUpline"
        rejected = service.audit_trail.records(AuditKind.COMMISSION_REJECTED)
        assert len(rejected) == 1
        assert service.audit_trail.verify_chain()


class TestAuditTrail:
    def test_every_calculation_is_recorded(self, service: CommissionService) -> None:
        service.calculate(_make_input())
        service.calculate(_make_input(company_commission_split_percent="150"))
        trail = service.audit_trail
        assert trail.count == 2
        assert len(trail.records(AuditKind.COMMISSION_COMPUTED)) == 1
        rejected = trail.records(AuditKind.COMMISSION_REJECTED)
        assert len(rejected) == 1
        assert rejected[0].payload["error_type"] == "InvalidPercent"
        assert trail.verify_chain()

    def test_shared_trail(self) -> None:
        trail = AuditTrail()
        service = CommissionService(
            PolicyResolver.from_config_dir(CONFIG_DIR), audit_trail=trail,
        )
        result = service.calculate(_make_input(), actor_id="agent_1", transaction_id="t")
        assert trail.count == 1
        entry = trail.records()[0]
        assert entry.record_id == result.data["audit_record_id"]
        assert entry.actor_id == "agent_1"
        assert entry.payload["transaction_id"] == "t"

    def test_caller_edits_do_not_reach_trail(self, service: CommissionService) -> None:
        result = service.calculate(_make_input())
        result.data["breakdown"]["agent_earnings"] = "99999.00"
        entry = service.audit_trail.records()[0]
        assert entry.payload["breakdown"]["agent_earnings"] == "17500.00"
        assert service.audit_trail.verify_chain()

    def test_payment_edits_do_not_reach_trail(self, service: CommissionService) -> None:
        breakdown = compute(_make_input(upline=UplineInfo("agent_7", Decimal("10"))))
        result = service.leadership_bonus_payment(
            breakdown, transaction_id="t", downline_agent_id="agent_3",
        )
        result.data["status"] = "paid"
        entry = service.audit_trail.records(AuditKind.LEADERSHIP_BONUS_RECORDED)[0]
        assert entry.payload["status"] == "pending"
        assert service.audit_trail.verify_chain()


class TestLeadershipBonusPayment:
    def _breakdown(self):
        return compute(_make_input(
            representation_mode="co_broking",
            co_broker_split_percent="50",
            upline=UplineInfo("agent_7", Decimal("10"), tier="group_leader"),
        ))

    def test_pending_payment(self, service: CommissionService) -> None:
        result = service.leadership_bonus_payment(
            self._breakdown(), transaction_id="txn_9", downline_agent_id="agent_3",
        )
        assert result.success
        payment = result.data
        assert payment["payment_id"].startswith("lbp_")
        assert payment["upline_agent_id"] == "agent_7"
        assert payment["upline_tier"] == "group_leader"
        assert payment["original_commission_amount"] == "25000.00"
        assert payment["company_share_amount"] == "3750.00"
        assert payment["leadership_bonus_rate"] == "10"
        assert payment["leadership_bonus_amount"] == "375.00"
        assert payment["status"] == "pending"
        assert len(service.audit_trail.records(AuditKind.LEADERSHIP_BONUS_RECORDED)) == 1

    def test_no_bonus(self, service: CommissionService) -> None:
        result = service.leadership_bonus_payment(
            compute(_make_input()), transaction_id="t", downline_agent_id="agent_3",
        )
        assert not result.success

    def test_self_upline_rejected(self, service: CommissionService) -> None:
        result = service.leadership_bonus_payment(
            self._breakdown(), transaction_id="t", downline_agent_id="agent_7",
        )
        assert not result.success
        assert result.errors == ["Agent cannot be their own upline"]


class TestTiers:
    def test_overview(self, service: CommissionService) -> None:
        rows = service.tier_overview()
        assert [r["tier"] for r in rows][0] == "advisor"
        assert len(rows) == 5
        assert rows[1]["benefit"] == "80% commission + 7% leadership bonus"
        assert rows[1]["requirements"] == {"monthly_sales": 2, "team_members": 0}

    def test_progress(self, service: CommissionService) -> None:
        result = service.tier_progress("advisor", 1, 0)
        assert result.success
        assert result.data["next_tier"] == "sales_leader"
        assert result.data["overall_progress"] == "75.0"
        assert result.data["eligible_for_next"] is False
        assert result.data["missing_requirements"] == [
            "Need 2 monthly sales (current: 1)",
        ]

    def test_progress_top_tier(self, service: CommissionService) -> None:
        result = service.tier_progress("supreme_leader", 0, 0)
        assert result.success
        assert result.data["next_tier"] is None
        assert "eligible_for_next" not in result.data

    def test_progress_unknown_tier(self, service: CommissionService) -> None:
        assert not service.tier_progress("director", 0, 0).success
