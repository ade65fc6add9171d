"""Steelix service — facade over the commission engine and tier ladder.

The service is the seam between callers (the CRM's transaction router,
the CLI) and the pure engine. It:
- Resolves an agent's company split and upline bonus from tier config
- Runs the calculation and collects advisory review warnings
- Records every accepted or rejected calculation in the audit trail
- Converts engine errors into typed results with the message verbatim

All operations return a ServiceResult. Engine errors never escape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import uuid4

from steelix.audit import AuditKind, AuditTrail
from steelix.commission.engine import CommissionCalculator
from steelix.commission.errors import CommissionError
from steelix.commission.review import review_warnings, summarize
from steelix.models.commission import (
    CommissionBreakdown,
    CommissionInput,
    RateKind,
    RepresentationMode,
)
from steelix.policy.resolver import PolicyResolver

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class CommissionService:
    """Unified commission facade.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        service = CommissionService(resolver)

        result = service.calculate_for_agent(
            property_price=Decimal("500000"),
            rate_kind="percentage",
            rate_value=Decimal("5"),
            representation_mode="co_broking",
            agent_tier="advisor",
            upline_id="agent_7",
            upline_tier="sales_leader",
        )
        if result.success:
            breakdown = result.data["breakdown"]
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        audit_trail: Optional[AuditTrail] = None,
    ) -> None:
        self._params = resolver.commission_params()
        self._registry = resolver.tier_registry()
        self._calculator = CommissionCalculator(self._params)
        self._audit = audit_trail if audit_trail is not None else AuditTrail()

    @property
    def audit_trail(self) -> AuditTrail:
        return self._audit

    def calculate(
        self,
        commission_input: CommissionInput,
        actor_id: str = "system",
        transaction_id: Optional[str] = None,
    ) -> ServiceResult:
        """Calculate a breakdown from fully resolved inputs."""
        try:
            breakdown = self._calculator.compute(commission_input)
            warnings = review_warnings(commission_input, self._params)
        except CommissionError as exc:
            return self._reject(
                type(exc).__name__, exc.field, str(exc), actor_id, transaction_id,
            )

        payload = breakdown.to_dict()
        entry = self._audit.record(
            record_id=f"audit_{uuid4().hex[:12]}",
            kind=AuditKind.COMMISSION_COMPUTED,
            actor_id=actor_id,
            payload={"transaction_id": transaction_id, "breakdown": payload},
        )
        logger.debug(
            "Commission computed for transaction %s: total=%s agent=%s",
            transaction_id, breakdown.total_commission, breakdown.agent_earnings,
        )
        return ServiceResult(
            success=True,
            data={
                "breakdown": payload,
                "warnings": warnings,
                "summary": summarize(breakdown),
                "audit_record_id": entry.record_id,
            },
        )

    def calculate_for_agent(
        self,
        property_price: Any,
        rate_kind: RateKind | str,
        rate_value: Any,
        representation_mode: RepresentationMode | str,
        agent_tier: str,
        co_broker_split_percent: Any = None,
        upline_id: Optional[str] = None,
        upline_tier: Optional[str] = None,
        company_split_override: Any = None,
        actor_id: str = "system",
        transaction_id: Optional[str] = None,
    ) -> ServiceResult:
        """Calculate with the agent's split and upline bonus resolved from tiers.

        company_split_override replaces the tier's split for agents on a
        negotiated rate. upline_id and upline_tier must be given together.
        Tier failures are audited as rejections like engine errors.
        """
        try:
            tier_split = self._registry.commission_split(agent_tier)
        except ValueError as exc:
            return self._reject(
                "UnknownTier", "agent_tier", str(exc), actor_id, transaction_id,
            )

        if bool(upline_id) != bool(upline_tier):
            return self._reject(
                "IncompleteUpline",
                "upline_tier" if upline_id else "upline_id",
                "Upline requires both upline_id and upline_tier, "
                f"got upline_id={upline_id!r}, upline_tier={upline_tier!r}",
                actor_id,
                transaction_id,
            )
        try:
            upline = self._registry.resolve_upline(upline_id, upline_tier)
        except ValueError as exc:
            return self._reject(
                "UnknownTier", "upline_tier", str(exc), actor_id, transaction_id,
            )

        commission_input = CommissionInput(
            property_price=property_price,
            rate_kind=rate_kind,
            rate_value=rate_value,
            representation_mode=representation_mode,
            company_commission_split_percent=(
                company_split_override
                if company_split_override is not None
                else tier_split
            ),
            agent_tier=agent_tier,
            co_broker_split_percent=co_broker_split_percent,
            upline=upline,
        )
        return self.calculate(
            commission_input, actor_id=actor_id, transaction_id=transaction_id,
        )

    def _reject(
        self,
        error_type: str,
        field_name: str,
        message: str,
        actor_id: str,
        transaction_id: Optional[str],
    ) -> ServiceResult:
        """Audit a rejected calculation and build its failed result."""
        logger.warning(
            "Commission rejected (%s) for transaction %s: %s",
            error_type, transaction_id, message,
        )
        self._audit.record(
            record_id=f"audit_{uuid4().hex[:12]}",
            kind=AuditKind.COMMISSION_REJECTED,
            actor_id=actor_id,
            payload={
                "transaction_id": transaction_id,
                "error_type": error_type,
                "field": field_name,
                "message": message,
            },
        )
        return ServiceResult(
            success=False,
            errors=[message],
            data={"error_type": error_type, "field": field_name},
        )

    def leadership_bonus_payment(
        self,
        breakdown: CommissionBreakdown,
        transaction_id: str,
        downline_agent_id: str,
        actor_id: str = "system",
    ) -> ServiceResult:
        """Build the pending payment record for a breakdown's leadership bonus."""
        bonus = breakdown.leadership_bonus
        if bonus is None:
            return ServiceResult(
                success=False,
                errors=["Breakdown carries no leadership bonus"],
            )
        if bonus.upline_identity == downline_agent_id:
            return ServiceResult(
                success=False,
                errors=["Agent cannot be their own upline"],
            )

        payment = {
            "payment_id": f"lbp_{uuid4().hex[:12]}",
            "transaction_id": transaction_id,
            "downline_agent_id": downline_agent_id,
            "upline_agent_id": bonus.upline_identity,
            "upline_tier": bonus.upline_tier,
            "original_commission_amount": str(breakdown.total_commission),
            "company_share_amount": str(breakdown.company_share_gross),
            "leadership_bonus_rate": str(bonus.bonus_rate_percent),
            "leadership_bonus_amount": str(bonus.bonus_amount),
            "status": "pending",
        }
        self._audit.record(
            record_id=f"audit_{uuid4().hex[:12]}",
            kind=AuditKind.LEADERSHIP_BONUS_RECORDED,
            actor_id=actor_id,
            payload=payment,
        )
        logger.info(
            "Leadership bonus %s recorded for upline %s on transaction %s",
            bonus.bonus_amount, bonus.upline_identity, transaction_id,
        )
        return ServiceResult(success=True, data=payment)

    def tier_overview(self) -> list[dict[str, Any]]:
        """Tier ladder as JSON-safe rows, lowest tier first."""
        return [
            {
                "tier": t.tier,
                "display_name": t.display_name,
                "description": t.description,
                "commission_split": str(t.commission_split),
                "leadership_bonus_rate": str(t.leadership_bonus_rate),
                "benefit": self._registry.commission_benefit(t.tier),
                "requirements": {
                    "monthly_sales": t.requirements.monthly_sales,
                    "team_members": t.requirements.team_members,
                },
            }
            for t in self._registry.all()
        ]

    def tier_progress(
        self,
        current_tier: str,
        monthly_sales: int,
        team_members: int,
    ) -> ServiceResult:
        try:
            progress = self._registry.tier_progress(
                current_tier, monthly_sales, team_members,
            )
        except ValueError as exc:
            return ServiceResult(success=False, errors=[str(exc)])

        data: dict[str, Any] = {
            "current_tier": progress.current_tier,
            "next_tier": progress.next_tier,
            "sales_progress": str(progress.sales_progress),
            "team_progress": str(progress.team_progress),
            "overall_progress": str(progress.overall_progress),
        }
        if progress.next_tier is not None:
            eligible, missing = self._registry.validate_requirements(
                progress.next_tier, monthly_sales, team_members,
            )
            data["eligible_for_next"] = eligible
            data["missing_requirements"] = missing
        return ServiceResult(success=True, data=data)
