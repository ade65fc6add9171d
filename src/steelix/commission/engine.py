"""Commission engine — the four-stage commission distribution cascade.

The calculation is fully deterministic:

    Stage 1  total = price × rate / 100            (percentage)
             total = rate                          (fixed)
    Stage 2  co_broker = total × split / 100       (co-broking only)
             agent_share = total − co_broker
    Stage 3  agent_earnings = agent_share × company_split / 100
             company_gross = agent_share − agent_earnings
    Stage 4  bonus = company_gross × bonus_rate / 100   (upline, rate > 0)
             company_net = company_gross − bonus

Every stage rounds the share it multiplies out once, to the money scale,
and derives the remaining share by subtraction. Sums of rounded values
therefore reconcile exactly:

- total_commission == agent_commission_share + co_broker_share
- agent_commission_share == company_share_gross + agent_earnings
- company_share_gross == bonus_amount + company_share_net

The engine is a pure function of its input. It holds no mutable state,
reads no clock, and never touches the thread's decimal context.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from typing import Callable, Optional, Tuple

from steelix.commission.errors import ArithmeticOverflow
from steelix.commission.params import CommissionParams
from steelix.commission.validation import HUNDRED, ZERO, NormalizedInput, normalize
from steelix.models.commission import (
    CommissionBreakdown,
    CommissionInput,
    LeadershipBonus,
    RateKind,
    RepresentationMode,
)


class CommissionCalculator:
    """Computes the full commission breakdown for one transaction.

    Usage:
        calculator = CommissionCalculator()
        breakdown = calculator.compute(CommissionInput(
            property_price=Decimal("500000"),
            rate_kind=RateKind.PERCENTAGE,
            rate_value=Decimal("5"),
            representation_mode=RepresentationMode.DIRECT,
            company_commission_split_percent=Decimal("70"),
        ))
    """

    def __init__(self, params: Optional[CommissionParams] = None) -> None:
        self._params = params or CommissionParams()

    @property
    def params(self) -> CommissionParams:
        return self._params

    def compute(self, commission_input: CommissionInput) -> CommissionBreakdown:
        """Compute the full commission breakdown.

        Args:
            commission_input: Raw transaction inputs.

        Returns:
            A frozen CommissionBreakdown.

        Raises:
            CommissionError: input rejected. Raised before any stage runs.
        """
        normalized = normalize(commission_input, self._params)
        ctx = self._context()

        total = self._total_commission(normalized, ctx)
        agent_share, co_broker_share = self._representation_split(
            normalized, total, ctx,
        )
        agent_earnings, company_gross = self._split_off(
            agent_share, normalized.company_commission_split_percent, ctx,
        )
        leadership_bonus, company_net = self._leadership_bonus(
            normalized, company_gross, ctx,
        )

        return CommissionBreakdown(
            property_price=normalized.property_price,
            rate_kind=normalized.rate_kind,
            rate_value=normalized.rate_value,
            total_commission=total,
            representation_mode=normalized.representation_mode,
            co_broker_split_percent=normalized.co_broker_split_percent,
            agent_commission_share=agent_share,
            co_broker_share=co_broker_share,
            agent_tier=normalized.agent_tier,
            company_commission_split_percent=(
                normalized.company_commission_split_percent
            ),
            company_share_gross=company_gross,
            agent_earnings=agent_earnings,
            leadership_bonus=leadership_bonus,
            company_share_net=company_net,
            your_share_percent=self._ratio_percent(
                agent_earnings, total, self._params.percent_display_scale, ctx,
            ),
            effective_rate_percent=self._ratio_percent(
                total, normalized.property_price, self._params.money_scale, ctx,
            ),
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _total_commission(
        self, normalized: NormalizedInput, ctx: decimal.Context,
    ) -> Decimal:
        if normalized.rate_kind is RateKind.FIXED:
            return self._money(normalized.rate_value, ctx)
        return self._percent_of(normalized.property_price, normalized.rate_value)

    def _representation_split(
        self,
        normalized: NormalizedInput,
        total: Decimal,
        ctx: decimal.Context,
    ) -> Tuple[Decimal, Optional[Decimal]]:
        if normalized.representation_mode is RepresentationMode.DIRECT:
            return total, None
        co_broker_share, agent_share = self._split_off(
            total, normalized.co_broker_split_percent, ctx,
        )
        return agent_share, co_broker_share

    def _leadership_bonus(
        self,
        normalized: NormalizedInput,
        company_gross: Decimal,
        ctx: decimal.Context,
    ) -> Tuple[Optional[LeadershipBonus], Decimal]:
        rate = normalized.leadership_bonus_rate_percent
        if normalized.upline_identity is None or rate is None or rate <= ZERO:
            return None, company_gross
        bonus_amount, company_net = self._split_off(company_gross, rate, ctx)
        bonus = LeadershipBonus(
            upline_identity=normalized.upline_identity,
            bonus_rate_percent=rate,
            bonus_amount=bonus_amount,
            upline_tier=normalized.upline_tier,
        )
        return bonus, company_net

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _context(self) -> decimal.Context:
        return decimal.Context(
            prec=self._params.max_digits,
            rounding=self._params.rounding,
            traps=[decimal.InvalidOperation, decimal.Overflow, decimal.DivisionByZero],
        )

    def _wide_context(self) -> decimal.Context:
        return decimal.Context(
            prec=2 * self._params.max_digits + 3,
            rounding=self._params.rounding,
            traps=[decimal.InvalidOperation, decimal.Overflow, decimal.DivisionByZero],
        )

    def _split_off(
        self, amount: Decimal, percent: Decimal, ctx: decimal.Context,
    ) -> Tuple[Decimal, Decimal]:
        """Split amount into (percent share, remainder). Remainder by subtraction."""
        share = self._percent_of(amount, percent)
        remainder = self._exact(lambda: ctx.subtract(amount, share), ctx)
        return share, remainder

    def _percent_of(self, amount: Decimal, percent: Decimal) -> Decimal:
        """amount × percent / 100, rounded once to the money scale.

        Both operands fit in max_digits, so the raw product fits exactly
        in a context twice as wide. Only the rounded result is held to
        max_digits.
        """
        wide = self._wide_context()
        product = self._exact(
            lambda: wide.divide(wide.multiply(amount, percent), HUNDRED), wide,
        )
        return self._money(product, wide)

    def _money(self, value: Decimal, ctx: decimal.Context) -> Decimal:
        return self._quantize(value, self._params.money_scale, ctx)

    def _quantize(
        self, value: Decimal, quantum: Decimal, ctx: decimal.Context,
    ) -> Decimal:
        try:
            result = value.quantize(
                quantum, rounding=self._params.rounding, context=ctx,
            )
        except (decimal.InvalidOperation, decimal.Overflow):
            result = None
        if result is None or len(result.as_tuple().digits) > self._params.max_digits:
            raise ArithmeticOverflow(
                f"Value {value} exceeds {self._params.max_digits} significant digits",
            )
        return result

    def _exact(
        self, operation: Callable[[], Decimal], ctx: decimal.Context,
    ) -> Decimal:
        """Run a Decimal operation that must not lose precision."""
        ctx.clear_flags()
        try:
            result = operation()
        except (decimal.InvalidOperation, decimal.Overflow):
            raise ArithmeticOverflow(
                f"Commission arithmetic exceeds {self._params.max_digits} "
                f"significant digits",
            ) from None
        if ctx.flags[decimal.Inexact]:
            raise ArithmeticOverflow(
                f"Commission arithmetic exceeds {self._params.max_digits} "
                f"significant digits",
            )
        return result

    def _ratio_percent(
        self,
        part: Decimal,
        whole: Decimal,
        quantum: Decimal,
        ctx: decimal.Context,
    ) -> Decimal:
        """part / whole × 100, rounded for display. Zero when whole is zero."""
        if whole == ZERO:
            return self._quantize(ZERO, quantum, ctx)
        try:
            ratio = ctx.divide(ctx.multiply(part, HUNDRED), whole)
        except (decimal.InvalidOperation, decimal.Overflow):
            raise ArithmeticOverflow(
                f"Ratio {part}/{whole} exceeds {self._params.max_digits} "
                f"significant digits",
            ) from None
        return self._quantize(ratio, quantum, ctx)


def compute(
    commission_input: CommissionInput,
    params: Optional[CommissionParams] = None,
) -> CommissionBreakdown:
    """Compute a breakdown with a throwaway calculator."""
    return CommissionCalculator(params).compute(commission_input)
