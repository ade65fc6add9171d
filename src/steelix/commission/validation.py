"""Input validation and normalisation for the commission engine.

Hard errors are raised here, before any calculation stage runs:
- Amounts must be finite, non-negative numbers (zero is valid)
- Percentages must lie in [0, 100]
- The co-broker split is only read in co-broking mode; in direct mode
  it is ignored even when out of range
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Type

from steelix.commission.errors import (
    ArithmeticOverflow,
    CommissionError,
    InvalidAmount,
    InvalidPercent,
    InvalidRepresentationCombination,
    UnsupportedRateKind,
)
from steelix.commission.params import CommissionParams
from steelix.models.commission import (
    CommissionInput,
    RateKind,
    RepresentationMode,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class NormalizedInput:
    """A validated CommissionInput with every value in its final type."""
    property_price: Decimal
    rate_kind: RateKind
    rate_value: Decimal
    representation_mode: RepresentationMode
    co_broker_split_percent: Optional[Decimal]
    agent_tier: str
    company_commission_split_percent: Decimal
    upline_identity: Optional[str]
    upline_tier: Optional[str]
    leadership_bonus_rate_percent: Optional[Decimal]


def to_decimal(
    value: Any,
    field: str,
    max_digits: int,
    error_cls: Type[CommissionError] = InvalidAmount,
) -> Decimal:
    """Coerce a Decimal, int or numeric string to a finite Decimal.

    Floats are converted through their shortest repr so 0.1 becomes
    Decimal("0.1"), never the binary expansion. Booleans are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise error_cls(f"{field} must be a number, got {value!r}", field, value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise error_cls(
                f"{field} must be a number, got {value!r}", field, value,
            ) from None
    else:
        raise error_cls(
            f"{field} must be a number, got {type(value).__name__}", field, value,
        )

    if not result.is_finite():
        raise error_cls(f"{field} must be finite, got {value!r}", field, value)
    if len(result.as_tuple().digits) > max_digits:
        raise ArithmeticOverflow(
            f"{field} exceeds {max_digits} significant digits", field, value,
        )
    if result.is_zero():
        # Normalise -0 so it never leaks into outputs as "-0.00".
        result = abs(result)
    return result


def require_amount(value: Any, field: str, params: CommissionParams) -> Decimal:
    amount = to_decimal(value, field, params.max_digits, InvalidAmount)
    if amount < ZERO:
        raise InvalidAmount(f"{field} cannot be negative, got {amount}", field, value)
    return amount


def require_percent(value: Any, field: str, params: CommissionParams) -> Decimal:
    percent = to_decimal(value, field, params.max_digits, InvalidPercent)
    if not (ZERO <= percent <= HUNDRED):
        raise InvalidPercent(
            f"{field} must be between 0 and 100, got {percent}", field, value,
        )
    return percent


def parse_rate_kind(value: Any) -> RateKind:
    if isinstance(value, RateKind):
        return value
    try:
        return RateKind(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(k.value for k in RateKind)
        raise UnsupportedRateKind(
            f"Unsupported rate kind: {value!r}. Allowed: {allowed}",
            "rate_kind", value,
        ) from None


def parse_representation_mode(value: Any) -> RepresentationMode:
    if isinstance(value, RepresentationMode):
        return value
    try:
        return RepresentationMode(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in RepresentationMode)
        raise InvalidRepresentationCombination(
            f"Unknown representation mode: {value!r}. Allowed: {allowed}",
            "representation_mode", value,
        ) from None


def resolve_co_broker_split(
    raw: Any,
    params: CommissionParams,
) -> Decimal:
    """Return the co-broker split for co-broking mode.

    A missing split follows params.co_broker_split_policy uniformly.
    """
    if raw is None:
        if params.co_broker_split_policy == "strict":
            raise InvalidRepresentationCombination(
                "Co-broking requires co_broker_split_percent",
                "co_broker_split_percent", None,
            )
        return params.co_broker_split_default
    return require_percent(raw, "co_broker_split_percent", params)


def normalize(
    commission_input: CommissionInput,
    params: CommissionParams,
) -> NormalizedInput:
    """Validate every field and return the normalised input.

    Raises:
        CommissionError: the first violation found, in field order.
    """
    rate_kind = parse_rate_kind(commission_input.rate_kind)
    mode = parse_representation_mode(commission_input.representation_mode)

    property_price = require_amount(
        commission_input.property_price, "property_price", params,
    )
    rate_value = require_amount(commission_input.rate_value, "rate_value", params)
    if rate_kind is RateKind.PERCENTAGE and rate_value > HUNDRED:
        raise InvalidPercent(
            f"rate_value must be between 0 and 100 for a percentage rate, "
            f"got {rate_value}",
            "rate_value", commission_input.rate_value,
        )

    if mode is RepresentationMode.CO_BROKING:
        co_broker_split = resolve_co_broker_split(
            commission_input.co_broker_split_percent, params,
        )
    else:
        co_broker_split = None

    company_split = require_percent(
        commission_input.company_commission_split_percent,
        "company_commission_split_percent",
        params,
    )

    upline = commission_input.upline
    if upline is not None:
        bonus_rate = require_percent(
            upline.leadership_bonus_rate_percent,
            "leadership_bonus_rate_percent",
            params,
        )
        upline_identity = upline.identity
        upline_tier = upline.tier
    else:
        bonus_rate = None
        upline_identity = None
        upline_tier = None

    return NormalizedInput(
        property_price=property_price,
        rate_kind=rate_kind,
        rate_value=rate_value,
        representation_mode=mode,
        co_broker_split_percent=co_broker_split,
        agent_tier=commission_input.agent_tier or "",
        company_commission_split_percent=company_split,
        upline_identity=upline_identity,
        upline_tier=upline_tier,
        leadership_bonus_rate_percent=bonus_rate,
    )
