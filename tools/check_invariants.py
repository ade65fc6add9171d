#!/usr/bin/env python3
"""Steelix invariant checks against the commission policy artifacts."""

import decimal
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
PARAMS_PATH = ROOT / "config" / "commission_params.json"
TIERS_PATH = ROOT / "config" / "agent_tiers.json"

ROUNDING_MODES = {
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_FLOOR,
    decimal.ROUND_CEILING,
}


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def as_decimal(value, label: str, errors: list[str]):
    """Parse a config decimal. Floats are rejected: decimals live in strings."""
    if isinstance(value, float):
        errors.append(f"{label} must be a string decimal, got float {value}")
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        errors.append(f"{label} is not a number: {value!r}")
        return None


def check_percent(value, label: str, errors: list[str]):
    parsed = as_decimal(value, label, errors)
    if parsed is not None and not (Decimal("0") <= parsed <= Decimal("100")):
        errors.append(f"{label} must be in [0, 100], got {parsed}")
    return parsed


def check_params(params: dict, errors: list[str]) -> None:
    # --- Money invariants ---
    money = params["money"]
    scale = as_decimal(money["scale"], "money.scale", errors)
    if scale is not None and scale <= 0:
        errors.append("money.scale must be > 0")
    if money["rounding"] not in ROUNDING_MODES:
        errors.append(f"money.rounding is not a decimal rounding mode: {money['rounding']}")
    if money["max_digits"] < 15:
        errors.append("money.max_digits must be >= 15 to hold real property prices")

    # --- Co-broking invariants ---
    co_broking = params["co_broking"]
    check_percent(
        co_broking["split_default_percent"], "co_broking.split_default_percent", errors,
    )
    if co_broking["split_policy"] not in ("default", "strict"):
        errors.append(
            f"co_broking.split_policy must be 'default' or 'strict', "
            f"got {co_broking['split_policy']!r}"
        )

    # --- Review invariants ---
    unusual = check_percent(
        params["review"]["unusual_rate_percent"], "review.unusual_rate_percent", errors,
    )
    if unusual is not None and unusual == 0:
        errors.append("review.unusual_rate_percent must be > 0")

    for category, kinds in params.get("suggested_rates", {}).items():
        for kind, rate in kinds.items():
            check_percent(rate, f"suggested_rates.{category}.{kind}", errors)


def check_tiers(config: dict, errors: list[str]) -> None:
    tiers = config.get("tiers", [])
    if not tiers:
        errors.append("agent_tiers.tiers must not be empty")
        return

    names = [t["tier"] for t in tiers]
    if len(set(names)) != len(names):
        errors.append(f"tier names must be unique: {names}")

    first = tiers[0]["requirements"]
    if first["monthly_sales"] != 0 or first["team_members"] != 0:
        errors.append(f"entry tier {names[0]} must have no requirements")

    # Higher tiers must never pay the agent less or require less
    previous = None
    for tier in tiers:
        label = f"tiers.{tier['tier']}"
        split = check_percent(tier["commission_split"], f"{label}.commission_split", errors)
        check_percent(
            tier.get("leadership_bonus_rate", "0"), f"{label}.leadership_bonus_rate", errors,
        )
        req = tier["requirements"]
        if previous is not None:
            prev_split, prev_req, prev_name = previous
            if split is not None and prev_split is not None and split < prev_split:
                errors.append(
                    f"{label}.commission_split must be >= {prev_name} ({split} < {prev_split})"
                )
            for key in ("monthly_sales", "team_members"):
                if req[key] < prev_req[key]:
                    errors.append(
                        f"{label}.requirements.{key} must be >= {prev_name}"
                    )
        previous = (split, req, tier["tier"])


def check(params_path: Path = PARAMS_PATH, tiers_path: Path = TIERS_PATH) -> int:
    errors: list[str] = []
    try:
        check_params(load_json(params_path), errors)
        check_tiers(load_json(tiers_path), errors)
    except KeyError as exc:
        errors.append(f"missing config key: {exc}")

    if errors:
        print("Invariant check failed:")
        for error in errors:
            print(f"  - {error}")
        return 1

    print("All commission invariants passed.")
    return 0


if __name__ == "__main__":
    sys.exit(check())
