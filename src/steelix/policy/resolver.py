"""Policy resolver — loads commission parameters and the tier ladder.

Configuration lives in a directory of JSON files:
    commission_params.json  rounding, co-broking default, review thresholds
    agent_tiers.json        tier ladder with splits and bonus rates

Every numeric value is read as a string and parsed to Decimal, so no
policy value ever passes through a float. Malformed config fails closed
with a ValueError naming the file and key.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from steelix.commission.params import CommissionParams
from steelix.models.tiers import TierConfig, TierRequirements
from steelix.tiers.registry import TierRegistry

PARAMS_FILE = "commission_params.json"
TIERS_FILE = "agent_tiers.json"
CONFIG_DIR_ENV = "STEELIX_CONFIG_DIR"

REPO_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"


def default_config_dir() -> Path:
    """Config directory from STEELIX_CONFIG_DIR (.env honoured), else repo config/."""
    load_dotenv()
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return REPO_CONFIG_DIR


class PolicyResolver:
    """Resolves commission policy from parsed config.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        params = resolver.commission_params()
        registry = resolver.tier_registry()
    """

    def __init__(
        self,
        params_config: Dict[str, Any],
        tiers_config: Dict[str, Any],
        source: str = "<memory>",
    ) -> None:
        self._source = source
        self._params = self._parse_params(params_config)
        self._registry = self._parse_tiers(tiers_config)

    @classmethod
    def from_config_dir(cls, config_dir: Optional[Path] = None) -> PolicyResolver:
        config_dir = Path(config_dir) if config_dir else default_config_dir()
        return cls(
            _load_json(config_dir / PARAMS_FILE),
            _load_json(config_dir / TIERS_FILE),
            source=str(config_dir),
        )

    @property
    def source(self) -> str:
        return self._source

    def commission_params(self) -> CommissionParams:
        return self._params

    def tier_registry(self) -> TierRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _parse_params(self, config: Dict[str, Any]) -> CommissionParams:
        money = config.get("money", {})
        co_broking = config.get("co_broking", {})
        review = config.get("review", {})
        defaults = CommissionParams()

        suggested = {
            category: {
                kind: self._decimal(
                    rate, f"{PARAMS_FILE}:suggested_rates.{category}.{kind}",
                )
                for kind, rate in kinds.items()
            }
            for category, kinds in config.get("suggested_rates", {}).items()
        } or defaults.suggested_rates

        try:
            return CommissionParams(
                money_scale=self._decimal(
                    money.get("scale", defaults.money_scale),
                    f"{PARAMS_FILE}:money.scale",
                ),
                rounding=money.get("rounding", defaults.rounding),
                percent_display_scale=self._decimal(
                    money.get("percent_display_scale", defaults.percent_display_scale),
                    f"{PARAMS_FILE}:money.percent_display_scale",
                ),
                max_digits=int(money.get("max_digits", defaults.max_digits)),
                co_broker_split_default=self._decimal(
                    co_broking.get(
                        "split_default_percent", defaults.co_broker_split_default,
                    ),
                    f"{PARAMS_FILE}:co_broking.split_default_percent",
                ),
                co_broker_split_policy=co_broking.get(
                    "split_policy", defaults.co_broker_split_policy,
                ),
                unusual_rate_percent=self._decimal(
                    review.get("unusual_rate_percent", defaults.unusual_rate_percent),
                    f"{PARAMS_FILE}:review.unusual_rate_percent",
                ),
                suggested_rates=suggested,
            )
        except ValueError as exc:
            raise ValueError(f"{self._source}/{PARAMS_FILE}: {exc}") from exc

    def _parse_tiers(self, config: Dict[str, Any]) -> TierRegistry:
        entries = config.get("tiers")
        if not entries:
            raise ValueError(f"{self._source}/{TIERS_FILE}: missing 'tiers'")

        tiers = []
        for i, entry in enumerate(entries):
            key = f"{TIERS_FILE}:tiers[{i}]"
            try:
                name = entry["tier"]
                requirements = entry.get("requirements", {})
                tiers.append(TierConfig(
                    tier=name,
                    commission_split=self._percent(
                        entry["commission_split"], f"{key}.commission_split",
                    ),
                    leadership_bonus_rate=self._percent(
                        entry.get("leadership_bonus_rate", "0"),
                        f"{key}.leadership_bonus_rate",
                    ),
                    requirements=TierRequirements(
                        monthly_sales=int(requirements.get("monthly_sales", 0)),
                        team_members=int(requirements.get("team_members", 0)),
                    ),
                    display_name=entry.get("display_name", name),
                    description=entry.get("description", ""),
                ))
            except KeyError as exc:
                raise ValueError(f"{self._source}/{key}: missing {exc}") from None

        try:
            return TierRegistry(tiers)
        except ValueError as exc:
            raise ValueError(f"{self._source}/{TIERS_FILE}: {exc}") from exc

    def _decimal(self, value: Any, key: str) -> Decimal:
        if isinstance(value, float):
            raise ValueError(
                f"{self._source}/{key}: write decimals as strings, got float {value}"
            )
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"{self._source}/{key}: not a number: {value!r}") from None
        if not result.is_finite():
            raise ValueError(f"{self._source}/{key}: not finite: {value!r}")
        return result

    def _percent(self, value: Any, key: str) -> Decimal:
        result = self._decimal(value, key)
        if not (Decimal("0") <= result <= Decimal("100")):
            raise ValueError(f"{self._source}/{key}: must be in [0, 100], got {result}")
        return result


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
