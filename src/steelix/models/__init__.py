"""Steelix data models."""

from steelix.models.commission import (
    CommissionBreakdown,
    CommissionInput,
    LeadershipBonus,
    RateKind,
    RepresentationMode,
    UplineInfo,
)
from steelix.models.tiers import TierConfig, TierProgress, TierRequirements

__all__ = [
    "CommissionBreakdown",
    "CommissionInput",
    "LeadershipBonus",
    "RateKind",
    "RepresentationMode",
    "TierConfig",
    "TierProgress",
    "TierRequirements",
    "UplineInfo",
]
