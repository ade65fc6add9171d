"""Agent tier ladder — commission splits, leadership bonus rates, progression."""

from steelix.tiers.registry import TierRegistry

__all__ = ["TierRegistry"]
