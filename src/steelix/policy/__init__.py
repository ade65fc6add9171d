"""Policy layer — commission parameters and tier ladder from config."""

from steelix.policy.resolver import PolicyResolver, default_config_dir

__all__ = ["PolicyResolver", "default_config_dir"]
