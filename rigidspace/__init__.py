"""Lie group configuration spaces, kinematic tree models and helpers for rigid-body robots."""

__version__ = "0.1.0"

__all__ = [
    "liegroups",
    "liegroup_space",
    "pool",
    "extra_config_space",
    "formatting",
    "model",
    "srdf",
    "loading",
]