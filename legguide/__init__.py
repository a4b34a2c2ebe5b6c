"""Kinematics, balance control, state estimation and wire formats for quadruped robots."""

__version__ = "0.1.0"

__all__ = [
    "quadprog",
    "filters",
    "leg",
    "robot",
    "balance",
    "estimator",
    "keyboard",
    "wireless",
    "sdk_const",
    "sdk_v32",
]